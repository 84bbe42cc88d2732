"""CLI exit codes and outputs."""
import json

import pytest

from constants import Constants, ExitCodes
from sysdeps import main


@pytest.fixture
def repo(tmp_path, write_pom, monkeypatch):
    for name in (Constants.ENV_CONFIG, Constants.ENV_POMS_DIR, Constants.ENV_JARS_DIR):
        monkeypatch.delenv(name, raising=False)
    Constants.DEFAULT_CONFIG_FILES = []
    write_pom("lib.pom", subdir="poms", group="x", artifact="lib", version="2.0")
    (tmp_path / "jars").mkdir()
    return ["--poms-dir", str(tmp_path / "poms"), "--jars-dir", str(tmp_path / "jars"), "--no-verify"]


def _exit_code(argv):
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


def test_success_writes_json(tmp_path, repo):
    out = tmp_path / "result.json"
    assert _exit_code(["-p", "x:lib:1.0", "-o", str(out)] + repo) == ExitCodes.SUCCESS.value
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["overrides"] == ["Override version: x:lib:1.0 -> 2.0"]
    assert data["buckets"] == {"implementation": ["x:lib:2.0"]}


def test_csv_format_from_extension(tmp_path, repo):
    out = tmp_path / "result.csv"
    assert _exit_code(["-p", "x:lib", "-o", str(out)] + repo) == ExitCodes.SUCCESS.value
    assert out.read_text(encoding="utf-8").startswith("Key,")


def test_warnings_only_fail_when_asked(repo):
    assert _exit_code(["-p", "missing:thing"] + repo) == ExitCodes.SUCCESS.value
    assert _exit_code(["-p", "missing:thing", "--error-on-warnings"] + repo) == ExitCodes.EXIT_WARNINGS.value


def test_list_file_input(tmp_path, repo):
    listing = tmp_path / "deps.txt"
    listing.write_text("# deps\nx:lib\n", encoding="utf-8")
    assert _exit_code(["-l", str(listing), "--error-on-warnings"] + repo) == ExitCodes.SUCCESS.value


def test_missing_repository_is_file_error(tmp_path, repo):
    argv = ["-p", "x:lib", "--poms-dir", str(tmp_path / "nope"), "--jars-dir", str(tmp_path / "jars")]
    assert _exit_code(argv) == ExitCodes.FILE_ERROR.value


def test_missing_manifest_is_file_error(tmp_path, repo):
    assert _exit_code(["-m", str(tmp_path / "missing.yml")] + repo) == ExitCodes.FILE_ERROR.value


def test_bad_config_is_config_error(tmp_path, repo):
    assert _exit_code(["-p", "x:lib", "-c", str(tmp_path / "missing.yml")] + repo) == ExitCodes.CONFIG_ERROR.value


def test_empty_input_succeeds(tmp_path, repo):
    listing = tmp_path / "empty.txt"
    listing.write_text("# nothing\n", encoding="utf-8")
    assert _exit_code(["-l", str(listing)] + repo) == ExitCodes.SUCCESS.value


def test_input_option_required():
    with pytest.raises(SystemExit):
        main(["--poms-dir", "/tmp"])
