"""Tests for manifest loading and runtime configuration."""
import json
import os

import pytest

from cli_config import ConfigError, apply_cli_overrides, apply_config, apply_env_overrides, load_yaml_config
from constants import Constants
from args import parse_args
from manifest import ManifestError, from_mapping, from_notations, load_list_file, load_manifest


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (Constants.ENV_CONFIG, Constants.ENV_POMS_DIR, Constants.ENV_JARS_DIR):
        monkeypatch.delenv(name, raising=False)


def test_declared_collects_modules():
    manifest = from_mapping({
        "modules": [
            {"id": "com.acme:app", "configurations": {
                "implementation": ["x:y:1.0", "x:both"],
                "testImplementation": ["junit:junit:4.13", "x:both:2"],
            }},
            {"id": "com.acme:web", "configurations": {"api": ["com.acme:app"]}},
        ],
        "plugins": ["com.acme.lint"],
    })
    declared = manifest.declared()
    assert declared.project_keys == {"com.acme:app", "com.acme:web"}
    assert declared.requested_versions["x:y"] == {"1.0"}
    assert declared.requested_versions["x:both"] == {"2"}
    assert declared.requested_versions["com.acme:app"] == set()
    assert declared.configurations["x:both"] == {"implementation", "testImplementation"}
    # Declared in a main bucket too, so not test context
    assert declared.test_context == {"junit:junit"}
    assert manifest.plugins == ["com.acme.lint"]


def test_malformed_notation_is_skipped(caplog):
    declared = from_mapping({"configurations": {"implementation": ["nocolon", "g:a"]}}).declared()
    assert declared.keys == {"g:a"}
    assert "nocolon" in caplog.text


def test_from_notations_skips_comments():
    manifest = from_notations(["# comment", "", "g:a:1", "  g:b  "], plugins=["p.q"])
    declared = manifest.declared()
    assert declared.keys == {"g:a", "g:b"}
    assert declared.configurations == {}
    assert manifest.plugins == ["p.q"]


@pytest.mark.parametrize("data", [[], {"modules": {}}, {"modules": ["x"]}, {"configurations": ["x"]}])
def test_bad_manifest_shapes(data):
    with pytest.raises(ManifestError):
        from_mapping(data)


def test_load_manifest_yaml_and_json(tmp_path):
    yml = tmp_path / "build.yml"
    yml.write_text("configurations:\n  implementation:\n    - g:a:1\n", encoding="utf-8")
    js = tmp_path / "build.json"
    js.write_text(json.dumps({"configurations": {"api": ["g:b"]}}), encoding="utf-8")
    assert load_manifest(str(yml)).declared().keys == {"g:a"}
    assert load_manifest(str(js)).declared().configurations == {"g:b": {"api"}}


def test_load_manifest_errors(tmp_path):
    bad = tmp_path / "bad.yml"
    bad.write_text("configurations: [unclosed\n", encoding="utf-8")
    with pytest.raises(ManifestError):
        load_manifest(str(bad))
    with pytest.raises(ManifestError):
        load_manifest(str(tmp_path / "missing.yml"))


def test_load_list_file(tmp_path):
    listing = tmp_path / "deps.txt"
    listing.write_text("# system deps\ng:a:1\n\ng:b\n", encoding="utf-8")
    assert load_list_file(str(listing)) == ["g:a:1", "g:b"]
    with pytest.raises(ManifestError):
        load_list_file(str(tmp_path / "missing.txt"))


class TestConfig:
    """Config file, environment and CLI precedence."""

    def test_apply_config_sections(self):
        """Every section lands on Constants."""
        apply_config({
            "repository": {"poms_dirs": ["/a", "/b"], "jars_dir": "/j", "scan_depth": "5", "verify_artifacts": False},
            "cache": {"ttl_sec": 10, "pom_entries": 7},
            "configurations": {"implementation": "compile", "test": "testCompile"},
            "plugins": {"core_namespace": "com.acme."},
        })
        assert Constants.POMS_DIRS == ["/a", "/b"]
        assert Constants.JARS_DIRS == ["/j"]
        assert Constants.JAR_SCAN_DEPTH == 5
        assert Constants.VERIFY_ARTIFACTS is False
        assert Constants.CACHE_TTL_SEC == 10
        assert Constants.CACHE_POM_MAX_ENTRIES == 7
        assert Constants.BUCKET_IMPLEMENTATION == "compile"
        assert Constants.BUCKET_TEST == "testCompile"
        assert Constants.CORE_PLUGIN_NAMESPACE == "com.acme."

    def test_bad_values_raise(self):
        """Wrong shapes are configuration errors."""
        with pytest.raises(ConfigError):
            apply_config({"repository": {"scan_depth": "deep"}})
        with pytest.raises(ConfigError):
            apply_config({"cache": ["x"]})

    def test_explicit_config_file(self, tmp_path):
        """An explicit path is loaded; a missing or malformed one raises."""
        cfg = tmp_path / "sysdeps.yml"
        cfg.write_text("repository:\n  poms_dir: /srv/poms\n", encoding="utf-8")
        assert load_yaml_config(str(cfg)) == {"repository": {"poms_dir": "/srv/poms"}}
        with pytest.raises(ConfigError):
            load_yaml_config(str(tmp_path / "missing.yml"))
        bad = tmp_path / "bad.yml"
        bad.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_yaml_config(str(bad))

    def test_env_config_path(self, tmp_path, monkeypatch):
        """SYSDEPS_CONFIG names the file when no path is given."""
        cfg = tmp_path / "env.yml"
        cfg.write_text("plugins:\n  core_namespace: org.acme.\n", encoding="utf-8")
        monkeypatch.setenv(Constants.ENV_CONFIG, str(cfg))
        assert load_yaml_config() == {"plugins": {"core_namespace": "org.acme."}}

    def test_malformed_default_file_is_ignored(self, tmp_path, caplog):
        """A broken default config only warns."""
        bad = tmp_path / "sysdeps.yml"
        bad.write_text("repository: [\n", encoding="utf-8")
        Constants.DEFAULT_CONFIG_FILES = [str(tmp_path / "absent.yml"), str(bad)]
        assert load_yaml_config() == {}
        assert "Ignoring unreadable config" in caplog.text

    def test_env_then_cli_overrides(self, monkeypatch):
        """CLI flags beat environment variables."""
        monkeypatch.setenv(Constants.ENV_POMS_DIR, os.pathsep.join(["/env/a", "/env/b"]))
        monkeypatch.setenv(Constants.ENV_JARS_DIR, "/env/jars")
        apply_env_overrides()
        assert Constants.POMS_DIRS == ["/env/a", "/env/b"]
        assert Constants.JARS_DIRS == ["/env/jars"]

        args = parse_args(["-p", "g:a", "--poms-dir", "/cli/poms", "--scan-depth", "1", "--no-verify"])
        apply_cli_overrides(args)
        assert Constants.POMS_DIRS == ["/cli/poms"]
        assert Constants.JARS_DIRS == ["/env/jars"]
        assert Constants.JAR_SCAN_DEPTH == 1
        assert Constants.VERIFY_ARTIFACTS is False
