"""Tests for jar directory scanning and artifact verification."""
import os

import pytest

from registry.local.discovery import RepositoryUnavailableError
from registry.local.jars import ArtifactVerifier, scan_repository_dirs
from registry.local.models import Coordinate


def _touch(path):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb"):
        pass


class TestScanRepositoryDirs:
    """Tests for scan_repository_dirs."""

    def test_roots_first_then_subdirectories(self, tmp_path):
        """Sub-directories within the depth follow the roots."""
        os.makedirs(tmp_path / "a" / "b" / "c" / "d")
        result = scan_repository_dirs([str(tmp_path)], depth=2)
        assert result == [str(tmp_path), str(tmp_path / "a"), str(tmp_path / "a" / "b")]

    def test_invalid_roots_skipped(self, tmp_path):
        """A missing root is ignored when another is valid."""
        result = scan_repository_dirs([str(tmp_path / "missing"), str(tmp_path)], depth=0)
        assert result == [str(tmp_path)]

    def test_no_valid_root_raises(self, tmp_path):
        """Only invalid roots is fatal."""
        with pytest.raises(RepositoryUnavailableError):
            scan_repository_dirs([str(tmp_path / "missing")])
        with pytest.raises(RepositoryUnavailableError):
            scan_repository_dirs([])


class TestArtifactVerifier:
    """Tests for ArtifactVerifier."""

    def test_plain_jar_in_root(self, tmp_path):
        """``<artifactId>.jar`` in a root verifies."""
        _touch(str(tmp_path / "guava.jar"))
        verifier = ArtifactVerifier([str(tmp_path)])
        assert verifier.verify(Coordinate("com.google", "guava", "31.0"))

    def test_versioned_jar_in_subdirectory(self, tmp_path):
        """A versioned jar a level down verifies."""
        _touch(str(tmp_path / "slf4j" / "slf4j-api-1.7.36.jar"))
        verifier = ArtifactVerifier([str(tmp_path)])
        assert verifier.verify(Coordinate("org.slf4j", "slf4j-api", "1.7.36"))

    def test_non_version_suffix_rejected(self, tmp_path):
        """``<artifactId>-extras.jar`` does not back the artifact."""
        _touch(str(tmp_path / "commons-extras.jar"))
        verifier = ArtifactVerifier([str(tmp_path)])
        assert not verifier.verify(Coordinate("g", "commons", "1.0"))

    def test_missing_jar(self, tmp_path):
        """No jar, no verification."""
        verifier = ArtifactVerifier([str(tmp_path)])
        assert not verifier.verify(Coordinate("g", "absent", "1.0"))

    def test_bom_always_passes(self, tmp_path):
        """BOM coordinates carry no jar."""
        verifier = ArtifactVerifier([str(tmp_path)])
        assert verifier.verify(Coordinate("g", "bom", "1", packaging="pom"))

    def test_invalid_coordinate_fails(self, tmp_path):
        """Incomplete coordinates never verify."""
        _touch(str(tmp_path / "lib.jar"))
        verifier = ArtifactVerifier([str(tmp_path)])
        assert not verifier.verify(Coordinate("g", "lib", None))
        assert not verifier.verify(None)

    def test_depth_limit(self, tmp_path):
        """Jars below the scan depth are not seen."""
        _touch(str(tmp_path / "1" / "2" / "3" / "deep-1.0.jar"))
        assert not ArtifactVerifier([str(tmp_path)], depth=3).verify(Coordinate("g", "deep", "1.0"))
        assert ArtifactVerifier([str(tmp_path)], depth=4).verify(Coordinate("g", "deep", "1.0"))

    def test_refresh_sees_new_jars(self, tmp_path):
        """Jars installed after a check are seen once refreshed."""
        verifier = ArtifactVerifier([str(tmp_path)])
        coordinate = Coordinate("g", "late", "1.0")
        assert not verifier.verify(coordinate)
        _touch(str(tmp_path / "late-1.0.jar"))
        verifier.refresh()
        assert verifier.verify(coordinate)
