"""Binary artifact lookup in the system jar directories."""
from __future__ import annotations

import logging
import os
from typing import Iterable, List, Optional, Set

from constants import Constants
from registry.local.discovery import RepositoryUnavailableError
from registry.local.models import Coordinate

logger = logging.getLogger(__name__)

JAR_SUFFIX = ".jar"


def _valid_directories(base_dirs: Iterable[str]) -> List[str]:
    valid, invalid = [], []
    for directory in base_dirs:
        if directory and os.path.isdir(directory) and os.access(directory, os.R_OK):
            valid.append(os.path.abspath(directory))
        else:
            invalid.append(directory)
    if invalid:
        logger.warning("Skipping invalid jar directories: %s", invalid)
    return valid


def _walk(root: str, depth: int):
    """Yield (directory, file names) for entries at most ``depth`` levels below ``root``."""
    base = root.rstrip(os.sep).count(os.sep)
    for current, dirs, files in os.walk(root):
        level = current.rstrip(os.sep).count(os.sep) - base
        dirs.sort()
        if level + 1 >= depth:
            dirs[:] = []
        yield current, level, dirs, files


def scan_repository_dirs(base_dirs: Iterable[str], depth: Optional[int] = None) -> List[str]:
    """List every jar directory and its sub-directories for a flat repository.

    Args:
        base_dirs: Configured jar roots.
        depth: Maximum sub-directory depth.

    Returns:
        Ordered, de-duplicated absolute directory paths, roots first.

    Raises:
        RepositoryUnavailableError: When roots were configured but none is readable.
    """
    base_dirs = list(base_dirs)
    limit = Constants.JAR_SCAN_DEPTH if depth is None else depth
    valid = _valid_directories(base_dirs)
    if not valid:
        if not base_dirs:
            raise RepositoryUnavailableError("No jar directory configured")
        raise RepositoryUnavailableError(f"No valid jar directories found in: {base_dirs}")

    result = list(dict.fromkeys(valid))
    seen = set(result)
    for root in valid:
        for current, level, dirs, _files in _walk(root, limit + 1):
            if level >= limit:
                continue
            for name in dirs:
                path = os.path.join(current, name)
                if path not in seen:
                    seen.add(path)
                    result.append(path)
    logger.info("Configured flat repository with %d directories", len(result))
    return result


def _looks_like_version(text: str) -> bool:
    return any(ch.isdigit() for ch in text)


class ArtifactVerifier:
    """Checks that a coordinate has an installed jar.

    A coordinate passes when ``<artifactId>.jar`` or
    ``<artifactId>-<version>.jar`` sits in a root, or when a jar named after
    the artifact with a version-like suffix exists within the scan depth.
    BOM coordinates always pass.
    """

    def __init__(self, jars_dirs: Iterable[str], depth: Optional[int] = None):
        self.jars_dirs = [os.path.abspath(d) for d in jars_dirs if d]
        self.depth = Constants.JAR_SCAN_DEPTH if depth is None else depth
        self._jar_names: Optional[Set[str]] = None

    def _names(self) -> Set[str]:
        if self._jar_names is None:
            names: Set[str] = set()
            for root in self.jars_dirs:
                if not os.path.isdir(root):
                    continue
                for _current, _level, _dirs, files in _walk(root, self.depth):
                    names.update(f[:-len(JAR_SUFFIX)] for f in files if f.endswith(JAR_SUFFIX))
            self._jar_names = names
        return self._jar_names

    def refresh(self) -> None:
        """Forget the scanned jar names so the next check rescans the roots."""
        self._jar_names = None

    def verify(self, coordinate: Optional[Coordinate]) -> bool:
        """Return True when ``coordinate`` is backed by an installed jar."""
        if coordinate is None or not coordinate.is_valid():
            return False
        if coordinate.is_bom():
            return True

        artifact_id = coordinate.artifact_id
        for root in self.jars_dirs:
            for name in (f"{artifact_id}{JAR_SUFFIX}", f"{artifact_id}-{coordinate.version}{JAR_SUFFIX}"):
                if os.path.isfile(os.path.join(root, name)):
                    return True

        prefix = f"{artifact_id}-"
        for base_name in self._names():
            if base_name == artifact_id:
                return True
            if base_name.startswith(prefix):
                suffix = base_name[len(prefix):]
                if suffix == coordinate.version or _looks_like_version(suffix):
                    return True
        return False
