"""In-memory index of the best locally installed coordinate per artifact."""
from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from common.logging_utils import Timer, extra_context, is_debug_enabled
from registry.local.discovery import DescriptorParseError, collect_descriptor_files
from registry.local.models import Coordinate
from registry.local.pom_parser import PomParser
from versioning import compare_versions, version_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexSnapshot:
    """Immutable lookup tables published by one build."""

    by_key: Mapping[str, Coordinate] = field(default_factory=lambda: MappingProxyType({}))
    by_group: Mapping[str, Tuple[Coordinate, ...]] = field(default_factory=lambda: MappingProxyType({}))
    failed: Tuple[str, ...] = ()


class RepositoryIndex:
    """Index of descriptor coordinates keyed by ``group:artifact``.

    ``build`` assembles a new snapshot privately and publishes it with a
    single reference swap. Readers never take the build lock.
    """

    def __init__(self, parser: Optional[PomParser] = None):
        self.parser = parser if parser is not None else PomParser()
        self._snapshot = IndexSnapshot()
        self._build_lock = threading.Lock()

    def build(self, source: Union[str, Iterable[str]]) -> IndexSnapshot:
        """Rebuild the index from a root directory, several roots, or descriptor files.

        Args:
            source: A directory, or an iterable of directories and/or descriptor files.

        Returns:
            The published snapshot.

        Raises:
            RepositoryUnavailableError: When no source is given, or directories were
                given and none is readable.
        """
        items = [source] if isinstance(source, str) else list(source)
        directories = [p for p in items if not os.path.isfile(p)]
        files = [p for p in items if os.path.isfile(p)]
        if directories or not files:
            files.extend(collect_descriptor_files(directories))

        with self._build_lock, Timer() as timer:
            by_key: Dict[str, Coordinate] = {}
            failed: List[str] = []
            for path in dict.fromkeys(files):
                try:
                    coordinate = self.parser.parse(path)
                except DescriptorParseError as e:
                    logger.warning("Skipping descriptor %s: %s", e.path, e.reason)
                    failed.append(path)
                    continue
                if coordinate is None or not coordinate.is_valid():
                    if is_debug_enabled(logger):
                        logger.debug(
                            "Discarding invalid coordinate from %s", path,
                            extra=extra_context(
                                event="decision", component="index", action="build",
                                outcome="invalid_coordinate",
                            ),
                        )
                    continue
                current = by_key.get(coordinate.key)
                if current is None or compare_versions(coordinate.version, current.version) > 0:
                    by_key[coordinate.key] = coordinate

            grouped: Dict[str, List[Coordinate]] = {}
            for coordinate in by_key.values():
                grouped.setdefault(coordinate.group_id, []).append(coordinate)
            by_group = {
                group: tuple(sorted(coords, key=lambda c: (c.artifact_id, version_key(c.version))))
                for group, coords in grouped.items()
            }

            snapshot = IndexSnapshot(
                by_key=MappingProxyType(by_key),
                by_group=MappingProxyType(by_group),
                failed=tuple(failed),
            )
            self._snapshot = snapshot

        logger.info(
            "Indexed %d artifacts from %d descriptors (%d unreadable) in %.1f ms",
            len(by_key), len(files), len(failed), timer.duration_ms(),
            extra=extra_context(
                event="function_exit", component="index", action="build",
                outcome="success", count=len(by_key), duration_ms=timer.duration_ms(),
            ),
        )
        return snapshot

    def find(self, group_id: str, artifact_id: str) -> Optional[Coordinate]:
        """Best coordinate for ``group_id:artifact_id``, or None."""
        return self._snapshot.by_key.get(f"{group_id}:{artifact_id}")

    def find_all_for_group(self, group_id: str) -> List[Coordinate]:
        """All coordinates of a group, ordered by artifact id then version."""
        return list(self._snapshot.by_group.get(group_id, ()))

    def snapshot(self) -> Mapping[str, Coordinate]:
        """Read-only ``key -> Coordinate`` view of the current snapshot."""
        return self._snapshot.by_key

    @property
    def failed_descriptors(self) -> Tuple[str, ...]:
        """Descriptors the last build could not parse."""
        return self._snapshot.failed

    def __len__(self) -> int:
        return len(self._snapshot.by_key)
