"""Maps requested ``group:artifact`` keys to locally installed coordinates."""
from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Optional, Set

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from registry.local.index import RepositoryIndex
from registry.local.jars import ArtifactVerifier
from registry.local.models import Coordinate, MavenScope
from resolution.models import RequestKind
from versioning import has_placeholder, split_key

logger = logging.getLogger(__name__)

_PLUGIN_SUFFIXES = ("-plugin", "-gradle-plugin", "-gradle")


def plugin_artifact_candidates(plugin_id: str) -> List[str]:
    """Artifact ids a plugin id may be installed under, most likely first."""
    base = plugin_id.rsplit(".", 1)[-1]
    candidates = [
        f"{plugin_id}{Constants.PLUGIN_MARKER_SUFFIX}",
        plugin_id,
        f"{base}-plugin",
        f"gradle-{base}",
        f"gradle-{base}-plugin",
        f"{base}-gradle-plugin",
        f"gradle-plugin-{base}",
        f"{base}-gradle",
    ]
    parts = plugin_id.split(".")
    if len(parts) > 2:
        dashed = "-".join(parts[1:])
        candidates.append(dashed)
        candidates.extend(f"{dashed}{suffix}" for suffix in _PLUGIN_SUFFIXES)
    return list(dict.fromkeys(candidates))


class ArtifactResolver:
    """Resolve requested keys through the repository index.

    ``resolve`` records found and not-found keys for the run; ``filter``
    then narrows the found map to directly consumable artifacts. ``lookup``
    is a stateless single-key lookup for graph walks.
    """

    def __init__(self, index: RepositoryIndex, verifier: Optional[ArtifactVerifier] = None):
        self.index = index
        self.verifier = verifier
        self._system_artifacts: Dict[str, Coordinate] = {}
        self._not_found: Set[str] = set()
        self._handlers: Dict[RequestKind, Callable[[str], Optional[Coordinate]]] = {
            RequestKind.LIBRARY: self._lookup_library,
            RequestKind.PLUGIN_MARKER: self._lookup_plugin_marker,
        }

    def resolve(self, keys: Iterable[str]) -> Dict[str, Coordinate]:
        """Look every key up, replacing the previous results.

        Args:
            keys: Requested ``group:artifact`` keys.

        Returns:
            Map of found keys to coordinates; missing keys go to ``not_found``.
        """
        found: Dict[str, Coordinate] = {}
        missing: Set[str] = set()
        for key in sorted(set(keys)):
            coordinate = self.lookup(key)
            if coordinate is None:
                missing.add(key)
            else:
                found[key] = coordinate
        self._system_artifacts = found
        self._not_found = missing

        if missing:
            logger.debug("Not found locally: %s", ", ".join(sorted(missing)))
        if is_debug_enabled(logger):
            logger.debug(
                "Resolved requested keys",
                extra=extra_context(
                    event="function_exit", component="resolver", action="resolve",
                    outcome="success", count=len(found),
                ),
            )
        return dict(found)

    def filter(self) -> Dict[str, Coordinate]:
        """Drop test-scoped and BOM coordinates from the resolved map."""
        self._system_artifacts = {
            key: coord
            for key, coord in self._system_artifacts.items()
            if coord.scope != MavenScope.TEST and not coord.is_bom()
        }
        return dict(self._system_artifacts)

    @property
    def system_artifacts(self) -> Dict[str, Coordinate]:
        """Resolved map of the last ``resolve``, narrowed by ``filter``."""
        return dict(self._system_artifacts)

    @property
    def not_found(self) -> Set[str]:
        """Keys of the last ``resolve`` with no local coordinate."""
        return set(self._not_found)

    def lookup(self, key: str) -> Optional[Coordinate]:
        """Find one key without touching the run state."""
        if not key or has_placeholder(key):
            return None
        return self._handlers[RequestKind.of(key)](key)

    def _verified(self, coordinate: Optional[Coordinate]) -> Optional[Coordinate]:
        if coordinate is None:
            return None
        if self.verifier is not None and not self.verifier.verify(coordinate):
            if is_debug_enabled(logger):
                logger.debug(
                    "No installed jar for %s", coordinate.notation,
                    extra=extra_context(
                        event="decision", component="resolver", action="verify",
                        outcome="missing_jar",
                    ),
                )
            return None
        return coordinate

    def _lookup_library(self, key: str) -> Optional[Coordinate]:
        parts = split_key(key)
        if parts is None:
            return None
        return self._verified(self.index.find(*parts))

    def _lookup_plugin_marker(self, key: str) -> Optional[Coordinate]:
        parts = split_key(key)
        if parts is None:
            return None
        _group, artifact_id = parts
        return self.find_plugin(artifact_id[: -len(Constants.PLUGIN_MARKER_SUFFIX)])

    def find_plugin(self, plugin_id: str) -> Optional[Coordinate]:
        """Find the coordinate a plugin id is installed as.

        Tries the candidate artifact ids under the plugin id as group, then
        the first artifact of that group whose id mentions gradle or plugin.
        """
        for artifact_id in plugin_artifact_candidates(plugin_id):
            coordinate = self._verified(self.index.find(plugin_id, artifact_id))
            if coordinate is not None:
                return coordinate
        for coordinate in self.index.find_all_for_group(plugin_id):
            if "gradle" in coordinate.artifact_id or "plugin" in coordinate.artifact_id:
                verified = self._verified(coordinate)
                if verified is not None:
                    return verified
        return None
