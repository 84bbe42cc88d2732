"""Place resolved artifacts into configuration buckets."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Mapping, Optional, Set

from constants import Constants
from registry.local.models import Coordinate, MavenScope
from resolution.models import ConfigurationInfo, ConfigurationType
from resolution.scope import ScopeManager

logger = logging.getLogger(__name__)


class ArtifactConfigurator:
    """Assign each resolved artifact to the buckets it was declared in.

    Keys declared in several buckets go into each of them. Keys with no
    declared bucket fall back to the test bucket when test-classified, then
    to the type of a non-test declaring configuration, then to a bucket
    chosen by recorded scope.
    """

    def __init__(self, scope_manager: Optional[ScopeManager] = None):
        self.scope_manager = scope_manager if scope_manager is not None else ScopeManager()
        self._buckets: Dict[str, Set[str]] = {}

    def configure(  # pylint: disable=too-many-arguments, too-many-positional-arguments
        self,
        system_artifacts: Mapping[str, Coordinate],
        config_names: Optional[Mapping[str, Set[str]]] = None,
        configuration_infos: Optional[Mapping[str, Set[ConfigurationInfo]]] = None,
        test_context: Iterable[str] = (),
        project_keys: Iterable[str] = (),
    ) -> Dict[str, Set[str]]:
        """Compute the per-bucket artifact listing.

        Args:
            system_artifacts: Resolved coordinates by key.
            config_names: Buckets each key was originally declared in.
            configuration_infos: Typed configurations each key was declared in.
            test_context: Keys classified as test-only.
            project_keys: Keys of the build's own modules, never placed.

        Returns:
            Mapping of bucket name to ``group:artifact:version`` strings.
        """
        config_names = config_names or {}
        configuration_infos = configuration_infos or {}
        test_keys = set(test_context)
        own = set(project_keys)
        self._buckets = {}

        for key in sorted(system_artifacts):
            coordinate = system_artifacts[key]
            if coordinate.is_bom():
                continue
            if key in own:
                logger.debug("Detected project dependency, skipping: %s", coordinate.notation)
                continue
            notation = f"{key}:{coordinate.version}"
            names = config_names.get(key)
            if names:
                for name in sorted(names):
                    self._track(name, notation)
            else:
                self._track(self._fallback_bucket(key, test_keys, configuration_infos), notation)
        return self.buckets

    def _fallback_bucket(
        self,
        key: str,
        test_keys: Set[str],
        configuration_infos: Mapping[str, Set[ConfigurationInfo]],
    ) -> str:
        if key in test_keys:
            return Constants.BUCKET_TEST
        for info in sorted(configuration_infos.get(key, ()), key=lambda i: i.name):
            if not info.test and info.type != ConfigurationType.UNKNOWN:
                return info.type.bucket
        scope = self.scope_manager.get_scope(key)
        if scope == MavenScope.PROVIDED:
            return Constants.BUCKET_COMPILE_ONLY
        if scope == MavenScope.RUNTIME:
            return Constants.BUCKET_RUNTIME
        if scope == MavenScope.TEST:
            return Constants.BUCKET_TEST
        return Constants.BUCKET_IMPLEMENTATION

    def _track(self, bucket: str, notation: str) -> None:
        self._buckets.setdefault(bucket, set()).add(notation)

    @property
    def buckets(self) -> Dict[str, Set[str]]:
        """Listing from the last ``configure`` call."""
        return {name: set(items) for name, items in self._buckets.items()}
