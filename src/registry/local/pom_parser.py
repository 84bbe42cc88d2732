"""Descriptor parser with parent inheritance and property interpolation."""
from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from registry.local.cache import PomDataCache
from registry.local.discovery import DependencyEntry, PomModel, load_hierarchy
from registry.local.models import PACKAGING_JAR, Coordinate, MavenScope

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")

DEFAULT_PROPERTIES = {
    "project.build.sourceEncoding": "UTF-8",
    "project.reporting.outputEncoding": "UTF-8",
}


def resolve_property(value: Optional[str], properties: Dict[str, str], passes: Optional[int] = None) -> Optional[str]:
    """Expand ``${name}`` tokens from ``properties``.

    Expansion repeats so values that reference other properties resolve, up
    to ``passes`` rounds. Unknown names are left as literal text.

    Args:
        value: Text to expand, may be None.
        properties: Property table.
        passes: Maximum expansion rounds.

    Returns:
        The expanded text, or None when ``value`` is None.
    """
    if value is None or "${" not in value:
        return value
    rounds = Constants.PROPERTY_RESOLVE_PASSES if passes is None else passes

    def _sub(match: "re.Match[str]") -> str:
        name = match.group(1).strip()
        return properties.get(name, match.group(0))

    current = value
    for _ in range(rounds):
        expanded = _PLACEHOLDER.sub(_sub, current)
        if expanded == current:
            break
        current = expanded
    return current


class PomParser:
    """Parse descriptors into coordinates, dependency lists, catalogs and properties.

    Results are cached by descriptor path in a shared PomDataCache. Every
    public method raises DescriptorParseError when the descriptor itself
    cannot be read; a missing or broken parent only shortens the chain.
    """

    def __init__(self, cache: Optional[PomDataCache] = None, max_depth: Optional[int] = None):
        self.cache = cache if cache is not None else PomDataCache()
        self._max_depth = max_depth

    def _hierarchy(self, path: str) -> List[PomModel]:
        return load_hierarchy(path, self._max_depth)

    def parse(self, path: str) -> Coordinate:
        """Parse the coordinate a descriptor declares.

        Args:
            path: Descriptor path.

        Returns:
            Coordinate with group and version inherited from the parent when absent.
        """
        cached = self.cache.get_pom(path)
        if cached is not None:
            return cached

        hierarchy = self._hierarchy(path)
        properties = self._collect_properties(hierarchy)
        group_id, artifact_id, version, packaging = _identity(hierarchy)
        coordinate = Coordinate(
            group_id=resolve_property(group_id, properties),
            artifact_id=resolve_property(artifact_id, properties),
            version=resolve_property(version, properties),
            packaging=resolve_property(packaging, properties) or PACKAGING_JAR,
            pom_path=path,
        )
        self.cache.put_pom(path, coordinate)
        return coordinate

    def parse_properties(self, path: str) -> Dict[str, str]:
        """Return the merged property table of a descriptor and its parents."""
        cached = self.cache.get_properties(path)
        if cached is not None:
            return dict(cached)
        properties = self._collect_properties(self._hierarchy(path))
        self.cache.put_properties(path, properties)
        return dict(properties)

    def parse_dependency_management(self, path: str) -> List[Coordinate]:
        """Return the managed-dependency catalog, merged across the parent chain."""
        cached = self.cache.get_dependency_management(path)
        if cached is not None:
            return list(cached)
        hierarchy = self._hierarchy(path)
        properties = self._collect_properties(hierarchy)
        managed = self._collect_managed(hierarchy, properties)
        result = list(managed.values())
        self.cache.put_dependency_management(path, result)
        return result

    def parse_dependencies(self, path: str) -> List[Coordinate]:
        """Return declared dependencies with managed versions, scopes and types filled in."""
        cached = self.cache.get_dependencies(path)
        if cached is not None:
            return list(cached)

        hierarchy = self._hierarchy(path)
        properties = self._collect_properties(hierarchy)
        managed = self._collect_managed(hierarchy, properties)

        merged: Dict[str, DependencyEntry] = {}
        for model in hierarchy:
            for entry in model.dependencies:
                resolved = _interpolate(entry, properties)
                if not resolved.group_id or not resolved.artifact_id:
                    continue
                merged[f"{resolved.group_id}:{resolved.artifact_id}"] = resolved

        result = []
        for key, entry in merged.items():
            hint = managed.get(key)
            version = entry.version
            scope = entry.scope
            packaging = entry.type
            if hint is not None:
                version = version or hint.version
                scope = scope or hint.scope.value
                packaging = packaging or hint.packaging
            result.append(Coordinate(
                group_id=entry.group_id,
                artifact_id=entry.artifact_id,
                version=version,
                packaging=packaging or PACKAGING_JAR,
                scope=MavenScope.from_value(scope),
            ))

        if is_debug_enabled(logger):
            logger.debug(
                "Parsed dependencies",
                extra=extra_context(
                    event="function_exit", component="pom_parser", action="parse_dependencies",
                    outcome="success", count=len(result),
                ),
            )
        self.cache.put_dependencies(path, result)
        return result

    @staticmethod
    def _collect_properties(hierarchy: List[PomModel]) -> Dict[str, str]:
        properties = dict(DEFAULT_PROPERTIES)
        for model in hierarchy:
            properties.update(model.properties)
        if not hierarchy:
            return properties

        group_id, artifact_id, version, packaging = _identity(hierarchy)
        identity = {
            "groupId": group_id,
            "artifactId": artifact_id,
            "version": version,
            "packaging": packaging or PACKAGING_JAR,
        }
        for name, value in identity.items():
            if value:
                properties[f"project.{name}"] = value
                properties.setdefault(name, value)

        parent = hierarchy[-1].parent
        if parent is not None:
            if parent.group_id:
                properties["project.parent.groupId"] = parent.group_id
            if parent.version:
                properties["project.parent.version"] = parent.version
        return properties

    @staticmethod
    def _collect_managed(hierarchy: List[PomModel], properties: Dict[str, str]) -> Dict[str, Coordinate]:
        managed: Dict[str, Coordinate] = {}
        for model in hierarchy:
            for entry in model.managed:
                resolved = _interpolate(entry, properties)
                if not resolved.group_id or not resolved.artifact_id:
                    continue
                managed[f"{resolved.group_id}:{resolved.artifact_id}"] = Coordinate(
                    group_id=resolved.group_id,
                    artifact_id=resolved.artifact_id,
                    version=resolved.version,
                    packaging=resolved.type or PACKAGING_JAR,
                    scope=MavenScope.from_value(resolved.scope),
                )
        return managed


def _identity(hierarchy: List[PomModel]):
    """Effective (group, artifact, version, packaging) of the last model in a chain."""
    child = hierarchy[-1]
    group_id = child.group_id
    version = child.version
    if child.parent is not None:
        group_id = group_id or child.parent.group_id
        version = version or child.parent.version
    return group_id, child.artifact_id, version, child.packaging


def _interpolate(entry: DependencyEntry, properties: Dict[str, str]) -> DependencyEntry:
    return DependencyEntry(
        group_id=resolve_property(entry.group_id, properties),
        artifact_id=resolve_property(entry.artifact_id, properties),
        version=resolve_property(entry.version, properties),
        scope=resolve_property(entry.scope, properties),
        type=resolve_property(entry.type, properties),
    )
