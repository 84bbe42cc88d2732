"""Bill-of-materials expansion."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from common.logging_utils import extra_context, is_debug_enabled
from registry.local.discovery import DescriptorParseError
from registry.local.models import Coordinate
from registry.local.pom_parser import PomParser
from resolution.artifacts import ArtifactResolver

logger = logging.getLogger(__name__)


@dataclass
class BomResult:  # pylint: disable=too-many-instance-attributes
    """Outcome of expanding the requested BOMs of one run."""

    managed_versions: Dict[str, str] = field(default_factory=dict)
    bom_managed: Dict[str, List[str]] = field(default_factory=dict)
    targets: Set[str] = field(default_factory=set)
    members: Dict[str, List[str]] = field(default_factory=dict)
    boms: Set[str] = field(default_factory=set)
    processed: Set[str] = field(default_factory=set)
    unresolved: Set[str] = field(default_factory=set)

    def members_of(self, bom_key: str) -> Set[str]:
        """Managed keys reachable from ``bom_key``, nested BOMs included."""
        seen: Set[str] = set()
        pending = [bom_key]
        result: Set[str] = set()
        while pending:
            current = pending.pop()
            if current in seen:
                continue
            seen.add(current)
            for member in self.members.get(current, ()):
                if member in self.members:
                    pending.append(member)
                else:
                    result.add(member)
        return result


class BomExpander:
    """Flatten requested BOMs into managed versions and resolution targets.

    Every call to ``expand`` starts a fresh set of processed BOM
    coordinates, so separate runs never share cycle state.
    """

    def __init__(self, parser: PomParser, resolver: ArtifactResolver):
        self.parser = parser
        self.resolver = resolver

    def expand(self, requested: Iterable[str]) -> BomResult:
        """Expand every requested key that resolves to a BOM.

        Args:
            requested: Declared ``group:artifact`` keys.

        Returns:
            BomResult for the run.
        """
        result = BomResult()
        processed: Set[str] = set()
        for key in sorted(set(requested)):
            coordinate = self.resolver.lookup(key)
            if coordinate is None or not coordinate.is_bom():
                continue
            result.boms.add(key)
            self._expand(coordinate, processed, result)
        result.processed = processed

        if result.boms:
            logger.info(
                "Expanded %d BOM(s) into %d managed versions",
                len(processed), len(result.managed_versions),
                extra=extra_context(
                    event="function_exit", component="bom", action="expand",
                    outcome="success", count=len(result.managed_versions),
                ),
            )
        return result

    def expand_coordinate(self, coordinate: Coordinate, processed: Optional[Set[str]] = None) -> BomResult:
        """Expand a single coordinate; non-BOM coordinates become a lone target."""
        result = BomResult()
        if not coordinate.is_bom():
            result.targets.add(coordinate.key)
            return result
        result.boms.add(coordinate.key)
        seen = set() if processed is None else processed
        self._expand(coordinate, seen, result)
        result.processed = set(seen)
        return result

    def _expand(self, bom: Coordinate, processed: Set[str], result: BomResult) -> None:
        bom_id = f"{bom.group_id}:{bom.artifact_id}:{bom.version or 'unknown'}"
        if bom_id in processed:
            if is_debug_enabled(logger):
                logger.debug(
                    "BOM already processed: %s", bom_id,
                    extra=extra_context(event="decision", component="bom", action="expand", outcome="seen"),
                )
            return
        processed.add(bom_id)

        try:
            catalog = self.parser.parse_dependency_management(bom.pom_path) if bom.pom_path else []
        except DescriptorParseError as e:
            logger.warning("Cannot read BOM %s: %s", bom_id, e.reason)
            catalog = []

        listing: List[str] = []
        members: List[str] = []
        nested: List[Coordinate] = []
        for entry in catalog:
            key = entry.key
            members.append(key)
            if entry.version:
                result.managed_versions[key] = entry.version
                listing.append(f"{key}:{entry.version}")
            else:
                listing.append(key)
            if entry.is_bom():
                nested.append(entry)
            else:
                result.targets.add(key)
        result.bom_managed[bom_id] = listing
        result.members[bom.key] = members

        for entry in nested:
            installed = self.resolver.lookup(entry.key)
            if installed is None or not installed.is_bom():
                result.unresolved.add(entry.key)
                continue
            result.boms.add(entry.key)
            self._expand(installed, processed, result)
