"""Breadth-first discovery of transitive dependencies."""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Iterable, Optional, Set, Tuple

from common.logging_utils import Timer, extra_context, is_debug_enabled
from registry.local.discovery import DescriptorParseError
from registry.local.models import Coordinate, MavenScope
from registry.local.pom_parser import PomParser
from resolution.artifacts import ArtifactResolver
from resolution.scope import ScopeManager

logger = logging.getLogger(__name__)


@dataclass
class TransitiveResult:
    """Closure of a resolved artifact map and its main/test split."""

    artifacts: Dict[str, Coordinate] = field(default_factory=dict)
    main: Set[str] = field(default_factory=set)
    test: Set[str] = field(default_factory=set)
    skipped: Set[str] = field(default_factory=set)


class TransitiveClassifier:
    """Walk declared dependencies of resolved artifacts until nothing new appears.

    A key reached through any main path is main; it is test only when
    every path that reached it came from a test-context artifact.
    Test-scoped dependencies update the scope manager but are not walked.
    """

    def __init__(self, parser: PomParser, resolver: ArtifactResolver, scope_manager: Optional[ScopeManager] = None):
        self.parser = parser
        self.resolver = resolver
        self.scope_manager = scope_manager if scope_manager is not None else ScopeManager()

    def classify(self, artifacts: Dict[str, Coordinate], test_context: Iterable[str] = ()) -> TransitiveResult:
        """Compute the transitive closure of ``artifacts``.

        Args:
            artifacts: Filtered resolved map.
            test_context: Keys declared only in test buckets.

        Returns:
            TransitiveResult; the input map is left untouched.
        """
        test_keys = set(test_context)
        result = TransitiveResult(artifacts=dict(artifacts))
        is_test: Dict[str, bool] = {key: key in test_keys for key in artifacts}
        queue: Deque[Tuple[str, Coordinate]] = deque(sorted(artifacts.items()))

        with Timer() as timer:
            while queue:
                key, current = queue.popleft()
                if not current.pom_path:
                    continue
                try:
                    dependencies = self.parser.parse_dependencies(current.pom_path)
                except DescriptorParseError as e:
                    logger.warning("Cannot read dependencies of %s: %s", key, e.reason)
                    continue

                for dep in dependencies:
                    dep_key = dep.key
                    self.scope_manager.update_scope(dep_key, dep.scope)
                    if dep.scope == MavenScope.TEST:
                        continue

                    resolved = result.artifacts.get(dep_key)
                    if resolved is None:
                        resolved = self.resolver.lookup(dep_key)
                        if resolved is None:
                            if dep_key not in result.skipped:
                                logger.warning("Skipping not found dependency: %s", dep_key)
                            result.skipped.add(dep_key)
                            continue
                        if resolved.is_bom():
                            continue
                        result.artifacts[dep_key] = resolved

                    inherited_test = is_test[key]
                    if dep_key not in is_test:
                        is_test[dep_key] = inherited_test
                        queue.append((dep_key, resolved))
                    elif is_test[dep_key] and not inherited_test:
                        # Promote and walk again so its subtree is promoted too.
                        is_test[dep_key] = False
                        queue.append((dep_key, resolved))

        for key in result.artifacts:
            if is_test.get(key, False):
                result.test.add(key)
            else:
                result.main.add(key)

        logger.info(
            "Transitive walk: %d artifacts (%d main, %d test), %d skipped",
            len(result.artifacts), len(result.main), len(result.test), len(result.skipped),
        )
        if is_debug_enabled(logger):
            logger.debug(
                "Transitive walk finished",
                extra=extra_context(
                    event="function_exit", component="transitive", action="classify",
                    outcome="success", count=len(result.artifacts), duration_ms=timer.duration_ms(),
                ),
            )
        return result
