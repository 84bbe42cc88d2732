"""Ordered resolution steps for one build run."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Sequence, Set, Tuple

from constants import Constants
from common.logging_utils import Timer, extra_context, is_debug_enabled
from registry.local.cache import PomDataCache
from registry.local.index import RepositoryIndex
from registry.local.jars import ArtifactVerifier, scan_repository_dirs
from registry.local.pom_parser import PomParser
from resolution.artifacts import ArtifactResolver
from resolution.bom import BomExpander, BomResult
from resolution.configurator import ArtifactConfigurator
from resolution.models import DeclaredDependencies, ResolutionResult
from resolution.plugins import PluginResolver
from resolution.scope import ScopeManager
from resolution.substitution import DependencySubstitutor, SubstitutionPlan
from resolution.transitive import TransitiveClassifier, TransitiveResult

logger = logging.getLogger(__name__)


@dataclass
class ResolutionContext:  # pylint: disable=too-many-instance-attributes
    """Per-run state handed from step to step."""

    declared: DeclaredDependencies
    plugin_ids: Set[str] = field(default_factory=set)
    scope_manager: ScopeManager = field(default_factory=ScopeManager)
    test_context: Set[str] = field(default_factory=set)
    requested: Set[str] = field(default_factory=set)
    bom: BomResult = field(default_factory=BomResult)
    transitive: TransitiveResult = field(default_factory=TransitiveResult)
    plan: SubstitutionPlan = field(default_factory=SubstitutionPlan)
    result: ResolutionResult = field(default_factory=ResolutionResult)
    resolver: Optional[ArtifactResolver] = None
    bom_expander: Optional[BomExpander] = None


class ResolutionPipeline:
    """Resolve a build's declarations against the local repository.

    The descriptor cache lives as long as the pipeline. Each ``run`` rebuilds
    the index from the descriptor roots and gets its own resolver and BOM
    expander, so runs never share found or not-found state.
    """

    def __init__(
        self,
        poms_dirs: Optional[Sequence[str]] = None,
        jars_dirs: Optional[Sequence[str]] = None,
        verify_artifacts: Optional[bool] = None,
        cache: Optional[PomDataCache] = None,
    ):
        self.poms_dirs = list(Constants.POMS_DIRS if poms_dirs is None else poms_dirs)
        self.jars_dirs = list(Constants.JARS_DIRS if jars_dirs is None else jars_dirs)
        verify = Constants.VERIFY_ARTIFACTS if verify_artifacts is None else verify_artifacts
        self.parser = PomParser(cache if cache is not None else PomDataCache())
        self.index = RepositoryIndex(self.parser)
        self.verifier = ArtifactVerifier(self.jars_dirs) if verify and self.jars_dirs else None

    def steps(self) -> List[Tuple[str, Callable[[ResolutionContext], None]]]:
        """Library resolution steps in execution order."""
        return [
            ("build index", self._build_index),
            ("repository directories", self._repository_dirs),
            ("declared dependencies", self._declared),
            ("apply BOMs", self._apply_boms),
            ("resolve artifacts", self._resolve),
            ("transitive dependencies", self._transitive),
            ("configure buckets", self._configure),
            ("substitute versions", self._substitute),
            ("plugins", self._plugins),
        ]

    def run(self, declared: DeclaredDependencies, plugin_ids: Iterable[str] = ()) -> ResolutionResult:
        """Run every step.

        Args:
            declared: Dependencies declared by the build.
            plugin_ids: Requested plugin ids.

        Returns:
            ResolutionResult for reporting.

        Raises:
            RepositoryUnavailableError: When the repository roots cannot be read.
        """
        resolver = ArtifactResolver(self.index, self.verifier)
        context = ResolutionContext(
            declared=declared,
            plugin_ids=set(plugin_ids),
            resolver=resolver,
            bom_expander=BomExpander(self.parser, resolver),
        )
        for name, step in self.steps():
            with Timer() as timer:
                step(context)
            if is_debug_enabled(logger):
                logger.debug(
                    "Step finished: %s", name,
                    extra=extra_context(
                        event="step", component="pipeline", action=name,
                        outcome="success", duration_ms=timer.duration_ms(),
                    ),
                )
        self.parser.cache.log_stats()
        return context.result

    def _build_index(self, context: ResolutionContext) -> None:  # pylint: disable=unused-argument
        self.index.build(self.poms_dirs)
        if self.verifier is not None:
            self.verifier.refresh()

    def _repository_dirs(self, context: ResolutionContext) -> None:
        if self.jars_dirs:
            context.result.repository_dirs = scan_repository_dirs(self.jars_dirs)

    def _declared(self, context: ResolutionContext) -> None:
        declared = context.declared
        context.result.declared = set(declared.keys)
        context.test_context = set(declared.test_context)
        context.requested = set(declared.keys)
        logger.info("Initial dependencies: %d", len(declared.keys))

    def _apply_boms(self, context: ResolutionContext) -> None:
        bom = context.bom_expander.expand(context.requested)
        context.bom = bom
        for bom_key in bom.boms & context.test_context:
            context.test_context |= bom.members_of(bom_key)
        context.requested = (context.requested - bom.boms) | bom.targets
        context.result.managed_versions = dict(bom.managed_versions)
        context.result.bom_managed = {k: list(v) for k, v in bom.bom_managed.items()}
        context.result.processed_boms = set(bom.boms)

    def _resolve(self, context: ResolutionContext) -> None:
        context.resolver.resolve(context.requested)
        context.result.not_found = context.resolver.not_found
        context.resolver.filter()

    def _transitive(self, context: ResolutionContext) -> None:
        classifier = TransitiveClassifier(self.parser, context.resolver, context.scope_manager)
        transitive = classifier.classify(context.resolver.system_artifacts, context.test_context)
        context.transitive = transitive
        context.result.resolved = dict(transitive.artifacts)
        context.result.skipped = set(transitive.skipped)
        context.result.test_context = set(transitive.test)

    def _configure(self, context: ResolutionContext) -> None:
        declared = context.declared
        configurator = ArtifactConfigurator(context.scope_manager)
        names = {k: v for k, v in declared.configurations.items() if k not in context.bom.boms}
        context.result.buckets = configurator.configure(
            context.result.resolved,
            names,
            declared.configuration_infos,
            context.transitive.test,
            declared.project_keys,
        )

    def _substitute(self, context: ResolutionContext) -> None:
        plan = DependencySubstitutor().plan(
            context.declared.requested_versions,
            context.result.resolved,
            context.bom.managed_versions,
        )
        context.plan = plan
        context.result.override_logs = sorted(plan.override_logs)
        context.result.apply_logs = sorted(plan.apply_logs)

    def _plugins(self, context: ResolutionContext) -> None:
        if not context.plugin_ids:
            return
        plugins = PluginResolver(context.resolver, context.bom_expander).resolve(context.plugin_ids)
        context.result.plugin_overrides = plugins.overrides
        context.result.unresolved_plugins = plugins.unresolved
        context.result.skipped_plugins = plugins.skipped
