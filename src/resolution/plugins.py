"""Resolve build-tool plugin ids against the local repository."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from constants import Constants
from resolution.artifacts import ArtifactResolver
from resolution.bom import BomExpander

logger = logging.getLogger(__name__)


@dataclass
class PluginResolution:
    """Module overrides per plugin id plus the ids left to the host."""

    overrides: Dict[str, List[str]] = field(default_factory=dict)
    skipped: Set[str] = field(default_factory=set)
    unresolved: Set[str] = field(default_factory=set)


class PluginResolver:
    """Map plugin ids to installed modules.

    Ids without a dot or inside the core namespace are skipped. A plugin
    that resolves to a BOM contributes every non-BOM member it manages.
    """

    def __init__(self, resolver: ArtifactResolver, bom_expander: BomExpander, core_namespace: Optional[str] = None):
        self.resolver = resolver
        self.bom_expander = bom_expander
        self.core_namespace = Constants.CORE_PLUGIN_NAMESPACE if core_namespace is None else core_namespace

    def is_core(self, plugin_id: str) -> bool:
        """True for ids the host resolves itself."""
        return "." not in plugin_id or plugin_id.startswith(self.core_namespace)

    def resolve(self, plugin_ids: Iterable[str]) -> PluginResolution:
        """Resolve every requested plugin id.

        Args:
            plugin_ids: Requested plugin ids.

        Returns:
            PluginResolution; unresolved ids only produce warnings.
        """
        result = PluginResolution()
        for plugin_id in sorted({p.strip() for p in plugin_ids if p and p.strip()}):
            if self.is_core(plugin_id):
                result.skipped.add(plugin_id)
                continue

            coordinate = self.resolver.find_plugin(plugin_id)
            if coordinate is None:
                logger.warning("Plugin %s not found in the system repository", plugin_id)
                result.unresolved.add(plugin_id)
                continue

            if not coordinate.is_bom():
                result.overrides[plugin_id] = [coordinate.notation]
                logger.info("Plugin %s -> %s", plugin_id, coordinate.notation)
                continue

            expansion = self.bom_expander.expand_coordinate(coordinate)
            modules = []
            for key in sorted(expansion.targets):
                installed = self.resolver.lookup(key)
                if installed is not None and not installed.is_bom():
                    modules.append(installed.notation)
                elif expansion.managed_versions.get(key):
                    modules.append(f"{key}:{expansion.managed_versions[key]}")
            if modules:
                result.overrides[plugin_id] = modules
                logger.info("Plugin %s -> %d module(s) from BOM %s", plugin_id, len(modules), coordinate.notation)
            else:
                logger.warning("Plugin BOM %s manages no installed modules", coordinate.notation)
                result.unresolved.add(plugin_id)
        return result
