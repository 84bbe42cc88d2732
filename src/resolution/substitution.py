"""Decide which version replaces each requested dependency."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Set, Tuple

from constants import Constants
from registry.local.models import Coordinate
from versioning import max_version

logger = logging.getLogger(__name__)


class SubstitutionReason(Enum):
    """Why a version is forced."""

    OVERRIDE = "override"
    APPLY = "apply"


@dataclass(frozen=True)
class Substitution:
    """One forced version."""

    key: str
    requested: Tuple[str, ...]
    version: str
    reason: SubstitutionReason
    managed: bool = False

    @property
    def notation(self) -> str:
        """Target ``group:artifact:version``."""
        return f"{self.key}:{self.version}"


@dataclass
class SubstitutionPlan:
    """Forced versions for a run plus their log lines."""

    substitutions: Dict[str, Substitution] = field(default_factory=dict)
    override_logs: List[str] = field(default_factory=list)
    apply_logs: List[str] = field(default_factory=list)

    @property
    def overrides(self) -> List[Substitution]:
        """Substitutions that replace an explicit conflicting request."""
        return [s for s in self.substitutions.values() if s.reason == SubstitutionReason.OVERRIDE]

    @property
    def applies(self) -> List[Substitution]:
        """Substitutions that supply a version where none was requested."""
        return [s for s in self.substitutions.values() if s.reason == SubstitutionReason.APPLY]


class DependencySubstitutor:
    """Compute version substitutions from requests, system artifacts and BOM pins.

    A system artifact wins over a managed version. An explicit request that
    conflicts with the chosen version is an override; a key without an
    explicit request gets an apply. Matching requests need nothing.
    """

    def plan(
        self,
        requested_versions: Mapping[str, Set[str]],
        system_artifacts: Mapping[str, Coordinate],
        managed_versions: Optional[Mapping[str, str]] = None,
    ) -> SubstitutionPlan:
        """Build the substitution plan.

        Args:
            requested_versions: Explicit versions requested per key; empty when unspecified.
            system_artifacts: Resolved system coordinates.
            managed_versions: BOM managed versions per key.

        Returns:
            SubstitutionPlan with at most one entry per key.
        """
        managed_versions = managed_versions or {}
        plan = SubstitutionPlan()

        for key in sorted(set(system_artifacts) | set(managed_versions)):
            system = system_artifacts.get(key)
            from_bom = system is None
            version = managed_versions.get(key) if from_bom else system.version
            if not version:
                continue

            requested = tuple(sorted(v for v in requested_versions.get(key, ()) if v))
            conflicting = [v for v in requested if v != version]

            if requested and not conflicting:
                continue
            if conflicting:
                original = max_version(conflicting)
                if from_bom:
                    reason = SubstitutionReason.APPLY
                    message = f"Apply BOM version: {key}:{version}"
                else:
                    reason = SubstitutionReason.OVERRIDE
                    message = f"Override version: {key}:{original} -> {version}"
            else:
                reason = SubstitutionReason.APPLY
                if from_bom:
                    message = f"Apply BOM version: {key}:{version}"
                else:
                    message = f"Apply version: {key}:{Constants.UNSPECIFIED_VERSION} -> {version}"

            plan.substitutions[key] = Substitution(
                key=key, requested=requested, version=version, reason=reason, managed=from_bom,
            )
            if reason == SubstitutionReason.OVERRIDE:
                plan.override_logs.append(message)
            else:
                plan.apply_logs.append(message)

        logger.debug(
            "Substitution plan: %d overrides, %d applies",
            len(plan.override_logs), len(plan.apply_logs),
        )
        return plan
