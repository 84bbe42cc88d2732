"""Shared records for a resolution run."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Set

from constants import Constants
from registry.local.models import Coordinate


class ConfigurationType(Enum):
    """Kind of a declared configuration bucket."""

    API = "api"
    IMPLEMENTATION = "implementation"
    RUNTIME = "runtime"
    COMPILE_ONLY = "compileOnly"
    TEST = "test"
    UNKNOWN = "unknown"

    @property
    def bucket(self) -> str:
        """Default bucket name artifacts of this kind are placed into."""
        return {
            ConfigurationType.API: Constants.BUCKET_API,
            ConfigurationType.IMPLEMENTATION: Constants.BUCKET_IMPLEMENTATION,
            ConfigurationType.RUNTIME: Constants.BUCKET_RUNTIME,
            ConfigurationType.COMPILE_ONLY: Constants.BUCKET_COMPILE_ONLY,
            ConfigurationType.TEST: Constants.BUCKET_TEST,
            ConfigurationType.UNKNOWN: Constants.BUCKET_IMPLEMENTATION,
        }[self]


@dataclass(frozen=True)
class ConfigurationInfo:
    """A declared bucket and what its name says about it."""

    name: str
    type: ConfigurationType
    test: bool

    @classmethod
    def from_name(cls, name: str) -> "ConfigurationInfo":
        """Type a bucket from its name."""
        lowered = name.lower()
        if "test" in lowered:
            kind = ConfigurationType.TEST
        elif "implementation" in lowered:
            kind = ConfigurationType.IMPLEMENTATION
        elif "runtime" in lowered:
            kind = ConfigurationType.RUNTIME
        elif "api" in lowered:
            kind = ConfigurationType.API
        elif "compileonly" in lowered:
            kind = ConfigurationType.COMPILE_ONLY
        else:
            kind = ConfigurationType.UNKNOWN
        return cls(name=name, type=kind, test="test" in lowered)

    def __str__(self) -> str:
        return f"{self.name} [{self.type.name}]"


class RequestKind(Enum):
    """How a requested key is looked up in the index."""

    LIBRARY = "library"
    PLUGIN_MARKER = "plugin_marker"

    @classmethod
    def of(cls, key: str) -> "RequestKind":
        """Classify a requested key."""
        if key.endswith(Constants.PLUGIN_MARKER_SUFFIX):
            return cls.PLUGIN_MARKER
        return cls.LIBRARY


@dataclass
class DeclaredDependencies:
    """What the build declares, collected from every module."""

    requested_versions: Dict[str, Set[str]] = field(default_factory=dict)
    configurations: Dict[str, Set[str]] = field(default_factory=dict)
    configuration_infos: Dict[str, Set[ConfigurationInfo]] = field(default_factory=dict)
    test_context: Set[str] = field(default_factory=set)
    project_keys: Set[str] = field(default_factory=set)

    @property
    def keys(self) -> Set[str]:
        """Every declared dependency key."""
        return set(self.requested_versions)


@dataclass
class ResolutionResult:  # pylint: disable=too-many-instance-attributes
    """Everything a resolution run reports back."""

    declared: Set[str] = field(default_factory=set)
    resolved: Dict[str, Coordinate] = field(default_factory=dict)
    not_found: Set[str] = field(default_factory=set)
    skipped: Set[str] = field(default_factory=set)
    test_context: Set[str] = field(default_factory=set)
    managed_versions: Dict[str, str] = field(default_factory=dict)
    bom_managed: Dict[str, List[str]] = field(default_factory=dict)
    processed_boms: Set[str] = field(default_factory=set)
    buckets: Dict[str, Set[str]] = field(default_factory=dict)
    override_logs: List[str] = field(default_factory=list)
    apply_logs: List[str] = field(default_factory=list)
    plugin_overrides: Dict[str, List[str]] = field(default_factory=dict)
    unresolved_plugins: Set[str] = field(default_factory=set)
    skipped_plugins: Set[str] = field(default_factory=set)
    repository_dirs: List[str] = field(default_factory=list)

    def has_warnings(self) -> bool:
        """True when something requested could not be satisfied locally."""
        return bool(self.not_found or self.skipped or self.unresolved_plugins)
