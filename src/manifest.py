"""Build manifest: the declarations a build hands to the resolver.

A manifest is YAML or JSON::

    modules:
      - id: com.acme:app
        configurations:
          implementation: [org.slf4j:slf4j-api:1.7.36]
          testImplementation: [junit:junit]
    plugins: [io.spring.dependency-management]

A single-module build may use a top-level ``configurations`` map instead
of ``modules``.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import yaml

from resolution.models import ConfigurationInfo, DeclaredDependencies
from versioning import parse_notation, split_key

logger = logging.getLogger(__name__)


class ManifestError(Exception):
    """The manifest cannot be read or has the wrong shape."""


@dataclass
class ModuleSpec:
    """One module of the build."""

    id: Optional[str] = None
    configurations: Dict[str, List[str]] = field(default_factory=dict)


@dataclass
class BuildManifest:
    """All modules and plugin requests of a build."""

    modules: List[ModuleSpec] = field(default_factory=list)
    plugins: List[str] = field(default_factory=list)
    unbucketed: List[str] = field(default_factory=list)

    def declared(self) -> DeclaredDependencies:
        """Collect requested versions, buckets and test flags across modules."""
        declared = DeclaredDependencies()
        for module in self.modules:
            if module.id and split_key(module.id):
                declared.project_keys.add(module.id)
            for bucket, notations in module.configurations.items():
                info = ConfigurationInfo.from_name(bucket)
                for notation in notations:
                    key = _record(declared, notation)
                    if key is None:
                        continue
                    declared.configurations.setdefault(key, set()).add(bucket)
                    declared.configuration_infos.setdefault(key, set()).add(info)
        for notation in self.unbucketed:
            _record(declared, notation)

        for key, infos in declared.configuration_infos.items():
            if infos and all(info.test for info in infos):
                declared.test_context.add(key)
        return declared


def _record(declared: DeclaredDependencies, notation: str) -> Optional[str]:
    key, version = parse_notation(notation)
    if split_key(key) is None:
        logger.warning("Ignoring malformed dependency notation: %s", notation)
        return None
    versions = declared.requested_versions.setdefault(key, set())
    if version:
        versions.add(version)
    return key


def _as_list(value: Any, what: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None]
    raise ManifestError(f"{what} must be a list, got {type(value).__name__}")


def _configurations(value: Any) -> Dict[str, List[str]]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ManifestError("configurations must be a mapping of bucket to notations")
    return {str(name): _as_list(items, f"configuration {name}") for name, items in value.items()}


def from_mapping(data: Any) -> BuildManifest:
    """Build a manifest from already-parsed YAML or JSON."""
    if not isinstance(data, dict):
        raise ManifestError("manifest root must be a mapping")
    modules = []
    raw_modules = data.get("modules")
    if raw_modules is not None:
        if not isinstance(raw_modules, list):
            raise ManifestError("modules must be a list")
        for raw in raw_modules:
            if not isinstance(raw, dict):
                raise ManifestError("each module must be a mapping")
            modules.append(ModuleSpec(id=raw.get("id"), configurations=_configurations(raw.get("configurations"))))
    if "configurations" in data:
        modules.append(ModuleSpec(id=data.get("id"), configurations=_configurations(data.get("configurations"))))
    return BuildManifest(modules=modules, plugins=_as_list(data.get("plugins"), "plugins"))


def from_notations(notations: Iterable[str], plugins: Iterable[str] = ()) -> BuildManifest:
    """Manifest for plain notations placed in no bucket."""
    items = [n.strip() for n in notations if n and n.strip() and not n.strip().startswith("#")]
    return BuildManifest(unbucketed=items, plugins=[p for p in plugins if p])


def load_manifest(path: str) -> BuildManifest:
    """Read a YAML or JSON manifest.

    Raises:
        ManifestError: When the file is unreadable or malformed.
    """
    try:
        with open(path, encoding="utf-8") as fh:
            if path.lower().endswith(".json"):
                data = json.load(fh)
            else:
                data = yaml.safe_load(fh)
    except OSError as e:
        raise ManifestError(f"cannot read manifest {path}: {e}") from e
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ManifestError(f"malformed manifest {path}: {e}") from e
    return from_mapping(data or {})


def load_list_file(path: str) -> List[str]:
    """Read one notation per line, skipping blanks and ``#`` comments.

    Raises:
        ManifestError: When the file cannot be read.
    """
    try:
        with open(path, encoding="utf-8") as fh:
            lines = [line.strip() for line in fh]
    except OSError as e:
        raise ManifestError(f"cannot read list {path}: {e}") from e
    return [line for line in lines if line and not line.startswith("#")]
