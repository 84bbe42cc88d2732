"""Runtime configuration: YAML file, environment and CLI overrides.

Precedence, lowest first: built-in ``Constants`` defaults, the YAML/JSON
config file, ``SYSDEPS_*`` environment variables, CLI flags.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, List, Optional

import yaml

from constants import Constants

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """An explicitly requested config file is missing or malformed."""


def _read_config_file(path: str) -> Dict[str, Any]:
    with open(path, encoding="utf-8") as fh:
        if path.lower().endswith(".json"):
            data = json.load(fh)
        else:
            data = yaml.safe_load(fh)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config root must be a mapping: {path}")
    return data


def load_yaml_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the config file.

    Looks at ``path``, then ``SYSDEPS_CONFIG``, then the default locations.

    Args:
        path: Explicit config path from the CLI.

    Returns:
        Parsed mapping, ``{}`` when no default file exists.

    Raises:
        ConfigError: When an explicit path (argument or env) is unreadable or malformed.
    """
    explicit = path or os.environ.get(Constants.ENV_CONFIG)
    if explicit:
        try:
            data = _read_config_file(explicit)
        except OSError as e:
            raise ConfigError(f"Cannot read config {explicit}: {e}") from e
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigError(f"Malformed config {explicit}: {e}") from e
        logger.debug("Loaded config from %s", explicit)
        return data

    for candidate in Constants.DEFAULT_CONFIG_FILES:
        candidate = os.path.expanduser(candidate)
        if not os.path.isfile(candidate):
            continue
        try:
            data = _read_config_file(candidate)
        except (OSError, yaml.YAMLError, json.JSONDecodeError, ConfigError) as e:
            logger.warning("Ignoring unreadable config %s: %s", candidate, e)
            continue
        logger.debug("Loaded config from %s", candidate)
        return data
    return {}


def _paths(value: Any) -> Optional[List[str]]:
    if value is None:
        return None
    if isinstance(value, str):
        return [p for p in value.split(os.pathsep) if p]
    if isinstance(value, (list, tuple)):
        return [str(p) for p in value if p]
    raise ConfigError(f"Expected a path or list of paths, got {type(value).__name__}")


def _int(section: Dict[str, Any], key: str) -> Optional[int]:
    if key not in section or section[key] is None:
        return None
    try:
        return int(section[key])
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be an integer") from e


def apply_config(cfg: Dict[str, Any]) -> None:
    """Apply config file sections onto ``Constants``.

    Raises:
        ConfigError: When a section has the wrong shape.
    """
    if not cfg:
        return

    repository = cfg.get("repository") or {}
    if not isinstance(repository, dict):
        raise ConfigError("repository must be a mapping")
    poms = _paths(repository.get("poms_dirs", repository.get("poms_dir")))
    if poms is not None:
        Constants.POMS_DIRS = poms
    jars = _paths(repository.get("jars_dirs", repository.get("jars_dir")))
    if jars is not None:
        Constants.JARS_DIRS = jars
    for key, attr in (
        ("scan_depth", "JAR_SCAN_DEPTH"),
        ("descriptor_depth", "DESCRIPTOR_SCAN_DEPTH"),
        ("parent_depth", "PARENT_CHAIN_MAX_DEPTH"),
    ):
        value = _int(repository, key)
        if value is not None:
            setattr(Constants, attr, value)
    if "verify_artifacts" in repository:
        Constants.VERIFY_ARTIFACTS = bool(repository["verify_artifacts"])

    cache = cfg.get("cache") or {}
    if not isinstance(cache, dict):
        raise ConfigError("cache must be a mapping")
    for key, attr in (
        ("ttl_sec", "CACHE_TTL_SEC"),
        ("pom_entries", "CACHE_POM_MAX_ENTRIES"),
        ("dependency_management_entries", "CACHE_DEP_MGMT_MAX_ENTRIES"),
        ("dependency_entries", "CACHE_DEPENDENCIES_MAX_ENTRIES"),
        ("property_entries", "CACHE_PROPERTIES_MAX_ENTRIES"),
    ):
        value = _int(cache, key)
        if value is not None:
            setattr(Constants, attr, value)

    buckets = cfg.get("configurations") or {}
    if not isinstance(buckets, dict):
        raise ConfigError("configurations must be a mapping")
    for key, attr in (
        ("api", "BUCKET_API"),
        ("implementation", "BUCKET_IMPLEMENTATION"),
        ("runtime", "BUCKET_RUNTIME"),
        ("compile_only", "BUCKET_COMPILE_ONLY"),
        ("test", "BUCKET_TEST"),
    ):
        if buckets.get(key):
            setattr(Constants, attr, str(buckets[key]))

    plugins = cfg.get("plugins") or {}
    if not isinstance(plugins, dict):
        raise ConfigError("plugins must be a mapping")
    if plugins.get("core_namespace"):
        Constants.CORE_PLUGIN_NAMESPACE = str(plugins["core_namespace"])


def apply_env_overrides() -> None:
    """Apply ``SYSDEPS_POMS_DIR`` / ``SYSDEPS_JARS_DIR``."""
    poms = os.environ.get(Constants.ENV_POMS_DIR)
    if poms:
        Constants.POMS_DIRS = _paths(poms) or Constants.POMS_DIRS
    jars = os.environ.get(Constants.ENV_JARS_DIR)
    if jars:
        Constants.JARS_DIRS = _paths(jars) or Constants.JARS_DIRS


def apply_cli_overrides(args) -> None:
    """Apply CLI flags; they take precedence over everything else."""
    if getattr(args, "POMS_DIRS", None):
        Constants.POMS_DIRS = list(args.POMS_DIRS)
    if getattr(args, "JARS_DIRS", None):
        Constants.JARS_DIRS = list(args.JARS_DIRS)
    if getattr(args, "SCAN_DEPTH", None) is not None:
        Constants.JAR_SCAN_DEPTH = int(args.SCAN_DEPTH)
    if getattr(args, "NO_VERIFY", False):
        Constants.VERIFY_ARTIFACTS = False
