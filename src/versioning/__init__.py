"""Version ordering and notation parsing."""

from .compare import compare_versions, is_newer, max_version, version_key
from .parser import dependency_key, has_placeholder, parse_notation, split_key

__all__ = [
    "compare_versions",
    "is_newer",
    "max_version",
    "version_key",
    "dependency_key",
    "has_placeholder",
    "parse_notation",
    "split_key",
]
