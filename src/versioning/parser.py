"""Token parsing utilities for dependency notations."""

from typing import Optional, Tuple


def dependency_key(group_id: Optional[str], artifact_id: Optional[str]) -> str:
    """Build the ``group:artifact`` lookup key."""
    return f"{group_id}:{artifact_id}"


def split_key(key: str) -> Optional[Tuple[str, str]]:
    """Split a ``group:artifact`` key; None when either half is missing."""
    if not key or ':' not in key:
        return None
    group_id, artifact_id = key.split(':', 1)
    group_id, artifact_id = group_id.strip(), artifact_id.strip()
    if not group_id or not artifact_id or ':' in artifact_id:
        return None
    return group_id, artifact_id


def has_placeholder(value: Optional[str]) -> bool:
    """Return True when ``value`` still carries an unexpanded ``${...}``."""
    return value is not None and "${" in value


def parse_notation(token: str) -> Tuple[str, Optional[str]]:
    """Parse ``group:artifact[:version[:classifier]][@ext]`` into (key, version).

    Single-colon tokens are keys without a requested version. A blank
    version part is treated as no version.
    """
    token = token.strip()
    if '@' in token:
        token = token.split('@', 1)[0]
    parts = [part.strip() for part in token.split(':')]
    if len(parts) < 3:
        return token, None
    key = dependency_key(parts[0], parts[1])
    version = parts[2] if parts[2] else None
    return key, version
