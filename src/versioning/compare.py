"""Version ordering used to rank locally installed descriptors.

Versions are split on ``.`` and ``-`` and compared segment by segment. The
shorter version is padded with ``"0"`` segments. Two all-digit segments
compare as integers, an all-digit segment outranks any other segment, and
two non-numeric segments compare lexicographically. ``None`` sorts below
every version.
"""

import functools
import re
from typing import List, Optional

_SEPARATORS = re.compile(r"[.-]")


def _segments(version: str) -> List[str]:
    parts = _SEPARATORS.split(version)
    if len(parts) > 1:
        while parts and not parts[-1]:
            parts.pop()
    return parts


def _is_numeric(segment: str) -> bool:
    # Inner empty segments ("1..2") count as qualifiers, not numbers.
    # Trailing ones ("1.0.") are dropped by _segments.
    return segment.isascii() and segment.isdigit()


def _compare_segment(left: str, right: str) -> int:
    left_numeric = _is_numeric(left)
    right_numeric = _is_numeric(right)

    if left_numeric and right_numeric:
        left_value, right_value = int(left), int(right)
        return (left_value > right_value) - (left_value < right_value)
    if left_numeric:
        return 1
    if right_numeric:
        return -1
    return (left > right) - (left < right)


def compare_versions(left: Optional[str], right: Optional[str]) -> int:
    """Compare two version strings.

    Args:
        left: First version, may be None.
        right: Second version, may be None.

    Returns:
        Negative, zero or positive like a classic ``cmp``.
    """
    if left is None and right is None:
        return 0
    if left is None:
        return -1
    if right is None:
        return 1

    left_parts = _segments(left)
    right_parts = _segments(right)
    for index in range(max(len(left_parts), len(right_parts))):
        left_part = left_parts[index] if index < len(left_parts) else "0"
        right_part = right_parts[index] if index < len(right_parts) else "0"
        result = _compare_segment(left_part, right_part)
        if result != 0:
            return result
    return 0


def is_newer(candidate: Optional[str], current: Optional[str]) -> bool:
    """Return True when ``candidate`` ranks strictly above ``current``."""
    return compare_versions(candidate, current) > 0


def max_version(versions) -> Optional[str]:
    """Return the highest ranked version of an iterable, or None when empty."""
    best: Optional[str] = None
    seen = False
    for version in versions:
        if not seen or is_newer(version, best):
            best = version
            seen = True
    return best


version_key = functools.cmp_to_key(compare_versions)
