"""
Version comparison utilities for depbump.

Classifies the size of a version change for reporting. Segment positions
follow the usual ``major.minor.patch`` reading; changes further right, or
in the pre-release tag only, are reported as a plain ``"update"``.
"""

from __future__ import annotations

from typing import Optional

from depbump.exceptions import InvalidVersion
from depbump.models.version import Version

_SEGMENT_NAMES = ("major", "minor", "patch")


def get_update_type(
    current_version: Optional[str],
    target_version: Optional[str],
) -> str:
    """Determine the update type between two versions.

    Args:
        current_version: Current (locked) version, or ``None`` if unknown.
        target_version: Version being moved to.

    Returns:
        One of ``"new"``, ``"same"``, ``"downgrade"``, ``"major"``,
        ``"minor"``, ``"patch"``, ``"update"`` or ``"unknown"``.

    Examples:
        >>> get_update_type("1.0.0", "2.0.0")
        'major'
        >>> get_update_type("0.1.0.0", "0.1.0.1")
        'update'
        >>> get_update_type(None, "1.0.0")
        'new'
    """
    if target_version is None:
        return "unknown"

    if current_version is None:
        return "new"

    try:
        current = Version(current_version)
        target = Version(target_version)
    except InvalidVersion:
        return "unknown"

    if target == current:
        return "same"

    if target < current:
        return "downgrade"

    return _classify_upgrade(current, target)


def _classify_upgrade(current: Version, target: Version) -> str:
    """Name the leftmost release segment that differs."""
    width = max(len(current.segments), len(target.segments))
    for index in range(width):
        if current.segment(index) != target.segment(index):
            return _SEGMENT_NAMES[index] if index < len(_SEGMENT_NAMES) else "update"

    # Only the pre-release tag changed
    return "update"
