"""
Centralized constants for depbump.

This module defines immutable configuration values used across depbump,
including update strategies, manifest dependency groups, and logging
formats. All values are intended to be treated as read-only.
"""

from typing import Final, Sequence

# ---------------------------------------------------------------------------
# Update behaviour
# ---------------------------------------------------------------------------

#: Strategy used when neither configuration nor CLI chooses one.
DEFAULT_UPDATE_STRATEGY: Final[str] = "bump_versions"

#: Package manager assumed when the input document does not name one.
DEFAULT_PACKAGE_MANAGER: Final[str] = "cabal"

# ---------------------------------------------------------------------------
# Manifest layout
# ---------------------------------------------------------------------------

#: Manifest tables that hold dependency declarations, in scan order.
DEPENDENCY_GROUPS: Final[Sequence[str]] = (
    "dependencies",
    "dev-dependencies",
    "build-dependencies",
)

#: Manifest table holding per-platform dependency tables.
TARGET_TABLE: Final[str] = "target"

#: Prefix marking a git-sourced entry in a freeze/lock file.
GIT_SOURCE_PREFIX: Final[str] = "git+"

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
