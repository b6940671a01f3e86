"""
depbump — requirement rewriting for automated dependency updates.

Given a dependency's declared version requirements and the version it
should move to, depbump computes the rewritten requirements while keeping
each constraint's original shape:

    • Exact pins follow the new version
    • Wildcard and ``~``/``^`` short forms keep their precision
    • Violated upper bounds widen at their own precision
    • Violated lower bounds are reported as unfixable

Example:
    >>> from depbump import RequirementsUpdater
    >>> updater = RequirementsUpdater(
    ...     requirements=[{"requirement": ">= 1.0, < 2.0", "file": "cabal.project",
    ...                    "groups": ["dependencies"], "source": None}],
    ...     updated_source=None,
    ...     update_strategy="bump_versions",
    ...     target_version="2.3.1",
    ... )
    >>> updater.updated_requirements()[0].requirement
    '>= 1.0, < 3.0'
"""

from __future__ import annotations

from depbump.__version__ import __version__
from depbump.models import (
    UNFIXABLE,
    Dependency,
    DependencySet,
    Requirement,
    RequirementDeclaration,
    Version,
)
from depbump.core import RequirementsUpdater, UpdateStrategy

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "depbump Contributors"
__license__ = "Apache-2.0"
__description__ = "Constraint-preserving requirement updates for dependency bots."

__all__ = [
    "__version__",
    "Version",
    "Requirement",
    "Dependency",
    "DependencySet",
    "RequirementDeclaration",
    "RequirementsUpdater",
    "UpdateStrategy",
    "UNFIXABLE",
]
