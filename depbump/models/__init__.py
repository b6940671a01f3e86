"""
Unified data model exports for depbump.

Users can import models directly from ``depbump.models`` instead of the
individual submodules.

Example:
    >>> from depbump.models import Version, Requirement, Dependency
"""

from __future__ import annotations

from depbump.models.version import Version
from depbump.models.requirement import UNFIXABLE, Requirement, Unfixable
from depbump.models.dependency import (
    Dependency,
    DependencySet,
    DependencySource,
    RequirementDeclaration,
)

__all__ = [
    "Version",
    "Requirement",
    "Unfixable",
    "UNFIXABLE",
    "Dependency",
    "DependencySet",
    "DependencySource",
    "RequirementDeclaration",
]
