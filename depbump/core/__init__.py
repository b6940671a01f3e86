"""
Core functionality exports for depbump.

Importing from here keeps user-facing imports clean and stable:

    from depbump.core import RequirementsUpdater, UpdateStrategy
"""

from __future__ import annotations

from depbump.core.requirements_updater import RequirementsUpdater, UpdateStrategy
from depbump.core.registry import (
    PackageManager,
    PackageManagerSpec,
    get_package_manager,
    supported_package_managers,
)
from depbump.core.manifest import parse_manifests
from depbump.core.dependency_updater import (
    DependencyUpdater,
    UpdateResult,
    UpdateStatus,
)

__all__ = [
    "RequirementsUpdater",
    "UpdateStrategy",
    "PackageManager",
    "PackageManagerSpec",
    "get_package_manager",
    "supported_package_managers",
    "parse_manifests",
    "DependencyUpdater",
    "UpdateResult",
    "UpdateStatus",
]
