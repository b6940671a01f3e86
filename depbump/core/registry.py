"""
Package-manager registry for depbump.

Each supported package manager maps to the classes that implement its
version, requirement and update semantics. The mapping is built once at
import time and is read-only afterwards.

Example:
    >>> spec = get_package_manager("cabal")
    >>> spec.version_class("1.2.3")
    Version('1.2.3')
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, List, Mapping, Sequence, Type

from depbump.exceptions import UnknownPackageManager
from depbump.models.version import Version
from depbump.models.requirement import Requirement
from depbump.core.requirements_updater import RequirementsUpdater


class PackageManager(str, Enum):
    """Package managers with a registered implementation."""

    CABAL = "cabal"
    CARGO = "cargo"


@dataclass(frozen=True)
class PackageManagerSpec:
    """Implementation bundle for one package manager.

    Attributes:
        package_manager: The package manager this bundle serves.
        version_class: Parses and orders versions.
        requirement_class: Parses constraint strings.
        updater_class: Rewrites requirement declarations.
        production_check: Given a dependency's groups, tells whether it is
            a production dependency.
        root_manifest: File name of the workspace root manifest, the only
            file whose ``patch`` table is honoured.
    """

    package_manager: PackageManager
    version_class: Type[Version]
    requirement_class: Type[Requirement]
    updater_class: Type[RequirementsUpdater]
    production_check: Callable[[Sequence[str]], bool]
    root_manifest: str


def _always_production(groups: Sequence[str]) -> bool:
    return True


def _not_dev_only(groups: Sequence[str]) -> bool:
    return not groups or any(group != "dev-dependencies" for group in groups)


_REGISTRY: Mapping[PackageManager, PackageManagerSpec] = MappingProxyType(
    {
        PackageManager.CABAL: PackageManagerSpec(
            package_manager=PackageManager.CABAL,
            version_class=Version,
            requirement_class=Requirement,
            updater_class=RequirementsUpdater,
            production_check=_always_production,
            root_manifest="cabal.project",
        ),
        PackageManager.CARGO: PackageManagerSpec(
            package_manager=PackageManager.CARGO,
            version_class=Version,
            requirement_class=Requirement,
            updater_class=RequirementsUpdater,
            production_check=_not_dev_only,
            root_manifest="Cargo.toml",
        ),
    }
)


def get_package_manager(name: Any) -> PackageManagerSpec:
    """Return the implementation bundle for ``name``.

    Raises:
        UnknownPackageManager: Nothing is registered under ``name``.
    """
    try:
        return _REGISTRY[PackageManager(name)]
    except (ValueError, KeyError, TypeError) as exc:
        raise UnknownPackageManager(name) from exc


def supported_package_managers() -> List[str]:
    """Names of all registered package managers, sorted."""
    return sorted(manager.value for manager in _REGISTRY)
