"""Unit tests for depbump.core.registry module."""

from __future__ import annotations

from types import MappingProxyType

import pytest

from depbump.core import registry
from depbump.core.registry import (
    PackageManager,
    get_package_manager,
    supported_package_managers,
)
from depbump.core.requirements_updater import RequirementsUpdater
from depbump.exceptions import UnknownPackageManager
from depbump.models.requirement import Requirement
from depbump.models.version import Version


@pytest.mark.unit
class TestRegistry:
    @pytest.mark.parametrize("name", ["cabal", "cargo", PackageManager.CABAL])
    def test_lookup(self, name: object) -> None:
        spec = get_package_manager(name)

        assert spec.version_class is Version
        assert spec.requirement_class is Requirement
        assert spec.updater_class is RequirementsUpdater

    @pytest.mark.parametrize("name", ["npm", "", None, 1])
    def test_unknown(self, name: object) -> None:
        with pytest.raises(UnknownPackageManager):
            get_package_manager(name)

    def test_supported(self) -> None:
        assert supported_package_managers() == ["cabal", "cargo"]

    def test_registry_is_read_only(self) -> None:
        assert isinstance(registry._REGISTRY, MappingProxyType)
        with pytest.raises(TypeError):
            registry._REGISTRY[PackageManager.CABAL] = None  # type: ignore[index]

    def test_cabal_everything_is_production(self) -> None:
        check = get_package_manager("cabal").production_check

        assert check(["dev-dependencies"]) is True
        assert check([]) is True

    @pytest.mark.parametrize(
        "groups,expected",
        [
            ([], True),
            (["dependencies"], True),
            (["dev-dependencies"], False),
            (["dev-dependencies", "build-dependencies"], True),
        ],
    )
    def test_cargo_production_check(self, groups: list, expected: bool) -> None:
        assert get_package_manager("cargo").production_check(groups) is expected

    @pytest.mark.parametrize(
        "name,root_manifest",
        [("cabal", "cabal.project"), ("cargo", "Cargo.toml")],
    )
    def test_root_manifest(self, name: str, root_manifest: str) -> None:
        assert get_package_manager(name).root_manifest == root_manifest
