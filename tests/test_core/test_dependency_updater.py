"""Unit tests for depbump.core.dependency_updater module.

Test Coverage:
- Status reporting (updated, unchanged, unfixable, skipped)
- Source handling
- Batch updates with name canonicalisation
- JSON serialisation of results
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import pytest

from depbump.core.dependency_updater import (
    DependencyUpdater,
    UpdateResult,
    UpdateStatus,
)
from depbump.core.requirements_updater import UpdateStrategy
from depbump.exceptions import UnknownPackageManager, UnknownUpdateStrategy
from depbump.models.dependency import Dependency, DependencySource
from depbump.models.requirement import UNFIXABLE

GIT = {"type": "git", "url": "https://github.com/haskell/aeson", "ref": "v2.0"}


def _dependency(
    *requirements: Any,
    name: str = "aeson",
    version: Optional[str] = "2.0.3",
    source: Optional[Dict[str, Any]] = None,
) -> Dependency:
    return Dependency(
        name=name,
        package_manager="cabal",
        version=version,
        requirements=tuple(
            {
                "requirement": requirement,
                "file": f"file{index}.cabal",
                "groups": ["dependencies"],
                "source": source,
            }
            for index, requirement in enumerate(requirements)
        ),
    )


@pytest.mark.unit
class TestDependencyUpdater:
    def test_default_strategy(self) -> None:
        assert DependencyUpdater().update_strategy is UpdateStrategy.BUMP_VERSIONS

    def test_unknown_strategy(self) -> None:
        with pytest.raises(UnknownUpdateStrategy):
            DependencyUpdater("sometimes")

    def test_updated(self) -> None:
        result = DependencyUpdater().update(_dependency(">= 2.0, < 2.1"), "2.1.2")

        assert result.status is UpdateStatus.UPDATED
        assert result.is_updatable
        updated = result.updated_dependency
        assert updated.version == "2.1.2"
        assert updated.requirements[0].requirement == ">= 2.0, < 2.2"
        assert updated.previous_version == "2.0.3"

    def test_version_change_alone_counts_as_update(self) -> None:
        updater = DependencyUpdater("bump_versions_if_necessary")

        result = updater.update(_dependency(">= 2.0, < 3.0"), "2.1.2")

        assert result.status is UpdateStatus.UPDATED
        assert result.updated_dependency.requirements_changed is False

    def test_unchanged(self) -> None:
        result = DependencyUpdater().update(_dependency("^2.0"), "2.0.3")

        assert result.status is UpdateStatus.UNCHANGED
        assert result.updated_dependency is not None

    def test_unfixable(self) -> None:
        dependency = _dependency("> 2.5", "^2.0")

        result = DependencyUpdater().update(dependency, "2.1.0")

        assert result.status is UpdateStatus.UNFIXABLE
        assert not result.is_updatable
        assert result.updated_dependency is None
        assert result.reason == "requirement in file0.cabal excludes 2.1.0"

    @pytest.mark.parametrize("target", [None, "latest"])
    def test_skipped_without_valid_target(self, target: Any) -> None:
        result = DependencyUpdater().update(_dependency("1.0"), target)

        assert result.status is UpdateStatus.SKIPPED
        assert result.reason == "no valid target version"

    def test_skipped_with_multiple_sources(self) -> None:
        dependency = Dependency(
            name="aeson",
            package_manager="cabal",
            requirements=(
                {"requirement": "2.0", "file": "a", "groups": [], "source": GIT},
                {"requirement": "2.0", "file": "b", "groups": [], "source": None},
            ),
        )

        result = DependencyUpdater().update(dependency, "2.1")

        assert result.status is UpdateStatus.SKIPPED
        assert "multiple sources" in result.reason

    def test_unknown_package_manager(self) -> None:
        with pytest.raises(UnknownPackageManager):
            DependencyUpdater().update(Dependency("x", "npm"), "1.0")

    def test_keeps_existing_source(self) -> None:
        result = DependencyUpdater().update(_dependency("2.0.3", source=GIT), "2.1.0")

        assert result.updated_dependency.requirements[0].source == DependencySource.from_dict(GIT)

    def test_explicit_source(self) -> None:
        result = DependencyUpdater().update(
            _dependency("2.0.3", source=GIT), "2.1.0", updated_source=None
        )

        assert result.updated_dependency.requirements[0].source is None

    def test_unlocked_dependency(self) -> None:
        result = DependencyUpdater().update(_dependency("1.0", version=None), "1.0")

        assert result.status is UpdateStatus.UPDATED
        assert result.updated_dependency.version == "1.0"


@pytest.mark.unit
class TestUpdateAll:
    def test_only_targeted_in_input_order(self) -> None:
        deps = [
            _dependency("1.0", name="text"),
            _dependency("1.0", name="aeson"),
            _dependency("1.0", name="lens"),
        ]

        results = DependencyUpdater().update_all(deps, {"lens": "2.0", "text": "1.1"})

        assert [r.dependency.name for r in results] == ["text", "lens"]

    def test_target_names_are_canonicalised(self) -> None:
        deps = [_dependency("1.0", name="data_default")]

        [result] = DependencyUpdater().update_all(deps, {"Data-Default": "1.1"})

        assert result.updated_dependency.requirements[0].requirement == "1.1"

    def test_empty(self) -> None:
        assert DependencyUpdater().update_all([], {"a": "1.0"}) == []


@pytest.mark.unit
class TestUpdateResultJson:
    def test_updated(self) -> None:
        result = DependencyUpdater().update(_dependency("2.0.3"), "2.1.0")

        assert result.to_json() == {
            "name": "aeson",
            "status": "updated",
            "current_version": "2.0.3",
            "target_version": "2.1.0",
            "requirements": [
                {"previous": "2.0.3", "updated": "2.1.0", "file": "file0.cabal"}
            ],
        }

    def test_unfixable_has_reason(self) -> None:
        result = UpdateResult(
            dependency=_dependency("> 3.0"),
            status=UpdateStatus.UNFIXABLE,
            target_version="2.0",
            reason="requirement in file0.cabal excludes 2.0",
        )

        data = result.to_json()

        assert data["status"] == "unfixable"
        assert data["reason"].endswith("excludes 2.0")
        assert "requirements" not in data
        assert UNFIXABLE.value == data["status"]
