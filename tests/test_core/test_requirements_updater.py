"""Unit tests for depbump.core.requirements_updater module.

Test Coverage:
- Construction (strategy validation, target parsing, declaration shape)
- No-op behaviour without a usable target
- Exact pins, short forms and wildcards under ``bump_versions``
- Range repair and the unfixable outcome
- Lazy behaviour of ``bump_versions_if_necessary``
- Positional alignment and source stamping
- Independence of concurrent updaters
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

import pytest

from depbump.core.requirements_updater import (
    VERSION_PATTERN,
    RequirementsUpdater,
    UpdateStrategy,
)
from depbump.exceptions import MalformedDeclaration, UnknownUpdateStrategy
from depbump.models.dependency import DependencySource, RequirementDeclaration
from depbump.models.requirement import UNFIXABLE, Requirement
from depbump.models.version import Version

GIT_SOURCE = {"type": "git", "url": "https://github.com/haskell/aeson", "ref": "v2.2"}


def _declaration(
    requirement: Any,
    *,
    file: str = "cabal.project",
    source: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    return {
        "requirement": requirement,
        "file": file,
        "groups": ["dependencies"],
        "source": source,
    }


def _updater(
    requirements: List[Any],
    target_version: Any,
    strategy: Any = "bump_versions",
    updated_source: Any = None,
) -> RequirementsUpdater:
    return RequirementsUpdater(
        requirements=requirements,
        updated_source=updated_source,
        update_strategy=strategy,
        target_version=target_version,
    )


def _update_one(
    requirement: Any,
    target_version: Any,
    strategy: Any = "bump_versions",
) -> Any:
    updated = _updater([_declaration(requirement)], target_version, strategy)
    return updated.updated_requirements()[0].requirement


@pytest.mark.unit
class TestConstruction:
    """Tests for RequirementsUpdater.__init__."""

    @pytest.mark.parametrize("strategy", ["widen_ranges", "", None, 3])
    def test_unknown_strategy_raises(self, strategy: Any) -> None:
        with pytest.raises(UnknownUpdateStrategy):
            _updater([], "1.0.0", strategy)

    @pytest.mark.parametrize(
        "strategy",
        [
            "bump_versions",
            "bump_versions_if_necessary",
            UpdateStrategy.BUMP_VERSIONS,
            UpdateStrategy.BUMP_VERSIONS_IF_NECESSARY,
        ],
    )
    def test_known_strategies(self, strategy: Any) -> None:
        updater = _updater([], "1.0.0", strategy)
        assert isinstance(updater.update_strategy, UpdateStrategy)

    def test_target_version_parsed(self) -> None:
        assert _updater([], "1.2.3").target_version == Version("1.2.3")

    @pytest.mark.parametrize("target", [None, "", "latest", "1.x"])
    def test_unusable_target_is_dropped(self, target: Any) -> None:
        assert _updater([], target).target_version is None

    def test_malformed_declaration_raises(self) -> None:
        with pytest.raises(MalformedDeclaration):
            _updater([">= 1.0"], "1.0.0")

    def test_accepts_declaration_records(self) -> None:
        record = RequirementDeclaration(requirement="1.0", file="a.cabal")

        result = _updater([record], "1.1").updated_requirements()

        assert result[0].requirement == "1.1"


@pytest.mark.unit
class TestNoOpUpdates:
    """Cases that only replace the source."""

    @pytest.mark.parametrize("target", [None, "not-a-version"])
    def test_without_target_only_source_changes(self, target: Any) -> None:
        updater = _updater(
            [_declaration(">= 1.0, < 2.0")], target, updated_source=GIT_SOURCE
        )

        [result] = updater.updated_requirements()

        assert result.requirement == ">= 1.0, < 2.0"
        assert result.source == DependencySource.from_dict(GIT_SOURCE)

    @pytest.mark.parametrize("requirement", [None, "", "   "])
    def test_missing_requirement_unchanged(self, requirement: Any) -> None:
        assert _update_one(requirement, "2.0.0") == requirement

    def test_already_unfixable_passes_through(self) -> None:
        assert _update_one(UNFIXABLE, "2.0.0") is UNFIXABLE


@pytest.mark.unit
class TestBumpVersions:
    """Tests for the ``bump_versions`` strategy."""

    @pytest.mark.parametrize(
        "requirement,target,expected",
        [
            ("1.2.3", "1.3.0", "1.3.0"),
            ("1.2.3", "1.2.3", "1.2.3"),
            ("=1.2.3", "1.3.0", "=1.3.0"),
            ("== 1.2.3", "2.0.0", "== 2.0.0"),
            ("1.2", "1.5.3", "1.5"),
            ("0.1.0.0", "0.2.0.0", "0.2.0.0"),
            ("1.2.3, >= 1.0", "1.4.0", "1.4.0"),
            (">= 1.0, 1.2.3", "1.4.0", "1.4.0"),
        ],
    )
    def test_exact_pins(self, requirement: str, target: str, expected: str) -> None:
        assert _update_one(requirement, target) == expected

    @pytest.mark.parametrize(
        "requirement,target,expected",
        [
            ("~1.2", "1.5.0", "~1.5"),
            ("~1.2.3", "1.5.0", "~1.5.0"),
            ("^1.2.3", "2.0.1", "^2.0.1"),
            ("^1", "2.4.1", "^2"),
            ("1.*", "2.3.0", "2.*"),
            ("1.*.3", "1.5.9", "1.*.9"),
            ("1.2.*", "1.4.7", "1.4.*"),
            ("~1.2, < 2.0", "1.5.0", "~1.5"),
        ],
    )
    def test_short_forms(self, requirement: str, target: str, expected: str) -> None:
        assert _update_one(requirement, target) == expected

    def test_short_form_already_current_is_kept(self) -> None:
        assert _update_one("~1.2", "1.2.5") == "~1.2"
        assert _update_one("*", "3.0.0") == "*"

    def test_unchanged_short_form_falls_back_to_ranges(self) -> None:
        assert _update_one("~1.2, < 1.2.4", "1.2.5") == "~1.2, < 1.2.6"

    @pytest.mark.parametrize(
        "requirement,target",
        [
            ("~1.0.0-beta.1", "1.2.0"),
            ("1.0.0-pre1", "1.2.0"),
        ],
    )
    def test_prerelease_replaced_whole(self, requirement: str, target: str) -> None:
        op = requirement[0] if requirement[0] == "~" else ""
        assert _update_one(requirement, target) == f"{op}{target}"

    def test_prerelease_target_fills_exact_pin(self) -> None:
        assert _update_one("1.2.3", "2.0.0-pre4") == "2.0.0-pre4"

    @pytest.mark.parametrize(
        "requirement,target,expected",
        [
            ("1.2.3", "1.3.0-beta.1", "1.3.0-beta.1"),
            ("=1.2.3", "1.3.0-rc.2", "=1.3.0-rc.2"),
            ("~1.2.3", "1.3.0-rc.1", "~1.3.0-rc.1"),
            ("1.2.3.4", "1.3.0-beta.1", "1.3.0-beta.1"),
            ("1.2", "1.3.0-beta.1", "1.3"),
            ("1.*.3", "1.3.0-beta.1", "1.*.0"),
            ("1.2.3", "1.3.0+build.7", "1.3.0+build.7"),
        ],
    )
    def test_prerelease_target_tag_kept(
        self, requirement: str, target: str, expected: str
    ) -> None:
        assert _update_one(requirement, target) == expected

    def test_prerelease_target_satisfies_rewritten_pin(self) -> None:
        updated = _update_one("1.2.3", "1.3.0-beta.1")

        assert Requirement(updated).satisfied_by("1.3.0-beta.1")


@pytest.mark.unit
class TestRangeRequirements:
    """Tests for range repair."""

    def test_violated_upper_bound_moves_at_its_precision(self) -> None:
        assert _update_one(">= 1.0, < 2.0", "2.3.1") == ">= 1.0, < 3.0"

    @pytest.mark.parametrize(
        "requirement,target,expected",
        [
            ("< 2.0", "2.3.1", "< 3.0"),
            ("< 2", "5.1", "< 6"),
            ("< 1.2.0", "1.5.0", "< 1.6.0"),
            ("<= 1.2.0", "1.5.0", "<= 1.6.0"),
            ("< 0.1.0.0", "0.2.0.0", "< 0.3.0.0"),
            ("< 0.0.3", "0.1.2", "< 0.1.3"),
            ("< 0.0", "0.5", "< 1.0"),
            ("< 2.0.0-pre1", "2.3.1", "< 3.0.0"),
            ("< 1.5", "2.0.0-pre2", "< 2.1"),
        ],
    )
    def test_upper_bound_rewrites(self, requirement: str, target: str, expected: str) -> None:
        assert _update_one(requirement, target) == expected

    def test_satisfied_ranges_unchanged(self) -> None:
        assert _update_one(">= 1.0, < 2.0", "1.5.0") == ">= 1.0, < 2.0"

    def test_clause_separator_is_normalised(self) -> None:
        assert _update_one(">=1.0,<2.0", "2.1") == ">=1.0, <3.0"

    @pytest.mark.parametrize(
        "requirement,target",
        [
            ("> 2.0", "1.9.0"),
            (">= 2.0", "1.9.0"),
            (">= 2.0, < 3.0", "1.5"),
            ("< 3.0, > 2.0", "1.5"),
        ],
    )
    def test_violated_lower_bound_is_unfixable(self, requirement: str, target: str) -> None:
        assert _update_one(requirement, target) is UNFIXABLE

    def test_contradictory_result_is_unfixable(self) -> None:
        # "~1.2" does not move, and "~1.5" still excludes the target
        assert _update_one("~1.2, ~1.5", "1.2.5") is UNFIXABLE

    def test_unfixable_only_affects_its_declaration(self) -> None:
        updater = _updater(
            [_declaration("> 2.0"), _declaration("1.0", file="b.cabal")], "1.9.0"
        )

        first, second = updater.updated_requirements()

        assert first.requirement is UNFIXABLE
        assert first.is_unfixable
        assert second.requirement == "1.9"


@pytest.mark.unit
class TestBumpVersionsIfNecessary:
    """Tests for the lazy strategy."""

    STRATEGY = "bump_versions_if_necessary"

    @pytest.mark.parametrize(
        "requirement,target",
        [
            ("1.2.3", "1.2.3"),
            ("~1.2", "1.2.9"),
            ("^1.2", "1.9.0"),
            ("1.*", "1.7"),
            (">= 1.0, < 2.0", "1.5.0"),
            (">=1.0,<2.0", "1.5.0"),
            ("*", "9.9.9"),
        ],
    )
    def test_satisfied_requirements_untouched(self, requirement: str, target: str) -> None:
        assert _update_one(requirement, target, self.STRATEGY) == requirement

    @pytest.mark.parametrize(
        "requirement,target,expected",
        [
            ("1.2.3", "1.3.0", "1.3.0"),
            ("~1.2", "1.5.0", "~1.5"),
            ("^1.2", "2.1.0", "^2.1"),
            (">= 1.0, < 2.0", "2.3.1", ">= 1.0, < 3.0"),
        ],
    )
    def test_unsatisfied_requirements_rewritten(
        self, requirement: str, target: str, expected: str
    ) -> None:
        assert _update_one(requirement, target, self.STRATEGY) == expected

    def test_unsatisfied_lower_bound_unfixable(self) -> None:
        assert _update_one("> 2.0", "1.9.0", self.STRATEGY) is UNFIXABLE

    @pytest.mark.parametrize(
        "requirement",
        ["1.5.0", "~1.5", "^1.2", ">= 1.0, < 2.0", "1.*", "<= 1.5.0", "> 1.4"],
    )
    def test_idempotent_for_any_satisfying_requirement(self, requirement: str) -> None:
        target = "1.5.0"
        assert Requirement(requirement).satisfied_by(target)
        assert _update_one(requirement, target, self.STRATEGY) == requirement


@pytest.mark.unit
class TestUpdatedRequirements:
    """Tests for list-level behaviour."""

    def test_positional_alignment(self) -> None:
        requirements = [
            _declaration("1.0", file="a.cabal"),
            _declaration(None, file="b.cabal"),
            _declaration(">= 0.5, < 1.0", file="c.cabal"),
        ]

        result = _updater(requirements, "1.4.0").updated_requirements()

        assert [r.file for r in result] == ["a.cabal", "b.cabal", "c.cabal"]
        assert [r.requirement for r in result] == ["1.4", None, ">= 0.5, < 2.0"]

    def test_updated_source_applied_everywhere(self) -> None:
        requirements = [_declaration("1.0"), _declaration(None, file="b.cabal")]

        result = _updater(
            requirements, "1.1", updated_source=GIT_SOURCE
        ).updated_requirements()

        expected = DependencySource.from_dict(GIT_SOURCE)
        assert all(r.source == expected for r in result)

    def test_source_can_be_cleared(self) -> None:
        result = _updater(
            [_declaration("1.0", source=GIT_SOURCE)], "1.1", updated_source=None
        ).updated_requirements()

        assert result[0].source is None

    def test_groups_and_file_preserved(self) -> None:
        [result] = _updater([_declaration("1.0")], "1.1").updated_requirements()

        assert result.file == "cabal.project"
        assert result.groups == ("dependencies",)

    def test_inputs_not_mutated(self) -> None:
        declaration = _declaration("1.0")
        _updater([declaration], "2.0").updated_requirements()

        assert declaration["requirement"] == "1.0"

    def test_repeated_calls_are_stable(self) -> None:
        updater = _updater([_declaration("< 2.0")], "2.5")

        assert updater.updated_requirements() == updater.updated_requirements()

    def test_parallel_updaters_do_not_interfere(self) -> None:
        def run(index: int) -> Any:
            target = f"{index + 2}.1"
            updater = _updater([_declaration(">= 1.0, < 2.0")], target)
            return updater.updated_requirements()[0].requirement

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(run, range(40)))

        assert results == [f">= 1.0, < {i + 3}.0" for i in range(40)]


@pytest.mark.unit
class TestVersionPattern:
    @pytest.mark.parametrize(
        "text,expected",
        [
            (">= 1.2.3", "1.2.3"),
            ("~1.0.0-beta.1", "1.0.0-beta.1"),
            ("1.*.3", "1.*.3"),
            ("< 2.0+build", "2.0"),
        ],
    )
    def test_finds_version_run(self, text: str, expected: str) -> None:
        assert VERSION_PATTERN.search(text).group(0) == expected
