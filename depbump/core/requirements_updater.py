"""
Requirement rewriting for a single dependency.

Given the ordered requirement declarations of one dependency and the
version it should be moved to, :class:`RequirementsUpdater` produces the
new declarations. Rewrites keep the *shape* of each requirement:

- an exact pin is replaced by the new version (``1.2.3`` -> ``1.3.0``)
- a short form keeps its precision and wildcards (``~1.2`` -> ``~1.5``,
  ``1.*.3`` -> ``1.*.9``)
- a violated upper bound is moved just far enough, at the bound's own
  precision (``< 2.0`` -> ``< 3.0`` for ``2.3.1``)
- a violated lower bound cannot be fixed and yields
  :data:`~depbump.models.requirement.UNFIXABLE`

The output list lines up index-for-index with the input so that a file
updater can map each result back to its original location.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from depbump.exceptions import UnknownUpdateStrategy
from depbump.models.version import Version
from depbump.models.requirement import (
    UNFIXABLE,
    Requirement,
    is_range,
    is_short_form,
    split_clauses,
)
from depbump.models.dependency import (
    DependencySource,
    RequirementDeclaration,
    RequirementValue,
)
from depbump.utils.logger import get_logger

logger = get_logger("core.requirements_updater")

#: First version-number run inside a clause (wildcards and tags included).
VERSION_PATTERN = re.compile(r"[0-9]+(?:\.[A-Za-z0-9\-*]+)*")

_PRERELEASE_MARKER = re.compile(r"\d-")
_TAG_START = re.compile(r"[-+]")


class UpdateStrategy(str, Enum):
    """How eagerly requirements are rewritten."""

    #: Always rewrite requirements to point at the target version.
    BUMP_VERSIONS = "bump_versions"

    #: Only rewrite requirements the target version does not satisfy.
    BUMP_VERSIONS_IF_NECESSARY = "bump_versions_if_necessary"

    @classmethod
    def coerce(cls, value: Any) -> "UpdateStrategy":
        """Return the strategy named by ``value``.

        Raises:
            UnknownUpdateStrategy: ``value`` names no strategy.
        """
        try:
            return cls(value)
        except (ValueError, TypeError) as exc:
            raise UnknownUpdateStrategy(value) from exc


DeclarationLike = Union[RequirementDeclaration, Mapping[str, Any]]


class RequirementsUpdater:
    """Compute updated requirement declarations for one dependency.

    Args:
        requirements: Ordered declarations (records or
            ``{requirement, file, groups, source}`` mappings).
        updated_source: Source stamped onto every returned declaration.
        update_strategy: A :class:`UpdateStrategy` or its value.
        target_version: Version to permit. ``None`` or an unparseable value
            turns the updater into a no-op that only replaces sources.

    Raises:
        UnknownUpdateStrategy: ``update_strategy`` is not supported.
        MalformedDeclaration: A declaration does not have the expected shape.
    """

    version_class = Version
    requirement_class = Requirement

    def __init__(
        self,
        *,
        requirements: Iterable[DeclarationLike],
        updated_source: Optional[Union[DependencySource, Mapping[str, Any]]],
        update_strategy: Union[UpdateStrategy, str],
        target_version: Optional[Union[str, Version]],
    ) -> None:
        self._update_strategy = UpdateStrategy.coerce(update_strategy)
        self._requirements: Tuple[RequirementDeclaration, ...] = tuple(
            RequirementDeclaration.from_dict(req) for req in requirements
        )
        self._updated_source = DependencySource.from_dict(updated_source)
        self._target_version: Optional[Version] = None

        if target_version is None:
            return
        if not self.version_class.correct(target_version):
            logger.debug("Ignoring unparseable target version %r", target_version)
            return
        self._target_version = self.version_class(target_version)

    @property
    def update_strategy(self) -> UpdateStrategy:
        return self._update_strategy

    @property
    def target_version(self) -> Optional[Version]:
        return self._target_version

    def updated_requirements(self) -> List[RequirementDeclaration]:
        """Return one updated declaration per input declaration, in order.

        A declaration whose requirement cannot be rewritten carries
        :data:`~depbump.models.requirement.UNFIXABLE` as its requirement.
        """
        updated: List[RequirementDeclaration] = []

        for req in self._requirements:
            req = req.replace(source=self._updated_source)
            requirement = req.requirement

            if self._target_version is None:
                updated.append(req)
                continue
            if not isinstance(requirement, str) or not requirement.strip():
                updated.append(req)
                continue

            if self._update_strategy is UpdateStrategy.BUMP_VERSIONS_IF_NECESSARY:
                new_requirement = self._update_requirement_if_needed(requirement)
            else:
                new_requirement = self._update_requirement(requirement)

            if new_requirement != requirement:
                logger.debug(
                    "%s: %r -> %r", req.file, requirement, new_requirement
                )
            updated.append(req.replace(requirement=new_requirement))

        return updated

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    def _update_requirement_if_needed(self, requirement: str) -> RequirementValue:
        clauses = split_clauses(requirement)
        if all(
            self.requirement_class(clause).satisfied_by(self._target_version)
            for clause in clauses
        ):
            return requirement
        return self._update_requirement(requirement)

    def _update_requirement(self, requirement: str) -> RequirementValue:
        clauses = split_clauses(requirement)

        # An exact pin dominates every other clause.
        exact = self._exact_clause(clauses)
        if exact is not None:
            return self._update_version_string(exact)

        # So does a short form that actually moves.
        short_form = next((c for c in clauses if is_short_form(c)), None)
        if short_form is not None:
            rewritten = self._update_version_string(short_form)
            if rewritten != short_form:
                return rewritten

        return self._update_range_requirements(clauses)

    def _exact_clause(self, clauses: List[str]) -> Optional[str]:
        for clause in clauses:
            if self.requirement_class(clause).is_exact:
                return clause
        return None

    # ------------------------------------------------------------------
    # Rewrites
    # ------------------------------------------------------------------

    def _update_version_string(self, clause: str) -> str:
        """Substitute the target version into ``clause``.

        The clause keeps as many segments as it had, and ``*`` segments
        stay wildcards. Pre-release versions are replaced whole. A
        target's pre-release tag is kept when every release segment of
        the target survives, so ``1.2.3`` becomes ``1.3.0-beta.1`` rather
        than the release ``1.3.0``.
        """
        target = str(self._target_version)
        release_text = _TAG_START.split(target, maxsplit=1)[0]
        suffix = target[len(release_text):]
        release_parts = release_text.split(".")

        def substitute(match: "re.Match[str]") -> str:
            old_version = match.group(0)
            if _PRERELEASE_MARKER.search(old_version):
                return target

            old_parts = old_version.split(".")
            new_version = ".".join(
                "*" if old_parts[index] == "*" else part
                for index, part in enumerate(release_parts[: len(old_parts)])
            )
            if len(old_parts) >= len(release_parts) and "*" not in old_parts:
                new_version += suffix
            return new_version

        return VERSION_PATTERN.sub(substitute, clause, count=1)

    def _update_range_requirements(self, clauses: List[str]) -> RequirementValue:
        updated: List[str] = []

        for clause in clauses:
            if not is_range(clause) or self.requirement_class(clause).satisfied_by(
                self._target_version
            ):
                updated.append(clause)
                continue

            if clause.startswith(">"):
                logger.info(
                    "Lower bound %r excludes %s; cannot update",
                    clause,
                    self._target_version,
                )
                return UNFIXABLE

            updated.append(
                VERSION_PATTERN.sub(
                    lambda match: self._greatest_version(match.group(0)),
                    clause,
                    count=1,
                )
            )

        new_requirement = ", ".join(updated)
        if not self.requirement_class(new_requirement).satisfied_by(self._target_version):
            logger.warning(
                "Rewritten requirement %r still excludes %s; cannot update",
                new_requirement,
                self._target_version,
            )
            return UNFIXABLE

        return new_requirement

    def _greatest_version(self, old_version: str) -> str:
        """Smallest bound above the target at ``old_version``'s precision.

        The last non-zero segment of the old bound sets the precision:
        segments before it follow the target, that segment is the
        target's plus one, and the rest are zero.
        """
        version = self.version_class(old_version)
        if version.is_prerelease:
            version = version.release()

        segments = version.segments
        index_to_update = max(
            (index for index, segment in enumerate(segments) if segment != 0),
            default=0,
        )

        target = self._target_version
        new_segments = []
        for index in range(len(segments)):
            if index < index_to_update:
                new_segments.append(target.segment(index))
            elif index == index_to_update:
                new_segments.append(target.segment(index) + 1)
            else:
                new_segments.append(0)

        return ".".join(str(segment) for segment in new_segments)
