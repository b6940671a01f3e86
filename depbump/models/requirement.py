"""
Requirement (version constraint) data model for depbump.

A requirement is one or more comma-separated clauses, all of which must
hold (AND semantics). Each clause is parsed into one of a small set of
typed variants:

====================  ===================  ===================================
Form                  Clause type          Meaning
====================  ===================  ===================================
``1.2.3`` ``=1.2.3``  :class:`ExactClause`  exactly that version
``1.*`` ``1.*.3``     :class:`WildcardClause`  ``*`` segments match anything
``^1.2.3``            :class:`CaretClause`  up to the next significant bump
``~1.2.3``            :class:`TildeClause`  up to the next minor (or major)
``>= 1.0`` ``< 2``    :class:`ComparisonClause`  ordinary comparison
====================  ===================  ===================================

Whitespace between an operator and its version is allowed and preserved
in the clause text, so ``str(Requirement(x)) == x`` for any single clause
without surrounding whitespace.
"""

from __future__ import annotations

import re
import enum
import operator
from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence, Tuple, Union

from packaging.specifiers import Specifier

from depbump.exceptions import InvalidRequirement, InvalidVersion
from depbump.models.version import Version

VersionLike = Union[str, Version]

# Longest operators first so ">=" is not read as ">".
_OPERATOR = re.compile(r"^(>=|<=|==|=|>|<|\^|~)?\s*(.*)$", re.DOTALL)
_WILDCARD_PART = re.compile(r"^(?:[0-9]+|\*)$")

_COMPARATORS: Dict[str, Callable[[Version, Version], bool]] = {
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
}

_SHORT_FORM = re.compile(r"^[\d~^]")
_RANGE_OPERATOR = re.compile(r"[<>]")


class Unfixable(enum.Enum):
    """Marker for a requirement that no minimal rewrite can fix."""

    UNFIXABLE = "unfixable"

    def __repr__(self) -> str:
        return "UNFIXABLE"


#: Returned in place of a requirement string when a bound cannot be moved.
UNFIXABLE = Unfixable.UNFIXABLE


def _as_version(value: VersionLike) -> Version:
    return value if isinstance(value, Version) else Version(value)


def _bumped(segments: Sequence[int], index: int) -> Version:
    """Version with ``segments[:index]`` kept and ``segments[index]`` + 1."""
    head = list(segments[:index]) + [segments[index] + 1]
    return Version(".".join(str(segment) for segment in head))


# ---------------------------------------------------------------------------
# Clause variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExactClause:
    """Pins exactly one version (``1.2.3``, ``=1.2.3`` or ``==1.2.3``)."""

    text: str
    op: str
    version: Version

    kind = "exact"

    def satisfied_by(self, version: Version) -> bool:
        return version == self.version

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class WildcardClause:
    """Matches versions whose non-``*`` segments equal the pattern's."""

    text: str
    parts: Tuple[str, ...]

    kind = "wildcard"

    def specifier_for(self, version: Version) -> Specifier:
        """Prefix specifier with each ``*`` filled from ``version``."""
        filled = ".".join(
            str(version.segment(index)) if part == "*" else str(int(part))
            for index, part in enumerate(self.parts)
        )
        return Specifier(f"=={filled}.*")

    def satisfied_by(self, version: Version) -> bool:
        return self.specifier_for(version).contains(
            version.release_version, prereleases=True
        )

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class CaretClause:
    """``^x.y.z``: at least the version, below the next bump of its first
    non-zero segment (``^1.2`` is ``>=1.2, <2``; ``^0.2.3`` is
    ``>=0.2.3, <0.3``; ``^0.0`` is ``>=0.0, <0.1``)."""

    text: str
    version: Version

    kind = "caret"

    @property
    def upper(self) -> Version:
        segments = self.version.segments
        index = next(
            (i for i, segment in enumerate(segments) if segment != 0),
            len(segments) - 1,
        )
        return _bumped(segments, index)

    def satisfied_by(self, version: Version) -> bool:
        return self.version <= version and version.release() < self.upper

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class TildeClause:
    """``~x.y.z``: at least the version, below the next minor release
    (``~1`` allows anything below ``2``)."""

    text: str
    version: Version

    kind = "tilde"

    @property
    def upper(self) -> Version:
        segments = self.version.segments
        return _bumped(segments, 1 if len(segments) > 1 else 0)

    def satisfied_by(self, version: Version) -> bool:
        return self.version <= version and version.release() < self.upper

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class ComparisonClause:
    """``<``, ``<=``, ``>`` or ``>=`` against a single version."""

    text: str
    op: str
    version: Version

    kind = "comparison"

    @property
    def is_lower_bound(self) -> bool:
        return self.op in (">", ">=")

    def satisfied_by(self, version: Version) -> bool:
        return _COMPARATORS[self.op](version, self.version)

    def __str__(self) -> str:
        return self.text


Clause = Union[ExactClause, WildcardClause, CaretClause, TildeClause, ComparisonClause]


def parse_clause(text: str) -> Clause:
    """Parse a single (already stripped) clause.

    Raises:
        InvalidRequirement: The clause is empty, uses an unknown operator,
            or carries a malformed version.
    """
    if not text:
        raise InvalidRequirement(text, reason="empty clause")

    match = _OPERATOR.match(text)
    op, rest = match.group(1) or "", match.group(2)

    if "*" in rest:
        parts = tuple(rest.split("."))
        if op or not all(_WILDCARD_PART.match(part) for part in parts):
            raise InvalidRequirement(text, reason="invalid wildcard")
        return WildcardClause(text=text, parts=parts)

    try:
        version = Version(rest)
    except InvalidVersion as exc:
        raise InvalidRequirement(text, reason=f"invalid version {rest!r}") from exc

    if op in ("", "=", "=="):
        return ExactClause(text=text, op=op, version=version)
    if op == "^":
        return CaretClause(text=text, version=version)
    if op == "~":
        return TildeClause(text=text, version=version)
    return ComparisonClause(text=text, op=op, version=version)


def split_clauses(requirement: str) -> List[str]:
    """Split a requirement string on ``,`` and strip each clause."""
    return [clause.strip() for clause in requirement.split(",")]


def is_short_form(clause: str) -> bool:
    """True for single-version-anchored clauses (``1.2``, ``~1``, ``^1``,
    anything containing ``*``)."""
    return "*" in clause or bool(_SHORT_FORM.match(clause))


def is_range(clause: str) -> bool:
    """True for clauses using a ``<``/``>`` comparison."""
    return bool(_RANGE_OPERATOR.search(clause))


class Requirement:
    """An immutable, parsed version requirement.

    Args:
        requirement: Constraint string such as ``">= 1.0, < 2.0"``.

    Raises:
        InvalidRequirement: Any clause fails to parse.

    Example:
        >>> req = Requirement(">= 1.0, < 2.0")
        >>> req.satisfied_by("1.5.0")
        True
        >>> str(req)
        '>= 1.0, < 2.0'
    """

    __slots__ = ("_clauses",)

    def __init__(self, requirement: str) -> None:
        if not isinstance(requirement, str):
            raise InvalidRequirement(requirement, reason="not a string")
        clauses = tuple(parse_clause(text) for text in split_clauses(requirement))
        object.__setattr__(self, "_clauses", clauses)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    @classmethod
    def parse(cls, requirement: str) -> "Requirement":
        return cls(requirement)

    @property
    def clauses(self) -> Tuple[Clause, ...]:
        return self._clauses

    @property
    def is_exact(self) -> bool:
        """True iff the requirement admits exactly one version."""
        return len(self._clauses) == 1 and isinstance(self._clauses[0], ExactClause)

    def satisfied_by(self, version: VersionLike) -> bool:
        """True iff ``version`` meets every clause."""
        parsed = _as_version(version)
        return all(clause.satisfied_by(parsed) for clause in self._clauses)

    def __contains__(self, version: VersionLike) -> bool:
        return self.satisfied_by(version)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Requirement):
            return NotImplemented
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(str(self))

    def __str__(self) -> str:
        return ", ".join(clause.text for clause in self._clauses)

    def __repr__(self) -> str:
        return f"Requirement({str(self)!r})"
