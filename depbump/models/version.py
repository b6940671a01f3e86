"""
Version data model for depbump.

A version is a dot-separated run of numeric release segments with an
optional pre-release tag after the first ``-`` and optional build
metadata after ``+``::

    1.2.3
    0.1.0.0
    2.0.0-pre4
    1.0.0-alpha.1+build.5

Release segments are ordered by :class:`packaging.version.Version`, so
missing trailing segments count as zero (``1.2 == 1.2.0``). Tags are
validated and ordered by :mod:`semantic_version` with semver precedence:
a pre-release sorts before the same release without one, and build
metadata is ignored. The original text is kept for display and for
rewriting requirements.
"""

from __future__ import annotations

import re
import functools
from typing import Any, Tuple, Union

import semantic_version
from packaging.version import Version as ReleaseVersion

from depbump.exceptions import InvalidVersion

_RELEASE = re.compile(r"^[0-9]+(?:\.[0-9]+)*$")

#: Stand-in release used to order pre-release tags on their own.
_TAG_BASE = "0.0.0"

PrereleasePart = Union[int, str]


def _tag_version(prerelease: str = "", build: str = "") -> semantic_version.Version:
    text = _TAG_BASE
    if prerelease:
        text += f"-{prerelease}"
    if build:
        text += f"+{build}"
    return semantic_version.Version(text)


@functools.total_ordering
class Version:
    """An immutable, ordered version identifier.

    Args:
        value: Version string (or an existing :class:`Version`).

    Raises:
        InvalidVersion: ``value`` is not a well-formed version.

    Example:
        >>> Version("2.0.0-pre4") < Version("2.0.0")
        True
        >>> Version("1.2").segments
        (1, 2)
    """

    __slots__ = ("_text", "_release", "_prerelease", "_key")

    def __init__(self, value: Union[str, "Version"]) -> None:
        if isinstance(value, Version):
            text, release = value._text, value._release
            prerelease, key = value._prerelease, value._key
        else:
            text, release, prerelease, key = self._parse(value)

        object.__setattr__(self, "_text", text)
        object.__setattr__(self, "_release", release)
        object.__setattr__(self, "_prerelease", prerelease)
        object.__setattr__(self, "_key", key)

    @staticmethod
    def _parse(value: Any):
        if not isinstance(value, str):
            raise InvalidVersion(value)

        text = value.strip()
        remainder, plus, build_text = text.partition("+")
        release_text, dash, pre_text = remainder.partition("-")

        if not _RELEASE.match(release_text):
            raise InvalidVersion(value)
        if (plus and not build_text) or (dash and not pre_text):
            raise InvalidVersion(value)

        try:
            tag = _tag_version(pre_text, build_text)
        except ValueError as exc:
            raise InvalidVersion(value) from exc

        release = tuple(int(segment) for segment in release_text.split("."))
        prerelease = tuple(
            int(part) if part.isdigit() else part for part in tag.prerelease
        )
        # Build metadata takes no part in ordering.
        key = (ReleaseVersion(release_text), _tag_version(pre_text))
        return text, release, prerelease, key

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def parse(cls, value: Union[str, "Version"]) -> "Version":
        """Parse ``value`` into a :class:`Version`."""
        return cls(value)

    @classmethod
    def correct(cls, value: Any) -> bool:
        """Return True if ``value`` parses as a version."""
        if isinstance(value, Version):
            return True
        try:
            cls._parse(value)
        except InvalidVersion:
            return False
        return True

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def segments(self) -> Tuple[int, ...]:
        """Numeric release segments, in order."""
        return self._release

    def segment(self, index: int) -> int:
        """Return release segment ``index``, or 0 past the end."""
        if index < len(self._release):
            return self._release[index]
        return 0

    @property
    def prerelease(self) -> Tuple[PrereleasePart, ...]:
        return self._prerelease

    @property
    def is_prerelease(self) -> bool:
        return bool(self._prerelease)

    @property
    def release_version(self) -> ReleaseVersion:
        """Release segments as a :class:`packaging.version.Version`."""
        return self._key[0]

    def release(self) -> "Version":
        """Return this version with pre-release and build tags dropped."""
        release_text = ".".join(str(segment) for segment in self._release)
        if release_text == self._text:
            return self
        return Version(release_text)

    # ------------------------------------------------------------------
    # Ordering
    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key == other._key

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key < other._key

    def __hash__(self) -> int:
        return hash(self._key)

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"Version({self._text!r})"


def compare(left: Union[str, Version], right: Union[str, Version]) -> int:
    """Three-way comparison: -1, 0 or 1."""
    a, b = Version(left), Version(right)
    if a < b:
        return -1
    if a > b:
        return 1
    return 0
