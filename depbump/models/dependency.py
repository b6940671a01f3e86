"""
Dependency data models for depbump.

This module defines the records that flow between a manifest parser, the
requirements updater and whatever writes files back:

- :class:`DependencySource` — where a dependency comes from (git, path)
- :class:`RequirementDeclaration` — one declared requirement, tied to a
  file and dependency groups
- :class:`Dependency` — a named dependency with its ordered declarations
- :class:`DependencySet` — dependencies keyed by package manager and name,
  merging repeated declarations

All records are immutable. An updated dependency is a new
:class:`Dependency` that remembers its previous state.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import (
    Any,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Tuple,
    Union,
)

from packaging.utils import canonicalize_name

from depbump.exceptions import MalformedDeclaration
from depbump.models.requirement import Unfixable

RequirementValue = Union[str, Unfixable]


@dataclass(frozen=True)
class DependencySource:
    """Non-registry origin of a dependency.

    Attributes:
        type: ``"git"`` or ``"path"``.
        url: Repository URL for git sources.
        branch: Branch name, if pinned to one.
        ref: Tag or revision, if pinned to one.
    """

    type: str
    url: Optional[str] = None
    branch: Optional[str] = None
    ref: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional["DependencySource"]:
        if data is None:
            return None
        if isinstance(data, DependencySource):
            return data
        if not isinstance(data, Mapping) or not isinstance(data.get("type"), str):
            raise MalformedDeclaration(data)
        return cls(
            type=data["type"],
            url=data.get("url"),
            branch=data.get("branch"),
            ref=data.get("ref"),
        )

    def to_dict(self) -> Dict[str, Optional[str]]:
        return dataclasses.asdict(self)


@dataclass(frozen=True)
class RequirementDeclaration:
    """A single requirement as declared in one file.

    Attributes:
        requirement: Constraint string, ``None`` when the declaration has no
            version constraint, or :data:`~depbump.models.requirement.UNFIXABLE`
            after an update that could not be expressed.
        file: Name of the file declaring it.
        groups: Dependency groups (e.g. ``"dependencies"``).
        source: Git/path origin, or ``None`` for the default registry.
    """

    requirement: Optional[RequirementValue]
    file: str
    groups: Tuple[str, ...] = ()
    source: Optional[DependencySource] = None

    def __post_init__(self) -> None:
        if not isinstance(self.groups, tuple):
            object.__setattr__(self, "groups", tuple(self.groups))

    @classmethod
    def from_dict(cls, data: Any) -> "RequirementDeclaration":
        """Build a declaration from a ``{requirement, file, groups, source}``
        mapping.

        Raises:
            MalformedDeclaration: ``data`` does not have that shape.
        """
        if isinstance(data, RequirementDeclaration):
            return data
        if not isinstance(data, Mapping):
            raise MalformedDeclaration(data)

        requirement = data.get("requirement")
        file_name = data.get("file")
        groups = data.get("groups") or ()

        if requirement is not None and not isinstance(requirement, (str, Unfixable)):
            raise MalformedDeclaration(data)
        if not isinstance(file_name, str):
            raise MalformedDeclaration(data)
        if isinstance(groups, str) or not all(isinstance(g, str) for g in groups):
            raise MalformedDeclaration(data, file_path=file_name)

        return cls(
            requirement=requirement,
            file=file_name,
            groups=tuple(groups),
            source=DependencySource.from_dict(data.get("source")),
        )

    @property
    def is_unfixable(self) -> bool:
        return isinstance(self.requirement, Unfixable)

    def replace(self, **changes: Any) -> "RequirementDeclaration":
        """Return a copy with ``changes`` applied."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        requirement = self.requirement
        if isinstance(requirement, Unfixable):
            requirement = requirement.value
        return {
            "requirement": requirement,
            "file": self.file,
            "groups": list(self.groups),
            "source": self.source.to_dict() if self.source else None,
        }


def _as_declarations(
    requirements: Iterable[Union[RequirementDeclaration, Mapping[str, Any]]],
) -> Tuple[RequirementDeclaration, ...]:
    return tuple(RequirementDeclaration.from_dict(req) for req in requirements)


@dataclass(frozen=True)
class Dependency:
    """A dependency of one package manager, with its declarations.

    Attributes:
        name: Dependency name as written in the manifest.
        package_manager: Package manager tag (e.g. ``"cabal"``).
        version: Resolved version from a lock/freeze file, if any.
        requirements: Ordered requirement declarations. Empty for
            dependencies only present in a lock/freeze file.
        previous_version: Version before an update, if this is an
            updated dependency.
        previous_requirements: Declarations before an update.
    """

    name: str
    package_manager: str
    version: Optional[str] = None
    requirements: Tuple[RequirementDeclaration, ...] = ()
    previous_version: Optional[str] = None
    previous_requirements: Optional[Tuple[RequirementDeclaration, ...]] = field(
        default=None, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "requirements", _as_declarations(self.requirements))
        if self.previous_requirements is not None:
            object.__setattr__(
                self,
                "previous_requirements",
                _as_declarations(self.previous_requirements),
            )

    # ------------------------------------------------------------------
    # Derived properties
    # ------------------------------------------------------------------

    @property
    def canonical_name(self) -> str:
        """Case- and separator-insensitive name used as the set key."""
        return canonicalize_name(self.name)

    @property
    def top_level(self) -> bool:
        """True for direct manifest dependencies."""
        return bool(self.requirements)

    @property
    def sources(self) -> List[Optional[DependencySource]]:
        """Distinct declaration sources, in declaration order."""
        seen: List[Optional[DependencySource]] = []
        for req in self.requirements:
            if req.source not in seen:
                seen.append(req.source)
        return seen

    @property
    def has_multiple_sources(self) -> bool:
        return len(self.sources) > 1

    @property
    def groups(self) -> List[str]:
        groups: List[str] = []
        for req in self.requirements:
            groups.extend(g for g in req.groups if g not in groups)
        return groups

    def is_production(self) -> bool:
        """Ask the package manager whether this is a production dependency."""
        from depbump.core.registry import get_package_manager

        spec = get_package_manager(self.package_manager)
        return spec.production_check(self.groups)

    # ------------------------------------------------------------------
    # Update helpers
    # ------------------------------------------------------------------

    def updated(
        self,
        *,
        version: Optional[str],
        requirements: Iterable[RequirementDeclaration],
    ) -> "Dependency":
        """Return the updated form of this dependency.

        The returned value records this dependency's version and
        declarations as ``previous_version`` / ``previous_requirements``.
        """
        return Dependency(
            name=self.name,
            package_manager=self.package_manager,
            version=version,
            requirements=tuple(requirements),
            previous_version=self.version,
            previous_requirements=self.requirements,
        )

    @property
    def requirements_changed(self) -> bool:
        if self.previous_requirements is None:
            return False
        return self.requirements != self.previous_requirements

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Dependency":
        if not isinstance(data, Mapping) or not isinstance(data.get("name"), str):
            raise MalformedDeclaration(data)
        return cls(
            name=data["name"],
            package_manager=data.get("package_manager", ""),
            version=data.get("version"),
            requirements=_as_declarations(data.get("requirements") or ()),
        )

    def to_dict(self) -> Dict[str, Any]:
        entry: Dict[str, Any] = {
            "name": self.name,
            "package_manager": self.package_manager,
            "version": self.version,
            "requirements": [req.to_dict() for req in self.requirements],
        }
        if self.previous_requirements is not None:
            entry["previous_version"] = self.previous_version
            entry["previous_requirements"] = [
                req.to_dict() for req in self.previous_requirements
            ]
        return entry

    def __str__(self) -> str:
        if self.version:
            return f"{self.name} {self.version}"
        return self.name


def _combined(existing: Dependency, new: Dependency) -> Dependency:
    """Merge two records for the same dependency.

    A top-level record keeps its own version when it has one: the manifest
    parser resolves it against the lock file using the declared
    requirement, which is more precise than a bare lock entry.
    """
    if existing.top_level and existing.version is not None:
        version = existing.version
    else:
        version = new.version if new.version is not None else existing.version

    requirements = list(existing.requirements)
    requirements.extend(r for r in new.requirements if r not in requirements)

    return Dependency(
        name=existing.name,
        package_manager=existing.package_manager,
        version=version,
        requirements=tuple(requirements),
    )


class DependencySet:
    """Ordered collection of unique dependencies.

    Dependencies are keyed by ``(package_manager, canonical name)``. Adding
    a dependency that is already present merges the two records.

    Example:
        >>> deps = DependencySet()
        >>> deps.add(Dependency(name="aeson", package_manager="cabal"))
        >>> "aeson" in deps
        True
    """

    def __init__(self, dependencies: Iterable[Dependency] = ()) -> None:
        self._dependencies: Dict[Tuple[str, str], Dependency] = {}
        for dependency in dependencies:
            self.add(dependency)

    @staticmethod
    def _key(dependency: Dependency) -> Tuple[str, str]:
        return dependency.package_manager, dependency.canonical_name

    def add(self, dependency: Dependency) -> None:
        """Add ``dependency``, merging with any existing record."""
        if not isinstance(dependency, Dependency):
            raise TypeError(f"Expected Dependency, got {type(dependency).__name__}")

        key = self._key(dependency)
        existing = self._dependencies.get(key)
        self._dependencies[key] = (
            _combined(existing, dependency) if existing else dependency
        )

    def extend(self, dependencies: Iterable[Dependency]) -> None:
        for dependency in dependencies:
            self.add(dependency)

    def get(
        self,
        name: str,
        package_manager: Optional[str] = None,
    ) -> Optional[Dependency]:
        """Look up a dependency by name (any package manager if omitted)."""
        canonical = canonicalize_name(name)
        for (manager, key), dependency in self._dependencies.items():
            if key == canonical and package_manager in (None, manager):
                return dependency
        return None

    @property
    def dependencies(self) -> List[Dependency]:
        return list(self._dependencies.values())

    def __add__(self, other: Union["DependencySet", Iterable[Dependency]]) -> "DependencySet":
        combined = DependencySet(self)
        combined.extend(other)
        return combined

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def __iter__(self) -> Iterator[Dependency]:
        return iter(self.dependencies)

    def __len__(self) -> int:
        return len(self._dependencies)

    def __repr__(self) -> str:
        names = ", ".join(dep.name for dep in self)
        return f"DependencySet([{names}])"
