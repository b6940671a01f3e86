"""
Manifest declaration interpretation for depbump.

Turns already-decoded manifest tables (the kind produced by loading a
``cabal.project``-style or ``Cargo.toml``-style document) into a
:class:`~depbump.models.DependencySet`. No file text is parsed here.

A declaration is either a bare requirement string::

    aeson = "^2.1"

or a table::

    aeson = { version = "2.1", package = "aeson" }
    lens = { git = "https://github.com/ekmett/lens", tag = "v5.2" }
    local = { path = "../local" }

Lock/freeze data is a table with a ``package`` list of
``{name, version, source}`` entries.
"""

from __future__ import annotations

from typing import Any, Iterator, List, Mapping, Optional, Set, Tuple

from depbump.constants import (
    DEFAULT_PACKAGE_MANAGER,
    DEPENDENCY_GROUPS,
    GIT_SOURCE_PREFIX,
    TARGET_TABLE,
)
from depbump.exceptions import MalformedDeclaration
from depbump.models.dependency import (
    Dependency,
    DependencySet,
    DependencySource,
    RequirementDeclaration,
)
from depbump.core.registry import get_package_manager
from depbump.utils.logger import get_logger

logger = get_logger("core.manifest")


def _check_shape(declaration: Any, file_path: Optional[str]) -> None:
    if not isinstance(declaration, (str, Mapping)):
        raise MalformedDeclaration(declaration, file_path=file_path)


def requirement_from_declaration(
    declaration: Any,
    *,
    file_path: Optional[str] = None,
) -> Optional[str]:
    """Return the requirement string of a declaration, if it has one.

    Raises:
        MalformedDeclaration: ``declaration`` is neither a string nor a table.
    """
    _check_shape(declaration, file_path)

    if isinstance(declaration, str):
        return declaration or None

    version = declaration.get("version")
    if isinstance(version, str) and version:
        return version
    return None


def name_from_declaration(
    name: str,
    declaration: Any,
    *,
    file_path: Optional[str] = None,
) -> str:
    """Return the real package name (tables may rename via ``package``)."""
    _check_shape(declaration, file_path)

    if isinstance(declaration, str):
        return name
    return declaration.get("package", name)


def source_from_declaration(
    declaration: Any,
    *,
    file_path: Optional[str] = None,
) -> Optional[DependencySource]:
    """Return the git/path source of a declaration, or ``None``."""
    _check_shape(declaration, file_path)

    if isinstance(declaration, str):
        return None
    if declaration.get("git"):
        return DependencySource(
            type="git",
            url=declaration["git"],
            branch=declaration.get("branch"),
            ref=declaration.get("tag") or declaration.get("rev"),
        )
    if declaration.get("path"):
        return DependencySource(type="path")
    return None


def _is_git_declaration(declaration: Any) -> bool:
    source = source_from_declaration(declaration)
    return source is not None and source.type == "git"


def _is_git_package(package: Mapping[str, Any]) -> bool:
    source = package.get("source")
    return isinstance(source, str) and source.startswith(GIT_SOURCE_PREFIX)


def _locked_package_version(package: Mapping[str, Any]) -> Optional[str]:
    """Version string of a lock entry; git entries report their revision."""
    if _is_git_package(package):
        return package["source"].split("#")[-1]
    return package.get("version")


def locked_version(
    name: str,
    declaration: Any,
    locked_packages: List[Mapping[str, Any]],
    *,
    package_manager: str = DEFAULT_PACKAGE_MANAGER,
) -> Optional[str]:
    """Pick the locked version that backs a manifest declaration.

    Candidates are lock entries with the same name that satisfy the
    declared requirement (if any) and whose git-ness matches the
    declaration's. The highest candidate wins.
    """
    spec = get_package_manager(package_manager)

    candidates = [p for p in locked_packages if p.get("name") == name]

    requirement = requirement_from_declaration(declaration)
    if requirement is not None:
        parsed = spec.requirement_class(requirement)
        candidates = [
            p for p in candidates
            if parsed.satisfied_by(spec.version_class(p["version"]))
        ]

    wants_git = _is_git_declaration(declaration)
    candidates = [p for p in candidates if _is_git_package(p) == wants_git]

    if not candidates:
        return None

    package = max(candidates, key=lambda p: spec.version_class(p["version"]))
    return _locked_package_version(package)


def _group_entries(
    table: Mapping[str, Any],
    group: str,
    file_name: str,
) -> Iterator[Tuple[str, Any]]:
    """Yield ``(name, declaration)`` for a group, including target tables."""
    targets = table.get(TARGET_TABLE, {})
    if not isinstance(targets, Mapping):
        raise MalformedDeclaration(targets, file_path=file_name)

    tables = [table.get(group, {})]
    for target_details in targets.values():
        if not isinstance(target_details, Mapping):
            raise MalformedDeclaration(target_details, file_path=file_name)
        tables.append(target_details.get(group, {}))

    for entries in tables:
        if not isinstance(entries, Mapping):
            raise MalformedDeclaration(entries, file_path=file_name)
        yield from entries.items()


def _patched_names(
    manifests: Mapping[str, Mapping[str, Any]], root_manifest: str
) -> Set[str]:
    """Names listed under the root manifest's ``patch`` tables."""
    root = manifests.get(root_manifest)
    if not isinstance(root, Mapping):
        return set()

    names: Set[str] = set()
    for patches in root.get("patch", {}).values():
        names.update(patches)
    return names


def parse_manifests(
    manifests: Mapping[str, Mapping[str, Any]],
    freeze: Optional[Mapping[str, Any]] = None,
    *,
    package_manager: str = DEFAULT_PACKAGE_MANAGER,
) -> DependencySet:
    """Build the dependency set for a project.

    Args:
        manifests: Decoded manifest tables keyed by file name.
        freeze: Decoded lock/freeze table, if the project has one.
        package_manager: Package manager tag stamped on every dependency.

    Returns:
        Dependencies in manifest order followed by lock-only entries.
        Dependencies patched in the root manifest and dependencies declared
        with more than one source are left out.

    Raises:
        MalformedDeclaration: A declaration or dependency table has an
            unexpected shape.
    """
    spec = get_package_manager(package_manager)

    locked: List[Mapping[str, Any]] = list((freeze or {}).get("package", []))
    dependency_set = DependencySet()

    for file_name, table in manifests.items():
        if not isinstance(table, Mapping):
            raise MalformedDeclaration(table, file_path=file_name)

        for group in DEPENDENCY_GROUPS:
            for name, declaration in _group_entries(table, group, file_name):
                if name != name_from_declaration(name, declaration, file_path=file_name):
                    logger.debug("Skipping renamed dependency %s in %s", name, file_name)
                    continue

                version = None
                if freeze is not None:
                    version = locked_version(
                        name, declaration, locked, package_manager=package_manager
                    )
                    if version is None:
                        logger.debug("No locked version for %s; skipping", name)
                        continue

                dependency_set.add(
                    Dependency(
                        name=name,
                        package_manager=package_manager,
                        version=version,
                        requirements=(
                            RequirementDeclaration(
                                requirement=requirement_from_declaration(
                                    declaration, file_path=file_name
                                ),
                                file=file_name,
                                groups=(group,),
                                source=source_from_declaration(
                                    declaration, file_path=file_name
                                ),
                            ),
                        ),
                    )
                )

    # TODO: a freeze file can lock several versions of one package; the
    # merge below keeps a single version per name.
    for package in locked:
        if not package.get("source"):
            continue
        dependency_set.add(
            Dependency(
                name=package["name"],
                package_manager=package_manager,
                version=_locked_package_version(package),
            )
        )

    patched = _patched_names(manifests, spec.root_manifest)
    kept: List[Dependency] = []
    for dependency in dependency_set:
        if dependency.name in patched:
            logger.debug("Skipping patched dependency %s", dependency.name)
            continue
        if dependency.has_multiple_sources:
            logger.info("Skipping %s: declared with multiple sources", dependency.name)
            continue
        kept.append(dependency)

    logger.info("Parsed %d dependencies", len(kept))
    return DependencySet(kept)
