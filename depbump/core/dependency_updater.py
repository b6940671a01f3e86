"""
Per-dependency update service for depbump.

:class:`DependencyUpdater` wraps :class:`RequirementsUpdater` for whole
dependencies: it chooses the package manager's implementation, applies
the target version and reports the outcome as an :class:`UpdateResult`
instead of leaving callers to inspect sentinel values.

Each call is independent and holds no shared mutable state, so results
for different dependencies may be computed in any order or in parallel.
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from packaging.utils import canonicalize_name

from depbump.constants import DEFAULT_UPDATE_STRATEGY
from depbump.models.dependency import Dependency, DependencySource
from depbump.core.registry import get_package_manager
from depbump.core.requirements_updater import UpdateStrategy
from depbump.utils.logger import get_logger

logger = get_logger("core.dependency_updater")


class UpdateStatus(str, Enum):
    """Outcome of updating one dependency."""

    UPDATED = "updated"
    UNCHANGED = "unchanged"
    UNFIXABLE = "unfixable"
    SKIPPED = "skipped"


class _KeepSource:
    def __repr__(self) -> str:
        return "KEEP_SOURCE"


#: Default for ``updated_source``: reuse the dependency's own source.
KEEP_SOURCE: Any = _KeepSource()


@dataclass(frozen=True)
class UpdateResult:
    """Result of :meth:`DependencyUpdater.update`.

    Attributes:
        dependency: The dependency as it was before the update.
        status: What happened.
        target_version: Version the update aimed for.
        updated_dependency: New dependency value, for ``updated`` and
            ``unchanged`` outcomes.
        reason: Human-readable explanation for ``skipped`` and
            ``unfixable`` outcomes.
    """

    dependency: Dependency
    status: UpdateStatus
    target_version: Optional[str] = None
    updated_dependency: Optional[Dependency] = None
    reason: Optional[str] = None

    @property
    def is_updatable(self) -> bool:
        return self.status in (UpdateStatus.UPDATED, UpdateStatus.UNCHANGED)

    def to_json(self) -> Dict[str, Any]:
        entry: Dict[str, Any] = {
            "name": self.dependency.name,
            "status": self.status.value,
            "current_version": self.dependency.version,
            "target_version": self.target_version,
        }
        if self.updated_dependency is not None:
            entry["requirements"] = [
                {
                    "previous": old.requirement,
                    "updated": new.requirement,
                    "file": new.file,
                }
                for old, new in zip(
                    self.dependency.requirements,
                    self.updated_dependency.requirements,
                )
            ]
        if self.reason:
            entry["reason"] = self.reason
        return entry


class DependencyUpdater:
    """Apply target versions to dependencies.

    Args:
        update_strategy: Strategy passed to every requirements updater.

    Raises:
        UnknownUpdateStrategy: ``update_strategy`` is not supported.
    """

    def __init__(
        self,
        update_strategy: Union[UpdateStrategy, str] = DEFAULT_UPDATE_STRATEGY,
    ) -> None:
        self.update_strategy = UpdateStrategy.coerce(update_strategy)

    def update(
        self,
        dependency: Dependency,
        target_version: Optional[str],
        *,
        updated_source: Optional[DependencySource] = KEEP_SOURCE,
    ) -> UpdateResult:
        """Compute the updated form of ``dependency``.

        Args:
            dependency: Dependency to update.
            target_version: Version to move to (already resolved upstream).
            updated_source: Source for the new declarations. Defaults to the
                dependency's existing source.

        Raises:
            UnknownPackageManager: The dependency's package manager is not
                registered.
        """
        spec = get_package_manager(dependency.package_manager)

        if target_version is None or not spec.version_class.correct(target_version):
            logger.debug("%s: no usable target version (%r)", dependency.name, target_version)
            return UpdateResult(
                dependency=dependency,
                status=UpdateStatus.SKIPPED,
                target_version=target_version,
                reason="no valid target version",
            )

        if dependency.has_multiple_sources:
            return UpdateResult(
                dependency=dependency,
                status=UpdateStatus.SKIPPED,
                target_version=target_version,
                reason="declared with multiple sources",
            )

        if updated_source is KEEP_SOURCE:
            sources = dependency.sources
            updated_source = sources[0] if sources else None

        updater = spec.updater_class(
            requirements=dependency.requirements,
            updated_source=updated_source,
            update_strategy=self.update_strategy,
            target_version=target_version,
        )
        requirements = updater.updated_requirements()

        unfixable = [req for req in requirements if req.is_unfixable]
        if unfixable:
            files = ", ".join(sorted({req.file for req in unfixable}))
            logger.warning(
                "%s: requirements in %s cannot be updated to %s",
                dependency.name,
                files,
                target_version,
            )
            return UpdateResult(
                dependency=dependency,
                status=UpdateStatus.UNFIXABLE,
                target_version=target_version,
                reason=f"requirement in {files} excludes {target_version}",
            )

        updated = dependency.updated(version=target_version, requirements=requirements)
        changed = updated.requirements_changed or not self._same_version(
            spec.version_class, dependency.version, target_version
        )
        status = UpdateStatus.UPDATED if changed else UpdateStatus.UNCHANGED

        logger.info(
            "%s: %s -> %s (%s)",
            dependency.name,
            dependency.version or "unlocked",
            target_version,
            status.value,
        )
        return UpdateResult(
            dependency=dependency,
            status=status,
            target_version=target_version,
            updated_dependency=updated,
        )

    def update_all(
        self,
        dependencies: Iterable[Dependency],
        targets: Mapping[str, str],
    ) -> List[UpdateResult]:
        """Update every dependency that has an entry in ``targets``.

        ``targets`` is keyed by dependency name; lookups ignore case and
        ``-``/``_``/``.`` differences. Results keep input order.
        """
        canonical_targets = {canonicalize_name(name): v for name, v in targets.items()}
        results = []
        for dependency in dependencies:
            target = canonical_targets.get(dependency.canonical_name)
            if target is None:
                continue
            results.append(self.update(dependency, target))
        return results

    @staticmethod
    def _same_version(version_class, current: Optional[str], target: str) -> bool:
        if current is None or not version_class.correct(current):
            return False
        return version_class(current) == version_class(target)
