"""Update command implementation for depbump.

Shows how a project's requirements would be rewritten for a set of target
versions, without touching any files. The input is a JSON document of
already-decoded manifest tables::

    {
      "package_manager": "cabal",
      "manifests": {
        "cabal.project": {"dependencies": {"aeson": ">= 2.0, < 2.1"}}
      },
      "freeze": {"package": [{"name": "aeson", "version": "2.0.3",
                              "source": "registry+hackage"}]},
      "targets": {"aeson": "2.1.2"}
    }

Typical usage::

    $ depbump update project.json
    $ depbump update project.json --strategy bump_versions_if_necessary
    $ depbump update project.json --dep aeson --format json
"""

from __future__ import annotations

import sys
import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import click
from packaging.utils import canonicalize_name

from depbump.context import DepBumpContext, pass_context
from depbump.core import DependencyUpdater, UpdateResult, UpdateStatus, UpdateStrategy
from depbump.core.manifest import parse_manifests
from depbump.exceptions import DepBumpError, ParseError
from depbump.utils import (
    colorize_status,
    colorize_update_type,
    get_logger,
    get_update_type,
    print_error,
    print_success,
    print_table,
    print_warning,
)

logger = get_logger("commands.update")


@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--strategy",
    type=click.Choice([strategy.value for strategy in UpdateStrategy]),
    default=None,
    help="Update strategy (defaults to the configured one).",
)
@click.option(
    "--dep",
    "dependency_names",
    multiple=True,
    help="Only update these dependencies (can be repeated).",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    show_default=True,
    help="Output format.",
)
@pass_context
def update(
    ctx: DepBumpContext,
    input_file: Path,
    strategy: Optional[str],
    dependency_names: Tuple[str, ...],
    output_format: str,
) -> None:
    """Compute updated requirements for the targets in INPUT_FILE.

    Dependencies whose requirements cannot be rewritten to admit their
    target are reported as unfixable; they do not make the command fail.
    """
    try:
        results = _run_update(
            ctx,
            input_file,
            strategy=strategy,
            only=list(dependency_names),
        )
    except DepBumpError as exc:
        print_error(str(exc))
        sys.exit(1)

    if output_format == "json":
        click.echo(json.dumps([result.to_json() for result in results], indent=2))
        return

    _display_table(results)
    _display_summary(results)


def _run_update(
    ctx: DepBumpContext,
    input_file: Path,
    *,
    strategy: Optional[str],
    only: List[str],
) -> List[UpdateResult]:
    """Load the input document and update every targeted dependency."""
    config = ctx.effective_config
    document = _load_document(input_file)

    package_manager = document.get("package_manager") or config.package_manager
    dependencies = parse_manifests(
        document.get("manifests", {}),
        document.get("freeze"),
        package_manager=package_manager,
    )

    targets: Mapping[str, str] = document.get("targets", {})
    if only:
        wanted = {canonicalize_name(name) for name in only}
        targets = {
            name: v for name, v in targets.items() if canonicalize_name(name) in wanted
        }

    updater = DependencyUpdater(strategy or config.update_strategy)
    logger.info(
        "Updating %d of %d dependencies with %s",
        len(targets),
        len(dependencies),
        updater.update_strategy.value,
    )
    return updater.update_all(dependencies, targets)


def _load_document(path: Path) -> Dict[str, Any]:
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid JSON: {exc}", file_path=str(path)) from exc
    except OSError as exc:
        raise ParseError(f"Cannot read input: {exc}", file_path=str(path)) from exc

    if not isinstance(document, dict):
        raise ParseError("Input must be a JSON object", file_path=str(path))
    return document


def _requirement_cell(result: UpdateResult) -> str:
    """Old → new requirement text, one line per declaration."""
    old = result.dependency.requirements
    if result.updated_dependency is None:
        return "\n".join(str(req.requirement) for req in old) or "[dim]-[/dim]"

    lines = []
    for before, after in zip(old, result.updated_dependency.requirements):
        if before.requirement == after.requirement:
            lines.append(str(before.requirement))
        else:
            lines.append(f"{before.requirement} → {after.requirement}")
    return "\n".join(lines) or "[dim]-[/dim]"


def _display_table(results: List[UpdateResult]) -> None:
    rows = []
    for result in results:
        update_type = get_update_type(result.dependency.version, result.target_version)
        rows.append(
            {
                "Dependency": result.dependency.name,
                "Current": result.dependency.version or "-",
                "Target": result.target_version or "-",
                "Update Type": colorize_update_type(update_type),
                "Requirement": _requirement_cell(result),
                "Status": colorize_status(result.status.value),
            }
        )

    print_table(
        rows,
        title="Requirement Updates",
        column_styles={
            "Dependency": {"style": "bold cyan", "no_wrap": True},
            "Current": {"justify": "center", "style": "dim"},
            "Target": {"justify": "center", "style": "bold green"},
            "Update Type": {"justify": "center"},
            "Status": {"justify": "center"},
        },
    )


def _display_summary(results: List[UpdateResult]) -> None:
    if not results:
        print_warning("No dependencies matched the given targets")
        return

    unfixable = [r for r in results if r.status is UpdateStatus.UNFIXABLE]
    updated = [r for r in results if r.status is UpdateStatus.UPDATED]

    for result in unfixable:
        print_warning(f"{result.dependency.name}: {result.reason}")

    if updated:
        print_success(f"{len(updated)} dependency requirement(s) updated")
    elif not unfixable:
        print_success("All requirements already admit their targets")
