"""
Shared context object for depbump CLI commands.

Carries configuration and runtime options from the CLI group to its
subcommands through Click's context mechanism.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from depbump.config import DepBumpConfig


class DepBumpContext:
    """Per-invocation state shared by depbump commands.

    Attributes:
        config_path: Configuration file in use, if any.
        verbose: Verbosity level (0=WARNING, 1=INFO, 2+=DEBUG).
        color: Whether colored terminal output is enabled.
        config: Loaded configuration; ``None`` until the CLI group runs.
    """

    __slots__ = ("config_path", "verbose", "color", "config")

    def __init__(self) -> None:
        self.config_path: Optional[Path] = None
        self.verbose: int = 0
        self.color: bool = True
        self.config: Optional[DepBumpConfig] = None

    @property
    def effective_config(self) -> DepBumpConfig:
        """Loaded configuration, or defaults when none was loaded."""
        return self.config or DepBumpConfig()


#: Click decorator for injecting :class:`DepBumpContext` into commands.
pass_context = click.make_pass_decorator(DepBumpContext, ensure=True)
