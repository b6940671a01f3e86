"""
depbump version information.

Single source of truth for the package version. ``pyproject.toml``
carries the same value for packaging metadata.
"""

__version__ = "0.1.0.dev0"
