"""
Custom exception hierarchy for depbump.

This module defines structured exception types used across depbump.
All exceptions inherit from :class:`DepBumpError` and support optional
structured metadata via the ``details`` attribute to improve diagnostics
and logging.

Note that an unfixable requirement is *not* an exception: the updater
returns the :data:`~depbump.models.requirement.UNFIXABLE` sentinel
instead.
"""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional


class DepBumpError(Exception):
    """Base exception for all depbump errors.

    Args:
        message: Human-readable error message.
        details: Optional structured metadata describing the error.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Add a key to ``details`` only if ``value`` is not ``None``."""
    if value is not None:
        details[key] = value


def _truncate(text: str, max_length: int = 200) -> str:
    """Truncate long text for safe logging or error reporting."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


class InvalidVersion(DepBumpError):
    """Raised when a version string cannot be parsed.

    Args:
        version: The offending version string.
    """

    __slots__ = ("version",)

    def __init__(self, version: Any) -> None:
        super().__init__(f"Malformed version string {version!r}")
        self.version = version


class InvalidRequirement(DepBumpError):
    """Raised when a requirement (constraint) string cannot be parsed.

    Args:
        requirement: The offending requirement string.
        reason: Optional explanation of what was wrong.
    """

    __slots__ = ("requirement", "reason")

    def __init__(self, requirement: Any, *, reason: Optional[str] = None) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "reason", reason)

        super().__init__(f"Illformed requirement {requirement!r}", details)

        self.requirement = requirement
        self.reason = reason


class UnknownUpdateStrategy(DepBumpError):
    """Raised when an updater is built with an unsupported strategy.

    This is an integration error and is never retried.

    Args:
        strategy: The rejected strategy value.
    """

    __slots__ = ("strategy",)

    def __init__(self, strategy: Any) -> None:
        super().__init__(f"Unknown update strategy: {strategy}")
        self.strategy = strategy


class MalformedDeclaration(DepBumpError):
    """Raised when a dependency declaration has an unexpected shape.

    Signals a defect in whatever produced the declaration (typically a
    manifest parser), not a version-resolution failure.

    Args:
        declaration: The offending declaration value.
        file_path: Manifest file the declaration came from, if known.
    """

    __slots__ = ("declaration", "file_path")

    def __init__(self, declaration: Any, *, file_path: Optional[str] = None) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "file", file_path)

        super().__init__(
            f"Unexpected dependency declaration: {_truncate(repr(declaration))}",
            details,
        )

        self.declaration = declaration
        self.file_path = file_path


class UnknownPackageManager(DepBumpError):
    """Raised when no implementation is registered for a package manager.

    Args:
        package_manager: The requested package manager name.
    """

    __slots__ = ("package_manager",)

    def __init__(self, package_manager: Any) -> None:
        super().__init__(f"Unsupported package manager: {package_manager}")
        self.package_manager = package_manager


class ParseError(DepBumpError):
    """Raised when an input document cannot be decoded.

    Args:
        message: Error description.
        file_path: Path to the file being parsed.
    """

    __slots__ = ("file_path",)

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "file", file_path)

        super().__init__(message, details)

        self.file_path = file_path


class ConfigError(DepBumpError):
    """Raised when configuration is missing, malformed, or invalid.

    Args:
        message: Error description.
        config_path: Path to the configuration file involved.
        option: Name of the offending option, if any.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option
