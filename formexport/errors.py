"""Exception types raised by the export pipeline."""

from __future__ import annotations


class ExportError(RuntimeError):
    """Base class for failures that abort an export."""


class ConfigError(ExportError):
    """Raised when a configuration file cannot be parsed or is structurally invalid."""


class MissingSourceError(ExportError):
    """Raised when a source file every export depends on is not available."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Required source file not found: {path}")
        self.path = path


class UnsupportedEcosystemError(ExportError):
    """Raised when adapter files are requested for an unregistered ecosystem."""

    def __init__(self, ecosystem: str, available: list[str] | None = None) -> None:
        message = f"Unsupported ecosystem: {ecosystem}"
        if available:
            message += f" (available: {', '.join(available)})"
        super().__init__(message)
        self.ecosystem = ecosystem


class VersionResolutionError(ExportError):
    """Raised when no version can be resolved for a self-published package."""


__all__ = [
    "ConfigError",
    "ExportError",
    "MissingSourceError",
    "UnsupportedEcosystemError",
    "VersionResolutionError",
]
