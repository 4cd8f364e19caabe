"""Exception types raised while resolving, staging and building a package."""

from __future__ import annotations

from pathlib import Path


class AppStagerError(Exception):
    """Base class for every error surfaced to the invoking layer."""


class ConfigurationError(AppStagerError):
    """Configuration or arguments cannot be used (detected before staging)."""


class IconFormatError(AppStagerError):
    """A PNG icon file name does not encode a standard size."""


class MacroResolutionError(AppStagerError):
    """A template references a macro that is not recognized."""

    def __init__(self, token: str, source: str = "template") -> None:
        self.token = token
        self.source = source
        super().__init__(f"Unknown macro ${{{token}}} in {source}")


class StagingIOError(AppStagerError):
    """A required file is missing or a staged file cannot be written."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        self.path = path
        super().__init__(message)


class CommandExecutionError(AppStagerError):
    """An external build command exited non-zero."""

    def __init__(self, command: str, returncode: int | None, output: str = "") -> None:
        self.command = command
        self.returncode = returncode
        self.output = output
        message = f"Command failed with exit code {returncode}: {command}"
        if output:
            message += f"\n{output}"
        super().__init__(message)


class BuildStateError(AppStagerError):
    """A builder operation was invoked from the wrong state."""
