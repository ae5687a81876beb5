"""Exception hierarchy for the execjar plugin."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from pants_execjar._shellcheck import ShellCheckResult


class ExecJarError(Exception):
    """Base for all execjar errors."""


class AssemblyArgumentError(ExecJarError, ValueError):
    """A required argument to an assembly call was missing."""


class LauncherConfigError(ExecJarError, ValueError):
    """Launcher configuration failed validation."""

    def __init__(self, message: str, *, field: str | None = None):
        self.field = field
        prefix = f"[{field}] " if field else ""
        super().__init__(f"{prefix}{message}")


class LauncherTemplateError(ExecJarError):
    """The bundled launcher template could not be loaded."""


class JarValidationError(ExecJarError):
    """The input JAR is not a runnable JAR."""

    def __init__(self, message: str, *, path: Optional[Union[str, Path]] = None):
        self.path = path
        super().__init__(message)


class ShellCheckUnavailableError(ExecJarError):
    """shellcheck is neither installed nor downloadable."""


class ShellCheckValidationError(ExecJarError):
    """shellcheck reported problems in the rendered launcher."""

    def __init__(self, result: "ShellCheckResult", message: str = "Shellcheck validation failed"):
        self.result = result
        super().__init__(f"{message}\n{result.output_text}")
