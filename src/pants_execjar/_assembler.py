"""Executable assembly: launcher script bytes followed by the JAR bytes.

The output is staged in a temporary file next to the destination and moved
into place with os.replace, so readers see either the previous file or the
complete new one.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import tempfile
from pathlib import Path
from typing import Optional, Protocol, Union

from pants_execjar._exceptions import AssemblyArgumentError, ShellCheckValidationError
from pants_execjar._launcher_config import LauncherConfig
from pants_execjar._launcher_script import LauncherRenderer
from pants_execjar._shellcheck import ShellCheck, ShellCheckResult

logger = logging.getLogger(__name__)

_EXECUTE_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH

PathLike = Union[str, "os.PathLike[str]"]


class ScriptValidator(Protocol):
    """What the assembler needs from a script validator."""

    def is_available(self) -> bool: ...

    def validate(self, script_content: str) -> ShellCheckResult: ...


def make_executable(path: Path) -> None:
    """Add execute permission for owner, group and others.

    Raises OSError if the file is still not executable afterwards.
    """
    try:
        path.chmod(path.stat().st_mode | _EXECUTE_BITS)
    except OSError as e:
        logger.debug("chmod +x failed on %s (%s), retrying owner-only", path, e)
        try:
            os.chmod(path, stat.S_IREAD | stat.S_IWRITE | stat.S_IEXEC)
        except OSError as e2:
            logger.debug("Owner-only chmod failed on %s: %s", path, e2)
    if not os.access(path, os.X_OK):
        raise OSError(f"Failed to set executable permission on: {path}")


class ExecutableAssembler:
    """Builds self-executing files from runnable JARs."""

    def __init__(
        self,
        renderer: Optional[LauncherRenderer] = None,
        shellcheck: Optional[ScriptValidator] = None,
    ) -> None:
        self.renderer = renderer if renderer is not None else LauncherRenderer()
        self._shellcheck = shellcheck

    @property
    def shellcheck(self) -> ScriptValidator:
        if self._shellcheck is None:
            self._shellcheck = ShellCheck()
        return self._shellcheck

    def assemble(
        self,
        jar_file: Optional[PathLike],
        output_file: Optional[PathLike],
        config: Optional[LauncherConfig],
    ) -> Path:
        """Write ``launcher + jar`` to output_file and mark it executable.

        Returns:
            The output path.

        Raises:
            AssemblyArgumentError: a required argument is None.
            FileNotFoundError / PermissionError: the JAR cannot be read.
            ShellCheckValidationError: validation was requested and failed.
            OSError: writing the output failed; the destination is untouched.
        """
        if jar_file is None:
            raise AssemblyArgumentError("JAR file cannot be None")
        if output_file is None:
            raise AssemblyArgumentError("Output file cannot be None")
        if config is None:
            raise AssemblyArgumentError("Launcher config cannot be None")

        jar_path = Path(jar_file)
        output_path = Path(output_file)

        if not jar_path.exists():
            raise FileNotFoundError(f"JAR file does not exist: {jar_path}")
        if not jar_path.is_file():
            raise IsADirectoryError(f"JAR path is not a regular file: {jar_path}")
        if not os.access(jar_path, os.R_OK):
            raise PermissionError(f"JAR file is not readable: {jar_path}")

        launcher_script = self.renderer.render(config)

        if config.validate_with_shellcheck:
            self._validate(launcher_script)

        launcher_bytes = launcher_script.encode("utf-8")

        parent = output_path.parent
        parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            dir=parent, prefix=f".{output_path.name}.", suffix=".tmp"
        )
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as out, jar_path.open("rb") as jar:
                out.write(launcher_bytes)
                shutil.copyfileobj(jar, out)
                out.flush()
                os.fsync(out.fileno())

            # mkstemp creates 0600 files; the result should read like a normal binary.
            tmp_path.chmod(0o644)
            make_executable(tmp_path)
            os.replace(tmp_path, output_path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

        logger.info(
            "Created executable %s (launcher %d bytes + JAR %d bytes)",
            output_path,
            len(launcher_bytes),
            jar_path.stat().st_size,
        )
        return output_path

    def _validate(self, launcher_script: str) -> None:
        shellcheck = self.shellcheck
        if not shellcheck.is_available():
            logger.warning(
                "Shellcheck validation requested but shellcheck is not available. "
                "Skipping validation."
            )
            return

        result = shellcheck.validate(launcher_script)
        if not result.success:
            raise ShellCheckValidationError(result)
        if result.has_warnings:
            logger.warning("Shellcheck warnings:\n%s", result.output_text)
