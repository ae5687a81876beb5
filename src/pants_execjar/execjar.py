"""Public entry points for turning runnable JARs into executables."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from pants_execjar._assembler import ExecutableAssembler
from pants_execjar._jar_validation import extract_artifact_name, validate_jar
from pants_execjar._launcher_config import LauncherConfig, build_launcher_config
from pants_execjar._launcher_script import render_launcher_script
from pants_execjar._shellcheck import ShellCheck, ShellCheckResult

logger = logging.getLogger(__name__)

__all__ = [
    "create_executable",
    "create_executable_with_shellcheck",
    "extract_artifact_name",
    "is_shellcheck_available",
    "render_launcher_script",
    "validate_jar",
    "validate_launcher_script",
]


def create_executable(
    jar_file: Union[str, Path],
    output_file: Union[str, Path],
    config: Optional[LauncherConfig] = None,
    *,
    assembler: Optional[ExecutableAssembler] = None,
) -> Path:
    """Validate a runnable JAR and write the executable.

    Without a config, the artifact name is derived from the JAR file name
    and every other option keeps its default.
    """
    main_class = validate_jar(jar_file)
    logger.debug("%s is runnable (Main-Class: %s)", jar_file, main_class)

    if config is None:
        config = build_launcher_config(artifact_name=extract_artifact_name(jar_file))

    if assembler is None:
        assembler = ExecutableAssembler()
    return assembler.assemble(jar_file, output_file, config)


def create_executable_with_shellcheck(
    jar_file: Union[str, Path],
    output_file: Union[str, Path],
) -> Path:
    """Like create_executable with default options and shellcheck enabled."""
    config = build_launcher_config(
        artifact_name=extract_artifact_name(jar_file),
        validate_with_shellcheck=True,
    )
    return create_executable(jar_file, output_file, config)


def validate_launcher_script(
    config: LauncherConfig,
    shellcheck: Optional[ShellCheck] = None,
) -> Optional[ShellCheckResult]:
    """Render the launcher and run shellcheck on it.

    Returns None when shellcheck is not available.
    """
    shellcheck = shellcheck if shellcheck is not None else ShellCheck()
    if not shellcheck.is_available():
        logger.warning("Shellcheck is not available")
        return None
    return shellcheck.validate(render_launcher_script(config))


def is_shellcheck_available() -> bool:
    return ShellCheck().is_available()
