"""Command line interface for execjar.

Exit codes:
    0  success
    1  invalid input JAR (or refusing to overwrite)
    2  shellcheck validation failed
    3  I/O failure
    4  invalid launcher configuration
"""

from __future__ import annotations

import argparse
import logging
import pathlib
import sys
from typing import Optional

from pants_execjar._exceptions import (
    JarValidationError,
    LauncherConfigError,
    ShellCheckValidationError,
)
from pants_execjar._launcher_config import (
    DEFAULT_ARTIFACT_NAME,
    LauncherConfig,
    build_launcher_config,
    load_launcher_config,
)
from pants_execjar.execjar import (
    create_executable,
    extract_artifact_name,
    render_launcher_script,
    validate_jar,
    validate_launcher_script,
)

EXIT_OK = 0
EXIT_INVALID_JAR = 1
EXIT_SHELLCHECK_FAILED = 2
EXIT_IO_ERROR = 3
EXIT_INVALID_CONFIG = 4


def _configure_logging(*, verbose: int, quiet: int) -> logging.Logger:
    """Configure the pants_execjar logger.

    :param verbose: Verbosity count (0+).
    :param quiet: Quietness count (0+).
    :returns: Configured logger.
    """

    level: int = logging.INFO
    if quiet >= 2:
        level = logging.ERROR
    elif quiet >= 1:
        level = logging.WARNING
    elif verbose >= 1:
        level = logging.DEBUG

    logger: logging.Logger = logging.getLogger("pants_execjar")
    logger.setLevel(level)
    logger.propagate = False

    handler: logging.Handler = logging.StreamHandler(stream=sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger.handlers.clear()
    logger.addHandler(handler)
    return logger


def _key_value(text: str) -> tuple[str, str]:
    key, sep, value = text.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {text!r}")
    return key, value


def _join(parts: Optional[list[str]]) -> Optional[str]:
    if not parts:
        return None
    return " ".join(parts)


def build_parser() -> argparse.ArgumentParser:
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="execjar",
        description="Create executable files from runnable JAR files.",
    )
    parser.add_argument(
        "input",
        type=pathlib.Path,
        help="Input JAR file (must be a runnable JAR with Main-Class in its manifest).",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=pathlib.Path,
        default=None,
        help="Output executable path (default: artifact name next to the JAR).",
    )
    parser.add_argument(
        "--config",
        type=pathlib.Path,
        default=None,
        help="execjar.yml with launcher options. Command line options override it.",
    )
    parser.add_argument(
        "--min-java-version",
        type=int,
        default=None,
        help="Minimum Java version required (default: 11).",
    )
    parser.add_argument(
        "--max-java-version",
        type=int,
        default=None,
        help="Maximum Java version allowed (default: unbounded).",
    )
    parser.add_argument(
        "--strict-mode",
        action="store_true",
        default=None,
        help="Only consider the java found on PATH.",
    )
    parser.add_argument(
        "--jvm-opts",
        type=str,
        default=None,
        help='JVM options inserted verbatim, e.g. "-Xmx4g -Xms1g".',
    )
    parser.add_argument(
        "-E",
        "--env",
        type=_key_value,
        action="append",
        default=None,
        metavar="KEY=VALUE",
        help="Environment variable exported by the launcher. Repeatable.",
    )
    parser.add_argument(
        "-D",
        "--property",
        type=_key_value,
        action="append",
        default=None,
        metavar="KEY=VALUE",
        help="Java system property passed as -DKEY=VALUE. Repeatable.",
    )
    parser.add_argument(
        "--prepend-args",
        action="append",
        default=None,
        help="Arguments placed before the user's arguments. Repeatable.",
    )
    parser.add_argument(
        "--append-args",
        action="append",
        default=None,
        help="Arguments placed after the user's arguments. Repeatable.",
    )
    parser.add_argument(
        "--artifact-name",
        type=str,
        default=None,
        help="Name used in launcher error messages (default: derived from the JAR name).",
    )
    parser.add_argument(
        "--validate-shellcheck",
        action="store_true",
        default=None,
        help="Validate the launcher script with shellcheck.",
    )
    parser.add_argument(
        "--no-force",
        dest="force",
        action="store_false",
        help="Fail instead of overwriting an existing output file.",
    )
    parser.add_argument(
        "--print-launcher",
        action="store_true",
        help="Print the launcher script to stdout and exit.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Enable verbose logging.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="count",
        default=0,
        help="Reduce logging. Pass twice to only show errors.",
    )
    return parser


def _build_config(ns: argparse.Namespace) -> LauncherConfig:
    overrides = {
        "min_java_version": ns.min_java_version,
        "max_java_version": ns.max_java_version,
        "strict_mode": ns.strict_mode,
        "jvm_opts": ns.jvm_opts,
        "artifact_name": ns.artifact_name,
        "validate_with_shellcheck": ns.validate_shellcheck,
        "environment_variables": dict(ns.env) if ns.env else None,
        "java_properties": dict(ns.property) if ns.property else None,
        "prepend_args": _join(ns.prepend_args),
        "append_args": _join(ns.append_args),
    }
    if ns.config is not None:
        config = load_launcher_config(ns.config, **overrides)
        if ns.artifact_name is None and config.artifact_name == DEFAULT_ARTIFACT_NAME:
            config = config.replace(artifact_name=extract_artifact_name(ns.input))
        return config

    kwargs = {k: v for k, v in overrides.items() if v is not None}
    kwargs.setdefault("artifact_name", extract_artifact_name(ns.input))
    return build_launcher_config(**kwargs)


def main(argv: list[str] | None = None) -> int:
    """Run the execjar CLI.

    :param argv: Optional argv list (excluding program name).
    :returns: Exit code.
    """

    ns = build_parser().parse_args(argv)
    logger: logging.Logger = _configure_logging(verbose=ns.verbose, quiet=ns.quiet)

    try:
        main_class = validate_jar(ns.input)
        logger.debug("JAR is valid. Main-Class: %s", main_class)

        config = _build_config(ns)

        if ns.print_launcher:
            if config.validate_with_shellcheck:
                result = validate_launcher_script(config)
                if result is not None and not result.success:
                    raise ShellCheckValidationError(result)
            sys.stdout.write(render_launcher_script(config))
            return EXIT_OK

        output: pathlib.Path = ns.output
        if output is None:
            output = ns.input.parent / config.artifact_name

        if output.exists() and not ns.force:
            logger.error("Error: output file already exists: %s (drop --no-force to overwrite)", output)
            return EXIT_INVALID_JAR
        if output.resolve() == ns.input.resolve():
            if not ns.force:
                logger.error("Error: cannot overwrite the input JAR %s", ns.input)
                return EXIT_INVALID_JAR
            logger.warning("WARNING: overwriting the input JAR %s", ns.input)

        logger.debug("Configuration:\n%s", config.to_yaml().rstrip("\n"))

        created = create_executable(ns.input, output, config)
        logger.info("Created executable: %s", created.absolute())
        return EXIT_OK

    except JarValidationError as e:
        logger.error("Error: JAR validation failed\n%s", e)
        return EXIT_INVALID_JAR
    except ShellCheckValidationError as e:
        logger.error("Error: %s", e)
        return EXIT_SHELLCHECK_FAILED
    except LauncherConfigError as e:
        logger.error("Error: Invalid configuration\n%s", e)
        return EXIT_INVALID_CONFIG
    except OSError as e:
        logger.error("Error: I/O operation failed\n%s", e)
        return EXIT_IO_ERROR


if __name__ == "__main__":
    sys.exit(main())
