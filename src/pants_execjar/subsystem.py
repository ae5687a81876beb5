"""Global execjar configuration subsystem."""

from __future__ import annotations

from pants.option.option_types import BoolOption, IntOption, StrOption
from pants.option.subsystem import Subsystem


class ExecJarSubsystem(Subsystem):
    """Global configuration for executable JAR packaging."""

    options_scope = "execjar"
    help = "Configuration for the execjar packaging plugin."

    default_min_java_version = IntOption(
        default=11,
        help="Minimum Java version for execjar targets that do not set min_java_version.",
    )

    validate_with_shellcheck = BoolOption(
        default=False,
        help="Validate every generated launcher with shellcheck.",
    )

    shellcheck_cache_dir = StrOption(
        default="",
        help=(
            "Where a downloaded shellcheck binary is cached. Empty = "
            "$EXECJAR_SHELLCHECK_CACHE_DIR or ~/.cache/execjar/shellcheck."
        ),
    )

    dist_dir = StrOption(
        default="dist",
        help="Directory, relative to the build root, that receives the executables.",
    )

    skip = BoolOption(
        default=False,
        help="Skip executable creation.",
    )
