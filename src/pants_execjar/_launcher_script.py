"""Pure Python launcher script rendering (no Pants dependencies).

Fills templates/launcher.sh.tmpl with the values of a LauncherConfig.
The template holds all runtime discovery and invocation logic; rendering
only substitutes values, each slot with one fixed escaping discipline:

  - artifact_name: escape_for_single_quotes (it sits inside '...')
  - environment variable and property values:
    escape_for_double_quotes (they sit inside "...")
  - the header comment: escape_bare, newlines flattened
  - jvm_opts, prepend_args, append_args: raw shell text
"""

from __future__ import annotations

import logging
from importlib import resources as importlib_resources
from typing import Optional

from pants_execjar._escaper import (
    escape_bare,
    escape_for_double_quotes,
    escape_for_single_quotes,
)
from pants_execjar._exceptions import LauncherTemplateError
from pants_execjar._launcher_config import LauncherConfig

logger = logging.getLogger(__name__)

SHEBANG = "#!/usr/bin/env sh"
DEBUG_ENV_VAR = "EXECJAR_DEBUG"
TEMPLATE_RESOURCE = "launcher.sh.tmpl"

# Marker for "no upper bound" in the rendered MAX_JAVA_VERSION assignment.
_UNBOUNDED = '""'


def load_template(name: str = TEMPLATE_RESOURCE) -> str:
    """Load a launcher template bundled under pants_execjar/templates."""
    resource = importlib_resources.files("pants_execjar") / "templates" / name
    try:
        return resource.read_text(encoding="utf-8")
    except (FileNotFoundError, IsADirectoryError) as e:
        raise LauncherTemplateError(f"Launcher template not found: {name}") from e


def _raw_prefix(value: Optional[str]) -> str:
    """Raw text followed by a separating space, or nothing when blank."""
    if value is None or not value.strip():
        return ""
    return f"{value} "


def _raw_suffix(value: Optional[str]) -> str:
    if value is None or not value.strip():
        return ""
    return f" {value}"


def _env_exports(config: LauncherConfig) -> str:
    lines = [
        f'export {key}="{escape_for_double_quotes(value)}"\n'
        for key, value in sorted(config.environment_variables.items())
    ]
    return "".join(lines)


def _property_flags(config: LauncherConfig) -> str:
    return "".join(
        f' "-D{escape_for_double_quotes(key)}={escape_for_double_quotes(value)}"'
        for key, value in sorted(config.java_properties.items())
    )


def _normalize_trailing_newline(text: str) -> str:
    return text.rstrip("\n") + "\n"


class LauncherRenderer:
    """Renders the POSIX sh launcher for a LauncherConfig.

    The template is read once at construction; a missing template is a
    LauncherTemplateError here rather than on every render.
    """

    def __init__(self, template: Optional[str] = None) -> None:
        self._template = template if template is not None else load_template()

    def context(self, config: LauncherConfig) -> dict[str, str]:
        """Template variables for a config."""
        return {
            "artifact_comment": " ".join(escape_bare(config.artifact_name).splitlines()),
            "artifact_name": escape_for_single_quotes(config.artifact_name),
            "min_java_version": str(config.min_java_version),
            "max_java_version": (
                str(config.max_java_version)
                if config.max_java_version is not None
                else _UNBOUNDED
            ),
            "strict_mode": "1" if config.strict_mode else "0",
            "env_exports": _env_exports(config),
            "java_properties": _property_flags(config),
            "jvm_opts": _raw_prefix(config.jvm_opts),
            "prepend_args": _raw_prefix(config.prepend_args),
            "append_args": _raw_suffix(config.append_args),
        }

    def render(self, config: LauncherConfig) -> str:
        """Render the complete launcher script.

        Returns:
            Script text starting with the ``#!/usr/bin/env sh`` line and
            ending with exactly one newline.
        """
        rendered = self._template.format(**self.context(config))
        logger.debug(
            "Rendered launcher for %s (%d bytes)", config.artifact_name, len(rendered)
        )
        return _normalize_trailing_newline(rendered)


def render_launcher_script(config: LauncherConfig) -> str:
    """Render the launcher script using the bundled template."""
    return LauncherRenderer().render(config)
