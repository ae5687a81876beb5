"""Pure Python launcher configuration (no Pants dependencies).

LauncherConfig describes everything the generated launcher script does:
Java version bounds, runtime discovery policy, JVM options, exported
environment variables, system properties and default arguments.

The same structure can be read from and written to an ``execjar.yml`` file.
YAML keys use camelCase to match the Maven plugin parameters.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from pants_execjar._exceptions import LauncherConfigError

# Lowest Java release whose `java -version` output the launcher can parse
# with the single-number major scheme.
MIN_SUPPORTED_JAVA_VERSION = 11

DEFAULT_ARTIFACT_NAME = "application"

_EMPTY: Mapping[str, str] = MappingProxyType({})

# Names usable in `export NAME=...`.
ENV_VAR_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Python attribute -> YAML key
_YAML_KEYS: dict[str, str] = {
    "min_java_version": "minJavaVersion",
    "max_java_version": "maxJavaVersion",
    "strict_mode": "strictMode",
    "jvm_opts": "jvmOpts",
    "artifact_name": "artifactName",
    "validate_with_shellcheck": "validateWithShellcheck",
    "environment_variables": "environmentVariables",
    "java_properties": "javaProperties",
    "prepend_args": "prependArgs",
    "append_args": "appendArgs",
}


def _frozen_mapping(
    value: Optional[Mapping[str, Any]],
    field_name: str,
    key_pattern: Optional[re.Pattern[str]] = None,
) -> Mapping[str, str]:
    if not value:
        return _EMPTY
    if not isinstance(value, Mapping):
        raise LauncherConfigError(
            f"Expected a mapping of strings, got {type(value).__name__}",
            field=field_name,
        )
    copied: dict[str, str] = {}
    for key in sorted(value):
        if not isinstance(key, str) or not key:
            raise LauncherConfigError(f"Invalid key {key!r}", field=field_name)
        if key_pattern is not None and not key_pattern.match(key):
            raise LauncherConfigError(
                f"Invalid name {key!r}: must match {key_pattern.pattern}",
                field=field_name,
            )
        item = value[key]
        # YAML turns `true` / `8080` into bool / int; the launcher only sees text.
        if isinstance(item, bool):
            item = "true" if item else "false"
        copied[key] = "" if item is None else str(item)
    return MappingProxyType(copied)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class LauncherConfig:
    """Configuration embedded in the launcher script of an executable JAR.

    jvm_opts, prepend_args and append_args are inserted verbatim into the
    ``exec`` line and must already be valid shell syntax. Environment
    variable and property values are escaped at render time.
    """

    min_java_version: int = MIN_SUPPORTED_JAVA_VERSION
    max_java_version: Optional[int] = None
    strict_mode: bool = False
    jvm_opts: Optional[str] = None
    artifact_name: str = DEFAULT_ARTIFACT_NAME
    validate_with_shellcheck: bool = False
    environment_variables: Mapping[str, str] = field(default_factory=lambda: _EMPTY)
    java_properties: Mapping[str, str] = field(default_factory=lambda: _EMPTY)
    prepend_args: Optional[str] = None
    append_args: Optional[str] = None

    def __post_init__(self) -> None:
        if not _is_int(self.min_java_version):
            raise LauncherConfigError(
                f"Expected an integer, got {self.min_java_version!r}",
                field="min_java_version",
            )
        if self.min_java_version < MIN_SUPPORTED_JAVA_VERSION:
            raise LauncherConfigError(
                f"Minimum Java version must be {MIN_SUPPORTED_JAVA_VERSION} or higher, "
                f"got {self.min_java_version}",
                field="min_java_version",
            )
        if self.max_java_version is not None:
            if not _is_int(self.max_java_version):
                raise LauncherConfigError(
                    f"Expected an integer, got {self.max_java_version!r}",
                    field="max_java_version",
                )
            if self.max_java_version < self.min_java_version:
                raise LauncherConfigError(
                    f"Maximum Java version ({self.max_java_version}) cannot be less "
                    f"than minimum version ({self.min_java_version})",
                    field="max_java_version",
                )
        if not isinstance(self.artifact_name, str) or not self.artifact_name.strip():
            raise LauncherConfigError(
                "Artifact name cannot be empty", field="artifact_name"
            )

        # Frozen dataclass: bypass __setattr__ to store the defensive copies.
        object.__setattr__(
            self,
            "environment_variables",
            _frozen_mapping(
                self.environment_variables,
                "environment_variables",
                ENV_VAR_NAME_PATTERN,
            ),
        )
        object.__setattr__(
            self,
            "java_properties",
            _frozen_mapping(self.java_properties, "java_properties"),
        )

    def __hash__(self) -> int:
        return hash(
            (
                self.min_java_version,
                self.max_java_version,
                self.strict_mode,
                self.jvm_opts,
                self.artifact_name,
                self.validate_with_shellcheck,
                tuple(self.environment_variables.items()),
                tuple(self.java_properties.items()),
                self.prepend_args,
                self.append_args,
            )
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dict with camelCase keys, omitting unset options."""
        config: dict[str, Any] = {
            "minJavaVersion": self.min_java_version,
        }
        if self.max_java_version is not None:
            config["maxJavaVersion"] = self.max_java_version
        config["strictMode"] = self.strict_mode
        if self.jvm_opts:
            config["jvmOpts"] = self.jvm_opts
        config["artifactName"] = self.artifact_name
        config["validateWithShellcheck"] = self.validate_with_shellcheck
        if self.environment_variables:
            config["environmentVariables"] = dict(self.environment_variables)
        if self.java_properties:
            config["javaProperties"] = dict(self.java_properties)
        if self.prepend_args:
            config["prependArgs"] = self.prepend_args
        if self.append_args:
            config["appendArgs"] = self.append_args
        return config

    def to_yaml(self) -> str:
        """Serialize to YAML string."""
        return yaml.safe_dump(
            self.to_dict(),
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LauncherConfig":
        """Build a config from camelCase (or snake_case) keys."""
        by_yaml_key = {v: k for k, v in _YAML_KEYS.items()}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            attr = by_yaml_key.get(key, key)
            if attr not in _YAML_KEYS:
                raise LauncherConfigError(f"Unknown launcher option {key!r}")
            kwargs[attr] = value
        return cls(**kwargs)

    def replace(self, **changes: Any) -> "LauncherConfig":
        """Return a copy with the given fields replaced (validated again)."""
        current = {f.name: getattr(self, f.name) for f in fields(self)}
        current.update(changes)
        return LauncherConfig(**current)


def build_launcher_config(
    *,
    artifact_name: str = DEFAULT_ARTIFACT_NAME,
    min_java_version: int = MIN_SUPPORTED_JAVA_VERSION,
    max_java_version: Optional[int] = None,
    strict_mode: bool = False,
    jvm_opts: Optional[str] = None,
    validate_with_shellcheck: bool = False,
    environment_variables: Optional[Dict[str, str]] = None,
    java_properties: Optional[Dict[str, str]] = None,
    prepend_args: Optional[str] = None,
    append_args: Optional[str] = None,
) -> LauncherConfig:
    """Build a LauncherConfig, dropping blank optional strings."""
    return LauncherConfig(
        min_java_version=min_java_version,
        max_java_version=max_java_version,
        strict_mode=strict_mode,
        jvm_opts=jvm_opts or None,
        artifact_name=artifact_name,
        validate_with_shellcheck=validate_with_shellcheck,
        environment_variables=environment_variables or _EMPTY,
        java_properties=java_properties or _EMPTY,
        prepend_args=prepend_args or None,
        append_args=append_args or None,
    )


def load_launcher_config(
    path: Union[str, Path],
    **overrides: Any,
) -> LauncherConfig:
    """Read an ``execjar.yml`` file and apply non-None keyword overrides.

    Override keys are the snake_case attribute names. Mapping overrides are
    merged on top of the file's mapping rather than replacing it.
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise LauncherConfigError(f"Invalid YAML in {path}: {e}") from e
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise LauncherConfigError(
            f"Expected a mapping at the top of {path}, got {type(data).__name__}"
        )

    config = LauncherConfig.from_dict(data)
    changes: dict[str, Any] = {}
    for name, value in overrides.items():
        if value is None:
            continue
        if name not in _YAML_KEYS:
            raise LauncherConfigError(f"Unknown launcher option {name!r}")
        if name in ("environment_variables", "java_properties"):
            merged = dict(getattr(config, name))
            merged.update(value)
            value = merged
        changes[name] = value
    return config.replace(**changes) if changes else config
