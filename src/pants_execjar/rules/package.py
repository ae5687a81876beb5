"""execjar packaging rule: execjar target -> launcher config + JAR path."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pants.engine.rules import Get, collect_rules, rule
from pants.engine.target import (
    FieldSet,
    HydratedSources,
    HydrateSourcesRequest,
    InvalidFieldException,
)

from pants_execjar._exceptions import LauncherConfigError
from pants_execjar._jar_validation import extract_artifact_name
from pants_execjar._launcher_config import LauncherConfig, build_launcher_config
from pants_execjar.subsystem import ExecJarSubsystem
from pants_execjar.targets import (
    AppendArgsField,
    ArtifactNameField,
    EnvironmentVariablesField,
    JarSourceField,
    JavaPropertiesField,
    JvmOptsField,
    MaxJavaVersionField,
    MinJavaVersionField,
    OutputPathField,
    PrependArgsField,
    StrictModeField,
    ValidateWithShellcheckField,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Request / Result types
# =============================================================================


@dataclass(frozen=True)
class ExecJarFieldSet(FieldSet):
    """Fields required to package an execjar target."""

    required_fields = (JarSourceField,)

    jar: JarSourceField
    output_path: OutputPathField
    artifact_name: ArtifactNameField
    min_java_version: MinJavaVersionField
    max_java_version: MaxJavaVersionField
    strict_mode: StrictModeField
    jvm_opts: JvmOptsField
    environment_variables: EnvironmentVariablesField
    java_properties: JavaPropertiesField
    prepend_args: PrependArgsField
    append_args: AppendArgsField
    validate_with_shellcheck: ValidateWithShellcheckField


@dataclass(frozen=True)
class ExecJarPackageRequest:
    field_set: ExecJarFieldSet


@dataclass(frozen=True)
class ExecJarPackage:
    """Everything needed to write one executable."""

    jar_path: str
    output_path: str
    config: LauncherConfig


# =============================================================================
# Rules
# =============================================================================


@rule(desc="Resolve execjar launcher configuration")
async def resolve_execjar_package(
    request: ExecJarPackageRequest,
    subsystem: ExecJarSubsystem,
) -> ExecJarPackage:
    fs = request.field_set

    sources = await Get(HydratedSources, HydrateSourcesRequest(fs.jar))
    if not sources.snapshot.files:
        raise InvalidFieldException(
            f"{fs.address}: the `{JarSourceField.alias}` field matched no file."
        )
    jar_path = sources.snapshot.files[0]

    min_java_version = fs.min_java_version.value
    if min_java_version is None:
        min_java_version = subsystem.default_min_java_version

    try:
        config = build_launcher_config(
            artifact_name=fs.artifact_name.value or extract_artifact_name(jar_path),
            min_java_version=min_java_version,
            max_java_version=fs.max_java_version.value,
            strict_mode=fs.strict_mode.value,
            jvm_opts=fs.jvm_opts.value,
            validate_with_shellcheck=(
                fs.validate_with_shellcheck.value or subsystem.validate_with_shellcheck
            ),
            environment_variables=dict(fs.environment_variables.value or {}),
            java_properties=dict(fs.java_properties.value or {}),
            prepend_args=fs.prepend_args.value,
            append_args=fs.append_args.value,
        )
    except LauncherConfigError as e:
        raise InvalidFieldException(f"{fs.address}: {e}") from e

    output_path = fs.output_path.value or config.artifact_name

    logger.info("Resolved execjar %s -> %s", jar_path, output_path)

    return ExecJarPackage(
        jar_path=jar_path,
        output_path=output_path,
        config=config,
    )


def rules():
    return collect_rules()
