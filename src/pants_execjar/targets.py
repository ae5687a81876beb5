"""execjar target type for Pants BUILD files.

Provides:
  - execjar: a runnable JAR turned into a self-executing file
"""

from __future__ import annotations

from pants.engine.target import (
    COMMON_TARGET_FIELDS,
    BoolField,
    DictStringToStringField,
    IntField,
    SingleSourceField,
    StringField,
    Target,
)
from pants.util.strutil import softwrap


# =============================================================================
# Input / output
# =============================================================================


class JarSourceField(SingleSourceField):
    alias = "jar"
    required = True
    expected_file_extensions = (".jar",)
    help = softwrap(
        """
        Runnable JAR to wrap, relative to this BUILD file.
        Its META-INF/MANIFEST.MF must declare a Main-Class.
        """
    )


class OutputPathField(StringField):
    alias = "output_path"
    default = None
    help = softwrap(
        """
        Path of the executable below dist/.
        Defaults to the artifact name.
        """
    )


class ArtifactNameField(StringField):
    alias = "artifact_name"
    default = None
    help = softwrap(
        """
        Name shown in launcher error messages.
        Defaults to the JAR file name without extension and version suffix.
        """
    )


# =============================================================================
# Java runtime selection
# =============================================================================


class MinJavaVersionField(IntField):
    alias = "min_java_version"
    default = None
    help = "Minimum Java major version (11 or higher). Defaults to [execjar].default_min_java_version."


class MaxJavaVersionField(IntField):
    alias = "max_java_version"
    default = None
    help = "Maximum Java major version. Unbounded when unset."


class StrictModeField(BoolField):
    alias = "strict_mode"
    default = False
    help = "Only consider the java found on PATH instead of searching JDK install locations."


# =============================================================================
# Invocation
# =============================================================================


class JvmOptsField(StringField):
    alias = "jvm_opts"
    default = None
    help = softwrap(
        """
        JVM options inserted verbatim before $JAVA_OPTS (e.g. '-Xmx4g -Xms1g').
        Must already be valid shell syntax.
        """
    )


class EnvironmentVariablesField(DictStringToStringField):
    alias = "environment_variables"
    help = "Environment variables exported by the launcher before starting Java."


class JavaPropertiesField(DictStringToStringField):
    alias = "java_properties"
    help = "System properties passed to Java as -DKEY=VALUE."


class PrependArgsField(StringField):
    alias = "prepend_args"
    default = None
    help = "Arguments inserted verbatim before the user's arguments."


class AppendArgsField(StringField):
    alias = "append_args"
    default = None
    help = "Arguments inserted verbatim after the user's arguments."


class ValidateWithShellcheckField(BoolField):
    alias = "validate_with_shellcheck"
    default = False
    help = "Run shellcheck on the generated launcher. Also enabled by [execjar].validate_with_shellcheck."


# =============================================================================
# Target
# =============================================================================


class ExecJarTarget(Target):
    alias = "execjar"
    core_fields = (
        *COMMON_TARGET_FIELDS,
        JarSourceField,
        OutputPathField,
        ArtifactNameField,
        MinJavaVersionField,
        MaxJavaVersionField,
        StrictModeField,
        JvmOptsField,
        EnvironmentVariablesField,
        JavaPropertiesField,
        PrependArgsField,
        AppendArgsField,
        ValidateWithShellcheckField,
    )
    help = softwrap(
        """
        A runnable JAR packaged as a single self-executing file.

        The output is a POSIX sh launcher followed by the unmodified JAR.
        The launcher finds a suitable Java runtime and runs `java -jar` on itself.
        """
    )
