"""Pants plugin registration for executable JAR packaging.

Backend path: pants_execjar

Enable in pants.toml:

    [GLOBAL]
    backend_packages = [
        "pants_execjar",
    ]

    [execjar]
    default_min_java_version = 17
    validate_with_shellcheck = true
"""

from __future__ import annotations

from typing import Iterable, Type

from pants.engine.rules import Rule
from pants.option.subsystem import Subsystem

from pants_execjar.goals import package as package_goal
from pants_execjar.rules import package as package_rule
from pants_execjar.subsystem import ExecJarSubsystem
from pants_execjar.targets import ExecJarTarget


def rules() -> Iterable[Rule]:
    return [
        *package_rule.rules(),
        *package_goal.rules(),
    ]


def target_types() -> Iterable[type]:
    return [ExecJarTarget]


def subsystems() -> Iterable[Type[Subsystem]]:
    return [ExecJarSubsystem]
