"""execjar-package goal: write self-executing JARs to dist/."""

from pathlib import Path

from pants.engine.console import Console
from pants.engine.goal import Goal, GoalSubsystem
from pants.engine.rules import Get, MultiGet, collect_rules, goal_rule
from pants.engine.target import FilteredTargets

from pants_execjar._assembler import ExecutableAssembler
from pants_execjar._exceptions import JarValidationError, ShellCheckValidationError
from pants_execjar._jar_validation import validate_jar
from pants_execjar._launcher_script import LauncherRenderer
from pants_execjar._shellcheck import ShellCheck
from pants_execjar.rules.package import (
    ExecJarFieldSet,
    ExecJarPackage,
    ExecJarPackageRequest,
)
from pants_execjar.subsystem import ExecJarSubsystem
from pants_execjar.targets import JarSourceField


class ExecJarPackageGoalSubsystem(GoalSubsystem):
    name = "execjar-package"
    help = "Package execjar targets into self-executing files."


class ExecJarPackageGoal(Goal):
    subsystem_cls = ExecJarPackageGoalSubsystem
    environment_behavior = Goal.EnvironmentBehavior.LOCAL_ONLY


@goal_rule
async def run_execjar_package(
    console: Console,
    targets: FilteredTargets,
    subsystem: ExecJarSubsystem,
) -> ExecJarPackageGoal:
    if subsystem.skip:
        console.print_stderr("Skipping execjar packaging ([execjar].skip is set).")
        return ExecJarPackageGoal(exit_code=0)

    execjar_targets = [t for t in targets if t.has_field(JarSourceField)]

    if not execjar_targets:
        console.print_stderr("No execjar targets found.")
        return ExecJarPackageGoal(exit_code=0)

    packages = await MultiGet(
        Get(
            ExecJarPackage,
            ExecJarPackageRequest(ExecJarFieldSet.create(t)),
        )
        for t in execjar_targets
    )

    dist_dir = Path(subsystem.dist_dir)
    assembler = ExecutableAssembler(
        renderer=LauncherRenderer(),
        shellcheck=ShellCheck(subsystem.shellcheck_cache_dir or None),
    )

    for package in packages:
        output = dist_dir / package.output_path
        try:
            main_class = validate_jar(package.jar_path)
            assembler.assemble(package.jar_path, output, package.config)
        except JarValidationError as e:
            console.print_stderr(f"Invalid JAR: {e}")
            return ExecJarPackageGoal(exit_code=1)
        except ShellCheckValidationError as e:
            console.print_stderr(f"{package.jar_path}: {e}")
            return ExecJarPackageGoal(exit_code=2)
        except OSError as e:
            console.print_stderr(f"Failed to write {output}: {e}")
            return ExecJarPackageGoal(exit_code=3)

        console.print_stdout(
            f"Packaged: {output} ({package.config.artifact_name}, Main-Class {main_class})"
        )

    return ExecJarPackageGoal(exit_code=0)


def rules():
    return collect_rules()
