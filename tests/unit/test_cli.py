"""Tests for the execjar command line interface."""

from __future__ import annotations

import logging

import pytest

from pants_execjar import _assembler, cli
from pants_execjar._shellcheck import ShellCheckResult
from pants_execjar.cli import (
    EXIT_INVALID_CONFIG,
    EXIT_INVALID_JAR,
    EXIT_IO_ERROR,
    EXIT_OK,
    EXIT_SHELLCHECK_FAILED,
    build_parser,
    main,
)

from conftest import FakeShellCheck


@pytest.fixture(autouse=True)
def restore_logger():
    logger = logging.getLogger("pants_execjar")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


def _script_of(path) -> str:
    data = path.read_bytes()
    return data[: data.index(b"PK\x03\x04")].decode("utf-8")


class TestExitCodes:
    def test_values(self):
        assert (EXIT_OK, EXIT_INVALID_JAR, EXIT_SHELLCHECK_FAILED, EXIT_IO_ERROR, EXIT_INVALID_CONFIG) == (
            0, 1, 2, 3, 4,
        )


class TestParser:
    def test_defaults(self):
        ns = build_parser().parse_args(["app.jar"])
        assert ns.force is True
        assert ns.strict_mode is None
        assert ns.env is None

    def test_key_value(self):
        ns = build_parser().parse_args(["app.jar", "-E", "A=1", "-E", "B=x=y", "-D", "k="])
        assert ns.env == [("A", "1"), ("B", "x=y")]
        assert ns.property == [("k", "")]

    def test_bad_key_value(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["app.jar", "-E", "NOVALUE"])


class TestMain:
    """Test main() end to end against real files."""

    def test_default_output(self, make_jar, tmp_path):
        jar = make_jar("my-app-1.0.0")
        assert main([str(jar)]) == EXIT_OK
        output = tmp_path / "my-app"
        assert output.is_file()
        assert "ARTIFACT_NAME='my-app'" in _script_of(output)

    def test_options(self, make_jar, tmp_path):
        output = tmp_path / "bin" / "app"
        code = main(
            [
                str(make_jar()),
                "-o", str(output),
                "--min-java-version", "17",
                "--max-java-version", "21",
                "--strict-mode",
                "--jvm-opts=-Xmx4g",
                "-E", "APP_ENV=prod",
                "-D", "file.encoding=UTF-8",
                "--prepend-args=--config /etc/app.conf",
                "--append-args=--verbose",
                "--artifact-name", "svc",
            ]
        )
        assert code == EXIT_OK
        script = _script_of(output)
        assert "MIN_JAVA_VERSION=17\n" in script
        assert "MAX_JAVA_VERSION=21\n" in script
        assert "STRICT_MODE=1\n" in script
        assert 'export APP_ENV="prod"' in script
        assert "ARTIFACT_NAME='svc'" in script
        assert (
            'exec "$BEST_JAVA" -Xmx4g $USER_JAVA_OPTS "-Dfile.encoding=UTF-8"'
            ' -Dsun.misc.URLClassPath.disableJarChecking -jar "$0"'
            ' --config /etc/app.conf "$@" --verbose'
        ) in script

    def test_repeated_prepend_args_joined(self, make_jar, tmp_path):
        output = tmp_path / "app"
        main([str(make_jar()), "-o", str(output), "--prepend-args=-a", "--prepend-args=-b"])
        assert '-jar "$0" -a -b "$@"' in _script_of(output)

    def test_print_launcher(self, make_jar, tmp_path, capsys):
        assert main([str(make_jar()), "--print-launcher", "--min-java-version", "21"]) == EXIT_OK
        out = capsys.readouterr().out
        assert out.startswith("#!/usr/bin/env sh\n")
        assert "MIN_JAVA_VERSION=21\n" in out
        assert not (tmp_path / "test-app").exists()

    def test_config_file(self, make_jar, tmp_path):
        config = tmp_path / "execjar.yml"
        config.write_text("minJavaVersion: 17\njvmOpts: -Xmx2g\nenvironmentVariables:\n  A: '1'\n")
        output = tmp_path / "app"
        code = main(
            [str(make_jar()), "-o", str(output), "--config", str(config), "--min-java-version", "21"]
        )
        assert code == EXIT_OK
        script = _script_of(output)
        assert "MIN_JAVA_VERSION=21\n" in script
        assert 'export A="1"' in script
        assert "ARTIFACT_NAME='test-app'" in script
        assert 'exec "$BEST_JAVA" -Xmx2g $USER_JAVA_OPTS' in script

    def test_config_file_artifact_name(self, make_jar, tmp_path):
        config = tmp_path / "execjar.yml"
        config.write_text("artifactName: from-config\n")
        output = tmp_path / "app"
        assert main([str(make_jar()), "-o", str(output), "--config", str(config)]) == EXIT_OK
        assert "ARTIFACT_NAME='from-config'" in _script_of(output)

    def test_invalid_jar(self, make_jar, tmp_path):
        assert main([str(make_jar(main_class=None)), "-o", str(tmp_path / "out")]) == EXIT_INVALID_JAR
        assert not (tmp_path / "out").exists()

    def test_missing_jar(self, tmp_path):
        assert main([str(tmp_path / "missing.jar")]) == EXIT_INVALID_JAR

    def test_invalid_config(self, make_jar, tmp_path):
        code = main([str(make_jar()), "-o", str(tmp_path / "out"), "--min-java-version", "8"])
        assert code == EXIT_INVALID_CONFIG

    def test_max_below_min(self, make_jar, tmp_path):
        code = main(
            [str(make_jar()), "-o", str(tmp_path / "out"),
             "--min-java-version", "17", "--max-java-version", "11"]
        )
        assert code == EXIT_INVALID_CONFIG

    def test_bad_config_file(self, make_jar, tmp_path):
        config = tmp_path / "execjar.yml"
        config.write_text("unknownOption: 1\n")
        assert main([str(make_jar()), "--config", str(config)]) == EXIT_INVALID_CONFIG

    def test_missing_config_file(self, make_jar, tmp_path):
        assert main([str(make_jar()), "--config", str(tmp_path / "nope.yml")]) == EXIT_IO_ERROR

    def test_io_error(self, make_jar, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        assert main([str(make_jar()), "-o", str(blocker / "app")]) == EXIT_IO_ERROR

    def test_shellcheck_failure(self, make_jar, tmp_path, monkeypatch):
        result = ShellCheckResult(
            success=False, exit_code=1, output=("launcher:1:1: error: broken [SC1000]",)
        )
        monkeypatch.setattr(_assembler, "ShellCheck", lambda: FakeShellCheck(result=result))
        output = tmp_path / "out"
        code = main([str(make_jar()), "-o", str(output), "--validate-shellcheck"])
        assert code == EXIT_SHELLCHECK_FAILED
        assert not output.exists()

    def test_print_launcher_shellcheck_failure(self, make_jar, monkeypatch):
        result = ShellCheckResult(success=False, exit_code=1, output=("x:1:1: error: e",))
        monkeypatch.setattr(
            cli, "validate_launcher_script", lambda config: result
        )
        code = main([str(make_jar()), "--print-launcher", "--validate-shellcheck"])
        assert code == EXIT_SHELLCHECK_FAILED

    def test_no_force_keeps_existing(self, make_jar, tmp_path):
        output = tmp_path / "out"
        output.write_text("keep me")
        assert main([str(make_jar()), "-o", str(output), "--no-force"]) == EXIT_INVALID_JAR
        assert output.read_text() == "keep me"

    def test_overwrites_by_default(self, make_jar, tmp_path):
        output = tmp_path / "out"
        output.write_text("old")
        assert main([str(make_jar()), "-o", str(output)]) == EXIT_OK
        assert output.read_bytes().startswith(b"#!")

    def test_quiet_suppresses_info(self, make_jar, tmp_path, capsys):
        main([str(make_jar()), "-o", str(tmp_path / "out"), "-q"])
        assert "Created executable" not in capsys.readouterr().err

    def test_info_logged(self, make_jar, tmp_path, capsys):
        main([str(make_jar()), "-o", str(tmp_path / "out")])
        assert "Created executable" in capsys.readouterr().err
