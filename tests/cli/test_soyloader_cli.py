"""Tests for the soyloader command line interface."""

import logging
import shlex
import sys
import textwrap

import pytest
from click.testing import CliRunner

from soyloader import __version__
from soyloader.cli.main import cli


@pytest.fixture(autouse=True)
def reset_cli_logging():
    """Drop the stderr handler the CLI installs so later tests do not log to a closed stream."""
    yield
    logger = logging.getLogger("soyloader")
    for handler in list(logger.handlers):
        if getattr(handler, "_soyloader_cli", False):
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def compiler_command(tmp_path) -> str:
    """Command line of a stand-in compiler that fails for 'broken' templates."""
    script = tmp_path / "fake_soyc.py"
    script.write_text(
        textwrap.dedent(
            """
            import os
            import sys

            src, deps = sys.argv[1], sys.argv[2]
            if os.path.basename(src).startswith("broken"):
                sys.stderr.write("unexpected token")
                sys.exit(2)
            sys.stdout.write("// compiled " + os.path.basename(src))
            """
        )
    )
    return f"{shlex.quote(sys.executable)} {shlex.quote(str(script))} {{src}} {{deps}}"


@pytest.fixture
def project(tmp_path, write_soy):
    write_soy("src/foo.soy", "foo", "bar.render")
    write_soy("src/bar.soy", "bar")
    write_soy("src/broken.soy", "broken")
    return tmp_path


@pytest.mark.short
class TestCliBasics:
    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner):
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("compile", "deps", "cache"):
            assert command in result.output


@pytest.mark.short
class TestDepsCommand:
    def test_lists_dependencies(self, runner, project):
        result = runner.invoke(
            cli, ["deps", str(project / "src" / "foo.soy"), "--root", str(project)]
        )

        assert result.exit_code == 0, result.output
        assert str(project / "src" / "bar.soy") in result.output
        assert str(project / "src" / "broken.soy") not in result.output

    def test_parse_error_exits_with_error(self, runner, project):
        (project / "src" / "bad.soy").write_text("{template .x}\n")

        result = runner.invoke(
            cli, ["deps", str(project / "src" / "bad.soy"), "--root", str(project)]
        )

        assert result.exit_code == 1
        assert "unterminated template" in result.output


@pytest.mark.integration
class TestCompileCommand:
    def test_compile_to_stdout(self, runner, project, compiler_command):
        result = runner.invoke(
            cli,
            [
                "compile",
                str(project / "src" / "foo.soy"),
                "--root",
                str(project),
                "--compiler",
                compiler_command,
            ],
        )

        assert result.exit_code == 0, result.output
        assert "// compiled foo.soy" in result.output
        assert (project / ".soycache" / "foo.soy.js").exists()

    def test_compile_to_file(self, runner, project, compiler_command):
        output = project / "out" / "foo.js"
        output.parent.mkdir()

        result = runner.invoke(
            cli,
            [
                "compile",
                str(project / "src" / "foo.soy"),
                "--root",
                str(project),
                "--compiler",
                compiler_command,
                "-o",
                str(output),
            ],
        )

        assert result.exit_code == 0, result.output
        assert output.read_text() == "// compiled foo.soy"

    def test_compile_failure(self, runner, project, compiler_command):
        result = runner.invoke(
            cli,
            [
                "compile",
                str(project / "src" / "broken.soy"),
                "--root",
                str(project),
                "--compiler",
                compiler_command,
            ],
        )

        assert result.exit_code == 1
        assert "exited with code 2" in result.output
        assert not (project / ".soycache" / "broken.soy.js").exists()

    def test_compile_without_compiler(self, runner, project):
        result = runner.invoke(
            cli, ["compile", str(project / "src" / "foo.soy"), "--root", str(project)]
        )

        assert result.exit_code == 1
        assert "No compiler configured" in result.output

    def test_compiler_from_config_file(self, runner, project, compiler_command):
        config = project / "soyloader.yaml"
        config.write_text(f"compiler: {compiler_command!r}\nsoyDeps: []\n")

        result = runner.invoke(
            cli, ["compile", str(project / "src" / "foo.soy"), "--config", str(config)]
        )

        assert result.exit_code == 0, result.output
        assert "// compiled foo.soy" in result.output


@pytest.mark.short
class TestCacheCommands:
    def test_cache_path(self, runner, project):
        result = runner.invoke(cli, ["cache", "path", "--root", str(project)])

        assert result.exit_code == 0
        assert str(project / ".soycache") in result.output

    def test_cache_clear(self, runner, project):
        cached = project / ".soycache" / "foo.soy.js"
        cached.parent.mkdir()
        cached.write_text("// stale")

        result = runner.invoke(cli, ["cache", "clear", "--root", str(project)])

        assert result.exit_code == 0
        assert not (project / ".soycache").exists()

    def test_invalid_config_is_reported(self, runner, project):
        config = project / "soyloader.yaml"
        config.write_text("unknown_option: 1\n")

        result = runner.invoke(cli, ["cache", "path", "--config", str(config)])

        assert result.exit_code != 0
        assert "Invalid loader options" in result.output


@pytest.fixture
def linked_project(tmp_path, write_soy):
    """A project with a cyclic a <-> b call graph, reached through a symlinked root."""
    write_soy("real/src/a.soy", "a", "b.render")
    write_soy("real/src/b.soy", "b", "a.render")
    link = tmp_path / "link"
    link.symlink_to(tmp_path / "real", target_is_directory=True)
    return link


class TestSymlinkedRoot:
    @pytest.mark.short
    def test_deps_exclude_entry(self, runner, linked_project):
        result = runner.invoke(
            cli, ["deps", str(linked_project / "src" / "a.soy"), "--root", str(linked_project)]
        )

        assert result.exit_code == 0, result.output
        listed = [line for line in result.output.splitlines() if line.endswith(".soy")]
        assert listed == [str(linked_project / "src" / "b.soy")]

    @pytest.mark.integration
    def test_compile_caches_inside_mirrored_layout(
        self, runner, linked_project, compiler_command
    ):
        result = runner.invoke(
            cli,
            [
                "compile",
                str(linked_project / "src" / "a.soy"),
                "--root",
                str(linked_project),
                "--compiler",
                compiler_command,
            ],
        )

        assert result.exit_code == 0, result.output
        assert "(1 dependencies)" in result.output
        assert (linked_project / ".soycache" / "a.soy.js").exists()
        assert not (linked_project / ".soycache" / "__").exists()


@pytest.mark.short
class TestUnreadableTemplates:
    def test_deps_reports_invalid_encoding(self, runner, project):
        template = project / "src" / "latin1.soy"
        template.write_bytes(b"{namespace latin1}\n// caf\xe9\n")

        result = runner.invoke(cli, ["deps", str(template), "--root", str(project)])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "utf-8" in result.output

    def test_compile_reports_invalid_encoding(self, runner, project):
        template = project / "src" / "latin1.soy"
        template.write_bytes(b"{namespace latin1}\n// caf\xe9\n")

        result = runner.invoke(
            cli,
            ["compile", str(template), "--root", str(project), "--compiler", "soyc {src}"],
        )

        assert result.exit_code == 1
        assert "utf-8" in result.output
        assert not (project / ".soycache" / "latin1.soy.js").exists()
