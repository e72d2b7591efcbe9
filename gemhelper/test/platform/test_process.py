"""Tests for gemhelper.platform.process."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from gemhelper.core.result import Err, Ok
from gemhelper.platform.process import (
    EchoingRunner,
    FakeRunner,
    ProcessError,
    SubprocessRunner,
    echo_form,
    format_command,
)


# =============================================================================
# Command rendering
# =============================================================================


class TestFormatCommand:
    """Tests for format_command."""

    def test_plain(self) -> None:
        assert format_command(["gem", "push", "pkg/a-1.gem"]) == "gem push pkg/a-1.gem"

    def test_quotes_spaces(self) -> None:
        """Test that arguments with spaces are shell-quoted."""
        assert format_command(["git", "tag", "-m", "Version 1.0"]) == "git tag -m 'Version 1.0'"


class TestEchoForm:
    """Tests for echo_form."""

    def test_matches_format_command_for_plain_argv(self) -> None:
        cmd = ["git", "tag", "-m", "Version 1.0", "v1.0"]
        assert echo_form(cmd) == format_command(cmd)

    def test_elides_inline_script(self) -> None:
        """Test that a multi-line -e script is shown as a placeholder."""
        cmd = ["ruby", "-e", 'require "json"\nputs 1\n', "/tmp/a b/x.gemspec"]

        assert echo_form(cmd) == "ruby -e <script> '/tmp/a b/x.gemspec'"


# =============================================================================
# ProcessError
# =============================================================================


class TestProcessError:
    """Tests for ProcessError."""

    def test_output_combines_streams(self) -> None:
        """Test that output is stdout followed by stderr."""
        error = ProcessError(("gem", "build"), 1, "out\n", "err\n")
        assert error.output == "out\nerr\n"

    def test_str(self) -> None:
        error = ProcessError(("git", "push", "origin"), 128, "", "fatal")
        assert str(error) == "git push origin failed (exit 128)"

    def test_frozen(self) -> None:
        error = ProcessError(("cmd",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


# =============================================================================
# Runners
# =============================================================================


class TestSubprocessRunner:
    """Tests for SubprocessRunner against the running interpreter."""

    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        """Test that a zero exit returns captured stdout."""
        result = SubprocessRunner().run([sys.executable, "-c", "print('hello')"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert "hello" in result.value

    def test_failure_keeps_output(self, tmp_path: Path) -> None:
        """Test that a non-zero exit carries code and both streams."""
        result = SubprocessRunner().run(
            [sys.executable, "-c", "import sys; print('o'); sys.stderr.write('e'); sys.exit(3)"],
            cwd=tmp_path,
        )

        assert isinstance(result, Err)
        assert result.error.returncode == 3
        assert "o" in result.error.stdout
        assert result.error.stderr == "e"

    def test_command_not_found(self, tmp_path: Path) -> None:
        """Test that a missing binary is an Err with exit -1."""
        result = SubprocessRunner().run(["nonexistent_command_12345"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert result.error.stderr

    def test_uses_cwd(self, tmp_path: Path) -> None:
        (tmp_path / "marker.txt").write_text("x")

        result = SubprocessRunner().run(
            [sys.executable, "-c", "import os; print(os.listdir('.'))"], cwd=tmp_path
        )

        assert isinstance(result, Ok)
        assert "marker.txt" in result.value

    def test_timeout(self, tmp_path: Path) -> None:
        """Test that a timed out command becomes an Err."""
        runner = SubprocessRunner(timeout=0.2)
        result = runner.run([sys.executable, "-c", "import time; time.sleep(5)"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert "timed out" in result.error.stderr


class TestEchoingRunner:
    """Tests for EchoingRunner."""

    def test_echoes_then_delegates(self, tmp_path: Path) -> None:
        """Test that the command is echoed and the inner result returned."""
        inner = FakeRunner()
        inner.on("git", "tag", stdout="v1\n")
        lines: list[str] = []

        result = EchoingRunner(inner, lines.append).run(["git", "tag"], cwd=tmp_path)

        assert result == Ok("v1\n")
        assert lines == ["git tag"]
        assert inner.commands == [("git", "tag")]

    def test_echo_elides_script_but_runs_it(self, tmp_path: Path) -> None:
        """Test that the echo is one line while the full script is still executed."""
        inner = FakeRunner()
        lines: list[str] = []
        script = 'require "json"\nputs JSON.generate({})\n'

        EchoingRunner(inner, lines.append).run(["ruby", "-e", script, "x.gemspec"], cwd=tmp_path)

        assert lines == ["ruby -e <script> x.gemspec"]
        assert inner.commands == [("ruby", "-e", script, "x.gemspec")]


class TestFakeRunner:
    """Tests for the scripted FakeRunner."""

    def test_unmatched_commands_succeed(self, tmp_path: Path) -> None:
        runner = FakeRunner()
        assert runner.run(["anything"], cwd=tmp_path) == Ok("")

    def test_longest_prefix_wins(self, tmp_path: Path) -> None:
        """Test that the most specific registered prefix answers."""
        runner = FakeRunner()
        runner.on("git", stdout="generic")
        runner.on("git", "push", returncode=1, stderr="no remote")

        assert runner.run(["git", "status"], cwd=tmp_path) == Ok("generic")
        pushed = runner.run(["git", "push", "origin"], cwd=tmp_path)
        assert isinstance(pushed, Err)
        assert pushed.error.stderr == "no remote"

    def test_later_rule_wins_tie(self, tmp_path: Path) -> None:
        runner = FakeRunner()
        runner.on("git", "tag", stdout="old")
        runner.on("git", "tag", stdout="new")
        assert runner.run(["git", "tag"], cwd=tmp_path) == Ok("new")

    def test_effect_runs_in_cwd(self, tmp_path: Path) -> None:
        """Test that side effects receive the argv and working directory."""
        runner = FakeRunner()
        runner.on("touch", effect=lambda cmd, cwd: (cwd / cmd[1]).write_text(""))

        runner.run(["touch", "f.txt"], cwd=tmp_path)

        assert (tmp_path / "f.txt").exists()

    def test_records_interactive_flag(self, tmp_path: Path) -> None:
        runner = FakeRunner()
        runner.run(["gem", "push", "x.gem"], cwd=tmp_path, interactive=True)

        assert runner.calls[0].interactive is True
        assert runner.ran("gem", "push")
        assert not runner.ran("gem", "build")

    def test_interactive_calls_capture_nothing(self, tmp_path: Path) -> None:
        """Test that interactive calls drop scripted output, like a real terminal child."""
        runner = FakeRunner()
        runner.on("gem", "push", returncode=1, stdout="Access Denied.\n", stderr="err\n")

        result = runner.run(["gem", "push", "x.gem"], cwd=tmp_path, interactive=True)

        assert isinstance(result, Err)
        assert result.error.returncode == 1
        assert result.error.output == ""

    def test_interactive_success_returns_empty_stdout(self, tmp_path: Path) -> None:
        runner = FakeRunner()
        runner.on("gem", "push", stdout="Successfully registered gem\n")

        assert runner.run(["gem", "push", "x.gem"], cwd=tmp_path, interactive=True) == Ok("")
