"""Subprocess execution behind an injectable runner.

All calls to ``gem``, ``git`` and ``ruby`` go through a ``CommandRunner``.
Production code uses ``SubprocessRunner``; tests substitute a scripted fake.

Usage:
    runner = SubprocessRunner()
    match runner.run(["git", "tag"], cwd=repo_path):
        case Ok(stdout):
            print(stdout)
        case Err(error):
            print(error.output)
"""

from __future__ import annotations

import shlex
import subprocess
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from gemhelper.core.result import Err, Ok, Result

__all__ = [
    "CommandRunner",
    "EchoingRunner",
    "FakeRunner",
    "ProcessError",
    "RecordedCall",
    "SubprocessRunner",
    "echo_form",
    "format_command",
]


def format_command(cmd: Sequence[str]) -> str:
    """Render argv the way a user would type it in a shell."""
    return shlex.join(cmd)


def echo_form(cmd: Sequence[str]) -> str:
    """Like ``format_command``, with multi-line arguments (inline scripts) elided."""
    return " ".join("<script>" if "\n" in arg else shlex.quote(arg) for arg in cmd)


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: The exit code of the process (-1 if it never started).
        stdout: Standard output (may be empty).
        stderr: Standard error (may be empty).
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def output(self) -> str:
        """Combined stdout and stderr, as a terminal would have shown them."""
        parts = [p for p in (self.stdout, self.stderr) if p]
        return "".join(parts)

    def __str__(self) -> str:
        return f"{format_command(self.command)} failed (exit {self.returncode})"


class CommandRunner(Protocol):
    """Runs external commands.

    ``run`` returns Ok(stdout) when the command exits 0 and Err(ProcessError)
    otherwise. With ``interactive=True`` the child shares the terminal
    (needed for OTP prompts during ``gem push``) and stdout is not captured.
    """

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str] | None = None,
        interactive: bool = False,
    ) -> Result[str, ProcessError]: ...


class SubprocessRunner:
    """``CommandRunner`` backed by ``subprocess.run``."""

    def __init__(self, *, timeout: float | None = None) -> None:
        self._timeout = timeout

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str] | None = None,
        interactive: bool = False,
    ) -> Result[str, ProcessError]:
        argv = list(cmd)
        try:
            proc = subprocess.run(
                argv,
                cwd=str(cwd),
                env=dict(env) if env is not None else None,
                capture_output=not interactive,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            return Err(
                ProcessError(
                    command=tuple(argv),
                    returncode=-1,
                    stdout="",
                    stderr=f"Command timed out after {self._timeout}s",
                )
            )
        except OSError as e:
            return Err(
                ProcessError(
                    command=tuple(argv),
                    returncode=-1,
                    stdout="",
                    stderr=str(e),
                )
            )

        stdout = proc.stdout or ""
        stderr = proc.stderr or ""
        if proc.returncode != 0:
            return Err(
                ProcessError(
                    command=tuple(argv),
                    returncode=proc.returncode,
                    stdout=stdout,
                    stderr=stderr,
                )
            )
        return Ok(stdout)


class EchoingRunner:
    """Wraps a runner and reports each command before running it."""

    def __init__(self, inner: CommandRunner, echo: Callable[[str], None]) -> None:
        self._inner = inner
        self._echo = echo

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str] | None = None,
        interactive: bool = False,
    ) -> Result[str, ProcessError]:
        self._echo(echo_form(cmd))
        return self._inner.run(cmd, cwd=cwd, env=env, interactive=interactive)


@dataclass(frozen=True, slots=True)
class RecordedCall:
    """A command seen by FakeRunner."""

    command: tuple[str, ...]
    cwd: Path
    interactive: bool


@dataclass(frozen=True, slots=True)
class _Rule:
    prefix: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    effect: Callable[[tuple[str, ...], Path], None] | None


class FakeRunner:
    """Scripted ``CommandRunner`` for tests.

    Responses are registered by argv prefix; the longest matching prefix
    wins, later registrations win ties. Unmatched commands succeed with empty
    output. Every call is recorded.
    """

    def __init__(self) -> None:
        self.calls: list[RecordedCall] = []
        self._rules: list[_Rule] = []

    def on(
        self,
        *prefix: str,
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
        effect: Callable[[tuple[str, ...], Path], None] | None = None,
    ) -> None:
        self._rules.append(_Rule(tuple(prefix), returncode, stdout, stderr, effect))

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str] | None = None,
        interactive: bool = False,
    ) -> Result[str, ProcessError]:
        command = tuple(cmd)
        self.calls.append(RecordedCall(command=command, cwd=cwd, interactive=interactive))

        rule = self._match(command)
        if rule is None:
            return Ok("")
        if rule.effect is not None:
            rule.effect(command, cwd)
        # Interactive children write to the terminal; nothing is captured.
        stdout = "" if interactive else rule.stdout
        stderr = "" if interactive else rule.stderr
        if rule.returncode != 0:
            return Err(
                ProcessError(
                    command=command,
                    returncode=rule.returncode,
                    stdout=stdout,
                    stderr=stderr,
                )
            )
        return Ok(stdout)

    def _match(self, command: tuple[str, ...]) -> _Rule | None:
        best: _Rule | None = None
        for rule in self._rules:
            if command[: len(rule.prefix)] != rule.prefix:
                continue
            if best is None or len(rule.prefix) >= len(best.prefix):
                best = rule
        return best

    # Test helpers

    @property
    def commands(self) -> list[tuple[str, ...]]:
        return [c.command for c in self.calls]

    def ran(self, *prefix: str) -> bool:
        return any(c[: len(prefix)] == prefix for c in self.commands)
