"""Process execution."""

from .process import (
    CommandRunner,
    EchoingRunner,
    FakeRunner,
    ProcessError,
    SubprocessRunner,
    format_command,
)

__all__ = [
    "CommandRunner",
    "EchoingRunner",
    "FakeRunner",
    "ProcessError",
    "SubprocessRunner",
    "format_command",
]
