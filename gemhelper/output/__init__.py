"""Output abstraction layer."""

from .console import (
    ConsoleProtocol,
    ConsoleRecord,
    MockConsole,
    RichConsole,
    Style,
)

__all__ = [
    "ConsoleProtocol",
    "ConsoleRecord",
    "MockConsole",
    "RichConsole",
    "Style",
]
