"""Console output abstraction.

Services report progress through ``ConsoleProtocol`` rather than printing
directly, so the CLI can render with Rich while tests capture records with
``MockConsole``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "ConsoleProtocol",
    "ConsoleRecord",
    "MockConsole",
    "RichConsole",
    "Style",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()  # confirmation of a completed step
    ERROR = auto()
    WARNING = auto()
    DIM = auto()  # executed commands, hints
    HEADER = auto()

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Interface for styled console output."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def success(self, message: str) -> None:
        """Confirm a completed step (``Tagged v1.0.0.``)."""
        ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def header(self, message: str) -> None: ...


_RICH_STYLES: dict[Style, str | None] = {
    Style.DEFAULT: None,
    Style.SUCCESS: "green",
    Style.ERROR: "red bold",
    Style.WARNING: "yellow",
    Style.DIM: "dim",
    Style.HEADER: "blue bold",
}


class RichConsole:
    """Terminal console backed by Rich.

    Messages are printed with markup disabled: gem output, gemspec paths and
    tag names may contain ``[brackets]``.
    Lines are never wrapped at the console width.

    Args:
        stderr: Write to stderr instead of stdout.
    """

    def __init__(self, *, stderr: bool = False) -> None:
        from rich.console import Console

        self._console = Console(stderr=stderr, highlight=False)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._console.print(
            message, style=_RICH_STYLES.get(style), markup=False, soft_wrap=True
        )

    def success(self, message: str) -> None:
        self.print(message, Style.SUCCESS)

    def error(self, message: str) -> None:
        self._prefixed("error", message, Style.ERROR)

    def warning(self, message: str) -> None:
        self._prefixed("warning", message, Style.WARNING)

    def header(self, message: str) -> None:
        self.print(f"\n{message}", Style.HEADER)

    def _prefixed(self, label: str, message: str, style: Style) -> None:
        from rich.text import Text

        text = Text(f"{label}:", style=_RICH_STYLES[style] or "")
        text.append(f" {message}")
        self._console.print(text, soft_wrap=True)


@dataclass
class ConsoleRecord:
    """One message captured by MockConsole."""

    message: str
    style: Style


@dataclass
class MockConsole:
    """Console that records output for assertions in tests."""

    outputs: list[ConsoleRecord] = field(default_factory=list)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(ConsoleRecord(message, style))

    def success(self, message: str) -> None:
        self.outputs.append(ConsoleRecord(message, Style.SUCCESS))

    def error(self, message: str) -> None:
        self.outputs.append(ConsoleRecord(f"error: {message}", Style.ERROR))

    def warning(self, message: str) -> None:
        self.outputs.append(ConsoleRecord(f"warning: {message}", Style.WARNING))

    def header(self, message: str) -> None:
        self.outputs.append(ConsoleRecord(message, Style.HEADER))

    # Test helpers

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def confirmations(self) -> list[str]:
        """Messages passed to ``success``, in order."""
        return [o.message for o in self.outputs if o.style == Style.SUCCESS]

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def find(self, substring: str) -> list[ConsoleRecord]:
        return [o for o in self.outputs if substring in o.message]
