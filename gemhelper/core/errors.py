"""Error payloads and CLI exit codes.

``HelperError`` is the single error type carried inside ``Err`` by every
gem, git and task operation. ``ErrorCode`` maps its ``kind`` to a stable
process exit status, which only the CLI layer uses.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Literal

__all__ = ["ErrorCode", "ErrorKind", "HelperError", "exit_code_for"]


ErrorKind = Literal[
    "setup",
    "toolchain",
    "precondition",
    "remote_config",
    "subprocess",
    "config",
    "unknown_task",
]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Success
    - 1: User error (dirty tree, unknown task)
    - 2: Environment error (no gemspec, bad config)
    - 3: Build error (gem build/install/push failed)
    - 4: Network error (git push failed, no remote)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    NETWORK_ERROR = 4


@dataclass(frozen=True, slots=True)
class HelperError:
    """Failure of a helper operation.

    Attributes:
        kind: Error category, decides the exit code.
        message: Primary message shown to the user.
        hint: Optional follow-up detail (tool output, a suggestion).
    """

    kind: ErrorKind
    message: str
    hint: str | None = None


_EXIT_CODES: dict[ErrorKind, ErrorCode] = {
    "setup": ErrorCode.ENV_ERROR,
    "config": ErrorCode.ENV_ERROR,
    "toolchain": ErrorCode.BUILD_ERROR,
    "subprocess": ErrorCode.BUILD_ERROR,
    "precondition": ErrorCode.USER_ERROR,
    "unknown_task": ErrorCode.USER_ERROR,
    "remote_config": ErrorCode.NETWORK_ERROR,
}


def exit_code_for(error: HelperError) -> ErrorCode:
    return _EXIT_CODES.get(error.kind, ErrorCode.BUILD_ERROR)
