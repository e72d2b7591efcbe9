"""Git working-tree operations used by the release flow.

Every call goes through the injected ``CommandRunner`` and runs with the
gem's base directory as working directory.

Usage:
    repo = GitRepository(Path("/path/to/gem"), SubprocessRunner())
    if not repo.is_clean():
        ...
    match repo.current_branch():
        case Ok(branch):
            print(branch)
        case Err(e):
            print(e.message)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from gemhelper.core.result import Err, Ok, Result
from gemhelper.platform.process import CommandRunner, ProcessError, format_command

__all__ = ["DEFAULT_REMOTE", "GitError", "GitRepository"]

DEFAULT_REMOTE = "origin"


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command line that failed
        message: Short description
        output: Combined output of the failed command
        returncode: Process return code
    """

    command: str
    message: str
    output: str = ""
    returncode: int = 1


def _git_error(e: ProcessError, message: str) -> GitError:
    return GitError(
        command=format_command(e.command),
        message=message,
        output=e.output,
        returncode=e.returncode,
    )


class GitRepository:
    """Git operations on the repository containing a gem.

    Attributes:
        path: Directory git commands run in
    """

    def __init__(self, path: Path, runner: CommandRunner) -> None:
        self.path = path
        self._runner = runner

    def has_unstaged_changes(self) -> bool:
        """True if tracked files differ from the index."""
        return isinstance(self._run(["diff", "--exit-code"]), Err)

    def has_uncommitted_changes(self) -> bool:
        """True if the index differs from HEAD.

        Also True when HEAD does not exist yet (no commits).
        """
        return isinstance(self._run(["diff-index", "--quiet", "--cached", "HEAD"]), Err)

    def is_clean(self) -> bool:
        return not self.has_unstaged_changes() and not self.has_uncommitted_changes()

    def tags(self) -> Result[list[str], GitError]:
        result = self._run(["tag"])
        match result:
            case Err(e):
                return Err(_git_error(e, "git tag failed"))
            case Ok(stdout):
                return Ok([ln.strip() for ln in stdout.splitlines() if ln.strip()])

    def has_tag(self, name: str) -> Result[bool, GitError]:
        """Check tag existence by name only (its target is not compared)."""
        result = self.tags()
        if isinstance(result, Err):
            return result
        return Ok(name in result.value)

    def create_tag(self, name: str, message: str) -> Result[None, GitError]:
        """Create an annotated tag at HEAD."""
        result = self._run(["tag", "-m", message, name])
        if isinstance(result, Err):
            return Err(_git_error(result.error, f"failed to create tag {name}"))
        return Ok(None)

    def delete_tag(self, name: str) -> Result[None, GitError]:
        result = self._run(["tag", "-d", name])
        if isinstance(result, Err):
            return Err(_git_error(result.error, f"failed to delete tag {name}"))
        return Ok(None)

    def current_branch(self) -> Result[str, GitError]:
        """Name of the checked-out branch.

        When a tag shares the branch's name git answers ``heads/<name>``;
        the prefix is dropped so callers can build ``refs/heads/<name>``.
        """
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        match result:
            case Err(e):
                return Err(_git_error(e, "failed to determine current branch"))
            case Ok(stdout):
                branch = stdout.strip()
                if branch.startswith("heads/"):
                    branch = branch[len("heads/") :]
                return Ok(branch)

    def branch_remote(self, branch: str) -> str | None:
        """Remote the branch tracks, or None if it has none configured."""
        result = self._run(["config", "--get", f"branch.{branch}.remote"])
        if isinstance(result, Err):
            return None
        return result.value.strip() or None

    def default_remote(self, branch: str) -> str:
        return self.branch_remote(branch) or DEFAULT_REMOTE

    def push(self, remote: str, ref: str) -> Result[None, GitError]:
        """Push one fully-qualified ref (``refs/heads/x``, ``refs/tags/y``)."""
        result = self._run(["push", remote, ref])
        if isinstance(result, Err):
            return Err(_git_error(result.error, "git push failed"))
        return Ok(None)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        return self._runner.run(["git", *args], cwd=self.path)
