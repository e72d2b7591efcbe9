"""Git operations for the release flow."""

from .repository import DEFAULT_REMOTE, GitError, GitRepository

__all__ = ["DEFAULT_REMOTE", "GitError", "GitRepository"]
