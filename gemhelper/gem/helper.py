"""GemHelper: one gem directory, its gemspec, and the operations on it.

The gemspec is resolved once, when the helper is created, and treated as
read-only afterwards. Every operation returns a ``Result``; nothing raises
for expected failures.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from gemhelper.core.config import Config
from gemhelper.core.errors import ErrorKind, HelperError
from gemhelper.core.result import Err, Ok, Result
from gemhelper.gem import artifacts
from gemhelper.gem.artifacts import BuildArtifact, ChecksumRecord
from gemhelper.gem.descriptor import PackageDescriptor, resolve_descriptor
from gemhelper.gem.push_host import PushTarget, resolve_push_target
from gemhelper.git.repository import GitError, GitRepository
from gemhelper.output.console import ConsoleProtocol, Style
from gemhelper.platform.process import CommandRunner

__all__ = ["GEM_PUSH_ENV_VAR", "GemHelper"]

GEM_PUSH_ENV_VAR = "gem_push"
_GEM_PUSH_DISABLED = {"n", "no", "nil", "false", "off", "0"}

DIRTY_TREE_MESSAGE = "There are files that need to be committed first."


class GemHelper:
    """Build, install and release the gem found in ``base``.

    Use ``GemHelper.create`` to resolve the gemspec; the constructor takes an
    already-loaded descriptor.
    """

    def __init__(
        self,
        *,
        base: Path,
        descriptor: PackageDescriptor,
        runner: CommandRunner,
        console: ConsoleProtocol,
        config: Config | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.base = base
        self.descriptor = descriptor
        self.config = config or Config()
        self._runner = runner
        self._console = console
        self._environ: Mapping[str, str] = environ if environ is not None else os.environ
        self.repo = GitRepository(base, runner)

    @classmethod
    def create(
        cls,
        base: Path | None = None,
        name: str | None = None,
        *,
        runner: CommandRunner,
        console: ConsoleProtocol,
        config: Config | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> Result[GemHelper, HelperError]:
        """Resolve the gemspec in ``base`` (default: cwd) and build a helper."""
        config = config or Config()
        resolved = resolve_descriptor(
            base, name, runner=runner, ruby_command=config.ruby_command
        )
        if isinstance(resolved, Err):
            return resolved
        descriptor = resolved.value
        return Ok(
            cls(
                base=descriptor.path.parent,
                descriptor=descriptor,
                runner=runner,
                console=console,
                config=config,
                environ=environ,
            )
        )

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def version(self) -> str:
        return self.descriptor.version

    @property
    def version_tag(self) -> str:
        return f"{self.config.tag_prefix}v{self.version}"

    @property
    def push_target(self) -> PushTarget:
        return resolve_push_target(self.descriptor, self._environ)

    @property
    def gem_push_enabled(self) -> bool:
        """False when ``gem_push`` is set to a falsy word (``no``, ``off``, ``0``...)."""
        value = self._environ.get(GEM_PUSH_ENV_VAR, "").strip().lower()
        return value not in _GEM_PUSH_DISABLED

    @property
    def console(self) -> ConsoleProtocol:
        return self._console

    def skip_gem_push(self) -> None:
        value = self._environ.get(GEM_PUSH_ENV_VAR, "").strip()
        self._console.warning(
            f"Not pushing {self.descriptor.gem_file_name}: {GEM_PUSH_ENV_VAR}={value}."
        )

    # -- archive ---------------------------------------------------------

    def build_gem(self) -> Result[BuildArtifact, HelperError]:
        return artifacts.build_gem(
            base=self.base,
            descriptor=self.descriptor,
            gem_command=self.config.gem_command,
            runner=self._runner,
            console=self._console,
        )

    def build_checksum(
        self, artifact: BuildArtifact | None = None
    ) -> Result[ChecksumRecord, HelperError]:
        built = self._ensure_built(artifact)
        if isinstance(built, Err):
            return built
        return artifacts.write_checksum(base=self.base, artifact=built.value, console=self._console)

    def install_gem(
        self, artifact: BuildArtifact | None = None, *, local: bool = False
    ) -> Result[None, HelperError]:
        built = self._ensure_built(artifact)
        if isinstance(built, Err):
            return built
        return artifacts.install_gem(
            base=self.base,
            artifact=built.value,
            gem_command=self.config.gem_command,
            runner=self._runner,
            console=self._console,
            local=local,
        )

    def rubygem_push(self, artifact: BuildArtifact | None = None) -> Result[None, HelperError]:
        """Push to the resolved registry, reusing ``pkg/`` output when present."""
        if artifact is None:
            artifact = artifacts.existing_artifact(self.base, self.descriptor)
        built = self._ensure_built(artifact)
        if isinstance(built, Err):
            return built
        return artifacts.push_gem(
            base=self.base,
            artifact=built.value,
            target=self.push_target,
            gem_command=self.config.gem_command,
            runner=self._runner,
            console=self._console,
            push_key=self.config.push_key,
        )

    def _ensure_built(self, artifact: BuildArtifact | None) -> Result[BuildArtifact, HelperError]:
        if artifact is not None:
            return Ok(artifact)
        return self.build_gem()

    # -- source control --------------------------------------------------

    def guard_clean(self) -> Result[None, HelperError]:
        if self.repo.is_clean():
            return Ok(None)
        return Err(HelperError(kind="precondition", message=DIRTY_TREE_MESSAGE))

    def tag_version(self) -> Result[bool, HelperError]:
        """Create the release tag unless one with the same name exists.

        Returns:
            Ok(True) if the tag was created now, Ok(False) if it already existed.
        """
        tag = self.version_tag
        exists = self.repo.has_tag(tag)
        if isinstance(exists, Err):
            return Err(_from_git(exists.error, kind="toolchain"))
        if exists.value:
            self._console.success(f"Tag {tag} has already been created.")
            return Ok(False)

        created = self.repo.create_tag(tag, f"Version {self.version}")
        if isinstance(created, Err):
            return Err(_from_git(created.error, kind="toolchain"))
        self._console.success(f"Tagged {tag}.")
        return Ok(True)

    def git_push(self, remote: str | None = None) -> Result[None, HelperError]:
        """Push the current branch and the release tag by full ref."""
        branch = self.repo.current_branch()
        if isinstance(branch, Err):
            return Err(_from_git(branch.error, kind="remote_config"))

        target_remote = remote or self.config.remote or self.repo.default_remote(branch.value)
        for ref in (f"refs/heads/{branch.value}", f"refs/tags/{self.version_tag}"):
            pushed = self.repo.push(target_remote, ref)
            if isinstance(pushed, Err):
                e = pushed.error
                return Err(
                    HelperError(
                        kind="remote_config",
                        message=(
                            f"Couldn't git push. `git push {target_remote} {ref}' failed "
                            f"with the following output:\n\n{e.output}\n"
                        ),
                    )
                )

        self._console.success("Pushed git commits and release tag.")
        return Ok(None)

    def source_control_push(self, remote: str | None = None) -> Result[None, HelperError]:
        """Tag (idempotently) and push; a tag created here is removed if the push fails."""
        tagged = self.tag_version()
        if isinstance(tagged, Err):
            return tagged

        pushed = self.git_push(remote)
        if isinstance(pushed, Err) and tagged.value:
            self.untag()
        return pushed

    def untag(self) -> None:
        tag = self.version_tag
        self._console.error(f"Untagging {tag} due to error.")
        deleted = self.repo.delete_tag(tag)
        if isinstance(deleted, Err):
            self._console.print(deleted.error.output.strip() or deleted.error.message, Style.DIM)


def _from_git(e: GitError, *, kind: ErrorKind) -> HelperError:
    return HelperError(
        kind=kind,
        message=f"Running `{e.command}` failed with the following output:\n\n{e.output}\n",
        hint=e.message,
    )
