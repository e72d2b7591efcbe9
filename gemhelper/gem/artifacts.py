"""Gem archive operations: build, checksum, local install, registry push.

Each function shells out through the injected ``CommandRunner`` from the
gem's base directory and confirms success on the console. Toolchain output
is never rewritten: failures carry it verbatim.
"""

from __future__ import annotations

import hashlib
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from gemhelper.core.errors import HelperError
from gemhelper.core.result import Err, Ok, Result
from gemhelper.gem.descriptor import PackageDescriptor
from gemhelper.gem.push_host import PushTarget
from gemhelper.output.console import ConsoleProtocol
from gemhelper.platform.process import CommandRunner, ProcessError, format_command

__all__ = [
    "CHECKSUMS_DIR",
    "PKG_DIR",
    "BuildArtifact",
    "ChecksumRecord",
    "build_gem",
    "existing_artifact",
    "install_gem",
    "push_gem",
    "sha512_file",
    "write_checksum",
]

PKG_DIR = "pkg"
CHECKSUMS_DIR = "checksums"
CHECKSUM_SUFFIX = ".sha512"


@dataclass(frozen=True, slots=True)
class BuildArtifact:
    """A built ``.gem`` file under ``pkg/``."""

    name: str
    version: str
    path: Path

    @property
    def file_name(self) -> str:
        return self.path.name


@dataclass(frozen=True, slots=True)
class ChecksumRecord:
    """A SHA-512 digest written next to the other checksums."""

    artifact: BuildArtifact
    digest: str
    path: Path


def _failed_command(cmd: Sequence[str], e: ProcessError) -> str:
    return f"Running `{format_command(cmd)}` failed with the following output:\n\n{e.output}\n"


def _relative(path: Path, base: Path) -> str:
    try:
        return path.relative_to(base).as_posix()
    except ValueError:
        return str(path)


def _newest_gem_file(base: Path, name: str) -> Path | None:
    candidates = [p for p in base.glob(f"{name}-*.gem") if p.is_file()]
    if not candidates:
        return None
    return max(candidates, key=lambda p: p.stat().st_mtime)


def existing_artifact(base: Path, descriptor: PackageDescriptor) -> BuildArtifact | None:
    """The artifact a previous build left in ``pkg/``, if any."""
    path = base / PKG_DIR / descriptor.gem_file_name
    if not path.is_file():
        return None
    return BuildArtifact(name=descriptor.name, version=descriptor.version, path=path)


def build_gem(
    *,
    base: Path,
    descriptor: PackageDescriptor,
    gem_command: Sequence[str],
    runner: CommandRunner,
    console: ConsoleProtocol,
) -> Result[BuildArtifact, HelperError]:
    """Run ``gem build`` and move the result into ``pkg/``.

    Rebuilding an unchanged gemspec replaces the previous file in place.
    """
    cmd = [*gem_command, "build", "-V", str(descriptor.path)]
    result = runner.run(cmd, cwd=base)
    if isinstance(result, Err):
        return Err(HelperError(kind="toolchain", message=_failed_command(cmd, result.error)))

    built = _newest_gem_file(base, descriptor.name)
    if built is None:
        return Err(
            HelperError(
                kind="toolchain",
                message=f"`{format_command(cmd)}` did not produce {descriptor.name}-*.gem in {base}",
                hint=result.value.strip() or None,
            )
        )

    pkg_dir = base / PKG_DIR
    try:
        pkg_dir.mkdir(parents=True, exist_ok=True)
        target = built.replace(pkg_dir / built.name)
    except OSError as e:
        return Err(HelperError(kind="toolchain", message=f"Failed to move {built.name}: {e}"))

    console.success(
        f"{descriptor.name} {descriptor.version} built to {_relative(target, base)}."
    )
    return Ok(BuildArtifact(name=descriptor.name, version=descriptor.version, path=target))


def sha512_file(path: Path) -> str:
    h = hashlib.sha512()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def write_checksum(
    *,
    base: Path,
    artifact: BuildArtifact,
    console: ConsoleProtocol,
) -> Result[ChecksumRecord, HelperError]:
    """Write ``checksums/<gem file>.sha512`` containing the hex digest."""
    target = base / CHECKSUMS_DIR / f"{artifact.file_name}{CHECKSUM_SUFFIX}"
    try:
        digest = sha512_file(artifact.path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(digest + "\n", encoding="utf-8")
    except OSError as e:
        return Err(
            HelperError(
                kind="toolchain",
                message=f"Failed to write checksum for {artifact.file_name}: {e}",
            )
        )

    console.success(
        f"{artifact.name} {artifact.version} checksum written to {_relative(target, base)}."
    )
    return Ok(ChecksumRecord(artifact=artifact, digest=digest, path=target))


def install_gem(
    *,
    base: Path,
    artifact: BuildArtifact,
    gem_command: Sequence[str],
    runner: CommandRunner,
    console: ConsoleProtocol,
    local: bool = False,
) -> Result[None, HelperError]:
    """Install the built gem; ``local`` restricts ``gem`` to local sources."""
    cmd = [*gem_command, "install", str(artifact.path)]
    if local:
        cmd.append("--local")

    result = runner.run(cmd, cwd=base)
    if isinstance(result, Err):
        return Err(
            HelperError(
                kind="subprocess",
                message=_failed_command(cmd, result.error),
                hint=f"Couldn't install {artifact.name} ({artifact.version})",
            )
        )

    console.success(f"{artifact.name} ({artifact.version}) installed.")
    return Ok(None)


def push_gem(
    *,
    base: Path,
    artifact: BuildArtifact,
    target: PushTarget,
    gem_command: Sequence[str],
    runner: CommandRunner,
    console: ConsoleProtocol,
    push_key: str | None = None,
) -> Result[None, HelperError]:
    """Publish the gem with ``gem push``.

    Runs attached to the terminal so ``gem`` can prompt for an OTP code.
    """
    cmd = [*gem_command, "push", str(artifact.path)]
    if push_key:
        cmd += ["--key", push_key]
    cmd += target.push_args()

    result = runner.run(cmd, cwd=base, interactive=True)
    if isinstance(result, Err):
        e = result.error
        return Err(
            HelperError(
                kind="subprocess",
                message=f"Running `{format_command(cmd)}` failed (exit {e.returncode})",
                hint=e.output.strip() or None,
            )
        )

    console.success(f"Pushed {artifact.name} {artifact.version} to {target.display}.")
    return Ok(None)
