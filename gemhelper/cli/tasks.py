"""Named tasks with prerequisites, owned by the CLI.

``TASKS`` is an explicit table: each entry names its prerequisites and an
action taking the ``TaskRun`` for the current invocation. Within one run a
task executes at most once, so ``install`` after ``build`` reuses the
artifact instead of building twice.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from gemhelper.core.errors import HelperError
from gemhelper.core.result import Err, Ok, Result
from gemhelper.gem.artifacts import BuildArtifact
from gemhelper.gem.helper import GemHelper
from gemhelper.gem.release import SKIP_PUBLISH_HINT, run_release

__all__ = ["TASKS", "Task", "TaskRun", "describe", "invoke"]


@dataclass
class TaskRun:
    """Per-invocation state shared by tasks."""

    helper: GemHelper
    remote: str | None = None
    artifact: BuildArtifact | None = None
    completed: list[str] = field(default_factory=list)


TaskAction = Callable[[TaskRun], Result[None, HelperError]]


@dataclass(frozen=True, slots=True)
class Task:
    name: str
    description: Callable[[GemHelper], str]
    action: TaskAction
    prerequisites: tuple[str, ...] = ()


def _build(run: TaskRun) -> Result[None, HelperError]:
    built = run.helper.build_gem()
    if isinstance(built, Err):
        return built
    run.artifact = built.value
    return Ok(None)


def _checksum(run: TaskRun) -> Result[None, HelperError]:
    written = run.helper.build_checksum(run.artifact)
    if isinstance(written, Err):
        return written
    return Ok(None)


def _install(run: TaskRun) -> Result[None, HelperError]:
    return run.helper.install_gem(run.artifact)


def _install_local(run: TaskRun) -> Result[None, HelperError]:
    return run.helper.install_gem(run.artifact, local=True)


def _release(run: TaskRun) -> Result[None, HelperError]:
    released = run_release(run.helper, remote=run.remote)
    if isinstance(released, Err):
        return released
    run.artifact = released.value.artifact
    return Ok(None)


def _guard_clean(run: TaskRun) -> Result[None, HelperError]:
    return run.helper.guard_clean()


def _source_control_push(run: TaskRun) -> Result[None, HelperError]:
    return run.helper.source_control_push(run.remote)


def _rubygem_push(run: TaskRun) -> Result[None, HelperError]:
    if not run.helper.gem_push_enabled:
        run.helper.skip_gem_push()
        return Ok(None)
    return run.helper.rubygem_push(run.artifact)


def _gem_file(h: GemHelper) -> str:
    return h.descriptor.gem_file_name


TASKS: dict[str, Task] = {
    t.name: t
    for t in (
        Task(
            "build",
            lambda h: f"Build {_gem_file(h)} into the pkg directory.",
            _build,
        ),
        Task(
            "build:checksum",
            lambda h: f"Generate SHA512 checksum of {_gem_file(h)} into the checksums directory.",
            _checksum,
            ("build",),
        ),
        Task(
            "install",
            lambda h: f"Build and install {_gem_file(h)} into system gems.",
            _install,
            ("build",),
        ),
        Task(
            "install:local",
            lambda h: f"Build and install {_gem_file(h)} into system gems without network access.",
            _install_local,
            ("build",),
        ),
        Task(
            "release",
            lambda h: (
                f"Create tag {h.version_tag} and build and push {_gem_file(h)} to "
                f"{h.push_target.display}. Use `{SKIP_PUBLISH_HINT}` to skip publishing."
            ),
            _release,
        ),
        Task(
            "release:guard_clean",
            lambda h: "Fail unless the working tree is committed.",
            _guard_clean,
        ),
        Task(
            "release:source_control_push",
            lambda h: f"Tag {h.version_tag} and push commits and tag.",
            _source_control_push,
            ("release:guard_clean",),
        ),
        Task(
            "release:rubygem_push",
            lambda h: f"Push {_gem_file(h)} to {h.push_target.display}.",
            _rubygem_push,
        ),
    )
}


def invoke(
    name: str,
    run: TaskRun,
    *,
    tasks: Mapping[str, Task] = TASKS,
) -> Result[None, HelperError]:
    """Run ``name`` after its prerequisites, skipping tasks already completed."""
    if name in run.completed:
        return Ok(None)

    task = tasks.get(name)
    if task is None:
        return Err(
            HelperError(
                kind="unknown_task",
                message=f"Don't know how to build task '{name}'",
                hint="available: " + ", ".join(tasks),
            )
        )

    for prerequisite in task.prerequisites:
        done = invoke(prerequisite, run, tasks=tasks)
        if isinstance(done, Err):
            return done

    result = task.action(run)
    if isinstance(result, Err):
        return result
    run.completed.append(name)
    return Ok(None)


def describe(helper: GemHelper, *, tasks: Mapping[str, Task] = TASKS) -> list[tuple[str, str]]:
    return [(t.name, t.description(helper)) for t in tasks.values()]
