"""Release flow as a small state machine.

    CLEAN_CHECK -> BUILD -> TAG -> PUSH -> PUBLISH -> DONE

Each handler performs one step and returns the next state. The first
``Err`` stops the machine; nothing already done (a tag, a push) is rolled
back except a tag created in this run when the push itself fails.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from enum import StrEnum

from gemhelper.core.errors import HelperError
from gemhelper.core.result import Err, Ok, Result
from gemhelper.gem.artifacts import BuildArtifact
from gemhelper.gem.helper import GEM_PUSH_ENV_VAR, GemHelper

__all__ = ["ReleaseState", "ReleaseStep", "release_handlers", "run_release", "run_state_machine"]


class ReleaseStep(StrEnum):
    CLEAN_CHECK = "clean_check"
    BUILD = "build"
    TAG = "tag"
    PUSH = "push"
    PUBLISH = "publish"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class ReleaseState:
    step: ReleaseStep = ReleaseStep.CLEAN_CHECK
    artifact: BuildArtifact | None = None
    tag_created: bool = False
    published: bool = False


StepHandler = Callable[[ReleaseState], Result[ReleaseState, HelperError]]


def run_state_machine(
    *,
    initial_state: ReleaseState,
    handlers: Mapping[ReleaseStep, StepHandler],
    on_step: Callable[[ReleaseState], None] | None = None,
) -> Result[ReleaseState, HelperError]:
    current = initial_state

    while current.step != ReleaseStep.DONE:
        handler = handlers.get(current.step)
        if handler is None:
            return Err(
                HelperError(
                    kind="unknown_task",
                    message=f"unknown release step: {current.step}",
                )
            )

        if on_step is not None:
            on_step(current)

        outcome = handler(current)
        if isinstance(outcome, Err):
            return outcome
        current = outcome.value

    return Ok(current)


def release_handlers(
    helper: GemHelper, *, remote: str | None = None
) -> dict[ReleaseStep, StepHandler]:
    def clean_check(state: ReleaseState) -> Result[ReleaseState, HelperError]:
        guarded = helper.guard_clean()
        if isinstance(guarded, Err):
            return guarded
        return Ok(replace(state, step=ReleaseStep.BUILD))

    def build(state: ReleaseState) -> Result[ReleaseState, HelperError]:
        built = helper.build_gem()
        if isinstance(built, Err):
            return built
        return Ok(replace(state, step=ReleaseStep.TAG, artifact=built.value))

    def tag(state: ReleaseState) -> Result[ReleaseState, HelperError]:
        tagged = helper.tag_version()
        if isinstance(tagged, Err):
            return tagged
        return Ok(replace(state, step=ReleaseStep.PUSH, tag_created=tagged.value))

    def push(state: ReleaseState) -> Result[ReleaseState, HelperError]:
        pushed = helper.git_push(remote)
        if isinstance(pushed, Err):
            if state.tag_created:
                helper.untag()
            return pushed
        return Ok(replace(state, step=ReleaseStep.PUBLISH))

    def publish(state: ReleaseState) -> Result[ReleaseState, HelperError]:
        if not helper.gem_push_enabled:
            helper.skip_gem_push()
            return Ok(replace(state, step=ReleaseStep.DONE))
        published = helper.rubygem_push(state.artifact)
        if isinstance(published, Err):
            return published
        return Ok(replace(state, step=ReleaseStep.DONE, published=True))

    return {
        ReleaseStep.CLEAN_CHECK: clean_check,
        ReleaseStep.BUILD: build,
        ReleaseStep.TAG: tag,
        ReleaseStep.PUSH: push,
        ReleaseStep.PUBLISH: publish,
    }


def run_release(
    helper: GemHelper,
    *,
    remote: str | None = None,
    on_step: Callable[[ReleaseState], None] | None = None,
) -> Result[ReleaseState, HelperError]:
    """Guard, build, tag, push and publish ``helper``'s gem.

    Set ``gem_push=no`` in the environment to stop after the git push.
    """
    helper.console.header(f"Releasing {helper.name} {helper.version}")
    return run_state_machine(
        initial_state=ReleaseState(),
        handlers=release_handlers(helper, remote=remote),
        on_step=on_step,
    )


# Re-exported for callers describing how to skip publishing.
SKIP_PUBLISH_HINT = f"{GEM_PUSH_ENV_VAR}=no"
