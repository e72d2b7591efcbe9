"""Shared fixtures: a scratch gem directory and a scripted runner.

The runner answers ``ruby`` (gemspec loading), ``gem build`` (drops a .gem
in the base directory) and ``git rev-parse`` (branch ``master``). Every other
command succeeds silently unless a test registers a response.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from gemhelper.core.config import Config
from gemhelper.core.result import Ok
from gemhelper.gem.helper import GemHelper
from gemhelper.output.console import MockConsole
from gemhelper.platform.process import FakeRunner
from gemhelper.test._gem_fixtures import APP_NAME, fake_gem_build, gemspec_json


@pytest.fixture
def gem_dir(tmp_path: Path) -> Path:
    base = tmp_path / APP_NAME
    base.mkdir()
    (base / f"{APP_NAME}.gemspec").write_text("Gem::Specification.new\n", encoding="utf-8")
    return base.resolve()


@pytest.fixture
def runner() -> FakeRunner:
    r = FakeRunner()
    r.on("ruby", stdout=gemspec_json())
    r.on("gem", "build", effect=fake_gem_build())
    r.on("git", "rev-parse", stdout="master\n")
    return r


@pytest.fixture
def console() -> MockConsole:
    return MockConsole()


@pytest.fixture
def environ() -> dict[str, str]:
    return {}


@pytest.fixture
def make_helper(gem_dir: Path, runner: FakeRunner, console: MockConsole, environ: dict[str, str]):
    def make(config: Config | None = None) -> GemHelper:
        result = GemHelper.create(
            gem_dir,
            runner=runner,
            console=console,
            config=config,
            environ=environ,
        )
        assert isinstance(result, Ok), result
        return result.value

    return make


@pytest.fixture
def helper(make_helper) -> GemHelper:
    return make_helper()
