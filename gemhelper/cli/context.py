from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import typer

from gemhelper.core.config import CONFIG_FILE_NAME, Config, load_config_or_default
from gemhelper.core.errors import ErrorCode, HelperError, exit_code_for
from gemhelper.core.result import Err
from gemhelper.gem.helper import GemHelper
from gemhelper.output.console import ConsoleProtocol, RichConsole, Style
from gemhelper.platform.process import CommandRunner, EchoingRunner, SubprocessRunner


@dataclass(frozen=True, slots=True)
class GlobalOptions:
    directory: Path | None = None
    name: str | None = None
    tag_prefix: str | None = None
    verbose: bool = False


@dataclass(frozen=True, slots=True)
class CLIContext:
    helper: GemHelper
    config: Config
    console: ConsoleProtocol


def make_runner(*, verbose: bool, console: ConsoleProtocol) -> CommandRunner:
    runner: CommandRunner = SubprocessRunner()
    if verbose:
        return EchoingRunner(runner, lambda line: console.print(line, Style.DIM))
    return runner


def exit_with_error(error: HelperError, console: ConsoleProtocol) -> NoReturn:
    console.error(error.message.rstrip())
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)
    raise typer.Exit(code=int(exit_code_for(error)))


def build_context(options: GlobalOptions, *, remote: str | None = None) -> CLIContext:
    console = RichConsole()
    base = (options.directory or Path.cwd()).expanduser().resolve()

    config_result = load_config_or_default(base)
    if isinstance(config_result, Err):
        console.error(f"{CONFIG_FILE_NAME}: {config_result.error.message}")
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    try:
        config = config_result.value.with_overrides(
            environ=os.environ,
            tag_prefix=options.tag_prefix,
            remote=remote,
        )
    except ValueError as e:
        console.error(f"invalid GEM_COMMAND: {e}")
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    runner = make_runner(verbose=options.verbose, console=console)
    helper_result = GemHelper.create(
        base,
        options.name,
        runner=runner,
        console=console,
        config=config,
    )
    if isinstance(helper_result, Err):
        exit_with_error(helper_result.error, console)

    return CLIContext(helper=helper_result.value, config=config, console=console)
