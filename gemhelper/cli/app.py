from __future__ import annotations

from pathlib import Path

import typer

from gemhelper import __version__
from gemhelper.cli.context import GlobalOptions, build_context, exit_with_error
from gemhelper.cli.tasks import TaskRun, describe, invoke
from gemhelper.core.result import Err
from gemhelper.output.console import Style


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _options(ctx: typer.Context) -> GlobalOptions:
    obj = ctx.obj
    return obj if isinstance(obj, GlobalOptions) else GlobalOptions()


def _run_task(ctx: typer.Context, name: str, *, remote: str | None = None) -> None:
    cli = build_context(_options(ctx), remote=remote)
    result = invoke(name, TaskRun(helper=cli.helper, remote=remote))
    if isinstance(result, Err):
        exit_with_error(result.error, cli.console)


_REMOTE_OPTION = typer.Option(
    None, "--remote", help="git remote to push to (default: branch remote, then origin)"
)


@app.command("build")
def build(ctx: typer.Context) -> None:
    """Build the gem into the pkg directory."""
    _run_task(ctx, "build")


@app.command("build:checksum")
def build_checksum(ctx: typer.Context) -> None:
    """Build the gem and write its SHA512 checksum."""
    _run_task(ctx, "build:checksum")


@app.command("install")
def install(ctx: typer.Context) -> None:
    """Build and install the gem into system gems."""
    _run_task(ctx, "install")


@app.command("install:local")
def install_local(ctx: typer.Context) -> None:
    """Build and install the gem without network access."""
    _run_task(ctx, "install:local")


@app.command("release")
def release(ctx: typer.Context, remote: str | None = _REMOTE_OPTION) -> None:
    """Guard, build, tag, push and publish the gem."""
    _run_task(ctx, "release", remote=remote)


@app.command("release:guard_clean")
def release_guard_clean(ctx: typer.Context) -> None:
    """Fail unless all changes are committed."""
    _run_task(ctx, "release:guard_clean")


@app.command("release:source_control_push")
def release_source_control_push(ctx: typer.Context, remote: str | None = _REMOTE_OPTION) -> None:
    """Tag the version and push commits and tag."""
    _run_task(ctx, "release:source_control_push", remote=remote)


@app.command("release:rubygem_push")
def release_rubygem_push(ctx: typer.Context) -> None:
    """Push the built gem to the registry."""
    _run_task(ctx, "release:rubygem_push")


@app.command("tasks")
def list_tasks(ctx: typer.Context) -> None:
    """List tasks with descriptions for this gem."""
    cli = build_context(_options(ctx))
    rows = describe(cli.helper)
    width = max(len(name) for name, _ in rows)
    for name, text in rows:
        cli.console.print(f"{name.ljust(width)}  # {text}")
    cli.console.print(f"gemspec: {cli.helper.descriptor.path}", Style.DIM)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    directory: Path | None = typer.Option(
        None, "--dir", "-C", help="Gem directory (default: current directory)"
    ),
    name: str | None = typer.Option(
        None, "--name", help="Gem name, when the directory holds several gemspecs"
    ),
    tag_prefix: str | None = typer.Option(
        None, "--tag-prefix", help="Prefix for release tags (<prefix>v<version>)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Echo executed commands."),
) -> None:
    del version
    ctx.obj = GlobalOptions(
        directory=directory,
        name=name,
        tag_prefix=tag_prefix,
        verbose=verbose,
    )


def main() -> None:
    app()
