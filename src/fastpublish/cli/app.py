"""fastpublish CLI application."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from fastpublish.errors import FastPublishError


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from fastpublish import __version__

        print(f"fastpublish {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="fastpublish",
    help="Bump, tag and publish package releases",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def _app_callback(
    version: Annotated[  # noqa: ARG001
        bool,
        typer.Option("--version", "-V", help="Show version and exit", callback=version_callback),
    ] = False,
) -> None:
    """Bump, tag and publish package releases."""
    pass


console = Console()
error_console = Console(stderr=True)

MODE_HELP = "major, minor or patch; add -if to skip unchanged packages (e.g. patch-if)"


def select_directories(paths: list[Path]) -> list[Path]:
    """Keep the paths that are directories, resolved to absolute paths."""
    selected = []
    for path in paths:
        if path.is_dir():
            selected.append(path.resolve())
        else:
            error_console.print(f"[yellow]Skipping {escape(str(path))}: not a directory[/yellow]")
    if not selected:
        error_console.print("[red]Error:[/red] no package directories given")
        raise typer.Exit(1)
    return selected


@app.command("git")
def git_cmd(
    mode: Annotated[str, typer.Argument(help=MODE_HELP)],
    paths: Annotated[list[Path], typer.Argument(help="Package directories")],
    registry: Annotated[
        bool,
        typer.Option("--registry", help="Also publish the new tag to the registry"),
    ] = False,
) -> None:
    """Bump the manifest version, then commit, tag and push."""
    from fastpublish.commands import handle_publish_command

    directories = select_directories(paths)
    asyncio.run(
        handle_publish_command(
            directories,
            mode,
            console=console,
            error_console=error_console,
            registry=registry,
        )
    )


@app.command("ppm")
def ppm_cmd(
    mode: Annotated[str, typer.Argument(help=MODE_HELP)],
    paths: Annotated[list[Path], typer.Argument(help="Package directories")],
) -> None:
    """Publish through the registry tool, then push to the remote."""
    from fastpublish.commands import handle_registry_command

    directories = select_directories(paths)
    asyncio.run(
        handle_registry_command(
            directories,
            mode,
            console=console,
            error_console=error_console,
        )
    )


@app.command("ppm-tag")
def ppm_tag_cmd(
    paths: Annotated[list[Path], typer.Argument(help="Package directories")],
) -> None:
    """Publish the latest existing tag to the registry."""
    from fastpublish.commands import handle_registry_command

    directories = select_directories(paths)
    asyncio.run(
        handle_registry_command(
            directories,
            None,
            console=console,
            error_console=error_console,
        )
    )


@app.command()
def bump(
    version: Annotated[str, typer.Argument(help="Current version, e.g. 1.2.3")],
    mode: Annotated[str, typer.Argument(help="major, minor or patch")],
) -> None:
    """Print the next version without touching any files."""
    from fastpublish.versioning import BumpMode, increase_version

    try:
        bump_mode = BumpMode.parse(mode)
    except ValueError as e:
        error_console.print(f"[red]Invalid bump mode:[/red] {escape(mode)}")
        raise typer.Exit(1) from e
    print(increase_version(version, bump_mode.bump))


def main() -> None:
    """Main entry point."""
    try:
        app()
    except FastPublishError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
