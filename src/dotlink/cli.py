"""CLI for dotlink - a declarative dotfiles symlinker."""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_dist_version
from typing import Optional

import typer
from typing_extensions import Annotated

from .core import (
    DEFAULT_CONFIG_FILENAME,
    DEFAULT_DOTFILES_DIR,
    check_platform,
    link_dotfiles,
    resolve_run_options,
    summarize_results,
)
from .exceptions import DotlinkError

# Constants
DEFAULT_VERSION = "0.1.0"

app = typer.Typer(
    help="dotlink - link dotfiles into place from a declarative list",
    context_settings={"help_option_names": ["-h", "--help"]},
    add_completion=False,
)


def get_version() -> str:
    """Return the installed dotlink version."""
    try:
        return get_dist_version("dotlink")
    except PackageNotFoundError:
        return DEFAULT_VERSION


def version_callback(value: bool) -> None:
    if value:
        typer.secho(f"dotlink version {get_version()}", fg=typer.colors.GREEN)
        raise typer.Exit()


@app.command()
def main(
    config: Annotated[
        str,
        typer.Option(
            "--config",
            "-c",
            help="Path to the link list, relative to --dir unless absolute",
        ),
    ] = DEFAULT_CONFIG_FILENAME,
    dotfiles_dir: Annotated[
        str,
        typer.Option(
            "--dir",
            "-d",
            help="Directory containing your dotfiles and, by default, the link list",
        ),
    ] = DEFAULT_DOTFILES_DIR,
    quiet: Annotated[
        bool, typer.Option("--quiet", "-q", help="Only report failures")
    ] = False,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show dotlink version and exit",
        ),
    ] = None,
) -> None:
    """
    Symlink each file listed in the link list into place.

    Failed entries are reported and skipped; the exit code is non-zero only
    when the link list itself cannot be loaded.
    """
    try:
        check_platform()
        options = resolve_run_options(config, dotfiles_dir)
        results = link_dotfiles(options, quiet=quiet)
    except DotlinkError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    if quiet or not results:
        return

    summary = summarize_results(results)
    color = typer.colors.GREEN if not summary["failed"] else typer.colors.YELLOW
    typer.secho(
        f"\n✓ Done! Created {summary['success']} links, failed {summary['failed']}",
        fg=color,
        bold=True,
    )


if __name__ == "__main__":
    app()
