"""CLI entry point. Registers all subcommands."""

import typer

from .. import __version__
from ._common import console

app = typer.Typer(
    name="collab-insight",
    help="Collab Insight - Commit Attribution and Collaboration Quality Scoring",
    add_completion=False,
    rich_markup_mode="rich",
)


@app.command()
def version():
    """Show version and exit."""
    console.print(f"[bold cyan]Collab Insight[/bold cyan] version [green]{__version__}[/green]")


# Import subcommands to register them
from .analyze import analyze as _analyze  # noqa: F401, E402
from .course import course as _course  # noqa: F401, E402


def main():
    app()
