"""Single-team analysis command."""

from pathlib import Path
from typing import Optional

import typer

from ..exceptions import CollabInsightError
from ..logging_config import setup_logging
from ..pipeline import analyze_team, load_team
from . import app
from ._common import console, resolve_config, resolve_rater
from ._display import print_json, render_team


@app.command()
def analyze(
    repo: Path = typer.Argument(
        ...,
        help="Team repository to analyze",
        exists=True,
        file_okay=False,
        dir_okay=True,
        readable=True,
    ),
    team: Path = typer.Option(
        ...,
        "--team",
        "-t",
        help="Team description (JSON): members, push anchors, sessions",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
    ratings: Optional[Path] = typer.Option(
        None,
        "--ratings",
        "-r",
        help="Precomputed chunk ratings (JSON). Without it the score is degraded.",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
    template_email: Optional[str] = typer.Option(
        None,
        "--template-email",
        help="Author email of the course template commits",
    ),
    json_output: bool = typer.Option(False, "--json", help="Output in machine-readable JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging, list orphans"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
):
    """
    Attribute, filter and score one team's repository.

    [bold cyan]Examples:[/bold cyan]

      collab-insight analyze repos/team-07 --team team-07.json

      collab-insight analyze repos/team-07 -t team-07.json -r ratings.json --json
    """
    logger = setup_logging(verbose=verbose, quiet=quiet)

    try:
        cfg = resolve_config(config=config, template_email=template_email)
        team_input = load_team(team, repo_path=str(repo))
        result = analyze_team(team_input, rater=resolve_rater(ratings), config=cfg)
    except CollabInsightError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Analysis interrupted[/yellow]")
        raise typer.Exit(130)

    if json_output:
        print_json([result])
    else:
        render_team(result, verbose=verbose)

    if not result.ok:
        raise typer.Exit(1)
