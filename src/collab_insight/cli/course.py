"""Course-wide analysis command."""

from pathlib import Path
from typing import Optional

import typer
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from ..exceptions import CollabInsightError
from ..logging_config import setup_logging
from ..pipeline import CourseRun, TeamResult, load_course
from . import app
from ._common import console, resolve_config, resolve_rater, score_style
from ._display import print_json, render_team


def _summary_table(results: list[TeamResult]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=True)
    table.add_column("Team", min_width=12)
    table.add_column("CQI", justify="right")
    table.add_column("Outcome")
    table.add_column("Penalties")
    table.add_column("Anomalies")
    for r in sorted(results, key=lambda r: r.score.value if r.ok else -1.0):
        if not r.ok:
            table.add_row(r.team_id, "-", "[red]error[/red]", "", r.error or "")
            continue
        style = score_style(r.score.value)
        table.add_row(
            r.team_id,
            f"[{style}]{r.score.value:.1f}[/{style}]",
            r.score.marker,
            ", ".join(p.code for p in r.score.penalties),
            ", ".join(f.kind.value for f in r.anomalies),
        )
    return table


@app.command()
def course(
    manifest: Path = typer.Argument(
        ...,
        help="Course file (JSON) with exercise_id and a teams list",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
    ratings: Optional[Path] = typer.Option(
        None,
        "--ratings",
        "-r",
        help="Precomputed chunk ratings (JSON)",
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
    workers: Optional[int] = typer.Option(
        None,
        "-w",
        "--workers",
        help="Teams analyzed in parallel",
        min=1,
        max=64,
    ),
    json_output: bool = typer.Option(False, "--json", help="Output in machine-readable JSON"),
    detail: bool = typer.Option(False, "--detail", help="Show the full breakdown per team"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
):
    """
    Analyze every team of an exercise.

    A team whose repository cannot be read is reported as an error and the
    run continues with the others.

    [bold cyan]Examples:[/bold cyan]

      collab-insight course course.json -r ratings.json

      collab-insight course course.json --workers 8 --json
    """
    logger = setup_logging(verbose=verbose, quiet=quiet)
    run = None

    try:
        cfg = resolve_config(config=config, workers=workers)
        exercise_id, teams = load_course(manifest)
        run = CourseRun(exercise_id, teams, rater=resolve_rater(ratings), config=cfg)

        if json_output or quiet:
            results = run.run()
        else:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                TimeElapsedColumn(),
                console=console,
                transient=True,
            ) as progress:
                task = progress.add_task(f"Analyzing {exercise_id}", total=len(teams))
                results = run.run(on_team_done=lambda _: progress.advance(task))
    except CollabInsightError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        if run is not None:
            run.cancel()
        console.print("\n[yellow]Analysis interrupted[/yellow]")
        raise typer.Exit(130)

    if json_output:
        print_json(results)
        return

    if detail:
        for result in results:
            render_team(result, verbose=verbose)
    console.print(_summary_table(results))
    status = run.status
    console.print(
        f"[dim]{status.processed_teams}/{status.total_teams} teams, "
        f"{status.failed_teams} failed[/dim]"
    )
