"""Rich rendering of team results."""

import json
from typing import Any

from rich.table import Table

from ..pipeline import TeamResult
from ..scoring import ScoreOutcome
from ._common import console, score_style


def _fmt(value) -> str:
    return "n/a" if value is None else f"{value:.1f}"


def render_team(result: TeamResult, verbose: bool = False) -> None:
    if not result.ok:
        console.print(f"[bold]{result.team_id}[/bold]  [red]error:[/red] {result.error}")
        return

    score = result.score
    style = score_style(score.value)
    header = f"[bold]{result.team_id}[/bold]  CQI [{style}]{score.value:.1f}[/{style}]"
    if score.outcome is not ScoreOutcome.SCORED:
        header += f"  [dim]({score.marker})[/dim]"
    console.print(header)
    console.print(f"  [dim]{result.filter_summary.to_summary()}[/dim]")

    table = Table(show_header=True, show_lines=False, pad_edge=True)
    table.add_column("Component", min_width=18)
    table.add_column("Score", justify="right")
    table.add_column("Weight", justify="right")
    for name, value in score.components.as_dict().items():
        weight = score.weights.get(name)
        table.add_row(
            name.replace("_", " "), _fmt(value), "-" if weight is None else f"{weight:.2f}"
        )
    console.print(table)

    if score.penalties:
        penalties = Table(show_header=True, pad_edge=True)
        penalties.add_column("Penalty")
        penalties.add_column("x", justify="right")
        penalties.add_column("Reason")
        for p in score.penalties:
            penalties.add_row(p.code, f"{p.multiplier:.2f}", p.reason)
        console.print(penalties)

    orphans = result.attribution.orphans() if result.attribution else []
    if orphans:
        console.print(f"  [yellow]{len(orphans)} orphan commits[/yellow]")
        if verbose:
            for attributed in orphans:
                commit = attributed.commit
                console.print(f"    {commit.sha[:10]}  {commit.email}  {commit.subject}")

    for finding in result.anomalies:
        console.print(f"  [magenta]{finding.kind.value}[/magenta]  {finding.message}")
    console.print()


def team_to_dict(result: TeamResult) -> dict[str, Any]:
    data: dict[str, Any] = {"team_id": result.team_id, "state": result.state.value}
    if not result.ok:
        data["error"] = result.error
        return data

    score = result.score
    data.update(
        {
            "cqi": round(score.value, 2),
            "outcome": score.outcome.value,
            "base_score": round(score.base_score, 2),
            "penalty_multiplier": round(score.penalty_multiplier, 4),
            "components": score.components.as_dict(),
            "weights": score.weights,
            "penalties": [
                {"code": p.code, "multiplier": p.multiplier, "reason": p.reason}
                for p in score.penalties
            ],
            "filter": {
                "total": result.filter_summary.total,
                "kept": result.filter_summary.kept,
                "reduced": result.filter_summary.reduced,
                "excluded": result.filter_summary.excluded,
                "by_reason": result.filter_summary.by_reason,
            },
            "attribution": result.attribution.outcome_counts(),
            "anomalies": [
                {"kind": f.kind.value, "ratio": round(f.ratio, 4), "member": f.member_id}
                for f in result.anomalies
            ],
        }
    )
    return data


def print_json(results: list[TeamResult]) -> None:
    print(json.dumps([team_to_dict(r) for r in results], indent=2))
