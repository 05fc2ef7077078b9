"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

from rich.console import Console

from ..config import ScoringConfig, load_config
from ..rating import ChunkRater, StaticRater

console = Console()


def resolve_config(
    config: Optional[Path] = None,
    workers: Optional[int] = None,
    template_email: Optional[str] = None,
) -> ScoringConfig:
    """Build the scoring config from CLI options."""
    overrides = {}
    if workers is not None:
        overrides["workers"] = workers
    if template_email is not None:
        overrides["template_author_email"] = template_email
    return load_config(config_file=config, **overrides)


def resolve_rater(ratings: Optional[Path]) -> Optional[ChunkRater]:
    return StaticRater.from_file(ratings) if ratings is not None else None


def score_style(value: float) -> str:
    if value >= 70:
        return "green"
    if value >= 40:
        return "yellow"
    return "red"
