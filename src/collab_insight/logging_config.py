"""
Logging configuration for Collab Insight.

Provides structured logging with rich formatting for terminal output.
Records emitted while a team is being analyzed carry that team's id, so
interleaved output from the course worker pool stays attributable.
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

from rich.console import Console
from rich.logging import RichHandler

_current_team: ContextVar[Optional[str]] = ContextVar("collab_insight_team", default=None)


class TeamContextFilter(logging.Filter):
    """Stamps each record with the team being analyzed on the emitting thread."""

    def filter(self, record: logging.LogRecord) -> bool:
        team_id = _current_team.get()
        record.team_id = team_id or "-"
        record.team_label = f"[{team_id}] " if team_id else ""
        return True


@contextmanager
def team_context(team_id: str) -> Iterator[None]:
    """Tag log records from the current thread with ``team_id`` until exit."""
    token = _current_team.set(team_id)
    try:
        yield
    finally:
        _current_team.reset(token)




def setup_logging(
    verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure logging with rich handler for colored output.

    Args:
        verbose: Enable DEBUG level logging
        quiet: Suppress all but ERROR level logging
        log_file: Optional file path to write logs to

    Returns:
        Configured logger instance for collab_insight
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    console = Console(stderr=True)

    rich_handler = RichHandler(
        console=console,
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        markup=False,
        show_time=True,
        show_path=verbose,
    )
    rich_handler.setFormatter(logging.Formatter("%(team_label)s%(message)s", datefmt="[%X]"))
    handlers: list[logging.Handler] = [rich_handler]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - team=%(team_id)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        handlers.append(file_handler)

    for handler in handlers:
        handler.addFilter(TeamContextFilter())

    # Replace handlers left by earlier calls in the same process
    logging.basicConfig(level=level, handlers=handlers, force=True)

    logger = logging.getLogger("collab_insight")
    logger.setLevel(level)

    return logger
def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Module name (e.g., 'collab_insight.scoring')
              If None, returns the root collab_insight logger

    Returns:
        Logger instance
    """
    if name is None:
        return logging.getLogger("collab_insight")

    if not name.startswith("collab_insight"):
        name = f"collab_insight.{name}"

    return logging.getLogger(name)
