"""Bounded, timeout-guarded rating of a team's chunks.

A failed or timed-out call turns only its own chunk into an error rating.
``RaterUnavailableError`` stops the whole team's rating and reports the
team as unrated so scoring can fall back to the degraded outcome.
"""

from __future__ import annotations

import concurrent.futures
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional, Sequence

from ..exceptions import RaterUnavailableError
from ..filtering.chunker import CommitChunk
from ..logging_config import get_logger
from .models import Rating
from .protocols import ChunkRater

logger = get_logger(__name__)


@dataclass
class RatingOutcome:
    rated: list[tuple[CommitChunk, Rating]] = field(default_factory=list)
    unavailable: bool = False
    unavailable_reason: str = ""

    @property
    def failures(self) -> int:
        return sum(1 for _, r in self.rated if r.is_error)

    @property
    def all_failed(self) -> bool:
        return bool(self.rated) and self.failures == len(self.rated)


def _call_with_deadline(rater: ChunkRater, chunk: CommitChunk, timeout: float) -> Rating:
    """Run one rating call on its own daemon thread and wait up to ``timeout``.

    The deadline starts when the call starts. A call still running at the
    deadline is abandoned so the caller's slot is freed for the next chunk.
    """
    box: dict[str, object] = {}

    def _target() -> None:
        try:
            box["rating"] = rater.rate(chunk)
        except BaseException as e:  # re-raised on the supervising thread
            box["error"] = e

    worker = threading.Thread(
        target=_target, name=f"rater-call-{chunk.chunk_id[:12]}", daemon=True
    )
    worker.start()
    worker.join(timeout)
    if worker.is_alive():
        raise concurrent.futures.TimeoutError()
    if "error" in box:
        raise box["error"]  # type: ignore[misc]
    return box["rating"]  # type: ignore[return-value]


def rate_chunks(
    rater: ChunkRater,
    chunks: Sequence[CommitChunk],
    concurrency: int = 4,
    timeout: float = 60.0,
    limiter: Optional[threading.Semaphore] = None,
) -> RatingOutcome:
    """Rate every chunk, at most ``concurrency`` calls at a time.

    Args:
        rater: The rating collaborator
        chunks: Chunks in scoring order; results keep this order
        concurrency: Concurrent calls for this team
        timeout: Seconds each call may run, counted from its start
        limiter: Optional semaphore shared by all teams of a run

    Returns:
        RatingOutcome with one rating per chunk, or ``unavailable`` set.
    """
    outcome = RatingOutcome()
    if not chunks:
        return outcome

    def _rate(chunk: CommitChunk) -> Rating:
        if limiter is None:
            return _call_with_deadline(rater, chunk, timeout)
        with limiter:
            return _call_with_deadline(rater, chunk, timeout)

    executor = ThreadPoolExecutor(max_workers=concurrency, thread_name_prefix="rater")
    try:
        futures = [(chunk, executor.submit(_rate, chunk)) for chunk in chunks]
        for chunk, future in futures:
            try:
                rating = future.result()
            except concurrent.futures.TimeoutError:
                logger.warning("Rating of chunk %s timed out after %ss", chunk.chunk_id[:12], timeout)
                rating = Rating.error(f"timed out after {timeout}s")
            except RaterUnavailableError as e:
                logger.error("Rater unavailable, skipping remaining chunks: %s", e.reason)
                outcome.unavailable = True
                outcome.unavailable_reason = e.reason
                outcome.rated = []
                return outcome
            except Exception as e:
                logger.warning("Rating of chunk %s failed: %s", chunk.chunk_id[:12], e)
                rating = Rating.error(str(e))
            outcome.rated.append((chunk, rating))
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    if outcome.failures:
        logger.info("%d of %d chunks could not be rated", outcome.failures, len(chunks))
    return outcome
