"""Exact verification of proposed anomaly flags.

Every flag kind is recomputed from exact commit counts and timestamps.
A candidate above its threshold is confirmed with the exact ratio (marked
corrected if the estimate was off), a candidate below it is dropped, and a
kind the proposer missed is added when its exact ratio is over threshold.
"""

from __future__ import annotations

import math
from collections import Counter
from typing import Optional, Sequence

from ..config import AnomalyConfig
from ..logging_config import get_logger
from .models import ActivityEvidence, AnomalyFinding, AnomalyKind, CandidateFlag
from .proposer import SECONDS_PER_DAY, AnomalyProposer, HeuristicProposer

logger = get_logger(__name__)

_TOLERANCE = 1e-9


def exact_ratio(
    kind: AnomalyKind, evidence: ActivityEvidence, config: AnomalyConfig
) -> tuple[Optional[float], Optional[str]]:
    """(ratio, member) for one flag kind, or (None, None) if undefined."""
    bounds = evidence.bounds()
    if not evidence.events or bounds is None:
        return None, None
    start, end = bounds
    duration = end - start
    total = len(evidence.events)
    timestamps = evidence.timestamps

    if kind is AnomalyKind.SOLO_DEVELOPMENT:
        counts = Counter(member for member, _ in evidence.events)
        top = min(counts, key=lambda m: (-counts[m], m))
        return counts[top] / total, top

    if duration <= 0:
        return None, None

    if kind is AnomalyKind.LATE_DUMP:
        cutoff = end - config.late_window_fraction * duration
        return sum(1 for ts in timestamps if ts >= cutoff) / total, None

    if kind is AnomalyKind.INACTIVE_PERIOD:
        if total < 2:
            return None, None
        gap = max(b - a for a, b in zip(timestamps, timestamps[1:]))
        return gap / duration, None

    if kind is AnomalyKind.UNEVEN_DISTRIBUTION:
        num_days = end // SECONDS_PER_DAY - start // SECONDS_PER_DAY + 1
        if num_days < config.burst_min_days:
            return None, None
        busiest = math.ceil(num_days * config.burst_day_fraction)
        day_counts = Counter(ts // SECONDS_PER_DAY for ts in timestamps)
        return sum(n for _, n in day_counts.most_common(busiest)) / total, None

    return None, None


def _threshold(kind: AnomalyKind, config: AnomalyConfig) -> float:
    return {
        AnomalyKind.LATE_DUMP: config.late_dump_ratio,
        AnomalyKind.SOLO_DEVELOPMENT: config.solo_ratio,
        AnomalyKind.INACTIVE_PERIOD: config.inactive_gap_ratio,
        AnomalyKind.UNEVEN_DISTRIBUTION: config.burst_ratio,
    }[kind]


def _message(
    kind: AnomalyKind, ratio: float, member: Optional[str], config: AnomalyConfig
) -> str:
    if kind is AnomalyKind.LATE_DUMP:
        return (
            f"{ratio:.0%} of commits in the final "
            f"{config.late_window_fraction:.0%} of the project"
        )
    if kind is AnomalyKind.SOLO_DEVELOPMENT:
        return f"{member} authored {ratio:.0%} of commits"
    if kind is AnomalyKind.INACTIVE_PERIOD:
        return f"Longest gap between commits spans {ratio:.0%} of the project"
    return f"{ratio:.0%} of commits on the busiest {config.burst_day_fraction:.0%} of days"


def _finding(
    kind: AnomalyKind,
    evidence: ActivityEvidence,
    config: AnomalyConfig,
    claim: Optional[CandidateFlag] = None,
) -> Optional[AnomalyFinding]:
    ratio, member = exact_ratio(kind, evidence, config)
    threshold = _threshold(kind, config)
    if ratio is None or ratio <= threshold:
        if claim is not None:
            logger.debug(
                "Discarded %s: claimed %.2f, exact %s",
                kind.value,
                claim.claimed_ratio,
                "n/a" if ratio is None else f"{ratio:.2f}",
            )
        return None

    if claim is None:
        logger.debug("Added %s missed by the proposer: exact %.2f", kind.value, ratio)
        corrected = True
    else:
        corrected = abs(ratio - claim.claimed_ratio) > _TOLERANCE or (
            claim.member_id is not None and claim.member_id != member
        )
    return AnomalyFinding(
        kind=kind,
        ratio=ratio,
        threshold=threshold,
        message=_message(kind, ratio, member, config),
        member_id=member,
        corrected=corrected,
    )


def verify(
    candidates: Sequence[CandidateFlag],
    evidence: ActivityEvidence,
    config: Optional[AnomalyConfig] = None,
) -> list[AnomalyFinding]:
    """Confirm, correct or discard each candidate, then add any missed flag.

    Every kind is recomputed exactly, proposed or not. A kind the proposer
    missed but whose exact ratio is over threshold is reported as corrected.
    One finding per kind at most.
    """
    config = config or AnomalyConfig()
    claims: dict[AnomalyKind, CandidateFlag] = {}
    for candidate in candidates:
        claims.setdefault(candidate.kind, candidate)

    findings = []
    for kind in AnomalyKind:
        finding = _finding(kind, evidence, config, claims.get(kind))
        if finding is not None:
            findings.append(finding)
    return findings


def propose(
    evidence: ActivityEvidence,
    config: Optional[AnomalyConfig] = None,
    proposer: Optional[AnomalyProposer] = None,
) -> list[CandidateFlag]:
    return (proposer or HeuristicProposer(config)).propose(evidence)


def detect(
    evidence: ActivityEvidence,
    config: Optional[AnomalyConfig] = None,
    proposer: Optional[AnomalyProposer] = None,
) -> list[AnomalyFinding]:
    """Propose with the heuristic, then report only verified findings."""
    return verify(propose(evidence, config, proposer), evidence, config)
