"""Display-only anomaly flags: heuristic proposal plus exact verification."""

from .models import ActivityEvidence, AnomalyFinding, AnomalyKind, CandidateFlag
from .proposer import AnomalyProposer, HeuristicProposer
from .verifier import detect, exact_ratio, propose, verify

__all__ = [
    "ActivityEvidence",
    "AnomalyFinding",
    "AnomalyKind",
    "CandidateFlag",
    "AnomalyProposer",
    "HeuristicProposer",
    "propose",
    "verify",
    "detect",
    "exact_ratio",
]
