"""
Data types shared by the selection and remediation pipeline
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class PodPhase(str, Enum):
    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"

    @classmethod
    def from_api(cls, value: Optional[str]) -> "PodPhase":
        """Map a raw ``status.phase`` string, falling back to Unknown"""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class PodRef:
    name: str
    namespace: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass(frozen=True)
class PodSnapshot:
    """Point-in-time view of a pod, read right before a decision"""

    ref: PodRef
    phase: PodPhase
    has_owner_reference: bool
    # Only used for logging, never interpreted
    owner_summary: List[str] = field(default_factory=list)
    creation_timestamp: Optional[datetime] = None


@dataclass(frozen=True)
class EventRecord:
    involved_object_name: str
    reason: str
    message: str


@dataclass(frozen=True)
class MatchCriterion:
    reason: str
    message_substring: str


# Pods selected in one cycle, mapped to the event that triggered selection
CandidateSet = Dict[PodRef, EventRecord]


class Outcome(str, Enum):
    DELETED = "deleted"
    WOULD_DELETE = "would_delete"
    SKIPPED_NO_OWNER = "skipped_no_owner"
    STATE_CHANGED = "state_changed"
    VANISHED = "vanished"
    DELETE_FAILED = "delete_failed"
    CHECK_FAILED = "check_failed"


@dataclass(frozen=True)
class RemediationResult:
    ref: PodRef
    outcome: Outcome
    phase: Optional[PodPhase] = None
    error: Optional[str] = None


@dataclass
class CycleReport:
    """Summary of one reconciliation cycle"""

    pending_count: int = 0
    candidate_count: int = 0
    results: List[RemediationResult] = field(default_factory=list)
    aborted: bool = False

    def count(self, outcome: Outcome) -> int:
        return sum(1 for result in self.results if result.outcome == outcome)

    def outcome_counts(self) -> Dict[str, Any]:
        return {
            outcome.value: self.count(outcome)
            for outcome in Outcome
            if self.count(outcome)
        }
