from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from .colors import ColorDescriptor


@dataclass(frozen=True)
class TrialProvenance:
    """Readable summary of the parameters that produced each colour of a trial."""

    target: str
    background_a: str
    background_b: str


@dataclass(frozen=True)
class Trial:
    """One stimulus: a target disk shown on background A and on background B."""

    trial_id: str
    target: ColorDescriptor
    background_a: ColorDescriptor
    background_b: ColorDescriptor
    provenance: TrialProvenance


class ResponseOutcome(str, Enum):
    """Subject judgement of the target between the two backgrounds."""

    SAME = "same"
    DIFFERENT = "different"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class TrialResult:
    """A presented trial paired with the subject's response."""

    trial: Trial
    outcome: ResponseOutcome
    reaction_time_ms: float
    timestamp_ms: int

    @property
    def trial_id(self) -> str:
        return self.trial.trial_id

    @property
    def timed_out(self) -> bool:
        return self.outcome is ResponseOutcome.TIMEOUT

    @property
    def perceived_same(self) -> Optional[bool]:
        """``True``/``False`` for a judgement, ``None`` when the trial timed out."""

        if self.timed_out:
            return None
        return self.outcome is ResponseOutcome.SAME

    @classmethod
    def from_response(
        cls,
        trial: Trial,
        perceived_same: Optional[bool],
        *,
        started_ms: int,
        ended_ms: int,
        timeout_ms: int,
    ) -> "TrialResult":
        """Record a response; ``perceived_same=None`` means no answer arrived in time.

        A timed-out trial is stored with a reaction time of exactly
        ``timeout_ms`` whatever the clock readings were.
        """

        if perceived_same is None:
            return cls(trial, ResponseOutcome.TIMEOUT, float(timeout_ms), ended_ms)
        outcome = ResponseOutcome.SAME if perceived_same else ResponseOutcome.DIFFERENT
        return cls(trial, outcome, float(ended_ms - started_ms), ended_ms)


@dataclass(frozen=True)
class ResultSummary:
    total: int
    same: int
    different: int
    timed_out: int


def summarize_results(results: Iterable[TrialResult]) -> ResultSummary:
    """Count same/different/timed-out responses."""

    counts = {outcome: 0 for outcome in ResponseOutcome}
    for result in results:
        counts[result.outcome] += 1
    return ResultSummary(
        total=sum(counts.values()),
        same=counts[ResponseOutcome.SAME],
        different=counts[ResponseOutcome.DIFFERENT],
        timed_out=counts[ResponseOutcome.TIMEOUT],
    )


__all__ = [
    "ResponseOutcome",
    "ResultSummary",
    "Trial",
    "TrialProvenance",
    "TrialResult",
    "summarize_results",
]
