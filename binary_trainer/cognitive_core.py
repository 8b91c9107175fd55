from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum


class Phase(str, Enum):
    """Where a timed binary drill is in its run, in order."""

    INSTRUCTIONS = "instructions"
    PRACTICE = "practice"
    PRACTICE_DONE = "practice_done"
    SCORED = "scored"
    RESULTS = "results"


@dataclass(frozen=True, slots=True)
class DrillEvent:
    index: int
    phase: Phase
    prompt: str
    target: int
    answered_value: int
    is_correct: bool
    presented_at_s: float
    answered_at_s: float
    response_time_s: float
    raw: str = ""


@dataclass(frozen=True, slots=True)
class AttemptSummary:
    attempted: int
    correct: int
    accuracy: float
    duration_s: float
    throughput_per_min: float
    mean_response_time_s: float | None


@dataclass(frozen=True, slots=True)
class DrillSnapshot:
    """View model for the UI (pure data)."""

    title: str
    phase: Phase
    prompt: str
    input_hint: str
    time_remaining_s: float | None
    attempted_scored: int
    correct_scored: int
    payload: object | None = None
    practice_feedback: str | None = None


def summarize_events(events: list[DrillEvent], *, duration_s: float) -> AttemptSummary:
    """Aggregate the scored events of one attempt."""

    scored = [e for e in events if e.phase is Phase.SCORED]
    attempted = len(scored)
    correct = sum(1 for e in scored if e.is_correct)
    accuracy = 0.0 if attempted == 0 else correct / attempted
    throughput = 0.0 if duration_s <= 0 else (attempted / duration_s) * 60.0
    rts = [e.response_time_s for e in scored]
    mean_rt = None if not rts else sum(rts) / len(rts)
    return AttemptSummary(
        attempted=attempted,
        correct=correct,
        accuracy=accuracy,
        duration_s=float(duration_s),
        throughput_per_min=throughput,
        mean_response_time_s=mean_rt,
    )


class SeededRng:
    """Per-drill random source.

    Target values and random starting bits are both drawn from this one
    stream, so a drill replayed with the same seed asks the same questions.
    """

    def __init__(self, seed: int) -> None:
        self._rng = random.Random(int(seed))

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)


def lerp_int(a: int, b: int, t: float) -> int:
    """Pick a bound between ``a`` (t=0) and ``b`` (t=1), rounded to an int."""

    if t <= 0:
        return a
    if t >= 1:
        return b
    return round(a + (b - a) * t)


def clamp01(x: float) -> float:
    # Difficulty is a fraction; anything outside [0, 1] is pinned.
    return min(1.0, max(0.0, float(x)))
