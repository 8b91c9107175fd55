from __future__ import annotations

from enum import Enum

from .binary_drill import BinaryDrill

ACCURATE_THRESHOLD = 0.75


class FeedbackBand(str, Enum):
    ACCURATE_FAST = "accurate_fast"
    ACCURATE_SLOW = "accurate_slow"
    INACCURATE_FAST = "inaccurate_fast"
    INACCURATE_SLOW = "inaccurate_slow"


_MESSAGES = {
    FeedbackBand.ACCURATE_FAST: "Accurate and fast. You clearly know your place values.",
    FeedbackBand.ACCURATE_SLOW: (
        "Accurate, but slow. That is normal early on; speed comes with routine. "
        "Try the free practice to build it up."
    ),
    FeedbackBand.INACCURATE_FAST: (
        "Fast, but a few answers were off. Take a moment to add up the place values "
        "before you submit."
    ),
    FeedbackBand.INACCURATE_SLOW: (
        "That was a tough run, but you finished it. Review how each bit maps to "
        "128, 64, 32 ... 1 and try again."
    ),
}


def classify_feedback(*, accuracy: float, elapsed_s: float, time_limit_s: float | None = None) -> FeedbackBand:
    """Band a result by accuracy (>= 75%) and speed (finished under the limit).

    Without a time limit a run never counts as fast.
    """

    accurate = accuracy >= ACCURATE_THRESHOLD
    fast = time_limit_s is not None and elapsed_s < time_limit_s
    if accurate:
        return FeedbackBand.ACCURATE_FAST if fast else FeedbackBand.ACCURATE_SLOW
    return FeedbackBand.INACCURATE_FAST if fast else FeedbackBand.INACCURATE_SLOW


def feedback_message(band: FeedbackBand) -> str:
    return _MESSAGES[band]


def drill_feedback(drill: BinaryDrill, *, target_rt_s: float | None = None) -> FeedbackBand:
    """Feedback band for a finished drill.

    Speed is judged on the mean response time against ``target_rt_s``.
    """

    summary = drill.scored_summary()
    mean_rt = summary.mean_response_time_s
    return classify_feedback(
        accuracy=summary.accuracy,
        elapsed_s=float("inf") if mean_rt is None else mean_rt,
        time_limit_s=target_rt_s,
    )
