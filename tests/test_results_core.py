from __future__ import annotations

import pytest

from binary_trainer.results import FeedbackBand, classify_feedback, feedback_message


@pytest.mark.parametrize(
    ("accuracy", "elapsed_s", "limit_s", "band"),
    [
        (1.0, 10.0, 20.0, FeedbackBand.ACCURATE_FAST),
        (0.75, 10.0, 20.0, FeedbackBand.ACCURATE_FAST),
        (0.75, 30.0, 20.0, FeedbackBand.ACCURATE_SLOW),
        (0.74, 10.0, 20.0, FeedbackBand.INACCURATE_FAST),
        (0.2, 20.0, 20.0, FeedbackBand.INACCURATE_SLOW),
        (1.0, 1.0, None, FeedbackBand.ACCURATE_SLOW),
    ],
)
def test_classify_feedback(accuracy: float, elapsed_s: float, limit_s: float | None, band: FeedbackBand) -> None:
    assert classify_feedback(accuracy=accuracy, elapsed_s=elapsed_s, time_limit_s=limit_s) is band


def test_every_band_has_a_message() -> None:
    for band in FeedbackBand:
        assert feedback_message(band)
