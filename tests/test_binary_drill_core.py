from __future__ import annotations

from dataclasses import dataclass

import pytest

from binary_trainer import codec
from binary_trainer.binary_drill import (
    BinaryDrillConfig,
    BinaryDrillGenerator,
    BinaryDrillKind,
    BinaryDrillPayload,
    build_binary_drill,
)
from binary_trainer.bounded_value import NumberRange
from binary_trainer.challenge import InitialBits
from binary_trainer.cognitive_core import Phase, SeededRng, clamp01, lerp_int


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += dt


def _bits_text(value: int) -> str:
    return codec.format_bits(codec.to_bit_vector(value, 8))


def test_generator_determinism_same_seed_same_sequence() -> None:
    g1 = BinaryDrillGenerator(SeededRng(99))
    g2 = BinaryDrillGenerator(SeededRng(99))
    seq1 = [g1.next_session(difficulty=0.4).target for _ in range(25)]
    seq2 = [g2.next_session(difficulty=0.4).target for _ in range(25)]
    assert seq1 == seq2


def test_difficulty_widens_target_range() -> None:
    easy = BinaryDrillGenerator(SeededRng(1))
    assert all(easy.next_session(difficulty=0.0).target <= 15 for _ in range(50))

    hard = BinaryDrillGenerator(SeededRng(1))
    targets = [hard.next_session(difficulty=1.0).target for _ in range(200)]
    assert max(targets) > 15
    assert all(0 <= t <= 255 for t in targets)


def test_generated_sessions_clamp_to_full_configured_range() -> None:
    gen = BinaryDrillGenerator(SeededRng(4), value_range=NumberRange(0, 200))
    session = gen.next_session(difficulty=0.0)
    assert session.value_range == NumberRange(0, 200)
    assert session.set_value(255).current_value == 200


def test_encode_lifecycle_with_practice_gate() -> None:
    seed = 101
    clock = FakeClock()
    engine = build_binary_drill(
        clock=clock,
        seed=seed,
        difficulty=0.5,
        config=BinaryDrillConfig(scored_duration_s=5.0, practice_questions=2),
    )
    mirror = BinaryDrillGenerator(SeededRng(seed))

    assert engine.phase is Phase.INSTRUCTIONS
    engine.start_practice()
    assert engine.phase is Phase.PRACTICE

    # Practice Q1: set the bits by toggling.
    p1 = mirror.next_session(difficulty=0.5)
    assert engine.session is not None and engine.session.target == p1.target
    for i, bit in enumerate(p1.target_bits):
        if bit:
            assert engine.toggle_bit(i) is True
    clock.advance(0.5)
    assert engine.submit_answer() is True
    assert engine.snapshot().practice_feedback == "Correct!"
    assert engine.phase is Phase.PRACTICE

    # Practice Q2: typed binary numeral, wrong on purpose.
    p2 = mirror.next_session(difficulty=0.5)
    clock.advance(0.5)
    assert engine.submit_answer(_bits_text((p2.target + 1) % 256)) is True
    assert engine.phase is Phase.PRACTICE_DONE
    feedback = engine.snapshot().practice_feedback
    assert feedback is not None and feedback.startswith("Incorrect")

    engine.start_scored()
    assert engine.phase is Phase.SCORED

    p3 = mirror.next_session(difficulty=0.5)
    clock.advance(0.5)
    assert engine.submit_answer(_bits_text(p3.target)) is True

    clock.advance(5.0)
    engine.update()
    assert engine.phase is Phase.RESULTS
    assert engine.session is None

    s = engine.scored_summary()
    assert s.attempted == 1
    assert s.correct == 1
    assert s.mean_response_time_s == pytest.approx(0.5)


def test_encode_rejects_malformed_bit_strings() -> None:
    clock = FakeClock()
    engine = build_binary_drill(clock=clock, seed=3, config=BinaryDrillConfig(practice_questions=1))
    engine.start_practice()
    assert engine.submit_answer("12") is False
    assert engine.submit_answer("1010") is False
    assert engine.events() == []
    assert engine.phase is Phase.PRACTICE


def test_decode_uses_lenient_parse_and_ignores_empty_input() -> None:
    seed = 8
    clock = FakeClock()
    engine = build_binary_drill(
        clock=clock,
        seed=seed,
        kind=BinaryDrillKind.DECODE,
        config=BinaryDrillConfig(scored_duration_s=30.0, practice_questions=0),
    )
    mirror = BinaryDrillGenerator(SeededRng(seed), initial=InitialBits.TARGET)

    engine.start_practice()
    assert engine.phase is Phase.PRACTICE_DONE
    engine.start_scored()

    p1 = mirror.next_session(difficulty=0.5)
    snap = engine.snapshot()
    assert isinstance(snap.payload, BinaryDrillPayload)
    assert snap.payload.bits == p1.target_bits
    assert snap.payload.target_shown is None
    assert snap.payload.current_value is None
    assert codec.format_bits(p1.target_bits) in snap.prompt

    # Bits are the question in a decode drill; they cannot be edited.
    assert engine.toggle_bit(0) is False
    assert engine.submit_answer("   ") is False

    clock.advance(1.0)
    assert engine.submit_answer(f" {p1.target} ") is True

    p2 = mirror.next_session(difficulty=0.5)
    clock.advance(1.0)
    assert engine.submit_answer("999") is True
    events = engine.events()
    assert events[-1].answered_value == 255
    assert events[-1].is_correct is (p2.target == 255)


def test_bit_edits_refused_outside_active_phases() -> None:
    engine = build_binary_drill(clock=FakeClock(), seed=1)
    assert engine.toggle_bit(0) is False
    assert engine.set_bit(0, 1) is False
    assert engine.submit_answer("0000 0000") is False
    assert engine.can_exit() is True


def test_set_bit_updates_current_value_in_snapshot() -> None:
    engine = build_binary_drill(clock=FakeClock(), seed=1)
    engine.start_practice()
    assert engine.set_bit(0, 1) is True
    payload = engine.snapshot().payload
    assert isinstance(payload, BinaryDrillPayload)
    assert payload.bits[0] == 1
    assert payload.current_value == 128
    assert payload.place_values == (128, 64, 32, 16, 8, 4, 2, 1)
    assert payload.target_shown == engine.session.target  # type: ignore[union-attr]


def test_answer_after_expiry_is_recorded_then_results() -> None:
    seed = 77
    clock = FakeClock()
    engine = build_binary_drill(
        clock=clock,
        seed=seed,
        config=BinaryDrillConfig(scored_duration_s=3.0, practice_questions=0),
    )
    engine.start_scored()
    assert engine.can_exit() is False
    target = engine.session.target  # type: ignore[union-attr]

    clock.advance(4.0)
    assert engine.time_remaining_s() == 0.0
    assert engine.submit_answer(_bits_text(target)) is True
    assert engine.phase is Phase.RESULTS
    assert engine.scored_summary().attempted == 1
    assert "Attempted: 1" in engine.current_prompt()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"difficulty": 1.5},
        {"difficulty": -0.1},
        {"config": BinaryDrillConfig(practice_questions=-1)},
        {"config": BinaryDrillConfig(scored_duration_s=0.0)},
    ],
)
def test_factory_validates_arguments(kwargs: dict[str, object]) -> None:
    with pytest.raises(ValueError):
        build_binary_drill(clock=FakeClock(), seed=1, **kwargs)  # type: ignore[arg-type]


def test_difficulty_helpers_pin_and_interpolate() -> None:
    assert clamp01(-0.5) == 0.0
    assert clamp01(3) == 1.0
    assert clamp01(0.25) == 0.25
    assert lerp_int(15, 255, 0.0) == 15
    assert lerp_int(15, 255, 1.0) == 255
    assert lerp_int(15, 255, 0.5) == 135


def test_same_seed_replays_the_same_targets() -> None:
    a = build_binary_drill(clock=FakeClock(), seed=99)
    b = build_binary_drill(clock=FakeClock(), seed=99)
    a.start_scored()
    b.start_scored()
    assert a.session.target == b.session.target
