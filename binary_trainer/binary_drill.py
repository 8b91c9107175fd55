"""Timed binary conversion drill.

The drill wraps a stream of :class:`~binary_trainer.challenge.ChallengeSession`
objects in the usual trainer flow: instructions -> practice -> timed scored
block -> results.  Two kinds exist:

* ``ENCODE``: the decimal target is shown; the learner toggles bits and
  submits the vector (or types it as a binary numeral).
* ``DECODE``: the target's bits are shown; the learner types the decimal
  value, which goes through the lenient numeric-field parse.

Problem streams are deterministic for a given seed and time is read only
through the injected clock.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum

from . import codec
from .bounded_value import NumberRange
from .challenge import ChallengeSession, InitialBits, start_challenge
from .clock import Clock
from .cognitive_core import (
    AttemptSummary,
    DrillEvent,
    DrillSnapshot,
    Phase,
    SeededRng,
    clamp01,
    lerp_int,
    summarize_events,
)

logger = logging.getLogger(__name__)


class BinaryDrillKind(str, Enum):
    ENCODE = "encode"
    DECODE = "decode"


@dataclass(frozen=True, slots=True)
class BinaryDrillConfig:
    bit_width: int = 8
    value_range: NumberRange | None = None  # defaults to the full width
    initial: InitialBits = InitialBits.ZEROS
    scored_duration_s: float = 120.0
    practice_questions: int = 3


@dataclass(frozen=True, slots=True)
class BinaryDrillPayload:
    kind: BinaryDrillKind
    bit_width: int
    bits: codec.BitVector
    place_values: tuple[int, ...]
    target_shown: int | None  # None while the learner has to work it out
    current_value: int | None  # hidden in DECODE, it would be the answer


class BinaryDrillGenerator:
    """Deals challenge sessions; difficulty widens the range of targets.

    At difficulty 0 targets stay within the low nibble (or the configured
    range if that is smaller); at 1 they span the whole configured range.
    """

    def __init__(
        self,
        rng: SeededRng,
        *,
        bit_width: int = 8,
        value_range: NumberRange | None = None,
        initial: InitialBits = InitialBits.ZEROS,
    ) -> None:
        self._rng = rng
        self._bit_width = bit_width
        self._range = value_range or NumberRange.for_bit_width(bit_width)
        self._initial = initial

    def next_session(self, *, difficulty: float) -> ChallengeSession:
        difficulty = clamp01(difficulty)
        lo = self._range.min
        easy_hi = min(self._range.max, max(lo, 15))
        hi = lerp_int(easy_hi, self._range.max, difficulty)
        session = start_challenge(
            self._rng,
            NumberRange(lo, hi),
            self._bit_width,
            initial=self._initial,
        )
        # Targets come from the narrowed range; edits clamp to the full one.
        return replace(session, value_range=self._range)


class BinaryDrill:
    """Instructions -> practice -> timed scored -> results over bit challenges."""

    def __init__(
        self,
        *,
        title: str,
        instructions: list[str],
        generator: BinaryDrillGenerator,
        kind: BinaryDrillKind,
        clock: Clock,
        seed: int,
        difficulty: float = 0.5,
        practice_questions: int = 3,
        scored_duration_s: float,
    ) -> None:
        if not (0.0 <= difficulty <= 1.0):
            raise ValueError("difficulty must be in [0.0, 1.0]")
        if practice_questions < 0:
            raise ValueError("practice_questions must be >= 0")
        if scored_duration_s <= 0:
            raise ValueError("scored_duration_s must be > 0")

        self._title = title
        self._instructions = instructions
        self._generator = generator
        self._kind = kind
        self._clock = clock
        self._seed = int(seed)
        self._difficulty = float(difficulty)
        self._practice_questions = int(practice_questions)
        self._scored_duration_s = float(scored_duration_s)

        self._phase = Phase.INSTRUCTIONS
        self._session: ChallengeSession | None = None
        self._presented_at_s: float | None = None
        self._scored_started_at_s: float | None = None
        self._events: list[DrillEvent] = []
        self._practice_answered = 0
        self._practice_feedback: str | None = None

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def kind(self) -> BinaryDrillKind:
        return self._kind

    @property
    def difficulty(self) -> float:
        return self._difficulty

    @property
    def practice_questions(self) -> int:
        return self._practice_questions

    @property
    def scored_duration_s(self) -> float:
        return self._scored_duration_s

    @property
    def session(self) -> ChallengeSession | None:
        return self._session

    def instructions(self) -> list[str]:
        return list(self._instructions)

    def events(self) -> list[DrillEvent]:
        return list(self._events)

    def can_exit(self) -> bool:
        return self._phase is not Phase.SCORED

    def start_practice(self) -> None:
        if self._phase is not Phase.INSTRUCTIONS:
            return
        if self._practice_questions == 0:
            self._phase = Phase.PRACTICE_DONE
            return
        self._phase = Phase.PRACTICE
        self._deal_new_session()

    def start_scored(self) -> None:
        if self._phase in (Phase.SCORED, Phase.RESULTS):
            return
        self._phase = Phase.SCORED
        self._practice_feedback = None
        self._scored_started_at_s = self._clock.now()
        logger.debug("Scored block started: kind=%s seed=%d", self._kind.value, self._seed)
        self._deal_new_session()

    def update(self) -> None:
        if self._phase is not Phase.SCORED:
            return
        remaining = self.time_remaining_s()
        if remaining is not None and remaining <= 0.0:
            self._finish()

    def time_remaining_s(self) -> float | None:
        if self._phase is not Phase.SCORED:
            return None
        assert self._scored_started_at_s is not None
        remaining = self._scored_duration_s - (self._clock.now() - self._scored_started_at_s)
        return max(0.0, remaining)

    def toggle_bit(self, index: int) -> bool:
        """Flip one bit of the current challenge. Returns True if accepted."""

        if not self._accepts_bit_edits():
            return False
        assert self._session is not None
        self._session = self._session.toggle_bit(index)
        return True

    def set_bit(self, index: int, raw: int) -> bool:
        if not self._accepts_bit_edits():
            return False
        assert self._session is not None
        self._session = self._session.set_bit(index, raw)
        return True

    def submit_answer(self, raw: str = "") -> bool:
        """Submit the current answer. Returns True if it was accepted and scored.

        ENCODE: an empty ``raw`` submits the current bits; otherwise ``raw``
        must be a binary numeral of the drill's width.  DECODE: ``raw`` is
        the typed decimal; empty input is ignored.
        """

        if self._phase not in (Phase.PRACTICE, Phase.SCORED):
            return False
        expired = self._phase is Phase.SCORED and self.time_remaining_s() == 0

        assert self._session is not None
        assert self._presented_at_s is not None
        session = self._session
        text = raw.strip()

        if self._kind is BinaryDrillKind.DECODE:
            if text == "":
                if expired:
                    self._finish()
                return False
            answered = session.value_range.parse(text)
        else:
            if text != "":
                try:
                    session = session.with_bits(codec.parse_bit_string(text, session.bit_width))
                except codec.InvalidBitVectorError:
                    if expired:
                        self._finish()
                    return False
                self._session = session
            answered = session.current_value

        answered_at_s = self._clock.now()
        is_correct = answered == session.target
        self._events.append(
            DrillEvent(
                index=len(self._events),
                phase=self._phase,
                prompt=self._prompt_for(session),
                target=session.target,
                answered_value=answered,
                is_correct=is_correct,
                presented_at_s=self._presented_at_s,
                answered_at_s=answered_at_s,
                response_time_s=max(0.0, answered_at_s - self._presented_at_s),
                raw=raw,
            )
        )

        if self._phase is Phase.PRACTICE:
            self._practice_answered += 1
            self._practice_feedback = self._feedback_for(session, answered, is_correct)
            if self._practice_answered >= self._practice_questions:
                self._phase = Phase.PRACTICE_DONE
                self._session = None
                self._presented_at_s = None
                return True
        elif expired:
            self._finish()
            return True

        self._deal_new_session()
        return True

    def scored_summary(self) -> AttemptSummary:
        return summarize_events(self._events, duration_s=self._scored_duration_s)

    def current_prompt(self) -> str:
        if self._phase is Phase.INSTRUCTIONS:
            return "Press Enter to begin practice."
        if self._phase is Phase.PRACTICE_DONE:
            return "Practice complete. Press Enter to start the timed drill."
        if self._phase is Phase.RESULTS:
            s = self.scored_summary()
            acc_pct = int(round(s.accuracy * 100))
            rt = "n/a" if s.mean_response_time_s is None else f"{s.mean_response_time_s:.2f}s"
            return (
                f"Results\nAttempted: {s.attempted}\nCorrect: {s.correct}\n"
                f"Accuracy: {acc_pct}%\nMean RT: {rt}\nThroughput: {s.throughput_per_min:.1f}/min"
            )
        if self._session is None:
            return ""
        return self._prompt_for(self._session)

    def snapshot(self) -> DrillSnapshot:
        payload = None
        if self._session is not None:
            s = self._session
            encode = self._kind is BinaryDrillKind.ENCODE
            payload = BinaryDrillPayload(
                kind=self._kind,
                bit_width=s.bit_width,
                bits=s.bits,
                place_values=codec.place_values(s.bit_width),
                target_shown=s.target if encode else None,
                current_value=s.current_value if encode else None,
            )
        if self._kind is BinaryDrillKind.ENCODE:
            hint = "Toggle bits (1-8 / Space), Enter to submit"
        else:
            hint = "Type the decimal value then Enter"
        return DrillSnapshot(
            title=self._title,
            phase=self._phase,
            prompt=self.current_prompt(),
            input_hint=hint,
            time_remaining_s=self.time_remaining_s(),
            attempted_scored=sum(1 for e in self._events if e.phase is Phase.SCORED),
            correct_scored=sum(1 for e in self._events if e.phase is Phase.SCORED and e.is_correct),
            payload=payload,
            practice_feedback=self._practice_feedback,
        )

    def _accepts_bit_edits(self) -> bool:
        return (
            self._kind is BinaryDrillKind.ENCODE
            and self._phase in (Phase.PRACTICE, Phase.SCORED)
            and self._session is not None
        )

    def _prompt_for(self, session: ChallengeSession) -> str:
        if self._kind is BinaryDrillKind.DECODE:
            return f"What is {codec.format_bits(session.bits)} in decimal?"
        return session.prompt

    @staticmethod
    def _feedback_for(session: ChallengeSession, answered: int, is_correct: bool) -> str:
        if is_correct:
            return "Correct!"
        return (
            f"Incorrect: you gave {answered}; "
            f"{session.target} is {codec.format_bits(session.target_bits)}"
        )

    def _finish(self) -> None:
        self._phase = Phase.RESULTS
        self._session = None
        self._presented_at_s = None
        s = self.scored_summary()
        logger.info("Drill finished: kind=%s attempted=%d correct=%d", self._kind.value, s.attempted, s.correct)

    def _deal_new_session(self) -> None:
        self._session = self._generator.next_session(difficulty=self._difficulty)
        self._presented_at_s = self._clock.now()


def build_binary_drill(
    *,
    clock: Clock,
    seed: int,
    difficulty: float = 0.5,
    config: BinaryDrillConfig | None = None,
    kind: BinaryDrillKind = BinaryDrillKind.ENCODE,
) -> BinaryDrill:
    """Factory for an encode or decode drill session."""

    cfg = config or BinaryDrillConfig()

    if kind is BinaryDrillKind.ENCODE:
        title = "Binary Encoding"
        instructions = [
            "Binary Encoding",
            "",
            f"A decimal number is shown. Set the {cfg.bit_width} bits so they add up to it.",
            "",
            "Controls:",
            "- Left/Right to move, Space to toggle, or 1-8 to toggle a bit",
            "- Press Enter to submit",
            "",
            "You will get a short practice, then a timed scored block.",
        ]
        initial = cfg.initial
    else:
        title = "Binary Decoding"
        instructions = [
            "Binary Decoding",
            "",
            f"A {cfg.bit_width}-bit binary number is shown. Enter its decimal value.",
            "",
            "Controls:",
            "- Type your answer",
            "- Press Enter to submit",
            "",
            "You will get a short practice, then a timed scored block.",
        ]
        # The bits are the question, so they start as the target.
        initial = InitialBits.TARGET

    generator = BinaryDrillGenerator(
        SeededRng(seed),
        bit_width=cfg.bit_width,
        value_range=cfg.value_range,
        initial=initial,
    )
    return BinaryDrill(
        title=title,
        instructions=instructions,
        generator=generator,
        kind=kind,
        clock=clock,
        seed=seed,
        difficulty=difficulty,
        practice_questions=cfg.practice_questions,
        scored_duration_s=cfg.scored_duration_s,
    )
