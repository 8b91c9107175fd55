"""Challenge sessions: a hidden target value plus the learner's bit vector.

A :class:`ChallengeSession` is an immutable value.  Every edit (bit toggle,
per-bit field edit, numeric field edit) returns a new session, so holding on
to the previous one is all an undo needs.  The target is fixed when the
session is started and never changes afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum

from . import codec
from .bounded_value import BIT_FIELD, IntRng, NumberRange
from .codec import BitVector

logger = logging.getLogger(__name__)


class InitialBits(str, Enum):
    ZEROS = "zeros"
    TARGET = "target"
    RANDOM = "random"


@dataclass(frozen=True, slots=True)
class ChallengeData:
    target: int
    bits: BitVector


@dataclass(frozen=True, slots=True)
class Evaluation:
    target: int
    current_value: int
    is_correct: bool
    # Informational only; scoring is whole-value equality.
    wrong_bits: tuple[int, ...] = ()


def toggle_bit(bits: BitVector, index: int) -> BitVector:
    """Return a copy of ``bits`` with the digit at ``index`` flipped."""

    if not 0 <= index < len(bits):
        raise IndexError(f"bit index {index} out of range for {len(bits)} bits")
    return tuple((1 - b) if i == index else b for i, b in enumerate(bits))


@dataclass(frozen=True, slots=True)
class ChallengeSession:
    bit_width: int
    value_range: NumberRange
    target: int
    bits: BitVector

    def __post_init__(self) -> None:
        if not codec.is_in_range(self.target, self.bit_width):
            raise codec.BitRangeError(self.target, self.bit_width)
        if not codec.is_valid_bit_vector(self.bits, self.bit_width):
            raise codec.InvalidBitVectorError(
                f"expected {self.bit_width} bits of 0/1, got {list(self.bits)!r}"
            )

    @property
    def current_value(self) -> int:
        return codec.to_value(self.bits, self.bit_width)

    @property
    def target_bits(self) -> BitVector:
        return codec.to_bit_vector(self.target, self.bit_width)

    @property
    def prompt(self) -> str:
        return f"Encode {self.target} in {self.bit_width} bits"

    def toggle_bit(self, index: int) -> "ChallengeSession":
        return replace(self, bits=toggle_bit(self.bits, index))

    def with_bits(self, bits: BitVector) -> "ChallengeSession":
        if not codec.is_valid_bit_vector(bits, self.bit_width):
            raise codec.InvalidBitVectorError(f"expected {self.bit_width} bits of 0/1, got {list(bits)!r}")
        return replace(self, bits=tuple(bits))

    def set_bit(self, index: int, raw: int) -> "ChallengeSession":
        """Per-bit numeric field edit; ``raw`` is clamped into ``{0, 1}``."""

        if not 0 <= index < self.bit_width:
            raise IndexError(f"bit index {index} out of range for {self.bit_width} bits")
        bit = BIT_FIELD.clamp(int(raw))
        return replace(self, bits=tuple(bit if i == index else b for i, b in enumerate(self.bits)))

    def set_value(self, value: int) -> "ChallengeSession":
        """Numeric field edit: clamp into range and re-encode the bits."""

        clamped = self.value_range.clamp(int(value))
        return replace(self, bits=codec.bit_vector_or_zeros(clamped, self.bit_width))

    def set_text(self, text: str) -> "ChallengeSession":
        return self.set_value(self.value_range.parse(text))

    def increment(self) -> "ChallengeSession":
        return self.set_value(self.value_range.increment(self.current_value))

    def decrement(self) -> "ChallengeSession":
        return self.set_value(self.value_range.decrement(self.current_value))

    def can_increment(self) -> bool:
        return self.value_range.can_increment(self.current_value)

    def can_decrement(self) -> bool:
        return self.value_range.can_decrement(self.current_value)

    def evaluate(self) -> Evaluation:
        current = self.current_value
        expected = self.target_bits
        wrong = tuple(i for i, (have, want) in enumerate(zip(self.bits, expected)) if have != want)
        return Evaluation(
            target=self.target,
            current_value=current,
            is_correct=current == self.target,
            wrong_bits=wrong,
        )

    def to_data(self) -> ChallengeData:
        return ChallengeData(target=self.target, bits=self.bits)


def _check_range(value_range: NumberRange, bit_width: int) -> None:
    if not (codec.is_in_range(value_range.min, bit_width) and codec.is_in_range(value_range.max, bit_width)):
        raise ValueError(
            f"range [{value_range.min}, {value_range.max}] does not fit in {bit_width} bits "
            f"(0..{codec.max_value(bit_width)})"
        )


def start_challenge(
    rng: IntRng,
    value_range: NumberRange | None = None,
    bit_width: int = 8,
    *,
    initial: InitialBits = InitialBits.ZEROS,
) -> ChallengeSession:
    """Draw a fresh target and set up the learner's starting bits."""

    value_range = value_range or NumberRange.for_bit_width(bit_width)
    _check_range(value_range, bit_width)

    target = value_range.random_value(rng)
    if initial is InitialBits.TARGET:
        bits = codec.to_bit_vector(target, bit_width)
    elif initial is InitialBits.RANDOM:
        bits = tuple(rng.randint(0, 1) for _ in range(bit_width))
    else:
        bits = codec.zeros(bit_width)

    logger.debug("Started challenge: target=%d width=%d initial=%s", target, bit_width, initial.value)
    return ChallengeSession(bit_width=bit_width, value_range=value_range, target=target, bits=bits)


def generate_challenge(
    rng: IntRng,
    value_range: NumberRange | None = None,
    bit_width: int = 8,
    *,
    initial: InitialBits = InitialBits.ZEROS,
) -> ChallengeData:
    return start_challenge(rng, value_range, bit_width, initial=initial).to_data()
