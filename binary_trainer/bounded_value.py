from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Protocol

_LEADING_INT = re.compile(r"\s*([+-]?)0*(\d+)")


class IntRng(Protocol):
    def randint(self, a: int, b: int) -> int: ...


@dataclass(frozen=True, slots=True)
class NumberRange:
    """Inclusive integer range with saturating numeric-field operations.

    Nothing here raises for user input: out-of-range numbers are clamped and
    unparseable text degrades to ``min``.
    """

    min: int = 0
    max: int = 255

    def __post_init__(self) -> None:
        if self.min > self.max:
            raise ValueError(f"min must be <= max, got [{self.min}, {self.max}]")

    @classmethod
    def for_bit_width(cls, bit_width: int) -> "NumberRange":
        if bit_width < 1:
            raise ValueError("bit_width must be >= 1")
        return cls(0, (1 << bit_width) - 1)

    @classmethod
    def from_mapping(cls, config: Mapping[str, int]) -> "NumberRange":
        return cls(int(config["min"]), int(config["max"]))

    def contains(self, value: int) -> bool:
        return self.min <= value <= self.max

    def clamp(self, value: int) -> int:
        return max(self.min, min(self.max, value))

    def can_increment(self, value: int) -> bool:
        return value < self.max

    def can_decrement(self, value: int) -> bool:
        return value > self.min

    def increment(self, value: int) -> int:
        return value + 1 if self.can_increment(value) else value

    def decrement(self, value: int) -> int:
        return value - 1 if self.can_decrement(value) else value

    def parse(self, text: str) -> int:
        """Parse typed text: leading integer, else ``min``; always clamped.

        Only a leading signed integer prefix is read, so ``"12abc"`` gives 12
        and ``"3.7"`` gives 3.  A parsed zero also falls back to ``min``.
        Digit runs longer than either bound saturate without conversion.
        """

        match = _LEADING_INT.match(str(text))
        if match is None:
            return self.clamp(self.min)
        sign, digits = match.groups()
        if len(digits) > len(str(max(abs(self.min), abs(self.max)))):
            return self.min if sign == "-" else self.max
        parsed = int(sign + digits)
        return self.clamp(parsed or self.min)

    def random_value(self, rng: IntRng) -> int:
        """Uniform draw from ``[min, max]`` inclusive."""

        return rng.randint(self.min, self.max)


@dataclass(frozen=True, slots=True)
class NumberInputHelpers:
    """Callable bundle handed to a numeric input field."""

    clamp_value: Callable[[int], int]
    increment: Callable[[int], int]
    decrement: Callable[[int], int]
    parse_input_value: Callable[[str], int]
    can_increment: Callable[[int], bool]
    can_decrement: Callable[[int], bool]


def number_input_helpers(config: Mapping[str, int] | NumberRange) -> NumberInputHelpers:
    """Build numeric-field helpers from a ``{"min": .., "max": ..}`` config."""

    value_range = config if isinstance(config, NumberRange) else NumberRange.from_mapping(config)
    return NumberInputHelpers(
        clamp_value=value_range.clamp,
        increment=value_range.increment,
        decrement=value_range.decrement,
        parse_input_value=value_range.parse,
        can_increment=value_range.can_increment,
        can_decrement=value_range.can_decrement,
    )


BIT_FIELD = NumberRange(0, 1)
