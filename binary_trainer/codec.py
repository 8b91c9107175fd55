"""Conversion between unsigned integers and fixed-width bit vectors.

Bit vectors are tuples of ``0``/``1`` ordered most-significant bit first, so
index 0 carries the place value ``2 ** (bit_width - 1)``.  Every function in
this module is pure.  Values that cannot be represented in the requested
width are rejected with :class:`BitRangeError` rather than truncated or
wrapped; callers that need a value no matter what use
:func:`bit_vector_or_zeros`.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

logger = logging.getLogger(__name__)

BitVector = tuple[int, ...]


class BitRangeError(ValueError):
    """Raised when a value has no representation in the requested bit width."""

    def __init__(self, value: object, bit_width: int) -> None:
        self.value = value
        self.bit_width = bit_width
        self.max_value = max_value(bit_width)
        super().__init__(
            f"Invalid value {value!r}: must be an integer between 0 and {self.max_value} "
            f"for {bit_width} bits."
        )


class InvalidBitVectorError(ValueError):
    """Raised for sequences that are not a valid bit vector of the expected width."""


def _check_width(bit_width: int) -> int:
    if isinstance(bit_width, bool) or not isinstance(bit_width, int) or bit_width < 1:
        raise ValueError(f"bit_width must be an integer >= 1, got {bit_width!r}")
    return bit_width


def _is_int(value: object) -> bool:
    # bool is an int subclass but True/False are not numbers to the learner.
    return isinstance(value, int) and not isinstance(value, bool)


def max_value(bit_width: int) -> int:
    return (1 << _check_width(bit_width)) - 1


def zeros(bit_width: int) -> BitVector:
    return (0,) * _check_width(bit_width)


def place_values(bit_width: int) -> tuple[int, ...]:
    """Place value of each bit position, MSB first (e.g. 128 .. 1 for a byte)."""

    width = _check_width(bit_width)
    return tuple(1 << (width - 1 - i) for i in range(width))


def is_in_range(value: object, bit_width: int) -> bool:
    """True if ``value`` is an integer representable in ``bit_width`` bits."""

    return _is_int(value) and 0 <= value <= max_value(bit_width)  # type: ignore[operator]


def is_valid_bit_vector(bits: Sequence[object], bit_width: int | None = None) -> bool:
    if bit_width is not None and len(bits) != _check_width(bit_width):
        return False
    if len(bits) == 0:
        return False
    return all(_is_int(b) and b in (0, 1) for b in bits)


def to_bit_vector(value: int, bit_width: int) -> BitVector:
    """Encode ``value`` as an MSB-first vector of exactly ``bit_width`` bits."""

    if not is_in_range(value, bit_width):
        raise BitRangeError(value, bit_width)
    return tuple((value >> shift) & 1 for shift in range(bit_width - 1, -1, -1))


def to_value(bits: Sequence[int], bit_width: int | None = None) -> int:
    """Decode an MSB-first bit vector into its unsigned integer value."""

    if not is_valid_bit_vector(bits, bit_width):
        expected = "" if bit_width is None else f" of length {bit_width}"
        raise InvalidBitVectorError(f"Expected a sequence of 0/1 digits{expected}, got {list(bits)!r}")
    value = 0
    for bit in bits:
        value = (value << 1) | bit
    return value


def bit_vector_or_zeros(value: int, bit_width: int) -> BitVector:
    """Like :func:`to_bit_vector`, but substitutes all zeros for bad values."""

    try:
        return to_bit_vector(value, bit_width)
    except BitRangeError as exc:
        logger.debug("Falling back to zero vector: %s", exc)
        return zeros(bit_width)


def parse_bit_string(text: str, bit_width: int) -> BitVector:
    """Read a typed binary numeral such as ``"1000 0001"`` into a bit vector.

    Spaces and underscores are ignored.  The digit count must equal the width.
    """

    digits = "".join(ch for ch in str(text) if ch not in " _\t")
    if len(digits) != _check_width(bit_width) or any(ch not in "01" for ch in digits):
        raise InvalidBitVectorError(f"{text!r} is not a {bit_width}-digit binary numeral")
    return tuple(1 if ch == "1" else 0 for ch in digits)


def format_bits(bits: Sequence[int], *, group: int = 4) -> str:
    """Render bits as text, split into groups from the right (``"1000 0001"``)."""

    text = "".join(str(b) for b in bits)
    if group <= 0 or len(text) <= group:
        return text
    head = len(text) % group
    chunks = [text[:head]] if head else []
    chunks.extend(text[i : i + group] for i in range(head, len(text), group))
    return " ".join(chunks)
