"""Bit-level construction of binary payloads from field declarations."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any


class FieldOverlapError(ValueError):
    """Two field declarations write to the same bit."""


class BitBuffer:
    """Growable byte buffer addressed bit by bit, most significant bit first.

    Bit index 0 is the high bit of byte 0, bit index 7 the low bit of byte 0,
    bit index 8 the high bit of byte 1, and so on. The buffer only ever grows,
    and always holds the minimum number of bytes covering every bit written.
    """

    def __init__(self) -> None:
        self._bytes = bytearray()

    def set_bit(self, bit: int, value: int) -> None:
        if bit < 0:
            raise ValueError(f"Bit index must not be negative, got {bit}")
        byte_offset, bit_offset = divmod(bit, 8)
        if len(self._bytes) <= byte_offset:
            self._bytes.extend(bytes(1 + byte_offset - len(self._bytes)))

        mask = 0x80 >> bit_offset
        if value & 0x01:
            self._bytes[byte_offset] |= mask
        else:
            self._bytes[byte_offset] &= ~mask & 0xFF

    def set_bits(self, start: int, width: int, value: int) -> None:
        """Write the low ``width`` bits of ``value`` starting at ``start``.

        Bit ``start`` receives the most significant of the ``width`` bits.
        """
        if width <= 0:
            raise ValueError(f"Field width must be positive, got {width}")
        value &= (1 << width) - 1
        for i in range(width):
            self.set_bit(start + i, value >> (width - i - 1))

    def get_bit(self, bit: int) -> int:
        if bit < 0:
            raise ValueError(f"Bit index must not be negative, got {bit}")
        byte_offset, bit_offset = divmod(bit, 8)
        if byte_offset >= len(self._bytes):
            return 0
        return (self._bytes[byte_offset] >> (7 - bit_offset)) & 0x01

    def get_bits(self, start: int, width: int) -> int:
        value = 0
        for i in range(width):
            value = (value << 1) | self.get_bit(start + i)
        return value

    def to_bytes(self) -> bytes:
        return bytes(self._bytes)

    def __bytes__(self) -> bytes:
        return bytes(self._bytes)

    def __len__(self) -> int:
        return len(self._bytes)

    def __repr__(self) -> str:
        return f"BitBuffer({self._bytes.hex()!r})"


def _field(declaration: Any) -> tuple[int, int, int]:
    """Return (start bit, width, value) for a mapping or FieldDeclaration."""
    if isinstance(declaration, Mapping):
        start = 8 * declaration["byte"] + declaration.get("bit", 0)
        return start, declaration["width"], declaration["value"]
    start = 8 * declaration.byte + declaration.bit
    return start, declaration.width, declaration.value


def find_overlaps(declarations: Iterable[Any]) -> list[tuple[int, int]]:
    """Return index pairs of declarations whose bit ranges intersect."""
    spans = []
    for declaration in declarations:
        start, width, _ = _field(declaration)
        spans.append((start, start + width))

    overlaps: list[tuple[int, int]] = []
    for i, (start_a, end_a) in enumerate(spans):
        for j in range(i + 1, len(spans)):
            start_b, end_b = spans[j]
            if start_a < end_b and start_b < end_a:
                overlaps.append((i, j))
    return overlaps


def pack_fields(declarations: Iterable[Any], *, strict: bool = False) -> bytes:
    """Build a byte string from an ordered sequence of field declarations.

    Each declaration gives ``byte``, optional ``bit`` (default 0), ``width``
    and ``value``. Declarations are applied in order, so a later field
    overwrites any bits it shares with an earlier one. With ``strict=True``
    overlapping fields raise FieldOverlapError instead.
    """
    declarations = list(declarations)
    if strict:
        overlaps = find_overlaps(declarations)
        if overlaps:
            first, second = overlaps[0]
            raise FieldOverlapError(
                f"Field declaration {second} overlaps field declaration {first}"
            )

    buffer = BitBuffer()
    for declaration in declarations:
        start, width, value = _field(declaration)
        buffer.set_bits(start, width, value)
    return buffer.to_bytes()
