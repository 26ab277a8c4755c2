"""Product sets as integer bitsets.

Bit ``i`` of a set stands for the product at position ``i`` of an index
snapshot. Positions follow product id order, so iterating set bits in
ascending order yields products in natural order.

Intersection and union are the ``&`` and ``|`` operators; cardinality is
``int.bit_count``. All of them run word-at-a-time in C, which keeps facet
counting proportional to the catalog size in machine words rather than
in products.
"""

from collections.abc import Iterable, Iterator

EMPTY = 0

# Byte value -> positions of its set bits
_BYTE_POSITIONS: tuple[tuple[int, ...], ...] = tuple(
    tuple(bit for bit in range(8) if value >> bit & 1) for value in range(256)
)


def full(size: int) -> int:
    """Set containing every position below ``size``."""
    return (1 << size) - 1


def from_positions(positions: Iterable[int], size: int) -> int:
    """Build a set from positions.

    Args:
        positions: Positions to include (each below ``size``).
        size: Number of positions in the universe.

    Returns:
        Bitset with the given positions set.
    """
    buffer = bytearray((size + 7) // 8)
    for position in positions:
        buffer[position >> 3] |= 1 << (position & 7)
    return int.from_bytes(buffer, "little")


def iter_positions(bits: int) -> Iterator[int]:
    """Iterate set positions in ascending order."""
    if not bits:
        return
    data = bits.to_bytes((bits.bit_length() + 7) // 8, "little")
    for offset, byte in enumerate(data):
        if byte:
            base = offset << 3
            for bit in _BYTE_POSITIONS[byte]:
                yield base + bit


def count(bits: int) -> int:
    """Number of positions in the set."""
    return bits.bit_count()


def union(sets: Iterable[int]) -> int:
    """Union of several sets."""
    result = EMPTY
    for bits in sets:
        result |= bits
    return result
