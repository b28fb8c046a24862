from itertools import cycle

from xor_tickler.utils import BytesLike


def popcount(value: int) -> int:
    """Count the set bits in a single byte value."""
    return value.bit_count()


def bit_distance(a: BytesLike, b: BytesLike) -> int:
    """
    Count the differing bits between two byte sequences.

    When the lengths differ, the shorter sequence is repeated cyclically up to
    the longer one's length, the same way a repeating XOR key lines up against
    its data. An empty input has no positions to compare and gives 0.
    """
    if not a or not b:
        return 0

    longer, shorter = (a, b) if len(a) >= len(b) else (b, a)
    return sum(popcount(x ^ y) for x, y in zip(longer, cycle(shorter)))
