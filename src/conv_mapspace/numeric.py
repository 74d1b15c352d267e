"""
Index arithmetic for mapspaces.

Two number systems are used to turn a single (arbitrarily large) integer
into a structured choice:

- Mixed radix: a Cartesian product of independently sized axes. Axis 0 is
  the least significant digit.
- Factorial number system (Lehmer code): a rank in [0, n!) names one of the
  n! orderings of n items.

All sizes and ranks are Python ints, so nothing here overflows.
"""

import math
import operator
from typing import Sequence, TypeVar

from conv_mapspace.errors import ConfigurationError

T = TypeVar("T")


# =========================================
# Mixed radix
# =========================================

def decode_mixed_radix(radices: Sequence[int], rank: int) -> list[int]:
    """
    Split a rank into one digit per axis.

    Args:
        radices: Digit count of each axis
        rank: Scalar rank in [0, prod(radices))

    Returns:
        List of digits, digits[i] in [0, radices[i])
    """
    digits = []
    for radix in radices:
        rank, digit = divmod(rank, radix)
        digits.append(digit)
    return digits


def encode_mixed_radix(radices: Sequence[int], digits: Sequence[int]) -> int:
    """Inverse of decode_mixed_radix()."""
    if len(digits) != len(radices):
        raise ValueError(f"Expected {len(radices)} digits, got {len(digits)}")

    rank = 0
    for radix, digit in zip(reversed(radices), reversed(digits)):
        if not 0 <= digit < radix:
            raise ValueError(f"Digit {digit} out of range for radix {radix}")
        rank = rank * radix + digit
    return rank


def as_int(value, what: str = "value") -> int:
    """Coerce an integer (Python or numpy) to int; TypeError for anything else."""
    if isinstance(value, bool):
        raise TypeError(f"{what} must be an int, got bool")
    try:
        return operator.index(value)
    except TypeError:
        raise TypeError(f"{what} must be an int, got {type(value).__name__}") from None


def check_index(index: int, size: int, what: str = "space") -> int:
    """Return `index` as an int, raising IndexError unless 0 <= index < size."""
    index = as_int(index, f"{what} index")
    if not 0 <= index < size:
        raise IndexError(f"{what} index {index} out of range [0, {size})")
    return index


class MixedRadixCounter:
    """
    Cartesian product of N axes addressed by a single integer.

    Usage:
        counter = MixedRadixCounter()
        counter.init([3, 1, 4])
        counter.size()          # 12
        counter.decode(7)       # [1, 0, 2]
    """

    def __init__(self, radices: Sequence[int] = ()):
        self.radices: tuple[int, ...] = ()
        self._size = 1
        if radices:
            self.init(radices)

    def init(self, radices: Sequence[int]) -> None:
        """Store the radices and cache their product."""
        for axis, radix in enumerate(radices):
            if isinstance(radix, bool) or int(radix) != radix or radix < 1:
                raise ConfigurationError(f"Radix of axis {axis} must be a positive integer, got {radix}")
        self.radices = tuple(int(r) for r in radices)
        self._size = math.prod(self.radices)

    def size(self) -> int:
        return self._size

    def decode(self, rank: int) -> list[int]:
        rank = check_index(rank, self._size, "mixed-radix")
        return decode_mixed_radix(self.radices, rank)

    def encode(self, digits: Sequence[int]) -> int:
        return encode_mixed_radix(self.radices, digits)

    def __len__(self) -> int:
        return len(self.radices)

    def __repr__(self) -> str:
        return f"MixedRadixCounter(radices={list(self.radices)}, size={self._size})"


# =========================================
# Factorial number system
# =========================================

def factorial(n: int) -> int:
    """n! as an exact integer; factorial(0) == 1."""
    if n < 0:
        raise ValueError(f"factorial() not defined for negative values: {n}")
    return math.factorial(n)


def unrank_permutation(items: Sequence[T], rank: int) -> list[T]:
    """
    Return the rank-th ordering of items.

    Repeatedly takes, from the items not yet placed (kept in their original
    relative order), the one at position rank % remaining, then divides rank
    by remaining. Rank 0 is the identity ordering.

    Args:
        items: Items in canonical order
        rank: Permutation rank in [0, len(items)!)

    Returns:
        New list holding the permuted items
    """
    remaining = list(items)
    ordering = []
    while remaining:
        rank, pick = divmod(rank, len(remaining))
        ordering.append(remaining.pop(pick))
    return ordering


def rank_permutation(items: Sequence[T], ordering: Sequence[T]) -> int:
    """Inverse of unrank_permutation()."""
    if len(items) != len(ordering):
        raise ValueError(f"Ordering has {len(ordering)} items, expected {len(items)}")

    remaining = list(items)
    rank = 0
    weight = 1
    for item in ordering:
        try:
            pick = remaining.index(item)
        except ValueError:
            raise ValueError(f"{item!r} is not a permutation of {list(items)!r}") from None
        rank += pick * weight
        weight *= len(remaining)
        remaining.pop(pick)
    return rank


def permute(items: list, rank: int, n: int = None) -> None:
    """
    Reorder the first n items of a list in place to their rank-th ordering.

    n defaults to len(items). Items past n are left untouched.
    """
    if n is None:
        n = len(items)
    items[:n] = unrank_permutation(items[:n], rank)
