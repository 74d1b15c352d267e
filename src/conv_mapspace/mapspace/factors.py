"""
Factorization table for a single problem dimension.
"""

from typing import Iterator, Mapping, Optional

import numpy as np

from conv_mapspace.errors import ConfigurationError
from conv_mapspace.numeric import as_int, check_index
from conv_mapspace.utils import get_divisors

INT64_MAX = np.iinfo(np.int64).max


def _ordered_factorizations(residual: int, count: int) -> Iterator[tuple[int, ...]]:
    """
    Yield every ordered tuple of `count` positive ints whose product is `residual`.

    Tuples come out in lexicographic order.
    """
    if count == 0:
        if residual == 1:
            yield ()
        return
    if count == 1:
        yield (residual,)
        return
    for d in get_divisors(residual):
        for rest in _ordered_factorizations(residual // d, count - 1):
            yield (d,) + rest


class Factors:
    """
    All ways of splitting one dimension's bound into per-level cofactors.

    Pinned levels keep their user-given factor; the remaining (free) levels
    share the residual bound / prod(pinned). The table is computed once and
    cached as a read-only array of shape (size, num_levels).

    Usage:
        factors = Factors(12, 2, pinned={0: 3})
        factors.size()      # 1
        factors.get(0, 1)   # 4
    """

    def __init__(self, bound: int, num_levels: int, pinned: Optional[Mapping[int, int]] = None):
        """
        Args:
            bound: Dimension bound to factorize
            num_levels: Number of cofactors (tiling levels)
            pinned: level -> forced factor
        """
        pinned = self._validate(bound, num_levels, pinned or {})

        self.bound = bound
        self.num_levels = num_levels
        self.pinned = pinned

        pinned_product = 1
        for factor in pinned.values():
            pinned_product *= factor
        residual = bound // pinned_product

        free_levels = [level for level in range(num_levels) if level not in pinned]
        dtype = np.int64 if bound <= INT64_MAX else object

        rows = []
        for free_factors in _ordered_factorizations(residual, len(free_levels)):
            row = [0] * num_levels
            for level, factor in pinned.items():
                row[level] = factor
            for level, factor in zip(free_levels, free_factors):
                row[level] = factor
            rows.append(row)

        self._table = np.array(rows, dtype=dtype).reshape(len(rows), num_levels)
        self._table.flags.writeable = False

    @staticmethod
    def _validate(bound: int, num_levels: int, pinned: Mapping[int, int]) -> dict[int, int]:
        """Check the configuration and return `pinned` with plain int keys and values."""
        if isinstance(bound, bool) or not isinstance(bound, int) or bound < 1:
            raise ConfigurationError(f"Bound must be a positive integer, got {bound!r}")
        if isinstance(num_levels, bool) or not isinstance(num_levels, int) or num_levels < 1:
            raise ConfigurationError(f"Number of levels must be a positive integer, got {num_levels!r}")

        normalized = {}
        pinned_product = 1
        for level, factor in pinned.items():
            try:
                level = as_int(level, "Pinned level")
                factor = as_int(factor, f"Pinned factor at level {level}")
            except TypeError as e:
                raise ConfigurationError(str(e)) from None
            if not 0 <= level < num_levels:
                raise ConfigurationError(f"Pinned level {level} out of range [0, {num_levels})")
            if factor < 1:
                raise ConfigurationError(f"Pinned factor at level {level} must be a positive integer, got {factor!r}")
            if bound % factor != 0:
                raise ConfigurationError(f"Pinned factor {factor} at level {level} does not divide bound {bound}")
            pinned_product *= factor
            normalized[level] = factor

        if bound % pinned_product != 0:
            raise ConfigurationError(
                f"Bound {bound} is not divisible by the product of pinned factors ({pinned_product})"
            )
        if len(normalized) == num_levels and pinned_product != bound:
            raise ConfigurationError(
                f"All {num_levels} levels are pinned but their product ({pinned_product}) != bound ({bound})"
            )
        return normalized

    def size(self) -> int:
        return self._table.shape[0]

    def get(self, index: int, level: int) -> int:
        """Factor at `level` in the index-th factorization."""
        index = check_index(index, self.size(), "factorization")
        if not 0 <= level < self.num_levels:
            raise IndexError(f"Level {level} out of range [0, {self.num_levels})")
        return int(self._table[index, level])

    def __getitem__(self, index: int) -> tuple[int, ...]:
        """The whole index-th factorization, one factor per level."""
        index = check_index(index, self.size(), "factorization")
        return tuple(int(f) for f in self._table[index])

    def __len__(self) -> int:
        return self.size()

    def __iter__(self) -> Iterator[tuple[int, ...]]:
        for index in range(self.size()):
            yield self[index]

    def __repr__(self) -> str:
        return f"Factors(bound={self.bound}, num_levels={self.num_levels}, pinned={self.pinned}, size={self.size()})"
