"""
The three sub-spaces of a mapspace.

- IndexFactorizationSpace: tile factor of every (dimension, level) pair
- PermutationSpace: loop order at every level
- SpatialSplitSpace: X/Y split point at every spatial level

Each one is set up once through its init*() calls and is read-only after
that: decoding never mutates state, so concurrent decoders need no locks.
Re-running init*() while other threads decode is not supported.
"""

import logging
import math
from typing import Mapping, Optional, Sequence

from conv_mapspace.errors import ConfigurationError
from conv_mapspace.mapspace.factors import Factors
from conv_mapspace.numeric import MixedRadixCounter, check_index, factorial, unrank_permutation
from conv_mapspace.workload.dimension import CANONICAL_ORDER, NUM_DIMENSIONS, Dimension

logger = logging.getLogger(__name__)


def _check_num_levels(num_levels: int) -> int:
    if isinstance(num_levels, bool) or not isinstance(num_levels, int) or num_levels < 0:
        raise ConfigurationError(f"Number of levels must be a non-negative integer, got {num_levels!r}")
    return num_levels


def _check_level(level: int, num_levels: int) -> None:
    if isinstance(level, bool) or not isinstance(level, int) or not 0 <= level < num_levels:
        raise ConfigurationError(f"Level {level!r} out of range [0, {num_levels})")


def _per_dimension(values, what: str) -> dict[Dimension, object]:
    """Accept a Dimension-keyed mapping, a 7-long sequence or a scalar."""
    if isinstance(values, Mapping):
        result = {Dimension.from_name(k): v for k, v in values.items()}
        missing = [d.name for d in Dimension if d not in result]
        if missing:
            raise ConfigurationError(f"Missing {what} for dimensions {missing}")
        return result
    if isinstance(values, int):
        return {dim: values for dim in Dimension}
    values = list(values)
    if len(values) != NUM_DIMENSIONS:
        raise ConfigurationError(f"Expected {NUM_DIMENSIONS} {what}, got {len(values)}")
    return dict(zip(Dimension, values))


# =========================================
# Index factorization
# =========================================

class IndexFactorizationSpace:
    """
    Tile factors of all dimensions, addressed by one index.

    Holds one Factors table per dimension; their sizes are the radices of a
    mixed-radix counter in canonical dimension order (R least significant).
    """

    def __init__(self):
        self.dimension_factors: dict[Dimension, Factors] = {}
        self.tiling_counter = MixedRadixCounter()

    def init(
        self,
        bounds,
        cofactors_order,
        prefactors: Optional[Mapping] = None,
    ) -> None:
        """
        Build the per-dimension tables.

        Args:
            bounds: Dimension -> bound (or a sequence in canonical order)
            cofactors_order: Dimension -> number of levels (or a single int)
            prefactors: Dimension -> {level: pinned factor}
        """
        bounds = _per_dimension(bounds, "bounds")
        cofactors_order = _per_dimension(cofactors_order, "cofactor counts")
        prefactors = {Dimension.from_name(k): v for k, v in (prefactors or {}).items()}

        dimension_factors = {}
        for dim in Dimension:
            try:
                dimension_factors[dim] = Factors(bounds[dim], cofactors_order[dim], prefactors.get(dim))
            except ConfigurationError as e:
                raise ConfigurationError(f"Dimension {dim}: {e}") from e

        self.dimension_factors = dimension_factors
        self.tiling_counter = MixedRadixCounter([dimension_factors[dim].size() for dim in Dimension])

        logger.info("Initializing Index Factorization subspace.")
        for dim in Dimension:
            logger.info(f"  Factorization options along problem dimension {dim} = {dimension_factors[dim].size()}")

    def _local_indices(self, nest_id: int) -> list[int]:
        if not self.dimension_factors:
            raise ConfigurationError("IndexFactorizationSpace used before init()")
        return self.tiling_counter.decode(nest_id)

    def get_factor(self, nest_id: int, dim, level: int) -> int:
        """Tile factor of `dim` at `level` in mapping `nest_id`."""
        dim = Dimension.from_name(dim)
        local_index = self._local_indices(nest_id)[dim]
        return self.dimension_factors[dim].get(local_index, level)

    def get_factors(self, nest_id: int) -> dict[Dimension, tuple[int, ...]]:
        """All per-level factors of every dimension in mapping `nest_id`."""
        local = self._local_indices(nest_id)
        return {dim: self.dimension_factors[dim][local[dim]] for dim in Dimension}

    decode = get_factors

    def size(self) -> int:
        return self.tiling_counter.size()


# =========================================
# Permutation
# =========================================

class PermutationSpace:
    """
    Loop order at every level, addressed by one index.

    Each level's order is a baked prefix (never moves) followed by a
    permutable suffix. A level with k suffix dimensions owns a factorial(k)
    digit of the index; levels are consumed from level 0 upward.
    """

    def __init__(self):
        self.num_levels = 0
        self.canonical_pattern: tuple[Dimension, ...] = CANONICAL_ORDER
        self.patterns: dict[int, tuple[tuple[Dimension, ...], tuple[Dimension, ...]]] = {}
        self._size: dict[int, int] = {}

    def init(self, num_levels: int) -> None:
        self.num_levels = _check_num_levels(num_levels)
        self.patterns = {}
        self._size = {}

    def init_level_canonical(self, level: int) -> None:
        self.init_level(level, self.canonical_pattern)

    def init_level(
        self,
        level: int,
        user_prefix: Sequence,
        pruned_dimensions: Sequence = (),
    ) -> None:
        """
        Fix the baked prefix of a level.

        Final order is <pruned><user prefix><free suffix>; pruned dimensions
        come first, then user-specified ones not already pruned.

        Args:
            level: Level index
            user_prefix: User-pinned innermost dimensions
            pruned_dimensions: Dimensions with unit factors at this level
        """
        _check_level(level, self.num_levels)

        pruned = [Dimension.from_name(d) for d in pruned_dimensions]
        user = [Dimension.from_name(d) for d in user_prefix]
        if len(set(pruned)) != len(pruned):
            raise ConfigurationError(f"Level {level}: duplicate pruned dimensions {[str(d) for d in pruned]}")
        if len(set(user)) != len(user):
            raise ConfigurationError(f"Level {level}: duplicate dimensions in permutation {[str(d) for d in user]}")

        baked_prefix = pruned + [dim for dim in user if dim not in pruned]
        permutable_suffix = [dim for dim in self.canonical_pattern if dim not in baked_prefix]

        self.patterns[level] = (tuple(baked_prefix), tuple(permutable_suffix))
        self._size[level] = factorial(len(permutable_suffix))
        logger.info(f"  Permutation options at level {level} = {self._size[level]}")
        logger.debug(
            f"Permutation level {level}: prefix={''.join(map(str, baked_prefix))} "
            f"suffix={''.join(map(str, permutable_suffix))} options={self._size[level]}"
        )

    def _pattern(self, level: int):
        try:
            return self.patterns[level]
        except KeyError:
            raise ConfigurationError(f"Permutation level {level} was never initialized") from None

    def get_patterns(self, id: int) -> list[list[Dimension]]:
        """Loop order of every level (innermost first) for permutation `id`."""
        id = check_index(id, self.size(), "permutation")

        retval = []
        for level in range(self.num_levels):
            baked_prefix, permutable_suffix = self._pattern(level)
            if len(baked_prefix) == NUM_DIMENSIONS:
                retval.append(list(baked_prefix))
                continue

            id, local_rank = divmod(id, self._size[level])
            retval.append(list(baked_prefix) + unrank_permutation(permutable_suffix, local_rank))

        return retval

    decode = get_patterns

    def level_size(self, level: int) -> int:
        self._pattern(level)
        return self._size[level]

    def size(self) -> int:
        return math.prod(self.level_size(level) for level in range(self.num_levels))


# =========================================
# Spatial split
# =========================================

class SpatialSplitSpace:
    """
    Split point of every spatial level, addressed by one index.

    Only a subset of the tiling levels is spatial; levels never passed to
    init_level*() are treated as temporal and left out of the result.
    """

    def __init__(self):
        self.num_levels = 0
        self.is_user_specified: dict[int, bool] = {}
        self.user_splits: dict[int, int] = {}
        self.unit_factors: dict[int, int] = {}
        self._size: dict[int, int] = {}

    def init(self, num_levels: int) -> None:
        self.num_levels = _check_num_levels(num_levels)
        self.is_user_specified = {}
        self.user_splits = {}
        self.unit_factors = {}
        self._size = {}

    def init_level(self, level: int, unit_factors: int = 0) -> None:
        """Mark `level` as free: split ranges over [unit_factors, NUM_DIMENSIONS]."""
        _check_level(level, self.num_levels)
        if isinstance(unit_factors, bool) or not isinstance(unit_factors, int) or not 0 <= unit_factors <= NUM_DIMENSIONS:
            raise ConfigurationError(f"Level {level}: unit factors must be in [0, {NUM_DIMENSIONS}], got {unit_factors!r}")

        self.is_user_specified[level] = False
        self.user_splits.pop(level, None)
        self.unit_factors[level] = unit_factors
        self._size[level] = NUM_DIMENSIONS + 1 - unit_factors
        logger.info(f"  Spatial split options at level {level} = {self._size[level]} (from {unit_factors})")

    def init_level_user_specified(self, level: int, user_split: int) -> None:
        """Fix the split of `level` to `user_split`."""
        _check_level(level, self.num_levels)
        if isinstance(user_split, bool) or not isinstance(user_split, int) or not 0 <= user_split <= NUM_DIMENSIONS:
            raise ConfigurationError(f"Level {level}: split must be in [0, {NUM_DIMENSIONS}], got {user_split!r}")

        self.is_user_specified[level] = True
        self.user_splits[level] = user_split
        self.unit_factors.pop(level, None)
        self._size[level] = 1
        logger.info(f"  Spatial split at level {level} fixed to {user_split}")

    def get_splits(self, id: int) -> dict[int, int]:
        """Split point of every spatial level for split `id`."""
        id = check_index(id, self.size(), "spatial split")

        retval = {}
        for level in sorted(self.is_user_specified):
            if self.is_user_specified[level]:
                retval[level] = self.user_splits[level]
            else:
                id, local = divmod(id, self._size[level])
                retval[level] = self.unit_factors[level] + local

        return retval

    decode = get_splits

    @property
    def spatial_levels(self) -> list[int]:
        return sorted(self.is_user_specified)

    def size(self) -> int:
        return math.prod(self._size.values())
