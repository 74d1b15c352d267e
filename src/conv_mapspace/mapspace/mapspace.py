"""
Full mapspace of one workload on one level hierarchy.
"""

import logging
from typing import Optional

from conv_mapspace.arch import LevelHierarchy
from conv_mapspace.mapping import Mapping
from conv_mapspace.mapspace.base import ProductSpace
from conv_mapspace.mapspace.subspaces import (
    IndexFactorizationSpace,
    PermutationSpace,
    SpatialSplitSpace,
)
from conv_mapspace.numeric import check_index
from conv_mapspace.utils import format_number
from conv_mapspace.workload import ConvWorkload, Dimension

logger = logging.getLogger(__name__)


class MapSpace:
    """
    Product of the factorization, permutation and spatial split spaces.

    A mapping id is split mixed-radix style: the factorization index takes
    the least significant digit, then the permutation index, then the
    spatial split index.

    Usage:
        mapspace = MapSpace(ConvWorkload.from_layer("VGG_conv3_1"), LevelHierarchy.default())
        mapspace.size()
        mapping = mapspace.decode(12345)
        print(mapping.pretty_print())
    """

    def __init__(self, workload: ConvWorkload, hierarchy: Optional[LevelHierarchy] = None):
        self.workload = workload
        self.hierarchy = hierarchy if hierarchy is not None else LevelHierarchy.default()

        self.factorization_space = IndexFactorizationSpace()
        self.permutation_space = PermutationSpace()
        self.split_space = SpatialSplitSpace()
        self.pruned_dimensions: dict[int, list[Dimension]] = {}

        self._init_factorization()
        self._init_permutations()
        self._init_splits()

        self.product = ProductSpace([self.factorization_space, self.permutation_space, self.split_space])
        logger.info(
            f"Mapspace for {workload.name}: {format_number(self.size())} mappings "
            f"(factorizations={format_number(self.factorization_space.size())}, "
            f"permutations={format_number(self.permutation_space.size())}, "
            f"splits={format_number(self.split_space.size())})"
        )

    def _init_factorization(self):
        num_levels = self.hierarchy.num_levels
        self.factorization_space.init(
            bounds=self.workload.bounds_by_dim,
            cofactors_order={dim: num_levels for dim in Dimension},
            prefactors=self.hierarchy.prefactors(),
        )

    def _unit_dimensions(self, level: int) -> list[Dimension]:
        """Dimensions whose factor at `level` is forced to 1."""
        pinned = self.hierarchy[level].pinned_factors
        return [
            dim for dim in Dimension
            if self.workload.get_bound(dim) == 1 or pinned.get(dim) == 1
        ]

    def _init_permutations(self):
        self.permutation_space.init(self.hierarchy.num_levels)
        for idx, level in enumerate(self.hierarchy):
            pruned = self._unit_dimensions(idx) if self.hierarchy.prune_unit_dimensions else []
            self.pruned_dimensions[idx] = pruned
            self.permutation_space.init_level(idx, level.user_prefix, pruned)

    def _init_splits(self):
        self.split_space.init(self.hierarchy.num_levels)
        for idx in self.hierarchy.spatial_levels:
            level = self.hierarchy[idx]
            if level.split is not None:
                self.split_space.init_level_user_specified(idx, level.split)
            else:
                self.split_space.init_level(idx, unit_factors=len(self.pruned_dimensions[idx]))

    def size(self) -> int:
        return self.product.size()

    def split(self, mapping_id: int) -> tuple[int, int, int]:
        """Split a mapping id into (factorization, permutation, split) ids."""
        factor_id, permutation_id, split_id = self.product.split(mapping_id)
        return factor_id, permutation_id, split_id

    def encode(self, factor_id: int, permutation_id: int, split_id: int) -> int:
        """Inverse of split()."""
        return self.product.encode([factor_id, permutation_id, split_id])

    def decode(self, mapping_id: int) -> Mapping:
        """Assemble the concrete mapping named by `mapping_id`."""
        mapping_id = check_index(mapping_id, self.size(), "mapping")
        factor_id, permutation_id, split_id = self.split(mapping_id)

        factors = self.factorization_space.get_factors(factor_id)
        patterns = self.permutation_space.get_patterns(permutation_id)
        splits = self.split_space.get_splits(split_id)

        loop_bounds = {
            level: {dim.name: factors[dim][level] for dim in Dimension}
            for level in range(self.hierarchy.num_levels)
        }
        permutation = {
            level: [dim.name for dim in pattern]
            for level, pattern in enumerate(patterns)
        }

        return Mapping(
            mapping_id=mapping_id,
            loop_bounds=loop_bounds,
            permutation=permutation,
            spatial_splits=splits,
            level_names=[level.name for level in self.hierarchy],
            sub_indices=(factor_id, permutation_id, split_id),
            workload_name=self.workload.name,
            workload_bounds=self.workload.bounds,
        )

    def summary(self) -> str:
        lines = [
            f"Mapspace: {self.workload.name}",
            f"  Factorizations: {format_number(self.factorization_space.size())}",
        ]
        for dim in Dimension:
            lines.append(f"    {dim}: {self.factorization_space.dimension_factors[dim].size()}")
        lines.append(f"  Permutations:   {format_number(self.permutation_space.size())}")
        for idx in range(self.hierarchy.num_levels):
            lines.append(f"    L{idx}: {self.permutation_space.level_size(idx)}")
        lines.append(f"  Spatial splits: {format_number(self.split_space.size())}")
        lines.append(f"  Total:          {format_number(self.size())} ({self.size()})")
        return "\n".join(lines)
