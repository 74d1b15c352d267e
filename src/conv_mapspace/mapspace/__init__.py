"""
Mapspace module: indexable factorization, permutation and spatial split spaces.
"""

from conv_mapspace.mapspace.base import IndexedSpace, ProductSpace
from conv_mapspace.mapspace.factors import Factors
from conv_mapspace.mapspace.subspaces import (
    IndexFactorizationSpace,
    PermutationSpace,
    SpatialSplitSpace,
)
from conv_mapspace.mapspace.mapspace import MapSpace

__all__ = [
    "IndexedSpace",
    "ProductSpace",
    "Factors",
    "IndexFactorizationSpace",
    "PermutationSpace",
    "SpatialSplitSpace",
    "MapSpace",
]
