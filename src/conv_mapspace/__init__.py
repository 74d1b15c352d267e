"""
Conv Mapspace - Indexable mapping spaces for convolution dataflows.

This package enumerates the space of mappings of a 7-dimensional conv loop
nest (R, S, P, Q, C, K, N) onto a multi-level tiling hierarchy without ever
materialising it. Every mapping is named by one (arbitrarily large) integer.

Main components:
- MapSpace: Full mapspace of a workload on a level hierarchy
- IndexFactorizationSpace: Tile factors per dimension and level
- PermutationSpace: Loop order per level
- SpatialSplitSpace: X/Y split per spatial level
- ConvWorkload: Convolution workload definition
- LevelHierarchy: Tiling level structure

Quick Start:
    from conv_mapspace import MapSpace, ConvWorkload, LevelHierarchy

    workload = ConvWorkload(R=3, S=3, P=56, Q=56, C=64, K=128, N=1)
    hierarchy = LevelHierarchy.from_yaml("arch.yaml")

    mapspace = MapSpace(workload, hierarchy)
    print(mapspace.size())
    print(mapspace.decode(42).pretty_print())
"""

__version__ = "0.1.0"

from conv_mapspace.errors import ConfigurationError
from conv_mapspace.workload import ConvWorkload, Dimension, LayerRegistry, default_registry
from conv_mapspace.arch import LevelHierarchy, TilingLevel
from conv_mapspace.mapping import Mapping
from conv_mapspace.mapspace import (
    Factors,
    IndexedSpace,
    IndexFactorizationSpace,
    MapSpace,
    PermutationSpace,
    ProductSpace,
    SpatialSplitSpace,
)
from conv_mapspace.numeric import (
    MixedRadixCounter,
    factorial,
    permute,
    rank_permutation,
    unrank_permutation,
)

__all__ = [
    # Main classes
    "MapSpace",
    "IndexFactorizationSpace",
    "PermutationSpace",
    "SpatialSplitSpace",
    "ConvWorkload",
    "LevelHierarchy",
    "Mapping",

    # Helper classes
    "Dimension",
    "Factors",
    "IndexedSpace",
    "ProductSpace",
    "LayerRegistry",
    "TilingLevel",
    "MixedRadixCounter",
    "ConfigurationError",

    # Functions
    "default_registry",
    "factorial",
    "permute",
    "rank_permutation",
    "unrank_permutation",
]
