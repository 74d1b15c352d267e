"""
Workload module: problem dimensions, conv shapes and the named layer table.
"""

from conv_mapspace.workload.dimension import Dimension, NUM_DIMENSIONS, CANONICAL_ORDER, DIM_NAMES
from conv_mapspace.workload.conv import ConvWorkload
from conv_mapspace.workload.layers import LayerRegistry, default_registry

__all__ = [
    "Dimension",
    "NUM_DIMENSIONS",
    "CANONICAL_ORDER",
    "DIM_NAMES",
    "ConvWorkload",
    "LayerRegistry",
    "default_registry",
]
