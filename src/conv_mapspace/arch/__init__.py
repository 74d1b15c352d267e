"""
Architecture module: tiling level structure.
"""

from conv_mapspace.arch.levels import TilingLevel, LevelHierarchy

__all__ = [
    "TilingLevel",
    "LevelHierarchy",
]
