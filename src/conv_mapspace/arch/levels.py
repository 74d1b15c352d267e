"""
Tiling level structure of an accelerator.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from conv_mapspace.errors import ConfigurationError
from conv_mapspace.workload.dimension import NUM_DIMENSIONS, Dimension

logger = logging.getLogger(__name__)


@dataclass
class TilingLevel:
    """
    Definition of a single tiling level.

    Attributes:
        name: Name of this level (e.g., "RegisterFile", "PEArray")
        spatial: Whether loops at this level are unrolled across instances
        factors: User-pinned tile factors, dimension name -> factor
        permutation: User-pinned loop order prefix (innermost first)
        split: User-pinned spatial split point (spatial levels only)
    """
    name: str
    spatial: bool = False
    factors: dict[str, int] = field(default_factory=dict)
    permutation: list[str] = field(default_factory=list)
    split: Optional[int] = None

    def __post_init__(self):
        self.factors = {Dimension.from_name(k).name: v for k, v in self.factors.items()}
        for dim, factor in self.factors.items():
            if isinstance(factor, bool) or not isinstance(factor, int) or factor < 1:
                raise ConfigurationError(f"Level {self.name}: factor of {dim} must be a positive integer, got {factor!r}")

        self.permutation = [Dimension.from_name(d).name for d in self.permutation]
        if len(set(self.permutation)) != len(self.permutation):
            raise ConfigurationError(f"Level {self.name}: duplicate dimensions in permutation {self.permutation}")

        if self.split is not None:
            if not self.spatial:
                raise ConfigurationError(f"Level {self.name}: split given for a temporal level")
            if isinstance(self.split, bool) or not isinstance(self.split, int) or not 0 <= self.split <= NUM_DIMENSIONS:
                raise ConfigurationError(f"Level {self.name}: split must be in [0, {NUM_DIMENSIONS}], got {self.split!r}")

    @property
    def pinned_factors(self) -> dict[Dimension, int]:
        return {Dimension[k]: v for k, v in self.factors.items()}

    @property
    def user_prefix(self) -> list[Dimension]:
        return [Dimension[d] for d in self.permutation]

    @classmethod
    def from_dict(cls, config: dict) -> "TilingLevel":
        return cls(
            name=config.get("name", "Unknown"),
            spatial=bool(config.get("spatial", False)),
            factors=dict(config.get("factors") or {}),
            permutation=list(config.get("permutation") or []),
            split=config.get("split"),
        )

    def to_dict(self) -> dict:
        data = {"name": self.name, "spatial": self.spatial}
        if self.factors:
            data["factors"] = dict(self.factors)
        if self.permutation:
            data["permutation"] = list(self.permutation)
        if self.split is not None:
            data["split"] = self.split
        return data


class LevelHierarchy:
    """
    Ordered tiling levels, innermost first.

    Usage:
        hierarchy = LevelHierarchy.from_yaml("arch.yaml")
        hierarchy.num_levels
        hierarchy.spatial_levels
    """

    def __init__(self, levels: Optional[list[TilingLevel]] = None, prune_unit_dimensions: bool = True):
        """
        Initialize level hierarchy.

        Args:
            levels: TilingLevel objects, ordered from innermost to outermost.
                   If None, creates the default hierarchy.
            prune_unit_dimensions: Bake dimensions with unit factors at a level
                   into that level's loop order instead of permuting them
        """
        if levels is None:
            levels = self._default_levels()
        if not levels:
            raise ConfigurationError("Level hierarchy needs at least one level")

        self.levels = list(levels)
        self.prune_unit_dimensions = prune_unit_dimensions
        self._build_indices()

    @staticmethod
    def _default_levels() -> list[TilingLevel]:
        """Eyeriss-like hierarchy: RF, PE array, global buffer, DRAM."""
        return [
            TilingLevel(name="RegisterFile"),
            TilingLevel(name="PEArray", spatial=True),
            TilingLevel(name="GlobalBuffer"),
            TilingLevel(name="DRAM"),
        ]

    @classmethod
    def default(cls) -> "LevelHierarchy":
        return cls()

    def _build_indices(self):
        """Build name-to-index mapping."""
        self.name_to_idx = {}
        for idx, level in enumerate(self.levels):
            if level.name in self.name_to_idx:
                raise ConfigurationError(f"Duplicate level name: {level.name}")
            self.name_to_idx[level.name] = idx
        self.idx_to_name = {idx: level.name for idx, level in enumerate(self.levels)}

    @property
    def num_levels(self) -> int:
        return len(self.levels)

    @property
    def spatial_levels(self) -> list[int]:
        """Indices of spatial levels."""
        return [idx for idx, level in enumerate(self.levels) if level.spatial]

    def get_level(self, name_or_idx) -> Optional[TilingLevel]:
        """Get level by name or index."""
        if isinstance(name_or_idx, str):
            idx = self.name_to_idx.get(name_or_idx)
            if idx is None:
                return None
            return self.levels[idx]
        elif isinstance(name_or_idx, int):
            if 0 <= name_or_idx < len(self.levels):
                return self.levels[name_or_idx]
        return None

    def prefactors(self) -> dict[Dimension, dict[int, int]]:
        """Pinned factors regrouped per dimension: dim -> {level: factor}."""
        result: dict[Dimension, dict[int, int]] = {}
        for idx, level in enumerate(self.levels):
            for dim, factor in level.pinned_factors.items():
                result.setdefault(dim, {})[idx] = factor
        return result

    def __len__(self) -> int:
        return len(self.levels)

    def __getitem__(self, idx: int) -> TilingLevel:
        return self.levels[idx]

    def __iter__(self):
        return iter(self.levels)

    def to_dict(self) -> dict:
        return {
            "mapspace": {
                "prune_unit_dimensions": self.prune_unit_dimensions,
                "levels": [level.to_dict() for level in self.levels],
            }
        }

    @classmethod
    def from_dict(cls, config: dict) -> "LevelHierarchy":
        # Handle nested 'mapspace' or 'architecture' key
        for key in ("mapspace", "architecture"):
            if key in config:
                config = config[key]
                break

        levels_config = config.get("levels")
        if not isinstance(levels_config, list):
            raise ConfigurationError("Level configuration needs a 'levels' list")

        return cls(
            levels=[TilingLevel.from_dict(level_config) for level_config in levels_config],
            prune_unit_dimensions=bool(config.get("prune_unit_dimensions", True)),
        )

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> "LevelHierarchy":
        """
        Create LevelHierarchy from a YAML configuration file.

        Example:
            mapspace:
              prune_unit_dimensions: true
              levels:
                - name: RegisterFile
                  permutation: [R, S]
                - name: PEArray
                  spatial: true
                  split: 4
                - name: DRAM
                  factors: {N: 1}

        Args:
            config_path: Path to YAML config file

        Returns:
            LevelHierarchy instance
        """
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with path.open("r", encoding="utf-8") as fh:
            config = yaml.safe_load(fh) or {}

        hierarchy = cls.from_dict(config)
        logger.debug(f"Loaded {hierarchy.num_levels} tiling levels from {path}")
        return hierarchy

    def summary(self) -> str:
        lines = [f"Tiling levels: {self.num_levels} (innermost first)"]
        for idx, level in enumerate(self.levels):
            kind = "spatial" if level.spatial else "temporal"
            line = f"  [L{idx}] {level.name} ({kind})"
            if level.factors:
                line += f" factors={level.factors}"
            if level.permutation:
                line += f" prefix={''.join(level.permutation)}"
            if level.split is not None:
                line += f" split={level.split}"
            lines.append(line)
        return "\n".join(lines)
