"""
Mapping class for decoded mapspace members.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Mapping:
    """
    One concrete mapping of a workload onto the tiling levels.

    Attributes:
        mapping_id: Global index this mapping was decoded from
        loop_bounds: Tile factor per level and dimension
            [level][dimension] = factor
        permutation: Loop order per level, innermost first
            [level] = [dimension, ...]
        spatial_splits: Split point per spatial level
            [level] = number of dimensions on the X axis
        level_names: Name of each tiling level
        sub_indices: (factorization, permutation, spatial split) indices
    """
    mapping_id: Optional[int] = None
    loop_bounds: dict = field(default_factory=dict)
    permutation: dict = field(default_factory=dict)
    spatial_splits: dict = field(default_factory=dict)
    level_names: list = field(default_factory=list)
    sub_indices: tuple = ()

    # Workload reference
    workload_name: str = ""
    workload_bounds: list = field(default_factory=list)

    def get_tile_size(self, level: int, dimension: str) -> int:
        """
        Get the tile size for a dimension at a level.

        This is the product of the factors from level 0 up to and including
        the specified level.
        """
        tile = 1
        for m in range(level + 1):
            if m in self.loop_bounds:
                tile *= self.loop_bounds[m].get(dimension, 1)
        return tile

    def get_loop_order(self, level: int) -> list:
        """Get the loop order (inner to outer) at a level."""
        return list(self.permutation.get(level, []))

    def spatial_partition(self, level: int) -> tuple[list, list]:
        """
        Split a spatial level's loop order into X and Y fan-out groups.

        The first `split` dimensions of the level's order go to X, the rest
        to Y.
        """
        if level not in self.spatial_splits:
            raise KeyError(f"Level {level} is not a spatial level")
        order = self.get_loop_order(level)
        split = self.spatial_splits[level]
        return order[:split], order[split:]

    def get_fanout(self, level: int) -> tuple[int, int]:
        """Get the (X, Y) fan-out of a spatial level."""
        x_dims, y_dims = self.spatial_partition(level)
        bounds = self.loop_bounds.get(level, {})
        fanout_x = 1
        for dim in x_dims:
            fanout_x *= bounds.get(dim, 1)
        fanout_y = 1
        for dim in y_dims:
            fanout_y *= bounds.get(dim, 1)
        return fanout_x, fanout_y

    def to_dict(self) -> dict:
        """Convert mapping to dictionary format."""
        return {
            "mapping_id": self.mapping_id,
            "loop_bounds": {m: dict(b) for m, b in self.loop_bounds.items()},
            "permutation": {m: list(p) for m, p in self.permutation.items()},
            "spatial_splits": dict(self.spatial_splits),
            "level_names": list(self.level_names),
            "sub_indices": list(self.sub_indices),
            "workload_name": self.workload_name,
            "workload_bounds": list(self.workload_bounds),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Mapping":
        """Create mapping from dictionary."""
        return cls(
            mapping_id=data.get("mapping_id"),
            loop_bounds=data.get("loop_bounds", {}),
            permutation=data.get("permutation", {}),
            spatial_splits=data.get("spatial_splits", {}),
            level_names=data.get("level_names", []),
            sub_indices=tuple(data.get("sub_indices", ())),
            workload_name=data.get("workload_name", ""),
            workload_bounds=data.get("workload_bounds", []),
        )

    def pretty_print(self) -> str:
        """Generate human-readable mapping representation."""
        lines = []
        lines.append(f"Mapping #{self.mapping_id}: {self.workload_name}")
        lines.append("=" * 50)

        # Outermost level first, like a loop nest
        for m in sorted(self.loop_bounds.keys(), reverse=True):
            name = self.level_names[m] if m < len(self.level_names) else f"L{m}"
            kind = "spatial" if m in self.spatial_splits else "temporal"
            lines.append(f"  Level {m} [{name}] ({kind}):")

            order = self.get_loop_order(m)
            bounds = self.loop_bounds[m]
            loops = [f"{dim}={bounds.get(dim, 1)}" for dim in reversed(order) if bounds.get(dim, 1) > 1]
            lines.append(f"    loops (outer->inner): {', '.join(loops) if loops else '-'}")
            lines.append(f"    order (inner->outer): {''.join(order)}")

            if m in self.spatial_splits:
                x_dims, y_dims = self.spatial_partition(m)
                fanout_x, fanout_y = self.get_fanout(m)
                lines.append(
                    f"    split={self.spatial_splits[m]} "
                    f"X={''.join(x_dims) or '-'} ({fanout_x}) Y={''.join(y_dims) or '-'} ({fanout_y})"
                )

        return "\n".join(lines)
