"""
Convolution workload definition.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np
import yaml

from conv_mapspace.errors import ConfigurationError
from conv_mapspace.utils import get_divisors
from conv_mapspace.workload.dimension import DIM_NAMES, Dimension
from conv_mapspace.workload.layers import LayerRegistry, default_registry


@dataclass
class ConvWorkload:
    """
    Convolution workload definition.

    Attributes:
        name: Optional name for the workload
        R, S, P, Q, C, K, N: Problem dimensions
        stride: (width_stride, height_stride), carried along untouched
        dilation: (width_dilation, height_dilation), carried along untouched
        path: Optional path for identification
    """

    name: str = "conv_workload"
    R: int = 3
    S: int = 3
    P: int = 56
    Q: int = 56
    C: int = 64
    K: int = 64
    N: int = 1
    stride: tuple[int, int] = (1, 1)
    dilation: tuple[int, int] = (1, 1)
    path: str = "conv_workload"

    def __post_init__(self):
        """Validate bounds and initialize derived attributes."""
        for dim_name in DIM_NAMES:
            bound = getattr(self, dim_name)
            if isinstance(bound, bool) or not isinstance(bound, (int, np.integer)) or bound < 1:
                raise ConfigurationError(f"Workload {self.name}: {dim_name} must be a positive integer, got {bound!r}")
            setattr(self, dim_name, int(bound))

        self.dim_names = list(DIM_NAMES)

    @property
    def bounds(self) -> list[int]:
        """Bounds in canonical dimension order."""
        return [getattr(self, dim_name) for dim_name in DIM_NAMES]

    @property
    def bounds_by_dim(self) -> dict[Dimension, int]:
        return {dim: getattr(self, dim.name) for dim in Dimension}

    @property
    def divisors(self) -> list[list[int]]:
        return [get_divisors(bound) for bound in self.bounds]

    @property
    def macs(self) -> int:
        """Total MACs = R x S x P x Q x C x K x N."""
        return int(np.prod(self.bounds, dtype=object))

    def get_bound(self, dim) -> int:
        """Get the bound of a dimension given as Dimension, name or index."""
        return getattr(self, Dimension.from_name(dim).name)

    @classmethod
    def from_dict(
        cls,
        config: dict,
        path: str = "workload",
        registry: Optional[LayerRegistry] = None,
    ) -> "ConvWorkload":
        """
        Create ConvWorkload from a dictionary.

        Either all seven dimensions are given, or a named layer is looked up
        in the registry and individual dimensions are overridden:

            problem:
              layer: VGG_conv3_1
              padPrimes: true
              N: 16

        Args:
            config: Dictionary with problem dimensions
            path: Identifier for this workload
            registry: Layer table for named layers (packaged table by default)

        Returns:
            ConvWorkload instance
        """
        prob = config.get('problem', config)
        if not isinstance(prob, dict):
            raise ConfigurationError(f"{path}: 'problem' must be a mapping")

        layer_name = prob.get('layer')
        if layer_name is not None:
            if registry is None:
                registry = default_registry()
            bounds = registry.lookup(layer_name, pad_to_composite=prob.get('padPrimes', True))
            dims = {dim.name: prob.get(dim.name, bounds[dim]) for dim in Dimension}
            name = prob.get('name', layer_name)
        else:
            missing = [d for d in DIM_NAMES if d not in prob]
            if missing:
                raise ConfigurationError(f"{path}: missing problem dimensions {missing}")
            dims = {d: prob[d] for d in DIM_NAMES}
            name = prob.get('name', cls.name)

        return cls(
            name=name,
            stride=(prob.get('Wstride', 1), prob.get('Hstride', 1)),
            dilation=(prob.get('Wdilation', 1), prob.get('Hdilation', 1)),
            path=path,
            **dims,
        )

    @classmethod
    def from_yaml(cls, yaml_path: str | Path, registry: Optional[LayerRegistry] = None) -> "ConvWorkload":
        """
        Create ConvWorkload from a YAML file.

        Args:
            yaml_path: Path to YAML file
            registry: Layer table for named layers

        Returns:
            ConvWorkload instance
        """
        path = Path(yaml_path)
        if not path.exists():
            raise FileNotFoundError(f"Workload file not found: {path}")
        with path.open("r", encoding="utf-8") as fh:
            config = yaml.safe_load(fh) or {}
        return cls.from_dict(config, path=str(path), registry=registry)

    @classmethod
    def from_layer(
        cls,
        layer_name: str,
        pad_primes: bool = True,
        registry: Optional[LayerRegistry] = None,
    ) -> "ConvWorkload":
        """Create ConvWorkload from a named layer."""
        return cls.from_dict(
            {'layer': layer_name, 'padPrimes': pad_primes},
            path=layer_name,
            registry=registry,
        )

    def to_dict(self) -> dict:
        """Convert workload to dictionary."""
        return {
            'problem': {
                'name': self.name,
                'R': self.R,
                'S': self.S,
                'P': self.P,
                'Q': self.Q,
                'C': self.C,
                'K': self.K,
                'N': self.N,
                'Wstride': self.stride[0],
                'Hstride': self.stride[1],
                'Wdilation': self.dilation[0],
                'Hdilation': self.dilation[1],
            }
        }

    def __repr__(self) -> str:
        dims = f"R={self.R}, S={self.S}, P={self.P}, Q={self.Q}, C={self.C}, K={self.K}, N={self.N}"
        return f"ConvWorkload({dims}, stride={self.stride}, dilation={self.dilation})"

    def summary(self) -> str:
        """Return a summary string."""
        lines = [
            f"ConvWorkload: {self.name} ({self.path})",
            f"  Dimensions: R={self.R}, S={self.S}, P={self.P}, Q={self.Q}, C={self.C}, K={self.K}, N={self.N}",
            f"  Stride: {self.stride}, Dilation: {self.dilation}",
            f"  MACs: {self.macs:,}",
        ]
        return "\n".join(lines)
