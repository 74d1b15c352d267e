"""
Registry of named convolution layer shapes.

The registry is read-only data loaded once at startup, either from the
packaged table (AlexNet, VGG16, GoogLeNet inception layers) or from a
user-supplied YAML file with the same layout:

    nearest_composite:
      11: 12
    layers:
      my_layer: {R: 3, S: 3, P: 56, Q: 56, C: 64, K: 64, N: 1}
"""

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

import yaml

from conv_mapspace.errors import ConfigurationError
from conv_mapspace.workload.dimension import Dimension

logger = logging.getLogger(__name__)

DEFAULT_LAYERS_FILE = Path(__file__).parent / "data" / "cnn_layers.yaml"


class LayerRegistry:
    """
    Read-only mapping from layer name to dimension bounds.

    Attributes:
        nearest_composite: Prime-like extents and the composite they are
            rounded up to when padding is requested
    """

    def __init__(
        self,
        layers: Mapping[str, Mapping],
        nearest_composite: Optional[Mapping[int, int]] = None,
    ):
        parsed = {}
        for name, dims in layers.items():
            parsed[str(name)] = MappingProxyType(self._parse_bounds(str(name), dims))
        self._layers = MappingProxyType(parsed)
        self.nearest_composite = MappingProxyType(
            {int(k): int(v) for k, v in (nearest_composite or {}).items()}
        )

    @staticmethod
    def _parse_bounds(name: str, dims: Mapping) -> dict[Dimension, int]:
        bounds = {}
        for key, value in dims.items():
            dim = Dimension.from_name(key)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigurationError(f"Layer {name}: bound of {dim} must be a positive integer, got {value!r}")
            bounds[dim] = value
        missing = [d.name for d in Dimension if d not in bounds]
        if missing:
            raise ConfigurationError(f"Layer {name}: missing dimensions {missing}")
        return bounds

    def lookup(self, name: str, pad_to_composite: bool = True) -> dict[Dimension, int]:
        """
        Get the bounds of a named layer.

        Args:
            name: Layer name, e.g. "VGG_conv3_1"
            pad_to_composite: Round prime-like extents up using nearest_composite

        Returns:
            Fresh dict of Dimension -> bound
        """
        try:
            bounds = dict(self._layers[name])
        except KeyError:
            raise ConfigurationError(f"Layer {name} not found in dictionary.") from None

        if pad_to_composite:
            for dim, bound in bounds.items():
                if bound in self.nearest_composite:
                    logger.debug(f"Padding {name}.{dim} from {bound} to {self.nearest_composite[bound]}")
                    bounds[dim] = self.nearest_composite[bound]

        return bounds

    def names(self) -> list[str]:
        return list(self._layers)

    def __contains__(self, name) -> bool:
        return name in self._layers

    def __len__(self) -> int:
        return len(self._layers)

    @classmethod
    def from_dict(cls, data: Mapping) -> "LayerRegistry":
        if "layers" not in data:
            raise ConfigurationError("Layer table must have a 'layers' section")
        return cls(data["layers"], data.get("nearest_composite"))

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "LayerRegistry":
        """
        Create a registry from a YAML file.

        Args:
            yaml_path: Path to YAML file

        Returns:
            LayerRegistry instance
        """
        path = Path(yaml_path)
        if not path.exists():
            raise FileNotFoundError(f"Layer table not found: {path}")
        with path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        registry = cls.from_dict(data)
        logger.debug(f"Loaded {len(registry)} layers from {path}")
        return registry


def default_registry() -> LayerRegistry:
    """Build a registry from the packaged layer table."""
    return LayerRegistry.from_yaml(DEFAULT_LAYERS_FILE)
