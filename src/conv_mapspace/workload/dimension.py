"""
Problem dimensions of a convolution loop nest.
"""

from enum import IntEnum

from conv_mapspace.errors import ConfigurationError


class Dimension(IntEnum):
    """
    The 7 loop dimensions of a CNN conv2d, in canonical order.

    - R: Kernel width
    - S: Kernel height
    - P: Output width
    - Q: Output height
    - C: Input channels
    - K: Output channels (filters)
    - N: Batch size
    """
    R = 0
    S = 1
    P = 2
    Q = 3
    C = 4
    K = 5
    N = 6

    @classmethod
    def from_name(cls, name) -> "Dimension":
        """Look up a dimension by name ("C") or index (4)."""
        if isinstance(name, Dimension):
            return name
        if isinstance(name, int) and not isinstance(name, bool):
            try:
                return cls(name)
            except ValueError:
                raise ConfigurationError(f"Unknown problem dimension index: {name}") from None
        try:
            return cls[str(name).strip().upper()]
        except KeyError:
            raise ConfigurationError(f"Unknown problem dimension: {name!r}") from None

    def __str__(self) -> str:
        return self.name

    def __format__(self, format_spec: str) -> str:
        return format(self.name, format_spec)


NUM_DIMENSIONS = len(Dimension)
CANONICAL_ORDER: tuple[Dimension, ...] = tuple(Dimension)
DIM_NAMES: tuple[str, ...] = tuple(d.name for d in Dimension)
