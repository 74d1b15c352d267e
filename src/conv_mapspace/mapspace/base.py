"""
Common shape of every mapspace: a size plus a decoder from index to choice.
"""

from typing import Any, Protocol, Sequence, TypeVar, runtime_checkable

from conv_mapspace.numeric import MixedRadixCounter, check_index

T_co = TypeVar("T_co", covariant=True)


@runtime_checkable
class IndexedSpace(Protocol[T_co]):
    """A finite space whose members are addressed by ints in [0, size())."""

    def size(self) -> int:
        ...

    def decode(self, index: int) -> T_co:
        ...


class ProductSpace:
    """
    Cartesian product of indexed spaces.

    The first space takes the least significant digits of the index, the
    same convention MixedRadixCounter uses for its axes. Sizes are read once
    at construction, so the member spaces must already be initialized.
    """

    def __init__(self, spaces: Sequence[IndexedSpace]):
        self.spaces = tuple(spaces)
        self._counter = MixedRadixCounter([space.size() for space in self.spaces])

    def size(self) -> int:
        return self._counter.size()

    @property
    def sizes(self) -> tuple[int, ...]:
        return self._counter.radices

    def split(self, index: int) -> list[int]:
        """Split a product index into one sub-index per member space."""
        index = check_index(index, self.size(), "product space")
        return self._counter.decode(index)

    def encode(self, sub_indices: Sequence[int]) -> int:
        """Inverse of split()."""
        return self._counter.encode(sub_indices)

    def decode(self, index: int) -> tuple[Any, ...]:
        return tuple(
            space.decode(sub_index)
            for space, sub_index in zip(self.spaces, self.split(index))
        )

    def __len__(self) -> int:
        return len(self.spaces)
