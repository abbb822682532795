from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple

from .coords import unflatten
from ..config import SAMPLE_WIDTH_BYTES
from ..io.format_headers import AxisDescriptor


@dataclass(frozen=True)
class TileGeometry:
    """
    Tile layout of a UCSF spectrum.

    On disk every tile is a full tile_size block along every axis; the last
    tile along an axis is zero-padded. Logically that boundary tile is only
    tile_size - padding samples wide.
    """

    axes: Tuple[AxisDescriptor, ...]

    @property
    def ndim(self) -> int:
        return len(self.axes)

    def tile_count(self, axis: int) -> int:
        return self.axes[axis].num_tiles

    def tile_size(self, axis: int) -> int:
        return self.axes[axis].tile_size

    def padded_extent(self, axis: int) -> int:
        return self.axes[axis].padded_size

    def is_boundary_tile(self, axis: int, tile_index: int) -> bool:
        return self.axes[axis].tile_is_padded(tile_index)

    def tile_padding(self, axis: int, tile_index: int) -> int:
        return self.axes[axis].tile_padding(tile_index)

    @property
    def tile_counts(self) -> List[int]:
        return [a.num_tiles for a in self.axes]

    @property
    def tile_shape(self) -> List[int]:
        return [a.tile_size for a in self.axes]

    @property
    def data_points(self) -> List[int]:
        return [a.data_points for a in self.axes]

    @property
    def padded_extents(self) -> List[int]:
        return [a.padded_size for a in self.axes]

    @property
    def total_tiles(self) -> int:
        return math.prod(self.tile_counts)

    @property
    def padded_sample_count(self) -> int:
        return math.prod(self.padded_extents)

    @property
    def stream_size_bytes(self) -> int:
        """Bytes of the sample stream, padding included."""
        return self.padded_sample_count * SAMPLE_WIDTH_BYTES

    def tile_index(self, linear: int) -> Tuple[int, ...]:
        return unflatten(self.tile_counts, linear)

    def valid_lengths(self, tile_index: Sequence[int]) -> Tuple[int, ...]:
        return tuple(a.tile_length(i) for a, i in zip(self.axes, tile_index))

    def tile_starts(self, tile_index: Sequence[int]) -> Tuple[int, ...]:
        return tuple(a.tile_size * i for a, i in zip(self.axes, tile_index))

    def iter_tile_indices(self) -> Iterator[Tuple[int, ...]]:
        for linear in range(self.total_tiles):
            yield self.tile_index(linear)

    def trimmed_sizes(self) -> List[int]:
        return [math.prod(self.valid_lengths(idx)) for idx in self.iter_tile_indices()]

    def tile_offsets(self) -> List[int]:
        """Start of each tile's trimmed slice: running sum of the preceding trimmed sizes."""
        offsets: List[int] = []
        acc = 0
        for size in self.trimmed_sizes():
            offsets.append(acc)
            acc += size
        return offsets
