from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

import numpy as np
import torch
from numpy.typing import NDArray

from .coords import unflatten
from .tile_geometry import TileGeometry
from ..config import SAMPLE_DTYPE, DecodeConfig, resolve_device
from ..errors import ParseFailure
from ..io.format_headers import AxisDescriptor, Buffer, FileHeader, parse_axis_headers, parse_header
from ..io.tile_file_io import read_bytes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TileView:
    """
    One tile of a decoded file.

    ``data`` is a read-only view into the owning file's sample buffer holding
    only the valid (unpadded) samples, row-major over ``axis_lengths``.
    """

    index: Tuple[int, ...]
    axis_lengths: Tuple[int, ...]
    axis_starts: Tuple[int, ...]
    offset: int
    data: NDArray[np.float32]

    @property
    def size(self) -> int:
        return int(self.data.size)

    def as_array(self) -> NDArray[np.float32]:
        return self.data.reshape(self.axis_lengths)

    def iter_with_absolute_pos(self) -> Iterator[Tuple[Tuple[int, ...], float]]:
        """
        Yield ((coord_axis_0, ..., coord_axis_n), value) for every valid sample.

        No ordering across tiles should be assumed; use the coordinates.
        """
        for local_index in range(self.data.size):
            rel = unflatten(self.axis_lengths, local_index)
            pos = tuple(r + s for r, s in zip(rel, self.axis_starts))
            yield pos, float(self.data[local_index])


def _trim_tiles(raw: NDArray[np.float32], geometry: TileGeometry) -> NDArray[np.float32]:
    # raw holds full tile_shape blocks in tile-major order; keep each tile's valid corner
    blocks = raw.reshape([geometry.total_tiles] + geometry.tile_shape)
    pieces = []
    for linear, tile in enumerate(blocks):
        lengths = geometry.valid_lengths(geometry.tile_index(linear))
        pieces.append(tile[tuple(slice(0, n) for n in lengths)].ravel())
    return np.concatenate(pieces).astype(np.float32)


class UcsfFile:
    """Decoded UCSF spectrum: header, axis headers, and the trimmed tile-major samples."""

    def __init__(self, header: FileHeader, axis_headers: List[AxisDescriptor], data: NDArray[np.float32]):
        if len(axis_headers) != header.dimensions:
            raise ValueError(f"expected {header.dimensions} axis headers, got {len(axis_headers)}")
        self.header = header
        self.axis_headers = tuple(axis_headers)
        self.geometry = TileGeometry(self.axis_headers)
        expected = math.prod(self.geometry.data_points)
        if data.size != expected:
            raise ValueError(f"expected {expected} samples, got {data.size}")
        self.data = data
        self.data.flags.writeable = False

    @classmethod
    def parse(cls, buf: Buffer) -> Tuple["UcsfFile", memoryview]:
        """
        Decode a complete UCSF file from ``buf``.

        Returns (file, remaining bytes). Raises ParseFailure,
        UnsupportedComponents or UnsupportedFormatVersion.
        """
        header, rem = parse_header(buf)
        if header.dimensions == 0:
            raise ParseFailure("file header declares 0 dimensions", stage="header")
        axes, rem = parse_axis_headers(rem, header.dimensions)
        geometry = TileGeometry(tuple(axes))

        size = geometry.stream_size_bytes
        if len(rem) < size:
            raise ParseFailure(f"sample stream needs {size} bytes, got {len(rem)}", stage="data")
        raw = np.frombuffer(rem[:size], dtype=SAMPLE_DTYPE)
        data = _trim_tiles(raw, geometry)
        logger.debug(
            "decoded %d tile(s), %d padded samples -> %d valid samples",
            geometry.total_tiles,
            raw.size,
            data.size,
        )
        return cls(header, axes, data), rem[size:]

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "UcsfFile":
        ucsf, rem = cls.parse(read_bytes(path))
        if len(rem):
            logger.warning("%s: %d trailing byte(s) after the sample stream ignored", path, len(rem))
        return ucsf

    def axis_data_points(self, axis: int) -> int:
        return self.axis_headers[axis].data_points

    def axis_tiles(self) -> List[int]:
        return self.geometry.tile_counts

    def axis_tile_size(self, axis: int) -> int:
        return self.axis_headers[axis].tile_size

    def axis_sizes(self) -> List[int]:
        """Data points per axis; the shape of ``to_array()``."""
        return self.geometry.data_points

    def tiles(self) -> Iterator[TileView]:
        """Tiles in row-major tile order (axis 0 slowest)."""
        geometry = self.geometry
        offset = 0
        for index in geometry.iter_tile_indices():
            lengths = geometry.valid_lengths(index)
            n = math.prod(lengths)
            yield TileView(
                index=index,
                axis_lengths=lengths,
                axis_starts=geometry.tile_starts(index),
                offset=offset,
                data=self.data[offset:offset + n],
            )
            offset += n

    def reconstruct_dense(self) -> NDArray[np.float32]:
        """
        Padding-free copy of the samples, row-major over ``axis_sizes()``.

        Returns a new flat array; the tiled buffer is left untouched.
        """
        shape = self.axis_sizes()
        dense = np.zeros(math.prod(shape), dtype=np.float32)
        grid = dense.reshape(shape)
        for tile in self.tiles():
            region = tuple(slice(s, s + n) for s, n in zip(tile.axis_starts, tile.axis_lengths))
            grid[region] = tile.as_array()
        return dense

    data_continuous = reconstruct_dense

    def to_array(self) -> NDArray[np.float32]:
        return self.reconstruct_dense().reshape(self.axis_sizes())

    def to_tensor(self, cfg: Optional[DecodeConfig] = None) -> torch.Tensor:
        cfg = cfg or DecodeConfig()
        return torch.from_numpy(self.to_array()).to(device=resolve_device(cfg), dtype=cfg.torch_dtype)

    def bounds(self) -> Tuple[float, float]:
        """
        (min, max) over all samples, NaN excluded.

        Raises ValueError if there are no samples or all of them are NaN.
        """
        values = self.data[~np.isnan(self.data)]
        if values.size == 0:
            raise ValueError("bounds undefined: no non-NaN samples")
        return float(values.min()), float(values.max())

    def __repr__(self) -> str:
        axes = ", ".join(f"{a.nucleus_name}:{a.data_points}/{a.tile_size}" for a in self.axis_headers)
        return f"UcsfFile(dimensions={self.header.dimensions}, axes=[{axes}])"
