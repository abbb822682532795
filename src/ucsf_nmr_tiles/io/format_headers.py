"""
Fixed-layout headers of the UCSF (Sparky) NMR format.

Layout (big-endian):
    File header, 180 bytes:
        Bytes 0-7:     magic           "UCSF NMR"
        Bytes 8-9:     unused
        Byte 10:       dimensions      number of axes
        Byte 11:       components      1 = real (only supported value)
        Bytes 12-13:   format_version  2 (only supported value)
        Bytes 14-179:  remainder       free-form, kept verbatim

    Axis header, 128 bytes, one per axis:
        Bytes 0-7:     nucleus name    NUL padded text (1H, 13C, 15N, ...)
        Bytes 8-11:    data points     u32
        Bytes 12-15:   unused
        Bytes 16-19:   tile size       u32
        Bytes 20-23:   frequency       f32, MHz
        Bytes 24-27:   spectral width  f32, Hz
        Bytes 28-31:   center          f32, ppm
        Bytes 32-127:  remainder       kept verbatim
"""
from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import List, Tuple, Union

from ..config import (
    AXIS_HEADER_SIZE,
    AXIS_HEADER_STRUCT,
    HEADER_SIZE,
    HEADER_STRUCT,
    MAGIC,
    SUPPORTED_COMPONENTS,
    SUPPORTED_FORMAT_VERSION,
)
from ..errors import ParseFailure, UnsupportedComponents, UnsupportedFormatVersion

logger = logging.getLogger(__name__)

Buffer = Union[bytes, bytearray, memoryview]


@dataclass(frozen=True)
class FileHeader:
    dimensions: int
    components: int
    format_version: int
    remainder: bytes


@dataclass(frozen=True)
class AxisDescriptor:
    nucleus_name: str
    data_points: int
    tile_size: int
    frequency: float       # MHz
    spectral_width: float  # Hz
    center: float          # ppm
    remainder: bytes

    @property
    def num_tiles(self) -> int:
        # round up so a partially filled last tile is counted
        return (self.data_points + self.tile_size - 1) // self.tile_size

    @property
    def padded_size(self) -> int:
        """Samples stored along this axis, zero-padding included."""
        return self.num_tiles * self.tile_size

    def tile_is_padded(self, tile_index: int) -> bool:
        return tile_index >= self.data_points // self.tile_size

    def tile_padding(self, tile_index: int) -> int:
        if not self.tile_is_padded(tile_index):
            return 0
        return self.padded_size - self.data_points

    def tile_length(self, tile_index: int) -> int:
        """Valid (unpadded) samples of tile ``tile_index`` along this axis."""
        return self.tile_size - self.tile_padding(tile_index)


def _decode_nucleus(raw: bytes) -> str:
    name = raw.split(b"\x00", 1)[0]
    return name.decode("utf-8", errors="replace").rstrip()


def parse_header(buf: Buffer) -> Tuple[FileHeader, memoryview]:
    """
    Decode the 180-byte file header.

    Returns (header, remaining bytes). Checks run in order: magic and length
    (ParseFailure), component count (UnsupportedComponents), format version
    (UnsupportedFormatVersion).
    """
    view = memoryview(buf)
    if len(view) < HEADER_SIZE:
        raise ParseFailure(f"file header needs {HEADER_SIZE} bytes, got {len(view)}", stage="header")

    magic, dimensions, components, format_version, remainder = struct.unpack_from(HEADER_STRUCT, view, 0)
    if magic != MAGIC:
        raise ParseFailure(f"invalid magic: {magic!r} (expected {MAGIC!r})", stage="header")
    if components != SUPPORTED_COMPONENTS:
        raise UnsupportedComponents(
            f"unsupported number of components: {components} "
            f"(only {SUPPORTED_COMPONENTS} = real is supported)",
            stage="header",
        )
    if format_version != SUPPORTED_FORMAT_VERSION:
        raise UnsupportedFormatVersion(
            f"unsupported format version: {format_version} "
            f"(only version {SUPPORTED_FORMAT_VERSION} is supported)",
            stage="header",
        )

    header = FileHeader(
        dimensions=int(dimensions),
        components=int(components),
        format_version=int(format_version),
        remainder=bytes(remainder),
    )
    logger.debug("decoded file header: %d dimension(s), format version %d", header.dimensions, header.format_version)
    return header, view[HEADER_SIZE:]


def parse_axis_header(buf: Buffer) -> Tuple[AxisDescriptor, memoryview]:
    view = memoryview(buf)
    if len(view) < AXIS_HEADER_SIZE:
        raise ParseFailure(f"axis header needs {AXIS_HEADER_SIZE} bytes, got {len(view)}", stage="axis_header")

    nucleus, data_points, tile_size, frequency, spectral_width, center, remainder = struct.unpack_from(
        AXIS_HEADER_STRUCT, view, 0
    )
    if data_points == 0:
        raise ParseFailure("axis header declares 0 data points", stage="axis_header")
    if tile_size == 0:
        raise ParseFailure("axis header declares a tile size of 0", stage="axis_header")

    axis = AxisDescriptor(
        nucleus_name=_decode_nucleus(nucleus),
        data_points=int(data_points),
        tile_size=int(tile_size),
        frequency=float(frequency),
        spectral_width=float(spectral_width),
        center=float(center),
        remainder=bytes(remainder),
    )
    logger.debug(
        "decoded axis header %s: %d points, tile size %d", axis.nucleus_name, axis.data_points, axis.tile_size
    )
    return axis, view[AXIS_HEADER_SIZE:]


def parse_axis_headers(buf: Buffer, count: int) -> Tuple[List[AxisDescriptor], memoryview]:
    """Decode ``count`` consecutive axis headers, threading the cursor forward."""
    rem = memoryview(buf)
    axes: List[AxisDescriptor] = []
    for _ in range(count):
        axis, rem = parse_axis_header(rem)
        axes.append(axis)
    return axes, rem
