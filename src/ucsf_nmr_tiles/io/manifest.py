from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any, Dict, List

if TYPE_CHECKING:
    from ..engine.sample_store import UcsfFile

MANIFEST_SCHEMA = "ucsf_tile_manifest"


@dataclass(frozen=True)
class AxisEntryV1:
    nucleus_name: str
    data_points: int
    tile_size: int
    num_tiles: int
    frequency: float
    spectral_width: float
    center: float


@dataclass(frozen=True)
class TileEntryV1:
    tile_id: int
    index: List[int]
    starts: List[int]
    lengths: List[int]
    offset: int                      # into the trimmed sample buffer


@dataclass(frozen=True)
class ManifestV1:
    schema: str
    version: int
    dimensions: int
    format_version: int
    axes: List[AxisEntryV1]
    data_shape: List[int]            # true points per axis
    padded_shape: List[int]          # as stored, padding included
    tiles_total: int
    entries: List[TileEntryV1]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema": self.schema,
            "version": self.version,
            "dimensions": self.dimensions,
            "format_version": self.format_version,
            "axes": [asdict(a) for a in self.axes],
            "data_shape": self.data_shape,
            "padded_shape": self.padded_shape,
            "tiles_total": self.tiles_total,
            "entries": [asdict(e) for e in self.entries],
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "ManifestV1":
        return ManifestV1(
            schema=str(d["schema"]),
            version=int(d["version"]),
            dimensions=int(d["dimensions"]),
            format_version=int(d["format_version"]),
            axes=[AxisEntryV1(**a) for a in d["axes"]],
            data_shape=list(d["data_shape"]),
            padded_shape=list(d["padded_shape"]),
            tiles_total=int(d["tiles_total"]),
            entries=[TileEntryV1(**e) for e in d["entries"]],
        )


def build_manifest(ucsf: "UcsfFile") -> ManifestV1:
    axes = [
        AxisEntryV1(
            nucleus_name=a.nucleus_name,
            data_points=a.data_points,
            tile_size=a.tile_size,
            num_tiles=a.num_tiles,
            frequency=a.frequency,
            spectral_width=a.spectral_width,
            center=a.center,
        )
        for a in ucsf.axis_headers
    ]
    entries = [
        TileEntryV1(
            tile_id=tile_id,
            index=list(t.index),
            starts=list(t.axis_starts),
            lengths=list(t.axis_lengths),
            offset=t.offset,
        )
        for tile_id, t in enumerate(ucsf.tiles())
    ]
    return ManifestV1(
        schema=MANIFEST_SCHEMA,
        version=1,
        dimensions=ucsf.header.dimensions,
        format_version=ucsf.header.format_version,
        axes=axes,
        data_shape=ucsf.axis_sizes(),
        padded_shape=ucsf.geometry.padded_extents,
        tiles_total=len(entries),
        entries=entries,
    )
