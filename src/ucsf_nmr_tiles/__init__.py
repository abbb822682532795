"""
Decoder for tiled UCSF (Sparky) NMR spectrum files.

    ucsf = UcsfFile.from_path("15n_hsqc.ucsf")
    for tile in ucsf.tiles():
        for (i_axis_1, i_axis_2), value in tile.iter_with_absolute_pos():
            ...
    dense = ucsf.to_array()   # shape == ucsf.axis_sizes()
"""
from .config import DecodeConfig
from .engine import TileGeometry, TileView, UcsfFile, flatten, unflatten, validate_reconstruction
from .errors import ParseFailure, UcsfError, UnsupportedComponents, UnsupportedFormatVersion
from .io.format_headers import AxisDescriptor, FileHeader, parse_axis_header, parse_header

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "AxisDescriptor",
    "DecodeConfig",
    "FileHeader",
    "ParseFailure",
    "TileGeometry",
    "TileView",
    "UcsfError",
    "UcsfFile",
    "UnsupportedComponents",
    "UnsupportedFormatVersion",
    "flatten",
    "parse_axis_header",
    "parse_header",
    "unflatten",
    "validate_reconstruction",
]
