from .coords import flatten, strides, unflatten
from .sample_store import TileView, UcsfFile
from .tile_geometry import TileGeometry
from .validate_recon import ReconSummary, validate_reconstruction
