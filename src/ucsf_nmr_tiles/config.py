from __future__ import annotations

from dataclasses import dataclass

import torch

# UCSF (Sparky) file layout, big-endian throughout.
MAGIC = b"UCSF NMR"
HEADER_SIZE = 180
AXIS_HEADER_SIZE = 128
HEADER_REMAINDER_SIZE = 166
AXIS_REMAINDER_SIZE = 96
NUCLEUS_NAME_SIZE = 8

SUPPORTED_FORMAT_VERSION = 2
SUPPORTED_COMPONENTS = 1  # 1 = real, 2 = complex

SAMPLE_WIDTH_BYTES = 4
SAMPLE_DTYPE = ">f4"

# magic, 2 unused, dimensions, components, format version, remainder
HEADER_STRUCT = ">8s2xBBH166s"
# nucleus, data points, 4 unused, tile size, frequency, spectral width, center, remainder
AXIS_HEADER_STRUCT = ">8sI4xIfff96s"


@dataclass(frozen=True)
class DecodeConfig:
    device: str = "cpu"
    dtype: str = "float32"

    @property
    def torch_dtype(self) -> torch.dtype:
        return torch.float32 if self.dtype == "float32" else torch.float64


def resolve_device(cfg: DecodeConfig) -> torch.device:
    ds = cfg.device.lower()
    if ds == "cuda" and torch.cuda.is_available():
        return torch.device("cuda")
    if ds == "mps" and getattr(torch.backends, "mps", None) and torch.backends.mps.is_available():
        return torch.device("mps")
    return torch.device("cpu")
