from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Union

import torch

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _ensure_parent(path: PathLike) -> None:
    os.makedirs(os.path.dirname(os.fspath(path)) or ".", exist_ok=True)


def read_bytes(path: PathLike) -> bytes:
    """Whole file in memory; decoding never streams."""
    with open(path, "rb") as f:
        buf = f.read()
    logger.debug("read %d bytes from %s", len(buf), path)
    return buf


def save_tensor(path: PathLike, x: torch.Tensor) -> None:
    _ensure_parent(path)
    torch.save(x.detach().cpu(), path)


def load_tensor(path: PathLike, map_location: str | None = "cpu") -> torch.Tensor:
    return torch.load(path, map_location=map_location)


def save_json(path: PathLike, obj: Dict[str, Any]) -> None:
    _ensure_parent(path)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2)


def load_json(path: PathLike) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)
