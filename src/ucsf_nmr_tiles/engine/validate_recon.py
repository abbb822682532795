from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from .sample_store import UcsfFile


@dataclass(frozen=True)
class ReconSummary:
    tiles_total: int
    samples_checked: int
    mismatches: int
    maxe: float
    coverage_frac: float


def validate_reconstruction(ucsf: UcsfFile, dense: Optional[NDArray[np.float32]] = None) -> ReconSummary:
    """
    Re-slice the dense reconstruction into tiles and compare against the tiled samples.
    NaN compares equal to NaN.
    """
    if dense is None:
        dense = ucsf.reconstruct_dense()
    grid = np.asarray(dense).reshape(ucsf.axis_sizes())
    covered = np.zeros(grid.shape, dtype=bool)

    tiles = 0
    checked = 0
    mismatches = 0
    maxe = 0.0
    for tile in ucsf.tiles():
        region = tuple(slice(s, s + n) for s, n in zip(tile.axis_starts, tile.axis_lengths))
        ref = tile.as_array()
        rec = grid[region]
        same = (rec == ref) | (np.isnan(rec) & np.isnan(ref))
        mismatches += int((~same).sum())
        if ref.size:
            diff = np.abs(rec.astype(np.float64) - ref.astype(np.float64))
            diff = diff[~np.isnan(diff)]
            if diff.size:
                maxe = max(maxe, float(diff.max()))
        covered[region] = True
        checked += int(ref.size)
        tiles += 1

    return ReconSummary(
        tiles_total=tiles,
        samples_checked=checked,
        mismatches=mismatches,
        maxe=maxe,
        coverage_frac=float(covered.mean()),
    )
