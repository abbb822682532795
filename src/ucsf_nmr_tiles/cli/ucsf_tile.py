from __future__ import annotations

import argparse
import logging
import os

from ucsf_nmr_tiles.config import DecodeConfig
from ucsf_nmr_tiles.engine.sample_store import UcsfFile
from ucsf_nmr_tiles.engine.validate_recon import validate_reconstruction
from ucsf_nmr_tiles.errors import UcsfError
from ucsf_nmr_tiles.io.manifest import build_manifest
from ucsf_nmr_tiles.io.tile_file_io import save_json, save_tensor


DEFAULT_OUT = "artifacts/ucsf_export"


def _load(path: str) -> UcsfFile:
    try:
        return UcsfFile.from_path(path)
    except UcsfError as e:
        raise SystemExit(f"[error] {path}: {e} (stage: {e.stage})")
    except OSError as e:
        raise SystemExit(f"[error] {e}")


def cmd_info(args: argparse.Namespace) -> None:
    ucsf = _load(args.path)
    h = ucsf.header

    print("=== header ===")
    print(f"dimensions: {h.dimensions}")
    print(f"components: {h.components}")
    print(f"format_version: {h.format_version}")
    for i, a in enumerate(ucsf.axis_headers):
        print(f"=== axis {i} ===")
        print(f"nucleus: {a.nucleus_name}")
        print(f"data_points: {a.data_points}")
        print(f"tile_size: {a.tile_size}")
        print(f"tiles: {a.num_tiles}")
        print(f"padding: {a.padded_size - a.data_points}")
        print(f"frequency_mhz: {a.frequency}")
        print(f"spectral_width_hz: {a.spectral_width}")
        print(f"center_ppm: {a.center}")
    print("=== data ===")
    print(f"tiles_total: {ucsf.geometry.total_tiles}")
    print(f"samples: {ucsf.data.size}")
    try:
        lo, hi = ucsf.bounds()
        print(f"bounds: [{lo}, {hi}]")
    except ValueError as e:
        print(f"bounds: n/a ({e})")


def cmd_export(args: argparse.Namespace) -> None:
    cfg = DecodeConfig(device=args.device, dtype=args.dtype)
    ucsf = _load(args.path)

    os.makedirs(args.out_dir, exist_ok=True)
    shape = "x".join(str(n) for n in ucsf.axis_sizes())
    dense_path = os.path.join(args.out_dir, f"dense_{shape}.pt")
    manifest_path = os.path.join(args.out_dir, "manifest_tiles.json")

    save_tensor(dense_path, ucsf.to_tensor(cfg))
    save_json(manifest_path, build_manifest(ucsf).to_dict())

    print("=== export summary ===")
    print(f"device: {cfg.device}")
    print(f"dense_path: {dense_path}")
    print(f"manifest: {manifest_path}")


def cmd_validate_recon(args: argparse.Namespace) -> None:
    ucsf = _load(args.path)
    summary = validate_reconstruction(ucsf)

    print("=== validate-recon summary ===")
    print(f"tiles_total: {summary.tiles_total}")
    print(f"samples_checked: {summary.samples_checked}")
    print(f"mismatches: {summary.mismatches}")
    print(f"maxe: {summary.maxe}")
    print(f"coverage_frac: {summary.coverage_frac}")
    if summary.mismatches:
        raise SystemExit(1)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="ucsf-tile", description="Inspect and export tiled UCSF NMR spectra")
    p.add_argument("--log_level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = p.add_subparsers(dest="cmd", required=True)

    i = sub.add_parser("info", help="Print header, axis and tile layout")
    i.add_argument("path")
    i.set_defaults(fn=cmd_info)

    e = sub.add_parser("export", help="Write dense tensor (.pt) + tile manifest (.json)")
    e.add_argument("path")
    e.add_argument("--out_dir", default=DEFAULT_OUT)
    e.add_argument("--device", default="cpu", choices=["cpu", "mps", "cuda"])
    e.add_argument("--dtype", default="float32", choices=["float32", "float64"])
    e.set_defaults(fn=cmd_export)

    v = sub.add_parser("validate-recon", help="Check the dense reconstruction against the tiles")
    v.add_argument("path")
    v.set_defaults(fn=cmd_validate_recon)

    return p


def main(argv: list[str] | None = None) -> None:
    p = build_parser()
    args = p.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")
    args.fn(args)


if __name__ == "__main__":
    main()
