import os
import tempfile

import numpy as np
import pytest
import torch

from ucsf_nmr_tiles.config import DecodeConfig
from ucsf_nmr_tiles.engine.coords import flatten
from ucsf_nmr_tiles.engine.sample_store import UcsfFile
from ucsf_nmr_tiles.errors import ParseFailure, UnsupportedComponents

from ucsf_builders import (
    HSQC_AXES,
    PADDED_AXES,
    SMALL_3D_AXES,
    axis_bytes,
    build_ucsf,
    dense_values,
    header_bytes,
)


def test_parse_file_consumes_everything():
    ucsf, rem = UcsfFile.parse(build_ucsf(HSQC_AXES))
    assert len(rem) == 0
    assert len(ucsf.axis_headers) == ucsf.header.dimensions == 2
    assert ucsf.data.size == 256 * 352


def test_trailing_bytes_are_returned():
    _, rem = UcsfFile.parse(build_ucsf(HSQC_AXES, trailing=b"tail"))
    assert bytes(rem) == b"tail"


def test_axis_accessors():
    ucsf, _ = UcsfFile.parse(build_ucsf(PADDED_AXES))
    assert ucsf.axis_tiles() == [4, 5]
    assert ucsf.axis_sizes() == [512, 257]
    assert ucsf.axis_data_points(1) == 257
    assert ucsf.axis_tile_size(1) == 64


def test_tile_count():
    ucsf, _ = UcsfFile.parse(build_ucsf(HSQC_AXES))
    assert sum(1 for _ in ucsf.tiles()) == 4
    ucsf, _ = UcsfFile.parse(build_ucsf(PADDED_AXES))
    assert sum(1 for _ in ucsf.tiles()) == 20


def test_tile_lengths_and_starts_with_padding():
    ucsf, _ = UcsfFile.parse(build_ucsf(PADDED_AXES))
    tiles = list(ucsf.tiles())
    assert [t.axis_lengths for t in tiles] == [(128, 64)] * 4 + [(128, 1)] + [(128, 64)] * 4 + [(128, 1)] + \
        [(128, 64)] * 4 + [(128, 1)] + [(128, 64)] * 4 + [(128, 1)]
    starts = [(a, b) for a in (0, 128, 256, 384) for b in (0, 64, 128, 192, 256)]
    assert [t.axis_starts for t in tiles] == starts
    for t in tiles:
        first_pos, _ = next(t.iter_with_absolute_pos())
        assert first_pos == t.axis_starts


def test_tile_slices_are_cumulative_and_cover_buffer():
    ucsf, _ = UcsfFile.parse(build_ucsf(PADDED_AXES))
    offset = 0
    for t in ucsf.tiles():
        assert t.offset == offset
        assert t.size == t.axis_lengths[0] * t.axis_lengths[1]
        offset += t.size
    assert offset == ucsf.data.size


def test_boundary_tile_values_exclude_padding():
    ucsf, _ = UcsfFile.parse(build_ucsf(PADDED_AXES))
    expected = dense_values(PADDED_AXES)
    boundary = list(ucsf.tiles())[4]
    for (i, j), value in boundary.iter_with_absolute_pos():
        assert 0 <= i < 128
        assert j == 256
        assert value == expected[i, j]
    assert not (ucsf.data == 0).any()


def test_iter_with_absolute_pos_3d():
    ucsf, _ = UcsfFile.parse(build_ucsf(SMALL_3D_AXES))
    expected = dense_values(SMALL_3D_AXES)
    seen = set()
    for tile in ucsf.tiles():
        for pos, value in tile.iter_with_absolute_pos():
            assert len(pos) == 3
            assert value == expected[pos]
            seen.add(pos)
    assert len(seen) == expected.size


@pytest.mark.parametrize("axes", [HSQC_AXES, PADDED_AXES, SMALL_3D_AXES, [("1H", 10, 3)]])
def test_reconstruct_dense_matches_source(axes):
    ucsf, _ = UcsfFile.parse(build_ucsf(axes))
    dense = ucsf.reconstruct_dense()
    expected = dense_values(axes)
    assert dense.shape == (expected.size,)
    assert dense.dtype == np.float32
    np.testing.assert_array_equal(dense, expected.ravel())
    np.testing.assert_array_equal(ucsf.to_array(), expected)


def test_reconstruct_dense_roundtrips_through_tiles():
    ucsf, _ = UcsfFile.parse(build_ucsf(SMALL_3D_AXES))
    dense = ucsf.data_continuous()
    sizes = ucsf.axis_sizes()
    for tile in ucsf.tiles():
        for pos, value in tile.iter_with_absolute_pos():
            assert dense[flatten(sizes, pos)] == value


def test_dense_is_independent_of_tiled_buffer():
    ucsf, _ = UcsfFile.parse(build_ucsf(HSQC_AXES))
    dense = ucsf.reconstruct_dense()
    dense[:] = -1.0
    assert (ucsf.data > 0).all()
    assert not ucsf.data.flags.writeable


def test_truncated_sample_stream():
    buf = build_ucsf(PADDED_AXES)
    with pytest.raises(ParseFailure) as exc:
        UcsfFile.parse(buf[:-4])
    assert exc.value.stage == "data"


def test_truncated_axis_headers():
    buf = header_bytes(2) + axis_bytes("15N", 256, 128)
    with pytest.raises(ParseFailure) as exc:
        UcsfFile.parse(buf)
    assert exc.value.stage == "axis_header"


def test_complex_data_rejected():
    buf = bytearray(build_ucsf(HSQC_AXES))
    buf[11] = 2
    with pytest.raises(UnsupportedComponents):
        UcsfFile.parse(bytes(buf))


def test_zero_dimensions_rejected():
    with pytest.raises(ParseFailure):
        UcsfFile.parse(header_bytes(0))


def test_bounds():
    ucsf, _ = UcsfFile.parse(build_ucsf(PADDED_AXES))
    assert ucsf.bounds() == (1.0, float(512 * 257))


def test_bounds_ignores_nan():
    dense = dense_values(SMALL_3D_AXES)
    dense[0, 0, 0] = np.nan
    dense[4, 6, 3] = -3.5
    ucsf, _ = UcsfFile.parse(build_ucsf(SMALL_3D_AXES, dense=dense))
    assert ucsf.bounds() == (-3.5, float(dense.size - 1))


def test_bounds_all_nan():
    axes = [("1H", 3, 2)]
    ucsf, _ = UcsfFile.parse(build_ucsf(axes, dense=np.full(3, np.nan, dtype=np.float32)))
    with pytest.raises(ValueError):
        ucsf.bounds()


def test_from_path_and_tensor():
    with tempfile.TemporaryDirectory() as d:
        p = os.path.join(d, "hsqc.ucsf")
        with open(p, "wb") as f:
            f.write(build_ucsf(HSQC_AXES, trailing=b"\x00\x00"))
        ucsf = UcsfFile.from_path(p)
    x = ucsf.to_tensor(DecodeConfig(device="cpu", dtype="float64"))
    assert x.shape == (256, 352)
    assert x.dtype == torch.float64
    assert float(x[1, 2]) == 352 + 2 + 1
