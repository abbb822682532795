from __future__ import annotations

from typing import List, Sequence, Tuple


def strides(sizes: Sequence[int]) -> List[int]:
    """
    Row-major strides: stride[d] = prod(sizes[d+1:]).
    Axis 0 varies slowest.
    """
    out = [1] * len(sizes)
    acc = 1
    for d in range(len(sizes) - 1, -1, -1):
        out[d] = acc
        acc *= int(sizes[d])
    return out


def flatten(sizes: Sequence[int], coords: Sequence[int]) -> int:
    if len(coords) != len(sizes):
        raise ValueError(f"expected {len(sizes)} coordinates, got {len(coords)}")
    return sum(int(c) * s for c, s in zip(coords, strides(sizes)))


def unflatten(sizes: Sequence[int], index: int) -> Tuple[int, ...]:
    coords = []
    rem = int(index)
    for s in strides(sizes):
        coords.append(rem // s)
        rem %= s
    return tuple(coords)
