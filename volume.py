"""
volume.py

In-memory voxel volume and the body/void convention shared by every analyzer.

- Axis order is [z, y, x]: `depth` slices of `height x width` cells.
- Cells are one byte (uint8). Integer input in 0..255 is cast; other dtypes
  and out-of-range values are rejected like a ragged stack.
- Body voxels are selected by an explicit (body_value, cut_op) pair chosen
  by the caller; no analyzer defaults it:

    cut_op="eq": body iff value == body_value   (e.g. 255)
    cut_op="gt": body iff value >  body_value   (e.g. 127, "above midpoint")

Analyzers call `coerce_volume`, which is lenient: it reports an invalid stack
and returns None so that the caller can hand back a sentinel result.
`Volume` / `Volume.from_slices` are strict and raise `VolumeError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np


BODY_VALUE = 255
CUT_OPS = ("eq", "gt")


class VolumeError(ValueError):
    pass


def _check_stack(slices) -> Tuple[Optional[np.ndarray], str]:
    """Return (stacked array, "") or (None, reason)."""
    if slices is None:
        return None, "empty volume"
    if isinstance(slices, np.ndarray):
        if slices.ndim == 2:
            slices = slices[np.newaxis]
        if slices.ndim != 3:
            return None, f"volume must be 3-D (z, y, x), got ndim={slices.ndim}"
        if slices.shape[0] == 0:
            return None, "empty volume"
        if slices.shape[1] == 0 or slices.shape[2] == 0:
            return None, f"zero-sized slices {slices.shape[1:]}"
        return _as_bytes(slices)

    slices = list(slices)
    if not slices:
        return None, "empty volume"
    first = np.asarray(slices[0])
    if first.ndim != 2:
        return None, f"slice 0 must be 2-D, got ndim={first.ndim}"
    if first.shape[0] == 0 or first.shape[1] == 0:
        return None, f"zero-sized slices {first.shape}"
    for z, s in enumerate(slices):
        if np.shape(s) != first.shape:
            return None, f"slice {z} has inconsistent size {np.shape(s)} (expected {first.shape})"
    return _as_bytes(np.stack([np.asarray(s) for s in slices]))


def _as_bytes(arr: np.ndarray) -> Tuple[Optional[np.ndarray], str]:
    """Cast an integer stack to uint8, refusing values a byte cannot hold."""
    if arr.dtype == np.bool_:
        return np.ascontiguousarray(arr, dtype=np.uint8), ""
    if not np.issubdtype(arr.dtype, np.integer):
        return None, f"voxel values must be integers, got dtype {arr.dtype}"
    lo, hi = int(arr.min()), int(arr.max())
    if lo < 0 or hi > 255:
        return None, f"voxel values must lie in 0..255, got range {lo}..{hi}"
    return np.ascontiguousarray(arr, dtype=np.uint8), ""


@dataclass(frozen=True, eq=False)
class Volume:
    """Validated stack of equal-sized uint8 slices, shaped (depth, height, width)."""

    data: np.ndarray

    def __post_init__(self):
        arr, reason = _check_stack(self.data)
        if arr is None:
            raise VolumeError(reason)
        object.__setattr__(self, "data", arr)

    @classmethod
    def from_slices(cls, slices: Sequence[np.ndarray]) -> "Volume":
        arr, reason = _check_stack(list(slices))
        if arr is None:
            raise VolumeError(reason)
        return cls(arr)

    @property
    def shape(self) -> Tuple[int, int, int]:
        return tuple(int(s) for s in self.data.shape)

    @property
    def depth(self) -> int:
        return int(self.data.shape[0])

    @property
    def height(self) -> int:
        return int(self.data.shape[1])

    @property
    def width(self) -> int:
        return int(self.data.shape[2])

    @property
    def total_voxels(self) -> int:
        return int(self.data.size)


def coerce_volume(volume) -> Optional[np.ndarray]:
    """Return the (z, y, x) array behind `volume`, or None if it cannot be analyzed."""
    if isinstance(volume, Volume):
        return volume.data
    arr, reason = _check_stack(volume)
    if arr is None:
        print(f"ERROR: {reason}")
    return arr


def check_cut_op(cut_op: str) -> str:
    cut_op = str(cut_op).lower()
    if cut_op not in CUT_OPS:
        raise ValueError("cut_op must be 'eq' or 'gt'")
    return cut_op


def body_mask(data: np.ndarray, body_value: int, cut_op: str) -> np.ndarray:
    """Boolean body mask under the caller's convention (void is its complement)."""
    cut_op = check_cut_op(cut_op)
    if cut_op == "eq":
        return data == body_value
    return data > body_value
