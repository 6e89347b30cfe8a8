from __future__ import annotations

from typing import Tuple

import numpy as np


Shape3D = Tuple[int, int, int]


def neighbor_offsets(connectivity: int) -> np.ndarray:
    """Return full-neighborhood offsets for the requested connectivity.

    Offsets are shaped (M,3) with entries (dz,dy,dx) relative to the current voxel.
    6/18/26 are 3-D neighborhoods; 4/8 are in-plane (dz == 0) neighborhoods used
    for per-slice labeling.
    """
    if connectivity in (4, 8):
        offs = []
        for dy in (-1, 0, 1):
            for dx in (-1, 0, 1):
                if dy == 0 and dx == 0:
                    continue
                if connectivity == 4 and dy != 0 and dx != 0:
                    continue
                offs.append((0, dy, dx))
    elif connectivity in (6, 18, 26):
        offs = []
        for dz in (-1, 0, 1):
            for dy in (-1, 0, 1):
                for dx in (-1, 0, 1):
                    nonzero = abs(dz) + abs(dy) + abs(dx)
                    if nonzero == 0:
                        continue
                    if connectivity == 6 and nonzero > 1:
                        continue
                    # 18 excludes the 8 3D corners (all three axes non-zero)
                    if connectivity == 18 and nonzero > 2:
                        continue
                    offs.append((dz, dy, dx))
    else:
        raise ValueError("connectivity must be 4, 8 (in-plane) or 6, 18, 26")
    return np.asarray(offs, dtype=np.int64)


class LabelGrid:
    """Dense per-voxel state (visited flag or component label) for one analysis call.

    Storage is a single flat buffer indexed by ((z * height) + y) * width + x.
    """

    __slots__ = ("shape", "data")

    def __init__(self, shape, dtype=np.int32):
        nz, ny, nx = (int(s) for s in shape)
        if nz <= 0 or ny <= 0 or nx <= 0:
            raise ValueError(f"LabelGrid dimensions must be positive, got {(nz, ny, nx)}")
        self.shape: Shape3D = (nz, ny, nx)
        self.data = np.zeros(nz * ny * nx, dtype=dtype)

    def index(self, z: int, y: int, x: int) -> int:
        nz, ny, nx = self.shape
        if not (0 <= z < nz and 0 <= y < ny and 0 <= x < nx):
            raise IndexError(f"voxel {(z, y, x)} outside LabelGrid of shape {self.shape}")
        return (z * ny + y) * nx + x

    def get(self, z: int, y: int, x: int):
        return self.data[self.index(z, y, x)]

    def set(self, z: int, y: int, x: int, value) -> None:
        self.data[self.index(z, y, x)] = value

    def as_array(self) -> np.ndarray:
        """3-D view onto the flat buffer (no copy)."""
        return self.data.reshape(self.shape)

    def require_shape(self, shape) -> None:
        if tuple(int(s) for s in shape) != self.shape:
            raise ValueError(f"shape mismatch: volume {tuple(shape)} vs LabelGrid {self.shape}")

    @property
    def size(self) -> int:
        return int(self.data.size)
