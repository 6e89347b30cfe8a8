from __future__ import annotations

from typing import Tuple

import numpy as np
from numba import njit

from label_grid import LabelGrid, neighbor_offsets


@njit
def _bfs_label(flat_mask: np.ndarray, labels: np.ndarray,
               nz: int, ny: int, nx: int, neigh: np.ndarray) -> int:
    """Label every component of a flattened boolean mask by breadth-first flood fill.

    Seeds are taken in raster order (z, then y, then x), so labels 1..K follow
    discovery order. `labels` must be zeroed and sized nz*ny*nx. Returns K.
    """
    n = nz * ny * nx
    plane = ny * nx
    # Each voxel is enqueued at most once over the whole pass, so one queue of
    # size n is reused for every component.
    queue = np.empty(n, dtype=np.int64)
    next_label = 0
    for seed in range(n):
        if not flat_mask[seed] or labels[seed] != 0:
            continue
        next_label += 1
        labels[seed] = next_label
        head = 0
        tail = 0
        queue[tail] = seed
        tail += 1
        while head < tail:
            idx = queue[head]
            head += 1
            z = idx // plane
            r = idx - z * plane
            y = r // nx
            x = r - y * nx
            for t in range(neigh.shape[0]):
                zz = z + neigh[t, 0]
                yy = y + neigh[t, 1]
                xx = x + neigh[t, 2]
                if zz < 0 or yy < 0 or xx < 0 or zz >= nz or yy >= ny or xx >= nx:
                    continue
                j = (zz * ny + yy) * nx + xx
                if flat_mask[j] and labels[j] == 0:
                    labels[j] = next_label
                    queue[tail] = j
                    tail += 1
    return next_label


@njit
def _bfs_reach(flat_mask: np.ndarray, visited: np.ndarray,
               nz: int, ny: int, nx: int, neigh: np.ndarray, seed: int) -> int:
    """Mark voxels reachable from `seed` through the mask; return how many were reached."""
    n = nz * ny * nx
    plane = ny * nx
    queue = np.empty(n, dtype=np.int64)
    head = 0
    tail = 0
    visited[seed] = 1
    queue[tail] = seed
    tail += 1
    while head < tail:
        idx = queue[head]
        head += 1
        z = idx // plane
        r = idx - z * plane
        y = r // nx
        x = r - y * nx
        for t in range(neigh.shape[0]):
            zz = z + neigh[t, 0]
            yy = y + neigh[t, 1]
            xx = x + neigh[t, 2]
            if zz < 0 or yy < 0 or xx < 0 or zz >= nz or yy >= ny or xx >= nx:
                continue
            j = (zz * ny + yy) * nx + xx
            if flat_mask[j] and visited[j] == 0:
                visited[j] = 1
                queue[tail] = j
                tail += 1
    return tail


def _flat_mask(mask: np.ndarray) -> np.ndarray:
    if mask.ndim != 3:
        raise ValueError(f"mask must be 3-D (z, y, x), got ndim={mask.ndim}")
    return np.ascontiguousarray(mask, dtype=np.bool_).ravel()


def label_components(mask: np.ndarray, connectivity: int = 6) -> Tuple[LabelGrid, int]:
    """Label a 3-D boolean mask.

    - mask: boolean array shaped (z, y, x).
    - connectivity: 6, 18, 26, or in-plane 4/8 (useful for (1, H, W) slices).

    Returns (grid, K) where grid holds int32 labels 1..K in raster discovery
    order and 0 for background.
    """
    neigh = neighbor_offsets(connectivity)
    flat = _flat_mask(mask)
    grid = LabelGrid(mask.shape, dtype=np.int32)
    nz, ny, nx = grid.shape
    K = _bfs_label(flat, grid.data, nz, ny, nx, neigh)
    return grid, int(K)


def reach_from_seed(mask: np.ndarray, seed: int, connectivity: int = 6) -> Tuple[LabelGrid, int]:
    """Flood-fill from one flat seed index. Returns (visited grid as uint8, reached count)."""
    neigh = neighbor_offsets(connectivity)
    flat = _flat_mask(mask)
    grid = LabelGrid(mask.shape, dtype=np.uint8)
    if not (0 <= seed < grid.size):
        raise IndexError(f"seed index {seed} outside volume of {grid.size} voxels")
    if not flat[seed]:
        raise ValueError("seed voxel is not part of the mask")
    nz, ny, nx = grid.shape
    count = _bfs_reach(flat, grid.data, nz, ny, nx, neigh, int(seed))
    return grid, int(count)
