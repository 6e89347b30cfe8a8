from __future__ import annotations

import numpy as np


FACE_NAMES = ("z-", "z+", "y-", "y+", "x-", "x+")


def _ensure_K(labels: np.ndarray, K: int | None = None) -> int:
    if K is None:
        K = int(labels.max()) if labels.size else 0
    return K


def num_cells(labels: np.ndarray, K: int | None = None) -> np.ndarray:
    """Voxel count per label 1..K (background excluded)."""
    K = _ensure_K(labels, K)
    lab = labels.ravel()
    cnt = np.bincount(lab, minlength=K + 1).astype(np.int64)
    return cnt[1:K + 1]


def _labels_present(arr: np.ndarray, K: int) -> np.ndarray:
    u = np.unique(arr)
    return u[(u > 0) & (u <= K)]


def face_presence(labels: np.ndarray, K: int | None = None) -> np.ndarray:
    """Return bool[K,6]: whether label k has a voxel on each outer face.

    Face order follows FACE_NAMES: z-, z+, y-, y+, x-, x+.
    """
    K = _ensure_K(labels, K)
    presence = np.zeros((K, 6), dtype=bool)
    if K == 0:
        return presence
    for idx, arr in enumerate((labels[0, :, :],
                               labels[-1, :, :],
                               labels[:, 0, :],
                               labels[:, -1, :],
                               labels[:, :, 0],
                               labels[:, :, -1])):
        u = _labels_present(arr, K)
        presence[u - 1, idx] = True
    return presence


def touches_boundary(labels: np.ndarray, K: int | None = None) -> np.ndarray:
    """bool[K]: label touches any of the six outer faces."""
    return face_presence(labels, K).any(axis=1)


def touches_layer(labels: np.ndarray, z: int, K: int | None = None) -> np.ndarray:
    """bool[K]: label has at least one voxel on layer z."""
    K = _ensure_K(labels, K)
    out = np.zeros(K, dtype=bool)
    if K == 0:
        return out
    u = _labels_present(labels[z, :, :], K)
    out[u - 1] = True
    return out


def compute_bboxes(labels: np.ndarray, K: int | None = None) -> np.ndarray:
    """Compute per-label bounding boxes [min,max) along z, y, x.

    Returns int32 array of shape [K,6]: (z_min,z_max,y_min,y_max,x_min,x_max)
    """
    K = _ensure_K(labels, K)
    if K == 0:
        return np.zeros((0, 6), dtype=np.int32)
    nz, ny, nx = labels.shape
    lo = np.empty((3, K + 1), dtype=np.int64)
    hi = np.zeros((3, K + 1), dtype=np.int64)
    lo[0, :] = nz
    lo[1, :] = ny
    lo[2, :] = nx

    for axis, n in enumerate((nz, ny, nx)):
        for c in range(n):
            plane = np.take(labels, c, axis=axis)
            u = np.unique(plane)
            u = u[(u != 0) & (u <= K)]
            if u.size == 0:
                continue
            lo[axis, u] = np.minimum(lo[axis, u], c)
            hi[axis, u] = np.maximum(hi[axis, u], c + 1)

    out = np.stack([lo[0, 1:], hi[0, 1:], lo[1, 1:], hi[1, 1:], lo[2, 1:], hi[2, 1:]], axis=1)
    return out.astype(np.int32)
