"""
connectivity.py

Body connectivity checks under face adjacency (6-connectivity).

Two contracts are exposed because callers interpret "connected" differently:

- is_fully_connected: every body voxel belongs to one component.
- is_3d_connected: the component grown from the first body voxel of layer
  z = 0 reaches every body voxel of the last layer (the body spans the stack).

Both return False for an invalid volume and for a volume without body; a body
missing from layer 0 is also just False for is_3d_connected.
"""

from __future__ import annotations

import numpy as np

from flood_fill import reach_from_seed
from volume import body_mask, check_cut_op, coerce_volume


BODY_CONNECTIVITY = 6


def is_fully_connected(volume, body_value: int, cut_op: str) -> bool:
    check_cut_op(cut_op)
    data = coerce_volume(volume)
    if data is None:
        return False
    mask = body_mask(data, body_value, cut_op)
    flat = mask.ravel()
    total = int(np.count_nonzero(flat))
    if total == 0:
        return False
    # argmax returns the first True in raster order
    seed = int(np.argmax(flat))
    _, reached = reach_from_seed(mask, seed, connectivity=BODY_CONNECTIVITY)
    return reached == total


def is_3d_connected(volume, body_value: int, cut_op: str) -> bool:
    check_cut_op(cut_op)
    data = coerce_volume(volume)
    if data is None:
        return False
    mask = body_mask(data, body_value, cut_op)
    first = mask[0].ravel()
    if not first.any():
        return False
    seed = int(np.argmax(first))
    visited, _ = reach_from_seed(mask, seed, connectivity=BODY_CONNECTIVITY)
    visited.require_shape(mask.shape)
    last_body = mask[-1]
    last_visited = visited.as_array()[-1] != 0
    return not bool(np.any(last_body & ~last_visited))
