from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from flood_fill import label_components
from volume import body_mask, check_cut_op, coerce_volume
import metrics as M


BODY_CONNECTIVITY = 6
SLICE_CONNECTIVITY = 8
ANCHOR_LAYER = 0


@dataclass(frozen=True)
class FloatingComponent:
    label: int
    voxel_count: int
    # (z_min, z_max, y_min, y_max, x_min, x_max), maxima exclusive
    bbox: Tuple[int, int, int, int, int, int]


@dataclass(frozen=True)
class FloatingIsland:
    slice_index: int
    component_id: int
    area: int


def detect_floating_bodies_3d(volume,
                              body_value: int,
                              cut_op: str,
                              min_voxels: int = 10) -> Tuple[int, List[FloatingComponent]]:
    """Find body components that are not supported by the base layer.

    Components are grown with face adjacency. A component is floating when it has
    no voxel on layer z = 0 and holds at least `min_voxels` voxels; smaller ones
    are dropped as noise. Touching any other face does not anchor a component.

    Returns (count, components) with components in label (raster discovery) order.
    """
    check_cut_op(cut_op)
    data = coerce_volume(volume)
    if data is None:
        return 0, []

    mask = body_mask(data, body_value, cut_op)
    grid, K = label_components(mask, connectivity=BODY_CONNECTIVITY)
    grid.require_shape(data.shape)
    if K == 0:
        return 0, []
    labels = grid.as_array()

    cell_count = M.num_cells(labels, K=K)
    anchored = M.touches_layer(labels, ANCHOR_LAYER, K=K)
    floating = (~anchored) & (cell_count >= min_voxels)
    idx = np.flatnonzero(floating)
    if idx.size == 0:
        return 0, []

    bbox = M.compute_bboxes(labels, K=K)
    out = [
        FloatingComponent(label=int(i + 1),
                          voxel_count=int(cell_count[i]),
                          bbox=tuple(int(v) for v in bbox[i]))
        for i in idx
    ]
    return len(out), out


def detect_floating_islands_2d(volume,
                               body_value: int,
                               cut_op: str,
                               min_area: int = 30) -> List[FloatingIsland]:
    """Report small in-plane body components on every slice independently.

    Each slice is labeled with 8-adjacency; components with area < min_area are
    reported regardless of how they connect through neighbouring slices.
    """
    check_cut_op(cut_op)
    data = coerce_volume(volume)
    if data is None:
        return []

    mask = body_mask(data, body_value, cut_op)
    out: List[FloatingIsland] = []
    for z in range(mask.shape[0]):
        plane = mask[z:z + 1]
        if not plane.any():
            continue
        grid, K = label_components(plane, connectivity=SLICE_CONNECTIVITY)
        area = M.num_cells(grid.as_array(), K=K)
        for i in np.flatnonzero(area < min_area):
            out.append(FloatingIsland(slice_index=z, component_id=int(i + 1), area=int(area[i])))
    return out
