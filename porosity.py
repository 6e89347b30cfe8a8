from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np

from flood_fill import label_components
from volume import body_mask, check_cut_op, coerce_volume
import metrics as M


VOID_CONNECTIVITY = 26
VOID_CONNECTIVITIES = (6, 18, 26)


@dataclass(frozen=True)
class PorosityStats:
    """Volume-level void statistics.

    - porosity: void voxels / all voxels.
    - pore_count: void components touching none of the six outer faces.
    - pore_sizes: voxel count of each enclosed pore, in label (discovery) order.

    total_voxels == 0 marks the sentinel returned for an unanalyzable volume.
    """

    porosity: float
    pore_count: int
    void_voxels: int = 0
    total_voxels: int = 0
    open_void_count: int = 0
    pore_sizes: Tuple[int, ...] = field(default_factory=tuple)

    @property
    def analyzable(self) -> bool:
        return self.total_voxels > 0


def compute_porosity_stats(volume,
                           body_value: int,
                           cut_op: str,
                           connectivity: int = VOID_CONNECTIVITY) -> PorosityStats:
    """Classify every void component as open (touches a face) or enclosed.

    Voids are grouped with full adjacency by default, so cavities touching only
    at an edge or a corner count as one pore. A component is classified once its
    flood fill is complete, from all of its voxels.
    """
    check_cut_op(cut_op)
    if connectivity not in VOID_CONNECTIVITIES:
        raise ValueError("porosity connectivity must be 6, 18, or 26")
    data = coerce_volume(volume)
    if data is None:
        return PorosityStats(porosity=0.0, pore_count=0)

    void = ~body_mask(data, body_value, cut_op)
    total = int(void.size)
    grid, K = label_components(void, connectivity=connectivity)
    labels = grid.as_array()

    cell_count = M.num_cells(labels, K=K)
    open_mask = M.touches_boundary(labels, K=K)
    enclosed = ~open_mask
    void_voxels = int(cell_count.sum())

    return PorosityStats(
        porosity=void_voxels / total,
        pore_count=int(np.count_nonzero(enclosed)),
        void_voxels=void_voxels,
        total_voxels=total,
        open_void_count=int(np.count_nonzero(open_mask)),
        pore_sizes=tuple(int(c) for c in cell_count[enclosed]),
    )
