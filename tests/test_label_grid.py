from __future__ import annotations

import os
import sys

import numpy as np
import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from label_grid import LabelGrid, neighbor_offsets
from flood_fill import label_components, reach_from_seed
import metrics as M


def test_neighbor_offsets_counts():
    for conn, n in ((4, 4), (8, 8), (6, 6), (18, 18), (26, 26)):
        offs = neighbor_offsets(conn)
        assert offs.shape == (n, 3)
        assert not np.any(np.all(offs == 0, axis=1))
        # symmetric neighborhoods
        assert {tuple(o) for o in offs} == {tuple(-o) for o in offs}
    assert np.all(neighbor_offsets(8)[:, 0] == 0)
    with pytest.raises(ValueError):
        neighbor_offsets(10)


def test_label_grid_linear_index_and_bounds():
    g = LabelGrid((3, 4, 5))
    assert g.data.shape == (60,)
    assert g.index(2, 3, 4) == 59
    assert g.index(1, 2, 3) == (1 * 4 + 2) * 5 + 3
    g.set(1, 2, 3, 7)
    assert g.get(1, 2, 3) == 7
    assert g.as_array()[1, 2, 3] == 7
    with pytest.raises(IndexError):
        g.index(3, 0, 0)
    with pytest.raises(IndexError):
        g.get(0, -1, 0)
    with pytest.raises(ValueError):
        g.require_shape((3, 4, 6))
    g.require_shape((3, 4, 5))
    with pytest.raises(ValueError):
        LabelGrid((0, 4, 5))


def test_label_components_raster_order():
    mask = np.zeros((4, 6, 6), dtype=bool)
    mask[3, 5, 5] = True        # discovered last
    mask[0, 0, 0:2] = True      # discovered first
    mask[1, 3, 3] = True
    mask[2, 3, 3] = True        # face-connected to the previous voxel
    grid, K = label_components(mask, connectivity=6)
    labels = grid.as_array()
    assert K == 3
    assert labels[0, 0, 0] == labels[0, 0, 1] == 1
    assert labels[1, 3, 3] == labels[2, 3, 3] == 2
    assert labels[3, 5, 5] == 3
    assert np.all(labels[~mask] == 0)


def test_diagonal_contact_depends_on_connectivity():
    mask = np.zeros((3, 3, 3), dtype=bool)
    mask[0, 0, 0] = True
    mask[1, 1, 1] = True
    _, k6 = label_components(mask, connectivity=6)
    _, k18 = label_components(mask, connectivity=18)
    _, k26 = label_components(mask, connectivity=26)
    assert (k6, k18, k26) == (2, 2, 1)


def test_reach_from_seed_counts():
    mask = np.zeros((2, 5, 5), dtype=bool)
    mask[0, 1, 1:4] = True
    mask[1, 4, 4] = True
    seed = (0 * 5 + 1) * 5 + 1
    visited, count = reach_from_seed(mask, seed, connectivity=6)
    assert count == 3
    assert visited.as_array().sum() == 3
    assert visited.get(1, 4, 4) == 0
    with pytest.raises(ValueError):
        reach_from_seed(mask, 0, connectivity=6)


def test_metrics_presence_and_bboxes():
    labels = np.zeros((5, 5, 5), dtype=np.int32)
    labels[0, 2, 2] = 1                # touches z-
    labels[2:4, 2, 1:3] = 2            # interior
    labels[1, 4, 2] = 3                # touches y+
    K = 3
    assert M.num_cells(labels, K=K).tolist() == [1, 4, 1]
    assert M.touches_boundary(labels, K=K).tolist() == [True, False, True]
    assert M.touches_layer(labels, 0, K=K).tolist() == [True, False, False]
    pres = M.face_presence(labels, K=K)
    assert pres[2, M.FACE_NAMES.index("y+")]
    bbox = M.compute_bboxes(labels, K=K)
    assert bbox[1].tolist() == [2, 4, 2, 3, 1, 3]
