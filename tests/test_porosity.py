from __future__ import annotations

import os
import sys

import numpy as np
import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from porosity import PorosityStats, compute_porosity_stats
from synthetic_volumes import CubeType, generate_cube, generate_hollow_sphere


def _body_fraction(data, body_value=255):
    return np.count_nonzero(data == body_value) / data.size


def test_solid_cube_has_no_pores():
    vol = generate_cube(CubeType.SOLID, size=16)
    stats = compute_porosity_stats(vol, 255, "eq")
    assert stats.porosity == 0.0
    assert stats.pore_count == 0
    assert stats.open_void_count == 0
    assert stats.total_voxels == 16 ** 3


def test_central_spherical_pore():
    vol = generate_cube(CubeType.CENTRAL_HOLE, size=50, hole_radius=5)
    stats = compute_porosity_stats(vol, 255, "eq")
    void = int(np.count_nonzero(vol.data == 0))
    assert stats.pore_count == 1
    assert stats.open_void_count == 0
    assert stats.void_voxels == void
    assert stats.pore_sizes == (void,)
    assert stats.porosity == void / 50 ** 3
    sphere = 4.0 / 3.0 * np.pi * 5 ** 3
    assert abs(stats.porosity - sphere / 50 ** 3) < 0.05 * sphere / 50 ** 3


def test_multiple_holes_and_hanging_stone():
    stats = compute_porosity_stats(generate_cube(CubeType.MULTIPLE_HOLES, size=50), 255, "eq")
    assert stats.pore_count == 4
    # the stone sits inside the cavity; the cavity is still one sealed void
    stats = compute_porosity_stats(generate_cube(CubeType.HANGING_STONE, size=50), 255, "eq")
    assert stats.pore_count == 1


def test_void_slab_is_open_not_a_pore():
    vol = generate_cube(CubeType.DISCONNECTED_BODIES, size=50)
    stats = compute_porosity_stats(vol, 255, "eq")
    assert stats.pore_count == 0
    assert stats.open_void_count == 1
    assert stats.void_voxels == 2 * 50 * 50
    assert np.isclose(stats.porosity, 0.04)


def test_porosity_plus_body_fraction_is_one():
    for vol in (generate_cube(CubeType.NOISE, size=20, rng=7),
                generate_cube(CubeType.HANGING_STONE, size=30, hole_radius=4),
                generate_hollow_sphere(size=24)):
        stats = compute_porosity_stats(vol, 255, "eq")
        assert np.isclose(stats.porosity + _body_fraction(vol.data), 1.0)


def test_pore_touching_boundary_only_late_is_open():
    # a void tunnel whose first raster voxel is interior but which later reaches x = max
    data = np.full((5, 5, 5), 255, dtype=np.uint8)
    data[2, 2, 1:5] = 0
    stats = compute_porosity_stats(data, 255, "eq")
    assert stats.pore_count == 0
    assert stats.open_void_count == 1


def test_corner_touching_voids_are_one_pore():
    data = np.full((8, 8, 8), 255, dtype=np.uint8)
    data[2:4, 2:4, 2:4] = 0
    data[4:6, 4:6, 4:6] = 0      # meets the first cavity only at a corner
    assert compute_porosity_stats(data, 255, "eq").pore_count == 1
    assert compute_porosity_stats(data, 255, "eq", connectivity=6).pore_count == 2


def test_hollow_sphere_cavity_is_enclosed():
    stats = compute_porosity_stats(generate_hollow_sphere(size=24), 255, "eq")
    # outside of the shell is open, the inner cavity is sealed
    assert stats.pore_count == 1
    assert stats.open_void_count == 1


def test_invalid_volume_gives_sentinel():
    stats = compute_porosity_stats([], 255, "eq")
    assert stats == PorosityStats(porosity=0.0, pore_count=0)
    assert not stats.analyzable
    ragged = [np.zeros((3, 3), np.uint8), np.zeros((2, 3), np.uint8)]
    assert not compute_porosity_stats(ragged, 255, "eq").analyzable


def test_threshold_convention_and_idempotence():
    data = np.full((6, 6, 6), 200, dtype=np.uint8)
    data[2:4, 2:4, 2:4] = 50
    a = compute_porosity_stats(data, 127, cut_op="gt")
    b = compute_porosity_stats(data, 127, cut_op="gt")
    assert a == b
    assert a.pore_count == 1
    assert a.void_voxels == 8
    # under exact match with 255 nothing is body, so everything is one open void
    c = compute_porosity_stats(data, 255, cut_op="eq")
    assert c.porosity == 1.0 and c.pore_count == 0


def test_body_convention_must_be_given():
    data = np.full((4, 4, 4), 200, dtype=np.uint8)
    with pytest.raises(TypeError):
        compute_porosity_stats(data)
    with pytest.raises(TypeError):
        compute_porosity_stats(data, 200)
    assert compute_porosity_stats(data, 200, "eq").porosity == 0.0


def test_in_plane_connectivity_is_rejected():
    data = np.full((4, 4, 4), 255, dtype=np.uint8)
    for bad in (4, 8, 0):
        with pytest.raises(ValueError):
            compute_porosity_stats(data, 255, "eq", connectivity=bad)
    # rejected before the volume is inspected
    with pytest.raises(ValueError):
        compute_porosity_stats([], 255, "eq", connectivity=8)
