from __future__ import annotations

import argparse
from enum import Enum
from typing import Sequence, Tuple

import numpy as np

from volume import BODY_VALUE, Volume


VOID_VALUE = 0
DEFAULT_SEED = 42


class CubeType(str, Enum):
    SOLID = "solid"
    CENTRAL_HOLE = "central_hole"
    MULTIPLE_HOLES = "multiple_holes"
    HANGING_STONE = "hanging_stone"
    DISCONNECTED_BODIES = "disconnected_bodies"
    NOISE = "noise"
    THIN_BRIDGE = "thin_bridge"


def _ball(shape: Tuple[int, int, int], center: Sequence[int], radius: float) -> np.ndarray:
    """Boolean mask of voxels with squared distance to `center` <= radius**2."""
    zz, yy, xx = np.ogrid[:shape[0], :shape[1], :shape[2]]
    cz, cy, cx = center
    d2 = (zz - cz) ** 2 + (yy - cy) ** 2 + (xx - cx) ** 2
    return d2 <= radius * radius


def default_hole_centers(size: int) -> list[Tuple[int, int, int]]:
    q, t = size // 4, (3 * size) // 4
    return [(q, q, q), (q, t, t), (t, q, t), (t, t, q)]


def generate_cube(cube_type: CubeType | str,
                  size: int = 50,
                  hole_centers: Sequence[Sequence[int]] | None = None,
                  hole_radius: int = 5,
                  rng: np.random.Generator | int | None = None,
                  noise_fraction: float = 0.01) -> Volume:
    """Generate a size^3 body cube (value 255) with voids carved according to `cube_type`.

    Randomness (NOISE only) comes from `rng`: a Generator, an integer seed, or
    None for DEFAULT_SEED.
    """
    cube_type = CubeType(cube_type)
    if size < 4:
        raise ValueError("size must be >= 4")
    shape = (size, size, size)
    data = np.full(shape, BODY_VALUE, dtype=np.uint8)
    c = size // 2

    if cube_type == CubeType.SOLID:
        pass
    elif cube_type == CubeType.CENTRAL_HOLE:
        data[_ball(shape, (c, c, c), hole_radius)] = VOID_VALUE
    elif cube_type == CubeType.MULTIPLE_HOLES:
        centers = hole_centers if hole_centers is not None else default_hole_centers(size)
        for center in centers:
            data[_ball(shape, center, hole_radius)] = VOID_VALUE
    elif cube_type == CubeType.HANGING_STONE:
        cavity_r = 2 * hole_radius
        stone_r = max(1, cavity_r // 3)
        if cavity_r >= c:
            raise ValueError("hole_radius too large for a hanging stone in this cube")
        data[_ball(shape, (c, c, c), cavity_r)] = VOID_VALUE
        data[_ball(shape, (c, c, c), stone_r)] = BODY_VALUE
    elif cube_type in (CubeType.DISCONNECTED_BODIES, CubeType.THIN_BRIDGE):
        # two full void layers split the cube into a lower and an upper block
        data[c - 1:c + 1, :, :] = VOID_VALUE
        if cube_type == CubeType.THIN_BRIDGE:
            data[c - 1:c + 1, c, c] = BODY_VALUE
    elif cube_type == CubeType.NOISE:
        gen = np.random.default_rng(DEFAULT_SEED if rng is None else rng)
        inner = gen.random((size - 2, size - 2, size - 2)) < noise_fraction
        data[1:-1, 1:-1, 1:-1][inner] = VOID_VALUE
    return Volume(data)


def generate_sphere(size: int = 100) -> Volume:
    """Solid ball centred in an empty size^3 box."""
    shape = (size, size, size)
    c = size // 2
    r = size // 2 - 1
    data = np.zeros(shape, dtype=np.uint8)
    data[_ball(shape, (c, c, c), r)] = BODY_VALUE
    return Volume(data)


def generate_hollow_sphere(size: int = 100) -> Volume:
    """Spherical shell with inner radius half the outer radius; the cavity is a sealed pore."""
    shape = (size, size, size)
    c = size // 2
    r_outer = size // 2 - 1
    r_inner = r_outer // 2
    zz, yy, xx = np.ogrid[:size, :size, :size]
    d2 = (zz - c) ** 2 + (yy - c) ** 2 + (xx - c) ** 2
    data = np.zeros(shape, dtype=np.uint8)
    data[(d2 <= r_outer * r_outer) & (d2 >= r_inner * r_inner)] = BODY_VALUE
    return Volume(data)


def generate_framed_cube(size: int = 100) -> Volume:
    """Solid block inset by size//5 on every side (it does not reach layer 0)."""
    m = size // 5
    data = np.zeros((size, size, size), dtype=np.uint8)
    data[m:size - m, m:size - m, m:size - m] = BODY_VALUE
    return Volume(data)


def main():
    ap = argparse.ArgumentParser(description="Write a synthetic test volume as numbered slices.")
    ap.add_argument("cube_type", choices=[t.value for t in CubeType])
    ap.add_argument("output_dir")
    ap.add_argument("--size", type=int, default=50)
    ap.add_argument("--hole-radius", type=int, default=5)
    ap.add_argument("--seed", type=int, default=DEFAULT_SEED)
    ap.add_argument("--noise-fraction", type=float, default=0.01)
    args = ap.parse_args()

    from io_bridge import save_slices

    vol = generate_cube(args.cube_type, size=args.size, hole_radius=args.hole_radius,
                        rng=args.seed, noise_fraction=args.noise_fraction)
    paths = save_slices(vol, args.output_dir)
    print(f"Wrote {len(paths)} slices of {args.cube_type} -> {args.output_dir}")


if __name__ == "__main__":
    main()
