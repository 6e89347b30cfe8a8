from __future__ import annotations

import argparse
import os

import numpy as np
import matplotlib
matplotlib.use("agg")
import matplotlib.pyplot as plt

from volume import BODY_VALUE, body_mask, check_cut_op, coerce_volume


def _tile(planes: np.ndarray, cols: int, border: int, fill) -> np.ndarray:
    """Arrange [n, h, w] planes row-major into one image separated by `border` pixels."""
    n, h, w = planes.shape
    rows = (n + cols - 1) // cols
    H = rows * (h + border) - border
    W = cols * (w + border) - border
    out = np.full((H, W), fill, dtype=planes.dtype)
    for i in range(n):
        r, c = divmod(i, cols)
        y = r * (h + border)
        x = c * (w + border)
        out[y:y + h, x:x + w] = planes[i]
    return out


def save_slice_collage(volume, name: str, out_dir: str,
                       body_value: int,
                       cut_op: str,
                       cols: int = 10,
                       draw_body_contours: bool = False) -> str:
    """Save all slices as one grid with void contours (red) and optional body contours (blue)."""
    check_cut_op(cut_op)
    if cols <= 0:
        raise ValueError("cols must be positive")
    data = coerce_volume(volume)
    if data is None:
        raise ValueError(f"cannot draw collage for invalid volume {name}")
    mask = body_mask(data, body_value, cut_op)
    cols = min(cols, data.shape[0])

    gray = _tile(data.astype(np.float32), cols, border=1, fill=np.nan)
    void = _tile((~mask).astype(np.float32), cols, border=1, fill=0.0)

    h, w = gray.shape
    fig, ax = plt.subplots(figsize=(max(4.0, w / 40.0), max(4.0, h / 40.0)))
    ax.imshow(gray, cmap="gray", vmin=0, vmax=255, interpolation="nearest")
    if void.any():
        ax.contour(void, levels=[0.5], colors="red", linewidths=0.6)
    if draw_body_contours:
        body = _tile(mask.astype(np.float32), cols, border=1, fill=0.0)
        if body.any():
            ax.contour(body, levels=[0.5], colors="blue", linewidths=0.6)
    ax.set_axis_off()
    ax.set_title(f"{name}: {data.shape[0]} slices")

    os.makedirs(out_dir, exist_ok=True)
    path = os.path.join(out_dir, f"{name}_collage_with_contours.png")
    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    return path


def save_projections(volume, name: str, out_dir: str,
                     body_value: int,
                     cut_op: str) -> str:
    """Save body-voxel sum projections along z, y and x side by side."""
    check_cut_op(cut_op)
    data = coerce_volume(volume)
    if data is None:
        raise ValueError(f"cannot draw projections for invalid volume {name}")
    mask = body_mask(data, body_value, cut_op)

    fig, axes = plt.subplots(1, 3, figsize=(12, 4))
    for ax, axis, label in zip(axes, (0, 1, 2), ("along z (y-x)", "along y (z-x)", "along x (z-y)")):
        proj = mask.sum(axis=axis)
        im = ax.imshow(proj, cmap="viridis", interpolation="nearest")
        plt.colorbar(im, ax=ax, label="body voxels")
        ax.set_title(label)
    fig.suptitle(name)
    fig.tight_layout()

    os.makedirs(out_dir, exist_ok=True)
    path = os.path.join(out_dir, f"{name}_projections.png")
    fig.savefig(path, dpi=120)
    plt.close(fig)
    return path


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("slices_dir")
    ap.add_argument("--name", default=None)
    ap.add_argument("--outdir", default="./plots")
    ap.add_argument("--body-value", type=int, default=BODY_VALUE)
    ap.add_argument("--cut-op", choices=["eq", "gt"], default="eq")
    ap.add_argument("--cols", type=int, default=10)
    ap.add_argument("--body-contours", action="store_true")
    args = ap.parse_args()

    from io_bridge import load_volume

    vol = load_volume(args.slices_dir)
    if vol is None:
        raise SystemExit(1)
    name = args.name or os.path.basename(os.path.normpath(args.slices_dir))
    p1 = save_slice_collage(vol, name, args.outdir, cols=args.cols, body_value=args.body_value,
                            cut_op=args.cut_op, draw_body_contours=args.body_contours)
    p2 = save_projections(vol, name, args.outdir, body_value=args.body_value, cut_op=args.cut_op)
    print(f"Wrote {p1} and {p2}")


if __name__ == "__main__":
    main()
