from __future__ import annotations

import argparse
import json
import os
import time

import yaml

from connectivity import is_3d_connected, is_fully_connected
from floating import detect_floating_bodies_3d, detect_floating_islands_2d
from io_bridge import load_volume, save_slices
from porosity import VOID_CONNECTIVITIES, VOID_CONNECTIVITY, compute_porosity_stats
from volume import BODY_VALUE, check_cut_op, coerce_volume


DEFAULTS = {
    "slices_dir": None,
    "name": None,
    "body_value": BODY_VALUE,
    "cut_op": "eq",
    "min_area": 30,
    "min_voxels": 10,
    "porosity_connectivity": VOID_CONNECTIVITY,
    "generate": None,
    "size": 50,
    "hole_radius": 5,
    "seed": 42,
    "reference_path": None,
    "output_dir": "./voxel_out",
    "plots": False,
    "save_slices_dir": None,
}


def parse_config(path: str) -> dict:
    with open(path, "r") as f:
        cfg = yaml.safe_load(f)
    return cfg or {}


def analyze_volume(volume,
                   body_value: int,
                   cut_op: str,
                   min_area: int = 30,
                   min_voxels: int = 10,
                   porosity_connectivity: int = VOID_CONNECTIVITY) -> dict:
    """Run every analyzer on one volume and collect the results in a dict."""
    t0 = time.time()
    fully_connected = is_fully_connected(volume, body_value, cut_op)
    spans_depth = is_3d_connected(volume, body_value, cut_op)
    t_conn = time.time()
    stats = compute_porosity_stats(volume, body_value, cut_op, connectivity=porosity_connectivity)
    t_por = time.time()
    islands = detect_floating_islands_2d(volume, body_value, cut_op, min_area=min_area)
    floating_count, floating = detect_floating_bodies_3d(volume, body_value, cut_op, min_voxels=min_voxels)
    t_done = time.time()
    return {
        "fully_connected": fully_connected,
        "connected_3d": spans_depth,
        "porosity": stats,
        "islands_2d": islands,
        "floating_count": floating_count,
        "floating_3d": floating,
        "times": {
            "connectivity": t_conn - t0,
            "porosity": t_por - t_conn,
            "floating": t_done - t_por,
        },
    }


def print_report(name: str, res: dict) -> None:
    stats = res["porosity"]
    print(f"[{name}] fully connected: {res['fully_connected']}  spans first->last layer: {res['connected_3d']}")
    print(f"[{name}] porosity: {stats.porosity * 100:.4f}%  internal pores: {stats.pore_count}  "
          f"open voids: {stats.open_void_count}")
    for isl in res["islands_2d"]:
        print(f"[{name}] 2D island: slice {isl.slice_index}, component {isl.component_id}, area {isl.area} px")
    for comp in res["floating_3d"]:
        print(f"[{name}] floating body: label {comp.label}, {comp.voxel_count} voxels, bbox {comp.bbox}")
    print(f"[{name}] floating bodies (3D): {res['floating_count']}")
    t = res["times"]
    print(f"[{name}] times: connectivity={t['connectivity']:.2f}s porosity={t['porosity']:.2f}s "
          f"floating={t['floating']:.2f}s")


def _resolve_config(args) -> dict:
    cfg = dict(DEFAULTS)
    if args.config:
        cfg.update(parse_config(args.config))
    for key in DEFAULTS:
        val = getattr(args, key, None)
        if val is not None and val is not False:
            cfg[key] = val

    cfg["cut_op"] = check_cut_op(cfg["cut_op"])
    if int(cfg["porosity_connectivity"]) not in VOID_CONNECTIVITIES:
        raise ValueError("porosity_connectivity must be 6, 18, or 26")
    if cfg["slices_dir"] is None and cfg["generate"] is None:
        raise ValueError("provide slices_dir (positional or config) or --generate <cube_type>")
    return cfg


def main(argv=None):
    ap = argparse.ArgumentParser(description="Connectivity and porosity analysis of a voxel slice stack.")
    ap.add_argument("slices_dir", nargs="?", default=None)
    ap.add_argument("--config", default=None, help="YAML file; command-line flags override its keys")
    ap.add_argument("--name", default=None)
    ap.add_argument("--body-value", dest="body_value", type=int, default=None)
    ap.add_argument("--cut-op", dest="cut_op", choices=["eq", "gt"], default=None)
    ap.add_argument("--min-area", dest="min_area", type=int, default=None)
    ap.add_argument("--min-voxels", dest="min_voxels", type=int, default=None)
    ap.add_argument("--porosity-connectivity", dest="porosity_connectivity", type=int, default=None)
    ap.add_argument("--generate", default=None, help="synthesize a cube type instead of reading slices")
    ap.add_argument("--size", type=int, default=None)
    ap.add_argument("--hole-radius", dest="hole_radius", type=int, default=None)
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--reference", dest="reference_path", default=None)
    ap.add_argument("--output-dir", dest="output_dir", default=None)
    ap.add_argument("--plots", action="store_true")
    ap.add_argument("--save-slices", dest="save_slices_dir", default=None)
    args = ap.parse_args(argv)

    cfg = _resolve_config(args)

    if cfg["generate"] is not None:
        from synthetic_volumes import generate_cube
        vol = generate_cube(cfg["generate"], size=int(cfg["size"]),
                            hole_radius=int(cfg["hole_radius"]), rng=int(cfg["seed"]))
        name = cfg["name"] or str(cfg["generate"])
    else:
        vol = load_volume(str(cfg["slices_dir"]))
        name = cfg["name"] or os.path.basename(os.path.normpath(str(cfg["slices_dir"])))
    if vol is None or coerce_volume(vol) is None:
        print(f"ERROR: nothing to analyze for {name}")
        return 1

    if cfg["save_slices_dir"]:
        paths = save_slices(vol, str(cfg["save_slices_dir"]))
        print(f"Wrote {len(paths)} slices -> {cfg['save_slices_dir']}")

    body_value = int(cfg["body_value"])
    cut_op = cfg["cut_op"]
    res = analyze_volume(vol, body_value=body_value, cut_op=cut_op,
                         min_area=int(cfg["min_area"]), min_voxels=int(cfg["min_voxels"]),
                         porosity_connectivity=int(cfg["porosity_connectivity"]))
    print_report(name, res)

    out_dir = str(cfg["output_dir"])
    if cfg["reference_path"]:
        from reference_metrics import compare_with_reference, load_reference, write_result
        ref = load_reference(str(cfg["reference_path"]), name)
        if ref is not None:
            record = compare_with_reference(name, res["fully_connected"], res["porosity"],
                                            res["floating_count"], ref)
            path = write_result(record, os.path.join(out_dir, "results"), name)
            print(f"Result record -> {path}")

    if cfg["plots"]:
        from plot_volume import save_projections, save_slice_collage
        plot_dir = os.path.join(out_dir, "collages")
        save_slice_collage(vol, name, plot_dir, body_value=body_value, cut_op=cut_op,
                           draw_body_contours="disconnected" in name)
        save_projections(vol, name, plot_dir, body_value=body_value, cut_op=cut_op)
        print(f"Plots -> {plot_dir}")

    summary = {
        "name": name,
        "shape": list(coerce_volume(vol).shape),
        "body_value": body_value,
        "cut_op": cut_op,
        "fully_connected": res["fully_connected"],
        "connected_3d": res["connected_3d"],
        "porosity": res["porosity"].porosity,
        "pore_count": res["porosity"].pore_count,
        "islands_2d": len(res["islands_2d"]),
        "floating_3d": res["floating_count"],
        "config": {k: v for k, v in cfg.items()},
    }
    os.makedirs(out_dir, exist_ok=True)
    with open(os.path.join(out_dir, f"{name}_summary.json"), "w") as f:
        json.dump(summary, f, indent=2)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
