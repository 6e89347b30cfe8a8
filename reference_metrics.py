"""
Comparison of analysis results against stored reference metrics.

Reference file layout (JSON):

    {
      "cubeWithCentralHole": {"connected": true, "porosity": 0.0041,
                              "internal_pores": 1, "floating_parts": 0},
      ...
    }

Results are written to <out_dir>/<name>_result.json, merging into an existing
record for the same name.
"""

from __future__ import annotations

import json
import os
from typing import Optional

from porosity import PorosityStats


DEFAULT_POROSITY_TOL = 1e-3


def _load_json(path: str) -> dict:
    with open(path, "r") as f:
        return json.load(f)


def load_reference(path: str, name: str) -> Optional[dict]:
    if not os.path.isfile(path):
        print(f"WARNING: reference metrics file not found: {path}")
        return None
    ref = _load_json(path)
    if name not in ref:
        print(f"WARNING: no reference metrics for volume: {name}")
        return None
    return ref[name]


def compare_with_reference(name: str,
                           connected: bool,
                           stats: PorosityStats,
                           floating_count: int,
                           reference: dict,
                           porosity_tol: float = DEFAULT_POROSITY_TOL,
                           verbose: bool = True) -> dict:
    """Build the pass/fail record for one volume.

    Missing reference keys default to connected=False, internal_pores=0,
    floating_parts=0 and porosity=-1 (a negative porosity never matches).
    """
    internal_pores_ref = int(reference.get("internal_pores", 0))
    floating_parts_ref = int(reference.get("floating_parts", 0))
    connected_ref = bool(reference.get("connected", False))
    porosity_ref = float(reference.get("porosity", -1.0))

    porosity_diff = abs(stats.porosity - porosity_ref)
    porosity_match = porosity_ref >= 0.0 and porosity_diff <= porosity_tol
    connected_match = bool(connected) == connected_ref
    internal_pores_match = stats.pore_count == internal_pores_ref
    floating_parts_match = int(floating_count) == floating_parts_ref
    all_ok = porosity_match and connected_match and internal_pores_match and floating_parts_match

    if verbose:
        def mark(ok):
            return "OK" if ok else "MISMATCH"
        print(f"Reference comparison for {name}:")
        print(f"  connected: {bool(connected)} (expected {connected_ref}) {mark(connected_match)}")
        if porosity_ref >= 0.0:
            print(f"  porosity: {stats.porosity:.6f} (expected {porosity_ref:.6f}, diff={porosity_diff:.6f}) "
                  f"{mark(porosity_match)}")
        else:
            print(f"  porosity: {stats.porosity:.6f} (no reference)")
        print(f"  internal pores: {stats.pore_count} (expected {internal_pores_ref}) {mark(internal_pores_match)}")
        print(f"  floating parts: {floating_count} (expected {floating_parts_ref}) {mark(floating_parts_match)}")

    return {
        "matches": all_ok,
        "connected_match": connected_match,
        "porosity_match": porosity_match,
        "porosity_diff": porosity_diff,
        "internal_pores_match": internal_pores_match,
        "floating_parts_match": floating_parts_match,
        "actual": {
            "connected": bool(connected),
            "porosity": float(stats.porosity),
            "internal_pores": int(stats.pore_count),
            "floating_parts": int(floating_count),
        },
    }


def write_result(record: dict, out_dir: str, name: str) -> str:
    os.makedirs(out_dir, exist_ok=True)
    path = os.path.join(out_dir, f"{name}_result.json")
    result = _load_json(path) if os.path.isfile(path) else {}
    result[name] = record
    with open(path, "w") as f:
        json.dump(result, f, indent=4)
    return path
