from __future__ import annotations

import json
import os
import sys

import numpy as np
import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
import voxel_analyzer as VA
from io_bridge import save_slices
from plot_volume import save_projections, save_slice_collage
from synthetic_volumes import CubeType, generate_cube


def test_analyze_volume_collects_every_result():
    vol = generate_cube(CubeType.HANGING_STONE, size=30, hole_radius=4)
    res = VA.analyze_volume(vol, 255, "eq", min_voxels=5, min_area=2)
    assert res["fully_connected"] is False
    assert res["connected_3d"] is True
    assert res["porosity"].pore_count == 1
    assert res["floating_count"] == 1
    assert len(res["floating_3d"]) == 1


def test_main_with_generated_cube_and_reference(tmp_path, capsys):
    ref = tmp_path / "ref.json"
    ref.write_text(json.dumps({"central_hole": {"connected": True, "porosity": 0.0, "internal_pores": 1,
                                                "floating_parts": 0}}))
    out_dir = tmp_path / "out"
    rc = VA.main(["--generate", "central_hole", "--size", "20", "--hole-radius", "2",
                  "--reference", str(ref), "--output-dir", str(out_dir)])
    assert rc == 0
    with open(out_dir / "central_hole_summary.json") as f:
        summary = json.load(f)
    assert summary["fully_connected"] is True
    assert summary["pore_count"] == 1
    assert summary["shape"] == [20, 20, 20]
    with open(out_dir / "results" / "central_hole_result.json") as f:
        record = json.load(f)["central_hole"]
    assert record["internal_pores_match"]
    assert "internal pores: 1" in capsys.readouterr().out


def test_main_reads_yaml_config_and_slices(tmp_path):
    data = np.full((6, 8, 8), 255, dtype=np.uint8)
    data[3:, :, :] = 0
    data[5, 4, 4] = 255
    save_slices(data, str(tmp_path / "stack"))
    cfg = tmp_path / "run.yaml"
    cfg.write_text(f"slices_dir: {tmp_path / 'stack'}\nname: stack\nmin_voxels: 1\n"
                   f"output_dir: {tmp_path / 'out'}\n")
    assert VA.main(["--config", str(cfg)]) == 0
    with open(tmp_path / "out" / "stack_summary.json") as f:
        summary = json.load(f)
    assert summary["floating_3d"] == 1
    assert summary["islands_2d"] == 1


def test_main_rejects_bad_configuration(tmp_path):
    with pytest.raises(ValueError):
        VA.main(["--output-dir", str(tmp_path)])
    with pytest.raises(ValueError):
        VA.main(["--generate", "solid", "--porosity-connectivity", "8", "--output-dir", str(tmp_path)])
    assert VA.main([str(tmp_path / "missing")]) == 1


def test_plots_are_written(tmp_path):
    vol = generate_cube(CubeType.DISCONNECTED_BODIES, size=12)
    p1 = save_slice_collage(vol, "disconnected", str(tmp_path), 255, "eq", cols=4, draw_body_contours=True)
    p2 = save_projections(vol, "disconnected", str(tmp_path), 255, "eq")
    assert os.path.isfile(p1) and os.path.isfile(p2)
    with pytest.raises(ValueError):
        save_slice_collage([], "empty", str(tmp_path), 255, "eq")
