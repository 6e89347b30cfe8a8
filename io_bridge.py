"""
io_bridge.py

Thin I/O wrapper for reading and writing numbered slice images.

- A volume on disk is a folder of 8-bit grayscale images named slice_<n>.png.
- Slices are ordered by the numeric index <n>, not lexicographically.
- Returned arrays are shaped [height, width] (uint8); stacking them gives the
  [z, y, x] layout used by the analyzers.

Primary API
-----------

    from io_bridge import load_slices, load_volume, save_slices

    slices = load_slices("./data/cubeWithCentralHole")   # list of 2-D arrays, [] on failure
    vol = load_volume("./data/cubeWithCentralHole")      # Volume or None
    save_slices(vol, "./out/copy")                       # writes slice_0.png, slice_1.png, ...

Notes
-----
- Read failures (missing folder, no matching files, mismatched slice sizes) are
  reported with an ERROR line and produce an empty result; callers treat that
  as "nothing to analyze".
- Colour images are converted to grayscale ("L") on read.
"""

from __future__ import annotations

import os
import re
from typing import List, Optional

import numpy as np
from PIL import Image

from volume import Volume, coerce_volume


DEFAULT_PATTERN = r"slice_(\d+)\.png"


def list_slice_files(folder: str, pattern: str = DEFAULT_PATTERN) -> List[str]:
    """Return matching file paths in `folder`, sorted by their captured integer index."""
    rx = re.compile(pattern)
    found = []
    for name in os.listdir(folder):
        m = rx.fullmatch(name)
        if m is None:
            continue
        found.append((int(m.group(1)), os.path.join(folder, name)))
    found.sort(key=lambda t: t[0])
    return [p for _, p in found]


def _read_gray(path: str) -> np.ndarray:
    with Image.open(path) as img:
        if img.mode != "L":
            img = img.convert("L")
        return np.asarray(img, dtype=np.uint8).copy()


def load_slices(folder: str, pattern: str = DEFAULT_PATTERN) -> List[np.ndarray]:
    if not os.path.isdir(folder):
        print(f"ERROR: cannot access slice folder: {folder}")
        return []
    paths = list_slice_files(folder, pattern)
    if not paths:
        print(f"ERROR: no valid slices found in folder: {folder}")
        return []

    slices = [_read_gray(p) for p in paths]
    first_shape = slices[0].shape
    for p, s in zip(paths, slices):
        if s.shape != first_shape:
            print(f"ERROR: slice {os.path.basename(p)} has size {s.shape}, expected {first_shape}")
            return []

    print(f"Loaded {len(slices)} slices from {folder} (size: {first_shape[0]}x{first_shape[1]})")
    return slices


def load_volume(folder: str, pattern: str = DEFAULT_PATTERN) -> Optional[Volume]:
    slices = load_slices(folder, pattern)
    if not slices:
        return None
    return Volume.from_slices(slices)


def save_slices(volume, folder: str, prefix: str = "slice_", ext: str = ".png") -> List[str]:
    """Write one 8-bit image per layer; returns the written paths in z order."""
    data = coerce_volume(volume)
    if data is None:
        return []
    if not ext.startswith("."):
        ext = "." + ext
    os.makedirs(folder, exist_ok=True)
    out = []
    for z in range(data.shape[0]):
        path = os.path.join(folder, f"{prefix}{z}{ext}")
        Image.fromarray(np.ascontiguousarray(data[z], dtype=np.uint8)).save(path)
        out.append(path)
    return out
