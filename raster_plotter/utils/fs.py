"""File output for programs, metadata and debug rasters.

Programs and metadata are written through a sibling temporary file that is
flushed, fsynced and renamed over the target, so a plotter host polling the
output directory only ever sees a complete file.

Usage:
    from raster_plotter.utils import fs
    fs.atomic_write_text(out_dir / "drawing.gcode", program)
    fs.atomic_yaml_dump(metadata, out_dir / "drawing_metadata.yaml")
    fs.save_raster(skeleton, debug_dir / "skeleton.png")
"""

import os
from pathlib import Path
from typing import Any, Union

import cv2
import numpy as np
import yaml

PathLike = Union[str, Path]

TMP_SUFFIX = ".tmp"


def ensure_dir(p: PathLike) -> Path:
    """Create *p* and any missing parents; return it as a Path."""
    p = Path(p)
    p.mkdir(parents=True, exist_ok=True)
    return p


def atomic_write_bytes(path: PathLike, data: bytes) -> None:
    """Replace *path* with *data* in one rename.

    The temporary file lives in the target's directory so the rename never
    crosses a filesystem boundary.

    Raises
    ------
    RuntimeError
        If writing or renaming fails; the temporary file is removed first.
    """
    target = Path(path)
    ensure_dir(target.parent)
    staging = target.with_name(target.name + TMP_SUFFIX)

    try:
        with open(staging, 'wb') as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        staging.replace(target)
    except OSError as e:
        staging.unlink(missing_ok=True)
        raise RuntimeError(f"Failed to write {target} atomically: {e}") from e


def atomic_write_text(path: PathLike, text: str, encoding: str = "utf-8") -> None:
    atomic_write_bytes(path, text.encode(encoding))


def atomic_yaml_dump(obj: Any, path: PathLike) -> None:
    """Write *obj* as block-style YAML, keeping mapping key order."""
    text = yaml.safe_dump(obj, default_flow_style=False, sort_keys=False, allow_unicode=True)
    atomic_write_text(path, text)


def load_yaml(path: PathLike) -> Any:
    """Parse a YAML file with ``safe_load``.

    Returns ``None`` for an empty file; callers decide whether that is valid.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist
    yaml.YAMLError
        If the document is malformed (message includes the path)
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        try:
            return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Failed to parse YAML file {path}: {e}") from e


def save_raster(raster: np.ndarray, path: PathLike) -> Path:
    """Dump a uint8 raster for inspection.

    Parameters
    ----------
    raster : np.ndarray
        Shape (H, W) or BGR (H, W, 3). A raster whose values are all 0 or 1
        (edge maps, skeletons) is stretched to 0/255 so it is visible.
    path : str or Path
        Output file; the extension picks the OpenCV encoder.

    Returns
    -------
    Path
        The written path

    Raises
    ------
    IOError
        If OpenCV cannot encode the image
    """
    path = Path(path)
    ensure_dir(path.parent)

    out = np.asarray(raster, dtype=np.uint8)
    if out.size and out.max() <= 1:
        out = out * 255

    if not cv2.imwrite(str(path), out):
        raise IOError(f"Failed to write raster to {path}")
    return path
