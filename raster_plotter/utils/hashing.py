"""SHA-256 digests recorded in run metadata.

``sha256_file`` fingerprints the source image, ``sha256_bytes`` the
emitted program, and ``sha256_array`` the preprocessed raster (logged at
DEBUG so two runs can be compared stage by stage).
"""

import hashlib
from pathlib import Path
from typing import Union

import numpy as np

_CHUNK = 1 << 20


def sha256_file(path: Union[str, Path], chunk_size: int = _CHUNK) -> str:
    """Hex digest of a file's contents, read in *chunk_size* blocks.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    digest = hashlib.sha256()
    with open(path, 'rb') as f:
        for block in iter(lambda: f.read(chunk_size), b''):
            digest.update(block)
    return digest.hexdigest()


def sha256_array(arr: np.ndarray) -> str:
    """Hex digest of an array's dtype, shape and C-ordered values.

    Two rasters with identical bytes but different shapes hash differently;
    a Fortran-ordered copy hashes the same as the original.
    """
    arr = np.ascontiguousarray(arr)
    digest = hashlib.sha256(f"{arr.dtype}|{arr.shape}|".encode())
    digest.update(arr.tobytes())
    return digest.hexdigest()


def sha256_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()
