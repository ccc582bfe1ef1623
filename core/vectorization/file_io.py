# core/vectorization/file_io.py
"""
fvecs record I/O.

Each vector is stored as [int32 dimension][float32 * dimension], the
layout DiskANN-style nearest-neighbor indexes read directly. Records are
appended, so a file can be written in any number of write() calls and
still reads back as one ordered list of vectors.
"""
import struct
import numpy as np
from pathlib import Path
from typing import Sequence

class VectorFileFormatError(Exception):
    pass

FLOAT_DTYPE = np.dtype("<f4")
DIM_DTYPE = np.dtype("<i4")

def write(vectors: Sequence[np.ndarray], f) -> int:
    """
    Append vectors to a binary file object.

    Args:
        vectors: Vectors of equal dimension
        f: Writable binary file

    Returns:
        Number of vectors written
    """
    if len(vectors) == 0:
        return 0

    matrix = np.asarray(vectors, dtype=FLOAT_DTYPE)
    if matrix.ndim != 2:
        raise ValueError(f"Expected a sequence of 1-D vectors, got shape {matrix.shape}")

    n, dim = matrix.shape
    records = np.empty((n, dim + 1), dtype=FLOAT_DTYPE)
    records.view(DIM_DTYPE)[:, 0] = dim
    records[:, 1:] = matrix
    f.write(records.tobytes())
    return n

def load_mmap(buffer) -> np.ndarray:
    """
    Zero-copy (n, dim) float32 view of an fvecs buffer.

    An empty buffer holds zero vectors and yields a (0, 0) array.
    """
    size = len(buffer)
    if size == 0:
        return np.empty((0, 0), dtype=FLOAT_DTYPE)
    if size < DIM_DTYPE.itemsize:
        raise VectorFileFormatError(f"Vector file too small: {size} bytes")

    dim = struct.unpack_from("<i", buffer, 0)[0]
    if dim < 0:
        raise VectorFileFormatError(f"Invalid vector dimension: {dim}")

    record_size = (dim + 1) * FLOAT_DTYPE.itemsize
    if size % record_size != 0:
        raise VectorFileFormatError(
            f"Vector file size {size} is not a multiple of the record size {record_size} (dim={dim})"
        )

    records = np.frombuffer(buffer, dtype=FLOAT_DTYPE).reshape(-1, dim + 1)
    dims = records.view(DIM_DTYPE)[:, 0]
    if not np.all(dims == dim):
        bad = int(np.argmax(dims != dim))
        bad_dim = int(dims[bad])
        # The traceback keeps this frame alive; drop the views so the buffer can close
        del records, dims
        raise VectorFileFormatError(f"Vector {bad} has dimension {bad_dim}, expected {dim}")

    return records[:, 1:]

def read(path: Path) -> np.ndarray:
    """Load a whole fvecs file into memory."""
    with open(path, "rb") as f:
        data = f.read()
    return np.array(load_mmap(data))
