import gzip
import json
import pytest
import numpy as np
from core.vectorization import file_io

def write_json_lines(path, items, compress=False):
    """Write one JSON string literal per line (gzip when compress=True)."""
    data = "".join(json.dumps(item) + "\n" for item in items).encode("utf-8")
    if compress:
        with gzip.open(path, "wb") as f:
            f.write(data)
    else:
        path.write_bytes(data)
    return path

def write_fvecs(path, vectors):
    with open(path, "wb") as f:
        file_io.write([np.asarray(v, dtype=np.float32) for v in vectors], f)
    return path

@pytest.fixture
def words():
    return ["red", "car", "blue", "bike", "fast"]

@pytest.fixture
def word_ids(words):
    return {w: i for i, w in enumerate(words)}

@pytest.fixture
def words_file(tmp_path, words):
    return write_json_lines(tmp_path / "words.txt", words)

@pytest.fixture
def word_vectors():
    # rows line up with the words fixture
    return np.array([
        [1.0, 0.0, 0.0],
        [0.0, 1.0, 0.0],
        [0.0, 0.0, 1.0],
        [1.0, 1.0, 0.0],
        [-1.0, 0.0, 0.0],
    ], dtype=np.float32)

@pytest.fixture
def word_embeddings_file(tmp_path, word_vectors):
    return write_fvecs(tmp_path / "word_embeddings.fvecs", word_vectors)
