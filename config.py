# config.py
import os
import tomllib
from pathlib import Path

def _get_version():
    """Read the project version from pyproject.toml"""
    try:
        pyproject_path = Path(__file__).parent / "pyproject.toml"
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
        return data["project"]["version"]
    except (OSError, KeyError, tomllib.TOMLDecodeError):
        return "unknown"  # pyproject.toml is not shipped in wheels

def _get_max_workers():
    """Worker pool size; QUERYVEC_WORKERS overrides the CPU count."""
    value = os.environ.get("QUERYVEC_WORKERS")
    if value:
        workers = int(value)
        if workers < 1:
            raise ValueError(f"QUERYVEC_WORKERS must be >= 1, got {workers}")
        return workers
    return os.cpu_count() or 1

VERSION = _get_version()
NUM_CHUNKS = 100 # Vectorization chunks; bounds memory to ~N/NUM_CHUNKS vectors
MAX_WORKERS = _get_max_workers()
GZIP_SUFFIX = ".gz"
QUERY_FIELD_SEPARATOR = ":" # Query text follows the last separator on a line

class PathConfig:
    BASE_DIR = Path(__file__).parent
    DATA = BASE_DIR / "data"

    @classmethod
    def get_words_file(cls):
        """Vocabulary: one JSON string per line, line index = word id"""
        return cls.DATA / "words.txt"

    @classmethod
    def get_queries_dir(cls):
        """Raw query log, a single file or a directory of parts"""
        return cls.DATA / "queries"

    @classmethod
    def get_query_dataset_file(cls):
        """Tokenized queries written by the parse step"""
        return cls.DATA / "queries.bin"

    @classmethod
    def get_word_embeddings_file(cls):
        return cls.DATA / "word_embeddings.fvecs"

    @classmethod
    def get_query_vectors_file(cls):
        return cls.DATA / "query_vectors.fvecs"
