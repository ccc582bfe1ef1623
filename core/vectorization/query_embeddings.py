# core/vectorization/query_embeddings.py
import numpy as np
from core.preprocessing.query_vec import QueryVec
from core.vectorization import file_io

# Unit-length float32 vector; similarity between two is their dot product
AngularVector = np.ndarray

def to_angular(vector: np.ndarray) -> AngularVector:
    """Normalize to unit length. The zero vector stays zero.

    Raises ValueError for a vector with NaN or infinite components.
    """
    # float64 so large float32 components do not overflow the norm
    vector = np.asarray(vector, dtype=np.float64)
    norm = float(np.linalg.norm(vector))
    if not np.isfinite(norm):
        raise ValueError(f"Cannot normalize a vector with norm {norm}")
    if norm == 0.0:
        return np.zeros(vector.shape, dtype=np.float32)
    return (vector / norm).astype(np.float32)

class QueryEmbeddings:
    """Query vectors computed on demand from word vectors.

    A query's vector is the normalized mean of the word vectors of its
    token ids. Both inputs are normally read-only memory maps, so at()
    is safe to call from several threads at once. Call close() before
    closing those maps.
    """

    def __init__(self, word_embeddings: np.ndarray, queries: QueryVec):
        self.word_embeddings = word_embeddings
        self.queries = queries

    @classmethod
    def load(cls, word_embeddings_buffer, queries_buffer) -> "QueryEmbeddings":
        return cls(file_io.load_mmap(word_embeddings_buffer), QueryVec.load(queries_buffer))

    def close(self):
        """Drop the views on the underlying buffers."""
        self.word_embeddings = None
        self.queries = None

    def __len__(self):
        return len(self.queries)

    @property
    def dim(self) -> int:
        return self.word_embeddings.shape[1]

    def at(self, i: int) -> AngularVector:
        token_ids = np.asarray(self.queries[i], dtype=np.intp)
        if token_ids.size == 0:
            return np.zeros(self.dim, dtype=np.float32)

        num_words = self.word_embeddings.shape[0]
        if int(token_ids.max()) >= num_words:
            raise IndexError(
                f"Query {i} references word id {int(token_ids.max())} "
                f"but the embedding table has {num_words:,} rows"
            )

        mean = self.word_embeddings[token_ids].mean(axis=0)
        if not np.all(np.isfinite(mean)):
            raise ValueError(f"Query {i} has a non-finite vector; check the word embeddings")
        return to_angular(mean)
