# core/vectorization/query_vectorizer.py
"""
Chunked query vectorization.

Computes one vector per query of a tokenized dataset and appends them to
an fvecs file. The index range is split into num_chunks contiguous
chunks; each chunk is computed in parallel and written before the next
one starts, so at most one chunk of vectors is held in memory.
"""
import mmap
import logging
import time
import psutil
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterator, Optional
from config import MAX_WORKERS, NUM_CHUNKS
from core.preprocessing.progress import ProgressTracker
from core.vectorization import file_io
from core.vectorization.query_embeddings import QueryEmbeddings

logger = logging.getLogger(__name__)

def get_memory_usage() -> str:
    """Current resident memory in human-readable form"""
    process = psutil.Process()
    return f"{process.memory_info().rss / (1024**3):.1f} GB"

def map_file(path: Path, description: str) -> mmap.mmap:
    """Read-only memory map of a whole file."""
    try:
        f = open(path, "rb")
    except FileNotFoundError:
        raise FileNotFoundError(f"Could not open {description} file: {path}") from None
    with f:
        # The map keeps its own handle; closing f does not unmap it
        return mmap.mmap(f.fileno(), 0, access=mmap.ACCESS_READ)

def chunk_ranges(total: int, num_chunks: int) -> Iterator[range]:
    """Split [0, total) into at most num_chunks contiguous ranges."""
    if num_chunks < 1:
        raise ValueError(f"num_chunks must be >= 1, got {num_chunks}")
    chunk_size = (total + num_chunks - 1) // num_chunks
    for i in range(num_chunks):
        start = i * chunk_size
        end = min(start + chunk_size, total)
        if start >= end:
            break
        yield range(start, end)

def compute_query_vectors_and_save_to_disk(queries_path: Path, word_embeddings_path: Path,
                                           output_path: Path, show_progress: bool = False,
                                           num_chunks: int = NUM_CHUNKS,
                                           max_workers: Optional[int] = None) -> int:
    """
    Vectorize every query of a dataset built by parse_queries_and_save_to_disk().

    Args:
        queries_path: QueryVec file
        word_embeddings_path: fvecs file, one row per word id
        output_path: fvecs file to create
        show_progress: Render a progress bar
        num_chunks: Number of sequential chunks
        max_workers: Worker pool size (defaults to MAX_WORKERS)

    Returns:
        Number of vectors written
    """
    start_time = time.time()
    word_embeddings = map_file(word_embeddings_path, "word_embeddings")
    try:
        queries_buffer = map_file(queries_path, "queries")
        try:
            queries = QueryEmbeddings.load(word_embeddings, queries_buffer)
            try:
                written = _write_query_vectors(queries, output_path, show_progress,
                                               num_chunks, max_workers)
            finally:
                # mmap.close() fails while numpy views still reference the map
                queries.close()
        finally:
            queries_buffer.close()
    finally:
        word_embeddings.close()

    elapsed = time.time() - start_time
    logger.info(f"Wrote {written:,} query vectors to {output_path} in {elapsed:.1f}s")
    return written

def _write_query_vectors(queries: QueryEmbeddings, output_path: Path, show_progress: bool,
                         num_chunks: int, max_workers: Optional[int]) -> int:
    total = len(queries)
    logger.info(
        f"Vectorizing {total:,} queries with {queries.word_embeddings.shape[0]:,} "
        f"word vectors (dim={queries.dim}) in up to {num_chunks} chunks"
    )

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    written = 0
    with open(output_path, "wb") as f, \
         ProgressTracker(total, unit="queries", enabled=show_progress) as progress, \
         ThreadPoolExecutor(max_workers=max_workers or MAX_WORKERS) as executor:

        for chunk in chunk_ranges(total, num_chunks):
            # map() yields results in index order whatever order they finish in
            query_vectors = list(executor.map(queries.at, chunk))

            written += file_io.write(query_vectors, f)
            progress.update(len(query_vectors))
            logger.debug(
                f"Chunk [{chunk.start:,}, {chunk.stop:,}) written | Memory: {get_memory_usage()}"
            )

        progress.complete(f"Vectorized {written:,} queries")
    return written
