# core/preprocessing/querying/build_query_dataset.py
"""
Query Dataset Builder
=====================
Tokenizes a query log (one file, or a directory of parts) into a single
QueryVec file.

Tokenizing is CPU-bound pure Python, so parts are parsed in worker
processes; each worker receives the vocabulary once through the pool
initializer and sends back compact offset/token arrays. Results are
concatenated in sorted path order so the output never depends on which
worker finished first.
"""
import gzip
import logging
import time
import numpy as np
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path
from typing import Dict, IO, List, Optional, Tuple
from config import GZIP_SUFFIX, MAX_WORKERS
from core.preprocessing.progress import ProgressTracker
from core.preprocessing.query_vec import QueryVec
from core.preprocessing.querying.query_tokenizer import parse_file
from core.preprocessing.querying.vocabulary import load_word_ids

logger = logging.getLogger(__name__)

# Vocabulary of the current worker process, set by _init_worker()
_worker_word_ids: Optional[Dict[str, int]] = None

def list_query_parts(path: Path) -> List[Path]:
    """Sorted direct entries of a directory, or the file itself."""
    path = Path(path)
    if path.is_dir():
        return sorted(path.iterdir())
    if not path.exists():
        raise FileNotFoundError(f"Input file: {path} not found")
    return [path]

def open_query_part(part: Path) -> IO[bytes]:
    """Open a part for reading, decompressing when it ends in .gz"""
    try:
        if part.name.endswith(GZIP_SUFFIX):
            return gzip.open(part, "rb")
        return open(part, "rb")
    except FileNotFoundError:
        raise FileNotFoundError(f"Input file: {part} not found") from None

def parse_query_part(part: Path, word_ids: Dict[str, int]) -> QueryVec:
    """Tokenize one part."""
    with open_query_part(part) as query_file:
        try:
            return parse_file(query_file, word_ids, name=str(part))
        except gzip.BadGzipFile as e:
            raise gzip.BadGzipFile(f"Not a valid gzip file: {part} ({e})") from e

def _init_worker(word_ids: Dict[str, int]):
    global _worker_word_ids
    _worker_word_ids = word_ids

def _parse_part_in_worker(part: Path) -> Tuple[np.ndarray, np.ndarray]:
    return parse_query_part(part, _worker_word_ids).to_arrays()

def parse_queries_in_directory_or_file(path: Path, word_ids: Dict[str, int],
                                       show_progress: bool = False,
                                       max_workers: Optional[int] = None) -> QueryVec:
    """
    Tokenize every part under path and merge them in sorted part order.

    Args:
        path: Query log file or directory of parts
        word_ids: Vocabulary, copied once into each worker process
        show_progress: Render progress bars
        max_workers: Worker process count (defaults to MAX_WORKERS)

    Returns:
        Merged QueryVec
    """
    parts = list_query_parts(path)
    logger.info(f"Parsing {len(parts)} part(s) from {path}")

    if show_progress:
        print(f"Parsing {len(parts)} part(s)...")

    query_parts: List[Optional[QueryVec]] = [None] * len(parts)
    workers = max(1, min(max_workers or MAX_WORKERS, len(parts)))
    with ProgressTracker(len(parts), unit="parts", enabled=show_progress) as progress:
        with ProcessPoolExecutor(max_workers=workers, initializer=_init_worker,
                                 initargs=(word_ids,)) as executor:
            futures = {
                executor.submit(_parse_part_in_worker, part): i
                for i, part in enumerate(parts)
            }
            try:
                for future in as_completed(futures):
                    i = futures[future]
                    query_parts[i] = QueryVec.from_arrays(*future.result())
                    logger.debug(
                        f"Parsed {parts[i].name}: {len(query_parts[i]):,} queries, "
                        f"{query_parts[i].total_tokens:,} tokens"
                    )
                    progress.update()
            except BaseException:
                for future in futures:
                    future.cancel()
                raise
        progress.complete("All parts parsed")

    if show_progress:
        print("Collecting queries...")

    queries = QueryVec()
    with ProgressTracker(len(parts), unit="parts", enabled=show_progress) as progress:
        for query_part in query_parts:
            queries.extend_from_queryvec(query_part)
            progress.update()
        progress.complete("Queries collected.")

    logger.info(f"Collected {len(queries):,} queries ({queries.total_tokens:,} tokens)")
    return queries

def parse_queries_and_save_to_disk(queries_path: Path, words_path: Path, output_path: Path,
                                   show_progress: bool = False,
                                   max_workers: Optional[int] = None) -> int:
    """
    Build the query dataset file.

    Returns:
        Number of queries written
    """
    start_time = time.time()
    word_ids = load_word_ids(words_path)
    queries = parse_queries_in_directory_or_file(
        Path(queries_path), word_ids, show_progress, max_workers
    )

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "wb") as f:
        queries.write(f)

    elapsed = time.time() - start_time
    logger.info(f"Wrote {len(queries):,} queries to {output_path} in {elapsed:.1f}s")
    return len(queries)
