# core/preprocessing/__init__.py
"""
Preprocessing Package
"""
from .progress import ProgressTracker
from .query_vec import QueryVec, QueryVecFormatError
from .querying.query_tokenizer import QueryFormatError, parse_file, parse_query_line
from .querying.vocabulary import load_word_ids
from .querying.build_query_dataset import (
    parse_queries_in_directory_or_file,
    parse_queries_and_save_to_disk
)

__all__ = [
    'ProgressTracker',
    'QueryVec',
    'QueryVecFormatError',
    'QueryFormatError',
    'parse_file',
    'parse_query_line',
    'load_word_ids',
    'parse_queries_in_directory_or_file',
    'parse_queries_and_save_to_disk'
]
