# core/vectorization/__init__.py
"""
Vectorization Package
"""
from . import file_io
from .query_embeddings import AngularVector, QueryEmbeddings, to_angular
from .query_vectorizer import chunk_ranges, compute_query_vectors_and_save_to_disk

__all__ = [
    'file_io',
    'AngularVector',
    'QueryEmbeddings',
    'to_angular',
    'chunk_ranges',
    'compute_query_vectors_and_save_to_disk'
]
