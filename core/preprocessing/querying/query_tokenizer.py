# core/preprocessing/querying/query_tokenizer.py
"""
Query Tokenizer
===============
Turns query-log lines into token-id sequences.
Each line is a JSON string literal such as "q17:en:red sports car";
only the text after the last ':' is the query. Words missing from the
vocabulary are dropped, so a query may tokenize to an empty sequence.
"""
import re
import json
from typing import Dict, IO, List, Union
from config import QUERY_FIELD_SEPARATOR
from core.preprocessing.query_vec import QueryVec

class QueryFormatError(Exception):
    pass

# Unicode White_Space; str.split() would also split on the \x1c-\x1f separators
WHITESPACE = re.compile(r"[^\S\x1c-\x1f]+")

def decode_line(line: Union[str, bytes]) -> str:
    """Decode one JSON string literal line."""
    text = json.loads(line)
    if not isinstance(text, str):
        raise QueryFormatError(f"Expected a JSON string, got {type(text).__name__}")
    return text

def query_text(text: str) -> str:
    """Strip leading id/prefix fields (everything up to the last separator)."""
    return text.rsplit(QUERY_FIELD_SEPARATOR, 1)[-1]

def tokenize(text: str, word_ids: Dict[str, int]) -> List[int]:
    """Look up whitespace-separated words, skipping unknown ones."""
    return [word_ids[word] for word in WHITESPACE.split(text) if word and word in word_ids]

def parse_query_line(line: Union[str, bytes], word_ids: Dict[str, int]) -> List[int]:
    return tokenize(query_text(decode_line(line)), word_ids)

def parse_file(query_file: IO, word_ids: Dict[str, int], name: str = "<stream>") -> QueryVec:
    """
    Parse every line of an already-decompressed stream.

    Args:
        query_file: Binary or text stream, one JSON string per line
        word_ids: Vocabulary (read-only)
        name: Label used in error messages

    Returns:
        QueryVec with one sequence per line, in line order
    """
    queries = QueryVec()

    for line_number, line in enumerate(query_file):
        try:
            token_ids = parse_query_line(line, word_ids)
        except ValueError as e:
            raise QueryFormatError(f"{name}:{line_number + 1}: invalid query line: {e}") from e
        except QueryFormatError as e:
            raise QueryFormatError(f"{name}:{line_number + 1}: {e}") from e
        queries.push(token_ids)

    return queries
