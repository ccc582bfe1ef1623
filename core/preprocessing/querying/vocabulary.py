# core/preprocessing/querying/vocabulary.py
import json
import logging
from pathlib import Path
from typing import Dict
from core.preprocessing.querying.query_tokenizer import QueryFormatError

logger = logging.getLogger(__name__)

def load_word_ids(words_path: Path) -> Dict[str, int]:
    """
    Load the vocabulary as a word -> id mapping.

    Each line of the file is a JSON string literal; a word's id is its
    0-based line number. If a word appears on several lines the last
    line wins.

    Args:
        words_path: Path to the newline-delimited word list

    Returns:
        Dictionary mapping each word to its id
    """
    words_path = Path(words_path)
    word_ids = {}
    with open(words_path, "rb") as f:
        for line_number, line in enumerate(f):
            try:
                word = json.loads(line)
            except ValueError as e:
                raise QueryFormatError(f"{words_path}:{line_number + 1}: invalid JSON string: {e}") from e
            if not isinstance(word, str):
                raise QueryFormatError(f"{words_path}:{line_number + 1}: expected a JSON string, got {type(word).__name__}")
            word_ids[word] = line_number

    logger.info(f"Loaded {len(word_ids):,} words from {words_path}")
    return word_ids
