import io
import json
import pytest
from core.preprocessing import QueryFormatError, parse_file, parse_query_line

def test_text_after_last_colon():
    word_ids = {"red": 0, "car": 1}
    assert parse_query_line(json.dumps("q1:region:red car"), word_ids) == [0, 1]

def test_line_without_colon_uses_whole_line(word_ids):
    assert parse_query_line(json.dumps("fast red bike"), word_ids) == [4, 0, 3]

def test_unknown_words_are_dropped(word_ids):
    assert parse_query_line(json.dumps("q:the red and blue car"), word_ids) == [0, 2, 1]

def test_all_unknown_gives_empty_sequence(word_ids):
    assert parse_query_line(json.dumps("q9:nothing known here"), word_ids) == []

def test_trailing_colon_gives_empty_sequence(word_ids):
    assert parse_query_line(json.dumps("red car:"), word_ids) == []

def test_repeated_words_keep_order(word_ids):
    assert parse_query_line(json.dumps("car red car"), word_ids) == [1, 0, 1]

def test_any_whitespace_separates(word_ids):
    assert parse_query_line(json.dumps("x:red\tcar\n  blue"), word_ids) == [0, 1, 2]

def test_unicode_whitespace_separates(word_ids):
    assert parse_query_line(json.dumps("x:red car blue\u0085bike"), word_ids) == [0, 1, 2, 3]

def test_information_separators_do_not_split(word_ids):
    """\\x1c-\\x1f are not Unicode White_Space, so 'red\\x1fcar' is one unknown word."""
    assert parse_query_line(json.dumps("q:red\x1fcar"), word_ids) == []
    assert parse_query_line(json.dumps("q:red\x1cblue car"), word_ids) == [1]

def test_empty_word_in_vocabulary_never_matches_padding():
    word_ids = {"": 0, "red": 1}
    assert parse_query_line(json.dumps("q:  red  "), word_ids) == [1]

def test_parse_file_one_sequence_per_line(word_ids):
    lines = ["1:red car", "2:unknown", "3:blue bike fast"]
    stream = io.BytesIO("".join(json.dumps(l) + "\n" for l in lines).encode("utf-8"))
    queries = parse_file(stream, word_ids)
    assert len(queries) == 3
    assert [list(q) for q in queries] == [[0, 1], [], [2, 3, 4]]

def test_parse_file_accepts_text_streams(word_ids):
    stream = io.StringIO(json.dumps("a:red") + "\n" + json.dumps("b:car") + "\n")
    assert [list(q) for q in parse_file(stream, word_ids)] == [[0], [1]]

def test_empty_stream(word_ids):
    assert len(parse_file(io.BytesIO(b""), word_ids)) == 0

def test_malformed_line_is_fatal(word_ids):
    stream = io.BytesIO(b'"ok:red"\nnot json\n')
    with pytest.raises(QueryFormatError, match="part-0:2"):
        parse_file(stream, word_ids, name="part-0")

def test_non_string_line_is_fatal(word_ids):
    stream = io.BytesIO(b'["red"]\n')
    with pytest.raises(QueryFormatError):
        parse_file(stream, word_ids)
