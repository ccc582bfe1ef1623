# core/preprocessing/query_vec.py
"""
Query Dataset Container
=======================
Ordered collection of token-id sequences, one per query, plus its
binary on-disk format.

File Structure
--------------

[Header: 24 bytes]
    Offset  Type     Description
    0       char[4]  Magic bytes: "QVEC"
    4       uint32   Format version (currently 1)
    8       uint64   Number of queries (N)
    16      uint64   Total number of token ids (T)

[Offsets: (N + 1) * 8 bytes]
    uint64 start of each query in the token section; offsets[N] == T.

[Tokens: T * 4 bytes]
    uint32 token ids, queries concatenated in order.

All integers are little-endian. A loaded QueryVec is a zero-copy view of
the buffer it was loaded from (typically a read-only mmap).
"""
import struct
import numpy as np
from array import array
from typing import Iterable, Iterator, Tuple

class QueryVecFormatError(Exception):
    pass

class QueryVec:
    """Token-id sequences; growable when built, read-only when loaded.

    A built QueryVec stores offsets and tokens in compact array.array
    buffers (uint64 / uint32), so it pickles and merges without
    per-element Python objects.
    """

    HEADER_FORMAT = "<4sIQQ"
    HEADER_SIZE = 24
    MAGIC = b"QVEC"
    VERSION = 1
    OFFSET_DTYPE = np.dtype("<u8")
    TOKEN_DTYPE = np.dtype("<u4")

    def __init__(self):
        self._offsets = array("Q", [0])
        self._tokens = array("I")
        self._readonly = False

    @classmethod
    def load(cls, buffer) -> "QueryVec":
        """Wrap a buffer produced by write() without copying it."""
        size = len(buffer)
        if size < cls.HEADER_SIZE:
            raise QueryVecFormatError(f"Query dataset too small: {size} bytes")

        magic, version, count, total_tokens = struct.unpack(
            cls.HEADER_FORMAT, buffer[:cls.HEADER_SIZE]
        )
        if magic != cls.MAGIC:
            raise QueryVecFormatError(f"Invalid query dataset magic: {magic!r}")
        if version != cls.VERSION:
            raise QueryVecFormatError(f"Unsupported query dataset version: {version}")

        tokens_start = cls.HEADER_SIZE + (count + 1) * cls.OFFSET_DTYPE.itemsize
        expected_size = tokens_start + total_tokens * cls.TOKEN_DTYPE.itemsize
        if size != expected_size:
            raise QueryVecFormatError(
                f"Query dataset size {size} != expected {expected_size} "
                f"({count:,} queries, {total_tokens:,} tokens)"
            )

        # Validate before creating any view so a failed load leaves the buffer unexported
        first_offset = struct.unpack_from("<Q", buffer, cls.HEADER_SIZE)[0]
        last_offset = struct.unpack_from("<Q", buffer, tokens_start - cls.OFFSET_DTYPE.itemsize)[0]
        if first_offset != 0 or last_offset != total_tokens:
            raise QueryVecFormatError("Query dataset offsets do not span the token section")

        queries = cls.__new__(cls)
        queries._offsets = np.frombuffer(
            buffer, dtype=cls.OFFSET_DTYPE, count=count + 1, offset=cls.HEADER_SIZE
        )
        if total_tokens:
            queries._tokens = np.frombuffer(
                buffer, dtype=cls.TOKEN_DTYPE, count=total_tokens, offset=tokens_start
            )
        else:
            queries._tokens = np.empty(0, dtype=cls.TOKEN_DTYPE)
        queries._readonly = True
        return queries

    @classmethod
    def from_arrays(cls, offsets: np.ndarray, tokens: np.ndarray) -> "QueryVec":
        """Rebuild a growable QueryVec from the pair returned by to_arrays()."""
        offsets = np.ascontiguousarray(offsets, dtype=np.uint64)
        tokens = np.ascontiguousarray(tokens, dtype=np.uint32)
        if offsets.size == 0 or offsets[0] != 0 or int(offsets[-1]) != tokens.size:
            raise QueryVecFormatError("Offsets do not span the token array")

        queries = cls()
        queries._offsets = array("Q", offsets.tobytes())
        queries._tokens = array("I", tokens.tobytes())
        return queries

    def to_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """Copies of (offsets, tokens) as uint64 / uint32 numpy arrays."""
        return np.array(self._offsets, dtype=np.uint64), np.array(self._tokens, dtype=np.uint32)

    def __len__(self):
        return len(self._offsets) - 1

    def __getitem__(self, i):
        if i < 0:
            i += len(self)
        if not 0 <= i < len(self):
            raise IndexError(f"Query index {i} out of range for {len(self)} queries")
        start, end = int(self._offsets[i]), int(self._offsets[i + 1])
        return self._tokens[start:end]

    def __iter__(self) -> Iterator:
        for i in range(len(self)):
            yield self[i]

    @property
    def total_tokens(self) -> int:
        return int(self._offsets[-1])

    def _check_writable(self):
        if self._readonly:
            raise TypeError("QueryVec loaded from a buffer is read-only")

    def push(self, token_ids: Iterable[int]):
        """Append one query's token ids."""
        self._check_writable()
        self._tokens.extend(token_ids)
        self._offsets.append(len(self._tokens))

    def extend_from_queryvec(self, other: "QueryVec"):
        """Append every query of other, keeping its order. other may be self."""
        self._check_writable()
        base = len(self._tokens)
        # Snapshot first; other may share these buffers
        tokens = np.array(other._tokens, dtype=np.uint32)
        offsets = np.array(other._offsets[1:], dtype=np.uint64) + np.uint64(base)
        self._tokens.frombytes(tokens.tobytes())
        self._offsets.frombytes(offsets.tobytes())

    def write(self, f):
        """Stream header, offsets and tokens to a binary file object."""
        count = len(self)
        total_tokens = self.total_tokens
        f.write(struct.pack(self.HEADER_FORMAT, self.MAGIC, self.VERSION, count, total_tokens))
        f.write(np.array(self._offsets, dtype=self.OFFSET_DTYPE).tobytes())
        f.write(np.array(self._tokens, dtype=self.TOKEN_DTYPE).tobytes())
