from __future__ import annotations

import zlib
from typing import Optional

from .constants import DEFAULT_COMPRESSION_LEVEL, GZIP_WBITS
from .errors import CorruptCompressedStream


class Codec:
    """gzip transform applied to asset content before sealing.

    ``decompress(compress(x)) == x`` for any ``x`` including ``b""``. Output
    may be larger than the input for incompressible data.
    """

    def __init__(self, level: Optional[int] = None):
        level = DEFAULT_COMPRESSION_LEVEL if level is None else level
        if not 0 <= level <= 9:
            raise ValueError(f"compression level must be 0-9, got {level}")
        self.level = level

    def compress(self, data: bytes) -> bytes:
        c = zlib.compressobj(self.level, zlib.DEFLATED, GZIP_WBITS)
        return c.compress(data) + c.flush()

    def decompress(self, data: bytes) -> bytes:
        d = zlib.decompressobj(GZIP_WBITS)
        try:
            out = d.decompress(data) + d.flush()
        except zlib.error as e:
            raise CorruptCompressedStream(f"gzip decompression failed: {e}") from e
        if not d.eof:
            raise CorruptCompressedStream("gzip stream is truncated")
        if d.unused_data:
            raise CorruptCompressedStream(f"{len(d.unused_data)} trailing bytes after gzip stream")
        return out
