"""Per-write compression decision.

Small payloads are never compressed, and compression is kept only when it
strictly shrinks the payload. Decompression on read is driven by the stored
flag alone.
"""

import gzip
from dataclasses import dataclass

from sqlcache.consts import COMPRESSION_LEVEL, COMPRESSION_MIN_LENGTH


@dataclass(frozen=True)
class CompressionResult:
    """Bytes to store and whether they are compressed."""

    payload: bytes
    compressed: bool


def decide_compression(
    requested: bool,
    payload: bytes,
    min_length: int = COMPRESSION_MIN_LENGTH,
) -> CompressionResult:
    """Decide whether to store a serialized payload compressed.

    Args:
        requested: Whether compression was asked for.
        payload: Serialized value.
        min_length: Payloads shorter than this are stored as-is.

    Returns:
        The original payload uncompressed, or its gzip form if that is
        strictly smaller.
    """
    if not requested or len(payload) < min_length:
        return CompressionResult(payload, False)

    packed = gzip.compress(payload, compresslevel=COMPRESSION_LEVEL, mtime=0)
    if len(packed) >= len(payload):
        return CompressionResult(payload, False)
    return CompressionResult(packed, True)


def decompress(payload: bytes) -> bytes:
    """Reverse a compression applied by decide_compression()."""
    return gzip.decompress(payload)
