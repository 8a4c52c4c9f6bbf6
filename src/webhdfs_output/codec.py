"""
Payload compression and Snappy container framing.

Two Snappy layouts are produced, both byte-exact for downstream decoders:

Whole-file record (snappy_format "file")::

    [compressed_len: 4 bytes BE][compressed bytes]

Chunked container (snappy_format "stream")::

    [magic: 8 bytes][default_version: 4 bytes BE][min_compatible_version: 4 bytes BE]
    [uncompressed_len: 4 bytes BE][compressed_len: 4 bytes BE][compressed bytes]
    [uncompressed_len: 4 bytes BE][compressed_len: 4 bytes BE][compressed bytes]
    ...

The 16-byte header is written once per file, before the first chunk, by
whoever creates the file (see WebHdfsOutput.write). Chunk records are
independent Snappy blocks so a reader can decompress them one at a time.

Every function here is pure and works on caller-owned buffers only, so
concurrent calls from worker threads are safe.
"""

import gzip
import struct
from collections.abc import Iterator
from enum import Enum

from core.errors.exceptions import ConfigurationError

# Container header constants (part of the wire contract, do not change)
SNAPPY_MAGIC = b"\x82SNAPPY\x00"
SNAPPY_DEFAULT_VERSION = 1
SNAPPY_MINIMUM_COMPATIBLE_VERSION = 1
SNAPPY_HEADER_SIZE = 16

DEFAULT_SNAPPY_BUFSIZE = 32768

_HEADER_STRUCT = struct.Struct(">8sII")
_LENGTH_STRUCT = struct.Struct(">I")
_CHUNK_STRUCT = struct.Struct(">II")


class CompressionMode(str, Enum):
    """Payload compression selected at configuration time."""

    NONE = "none"
    GZIP = "gzip"
    SNAPPY = "snappy"


class SnappyFormat(str, Enum):
    """Snappy layout: chunked container or single whole-file record."""

    STREAM = "stream"
    FILE = "file"


FILE_EXTENSIONS = {
    CompressionMode.NONE: "",
    CompressionMode.GZIP: ".gz",
    CompressionMode.SNAPPY: ".snappy",
}


def _snappy():
    # Resolved on use; WebHdfsOutput.start() fails fast if it is missing
    import snappy

    return snappy


def to_binary(data: bytes | bytearray | memoryview | str) -> bytes:
    """
    Normalize input to a raw byte sequence.

    Text is encoded as UTF-8 with unencodable code points (lone surrogates)
    replaced by b"?"; this never raises on malformed text.
    """
    if isinstance(data, bytes):
        return data
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    if isinstance(data, str):
        return data.encode("utf-8", errors="replace")
    raise TypeError(f"Expected bytes or str, got {type(data).__name__}")


def compress_gzip(data: bytes | str) -> bytes:
    """
    Compress a whole buffer with gzip.

    Args:
        data: Buffer to compress

    Returns:
        A single gzip member containing data
    """
    return gzip.compress(to_binary(data))


def compress_snappy_file(data: bytes | str) -> bytes:
    """
    Compress a whole buffer with Snappy in one shot.

    Returns:
        4-byte big-endian compressed length followed by the compressed bytes
    """
    compressed = _snappy().compress(to_binary(data))
    return _LENGTH_STRUCT.pack(len(compressed)) + compressed


def _validate_chunk_size(chunk_size: int) -> None:
    if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size <= 0:
        raise ConfigurationError(
            f"Snappy chunk size must be a positive integer, got {chunk_size!r}",
            context={"chunk_size": chunk_size},
        )


def iter_snappy_chunks(data: bytes | str, chunk_size: int) -> Iterator[bytes]:
    """
    Yield one framed chunk record per chunk_size bytes of input.

    Args:
        data: Buffer to compress
        chunk_size: Maximum uncompressed bytes per chunk

    Raises:
        ConfigurationError: If chunk_size is not a positive integer
    """
    _validate_chunk_size(chunk_size)
    return _iter_chunks(to_binary(data), chunk_size)


def _iter_chunks(raw: bytes, chunk_size: int) -> Iterator[bytes]:
    compress = _snappy().compress
    view = memoryview(raw)
    for offset in range(0, len(raw), chunk_size):
        chunk = bytes(view[offset:offset + chunk_size])
        compressed = compress(chunk)
        yield _CHUNK_STRUCT.pack(len(chunk), len(compressed)) + compressed


def compress_snappy_stream(data: bytes | str, chunk_size: int = DEFAULT_SNAPPY_BUFSIZE) -> bytes:
    """
    Compress a buffer as a sequence of independently compressed chunks.

    The container header is not included; see snappy_header().

    Args:
        data: Buffer to compress
        chunk_size: Maximum uncompressed bytes per chunk

    Returns:
        Concatenated chunk records, empty for empty input

    Raises:
        ConfigurationError: If chunk_size is not a positive integer
    """
    return b"".join(iter_snappy_chunks(data, chunk_size))


def snappy_header() -> bytes:
    """Return the 16-byte Snappy container header."""
    return _HEADER_STRUCT.pack(
        SNAPPY_MAGIC, SNAPPY_DEFAULT_VERSION, SNAPPY_MINIMUM_COMPATIBLE_VERSION
    )


def compress(
    data: bytes | str,
    mode: CompressionMode | str = CompressionMode.NONE,
    chunk_size: int | None = None,
    snappy_format: SnappyFormat | str = SnappyFormat.STREAM,
) -> bytes:
    """
    Encode a payload according to the configured compression mode.

    Args:
        data: Payload for one write
        mode: "none", "gzip" or "snappy"
        chunk_size: Chunk bound for snappy "stream" (default 32768)
        snappy_format: "stream" (chunked) or "file" (whole-file record)

    Returns:
        Encoded payload (without the container header)

    Raises:
        ConfigurationError: On an unknown mode/format or invalid chunk size
    """
    mode = _coerce(CompressionMode, mode, "compression")

    if mode is CompressionMode.NONE:
        return to_binary(data)
    if mode is CompressionMode.GZIP:
        return compress_gzip(data)

    snappy_format = _coerce(SnappyFormat, snappy_format, "snappy_format")
    if snappy_format is SnappyFormat.FILE:
        return compress_snappy_file(data)
    return compress_snappy_stream(
        data, DEFAULT_SNAPPY_BUFSIZE if chunk_size is None else chunk_size
    )


def file_extension(mode: CompressionMode | str) -> str:
    """Extension appended to destination paths for mode."""
    return FILE_EXTENSIONS[_coerce(CompressionMode, mode, "compression")]


def _coerce(enum_cls, value, name: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ConfigurationError(
            f"Invalid {name} {value!r}, expected one of: {allowed}"
        ) from None


__all__ = [
    "CompressionMode",
    "SnappyFormat",
    "SNAPPY_MAGIC",
    "SNAPPY_DEFAULT_VERSION",
    "SNAPPY_MINIMUM_COMPATIBLE_VERSION",
    "SNAPPY_HEADER_SIZE",
    "DEFAULT_SNAPPY_BUFSIZE",
    "to_binary",
    "compress_gzip",
    "compress_snappy_file",
    "compress_snappy_stream",
    "iter_snappy_chunks",
    "snappy_header",
    "compress",
    "file_extension",
]
