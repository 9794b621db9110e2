"""
Byte-copy helpers shared by the reader and writer.

All helpers work on caller-owned binary streams and never close them.
"""

from __future__ import annotations

import io
from typing import BinaryIO, Union

from neschr._format.errors import UnexpectedEOFError, UnseekableSourceError
from neschr._format.layout import COPY_CHUNK_SIZE

BytesLike = Union[bytes, bytearray, memoryview]


def is_seekable(stream: BinaryIO) -> bool:
    probe = getattr(stream, "seekable", None)
    return bool(probe and probe())


def require_seekable(stream: BinaryIO, what: str = "Source ROM stream") -> None:
    """Raise UnseekableSourceError unless ``stream`` supports random access."""
    if not is_seekable(stream):
        raise UnseekableSourceError(
            f"{what} must support seeking; buffer it (e.g. io.BytesIO) before calling"
        )


def stream_length(stream: BinaryIO) -> int:
    """Total length of a seekable stream. Leaves the stream at end-of-stream."""
    return stream.seek(0, io.SEEK_END)


def copy_exact(
    src: BinaryIO,
    dst: BinaryIO,
    count: int,
    chunk_size: int = COPY_CHUNK_SIZE,
) -> int:
    """Copy exactly ``count`` bytes from ``src`` to ``dst`` in bounded chunks.

    A short read is always an error here, never a silent end of region.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    remaining = count
    while remaining > 0:
        want = min(chunk_size, remaining)
        chunk = src.read(want)
        if not chunk or len(chunk) < want:
            got = count - remaining + len(chunk or b"")
            raise UnexpectedEOFError(
                f"Unexpected end of stream while copying: got {got} of {count} bytes"
            )
        dst.write(chunk)
        remaining -= want
    return count


def copy_to_end(src: BinaryIO, dst: BinaryIO, chunk_size: int = COPY_CHUNK_SIZE) -> int:
    """Copy everything from the current position of ``src``. Returns bytes copied."""
    total = 0
    while True:
        chunk = src.read(chunk_size)
        if not chunk:
            return total
        dst.write(chunk)
        total += len(chunk)


def open_region_source(new_region: BytesLike | BinaryIO) -> tuple[BinaryIO, int]:
    """Return ``(seekable_stream, length)`` for replacement data.

    Bytes-like input is wrapped; a non-seekable stream is read fully into
    memory once so its exact length is known before the size check.
    The returned stream is positioned at 0.
    """
    if isinstance(new_region, (bytes, bytearray, memoryview)):
        data = bytes(new_region)
        return io.BytesIO(data), len(data)

    if not hasattr(new_region, "read"):
        raise TypeError(
            f"Replacement CHR data must be bytes-like or a readable stream, "
            f"got {type(new_region).__name__}"
        )

    if not is_seekable(new_region):
        buf = io.BytesIO(new_region.read())
        return buf, len(buf.getbuffer())

    length = stream_length(new_region)
    new_region.seek(0)
    return new_region, length
