"""
CHR operations over iNES ROM streams.

    extract_chr(rom, out)            — header parse, then region copy
    replace_chr(rom, new_chr, out)   — header parse, then splice

Both take caller-owned binary streams. The ROM stream must be seekable; wrap a
pipe or socket in ``io.BytesIO`` first. The output stream is flushed but never
closed.

If ``replace_chr`` raises, anything already written to ``out`` is garbage and
must be discarded.
"""

from __future__ import annotations

import io
import logging
from typing import BinaryIO

from neschr._format.errors import MissingHandleError
from neschr._format.header import ChrLayout, parse_header
from neschr._format.reader import extract_region
from neschr._format.streams import BytesLike
from neschr._format.writer import replace_region

logger = logging.getLogger(__name__)


def _require(handle: object, what: str) -> None:
    if handle is None:
        raise MissingHandleError(f"{what} is required")


def read_layout(rom: BinaryIO) -> ChrLayout:
    """Parse the header of ``rom`` and return the CHR region coordinates."""
    _require(rom, "Source ROM stream")
    return parse_header(rom)


def extract_chr(rom: BinaryIO, out: BinaryIO) -> ChrLayout:
    """Copy the CHR region of ``rom`` into ``out``.

    Headerless input is copied whole. Returns the layout that was used.
    """
    _require(rom, "Source ROM stream")
    _require(out, "Destination stream")

    layout = parse_header(rom)
    written = extract_region(rom, layout, out)
    out.flush()
    logger.info("Extracted %d bytes of CHR (%d tiles)", written, layout.tile_count)
    return layout


def replace_chr(rom: BinaryIO, new_chr: BytesLike | BinaryIO, out: BinaryIO) -> ChrLayout:
    """Write ``rom`` with its CHR region replaced by ``new_chr`` into ``out``.

    ``new_chr`` must be exactly as long as the existing region. Returns the
    layout that was used.
    """
    _require(rom, "Source ROM stream")
    _require(new_chr, "New CHR data")
    _require(out, "Destination stream")

    layout = parse_header(rom)
    written = replace_region(rom, layout, new_chr, out)
    out.flush()
    logger.info(
        "Replaced %d bytes of CHR at offset %d (%d bytes written)",
        layout.length, layout.offset, written,
    )
    return layout


def extract_chr_bytes(data: BytesLike) -> bytes:
    """In-memory form of :func:`extract_chr`."""
    out = io.BytesIO()
    extract_chr(io.BytesIO(bytes(data)), out)
    return out.getvalue()


def replace_chr_bytes(data: BytesLike, new_chr: BytesLike | BinaryIO) -> bytes:
    """In-memory form of :func:`replace_chr`. Does not mutate ``data``."""
    out = io.BytesIO()
    replace_chr(io.BytesIO(bytes(data)), new_chr, out)
    return out.getvalue()
