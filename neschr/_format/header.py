"""
Header parser — locates the CHR region inside an iNES image.

The header is re-read on every call. Nothing about a container is cached
between operations.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import BinaryIO

from neschr._format.errors import (
    ContainerTooSmallError,
    FormatTooShortError,
    NoExtractableRegionError,
)
from neschr._format.layout import (
    CHR_BANKS_OFFSET,
    FLAGS6_OFFSET,
    HEADER_SIZE,
    MAGIC,
    PRG_BANKS_OFFSET,
    TILE_SIZE,
    TRAINER_FLAG,
    region_length,
    region_offset,
)
from neschr._format.streams import require_seekable, stream_length

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChrLayout:
    """Coordinates of the CHR region within a container.

    For a raw (headerless) container the whole byte sequence is the region:
    ``offset`` is 0 and ``length`` equals ``total_size``.
    """

    is_headered: bool
    offset: int
    length: int
    total_size: int
    prg_banks: int = 0
    chr_banks: int = 0
    has_trainer: bool = False

    @property
    def end(self) -> int:
        return self.offset + self.length

    @property
    def tile_count(self) -> int:
        return self.length // TILE_SIZE

    @property
    def remainder(self) -> int:
        """Bytes following the region (may be zero)."""
        return self.total_size - self.end


def is_ines_bytes(data: bytes) -> bool:
    """Fast check if bytes start with the iNES magic."""
    return data[:len(MAGIC)] == MAGIC


def parse_header_bytes(header: bytes, total_size: int) -> ChrLayout:
    """Derive the region layout from the first 16 bytes and the container size."""
    if len(header) < HEADER_SIZE:
        raise FormatTooShortError(
            f"Not a valid iNES file (too small): {len(header)} bytes, need {HEADER_SIZE}"
        )

    if not is_ines_bytes(header):
        return ChrLayout(
            is_headered=False,
            offset=0,
            length=total_size,
            total_size=total_size,
        )

    prg_banks = header[PRG_BANKS_OFFSET]
    chr_banks = header[CHR_BANKS_OFFSET]
    has_trainer = bool(header[FLAGS6_OFFSET] & TRAINER_FLAG)

    if chr_banks == 0:
        raise NoExtractableRegionError(
            "This ROM indicates CHR-RAM (no CHR-ROM present in the file)"
        )

    offset = region_offset(prg_banks, has_trainer)
    length = region_length(chr_banks)
    if offset + length > total_size:
        raise ContainerTooSmallError(
            f"ROM too small for claimed PRG/CHR sizes from header: "
            f"need {offset + length} bytes, have {total_size}"
        )

    return ChrLayout(
        is_headered=True,
        offset=offset,
        length=length,
        total_size=total_size,
        prg_banks=prg_banks,
        chr_banks=chr_banks,
        has_trainer=has_trainer,
    )


def parse_header(container: BinaryIO) -> ChrLayout:
    """Read and validate the header of a seekable container stream.

    Leaves the container positioned just after whatever header bytes were read.
    """
    require_seekable(container)
    total_size = stream_length(container)
    container.seek(0)
    header = container.read(HEADER_SIZE)

    layout = parse_header_bytes(header, total_size)
    if layout.is_headered:
        logger.debug(
            "iNES header: prg=%d chr=%d trainer=%s -> region [%d, %d) of %d",
            layout.prg_banks, layout.chr_banks, layout.has_trainer,
            layout.offset, layout.end, layout.total_size,
        )
    else:
        logger.debug("No iNES magic, treating %d bytes as raw CHR", total_size)
    return layout
