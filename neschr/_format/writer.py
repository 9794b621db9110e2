"""
Writer — splices new CHR data into a container.

Three-part assembly, all streamed to the sink:
  1. Bytes before the region, copied verbatim
  2. The replacement region
  3. The trailing remainder, copied verbatim (may be empty)

The input container is never mutated. Every check runs before the first byte
reaches the sink, but a failure during copying can leave a partial sink; callers
must discard the sink on any exception.
"""

from __future__ import annotations

import logging
from typing import BinaryIO

from neschr._format.errors import NotHeaderedError, RegionSizeMismatchError
from neschr._format.header import ChrLayout
from neschr._format.layout import COPY_CHUNK_SIZE
from neschr._format.streams import BytesLike, copy_exact, open_region_source

logger = logging.getLogger(__name__)


def replace_region(
    container: BinaryIO,
    layout: ChrLayout,
    new_region: BytesLike | BinaryIO,
    sink: BinaryIO,
    chunk_size: int = COPY_CHUNK_SIZE,
) -> int:
    """Write a rebuilt container with ``new_region`` in place of the old region.

    Returns the number of bytes written, always ``layout.total_size``.
    """
    if not layout.is_headered:
        raise NotHeaderedError(
            "Replacing CHR requires an iNES ROM with header; "
            "a raw CHR file must be replaced as a whole"
        )

    region, region_len = open_region_source(new_region)
    if region_len != layout.length:
        raise RegionSizeMismatchError(expected=layout.length, actual=region_len)

    container.seek(0)
    written = copy_exact(container, sink, layout.offset, chunk_size)
    written += copy_exact(region, sink, region_len, chunk_size)
    container.seek(layout.end)
    written += copy_exact(container, sink, layout.remainder, chunk_size)

    logger.debug(
        "Rebuilt ROM: %d prefix + %d CHR + %d remainder bytes",
        layout.offset, region_len, layout.remainder,
    )
    return written
