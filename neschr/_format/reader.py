"""
Reader — copies the CHR region out of a container.

The source is read-only in this path. On success it is left at end-of-stream.
"""

from __future__ import annotations

import io
import logging
from typing import BinaryIO

from neschr._format.header import ChrLayout
from neschr._format.layout import COPY_CHUNK_SIZE
from neschr._format.streams import copy_exact, copy_to_end

logger = logging.getLogger(__name__)


def extract_region(
    container: BinaryIO,
    layout: ChrLayout,
    sink: BinaryIO,
    chunk_size: int = COPY_CHUNK_SIZE,
) -> int:
    """Write exactly the region bytes described by ``layout`` to ``sink``.

    Raw layouts are a straight passthrough of the whole container.
    Returns the number of bytes written.
    """
    if not layout.is_headered:
        container.seek(0)
        written = copy_to_end(container, sink, chunk_size)
        logger.debug("Raw passthrough: copied %d bytes", written)
        return written

    container.seek(layout.offset)
    written = copy_exact(container, sink, layout.length, chunk_size)
    container.seek(0, io.SEEK_END)
    logger.debug("Extracted %d CHR bytes from offset %d", written, layout.offset)
    return written
