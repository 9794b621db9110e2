"""
Internal container engine for iNES images.

Locates the CHR-ROM region from the 16-byte header, copies it out, and splices
replacement data back in without touching any other byte. This is an internal
dependency, use ``neschr.rom`` for the public operations.

Format: iNES (magic "NES\\x1A"), or a headerless raw CHR dump.
"""

from neschr._format.layout import MAGIC, HEADER_SIZE, TRAINER_SIZE, PRG_BANK_SIZE, CHR_BANK_SIZE
from neschr._format.errors import ChrFormatError
from neschr._format.header import ChrLayout, parse_header, parse_header_bytes
from neschr._format.reader import extract_region
from neschr._format.writer import replace_region
