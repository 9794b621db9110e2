"""
iNES Container Layout.

Layout:
    +0      4 bytes   Magic "NES\\x1A"
    +4      1 byte    PRG-ROM size, 16 KiB units
    +5      1 byte    CHR-ROM size, 8 KiB units (0 = CHR-RAM, nothing to extract)
    +6      1 byte    Flags 6 (bit 2 = 512-byte trainer present)
    +7..15            Remaining header bytes (never touched)
    +16               Trainer (512 bytes, only if flag set)
    ...               PRG-ROM (prg_banks * 16384)
    ...               CHR-ROM (chr_banks * 8192)   <- the region
    ...               Trailing remainder (PlayChoice data, padding, etc.), may be empty

Headerless input (no magic) is treated as a raw CHR dump: the whole file is
the region.
"""

# Magic bytes - first four bytes of every iNES image
MAGIC = b"NES\x1a"

HEADER_SIZE = 16
TRAINER_SIZE = 512

# Bank units
PRG_BANK_SIZE = 16 * 1024
CHR_BANK_SIZE = 8 * 1024

# Header field positions
PRG_BANKS_OFFSET = 4
CHR_BANKS_OFFSET = 5
FLAGS6_OFFSET = 6
TRAINER_FLAG = 0x04

# 2bpp tile: 8 bytes plane 0 followed by 8 bytes plane 1
TILE_SIZE = 16

# Bounded copy chunk
COPY_CHUNK_SIZE = 8192

# File extensions
ROM_EXTENSION = ".nes"
CHR_EXTENSION = ".chr"


def region_offset(prg_banks: int, has_trainer: bool) -> int:
    """Byte offset of the CHR region for the given header fields."""
    return HEADER_SIZE + (TRAINER_SIZE if has_trainer else 0) + prg_banks * PRG_BANK_SIZE


def region_length(chr_banks: int) -> int:
    """Byte length of the CHR region for the given bank count."""
    return chr_banks * CHR_BANK_SIZE
