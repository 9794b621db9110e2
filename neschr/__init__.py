"""
neschr — extract and re-insert NES CHR-ROM tile data in iNES cartridge images.

Architecture:
    Header:   first 16 bytes of the .nes file -> PRG/CHR bank counts, trainer flag
    Region:   offset = 16 + trainer + PRG size, length = CHR banks * 8 KiB
    Bridge:   neschr extract / neschr insert CLI commands, ChrPlugin for editor hosts

Bytes are moved, never interpreted: tile planes stay opaque.
"""

__version__ = "0.1.0"

# Editor plugin constants
PLUGIN_NAME = "NES iNES CHR extractor"
PLUGIN_NEW_CHR_KEYS = ("NewChr", "newChr", "new_chr")
PLUGIN_NEW_CHR_ATTRS = ("new_chr", "new_data")

# CLI constants
LOG_LEVEL_ENV = "NESCHR_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"
