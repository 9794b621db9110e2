"""
neschr CLI — CHR-ROM extraction and reinsertion for iNES images.

Commands:
  neschr info     - Show header fields and CHR region coordinates
  neschr extract  - Write the CHR region of a ROM to a .chr file
  neschr insert   - Rebuild a ROM with new CHR data
"""

from __future__ import annotations

import argparse
import logging
import os
import stat
import sys
import tempfile
from pathlib import Path
from typing import Callable, NoReturn

from neschr import DEFAULT_LOG_LEVEL, LOG_LEVEL_ENV, __version__
from neschr._format.errors import ChrFormatError
from neschr._format.layout import CHR_EXTENSION, ROM_EXTENSION

logger = logging.getLogger(__name__)


def _configure_logging(verbose: int) -> None:
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.getLevelName(os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper())
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


def _target_mode(path: str | Path) -> int:
    """Permission bits the output should carry: the existing file's, else 0666 minus umask."""
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _write_atomic(path: str | Path, produce: Callable) -> int:
    """Stream output into a temp file next to ``path``, then rename over it.

    ``produce`` receives the open temp file. If it raises, the temp file is
    removed and ``path`` is left untouched. Returns bytes written.
    """
    dir_name = os.path.dirname(os.path.abspath(path)) or "."
    fd, tmp_path = tempfile.mkstemp(dir=dir_name, suffix=".neschr.tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            produce(f)
            f.flush()
            os.fsync(f.fileno())
            size = f.tell()
        os.chmod(tmp_path, _target_mode(path))
        os.replace(tmp_path, path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
    return size


def _fail(message: str) -> NoReturn:
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def cmd_info(args: argparse.Namespace) -> None:
    """Show where the CHR region sits inside a ROM."""
    from neschr.rom import read_layout

    try:
        with open(args.rom, "rb") as rom:
            layout = read_layout(rom)
    except (ChrFormatError, OSError) as e:
        _fail(str(e))

    print(f"{args.rom}")
    if not layout.is_headered:
        print("  format:    raw CHR (no iNES header)")
        print(f"  size:      {layout.total_size} bytes ({layout.tile_count} tiles)")
        return
    print("  format:    iNES")
    print(f"  PRG banks: {layout.prg_banks} x 16 KiB")
    print(f"  CHR banks: {layout.chr_banks} x 8 KiB")
    print(f"  trainer:   {'yes' if layout.has_trainer else 'no'}")
    print(f"  CHR:       offset {layout.offset} (0x{layout.offset:X}), "
          f"length {layout.length}, {layout.tile_count} tiles")
    print(f"  trailing:  {layout.remainder} bytes")
    print(f"  total:     {layout.total_size} bytes")


def cmd_extract(args: argparse.Namespace) -> None:
    """Extract CHR data from a ROM."""
    from neschr.rom import extract_chr

    output = args.output or str(Path(args.rom).with_suffix(CHR_EXTENSION))
    if os.path.abspath(output) == os.path.abspath(args.rom):
        _fail("Output path must differ from the input ROM")

    try:
        with open(args.rom, "rb") as rom:
            nbytes = _write_atomic(output, lambda out: extract_chr(rom, out))
    except (ChrFormatError, OSError) as e:
        _fail(str(e))

    print(f"Extracted -> {output} ({nbytes} bytes)")


def cmd_insert(args: argparse.Namespace) -> None:
    """Insert CHR data into a ROM, writing a rebuilt ROM."""
    from neschr.rom import replace_chr

    if args.in_place and args.output:
        _fail("--in-place and --output are mutually exclusive")
    if args.in_place:
        output = args.rom
    else:
        output = args.output or str(Path(args.rom).with_name(Path(args.rom).stem + "-new" + ROM_EXTENSION))

    try:
        with open(args.rom, "rb") as rom, open(args.chr, "rb") as new_chr:
            nbytes = _write_atomic(output, lambda out: replace_chr(rom, new_chr, out))
    except (ChrFormatError, OSError) as e:
        _fail(str(e))

    print(f"Inserted {args.chr} -> {output} ({nbytes} bytes)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="neschr",
        description="Extract and re-insert CHR-ROM data in iNES (.nes) images",
    )
    parser.add_argument("--version", action="version", version=f"neschr {__version__}")
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help=f"More logging (-v info, -vv debug; or set {LOG_LEVEL_ENV})",
    )
    sub = parser.add_subparsers(dest="command")

    p_info = sub.add_parser("info", help="Show header fields and CHR region")
    p_info.add_argument("rom", help="Path to .nes file")

    p_extract = sub.add_parser("extract", help="Extract CHR data to a file")
    p_extract.add_argument("rom", help="Path to .nes file (headerless input is copied whole)")
    p_extract.add_argument("-o", "--output", help="Output .chr path (default: ROM name with .chr)")

    p_insert = sub.add_parser("insert", help="Insert CHR data into a ROM")
    p_insert.add_argument("rom", help="Path to original .nes file")
    p_insert.add_argument("chr", help="Path to new CHR data (must match CHR-ROM size)")
    p_insert.add_argument("-o", "--output", help="Output .nes path (default: <rom>-new.nes)")
    p_insert.add_argument("--in-place", action="store_true", help="Atomically replace the original ROM")

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if not args.command:
        print("neschr — NES CHR-ROM extract / insert")
        print()
        print("Usage:")
        print("  neschr info game.nes")
        print("  neschr extract game.nes -o game.chr")
        print("  neschr insert game.nes edited.chr -o patched.nes")
        print("  neschr insert game.nes edited.chr --in-place")
        print()
        print("Run 'neschr <command> --help' for details on any command.")
        sys.exit(0)

    commands = {
        "info": cmd_info,
        "extract": cmd_extract,
        "insert": cmd_insert,
    }

    commands[args.command](args)


if __name__ == "__main__":
    main()
