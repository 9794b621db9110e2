"""
Tests for the neschr CLI — cli.py.

Commands run in-process against ROM files in tmp_path.
"""

from __future__ import annotations

import logging
import os
import stat

import pytest

from neschr._format.layout import CHR_BANK_SIZE, MAGIC, PRG_BANK_SIZE
from neschr.cli import _write_atomic, build_parser, main


def _rom(chr_fill: int = 0x11, trailing: bytes = b"") -> bytes:
    header = MAGIC + bytes([1, 1, 0, 0]) + bytes(8)
    return header + b"\x22" * PRG_BANK_SIZE + bytes([chr_fill]) * CHR_BANK_SIZE + trailing


@pytest.fixture
def rom_path(tmp_path):
    path = tmp_path / "game.nes"
    path.write_bytes(_rom(trailing=b"END"))
    return path


@pytest.fixture
def chr_path(tmp_path):
    path = tmp_path / "edited.chr"
    path.write_bytes(b"\x77" * CHR_BANK_SIZE)
    return path


# ---------------------------------------------------------------------------
# TestCliExtract
# ---------------------------------------------------------------------------

class TestCliExtract:

    def test_extract(self, rom_path, tmp_path, capsys):
        out = tmp_path / "out.chr"
        main(["extract", str(rom_path), "-o", str(out)])
        assert out.read_bytes() == b"\x11" * CHR_BANK_SIZE
        assert "Extracted" in capsys.readouterr().out

    def test_extract_default_output(self, rom_path, tmp_path):
        main(["extract", str(rom_path)])
        assert (tmp_path / "game.chr").read_bytes() == b"\x11" * CHR_BANK_SIZE

    def test_extract_raw(self, tmp_path):
        raw = tmp_path / "tiles.bin"
        raw.write_bytes(b"\x05" * 100)
        out = tmp_path / "tiles.chr"
        main(["extract", str(raw), "-o", str(out)])
        assert out.read_bytes() == b"\x05" * 100

    def test_extract_chr_ram(self, tmp_path, capsys):
        rom = tmp_path / "chrram.nes"
        rom.write_bytes(MAGIC + bytes([1, 0, 0, 0]) + bytes(8) + bytes(PRG_BANK_SIZE))
        out = tmp_path / "out.chr"
        with pytest.raises(SystemExit) as exc:
            main(["extract", str(rom), "-o", str(out)])
        assert exc.value.code == 1
        assert "CHR-RAM" in capsys.readouterr().err
        assert not out.exists()

    def test_extract_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["extract", str(tmp_path / "nope.nes"), "-o", str(tmp_path / "x.chr")])
        assert exc.value.code == 1
        assert "Error:" in capsys.readouterr().err

    def test_extract_refuses_same_path(self, rom_path):
        with pytest.raises(SystemExit) as exc:
            main(["extract", str(rom_path), "-o", str(rom_path)])
        assert exc.value.code == 1


# ---------------------------------------------------------------------------
# TestCliInsert
# ---------------------------------------------------------------------------

class TestCliInsert:

    def test_insert(self, rom_path, chr_path, tmp_path):
        out = tmp_path / "patched.nes"
        main(["insert", str(rom_path), str(chr_path), "-o", str(out)])
        assert out.read_bytes() == _rom(chr_fill=0x77, trailing=b"END")
        assert rom_path.read_bytes() == _rom(trailing=b"END")

    def test_insert_default_output(self, rom_path, chr_path, tmp_path):
        main(["insert", str(rom_path), str(chr_path)])
        assert (tmp_path / "game-new.nes").read_bytes() == _rom(chr_fill=0x77, trailing=b"END")

    def test_insert_in_place(self, rom_path, chr_path):
        main(["insert", str(rom_path), str(chr_path), "--in-place"])
        assert rom_path.read_bytes() == _rom(chr_fill=0x77, trailing=b"END")

    def test_insert_in_place_keeps_mode(self, rom_path, chr_path):
        rom_path.chmod(0o644)
        main(["insert", str(rom_path), str(chr_path), "--in-place"])
        assert stat.S_IMODE(rom_path.stat().st_mode) == 0o644

    def test_new_output_follows_umask(self, rom_path, chr_path, tmp_path):
        out = tmp_path / "patched.nes"
        old = os.umask(0o022)
        try:
            main(["insert", str(rom_path), str(chr_path), "-o", str(out)])
            main(["extract", str(rom_path), "-o", str(tmp_path / "game.chr")])
        finally:
            os.umask(old)
        assert stat.S_IMODE(out.stat().st_mode) == 0o644
        assert stat.S_IMODE((tmp_path / "game.chr").stat().st_mode) == 0o644

    def test_insert_size_mismatch_leaves_nothing(self, rom_path, tmp_path, capsys):
        bad = tmp_path / "bad.chr"
        bad.write_bytes(b"\x00" * (CHR_BANK_SIZE - 1))
        out = tmp_path / "patched.nes"
        before = sorted(p.name for p in tmp_path.iterdir())

        with pytest.raises(SystemExit) as exc:
            main(["insert", str(rom_path), str(bad), "-o", str(out)])

        assert exc.value.code == 1
        assert "does not match" in capsys.readouterr().err
        assert sorted(p.name for p in tmp_path.iterdir()) == before

    def test_insert_in_place_failure_keeps_original(self, rom_path, tmp_path):
        bad = tmp_path / "bad.chr"
        bad.write_bytes(b"\x00" * 3)
        with pytest.raises(SystemExit):
            main(["insert", str(rom_path), str(bad), "--in-place"])
        assert rom_path.read_bytes() == _rom(trailing=b"END")

    def test_insert_raw_rom(self, tmp_path, chr_path, capsys):
        raw = tmp_path / "raw.bin"
        raw.write_bytes(b"\x00" * CHR_BANK_SIZE)
        with pytest.raises(SystemExit) as exc:
            main(["insert", str(raw), str(chr_path), "-o", str(tmp_path / "o.nes")])
        assert exc.value.code == 1
        assert "iNES" in capsys.readouterr().err

    def test_in_place_and_output_conflict(self, rom_path, chr_path, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(["insert", str(rom_path), str(chr_path), "--in-place", "-o", str(tmp_path / "x.nes")])
        assert exc.value.code == 1


# ---------------------------------------------------------------------------
# TestCliMisc
# ---------------------------------------------------------------------------

class TestCliMisc:

    def test_info(self, rom_path, capsys):
        main(["info", str(rom_path)])
        out = capsys.readouterr().out
        assert "iNES" in out
        assert "offset 16400 (0x4010)" in out
        assert "512 tiles" in out
        assert "trailing:  3 bytes" in out

    def test_info_raw(self, tmp_path, capsys):
        raw = tmp_path / "raw.chr"
        raw.write_bytes(b"\x00" * 64)
        main(["info", str(raw)])
        assert "raw CHR" in capsys.readouterr().out

    def test_info_too_short(self, tmp_path, capsys):
        tiny = tmp_path / "tiny.nes"
        tiny.write_bytes(b"NES")
        with pytest.raises(SystemExit) as exc:
            main(["info", str(tiny)])
        assert exc.value.code == 1
        assert "too small" in capsys.readouterr().err

    def test_no_command(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 0
        assert "Usage:" in capsys.readouterr().out

    def test_verbose_flag_parsed(self):
        args = build_parser().parse_args(["-vv", "info", "x.nes"])
        assert args.verbose == 2
        assert args.command == "info"

    def test_log_level_env(self, monkeypatch, rom_path):
        monkeypatch.setenv("NESCHR_LOG_LEVEL", "debug")
        root = logging.getLogger()
        monkeypatch.setattr(root, "handlers", [])
        monkeypatch.setattr(root, "level", root.level)
        main(["info", str(rom_path)])
        assert root.level == logging.DEBUG

    def test_log_level_env_rejects_non_level(self, monkeypatch, rom_path):
        monkeypatch.setenv("NESCHR_LOG_LEVEL", "basic_format")
        root = logging.getLogger()
        monkeypatch.setattr(root, "handlers", [])
        monkeypatch.setattr(root, "level", root.level)
        main(["info", str(rom_path)])
        assert root.level == logging.WARNING

    def test_write_atomic_cleans_up(self, tmp_path):
        target = tmp_path / "out.bin"

        def boom(f):
            f.write(b"partial")
            raise RuntimeError("fail")

        with pytest.raises(RuntimeError):
            _write_atomic(target, boom)
        assert list(tmp_path.iterdir()) == []
