"""
MCS-4 Emulator — Loader, Logging and CLI Tests
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import logging

import pytest

import mcs4run
from mcs4_emulator.emu import MCS4Emulator
from mcs4_emulator.loader import LoaderError, read_program_image
from mcs4_emulator.log_setup import setup_logging

# LDM 5; IAC; JUN $002
PROGRAM = bytes([0xD5, 0xF2, 0x40, 0x02])


class TestLoader:

    def test_reads_image(self, tmp_path):
        path = tmp_path / "prog.bin"
        path.write_bytes(PROGRAM)
        assert read_program_image(path, 256) == PROGRAM

    def test_missing_file(self, tmp_path):
        with pytest.raises(LoaderError, match="not found"):
            read_program_image(tmp_path / "nope.bin", 256)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.bin"
        path.write_bytes(b"")
        with pytest.raises(LoaderError, match="empty"):
            read_program_image(path, 256)

    def test_truncates_long_image(self, tmp_path):
        path = tmp_path / "big.bin"
        path.write_bytes(bytes(300))
        assert len(read_program_image(path, 256)) == 256

    def test_emulator_load_from_path(self, tmp_path):
        path = tmp_path / "prog.bin"
        path.write_bytes(PROGRAM)
        emu = MCS4Emulator()
        assert emu.load_binary(str(path)) == 4
        emu.run(max_steps=10)
        assert emu.acc == 6


class TestLogging:

    def test_setup_logging_file(self, tmp_path):
        log_file = tmp_path / "logs" / "run.log"
        logger = setup_logging(logging.WARNING, log_file=log_file)
        logging.getLogger("mcs4.test").debug("hello file")
        for handler in logger.handlers:
            handler.flush()
        assert "hello file" in log_file.read_text(encoding="utf-8")
        setup_logging(logging.WARNING)

    def test_setup_logging_replaces_handlers(self):
        setup_logging(logging.INFO)
        logger = setup_logging(logging.INFO)
        assert len(logger.handlers) == 1


class TestCli:

    def test_parse_int_arg(self):
        assert mcs4run.parse_int_arg("0x1F") == 0x1F
        assert mcs4run.parse_int_arg("$20") == 0x20
        assert mcs4run.parse_int_arg("12") == 12

    def test_run_to_halt(self, tmp_path, capsys):
        path = tmp_path / "prog.bin"
        path.write_bytes(PROGRAM)
        assert mcs4run.main([str(path), "-q"]) == 0
        out = capsys.readouterr().out
        assert "Stopped: HALT" in out
        assert "ACC=6" in out

    def test_breakpoint_and_trace(self, tmp_path, capsys):
        path = tmp_path / "prog.bin"
        path.write_bytes(PROGRAM)
        assert mcs4run.main([str(path), "-q", "--trace", "--break", "0x001"]) == 0
        out = capsys.readouterr().out
        assert "Stopped: BREAK" in out
        assert "$000: LDM  $5" in out

    def test_disasm(self, tmp_path, capsys):
        path = tmp_path / "prog.bin"
        path.write_bytes(PROGRAM)
        assert mcs4run.main([str(path), "-q", "--disasm"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[-3].endswith("LDM  $5")
        assert lines[-2].endswith("IAC")
        assert lines[-1].endswith("JUN  $002")

    @pytest.mark.parametrize("flags", [["--rom-size", "0"], ["--steps=-1"]])
    def test_bad_config_is_an_error(self, tmp_path, flags):
        path = tmp_path / "prog.bin"
        path.write_bytes(PROGRAM)
        assert mcs4run.main([str(path), "-q"] + flags) == 1

    def test_missing_image(self, tmp_path):
        assert mcs4run.main([str(tmp_path / "missing.bin"), "-q"]) == 1
