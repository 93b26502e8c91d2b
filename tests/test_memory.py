"""
MCS-4 Emulator — Memory, Stack and Register File Tests
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from mcs4_emulator.config import EmulatorConfig
from mcs4_emulator.cpu.addressing import AddressingUnit
from mcs4_emulator.cpu.regs import Registers
from mcs4_emulator.cpu.stack import CallStack
from mcs4_emulator.mem.ram import DataMemory, DataMemoryError
from mcs4_emulator.mem.rom import ProgramMemory


class TestProgramMemory:

    def test_fetch_out_of_range_reads_zero(self):
        rom = ProgramMemory(256)
        rom.load(bytes([0xFF] * 256))
        assert rom.fetch(0xFF) == 0xFF
        assert rom.fetch(0x100) == 0
        assert rom.fetch(-1) == 0

    def test_load_truncates(self):
        rom = ProgramMemory(256)
        stored = rom.load(bytes(range(256)) + b'\xAA' * 44)
        assert stored == 256
        assert rom.fetch(255) == 255

    def test_short_load_leaves_rest_zero(self):
        rom = ProgramMemory(256)
        assert rom.load(b'\x12\x34') == 2
        assert rom.fetch(1) == 0x34
        assert rom.fetch(2) == 0

    def test_load_offset_out_of_range(self):
        rom = ProgramMemory(256)
        with pytest.raises(ValueError):
            rom.load(b'\x00', 256)

    def test_port_masks_to_nibble(self):
        rom = ProgramMemory()
        rom.port = 0x1F
        assert rom.port == 0xF

    def test_hexdump(self):
        rom = ProgramMemory(256)
        rom.load(bytes([0xD5, 0xF2]))
        first = rom.hexdump(0, 32).splitlines()[0]
        assert first.startswith('000  D5 F2 00')
        assert len(rom.hexdump(0, 32).splitlines()) == 2


class TestDataMemory:

    def test_character_write_masks(self):
        ram = DataMemory()
        ram.write_character(0x40, 0x1A)
        assert ram.read_character(0x40) == 0xA

    def test_character_index_bounds(self):
        ram = DataMemory()
        ram.write_character(255, 1)
        with pytest.raises(DataMemoryError):
            ram.write_character(256, 1)
        with pytest.raises(DataMemoryError):
            ram.read_character(-1)

    def test_status_banks_are_independent(self):
        ram = DataMemory()
        for bank in range(4):
            for n in range(4):
                ram.write_status(bank, n, bank * 4 + n)
        assert ram.read_status(2, 3) == 11
        assert ram.read_status(0, 0) == 0

    def test_status_bounds(self):
        ram = DataMemory()
        with pytest.raises(DataMemoryError):
            ram.write_status(4, 0, 1)
        with pytest.raises(DataMemoryError):
            ram.read_status(0, 4)

    def test_data_memory_error_is_index_error(self):
        assert issubclass(DataMemoryError, IndexError)

    def test_output_port(self):
        ram = DataMemory()
        ram.output = 0x27
        assert ram.output == 0x7

    def test_snapshot_diff(self):
        ram = DataMemory()
        before = ram.snapshot()[0]
        ram.write_character(0x10, 0xB)
        ram.write_character(0x11, 0xC)
        after = ram.snapshot()[0]
        assert DataMemory.diff_main(before, after) == {0x10: (0, 0xB), 0x11: (0, 0xC)}


class TestCallStack:

    def test_lifo(self):
        s = CallStack()
        s.push(0x100)
        s.push(0x200)
        assert s.pop() == 0x200
        assert s.pop() == 0x100

    def test_overflow_evicts_oldest(self):
        """Push 4, pop 3 → last three in reverse order"""
        s = CallStack()
        for addr in (0x111, 0x222, 0x333, 0x444):
            s.push(addr)
        assert s.depth == 3
        assert [s.pop(), s.pop(), s.pop()] == [0x444, 0x333, 0x222]

    def test_pop_saturates_at_zero(self):
        s = CallStack()
        for addr in (0x111, 0x222, 0x333, 0x444):
            s.push(addr)
        for _ in range(3):
            s.pop()
        assert s.pop() == 0
        assert s.pointer == 0
        assert s.pop() == 0
        assert s.pointer == 0

    def test_pop_clears_slot(self):
        s = CallStack()
        s.push(0x0AB)
        s.pop()
        assert s.as_tuple() == (0, 0, 0)

    def test_addresses_are_12_bit(self):
        s = CallStack()
        s.push(0x1234)
        assert s.pop() == 0x234

    def test_display_marks_top(self):
        s = CallStack()
        s.push(0x012)
        assert s.display() == 'STACK[1] L1=012* L2=000 L3=000'


class TestRegisters:

    def test_pair_split(self):
        """Pair value $AB → even register A, odd register B"""
        r = Registers()
        r.set_pair(3, 0xAB)
        assert r.index[6] == 0xA
        assert r.index[7] == 0xB
        assert r.get_pair(3) == 0xAB

    def test_masks(self):
        r = Registers()
        r.acc = 0x13
        r.set_reg(4, 0x2F)
        r.command_control = 0x18
        assert r.acc == 0x3
        assert r.index[4] == 0xF
        assert r.command_control == 0x8

    def test_display(self):
        r = Registers()
        r.acc = 5
        text = r.display()
        assert text.startswith('PC=000 ACC=5 CY=0')
        assert 'R=[0 0 0' in text


class TestAddressingUnit:

    def test_bank_and_character(self):
        a = AddressingUnit()
        a.selector = 0x3C
        assert a.bank == 3
        assert a.character == 0x3C

    def test_selector_masks_to_byte(self):
        a = AddressingUnit()
        a.selector = 0x1FF
        assert a.selector == 0xFF


class TestConfig:

    def test_defaults(self):
        c = EmulatorConfig()
        assert c.rom_size == 4096
        assert c.trace is False

    def test_rejects_bad_rom_size(self):
        with pytest.raises(ValueError):
            EmulatorConfig(rom_size=0)
