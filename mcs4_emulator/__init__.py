"""
MCS-4 Emulator
==============
An instruction-set simulator for the Intel MCS-4 family: the 4004 CPU,
4001 program memory and 4002 data memory.

Architecture:
    ┌──────────┐    ┌──────────┐    ┌─────────────┐    ┌──────────────────────┐
    │ 4001 ROM │───>│ Decoder  │───>│ Instruction │───>│ execute()            │
    │ (bytes)  │    │ (1-2 B)  │    │ (value)     │    │ regs/stack/RAM/ports │
    └──────────┘    └──────────┘    └─────────────┘    └──────────────────────┘

    - cpu/regs.py:       accumulator, carry, R0-R15, command line, TEST pin
    - cpu/stack.py:      3-level return-address stack
    - cpu/addressing.py: SRC selector latch
    - cpu/alu.py:        pure 4-bit arithmetic, returns (result, carry)
    - cpu/decoder.py:    opcode tables, Instruction, disassembler
    - mem/rom.py:        4001 program memory + I/O port
    - mem/ram.py:        4002 characters, status characters, output port
    - emu.py:            MCS4Emulator (step / execute / run / snapshot)
    - loader.py:         program image file reader
"""

__version__ = "0.1.0"

from .config import EmulatorConfig
from .cpu.decoder import Instruction, decode, decode_at, disassemble
from .emu import CPUState, MCS4Emulator, StopReason
from .loader import LoaderError, read_program_image
from .mem.ram import DataMemoryError

__all__ = [
    "CPUState",
    "DataMemoryError",
    "EmulatorConfig",
    "Instruction",
    "LoaderError",
    "MCS4Emulator",
    "StopReason",
    "decode",
    "decode_at",
    "disassemble",
    "read_program_image",
]
