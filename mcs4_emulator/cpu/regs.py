"""
MCS-4 Emulator — 4004 Register File

Register model for the 4004:
  PC     — 12-bit program counter (wraps modulo program memory size)
  ACC    — 4-bit accumulator
  CY     — carry/link flag
  R0–R15 — 16 × 4-bit index registers
           pairs P0–P7: Pn = R(2n):R(2n+1), even register = high nibble
  CL     — command-control latch (written by DCL)
  TEST   — external TEST pin, sampled by JCN

Every setter masks to 4 bits. Pair writes split the 8-bit value across
the two registers so that no index register ever holds more than a nibble.
"""

from typing import List

from ..config import INDEX_REGISTERS, NIBBLE_MASK


class Registers:
    """4004 CPU register set."""

    __slots__ = ('_acc', 'carry', 'index', '_command_control',
                 'test_signal', 'PC', 'steps')

    def __init__(self):
        self._acc: int = 0
        self.carry: bool = False
        self.index: List[int] = [0] * INDEX_REGISTERS
        self._command_control: int = 0
        self.test_signal: bool = False
        self.PC: int = 0
        self.steps: int = 0       # executed instruction counter

    # --- 4-bit accumulator ---

    @property
    def acc(self) -> int:
        return self._acc

    @acc.setter
    def acc(self, value: int):
        self._acc = value & NIBBLE_MASK

    @property
    def command_control(self) -> int:
        return self._command_control

    @command_control.setter
    def command_control(self, value: int):
        self._command_control = value & NIBBLE_MASK

    # --- Index registers ---

    def get_reg(self, r: int) -> int:
        return self.index[r & 0x0F]

    def set_reg(self, r: int, value: int):
        self.index[r & 0x0F] = value & NIBBLE_MASK

    def get_pair(self, p: int) -> int:
        """Read pair p as an 8-bit value (even register = high nibble)."""
        base = (p & 0x07) * 2
        return (self.index[base] << 4) | self.index[base + 1]

    def set_pair(self, p: int, value: int):
        """Write an 8-bit value into pair p, split across both registers."""
        base = (p & 0x07) * 2
        self.index[base] = (value >> 4) & NIBBLE_MASK
        self.index[base + 1] = value & NIBBLE_MASK

    # --- Display ---

    def display(self) -> str:
        """Format register state for debugging."""
        regs = ' '.join(f'{v:X}' for v in self.index)
        return (f"PC={self.PC:03X} ACC={self._acc:X} CY={int(self.carry)} "
                f"CL={self._command_control:X} TEST={int(self.test_signal)} "
                f"R=[{regs}]")

    def reset(self):
        """Reset CPU registers to power-on state."""
        self._acc = 0
        self.carry = False
        self.index = [0] * INDEX_REGISTERS
        self._command_control = 0
        self.test_signal = False
        self.PC = 0
        self.steps = 0
