"""
MCS-4 Emulator — 4002 Data Memory

Storage model (all cells hold a single 4-bit character):

  main     256 characters, indexed by the full SRC selector
  status   16 characters = 4 banks × 4 (WRn/RDn, n = 0..3)
  output   one 4-bit output port (WMP)

Index arithmetic in the engine cannot produce an out-of-range index
(8-bit selector, 2-bit bank, 2-bit status number). If one ever shows up
it is a decode bug, so it raises DataMemoryError instead of being
clamped or ignored.
"""

from typing import Dict, Tuple

from ..config import (
    NIBBLE_MASK, RAM_BANKS, RAM_CHARACTERS, STATUS_CHARACTERS, STATUS_PER_BANK,
)


class DataMemoryError(IndexError):
    """Raised on an out-of-range data-memory index."""
    pass


class DataMemory:
    """4002 RAM: main characters, status characters, output port."""

    def __init__(self):
        self._main = bytearray(RAM_CHARACTERS)
        self._status = bytearray(STATUS_CHARACTERS)
        self._output = 0

    # --- Main memory characters ---

    def read_character(self, index: int) -> int:
        self._check(index, RAM_CHARACTERS, 'character')
        return self._main[index]

    def write_character(self, index: int, value: int):
        self._check(index, RAM_CHARACTERS, 'character')
        self._main[index] = value & NIBBLE_MASK

    # --- Status characters ---

    def read_status(self, bank: int, n: int) -> int:
        return self._status[self._status_index(bank, n)]

    def write_status(self, bank: int, n: int, value: int):
        self._status[self._status_index(bank, n)] = value & NIBBLE_MASK

    # --- Output port ---

    @property
    def output(self) -> int:
        return self._output

    @output.setter
    def output(self, value: int):
        self._output = value & NIBBLE_MASK

    # --- Snapshots ---

    def snapshot(self) -> Tuple[bytes, bytes, int]:
        """Capture (main, status, output) for later diffing."""
        return (bytes(self._main), bytes(self._status), self._output)

    @staticmethod
    def diff_main(snap_a: bytes, snap_b: bytes) -> Dict[int, tuple]:
        """Compare two main-memory snapshots → {index: (old, new)}."""
        return {
            i: (a, b)
            for i, (a, b) in enumerate(zip(snap_a, snap_b))
            if a != b
        }

    def reset(self):
        self._main[:] = bytes(RAM_CHARACTERS)
        self._status[:] = bytes(STATUS_CHARACTERS)
        self._output = 0

    # --- Internals ---

    def _status_index(self, bank: int, n: int) -> int:
        if not (0 <= bank < RAM_BANKS and 0 <= n < STATUS_PER_BANK):
            raise DataMemoryError(f"status character bank={bank} n={n} out of range")
        return bank * STATUS_PER_BANK + n

    @staticmethod
    def _check(index: int, limit: int, what: str):
        if not 0 <= index < limit:
            raise DataMemoryError(f"{what} index {index} out of range 0..{limit - 1}")
