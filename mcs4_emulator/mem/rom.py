"""
MCS-4 Emulator — 4001 Program Memory

Flat byte store for the program image plus the 4001's 4-bit I/O port.
Up to sixteen 256-byte 4001 chips give the 4004 its 12-bit (4 KiB)
program space; a single chip is the canonical 256-byte configuration.

The engine only reads from here; load() is the sole write path.
"""

from typing import Union

from ..config import ROM_SIZE, NIBBLE_MASK


class ProgramMemory:
    """Byte-addressed program memory with one I/O port."""

    def __init__(self, size: int = ROM_SIZE):
        self._rom = bytearray(size)
        self._port = 0

    @property
    def size(self) -> int:
        return len(self._rom)

    # --- Core read ---

    def fetch(self, addr: int) -> int:
        """Read one byte. Out-of-range addresses read as 0."""
        if 0 <= addr < len(self._rom):
            return self._rom[addr]
        return 0x00

    # --- Bulk load ---

    def load(self, data: Union[bytes, bytearray], offset: int = 0) -> int:
        """Copy ``data`` into memory at ``offset``, truncating the excess.

        Returns the number of bytes actually stored.
        """
        if offset < 0 or offset >= len(self._rom):
            raise ValueError(f"load offset ${offset:03X} outside program memory")
        chunk = bytes(data[:len(self._rom) - offset])
        self._rom[offset:offset + len(chunk)] = chunk
        return len(chunk)

    # --- I/O port ---

    @property
    def port(self) -> int:
        return self._port

    @port.setter
    def port(self, value: int):
        self._port = value & NIBBLE_MASK

    # --- Hex dump ---

    def hexdump(self, start: int = 0, length: int = 256) -> str:
        """Produce a hex dump of program memory for debugging."""
        lines = []
        end = min(start + length, len(self._rom))
        for addr in range(start, end, 16):
            row = self._rom[addr:min(addr + 16, end)]
            hex_bytes = ' '.join(f'{b:02X}' for b in row)
            lines.append(f'{addr:03X}  {hex_bytes}')
        return '\n'.join(lines)
