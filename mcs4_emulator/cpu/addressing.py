"""
MCS-4 Emulator — SRC Address Latch

SRC sends an 8-bit register pair out on the bus; the 4002 chips latch it
and the following I/O instruction uses it:

  bits 7-6  chip select within the bank (part of the character index)
  bits 5-4  RAM register → also selects the status-character group
  bits 3-0  main character within the register

This emulator flattens the chips of one bank into a 256-character array,
so the whole selector is the main-character index.
"""


class AddressingUnit:
    """Holds the data-memory address latched by the last SRC."""

    __slots__ = ('_selector',)

    def __init__(self):
        self._selector = 0

    @property
    def selector(self) -> int:
        return self._selector

    @selector.setter
    def selector(self, value: int):
        self._selector = value & 0xFF

    @property
    def bank(self) -> int:
        return (self._selector >> 4) & 0x03

    @property
    def character(self) -> int:
        return self._selector

    def set_bank_field(self, nibble: int):
        """Replace the high nibble of the selector (JIN steering)."""
        self._selector = ((nibble & 0x0F) << 4) | (self._selector & 0x0F)

    def reset(self):
        self._selector = 0
