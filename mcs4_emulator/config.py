"""
MCS-4 Emulator — Machine Configuration
======================================

Chip geometry for the 4004/4001/4002 set and the run-time knobs the
driver loop exposes. The values here are the documented MCS-4 maximums:

  4001 ROM   256 bytes per chip, up to 16 chips → 12-bit address space
  4002 RAM   4 registers × 16 main characters + 4 status characters per
             chip, 4 chips per bank, 4 banks selectable by SRC
  4004 CPU   3-level return-address stack
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
#  PROGRAM MEMORY (4001)
# =============================================================================
ROM_PAGE_SIZE = 256       # one 4001 chip
ROM_PAGES = 16            # 12-bit program counter
ROM_SIZE = ROM_PAGE_SIZE * ROM_PAGES


# =============================================================================
#  DATA MEMORY (4002)
# =============================================================================
RAM_BANKS = 4
RAM_CHARACTERS = 256      # addressed by the full 8-bit SRC selector
STATUS_PER_BANK = 4
STATUS_CHARACTERS = RAM_BANKS * STATUS_PER_BANK


# =============================================================================
#  CPU (4004)
# =============================================================================
STACK_DEPTH = 3
INDEX_REGISTERS = 16
NIBBLE_MASK = 0x0F


@dataclass
class EmulatorConfig:
    """Run-time configuration for one emulator instance.

    rom_size   program memory capacity in bytes (PC wraps modulo this)
    max_steps  default step budget for run(); None means unbounded
    trace      record a disassembly line per executed instruction
    """
    rom_size: int = ROM_SIZE
    max_steps: Optional[int] = 100_000
    trace: bool = False

    def __post_init__(self):
        if self.rom_size <= 0:
            raise ValueError(f"rom_size must be positive, got {self.rom_size}")
        if self.max_steps is not None and self.max_steps < 0:
            raise ValueError(f"max_steps must be >= 0, got {self.max_steps}")
