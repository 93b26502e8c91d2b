"""
MCS-4 Emulator — 4004 Return-Address Stack

The 4004 has no stack in memory: three on-chip 12-bit address registers
hold return addresses for JMS/BBL. Nesting a fourth call silently
overwrites the oldest level, and returning with nothing saved yields
address 0. Both behaviours are what the silicon does and programs that
rely on them must keep working, so neither raises.
"""

from typing import List, Tuple

from ..config import STACK_DEPTH

ADDRESS_MASK = 0xFFF


class CallStack:
    """Fixed-depth return-address stack with a saturating pointer.

    ``pointer`` is the number of occupied levels (0–3). slots[pointer-1]
    is the most recent return address.
    """

    __slots__ = ('slots', 'pointer')

    def __init__(self):
        self.slots: List[int] = [0] * STACK_DEPTH
        self.pointer: int = 0

    def push(self, address: int):
        if self.pointer == STACK_DEPTH:
            # overflow: drop the oldest level
            self.slots = self.slots[1:] + [0]
            self.pointer -= 1
        self.slots[self.pointer] = address & ADDRESS_MASK
        self.pointer += 1

    def pop(self) -> int:
        if self.pointer == 0:
            return 0
        self.pointer -= 1
        address = self.slots[self.pointer]
        self.slots[self.pointer] = 0
        return address

    @property
    def depth(self) -> int:
        return self.pointer

    def as_tuple(self) -> Tuple[int, ...]:
        return tuple(self.slots)

    def display(self) -> str:
        levels = ' '.join(
            f"L{i + 1}={addr:03X}{'*' if i == self.pointer - 1 else ''}"
            for i, addr in enumerate(self.slots)
        )
        return f"STACK[{self.pointer}] {levels}"

    def reset(self):
        self.slots = [0] * STACK_DEPTH
        self.pointer = 0
