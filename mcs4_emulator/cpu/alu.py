"""
MCS-4 Emulator — 4-bit ALU

Every function is pure and returns ``(result, carry)``; the engine
decides where the result goes. The general recipe is:

  1. widen operands to a Python int
  2. combine
  3. mask the result to 4 bits
  4. carry = 1 iff the unmasked result has any bit set above bit 3

Python ints are unbounded, so a negative intermediate (subtraction
underflow) has every high bit set and step 4 reports it as carry=1,
the same way an 8-bit overflow does.

Carry polarity is not uniform across the instruction set:
  SUB  uses the *inverted* carry as the borrow-in
  SBM  uses the carry directly as the borrow-in
  DAC  reports carry=1 when *no* borrow occurred
Callers must not normalise them.
"""

from typing import Tuple

NIBBLE = 0x0F

AluResult = Tuple[int, bool]


def _settle(result: int) -> AluResult:
    """Mask a widened result to 4 bits and derive the carry."""
    return (result & NIBBLE, bool(result & ~NIBBLE))


# ══════════════════════════════════════════════
# Register / memory arithmetic
# ══════════════════════════════════════════════

def add(acc: int, value: int, carry: bool) -> AluResult:
    """ADD / ADM: acc + value + carry."""
    return _settle(acc + value + int(carry))


def sub(acc: int, value: int, carry: bool) -> AluResult:
    """SUB: acc - value - (1 - carry). Underflow sets carry."""
    return _settle(acc - value - (1 - int(carry)))


def sbm(acc: int, value: int, carry: bool) -> AluResult:
    """SBM: acc - mem - carry. Underflow sets carry."""
    return _settle(acc - value - int(carry))


def inc(value: int) -> int:
    """INC / ISZ register increment. No carry involvement."""
    return (value + 1) & NIBBLE


# ══════════════════════════════════════════════
# Accumulator group (0xF_)
# ══════════════════════════════════════════════

def iac(acc: int) -> AluResult:
    return _settle(acc + 1)


def dac(acc: int) -> AluResult:
    """Decrement; 0 wraps to 15. Carry=1 means no borrow."""
    result = acc - 1
    if result < 0:
        return (0x0F, False)
    return (result, True)


def ral(acc: int, carry: bool) -> AluResult:
    """Rotate left through carry: CY <- A3, A0 <- CY."""
    return (((acc << 1) | int(carry)) & NIBBLE, bool(acc & 0x08))


def rar(acc: int, carry: bool) -> AluResult:
    """Rotate right through carry: CY <- A0, A3 <- CY."""
    return (((acc >> 1) | (int(carry) << 3)) & NIBBLE, bool(acc & 0x01))


def cma(acc: int) -> int:
    return ~acc & NIBBLE


def tcc(carry: bool) -> AluResult:
    return (1 if carry else 0, False)


def tcs(carry: bool) -> AluResult:
    """Transfer carry subtract: 10 with carry, 9 without (BCD borrow prep)."""
    return (10 if carry else 9, False)


def daa(acc: int, carry: bool) -> AluResult:
    """Decimal adjust. Carry is only ever set here, never cleared."""
    if carry or acc > 9:
        result = acc + 6
        if result > NIBBLE:
            return (result & NIBBLE, True)
        return (result, carry)
    return (acc, carry)


# one-hot keyboard line → key number; anything else is an invalid chord
KBP_TABLE = {0b0000: 0, 0b0001: 1, 0b0010: 2, 0b0100: 3, 0b1000: 4}


def kbp(acc: int) -> int:
    return KBP_TABLE.get(acc & NIBBLE, 0x0F)
