"""
MCS-4 Emulator — Opcode Decoder

Maps one or two program-memory bytes to an Instruction value. Decoding
is kept separate from execution so any instruction can be built and
executed directly in tests without going through a fetch.

4004 instruction byte:  OPR (bits 7-4) | OPA (bits 3-0)

  OPR  one-word                      two-word (second byte = operand)
  ---  ----------------------------  --------------------------------
  0    NOP (0x00 only)
  1                                  JCN  cond, addr8
  2    SRC  Pp        (OPA odd)      FIM  Pp, data8   (OPA even)
  3    FIN  Pp (even) / JIN Pp (odd)
  4                                  JUN  addr12
  5                                  JMS  addr12
  6    INC  Rr
  7                                  ISZ  Rr, addr8
  8    ADD  Rr
  9    SUB  Rr
  A    LD   Rr
  B    XCH  Rr
  C    BBL  n
  D    LDM  n
  E    I/O and RAM group, selected by OPA
  F    accumulator group, selected by OPA

Anything else (0x01–0x0F, 0xFE, 0xFF) decodes to an Instruction with
known=False. The engine runs it as a one-word NOP; an unknown byte is
never an error.
"""

from dataclasses import dataclass
from typing import Iterator, Optional


# ──────────────────────────────────────────────
# Opcode tables
# ──────────────────────────────────────────────

# OPR → mnemonic for groups that need no further decoding
OPR_GROUPS = {
    0x1: 'JCN',
    0x4: 'JUN',
    0x5: 'JMS',
    0x6: 'INC',
    0x7: 'ISZ',
    0x8: 'ADD',
    0x9: 'SUB',
    0xA: 'LD',
    0xB: 'XCH',
    0xC: 'BBL',
    0xD: 'LDM',
}

# OPR 2 and 3: OPA parity picks one of two siblings → (even, odd)
PARITY_GROUPS = {
    0x2: ('FIM', 'SRC'),
    0x3: ('FIN', 'JIN'),
}

# OPR E: RAM / ROM I/O
IO_GROUP = {
    0x0: 'WRM',
    0x1: 'WMP',
    0x2: 'WRR',
    0x3: 'WPM',
    0x4: 'WR0',
    0x5: 'WR1',
    0x6: 'WR2',
    0x7: 'WR3',
    0x8: 'SBM',
    0x9: 'RDM',
    0xA: 'RDR',
    0xB: 'ADM',
    0xC: 'RD0',
    0xD: 'RD1',
    0xE: 'RD2',
    0xF: 'RD3',
}

# OPR F: accumulator group
ACC_GROUP = {
    0x0: 'CLB',
    0x1: 'CLC',
    0x2: 'IAC',
    0x3: 'CMC',
    0x4: 'CMA',
    0x5: 'RAL',
    0x6: 'RAR',
    0x7: 'TCC',
    0x8: 'DAC',
    0x9: 'TCS',
    0xA: 'STC',
    0xB: 'DAA',
    0xC: 'KBP',
    0xD: 'DCL',
}

TWO_WORD = frozenset({'JCN', 'FIM', 'JUN', 'JMS', 'ISZ'})

# operand formatting per mnemonic
_REG_OPS = frozenset({'INC', 'ADD', 'SUB', 'LD', 'XCH'})
_PAIR_OPS = frozenset({'SRC', 'FIN', 'JIN'})
_IMM_OPS = frozenset({'BBL', 'LDM'})

UNKNOWN = '???'


@dataclass(frozen=True)
class Instruction:
    """One decoded 4004 instruction.

    opcode   first byte
    operand  second byte for two-word forms, else None
    """
    mnemonic: str
    opcode: int
    operand: Optional[int] = None
    known: bool = True

    @property
    def opr(self) -> int:
        return (self.opcode >> 4) & 0x0F

    @property
    def opa(self) -> int:
        return self.opcode & 0x0F

    @property
    def size(self) -> int:
        return 2 if self.mnemonic in TWO_WORD else 1

    @property
    def pair(self) -> int:
        return self.opa >> 1

    @property
    def address12(self) -> int:
        """JUN/JMS target: OPA is the page, the operand the offset."""
        return (self.opa << 8) | (self.operand or 0)

    @classmethod
    def from_bytes(cls, opcode: int, operand: int = 0) -> 'Instruction':
        """Decode without memory; operand is ignored for one-word forms."""
        return decode(opcode, operand)

    def encode(self) -> bytes:
        if self.size == 2:
            return bytes([self.opcode, self.operand or 0])
        return bytes([self.opcode])

    def format(self) -> str:
        """Assembler-style text, e.g. ``FIM P1,$2A`` or ``JUN $123``."""
        m = self.mnemonic
        if not self.known:
            return f"{UNKNOWN}  ${self.opcode:02X}"
        if m == 'JCN':
            return f"{m}  {self.opa:X},${self.operand:02X}"
        if m == 'FIM':
            return f"{m}  P{self.pair},${self.operand:02X}"
        if m in ('JUN', 'JMS'):
            return f"{m}  ${self.address12:03X}"
        if m == 'ISZ':
            return f"{m}  R{self.opa},${self.operand:02X}"
        if m in _REG_OPS:
            return f"{m}  R{self.opa}"
        if m in _PAIR_OPS:
            return f"{m}  P{self.pair}"
        if m in _IMM_OPS:
            return f"{m}  ${self.opa:X}"
        return m

    def __str__(self) -> str:
        return self.format()


def mnemonic_for(opcode: int) -> Optional[str]:
    """Return the mnemonic for an opcode byte, or None if undefined."""
    opr = (opcode >> 4) & 0x0F
    opa = opcode & 0x0F

    if opr == 0x0:
        return 'NOP' if opa == 0 else None
    if opr in OPR_GROUPS:
        return OPR_GROUPS[opr]
    if opr in PARITY_GROUPS:
        even, odd = PARITY_GROUPS[opr]
        return odd if opa & 1 else even
    if opr == 0xE:
        return IO_GROUP[opa]
    return ACC_GROUP.get(opa)


def decode(opcode: int, operand: int = 0) -> Instruction:
    """Decode an opcode byte (plus operand byte for two-word forms)."""
    opcode &= 0xFF
    mnem = mnemonic_for(opcode)
    if mnem is None:
        return Instruction(UNKNOWN, opcode, None, known=False)
    if mnem in TWO_WORD:
        return Instruction(mnem, opcode, operand & 0xFF)
    return Instruction(mnem, opcode)


def decode_at(rom, pc: int) -> Instruction:
    """Fetch and decode the instruction at pc.

    The operand byte of a two-word instruction is read from pc+1,
    wrapping at the end of program memory.
    """
    opcode = rom.fetch(pc)
    mnem = mnemonic_for(opcode)
    if mnem in TWO_WORD:
        return decode(opcode, rom.fetch((pc + 1) % rom.size))
    return decode(opcode)


def disassemble(rom, start: int = 0, count: Optional[int] = 16,
                end: Optional[int] = None) -> Iterator[str]:
    """Yield listing lines starting at ``start``.

    Stops after ``count`` instructions, or once the address reaches
    ``end`` when one is given.
    """
    pc = start
    emitted = 0
    while count is None or emitted < count:
        if end is not None and pc >= end:
            break
        emitted += 1
        instr = decode_at(rom, pc)
        raw = ' '.join(f'{b:02X}' for b in instr.encode())
        yield f"${pc:03X}: {raw:<6s} {instr.format()}"
        pc += instr.size
        if end is None:
            pc %= rom.size
