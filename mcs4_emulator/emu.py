"""
MCS-4 Emulator — Main Emulator Class

Integrates:
  - 4004 registers (cpu/regs.py)
  - return-address stack (cpu/stack.py)
  - SRC address latch (cpu/addressing.py)
  - opcode decoder (cpu/decoder.py)
  - 4-bit ALU (cpu/alu.py)
  - 4001 program memory (mem/rom.py)
  - 4002 data memory (mem/ram.py)

Execution model (one step):
  1. Decode the instruction at PC (one or two bytes)
  2. Execute its handler → registers, carry, stack, RAM, ports
  3. PC ← PC + size, unless the handler transferred control
  4. PC wraps modulo program memory size

step() never raises for program content: undefined opcodes run as NOP.

Termination reasons for run():
  - TIMEOUT:  step budget exhausted
  - BREAK:    PC reached a breakpoint
  - HALT:     a JUN jumped to itself (``JUN $`` idle loop)
"""

import logging
from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from .config import EmulatorConfig
from .cpu import alu
from .cpu.addressing import AddressingUnit
from .cpu.decoder import Instruction, decode_at
from .cpu.regs import Registers
from .cpu.stack import CallStack
from .loader import read_program_image
from .mem.ram import DataMemory
from .mem.rom import ProgramMemory

log = logging.getLogger("mcs4.emu")

PAGE_MASK = 0xF00


class StopReason(Enum):
    TIMEOUT = 'TIMEOUT'
    BREAK = 'BREAK'
    HALT = 'HALT'


@dataclass(frozen=True)
class CPUState:
    """Immutable copy of all mutable machine state, for golden comparisons."""
    pc: int
    acc: int
    carry: bool
    index: Tuple[int, ...]
    stack: Tuple[int, ...]
    stack_pointer: int
    command_control: int
    selector: int
    test_signal: bool
    rom_port: int
    ram_main: bytes
    ram_status: bytes
    ram_output: int


class MCS4Emulator:
    """Intel 4004 decode-execute engine with 4001 ROM and 4002 RAM.

    Usage:
        emu = MCS4Emulator()
        emu.load_binary(bytes([0xD5, 0xF2, 0x40, 0x02]))  # LDM 5; IAC; JUN $002
        reason = emu.run(max_steps=100)
        print(emu.regs.display())   # ACC=6
    """

    def __init__(self, config: Optional[EmulatorConfig] = None):
        self.config = config or EmulatorConfig()

        # Core components
        self.regs = Registers()
        self.stack = CallStack()
        self.addr = AddressingUnit()
        self.rom = ProgramMemory(self.config.rom_size)
        self.ram = DataMemory()

        # Breakpoints: set of PC addresses that trigger BREAK
        self._breakpoints: Set[int] = set()

        # Trace output
        self._trace = self.config.trace
        self._trace_output: List[str] = []

        # Set by control-transfer handlers; None means "fall through"
        self._next_pc: Optional[int] = None

        self._dispatch = self._build_dispatch()

    # ══════════════════════════════════════════════
    # Loading
    # ══════════════════════════════════════════════

    def load_binary(self, path_or_data, offset: int = 0) -> int:
        """Load a program image (file path or bytes) into program memory.

        Returns the number of bytes stored. File errors surface as
        loader.LoaderError.
        """
        if isinstance(path_or_data, (str, Path)):
            data = read_program_image(path_or_data, self.rom.size - offset)
        else:
            data = bytes(path_or_data)
        return self.rom.load(data, offset)

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def step(self) -> Instruction:
        """Execute exactly one instruction and return it."""
        instr = decode_at(self.rom, self.regs.PC)
        self.execute(instr)
        return instr

    def execute(self, instr: Instruction):
        """Run one decoded instruction as if it had been fetched at PC."""
        pc = self.regs.PC

        if self._trace:
            line = f"${pc:03X}: {instr.format():<14s} {self.regs.display()}"
            self._trace_output.append(line)
            log.debug(line)

        self._next_pc = None
        if instr.known:
            self._dispatch[instr.mnemonic](instr)
        else:
            log.debug("Unknown opcode $%02X at $%03X, treated as NOP",
                      instr.opcode, pc)

        if self._next_pc is None:
            self._next_pc = pc + instr.size
        self.regs.PC = self._next_pc % self.rom.size
        self.regs.steps += 1

    def run(self, max_steps: Optional[int] = None) -> StopReason:
        """Step until a breakpoint, an idle loop or the step budget.

        Args:
            max_steps: step budget; defaults to config.max_steps
                       (None in both means run until BREAK/HALT)
        """
        if max_steps is None:
            max_steps = self.config.max_steps

        executed = 0
        while max_steps is None or executed < max_steps:
            pc = self.regs.PC
            instr = self.step()
            executed += 1
            # ISZ/JCN to their own address are counted or polled waits
            if instr.mnemonic == 'JUN' and self.regs.PC == pc:
                log.info("HALT: idle loop at $%03X after %d steps", pc, executed)
                return StopReason.HALT
            if self.regs.PC in self._breakpoints:
                log.info("BREAK at $%03X after %d steps", self.regs.PC, executed)
                return StopReason.BREAK

        log.info("TIMEOUT after %d steps, PC=$%03X", executed, self.regs.PC)
        return StopReason.TIMEOUT

    # ══════════════════════════════════════════════
    # Helpers
    # ══════════════════════════════════════════════

    def _page_target(self, offset: int) -> int:
        """Short jump target: page of the operand byte + 8-bit offset."""
        return ((self.regs.PC + 1) & PAGE_MASK) | offset

    # ══════════════════════════════════════════════
    # Instruction handlers
    # ══════════════════════════════════════════════
    # Handler signature: handler(instr). Handlers that transfer control
    # set self._next_pc; everything else falls through to PC + size.

    def _build_dispatch(self) -> dict:
        return {
            # ── Machine instructions ──
            'NOP': self._op_nop,
            'JCN': self._op_jcn,
            'FIM': self._op_fim,
            'SRC': self._op_src,
            'FIN': self._op_fin,
            'JIN': self._op_jin,
            'JUN': self._op_jun,
            'JMS': self._op_jms,
            'INC': self._op_inc,
            'ISZ': self._op_isz,
            'ADD': self._op_add,
            'SUB': self._op_sub,
            'LD':  self._op_ld,
            'XCH': self._op_xch,
            'BBL': self._op_bbl,
            'LDM': self._op_ldm,

            # ── I/O and RAM ──
            'WRM': self._op_wrm,
            'WMP': self._op_wmp,
            'WRR': self._op_wrr,
            'WPM': self._op_wpm,
            'WR0': self._op_wrn,
            'WR1': self._op_wrn,
            'WR2': self._op_wrn,
            'WR3': self._op_wrn,
            'SBM': self._op_sbm,
            'RDM': self._op_rdm,
            'RDR': self._op_rdr,
            'ADM': self._op_adm,
            'RD0': self._op_rdn,
            'RD1': self._op_rdn,
            'RD2': self._op_rdn,
            'RD3': self._op_rdn,

            # ── Accumulator group ──
            'CLB': self._op_clb,
            'CLC': self._op_clc,
            'IAC': self._op_iac,
            'CMC': self._op_cmc,
            'CMA': self._op_cma,
            'RAL': self._op_ral,
            'RAR': self._op_rar,
            'TCC': self._op_tcc,
            'DAC': self._op_dac,
            'TCS': self._op_tcs,
            'STC': self._op_stc,
            'DAA': self._op_daa,
            'KBP': self._op_kbp,
            'DCL': self._op_dcl,
        }

    # ── Control transfer ──

    def _op_nop(self, instr):
        pass

    def _op_jcn(self, instr):
        """Jump on condition. C1 (bit 3) set suppresses the jump entirely."""
        cond = instr.opa
        if cond & 0x8:
            return
        taken = ((cond & 0x4 and self.regs.acc == 0)
                 or (cond & 0x2 and self.regs.carry)
                 or (cond & 0x1 and self.regs.test_signal))
        if taken:
            self._next_pc = self._page_target(instr.operand)

    def _op_jun(self, instr):
        self._next_pc = instr.address12

    def _op_jms(self, instr):
        self.stack.push((self.regs.PC + instr.size) % self.rom.size)
        self._next_pc = instr.address12

    def _op_bbl(self, instr):
        self._next_pc = self.stack.pop()
        self.regs.acc = instr.opa

    def _op_isz(self, instr):
        value = alu.inc(self.regs.get_reg(instr.opa))
        self.regs.set_reg(instr.opa, value)
        if value != 0:
            self._next_pc = self._page_target(instr.operand)

    # ── Register pairs / addressing ──

    def _op_fim(self, instr):
        self.regs.set_pair(instr.pair, instr.operand)

    def _op_src(self, instr):
        self.addr.selector = self.regs.get_pair(instr.pair)

    def _op_fin(self, instr):
        """Fetch indirect: ROM[page | P0] → Pp."""
        address = (self.regs.PC & PAGE_MASK) | self.regs.get_pair(0)
        self.regs.set_pair(instr.pair, self.rom.fetch(address))

    def _op_jin(self, instr):
        """Steer the selector's bank field from the pair's even register."""
        self.addr.set_bank_field(self.regs.get_reg(instr.pair * 2))

    # ── Index register / accumulator ──

    def _op_inc(self, instr):
        self.regs.set_reg(instr.opa, alu.inc(self.regs.get_reg(instr.opa)))

    def _op_add(self, instr):
        self.regs.acc, self.regs.carry = alu.add(
            self.regs.acc, self.regs.get_reg(instr.opa), self.regs.carry)

    def _op_sub(self, instr):
        self.regs.acc, self.regs.carry = alu.sub(
            self.regs.acc, self.regs.get_reg(instr.opa), self.regs.carry)

    def _op_ld(self, instr):
        self.regs.acc = self.regs.get_reg(instr.opa)

    def _op_xch(self, instr):
        r = instr.opa
        old = self.regs.get_reg(r)
        self.regs.set_reg(r, self.regs.acc)
        self.regs.acc = old

    def _op_ldm(self, instr):
        self.regs.acc = instr.opa

    # ── I/O and RAM handlers ──

    def _op_wrm(self, instr):
        self.ram.write_character(self.addr.character, self.regs.acc)

    def _op_wmp(self, instr):
        self.ram.output = self.regs.acc

    def _op_wrr(self, instr):
        self.rom.port = self.regs.acc

    def _op_wpm(self, instr):
        log.debug("WPM at $%03X ignored (no program RAM)", self.regs.PC)

    def _op_wrn(self, instr):
        self.ram.write_status(self.addr.bank, instr.opa & 0x3, self.regs.acc)

    def _op_sbm(self, instr):
        self.regs.acc, self.regs.carry = alu.sbm(
            self.regs.acc, self.ram.read_character(self.addr.character),
            self.regs.carry)

    def _op_rdm(self, instr):
        self.regs.acc = self.ram.read_character(self.addr.character)

    def _op_rdr(self, instr):
        self.regs.acc = self.rom.port

    def _op_adm(self, instr):
        self.regs.acc, self.regs.carry = alu.add(
            self.regs.acc, self.ram.read_character(self.addr.character),
            self.regs.carry)

    def _op_rdn(self, instr):
        self.regs.acc = self.ram.read_status(self.addr.bank, instr.opa & 0x3)

    # ── Accumulator group handlers ──

    def _op_clb(self, instr):
        self.regs.acc = 0
        self.regs.carry = False

    def _op_clc(self, instr):
        self.regs.carry = False

    def _op_iac(self, instr):
        self.regs.acc, self.regs.carry = alu.iac(self.regs.acc)

    def _op_cmc(self, instr):
        self.regs.carry = not self.regs.carry

    def _op_cma(self, instr):
        self.regs.acc = alu.cma(self.regs.acc)

    def _op_ral(self, instr):
        self.regs.acc, self.regs.carry = alu.ral(self.regs.acc, self.regs.carry)

    def _op_rar(self, instr):
        self.regs.acc, self.regs.carry = alu.rar(self.regs.acc, self.regs.carry)

    def _op_tcc(self, instr):
        self.regs.acc, self.regs.carry = alu.tcc(self.regs.carry)

    def _op_dac(self, instr):
        self.regs.acc, self.regs.carry = alu.dac(self.regs.acc)

    def _op_tcs(self, instr):
        self.regs.acc, self.regs.carry = alu.tcs(self.regs.carry)

    def _op_stc(self, instr):
        self.regs.carry = True

    def _op_daa(self, instr):
        self.regs.acc, self.regs.carry = alu.daa(self.regs.acc, self.regs.carry)

    def _op_kbp(self, instr):
        self.regs.acc = alu.kbp(self.regs.acc)

    def _op_dcl(self, instr):
        self.regs.command_control = self.regs.acc

    # ══════════════════════════════════════════════
    # State access
    # ══════════════════════════════════════════════

    @property
    def pc(self) -> int:
        return self.regs.PC

    @pc.setter
    def pc(self, value: int):
        self.regs.PC = value % self.rom.size

    @property
    def acc(self) -> int:
        return self.regs.acc

    @acc.setter
    def acc(self, value: int):
        self.regs.acc = value

    @property
    def carry(self) -> bool:
        return self.regs.carry

    @carry.setter
    def carry(self, value: bool):
        self.regs.carry = bool(value)

    @property
    def index(self) -> Tuple[int, ...]:
        return tuple(self.regs.index)

    @property
    def stack_slots(self) -> Tuple[int, ...]:
        return self.stack.as_tuple()

    @property
    def command_control(self) -> int:
        return self.regs.command_control

    @property
    def selector(self) -> int:
        return self.addr.selector

    @selector.setter
    def selector(self, value: int):
        self.addr.selector = value

    def snapshot(self) -> CPUState:
        main, status, output = self.ram.snapshot()
        return CPUState(
            pc=self.regs.PC,
            acc=self.regs.acc,
            carry=self.regs.carry,
            index=tuple(self.regs.index),
            stack=self.stack.as_tuple(),
            stack_pointer=self.stack.pointer,
            command_control=self.regs.command_control,
            selector=self.addr.selector,
            test_signal=self.regs.test_signal,
            rom_port=self.rom.port,
            ram_main=main,
            ram_status=status,
            ram_output=output,
        )

    @staticmethod
    def diff_snapshots(a: CPUState, b: CPUState) -> Dict[str, tuple]:
        """Return {field: (old, new)} for every field that differs."""
        changes = {}
        for f in fields(CPUState):
            old, new = getattr(a, f.name), getattr(b, f.name)
            if old != new:
                changes[f.name] = (old, new)
        return changes

    # ══════════════════════════════════════════════
    # Breakpoint API
    # ══════════════════════════════════════════════

    def add_breakpoint(self, addr: int):
        """Add a breakpoint at PC address. run() stops when PC hits this."""
        self._breakpoints.add(addr % self.rom.size)

    def remove_breakpoint(self, addr: int):
        self._breakpoints.discard(addr % self.rom.size)

    def clear_breakpoints(self):
        self._breakpoints.clear()

    # ══════════════════════════════════════════════
    # Trace / Debug
    # ══════════════════════════════════════════════

    def enable_trace(self, enable: bool = True):
        """Enable instruction trace recording."""
        self._trace = enable

    def get_trace(self) -> str:
        return '\n'.join(self._trace_output)

    def clear_trace(self):
        self._trace_output.clear()

    def display(self) -> str:
        """Multi-line dump of CPU, stack and RAM port state."""
        return '\n'.join([
            self.regs.display(),
            self.stack.display(),
            f"SRC={self.addr.selector:02X} BANK={self.addr.bank} "
            f"ROM_IO={self.rom.port:X} RAM_OUT={self.ram.output:X}",
        ])

    def reset(self):
        """CPU reset. Program memory is left intact."""
        self.regs.reset()
        self.stack.reset()
        self.addr.reset()
        self.ram.reset()
        self.rom.port = 0
        self._breakpoints.clear()
        self._trace_output.clear()
