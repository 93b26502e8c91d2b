#!/usr/bin/env python3
"""
mcs4run — Intel 4004 program runner

Usage:
    python mcs4run.py <image.bin> [--steps N] [--break ADDR ...] [--trace]
                                  [--disasm] [--rom-size N] [-v | -q]
                                  [--log-file FILE]

Loads a flat program image at address $000, runs it until it idles
(``JUN $``), hits a breakpoint or exhausts the step budget, then prints
the CPU state.

Examples:
    python mcs4run.py blink.bin
    python mcs4run.py blink.bin --steps 500 --trace
    python mcs4run.py blink.bin --disasm
    python mcs4run.py blink.bin --break 0x024 -v
"""

import argparse
import logging
import os
import sys

# Allow running from project root without installing
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from mcs4_emulator import __version__
from mcs4_emulator.config import EmulatorConfig, ROM_SIZE
from mcs4_emulator.cpu.decoder import disassemble
from mcs4_emulator.emu import MCS4Emulator
from mcs4_emulator.loader import LoaderError
from mcs4_emulator.log_setup import setup_logging

log = logging.getLogger("mcs4.cli")


def parse_int_arg(value: str) -> int:
    """Parse an integer argument that may be hex (0x...), $ prefix, or decimal."""
    value = value.strip()
    if value.startswith("0x") or value.startswith("0X"):
        return int(value, 16)
    if value.startswith("$"):
        return int(value[1:], 16)
    return int(value)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcs4run",
        description="Intel 4004 / MCS-4 instruction-set simulator",
    )
    parser.add_argument("image", help="Flat program image (loaded at $000)")
    parser.add_argument("--steps", type=parse_int_arg, default=None,
                        help="Maximum instructions to execute (default: 100000)")
    parser.add_argument("--break", dest="breakpoints", action="append",
                        type=parse_int_arg, default=[],
                        help="Stop when PC reaches ADDR (repeatable)")
    parser.add_argument("--rom-size", type=parse_int_arg, default=ROM_SIZE,
                        help=f"Program memory size in bytes (default: {ROM_SIZE})")
    parser.add_argument("--trace", action="store_true",
                        help="Print one line per executed instruction")
    parser.add_argument("--disasm", action="store_true",
                        help="Disassemble the image and exit")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Debug logging")
    parser.add_argument("--quiet", "-q", action="store_true",
                        help="Only log errors")
    parser.add_argument("--log-file", default=None,
                        help="Also write a DEBUG log to this file")
    parser.add_argument("--version", action="version",
                        version=f"mcs4run {__version__}")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.quiet:
        level = logging.ERROR
    elif args.verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO
    setup_logging(level, log_file=args.log_file)

    options = {"rom_size": args.rom_size, "trace": args.trace}
    if args.steps is not None:
        options["max_steps"] = args.steps
    try:
        config = EmulatorConfig(**options)
    except ValueError as e:
        log.error("%s", e)
        return 1

    emu = MCS4Emulator(config)
    try:
        loaded = emu.load_binary(args.image)
    except LoaderError as e:
        log.error("%s", e)
        return 1
    log.info("Loaded %d bytes from %s", loaded, args.image)

    if args.disasm:
        for line in disassemble(emu.rom, 0, count=None, end=loaded):
            print(line)
        return 0

    for addr in args.breakpoints:
        emu.add_breakpoint(addr)

    reason = emu.run()
    if args.trace:
        print(emu.get_trace())
    print(f"Stopped: {reason.value} after {emu.regs.steps} steps")
    print(emu.display())
    return 0


if __name__ == "__main__":
    sys.exit(main())
