#!/usr/bin/env python3
"""
intcodekit — Intcode VM Toolkit
===============================

One CLI for running and inspecting Intcode programs:
    intcodekit run     — Run a program file, print its output
    intcodekit disasm  — Disassemble a program file
    intcodekit info    — Program summary (size, opcode histogram)

Usage:
    python intcodekit.py <command> [options]
    python intcodekit.py <command> --help

Examples:
    python intcodekit.py run day09.txt -i 1
    python intcodekit.py run day02.txt --patch 1=12 --patch 2=2 --dump 0
    python intcodekit.py run day25.txt --ascii --interactive
    python intcodekit.py disasm day05.txt --start 0 --end 40
    python intcodekit.py -v run day05.txt -i 5 --trace

Exit status:
    0  program halted normally
    1  bad arguments, unreadable/malformed program, or fatal machine error
    2  program needed input that was not supplied (non-interactive run)
"""

import argparse
import logging
import sys
from collections import Counter

from rich.console import Console
from rich.logging import RichHandler

from intcode_vm import __version__
from intcode_vm.ascii import read_ascii_result, send_line
from intcode_vm.decoder import OPCODES
from intcode_vm.disassembler import Disassembler
from intcode_vm.errors import IntcodeError
from intcode_vm.interpreter import ExecuteResult, Interpreter
from intcode_vm.memory import load_program_file

logger = logging.getLogger("intcodekit")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INPUT_NEEDED = 2


def setup_logging(verbose: int = 0, quiet: bool = False):
    """Configure console logging: WARNING by default, -v INFO, -vv DEBUG."""
    if quiet:
        level = logging.ERROR
    elif verbose == 0:
        level = logging.WARNING
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    handler = RichHandler(
        level=level,
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        rich_tracebacks=True,
    )
    logging.basicConfig(level=level, format="%(message)s",
                        handlers=[handler], force=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="intcodekit",
        description="Intcode VM Toolkit — run, disassemble, inspect",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""commands:
  run       Run a program file and print its output
  disasm    Disassemble a program file
  info      Summarize a program file
""",
    )
    parser.add_argument("--version", action="version", version=f"intcodekit {__version__}")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Increase log verbosity (-v, -vv)")
    parser.add_argument("-q", "--quiet", action="store_true",
                        help="Only log errors")
    sub = parser.add_subparsers(dest="command", metavar="command")

    # ── run ──────────────────────────────────────────────────────────────
    p_run = sub.add_parser("run", help="Run a program file")
    p_run.add_argument("program", help="Program text file (comma-separated integers)")
    p_run.add_argument("-i", "--input", dest="inputs", type=int, action="append",
                       default=[], metavar="VALUE",
                       help="Queue an input value (repeatable)")
    p_run.add_argument("--patch", action="append", default=[], metavar="ADDR=VALUE",
                       help="Write VALUE at ADDR before running (repeatable)")
    p_run.add_argument("--ascii", action="store_true",
                       help="Treat output as text, input lines as characters")
    p_run.add_argument("--interactive", action="store_true",
                       help="Read more input from stdin when the program asks")
    p_run.add_argument("--dump", type=int, action="append", default=[], metavar="ADDR",
                       help="Print memory cell ADDR after the run (repeatable)")
    p_run.add_argument("--trace", action="store_true",
                       help="Print an instruction trace after the run")

    # ── disasm ───────────────────────────────────────────────────────────
    p_dis = sub.add_parser("disasm", help="Disassemble a program file")
    p_dis.add_argument("program", help="Program text file")
    p_dis.add_argument("--start", type=int, default=0, help="First address (default: 0)")
    p_dis.add_argument("--end", type=int, default=None, help="Stop before this address")

    # ── info ─────────────────────────────────────────────────────────────
    p_info = sub.add_parser("info", help="Summarize a program file")
    p_info.add_argument("program", help="Program text file")

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return EXIT_OK

    setup_logging(args.verbose, args.quiet)

    handler = COMMANDS[args.command]
    try:
        return handler(args)
    except OSError as e:
        logger.error("Cannot read %s: %s", args.program, e)
        return EXIT_ERROR
    except IntcodeError as e:
        logger.error("%s: %s", type(e).__name__, e)
        return EXIT_ERROR
    except ValueError as e:
        logger.error("%s", e)
        return EXIT_ERROR


# ═════════════════════════════════════════════════════════════════════════════
# COMMAND IMPLEMENTATIONS
# ═════════════════════════════════════════════════════════════════════════════

def _parse_patch(text: str):
    """Parse ADDR=VALUE."""
    addr, sep, value = text.partition("=")
    if not sep:
        raise ValueError(f"Bad --patch {text!r}, expected ADDR=VALUE")
    return int(addr), int(value)


# ── run ──────────────────────────────────────────────────────────────────
def cmd_run(args):
    vm = Interpreter(load_program_file(args.program))
    logger.info("Loaded %s (%d words)", args.program, len(vm.mem))

    for patch in args.patch:
        addr, value = _parse_patch(patch)
        vm.write(addr, value)
        logger.info("Patched [%d] = %d", addr, value)

    vm.add_inputs(args.inputs)
    vm.enable_trace(args.trace)

    while True:
        result = vm.execute()
        _print_output(vm, args.ascii)
        if result is ExecuteResult.DONE:
            break

        if not args.interactive:
            logger.error("Program needs input at pc=%d (use -i or --interactive)", vm.pc)
            return EXIT_INPUT_NEEDED

        line = sys.stdin.readline()
        if not line:
            logger.error("stdin closed while program needs input at pc=%d", vm.pc)
            return EXIT_INPUT_NEEDED
        line = line.rstrip("\r\n")
        if args.ascii:
            send_line(vm, line)
        else:
            vm.add_input(int(line.strip()))

    logger.info("Halted after %d instructions", vm.steps)

    if args.trace:
        print(vm.get_trace())
    for addr in args.dump:
        print(f"[{addr}] = {vm.read(addr)}")
    return EXIT_OK


def _print_output(vm, ascii_mode: bool):
    if not ascii_mode:
        for value in vm.drain_output():
            print(value)
        return
    while vm.has_output:
        text, result = read_ascii_result(vm)
        if text:
            sys.stdout.write(text)
        if result is not None:
            print(result)
    sys.stdout.flush()


# ── disasm ───────────────────────────────────────────────────────────────
def cmd_disasm(args):
    words = load_program_file(args.program)
    print(Disassembler().listing(words, args.start, args.end))
    return EXIT_OK


# ── info ─────────────────────────────────────────────────────────────────
def cmd_info(args):
    words = load_program_file(args.program)
    listing = Disassembler().disassemble(words)
    counts = Counter(inst.mnemonic for inst in listing)

    print(f"File:         {args.program}")
    print(f"Words:        {len(words)}")
    print(f"Instructions: {sum(n for m, n in counts.items() if m != 'DATA')}")
    print(f"Data words:   {counts.get('DATA', 0)}")
    for info in OPCODES.values():
        if counts.get(info.mnemonic):
            print(f"  {info.mnemonic:5s} {counts[info.mnemonic]}")
    return EXIT_OK


# ═════════════════════════════════════════════════════════════════════════════
# COMMAND DISPATCH TABLE
# ═════════════════════════════════════════════════════════════════════════════

COMMANDS = {
    "run": cmd_run,
    "disasm": cmd_disasm,
    "info": cmd_info,
}


if __name__ == "__main__":
    sys.exit(main())
