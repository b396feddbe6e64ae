"""
Intcode VM
==========
A stored-program virtual machine for the Intcode instruction set: integer
memory that grows on demand, position / immediate / relative addressing,
and suspend-on-input execution that resumes without losing state.

Architecture:
    ┌──────────────┐    ┌──────────┐    ┌─────────────┐    ┌──────────────┐
    │ Program text │───>│  Memory  │───>│   Decoder   │───>│ Interpreter  │
    │ "1,0,0,0,99" │    │  (tape)  │    │ (op+modes)  │    │ (exec loop)  │
    └──────────────┘    └──────────┘    └─────────────┘    └──────────────┘

    - memory.py:       parse/format program text, growable word tape
    - decoder.py:      opcode table, addressing-mode digits
    - interpreter.py:  fetch/decode/execute, input/output queues, suspension
    - disassembler.py: listing for inspecting programs
    - ascii.py:        line/text framing for text-protocol programs
"""

__version__ = "0.4.0"

from .errors import (
    IntcodeError, ParseError, InvalidOpcode, InvalidDestination, AddressError,
    WordOverflow,
)
from .memory import Memory, parse_program, format_program, load_program_file
from .decoder import ParameterMode, OPCODES, decode_instruction
from .interpreter import Interpreter, ExecuteResult
from .disassembler import Disassembler, disassemble_text


def run_program(source, inputs=(), *, patches=None):
    """Run a program to completion with a fixed input list.

    Args:
        source: Program text or a sequence of words (copied, never mutated).
        inputs: Values queued before the first execute().
        patches: Optional {address: value} written before running.

    Returns:
        (outputs, interpreter) — the list of produced values and the
        machine, for inspecting final memory.

    Raises:
        IntcodeError subclasses for bad text / fatal machine errors, and
        RuntimeError if the program asks for more input than was given.
    """
    words = parse_program(source) if isinstance(source, str) else list(source)
    vm = Interpreter(words)
    for address, value in (patches or {}).items():
        vm.write(address, value)
    vm.add_inputs(inputs)
    if vm.execute() is ExecuteResult.INPUT_NEEDED:
        raise RuntimeError(f"Program needs more input at pc={vm.pc}")
    return vm.drain_output(), vm
