"""
Intcode VM — Interpreter (fetch / decode / execute loop)

This is the top-level class that integrates:
  - Memory tape (memory.py)
  - Instruction decoder + opcode table (decoder.py)
  - Input / output queues (FIFO, plain ints)

Execution model:
  1. Fetch the instruction word at PC
  2. Decode opcode + per-parameter addressing modes
  3. Resolve source operands / destination addresses
  4. Execute → update memory, queues, relative base
  5. Advance PC by 1 + parameter count (unless a jump set it)

Stop results (ExecuteResult):
  - DONE:          HALT (99) decoded. PC stays on the HALT, so calling
                   execute() again halts again immediately.
  - INPUT_NEEDED:  IN (3) decoded with an empty input queue. Nothing is
                   consumed and PC stays on the IN instruction: add_input()
                   followed by execute() resumes with the same read.

Fatal conditions (InvalidOpcode, InvalidDestination, AddressError,
WordOverflow) are raised, never returned. A machine that raised one should
be discarded.

Usage:
    vm = Interpreter.from_text("3,0,4,0,99")
    assert vm.execute() is ExecuteResult.INPUT_NEEDED
    vm.add_input(7)
    assert vm.execute() is ExecuteResult.DONE
    assert vm.get_output() == 7
"""

import logging
from collections import deque
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .decoder import (
    ParameterMode, DecodedInstruction, decode_instruction,
    OP_ADD, OP_MUL, OP_IN, OP_OUT, OP_JNZ, OP_JZ, OP_LT, OP_EQ, OP_ARB, OP_HALT,
)
from .disassembler import format_operand
from .errors import IntcodeError, InvalidOpcode
from .memory import Memory, load_program_file, parse_program

__all__ = ['Interpreter', 'ExecuteResult']

logger = logging.getLogger(__name__)


class ExecuteResult(Enum):
    DONE = 'DONE'
    INPUT_NEEDED = 'INPUT_NEEDED'


class Interpreter:
    """Intcode virtual machine.

    One instance owns its memory, queues and counters exclusively. Use
    clone() (or build from a fresh copy of a parsed image) for independent
    what-if runs of the same program.
    """

    def __init__(self, memory: Iterable[int] = ()):
        self.mem = Memory(memory)
        self.pc: int = 0
        self.relative_base: int = 0
        self.inputs: deque = deque()
        self.outputs: deque = deque()
        self.steps: int = 0        # instructions executed (diagnostics only)
        self.halted: bool = False

        self._trace = False
        self._trace_output: List[str] = []

    # ══════════════════════════════════════════════
    # Construction
    # ══════════════════════════════════════════════

    @classmethod
    def from_text(cls, text: str) -> 'Interpreter':
        """Build a machine from comma-separated program text (ParseError on bad input)."""
        return cls(parse_program(text))

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'Interpreter':
        return cls(load_program_file(path))

    def clone(self) -> 'Interpreter':
        """Return a fully independent copy of this machine, mid-run state included."""
        other = type(self).__new__(type(self))
        other.mem = self.mem.copy()
        other.pc = self.pc
        other.relative_base = self.relative_base
        other.inputs = deque(self.inputs)
        other.outputs = deque(self.outputs)
        other.steps = self.steps
        other.halted = self.halted
        other._trace = self._trace
        other._trace_output = list(self._trace_output)
        return other

    __copy__ = clone

    def __deepcopy__(self, memo) -> 'Interpreter':
        return self.clone()

    def __repr__(self) -> str:
        return (f"Interpreter(pc={self.pc}, rb={self.relative_base}, "
                f"mem={len(self.mem)}, in={len(self.inputs)}, "
                f"out={len(self.outputs)}, halted={self.halted})")

    # ══════════════════════════════════════════════
    # Memory / IO access
    # ══════════════════════════════════════════════

    def read(self, address: int) -> int:
        return self.mem.read(address)

    def write(self, address: int, value: int):
        self.mem.write(address, value)

    def add_input(self, value: int):
        """Append a value to the tail of the input queue."""
        self.inputs.append(value)

    def add_inputs(self, values: Iterable[int]):
        self.inputs.extend(values)

    def get_output(self) -> Optional[int]:
        """Pop the oldest output value, or None when nothing is pending."""
        if self.outputs:
            return self.outputs.popleft()
        return None

    def drain_output(self) -> List[int]:
        """Pop every pending output value, oldest first."""
        values = list(self.outputs)
        self.outputs.clear()
        return values

    @property
    def has_output(self) -> bool:
        return bool(self.outputs)

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def execute(self) -> ExecuteResult:
        """Run until HALT (DONE) or an IN with no pending input (INPUT_NEEDED).

        A program that never halts and never starves blocks here forever;
        there is no cycle limit.
        """
        while True:
            result = self.step()
            if result is not None:
                return result

    def step(self) -> Optional[ExecuteResult]:
        """Execute one instruction. Returns an ExecuteResult if stopped, else None."""
        pc = self.pc
        try:
            inst = decode_instruction(self.mem.read(pc), pc)
        except IntcodeError as e:
            if e.address is None:
                e.address = pc
            logger.error("Fatal decode error at pc=%d: %s", pc, e.message)
            raise

        opcode = inst.opcode

        if opcode == OP_HALT:
            if not self.halted:
                logger.debug("HALT at pc=%d after %d steps", pc, self.steps)
            self.halted = True
            return ExecuteResult.DONE

        if opcode == OP_IN and not self.inputs:
            logger.debug("Input needed at pc=%d", pc)
            return ExecuteResult.INPUT_NEEDED

        if self._trace:
            self._trace_output.append(self._format_trace(pc, inst))

        try:
            self._execute(inst)
        except IntcodeError as e:
            if e.address is None:
                e.address = pc
            logger.error("Fatal error executing %s at pc=%d: %s",
                         inst.mnemonic, pc, e.message)
            raise

        self.steps += 1
        return None

    def _execute(self, inst: DecodedInstruction):
        """Apply one decoded instruction. PC is advanced here."""
        opcode = inst.opcode
        next_pc = self.pc + inst.length

        if opcode == OP_ADD:
            self.mem.write(self._dest(inst, 3), self._param(inst, 1) + self._param(inst, 2))

        elif opcode == OP_MUL:
            self.mem.write(self._dest(inst, 3), self._param(inst, 1) * self._param(inst, 2))

        elif opcode == OP_IN:
            self.mem.write(self._dest(inst, 1), self.inputs.popleft())

        elif opcode == OP_OUT:
            self.outputs.append(self._param(inst, 1))

        elif opcode == OP_JNZ:
            if self._param(inst, 1) != 0:
                next_pc = self._param(inst, 2)

        elif opcode == OP_JZ:
            if self._param(inst, 1) == 0:
                next_pc = self._param(inst, 2)

        elif opcode == OP_LT:
            value = 1 if self._param(inst, 1) < self._param(inst, 2) else 0
            self.mem.write(self._dest(inst, 3), value)

        elif opcode == OP_EQ:
            value = 1 if self._param(inst, 1) == self._param(inst, 2) else 0
            self.mem.write(self._dest(inst, 3), value)

        elif opcode == OP_ARB:
            self.relative_base += self._param(inst, 1)

        else:
            raise InvalidOpcode(f"Opcode {opcode} has no handler", self.pc)

        self.pc = next_pc

    # ══════════════════════════════════════════════
    # Operand resolution
    # ══════════════════════════════════════════════

    def _param(self, inst: DecodedInstruction, n: int) -> int:
        """Value of source parameter n (1-based)."""
        raw = self.mem.read(self.pc + n)
        mode = inst.modes[n - 1]
        if mode == ParameterMode.IMMEDIATE:
            return raw
        if mode == ParameterMode.RELATIVE:
            return self.mem.read(self.relative_base + raw)
        return self.mem.read(raw)

    def _dest(self, inst: DecodedInstruction, n: int) -> int:
        """Address named by destination parameter n (decoder rejects immediate)."""
        raw = self.mem.read(self.pc + n)
        if inst.modes[n - 1] == ParameterMode.RELATIVE:
            return self.relative_base + raw
        return raw

    # ══════════════════════════════════════════════
    # Trace / Debug
    # ══════════════════════════════════════════════

    def enable_trace(self, enable: bool = True):
        """Enable per-instruction trace recording."""
        self._trace = enable

    def get_trace(self) -> str:
        return '\n'.join(self._trace_output)

    def clear_trace(self):
        self._trace_output.clear()

    def _format_trace(self, pc: int, inst: DecodedInstruction) -> str:
        raw = [self.mem.read(pc + i) for i in range(1, inst.length)]
        operands = ', '.join(format_operand(m, r) for m, r in zip(inst.modes, raw))
        return f"{pc:04d}: {inst.mnemonic:4s} {operands:24s} rb={self.relative_base}"

