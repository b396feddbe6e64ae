"""
Intcode VM — Instruction Word Decoder / Opcode Table

Instruction word layout (decimal digits):

      ... C B A D E
          │ │ │ └─┴── opcode (two low digits)
          │ │ └────── mode of parameter 1
          │ └──────── mode of parameter 2
          └────────── mode of parameter 3

  e.g. 1002 → opcode 02 (MUL), modes: p1=0 (position), p2=1 (immediate),
               p3=0 (position). Missing leading digits are 0.

Addressing modes:
  POSITION   (0)  raw word is an address, operand = mem[raw]
  IMMEDIATE  (1)  raw word is the operand (never valid for a destination)
  RELATIVE   (2)  operand = mem[raw + relative_base]

For a destination parameter the resolved ADDRESS is used instead of the
cell contents: raw (position) or raw + relative_base (relative).
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Optional, Tuple

from .errors import InvalidDestination, InvalidOpcode

__all__ = [
    'ParameterMode', 'OpcodeInfo', 'DecodedInstruction', 'OPCODES',
    'OP_ADD', 'OP_MUL', 'OP_IN', 'OP_OUT', 'OP_JNZ', 'OP_JZ',
    'OP_LT', 'OP_EQ', 'OP_ARB', 'OP_HALT', 'decode_instruction',
]


class ParameterMode(IntEnum):
    POSITION = 0
    IMMEDIATE = 1
    RELATIVE = 2


@dataclass(frozen=True)
class OpcodeInfo:
    """Opcode table entry."""
    mnemonic: str
    params: int
    dest: Optional[int] = None   # 1-based index of the write-target parameter
    description: str = ""


# ──────────────────────────────────────────────
# Opcode table
# ──────────────────────────────────────────────

OP_ADD = 1
OP_MUL = 2
OP_IN = 3
OP_OUT = 4
OP_JNZ = 5
OP_JZ = 6
OP_LT = 7
OP_EQ = 8
OP_ARB = 9
OP_HALT = 99

OPCODES: Dict[int, OpcodeInfo] = {
    OP_ADD:  OpcodeInfo('ADD',  3, 3, "dest = src1 + src2"),
    OP_MUL:  OpcodeInfo('MUL',  3, 3, "dest = src1 * src2"),
    OP_IN:   OpcodeInfo('IN',   1, 1, "dest = next input"),
    OP_OUT:  OpcodeInfo('OUT',  1, None, "emit src1"),
    OP_JNZ:  OpcodeInfo('JNZ',  2, None, "jump to src2 if src1 != 0"),
    OP_JZ:   OpcodeInfo('JZ',   2, None, "jump to src2 if src1 == 0"),
    OP_LT:   OpcodeInfo('LT',   3, 3, "dest = src1 < src2"),
    OP_EQ:   OpcodeInfo('EQ',   3, 3, "dest = src1 == src2"),
    OP_ARB:  OpcodeInfo('ARB',  1, None, "relative base += src1"),
    OP_HALT: OpcodeInfo('HALT', 0, None, "halt"),
}

_MODE_SCALE = (100, 1000, 10000)


@dataclass(frozen=True)
class DecodedInstruction:
    """One decoded instruction word."""
    opcode: int
    info: OpcodeInfo
    modes: Tuple[ParameterMode, ...]

    @property
    def mnemonic(self) -> str:
        return self.info.mnemonic

    @property
    def length(self) -> int:
        """Words occupied: opcode word + parameters."""
        return 1 + self.info.params


def decode_instruction(word: int, address: Optional[int] = None) -> DecodedInstruction:
    """Split an instruction word into opcode + per-parameter modes.

    Raises InvalidOpcode for negative words, unknown opcodes and mode digits
    outside {0,1,2}; InvalidDestination for an immediate-mode destination.
    `address` is only used to label the error.
    """
    if word < 0:
        raise InvalidOpcode(f"Negative instruction word {word}", address)

    opcode = word % 100
    info = OPCODES.get(opcode)
    if info is None:
        raise InvalidOpcode(f"Unknown opcode {opcode} (word {word})", address)

    modes = []
    for i in range(info.params):
        digit = (word // _MODE_SCALE[i]) % 10
        try:
            mode = ParameterMode(digit)
        except ValueError:
            raise InvalidOpcode(
                f"{info.mnemonic}: bad mode digit {digit} for parameter {i + 1} "
                f"(word {word})", address) from None
        if i + 1 == info.dest and mode == ParameterMode.IMMEDIATE:
            raise InvalidDestination(
                f"{info.mnemonic}: immediate mode on destination parameter "
                f"{i + 1} (word {word})", address)
        modes.append(mode)

    return DecodedInstruction(opcode, info, tuple(modes))
