"""
Intcode Disassembler — listing generator for Intcode memory images

API Usage:
    from intcode_vm.disassembler import Disassembler

    dis = Disassembler()
    for inst in dis.disassemble([1002, 4, 3, 4, 33]):
        print(inst.format())
    # 0000: 1002,4,3,4           MUL [4], #3, [4]
    # 0004: 33                   DATA 33  ; Unknown opcode 33 (word 33)

Operand notation:
    [12]     position mode  (cell 12)
    #12      immediate mode (the value 12)
    [rb+3]   relative mode  (cell relative_base + 3)

Code and data share one tape, so a linear sweep cannot tell them apart:
words that do not decode are listed as single-word DATA entries and the
sweep resumes at the next word.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from .decoder import ParameterMode, decode_instruction
from .errors import AddressError, IntcodeError
from .memory import parse_program

__all__ = ['Disassembler', 'DisassembledInstruction', 'format_operand',
           'disassemble_text']


def format_operand(mode: ParameterMode, raw: int) -> str:
    """Render one parameter in listing notation."""
    if mode == ParameterMode.IMMEDIATE:
        return f"#{raw}"
    if mode == ParameterMode.RELATIVE:
        return f"[rb{raw:+d}]"
    return f"[{raw}]"


@dataclass
class DisassembledInstruction:
    """One decoded instruction with all formatting data."""
    address: int
    words: List[int]
    mnemonic: str
    operands: List[str]
    comment: str = ""

    @property
    def length(self) -> int:
        return len(self.words)

    @property
    def words_str(self) -> str:
        return ','.join(str(w) for w in self.words)

    @property
    def asm(self) -> str:
        return f"{self.mnemonic} {', '.join(self.operands)}".strip()

    def format(self, words_width: int = 20) -> str:
        """Format as a single listing line."""
        line = f"{self.address:04d}: {self.words_str.ljust(words_width)} {self.asm}"
        if self.comment:
            line += f"  ; {self.comment}"
        return line


class Disassembler:
    """Linear-sweep disassembler over a word sequence."""

    def decode_one(self, words: Sequence[int], address: int) -> DisassembledInstruction:
        """Decode the instruction at `address`; undecodable words become DATA."""
        if address < 0:
            raise AddressError(f"Negative address {address}")
        word = words[address]
        try:
            decoded = decode_instruction(word, address)
        except IntcodeError as e:
            return DisassembledInstruction(address, [word], 'DATA', [str(word)],
                                           comment=e.message)

        raw = [self._word(words, address + i) for i in range(1, decoded.length)]
        operands = [format_operand(mode, r) for mode, r in zip(decoded.modes, raw)]
        comment = ""
        if address + decoded.length > len(words):
            comment = "truncated"
        return DisassembledInstruction(address, [word] + raw, decoded.mnemonic,
                                       operands, comment)

    def disassemble(self, words: Sequence[int], start: int = 0,
                    end: Optional[int] = None) -> List[DisassembledInstruction]:
        """Disassemble words[start:end] into listing entries."""
        if start < 0:
            raise AddressError(f"Negative start address {start}")
        if end is None or end > len(words):
            end = len(words)
        results = []
        addr = start
        while addr < end:
            inst = self.decode_one(words, addr)
            results.append(inst)
            addr += inst.length
        return results

    def listing(self, words: Sequence[int], start: int = 0,
                end: Optional[int] = None) -> str:
        return '\n'.join(i.format() for i in self.disassemble(words, start, end))

    @staticmethod
    def _word(words: Sequence[int], address: int) -> int:
        # Parameters past the end of the image read as 0, same as Memory.read
        return words[address] if address < len(words) else 0


def disassemble_text(text: str) -> str:
    """Parse program text and return its listing."""
    return Disassembler().listing(parse_program(text))
