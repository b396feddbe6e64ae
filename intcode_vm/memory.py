"""
Intcode VM — Growable Memory Tape + Program Text Codec

Memory model:
  - Zero-indexed sequence of signed integers, one word per cell
  - Logically unbounded: writes past the end grow the tape (zero-fill)
  - Reads past the end return 0 and do NOT grow the tape
  - Negative addresses are a caller/program bug → AddressError
  - Stored values must fit a signed 64-bit word → WordOverflow

Program text format:
  A single line of comma-separated signed decimal integers, e.g.
      1,9,10,3,2,3,11,0,99,30,40,50
  Whitespace around the whole line (and around each token) is trimmed.
  Tokens must fit a signed 64-bit word.
"""

import re
from pathlib import Path
from typing import Dict, Iterable, List, Tuple, Union

from .errors import AddressError, ParseError, WordOverflow

__all__ = ['Memory', 'parse_program', 'format_program', 'load_program_file',
           'WORD_MIN', 'WORD_MAX']

WORD_MIN = -(1 << 63)
WORD_MAX = (1 << 63) - 1

_TOKEN_RE = re.compile(r'^[+-]?[0-9]+$')


# ──────────────────────────────────────────────
# Program text
# ──────────────────────────────────────────────

def parse_program(text: str) -> List[int]:
    """Parse comma-separated program text into a list of words.

    Raises ParseError naming the first bad token and its position.
    No partial image is returned on failure.
    """
    words = []
    for index, raw in enumerate(text.strip().split(',')):
        token = raw.strip()
        if not _TOKEN_RE.match(token):
            raise ParseError(f"Token {index} is not a signed integer: {token!r}",
                             token=token, index=index)
        value = int(token)
        if not WORD_MIN <= value <= WORD_MAX:
            raise ParseError(f"Token {index} does not fit in 64 bits: {token}",
                             token=token, index=index)
        words.append(value)
    return words


def format_program(words: Iterable[int]) -> str:
    """Serialize words back to comma-separated text."""
    return ','.join(str(w) for w in words)


def load_program_file(path: Union[str, Path]) -> List[int]:
    """Read and parse a program file."""
    return parse_program(Path(path).read_text(encoding='utf-8'))


# ──────────────────────────────────────────────
# Memory
# ──────────────────────────────────────────────

class Memory:
    """Owned, growable word memory.

    The backing store is a plain list so a copy is a full, independent
    duplicate (no sharing between machines cloned from one template).
    """

    __slots__ = ('_mem',)

    def __init__(self, words: Iterable[int] = ()):
        self._mem: List[int] = list(words)

    def __len__(self) -> int:
        return len(self._mem)

    def __repr__(self) -> str:
        return f"Memory({len(self._mem)} words)"

    # --- Core read/write ---

    def read(self, address: int) -> int:
        """Read the word at address, 0 if beyond the current length."""
        if address < 0:
            raise AddressError(f"Negative read address {address}")
        if address >= len(self._mem):
            return 0
        return self._mem[address]

    def write(self, address: int, value: int):
        """Store value at address, zero-filling the tape up to it first."""
        if address < 0:
            raise AddressError(f"Negative write address {address}")
        if not WORD_MIN <= value <= WORD_MAX:
            raise WordOverflow(f"Value {value} at address {address} does not fit in 64 bits")
        missing = address + 1 - len(self._mem)
        if missing > 0:
            self._mem.extend([0] * missing)
        self._mem[address] = value

    # --- Bulk access ---

    def to_list(self) -> List[int]:
        return list(self._mem)

    def copy(self) -> 'Memory':
        return Memory(self._mem)

    # --- Snapshots ---

    def snapshot(self) -> Tuple[int, ...]:
        """Capture the whole tape for later diffing."""
        return tuple(self._mem)

    @staticmethod
    def diff_snapshots(snap_a: Tuple[int, ...],
                       snap_b: Tuple[int, ...]) -> Dict[int, Tuple[int, int]]:
        """Compare two snapshots, return {address: (old, new)} for changes.

        A cell missing from the shorter snapshot counts as 0, which is what
        read() would have returned for it.
        """
        changes = {}
        for addr in range(max(len(snap_a), len(snap_b))):
            old = snap_a[addr] if addr < len(snap_a) else 0
            new = snap_b[addr] if addr < len(snap_b) else 0
            if old != new:
                changes[addr] = (old, new)
        return changes

    # --- Dump ---

    def dump(self, start: int = 0, length: int = None, width: int = 8) -> str:
        """Produce a word dump for debugging, `width` words per row."""
        if length is None:
            length = max(len(self._mem) - start, 0)
        lines = []
        for offset in range(0, length, width):
            addr = start + offset
            count = min(width, length - offset)
            row = ' '.join(str(self.read(addr + i)) for i in range(count))
            lines.append(f'{addr:04d}: {row}')
        return '\n'.join(lines)
