"""
Intcode VM — ASCII framing helpers

Text-protocol programs exchange one character per word (code points
0..255) and report a final numeric answer as a single word above 255.
The interpreter knows nothing about this; these helpers sit on top of
its input/output queues.
"""

from typing import Optional, Tuple

from .interpreter import Interpreter

__all__ = ['ASCII_MAX', 'send_line', 'read_text', 'read_ascii_result']

ASCII_MAX = 255
NEWLINE = 10


def send_line(vm: Interpreter, line: str):
    """Queue each character of `line` followed by a newline."""
    for ch in line:
        vm.add_input(ord(ch))
    vm.add_input(NEWLINE)


def read_text(vm: Interpreter) -> str:
    """Drain all pending output as text.

    Raises ValueError on a word outside 0..255. The whole queue is drained
    either way.
    """
    chars = []
    for value in vm.drain_output():
        chars.append(_to_char(value))
    return ''.join(chars)


def read_ascii_result(vm: Interpreter) -> Tuple[str, Optional[int]]:
    """Drain output up to the first word above 255.

    Returns (text before it, that word) or (all text, None) when the
    program produced no such word.
    """
    chars = []
    while vm.has_output:
        value = vm.get_output()
        if value > ASCII_MAX:
            return ''.join(chars), value
        chars.append(_to_char(value))
    return ''.join(chars), None


def _to_char(value: int) -> str:
    if not 0 <= value <= ASCII_MAX:
        raise ValueError(f"Output {value} is not an ASCII character")
    return chr(value)
