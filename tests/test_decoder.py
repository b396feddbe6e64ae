"""
Instruction word decoding tests — opcode split + addressing-mode digits.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from intcode_vm.decoder import OPCODES, ParameterMode, decode_instruction
from intcode_vm.errors import InvalidDestination, InvalidOpcode

P = ParameterMode.POSITION
I = ParameterMode.IMMEDIATE
R = ParameterMode.RELATIVE


class TestOpcodeTable:
    """Parameter counts from the instruction set reference."""

    @pytest.mark.parametrize("opcode, mnemonic, params", [
        (1, 'ADD', 3), (2, 'MUL', 3), (3, 'IN', 1), (4, 'OUT', 1),
        (5, 'JNZ', 2), (6, 'JZ', 2), (7, 'LT', 3), (8, 'EQ', 3),
        (9, 'ARB', 1), (99, 'HALT', 0),
    ])
    def test_entries(self, opcode, mnemonic, params):
        info = OPCODES[opcode]
        assert info.mnemonic == mnemonic
        assert info.params == params

    def test_destinations(self):
        dests = {op: info.dest for op, info in OPCODES.items() if info.dest}
        assert dests == {1: 3, 2: 3, 3: 1, 7: 3, 8: 3}


class TestDecode:

    def test_all_position(self):
        inst = decode_instruction(1)
        assert inst.opcode == 1
        assert inst.modes == (P, P, P)
        assert inst.length == 4

    def test_mixed_modes(self):
        """1002 → MUL, p1 position, p2 immediate, p3 position"""
        inst = decode_instruction(1002)
        assert inst.mnemonic == 'MUL'
        assert inst.modes == (P, I, P)

    def test_relative_destination(self):
        """21101 → ADD #, #, rb-relative dest"""
        assert decode_instruction(21101).modes == (I, I, R)

    def test_relative_input(self):
        assert decode_instruction(203).modes == (R,)

    def test_immediate_output(self):
        assert decode_instruction(104).modes == (I,)

    def test_halt(self):
        inst = decode_instruction(99)
        assert inst.modes == ()
        assert inst.length == 1

    def test_extra_mode_digits_ignored(self):
        """Digits beyond the parameter count are not decoded."""
        assert decode_instruction(99999).mnemonic == 'HALT'

    @pytest.mark.parametrize("word", [0, 10, 42, 98, 100, 1000])
    def test_unknown_opcode(self, word):
        with pytest.raises(InvalidOpcode):
            decode_instruction(word)

    @pytest.mark.parametrize("word", [-1, -99, -1002])
    def test_negative_word(self, word):
        with pytest.raises(InvalidOpcode):
            decode_instruction(word)

    @pytest.mark.parametrize("word", [301, 3001, 30001, 904, 1305])
    def test_bad_mode_digit(self, word):
        with pytest.raises(InvalidOpcode):
            decode_instruction(word)

    @pytest.mark.parametrize("word", [10001, 11102, 103, 10007, 11108])
    def test_immediate_destination(self, word):
        with pytest.raises(InvalidDestination):
            decode_instruction(word)

    def test_error_carries_address(self):
        with pytest.raises(InvalidOpcode) as exc:
            decode_instruction(42, 7)
        assert exc.value.address == 7
        assert str(exc.value).startswith("@7: ")
