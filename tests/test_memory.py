"""
Memory tape + program text codec tests.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from intcode_vm.memory import (
    Memory, parse_program, format_program, load_program_file, WORD_MAX, WORD_MIN,
)
from intcode_vm.errors import AddressError, ParseError, WordOverflow


class TestParseProgram:
    """Comma-separated text → word list."""

    def test_simple(self):
        assert parse_program("1,9,10,3,2,3,11,0,99,30,40,50") == \
            [1, 9, 10, 3, 2, 3, 11, 0, 99, 30, 40, 50]

    def test_trailing_newline(self):
        assert parse_program("1,0,0,0,99\n") == [1, 0, 0, 0, 99]

    def test_surrounding_whitespace(self):
        assert parse_program("  104, -2 ,+3\r\n") == [104, -2, 3]

    def test_single_word(self):
        assert parse_program("99") == [99]

    def test_word_limits(self):
        text = f"{WORD_MIN},{WORD_MAX}"
        assert parse_program(text) == [WORD_MIN, WORD_MAX]

    @pytest.mark.parametrize("text, token, index", [
        ("1,2,x", "x", 2),
        ("1,,2", "", 1),
        ("1,2,", "", 2),
        ("1.5,2", "1.5", 0),
        ("1,2 3", "2 3", 1),
        ("0x10", "0x10", 0),
        ("1_000", "1_000", 0),
        ("\u0661\u0662,99", "\u0661\u0662", 0),
        ("99,\uff15", "\uff15", 1),
        ("", "", 0),
    ])
    def test_bad_token(self, text, token, index):
        with pytest.raises(ParseError) as exc:
            parse_program(text)
        assert exc.value.token == token
        assert exc.value.index == index

    def test_out_of_range(self):
        with pytest.raises(ParseError):
            parse_program(str(WORD_MAX + 1))
        with pytest.raises(ParseError):
            parse_program(str(WORD_MIN - 1))


class TestFormatProgram:

    def test_format(self):
        assert format_program([1, -2, 30]) == "1,-2,30"

    @pytest.mark.parametrize("text", [
        "1,9,10,3,2,3,11,0,99,30,40,50",
        "109,1,204,-1,1001,100,1,100,1008,100,16,101,1006,101,0,99",
        "-9223372036854775808,0,9223372036854775807",
    ])
    def test_round_trip(self, text):
        assert format_program(parse_program(text)) == text

    def test_load_file(self, tmp_path):
        path = tmp_path / "input.txt"
        path.write_text("3,0,4,0,99\n", encoding="utf-8")
        assert load_program_file(path) == [3, 0, 4, 0, 99]
        assert load_program_file(str(path)) == [3, 0, 4, 0, 99]


class TestMemory:
    """Growable tape semantics."""

    def test_read_within(self):
        mem = Memory([5, 6, 7])
        assert mem.read(0) == 5
        assert mem.read(2) == 7

    def test_read_beyond_is_zero_and_does_not_grow(self):
        mem = Memory([5, 6, 7])
        assert mem.read(3) == 0
        assert mem.read(1_000_000) == 0
        assert len(mem) == 3

    def test_write_grows_with_zero_fill(self):
        mem = Memory([1, 2])
        mem.write(6, 42)
        assert len(mem) == 7
        assert mem.to_list() == [1, 2, 0, 0, 0, 0, 42]

    def test_write_at_end(self):
        mem = Memory([1, 2])
        mem.write(2, 3)
        assert mem.to_list() == [1, 2, 3]

    def test_overwrite(self):
        mem = Memory([1, 2])
        mem.write(0, -9)
        assert mem.to_list() == [-9, 2]

    def test_negative_address(self):
        mem = Memory([1])
        with pytest.raises(AddressError):
            mem.read(-1)
        with pytest.raises(AddressError):
            mem.write(-1, 0)

    def test_write_rejects_values_outside_word(self):
        mem = Memory([1])
        mem.write(0, WORD_MAX)
        mem.write(1, WORD_MIN)
        with pytest.raises(WordOverflow):
            mem.write(0, WORD_MAX + 1)
        with pytest.raises(WordOverflow):
            mem.write(5, WORD_MIN - 1)
        assert mem.to_list() == [WORD_MAX, WORD_MIN]

    def test_copy_is_independent(self):
        mem = Memory([1, 2, 3])
        twin = mem.copy()
        twin.write(0, 100)
        twin.write(10, 1)
        assert mem.to_list() == [1, 2, 3]
        assert twin.read(0) == 100

    def test_source_list_not_shared(self):
        words = [1, 2, 3]
        mem = Memory(words)
        mem.write(0, 7)
        assert words == [1, 2, 3]

    def test_snapshot_diff(self):
        mem = Memory([1, 2, 3])
        before = mem.snapshot()
        mem.write(1, 20)
        mem.write(5, 9)
        after = mem.snapshot()
        assert Memory.diff_snapshots(before, after) == {1: (2, 20), 5: (0, 9)}

    def test_diff_ignores_zero_fill(self):
        assert Memory.diff_snapshots((1, 2), (1, 2, 0, 0)) == {}

    def test_dump(self):
        mem = Memory([1, 2, 3, 4, 5])
        assert mem.dump(width=2) == "0000: 1 2\n0002: 3 4\n0004: 5"

    def test_dump_window(self):
        mem = Memory([1, 2, 3])
        assert mem.dump(start=2, length=3, width=8) == "0002: 3 0 0"
