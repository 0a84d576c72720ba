"""Tests for line preprocessing and array header parsing."""

import sys
from pathlib import Path

import pytest

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from toon_codec import DecodeOptions, ToonIndentationError, decode
from toon_codec.decode import compute_depth, parse_array_header, parse_lines
from toon_codec.expand import QUOTED_KEY_MARKER


class TestComputeDepth:
    """Test indentation depth computation."""

    def test_spaces(self):
        assert compute_depth("key: 1") == 0
        assert compute_depth("  key: 1") == 1
        assert compute_depth("      key: 1") == 3

    def test_custom_indent(self):
        assert compute_depth("    key", indent_size=4) == 1

    def test_not_a_multiple(self):
        with pytest.raises(ToonIndentationError, match="not a multiple"):
            compute_depth("   key")

    def test_floor_when_lenient(self):
        assert compute_depth("   key", strict=False) == 1
        assert compute_depth(" key", strict=False) == 0

    def test_tab(self):
        with pytest.raises(ToonIndentationError, match="Tabs"):
            compute_depth("\tkey")
        assert compute_depth("\tkey", strict=False) == 1
        assert compute_depth("\t  key", strict=False) == 2

    def test_line_number_in_error(self):
        with pytest.raises(ToonIndentationError) as excinfo:
            compute_depth("   key", line_number=7)
        assert excinfo.value.line_number == 7


class TestParseLines:
    """Test raw line preprocessing."""

    def test_blank_lines_dropped(self):
        lines = list(parse_lines(["a:", "", "   ", "  b: 1"]))
        assert [line.content for line in lines] == ["a:", "b: 1"]
        assert [line.line_number for line in lines] == [1, 4]

    def test_trailing_whitespace_and_cr(self):
        (line,) = parse_lines(["  key: v  \r"])
        assert line.content == "key: v"
        assert line.indent == 2
        assert line.depth == 1

    def test_indent_counts_tab_width(self):
        (line,) = parse_lines(["\tkey"], indent_size=2, strict=False)
        assert line.indent == 2
        assert line.content == "key"


class TestThreeSpaceIndentation:
    """Three-space indentation with the default indent size."""

    TEXT = "obj:\n   key: value"

    def test_strict_rejects(self):
        with pytest.raises(ToonIndentationError) as excinfo:
            decode(self.TEXT)
        assert excinfo.value.line_number == 2

    def test_lenient_floors(self):
        assert decode(self.TEXT, DecodeOptions(strict=False)) == {"obj": {"key": "value"}}


class TestParseArrayHeader:
    """Test array header recognition."""

    def test_keyed(self):
        header, rest = parse_array_header("items[3]: a,b,c")
        assert header.key == "items"
        assert header.length == 3
        assert header.delimiter == ","
        assert header.fields == []
        assert rest == "a,b,c"

    def test_root(self):
        header, rest = parse_array_header("[0]:")
        assert header.key is None
        assert header.length == 0
        assert rest == ""

    def test_tabular_pipe(self):
        header, rest = parse_array_header("users[2|]{id|name}:")
        assert header.delimiter == "|"
        assert header.fields == ["id", "name"]
        assert rest == ""

    def test_tab_delimiter(self):
        header, _ = parse_array_header("t[2\t]{a\tb}:")
        assert header.delimiter == "\t"
        assert header.fields == ["a", "b"]

    def test_quoted_key(self):
        header, _ = parse_array_header('"my list"[1]: x')
        assert header.key == "my list"

    def test_quoted_key_marked(self):
        header, _ = parse_array_header('"a.b"[1]{"c.d",e}: x', mark_quoted=True)
        assert header.key == QUOTED_KEY_MARKER + "a.b"
        assert header.fields == [QUOTED_KEY_MARKER + "c.d", "e"]

    def test_quoted_fields_with_braces(self):
        header, rest = parse_array_header('rows[1]{"a}b","c{d","e:f"}: x')
        assert header.fields == ["a}b", "c{d", "e:f"]
        assert rest == "x"

    def test_quoted_field_with_escaped_quote(self):
        header, _ = parse_array_header('rows[1|]{"a\\"}b"|c}:')
        assert header.fields == ['a"}b', "c"]

    @pytest.mark.parametrize("content", ["key: value", "items[x]: 1", "items[3]", "a: b[2]: c"])
    def test_not_a_header(self, content):
        assert parse_array_header(content) is None
