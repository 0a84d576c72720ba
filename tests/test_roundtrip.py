"""Round-trip tests for TOON encode/decode."""

import sys
from pathlib import Path

import pytest

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from toon_codec import DecodeOptions, EncodeOptions, decode, encode


def roundtrip(data, encode_options=None, decode_options=None):
    """Encode then decode, returning the result."""
    encoded = encode(data, encode_options)
    return decode(encoded, decode_options)


SAMPLES = [
    {"name": "Alice", "age": 30, "active": True, "score": None},
    {"users": [{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}]},
    {"items": [1, {"x": 2}, "three", [4, 5], [], {}]},
    {"a": {"b": {"c": {"d": [{"e": 1, "f": [1, 2]}, {"g": {}}]}}}},
    [[1, 2], [{"a": 1}, {"a": 2}], [[3], ["x", {"y": None}]]],
    {"rows": [{"k": "a,b", "v": " pad "}, {"k": "c|d", "v": "-1"}]},
    {"floats": [0.1, 1.5e-7, -2.25, 123456.789], "big": 2**64},
]


class TestRoundtripPrimitives:
    """Test round-trip for primitive values."""

    def test_null(self):
        assert roundtrip(None) is None

    def test_booleans(self):
        assert roundtrip(True) is True
        assert roundtrip(False) is False

    def test_integers(self):
        assert roundtrip(42) == 42
        assert roundtrip(-17) == -17
        assert roundtrip(0) == 0

    def test_floats(self):
        assert roundtrip(3.14) == 3.14
        assert roundtrip(-2.5) == -2.5
        assert roundtrip(0.1 + 0.2) == 0.1 + 0.2
        assert roundtrip(1.5e-7) == 1.5e-7

    def test_strings(self):
        assert roundtrip("hello") == "hello"
        assert roundtrip("hello world") == "hello world"
        assert roundtrip("") == ""

    def test_structural_strings(self):
        assert roundtrip("a: b") == "a: b"
        assert roundtrip("[3]: x") == "[3]: x"
        assert roundtrip("- item") == "- item"


class TestRoundtripObjects:
    """Test round-trip for objects."""

    def test_simple_object(self):
        data = {"name": "Alice", "age": 30}
        assert roundtrip(data) == data

    def test_nested_object(self):
        data = {"user": {"name": "Bob", "role": "admin"}}
        assert roundtrip(data) == data

    def test_empty_object(self):
        data = {"data": {}}
        assert roundtrip(data) == data

    def test_empty_root_object(self):
        assert roundtrip({}) == {}

    def test_deeply_nested(self):
        data = {"a": {"b": {"c": {"d": {"e": 1}}}}}
        assert roundtrip(data) == data


class TestRoundtripArrays:
    """Test round-trip for arrays."""

    def test_primitive_array(self):
        data = {"items": [1, 2, 3]}
        assert roundtrip(data) == data

    def test_string_array(self):
        data = {"tags": ["alpha", "beta", "gamma"]}
        assert roundtrip(data) == data

    def test_empty_array(self):
        data = {"items": []}
        assert roundtrip(data) == data

    def test_tabular_array(self):
        data = {"users": [{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}]}
        assert roundtrip(data) == data

    def test_list_array(self):
        data = {"items": [{"a": {"b": 1}}, {"a": {"b": 2}}]}
        assert roundtrip(data) == data

    def test_mixed_array(self):
        data = {"items": [1, "two", True, None]}
        assert roundtrip(data) == data

    def test_nested_arrays(self):
        data = {"matrix": [[1, 2], [3, 4]]}
        assert roundtrip(data) == data

    def test_empty_objects_in_list(self):
        data = {"items": [{}, {"a": 1}, {}]}
        assert roundtrip(data) == data

    def test_empty_nested_object_then_sibling(self):
        data = {"items": [{"a": {}, "b": 1}]}
        assert roundtrip(data) == data


class TestRoundtripEscapeSequences:
    """Test round-trip for escaped strings."""

    def test_newline(self):
        data = {"content": "line1\nline2"}
        assert roundtrip(data) == data

    def test_tab(self):
        data = {"content": "col1\tcol2"}
        assert roundtrip(data) == data

    def test_carriage_return(self):
        data = {"content": "line1\rline2"}
        assert roundtrip(data) == data

    def test_backslash(self):
        data = {"path": "C:\\Users\\name"}
        assert roundtrip(data) == data

    def test_quotes(self):
        data = {"msg": 'He said "hello"'}
        assert roundtrip(data) == data

    def test_mixed_escapes(self):
        data = {"text": 'Line 1\nLine 2\twith "quotes" and \\backslash'}
        assert roundtrip(data) == data

    def test_quotes_inside_inline_array(self):
        data = {"items": ['say "hi"', "a\\b", "x,y"]}
        assert roundtrip(data) == data

    def test_multiline_code(self):
        """Multiline content must round-trip exactly."""
        data = {
            "code": """def hello():
    print("Hello, World!")
    return True"""
        }
        result = roundtrip(data)
        assert result == data

    def test_multiline_json(self):
        data = {
            "json": """{
    "name": "test",
    "values": [1, 2, 3]
}"""
        }
        assert roundtrip(data) == data

    def test_file_content(self):
        file_content = """import os

def main():
    path = os.getcwd()
    print(f"Current directory: {path}")

if __name__ == "__main__":
    main()
"""
        data = {"file_path": "/tmp/test.py", "content": file_content}
        assert roundtrip(data) == data


class TestRoundtripComplexStructures:
    """Test round-trip for complex real-world structures."""

    def test_api_response_with_nested_data(self):
        data = {
            "status": "success",
            "data": {
                "users": [
                    {"id": 1, "name": "Alice", "email": "alice@example.com"},
                    {"id": 2, "name": "Bob", "email": "bob@example.com"},
                ],
                "pagination": {"page": 1, "total": 100, "per_page": 10},
            },
            "meta": {"timestamp": "2024-01-15T10:30:00Z", "version": "1.0"},
        }
        assert roundtrip(data) == data

    def test_config_with_special_characters(self):
        data = {
            "database": {
                "connection_string": "postgresql://user:p@ss:word@localhost/db",
                "query": 'SELECT * FROM users WHERE name = "test"',
            },
            "paths": {"home": "/Users/test", "windows": "C:\\Users\\test"},
        }
        assert roundtrip(data) == data

    @pytest.mark.parametrize("data", SAMPLES)
    def test_samples(self, data):
        assert roundtrip(data) == data


class TestRoundtripRootValues:
    """Test round-trip for root-level values."""

    def test_root_array(self):
        data = [1, 2, 3]
        assert roundtrip(data) == data

    def test_root_object_array(self):
        data = [{"a": 1}, {"a": 2}]
        assert roundtrip(data) == data

    def test_root_empty_array(self):
        assert roundtrip([]) == []


class TestRoundtripEdgeCases:
    """Test round-trip for edge cases."""

    def test_special_keys(self):
        data = {
            "normal": 1,
            "with space": 2,
            "with:colon": 3,
            "with[bracket]": 4,
            "123": 5,
            "": 6,
        }
        assert roundtrip(data) == data

    @pytest.mark.parametrize("delimiter", [",", "\t", "|"])
    def test_structural_field_names(self, delimiter):
        row = {"a}b": 1, "c{d": 2, "e:f": 3, "g,h": 4, "i|j": 5, "k\tl": 6, 'm"n': 7}
        data = {"rows": [row, {k: v * 10 for k, v in row.items()}]}
        text = encode(data, EncodeOptions(delimiter=delimiter))
        assert text.startswith("rows[2")
        assert decode(text) == data

    @pytest.mark.parametrize("delimiter", [",", "\t", "|"])
    def test_lone_brace_field(self, delimiter):
        data = [{"}": None}]
        assert roundtrip(data, EncodeOptions(delimiter=delimiter)) == data

    def test_reserved_word_keys(self):
        data = {"true": 1, "false": {"null": [1, 2]}, "rows": [{"null": True}]}
        result = roundtrip(data)
        assert result == data
        assert all(isinstance(key, str) for key in result)

    def test_values_that_look_like_literals(self):
        data = {
            "str_true": "true",
            "str_false": "false",
            "str_null": "null",
            "str_num": "123",
            "str_zero": "007",
            "str_exp": "1e5",
        }
        result = roundtrip(data)
        assert result == data
        assert isinstance(result["str_true"], str)
        assert isinstance(result["str_num"], str)

    def test_empty_string_value(self):
        data = {"empty": ""}
        assert roundtrip(data) == data

    def test_string_with_only_spaces(self):
        data = {"spaces": "   "}
        assert roundtrip(data) == data

    def test_unicode_content(self):
        data = {"emoji": "Hello 👋", "chinese": "你好", "math": "∑ x²"}
        assert roundtrip(data) == data


class TestRoundtripOptions:
    """Test round-trip under non-default encoding options."""

    @pytest.mark.parametrize("delimiter", [",", "\t", "|"])
    @pytest.mark.parametrize("data", SAMPLES)
    def test_delimiters(self, data, delimiter):
        assert roundtrip(data, EncodeOptions(delimiter=delimiter)) == data

    @pytest.mark.parametrize("data", SAMPLES)
    def test_indent_four(self, data):
        result = roundtrip(data, EncodeOptions(indent=4), DecodeOptions(indent=4))
        assert result == data

    @pytest.mark.parametrize("data", SAMPLES)
    def test_compact(self, data):
        assert roundtrip(data, EncodeOptions(compact=True)) == data

    @pytest.mark.parametrize("data", SAMPLES)
    def test_narrow_lines(self, data):
        assert roundtrip(data, EncodeOptions(max_line_length=8)) == data

    def test_crlf(self):
        data = {"a": {"b": [1, 2]}, "c": "x"}
        opts = EncodeOptions(line_ending="\r\n", trailing_newline=True)
        assert roundtrip(data, opts) == data


class TestRoundtripFolding:
    """Test key folding paired with path expansion."""

    FOLD = EncodeOptions(key_folding="safe")
    EXPAND = DecodeOptions(expand_paths="safe")

    def test_folded_chain(self):
        data = {"a": {"b": {"c": 1}}, "d": 2}
        assert encode(data, self.FOLD) == "a.b.c: 1\nd: 2"
        assert roundtrip(data, self.FOLD, self.EXPAND) == data

    def test_literal_dotted_key_survives(self):
        data = {"x.y": 1, "a": {"b": 2}}
        assert roundtrip(data, self.FOLD, self.EXPAND) == data

    def test_folding_in_arrays(self):
        data = {"items": [{"meta": {"id": 1}, "n": 2}, 3]}
        assert roundtrip(data, self.FOLD, self.EXPAND) == data

    @pytest.mark.parametrize("data", SAMPLES)
    def test_samples(self, data):
        assert roundtrip(data, self.FOLD, self.EXPAND) == data


class TestIdempotence:
    """Encoding decoded output reproduces the same text."""

    @pytest.mark.parametrize("data", SAMPLES)
    def test_encode_decode_encode(self, data):
        text = encode(data)
        assert encode(decode(text)) == text

    def test_whole_float_normalizes(self):
        text = encode({"v": 1.0})
        assert text == "v: 1"
        assert encode(decode(text)) == text

    def test_exponent_input_not_preserved(self):
        # Decoding accepts exponents, encoding never produces them
        assert encode(decode("v: 1e5")) == "v: 100000"
        assert encode(decode("v: 1.5e-3")) == "v: 0.0015"
