"""Scalars: canonical rendering, key quoting, token classification and headers."""

import math
import re
from decimal import Decimal
from typing import TYPE_CHECKING

from .errors import ToonSyntaxError
from .string_utils import (
    BARE_KEY_PATTERN,
    LEADING_ZEROS_PATTERN,
    NUMBER_PATTERN,
    RESERVED_LITERALS,
    needs_quoting,
    quote_string,
    unescape_string,
)

if TYPE_CHECKING:
    from .types import Delimiter, JsonPrimitive

# A complete quoted string starting at the match position
_QUOTED = re.compile(r'"(?:[^"\\]|\\.)*"', re.DOTALL)

_LITERALS = {"null": None, "true": True, "false": False}


def encode_primitive(value: "JsonPrimitive", delimiter: "Delimiter" = ",") -> str:
    """
    Render a scalar as TOON text.

    Strings are quoted only when they have to be (see ``needs_quoting``),
    taking the active delimiter into account.
    """
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, (int, float)):
        return canonical_number(value)
    if isinstance(value, str):
        return encode_string_literal(value, delimiter)

    raise TypeError(f"Cannot encode value of type {type(value).__name__}")


def canonical_number(value: int | float) -> str:
    """
    Render a number in canonical TOON form.

    Never uses exponent notation, drops trailing fractional zeros and a
    trailing decimal point, renders -0 as "0" and NaN/Infinity as "null".
    Parsing the result yields the same value.

    >>> canonical_number(1.0)
    '1'
    >>> canonical_number(0.000001)
    '0.000001'
    """
    if isinstance(value, int):
        return str(value)

    if math.isnan(value) or math.isinf(value):
        return "null"
    if value == 0.0:
        return "0"

    # int() of a float is exact, so large whole floats keep every digit
    if value.is_integer():
        return str(int(value))

    # repr gives the shortest digits that round-trip; expand any exponent
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def encode_string_literal(value: str, delimiter: "Delimiter" = ",") -> str:
    return quote_string(value) if needs_quoting(value, delimiter) else value


def encode_key(key: str, delimiter: "Delimiter" = ",", quote_dotted: bool = False) -> str:
    """
    Encode an object key for TOON format.

    Identifier-like keys (dots allowed) stay bare unless they spell
    true, false or null. Other keys are quoted
    under the same rules as string values, and also when they contain a
    space. With ``quote_dotted`` any key containing a dot is quoted so a
    path-expanding decoder keeps it literal.
    """
    if not key or key in RESERVED_LITERALS:
        return quote_string(key)
    if quote_dotted and "." in key:
        return quote_string(key)
    if BARE_KEY_PATTERN.match(key):
        return key
    if " " in key:
        return quote_string(key)
    return encode_string_literal(key, delimiter)


def parse_primitive(token: str, strict: bool = True) -> "JsonPrimitive":
    """
    Classify and convert one scalar token.

    Rules are tried in order, first match wins:
    1. quoted string (quotes stripped, escapes processed)
    2. exact literal true/false/null
    3. leading-zero digits such as 007 (kept as a string)
    4. number pattern, when the result is finite
    5. anything else is an unquoted string

    Args:
        token: Raw token text; surrounding whitespace is ignored.
        strict: Reject bad escapes and malformed quoted strings.

    Raises:
        ToonSyntaxError: For malformed quoted strings in strict mode.
        EscapeError: For invalid escape sequences in strict mode.
    """
    token = token.strip()
    if not token:
        return ""

    if token.startswith('"'):
        end = find_closing_quote(token, 0)
        if end == len(token) - 1:
            return unescape_string(token[1:end], strict)
        if strict:
            if end == -1:
                raise ToonSyntaxError(f"Unterminated string: {token}")
            raise ToonSyntaxError(f"Unexpected characters after closing quote: {token}")
        return token

    if token in _LITERALS:
        return _LITERALS[token]

    if LEADING_ZEROS_PATTERN.match(token):
        return token

    if NUMBER_PATTERN.match(token):
        number = _parse_number(token)
        if number is not None:
            return number

    return token


def _parse_number(token: str) -> int | float | None:
    """Convert a number-shaped token; None when it overflows to infinity."""
    if "." not in token and "e" not in token and "E" not in token:
        return int(token)

    value = float(token)
    if math.isinf(value):
        return None
    # -0.0 and 0.0 both read as plain 0
    if value == 0.0:
        return 0
    return value


def find_closing_quote(s: str, start: int) -> int:
    """Index of the quote closing the one at ``start``, or -1 if unterminated."""
    match = _QUOTED.match(s, start)
    return match.end() - 1 if match else -1


def format_bracket(length: int, delimiter: "Delimiter" = ",") -> str:
    """``[N]`` for commas, ``[N<delim>]`` otherwise."""
    if delimiter == ",":
        return f"[{length}]"
    return f"[{length}{delimiter}]"


def format_array_header(
    length: int,
    key: str = "",
    fields: list[str] | None = None,
    delimiter: "Delimiter" = ",",
    quote_dotted: bool = False,
) -> str:
    """
    Build an array header such as ``users[2]{id,name}:``.

    ``key`` is already encoded ("" for root arrays and list items); field
    names are encoded here with ``encode_key``.
    """
    header = f"{key}{format_bracket(length, delimiter)}"
    if fields:
        header += "{" + delimiter.join(encode_key(f, delimiter, quote_dotted) for f in fields) + "}"
    return header + ":"
