"""Quoting, escaping and quote-aware scanning of TOON text."""

import re
from collections.abc import Iterator
from typing import TYPE_CHECKING

from .errors import EscapeError

if TYPE_CHECKING:
    from .types import Delimiter

# The only escapes TOON knows: backslash, quote, newline, carriage return, tab
_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t"}
_ESCAPE_TABLE = str.maketrans(_ESCAPES)
_UNESCAPES = {escaped[1]: raw for raw, escaped in _ESCAPES.items()}

_ESCAPE_SEQUENCE = re.compile(r"\\(.)", re.DOTALL)

# Bare words that would read back as something other than a string
RESERVED_LITERALS = frozenset({"true", "false", "null", "-"})

# Characters that force quoting regardless of delimiter
QUOTE_TRIGGER_CHARS = frozenset(':"\\[]{}\n\r\t')

NUMBER_PATTERN = re.compile(r"^-?[0-9]+(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?$")
LEADING_ZEROS_PATTERN = re.compile(r"^0[0-9]+$")

# One segment of a foldable/expandable dotted key
IDENTIFIER_SEGMENT_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Keys matching this are always emitted bare
BARE_KEY_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*$")


def escape_string(value: str) -> str:
    """Escape backslash, quote and control characters (no surrounding quotes added)."""
    return value.translate(_ESCAPE_TABLE)


def unescape_string(value: str, strict: bool = True) -> str:
    """
    Undo escape_string on the content of a quoted string.

    Any other character after a backslash is an error in strict mode; in
    lenient mode the sequence is kept as written. A lone trailing backslash
    is kept.

    Raises:
        EscapeError: For an unknown escape sequence in strict mode.
    """
    if "\\" not in value:
        return value

    def replace(match: re.Match) -> str:
        char = match.group(1)
        if char in _UNESCAPES:
            return _UNESCAPES[char]
        if strict:
            raise EscapeError(f"Invalid escape sequence: \\{char}")
        return match.group(0)

    return _ESCAPE_SEQUENCE.sub(replace, value)


def needs_quoting(value: str, delimiter: "Delimiter" = ",") -> bool:
    """
    Decide whether a string value must be written in quotes.

    Quoting is needed for the empty string, surrounding whitespace, the
    reserved words, anything number-shaped (leading zeros included), a
    leading '-', structural or control characters, and the active delimiter.
    """
    if not value or value != value.strip():
        return True

    if value in RESERVED_LITERALS or value.startswith("-"):
        return True

    if NUMBER_PATTERN.match(value) or LEADING_ZEROS_PATTERN.match(value):
        return True

    return any(c in QUOTE_TRIGGER_CHARS or c == delimiter for c in value)


def quote_string(value: str) -> str:
    """Wrap a string in quotes, escaping its content."""
    return f'"{escape_string(value)}"'


def is_valid_identifier_segment(segment: str) -> bool:
    return bool(IDENTIFIER_SEGMENT_PATTERN.match(segment))


def is_valid_dotted_path(key: str) -> bool:
    """True if ``key`` has at least one dot and every segment is an identifier."""
    if "." not in key:
        return False
    return all(is_valid_identifier_segment(part) for part in key.split("."))


def _unquoted_positions(text: str) -> Iterator[tuple[int, str]]:
    """
    Yield (index, char) for characters outside double quotes.

    Quote characters themselves are not yielded. A backslash and the
    character after it are skipped, inside or outside quotes.
    """
    in_quotes = False
    escaped = False
    for index, char in enumerate(text):
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == '"':
            in_quotes = not in_quotes
        elif not in_quotes:
            yield index, char


def find_unquoted_colon(line: str) -> int:
    """Index of the first ':' outside quotes, or -1."""
    return next((i for i, char in _unquoted_positions(line) if char == ":"), -1)


def split_by_delimiter(value: str, delimiter: "Delimiter") -> list[str]:
    """
    Split on ``delimiter`` outside quotes.

    Pieces are trimmed but otherwise raw: quotes and escapes are left for
    parse_primitive.

    >>> split_by_delimiter('a, "b,c" ,d', ",")
    ['a', '"b,c"', 'd']
    """
    pieces = []
    start = 0
    for index, char in _unquoted_positions(value):
        if char == delimiter:
            pieces.append(value[start:index].strip())
            start = index + 1
    pieces.append(value[start:].strip())
    return pieces
