"""TOON decoder implementation."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from .errors import DecodeError, LengthMismatchError, ToonIndentationError, ToonSyntaxError
from .expand import QUOTED_KEY_MARKER, expand_paths
from .primitives import parse_primitive
from .string_utils import find_unquoted_colon, split_by_delimiter, unescape_string
from .types import ArrayHeaderInfo, DecodeOptions, JsonValue, ParsedLine

logger = logging.getLogger(__name__)

# Pattern for array header: key[N<delim?>]{fields}:rest
ARRAY_HEADER_PATTERN = re.compile(
    r"^(?P<key>[^:\[\]{}\"]+|\"(?:[^\"\\]|\\.)*\")?"  # Optional key (possibly quoted)
    r"\[(?P<length>[0-9]+)(?P<delim>[,\t|])?\]"  # [N<delim?>]
    r"(?:\{(?P<fields>(?:[^}\"]|\"(?:[^\"\\]|\\.)*\")*)\})?"  # Optional {fields}, quotes may hold braces
    r":(?P<rest>.*)$"  # Colon and rest
)


def decode(text: str, options: DecodeOptions | None = None) -> JsonValue:
    """
    Parse a TOON document into dicts, lists and scalars.

    Lines are split on "\\n"; a trailing "\\r" is dropped with the other
    trailing whitespace. A document with no content lines decodes to {}.

    Raises:
        DecodeError: For malformed input; the subclass names the failure
            kind and ``line_number`` points at the offending line.
    """
    opts = options or DecodeOptions()
    return decode_lines(text.split("\n"), opts)


def decode_lines(lines: Iterable[str], options: DecodeOptions | None = None) -> JsonValue:
    """Same as ``decode`` for input that is already split into lines."""
    opts = options or DecodeOptions()
    parsed_lines = list(parse_lines(lines, opts.indent, opts.strict))
    logger.debug("Decoding %d non-blank lines (strict=%s)", len(parsed_lines), opts.strict)

    if not parsed_lines:
        return {}

    cursor = _Cursor(parsed_lines, opts)
    result = _decode_root(cursor)

    if opts.expand_paths == "safe":
        result = expand_paths(result, opts.strict)

    return result


def is_valid(text: str, options: DecodeOptions | None = None) -> bool:
    """Return True if the text decodes without error under the given options."""
    try:
        decode(text, options)
    except DecodeError as exc:
        logger.debug("Invalid TOON: %s", exc)
        return False
    return True


def compute_depth(
    line: str, indent_size: int = 2, strict: bool = True, line_number: int | None = None
) -> int:
    """
    Compute the indentation depth of a raw line.

    Leading spaces are counted; a tab counts as ``indent_size`` spaces
    unless strict mode rejects it.

    Raises:
        ToonIndentationError: In strict mode, for tabs in the indentation or
            a space count that is not a multiple of ``indent_size``.
    """
    spaces, _ = _measure_indent(line, indent_size, strict, line_number)
    return spaces // indent_size


def _measure_indent(
    line: str, indent_size: int, strict: bool, line_number: int | None
) -> tuple[int, int]:
    """Return (equivalent spaces, number of indentation characters)."""
    spaces = 0
    width = 0
    for char in line:
        if char == " ":
            spaces += 1
        elif char == "\t":
            if strict:
                raise ToonIndentationError("Tabs not allowed in indentation", line_number)
            spaces += indent_size
        else:
            break
        width += 1

    if strict and spaces % indent_size != 0:
        raise ToonIndentationError(
            f"Indentation {spaces} is not a multiple of {indent_size}", line_number
        )

    return spaces, width


def parse_lines(lines: Iterable[str], indent_size: int = 2, strict: bool = True) -> Iterator[ParsedLine]:
    """Turn raw lines into ParsedLine objects, dropping blank lines."""
    for i, raw in enumerate(lines, start=1):
        if not raw.strip():
            continue

        spaces, width = _measure_indent(raw, indent_size, strict, i)
        yield ParsedLine(
            content=raw[width:].rstrip(),
            indent=spaces,
            depth=spaces // indent_size,
            line_number=i,
        )


def parse_array_header(
    content: str, mark_quoted: bool = False, strict: bool = True
) -> tuple[ArrayHeaderInfo, str] | None:
    """
    Parse an array header such as ``key[3|]{a|b}: rest``.

    Returns:
        The header and the trimmed text after its colon, or None if the
        content is not an array header.
    """
    match = ARRAY_HEADER_PATTERN.match(content)
    if not match:
        return None

    raw_key = match.group("key")
    key = _parse_key(raw_key, mark_quoted, strict) if raw_key and raw_key.strip() else None
    delimiter = match.group("delim") or ","

    fields_str = match.group("fields")
    if fields_str:
        fields = [_parse_key(f, mark_quoted, strict) for f in split_by_delimiter(fields_str, delimiter)]
    else:
        fields = []

    header = ArrayHeaderInfo(
        length=int(match.group("length")), key=key, delimiter=delimiter, fields=fields
    )
    return header, match.group("rest").strip()


class _Cursor:
    """Read position over the parsed lines, shared by the recursive decoders."""

    def __init__(self, lines: list[ParsedLine], options: DecodeOptions):
        self.lines = lines
        self.options = options
        self.pos = 0

    @property
    def strict(self) -> bool:
        return self.options.strict

    @property
    def mark_quoted(self) -> bool:
        """Quoted keys are tagged so path expansion leaves them alone."""
        return self.options.expand_paths == "safe"

    def peek(self) -> ParsedLine | None:
        """The next unread line, or None at the end."""
        if self.pos < len(self.lines):
            return self.lines[self.pos]
        return None

    def advance(self) -> ParsedLine | None:
        """Consume and return the next line."""
        line = self.peek()
        if line:
            self.pos += 1
        return line

    def has_child(self, depth: int) -> bool:
        """Whether the next line is nested below the given depth."""
        line = self.peek()
        return line is not None and line.depth > depth

    def skip_unexpected(self, line: ParsedLine, expected_depth: int) -> None:
        """Reject (strict) or skip (lenient) a line nested deeper than expected."""
        if self.strict:
            raise ToonIndentationError(
                f"Unexpected indentation: expected depth {expected_depth}, "
                f"got {line.depth} ({line.indent} spaces)",
                line.line_number,
            )
        logger.debug("Skipping over-indented line %d", line.line_number)
        self.pos += 1

    def header(self, content: str) -> tuple[ArrayHeaderInfo, str] | None:
        return parse_array_header(content, self.mark_quoted, self.strict)

    def key(self, raw: str) -> str:
        return _parse_key(raw, self.mark_quoted, self.strict)

    def primitive(self, token: str) -> JsonValue:
        return parse_primitive(token, self.strict)


@contextmanager
def _located(line: ParsedLine) -> Iterator[None]:
    """Attach the line number to decode errors raised without one."""
    try:
        yield
    except DecodeError as exc:
        if exc.line_number is None:
            exc.line_number = line.line_number
        raise


def _decode_root(cursor: _Cursor) -> JsonValue:
    """A key-less header is a root array, a lone colon-free line a scalar, anything else an object."""
    line = cursor.peek()

    with _located(line):
        parsed = cursor.header(line.content)
        if parsed is not None and parsed[0].key is None:
            cursor.advance()
            header, rest = parsed
            result = _decode_array(cursor, line, header, rest, line.depth)
            trailing = cursor.peek()
            if trailing is not None:
                if cursor.strict:
                    raise ToonSyntaxError("Unexpected content after root array", trailing.line_number)
                logger.debug("Ignoring %d lines after root array", len(cursor.lines) - cursor.pos)
            return result

        if (
            parsed is None
            and len(cursor.lines) == 1
            and find_unquoted_colon(line.content) == -1
        ):
            # Single primitive
            return cursor.primitive(line.content)

    return _decode_object(cursor, 0)


def _decode_object(cursor: _Cursor, depth: int) -> dict:
    """Read key lines at exactly ``depth`` until the indentation drops."""
    result = {}

    while True:
        line = cursor.peek()
        if line is None or line.depth < depth:
            break
        if line.depth > depth:
            cursor.skip_unexpected(line, depth)
            continue

        cursor.advance()
        entry = _decode_key_value(line.content, line, cursor, depth)
        if entry is not None:
            key, value = entry
            result[key] = value

    return result


def _decode_key_value(
    content: str, line: ParsedLine, cursor: _Cursor, depth: int
) -> tuple[str, JsonValue] | None:
    """
    Decode a key: value pair (or keyed array header) whose key sits at ``depth``.

    Returns None when a line without a colon is skipped in lenient mode.
    """
    with _located(line):
        parsed = cursor.header(content)
        if parsed is not None and parsed[0].key is not None:
            header, rest = parsed
            return header.key, _decode_array(cursor, line, header, rest, depth)

        colon_pos = find_unquoted_colon(content)
        if colon_pos == -1:
            if cursor.strict:
                raise ToonSyntaxError("Missing colon after key")
            logger.debug("Skipping line %d without a colon", line.line_number)
            return None

        key_part = content[:colon_pos].strip()
        value_part = content[colon_pos + 1 :].strip()

        if "[" in key_part and not key_part.startswith('"') and cursor.strict:
            raise ToonSyntaxError(f"Invalid array header: {content}")

        key = cursor.key(key_part)

        if value_part:
            return key, cursor.primitive(value_part)

    if cursor.has_child(depth):
        # Nested object
        return key, _decode_object(cursor, depth + 1)

    # Empty object
    return key, {}


def _decode_array(
    cursor: _Cursor, line: ParsedLine, header: ArrayHeaderInfo, rest: str, depth: int
) -> list:
    """Dispatch on the array form; children of the header sit at depth + 1."""
    if rest:
        return _decode_inline_values(rest, header, cursor, line)
    if header.fields:
        return _decode_tabular_rows(cursor, header, depth + 1, line)
    return _decode_list_items(cursor, header, depth + 1, line)


def _check_length(
    cursor: _Cursor, kind: str, header: ArrayHeaderInfo, actual: int, line: ParsedLine
) -> None:
    if actual == header.length:
        return
    if cursor.strict:
        raise LengthMismatchError(
            f"{kind} array length mismatch: expected {header.length}, got {actual}",
            line.line_number,
        )
    logger.debug(
        "Line %d: %s array declares %d items, parsed %d",
        line.line_number,
        kind,
        header.length,
        actual,
    )


def _decode_inline_values(
    values_str: str, header: ArrayHeaderInfo, cursor: _Cursor, line: ParsedLine
) -> list:
    """Decode inline primitive array values."""
    with _located(line):
        result = [cursor.primitive(v) for v in split_by_delimiter(values_str, header.delimiter)]
    _check_length(cursor, "Inline", header, len(result), line)
    return result


def _decode_tabular_rows(
    cursor: _Cursor, header: ArrayHeaderInfo, depth: int, header_line: ParsedLine
) -> list[dict]:
    """Decode tabular array rows, one per line at ``depth``."""
    result = []
    fields = header.fields

    while True:
        line = cursor.peek()
        if line is None or line.depth < depth:
            break
        if line.depth > depth:
            cursor.skip_unexpected(line, depth)
            continue

        cursor.advance()
        values = split_by_delimiter(line.content, header.delimiter)

        if len(values) != len(fields):
            if cursor.strict:
                raise LengthMismatchError(
                    f"Tabular row width mismatch: expected {len(fields)} values, got {len(values)}",
                    line.line_number,
                )
            logger.debug("Line %d: padding/truncating row to %d values", line.line_number, len(fields))
            # Pad or truncate
            while len(values) < len(fields):
                values.append("")
            values = values[: len(fields)]

        with _located(line):
            row = {}
            for field, value in zip(fields, values):
                row[field] = cursor.primitive(value)
        result.append(row)

    _check_length(cursor, "Tabular", header, len(result), header_line)
    return result


def _is_list_item(content: str) -> bool:
    return content == "-" or content.startswith("- ")


def _decode_list_items(
    cursor: _Cursor, header: ArrayHeaderInfo, depth: int, header_line: ParsedLine
) -> list:
    """Decode list items (lines starting with '- ') at ``depth``."""
    result = []

    while True:
        line = cursor.peek()
        if line is None or line.depth < depth:
            break
        if line.depth > depth:
            cursor.skip_unexpected(line, depth)
            continue

        cursor.advance()
        if not _is_list_item(line.content):
            if cursor.strict:
                raise ToonSyntaxError("Expected list item starting with '- '", line.line_number)
            logger.debug("Skipping non-item line %d in list array", line.line_number)
            continue

        result.append(_decode_list_item(line, cursor, depth))

    _check_length(cursor, "List", header, len(result), header_line)
    return result


def _decode_list_item(line: ParsedLine, cursor: _Cursor, depth: int) -> JsonValue:
    """Decode a single list item whose hyphen sits at ``depth``."""
    item_content = line.content[2:].strip()

    if not item_content:
        # Bare hyphen - fields (if any) follow one level down
        if cursor.has_child(depth):
            return _decode_object(cursor, depth + 1)
        return {}

    with _located(line):
        parsed = cursor.header(item_content)
        if parsed is not None and parsed[0].key is None:
            # Bare array as list item
            header, rest = parsed
            return _decode_array(cursor, line, header, rest, depth)

        if parsed is None and find_unquoted_colon(item_content) == -1:
            # Primitive value
            return cursor.primitive(item_content)

    # Object with first field on hyphen line, further fields at depth + 1
    first = _decode_key_value(item_content, line, cursor, depth + 1)
    result = {}
    if first is not None:
        key, value = first
        result[key] = value
    result.update(_decode_object(cursor, depth + 1))
    return result


def _parse_key(key: str, mark_quoted: bool = False, strict: bool = True) -> str:
    """Unquote a key; quoted keys get QUOTED_KEY_MARKER when ``mark_quoted`` is set."""
    key = key.strip()
    if len(key) >= 2 and key.startswith('"') and key.endswith('"'):
        parsed = unescape_string(key[1:-1], strict)
        if mark_quoted:
            return QUOTED_KEY_MARKER + parsed
        return parsed
    return key
