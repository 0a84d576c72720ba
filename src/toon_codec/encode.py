"""TOON encoder: JSON-model values to indented lines."""

import logging
import math
from collections.abc import Generator
from typing import Any

from .primitives import encode_key, encode_primitive, format_array_header, format_bracket
from .string_utils import is_valid_identifier_segment
from .types import EncodeOptions, JsonValue

logger = logging.getLogger(__name__)

Lines = Generator[str, None, None]


def encode(value: Any, options: EncodeOptions | None = None) -> str:
    """
    Encode a Python value as a TOON document.

    The value is normalized first (see ``normalize_value``), so tuples,
    sets, dates and non-string keys are accepted.

    Args:
        value: Object, array or scalar to encode.
        options: Formatting options; defaults to ``EncodeOptions()``.

    Returns:
        The document, lines joined with ``options.line_ending``.
    """
    opts = options or EncodeOptions()
    lines = list(encode_lines(value, opts))
    logger.debug("Encoded value into %d lines", len(lines))
    text = opts.line_ending.join(lines)
    return text + opts.line_ending if opts.trailing_newline else text


def encode_lines(value: Any, options: EncodeOptions | None = None) -> Lines:
    """Yield the lines of the TOON document for ``value``, without line endings."""
    opts = options or EncodeOptions()
    root = normalize_value(value)

    if isinstance(root, dict):
        yield from _encode_object_lines(root, opts, 0)
    elif isinstance(root, list):
        yield from _encode_array(None, root, opts, 0)
    else:
        yield encode_primitive(root, opts.delimiter)


def _indent(opts: EncodeOptions, depth: int) -> str:
    return " " * (opts.indent * depth)


def _separator(opts: EncodeOptions) -> str:
    """Text between a ':' and an inline value."""
    return "" if opts.compact else " "


def _ordered_items(obj: dict, opts: EncodeOptions) -> list[tuple[str, JsonValue]]:
    if opts.sorted_keys:
        return sorted(obj.items(), key=lambda item: item[0])
    return list(obj.items())


def _encode_object_lines(obj: dict, opts: EncodeOptions, depth: int) -> Lines:
    """Encode an object's entries, one key per line at ``depth``."""
    folding = opts.key_folding == "safe"

    for key, value in _ordered_items(obj, opts):
        if folding and _can_fold_key(key, value, obj, opts):
            folded_key, value = _fold_chain(key, value, opts)
            yield from _encode_entry(folded_key, value, opts, depth)
        else:
            yield from _encode_entry(encode_key(key, quote_dotted=folding), value, opts, depth)


def _encode_entry(encoded_key: str, value: JsonValue, opts: EncodeOptions, depth: int) -> Lines:
    indent = _indent(opts, depth)

    if isinstance(value, dict):
        # An empty object is just the key line
        yield f"{indent}{encoded_key}:"
        yield from _encode_object_lines(value, opts, depth + 1)
    elif isinstance(value, list):
        yield from _encode_array(encoded_key, value, opts, depth)
    else:
        yield f"{indent}{encoded_key}:{_separator(opts)}{encode_primitive(value, opts.delimiter)}"


def _encode_array(encoded_key: str | None, arr: list, opts: EncodeOptions, depth: int) -> Lines:
    """
    Encode an array whose header sits at ``depth``.

    Preference order is inline (all scalars), tabular (uniform objects of
    scalars), then list items. The first two fall back to list items when
    ``max_line_length`` is exceeded.
    """
    prefix = _indent(opts, depth) + (encoded_key or "")
    bracket = format_bracket(len(arr), opts.delimiter)

    if not arr:
        yield f"{prefix}{bracket}:"
        return

    candidate = None
    if all(_is_primitive(v) for v in arr):
        values = opts.delimiter.join(encode_primitive(v, opts.delimiter) for v in arr)
        candidate = [f"{prefix}{bracket}:{_separator(opts)}{values}"]
    else:
        fields = _tabular_fields(arr, opts)
        if fields:
            header = format_array_header(
                len(arr), "", fields, opts.delimiter, quote_dotted=opts.key_folding == "safe"
            )
            row_indent = _indent(opts, depth + 1)
            candidate = [prefix + header] + [
                row_indent + opts.delimiter.join(encode_primitive(row[f], opts.delimiter) for f in fields)
                for row in arr
            ]

    if candidate and _fits(opts, candidate):
        yield from candidate
        return

    yield f"{prefix}{bracket}:"
    for item in arr:
        yield from _encode_list_item(item, opts, depth + 1)


def _fits(opts: EncodeOptions, lines: list[str]) -> bool:
    limit = opts.max_line_length
    if limit is None or all(len(line) <= limit for line in lines):
        return True
    logger.debug("Array exceeds max_line_length=%d, using list form", limit)
    return False


def _encode_list_item(item: JsonValue, opts: EncodeOptions, depth: int) -> Lines:
    """Encode one list item; its '- ' marker sits at ``depth``."""
    indent = _indent(opts, depth)

    if isinstance(item, dict) and not item:
        yield f"{indent}-"
    elif isinstance(item, dict):
        # First entry rides on the hyphen line, the others sit one level down
        lines = list(_encode_object_lines(item, opts, depth + 1))
        yield f"{indent}- {lines[0].lstrip(' ')}"
        yield from lines[1:]
    elif isinstance(item, list):
        # Header on the hyphen line, elements one level below the hyphen
        lines = list(_encode_array(None, item, opts, depth))
        yield f"{indent}- {lines[0][len(indent):]}"
        yield from lines[1:]
    else:
        yield f"{indent}- {encode_primitive(item, opts.delimiter)}"


def _can_fold_key(key: str, value: JsonValue, siblings: dict, opts: EncodeOptions) -> bool:
    """Whether ``key`` starts a foldable chain of single-key objects."""
    if opts.flatten_depth is not None and opts.flatten_depth < 2:
        return False
    if not is_valid_identifier_segment(key):
        return False
    if not isinstance(value, dict) or len(value) != 1:
        return False
    if not is_valid_identifier_segment(next(iter(value))):
        return False

    # A sibling spelled like the folded path would collide after expansion
    return not any(other != key and other.startswith(key + ".") for other in siblings)


def _fold_chain(key: str, value: JsonValue, opts: EncodeOptions) -> tuple[str, JsonValue]:
    """Follow single-key objects from ``key``; return the dotted key and the remaining value."""
    path = [key]
    limit = opts.flatten_depth if opts.flatten_depth is not None else math.inf

    while isinstance(value, dict) and len(value) == 1 and len(path) < limit:
        (child_key, child_value), = value.items()
        if not is_valid_identifier_segment(child_key):
            break
        path.append(child_key)
        value = child_value

    return ".".join(path), value


def _tabular_fields(arr: list, opts: EncodeOptions) -> list[str] | None:
    """
    Field names if ``arr`` can be written as a table, else None.

    Every element must be a non-empty object with the same key set and
    scalar values only. Fields follow the first object's key order, or
    sorted order when keys are sorted.
    """
    if not all(isinstance(v, dict) for v in arr) or not arr[0]:
        return None

    keys = arr[0].keys()
    for row in arr:
        if row.keys() != keys or not all(_is_primitive(v) for v in row.values()):
            return None

    return sorted(keys) if opts.sorted_keys else list(keys)


def _is_primitive(value: JsonValue) -> bool:
    return not isinstance(value, (dict, list))


def normalize_value(value: Any) -> JsonValue:
    """
    Coerce an arbitrary Python value into the JSON data model.

    - NaN and infinities become None, -0.0 becomes 0
    - objects with ``isoformat()`` (dates, datetimes, times) become ISO strings
    - tuples and other iterables become lists; sets are sorted by ``str``
    - mapping keys become strings
    - anything else falls back to ``str(value)``
    """
    if value is None or isinstance(value, (bool, str)):
        return value

    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        return 0 if value == 0.0 else value

    if isinstance(value, int):
        return value

    if isinstance(value, dict):
        return {str(k): normalize_value(v) for k, v in value.items()}

    if isinstance(value, (set, frozenset)):
        value = sorted(value, key=str)

    if isinstance(value, (list, tuple)):
        return [normalize_value(v) for v in value]

    if hasattr(value, "isoformat"):
        return value.isoformat()

    if hasattr(value, "__iter__"):
        return [normalize_value(v) for v in value]

    return str(value)
