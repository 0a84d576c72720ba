"""
TOON (Token-Oriented Object Notation) codec.

A compact, line-oriented, indentation-based text encoding of the JSON data
model. Objects are key/value lines, arrays of primitives fit on one line,
arrays of uniform objects become tables, and anything else is a list of
"- " items.

Usage:
    import toon_codec

    # Encode Python data to TOON
    data = {"users": [{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}]}
    encoded = toon_codec.encode(data)
    # users[2]{id,name}:
    #   1,Alice
    #   2,Bob

    # Decode TOON to Python data
    decoded = toon_codec.decode(encoded)

    # With options
    from toon_codec import EncodeOptions, DecodeOptions

    encoded = toon_codec.encode(data, EncodeOptions(indent=4, key_folding="safe"))
    decoded = toon_codec.decode(text, DecodeOptions(strict=False, expand_paths="safe"))
"""

__version__ = "1.0.0"

from .decode import decode, decode_lines, is_valid
from .encode import encode, encode_lines
from .errors import (
    DecodeError,
    EscapeError,
    ExpansionConflictError,
    LengthMismatchError,
    ToonError,
    ToonIndentationError,
    ToonSyntaxError,
)
from .primitives import canonical_number
from .types import DecodeOptions, EncodeOptions, JsonValue

# `parse` is the conventional name for the decoding direction
parse = decode

__all__ = [
    # Version
    "__version__",
    # Main API
    "encode",
    "encode_lines",
    "decode",
    "decode_lines",
    "parse",
    "is_valid",
    "canonical_number",
    # Options
    "EncodeOptions",
    "DecodeOptions",
    # Types
    "JsonValue",
    # Errors
    "ToonError",
    "DecodeError",
    "ToonIndentationError",
    "ToonSyntaxError",
    "LengthMismatchError",
    "EscapeError",
    "ExpansionConflictError",
]
