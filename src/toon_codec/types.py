"""Type definitions for TOON encoder/decoder."""

from dataclasses import dataclass, field
from typing import Literal

# JSON type aliases
JsonPrimitive = str | int | float | bool | None
JsonArray = list["JsonValue"]
JsonObject = dict[str, "JsonValue"]
JsonValue = JsonPrimitive | JsonArray | JsonObject

# Delimiter options
Delimiter = Literal[",", "\t", "|"]

DELIMITERS = (",", "\t", "|")
LINE_ENDINGS = ("\n", "\r\n")


@dataclass(frozen=True)
class EncodeOptions:
    """Options for TOON encoding."""

    indent: int = 2
    """Number of spaces per indentation level."""

    delimiter: Delimiter = ","
    """Delimiter for inline arrays and tabular rows."""

    key_folding: Literal["off", "safe"] = "off"
    """Whether to fold single-key object chains into dotted paths."""

    flatten_depth: int | None = None
    """Maximum number of segments in a folded key. None means unlimited."""

    line_ending: Literal["\n", "\r\n"] = "\n"
    """String used to join output lines."""

    sort_keys: bool = False
    """Emit object keys in sorted order."""

    trailing_newline: bool = False
    """Append one line ending after the last line."""

    max_line_length: int | None = None
    """Inline and tabular arrays with longer lines fall back to list form."""

    compact: bool = False
    """Drop the space after ':' in key-value lines and inline arrays."""

    preserve_key_order: bool = True
    """Keep insertion order of object keys (sorted when False)."""

    def __post_init__(self) -> None:
        if self.indent < 1:
            raise ValueError(f"indent must be at least 1, got {self.indent}")
        if self.delimiter not in DELIMITERS:
            raise ValueError(f"Unsupported delimiter: {self.delimiter!r}")
        if self.key_folding not in ("off", "safe"):
            raise ValueError(f"key_folding must be 'off' or 'safe', got {self.key_folding!r}")
        if self.flatten_depth is not None and self.flatten_depth < 0:
            raise ValueError(f"flatten_depth must be non-negative, got {self.flatten_depth}")
        if self.line_ending not in LINE_ENDINGS:
            raise ValueError(f"Unsupported line ending: {self.line_ending!r}")
        if self.max_line_length is not None and self.max_line_length < 1:
            raise ValueError(f"max_line_length must be positive, got {self.max_line_length}")

    @property
    def sorted_keys(self) -> bool:
        """Whether object keys are emitted in sorted order."""
        return self.sort_keys or not self.preserve_key_order


@dataclass(frozen=True)
class DecodeOptions:
    """Options for TOON decoding."""

    strict: bool = True
    """Enforce declared lengths, indentation multiples, tabs and escapes."""

    expand_paths: Literal["off", "safe"] = "off"
    """Expand unquoted dotted keys into nested objects."""

    indent: int = 2
    """Expected indentation size."""

    def __post_init__(self) -> None:
        if self.indent < 1:
            raise ValueError(f"indent must be at least 1, got {self.indent}")
        if self.expand_paths not in ("off", "safe"):
            raise ValueError(f"expand_paths must be 'off' or 'safe', got {self.expand_paths!r}")


@dataclass
class ParsedLine:
    """A non-blank source line with indentation info."""

    content: str
    """Content after stripping indentation and trailing whitespace."""

    indent: int
    """Number of leading spaces (tabs count as one indent level)."""

    depth: int
    """Indentation level (indent // indent_size)."""

    line_number: int
    """1-based line number."""


@dataclass
class ArrayHeaderInfo:
    """Parsed array header information."""

    length: int
    """Declared array length."""

    key: str | None = None
    """Key preceding the bracket, None for root arrays and bare list items."""

    delimiter: Delimiter = ","
    """Delimiter for this array's values."""

    fields: list[str] = field(default_factory=list)
    """Field names for tabular format (empty for non-tabular)."""
