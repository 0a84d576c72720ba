"""Dotted-key path expansion applied after decoding."""

from .errors import ExpansionConflictError
from .string_utils import is_valid_dotted_path
from .types import JsonValue

# Marker for keys that were quoted in source (used to skip path expansion)
QUOTED_KEY_MARKER = "\x00QUOTED\x00"


def expand_paths(value: JsonValue, strict: bool = True) -> JsonValue:
    """
    Expand dotted keys into nested objects.

    Only unquoted keys whose dot-separated segments are all identifiers are
    expanded; keys carrying QUOTED_KEY_MARKER are kept literally (with the
    marker removed).

    Args:
        value: The value to expand.
        strict: Raise on conflicts instead of letting the last write win.

    Returns:
        The expanded value.

    Raises:
        ExpansionConflictError: In strict mode, when a path runs through a
            non-object value or its final segment already exists.
    """
    if isinstance(value, dict):
        result: dict = {}
        for key, val in value.items():
            expanded_val = expand_paths(val, strict)

            if key.startswith(QUOTED_KEY_MARKER):
                _set_nested(result, [key.removeprefix(QUOTED_KEY_MARKER)], expanded_val, strict)
            elif is_valid_dotted_path(key):
                _set_nested(result, key.split("."), expanded_val, strict)
            else:
                _set_nested(result, [key], expanded_val, strict)
        return result
    elif isinstance(value, list):
        return [expand_paths(v, strict) for v in value]
    else:
        return value


def _set_nested(obj: dict, path: list[str], value: JsonValue, strict: bool) -> None:
    """Set a value at a nested path, creating intermediate objects."""
    for i, segment in enumerate(path[:-1]):
        if segment not in obj:
            obj[segment] = {}
        elif not isinstance(obj[segment], dict):
            prefix = ".".join(path[: i + 1])
            if strict:
                raise ExpansionConflictError(
                    f"Expansion conflict at path '{prefix}' "
                    f"(object vs {type(obj[segment]).__name__})",
                    path=prefix,
                )
            obj[segment] = {}
        obj = obj[segment]

    final_key = path[-1]
    if final_key in obj and strict:
        full_path = ".".join(path)
        raise ExpansionConflictError(
            f"Expansion conflict at path '{full_path}' (duplicate key)", path=full_path
        )
    obj[final_key] = value
