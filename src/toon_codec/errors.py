"""Error types raised by the TOON encoder/decoder."""


class ToonError(ValueError):
    """Base class for all TOON codec errors."""


class DecodeError(ToonError):
    """
    A decoding failure, optionally tied to a source line.

    The line number is 1-based. Errors raised by the low-level string
    utilities start without one; the parser attaches it as the error
    propagates through the line being decoded.
    """

    def __init__(self, message: str, line_number: int | None = None):
        super().__init__(message)
        self.message = message
        self.line_number = line_number

    def __str__(self) -> str:
        if self.line_number is None:
            return self.message
        return f"Line {self.line_number}: {self.message}"


class ToonIndentationError(DecodeError):
    """Tab in indentation, indentation not a multiple of the indent size, or unexpected nesting."""


class ToonSyntaxError(DecodeError):
    """Missing colon, malformed array header, unterminated string, stray content."""


class LengthMismatchError(DecodeError):
    """Declared array length or tabular width differs from what was parsed."""


class EscapeError(DecodeError):
    """Unrecognized backslash escape inside a quoted string."""


class ExpansionConflictError(DecodeError):
    """Dotted-key path expansion collided with an existing key."""

    def __init__(self, message: str, path: str):
        super().__init__(message)
        self.path = path
