"""
RiriLang Compiler Errors

Defines exception classes for every stage of the compiler. Each stage fails
fast; the caller decides how to present the error.
"""

from typing import Optional


class RiriError(Exception):
    """Base exception for all RiriLang compiler errors."""

    def __init__(self, message: str, line: Optional[int] = None,
                 column: Optional[int] = None, filename: Optional[str] = None):
        self.message = message
        self.line = line
        self.column = column
        self.filename = filename
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with location information."""
        parts = []

        if self.filename:
            parts.append(self.filename)

        if self.line is not None:
            parts.append(str(self.line) if parts else f"line {self.line}")

            if self.column is not None:
                parts.append(str(self.column))

        if parts:
            return f"{':'.join(parts)}: {self.message}"
        return self.message


class LexicalError(RiriError):
    """Raised for unrecognized characters and unterminated strings."""
    pass


class SyntaxError(RiriError):
    """Raised when the parser meets a token it did not expect."""
    pass


class ImportError(RiriError):
    """Raised when an imported module cannot be found or read."""

    def __init__(self, message: str, import_path: str,
                 line: Optional[int] = None, filename: Optional[str] = None):
        self.import_path = import_path
        super().__init__(message, line=line, filename=filename)


class EmitError(RiriError):
    """Raised when the code generator meets a node it cannot lower.

    This signals a parser/emitter contract violation, not a user error.
    """
    pass
