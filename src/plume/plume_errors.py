"""
Error types raised by the PLUME lexer and parser.

Every error is fatal for the call that raised it: the lexer and parser never
recover or return a partial tree. All of them derive from the builtin
``SyntaxError`` so callers that already catch ``SyntaxError`` keep working,
and each carries enough structure to be reported verbatim:

    found (str): The token kind that triggered the error.
    expected (str | None): The token kind or construct that was expected.
    position (int): 0-based offset of the offending token in the source.
    message (str): Human-readable description.

Hierarchy:
    PlumeError
    ├── LexError
    │   ├── NumberFormatError
    │   ├── UnexpectedCharacter
    │   └── UnterminatedString
    ├── TokenMismatch
    └── GrammarError
"""

from plume.plume_constants import EOF, NUMBER, OTHER, STRING


class PlumeError(SyntaxError):
    """Base class for all PLUME lexing and parsing errors."""

    def __init__(
        self,
        message: str,
        found: str,
        position: int,
        expected: str | None = None,
    ) -> None:
        self.message = message
        self.found = found
        self.position = position
        self.expected = expected
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        return f"{self.message} at position {self.position}"

    def diagnostic(self) -> dict[str, str | int | None]:
        """Returns the error as a flat mapping for console or log output."""
        return {
            "expected": self.expected,
            "found": self.found,
            "position": self.position,
            "message": str(self),
        }


class LexError(PlumeError):
    """Raised when the lexer cannot turn the input into a token."""


class NumberFormatError(LexError):
    """Raised when a scanned numeral cannot be converted to a number."""

    def __init__(self, text: str, position: int) -> None:
        super().__init__(
            f"Malformed number {text!r}", NUMBER, position, expected=NUMBER
        )
        # SyntaxError.__init__ resets .text, so assign afterwards.
        self.text = text


class UnexpectedCharacter(LexError):
    """Raised for a character that starts no known token."""

    def __init__(self, char: str, position: int) -> None:
        self.char = char
        super().__init__(f"Unexpected character {char!r}", OTHER, position)


class UnterminatedString(LexError):
    """Raised when the input ends inside a string literal."""

    def __init__(self, position: int) -> None:
        super().__init__("Unterminated string", EOF, position, expected=STRING)


class TokenMismatch(PlumeError):
    """Raised when the current token is not of the kind a rule requires."""

    def __init__(self, expected: str, found: str, position: int) -> None:
        super().__init__(
            f"Expected {expected}, got {found}", found, position, expected=expected
        )


class GrammarError(PlumeError):
    """Raised when a grammar rule meets a token none of its productions accept."""

    def __init__(
        self, rule: str, found: str, position: int, expected: str | None = None
    ) -> None:
        self.rule = rule
        message = f"{rule}: did not expect {found}"
        if expected is not None:
            message += f" (expected {expected})"
        super().__init__(message, found, position, expected=expected)


__all__ = [
    "GrammarError",
    "LexError",
    "NumberFormatError",
    "PlumeError",
    "TokenMismatch",
    "UnexpectedCharacter",
    "UnterminatedString",
]
