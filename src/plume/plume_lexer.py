"""
Lexical analyzer for the PLUME language.

This module provides core components for converting raw source code into tokens:

Classes:
    CharacterStream: Stream abstraction for reading characters with offset/line/column tracking.
    Token: Represents a single token with type, value, and source location.
    Lexer: Scans a source buffer into tokens one at a time, on demand.

Features:
    - Skips spaces, tabs, carriage returns and single-line comments (`#`)
    - Newlines and `;` both produce a LINE_END terminator
    - Longest-match recognition of operators (`**`, `//`, `>>>`, `<=` ...)
    - Context-sensitive `+`/`-`: binary after a literal, identifier or `)`,
      unary everywhere else
    - Numerals in a configurable radix (2-36), read as floats
    - Keywords take precedence over identifiers on an exact, case-sensitive match
    - One-token lookahead that leaves the lexer state untouched

Raises:
    NumberFormatError: If a numeral cannot be converted.
    UnexpectedCharacter: If a character starts no known token.
    UnterminatedString: If the input ends inside a string literal.
    TokenMismatch: If `validate_and_consume` sees the wrong token kind.

Example:
    >>> lexer = Lexer()
    >>> lexer.set_input("x = 42")
    >>> lexer.tokenize()
    [Token(IDENT, x), Token(ASSIGN, =), Token(NUMBER, 42.0), Token(EOF, EOF)]
"""

import logging
from collections.abc import Mapping
from typing import Any

from plume.plume_constants import (
    ADD,
    ANY_OP,
    BINARY_CONTEXT,
    BOOL,
    BOOL_LITERALS,
    DEFAULT_BASE,
    EOF,
    IDENT,
    KEYWORDS,
    MAX_BASE,
    MAX_OPERATOR_LENGTH,
    MIN_BASE,
    NEG,
    NUMBER,
    OPERATOR_TYPES,
    POS,
    STRING,
    SUB,
    operator_tokens,
)
from plume.plume_errors import (
    LexError,
    NumberFormatError,
    TokenMismatch,
    UnexpectedCharacter,
    UnterminatedString,
)

logger = logging.getLogger(__name__)

_DECIMAL_DIGITS = "0123456789"
_ESCAPES = {"n": "\n", "t": "\t", "\\": "\\", '"': '"', "'": "'"}


class CharacterStream:
    """
    A utility for reading characters from a string source with location tracking.

    The lexer reads and restores this stream's state to implement lookahead,
    so all scan state lives here.

    Attributes:
        source (str): The input source string.
        position (int): Current 0-based offset in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Returns:
            str: The next character.

        Raises:
            LexError: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise LexError(
                "Attempted to read past end of source", EOF, self.position
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """
        Returns the character at the given offset from the current position without advancing.

        Args:
            offset (int, optional): Number of characters to look ahead. Defaults to 0.

        Returns:
            str: The character at the offset, or an empty string if out of bounds.
        """
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def end_of_file(self) -> bool:
        """Checks if the stream has consumed all characters."""
        return self.position >= len(self.source)

    def snapshot(self) -> tuple[int, int, int]:
        return self.position, self.line, self.column

    def restore(self, state: tuple[int, int, int]) -> None:
        self.position, self.line, self.column = state


class Token:
    """Represents a single lexical token in the PLUME language.

    A token doubles as the positioned token of the grammar: `pos` is the
    offset where its lexeme began. Location fields are for diagnostics only
    and never take part in equality.

    Attributes:
        type (str): The token type (e.g. 'IDENT', 'NUMBER', 'ADD', 'IF', 'EOF').
        value (Any): Payload: float for numbers, bool for booleans, the name,
            keyword or decoded string text, or the operator lexeme.
        pos (int): 0-based offset of the first character of the lexeme.
        line (int): 1-based line of the lexeme.
        col (int): 1-based column of the lexeme.
    """

    def __init__(self, type_: str, value: Any, pos: int = 0, line: int = 0, col: int = 0):
        self.type = type_
        self.value = value
        self.pos = pos
        self.line = line
        self.col = col

    @property
    def is_operator(self) -> bool:
        return self.type in OPERATOR_TYPES or self.type == ANY_OP

    def matches(self, kind: str) -> bool:
        """Checks whether this token is of the given kind, ignoring its payload.

        `ANY_OP` on either side matches every operator kind.

        Args:
            kind (str): The expected token type.

        Returns:
            bool: True if the kinds agree.
        """
        if ANY_OP in (kind, self.type):
            return self.is_operator and (kind in OPERATOR_TYPES or kind == ANY_OP)
        return self.type == kind

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value})"

    def __eq__(self, other: Any) -> bool:
        """Compares tokens structurally.

        Operators compare by kind alone (with the `ANY_OP` wildcard); all
        other tokens compare by kind and value.
        """
        if not isinstance(other, Token):
            return False
        if self.is_operator or other.is_operator:
            return self.matches(other.type)
        return self.type == other.type and self.value == other.value

    def __hash__(self) -> int:
        if self.is_operator:
            # ANY_OP equals every operator, so all operators share one bucket.
            return hash("OPERATOR")
        return hash((self.type, self.value))


class Lexer:
    """Lexical analyzer for the PLUME language.

    The lexer owns the scan position and the numeral radix. Tokens are produced
    on demand by `advance`; the most recent one is kept in `current` and is the
    "previous token" that decides whether `+`/`-` are unary or binary.

    Attributes:
        keywords (Mapping[str, str]): Reserved word to keyword token type.
        base (int): Radix used to read numerals.
        stream (CharacterStream): The buffer being scanned.
        current (Token | None): The last token produced, None before `reset`.
    """

    def __init__(
        self, keywords: Mapping[str, str] = KEYWORDS, base: int = DEFAULT_BASE
    ) -> None:
        self.keywords = keywords
        self.base = DEFAULT_BASE
        self.set_base(base)
        self.stream = CharacterStream("")
        self.current: Token | None = None

    def set_input(self, text: str) -> None:
        """Binds a new source buffer and clears all scan state."""
        logger.debug("Lexer bound to %d characters of input", len(text))
        self.stream = CharacterStream(text)
        self.current = None

    def set_base(self, radix: int) -> None:
        """Sets the radix used to read numerals.

        Raises:
            ValueError: If the radix is outside 2..36.
        """
        if not MIN_BASE <= radix <= MAX_BASE:
            raise ValueError(
                f"Numeral base must be between {MIN_BASE} and {MAX_BASE}, got {radix}"
            )
        if radix != self.base:
            logger.debug("Lexer numeral base changed from %d to %d", self.base, radix)
        self.base = radix

    def reset(self) -> Token:
        """Rewinds to offset zero and primes `current` with the first token."""
        self.stream = CharacterStream(self.stream.source)
        self.current = None
        return self.advance()

    def peek_char(self) -> str:
        """Returns the next unconsumed character, or an empty string at EOF."""
        return self.stream.peek()

    def consume_char(self) -> str:
        return self.stream.next()

    def advance(self) -> Token:
        """Scans the next token and makes it the current one.

        Returns:
            Token: The new current token. Once the input is exhausted every
            call returns an EOF token.
        """
        self.current = self._scan()
        return self.current

    def peek_token(self) -> Token:
        """Returns the token after `current` without consuming anything.

        The stream position and the current token are restored afterwards,
        so repeated calls return the same token.
        """
        state = self.stream.snapshot()
        current = self.current
        try:
            return self.advance()
        finally:
            self.stream.restore(state)
            self.current = current

    def validate_and_consume(self, expected: str) -> Token:
        """Consumes the current token if it is of the expected kind.

        Args:
            expected (str): The required token type (`ANY_OP` accepts any operator).

        Returns:
            Token: The token that was consumed.

        Raises:
            TokenMismatch: If the current token is of a different kind.
        """
        tok = self.current
        if tok is None:
            raise RuntimeError("Lexer.reset() must be called before consuming tokens")
        if not tok.matches(expected):
            raise TokenMismatch(expected, tok.type, tok.pos)
        self.advance()
        return tok

    def tokenize(self) -> list[Token]:
        """Scans the whole buffer from the start.

        Returns:
            list[Token]: Every token in order, ending with the EOF token.
        """
        tokens = [self.reset()]
        while tokens[-1].type != EOF:
            tokens.append(self.advance())
        return tokens

    def skip_whitespace(self) -> None:
        """Skips spaces, tabs, carriage returns and comments (not newlines)."""
        while not self.stream.end_of_file():
            if self.peek_char() in (" ", "\t", "\r"):
                self.consume_char()
            elif self.peek_char() == "#":
                self.skip_comment()
            else:
                break

    def skip_comment(self) -> None:
        """Advances to the newline that ends a comment, leaving it unconsumed."""
        while not self.stream.end_of_file() and self.peek_char() != "\n":
            self.consume_char()

    def is_digit(self, ch: str) -> bool:
        """Checks whether `ch` is a digit in the configured radix."""
        return ch.isascii() and ch.isalnum() and int(ch, 36) < self.base

    def scan_number(self, pos: int, line: int, col: int) -> Token:
        text = ""
        while not self.stream.end_of_file() and (
            self.peek_char() == "." or self.is_digit(self.peek_char())
        ):
            text += self.consume_char()
        return Token(NUMBER, self.to_number(text, pos), pos, line, col)

    def to_number(self, text: str, pos: int) -> float:
        """Converts scanned numeral text in the configured radix to a float.

        Raises:
            NumberFormatError: If the text has no digits or more than one '.'.
        """
        whole, _, fraction = text.partition(".")
        if "." in fraction or not (whole or fraction):
            raise NumberFormatError(text, pos)
        if self.base == 10:
            return float(text)
        value = float(int(whole, self.base)) if whole else 0.0
        for place, digit in enumerate(fraction, start=1):
            value += int(digit, self.base) / self.base**place
        return value

    def scan_word(self, pos: int, line: int, col: int) -> Token:
        word = ""
        while not self.stream.end_of_file() and (
            self.peek_char().isalnum() or self.peek_char() == "_"
        ):
            word += self.consume_char()
        if word in self.keywords:
            return Token(self.keywords[word], word, pos, line, col)
        if word in BOOL_LITERALS:
            return Token(BOOL, BOOL_LITERALS[word], pos, line, col)
        return Token(IDENT, word, pos, line, col)

    def scan_string(self, pos: int, line: int, col: int) -> Token:
        quote = self.consume_char()
        val = ""
        while not self.stream.end_of_file():
            ch = self.consume_char()
            if ch == quote:
                return Token(STRING, val, pos, line, col)
            if ch == "\\" and not self.stream.end_of_file():
                escaped = self.consume_char()
                val += _ESCAPES.get(escaped, "\\" + escaped)
            else:
                val += ch
        raise UnterminatedString(pos)

    def match_operator(self, pos: int, line: int, col: int) -> Token | None:
        """Attempts to match the longest operator lexeme at the current position.

        Returns:
            Token | None: An operator Token if a match is found, otherwise None.
        """
        max_lexeme = ""
        candidate = ""
        for i in range(MAX_OPERATOR_LENGTH):
            ch = self.stream.peek(i)
            if ch == "":
                break
            candidate += ch
            if candidate in operator_tokens:
                max_lexeme = candidate

        if not max_lexeme:
            return None

        for _ in range(len(max_lexeme)):
            self.consume_char()

        type_ = operator_tokens[max_lexeme]
        if type_ in (ADD, SUB) and not (
            self.current is not None and self.current.type in BINARY_CONTEXT
        ):
            type_ = POS if type_ == ADD else NEG
        return Token(type_, max_lexeme, pos, line, col)

    def _scan(self) -> Token:
        self.skip_whitespace()

        pos, line, col = self.stream.position, self.stream.line, self.stream.column
        if self.stream.end_of_file():
            return Token(EOF, "EOF", pos, line, col)

        ch = self.peek_char()

        # 1. Number
        if ch in _DECIMAL_DIGITS or ch == ".":
            return self.scan_number(pos, line, col)

        # 2. Identifier, keyword or boolean
        if ch.isalpha() or ch == "_":
            return self.scan_word(pos, line, col)

        # 3. String
        if ch in ('"', "'"):
            return self.scan_string(pos, line, col)

        # 4. Operator or punctuation
        token = self.match_operator(pos, line, col)
        if token is not None:
            return token

        # 5. Unknown character
        raise UnexpectedCharacter(ch, pos)


__all__ = ["CharacterStream", "Lexer", "Token"]
