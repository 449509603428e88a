import pytest

from plume.plume_constants import COMMA, EOF, FN, IDENT, NUMBER, OTHER, STRING
from plume.plume_errors import (
    GrammarError,
    LexError,
    NumberFormatError,
    PlumeError,
    TokenMismatch,
    UnexpectedCharacter,
    UnterminatedString,
)


def test_token_mismatch() -> None:
    err = TokenMismatch(FN, IDENT, 17)
    assert err.expected == FN
    assert err.found == IDENT
    assert err.position == 17
    assert str(err) == "Expected FN, got IDENT at position 17"


def test_grammar_error_message() -> None:
    err = GrammarError("arg_list", COMMA, 4, expected="expression or RPAREN")
    assert err.rule == "arg_list"
    assert str(err) == (
        "arg_list: did not expect COMMA (expected expression or RPAREN) at position 4"
    )
    assert str(GrammarError("statement", EOF, 0)) == (
        "statement: did not expect EOF at position 0"
    )


def test_lex_errors() -> None:
    bad_number = NumberFormatError("1.2.3", 4)
    assert bad_number.text == "1.2.3"
    assert bad_number.found == NUMBER
    assert bad_number.expected == NUMBER
    assert str(bad_number) == "Malformed number '1.2.3' at position 4"

    bad_char = UnexpectedCharacter("@", 6)
    assert bad_char.char == "@"
    assert bad_char.found == OTHER
    assert bad_char.expected is None

    unterminated = UnterminatedString(0)
    assert unterminated.found == EOF
    assert unterminated.expected == STRING


def test_diagnostic() -> None:
    err = TokenMismatch("RPAREN", EOF, 5)
    assert err.diagnostic() == {
        "expected": "RPAREN",
        "found": EOF,
        "position": 5,
        "message": "Expected RPAREN, got EOF at position 5",
    }


@pytest.mark.parametrize(
    "err",
    [
        NumberFormatError(".", 0),
        UnexpectedCharacter("$", 1),
        UnterminatedString(2),
        TokenMismatch(FN, EOF, 0),
        GrammarError("factor", EOF, 3),
    ],
)
def test_hierarchy(err: PlumeError) -> None:
    assert isinstance(err, PlumeError)
    assert isinstance(err, SyntaxError)
    with pytest.raises(SyntaxError):
        raise err


def test_lex_errors_share_a_base() -> None:
    for err in (NumberFormatError("1..", 0), UnexpectedCharacter("$", 0), UnterminatedString(0)):
        assert isinstance(err, LexError)
    assert not isinstance(TokenMismatch(FN, EOF, 0), LexError)
