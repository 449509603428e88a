from types import MappingProxyType

import pytest
from hypothesis import given
from hypothesis import strategies as st

from plume.plume_constants import (
    ADD,
    AND,
    ANY_OP,
    ASSIGN,
    BIT_AND,
    BIT_NOT,
    BIT_OR,
    BIT_XOR,
    BOOL,
    COMMA,
    DIV,
    EOF,
    EQ,
    GE,
    GT,
    IDENT,
    IF,
    INT_DIV,
    KEYWORDS,
    LBRACE,
    LE,
    LINE_END,
    LPAREN,
    LT,
    MOD,
    MUL,
    NE,
    NEG,
    NOT,
    NUMBER,
    OR,
    POS,
    POW,
    RBRACE,
    RPAREN,
    SHL,
    SHR,
    STRING,
    SUB,
    USHR,
)
from plume.plume_errors import (
    LexError,
    NumberFormatError,
    TokenMismatch,
    UnexpectedCharacter,
    UnterminatedString,
)
from plume.plume_lexer import CharacterStream, Lexer, Token


def tokenize(source: str, base: int = 10) -> list[Token]:
    lexer = Lexer(base=base)
    lexer.set_input(source)
    return lexer.tokenize()


def types_of(source: str) -> list[str]:
    return [tok.type for tok in tokenize(source)]


@pytest.mark.parametrize(
    "lexeme,expected",
    [
        ("*", MUL),
        ("**", POW),
        ("/", DIV),
        ("//", INT_DIV),
        ("%", MOD),
        ("==", EQ),
        ("!=", NE),
        ("<", LT),
        ("<=", LE),
        (">", GT),
        (">=", GE),
        ("&&", AND),
        ("||", OR),
        ("!", NOT),
        ("&", BIT_AND),
        ("|", BIT_OR),
        ("^", BIT_XOR),
        ("~", BIT_NOT),
        ("<<", SHL),
        (">>", SHR),
        (">>>", USHR),
        ("=", ASSIGN),
        (",", COMMA),
        ("(", LPAREN),
        (")", RPAREN),
        ("{", LBRACE),
        ("}", RBRACE),
        (";", LINE_END),
        ("\n", LINE_END),
        ("+", POS),
        ("-", NEG),
    ],
)
def test_operator_tokens(lexeme: str, expected: str) -> None:
    tokens = tokenize(lexeme)
    assert [tok.type for tok in tokens] == [expected, EOF]
    assert tokens[0].value == lexeme


def test_longest_match_splits_adjacent_operators() -> None:
    assert types_of("a<=-b") == [IDENT, LE, NEG, IDENT, EOF]
    assert types_of("x>>>=y") == [IDENT, USHR, ASSIGN, IDENT, EOF]
    assert types_of("***") == [POW, MUL, EOF]


@pytest.mark.parametrize(
    "source,expected",
    [
        ("-3 + -4", [NEG, NUMBER, ADD, NEG, NUMBER, EOF]),
        ("a-1", [IDENT, SUB, NUMBER, EOF]),
        ("(1)-1", [LPAREN, NUMBER, RPAREN, SUB, NUMBER, EOF]),
        ("x = -1", [IDENT, ASSIGN, NEG, NUMBER, EOF]),
        ("2 * +x", [NUMBER, MUL, POS, IDENT, EOF]),
        ("f(-a, +b)", [IDENT, LPAREN, NEG, IDENT, COMMA, POS, IDENT, RPAREN, EOF]),
        ("1\n-2", [NUMBER, LINE_END, NEG, NUMBER, EOF]),
        ('"a" + "b"', [STRING, ADD, STRING, EOF]),
        ("true - 1", [BOOL, SUB, NUMBER, EOF]),
        ("false+x", [BOOL, ADD, IDENT, EOF]),
    ],
)
def test_plus_minus_depend_on_previous_token(source: str, expected: list[str]) -> None:
    assert types_of(source) == expected


@pytest.mark.parametrize("word", sorted(KEYWORDS))
def test_keywords_take_precedence_over_identifiers(word: str) -> None:
    tok = tokenize(word)[0]
    assert tok.type == KEYWORDS[word]
    assert tok.type != IDENT
    assert tok.value == word


def test_if_is_a_keyword() -> None:
    tok = tokenize("if")[0]
    assert tok.type == IF


@pytest.mark.parametrize("text", ["iffy", "If", "IF", "_if", "return2", "fn_"])
def test_keyword_lookup_is_exact_and_case_sensitive(text: str) -> None:
    tok = tokenize(text)[0]
    assert tok.type == IDENT
    assert tok.value == text


def test_custom_keyword_table() -> None:
    lexer = Lexer(keywords=MappingProxyType({"let": "LET"}))
    lexer.set_input("let if")
    assert [t.type for t in lexer.tokenize()] == ["LET", IDENT, EOF]


@given(st.from_regex(r"[A-Za-z_][A-Za-z0-9_]{0,15}", fullmatch=True))  # type: ignore[misc]
def test_identifier_roundtrip(name: str) -> None:
    tok = tokenize(name)[0]
    if name in KEYWORDS:
        assert tok.type == KEYWORDS[name]
    elif name in ("true", "false"):
        assert tok.type == BOOL
    else:
        assert tok.type == IDENT
        assert tok.value == name


def test_boolean_literals() -> None:
    tokens = tokenize("true false truth")
    assert [(t.type, t.value) for t in tokens[:3]] == [
        (BOOL, True),
        (BOOL, False),
        (IDENT, "truth"),
    ]


@pytest.mark.parametrize(
    "text,value",
    [("42", 42.0), ("3.14", 3.14), (".5", 0.5), ("7.", 7.0), ("007", 7.0)],
)
def test_decimal_numbers(text: str, value: float) -> None:
    tok = tokenize(text)[0]
    assert tok.type == NUMBER
    assert tok.value == value


@pytest.mark.parametrize(
    "base,text,value",
    [
        (16, "1f", 31.0),
        (16, "0ff", 255.0),
        (2, "101", 5.0),
        (2, "0.1", 0.5),
        (8, "17.4", 15.5),
        (36, "1z", 71.0),
    ],
)
def test_numbers_in_other_bases(base: int, text: str, value: float) -> None:
    tok = tokenize(text, base=base)[0]
    assert tok.type == NUMBER
    assert tok.value == value


def test_hex_letters_do_not_start_a_number() -> None:
    tokens = tokenize("ff + 1", base=16)
    assert [t.type for t in tokens] == [IDENT, ADD, NUMBER, EOF]
    assert tokens[2].value == 1.0


def test_digit_outside_base_stops_numeral() -> None:
    with pytest.raises(NumberFormatError) as excinfo:
        tokenize("12", base=2)
    assert excinfo.value.position == 1


@pytest.mark.parametrize("text", ["1.2.3", "123..456", "."])
def test_malformed_numbers(text: str) -> None:
    with pytest.raises(NumberFormatError) as excinfo:
        tokenize(text)
    assert excinfo.value.text == text
    assert excinfo.value.position == 0


def test_malformed_number_position() -> None:
    with pytest.raises(NumberFormatError) as excinfo:
        tokenize("x = 1.2.3")
    assert excinfo.value.position == 4


@pytest.mark.parametrize("radix", [0, 1, 37, -2])
def test_set_base_rejects_invalid_radix(radix: int) -> None:
    with pytest.raises(ValueError):
        Lexer().set_base(radix)


def test_string_token() -> None:
    tok = tokenize('"hello world"')[0]
    assert tok.type == STRING
    assert tok.value == "hello world"


@pytest.mark.parametrize(
    "source,value",
    [
        (r'"a\tb"', "a\tb"),
        (r'"line\nbreak"', "line\nbreak"),
        (r"'it\'s'", "it's"),
        (r'"back\\slash"', "back\\slash"),
        (r'"keep\q"', "keep\\q"),
        ("'a \"quoted\" word'", 'a "quoted" word'),
    ],
)
def test_string_escapes(source: str, value: str) -> None:
    tok = tokenize(source)[0]
    assert tok.type == STRING
    assert tok.value == value


@pytest.mark.parametrize("source", ['"abc', '"abc\\', "'abc\""])
def test_unterminated_string(source: str) -> None:
    with pytest.raises(UnterminatedString) as excinfo:
        tokenize(source)
    assert excinfo.value.position == 0


def test_unexpected_character() -> None:
    with pytest.raises(UnexpectedCharacter) as excinfo:
        tokenize("x = 1 @ 2")
    assert excinfo.value.char == "@"
    assert excinfo.value.position == 6
    assert excinfo.value.found == "OTHER"


def test_newline_and_semicolon_are_terminators() -> None:
    assert types_of("a\nb;c") == [IDENT, LINE_END, IDENT, LINE_END, IDENT, EOF]


def test_skip_whitespace_and_comments() -> None:
    assert types_of("  \t x # a comment\r\n  y") == [IDENT, LINE_END, IDENT, EOF]


def test_token_positions() -> None:
    tokens = tokenize("x  = 10")
    assert [t.pos for t in tokens] == [0, 3, 5, 7]


def test_line_and_column_tracking() -> None:
    tokens = tokenize("x = 1\ny = 2")
    assert tokens[4].value == "y"
    assert tokens[4].line == 2
    assert tokens[4].col == 1
    assert tokens[4].pos == 6


def test_empty_input_returns_eof() -> None:
    tokens = tokenize("")
    assert len(tokens) == 1
    assert tokens[0].type == EOF
    assert tokens[0].pos == 0


def test_eof_is_permanent(lexer: Lexer) -> None:
    lexer.set_input("x ")
    assert lexer.reset().type == IDENT
    for _ in range(3):
        tok = lexer.advance()
        assert tok.type == EOF
        assert tok.pos == 2


def test_peek_char(lexer: Lexer) -> None:
    lexer.set_input("a + b")
    lexer.reset()
    assert lexer.peek_char() == " "
    lexer.set_input("")
    lexer.reset()
    assert lexer.peek_char() == ""


def test_peek_token_is_idempotent(lexer: Lexer) -> None:
    lexer.set_input("a - b")
    first = lexer.reset()
    position = lexer.stream.position

    peeked = lexer.peek_token()
    again = lexer.peek_token()

    assert peeked.type == SUB
    assert again.type == SUB
    assert peeked.pos == again.pos == 2
    assert lexer.current is first
    assert lexer.stream.position == position
    assert lexer.advance().type == SUB


def test_peek_token_at_eof(lexer: Lexer) -> None:
    lexer.set_input("a")
    lexer.reset()
    assert lexer.peek_token().type == EOF
    assert lexer.current is not None and lexer.current.type == IDENT


def test_validate_and_consume(lexer: Lexer) -> None:
    lexer.set_input("a + b")
    lexer.reset()
    assert lexer.validate_and_consume(IDENT).value == "a"
    assert lexer.validate_and_consume(ANY_OP).type == ADD
    with pytest.raises(TokenMismatch) as excinfo:
        lexer.validate_and_consume(NUMBER)
    err = excinfo.value
    assert err.expected == NUMBER
    assert err.found == IDENT
    assert err.position == 4


def test_validate_ignores_payload(lexer: Lexer) -> None:
    lexer.set_input("foo 12")
    lexer.reset()
    assert lexer.validate_and_consume(IDENT).value == "foo"
    assert lexer.validate_and_consume(NUMBER).value == 12.0
    assert lexer.current is not None and lexer.current.type == EOF


def test_any_op_does_not_match_non_operators(lexer: Lexer) -> None:
    lexer.set_input("x")
    lexer.reset()
    with pytest.raises(TokenMismatch):
        lexer.validate_and_consume(ANY_OP)


def test_validate_before_reset_is_an_error(lexer: Lexer) -> None:
    lexer.set_input("x")
    with pytest.raises(RuntimeError):
        lexer.validate_and_consume(IDENT)


def test_reset_rescans_from_start(lexer: Lexer) -> None:
    lexer.set_input("-a")
    first = lexer.tokenize()
    second = lexer.tokenize()
    assert [t.type for t in first] == [t.type for t in second] == [NEG, IDENT, EOF]


def test_character_stream_methods() -> None:
    stream = CharacterStream("abc")
    assert stream.peek() == "a"
    assert stream.next() == "a"
    assert stream.peek(1) == "c"
    assert stream.peek(5) == ""
    assert not stream.end_of_file()
    stream.next()
    stream.next()
    assert stream.end_of_file()


def test_character_stream_next_past_eof_raises() -> None:
    stream = CharacterStream("")
    with pytest.raises(LexError, match="past end of source"):
        stream.next()


def test_character_stream_snapshot_restore() -> None:
    stream = CharacterStream("a\nb")
    state = stream.snapshot()
    stream.next()
    stream.next()
    assert (stream.line, stream.column) == (2, 1)
    stream.restore(state)
    assert stream.snapshot() == (0, 1, 1)


def test_token_repr_and_eq() -> None:
    t1 = Token(NUMBER, 42.0, 0)
    t2 = Token(NUMBER, 42.0, 9)
    t3 = Token(NUMBER, 41.0, 0)

    assert repr(t1) == "Token(NUMBER, 42.0)"
    assert t1 == t2
    assert t1 != t3
    assert t1 != "42"
    assert len({t1, t2, t3}) == 2


def test_operator_tokens_compare_by_kind() -> None:
    assert Token(ADD, "+", 0) == Token(ADD, "", 7)
    assert Token(ADD, "+") != Token(SUB, "-")
    assert Token(ANY_OP, "") == Token(MUL, "*")
    assert Token(MUL, "*") == Token(ANY_OP, "")
    assert Token(ANY_OP, "") != Token(IDENT, "x")
    assert hash(Token(ANY_OP, "")) == hash(Token(POW, "**"))


def test_token_matches() -> None:
    tok = Token(LE, "<=")
    assert tok.matches(LE)
    assert tok.matches(ANY_OP)
    assert not tok.matches(LT)
    assert Token(IDENT, "x").matches(IDENT)
    assert not Token(IDENT, "x").matches(ANY_OP)


@given(st.text(max_size=100))  # type: ignore[misc]
def test_lexer_only_raises_lex_errors(source: str) -> None:
    try:
        tokens = tokenize(source)
    except LexError:
        return
    assert tokens[-1].type == EOF
    assert all(tok.type != EOF for tok in tokens[:-1])


@given(
    st.text(alphabet="abxy_019.+-*/%=<>!&|^~(){},; \n", max_size=60)
)  # type: ignore[misc]
def test_token_positions_never_decrease(source: str) -> None:
    try:
        tokens = tokenize(source)
    except LexError:
        return
    positions = [tok.pos for tok in tokens]
    assert positions == sorted(positions)
    for tok in tokens[:-1]:
        assert source[tok.pos] not in " \t"
