"""
Lexical constants shared by the PLUME lexer and parser.

Token types are plain upper-case strings. Operators get one type per kind
(``ADD``, ``POW``, ``LE`` ...), keywords get the upper-cased reserved word
(``IF``, ``FN`` ...), and everything else falls into a handful of literal
and marker types.

Exports:
    - operator_tokens: Longest-match table from operator lexeme to token type.
    - KEYWORDS: Read-only table from reserved word to keyword token type.
    - Token-type groupings used by the grammar rules.
"""

from types import MappingProxyType

# Literal and marker types
NUMBER = "NUMBER"
STRING = "STRING"
BOOL = "BOOL"
IDENT = "IDENT"
OTHER = "OTHER"  # found kind of UnexpectedCharacter, never a token
EOF = "EOF"

# Arithmetic
ADD = "ADD"
SUB = "SUB"
MUL = "MUL"
DIV = "DIV"
INT_DIV = "INT_DIV"
MOD = "MOD"
POW = "POW"
POS = "POS"
NEG = "NEG"

# Relational
EQ = "EQ"
NE = "NE"
LT = "LT"
LE = "LE"
GT = "GT"
GE = "GE"

# Logical
AND = "AND"
OR = "OR"
NOT = "NOT"

# Bitwise
BIT_AND = "BIT_AND"
BIT_OR = "BIT_OR"
BIT_XOR = "BIT_XOR"
BIT_NOT = "BIT_NOT"
SHL = "SHL"
SHR = "SHR"
USHR = "USHR"

# Structural
ASSIGN = "ASSIGN"
COMMA = "COMMA"
LPAREN = "LPAREN"
RPAREN = "RPAREN"
LBRACE = "LBRACE"
RBRACE = "RBRACE"
LINE_END = "LINE_END"

# Wildcard: equal to every operator kind, never produced by the lexer.
ANY_OP = "ANY_OP"

operator_tokens: dict[str, str] = {
    "+": ADD,
    "-": SUB,
    "*": MUL,
    "**": POW,
    "/": DIV,
    "//": INT_DIV,
    "%": MOD,
    "==": EQ,
    "!=": NE,
    "<": LT,
    "<=": LE,
    ">": GT,
    ">=": GE,
    "&&": AND,
    "||": OR,
    "!": NOT,
    "&": BIT_AND,
    "|": BIT_OR,
    "^": BIT_XOR,
    "~": BIT_NOT,
    "<<": SHL,
    ">>": SHR,
    ">>>": USHR,
    "=": ASSIGN,
    ",": COMMA,
    "(": LPAREN,
    ")": RPAREN,
    "{": LBRACE,
    "}": RBRACE,
    ";": LINE_END,
    "\n": LINE_END,
}

MAX_OPERATOR_LENGTH = max(len(lexeme) for lexeme in operator_tokens)

# Keywords
IF = "IF"
ELSE = "ELSE"
ELIF = "ELIF"
RETURN = "RETURN"
FN = "FN"
STATE = "STATE"
WRITE = "WRITE"
READ = "READ"
FOR = "FOR"
IN = "IN"
ARRAY = "ARRAY"

KEYWORDS = MappingProxyType(
    {
        word.lower(): word
        for word in (IF, ELSE, ELIF, RETURN, FN, STATE, WRITE, READ, FOR, IN, ARRAY)
    }
)

BOOL_LITERALS = MappingProxyType({"true": True, "false": False})

# TOKEN GROUPINGS (PARSER)

OPERATOR_TYPES: frozenset[str] = frozenset(operator_tokens.values()) | {POS, NEG}

# A '+' or '-' right after one of these is binary, otherwise unary.
BINARY_CONTEXT: frozenset[str] = frozenset({NUMBER, STRING, BOOL, IDENT, RPAREN})

ADDITIVE_OPS: frozenset[str] = frozenset({ADD, SUB})
MULTIPLICATIVE_OPS: frozenset[str] = frozenset({MUL, DIV, INT_DIV, MOD})
RELATIONAL_OPS: frozenset[str] = frozenset({EQ, NE, LT, LE, GT, GE})

# Tokens that can begin an arithmetic expression.
EXPR_START: frozenset[str] = frozenset(
    {NUMBER, STRING, BOOL, IDENT, LPAREN, POS, NEG, POW}
)

DEFAULT_BASE = 10
MIN_BASE = 2
MAX_BASE = 36
