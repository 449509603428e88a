"""
PLUME Language Parser

Parses PLUME source text into an abstract syntax tree (AST).

This module implements a recursive-descent parser with one method per grammar
nonterminal. The parser owns a `Lexer`, pulls tokens from it on demand, and
builds the tree bottom-up: every rule consumes exactly the tokens it owns and
returns a fully built subtree to its caller.

Grammar
-------
    program           := function+
    function          := 'fn' IDENT arg_decl_list scope
    scope             := '{' statement* '}'
    statement         := scope | assign_or_call | expr | 'if' conditional
                       | 'return' expr? | 'fn' function | ';'
    expr              := term (('+'|'-') term)*
    term              := pow_factor (('*'|'/'|'//'|'%') pow_factor)*
    pow_factor        := factor ('**' factor)?
    factor            := NUMBER | STRING | BOOL | var_disambiguate
                       | '(' expr ')' | '**' pow_factor | ('+'|'-') factor
    bool_expr         := bool_term ('||' bool_term)*
    bool_term         := bool_factor ('&&' bool_factor)*
    bool_factor       := '!' bool_factor | relational_expr
    relational_expr   := relational_factor (REL_OP relational_factor)*
    relational_factor := expr | BOOL | '!' relational_expr | '(' bool_expr ')'

Newlines and `;` terminate statements and may appear between functions and
between the statements of a block.

Parser Behavior
---------------
- Fail-fast: the first unexpected token aborts the whole call with a
  `TokenMismatch` or `GrammarError`. There is no recovery and no partial tree.
- End of input where a factor is expected is not an error; it yields
  `Factor("none")`.
- `**` is right-associative because `pow_factor` recurses into `factor`,
  which consumes the operator and parses another `pow_factor`.
- `+`, `-`, `*`, `/`, `//`, `%`, `&&`, `||` and the relational operators build
  left-leaning chains. Relational operators share one precedence level.
- One token of lookahead decides between assignment (`IDENT '='`), call
  (`IDENT '('`) and plain variable reference.

Entry Points
------------
- `parse_program()`: Parse a complete program.
- `parse_expression()`: Parse a single arithmetic expression.
- `parse_condition()`: Parse a single boolean/relational expression.
- `parse_statement()`: Parse a single statement.

Raises
------
TokenMismatch, GrammarError, LexError
    All subclasses of `SyntaxError` via `PlumeError`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from plume.plume_ast import (
    ArgDeclList,
    ArgList,
    Assign,
    Binary,
    Branch,
    CondBlock,
    EmptyStatement,
    Expr,
    ExprStatement,
    Factor,
    FnCall,
    FnDecl,
    Function,
    Program,
    Return,
    Scope,
    Statement,
    Unary,
)
from plume.plume_constants import (
    ADDITIVE_OPS,
    AND,
    ANY_OP,
    ASSIGN,
    BOOL,
    COMMA,
    DEFAULT_BASE,
    ELIF,
    ELSE,
    EOF,
    EXPR_START,
    FN,
    IDENT,
    IF,
    KEYWORDS,
    LBRACE,
    LINE_END,
    LPAREN,
    MULTIPLICATIVE_OPS,
    NEG,
    NOT,
    NUMBER,
    OR,
    POS,
    POW,
    RBRACE,
    RELATIONAL_OPS,
    RETURN,
    RPAREN,
    STRING,
)
from plume.plume_errors import GrammarError
from plume.plume_lexer import Lexer, Token

logger = logging.getLogger(__name__)


class Parser:
    """
    PLUME Parser Class

    Owns one `Lexer` and turns the loaded source text into AST nodes. A parser
    is not thread-safe; use one instance per parse session.

    Attributes
    ----------
    lexer : Lexer
        The lexer bound to the loaded source.
    source : str
        The text most recently passed to `load`.

    Methods
    -------
    load(source: str) -> None
        Bind new source text.
    set_base(radix: int) -> None
        Set the radix used to read numerals.
    parse_program() -> Program
        Parse a complete program.
    parse_expression() -> Expr
        Parse one arithmetic expression that spans the whole input.
    parse_condition() -> Expr
        Parse one boolean expression that spans the whole input.
    parse_statement() -> Statement
        Parse one statement that spans the whole input.
    """

    def __init__(
        self, keywords: Mapping[str, str] = KEYWORDS, base: int = DEFAULT_BASE
    ) -> None:
        self.lexer = Lexer(keywords, base)
        self.source = ""
        self.lexer.set_input(self.source)

    def load(self, source: str) -> None:
        self.source = source
        self.lexer.set_input(source)

    def set_base(self, radix: int) -> None:
        self.lexer.set_base(radix)

    # Entry points

    def parse_program(self) -> Program:
        """Parse the loaded source as a full program.

        Returns:
            Program: The functions of the program, in source order.

        Raises:
            PlumeError: On the first lexical or grammatical error.
        """
        logger.debug("Parsing program (%d characters)", len(self.source))
        self.lexer.reset()
        program = self.program()
        logger.debug("Parsed program with %d function(s)", len(program))
        return program

    def parse_expression(self) -> Expr:
        """Parse the loaded source as a single arithmetic expression."""
        logger.debug("Parsing expression %r", self.source)
        self.lexer.reset()
        expr = self.expr()
        self.expect_end()
        return expr

    def parse_condition(self) -> Expr:
        """Parse the loaded source as a single boolean expression."""
        logger.debug("Parsing condition %r", self.source)
        self.lexer.reset()
        cond = self.bool_expr()
        self.expect_end()
        return cond

    def parse_statement(self) -> Statement:
        """Parse the loaded source as a single statement."""
        logger.debug("Parsing statement %r", self.source)
        self.lexer.reset()
        stmt = self.statement()
        self.expect_end()
        return stmt

    # Token helpers

    def current(self) -> Token:
        tok = self.lexer.current
        assert tok is not None  # for mypy
        return tok

    def at(self, *types: str) -> bool:
        return self.current().type in types

    def eat(self, expected: str) -> Token:
        return self.lexer.validate_and_consume(expected)

    def eat_terminator(self) -> None:
        if self.at(LINE_END):
            self.eat(LINE_END)

    def skip_terminators(self) -> None:
        while self.at(LINE_END):
            self.eat(LINE_END)

    def expect_end(self) -> None:
        self.skip_terminators()
        self.eat(EOF)

    def check_separator(self, rule: str, allowed: frozenset[str], item: str) -> None:
        """Fail unless the token after a ',' starts another item or closes the list."""
        tok = self.current()
        if tok.type != RPAREN and tok.type not in allowed:
            raise GrammarError(rule, tok.type, tok.pos, expected=f"{item} or RPAREN")

    # Program structure

    def program(self) -> Program:
        self.skip_terminators()
        start = self.current().pos
        functions = [self.function()]
        self.skip_terminators()
        while not self.at(EOF):
            functions.append(self.function())
            self.skip_terminators()
        return Program(functions, pos=start)

    def function(self) -> Function:
        """Parse `fn name(params) { body }`."""
        fn_tok = self.eat(FN)
        name = self.eat(IDENT)
        params = self.arg_decl_list()
        body = self.scope()
        return Function(name, params, body, pos=fn_tok.pos)

    def arg_decl_list(self) -> ArgDeclList:
        """Parse a parenthesized, comma-separated list of parameter names."""
        start = self.eat(LPAREN)
        params = ArgDeclList(pos=start.pos)
        while not self.at(RPAREN):
            params.names.append(self.eat(IDENT))
            if not self.at(COMMA):
                break
            self.eat(COMMA)
            self.check_separator("arg_decl_list", frozenset({IDENT}), IDENT)
        self.eat(RPAREN)
        return params

    def scope(self) -> Scope:
        """Parse a `{ ... }` block. Terminators between statements are skipped."""
        start = self.eat(LBRACE)
        statements: list[Statement] = []
        self.skip_terminators()
        while not self.at(RBRACE, EOF):
            statements.append(self.statement())
            self.skip_terminators()
        self.eat(RBRACE)
        return Scope(statements, pos=start.pos)

    # Statements

    def statement(self) -> Statement:
        tok = self.current()

        if tok.type == LBRACE:
            return self.scope()
        if tok.type == IDENT:
            return self.assign_or_call()
        if tok.type in EXPR_START:
            stmt = ExprStatement(self.expr(), pos=tok.pos)
            self.eat_terminator()
            return stmt
        if tok.type == IF:
            return self.conditional_statement()
        if tok.type == RETURN:
            return self.return_statement()
        if tok.type == FN:
            return FnDecl(self.function(), pos=tok.pos)
        if tok.type == LINE_END:
            self.eat(LINE_END)
            return EmptyStatement(pos=tok.pos)

        raise GrammarError("statement", tok.type, tok.pos, expected="statement")

    def assign_or_call(self) -> Statement:
        """Parse a statement that starts with an identifier.

        `IDENT '='` is an assignment; anything else (a call, a variable, or a
        larger expression starting with either) is an expression statement.
        """
        tok = self.current()
        if self.lexer.peek_token().type == ASSIGN:
            name = self.eat(IDENT)
            self.eat(ASSIGN)
            stmt: Statement = Assign(name, self.expr(), pos=name.pos)
        else:
            stmt = ExprStatement(self.expr(), pos=tok.pos)
        self.eat_terminator()
        return stmt

    def return_statement(self) -> Return:
        ret_tok = self.eat(RETURN)
        val = None
        if not self.at(LINE_END, RBRACE, EOF):
            val = self.expr()
        self.eat_terminator()
        return Return(val, pos=ret_tok.pos)

    def conditional_statement(self) -> Branch:
        """Parse an `if` / `elif`* / `else`? chain into one Branch."""
        if_tok = self.eat(IF)
        if_block = self.cond_block(if_tok)

        alt_blocks: list[CondBlock] = []
        self.skip_terminators()
        while self.at(ELIF):
            elif_tok = self.eat(ELIF)
            alt_blocks.append(self.cond_block(elif_tok))
            self.skip_terminators()

        else_block = None
        if self.at(ELSE):
            self.eat(ELSE)
            else_block = self.statement()

        return Branch(if_block, alt_blocks, else_block, pos=if_tok.pos)

    def cond_block(self, keyword: Token) -> CondBlock:
        cond = self.bool_expr()
        body = self.statement()
        return CondBlock(cond, body, pos=keyword.pos)

    # Arithmetic expressions

    def expr(self) -> Expr:
        node = self.term()
        while self.current().type in ADDITIVE_OPS:
            op = self.eat(ANY_OP)
            node = Binary(op, node, self.term(), pos=node.pos)
        return node

    def term(self) -> Expr:
        node = self.pow_factor()
        while self.current().type in MULTIPLICATIVE_OPS:
            op = self.eat(ANY_OP)
            node = Binary(op, node, self.pow_factor(), pos=node.pos)
        return node

    def pow_factor(self) -> Expr:
        """Parse `factor ('**' factor)?`.

        The '**' is left for `factor` to consume, which then parses another
        `pow_factor`, so chains of powers nest to the right.
        """
        left = self.factor()
        if self.at(POW):
            op = self.current()
            right = self.factor()
            return Binary(op, left, right, pos=left.pos)
        return left

    def factor(self) -> Expr:
        tok = self.current()

        if tok.type == NUMBER:
            self.eat(NUMBER)
            return Factor("number", tok.value, pos=tok.pos)
        if tok.type == STRING:
            self.eat(STRING)
            return Factor("string", tok.value, pos=tok.pos)
        if tok.type == BOOL:
            self.eat(BOOL)
            return Factor("bool", tok.value, pos=tok.pos)
        if tok.type == IDENT:
            return self.var_disambiguate()
        if tok.type == LPAREN:
            self.eat(LPAREN)
            inner = self.expr()
            self.eat(RPAREN)
            return Factor("expr", inner, pos=tok.pos)
        if tok.type == POW:
            self.eat(POW)
            return self.pow_factor()
        if tok.type in (POS, NEG):
            op = self.eat(tok.type)
            return Unary(op, self.factor(), pos=op.pos)
        if tok.type == EOF:
            # Blank input degrades to a placeholder leaf instead of failing.
            return Factor("none", pos=tok.pos)

        raise GrammarError(
            "factor", tok.type, tok.pos, expected="NUMBER, IDENT or LPAREN"
        )

    def var_disambiguate(self) -> Factor:
        """Parse an identifier as a call if '(' follows it, else as a variable."""
        if self.lexer.peek_token().type == LPAREN:
            call = self.fn_call()
            return Factor("call", call, pos=call.pos)
        name = self.eat(IDENT)
        return Factor("symbol", name.value, pos=name.pos)

    def fn_call(self) -> FnCall:
        name = self.eat(IDENT)
        call = FnCall(name, ArgList(pos=self.current().pos), pos=name.pos)
        self.arg_list(call.args)
        return call

    def arg_list(self, args: ArgList) -> ArgList:
        """Parse `( expr, ... )`, appending each argument to `args` as it is read."""
        self.eat(LPAREN)
        while not self.at(RPAREN):
            args.args.append(self.expr())
            if not self.at(COMMA):
                break
            self.eat(COMMA)
            self.check_separator("arg_list", EXPR_START, "expression")
        self.eat(RPAREN)
        return args

    # Boolean expressions

    def bool_expr(self) -> Expr:
        node = self.bool_term()
        while self.at(OR):
            op = self.eat(OR)
            node = Binary(op, node, self.bool_term(), pos=node.pos)
        return node

    def bool_term(self) -> Expr:
        node = self.bool_factor()
        while self.at(AND):
            op = self.eat(AND)
            node = Binary(op, node, self.bool_factor(), pos=node.pos)
        return node

    def bool_factor(self) -> Expr:
        if self.at(NOT):
            op = self.eat(NOT)
            return Unary(op, self.bool_factor(), pos=op.pos)
        return self.relational_expr()

    def relational_expr(self) -> Expr:
        """Parse a flat, left-to-right chain of relational comparisons."""
        node = self.relational_factor()
        while self.current().type in RELATIONAL_OPS:
            op = self.eat(ANY_OP)
            node = Binary(op, node, self.relational_factor(), pos=node.pos)
        return node

    def relational_factor(self) -> Expr:
        tok = self.current()

        if tok.type == BOOL:
            self.eat(BOOL)
            return Factor("bool", tok.value, pos=tok.pos)
        if tok.type == NOT:
            op = self.eat(NOT)
            return Unary(op, self.relational_expr(), pos=op.pos)
        if tok.type == LPAREN:
            self.eat(LPAREN)
            inner = self.bool_expr()
            self.eat(RPAREN)
            return Factor("expr", inner, pos=tok.pos)
        if tok.type in EXPR_START:
            return self.expr()

        raise GrammarError(
            "relational_factor", tok.type, tok.pos, expected="value or LPAREN"
        )


__all__ = ["Parser"]
