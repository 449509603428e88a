"""
Defines the abstract syntax tree (AST) node types for the PLUME language.

The tree is owned and acyclic: every node has exactly one parent and is built
bottom-up by the parser, children first.

Classes:
    ASTNode: Base class providing structural equality and a compact repr.
    NodeList: Base for nodes that wrap an ordered list (iterable, sized).

    Program, Function, ArgDeclList, ArgList, FnCall:
        Program structure and function calls.
    Factor, Binary, Unary:
        Expression nodes. An expression is a Binary, a Unary or a Factor leaf.
    Scope, ExprStatement, Assign, Return, CondBlock, Branch, FnDecl, EmptyStatement:
        Statement nodes. A Scope is both a function body and a nested block.

Equality:
    Nodes compare by type and declared fields. Source positions are kept in
    `pos` for diagnostics only and are ignored, as are token positions, so
    expected trees can be written by hand in tests.

Example:
    >>> Binary(Token("ADD", "+"), Factor("number", 1.0), Factor("number", 2.0))
    Binary(op=Token(ADD, +), left=Factor(number, 1.0), right=Factor(number, 2.0))
"""

from collections.abc import Iterator
from typing import Any, Union

from plume.plume_lexer import Token

FACTOR_KINDS = frozenset({"number", "string", "symbol", "bool", "call", "expr", "none"})


class ASTNode:
    """
    Base class for all PLUME AST nodes.

    Subclasses list their semantic attributes in `_fields`; those drive
    `__eq__` and `__repr__`.

    Attributes:
        pos (int): 0-based source offset of the node's first token.
    """

    _fields: tuple[str, ...] = ()

    def __init__(self, pos: int = 0) -> None:
        self.pos = pos

    def __repr__(self) -> str:
        parts = []
        for name in self._fields:
            val = getattr(self, name)
            if isinstance(val, list):
                preview = ", ".join(repr(v) for v in val[:3])
                if len(val) > 3:
                    preview += ", ..."
                parts.append(f"{name}=[{preview}]")
            else:
                parts.append(f"{name}={val!r}")
        return f"{type(self).__name__}({', '.join(parts)})"

    def __eq__(self, other: Any) -> bool:
        if type(self) is not type(other):
            return False
        return all(getattr(self, f) == getattr(other, f) for f in self._fields)

    __hash__ = None  # type: ignore[assignment]


class NodeList(ASTNode):
    """An ASTNode whose content is one ordered list, exposed as `items`."""

    _items_field = ""

    @property
    def items(self) -> list[Any]:
        items: list[Any] = getattr(self, self._items_field)
        return items

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.items)


# Expressions


class Factor(ASTNode):
    """
    Leaf of an expression tree.

    Args:
        kind (str): One of "number", "string", "symbol", "bool", "call",
            "expr" or "none".
        value: float, str, name str, bool, FnCall, nested Expr, or None for
            the empty-input placeholder.
    """

    _fields = ("kind", "value")

    def __init__(self, kind: str, value: Any = None, pos: int = 0) -> None:
        if kind not in FACTOR_KINDS:
            raise ValueError(f"Unknown factor kind: {kind!r}")
        super().__init__(pos)
        self.kind = kind
        self.value = value

    def __repr__(self) -> str:
        if self.kind == "none":
            return "Factor(none)"
        return f"Factor({self.kind}, {self.value!r})"


class Binary(ASTNode):
    _fields = ("op", "left", "right")

    def __init__(self, op: Token, left: "Expr", right: "Expr", pos: int = 0) -> None:
        super().__init__(pos)
        self.op = op
        self.left = left
        self.right = right


class Unary(ASTNode):
    _fields = ("op", "right")

    def __init__(self, op: Token, right: "Expr", pos: int = 0) -> None:
        super().__init__(pos)
        self.op = op
        self.right = right


Expr = Union[Binary, Unary, Factor]


# Functions and calls


class ArgDeclList(NodeList):
    """Parameter names at a function declaration site."""

    _fields = ("names",)
    _items_field = "names"

    def __init__(self, names: list[Token] | None = None, pos: int = 0) -> None:
        super().__init__(pos)
        self.names: list[Token] = names or []


class ArgList(NodeList):
    """Argument expressions at a call site."""

    _fields = ("args",)
    _items_field = "args"

    def __init__(self, args: list[Expr] | None = None, pos: int = 0) -> None:
        super().__init__(pos)
        self.args: list[Expr] = args or []


class FnCall(ASTNode):
    _fields = ("name", "args")

    def __init__(self, name: Token, args: ArgList | None = None, pos: int = 0) -> None:
        super().__init__(pos)
        self.name = name
        self.args = args if args is not None else ArgList()


# Statements


class Scope(NodeList):
    """A brace-delimited block: a function body or a nested block statement."""

    _fields = ("statements",)
    _items_field = "statements"

    def __init__(self, statements: list["Statement"] | None = None, pos: int = 0) -> None:
        super().__init__(pos)
        self.statements: list["Statement"] = statements or []


class ExprStatement(ASTNode):
    _fields = ("expr",)

    def __init__(self, expr: Expr, pos: int = 0) -> None:
        super().__init__(pos)
        self.expr = expr


class Assign(ASTNode):
    """`left = right`, where `left` is the IDENT token being assigned."""

    _fields = ("left", "right")

    def __init__(self, left: Token, right: Expr, pos: int = 0) -> None:
        super().__init__(pos)
        self.left = left
        self.right = right


class Return(ASTNode):
    _fields = ("val",)

    def __init__(self, val: Expr | None = None, pos: int = 0) -> None:
        super().__init__(pos)
        self.val = val


class CondBlock(ASTNode):
    """One `if`/`elif` clause: a condition and the statement it guards."""

    _fields = ("cond", "body")

    def __init__(self, cond: Expr, body: "Statement", pos: int = 0) -> None:
        super().__init__(pos)
        self.cond = cond
        self.body = body


class Branch(ASTNode):
    """
    A full conditional chain.

    Attributes:
        if_block (CondBlock): The leading `if` clause.
        alt_blocks (list[CondBlock]): The `elif` clauses, in source order.
        else_block (Statement | None): The `else` body, if present.
    """

    _fields = ("if_block", "alt_blocks", "else_block")

    def __init__(
        self,
        if_block: CondBlock,
        alt_blocks: list[CondBlock] | None = None,
        else_block: Union["Statement", None] = None,
        pos: int = 0,
    ) -> None:
        super().__init__(pos)
        self.if_block = if_block
        self.alt_blocks: list[CondBlock] = alt_blocks or []
        self.else_block = else_block


class FnDecl(ASTNode):
    """A function declared as a statement inside another function."""

    _fields = ("function",)

    def __init__(self, function: "Function", pos: int = 0) -> None:
        super().__init__(pos)
        self.function = function


class EmptyStatement(ASTNode):
    """A lone terminator used where a statement is expected."""


Statement = Union[
    ExprStatement, Assign, Return, Branch, FnDecl, Scope, EmptyStatement
]


# Program structure


class Function(ASTNode):
    _fields = ("name", "params", "body")

    def __init__(
        self,
        name: Token,
        params: ArgDeclList | None = None,
        body: Scope | None = None,
        pos: int = 0,
    ) -> None:
        super().__init__(pos)
        self.name = name
        self.params = params if params is not None else ArgDeclList()
        self.body = body if body is not None else Scope()


class Program(NodeList):
    _fields = ("functions",)
    _items_field = "functions"

    def __init__(self, functions: list[Function] | None = None, pos: int = 0) -> None:
        super().__init__(pos)
        self.functions: list[Function] = functions or []


__all__ = [
    "ASTNode",
    "ArgDeclList",
    "ArgList",
    "Assign",
    "Binary",
    "Branch",
    "CondBlock",
    "EmptyStatement",
    "Expr",
    "ExprStatement",
    "Factor",
    "FnCall",
    "FnDecl",
    "Function",
    "NodeList",
    "Program",
    "Return",
    "Scope",
    "Statement",
    "Unary",
]
