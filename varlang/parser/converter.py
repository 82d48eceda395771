"""
Concrete parse tree -> AST conversion.

The walk never raises for bad input. Unknown or unsupported rules convert to
None (absence) and are dropped from their parent's operand list; malformed
terminals and parser error nodes convert to a visible ErrorExpr. Every such
case appends a Diagnostic. `convert_children` is the only place absences are
filtered.
"""

from __future__ import annotations

import re
from typing import Callable, Dict, List, Optional, Type

from lark import Token, Tree

from varlang.core.diagnostics import (
    ILLEGAL_TERMINAL,
    SYNTAX_ERROR,
    UNHANDLED_RULE,
    UNSUPPORTED_CONSTRUCT,
    Diagnostic,
)

from .ast import Add, Const, Div, ErrorExpr, Expr, Located, Mult, NaryExpr, Sub, Variable
from .parser import ERROR_TOKEN
from .rules import RuleKind, rule_kind, rule_name

# Tokens that belong to the concrete syntax only.
CONCRETE_SYNTAX_TOKENS = frozenset({"(", ")", "+", "-", "*", "/"})

# Integer literals are signed 32-bit values.
INT_MIN = -(2**31)
INT_MAX = 2**31 - 1
_INT_LITERAL = re.compile(r"[+-]?[0-9]+")

Handler = Callable[[Tree, List[Diagnostic]], Optional[Expr]]


def convert(node: Tree | Token, diagnostics: List[Diagnostic]) -> Optional[Expr]:
    """Convert one concrete-tree node into an expression, or None for no AST node."""
    if isinstance(node, Token):
        return _convert_terminal(node, diagnostics)
    if isinstance(node, Tree):
        kind = rule_kind(node)
        if kind is None:
            return _convert_unhandled(node, diagnostics)
        return _RULE_DISPATCH[kind](node, diagnostics)
    diagnostics.append(
        Diagnostic(
            message=f"Conversion error (from parse tree to AST): unexpected node of type {type(node).__name__}",
            code=UNHANDLED_RULE,
            phase="convert",
        )
    )
    return None


def convert_children(tree: Tree, diagnostics: List[Diagnostic]) -> List[Expr]:
    """Convert children left to right, keeping only the ones that produced a node."""
    results: List[Expr] = []
    for child in tree.children:
        result = convert(child, diagnostics)
        if result is not None:
            results.append(result)
    return results


def is_concrete_syntax_token(text: str) -> bool:
    return text in CONCRETE_SYNTAX_TOKENS


def parse_int_literal(text: str) -> Optional[int]:
    """Value of a decimal integer literal, or None if `text` is not one."""
    if not _INT_LITERAL.fullmatch(text):
        return None
    value = int(text)
    if value < INT_MIN or value > INT_MAX:
        return None
    return value


def _convert_pass_through(tree: Tree, diagnostics: List[Diagnostic]) -> Optional[Expr]:
    # `exp` and `numexp` only layer the grammar; they carry no AST identity.
    children = convert_children(tree, diagnostics)
    return children[0] if children else None


def _convert_varexp(tree: Tree, diagnostics: List[Diagnostic]) -> Optional[Expr]:
    if not tree.children:
        return _convert_unhandled(tree, diagnostics)
    return Variable(name=_text(tree.children[0]), loc=_loc(tree))


def _nary(cls: Type[NaryExpr]) -> Handler:
    def build(tree: Tree, diagnostics: List[Diagnostic]) -> Optional[Expr]:
        return cls(operands=tuple(convert_children(tree, diagnostics)), loc=_loc(tree))

    return build


def _convert_letexp(tree: Tree, diagnostics: List[Diagnostic]) -> Optional[Expr]:
    # TODO: build a Let node once the binding/body structure of `let` is settled.
    diagnostics.append(
        Diagnostic(
            message="Conversion error (from parse tree to AST): let expressions are not supported yet",
            code=UNSUPPORTED_CONSTRUCT,
            phase="convert",
            span=tree.meta,
        )
    )
    return None


def _convert_unhandled(tree: Tree, diagnostics: List[Diagnostic]) -> Optional[Expr]:
    diagnostics.append(
        Diagnostic(
            message=f"Conversion error (from parse tree to AST): found unknown/unhandled case {rule_name(tree)}",
            code=UNHANDLED_RULE,
            phase="convert",
            span=tree.meta,
        )
    )
    return None


def _convert_terminal(token: Token, diagnostics: List[Diagnostic]) -> Optional[Expr]:
    text = str(token)
    if token.type == ERROR_TOKEN:
        diagnostics.append(
            Diagnostic(
                message=f"syntax error node '{text}'",
                code=SYNTAX_ERROR,
                phase="convert",
                span=token,
            )
        )
        return ErrorExpr(text=text, loc=_loc(token))
    if is_concrete_syntax_token(text):
        return None
    value = parse_int_literal(text)
    if value is not None:
        return Const(value=value, loc=_loc(token))
    # Usually a token added to the grammar without a matching case here.
    diagnostics.append(
        Diagnostic(
            message=f"Illegal terminal '{text}'",
            code=ILLEGAL_TERMINAL,
            phase="convert",
            span=token,
        )
    )
    return ErrorExpr(text=text, loc=_loc(token))


_RULE_DISPATCH: Dict[RuleKind, Handler] = {
    RuleKind.PROGRAM: _convert_unhandled,
    RuleKind.EXP: _convert_pass_through,
    RuleKind.VAREXP: _convert_varexp,
    RuleKind.NUMEXP: _convert_pass_through,
    RuleKind.ADDEXP: _nary(Add),
    RuleKind.SUBEXP: _nary(Sub),
    RuleKind.MULTEXP: _nary(Mult),
    RuleKind.DIVEXP: _nary(Div),
    RuleKind.LETEXP: _convert_letexp,
}


def _text(node: Tree | Token) -> str:
    if isinstance(node, Token):
        return str(node)
    return "".join(_text(child) for child in node.children)


def _loc(node: Tree | Token) -> Optional[Located]:
    pos = node if isinstance(node, Token) else node.meta
    line = getattr(pos, "line", None)
    column = getattr(pos, "column", None)
    if line is None or column is None:
        return None
    return Located(line=line, column=column)


__all__ = [
    "CONCRETE_SYNTAX_TOKENS",
    "convert",
    "convert_children",
    "is_concrete_syntax_token",
    "parse_int_literal",
]
