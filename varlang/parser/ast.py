from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Optional, Tuple


class ProgramConversionError(ValueError):
    """
    Raised when a line produced no usable program body.

    The converter itself never raises; this is for callers that need an
    expression to hand to an evaluator.
    """


@dataclass(frozen=True)
class Located:
    line: int
    column: int


class Expr:
    loc: Optional[Located]


@dataclass(frozen=True)
class Const(Expr):
    value: int
    loc: Optional[Located] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Variable(Expr):
    name: str
    loc: Optional[Located] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class NaryExpr(Expr):
    """
    Arithmetic node over an ordered operand tuple.

    The grammar flattens same-operator chains, so `a+b+c` is one node with
    three operands. Any arity is structurally legal.
    """

    operands: Tuple[Expr, ...] = ()
    loc: Optional[Located] = field(default=None, compare=False, repr=False)

    op: ClassVar[str] = "?"

    def __post_init__(self) -> None:
        if not isinstance(self.operands, tuple):
            object.__setattr__(self, "operands", tuple(self.operands))


@dataclass(frozen=True)
class Add(NaryExpr):
    op: ClassVar[str] = "+"


@dataclass(frozen=True)
class Sub(NaryExpr):
    op: ClassVar[str] = "-"


@dataclass(frozen=True)
class Mult(NaryExpr):
    op: ClassVar[str] = "*"


@dataclass(frozen=True)
class Div(NaryExpr):
    op: ClassVar[str] = "/"


@dataclass(frozen=True)
class ErrorExpr(Expr):
    """Visible marker for a malformed terminal or a parser error node."""

    text: str = field(default="", compare=False)
    loc: Optional[Located] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Program:
    body: Optional[Expr]

    @property
    def ok(self) -> bool:
        return self.body is not None

    def require_body(self) -> Expr:
        if self.body is None:
            raise ProgramConversionError("no valid program: top-level expression could not be converted")
        return self.body


def contains_error(expr: Optional[Expr]) -> bool:
    """True if `expr` is or contains an ErrorExpr."""
    if isinstance(expr, ErrorExpr):
        return True
    if isinstance(expr, NaryExpr):
        return any(contains_error(operand) for operand in expr.operands)
    return False

