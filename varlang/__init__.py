"""VarLang: one-line arithmetic programs parsed with lark and converted to an AST."""

from varlang.core.diagnostics import Diagnostic
from varlang.parser import build_program, parse_program
from varlang.parser.ast import (
    Add,
    Const,
    Div,
    ErrorExpr,
    Expr,
    Mult,
    Program,
    ProgramConversionError,
    Sub,
    Variable,
)
from varlang.parser.rules import RuleKind

__all__ = [
    "Add",
    "Const",
    "Diagnostic",
    "Div",
    "ErrorExpr",
    "Expr",
    "Mult",
    "Program",
    "ProgramConversionError",
    "RuleKind",
    "Sub",
    "Variable",
    "build_program",
    "parse_program",
]
