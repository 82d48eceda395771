"""
VarLang front-end: lark parse tree to AST.

`parse_program` chains the lark engine, the tree converter and the program
assembler for one line of source text. Problems are reported through the
`diagnostics` list rather than raised.
"""

from __future__ import annotations

from typing import List, Optional

from lark import Lark, Token, Tree

from varlang.core.diagnostics import Diagnostic

from .ast import Program
from .converter import convert
from .parser import parse_tree
from .rules import RuleKind, rule_kind, rule_name


def build_program(tree: Tree, diagnostics: List[Diagnostic]) -> Program:
    """
    Wrap the single top-level expression of a `program` tree into a Program.

    The body is None when that expression could not be converted; callers
    treat such a program as a failed parse (see Program.require_body).
    """
    if rule_kind(tree) is not RuleKind.PROGRAM:
        diagnostics.append(
            Diagnostic(
                message=f"expected a '{RuleKind.PROGRAM.rule_name}' parse tree, got '{rule_name(tree)}'",
                phase="convert",
                span=tree.meta,
            )
        )
        return Program(body=None)
    top = _top_level_child(tree)
    if top is None:
        return Program(body=None)
    return Program(body=convert(top, diagnostics))


def _top_level_child(tree: Tree) -> Optional[Tree | Token]:
    # For this grammar a program holds exactly one expression.
    return tree.children[0] if tree.children else None


def parse_program(
    source: str,
    diagnostics: Optional[List[Diagnostic]] = None,
    engine: Optional[Lark] = None,
) -> Program:
    """Parse one line of VarLang source into a Program."""
    if diagnostics is None:
        diagnostics = []
    tree = parse_tree(source, diagnostics, engine=engine)
    return build_program(tree, diagnostics)


__all__ = ["build_program", "parse_program", "parse_tree"]
