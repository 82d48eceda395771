from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from lark import Lark, Token, Tree
from lark.exceptions import GrammarError, UnexpectedCharacters, UnexpectedInput, UnexpectedToken

from varlang.core.diagnostics import SYNTAX_ERROR, Diagnostic
from varlang.core.span import Span

from .rules import START_RULE, RuleKind

GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")

# Token type the engine uses to flag a syntax error inside the concrete tree.
ERROR_TOKEN = "ERROR"


class ErrorTokenMarker:
    """
    Post-lexer that turns out-of-alphabet characters into ERROR tokens.

    The grammar accepts ERROR wherever an operand may appear, so a stray
    character becomes an error node in the tree instead of aborting the parse.
    """

    always_accept = ("BAD",)

    def process(self, stream):
        for token in stream:
            if token.type == "BAD":
                yield Token.new_borrow_pos(ERROR_TOKEN, token.value, token)
            else:
                yield token


def build_engine(grammar_path: Optional[Path] = None) -> Lark:
    """
    Build the LALR engine for a VarLang grammar file.

    Raises OSError if the grammar cannot be read and lark's GrammarError if it
    does not compile or its rules do not match RuleKind. Both are fatal.
    """
    path = Path(grammar_path) if grammar_path is not None else GRAMMAR_PATH
    engine = Lark(
        path.read_text(),
        parser="lalr",
        lexer="basic",
        start=START_RULE,
        propagate_positions=True,
        maybe_placeholders=False,
        postlex=ErrorTokenMarker(),
    )
    _check_rule_kinds(engine, path)
    return engine


def _check_rule_kinds(engine: Lark, path: Path) -> None:
    declared = {
        str(rule.origin.name)
        for rule in engine.rules
        if not str(rule.origin.name).startswith(("_", "$"))
    }
    known = {kind.rule_name for kind in RuleKind}
    if declared != known:
        missing = sorted(known - declared)
        extra = sorted(declared - known)
        raise GrammarError(
            f"{path}: grammar rules out of sync with RuleKind "
            f"(missing from grammar: {missing or 'none'}; unknown to RuleKind: {extra or 'none'})"
        )


_DEFAULT_ENGINE: Optional[Lark] = None


def default_engine() -> Lark:
    """Process-wide engine for the bundled grammar, built on first use."""
    global _DEFAULT_ENGINE
    if _DEFAULT_ENGINE is None:
        _DEFAULT_ENGINE = build_engine()
    return _DEFAULT_ENGINE


def parse_tree(source: str, diagnostics: List[Diagnostic], engine: Optional[Lark] = None) -> Tree:
    """
    Parse one line into a concrete parse tree rooted at `program`.

    A line the parser rejects yields `program[ERROR]` plus a parser-phase
    diagnostic; this never raises for bad input.
    """
    engine = engine or default_engine()
    try:
        return engine.parse(source)
    except UnexpectedInput as exc:
        line, column = _position(exc)
        diagnostics.append(
            Diagnostic(
                message=_describe(exc),
                code=SYNTAX_ERROR,
                phase="parser",
                span=Span(line=line, column=column, raw=exc),
                notes=_context(exc, source),
            )
        )
        error = Token(ERROR_TOKEN, source.strip(), line=line, column=column)
        return Tree(START_RULE, [error])


def _describe(exc: UnexpectedInput) -> str:
    if isinstance(exc, UnexpectedToken):
        if exc.token.type == "$END":
            return "syntax error: unexpected end of input"
        return f"syntax error: unexpected token '{exc.token.value}'"
    if isinstance(exc, UnexpectedCharacters):
        return f"syntax error: unexpected character '{exc.char}'"
    return "syntax error"


def _position(exc: UnexpectedInput) -> tuple[Optional[int], Optional[int]]:
    # lark reports "?" or -1 when the error sits at end of input.
    line = getattr(exc, "line", None)
    column = getattr(exc, "column", None)
    line = line if isinstance(line, int) and line > 0 else None
    column = column if isinstance(column, int) and column > 0 else None
    return line, column


def _context(exc: UnexpectedInput, source: str) -> list[str]:
    pos = getattr(exc, "pos_in_stream", None)
    if not isinstance(pos, int) or pos < 0:
        return []
    return [exc.get_context(source).rstrip("\n")]


__all__ = [
    "ERROR_TOKEN",
    "ErrorTokenMarker",
    "GRAMMAR_PATH",
    "build_engine",
    "default_engine",
    "parse_tree",
]
