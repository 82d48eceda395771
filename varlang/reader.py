"""
Line reader and command-line driver for the VarLang front-end.

Reads one program per line (from `-e` arguments or stdin), converts it to an
AST and prints the result. With --json each line produces one JSON object
(source/ok/program/diagnostics); otherwise ASTs go to stdout and diagnostics
to stderr.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Iterator, List, Optional, TextIO

from lark import Lark
from lark.exceptions import GrammarError

from varlang.core.diagnostics import Diagnostic, diagnostic_to_json, has_errors, render_diagnostic
from varlang.parser import build_program
from varlang.parser.ast import Program
from varlang.parser.parser import build_engine, default_engine, parse_tree

DEFAULT_PROMPT = "$ "


def read_lines(stream: TextIO, prompt: str = DEFAULT_PROMPT, out: Optional[TextIO] = None) -> Iterator[str]:
    """
    Yield non-blank lines from `stream` until EOF.

    The prompt is only written when reading from an interactive terminal.
    """
    out = out or sys.stdout
    interactive = stream.isatty()
    while True:
        if interactive:
            out.write(prompt)
            out.flush()
        line = stream.readline()
        if not line:
            return
        line = line.strip()
        if line:
            yield line


def _load_engine(grammar: Optional[Path]) -> Lark:
    if grammar is None:
        return default_engine()
    return build_engine(grammar)


def _process(
    source: str,
    origin: str,
    engine: Lark,
    args: argparse.Namespace,
) -> bool:
    """Convert one line and report it. Returns True when a usable program was built."""
    diagnostics: List[Diagnostic] = []
    tree = parse_tree(source, diagnostics, engine=engine)
    if args.print_tree and not args.json:
        print(f"parse tree:\n{tree.pretty()}", end="")
    program: Program = build_program(tree, diagnostics)
    ok = program.ok and not has_errors(diagnostics)

    if args.json:
        payload = {
            "source": source,
            "ok": ok,
            "program": repr(program.body) if program.body is not None else None,
            "diagnostics": [diagnostic_to_json(d, origin, "convert") for d in diagnostics],
        }
        if args.print_tree:
            payload["parse_tree"] = str(tree)
        print(json.dumps(payload))
        return ok

    for d in diagnostics:
        print(render_diagnostic(d, origin), file=sys.stderr)
    if program.body is None:
        print(f"{origin}: error: no valid program", file=sys.stderr)
    else:
        print(repr(program.body))
    return ok


def main(argv: list[str] | None = None) -> int:
    """
    Convert VarLang lines to ASTs.

    Exit status is 0 when every line converted cleanly, 1 when any line had
    errors, and 2 when the grammar could not be loaded.
    """
    parser = argparse.ArgumentParser(description="VarLang reader: source line -> AST")
    parser.add_argument(
        "-e",
        "--expr",
        dest="exprs",
        action="append",
        help="Program text to convert (repeatable); stdin is read when omitted",
    )
    parser.add_argument("--grammar", type=Path, help="Path to an alternative grammar.lark")
    parser.add_argument("--prompt", default=DEFAULT_PROMPT, help="Prompt shown for interactive input")
    parser.add_argument("--print-tree", action="store_true", help="Also print the concrete parse tree")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit one JSON object per line (source/ok/program/diagnostics)",
    )
    args = parser.parse_args(argv)

    try:
        engine = _load_engine(args.grammar)
    except OSError as exc:
        print(f"error: could not open grammar file: {exc}", file=sys.stderr)
        return 2
    except GrammarError as exc:
        print(f"error: invalid grammar specification: {exc}", file=sys.stderr)
        return 2

    if args.exprs:
        sources = [(expr, "<expr>") for expr in args.exprs]
    else:
        sources = ((line, "<stdin>") for line in read_lines(sys.stdin, args.prompt))

    failed = False
    for source, origin in sources:
        if not _process(source, origin, engine, args):
            failed = True
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
