import pytest
from lark import Token, Tree

from varlang.core.diagnostics import ILLEGAL_TERMINAL, SYNTAX_ERROR, UNHANDLED_RULE, UNSUPPORTED_CONSTRUCT
from varlang.parser.ast import Add, Const, Div, ErrorExpr, Mult, Sub, Variable
from varlang.parser.converter import (
	INT_MAX,
	INT_MIN,
	_RULE_DISPATCH,
	convert,
	convert_children,
	is_concrete_syntax_token,
	parse_int_literal,
)
from varlang.parser.parser import parse_tree
from varlang.parser.rules import RuleKind


def _convert_source(source: str):
	diagnostics = []
	tree = parse_tree(source, diagnostics)
	assert diagnostics == [], diagnostics
	return convert(tree.children[0], diagnostics), diagnostics


def _num(text: str) -> Tree:
	return Tree("numexp", [Token("NUMBER", text)])


def test_dispatch_covers_every_rule_kind() -> None:
	assert set(_RULE_DISPATCH) == set(RuleKind)


def test_binary_add() -> None:
	expr, diagnostics = _convert_source("3+4")
	assert expr == Add((Const(3), Const(4)))
	assert diagnostics == []


def test_same_operator_chain_is_flattened() -> None:
	expr, _ = _convert_source("1+2+3")
	assert expr == Add((Const(1), Const(2), Const(3)))
	assert len(expr.operands) == 3


def test_parentheses_contribute_no_node() -> None:
	expr, diagnostics = _convert_source("(1+2)*3")
	assert expr == Mult((Add((Const(1), Const(2))), Const(3)))
	assert diagnostics == []


def test_variable() -> None:
	expr, _ = _convert_source("x")
	assert expr == Variable("x")


@pytest.mark.parametrize(
	"source, expected",
	[
		("10 - 4 - 3", Sub((Const(10), Const(4), Const(3)))),
		("8 / 4 / 2", Div((Const(8), Const(4), Const(2)))),
		("2 * (x - 1)", Mult((Const(2), Sub((Variable("x"), Const(1)))))),
		("a * b + c / 2", Add((Mult((Variable("a"), Variable("b"))), Div((Variable("c"), Const(2)))))),
		("((5))", Const(5)),
		("(y)", Variable("y")),
	],
)
def test_nested_expressions(source, expected) -> None:
	expr, diagnostics = _convert_source(source)
	assert expr == expected
	assert diagnostics == []


def test_operand_order_is_preserved() -> None:
	expr, _ = _convert_source("c - b - a")
	assert [op.name for op in expr.operands] == ["c", "b", "a"]


def test_top_level_let_converts_to_nothing_with_diagnostic() -> None:
	expr, diagnostics = _convert_source("(let ((x 1)) x)")
	assert expr is None
	assert [d.code for d in diagnostics] == [UNSUPPORTED_CONSTRUCT]
	assert diagnostics[0].phase == "convert"


def test_let_operand_is_dropped_from_operand_list() -> None:
	expr, diagnostics = _convert_source("1 + (let ((x 1)) x) + 2")
	assert expr == Add((Const(1), Const(2)))
	assert [d.code for d in diagnostics] == [UNSUPPORTED_CONSTRUCT]


def test_stray_character_is_an_error_operand() -> None:
	diagnostics = []
	tree = parse_tree("3 + $", diagnostics)
	expr = convert(tree.children[0], diagnostics)
	assert expr == Add((Const(3), ErrorExpr()))
	assert expr.operands[1].text == "$"
	assert [d.code for d in diagnostics] == [SYNTAX_ERROR]


def test_out_of_range_literal_is_an_illegal_terminal() -> None:
	diagnostics = []
	tree = parse_tree("3 + 99999999999 + 4", diagnostics)
	expr = convert(tree.children[0], diagnostics)
	assert expr == Add((Const(3), ErrorExpr(), Const(4)))
	assert [d.code for d in diagnostics] == [ILLEGAL_TERMINAL]
	assert "99999999999" in diagnostics[0].message


def test_malformed_terminal_leaves_siblings_intact() -> None:
	tree = Tree(
		"addexp",
		[_num("1"), Token("PLUS", "+"), _num("x1"), Token("PLUS", "+"), _num("3")],
	)
	diagnostics = []
	expr = convert(tree, diagnostics)
	assert expr == Add((Const(1), ErrorExpr(), Const(3)))
	assert [d.code for d in diagnostics] == [ILLEGAL_TERMINAL]


def test_unknown_rule_is_reported_and_dropped() -> None:
	tree = Tree("multexp", [_num("2"), Token("STAR", "*"), Tree("modexp", [_num("7")]), Token("STAR", "*"), _num("5")])
	diagnostics = []
	expr = convert(tree, diagnostics)
	assert expr == Mult((Const(2), Const(5)))
	assert [d.code for d in diagnostics] == [UNHANDLED_RULE]
	assert "modexp" in diagnostics[0].message
	assert diagnostics[0].span.line is None


def test_program_rule_is_not_converted_directly() -> None:
	diagnostics = []
	assert convert(Tree("program", [Tree("exp", [_num("1")])]), diagnostics) is None
	assert [d.code for d in diagnostics] == [UNHANDLED_RULE]
	assert "program" in diagnostics[0].message


def test_non_tree_node_is_reported() -> None:
	diagnostics = []
	assert convert("1", diagnostics) is None
	assert [d.code for d in diagnostics] == [UNHANDLED_RULE]


def test_varexp_without_children_is_unhandled() -> None:
	diagnostics = []
	assert convert(Tree("varexp", []), diagnostics) is None
	assert [d.code for d in diagnostics] == [UNHANDLED_RULE]


def test_exp_with_nothing_left_is_absent() -> None:
	diagnostics = []
	assert convert(Tree("exp", [Token("LPAR", "("), Token("RPAR", ")")]), diagnostics) is None
	assert diagnostics == []


def test_empty_arithmetic_node_is_structurally_legal() -> None:
	assert convert(Tree("divexp", []), []) == Div(())
	assert convert(Tree("subexp", [_num("9")]), []) == Sub((Const(9),))


@pytest.mark.parametrize("glyph", ["(", ")", "+", "-", "*", "/"])
def test_concrete_syntax_tokens_convert_to_nothing(glyph: str) -> None:
	diagnostics = []
	assert is_concrete_syntax_token(glyph)
	assert convert(Token("ANY", glyph), diagnostics) is None
	assert diagnostics == []


def test_error_token_always_converts_to_error_expr() -> None:
	diagnostics = []
	# Even when its text would otherwise be punctuation or a literal.
	assert convert(Token("ERROR", "+"), diagnostics) == ErrorExpr()
	assert convert(Token("ERROR", "12"), diagnostics) == ErrorExpr()
	assert [d.code for d in diagnostics] == [SYNTAX_ERROR, SYNTAX_ERROR]


@pytest.mark.parametrize(
	"text, value",
	[("0", 0), ("42", 42), ("007", 7), ("-5", -5), ("+7", 7), (str(INT_MAX), INT_MAX), (str(INT_MIN), INT_MIN)],
)
def test_numeric_terminal_is_const(text: str, value: int) -> None:
	diagnostics = []
	assert convert(Token("NUMBER", text), diagnostics) == Const(value)
	assert diagnostics == []


@pytest.mark.parametrize("text", ["", " 1", "1_000", "1.5", "0x10", "--1", str(INT_MAX + 1), str(INT_MIN - 1)])
def test_parse_int_literal_rejects(text: str) -> None:
	assert parse_int_literal(text) is None


def test_convert_children_filters_absences_in_order() -> None:
	tree = Tree("addexp", [Token("LPAR", "("), _num("1"), Token("let", "let"), Tree("letexp", []), _num("2")])
	diagnostics = []
	assert convert_children(tree, diagnostics) == [Const(1), ErrorExpr(), Const(2)]
	assert [d.code for d in diagnostics] == [ILLEGAL_TERMINAL, UNSUPPORTED_CONSTRUCT]


def test_conversion_is_idempotent() -> None:
	tree = parse_tree("(a + 2 + $) * (b / 4) * 99999999999", [])
	first_diags, second_diags = [], []
	first = convert(tree.children[0], first_diags)
	second = convert(tree.children[0], second_diags)
	assert first == second
	assert [d.message for d in first_diags] == [d.message for d in second_diags]


def test_source_locations_are_recorded() -> None:
	expr, _ = _convert_source("1 + x")
	assert expr.operands[1].loc.line == 1
	assert expr.operands[1].loc.column == 5
	assert expr.operands[0].loc.column == 1
