# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from candidargs.core.errors import ParseError
from candidargs.parser import ast, format_type, normalize_type, parse_type_expr


def test_primitive_and_alias_reference() -> None:
	assert parse_type_expr("nat64") == ast.PrimType("nat64")
	assert parse_type_expr("NeuronId") == ast.AliasRef("NeuronId")


def test_nested_opt_record() -> None:
	expr = parse_type_expr("opt record { id : nat64 }")
	assert isinstance(expr, ast.OptType)
	assert isinstance(expr.inner, ast.RecordType)
	assert [f.label for f in expr.inner.fields] == ["id"]
	assert expr.inner.fields[0].type_expr == ast.PrimType("nat64")


def test_record_separator_inside_nested_record_does_not_split() -> None:
	expr = parse_type_expr("record { a : record { x : nat; y : text }; b : bool; }")
	assert isinstance(expr, ast.RecordType)
	assert [f.label for f in expr.fields] == ["a", "b"]
	inner = expr.fields[0].type_expr
	assert isinstance(inner, ast.RecordType)
	assert [f.label for f in inner.fields] == ["x", "y"]


def test_positional_record_fields_are_indexed() -> None:
	expr = parse_type_expr("record { nat; text }")
	assert [(f.label, f.positional) for f in expr.fields] == [("0", True), ("1", True)]
	assert format_type(expr) == "record { nat; text }"


def test_quoted_and_keyword_like_labels() -> None:
	expr = parse_type_expr('record { "first name" : text; type : nat }')
	assert [f.label for f in expr.fields] == ["first name", "type"]
	assert expr.fields[0].quoted
	assert format_type(expr) == 'record { "first name" : text; type : nat }'


def test_variant_with_bare_and_typed_cases() -> None:
	expr = parse_type_expr("variant { A; B: text }")
	assert isinstance(expr, ast.VariantType)
	assert [(c.label, c.type_expr) for c in expr.cases] == [("A", None), ("B", ast.PrimType("text"))]
	assert format_type(expr) == "variant { A; B : text }"


def test_func_reference_with_modes_and_named_args() -> None:
	expr = parse_type_expr("func (to : principal, nat) -> (bool) query")
	assert isinstance(expr, ast.FuncType)
	assert [a.name for a in expr.args] == ["to", None]
	assert expr.modes == ("query",)
	assert format_type(expr) == "func (to : principal, nat) -> (bool) query"


def test_comments_and_whitespace_are_normalized() -> None:
	text = """
	record {
		// the page start
		start : nat64;
		/* how many */ length:nat64;
	}
	"""
	assert normalize_type(text) == "record { start : nat64; length : nat64 }"


def test_format_is_idempotent() -> None:
	for text in (
		"vec opt record { a : nat8; b : variant { X; Y : vec text } }",
		"service { get : (nat) -> (opt text) query }",
		"record {}",
		'variant { "with space" : null }',
	):
		expr = parse_type_expr(text)
		assert parse_type_expr(format_type(expr)) == expr


@pytest.mark.parametrize(
	"text",
	[
		"record { a : nat",
		"record { a : nat } }",
		"vec (nat",
		'record { "unterminated : nat }',
	],
)
def test_unbalanced_input_raises_parse_error(text: str) -> None:
	with pytest.raises(ParseError):
		parse_type_expr(text)


def test_unknown_func_mode_rejected() -> None:
	with pytest.raises(ParseError, match="unknown function mode 'sometimes'"):
		parse_type_expr("func () -> () sometimes")


def test_duplicate_record_field_rejected() -> None:
	with pytest.raises(ParseError, match="duplicate record field 'a'"):
		parse_type_expr("record { a : nat; a : text }")


def test_parse_error_carries_span() -> None:
	with pytest.raises(ParseError) as excinfo:
		parse_type_expr("record { a : nat;\n b : }")
	assert excinfo.value.span.line == 2


def test_label_escapes_are_decoded() -> None:
	expr = parse_type_expr(r'record { "a\u{41}" : nat; "tab\there" : text; "\c3\a9t\u{e9}\"" : bool }')
	assert [f.label for f in expr.fields] == ["aA", "tab\there", 'été"']


def test_control_character_label_round_trips() -> None:
	expr = ast.RecordType((ast.Field("a\x01", ast.PrimType("nat"), quoted=True),))
	text = format_type(expr)
	assert text == r'record { "a\u{1}" : nat }'
	assert parse_type_expr(text) == expr


@pytest.mark.parametrize(
	"text",
	[
		r'record { "a\q" : nat }',
		r'record { "\ff" : nat }',
		r'record { "\u{110000}" : nat }',
		r'record { "\u{d800}" : nat }',
	],
)
def test_bad_label_escapes_raise_parse_error(text: str) -> None:
	with pytest.raises(ParseError):
		parse_type_expr(text)
