# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from candidargs.core.errors import EncodingPreconditionError, LiteralFormatError
from candidargs.form_model import CandidFormModel
from candidargs.json_validate import validate_json_args


def test_zero_args_gives_empty_string() -> None:
	assert CandidFormModel([]).build_json([]) == ""


def test_single_text() -> None:
	assert CandidFormModel(["text"]).build_json(["hello"]) == '"hello"'


def test_multiple_args_give_array() -> None:
	assert CandidFormModel(["text", "nat8"]).build_json(["ICP", 5]) == '["ICP",5]'


def test_record_from_map_of_strings() -> None:
	model = CandidFormModel(["record { start : nat64; length : nat64 }"])
	assert model.build_json([{"start": "1", "length": "2"}]) == '{"start":1,"length":2}'


def test_record_keeps_declared_order_and_accepts_lists() -> None:
	model = CandidFormModel(["record { start : nat64; length : nat64 }"])
	assert model.build_json([{"length": 2, "start": 1}]) == '{"start":1,"length":2}'
	assert model.build_json([["1", "2"]]) == '{"start":1,"length":2}'
	assert model.build_json(['{"start": "1", "length": "2"}']) == '{"start":1,"length":2}'


def test_big_nat_stays_a_string() -> None:
	out = CandidFormModel(["nat"]).build_json(["340282366920938463463374607431768211455"])
	assert out == '"340282366920938463463374607431768211455"'
	assert CandidFormModel(["nat"]).build_json(["42"]) == "42"
	assert CandidFormModel(["int"]).build_json(["-7"]) == "-7"


def test_scalars_are_converted() -> None:
	model = CandidFormModel(["bool", "float64", "principal", "opt nat16", "vec int8"])
	out = model.build_json(["True", "2.5", "aaaaa-aa", "null", "[1, -2]"])
	assert out == '[true,2.5,"aaaaa-aa",null,[1,-2]]'


def test_non_ascii_text_is_not_escaped() -> None:
	assert CandidFormModel(["text"]).build_json(["zażółć"]) == '"zażółć"'


def test_output_validates_against_the_same_types() -> None:
	types = ["record { start : nat64; length : nat64; note : opt text }", "vec text"]
	out = CandidFormModel(types).build_json([{"start": "1", "length": "2"}, '["a", "b"]'])
	assert validate_json_args(resolved_arg_types=types, json_text=out).ok


def test_input_count_mismatch() -> None:
	with pytest.raises(EncodingPreconditionError):
		CandidFormModel(["text", "nat8"]).build_json(["ICP"])


@pytest.mark.parametrize(
	"ty,raw",
	[
		("bool", "maybe"),
		("nat8", "eight"),
		("float32", "fast"),
		("vec nat8", "1"),
		("record { a : nat }", {}),
		("record { a : nat; b : nat }", [1]),
		("nat", "-3"),
	],
)
def test_conversion_failures(ty: str, raw: object) -> None:
	with pytest.raises(LiteralFormatError):
		CandidFormModel([ty]).build_json([raw])


def test_supported_by_form() -> None:
	assert CandidFormModel(["record { a : opt vec nat }", "text"]).is_supported_by_form
	assert not CandidFormModel(["variant { A; B }"]).is_supported_by_form
	assert not CandidFormModel(["opt record { cb : func () -> () }"]).is_supported_by_form
	assert not CandidFormModel(["vec service {}"]).is_supported_by_form


def test_fractional_number_for_integer_type_rejected() -> None:
	with pytest.raises(LiteralFormatError, match="expected an integer"):
		CandidFormModel(["nat8"]).build_json([1.7])
	with pytest.raises(LiteralFormatError):
		CandidFormModel(["nat"]).build_json([2.5])
	assert CandidFormModel(["int64"]).build_json([2.0]) == "2"
