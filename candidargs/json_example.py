# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Placeholder JSON for a method's arguments, shown to users as a starting point.
Types are expected to be resolved already; leftover alias references get a
descriptive string placeholder.
"""

from __future__ import annotations

import json
from typing import Sequence, Union

from candidargs.core import prims
from candidargs.parser import format_type, parse_type_expr
from candidargs.parser.ast import (
	OptType,
	PrimType,
	RecordType,
	ServiceType,
	TypeExpr,
	VariantType,
	VecType,
)

EXAMPLE_TEXT = "example"
EXAMPLE_PRINCIPAL = "ryjl3-tyaaa-aaaaa-aaaba-cai"
EXAMPLE_BIG_NAT = "100000000000000000000"
EXAMPLE_BIG_INT = "-100000000000000000000"

INDENT = "  "


def build_json_example_for_args(arg_types: Sequence[Union[str, TypeExpr]]) -> str:
	if not arg_types:
		return ""
	types = [parse_type_expr(t) if isinstance(t, str) else t for t in arg_types]
	if len(types) == 1:
		return example_for_type(types[0])
	items = [example_for_type(t, 1) for t in types]
	return "[\n" + ",\n".join(INDENT + item for item in items) + "\n]"


def example_for_type(ty: Union[str, TypeExpr], level: int = 0) -> str:
	if isinstance(ty, str):
		ty = parse_type_expr(ty)
	if isinstance(ty, PrimType):
		return _example_for_prim(ty.name, ty)
	if isinstance(ty, OptType):
		return "null"
	if isinstance(ty, VecType):
		return f"[ {example_for_type(ty.elem, level)} ]"
	if isinstance(ty, RecordType):
		if not ty.fields:
			return "{ }"
		pad = INDENT * (level + 1)
		lines = [f"{pad}{json.dumps(f.label)}: {example_for_type(f.type_expr, level + 1)}" for f in ty.fields]
		return "{\n" + ",\n".join(lines) + "\n" + INDENT * level + "}"
	if isinstance(ty, VariantType):
		if not ty.cases:
			return "{ }"
		first = ty.cases[0]
		payload = "null" if first.type_expr is None else example_for_type(first.type_expr, level)
		return f"{{ {json.dumps(first.label)}: {payload} }}"
	if isinstance(ty, ServiceType):
		return json.dumps(EXAMPLE_PRINCIPAL)
	return json.dumps(f"<value for {format_type(ty)}>")


def _example_for_prim(name: str, ty: PrimType) -> str:
	if name == prims.TEXT:
		return json.dumps(EXAMPLE_TEXT)
	if name == prims.BOOL:
		return "true"
	if prims.is_float(name):
		return "3.14"
	if name == prims.PRINCIPAL:
		return json.dumps(EXAMPLE_PRINCIPAL)
	if name == prims.NAT:
		return json.dumps(EXAMPLE_BIG_NAT)
	if name == prims.INT:
		return json.dumps(EXAMPLE_BIG_INT)
	if prims.is_integer(name):
		return "0" if prims.is_unsigned(name) else "-1"
	if name in (prims.NULL, prims.RESERVED):
		return "null"
	if name == prims.BLOB:
		return "[ 0 ]"
	return json.dumps(f"<value for {format_type(ty)}>")


__all__ = ["build_json_example_for_args", "example_for_type"]
