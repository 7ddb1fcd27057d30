# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Candid textual literal encoding.

Two input styles are supported:

  - raw strings, one per record field or argument, as typed into a form
    (`build_record_literal`, `compose_candid_args`); scalar fields are
    formatted per type, composite fields are taken as already-formatted
    Candid text;
  - dynamic values (`values.Value` or plain Python/JSON data), encoded
    structurally against a resolved type (`encode_value`,
    `build_record_from_dynamic`, `encode_json_args`).

Numeric leaves always carry a type annotation (`10 : nat64`) because the
textual form is otherwise typed by the receiver as `int`/`float64`.
"""

from __future__ import annotations

import re
from typing import Any, List, Optional, Sequence, Union

from candidargs.core import prims
from candidargs.core.errors import EncodingPreconditionError, LiteralFormatError
from candidargs.parser import format_label, format_type, parse_type_expr, quote_text
from candidargs.parser.ast import (
	AliasRef,
	FuncType,
	OptType,
	PrimType,
	RecordType,
	ServiceType,
	TypeExpr,
	VariantType,
	VecType,
)
from candidargs.record_fields import RecordFieldSpec
from candidargs.values import (
	Bool,
	List as ListValue,
	Map,
	Null,
	Number,
	Text,
	Value,
	NULL,
	from_python,
	loads,
)

_INT_TEXT = re.compile(r"^[+-]?[0-9]+$")
_FLOAT_TEXT = re.compile(r"^[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?$")

TypeLike = Union[str, TypeExpr]


def compose_candid_args(raw_values: Sequence[str]) -> str:
	"""Join pre-formatted argument literals into a tuple; blanks are dropped."""
	cleaned = [s.strip() for s in raw_values if s.strip()]
	if not cleaned:
		return "()"
	return f"({', '.join(cleaned)})"


def build_record_literal(*, fields: Sequence[RecordFieldSpec], raw_values: Sequence[str]) -> str:
	"""`record { name = <literal> : <type>; ... }` from one raw string per field."""
	if len(fields) != len(raw_values):
		raise EncodingPreconditionError(
			f"record has {len(fields)} field(s) but {len(raw_values)} value(s) were supplied"
		)
	entries = []
	for spec, raw in zip(fields, raw_values):
		expr = _as_expr(spec.ic_type)
		literal = format_raw_literal(expr, raw, field=spec.name)
		entries.append(f"{format_label(spec.name)} = {literal} : {format_type(expr)}")
	if not entries:
		return "record {}"
	return f"record {{ {'; '.join(entries)} }}"


def compose_single_record_arg(*, fields: Sequence[RecordFieldSpec], raw_values: Sequence[str]) -> str:
	"""Argument tuple for a method whose only parameter is a record."""
	return f"({build_record_literal(fields=fields, raw_values=raw_values)})"


def build_record_from_dynamic(*, fields: Sequence[RecordFieldSpec], value: Any) -> str:
	"""
	Record literal from a positional list or a map.

	Maps may be keyed by field name or by the field's stringified index. Missing
	map entries become blank raw values (`null` for optional fields).
	"""
	dyn = from_python(value)
	if isinstance(dyn, ListValue):
		if len(dyn) != len(fields):
			raise EncodingPreconditionError(
				f"record has {len(fields)} field(s) but the list has {len(dyn)} item(s)"
			)
		items: List[Value] = list(dyn.items)
	elif isinstance(dyn, Map):
		items = []
		for idx, spec in enumerate(fields):
			item = dyn.get(spec.name)
			if item is None:
				item = dyn.get(str(idx))
			items.append(Null() if item is None else item)
	else:
		raise EncodingPreconditionError(f"record value must be a list or a map, got {type(value).__name__}")
	raw_values = [_dynamic_to_raw(spec, item) for spec, item in zip(fields, items)]
	return build_record_literal(fields=fields, raw_values=raw_values)


def format_raw_literal(type_like: TypeLike, raw: str, *, field: Optional[str] = None) -> str:
	"""
	Format one raw form string as a Candid value of `type_like` (no annotation).

	Scalars are checked and formatted; `opt T` maps blank/`null` to `null`;
	other composite types expect pre-formatted Candid text.
	"""
	expr = _as_expr(type_like)
	text = raw.strip()
	if isinstance(expr, OptType):
		if not text or text == "null":
			return "null"
		return f"opt {format_raw_literal(expr.inner, raw, field=field)}"
	if isinstance(expr, PrimType):
		return _format_raw_prim(expr.name, raw, field)
	if not text:
		raise LiteralFormatError(f"missing value for {format_type(expr)}", field=field)
	return text


def _format_raw_prim(name: str, raw: str, field: Optional[str]) -> str:
	text = raw.strip()
	if name == prims.TEXT:
		return quote_text(raw)
	if prims.is_integer(name):
		_check_int_text(name, text, field)
		return text.lstrip("+")
	if prims.is_float(name):
		if not _FLOAT_TEXT.match(text):
			raise LiteralFormatError(f"expected {name}, got {raw!r}", field=field)
		return text
	if name == prims.BOOL:
		lowered = text.lower()
		if lowered not in ("true", "false"):
			raise LiteralFormatError(f"expected true or false, got {raw!r}", field=field)
		return lowered
	if name == prims.PRINCIPAL:
		if not text:
			raise LiteralFormatError("missing principal", field=field)
		if text.startswith("principal "):
			return text
		return f"principal {quote_text(text)}"
	if name in (prims.NULL, prims.RESERVED):
		return "null"
	if name == prims.BLOB:
		if text.startswith("blob ") or text.startswith("vec "):
			return text
		return f"blob {quote_text(raw)}"
	raise LiteralFormatError(f"no value can be written for {name}", field=field)


def _check_int_text(name: str, text: str, field: Optional[str]) -> None:
	if not _INT_TEXT.match(text):
		raise LiteralFormatError(f"expected {name}, got {text!r}", field=field)
	number = int(text)
	if prims.is_unsigned(name) and number < 0:
		raise LiteralFormatError(f"{name} cannot be negative", field=field)
	bounds = prims.integer_range(name)
	if bounds is not None and not bounds[0] <= number <= bounds[1]:
		raise LiteralFormatError(f"{number} is out of range for {name}", field=field)


def _dynamic_to_raw(spec: RecordFieldSpec, item: Value) -> str:
	if isinstance(item, Null):
		return ""
	if isinstance(item, Text):
		return item.value
	if isinstance(item, Bool):
		return "true" if item.value else "false"
	if isinstance(item, Number):
		if item.is_integral:
			return str(int(item.value))
		return repr(float(item.value))
	expr = _as_expr(spec.ic_type)
	while isinstance(expr, OptType):
		expr = expr.inner
	return _encode(expr, item, spec.name, annotated=False)


def encode_value(type_like: TypeLike, value: Any) -> str:
	"""Encode a dynamic value as an annotated Candid value of a resolved type."""
	return _encode(_as_expr(type_like), from_python(value), "(root)", annotated=True)


def encode_args(types: Sequence[TypeLike], values: Sequence[Any]) -> str:
	"""Argument tuple literal for one dynamic value per resolved type."""
	if len(types) != len(values):
		raise EncodingPreconditionError(f"expected {len(types)} argument(s), got {len(values)}")
	parts = [
		_encode(_as_expr(t), from_python(v), f"[{idx}]", annotated=True)
		for idx, (t, v) in enumerate(zip(types, values))
	]
	return compose_candid_args(parts)


def encode_json_args(resolved_types: Sequence[TypeLike], json_text: str) -> str:
	"""
	Encode JSON input (same shape rules as `validate_json_args`) as an argument tuple.

	Callers are expected to validate first; malformed input raises
	LiteralFormatError naming the offending path.
	"""
	if not resolved_types:
		return "()"
	text = json_text.strip()
	try:
		root = loads(text) if text else NULL
	except ValueError as exc:
		raise LiteralFormatError(f"invalid JSON: {exc}") from exc
	if len(resolved_types) == 1:
		return compose_candid_args([_encode(_as_expr(resolved_types[0]), root, "(root)", annotated=True)])
	if not isinstance(root, ListValue):
		raise LiteralFormatError(f"expected JSON array with {len(resolved_types)} items")
	items = list(root.items)
	while len(items) < len(resolved_types) and isinstance(_as_expr(resolved_types[len(items)]), OptType):
		items.append(NULL)
	return encode_args(resolved_types, items)


def _encode(expr: TypeExpr, value: Value, path: str, *, annotated: bool) -> str:
	if isinstance(expr, PrimType):
		return _encode_prim(expr.name, value, path, annotated)
	if isinstance(expr, OptType):
		if isinstance(value, Null):
			return "null"
		return f"opt {_encode(expr.inner, value, path, annotated=False)}"
	if isinstance(expr, VecType):
		if not isinstance(value, ListValue):
			raise LiteralFormatError("expected array", field=path)
		elems = [_encode(expr.elem, v, f"{path}[{i}]", annotated=True) for i, v in enumerate(value.items)]
		return _braced("vec", elems)
	if isinstance(expr, RecordType):
		return _encode_record(expr, value, path)
	if isinstance(expr, VariantType):
		return _encode_variant(expr, value, path)
	if isinstance(expr, ServiceType):
		if not isinstance(value, Text):
			raise LiteralFormatError("expected service principal text", field=path)
		return f"service {quote_text(value.value)}"
	if isinstance(expr, FuncType):
		raise LiteralFormatError("func references cannot be encoded from dynamic values", field=path)
	if isinstance(expr, AliasRef):
		raise LiteralFormatError(f"type alias '{expr.name}' is not resolved", field=path)
	raise TypeError(f"unexpected type node {type(expr).__name__}")


def _encode_prim(name: str, value: Value, path: str, annotated: bool) -> str:
	if name == prims.TEXT:
		if not isinstance(value, Text):
			raise LiteralFormatError("expected string", field=path)
		return quote_text(value.value)
	if name == prims.BOOL:
		if isinstance(value, Bool):
			return "true" if value.value else "false"
		if isinstance(value, Text) and value.value.strip().lower() in ("true", "false"):
			return value.value.strip().lower()
		raise LiteralFormatError("expected boolean", field=path)
	if prims.is_integer(name) or prims.is_float(name):
		if isinstance(value, Number):
			literal = _number_text(value, path) if prims.is_integer(name) else repr(float(value.value))
		elif isinstance(value, Text):
			literal = value.value.strip()
		else:
			raise LiteralFormatError(f"expected {name}", field=path)
		if prims.is_integer(name):
			_check_int_text(name, literal, path)
			literal = literal.lstrip("+")
		elif not _FLOAT_TEXT.match(literal):
			raise LiteralFormatError(f"expected {name}", field=path)
		return _annotate(literal, name, annotated)
	if name == prims.PRINCIPAL:
		if not isinstance(value, Text):
			raise LiteralFormatError("expected principal text", field=path)
		return f"principal {quote_text(value.value.strip())}"
	if name in (prims.NULL, prims.RESERVED):
		if name == prims.NULL and not isinstance(value, Null):
			raise LiteralFormatError("expected null", field=path)
		return "null"
	if name == prims.BLOB:
		if isinstance(value, Text):
			return f"blob {quote_text(value.value)}"
		if isinstance(value, ListValue):
			data = []
			for i, b in enumerate(value.items):
				if not (isinstance(b, Number) and b.is_integral and 0 <= int(b.value) <= 255):
					raise LiteralFormatError("expected byte (0..255)", field=f"{path}[{i}]")
				data.append(f"\\{int(b.value):02x}")
			return f'blob "{"".join(data)}"'
		raise LiteralFormatError("expected string or byte array", field=path)
	raise LiteralFormatError(f"no value can be written for {name}", field=path)


def _encode_record(expr: RecordType, value: Value, path: str) -> str:
	if isinstance(value, ListValue):
		items: List[Optional[Value]] = list(value.items)
		if len(items) > len(expr.fields):
			raise LiteralFormatError(f"expected at most {len(expr.fields)} items", field=path)
		items += [None] * (len(expr.fields) - len(items))
	elif isinstance(value, Map):
		items = [value.get(f.label) for f in expr.fields]
	else:
		raise LiteralFormatError("expected object or array", field=path)
	entries = []
	for f, item in zip(expr.fields, items):
		sub = f"{path}.{f.label}"
		if item is None:
			if not _accepts_null(f.type_expr):
				raise LiteralFormatError("missing field", field=sub)
			item = NULL
		entries.append(f"{format_label(f.label, f.quoted)} = {_encode(f.type_expr, item, sub, annotated=True)}")
	return _braced("record", entries)


def _accepts_null(expr: TypeExpr) -> bool:
	if isinstance(expr, OptType):
		return True
	return isinstance(expr, PrimType) and expr.name in (prims.NULL, prims.RESERVED)


def _encode_variant(expr: VariantType, value: Value, path: str) -> str:
	if isinstance(value, Text):
		value = Map(((value.value, Null()),))
	if not isinstance(value, Map) or len(value) != 1:
		raise LiteralFormatError("expected object with exactly one case", field=path)
	label, payload = value.entries[0]
	case = next((c for c in expr.cases if c.label == label), None)
	if case is None:
		raise LiteralFormatError(f"unknown variant case '{label}'", field=path)
	name = format_label(case.label, case.quoted)
	if case.type_expr is None:
		return f"variant {{ {name} }}"
	inner = _encode(case.type_expr, payload, f"{path}.{label}", annotated=True)
	return f"variant {{ {name} = {inner} }}"


def _number_text(value: Number, field: Optional[str]) -> str:
	if not value.is_integral:
		raise LiteralFormatError(f"expected an integer, got {value.value!r}", field=field)
	return str(int(value.value))


def _annotate(literal: str, type_name: str, annotated: bool) -> str:
	if annotated:
		return f"{literal} : {type_name}"
	return f"({literal} : {type_name})"


def _braced(keyword: str, entries: List[str]) -> str:
	if not entries:
		return f"{keyword} {{}}"
	return f"{keyword} {{ {'; '.join(entries)} }}"


def _as_expr(type_like: TypeLike) -> TypeExpr:
	if isinstance(type_like, TypeExpr):
		return type_like
	return parse_type_expr(type_like)


__all__ = [
	"build_record_from_dynamic",
	"build_record_literal",
	"compose_candid_args",
	"compose_single_record_arg",
	"encode_args",
	"encode_json_args",
	"encode_value",
	"format_raw_literal",
]
