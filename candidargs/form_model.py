# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Form-to-JSON projection.

A form collects one loosely-typed input per method argument (strings typed by
a user, numbers, nested dicts/lists for records). `CandidFormModel` converts
them to the JSON shapes `json_validate` accepts, using the argument types to
decide how each input is read.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence, Union

from candidargs.core import prims
from candidargs.core.errors import EncodingPreconditionError, LiteralFormatError
from candidargs.parser import parse_type_expr
from candidargs.parser.ast import (
	FuncType,
	OptType,
	PrimType,
	RecordType,
	ServiceType,
	TypeExpr,
	VariantType,
	VecType,
)
from candidargs.values import (
	NULL,
	Bool,
	List as ListValue,
	Map,
	Null,
	Number,
	Text,
	Value,
	dumps,
	from_python,
	kind_of,
	loads,
)

logger = logging.getLogger(__name__)

_U64_MAX = 2**64 - 1
_I64_MIN = -(2**63)
_JSON_WORDS = ("null", "true", "false")


class CandidFormModel:
	"""Builds the JSON argument document for a method from form inputs."""

	def __init__(self, arg_types: Sequence[Union[str, TypeExpr]]) -> None:
		self.arg_types: List[TypeExpr] = [
			parse_type_expr(t) if isinstance(t, str) else t for t in arg_types
		]

	@property
	def is_supported_by_form(self) -> bool:
		"""False when any argument needs a variant, func or service value."""
		return not any(_has_unsupported(t) for t in self.arg_types)

	def build_json(self, inputs: Sequence[Any]) -> str:
		"""
		Zero arguments give `""`, one gives that argument's JSON and several
		give a JSON array.
		"""
		if not self.arg_types:
			return ""
		if len(inputs) != len(self.arg_types):
			raise EncodingPreconditionError(f"expected {len(self.arg_types)} inputs, got {len(inputs)}")
		converted = [
			_convert(ty, _pre_parse(raw), f"arg{idx}")
			for idx, (ty, raw) in enumerate(zip(self.arg_types, inputs))
		]
		if len(converted) == 1:
			return dumps(converted[0])
		return dumps(ListValue(tuple(converted)))


def _pre_parse(raw: Any) -> Value:
	"""Strings holding a JSON object, array or literal word are decoded first."""
	if isinstance(raw, str):
		s = raw.strip()
		if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")) or s in _JSON_WORDS:
			try:
				return loads(s)
			except ValueError:
				logger.debug("input %r looks like JSON but does not parse; kept as text", s)
	return from_python(raw)


def _convert(ty: TypeExpr, value: Value, where: str) -> Value:
	if isinstance(ty, PrimType):
		return _convert_prim(ty.name, value, where)
	if isinstance(ty, OptType):
		if isinstance(value, Null):
			return NULL
		return _convert(ty.inner, value, where)
	if isinstance(ty, VecType):
		if not isinstance(value, ListValue):
			raise LiteralFormatError(f"expected a list for {where}, got {kind_of(value)}", field=where)
		return ListValue(tuple(_convert(ty.elem, item, f"{where}[{idx}]") for idx, item in enumerate(value.items)))
	if isinstance(ty, RecordType):
		return _convert_record(ty, value, where)
	# variant, func, service and unresolved aliases pass through as given
	return value


def _convert_record(ty: RecordType, value: Value, where: str) -> Value:
	if not ty.fields:
		return Map()
	entries = []
	if isinstance(value, Map):
		for f in ty.fields:
			item = value.get(f.label)
			if item is None:
				if not isinstance(f.type_expr, OptType):
					raise LiteralFormatError(f"missing field {f.label}", field=f"{where}.{f.label}")
				item = NULL
			entries.append((f.label, _convert(f.type_expr, item, f"{where}.{f.label}")))
	elif isinstance(value, ListValue):
		if len(value) != len(ty.fields):
			raise LiteralFormatError(f"expected {len(ty.fields)} items for record, got {len(value)}", field=where)
		for f, item in zip(ty.fields, value.items):
			entries.append((f.label, _convert(f.type_expr, item, f"{where}.{f.label}")))
	else:
		raise LiteralFormatError(f"unsupported record input: {kind_of(value)}", field=where)
	return Map(tuple(entries))


def _convert_prim(name: str, value: Value, where: str) -> Value:
	if name in (prims.TEXT, prims.PRINCIPAL):
		return Text(_as_text(value))
	if name == prims.BOOL:
		return Bool(_as_bool(value, where))
	if prims.is_float(name):
		return Number(_as_float(value, where))
	if name in (prims.NAT, prims.INT):
		return _as_big_integer(value, name, where)
	if prims.is_integer(name):
		return Number(_as_int(value, where))
	return value


def _as_text(value: Value) -> str:
	if isinstance(value, Null):
		return ""
	if isinstance(value, Text):
		return value.value
	if isinstance(value, Bool):
		return "true" if value.value else "false"
	if isinstance(value, Number):
		return str(value.value)
	return dumps(value)


def _as_bool(value: Value, where: str) -> bool:
	if isinstance(value, Bool):
		return value.value
	if isinstance(value, Text) and value.value.strip().lower() in ("true", "false"):
		return value.value.strip().lower() == "true"
	raise LiteralFormatError(f"invalid bool: {_show(value)}", field=where)


def _as_float(value: Value, where: str) -> Union[int, float]:
	if isinstance(value, Number):
		return value.value
	if isinstance(value, Text):
		try:
			return float(value.value.strip())
		except ValueError:
			pass
	raise LiteralFormatError(f"invalid float: {_show(value)}", field=where)


def _as_int(value: Value, where: str) -> int:
	if isinstance(value, Number):
		if not value.is_integral:
			raise LiteralFormatError(f"expected an integer, got {value.value!r}", field=where)
		return int(value.value)
	if isinstance(value, Text):
		parsed = _parse_int(value.value)
		if parsed is not None:
			return parsed
	raise LiteralFormatError(f"invalid integer: {_show(value)}", field=where)


def _as_big_integer(value: Value, name: str, where: str) -> Value:
	"""Unbounded nat/int: a JSON number while it fits 64 bits, a digit string beyond."""
	number = _as_int(value, where)
	if name == prims.NAT and number < 0:
		raise LiteralFormatError(f"nat cannot be negative: {number}", field=where)
	if _I64_MIN <= number <= _U64_MAX:
		return Number(number)
	return Text(str(number))


def _parse_int(text: str) -> Optional[int]:
	s = text.strip()
	digits = s[1:] if s[:1] in ("+", "-") else s
	if not digits.isdigit() or not digits.isascii():
		return None
	return int(s)


def _show(value: Value) -> str:
	return value.value if isinstance(value, Text) else dumps(value)


def _has_unsupported(ty: TypeExpr) -> bool:
	if isinstance(ty, (VariantType, FuncType, ServiceType)):
		return True
	if isinstance(ty, (OptType, VecType)):
		return _has_unsupported(ty.inner if isinstance(ty, OptType) else ty.elem)
	if isinstance(ty, RecordType):
		return any(_has_unsupported(f.type_expr) for f in ty.fields)
	return False


__all__ = ["CandidFormModel"]
