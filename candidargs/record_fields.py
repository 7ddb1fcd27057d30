# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Record field extraction.

`parse_record_type` flattens a `record { ... }` expression into ordered
`RecordFieldSpec`s. Splitting is done by the shared grammar, so a `;` or `:`
inside a nested record never splits the outer one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from candidargs.core.errors import ParseError
from candidargs.parser import format_label, format_type, parse_type_expr
from candidargs.parser.ast import RecordType, TypeExpr, VariantType


@dataclass(frozen=True)
class RecordFieldSpec:
	"""A record field with its type in normalized text form."""

	name: str
	ic_type: str


def parse_record_type(type_text: Union[str, TypeExpr]) -> List[RecordFieldSpec]:
	"""
	Return the fields of a record type in declaration order.

	Accepts `record { a : T; ... }`, a bare `{ a : T; ... }` body, or an already
	parsed RecordType. Positional fields are named by their index.
	"""
	record = _as_record(type_text)
	return [RecordFieldSpec(name=f.label, ic_type=format_type(f.type_expr)) for f in record.fields]


def render_record_type(fields: Sequence[RecordFieldSpec]) -> str:
	"""Re-serialize field specs as a normalized `record { ... }` expression."""
	entries = [f"{format_label(f.name)} : {f.ic_type.strip()}" for f in fields]
	if not entries:
		return "record {}"
	return f"record {{ {'; '.join(entries)} }}"


def parse_variant_cases(type_text: Union[str, TypeExpr]) -> List[Tuple[str, Optional[str]]]:
	"""Return `(case, payload type or None)` pairs of a variant type."""
	expr = parse_type_expr(type_text) if isinstance(type_text, str) else type_text
	if not isinstance(expr, VariantType):
		raise ParseError("expected a variant type", text=_text_of(type_text))
	return [
		(case.label, None if case.type_expr is None else format_type(case.type_expr))
		for case in expr.cases
	]


def _as_record(type_text: Union[str, TypeExpr]) -> RecordType:
	if isinstance(type_text, RecordType):
		return type_text
	if isinstance(type_text, str):
		text = type_text.strip()
		if text.startswith("{"):
			text = "record " + text
		expr = parse_type_expr(text)
		if isinstance(expr, RecordType):
			return expr
	raise ParseError("expected a record type", text=_text_of(type_text))


def _text_of(type_text: Union[str, TypeExpr]) -> str:
	if isinstance(type_text, str):
		return type_text
	return format_type(type_text)


__all__ = ["RecordFieldSpec", "parse_record_type", "parse_variant_cases", "render_record_type"]
