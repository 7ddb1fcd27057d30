# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Normalized textual form of Candid type expressions.

The output is what the resolver hands downstream: single spaces, `name : type`
inside records and variants, `; ` between entries. It re-parses to an equal
tree, so formatting is idempotent.
"""

from __future__ import annotations

import re
from typing import Iterable

from .ast import (
	AliasRef,
	Arg,
	FuncType,
	OptType,
	PrimType,
	RecordType,
	ServiceType,
	TypeExpr,
	VariantType,
	VecType,
)

_IDENT = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_RESERVED_LABELS = frozenset({"service", "func", "opt", "vec", "record", "variant"})

_ESCAPES = {
	"\\": "\\\\",
	'"': '\\"',
	"\n": "\\n",
	"\r": "\\r",
	"\t": "\\t",
}


def format_type(expr: TypeExpr) -> str:
	if isinstance(expr, (PrimType, AliasRef)):
		return expr.name
	if isinstance(expr, OptType):
		return f"opt {format_type(expr.inner)}"
	if isinstance(expr, VecType):
		return f"vec {format_type(expr.elem)}"
	if isinstance(expr, RecordType):
		entries = []
		for f in expr.fields:
			if f.positional:
				entries.append(format_type(f.type_expr))
			else:
				entries.append(f"{format_label(f.label, f.quoted)} : {format_type(f.type_expr)}")
		return _braced("record", entries)
	if isinstance(expr, VariantType):
		entries = []
		for case in expr.cases:
			label = format_label(case.label, case.quoted)
			if case.type_expr is None:
				entries.append(label)
			else:
				entries.append(f"{label} : {format_type(case.type_expr)}")
		return _braced("variant", entries)
	if isinstance(expr, FuncType):
		return f"func {format_func_sig(expr)}"
	if isinstance(expr, ServiceType):
		entries = []
		for m in expr.methods:
			sig = format_func_sig(m.func) if isinstance(m.func, FuncType) else format_type(m.func)
			entries.append(f"{format_label(m.name, m.quoted)} : {sig}")
		return _braced("service", entries)
	raise TypeError(f"cannot format {type(expr).__name__}")


def format_func_sig(func: FuncType) -> str:
	"""`(A, B) -> (C) query` without the leading `func` keyword."""
	sig = f"{format_args(func.args)} -> {format_args(func.rets)}"
	if func.modes:
		sig += " " + " ".join(func.modes)
	return sig


def format_args(args: Iterable[Arg]) -> str:
	parts = []
	for arg in args:
		if arg.name is not None:
			parts.append(f"{arg.name} : {format_type(arg.type_expr)}")
		else:
			parts.append(format_type(arg.type_expr))
	return "(" + ", ".join(parts) + ")"


def format_label(label: str, quoted: bool = False) -> str:
	"""Labels that are not plain identifiers or numbers are written quoted."""
	if not quoted and (label.isdigit() or (_IDENT.match(label) and label not in _RESERVED_LABELS)):
		return label
	return quote_text(label)


def quote_text(value: str) -> str:
	"""Candid text literal for `value`, escaping quotes, backslashes and control characters."""
	out = []
	for ch in value:
		if ch in _ESCAPES:
			out.append(_ESCAPES[ch])
		elif ord(ch) < 0x20 or ord(ch) == 0x7F:
			out.append(f"\\u{{{ord(ch):x}}}")
		else:
			out.append(ch)
	return '"' + "".join(out) + '"'


def _braced(keyword: str, entries: list[str]) -> str:
	if not entries:
		return f"{keyword} {{}}"
	return f"{keyword} {{ {'; '.join(entries)} }}"


__all__ = ["format_args", "format_func_sig", "format_label", "format_type", "quote_text"]
