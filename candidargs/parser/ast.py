# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Candid AST produced by the parser.

All nodes are frozen and use tuples, so a parsed tree can be shared between
callers and compared structurally (`parse_type_expr(a) == parse_type_expr(b)`).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Located:
	line: int
	column: int


class TypeExpr:
	"""Base class of every type expression node."""


@dataclass(frozen=True)
class PrimType(TypeExpr):
	name: str


@dataclass(frozen=True)
class AliasRef(TypeExpr):
	"""A reference to a `type NAME = ...` declaration; absent after resolution."""

	name: str


@dataclass(frozen=True)
class VecType(TypeExpr):
	elem: TypeExpr


@dataclass(frozen=True)
class OptType(TypeExpr):
	inner: TypeExpr


@dataclass(frozen=True)
class Field:
	"""
	One record entry.

	`positional` marks tuple-style entries (`record { nat; text }`) whose label
	is the implicit index. `quoted` keeps `"label" : T` spelled with quotes.
	"""

	label: str
	type_expr: TypeExpr
	quoted: bool = False
	positional: bool = False


@dataclass(frozen=True)
class RecordType(TypeExpr):
	fields: Tuple[Field, ...] = ()


@dataclass(frozen=True)
class VariantCase:
	label: str
	type_expr: Optional[TypeExpr] = None
	quoted: bool = False


@dataclass(frozen=True)
class VariantType(TypeExpr):
	cases: Tuple[VariantCase, ...] = ()


@dataclass(frozen=True)
class Arg:
	type_expr: TypeExpr
	name: Optional[str] = None


@dataclass(frozen=True)
class FuncType(TypeExpr):
	args: Tuple[Arg, ...] = ()
	rets: Tuple[Arg, ...] = ()
	modes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MethodDef:
	"""A service entry; `func` is a FuncType or an AliasRef to one."""

	name: str
	func: TypeExpr
	quoted: bool = False


@dataclass(frozen=True)
class ServiceType(TypeExpr):
	methods: Tuple[MethodDef, ...] = ()


@dataclass(frozen=True)
class TypeDef:
	name: str
	type_expr: TypeExpr
	loc: Optional[Located] = None


@dataclass(frozen=True)
class ImportDef:
	path: str
	loc: Optional[Located] = None


@dataclass(frozen=True)
class ServiceDef:
	"""
	The `service [NAME] : [(ARGS) ->] BODY;` actor declaration.

	`body` is a ServiceType or an AliasRef naming one.
	"""

	body: TypeExpr
	name: Optional[str] = None
	init_args: Tuple[Arg, ...] = ()
	loc: Optional[Located] = None


@dataclass(frozen=True)
class Program:
	type_defs: Tuple[TypeDef, ...] = ()
	imports: Tuple[ImportDef, ...] = ()
	service: Optional[ServiceDef] = None


__all__ = [
	"AliasRef",
	"Arg",
	"Field",
	"FuncType",
	"ImportDef",
	"Located",
	"MethodDef",
	"OptType",
	"PrimType",
	"Program",
	"RecordType",
	"ServiceDef",
	"ServiceType",
	"TypeDef",
	"TypeExpr",
	"VariantCase",
	"VariantType",
	"VecType",
]
