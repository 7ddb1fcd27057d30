# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Candid type alias resolver.

A resolver is built once per IDL source. It keeps two read-only tables:

  - aliases: `type NAME = EXPR;` declarations, as declared
  - methods: the service's method signatures, as declared

`resolve_arg_types(method)` expands every alias reference in the method's
parameter types, including references nested in record fields, variant
cases, `vec`/`opt` wrappers and func/service references, and returns the
normalized text of each expanded type.

Expansion is bounded: an alias that reappears inside its own expansion raises
RecursionLimitError immediately (cycle), and so does a chain of nested alias
expansions longer than `ResolverOptions.max_depth`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

from candidargs.core.errors import (
	CandidError,
	RecursionLimitError,
	UnknownMethodError,
	UnresolvedAliasError,
)
from candidargs.parser import format_type, parse_program, parse_type_expr
from candidargs.parser.ast import (
	AliasRef,
	Arg,
	Field,
	FuncType,
	MethodDef,
	OptType,
	PrimType,
	Program,
	RecordType,
	ServiceType,
	TypeExpr,
	VariantCase,
	VariantType,
	VecType,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 32


@dataclass(frozen=True)
class ResolverOptions:
	"""Knobs for alias expansion."""

	max_depth: int = DEFAULT_MAX_DEPTH

	def __post_init__(self) -> None:
		if self.max_depth < 1:
			raise ValueError(f"max_depth must be >= 1, got {self.max_depth}")


@dataclass(frozen=True)
class MethodSignature:
	"""A service method as declared (aliases not yet expanded)."""

	name: str
	args: Tuple[TypeExpr, ...]
	rets: Tuple[TypeExpr, ...]
	arg_names: Tuple[Optional[str], ...]
	modes: Tuple[str, ...]

	@property
	def mode(self) -> str:
		"""`query`, `composite_query`, `oneway` or `update`."""
		return self.modes[0] if self.modes else "update"

	@property
	def is_query(self) -> bool:
		return self.mode in ("query", "composite_query")


@dataclass(frozen=True)
class _Site:
	method: Optional[str] = None
	param: Optional[int] = None


class CandidTypeResolver:
	"""Expands type aliases declared in one Candid source."""

	def __init__(
		self,
		candid_source: str,
		*,
		options: Optional[ResolverOptions] = None,
		file: Optional[str] = None,
	) -> None:
		self.options = options or ResolverOptions()
		self._program: Program = parse_program(candid_source, file=file)
		self._aliases: Mapping[str, TypeExpr] = MappingProxyType(
			{td.name: td.type_expr for td in self._program.type_defs}
		)
		self._methods: Mapping[str, MethodSignature] = MappingProxyType(self._collect_methods())
		if self._program.imports:
			logger.info(
				"ignoring %d import(s): %s",
				len(self._program.imports),
				", ".join(imp.path for imp in self._program.imports),
			)
		logger.debug("parsed %d alias(es) and %d method(s)", len(self._aliases), len(self._methods))

	@property
	def aliases(self) -> Mapping[str, TypeExpr]:
		return self._aliases

	@property
	def program(self) -> Program:
		return self._program

	def method_names(self) -> List[str]:
		return list(self._methods)

	def method(self, name: str) -> MethodSignature:
		try:
			return self._methods[name]
		except KeyError:
			raise UnknownMethodError(name, list(self._methods)) from None

	def resolve_arg_types(self, method_name: str) -> List[str]:
		"""Fully expanded parameter types of `method_name`, as normalized text."""
		sig = self.method(method_name)
		out = [
			format_type(self._expand(arg, _Site(method_name, idx), 0, ()))
			for idx, arg in enumerate(sig.args)
		]
		logger.debug("resolved %s args: %s", method_name, out)
		return out

	def resolve_return_types(self, method_name: str) -> List[str]:
		sig = self.method(method_name)
		return [format_type(self._expand(ret, _Site(method_name), 0, ())) for ret in sig.rets]

	def resolve_type(self, type_text: str) -> str:
		"""Expand every alias in a free-standing type expression."""
		return format_type(self.resolve_type_expr(parse_type_expr(type_text)))

	def resolve_type_expr(self, expr: TypeExpr) -> TypeExpr:
		return self._expand(expr, _Site(), 0, ())

	def _collect_methods(self) -> dict[str, MethodSignature]:
		service = self._program.service
		if service is None:
			return {}
		body = service.body
		if isinstance(body, AliasRef):
			body = self._expand_alias_to(body, ServiceType, "service", _Site())
		methods: dict[str, MethodSignature] = {}
		for method_def in body.methods:
			methods[method_def.name] = self._signature_of(method_def)
		return methods

	def _signature_of(self, method_def: MethodDef) -> MethodSignature:
		func = method_def.func
		if isinstance(func, AliasRef):
			func = self._expand_alias_to(func, FuncType, "func", _Site(method_def.name))
		return MethodSignature(
			name=method_def.name,
			args=tuple(a.type_expr for a in func.args),
			rets=tuple(r.type_expr for r in func.rets),
			arg_names=tuple(a.name for a in func.args),
			modes=func.modes,
		)

	def _expand_alias_to(self, ref: AliasRef, kind: type, what: str, site: _Site):
		"""Follow alias-to-alias links until a node of `kind` is reached (no deep expansion)."""
		chain: List[str] = []
		node: TypeExpr = ref
		while isinstance(node, AliasRef):
			if node.name in chain:
				raise RecursionLimitError(
					chain + [node.name],
					limit=self.options.max_depth,
					cyclic=True,
					method=site.method,
				)
			chain.append(node.name)
			target = self._aliases.get(node.name)
			if target is None:
				raise UnresolvedAliasError(node.name, method=site.method, param=site.param)
			node = target
		if not isinstance(node, kind):
			raise CandidError(f"alias '{ref.name}' does not name a {what} type")
		return node

	def _expand(self, expr: TypeExpr, site: _Site, depth: int, stack: Tuple[str, ...]) -> TypeExpr:
		if isinstance(expr, PrimType):
			return expr
		if isinstance(expr, AliasRef):
			return self._expand_ref(expr, site, depth, stack)
		if isinstance(expr, OptType):
			return OptType(self._expand(expr.inner, site, depth, stack))
		if isinstance(expr, VecType):
			return VecType(self._expand(expr.elem, site, depth, stack))
		if isinstance(expr, RecordType):
			return RecordType(
				tuple(
					Field(
						label=f.label,
						type_expr=self._expand(f.type_expr, site, depth, stack),
						quoted=f.quoted,
						positional=f.positional,
					)
					for f in expr.fields
				)
			)
		if isinstance(expr, VariantType):
			return VariantType(
				tuple(
					VariantCase(
						label=c.label,
						type_expr=None if c.type_expr is None else self._expand(c.type_expr, site, depth, stack),
						quoted=c.quoted,
					)
					for c in expr.cases
				)
			)
		if isinstance(expr, FuncType):
			return FuncType(
				args=tuple(Arg(self._expand(a.type_expr, site, depth, stack), a.name) for a in expr.args),
				rets=tuple(Arg(self._expand(r.type_expr, site, depth, stack), r.name) for r in expr.rets),
				modes=expr.modes,
			)
		if isinstance(expr, ServiceType):
			return ServiceType(
				tuple(
					MethodDef(m.name, self._expand(m.func, site, depth, stack), m.quoted)
					for m in expr.methods
				)
			)
		raise TypeError(f"unexpected type node {type(expr).__name__}")

	def _expand_ref(self, ref: AliasRef, site: _Site, depth: int, stack: Tuple[str, ...]) -> TypeExpr:
		chain = stack + (ref.name,)
		if ref.name in stack:
			raise RecursionLimitError(
				chain, limit=self.options.max_depth, cyclic=True, method=site.method, param=site.param
			)
		if depth >= self.options.max_depth:
			raise RecursionLimitError(
				chain, limit=self.options.max_depth, cyclic=False, method=site.method, param=site.param
			)
		definition = self._aliases.get(ref.name)
		if definition is None:
			raise UnresolvedAliasError(ref.name, method=site.method, param=site.param)
		return self._expand(definition, site, depth + 1, chain)


def resolve_method_args(candid_source: str, method_name: str, *, options: Optional[ResolverOptions] = None) -> List[str]:
	"""One-shot helper: build a resolver and resolve `method_name`'s parameters."""
	return CandidTypeResolver(candid_source, options=options).resolve_arg_types(method_name)


__all__ = [
	"CandidTypeResolver",
	"DEFAULT_MAX_DEPTH",
	"MethodSignature",
	"ResolverOptions",
	"resolve_method_args",
]
