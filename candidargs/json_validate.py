# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Validation of JSON call arguments against resolved Candid types.

The validator never raises for bad input: every problem is collected with the
path of the offending value (`(root)`, `(root)[1]`, `(root).owner.subaccount`)
so a form can show them all at once.

JSON shape rules:
  - opt T      null or absent, otherwise T
  - vec T      array of T (blob: array of bytes or a string)
  - record     object by field name, or array by declared order
  - variant    object with exactly one declared case; payload-less cases
               take null (or the case name as a bare string)
  - nat/int    JSON integer or decimal-digit string (sized types range-checked)
  - float      number or numeric string
  - text, bool, principal, null: direct match
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

from candidargs.core import prims
from candidargs.parser import parse_type_expr
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
from candidargs.values import (
	NULL,
	Bool,
	List as ListValue,
	Map,
	Null,
	Number,
	Text,
	Value,
	kind_of,
	loads,
)

logger = logging.getLogger(__name__)

INT_TEXT_PATTERN = re.compile(r"^[+-]?[0-9]+$")
FLOAT_TEXT_PATTERN = re.compile(r"^[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?$")
PRINCIPAL_PATTERN = re.compile(r"^[a-z2-7]{1,5}(-[a-z2-7]{1,5})*$")


@dataclass(frozen=True)
class ValidationIssue:
	"""A single problem; `path` is None for document-level problems."""

	message: str
	path: Optional[str] = None

	def __str__(self) -> str:
		if self.path is None:
			return self.message
		return f"{self.path}: {self.message}"


@dataclass
class ValidationResult:
	issues: List[ValidationIssue] = field(default_factory=list)

	@property
	def errors(self) -> List[str]:
		return [str(issue) for issue in self.issues]

	@property
	def ok(self) -> bool:
		return not self.issues


class ValidationState:
	"""Path tracking and error collection during one validation run."""

	def __init__(self) -> None:
		self.issues: List[ValidationIssue] = []
		self.path: List[str] = []

	def push_path(self, segment: str) -> None:
		self.path.append(segment)

	def pop_path(self) -> None:
		self.path.pop()

	def current_path(self) -> str:
		return "(root)" + "".join(self.path)

	def add_error(self, message: str) -> None:
		self.issues.append(ValidationIssue(message=message, path=self.current_path()))


def validate_json_args(*, resolved_arg_types: Sequence[Union[str, TypeExpr]], json_text: str) -> ValidationResult:
	"""
	Validate `json_text` against a method's resolved argument types.

	One type: the JSON root is the argument. Several: the root is an array with
	one element per type; trailing optional arguments may be left out.
	"""
	if not resolved_arg_types:
		return ValidationResult()
	types = [parse_type_expr(t) if isinstance(t, str) else t for t in resolved_arg_types]
	text = json_text.strip()
	try:
		root = loads(text) if text else NULL
	except ValueError as exc:
		return ValidationResult([ValidationIssue(message=f"Invalid JSON: {exc}")])

	state = ValidationState()
	if len(types) == 1:
		validate_value(state, root, types[0])
	elif not isinstance(root, ListValue) or not _arity_ok(len(root), types):
		state.add_error(f"expected JSON array with {len(types)} items")
	else:
		for idx, ty in enumerate(types):
			state.push_path(f"[{idx}]")
			validate_value(state, root.items[idx] if idx < len(root) else NULL, ty)
			state.pop_path()
	result = ValidationResult(state.issues)
	logger.debug("validated %d arg(s): %d issue(s)", len(types), len(result.issues))
	return result


def validate_value(state: ValidationState, value: Value, ty: TypeExpr) -> None:
	"""Validate one value, appending any problems to `state`."""
	if isinstance(ty, PrimType):
		_validate_prim(state, value, ty.name)
	elif isinstance(ty, OptType):
		if not isinstance(value, Null):
			validate_value(state, value, ty.inner)
	elif isinstance(ty, VecType):
		if not isinstance(value, ListValue):
			state.add_error(f"expected array, got {kind_of(value)}")
			return
		for idx, item in enumerate(value.items):
			state.push_path(f"[{idx}]")
			validate_value(state, item, ty.elem)
			state.pop_path()
	elif isinstance(ty, RecordType):
		_validate_record(state, value, ty)
	elif isinstance(ty, VariantType):
		_validate_variant(state, value, ty)
	elif isinstance(ty, ServiceType):
		_validate_principal(state, value, "expected service principal text")
	elif isinstance(ty, FuncType):
		state.add_error("func references cannot be passed as JSON")
	elif isinstance(ty, AliasRef):
		state.add_error(f"cannot validate against unresolved type alias '{ty.name}'")
	else:
		raise TypeError(f"unexpected type node {type(ty).__name__}")


def _validate_prim(state: ValidationState, value: Value, name: str) -> None:
	if prims.is_integer(name):
		_validate_integer(state, value, name)
	elif prims.is_float(name):
		if isinstance(value, Number):
			return
		if isinstance(value, Text) and FLOAT_TEXT_PATTERN.match(value.value.strip()):
			return
		state.add_error(f"expected number, got {kind_of(value)}")
	elif name == prims.TEXT:
		if not isinstance(value, Text):
			state.add_error(f"expected string, got {kind_of(value)}")
	elif name == prims.BOOL:
		if not isinstance(value, Bool):
			state.add_error(f"expected boolean, got {kind_of(value)}")
	elif name == prims.PRINCIPAL:
		_validate_principal(state, value, "expected principal text")
	elif name == prims.NULL:
		if not isinstance(value, Null):
			state.add_error(f"expected null, got {kind_of(value)}")
	elif name == prims.BLOB:
		_validate_blob(state, value)
	elif name == prims.EMPTY:
		state.add_error("type empty has no values")
	# reserved accepts anything


def _validate_integer(state: ValidationState, value: Value, name: str) -> None:
	if isinstance(value, Number):
		if not value.is_integral:
			state.add_error(f"expected integer, got {value.value!r}")
			return
		number = int(value.value)
	elif isinstance(value, Text) and INT_TEXT_PATTERN.match(value.value.strip()):
		number = int(value.value.strip())
	else:
		state.add_error(f"expected number or numeric string, got {kind_of(value)}")
		return
	if prims.is_unsigned(name) and number < 0:
		state.add_error(f"{name} cannot be negative")
		return
	bounds = prims.integer_range(name)
	if bounds is not None and not bounds[0] <= number <= bounds[1]:
		state.add_error(f"{number} is out of range for {name} ({bounds[0]}..{bounds[1]})")


def _validate_principal(state: ValidationState, value: Value, message: str) -> None:
	if not isinstance(value, Text):
		state.add_error(f"{message}, got {kind_of(value)}")
	elif not PRINCIPAL_PATTERN.match(value.value.strip()):
		state.add_error(f"malformed principal {value.value!r}")


def _validate_blob(state: ValidationState, value: Value) -> None:
	if isinstance(value, Text):
		return
	if not isinstance(value, ListValue):
		state.add_error(f"expected byte array or string, got {kind_of(value)}")
		return
	for idx, item in enumerate(value.items):
		state.push_path(f"[{idx}]")
		_validate_integer(state, item, "nat8")
		state.pop_path()


def _validate_record(state: ValidationState, value: Value, ty: RecordType) -> None:
	if isinstance(value, Map):
		known = {f.label for f in ty.fields}
		for f in ty.fields:
			item = value.get(f.label)
			if item is None:
				if not _accepts_null(f.type_expr):
					state.add_error(f"missing field {f.label}")
				continue
			state.push_path(f".{f.label}")
			validate_value(state, item, f.type_expr)
			state.pop_path()
		for key in value.keys():
			if key not in known:
				state.add_error(f"unknown field {key}")
	elif isinstance(value, ListValue):
		if len(value) > len(ty.fields):
			state.add_error(f"expected at most {len(ty.fields)} items for record, got {len(value)}")
			return
		for idx, f in enumerate(ty.fields):
			if idx >= len(value):
				if not _accepts_null(f.type_expr):
					state.add_error(f"missing field {f.label}")
				continue
			state.push_path(f".{f.label}")
			validate_value(state, value.items[idx], f.type_expr)
			state.pop_path()
	else:
		state.add_error(f"expected object with named fields or array, got {kind_of(value)}")


def _validate_variant(state: ValidationState, value: Value, ty: VariantType) -> None:
	names = [c.label for c in ty.cases]
	hint = f"one of: {', '.join(names)}" if names else "a single case object"
	if isinstance(value, Text):
		case = next((c for c in ty.cases if c.label == value.value), None)
		if case is not None and case.type_expr is None:
			return
	if not isinstance(value, Map) or len(value) != 1:
		state.add_error(f"expected variant as object with {hint}")
		return
	label, payload = value.entries[0]
	case = next((c for c in ty.cases if c.label == label), None)
	if case is None:
		state.add_error(f"unknown variant case {label} (expected {hint})")
		return
	state.push_path(f".{label}")
	if case.type_expr is None:
		if not isinstance(payload, Null):
			state.add_error(f"case {label} carries no value, expected null")
	else:
		validate_value(state, payload, case.type_expr)
	state.pop_path()


def _accepts_null(ty: TypeExpr) -> bool:
	if isinstance(ty, OptType):
		return True
	return isinstance(ty, PrimType) and ty.name in (prims.NULL, prims.RESERVED)


def _arity_ok(count: int, types: Sequence[TypeExpr]) -> bool:
	if count > len(types):
		return False
	return all(_accepts_null(t) for t in types[count:])


__all__ = [
	"ValidationIssue",
	"ValidationResult",
	"ValidationState",
	"validate_json_args",
	"validate_value",
]
