# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Candid primitive type names and the numeric ranges of the sized integers.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

NAT = "nat"
INT = "int"
TEXT = "text"
BOOL = "bool"
NULL = "null"
RESERVED = "reserved"
EMPTY = "empty"
PRINCIPAL = "principal"
BLOB = "blob"
FLOAT32 = "float32"
FLOAT64 = "float64"

# Inclusive (min, max) per sized integer type.
_SIZED_RANGES: Dict[str, Tuple[int, int]] = {}
for _bits in (8, 16, 32, 64):
	_SIZED_RANGES[f"nat{_bits}"] = (0, (1 << _bits) - 1)
	_SIZED_RANGES[f"int{_bits}"] = (-(1 << (_bits - 1)), (1 << (_bits - 1)) - 1)
del _bits

INTEGER_TYPES = frozenset({NAT, INT, *_SIZED_RANGES})
FLOAT_TYPES = frozenset({FLOAT32, FLOAT64})
NUMERIC_TYPES = INTEGER_TYPES | FLOAT_TYPES

PRIMITIVES = frozenset(
	NUMERIC_TYPES | {TEXT, BOOL, NULL, RESERVED, EMPTY, PRINCIPAL, BLOB}
)


def is_primitive(name: str) -> bool:
	return name in PRIMITIVES


def is_integer(name: str) -> bool:
	return name in INTEGER_TYPES


def is_float(name: str) -> bool:
	return name in FLOAT_TYPES


def is_unsigned(name: str) -> bool:
	return name == NAT or (name.startswith("nat") and name in _SIZED_RANGES)


def integer_range(name: str) -> Optional[Tuple[int, int]]:
	"""
	Return the inclusive range of a sized integer type.

	`nat` has a lower bound only and `int` is unbounded, so both return None;
	callers check the sign of `nat` separately via `is_unsigned`.
	"""
	return _SIZED_RANGES.get(name)


__all__ = [
	"BLOB",
	"BOOL",
	"EMPTY",
	"FLOAT32",
	"FLOAT64",
	"FLOAT_TYPES",
	"INT",
	"INTEGER_TYPES",
	"NAT",
	"NULL",
	"NUMERIC_TYPES",
	"PRIMITIVES",
	"PRINCIPAL",
	"RESERVED",
	"TEXT",
	"integer_range",
	"is_float",
	"is_integer",
	"is_primitive",
	"is_unsigned",
]
