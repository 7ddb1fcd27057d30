# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Tagged dynamic values.

Form fields, decoded JSON and script outputs all arrive as loosely-typed Python
objects. They are normalized into one of six shapes before any encoder,
validator or projector looks at them:

  Text | Number | Bool | List | Map | Null

`Map` keeps insertion order, so a caller's field ordering survives the trip to
JSON. `Bool` is checked before `Number` because `bool` is an `int` subclass.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Tuple, Union


@dataclass(frozen=True)
class Text:
	value: str


@dataclass(frozen=True)
class Number:
	"""An int (arbitrary precision) or a float."""

	value: Union[int, float]

	@property
	def is_integral(self) -> bool:
		if isinstance(self.value, int):
			return True
		return self.value.is_integer()


@dataclass(frozen=True)
class Bool:
	value: bool


@dataclass(frozen=True)
class List:
	items: Tuple["Value", ...] = ()

	def __len__(self) -> int:
		return len(self.items)

	def __iter__(self) -> Iterator["Value"]:
		return iter(self.items)


@dataclass(frozen=True)
class Map:
	entries: Tuple[Tuple[str, "Value"], ...] = ()

	def __len__(self) -> int:
		return len(self.entries)

	def keys(self) -> Tuple[str, ...]:
		return tuple(k for k, _ in self.entries)

	def get(self, key: str) -> Optional["Value"]:
		for k, v in self.entries:
			if k == key:
				return v
		return None

	def __contains__(self, key: object) -> bool:
		return any(k == key for k, _ in self.entries)


@dataclass(frozen=True)
class Null:
	pass


NULL = Null()

Value = Union[Text, Number, Bool, List, Map, Null]

_TAGGED = (Text, Number, Bool, List, Map, Null)


def from_python(obj: Any) -> Value:
	"""Convert plain Python data (as produced by `json.loads` or a form) into a Value."""
	if isinstance(obj, _TAGGED):
		return obj
	if obj is None:
		return NULL
	if isinstance(obj, bool):
		return Bool(obj)
	if isinstance(obj, (int, float)):
		return Number(obj)
	if isinstance(obj, str):
		return Text(obj)
	if isinstance(obj, dict):
		return Map(tuple((str(k), from_python(v)) for k, v in obj.items()))
	if isinstance(obj, (list, tuple)):
		return List(tuple(from_python(v) for v in obj))
	raise TypeError(f"unsupported value of type {type(obj).__name__}")


def to_python(value: Value) -> Any:
	if isinstance(value, Null):
		return None
	if isinstance(value, (Text, Number, Bool)):
		return value.value
	if isinstance(value, List):
		return [to_python(v) for v in value.items]
	if isinstance(value, Map):
		return {k: to_python(v) for k, v in value.entries}
	raise TypeError(f"not a Value: {value!r}")


def _reject_constant(name: str) -> Any:
	raise ValueError(f"{name} is not valid JSON")


def loads(text: str) -> Value:
	"""
	Decode JSON text into a Value. Raises ValueError (json.JSONDecodeError) on bad
	input, including the `NaN`/`Infinity` extensions `json` accepts by default.
	"""
	return from_python(json.loads(text, parse_constant=_reject_constant))


def dumps(value: Value) -> str:
	"""Compact JSON (`{"a":1}`), non-ASCII left unescaped."""
	return json.dumps(to_python(value), separators=(",", ":"), ensure_ascii=False)


def kind_of(value: Value) -> str:
	"""Short JSON-ish name of a value's shape, for error messages."""
	if isinstance(value, Null):
		return "null"
	if isinstance(value, Bool):
		return "boolean"
	if isinstance(value, Number):
		return "number"
	if isinstance(value, Text):
		return "string"
	if isinstance(value, List):
		return "array"
	return "object"


__all__ = [
	"Bool",
	"List",
	"Map",
	"NULL",
	"Null",
	"Number",
	"Text",
	"Value",
	"dumps",
	"from_python",
	"kind_of",
	"loads",
	"to_python",
]
