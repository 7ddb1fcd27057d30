# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Exception hierarchy for the resolve/validate/encode pipeline.

Parsing and resolution failures are fatal to the operation and surface as a
single exception. Validation problems are never raised: the JSON validator
returns them as a `ValidationResult`. Encoding preconditions (wrong arity,
field-count mismatch) are caller bugs and raise immediately.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Sequence

from .span import Span


class ErrorCode(str, Enum):
	"""Stable codes a host can key on."""

	PARSE_ERROR = "ParseError"
	UNRESOLVED_ALIAS = "UnresolvedAlias"
	RECURSION_LIMIT = "RecursionLimit"
	UNKNOWN_METHOD = "UnknownMethod"
	ENCODING_PRECONDITION = "EncodingPrecondition"
	LITERAL_FORMAT = "LiteralFormat"


class CandidError(Exception):
	"""Base class for all errors raised by candidargs."""

	code: ErrorCode

	def __init__(self, message: str) -> None:
		super().__init__(message)
		self.message = message

	def __str__(self) -> str:
		return self.message


class ParseError(CandidError):
	"""Malformed Candid text: unbalanced delimiters or an unexpected token."""

	code = ErrorCode.PARSE_ERROR

	def __init__(self, message: str, *, text: str, span: Optional[Span] = None) -> None:
		self.text = text
		self.span = span or Span()
		where = f" at {self.span}" if str(self.span) else ""
		super().__init__(f"{message}{where} in {_clip(text)!r}")


class UnresolvedAliasError(CandidError):
	"""An alias is referenced but never declared."""

	code = ErrorCode.UNRESOLVED_ALIAS

	def __init__(self, alias: str, *, method: Optional[str] = None, param: Optional[int] = None) -> None:
		self.alias = alias
		self.method = method
		self.param = param
		super().__init__(f"unresolved type alias '{alias}'{_site(method, param)}")


class RecursionLimitError(CandidError):
	"""Alias expansion exceeded the depth limit or revisited an alias."""

	code = ErrorCode.RECURSION_LIMIT

	def __init__(
		self,
		chain: Sequence[str],
		*,
		limit: int,
		cyclic: bool,
		method: Optional[str] = None,
		param: Optional[int] = None,
	) -> None:
		self.chain = tuple(chain)
		self.limit = limit
		self.cyclic = cyclic
		self.method = method
		self.param = param
		path = " -> ".join(self.chain)
		if cyclic:
			reason = f"type alias cycle detected: {path}"
		else:
			reason = f"type alias expansion deeper than {limit}: {path}"
		super().__init__(f"{reason}{_site(method, param)}")


class UnknownMethodError(CandidError, KeyError):
	"""The service declares no method with the requested name."""

	code = ErrorCode.UNKNOWN_METHOD

	def __init__(self, method: str, known: Sequence[str] = ()) -> None:
		self.method = method
		hint = f" (known: {', '.join(known)})" if known else ""
		CandidError.__init__(self, f"unknown method '{method}'{hint}")


class EncodingPreconditionError(CandidError, ValueError):
	"""The caller passed values that do not line up with the declared fields/args."""

	code = ErrorCode.ENCODING_PRECONDITION


class LiteralFormatError(CandidError, ValueError):
	"""A raw value cannot be written as a literal of its declared type."""

	code = ErrorCode.LITERAL_FORMAT

	def __init__(self, message: str, *, field: Optional[str] = None) -> None:
		self.field = field
		prefix = f"field '{field}': " if field is not None else ""
		super().__init__(f"{prefix}{message}")


def _site(method: Optional[str], param: Optional[int]) -> str:
	if method is None:
		return ""
	if param is None:
		return f" in method '{method}'"
	return f" in method '{method}' parameter {param}"


def _clip(text: str, limit: int = 80) -> str:
	flat = " ".join(text.split())
	if len(flat) <= limit:
		return flat
	return flat[: limit - 3] + "..."


__all__ = [
	"CandidError",
	"EncodingPreconditionError",
	"ErrorCode",
	"LiteralFormatError",
	"ParseError",
	"RecursionLimitError",
	"UnknownMethodError",
	"UnresolvedAliasError",
]
