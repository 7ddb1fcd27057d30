# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source span attached to parse failures.

Candid text usually arrives as a snippet (one type expression) or as a whole
`.did` file, so a span carries an optional file name next to the 1-based
line/column pair reported by lark.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Best-effort file/line/column location inside Candid source."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None

	@classmethod
	def from_loc(cls, loc: Any, *, file: Optional[str] = None) -> "Span":
		"""
		Build a Span from a lark token/exception or anything with `line`/`column`.

		Returns an empty Span when `loc` is None.
		"""
		if loc is None:
			return cls(file=file)
		if isinstance(loc, cls):
			return loc
		return cls(
			file=file,
			line=getattr(loc, "line", None),
			column=getattr(loc, "column", None),
		)

	@classmethod
	def from_offset(cls, text: str, offset: int, *, file: Optional[str] = None) -> "Span":
		"""Translate a 0-based character offset in `text` into line/column."""
		line = text.count("\n", 0, offset) + 1
		column = offset - (text.rfind("\n", 0, offset) + 1) + 1
		return cls(file=file, line=line, column=column)

	def __str__(self) -> str:
		parts = []
		if self.file:
			parts.append(self.file)
		if self.line is not None:
			parts.append(str(self.line))
			if self.column is not None:
				parts.append(str(self.column))
		return ":".join(parts)


__all__ = ["Span"]
