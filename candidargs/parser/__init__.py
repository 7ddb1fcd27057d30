"""
Candid IDL front end: lark grammar, AST builders and the normalized printer.

`parse_type_expr` handles a single type expression, `parse_program` a whole
`.did` file; `format_type` turns either result back into normalized text.
"""

from __future__ import annotations

from . import ast
from .parser import check_delimiters, parse_program, parse_type_expr
from .printer import format_label, format_type, quote_text


def normalize_type(text: str) -> str:
	"""Parse and re-print a type expression (whitespace/comment normalization)."""
	return format_type(parse_type_expr(text))


__all__ = [
	"ast",
	"check_delimiters",
	"format_label",
	"format_type",
	"normalize_type",
	"parse_program",
	"parse_type_expr",
	"quote_text",
]
