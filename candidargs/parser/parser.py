from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional, Tuple

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken

from candidargs.core.errors import ParseError
from candidargs.core.prims import is_primitive
from candidargs.core.span import Span

from .ast import (
	AliasRef,
	Arg,
	Field,
	FuncType,
	ImportDef,
	Located,
	MethodDef,
	OptType,
	PrimType,
	Program,
	RecordType,
	ServiceDef,
	ServiceType,
	TypeDef,
	TypeExpr,
	VariantCase,
	VariantType,
	VecType,
)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	start="program",
	propagate_positions=True,
	maybe_placeholders=False,
)

_TYPE_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	start="datatype",
	propagate_positions=True,
	maybe_placeholders=False,
)

_OPENERS = {"{": "}", "(": ")"}
_CLOSERS = {"}": "{", ")": "("}

FUNC_MODES = frozenset({"query", "composite_query", "oneway"})

_ESCAPE = re.compile(r"""\\(?:([nrt\\'"])|([0-9a-fA-F]{2})|u\{([0-9a-fA-F]{1,6})\})""")
_SIMPLE_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "\\": "\\", "'": "'", '"': '"'}


def parse_program(source: str, *, file: Optional[str] = None) -> Program:
	"""Parse a whole `.did` source into a Program."""
	check_delimiters(source, file=file)
	tree = _parse(_PARSER, source, file=file)
	return _build_program(tree, source, file)


def parse_type_expr(text: str) -> TypeExpr:
	"""Parse a single type expression such as `opt record { id : nat64 }`."""
	check_delimiters(text)
	tree = _parse(_TYPE_PARSER, text)
	return _build_type_expr(tree, text)


def check_delimiters(text: str, *, file: Optional[str] = None) -> None:
	"""
	Verify that `{}` and `()` nest properly, ignoring comments and string literals.

	Runs before the grammar so an unbalanced body is reported as such instead of
	as an unexpected token somewhere downstream.
	"""
	stack: List[Tuple[str, int]] = []
	i = 0
	n = len(text)
	while i < n:
		ch = text[i]
		if ch == '"':
			i = _skip_string(text, i, file)
			continue
		if text.startswith("//", i):
			nl = text.find("\n", i)
			i = n if nl < 0 else nl + 1
			continue
		if text.startswith("/*", i):
			end = text.find("*/", i + 2)
			if end < 0:
				raise ParseError("unterminated block comment", text=text, span=Span.from_offset(text, i, file=file))
			i = end + 2
			continue
		if ch in _OPENERS:
			stack.append((ch, i))
		elif ch in _CLOSERS:
			if not stack or stack[-1][0] != _CLOSERS[ch]:
				raise ParseError(f"unbalanced '{ch}'", text=text, span=Span.from_offset(text, i, file=file))
			stack.pop()
		i += 1
	if stack:
		opener, offset = stack[-1]
		raise ParseError(f"unclosed '{opener}'", text=text, span=Span.from_offset(text, offset, file=file))


def _skip_string(text: str, start: int, file: Optional[str]) -> int:
	i = start + 1
	while i < len(text):
		if text[i] == "\\":
			i += 2
			continue
		if text[i] == '"':
			return i + 1
		i += 1
	raise ParseError("unterminated string literal", text=text, span=Span.from_offset(text, start, file=file))


def _parse(parser: Lark, text: str, *, file: Optional[str] = None) -> Tree:
	try:
		return parser.parse(text)
	except UnexpectedInput as exc:
		raise ParseError(_describe(exc), text=text, span=Span.from_loc(exc, file=file)) from exc


def _describe(exc: UnexpectedInput) -> str:
	if isinstance(exc, UnexpectedEOF):
		return "unexpected end of input"
	if isinstance(exc, UnexpectedToken):
		if exc.token.type == "$END":
			return "unexpected end of input"
		return f"unexpected token {exc.token.value!r}"
	if isinstance(exc, UnexpectedCharacters):
		return f"unexpected character {exc.char!r}"
	return "syntax error"


def _build_program(tree: Tree, source: str, file: Optional[str]) -> Program:
	type_defs: List[TypeDef] = []
	imports: List[ImportDef] = []
	service: Optional[ServiceDef] = None
	seen: dict[str, TypeDef] = {}
	for child in _subtrees(tree):
		kind = _name(child)
		if kind == "type_def":
			name_token = child.children[0]
			type_def = TypeDef(
				name=name_token.value,
				type_expr=_build_type_expr(child.children[1], source),
				loc=_loc_from_token(name_token),
			)
			if type_def.name in seen:
				raise ParseError(
					f"duplicate type definition '{type_def.name}'",
					text=source,
					span=Span.from_loc(name_token, file=file),
				)
			seen[type_def.name] = type_def
			type_defs.append(type_def)
		elif kind == "import_def":
			path_token = child.children[0]
			imports.append(ImportDef(path=_decode_string_token(path_token, source), loc=_loc_from_token(path_token)))
		elif kind == "actor":
			service = _build_actor(child, source)
	return Program(type_defs=tuple(type_defs), imports=tuple(imports), service=service)


def _build_actor(tree: Tree, source: str) -> ServiceDef:
	name: Optional[str] = None
	init_args: Tuple[Arg, ...] = ()
	body: Optional[TypeExpr] = None
	for child in tree.children:
		if isinstance(child, Token):
			name = child.value
			continue
		kind = _name(child)
		if kind == "actor_init":
			init_args = _build_args(child.children[0], source)
		elif kind == "service_body":
			body = _build_service_body(child, source)
		elif kind == "alias_ref":
			body = AliasRef(child.children[0].value)
	if body is None:
		raise ParseError("service declaration without a body", text=source, span=Span.from_loc(tree.meta))
	return ServiceDef(body=body, name=name, init_args=init_args, loc=_loc(tree))


def _build_type_expr(tree: Tree, source: str) -> TypeExpr:
	kind = _name(tree)
	if kind == "prim_or_ref":
		name = tree.children[0].value
		if is_primitive(name):
			return PrimType(name)
		return AliasRef(name)
	if kind == "opt_type":
		return OptType(_build_type_expr(tree.children[0], source))
	if kind == "vec_type":
		return VecType(_build_type_expr(tree.children[0], source))
	if kind == "record_type":
		return RecordType(_build_record_fields(tree, source))
	if kind == "variant_type":
		return VariantType(_build_variant_cases(tree, source))
	if kind == "func_ref":
		return _build_func_type(tree.children[0], source)
	if kind == "service_ref":
		return _build_service_body(tree.children[0], source)
	raise ParseError(f"unexpected type node '{kind}'", text=source, span=Span.from_loc(tree.meta))


def _build_record_fields(tree: Tree, source: str) -> Tuple[Field, ...]:
	fields: List[Field] = []
	for idx, child in enumerate(_subtrees(tree)):
		if _name(child) == "named_field":
			label, quoted = _build_label(child.children[0], source)
			fields.append(Field(label=label, type_expr=_build_type_expr(child.children[1], source), quoted=quoted))
		else:
			fields.append(
				Field(label=str(idx), type_expr=_build_type_expr(child.children[0], source), positional=True)
			)
	_check_unique([f.label for f in fields], "record field", tree, source)
	return tuple(fields)


def _build_variant_cases(tree: Tree, source: str) -> Tuple[VariantCase, ...]:
	cases: List[VariantCase] = []
	for child in _subtrees(tree):
		label, quoted = _build_label(child.children[0], source)
		type_expr = None
		if _name(child) == "typed_case":
			type_expr = _build_type_expr(child.children[1], source)
		cases.append(VariantCase(label=label, type_expr=type_expr, quoted=quoted))
	_check_unique([c.label for c in cases], "variant case", tree, source)
	return tuple(cases)


def _build_func_type(tree: Tree, source: str) -> FuncType:
	children = _subtrees(tree)
	args = _build_args(children[0], source)
	rets = _build_args(children[1], source)
	modes: List[str] = []
	for mode_node in children[2:]:
		mode_token = mode_node.children[0]
		if mode_token.value not in FUNC_MODES:
			raise ParseError(
				f"unknown function mode '{mode_token.value}'",
				text=source,
				span=Span.from_loc(mode_token),
			)
		modes.append(mode_token.value)
	return FuncType(args=args, rets=rets, modes=tuple(modes))


def _build_args(tree: Tree, source: str) -> Tuple[Arg, ...]:
	args: List[Arg] = []
	for child in _subtrees(tree):
		if _name(child) == "named_arg":
			args.append(Arg(type_expr=_build_type_expr(child.children[1], source), name=child.children[0].value))
		else:
			args.append(Arg(type_expr=_build_type_expr(child.children[0], source)))
	return tuple(args)


def _build_service_body(tree: Tree, source: str) -> ServiceType:
	methods: List[MethodDef] = []
	for child in _subtrees(tree):
		name, quoted = _build_label(child.children[0], source)
		if _name(child) == "method_sig":
			func: TypeExpr = _build_func_type(child.children[1], source)
		else:
			func = AliasRef(child.children[1].value)
		methods.append(MethodDef(name=name, func=func, quoted=quoted))
	_check_unique([m.name for m in methods], "method", tree, source)
	return ServiceType(methods=tuple(methods))


def _build_label(tree: Tree, source: str) -> Tuple[str, bool]:
	token = tree.children[0]
	if token.type == "STRING":
		return _decode_string_token(token, source), True
	return token.value, False


def _check_unique(labels: List[str], what: str, tree: Tree, source: str) -> None:
	seen = set()
	for label in labels:
		if label in seen:
			raise ParseError(f"duplicate {what} '{label}'", text=source, span=Span.from_loc(tree.meta))
		seen.add(label)


def _decode_string_token(tok: Token, source: str) -> str:
	"""
	Decode a STRING token using Candid escapes: `\\n`, `\\r`, `\\t`, `\\\\`,
	`\\"`, `\\'`, `\\HH` (one UTF-8 byte) and `\\u{HEX}` (a code point). The
	decoded bytes must form valid UTF-8.
	"""
	content = tok.value[1:-1]
	out = bytearray()
	i = 0
	while i < len(content):
		ch = content[i]
		if ch != "\\":
			out += ch.encode("utf-8")
			i += 1
			continue
		m = _ESCAPE.match(content, i)
		if m is None:
			raise ParseError(
				f"invalid escape {content[i:i + 2]!r} in string literal",
				text=source,
				span=Span.from_loc(tok),
			)
		simple, byte, code = m.groups()
		if simple is not None:
			out += _SIMPLE_ESCAPES[simple].encode("utf-8")
		elif byte is not None:
			out.append(int(byte, 16))
		else:
			point = int(code, 16)
			if point > 0x10FFFF or 0xD800 <= point <= 0xDFFF:
				raise ParseError(f"invalid code point \\u{{{code}}}", text=source, span=Span.from_loc(tok))
			out += chr(point).encode("utf-8")
		i = m.end()
	try:
		return out.decode("utf-8")
	except UnicodeDecodeError:
		raise ParseError("string literal is not valid UTF-8", text=source, span=Span.from_loc(tok)) from None


def _subtrees(tree: Tree) -> List[Tree]:
	return [child for child in tree.children if isinstance(child, Tree)]


def _loc(tree: Tree) -> Optional[Located]:
	meta = tree.meta
	if getattr(meta, "empty", True):
		return None
	return Located(line=meta.line, column=meta.column)


def _loc_from_token(token: Token) -> Located:
	return Located(line=token.line, column=token.column)


def _name(node: Tree | Token) -> str:
	if isinstance(node, Tree):
		data = node.data
		if isinstance(data, Token):
			return data.value
		return data
	if isinstance(node, Token):
		return node.type
	return str(node)
