# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from candidargs.core.errors import CandidError
from candidargs.encoder import encode_json_args
from candidargs.json_example import build_json_example_for_args
from candidargs.json_validate import validate_json_args
from candidargs.resolver import DEFAULT_MAX_DEPTH, CandidTypeResolver, ResolverOptions

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(prog="candidargs", description="Candid argument tooling (resolve, validate, encode)")
	p.add_argument(
		"--max-depth",
		type=int,
		default=DEFAULT_MAX_DEPTH,
		help=f"Maximum nested alias expansions before giving up (default: {DEFAULT_MAX_DEPTH})",
	)
	p.add_argument("-v", "--verbose", action="count", default=0, help="Log more (-v info, -vv debug)")
	sub = p.add_subparsers(dest="cmd", required=True)

	methods = sub.add_parser("methods", help="List service methods with their call mode and resolved argument types")
	methods.add_argument("did", type=Path, help="Path to a .did file")
	methods.add_argument("--json", action="store_true", help="Emit machine-readable JSON")

	resolve = sub.add_parser("resolve", help="Print a method's argument types with every alias expanded")
	resolve.add_argument("did", type=Path, help="Path to a .did file")
	resolve.add_argument("method", help="Method name")
	resolve.add_argument("--returns", action="store_true", help="Print return types instead of argument types")

	validate = sub.add_parser("validate", help="Check JSON arguments against a method's parameter types")
	validate.add_argument("did", type=Path, help="Path to a .did file")
	validate.add_argument("method", help="Method name")
	validate.add_argument("args_json", metavar="JSON", help="JSON text, @path to read a file, or - for stdin")

	encode = sub.add_parser("encode", help="Validate JSON arguments and print the Candid argument literal")
	encode.add_argument("did", type=Path, help="Path to a .did file")
	encode.add_argument("method", help="Method name")
	encode.add_argument("args_json", metavar="JSON", help="JSON text, @path to read a file, or - for stdin")

	example = sub.add_parser("example", help="Print placeholder JSON arguments for a method")
	example.add_argument("did", type=Path, help="Path to a .did file")
	example.add_argument("method", help="Method name")
	return p


def _read_json_arg(raw: str) -> str:
	if raw == "-":
		return sys.stdin.read()
	if raw.startswith("@"):
		return Path(raw[1:]).read_text(encoding="utf-8")
	return raw


def _load_resolver(path: Path, max_depth: int) -> CandidTypeResolver:
	source = path.read_text(encoding="utf-8")
	logger.info("loading %s (%d bytes)", path, len(source))
	return CandidTypeResolver(source, options=ResolverOptions(max_depth=max_depth), file=str(path))


def _configure_logging(verbosity: int) -> None:
	level = logging.WARNING
	if verbosity == 1:
		level = logging.INFO
	elif verbosity > 1:
		level = logging.DEBUG
	logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def main(argv: list[str] | None = None) -> int:
	p = _build_parser()
	args = p.parse_args(argv)
	_configure_logging(args.verbose)

	try:
		return _run(args)
	except (CandidError, ValueError, OSError) as err:
		print(f"error: {err}", file=sys.stderr)
		return 2


def _run(args: argparse.Namespace) -> int:
	resolver = _load_resolver(args.did, args.max_depth)

	if args.cmd == "methods":
		rows = []
		for name in resolver.method_names():
			sig = resolver.method(name)
			rows.append({"name": name, "mode": sig.mode, "args": resolver.resolve_arg_types(name)})
		if args.json:
			print(json.dumps(rows, sort_keys=True, separators=(",", ":")))
			return 0
		for row in rows:
			print(f"{row['name']} ({row['mode']}): ({', '.join(row['args'])})")
		return 0

	if args.cmd == "resolve":
		if args.returns:
			types = resolver.resolve_return_types(args.method)
		else:
			types = resolver.resolve_arg_types(args.method)
		for ty in types:
			print(ty)
		return 0

	if args.cmd in ("validate", "encode"):
		types = resolver.resolve_arg_types(args.method)
		json_text = _read_json_arg(args.args_json)
		result = validate_json_args(resolved_arg_types=types, json_text=json_text)
		if not result.ok:
			for err in result.errors:
				print(err, file=sys.stderr)
			return 1
		if args.cmd == "validate":
			print("ok")
			return 0
		print(encode_json_args(types, json_text))
		return 0

	if args.cmd == "example":
		print(build_json_example_for_args(resolver.resolve_arg_types(args.method)))
		return 0

	raise AssertionError("unreachable")
