# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from candidargs.core.errors import ParseError
from candidargs.parser import ast, parse_program


def test_program_collects_types_imports_and_service() -> None:
	prog = parse_program(
		"""
import "ledger.did";
type NeuronId = record { id : nat64 };
type Page = record { start_page_at : opt NeuronId; limit : nat32 };

service : (init : record { owner : principal }) -> {
	list_neurons : (Page) -> (vec NeuronId) query;
	"claim" : (NeuronId) -> ();
}
"""
	)
	assert [td.name for td in prog.type_defs] == ["NeuronId", "Page"]
	assert [imp.path for imp in prog.imports] == ["ledger.did"]
	assert prog.service is not None
	assert [a.name for a in prog.service.init_args] == ["init"]
	body = prog.service.body
	assert isinstance(body, ast.ServiceType)
	assert [m.name for m in body.methods] == ["list_neurons", "claim"]
	assert body.methods[1].quoted


def test_named_service_bound_to_alias() -> None:
	prog = parse_program(
		"""
type Api = service { ping : () -> () oneway };
service backend : Api;
"""
	)
	assert prog.service.name == "backend"
	assert prog.service.body == ast.AliasRef("Api")


def test_program_without_service() -> None:
	prog = parse_program("type A = nat; type B = vec A;")
	assert prog.service is None
	assert prog.type_defs[1].type_expr == ast.VecType(ast.AliasRef("A"))
	assert prog.type_defs[0].loc.line == 1


def test_duplicate_type_definition_rejected() -> None:
	with pytest.raises(ParseError, match="duplicate type definition 'A'"):
		parse_program("type A = nat;\ntype A = text;")


def test_parse_error_names_file() -> None:
	with pytest.raises(ParseError) as excinfo:
		parse_program("type A = ;", file="api.did")
	assert excinfo.value.span.file == "api.did"
	assert "api.did:1" in str(excinfo.value)


def test_import_path_escapes_are_decoded() -> None:
	prog = parse_program(r'import "dir\u{2f}ledger.did";')
	assert [imp.path for imp in prog.imports] == ["dir/ledger.did"]
