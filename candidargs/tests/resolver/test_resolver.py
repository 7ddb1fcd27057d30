# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from candidargs.core.errors import RecursionLimitError, UnknownMethodError, UnresolvedAliasError
from candidargs.parser import parse_type_expr
from candidargs.parser.ast import AliasRef
from candidargs.resolver import CandidTypeResolver, ResolverOptions, resolve_method_args

GOVERNANCE_DID = """
type NeuronId = record { id : nat64 };
type ListNeurons = record {
	start_page_at : opt NeuronId;
	limit : nat32;
};
type Result = variant { Ok : vec NeuronId; Err : text };

service : {
	list_neurons : (ListNeurons) -> (Result) query;
	get_neuron : (id : NeuronId, verbose : opt bool) -> (opt NeuronId) composite_query;
	claim : (NeuronId) -> ();
	ping : () -> () oneway;
}
"""


def _contains_alias(text: str) -> bool:
	found = []

	def walk(node: object) -> None:
		if isinstance(node, AliasRef):
			found.append(node.name)
		for value in getattr(node, "__dict__", {}).values():
			items = value if isinstance(value, tuple) else (value,)
			for item in items:
				walk(item)

	walk(parse_type_expr(text))
	return bool(found)


def test_resolve_expands_nested_alias_in_record_field() -> None:
	resolver = CandidTypeResolver(GOVERNANCE_DID)
	assert resolver.resolve_arg_types("list_neurons") == [
		"record { start_page_at : opt record { id : nat64 }; limit : nat32 }"
	]


def test_resolved_types_contain_no_alias_references() -> None:
	resolver = CandidTypeResolver(GOVERNANCE_DID)
	for name in resolver.method_names():
		for text in resolver.resolve_arg_types(name) + resolver.resolve_return_types(name):
			assert not _contains_alias(text)


def test_named_arguments_and_modes() -> None:
	resolver = CandidTypeResolver(GOVERNANCE_DID)
	sig = resolver.method("get_neuron")
	assert sig.arg_names == ("id", "verbose")
	assert sig.mode == "composite_query"
	assert sig.is_query
	assert resolver.method("claim").mode == "update"
	assert resolver.method("ping").mode == "oneway"
	assert resolver.resolve_arg_types("get_neuron") == ["record { id : nat64 }", "opt bool"]


def test_return_types_are_resolved() -> None:
	resolver = CandidTypeResolver(GOVERNANCE_DID)
	assert resolver.resolve_return_types("list_neurons") == [
		"variant { Ok : vec record { id : nat64 }; Err : text }"
	]


def test_zero_argument_method() -> None:
	assert resolve_method_args(GOVERNANCE_DID, "ping") == []


def test_method_names_in_declaration_order() -> None:
	resolver = CandidTypeResolver(GOVERNANCE_DID)
	assert resolver.method_names() == ["list_neurons", "get_neuron", "claim", "ping"]


def test_unknown_method() -> None:
	resolver = CandidTypeResolver(GOVERNANCE_DID)
	with pytest.raises(UnknownMethodError) as excinfo:
		resolver.resolve_arg_types("missing")
	assert "list_neurons" in str(excinfo.value)
	assert isinstance(excinfo.value, KeyError)


def test_unresolved_alias_names_method_and_parameter() -> None:
	resolver = CandidTypeResolver("service : { go : (nat, Missing) -> () }")
	with pytest.raises(UnresolvedAliasError) as excinfo:
		resolver.resolve_arg_types("go")
	err = excinfo.value
	assert err.alias == "Missing"
	assert err.method == "go"
	assert err.param == 1


def test_direct_cycle_is_reported() -> None:
	resolver = CandidTypeResolver("type A = vec A; service : { go : (A) -> () }")
	with pytest.raises(RecursionLimitError) as excinfo:
		resolver.resolve_arg_types("go")
	assert excinfo.value.cyclic
	assert excinfo.value.chain == ("A", "A")


def test_indirect_cycle_is_reported() -> None:
	source = """
type Tree = record { children : vec Forest };
type Forest = opt Tree;
service : { plant : (Forest) -> () }
"""
	resolver = CandidTypeResolver(source)
	with pytest.raises(RecursionLimitError, match="Forest -> Tree -> Forest"):
		resolver.resolve_arg_types("plant")


def test_depth_limit_applies_to_long_chains() -> None:
	chain = "".join(f"type T{i} = opt T{i + 1};\n" for i in range(10))
	source = chain + "type T10 = nat;\nservice : { go : (T0) -> () }"
	assert CandidTypeResolver(source).resolve_arg_types("go") == ["opt " * 10 + "nat"]
	shallow = CandidTypeResolver(source, options=ResolverOptions(max_depth=5))
	with pytest.raises(RecursionLimitError) as excinfo:
		shallow.resolve_arg_types("go")
	assert not excinfo.value.cyclic
	assert excinfo.value.limit == 5


def test_options_reject_non_positive_depth() -> None:
	with pytest.raises(ValueError):
		ResolverOptions(max_depth=0)


def test_alias_shared_by_siblings_is_not_a_cycle() -> None:
	source = """
type Account = record { owner : principal; subaccount : opt blob };
service : { transfer : (record { from : Account; to : Account }) -> () }
"""
	out = CandidTypeResolver(source).resolve_arg_types("transfer")
	inner = "record { owner : principal; subaccount : opt blob }"
	assert out == [f"record {{ from : {inner}; to : {inner} }}"]


def test_resolving_expanded_type_is_idempotent() -> None:
	resolver = CandidTypeResolver(GOVERNANCE_DID)
	first = resolver.resolve_arg_types("list_neurons")[0]
	assert resolver.resolve_type(first) == first


def test_service_bound_to_alias_and_method_alias() -> None:
	source = """
type Getter = func (text) -> (opt text) query;
type Store = service { get : Getter; put : (text, text) -> () };
service : Store;
"""
	resolver = CandidTypeResolver(source)
	assert resolver.method_names() == ["get", "put"]
	assert resolver.method("get").is_query
	assert resolver.resolve_arg_types("put") == ["text", "text"]


def test_alias_table_is_read_only() -> None:
	resolver = CandidTypeResolver(GOVERNANCE_DID)
	with pytest.raises(TypeError):
		resolver.aliases["NeuronId"] = None  # type: ignore[index]


def test_imports_are_recorded_and_logged(caplog: pytest.LogCaptureFixture) -> None:
	with caplog.at_level("INFO", logger="candidargs.resolver"):
		resolver = CandidTypeResolver('import "other.did"; service : {}')
	assert resolver.method_names() == []
	assert "other.did" in caplog.text
