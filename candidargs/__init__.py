# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Candid service-interface tooling for building call arguments.

Parse a `.did` source, expand the type aliases in a method's parameters, check
JSON input against the expanded types and turn it into a Candid textual
argument literal.
"""

from __future__ import annotations

from .core.errors import (
	CandidError,
	EncodingPreconditionError,
	ErrorCode,
	LiteralFormatError,
	ParseError,
	RecursionLimitError,
	UnknownMethodError,
	UnresolvedAliasError,
)
from .encoder import (
	build_record_from_dynamic,
	build_record_literal,
	compose_candid_args,
	compose_single_record_arg,
	encode_args,
	encode_json_args,
	encode_value,
	format_raw_literal,
)
from .form_model import CandidFormModel
from .json_example import build_json_example_for_args
from .json_validate import ValidationIssue, ValidationResult, validate_json_args
from .record_fields import RecordFieldSpec, parse_record_type, parse_variant_cases, render_record_type
from .resolver import CandidTypeResolver, MethodSignature, ResolverOptions, resolve_method_args

__version__ = "0.1.0"

__all__ = [
	"CandidError",
	"CandidFormModel",
	"CandidTypeResolver",
	"EncodingPreconditionError",
	"ErrorCode",
	"LiteralFormatError",
	"MethodSignature",
	"ParseError",
	"RecordFieldSpec",
	"RecursionLimitError",
	"ResolverOptions",
	"UnknownMethodError",
	"UnresolvedAliasError",
	"ValidationIssue",
	"ValidationResult",
	"build_json_example_for_args",
	"build_record_from_dynamic",
	"build_record_literal",
	"compose_candid_args",
	"compose_single_record_arg",
	"encode_args",
	"encode_json_args",
	"encode_value",
	"format_raw_literal",
	"parse_record_type",
	"parse_variant_cases",
	"render_record_type",
	"resolve_method_args",
	"validate_json_args",
]
