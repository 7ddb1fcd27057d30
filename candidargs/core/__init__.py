"""
candidargs.core: shared errors, spans and primitive tables used by every stage.

Modules:
  - errors: exception hierarchy and error codes
  - span: source locations for parse failures
  - prims: primitive type names and sized-integer ranges
"""

__all__ = [
	"errors",
	"prims",
	"span",
]
