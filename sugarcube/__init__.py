# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
sugarcube: TypeScript syntax extensions (pipeline `|>`, cons `::`, and
higher-kinded type parameters `F<_>`) lowered to standard TypeScript by a
text-level preprocessor.
"""

from sugarcube.core.errors import ConfigError, OverlappingRewriteError, RewriteLimitExceeded, SugarcubeError
from sugarcube.core.syntax import BINOP_CALLEE, HKT_CONSTRUCTOR, ScSyntax
from sugarcube.preprocess import preprocess

__all__ = [
	"preprocess",
	"ScSyntax",
	"BINOP_CALLEE",
	"HKT_CONSTRUCTOR",
	"SugarcubeError",
	"RewriteLimitExceeded",
	"OverlappingRewriteError",
	"ConfigError",
]
