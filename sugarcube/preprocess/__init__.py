# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source-to-source preprocessor: sugared TypeScript in, standard TypeScript out.

Stages (each a pure `str -> str` function):
  - hkt_pass: `F<_>` declarations and `F<A>` -> `$<F, A>` applications
  - operator_pass: `|>` / `::` -> `__binop__(left, "op", right)`

Both stages consult `lexical` so that nothing inside strings, comments,
regex literals or template text is ever rewritten.
"""

from __future__ import annotations

import logging
from typing import Optional

from sugarcube.core.syntax import ScSyntax

from .hkt_pass import rewrite_hkt
from .operator_pass import MAX_REWRITE_ITERATIONS, rewrite_operators

logger = logging.getLogger(__name__)


def preprocess(
	source: str,
	syntax: Optional[ScSyntax] = None,
	*,
	filename: Optional[str] = None,
	max_iterations: int = MAX_REWRITE_ITERATIONS,
) -> str:
	"""
	Rewrite every enabled extension in `source` into standard TypeScript.

	The HKT pass runs first so the operator pass sees the final type syntax.
	`syntax=None` enables every extension. `filename` only labels log output.
	"""
	if syntax is None:
		syntax = ScSyntax()
	label = filename or "<input>"
	result = source
	if syntax.hkt:
		result = rewrite_hkt(result)
		logger.debug("%s: hkt pass %s", label, "changed text" if result != source else "no changes")
	if syntax.any_operator:
		before = result
		result = rewrite_operators(result, syntax, max_iterations=max_iterations)
		logger.debug("%s: operator pass %s", label, "changed text" if result != before else "no changes")
	return result


__all__ = ["preprocess"]
