# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Standard-syntax checker.

Validates that preprocessed output is plain TypeScript by parsing it with a
lark grammar that knows nothing about the sugarcube extensions. Parse errors
are collected as `Diagnostic`s instead of propagating, so callers (the CLI,
the fixture tests) can report them alongside preprocessing failures.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from lark import Tree
from lark.exceptions import UnexpectedInput

from sugarcube.core.diagnostics import Diagnostic, has_errors
from sugarcube.core.errors import RewriteLimitExceeded, SugarcubeError
from sugarcube.core.span import Span
from sugarcube.core.syntax import ScSyntax
from sugarcube.preprocess import preprocess

from .parser import parse_standard


@dataclass
class ParseResult:
	"""Outcome of preprocessing + parsing one source buffer."""

	tree: Optional[Tree]
	# None when preprocessing itself failed without partial output.
	preprocessed_source: Optional[str]
	diagnostics: list[Diagnostic] = field(default_factory=list)

	@property
	def ok(self) -> bool:
		return self.tree is not None and not has_errors(self.diagnostics)


def _syntax_error(err: UnexpectedInput, source: str, filename: Optional[str]) -> Diagnostic:
	message = str(err).strip().splitlines()[0] if str(err).strip() else "syntax error"
	notes: list[str] = []
	try:
		context = err.get_context(source).rstrip()
	except (AttributeError, IndexError, TypeError):
		context = ""
	if context:
		notes.append(context)
	return Diagnostic(
		message=f"syntax error: {message}",
		code="E-PARSE",
		phase="parser",
		severity="error",
		span=Span.from_loc(err, file=filename),
		notes=notes,
	)


def check_source(source: str, filename: Optional[str] = None) -> list[Diagnostic]:
	"""Parse `source` as standard TypeScript; return diagnostics (empty when it parses)."""
	try:
		parse_standard(source)
	except UnexpectedInput as err:
		return [_syntax_error(err, source, filename)]
	return []


def parse_sugarcube(
	source: str,
	filename: Optional[str] = None,
	syntax: Optional[ScSyntax] = None,
) -> ParseResult:
	"""
	Preprocess `source`, then parse the result as standard TypeScript.

	Diagnostic positions refer to the preprocessed text.
	"""
	try:
		text = preprocess(source, syntax, filename=filename)
	except SugarcubeError as err:
		partial = err.partial if isinstance(err, RewriteLimitExceeded) else None
		diag = Diagnostic(message=str(err), code=err.code, phase="preprocess", severity="error", span=Span(file=filename))
		return ParseResult(tree=None, preprocessed_source=partial, diagnostics=[diag])
	try:
		tree = parse_standard(text)
	except UnexpectedInput as err:
		return ParseResult(tree=None, preprocessed_source=text, diagnostics=[_syntax_error(err, text, filename)])
	return ParseResult(tree=tree, preprocessed_source=text, diagnostics=[])


__all__ = ["ParseResult", "parse_standard", "check_source", "parse_sugarcube"]
