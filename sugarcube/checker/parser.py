# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
lark front end for the standard TypeScript subset in `grammar.lark`.

The parser is built once at import; it is read-only afterwards.
"""

from __future__ import annotations

from pathlib import Path

from lark import Lark, Tree

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text(encoding="utf-8")

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="earley",
	lexer="dynamic",
	start="module",
	propagate_positions=True,
)


def parse_standard(source: str) -> Tree:
	"""
	Parse standard TypeScript into a lark tree.

	Raises `lark.exceptions.UnexpectedInput` on a syntax error.
	"""
	return _PARSER.parse(source)


__all__ = ["parse_standard"]
