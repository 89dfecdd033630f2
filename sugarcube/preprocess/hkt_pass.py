# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Higher-kinded type pass.

A type parameter written `F<_>` (or `F<_, _>`) declares `F` as a type
constructor. Within the declaration's scope every application `F<A>` becomes
`$<F, A>`, and the declaration itself is reduced to plain `F`.

All searching happens on the code skeleton (see `lexical.code_skeleton`), so
matches inside strings, comments and template text are impossible. Argument
text is always taken from the real buffer.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from sugarcube.core.syntax import HKT_CONSTRUCTOR

from .edits import Replacement, apply_replacements
from .lexical import code_skeleton

logger = logging.getLogger(__name__)

# Uppercase identifier directly followed by `<`; not the tail of a longer word.
_TYPE_APPLICATION = re.compile(r"(?<![\w$])([A-Z][\w$]*)\s*<")
_PLACEHOLDER_ARGS = re.compile(r"<\s*_(?:\s*,\s*_)*\s*>")


@dataclass(frozen=True)
class HktDecl:
	"""
	One `F<_>` declaration.

	`[remove_start, remove_end)` is the placeholder list to delete; the scope
	span bounds where usages of `name` are rewritten (inclusive end).
	"""

	name: str
	remove_start: int
	remove_end: int
	scope_start: int
	scope_end: int


@dataclass(frozen=True)
class HktUsage:
	"""An application `F<args>` spanning `[start, end)`; args are `[args_start, args_end)`."""

	name: str
	start: int
	end: int
	args_start: int
	args_end: int


def find_enclosing_scope(skeleton: str, pos: int) -> tuple[int, int]:
	"""
	Approximate the declaration scope around `pos`.

	Start: just after the nearest `}` or `;` before `pos`, else 0.
	End: just after the `}` closing the first block opened after `pos`, or the
	first top-level `;`, else the end of the buffer.
	"""
	start = max(skeleton.rfind("}", 0, pos), skeleton.rfind(";", 0, pos)) + 1
	depth = 0
	for j in range(pos, len(skeleton)):
		c = skeleton[j]
		if c == "{":
			depth += 1
		elif c == "}":
			if depth <= 1:
				return start, j + 1
			depth -= 1
		elif c == ";" and depth == 0:
			return start, j + 1
	return start, len(skeleton)


def find_matching_angle(skeleton: str, lt: int) -> Optional[int]:
	"""
	Index of the `>` matching the `<` at `lt`, or None.

	Gives up on a statement or block boundary at the outer level, which keeps
	comparisons such as `A < b; c > d` from being read as type arguments.
	"""
	depth = 0
	for j in range(lt, len(skeleton)):
		c = skeleton[j]
		if c == "<":
			depth += 1
		elif c == ">":
			if j > 0 and skeleton[j - 1] == "=":
				# arrow inside a function type argument
				continue
			depth -= 1
			if depth == 0:
				return j
		elif c in ";{}" and depth <= 1:
			return None
	return None


def _is_placeholder_args(inner: str) -> bool:
	return all(c == "_" or c == "," or c.isspace() for c in inner)


def find_hkt_declarations(skeleton: str) -> list[HktDecl]:
	decls: list[HktDecl] = []
	for m in _TYPE_APPLICATION.finditer(skeleton):
		lt = m.end() - 1
		placeholder = _PLACEHOLDER_ARGS.match(skeleton, lt)
		if placeholder is None:
			continue
		scope_start, scope_end = find_enclosing_scope(skeleton, m.start())
		decls.append(
			HktDecl(
				name=m.group(1),
				remove_start=lt,
				remove_end=placeholder.end(),
				scope_start=scope_start,
				scope_end=scope_end,
			)
		)
	return decls


def find_active_decl(decls: list[HktDecl], name: str, pos: int) -> Optional[HktDecl]:
	"""The narrowest declaration of `name` whose scope contains `pos`."""
	candidates = [d for d in decls if d.name == name and d.scope_start <= pos <= d.scope_end]
	if not candidates:
		return None
	return min(candidates, key=lambda d: d.scope_end - d.scope_start)


def find_hkt_usages(skeleton: str, decls: list[HktDecl]) -> list[HktUsage]:
	"""
	Every application of a declared constructor with real arguments.

	Applications nested inside other generics (`Array<F<A>>`, `F<F<A>>`) are
	found too; the scan does not skip over an argument list.
	"""
	if not decls:
		return []
	names = {d.name for d in decls}
	usages: list[HktUsage] = []
	for m in _TYPE_APPLICATION.finditer(skeleton):
		name = m.group(1)
		if name not in names:
			continue
		lt = m.end() - 1
		close = find_matching_angle(skeleton, lt)
		if close is None:
			continue
		if _is_placeholder_args(skeleton[lt + 1 : close]):
			continue
		if find_active_decl(decls, name, m.start()) is None:
			continue
		usages.append(HktUsage(name=name, start=m.start(), end=close + 1, args_start=lt + 1, args_end=close))
	return usages


def _render_usage(text: str, usage: HktUsage, usages: list[HktUsage], decls: list[HktDecl]) -> str:
	lo, hi = usage.args_start, usage.args_end
	inner = [
		Replacement(u.start - lo, u.end - lo, _render_usage(text, u, usages, decls))
		for u in usages
		if lo <= u.start and u.end <= hi
	]
	inner += [
		Replacement(d.remove_start - lo, d.remove_end - lo, "")
		for d in decls
		if lo <= d.remove_start and d.remove_end <= hi
	]
	args = apply_replacements(text[lo:hi], inner)
	return f"{HKT_CONSTRUCTOR}<{usage.name}, {args.strip()}>"


def rewrite_hkt(text: str) -> str:
	"""Run the HKT pass over `text`. Text without `F<_>` declarations is returned as-is."""
	skeleton = code_skeleton(text)
	decls = find_hkt_declarations(skeleton)
	if not decls:
		return text
	usages = find_hkt_usages(skeleton, decls)
	logger.debug("hkt pass: %d declaration(s), %d usage(s)", len(decls), len(usages))
	reps = [Replacement(d.remove_start, d.remove_end, "") for d in decls]
	reps += [Replacement(u.start, u.end, _render_usage(text, u, usages, decls)) for u in usages]
	return apply_replacements(text, reps)


__all__ = [
	"HktDecl",
	"HktUsage",
	"find_enclosing_scope",
	"find_matching_angle",
	"find_hkt_declarations",
	"find_active_decl",
	"find_hkt_usages",
	"rewrite_hkt",
]
