# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Replacement sets over a source buffer.

A pass collects `Replacement`s against one buffer, reduces them to a
non-overlapping set and splices them in descending start order so that the
offsets of lower regions stay valid while higher ones are substituted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from sugarcube.core.errors import OverlappingRewriteError


@dataclass(frozen=True)
class Replacement:
	"""Replace `source[start:end]` with `text`."""

	start: int
	end: int
	text: str

	def contains(self, other: "Replacement") -> bool:
		return self.start <= other.start and other.end <= self.end

	def overlaps(self, other: "Replacement") -> bool:
		return self.start < other.end and other.start < self.end


def keep_outermost(replacements: Iterable[Replacement]) -> list[Replacement]:
	"""
	Drop every replacement fully contained in another one and return the rest
	sorted by descending start.

	Raises `OverlappingRewriteError` when two survivors intersect without one
	containing the other; there is no correct way to apply both.
	"""
	# Outer spans first: ascending start, longest first on ties.
	ordered = sorted(replacements, key=lambda r: (r.start, -r.end))
	kept: list[Replacement] = []
	for rep in ordered:
		if any(k.contains(rep) for k in kept):
			continue
		for k in kept:
			if k.overlaps(rep):
				raise OverlappingRewriteError(
					f"overlapping rewrites at [{k.start}, {k.end}) and [{rep.start}, {rep.end})",
					first=(k.start, k.end),
					second=(rep.start, rep.end),
				)
		kept.append(rep)
	kept.reverse()
	return kept


def apply_replacements(source: str, replacements: Iterable[Replacement]) -> str:
	"""Apply a replacement set (see `keep_outermost`) to `source`."""
	result = source
	for rep in keep_outermost(replacements):
		result = result[: rep.start] + rep.text + result[rep.end :]
	return result


def splice(source: str, start: int, end: int, text: str) -> str:
	return source[:start] + text + source[end:]


__all__ = ["Replacement", "keep_outermost", "apply_replacements", "splice"]
