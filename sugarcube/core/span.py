# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lightweight source span representation used by diagnostics.

A Span carries best-effort file/line/column info plus, optionally, the
half-open buffer offsets it was derived from. Offsets index a Python `str`
(code points), which is also how the preprocessor splices replacements.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source span (best-effort file/line/column plus raw parser loc)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None
	start: Optional[int] = None
	end: Optional[int] = None
	raw: Any = None

	@classmethod
	def from_loc(cls, loc: Any, *, file: Optional[str] = None) -> "Span":
		"""
		Construct a Span from an existing parser/location object.

		If `loc` is already a Span, it is returned unchanged; otherwise the
		parser-specific object (e.g. a lark `UnexpectedInput`) is stored in
		`raw` so downstream consumers can recover richer data when available.
		"""
		if loc is None:
			return cls(file=file)
		if isinstance(loc, cls):
			return loc
		line = getattr(loc, "line", None)
		column = getattr(loc, "column", None)
		# lark reports -1 for positions it could not determine.
		if isinstance(line, int) and line < 0:
			line = None
		if isinstance(column, int) and column < 0:
			column = None
		pos = getattr(loc, "pos_in_stream", None)
		return cls(
			file=file or getattr(loc, "file", None) or getattr(loc, "filename", None) or None,
			line=line,
			column=column,
			end_line=getattr(loc, "end_line", None),
			end_column=getattr(loc, "end_column", None),
			start=pos if isinstance(pos, int) and pos >= 0 else None,
			raw=loc,
		)

	@classmethod
	def from_offsets(cls, text: str, start: int, end: Optional[int] = None, *, file: Optional[str] = None) -> "Span":
		"""Build a Span for `text[start:end]` with 1-based line/column numbers."""
		if end is None:
			end = start
		line, column = line_column(text, start)
		end_line, end_column = line_column(text, end)
		return cls(
			file=file,
			line=line,
			column=column,
			end_line=end_line,
			end_column=end_column,
			start=start,
			end=end,
		)


def line_column(text: str, offset: int) -> tuple[int, int]:
	"""Return the 1-based (line, column) of `offset` in `text`."""
	offset = max(0, min(offset, len(text)))
	line = text.count("\n", 0, offset) + 1
	last_nl = text.rfind("\n", 0, offset)
	return line, offset - last_nl


__all__ = ["Span", "line_column"]
