# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lexical context tracking for the text-level rewrite passes.

The passes never tokenize the whole language; they only need to know which
characters are live code. This module classifies positions as code vs.
comments, strings, regex literals and template-literal text, tracking nested
`${...}` interpolations with a stack.

Most callers do not walk the buffer themselves: `code_skeleton` returns a
same-length copy of the text in which every non-code character is blanked,
so bracket matching and operator search can run on plain string indices and
still never look inside a string or comment.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional


class RegionKind(Enum):
	CODE = "code"
	LINE_COMMENT = "line_comment"
	BLOCK_COMMENT = "block_comment"
	STRING = "string"
	REGEX = "regex"
	TEMPLATE_TEXT = "template_text"
	TEMPLATE_INTERPOLATION = "template_interpolation"


@dataclass(frozen=True)
class Region:
	"""A maximal span `[start, end)` of one lexical kind."""

	kind: RegionKind
	start: int
	end: int


# A `/` opens a regex literal only after one of these (or at buffer start).
REGEX_PRECEDING_PUNCT = frozenset("([{,;:=!&|?+-*%^~<>")
REGEX_PRECEDING_KEYWORDS = frozenset(
	{
		"return",
		"case",
		"throw",
		"in",
		"of",
		"typeof",
		"void",
		"delete",
		"new",
		"else",
		"do",
		"instanceof",
		"yield",
		"await",
	}
)

_TEMPLATE_TEXT_RUN = re.compile(r"[^`\\$]+")


def is_word_char(c: str) -> bool:
	return c.isalnum() or c == "_" or c == "$"


def regex_allowed(text: str, i: int) -> bool:
	"""
	Decide whether the `/` at `i` starts a regex literal rather than a division.

	Looks only at the nearest preceding non-whitespace character (or word).
	"""
	j = i - 1
	while j >= 0 and text[j].isspace():
		j -= 1
	if j < 0:
		return True
	c = text[j]
	if c in REGEX_PRECEDING_PUNCT:
		return True
	if is_word_char(c):
		k = j
		while k > 0 and is_word_char(text[k - 1]):
			k -= 1
		if k > 0 and text[k - 1] == ".":
			# Member access (`obj.return`), not a keyword.
			return False
		return text[k : j + 1] in REGEX_PRECEDING_KEYWORDS
	return False


def scan_regex(text: str, i: int) -> Optional[int]:
	"""
	Scan a regex literal starting at the `/` at `i`.

	Returns the position after the closing `/` and its flags, the end of the
	buffer when the literal is unterminated, or None when a raw newline shows
	this was not a regex after all.
	"""
	n = len(text)
	j = i + 1
	in_class = False
	while j < n:
		c = text[j]
		if c == "\n":
			return None
		if c == "\\":
			j += 2
			continue
		if in_class:
			if c == "]":
				in_class = False
		elif c == "[":
			in_class = True
		elif c == "/":
			j += 1
			while j < n and text[j].isalpha():
				j += 1
			return j
		j += 1
	return n


def scan_non_code(text: str, i: int) -> Optional[tuple[RegionKind, int]]:
	"""
	If position `i` begins a comment, string or regex literal, return its kind
	and the position just after it; otherwise None.

	Template literals are not handled here; see `TemplateState`.
	"""
	n = len(text)
	if i >= n:
		return None
	c = text[i]
	if c == "/" and i + 1 < n:
		nxt = text[i + 1]
		if nxt == "/":
			nl = text.find("\n", i + 2)
			return RegionKind.LINE_COMMENT, (n if nl < 0 else nl + 1)
		if nxt == "*":
			close = text.find("*/", i + 2)
			return RegionKind.BLOCK_COMMENT, (n if close < 0 else close + 2)
	if c == '"' or c == "'":
		j = i + 1
		while j < n and text[j] != c:
			if text[j] == "\\":
				j += 1
			j += 1
		return RegionKind.STRING, min(j + 1, n)
	if c == "/" and regex_allowed(text, i):
		end = scan_regex(text, i)
		if end is not None:
			return RegionKind.REGEX, end
	return None


def skip_non_code(text: str, i: int) -> Optional[int]:
	"""Position just after the comment/string/regex starting at `i`, or None."""
	found = scan_non_code(text, i)
	return None if found is None else found[1]


class TemplateState:
	"""
	Nesting state for template literals.

	Each stack entry is one open template literal; its value is the brace
	depth inside the current interpolation:
	  - 0: in literal text (after the opening backtick or a closing `}`)
	  - > 0: inside `${...}` at that brace depth
	"""

	def __init__(self) -> None:
		self.stack: list[int] = []

	def in_template(self) -> bool:
		return bool(self.stack)

	def in_literal_text(self) -> bool:
		return bool(self.stack) and self.stack[-1] == 0

	def in_interpolation(self) -> bool:
		return bool(self.stack) and self.stack[-1] > 0

	def handle(self, text: str, i: int) -> Optional[int]:
		"""
		Feed the character at `i`.

		Returns how many characters template handling consumed (the caller must
		skip them), or None when the character is code to be processed normally.
		"""
		c = text[i]
		if not self.stack:
			if c == "`":
				self.stack.append(0)
				return 1
			return None

		if self.stack[-1] == 0:
			if c == "\\" and i + 1 < len(text):
				return 2
			if c == "$" and text.startswith("{", i + 1):
				self.stack[-1] = 1
				return 2
			if c == "`":
				self.stack.pop()
				return 1
			m = _TEMPLATE_TEXT_RUN.match(text, i)
			return len(m.group(0)) if m else 1

		if c == "`":
			# Nested template literal inside an interpolation.
			self.stack.append(0)
			return 1
		if c == "{":
			self.stack[-1] += 1
			return None
		if c == "}":
			self.stack[-1] -= 1
			if self.stack[-1] == 0:
				return 1
			return None
		return None


class ContextTracker:
	"""Classifies buffer positions left to right, template state included."""

	def __init__(self) -> None:
		self.templates = TemplateState()

	def classify(self, text: str, i: int) -> tuple[RegionKind, int]:
		"""Return the kind of the region starting at `i` and where to resume."""
		consumed = self.templates.handle(text, i)
		if consumed is not None:
			return RegionKind.TEMPLATE_TEXT, min(i + consumed, len(text))
		found = scan_non_code(text, i)
		if found is not None:
			return found
		if self.templates.in_interpolation():
			return RegionKind.TEMPLATE_INTERPOLATION, i + 1
		return RegionKind.CODE, i + 1

	def skip(self, text: str, i: int) -> Optional[int]:
		"""Like `skip_non_code`, but template aware. None means `i` is live code."""
		consumed = self.templates.handle(text, i)
		if consumed is not None:
			return min(i + consumed, len(text))
		return skip_non_code(text, i)


def iter_regions(text: str) -> Iterator[Region]:
	"""Yield the maximal lexical regions of `text` in order."""
	tracker = ContextTracker()
	n = len(text)
	i = 0
	cur_kind: Optional[RegionKind] = None
	cur_start = 0
	while i < n:
		kind, end = tracker.classify(text, i)
		if kind is not cur_kind:
			if cur_kind is not None:
				yield Region(cur_kind, cur_start, i)
			cur_kind, cur_start = kind, i
		i = end
	if cur_kind is not None:
		yield Region(cur_kind, cur_start, n)


def code_skeleton(text: str) -> str:
	"""
	Return `text` with every non-code character replaced by a space.

	Whitespace is kept as-is. The braces that open and close a template
	interpolation survive so that bracket matching sees `${ ... }` as a
	nested group. The result has the same length as `text`.
	"""
	tracker = ContextTracker()
	templates = tracker.templates
	out = list(text)
	n = len(text)
	i = 0
	while i < n:
		was_text = templates.in_literal_text()
		was_interp = templates.in_interpolation()
		end = tracker.skip(text, i)
		if end is None:
			i += 1
			continue
		for j in range(i, end):
			if not out[j].isspace():
				out[j] = " "
		# only template handling can consume `${` from literal text or a lone `}`
		if was_text and end == i + 2 and text.startswith("${", i):
			out[i + 1] = "{"
		elif was_interp and text[i] == "}" and templates.in_literal_text():
			out[i] = "}"
		i = end
	return "".join(out)


__all__ = [
	"RegionKind",
	"Region",
	"REGEX_PRECEDING_PUNCT",
	"REGEX_PRECEDING_KEYWORDS",
	"is_word_char",
	"regex_allowed",
	"scan_regex",
	"scan_non_code",
	"skip_non_code",
	"TemplateState",
	"ContextTracker",
	"iter_regions",
	"code_skeleton",
]
