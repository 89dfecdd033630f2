# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Custom binary operator pass.

Rewrites `left |> right` and `left :: right` into
`__binop__(left, "|>", right)` / `__binop__(left, "::", right)`, one
occurrence at a time, until no custom operator is left in live code.

Operators:
  |>   pipeline   precedence 1   left-associative
  ::   cons       precedence 5   right-associative

Each iteration picks the highest-precedence occurrence (leftmost for a
left-associative operator, rightmost for a right-associative one), extends
it to its operands with a bracket-aware scan and splices in the call. The
emitted string literal hides the rewritten operator from the next scan.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from sugarcube.core.errors import RewriteLimitExceeded
from sugarcube.core.syntax import BINOP_CALLEE, ScSyntax

from .edits import splice
from .lexical import code_skeleton, is_word_char

logger = logging.getLogger(__name__)

MAX_REWRITE_ITERATIONS = 1000

_OPENERS = "([{"
_CLOSERS = ")]}"

# Keywords that end a left operand when met scanning backward.
LEFT_STOP_KEYWORDS = frozenset({"return", "throw", "case", "yield", "else", "do", "of", "default"})

# A newline followed by one of these ends a right operand.
STATEMENT_START_KEYWORDS = frozenset(
	{
		"const",
		"let",
		"var",
		"function",
		"class",
		"interface",
		"type",
		"enum",
		"export",
		"import",
		"declare",
		"return",
		"if",
		"for",
		"while",
		"do",
		"switch",
		"try",
		"throw",
		"break",
		"continue",
	}
)


class Op(Enum):
	PIPELINE = ("|>", 1, False)
	CONS = ("::", 5, True)

	def __init__(self, text: str, precedence: int, right_assoc: bool) -> None:
		self.text = text
		self.precedence = precedence
		self.right_assoc = right_assoc


@dataclass(frozen=True)
class OpOccurrence:
	op: Op
	start: int
	end: int


@dataclass
class _Frame:
	opener: str
	type_brace: bool = False
	ternaries: int = 0
	# `case x` / `default` seen; the next plain colon ends the label
	case_label: bool = False


@dataclass
class TypeContext:
	"""
	Scan state for telling type positions from expressions.

	Custom operators are only recognized while `active` is False.
	"""

	annotation_depth: int = 0
	angle_depth: int = 0
	in_type_alias: bool = False
	in_interface: bool = False
	frames: list[_Frame] = field(default_factory=lambda: [_Frame("")])

	@property
	def frame(self) -> _Frame:
		return self.frames[-1]

	@property
	def in_type_body(self) -> bool:
		return any(f.type_brace for f in self.frames)

	@property
	def active(self) -> bool:
		return (
			self.annotation_depth > 0
			or self.angle_depth > 0
			or self.in_type_alias
			or self.in_interface
			or self.in_type_body
		)

	def end_statement(self) -> None:
		self.annotation_depth = 0
		self.angle_depth = 0
		self.in_type_alias = False
		self.in_interface = False
		self.frame.ternaries = 0
		self.frame.case_label = False

	def leave_annotation(self) -> None:
		if not self.in_type_alias and self.annotation_depth > 0:
			self.annotation_depth -= 1

	def open(self, opener: str, type_brace: bool = False) -> None:
		self.frames.append(_Frame(opener, type_brace))

	def close(self) -> Optional[_Frame]:
		if len(self.frames) > 1:
			return self.frames.pop()
		return None


def _next_word(skeleton: str, pos: int) -> str:
	n = len(skeleton)
	while pos < n and skeleton[pos].isspace():
		pos += 1
	end = pos
	while end < n and is_word_char(skeleton[end]):
		end += 1
	return skeleton[pos:end]


def _is_declaration_keyword(skeleton: str, start: int, end: int) -> bool:
	"""`type Foo` / `interface Foo`, as opposed to a property or variable named `type`."""
	if start > 0 and skeleton[start - 1] == ".":
		return False
	follow = _next_word(skeleton, end)
	return bool(follow) and not follow[0].isdigit()


def _is_ternary_question(skeleton: str, i: int) -> bool:
	n = len(skeleton)
	nxt = skeleton[i + 1] if i + 1 < n else ""
	if nxt == "." or nxt == "?":
		return False
	if i > 0 and skeleton[i - 1] == "?":
		return False
	k = i + 1
	while k < n and skeleton[k].isspace():
		k += 1
	# `x?: T`, `(a?, b?)`: optional markers
	return k >= n or skeleton[k] not in ":,)"


def _is_label_colon(skeleton: str, pos: int) -> bool:
	"""`default:` as a switch label, not `export default` or `default :: xs`."""
	k = pos
	while k < len(skeleton) and skeleton[k].isspace():
		k += 1
	return skeleton.startswith(":", k) and not skeleton.startswith("::", k)


def _is_object_key_colon(skeleton: str, i: int, ctx: TypeContext) -> bool:
	frame = ctx.frame
	if frame.opener != "{" or frame.type_brace:
		return False
	j = i - 1
	while j >= 0 and skeleton[j].isspace():
		j -= 1
	if j >= 0 and is_word_char(skeleton[j]):
		while j >= 0 and is_word_char(skeleton[j]):
			j -= 1
		while j >= 0 and skeleton[j].isspace():
			j -= 1
	# blanked string keys leave the `{` / `,` directly before the colon
	return j >= 0 and skeleton[j] in "{,"


def _scan_occurrences(skeleton: str, syntax: ScSyntax) -> list[OpOccurrence]:
	occurrences: list[OpOccurrence] = []
	ctx = TypeContext()
	n = len(skeleton)
	i = 0
	while i < n:
		c = skeleton[i]
		if is_word_char(c):
			end = i + 1
			while end < n and is_word_char(skeleton[end]):
				end += 1
			word = skeleton[i:end]
			if word in ("type", "interface") and _is_declaration_keyword(skeleton, i, end):
				if word == "type":
					ctx.in_type_alias = True
				else:
					ctx.in_interface = True
				ctx.annotation_depth = 0
			elif word in ("case", "default") and not (i > 0 and skeleton[i - 1] == "."):
				if word == "case" or _is_label_colon(skeleton, end):
					ctx.frame.case_label = True
			i = end
			continue

		nxt = skeleton[i + 1] if i + 1 < n else ""
		if c == "|" and nxt == ">":
			if syntax.pipeline and not ctx.active:
				occurrences.append(OpOccurrence(Op.PIPELINE, i, i + 2))
			i += 2
			continue
		if c == ":" and nxt == ":":
			if syntax.cons and not ctx.active:
				occurrences.append(OpOccurrence(Op.CONS, i, i + 2))
			i += 2
			continue

		if c == ";":
			ctx.end_statement()
		elif c == "\n":
			if not ctx.in_type_body and _next_word(skeleton, i + 1) in STATEMENT_START_KEYWORDS:
				ctx.end_statement()
		elif c == ":":
			if ctx.frame.ternaries:
				ctx.frame.ternaries -= 1
			elif ctx.frame.case_label:
				ctx.frame.case_label = False
			elif not _is_object_key_colon(skeleton, i, ctx):
				ctx.annotation_depth += 1
		elif c == "?":
			if _is_ternary_question(skeleton, i):
				ctx.frame.ternaries += 1
		elif c == "<":
			if i > 0 and is_word_char(skeleton[i - 1]):
				ctx.angle_depth += 1
		elif c == ">":
			if ctx.angle_depth > 0 and skeleton[i - 1] != "=":
				ctx.angle_depth -= 1
		elif c == "(" or c == "[":
			ctx.open(c)
		elif c == "{":
			type_brace = ctx.in_interface or ctx.in_type_alias or ctx.in_type_body
			if not type_brace:
				ctx.annotation_depth = 0
			ctx.angle_depth = 0
			ctx.open(c, type_brace)
		elif c == ")" or c == "]" or c == "}":
			if c != "]":
				ctx.leave_annotation()
			closed = ctx.close()
			if c == "}":
				ctx.angle_depth = 0
				if closed is not None and closed.type_brace and not ctx.in_type_body:
					ctx.end_statement()
		elif c == "=" or c == ",":
			ctx.leave_annotation()
		i += 1
	return occurrences


def find_operator_occurrences(text: str, syntax: ScSyntax) -> list[OpOccurrence]:
	"""All custom operators in live, non-type code positions of `text`."""
	return _scan_occurrences(code_skeleton(text), syntax)


def _priority(occ: OpOccurrence) -> tuple[int, int]:
	return (occ.op.precedence, occ.start if occ.op.right_assoc else -occ.start)


def select_next_operator(occurrences: Iterable[OpOccurrence]) -> Optional[OpOccurrence]:
	occurrences = list(occurrences)
	if not occurrences:
		return None
	return max(occurrences, key=_priority)


def _is_assignment_eq(skeleton: str, j: int) -> bool:
	"""Whether the `=` at `j` is an assignment operator (`=`, `+=`, `<<=`, ...)."""
	nxt = skeleton[j + 1] if j + 1 < len(skeleton) else ""
	if nxt == "=":
		return False
	prev = skeleton[j - 1] if j > 0 else ""
	if prev == "=" or prev == "!":
		return False
	if prev == "<" or prev == ">":
		# `<<=` / `>>=` assign; `<=` / `>=` compare
		return j > 1 and skeleton[j - 2] == prev
	return True


def _skip_space(skeleton: str, pos: int, limit: int) -> int:
	while pos < limit and skeleton[pos].isspace():
		pos += 1
	return pos


def find_left_operand(skeleton: str, occ: OpOccurrence) -> int:
	"""Start offset of the left operand of `occ` (`skeleton` is the code skeleton)."""
	op = occ.op
	depth = 0
	j = occ.start - 1
	while j >= 0 and skeleton[j].isspace():
		j -= 1
	while j >= 0:
		c = skeleton[j]
		if c in _CLOSERS:
			depth += 1
		elif c in _OPENERS:
			if depth == 0:
				break
			depth -= 1
		elif depth == 0:
			if c == "," or c == ";":
				break
			if c == "=":
				if j + 1 < len(skeleton) and skeleton[j + 1] == ">":
					j += 1
					break
				if _is_assignment_eq(skeleton, j):
					break
			elif c == ">" and j > 0 and skeleton[j - 1] == "=":
				# arrow body starts after `=>`
				break
			elif c == ">" and j > 0 and skeleton[j - 1] == "|":
				if Op.PIPELINE.precedence <= op.precedence:
					break
				j -= 2
				continue
			elif c == ":":
				if j > 0 and skeleton[j - 1] == ":":
					if Op.CONS.precedence <= op.precedence:
						break
					j -= 2
					continue
				break
			elif c == "?" and _is_ternary_question(skeleton, j):
				break
			elif is_word_char(c):
				k = j
				while k > 0 and is_word_char(skeleton[k - 1]):
					k -= 1
				if skeleton[k : j + 1] in LEFT_STOP_KEYWORDS and not (k > 0 and skeleton[k - 1] == "."):
					break
				j = k - 1
				continue
		j -= 1
	return _skip_space(skeleton, j + 1, occ.start)


def _stops_right_operand(other: Op, op: Op) -> bool:
	if op.right_assoc:
		return other.precedence < op.precedence
	return other.precedence <= op.precedence


def find_right_operand(skeleton: str, occ: OpOccurrence) -> int:
	"""End offset (exclusive, trailing whitespace excluded) of the right operand of `occ`."""
	n = len(skeleton)
	depth = 0
	ternaries = 0
	j = occ.end
	while j < n:
		c = skeleton[j]
		if c in _OPENERS:
			depth += 1
		elif c in _CLOSERS:
			if depth == 0:
				break
			depth -= 1
		elif depth == 0:
			if c == "," or c == ";":
				break
			if c == "|" and skeleton.startswith(">", j + 1):
				if _stops_right_operand(Op.PIPELINE, occ.op):
					break
				j += 2
				continue
			if c == ":":
				if skeleton.startswith(":", j + 1):
					if _stops_right_operand(Op.CONS, occ.op):
						break
					j += 2
					continue
				if ternaries == 0:
					break
				ternaries -= 1
			elif c == "?" and _is_ternary_question(skeleton, j):
				ternaries += 1
			elif c == "\n" and _next_word(skeleton, j + 1) in STATEMENT_START_KEYWORDS:
				break
		j += 1
	end = j
	while end > occ.end and skeleton[end - 1].isspace():
		end -= 1
	return end


def rewrite_operators(
	text: str,
	syntax: ScSyntax,
	*,
	max_iterations: int = MAX_REWRITE_ITERATIONS,
) -> str:
	"""
	Rewrite custom operators until none remain.

	Raises `RewriteLimitExceeded` if operators are still present after
	`max_iterations` rewrites.
	"""
	if not syntax.any_operator:
		return text
	result = text
	for iteration in range(max_iterations):
		skeleton = code_skeleton(result)
		occ = select_next_operator(_scan_occurrences(skeleton, syntax))
		if occ is None:
			logger.debug("operator pass reached fixpoint after %d rewrite(s)", iteration)
			return result
		left = find_left_operand(skeleton, occ)
		right = find_right_operand(skeleton, occ)
		left_text = result[left : occ.start].strip()
		right_text = result[occ.end : right].strip()
		call = f'{BINOP_CALLEE}({left_text}, "{occ.op.text}", {right_text})'
		result = splice(result, left, right, call)

	remaining = len(find_operator_occurrences(result, syntax))
	if remaining == 0:
		return result
	raise RewriteLimitExceeded(
		f"operator rewriting did not converge after {max_iterations} iteration(s); "
		f"{remaining} custom operator(s) left",
		partial=result,
		remaining=remaining,
		iterations=max_iterations,
	)


__all__ = [
	"MAX_REWRITE_ITERATIONS",
	"Op",
	"OpOccurrence",
	"TypeContext",
	"find_operator_occurrences",
	"select_next_operator",
	"find_left_operand",
	"find_right_operand",
	"rewrite_operators",
]
