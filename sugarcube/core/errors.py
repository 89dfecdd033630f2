# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Exceptions raised by the preprocessor.

The lexical layer never raises; these cover the few places where continuing
would silently produce wrong output.
"""

from __future__ import annotations


class SugarcubeError(ValueError):
	"""Base class for user-facing preprocessing errors."""

	code = "E-SC"


class RewriteLimitExceeded(SugarcubeError):
	"""
	The operator rewrite loop hit its iteration cap before reaching a fixpoint.

	`partial` holds the text as rewritten so far; it still contains custom
	operators and must not be handed to a standard parser.
	"""

	code = "E-SC-REWRITE-LIMIT"

	def __init__(self, message: str, *, partial: str, remaining: int, iterations: int) -> None:
		super().__init__(message)
		self.partial = partial
		self.remaining = remaining
		self.iterations = iterations


class OverlappingRewriteError(SugarcubeError):
	"""Two replacements in one pass overlap without one containing the other."""

	code = "E-SC-OVERLAP"

	def __init__(self, message: str, *, first: tuple[int, int], second: tuple[int, int]) -> None:
		super().__init__(message)
		self.first = first
		self.second = second


class ConfigError(SugarcubeError):
	"""Malformed configuration file."""

	code = "E-SC-CONFIG"


__all__ = ["SugarcubeError", "RewriteLimitExceeded", "OverlappingRewriteError", "ConfigError"]
