"""
Common diagnostic structure for the checker and the command-line driver.

A message plus optional span/metadata. Diagnostics produced after
preprocessing point into the *preprocessed* text, not the original source.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .span import Span


@dataclass
class Diagnostic:
	"""Represents a diagnostic (error/warning/etc.)."""

	message: str
	code: str | None = None
	# Optional phase label ("preprocess", "parser", "config", ...).
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Source location (Span() denotes unknown).
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		# Normalize missing spans to the sentinel Span() so downstream tooling
		# can rely on a structured object instead of None.
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def format_human(self, source: Path | str | None = None) -> str:
		"""Render as `file:line:column: severity: message`."""
		file = self.span.file or (str(source) if source is not None else "<input>")
		line = self.span.line if self.span.line is not None else "?"
		column = self.span.column if self.span.column is not None else "?"
		text = f"{file}:{line}:{column}: {self.severity}: {self.message}"
		for note in self.notes:
			text += f"\n  note: {note}"
		return text

	def to_json(self, phase: str | None = None, source: Path | str | None = None) -> dict[str, Any]:
		"""Render to a structured JSON-friendly dict."""
		file = self.span.file
		if file is None and source is not None:
			file = str(source)
		return {
			"phase": self.phase or phase,
			"code": self.code,
			"message": self.message,
			"severity": self.severity,
			"file": file,
			"line": self.span.line,
			"column": self.span.column,
			"notes": list(self.notes),
		}


def has_errors(diagnostics: list[Diagnostic]) -> bool:
	return any(d.severity == "error" for d in diagnostics)


__all__ = ["Diagnostic", "has_errors"]
