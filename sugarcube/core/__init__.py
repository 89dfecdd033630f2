"""
sugarcube.core: shared spans/diagnostics/config used across the preprocessor,
the checker and the CLI.

Modules:
  - span: Span + line/column helpers
  - diagnostics: Diagnostic record
  - syntax: ScSyntax feature flags and reserved output names
  - errors: SugarcubeError hierarchy
"""

__all__ = [
    "span",
    "diagnostics",
    "syntax",
    "errors",
]
