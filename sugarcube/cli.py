# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
`sc` command-line driver.

Subcommands:
  preprocess FILE   write the rewritten text (stdout, `-o FILE`, or `--diff`)
  check FILE        preprocess, then validate the result with the checker
  parse FILE        preprocess, parse, pretty-print the lark tree
  regions FILE      dump the lexical classification of FILE

Exit codes: 0 success, 1 diagnostics reported, 2 usage/IO/internal-limit
failures. With --json, commands print `{"exit_code": .., "diagnostics": [...]}`
on stdout; otherwise diagnostics go to stderr as `file:line:column: severity: message`.
"""

from __future__ import annotations

import argparse
import difflib
import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable

from sugarcube.checker import check_source, parse_sugarcube
from sugarcube.core.diagnostics import Diagnostic, has_errors
from sugarcube.core.errors import ConfigError, SugarcubeError
from sugarcube.core.span import Span
from sugarcube.core.syntax import DEFAULT_CONFIG_NAME, ScSyntax, load_syntax_config
from sugarcube.preprocess import preprocess
from sugarcube.preprocess.lexical import iter_regions

logger = logging.getLogger("sugarcube.cli")

EXIT_OK = 0
EXIT_DIAGNOSTICS = 1
EXIT_FAILURE = 2


def _configure_logging(verbose: bool) -> None:
	logging.basicConfig(
		level=logging.DEBUG if verbose else logging.INFO,
		format="%(asctime)s %(levelname)s %(message)s",
	)


def _resolve_syntax(args: argparse.Namespace) -> ScSyntax:
	"""Config file (explicit, or ./sugarcube.json when present) + --no-* overrides."""
	if args.config is not None:
		if not args.config.is_file():
			raise ConfigError(f"config file not found: {args.config}")
		base = load_syntax_config(args.config)
	else:
		default = Path.cwd() / DEFAULT_CONFIG_NAME
		base = load_syntax_config(default) if default.is_file() else ScSyntax()
	return base.with_overrides(pipeline=args.pipeline, cons=args.cons, hkt=args.hkt)


def _emit(args: argparse.Namespace, exit_code: int, diagnostics: list[Diagnostic], **extra: Any) -> int:
	source = getattr(args, "source", None)
	if getattr(args, "json", False):
		payload: dict[str, Any] = {
			"exit_code": exit_code,
			"diagnostics": [d.to_json(source=source) for d in diagnostics],
		}
		payload.update(extra)
		print(json.dumps(payload))
	else:
		for d in diagnostics:
			print(d.format_human(source), file=sys.stderr)
	return exit_code


def _failure(args: argparse.Namespace, err: SugarcubeError | OSError | UnicodeDecodeError, phase: str) -> int:
	code = getattr(err, "code", None)
	if not isinstance(code, str):
		code = "E-IO"
	source = getattr(args, "source", None)
	diag = Diagnostic(
		message=str(err),
		code=code,
		phase=phase,
		severity="error",
		span=Span(file=str(source) if source is not None else None),
	)
	return _emit(args, EXIT_FAILURE, [diag])


def _cmd_preprocess(args: argparse.Namespace, source: str, syntax: ScSyntax) -> int:
	path = str(args.source)
	try:
		text = preprocess(source, syntax, filename=path)
	except SugarcubeError as err:
		return _failure(args, err, "preprocess")

	if args.check:
		diags = check_source(text, filename=path)
		if has_errors(diags):
			return _emit(args, EXIT_DIAGNOSTICS, diags)

	if args.diff:
		out = "".join(
			difflib.unified_diff(
				source.splitlines(keepends=True),
				text.splitlines(keepends=True),
				fromfile=path,
				tofile=f"{path} (preprocessed)",
			)
		)
	else:
		out = text

	if args.output is not None:
		try:
			args.output.write_text(out, encoding="utf-8")
		except OSError as err:
			return _failure(args, err, "io")
		logger.info("wrote %s", args.output)
		if args.json:
			return _emit(args, EXIT_OK, [], output_file=str(args.output))
		return EXIT_OK

	if args.json:
		return _emit(args, EXIT_OK, [], output=out)
	sys.stdout.write(out)
	return EXIT_OK


def _cmd_check(args: argparse.Namespace, source: str, syntax: ScSyntax) -> int:
	result = parse_sugarcube(source, str(args.source), syntax)
	if result.ok:
		logger.debug("%s: ok", args.source)
		return _emit(args, EXIT_OK, [])
	preprocess_failed = any(d.phase == "preprocess" for d in result.diagnostics)
	return _emit(args, EXIT_FAILURE if preprocess_failed else EXIT_DIAGNOSTICS, result.diagnostics)


def _cmd_parse(args: argparse.Namespace, source: str, syntax: ScSyntax) -> int:
	result = parse_sugarcube(source, str(args.source), syntax)
	if not result.ok:
		preprocess_failed = any(d.phase == "preprocess" for d in result.diagnostics)
		return _emit(args, EXIT_FAILURE if preprocess_failed else EXIT_DIAGNOSTICS, result.diagnostics)
	assert result.tree is not None
	print(result.tree.pretty(), end="")
	return EXIT_OK


def _cmd_regions(args: argparse.Namespace, source: str, syntax: ScSyntax) -> int:
	spans = [(r, Span.from_offsets(source, r.start, r.end)) for r in iter_regions(source)]
	if args.json:
		entries = [
			{
				"kind": r.kind.value,
				"start": r.start,
				"end": r.end,
				"line": span.line,
				"column": span.column,
				"end_line": span.end_line,
				"end_column": span.end_column,
			}
			for r, span in spans
		]
		return _emit(args, EXIT_OK, [], regions=entries)
	for r, span in spans:
		snippet = source[r.start : r.end]
		if len(snippet) > 40:
			snippet = snippet[:37] + "..."
		print(f"{span.line}:{span.column}\t{r.kind.value}\t[{r.start}, {r.end})\t{snippet!r}")
	return EXIT_OK


_COMMANDS: dict[str, Callable[[argparse.Namespace, str, ScSyntax], int]] = {
	"preprocess": _cmd_preprocess,
	"check": _cmd_check,
	"parse": _cmd_parse,
	"regions": _cmd_regions,
}


def _build_parser() -> argparse.ArgumentParser:
	common = argparse.ArgumentParser(add_help=False)
	common.add_argument("source", type=Path, help="Path to a sugarcube TypeScript source file")
	common.add_argument(
		"--no-pipeline",
		dest="pipeline",
		action="store_false",
		default=None,
		help="Leave the `|>` pipeline operator alone",
	)
	common.add_argument(
		"--no-cons",
		dest="cons",
		action="store_false",
		default=None,
		help="Leave the `::` cons operator alone",
	)
	common.add_argument(
		"--no-hkt",
		dest="hkt",
		action="store_false",
		default=None,
		help="Leave `F<_>` type-constructor parameters alone",
	)
	common.add_argument(
		"--config",
		type=Path,
		default=None,
		help=f"Syntax config JSON (default: ./{DEFAULT_CONFIG_NAME} when present)",
	)
	common.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

	parser = argparse.ArgumentParser(prog="sc", description="sugarcube TypeScript syntax-extension preprocessor")
	sub = parser.add_subparsers(dest="command", required=True)

	p = sub.add_parser("preprocess", parents=[common], help="Rewrite extensions into standard TypeScript")
	p.add_argument("-o", "--output", type=Path, default=None, help="Write output here instead of stdout")
	p.add_argument("--diff", action="store_true", help="Print a unified diff instead of the rewritten text")
	p.add_argument("--check", action="store_true", help="Also validate the output with the standard-syntax checker")
	p.add_argument("--json", action="store_true", help="Emit a JSON result on stdout")

	p = sub.add_parser("check", parents=[common], help="Preprocess, then parse as standard TypeScript")
	p.add_argument("--json", action="store_true", help="Emit diagnostics as JSON")

	sub.add_parser("parse", parents=[common], help="Preprocess, parse and pretty-print the parse tree")

	p = sub.add_parser("regions", parents=[common], help="Dump the lexical region classification")
	p.add_argument("--json", action="store_true", help="Emit regions as JSON")

	return parser


def main(argv: list[str] | None = None) -> int:
	parser = _build_parser()
	args = parser.parse_args(argv)
	_configure_logging(args.verbose)

	try:
		syntax = _resolve_syntax(args)
	except ConfigError as err:
		return _failure(args, err, "config")
	logger.debug("syntax: %s", syntax.to_dict())

	try:
		source = args.source.read_text(encoding="utf-8")
	except (OSError, UnicodeDecodeError) as err:
		return _failure(args, err, "io")

	return _COMMANDS[args.command](args, source, syntax)


__all__ = ["main", "EXIT_OK", "EXIT_DIAGNOSTICS", "EXIT_FAILURE"]
