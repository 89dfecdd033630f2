# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Feature flags controlling which syntax extensions are active, plus the
reserved names the rewritten output relies on.

`BINOP_CALLEE` and `HKT_CONSTRUCTOR` are part of the output contract: a small
runtime shim must define both, so they must not change between versions.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

from .errors import ConfigError

BINOP_CALLEE = "__binop__"
HKT_CONSTRUCTOR = "$"

DEFAULT_CONFIG_NAME = "sugarcube.json"


@dataclass(frozen=True)
class ScSyntax:
	"""Which extensions the preprocessor rewrites. All are on by default."""

	pipeline: bool = True
	cons: bool = True
	hkt: bool = True

	@classmethod
	def none(cls) -> "ScSyntax":
		"""Plain TypeScript: every extension disabled."""
		return cls(pipeline=False, cons=False, hkt=False)

	@property
	def any_operator(self) -> bool:
		return self.pipeline or self.cons

	def with_overrides(self, **flags: bool | None) -> "ScSyntax":
		"""Return a copy with the given flags replaced; `None` values are ignored."""
		changes = {k: v for k, v in flags.items() if v is not None}
		unknown = set(changes) - {f.name for f in fields(self)}
		if unknown:
			raise ConfigError(f"unknown syntax flag(s): {', '.join(sorted(unknown))}")
		return replace(self, **changes)

	def to_dict(self) -> dict[str, bool]:
		return asdict(self)

	@classmethod
	def from_dict(cls, data: Mapping[str, Any]) -> "ScSyntax":
		if not isinstance(data, Mapping):
			raise ConfigError("syntax config must be an object")
		known = {f.name for f in fields(cls)}
		unknown = set(data) - known
		if unknown:
			raise ConfigError(f"unknown syntax flag(s): {', '.join(sorted(unknown))}")
		for key, value in data.items():
			if not isinstance(value, bool):
				raise ConfigError(f"syntax flag '{key}' must be true or false, got {value!r}")
		return cls(**data)


def load_syntax_config(path: Path) -> ScSyntax:
	"""
	Load syntax flags from a JSON config file.

	Expected shape: `{"syntax": {"pipeline": true, "cons": true, "hkt": false}}`.
	Missing flags keep their defaults.
	"""
	try:
		obj = json.loads(path.read_text(encoding="utf-8"))
	except (OSError, UnicodeDecodeError) as err:
		raise ConfigError(f"cannot read config {path}: {err}") from err
	except json.JSONDecodeError as err:
		raise ConfigError(f"invalid JSON in {path}: {err}") from err
	if not isinstance(obj, dict):
		raise ConfigError(f"config {path} must contain a JSON object")
	unknown = set(obj) - {"syntax"}
	if unknown:
		raise ConfigError(f"unknown config key(s) in {path}: {', '.join(sorted(unknown))}")
	return ScSyntax.from_dict(obj.get("syntax", {}))


__all__ = [
	"BINOP_CALLEE",
	"HKT_CONSTRUCTOR",
	"DEFAULT_CONFIG_NAME",
	"ScSyntax",
	"load_syntax_config",
]
