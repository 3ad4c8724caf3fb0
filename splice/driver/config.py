# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Project build configuration.

Pinned policy (MVP):
- the config file is project-local (`./splice.json`) unless `--config` names
  one explicitly; an explicit path must exist,
- relative paths in the file are resolved against the file's directory,
- CLI flags override file values.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional, Tuple

DEFAULT_CONFIG_NAME = "splice.json"
CONFIG_FORMAT = "splice-config"
CONFIG_VERSION = 0


@dataclass(frozen=True)
class BuildConfig:
	module_paths: Tuple[Path, ...] = ()
	jobs: int = 1
	emit_dir: Optional[Path] = None
	warn_double_capture: bool = True
	watch_interval: float = 1.0

	def with_overrides(self, **overrides: Any) -> "BuildConfig":
		"""Return a copy with every non-None override applied."""
		changes = {k: v for k, v in overrides.items() if v is not None}
		return replace(self, **changes)


def load_build_config_json(path: Path) -> BuildConfig:
	"""
	Load a build config file.

	Format (pinned for v0, JSON):
	{
	  "format": "splice-config",
	  "version": 0,
	  "module_paths": ["src", "vendor"],   // optional
	  "jobs": 4,                            // optional, >= 1
	  "emit_dir": "build/composed",         // optional
	  "warn_double_capture": true,          // optional
	  "watch_interval": 0.5                 // optional, seconds > 0
	}
	"""
	obj = json.loads(path.read_text(encoding="utf-8"))
	if not isinstance(obj, dict):
		raise ValueError("build config must be a JSON object")
	if obj.get("format") != CONFIG_FORMAT or obj.get("version") != CONFIG_VERSION:
		raise ValueError("unsupported build config format/version")
	base = path.resolve().parent

	module_paths: list[Path] = []
	mp_obj = obj.get("module_paths") or []
	if not isinstance(mp_obj, list) or not all(isinstance(p, str) for p in mp_obj):
		raise ValueError("module_paths must be a list of strings")
	for p in mp_obj:
		module_paths.append(base / p)

	jobs = obj.get("jobs", 1)
	if isinstance(jobs, bool) or not isinstance(jobs, int) or jobs < 1:
		raise ValueError("jobs must be an integer >= 1")

	emit_dir: Optional[Path] = None
	emit_obj = obj.get("emit_dir")
	if emit_obj is not None:
		if not isinstance(emit_obj, str) or not emit_obj:
			raise ValueError("emit_dir must be a non-empty string")
		emit_dir = base / emit_obj

	warn = obj.get("warn_double_capture", True)
	if not isinstance(warn, bool):
		raise ValueError("warn_double_capture must be a boolean")

	interval = obj.get("watch_interval", 1.0)
	if isinstance(interval, bool) or not isinstance(interval, (int, float)) or interval <= 0:
		raise ValueError("watch_interval must be a positive number")

	return BuildConfig(
		module_paths=tuple(module_paths),
		jobs=jobs,
		emit_dir=emit_dir,
		warn_double_capture=warn,
		watch_interval=float(interval),
	)


def find_build_config(explicit: Optional[Path], cwd: Path) -> Optional[Path]:
	"""
	Pick the config file to load.

	Returns `explicit` as-is (the caller reports a missing explicit file), the
	project-local default when it exists, or None.
	"""
	if explicit is not None:
		return explicit
	default = cwd / DEFAULT_CONFIG_NAME
	if default.exists():
		return default
	return None


__all__ = ["BuildConfig", "DEFAULT_CONFIG_NAME", "find_build_config", "load_build_config_json"]
