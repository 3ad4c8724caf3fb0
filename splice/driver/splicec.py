# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
`splicec`: compose `.part` sources.

parse (front-end) -> session pass (capture / force / merge) -> report

With --json, prints one JSON object per pass on stdout
(`exit_code`, `pass`, `diagnostics`, `units`); otherwise diagnostics go to
stderr as `file:line:column: severity: message` and the composed program is
summarized on stdout. With --watch the process stays alive, re-scans its
inputs and runs an incremental pass whenever their contents change; the
ModuleCache lives for the whole loop.
"""

from __future__ import annotations

import argparse
import hashlib
import json
import sys
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from splice.compose.hook import PartialsHook
from splice.compose.protocol import UnitResult
from splice.core.diagnostics import Diagnostic, diagnostic_to_json, format_diagnostic, has_errors
from splice.core.span import Span
from splice.core.unit import SourceUnit
from splice.parser import PART_SUFFIX, PARTIALS_ATTRIBUTE, discover_part_files, parse_part_files

from .config import DEFAULT_CONFIG_NAME, BuildConfig, find_build_config, load_build_config_json
from .pipeline import PassResult
from .session import BuildSession


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(prog="splicec", description="Compose partial types from .part sources")
	p.add_argument("source", type=Path, nargs="+", help="`.part` files or directories to scan")
	p.add_argument(
		"-M",
		"--module-path",
		dest="module_paths",
		action="append",
		type=Path,
		help="Module root directory (repeatable); module ids are inferred from file paths under these roots",
	)
	p.add_argument("--config", type=Path, default=None, help=f"Build config JSON (default: ./{DEFAULT_CONFIG_NAME})")
	p.add_argument("-j", "--jobs", type=int, default=None, help="Build independent units on N threads")
	p.add_argument("--emit-dir", type=Path, default=None, help="Write composed `<module>.part` sources here (other `*.part` files in it are removed)")
	p.add_argument(
		"--no-double-capture-warning",
		dest="warn_double_capture",
		action="store_false",
		default=None,
		help="Do not warn when a module is captured twice in one pass",
	)
	p.add_argument("--json", action="store_true", help="Emit diagnostics and units as JSON")
	p.add_argument("--watch", action="store_true", help="Keep running; rebuild incrementally when sources change")
	p.add_argument("--watch-interval", type=float, default=None, help="Seconds between source scans in --watch mode")
	p.add_argument("--max-passes", type=int, default=None, help="Stop --watch after N passes (including the first)")
	return p


def render_unit_source(unit: SourceUnit, result: UnitResult) -> str:
	"""
	Render the composed type as `.part` source.

	The composition attribute is consumed; other attributes are kept as
	written. Members are emitted in final order using their exact source text.
	"""
	lines = [f"module {unit.module_id}", ""]
	for attr in unit.attributes:
		if attr.name == PARTIALS_ATTRIBUTE:
			continue
		if attr.args:
			args = ", ".join(json.dumps(a) if not _is_dotted(a) else a for a in attr.args)
			lines.append(f"@{attr.name}({args})")
		else:
			lines.append(f"@{attr.name}")
	lines.append(f"type {unit.name} {{")
	for member in result.members:
		for text_line in member.text.splitlines():
			lines.append(f"\t{text_line}")
	lines.append("}")
	return "\n".join(lines) + "\n"


def _is_dotted(text: str) -> bool:
	return bool(text) and all(seg.isidentifier() for seg in text.split("."))


def _units_to_json(result: PassResult) -> Dict[str, dict]:
	out: Dict[str, dict] = {}
	for mid in sorted(result.units):
		res = result.units[mid]
		out[mid] = {
			"type": res.name,
			"state": res.state.value,
			"emitted": res.emitted,
			"members": [m.name for m in res.members],
		}
	return out


def _collect_sources(sources: List[Path]) -> List[Path]:
	return discover_part_files(sources)


def _snapshot(paths: List[Path]) -> Dict[Path, str]:
	snap: Dict[Path, str] = {}
	for p in paths:
		try:
			snap[p] = hashlib.sha256(p.read_bytes()).hexdigest()
		except FileNotFoundError:
			continue
	return snap


def _emit_sources(emit_dir: Path, units: List[SourceUnit], result: PassResult, *, inputs: List[Path]) -> None:
	"""
	Mirror the final program into `emit_dir`.

	The directory is owned by the build. A `*.part` file there that is not an
	emitted unit of this pass is removed, so outputs of deleted modules do not
	linger across `--watch` passes. Input files are never removed.
	"""
	emit_dir.mkdir(parents=True, exist_ok=True)
	by_id = {u.module_id: u for u in units}
	written = set()
	keep = {p.resolve() for p in inputs}
	for mid, res in result.units.items():
		unit = by_id.get(mid)
		if res.emitted and unit is not None:
			out_path = emit_dir / f"{mid}{PART_SUFFIX}"
			out_path.write_text(render_unit_source(unit, res), encoding="utf-8")
			written.add(out_path.name)
	for stale in emit_dir.glob(f"*{PART_SUFFIX}"):
		if stale.name not in written and stale.is_file() and stale.resolve() not in keep:
			stale.unlink()


def run_build_pass(
	session: BuildSession,
	sources: List[Path],
	config: BuildConfig,
) -> Tuple[int, Optional[PassResult], List[Diagnostic]]:
	"""Parse `sources` and run one session pass. Returns (exit_code, result, diagnostics)."""
	paths = _collect_sources(sources)
	units, diagnostics = parse_part_files(paths, module_paths=list(config.module_paths) or None)
	if has_errors(diagnostics):
		return 1, None, diagnostics
	result = session.run_pass(units)
	diagnostics = diagnostics + result.diagnostics
	if config.emit_dir is not None and not has_errors(diagnostics):
		_emit_sources(config.emit_dir, units, result, inputs=paths)
	return (1 if has_errors(diagnostics) else 0), result, diagnostics


def _report(as_json: bool, rc: int, pass_no: int, result: Optional[PassResult], diagnostics: List[Diagnostic]) -> None:
	if as_json:
		payload = {
			"exit_code": rc,
			"pass": pass_no,
			"diagnostics": [diagnostic_to_json(d, "compose") for d in diagnostics],
			"units": _units_to_json(result) if result is not None else {},
		}
		print(json.dumps(payload), flush=True)
		return
	for d in diagnostics:
		for line in format_diagnostic(d):
			print(line, file=sys.stderr)
	if result is None:
		return
	for mid, res in sorted(result.emitted().items()):
		names = ", ".join(m.name for m in res.members)
		print(f"{mid}: type {res.name} {{{names}}}")


def watch_loop(
	session: BuildSession,
	sources: List[Path],
	config: BuildConfig,
	*,
	report: Callable[[int, int, Optional[PassResult], List[Diagnostic]], None],
	max_passes: Optional[int] = None,
	sleep: Callable[[float], None] = time.sleep,
) -> int:
	"""
	Run the first pass, then rebuild whenever the scanned sources change.

	Returns the exit code of the last pass. Without `max_passes` this only
	returns on KeyboardInterrupt.
	"""
	rc, result, diagnostics = run_build_pass(session, sources, config)
	passes = 1
	report(rc, passes, result, diagnostics)
	snap = _snapshot(_collect_sources(sources))
	try:
		while max_passes is None or passes < max_passes:
			sleep(config.watch_interval)
			current = _snapshot(_collect_sources(sources))
			if current == snap:
				continue
			snap = current
			rc, result, diagnostics = run_build_pass(session, sources, config)
			passes += 1
			report(rc, passes, result, diagnostics)
	except KeyboardInterrupt:
		pass
	return rc


def main(argv: list[str] | None = None) -> int:
	parser = _build_parser()
	args = parser.parse_args(argv)

	config = BuildConfig()
	config_path = find_build_config(args.config, Path.cwd())
	if config_path is not None:
		if not config_path.exists():
			diag = Diagnostic(
				message=f"build config not found: {config_path}",
				phase="config",
				span=Span(file=str(config_path)),
			)
			_report(args.json, 1, 0, None, [diag])
			return 1
		try:
			config = load_build_config_json(config_path)
		except (ValueError, json.JSONDecodeError) as err:
			diag = Diagnostic(message=f"invalid build config: {err}", phase="config", span=Span(file=str(config_path)))
			_report(args.json, 1, 0, None, [diag])
			return 1
	if args.jobs is not None and args.jobs < 1:
		parser.error("--jobs must be >= 1")
	if args.watch_interval is not None and args.watch_interval <= 0:
		parser.error("--watch-interval must be positive")
	config = config.with_overrides(
		module_paths=tuple(args.module_paths) if args.module_paths else None,
		jobs=args.jobs,
		emit_dir=args.emit_dir,
		warn_double_capture=args.warn_double_capture,
		watch_interval=args.watch_interval,
	)

	session = BuildSession(
		hook_factory=lambda cache: PartialsHook(cache, warn_double_capture=config.warn_double_capture),
		jobs=config.jobs,
	)
	sources: List[Path] = list(args.source)

	def _print(rc: int, pass_no: int, result: Optional[PassResult], diagnostics: List[Diagnostic]) -> None:
		_report(args.json, rc, pass_no, result, diagnostics)

	if args.watch:
		return watch_loop(session, sources, config, report=_print, max_passes=args.max_passes)
	rc, result, diagnostics = run_build_pass(session, sources, config)
	_print(rc, 1, result, diagnostics)
	return rc


__all__ = ["main", "render_unit_source", "run_build_pass", "watch_loop"]
