"""
Common diagnostic structure for front-end, composition and driver passes.

A diagnostic is a message plus span/metadata. There is no logging layer: every
observable event (parse errors, stale cache entries, double captures, failed
forces) is reported as a Diagnostic and rendered by the driver.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .span import Span

# Severities understood by the driver. Only "error" fails a build.
SEVERITIES = ("error", "warning", "info", "note")


@dataclass
class Diagnostic:
	"""Represents a build diagnostic (error/warning/info/note)."""

	message: str
	code: str | None = None
	# Optional diagnostic phase label ("parser", "compose", "config").
	#
	# Composition diagnostics are produced from inside nested build hooks, so
	# the phase is attached at the source rather than inferred from the sink.
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Source location (Span() denotes unknown).
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()
		if self.severity not in SEVERITIES:
			raise ValueError(f"unknown diagnostic severity '{self.severity}'")


def has_errors(diagnostics: Iterable[Diagnostic]) -> bool:
	return any(d.severity == "error" for d in diagnostics)


def format_diagnostic(diag: Diagnostic) -> list[str]:
	"""
	Render a diagnostic as human-readable lines.

	First line is `file:line:column: severity: message`; each note follows on
	its own indented line.
	"""
	lines = [f"{diag.span.short()}: {diag.severity}: {diag.message}"]
	for note in diag.notes:
		lines.append(f"  note: {note}")
	return lines


def diagnostic_to_json(diag: Diagnostic, phase: str) -> dict:
	"""Render a Diagnostic to a structured JSON-friendly dict."""
	return {
		"phase": diag.phase or phase,
		"code": diag.code,
		"message": diag.message,
		"severity": diag.severity,
		"file": diag.span.file,
		"line": diag.span.line,
		"column": diag.span.column,
		"notes": list(diag.notes),
	}


__all__ = ["Diagnostic", "SEVERITIES", "has_errors", "format_diagnostic", "diagnostic_to_json"]
