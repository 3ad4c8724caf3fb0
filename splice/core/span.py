# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lightweight source span representation used by diagnostics and members.

A Span can wrap whatever parser/location object the front-end provides via the
`raw` field while also carrying optional file/line/column info when available.
Members carry a Span as their source-location tag; composition relocates
members by swapping that tag, never by editing it in place.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source span (best-effort file/line/column plus raw parser loc)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None
	raw: Any = None

	@classmethod
	def from_loc(cls, loc: Any) -> "Span":
		"""
		Construct a Span from an existing parser/location object.

		If `loc` is already a Span, it is returned unchanged; otherwise the
		parser-specific object is stored in `raw`.
		"""
		if loc is None:
			return cls()
		if isinstance(loc, cls):
			return loc
		return cls(
			file=getattr(loc, "file", None) or getattr(loc, "filename", None) or None,
			line=getattr(loc, "line", None),
			column=getattr(loc, "column", None),
			end_line=getattr(loc, "end_line", None),
			end_column=getattr(loc, "end_column", None),
			raw=loc,
		)

	def in_file(self, path: str) -> "Span":
		"""Return this span anchored to `path` unless it already names a file."""
		if self.file is not None:
			return self
		return Span(
			file=path,
			line=self.line,
			column=self.column,
			end_line=self.end_line,
			end_column=self.end_column,
			raw=self.raw,
		)

	def short(self) -> str:
		"""Format as `file:line:column` (unknown parts become `?`)."""
		f = self.file or "<unknown>"
		l = self.line if self.line is not None else "?"
		c = self.column if self.column is not None else "?"
		return f"{f}:{l}:{c}"


__all__ = ["Span"]
