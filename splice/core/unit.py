# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Build units and their composition kind.

The front-end produces one SourceUnit per module. Participating units carry a
tagged `kind`:

- `HostKind(guests, span)`: the type declares `@partials(...)`; `guests` is the
  ordered guest module list and `span` the attribute location.
- `GuestKind()`: the type is `partial` without a composition attribute.

Types that neither say `partial` nor carry `@partials` have `kind=None`; the
pipeline emits them untouched and never invokes the build hook for them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple, Union

from .member import Member
from .span import Span


@dataclass(frozen=True)
class HostKind:
	guests: Tuple[str, ...]
	span: Span = Span()


@dataclass(frozen=True)
class GuestKind:
	pass


UnitKind = Union[HostKind, GuestKind]


@dataclass(frozen=True)
class Attribute:
	"""A `@name(arg, ...)` annotation as written; the core only reads `partials`."""

	name: str
	args: Tuple[str, ...] = ()
	span: Span = Span()


@dataclass(frozen=True)
class SourceUnit:
	"""
	One compilable unit: a module holding a single type declaration.

	`span` points at the type declaration; hosts relocate merged members there.
	"""

	module_id: str
	name: str
	members: Tuple[Member, ...]
	kind: UnitKind | None = None
	span: Span = Span()
	attributes: Tuple[Attribute, ...] = field(default=())
	path: str | None = None

	@property
	def is_participating(self) -> bool:
		return self.kind is not None

	@property
	def is_host(self) -> bool:
		return isinstance(self.kind, HostKind)

	@property
	def is_guest(self) -> bool:
		return isinstance(self.kind, GuestKind)

	def fingerprint_text(self) -> str:
		"""
		Canonical text used to detect changes between incremental passes.

		Covers member texts, kind, guest list and every location (declaration,
		`@partials` attribute, members); a declaration that only moved within its
		file counts as changed.
		"""
		parts = [self.module_id, self.name, "at:" + _location_key(self.span)]
		if isinstance(self.kind, HostKind):
			parts.append("host:" + ",".join(self.kind.guests) + "@" + _location_key(self.kind.span))
		elif isinstance(self.kind, GuestKind):
			parts.append("guest")
		else:
			parts.append("plain")
		parts.extend(f"{_location_key(m.span)} {m.text}" for m in self.members)
		return "\n".join(parts)


def _location_key(span: Span) -> str:
	return f"{span.file}:{span.line}:{span.column}-{span.end_line}:{span.end_column}"


__all__ = ["HostKind", "GuestKind", "UnitKind", "Attribute", "SourceUnit"]
