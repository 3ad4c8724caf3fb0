# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Build-hook protocol between the pipeline and the composition core.

The pipeline owns units, scheduling and emission; the core only sees a
HookContext. Every capability the core needs (replace the emitted members,
suppress the unit, force another module, report a diagnostic) is a method on
the context, so the core never reaches into pipeline state.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, Sequence, Tuple

from splice.core.diagnostics import Diagnostic
from splice.core.member import Member
from splice.core.span import Span
from splice.core.unit import UnitKind


class UnitState(str, Enum):
	"""
	Per-unit, per-pass state.

	UNCLASSIFIED -> BUILDING -> SUPPRESSED (guest) | MERGED (host) | FAILED
	UNCLASSIFIED -> EMITTED (non-participating unit, no hook)
	"""

	UNCLASSIFIED = "unclassified"
	BUILDING = "building"
	SUPPRESSED = "suppressed"
	MERGED = "merged"
	EMITTED = "emitted"
	FAILED = "failed"

	@property
	def is_terminal(self) -> bool:
		return self not in (UnitState.UNCLASSIFIED, UnitState.BUILDING)


@dataclass(frozen=True)
class UnitResult:
	"""
	Outcome of building one unit in one pass.

	`members` is what the final program emits for the unit; it is empty for
	suppressed guests and failed units.
	"""

	module_id: str
	name: str
	state: UnitState
	members: Tuple[Member, ...] = ()
	# Guest ids a host forced; drives host invalidation between passes.
	depends_on: Tuple[str, ...] = ()
	error: str | None = None

	@property
	def emitted(self) -> bool:
		return self.state in (UnitState.MERGED, UnitState.EMITTED)


class HookContext(Protocol):
	"""What the pipeline supplies to a build hook for a single unit."""

	module_id: str
	name: str
	members: Tuple[Member, ...]
	kind: UnitKind | None
	span: Span

	def replace_members(self, members: Sequence[Member]) -> None:
		"""Replace the unit's emitted member list."""
		...

	def suppress(self) -> None:
		"""Drop the unit from the final program (its identity stays resolvable)."""
		...

	def resolve(self, module_id: str) -> UnitResult:
		"""
		Force `module_id` to be built in this pass and return its result.

		Raises UnresolvableModuleError for unknown ids and ModuleBuildError when
		the module's own build failed.
		"""
		...

	def report(self, diag: Diagnostic) -> None:
		...


__all__ = ["HookContext", "UnitResult", "UnitState"]
