# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: splice maintainers; created: 2026-09-21
"""
One build pass over a set of units.

The pipeline owns scheduling and emission. For each participating unit it
calls the build hook exactly once, handing it a BuildContext; the hook may
force other units by id through `BuildContext.resolve`, which re-enters the
pipeline and builds the forced unit first (on the calling thread).

Pinned rules:
- a unit's hook runs at most once per pass, whoever asks first builds it,
- resolving a unit another thread is building waits for that build,
- resolving a unit the calling thread is already building (directly, or by
  closing a wait cycle between threads) returns its BUILDING result at once,
- `carried` results (clean units from an earlier pass) are resolvable without
  running anything,
- a CompositionError escaping the hook fails the unit with a compose-phase
  error diagnostic; any other exception is an internal bug and propagates.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from splice.compose.errors import CompositionError, ModuleBuildError, UnresolvableModuleError
from splice.compose.protocol import UnitResult, UnitState
from splice.core.diagnostics import Diagnostic
from splice.core.member import Member
from splice.core.span import Span
from splice.core.unit import HostKind, SourceUnit, UnitKind

Hook = Callable[["BuildContext"], None]


class BuildContext:
	"""The HookContext implementation handed to the build hook for one unit."""

	def __init__(self, pipeline: "BuildPipeline", unit: SourceUnit) -> None:
		self._pipeline = pipeline
		self.unit = unit
		self.module_id: str = unit.module_id
		self.name: str = unit.name
		self.members: Tuple[Member, ...] = unit.members
		self.kind: UnitKind | None = unit.kind
		self.span: Span = unit.span
		self.replaced: Optional[Tuple[Member, ...]] = None
		self.suppressed = False
		self.resolved: List[str] = []

	def replace_members(self, members: Sequence[Member]) -> None:
		self.replaced = tuple(members)

	def suppress(self) -> None:
		self.suppressed = True

	def resolve(self, module_id: str) -> UnitResult:
		if module_id not in self.resolved:
			self.resolved.append(module_id)
		return self._pipeline.resolve(module_id)

	def report(self, diag: Diagnostic) -> None:
		self._pipeline.report(diag)


@dataclass
class PassResult:
	units: Dict[str, UnitResult]
	diagnostics: List[Diagnostic] = field(default_factory=list)
	# Module ids built in this pass, in completion order (carried units excluded).
	built: List[str] = field(default_factory=list)

	def emitted(self) -> Dict[str, UnitResult]:
		"""The final program: every unit that emits members."""
		return {mid: r for mid, r in self.units.items() if r.emitted}

	def failed(self) -> List[str]:
		return [mid for mid, r in self.units.items() if r.state is UnitState.FAILED]


class BuildPipeline:
	def __init__(
		self,
		units: Iterable[SourceUnit],
		hook: Hook,
		*,
		carried: Mapping[str, UnitResult] | None = None,
		jobs: int = 1,
	) -> None:
		if jobs < 1:
			raise ValueError("jobs must be >= 1")
		self._hook = hook
		self._jobs = jobs
		self._units: Dict[str, SourceUnit] = {}
		for unit in units:
			if unit.module_id in self._units:
				raise ValueError(f"duplicate unit for module '{unit.module_id}'")
			self._units[unit.module_id] = unit
		self._cond = threading.Condition(threading.RLock())
		self._results: Dict[str, UnitResult] = {}
		self._carried: Dict[str, UnitResult] = {}
		for mid, res in (carried or {}).items():
			if mid in self._units:
				continue
			self._results[mid] = res
			self._carried[mid] = res
		self._states: Dict[str, UnitState] = {mid: UnitState.UNCLASSIFIED for mid in self._units}
		self._owner: Dict[str, int] = {}
		self._waiting: Dict[int, str] = {}
		self._diagnostics: List[Diagnostic] = []
		self._built: List[str] = []

	def report(self, diag: Diagnostic) -> None:
		with self._cond:
			self._diagnostics.append(diag)

	def state(self, module_id: str) -> UnitState:
		with self._cond:
			res = self._results.get(module_id)
			if res is not None:
				return res.state
			return self._states.get(module_id, UnitState.UNCLASSIFIED)

	def resolve(self, module_id: str) -> UnitResult:
		"""
		Force `module_id` through the pipeline and return its result.

		Raises UnresolvableModuleError for ids the pass does not know and
		ModuleBuildError when the unit's build failed.
		"""
		result = self._ensure(module_id)
		if result.state is UnitState.FAILED:
			raise ModuleBuildError(module_id, cause=result.error)
		return result

	def build_all(self) -> PassResult:
		order = list(self._units)
		if self._jobs == 1 or len(order) < 2:
			for mid in order:
				self._ensure(mid)
		else:
			with ThreadPoolExecutor(max_workers=self._jobs) as pool:
				# list() re-raises internal errors from worker threads.
				list(pool.map(self._ensure, order))
		with self._cond:
			units: Dict[str, UnitResult] = {}
			for mid in order:
				units[mid] = self._results[mid]
			for mid, res in self._carried.items():
				units[mid] = res
			return PassResult(units=units, diagnostics=list(self._diagnostics), built=list(self._built))

	def _ensure(self, module_id: str) -> UnitResult:
		me = threading.get_ident()
		with self._cond:
			if module_id not in self._units and module_id not in self._results:
				raise UnresolvableModuleError(module_id)
			while True:
				done = self._results.get(module_id)
				if done is not None:
					return done
				if self._states[module_id] is UnitState.UNCLASSIFIED:
					self._states[module_id] = UnitState.BUILDING
					self._owner[module_id] = me
					break
				if self._owner[module_id] == me or self._closes_cycle(me, module_id):
					unit = self._units[module_id]
					return UnitResult(module_id=module_id, name=unit.name, state=UnitState.BUILDING)
				self._waiting[me] = module_id
				try:
					self._cond.wait()
				finally:
					self._waiting.pop(me, None)
		unit = self._units[module_id]
		result: UnitResult | None = None
		try:
			result = self._build_unit(unit)
		finally:
			if result is None:
				result = UnitResult(
					module_id=module_id,
					name=unit.name,
					state=UnitState.FAILED,
					error="internal error in build hook",
				)
			with self._cond:
				self._states[module_id] = result.state
				self._results[module_id] = result
				self._owner.pop(module_id, None)
				self._built.append(module_id)
				self._cond.notify_all()
		return result

	def _closes_cycle(self, me: int, module_id: str) -> bool:
		"""True when waiting on `module_id` would wait (transitively) on `me`."""
		seen: set[int] = set()
		owner = self._owner.get(module_id)
		while owner is not None and owner not in seen:
			if owner == me:
				return True
			seen.add(owner)
			waited = self._waiting.get(owner)
			if waited is None:
				return False
			owner = self._owner.get(waited)
		return False

	def _build_unit(self, unit: SourceUnit) -> UnitResult:
		if not unit.is_participating:
			return UnitResult(
				module_id=unit.module_id,
				name=unit.name,
				state=UnitState.EMITTED,
				members=unit.members,
			)
		ctx = BuildContext(self, unit)
		try:
			self._hook(ctx)
		except CompositionError as err:
			span = unit.kind.span if isinstance(unit.kind, HostKind) else unit.span
			self.report(
				Diagnostic(
					message=f"cannot compose '{unit.module_id}': {err}",
					code=err.code,
					phase="compose",
					severity="error",
					span=span,
				)
			)
			return UnitResult(
				module_id=unit.module_id,
				name=unit.name,
				state=UnitState.FAILED,
				depends_on=tuple(ctx.resolved),
				error=str(err),
			)
		if ctx.suppressed:
			return UnitResult(
				module_id=unit.module_id,
				name=unit.name,
				state=UnitState.SUPPRESSED,
				depends_on=tuple(ctx.resolved),
			)
		members = ctx.replaced if ctx.replaced is not None else unit.members
		return UnitResult(
			module_id=unit.module_id,
			name=unit.name,
			state=UnitState.MERGED,
			members=members,
			depends_on=tuple(ctx.resolved),
		)


__all__ = ["BuildContext", "BuildPipeline", "Hook", "PassResult"]
