# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: splice maintainers; created: 2026-09-21
"""
Long-lived build session.

A session owns the ModuleCache for the life of the process and runs one
pipeline pass per (re)build:

- each unit is fingerprinted (sha256 of its canonical text),
- units whose fingerprint changed, new units, units that failed last time and
  hosts that forced any of those (transitively) are rebuilt,
- every other unit carries its previous result into the pass, so forcing it
  is a no-op and its cache entry (if any) is reused as-is,
- modules that disappeared are dropped from results and from the cache,
- every rebuilt module loses its cache entry before the pass; only a rebuild
  that captures again (a guest) puts one back.

Diagnostics are per pass; a carried unit does not repeat old diagnostics.
"""

from __future__ import annotations

import hashlib
from typing import Callable, Dict, Iterable, Optional, Set

from splice.compose.cache import ModuleCache
from splice.compose.hook import PartialsHook
from splice.compose.protocol import UnitResult, UnitState
from splice.core.unit import SourceUnit

from .pipeline import BuildPipeline, Hook, PassResult


def sha256_hex(data: bytes) -> str:
	"""Return sha256 hex digest for `data`."""
	return hashlib.sha256(data).hexdigest()


def unit_fingerprint(unit: SourceUnit) -> str:
	return sha256_hex(unit.fingerprint_text().encode("utf-8"))


class BuildSession:
	def __init__(
		self,
		*,
		cache: ModuleCache | None = None,
		hook_factory: Callable[[ModuleCache], Hook] | None = None,
		jobs: int = 1,
	) -> None:
		self.cache = cache if cache is not None else ModuleCache()
		factory = hook_factory if hook_factory is not None else PartialsHook
		self.hook: Hook = factory(self.cache)
		self.jobs = jobs
		self.passes = 0
		self._fingerprints: Dict[str, str] = {}
		self._results: Dict[str, UnitResult] = {}

	@property
	def results(self) -> Dict[str, UnitResult]:
		"""Latest result per module (after the most recent pass)."""
		return dict(self._results)

	def dirty_modules(self, units: Iterable[SourceUnit]) -> Set[str]:
		"""Module ids that `run_pass(units)` would rebuild."""
		by_id = {u.module_id: u for u in units}
		dirty: Set[str] = set()
		for mid, unit in by_id.items():
			prev = self._results.get(mid)
			if prev is None or prev.state is UnitState.FAILED:
				dirty.add(mid)
			elif self._fingerprints.get(mid) != unit_fingerprint(unit):
				dirty.add(mid)
		removed = set(self._results) - set(by_id)
		changed = True
		while changed:
			changed = False
			for mid, prev in self._results.items():
				if mid not in by_id or mid in dirty:
					continue
				if any(dep in dirty or dep in removed for dep in prev.depends_on):
					dirty.add(mid)
					changed = True
		return dirty

	def run_pass(self, units: Iterable[SourceUnit]) -> PassResult:
		units = list(units)
		by_id = {u.module_id: u for u in units}
		dirty = self.dirty_modules(units)
		for mid in (set(self._results) - set(by_id)) | dirty:
			self.cache.discard(mid)
		carried = {mid: res for mid, res in self._results.items() if mid in by_id and mid not in dirty}
		self.cache.begin_pass()
		pipeline = BuildPipeline(
			[u for u in units if u.module_id in dirty],
			self.hook,
			carried=carried,
			jobs=self.jobs,
		)
		result = pipeline.build_all()
		self._results = dict(result.units)
		self._fingerprints = {mid: unit_fingerprint(u) for mid, u in by_id.items()}
		self.passes += 1
		return result

	def clean(self) -> None:
		"""Forget everything: the next pass rebuilds and recaptures every unit."""
		self.cache.clear()
		self._fingerprints.clear()
		self._results.clear()

	def result_for(self, module_id: str) -> Optional[UnitResult]:
		return self._results.get(module_id)


__all__ = ["BuildSession", "sha256_hex", "unit_fingerprint"]
