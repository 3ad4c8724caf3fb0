# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: splice maintainers; created: 2026-09-14
"""
Splice cached guest members into a host.

For each guest, in declaration order:
  1. force it (guest hook runs -> members captured),
  2. look up its cache entry,
  3. missing entry: report once and skip the guest (stale incremental state),
  4. otherwise append copies relocated to the host declaration.

The host's own members follow all guest members.

A missing entry is reported and skipped; the host still builds. Every other
force outcome that is not a suppressed guest raises out of `merge`.
"""

from __future__ import annotations

from typing import Callable, List, Sequence, Tuple

from splice.core.diagnostics import Diagnostic
from splice.core.member import Member, with_location
from splice.core.span import Span

from .cache import ModuleCache
from .errors import NotAGuestError
from .forcer import DependencyForcer
from .protocol import UnitState

Reporter = Callable[[Diagnostic], None]

CLEAN_REBUILD_HINT = "incremental state is likely stale; run a clean rebuild to recapture it"


def stale_cache_diagnostic(module_id: str, span: Span) -> Diagnostic:
	return Diagnostic(
		message=f"no cached members for module '{module_id}'; its contribution is omitted",
		code="I-PARTIAL-STALE-CACHE",
		phase="compose",
		severity="info",
		span=span,
		notes=[CLEAN_REBUILD_HINT],
	)


class MemberMerger:
	def __init__(self, cache: ModuleCache, forcer: DependencyForcer, report: Reporter) -> None:
		self._cache = cache
		self._forcer = forcer
		self._report = report

	def merge(
		self,
		host_members: Sequence[Member],
		guests: Sequence[str],
		host_span: Span,
	) -> Tuple[Member, ...]:
		merged: List[Member] = []
		for guest in guests:
			forced = self._forcer.force(guest)
			if forced.state is not UnitState.SUPPRESSED:
				raise NotAGuestError(guest, state=forced.state.value)
			cached = self._cache.get(guest)
			if cached is None:
				self._report(stale_cache_diagnostic(guest, host_span))
				continue
			merged.extend(with_location(m, host_span) for m in cached)
		merged.extend(host_members)
		return tuple(merged)


__all__ = ["MemberMerger", "CLEAN_REBUILD_HINT", "stale_cache_diagnostic"]
