# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: splice maintainers; created: 2026-09-14
"""
The partials build hook.

The pipeline calls the hook once per participating unit per pass. The unit's
kind comes pre-classified from the front-end:

- GuestKind -> capture members, suppress the unit;
- HostKind  -> force every guest, look each up, merge, replace the host's
               emitted members.

Errors from forcing (unknown module, failed guest) propagate to the pipeline,
which fails the host.
"""

from __future__ import annotations

from splice.core.unit import GuestKind, HostKind

from .cache import ModuleCache
from .capture import capture_members
from .forcer import DependencyForcer
from .merger import MemberMerger
from .protocol import HookContext


class PartialsHook:
	def __init__(self, cache: ModuleCache, *, warn_double_capture: bool = True) -> None:
		self.cache = cache
		self.warn_double_capture = warn_double_capture

	def __call__(self, ctx: HookContext) -> None:
		kind = ctx.kind
		if isinstance(kind, GuestKind):
			capture_members(ctx, self.cache, warn_double_capture=self.warn_double_capture)
			return
		if isinstance(kind, HostKind):
			forcer = DependencyForcer(ctx.resolve)
			merger = MemberMerger(self.cache, forcer, ctx.report)
			ctx.replace_members(merger.merge(ctx.members, kind.guests, ctx.span))
			return
		raise TypeError(f"build hook invoked for non-participating unit '{ctx.module_id}'")


__all__ = ["PartialsHook"]
