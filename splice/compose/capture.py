# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: splice maintainers; created: 2026-09-14
from __future__ import annotations

from splice.core.diagnostics import Diagnostic

from .cache import ModuleCache
from .protocol import HookContext


def capture_members(ctx: HookContext, cache: ModuleCache, *, warn_double_capture: bool = True) -> None:
	"""
	Record a guest's as-declared members and suppress the guest.

	The entry is keyed by the guest's module id and replaces whatever was
	cached before. A second capture of the same id within one pass still
	overwrites, but is reported as a warning.
	"""
	double = cache.put(ctx.module_id, ctx.members)
	if double and warn_double_capture:
		ctx.report(
			Diagnostic(
				message=f"module '{ctx.module_id}' captured more than once in this pass; previous members replaced",
				code="W-PARTIAL-DOUBLE-CAPTURE",
				phase="compose",
				severity="warning",
				span=ctx.span,
			)
		)
	ctx.suppress()


__all__ = ["capture_members"]
