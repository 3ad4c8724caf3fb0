# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: splice maintainers; created: 2026-09-14
"""
Force-resolve guests by module id.

Composition is declared by name, so nothing in the unit graph makes the
pipeline build a guest before its host. The forcer closes that gap: it calls
the pipeline's `resolve` capability, which runs the guest's build hook (and so
its capture) if it has not run yet in this pass.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List

from .protocol import UnitResult

Resolver = Callable[[str], UnitResult]


class DependencyForcer:
	"""
	Force modules through a pipeline resolver.

	Results are memoized per forcer so repeated forces of the same id are
	no-ops. The pipeline enforces the stronger guarantee (a hook runs at most
	once per pass) across forcers and threads.
	"""

	def __init__(self, resolve: Resolver) -> None:
		self._resolve = resolve
		self._forced: Dict[str, UnitResult] = {}

	def force(self, module_id: str) -> UnitResult:
		"""
		Ensure `module_id` is fully built in this pass.

		UnresolvableModuleError / ModuleBuildError from the resolver propagate
		unchanged; a failed force is never memoized.
		"""
		hit = self._forced.get(module_id)
		if hit is not None:
			return hit
		result = self._resolve(module_id)
		self._forced[module_id] = result
		return result

	def force_all(self, module_ids: Iterable[str]) -> List[UnitResult]:
		return [self.force(mid) for mid in module_ids]

	@property
	def forced(self) -> List[str]:
		"""Module ids forced so far, in first-force order."""
		return list(self._forced)


__all__ = ["DependencyForcer", "Resolver"]
