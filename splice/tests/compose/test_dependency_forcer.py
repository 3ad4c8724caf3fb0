# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: splice maintainers; created: 2026-09-14
from __future__ import annotations

import pytest

from splice.compose.errors import ModuleBuildError, UnresolvableModuleError
from splice.compose.forcer import DependencyForcer
from splice.compose.protocol import UnitResult, UnitState


def _resolver(calls: list[str]):
	def _resolve(module_id: str) -> UnitResult:
		calls.append(module_id)
		if module_id == "partials.missing":
			raise UnresolvableModuleError(module_id)
		if module_id == "partials.broken":
			raise ModuleBuildError(module_id, cause="boom")
		return UnitResult(module_id=module_id, name="X", state=UnitState.SUPPRESSED)

	return _resolve


def test_force_is_idempotent() -> None:
	calls: list[str] = []
	forcer = DependencyForcer(_resolver(calls))
	first = forcer.force("partials.foo")
	second = forcer.force("partials.foo")
	assert first is second
	assert calls == ["partials.foo"]


def test_force_all_keeps_order() -> None:
	calls: list[str] = []
	forcer = DependencyForcer(_resolver(calls))
	results = forcer.force_all(["partials.b", "partials.a", "partials.b"])
	assert [r.module_id for r in results] == ["partials.b", "partials.a", "partials.b"]
	assert calls == ["partials.b", "partials.a"]
	assert forcer.forced == ["partials.b", "partials.a"]


def test_unknown_module_propagates_and_is_not_memoized() -> None:
	calls: list[str] = []
	forcer = DependencyForcer(_resolver(calls))
	with pytest.raises(UnresolvableModuleError) as info:
		forcer.force("partials.missing")
	assert info.value.module_id == "partials.missing"
	with pytest.raises(UnresolvableModuleError):
		forcer.force("partials.missing")
	assert calls == ["partials.missing", "partials.missing"]
	assert forcer.forced == []


def test_failed_module_propagates() -> None:
	forcer = DependencyForcer(_resolver([]))
	with pytest.raises(ModuleBuildError, match="boom"):
		forcer.force("partials.broken")
