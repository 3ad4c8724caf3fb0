# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: splice maintainers; created: 2026-09-10
"""
Shared helpers for tests that need units, members or a hook context.

These builders keep test data close to what the front-end produces (spans
anchored to a file, members carrying their source text) without going through
the parser for every case.
"""

from __future__ import annotations

import threading
from collections import Counter
from typing import Dict, List, Optional, Sequence, Tuple

from splice.compose.errors import UnresolvableModuleError
from splice.compose.protocol import UnitResult, UnitState
from splice.core.diagnostics import Diagnostic
from splice.core.member import Member, MemberKind
from splice.core.span import Span
from splice.core.unit import GuestKind, HostKind, SourceUnit, UnitKind


def _file_for(module_id: str) -> str:
	return module_id.replace(".", "/") + ".part"


def make_member(name: str, *, module_id: str = "main", line: int = 1, kind: MemberKind = MemberKind.FN) -> Member:
	if kind is MemberKind.FN:
		text = f"fn {name}() {{ }}"
	else:
		text = f"var {name}: Int;"
	return Member(name=name, kind=kind, text=text, span=Span(file=_file_for(module_id), line=line, column=2))


def make_members(module_id: str, names: Sequence[str]) -> Tuple[Member, ...]:
	return tuple(make_member(n, module_id=module_id, line=i + 2) for i, n in enumerate(names))


def _unit(module_id: str, name: str, members: Sequence[str], kind: UnitKind | None) -> SourceUnit:
	return SourceUnit(
		module_id=module_id,
		name=name,
		members=make_members(module_id, members),
		kind=kind,
		span=Span(file=_file_for(module_id), line=1, column=1),
		path=_file_for(module_id),
	)


def guest_unit(module_id: str, members: Sequence[str], *, name: Optional[str] = None) -> SourceUnit:
	return _unit(module_id, name or module_id.rsplit(".", 1)[-1].capitalize(), members, GuestKind())


def host_unit(
	module_id: str,
	guests: Sequence[str],
	members: Sequence[str],
	*,
	name: Optional[str] = None,
) -> SourceUnit:
	kind = HostKind(guests=tuple(guests), span=Span(file=_file_for(module_id), line=1, column=1))
	return _unit(module_id, name or module_id.rsplit(".", 1)[-1].capitalize(), members, kind)


def plain_unit(module_id: str, members: Sequence[str], *, name: Optional[str] = None) -> SourceUnit:
	return _unit(module_id, name or module_id.rsplit(".", 1)[-1].capitalize(), members, None)


class CountingHook:
	"""Wrap a hook and count invocations per module id (thread-safe)."""

	def __init__(self, inner) -> None:
		self.inner = inner
		self.calls: Counter[str] = Counter()
		self._lock = threading.Lock()

	def __call__(self, ctx) -> None:
		with self._lock:
			self.calls[ctx.module_id] += 1
		self.inner(ctx)


class FakeContext:
	"""
	Stand-alone HookContext for exercising the core without a pipeline.

	`resolvers` maps module ids to callables run on resolve (e.g. a guest
	capture); ids not in the map raise UnresolvableModuleError.
	"""

	def __init__(self, unit: SourceUnit, resolvers: Optional[Dict[str, object]] = None) -> None:
		self.module_id = unit.module_id
		self.name = unit.name
		self.members = unit.members
		self.kind = unit.kind
		self.span = unit.span
		self.replaced: Optional[Tuple[Member, ...]] = None
		self.suppressed = False
		self.diagnostics: List[Diagnostic] = []
		self.resolved: List[str] = []
		self._resolvers = dict(resolvers or {})

	def replace_members(self, members: Sequence[Member]) -> None:
		self.replaced = tuple(members)

	def suppress(self) -> None:
		self.suppressed = True

	def resolve(self, module_id: str) -> UnitResult:
		self.resolved.append(module_id)
		if module_id not in self._resolvers:
			raise UnresolvableModuleError(module_id)
		action = self._resolvers[module_id]
		if callable(action):
			action()
		return UnitResult(module_id=module_id, name=module_id, state=UnitState.SUPPRESSED)

	def report(self, diag: Diagnostic) -> None:
		self.diagnostics.append(diag)


__all__ = [
	"CountingHook",
	"FakeContext",
	"guest_unit",
	"host_unit",
	"make_member",
	"make_members",
	"plain_unit",
]
