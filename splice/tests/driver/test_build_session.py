# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: splice maintainers; created: 2026-09-21
from __future__ import annotations

from dataclasses import replace

from splice.compose.hook import PartialsHook
from splice.compose.protocol import UnitState
from splice.core.span import Span
from splice.driver.session import BuildSession
from splice.test_support import CountingHook, guest_unit, host_unit, plain_unit


def _counting_session() -> tuple[BuildSession, list[CountingHook]]:
	hooks: list[CountingHook] = []

	def _factory(cache):
		hook = CountingHook(PartialsHook(cache))
		hooks.append(hook)
		return hook

	return BuildSession(hook_factory=_factory), hooks


def _names(session: BuildSession, module_id: str) -> list[str]:
	res = session.result_for(module_id)
	assert res is not None
	return [m.name for m in res.members]


def test_incremental_pass_rebuilding_only_the_host_reuses_cached_guest() -> None:
	session, hooks = _counting_session()
	foo = guest_unit("partials.foo", ["foo"])
	session.run_pass([host_unit("app", ["partials.foo"], ["ctor"]), foo])
	assert hooks[0].calls == {"partials.foo": 1, "app": 1}

	changed_host = host_unit("app", ["partials.foo"], ["ctor", "extra"])
	result = session.run_pass([changed_host, foo])
	assert result.built == ["app"]
	assert hooks[0].calls == {"partials.foo": 1, "app": 2}
	assert _names(session, "app") == ["foo", "ctor", "extra"]
	assert result.diagnostics == []
	assert session.passes == 2


def test_unchanged_inputs_rebuild_nothing() -> None:
	session, hooks = _counting_session()
	units = [host_unit("app", ["partials.foo"], ["ctor"]), guest_unit("partials.foo", ["foo"]), plain_unit("util", ["u"])]
	session.run_pass(units)
	result = session.run_pass(units)
	assert result.built == []
	assert result.emitted().keys() == {"app", "util"}
	assert _names(session, "app") == ["foo", "ctor"]


def test_changed_guest_rebuilds_its_hosts() -> None:
	session, _ = _counting_session()
	session.run_pass([host_unit("app", ["partials.foo"], ["ctor"]), guest_unit("partials.foo", ["foo"]), plain_unit("util", [])])
	units = [host_unit("app", ["partials.foo"], ["ctor"]), guest_unit("partials.foo", ["foo", "foo2"]), plain_unit("util", [])]
	assert session.dirty_modules(units) == {"partials.foo", "app"}
	result = session.run_pass(units)
	assert sorted(result.built) == ["app", "partials.foo"]
	assert _names(session, "app") == ["foo", "foo2", "ctor"]
	# a rebuilt guest in a new pass is not a double capture
	assert result.diagnostics == []


def test_removed_guest_fails_its_host() -> None:
	session, _ = _counting_session()
	session.run_pass([host_unit("app", ["partials.foo"], ["ctor"]), guest_unit("partials.foo", ["foo"])])
	result = session.run_pass([host_unit("app", ["partials.foo"], ["ctor"])])
	assert result.units["app"].state is UnitState.FAILED
	assert "partials.foo" not in session.cache
	assert any(d.severity == "error" and "partials.foo" in d.message for d in result.diagnostics)


def test_failed_units_are_retried_next_pass() -> None:
	session, _ = _counting_session()
	host = host_unit("app", ["partials.foo"], ["ctor"])
	first = session.run_pass([host])
	assert first.units["app"].state is UnitState.FAILED
	second = session.run_pass([host, guest_unit("partials.foo", ["foo"])])
	assert second.units["app"].state is UnitState.MERGED
	assert _names(session, "app") == ["foo", "ctor"]


def test_cache_torn_down_externally_degrades_then_clean_recovers() -> None:
	session, _ = _counting_session()
	baz = guest_unit("partials.baz", ["baz"])
	session.run_pass([host_unit("app2", ["partials.baz"], ["ctor2"]), baz])
	session.cache.discard("partials.baz")

	touched = host_unit("app2", ["partials.baz"], ["ctor2", "more"])
	stale = session.run_pass([touched, baz])
	assert stale.units["app2"].state is UnitState.MERGED
	assert _names(session, "app2") == ["ctor2", "more"]
	assert len(stale.diagnostics) == 1
	assert "partials.baz" in stale.diagnostics[0].message

	session.clean()
	assert len(session.cache) == 0
	fresh = session.run_pass([touched, baz])
	assert fresh.diagnostics == []
	assert _names(session, "app2") == ["baz", "ctor2", "more"]


def test_cache_outlives_passes() -> None:
	session = BuildSession()
	cache = session.cache
	session.run_pass([guest_unit("partials.foo", ["foo"])])
	session.run_pass([guest_unit("partials.foo", ["foo"]), host_unit("app", ["partials.foo"], [])])
	assert session.cache is cache
	assert cache.persistent
	assert "partials.foo" in cache


def test_guest_turned_plain_type_is_not_merged_from_old_capture() -> None:
	session, _ = _counting_session()
	session.run_pass([host_unit("app", ["partials.foo"], ["ctor"]), guest_unit("partials.foo", ["foo"])])
	assert "partials.foo" in session.cache

	result = session.run_pass([host_unit("app", ["partials.foo"], ["ctor"]), plain_unit("partials.foo", ["foo"])])
	assert "partials.foo" not in session.cache
	assert result.units["partials.foo"].state is UnitState.EMITTED
	assert result.units["app"].state is UnitState.FAILED
	assert result.units["app"].members == ()
	assert [d.code for d in result.diagnostics] == ["E-PARTIAL-NOT-A-GUEST"]


def test_guest_turned_host_drops_its_old_capture() -> None:
	session, _ = _counting_session()
	session.run_pass([host_unit("app", ["partials.foo"], ["ctor"]), guest_unit("partials.foo", ["foo"])])

	units = [
		host_unit("app", ["partials.foo"], ["ctor"]),
		host_unit("partials.foo", ["partials.x"], ["foo2"]),
		guest_unit("partials.x", ["x"]),
	]
	result = session.run_pass(units)
	assert "partials.foo" not in session.cache
	assert "partials.x" in session.cache
	assert _names(session, "partials.foo") == ["x", "foo2"]
	assert result.units["app"].state is UnitState.FAILED
	assert "foo" not in [m.name for m in result.units["app"].members]


def test_moved_host_is_rebuilt_and_relocates_to_its_new_line() -> None:
	session, hooks = _counting_session()
	foo = guest_unit("partials.foo", ["foo"])
	host = host_unit("app", ["partials.foo"], ["ctor"])
	session.run_pass([host, foo])

	moved = replace(host, span=Span(file="app.part", line=9, column=1))
	assert session.dirty_modules([moved, foo]) == {"app"}
	result = session.run_pass([moved, foo])
	assert result.built == ["app"]
	assert hooks[0].calls == {"partials.foo": 1, "app": 2}
	merged = result.units["app"].members
	assert [m.name for m in merged] == ["foo", "ctor"]
	assert merged[0].span.line == 9
