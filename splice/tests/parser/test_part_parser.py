# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: splice maintainers; created: 2026-09-10
from __future__ import annotations

from pathlib import Path

import pytest
from lark.exceptions import UnexpectedInput

from splice.core.member import MemberKind
from splice.core.unit import GuestKind, HostKind
from splice.parser import parser as part_parser
from splice.parser import parse_part_source

GUEST_SRC = """
module partials.foo

// a partial contributing two members
partial type Foo {
	pub fn foo(x: Int) -> Int { return x; }
	var count: Int;
}
""".lstrip()

HOST_SRC = """
module app

@inline
@partials(partials.foo, partials.bar)
type App {
	fn ctor() { let x = { 1 }; }
}
""".lstrip()


def test_guest_members_keep_exact_text_and_location() -> None:
	unit, diags = parse_part_source(GUEST_SRC, path=Path("partials/foo.part"))
	assert diags == []
	assert unit is not None
	assert unit.module_id == "partials.foo"
	assert unit.name == "Foo"
	assert isinstance(unit.kind, GuestKind)
	assert [m.name for m in unit.members] == ["foo", "count"]
	foo, count = unit.members
	assert foo.text == "pub fn foo(x: Int) -> Int { return x; }"
	assert foo.kind is MemberKind.FN
	assert foo.is_public
	assert foo.span.file == "partials/foo.part"
	assert (foo.span.line, foo.span.column) == (5, 2)
	assert count.text == "var count: Int;"
	assert count.kind is MemberKind.VAR
	assert count.visibility is None


def test_host_guest_list_keeps_declaration_order() -> None:
	unit, diags = parse_part_source(HOST_SRC, path=Path("app.part"))
	assert diags == []
	assert unit is not None
	assert isinstance(unit.kind, HostKind)
	assert unit.kind.guests == ("partials.foo", "partials.bar")
	assert unit.kind.span.line == 4
	assert [a.name for a in unit.attributes] == ["inline", "partials"]
	assert unit.members[0].text == "fn ctor() { let x = { 1 }; }"
	assert unit.span.line == 3


def test_plain_type_does_not_participate() -> None:
	src = "module util\n\n@inline\ntype Util {\n\tfn helper() { }\n}\n"
	unit, diags = parse_part_source(src, path=Path("util.part"))
	assert diags == []
	assert unit is not None
	assert unit.kind is None
	assert not unit.is_participating


def test_partial_host_is_still_a_host() -> None:
	src = "module app\n@partials(partials.foo)\npartial type App { }\n"
	unit, _ = parse_part_source(src, path=Path("app.part"))
	assert unit is not None
	assert unit.is_host
	assert not unit.is_guest


def test_string_attribute_arguments_are_decoded() -> None:
	prog = part_parser.parse_part('module m\n@doc("hello \\"world\\"")\ntype M { }\n')
	assert prog.types[0].attributes[0].args == ['hello "world"']


def test_grammar_errors_surface_as_lark_errors() -> None:
	with pytest.raises(UnexpectedInput):
		part_parser.parse_part("module m\ntype { }\n")


def test_body_nesting_limit() -> None:
	body = "{ if a { while b { c(); } } }"
	parsed = part_parser.parse_part(f"module m\ntype A {{\n\tfn f() {body}\n}}\n")
	assert parsed.types[0].members[0].text == f"fn f() {body}"
	with pytest.raises(UnexpectedInput):
		part_parser.parse_part("module m\ntype A {\n\tfn f() { { { { } } } }\n}\n")


@pytest.mark.parametrize(
	"src, needle",
	[
		("module m\n", "declares no type"),
		("module m\ntype A { }\ntype B { }\n", "found a second type 'B'"),
		("module Bad.Name\ntype A { }\n", "must start with a lowercase letter"),
		("module a__b\ntype A { }\n", "invalid underscore placement"),
		("type A { }\n", "missing `module` declaration"),
		("module app\n@partials()\ntype App { }\n", "lists no modules"),
		("module app\n@partials(app)\ntype App { }\n", "lists itself"),
		("module app\n@partials(x.y, x.y)\ntype App { }\n", "listed more than once"),
		("module app\n@partials(x.y)\n@partials(x.z)\ntype App { }\n", "duplicate @partials"),
		("module app\n@partials(X.y)\ntype App { }\n", "must start with a lowercase letter"),
		("module m\ntype A { fn f( { }\n", "line 2"),
	],
)
def test_invalid_sources_produce_parser_diagnostics(src: str, needle: str) -> None:
	unit, diags = parse_part_source(src, path=Path("bad.part"))
	assert unit is None
	assert diags
	assert all(d.phase == "parser" for d in diags)
	assert any(needle in d.message for d in diags), [d.message for d in diags]
	assert all(d.span.file == "bad.part" for d in diags)
