# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Opaque member token.

A Member is one declaration inside a type body (`fn ...` or `var ...`). The
composition core never interprets it: members are captured, copied and
relocated as whole values. `text` is the exact source slice the front-end saw.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from .span import Span


class MemberKind(str, Enum):
	FN = "fn"
	VAR = "var"


@dataclass(frozen=True)
class Member:
	name: str
	kind: MemberKind
	text: str
	span: Span = Span()
	visibility: str | None = None  # "pub" or None (module-private)

	@property
	def is_public(self) -> bool:
		return self.visibility == "pub"


def with_location(member: Member, span: Span) -> Member:
	"""
	Return a copy of `member` whose source-location tag is `span`.

	The input is never modified; cached guest members stay anchored at their
	own declaration while hosts receive relocated copies.
	"""
	return replace(member, span=span)


def member_names(members: "tuple[Member, ...] | list[Member]") -> list[str]:
	return [m.name for m in members]


__all__ = ["Member", "MemberKind", "with_location", "member_names"]
