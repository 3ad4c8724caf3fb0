from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class Located:
    line: int
    column: int
    end_line: Optional[int] = None
    end_column: Optional[int] = None


@dataclass
class AttributeDecl:
    name: str
    args: List[str]
    loc: Located


@dataclass
class MemberDecl:
    kind: str  # "fn" | "var"
    name: str
    text: str  # exact source slice, kept opaque
    loc: Located
    visibility: Optional[str] = None


@dataclass
class TypeDecl:
    name: str
    members: List[MemberDecl]
    loc: Located
    partial: bool = False
    attributes: List[AttributeDecl] = field(default_factory=list)


@dataclass
class PartFile:
    types: List[TypeDecl]
    module: Optional[str] = None
    module_loc: Optional[Located] = None
