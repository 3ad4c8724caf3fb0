from __future__ import annotations

import ast
from pathlib import Path
from typing import List, Optional

from lark import Lark, Token, Tree

from .ast import AttributeDecl, Located, MemberDecl, PartFile, TypeDecl

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

# The contextual lexer is required: BODY would otherwise swallow a whole type
# body at the `{` following `type Name`.
_PARSER = Lark(
    _GRAMMAR_SRC,
    parser="lalr",
    lexer="contextual",
    start="start",
    propagate_positions=True,
    maybe_placeholders=False,
)


class PartialDeclError(ValueError):
	"""
	User-facing declaration error raised by the AST builder (not the grammar).

	Examples:
	- a file that declares no type, or more than one,
	- an unterminated/oddly escaped attribute string.

	The front-end converts this into a parser-phase diagnostic.
	"""

	def __init__(self, message: str, *, loc: Optional[Located]) -> None:
		super().__init__(message)
		self.loc = loc


def parse_part(source: str) -> PartFile:
    tree = _PARSER.parse(source)
    return _build_file(tree, source)


def _build_file(tree: Tree, source: str) -> PartFile:
    module_name: Optional[str] = None
    module_loc: Optional[Located] = None
    types: List[TypeDecl] = []
    for child in tree.children:
        if not isinstance(child, Tree):
            continue
        kind = _name(child)
        if kind == "module_decl":
            module_name = _dotted(child.children[0])
            module_loc = _loc(child)
        elif kind == "type_decl":
            types.append(_build_type(child, source))
    if not types:
        raise PartialDeclError("file declares no type", loc=module_loc)
    if len(types) > 1:
        raise PartialDeclError(
            f"a module declares exactly one type; found a second type '{types[1].name}'",
            loc=types[1].loc,
        )
    return PartFile(types=types, module=module_name, module_loc=module_loc)


def _build_type(tree: Tree, source: str) -> TypeDecl:
    attributes: List[AttributeDecl] = []
    members: List[MemberDecl] = []
    partial = False
    name: Optional[str] = None
    for child in tree.children:
        if isinstance(child, Token):
            if child.type == "PARTIAL":
                partial = True
            elif child.type == "NAME":
                name = child.value
            continue
        kind = _name(child)
        if kind == "attribute":
            attributes.append(_build_attribute(child))
        elif kind in ("fn_member", "var_member"):
            members.append(_build_member(child, source))
    assert name is not None, "type_decl without NAME"
    return TypeDecl(name=name, members=members, loc=_loc(tree), partial=partial, attributes=attributes)


def _build_attribute(tree: Tree) -> AttributeDecl:
    name_tok = next(c for c in tree.children if isinstance(c, Token) and c.type == "NAME")
    args: List[str] = []
    args_node = next((c for c in tree.children if isinstance(c, Tree) and _name(c) == "attr_args"), None)
    if args_node is not None:
        for arg in args_node.children:
            if not isinstance(arg, Tree):
                continue
            if _name(arg) == "string_arg":
                args.append(_decode_string(arg.children[0], _loc(arg)))
            else:
                args.append(_dotted(arg))
    return AttributeDecl(name=name_tok.value, args=args, loc=_loc(tree))


def _build_member(tree: Tree, source: str) -> MemberDecl:
    visibility: Optional[str] = None
    name: Optional[str] = None
    for child in tree.children:
        if not isinstance(child, Token):
            continue
        if child.type == "PUB":
            visibility = "pub"
        elif child.type == "NAME" and name is None:
            name = child.value
    assert name is not None, "member without NAME"
    meta = tree.meta
    text = source[meta.start_pos:meta.end_pos]
    kind = "fn" if _name(tree) == "fn_member" else "var"
    return MemberDecl(kind=kind, name=name, text=text, loc=_loc(tree), visibility=visibility)


def _decode_string(tok: Token, loc: Located) -> str:
    try:
        value = ast.literal_eval(tok.value)
    except (SyntaxError, ValueError) as err:
        raise PartialDeclError(f"invalid string literal {tok.value}: {err}", loc=loc) from err
    return str(value)


def _dotted(tree: Tree) -> str:
    return ".".join(c.value for c in tree.children if isinstance(c, Token))


def _loc(tree: Tree) -> Located:
    meta = tree.meta
    return Located(line=meta.line, column=meta.column, end_line=meta.end_line, end_column=meta.end_column)


def _name(node: Tree | Token) -> str:
    if isinstance(node, Tree):
        data = node.data
        if isinstance(data, Token):
            return data.value
        return data
    if isinstance(node, Token):
        return node.type
    return str(node)
