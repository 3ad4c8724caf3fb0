"""
Front-end for `.part` sources.

Parses each file with the lark grammar, validates module ids, classifies the
declared type (host / guest / non-participating) and produces SourceUnits for
the build pipeline. All user-facing problems come back as parser-phase
Diagnostics; nothing here raises for bad input.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Tuple

from lark.exceptions import UnexpectedInput

from . import parser as _parser
from . import ast as parser_ast
from splice.core.diagnostics import Diagnostic, has_errors
from splice.core.member import Member, MemberKind
from splice.core.span import Span
from splice.core.unit import Attribute, GuestKind, HostKind, SourceUnit, UnitKind

# The composition attribute: `@partials(guest.a, guest.b)`.
PARTIALS_ATTRIBUTE = "partials"

PART_SUFFIX = ".part"


def _diag(message: str, span: Span, *, notes: list[str] | None = None) -> Diagnostic:
	return Diagnostic(message=message, phase="parser", severity="error", span=span, notes=list(notes or []))


def _span_in_file(path: Path, loc: object | None) -> Span:
	"""Span anchored to a specific file (parser locations carry no filename)."""
	if loc is None:
		return Span(file=str(path))
	return Span.from_loc(loc).in_file(str(path))


def _validate_module_id(mid: str, *, span: Span) -> list[Diagnostic]:
	"""
	Validate a module id (format only).

	Rules (MVP):
	- dot-separated, non-empty segments,
	- segments start with a lowercase letter and contain only [a-z0-9_],
	- no leading/trailing/consecutive underscores in a segment.
	"""
	if not mid:
		return [_diag("invalid module id (empty)", span)]
	if mid.startswith(".") or mid.endswith(".") or ".." in mid:
		return [_diag(f"invalid module id '{mid}': dots must separate non-empty segments", span)]
	for seg in mid.split("."):
		if seg.startswith("_") or seg.endswith("_") or "__" in seg:
			return [_diag(f"invalid module id '{mid}': segment '{seg}' has invalid underscore placement", span)]
		if not ("a" <= seg[0] <= "z"):
			return [_diag(f"invalid module id '{mid}': segment '{seg}' must start with a lowercase letter", span)]
		for ch in seg:
			if not (("a" <= ch <= "z") or ("0" <= ch <= "9") or ch == "_"):
				return [_diag(f"invalid module id '{mid}': segment '{seg}' contains invalid character '{ch}'", span)]
	return []


def infer_module_id(path: Path, module_paths: list[Path]) -> tuple[str, Path] | tuple[None, None]:
	"""
	Infer a file's module id from the configured module roots.

	Rule (MVP):
	- pick the most specific root that contains the file (ties are ambiguous),
	- the id is the root-relative directory joined by '.' plus the file stem
	  (`root/partials/foo.part` -> `partials.foo`).
	"""
	abs_path = path.resolve()
	candidates: list[tuple[Path, Path]] = []
	for root in module_paths:
		abs_root = root.resolve()
		try:
			rel_dir = abs_path.parent.relative_to(abs_root)
		except ValueError:
			continue
		candidates.append((abs_root, rel_dir))
	if not candidates:
		return None, None
	candidates.sort(key=lambda r: len(r[0].parts), reverse=True)
	best_len = len(candidates[0][0].parts)
	best = [c for c in candidates if len(c[0].parts) == best_len]
	if len(best) != 1:
		return None, None
	abs_root, rel_dir = best[0]
	parts = [p for p in rel_dir.parts if p != "."]
	if ".." in parts:
		return None, None
	parts.append(abs_path.stem)
	return ".".join(parts), abs_root


def discover_part_files(roots: list[Path]) -> list[Path]:
	"""Return every `*.part` file under `roots` (files are taken as-is), sorted."""
	out: set[Path] = set()
	for root in roots:
		if not root.exists():
			continue
		if root.is_file():
			if root.suffix == PART_SUFFIX:
				out.add(root)
			continue
		for p in root.rglob(f"*{PART_SUFFIX}"):
			if p.is_file():
				out.add(p)
	return sorted(out)


def _classify(
	decl: parser_ast.TypeDecl,
	module_id: str,
	path: Path,
	diagnostics: list[Diagnostic],
) -> UnitKind | None:
	"""
	Produce the unit kind from the type's declaration.

	`@partials(...)` makes a host; `partial type` without it makes a guest;
	anything else does not participate.
	"""
	comp = [a for a in decl.attributes if a.name == PARTIALS_ATTRIBUTE]
	if not comp:
		return GuestKind() if decl.partial else None
	if len(comp) > 1:
		diagnostics.append(
			_diag(
				f"duplicate @{PARTIALS_ATTRIBUTE} attribute on type '{decl.name}'",
				_span_in_file(path, comp[1].loc),
				notes=[f"first @{PARTIALS_ATTRIBUTE} is at {_span_in_file(path, comp[0].loc).short()}"],
			)
		)
		return None
	attr = comp[0]
	attr_span = _span_in_file(path, attr.loc)
	if not attr.args:
		diagnostics.append(_diag(f"@{PARTIALS_ATTRIBUTE} on type '{decl.name}' lists no modules", attr_span))
		return None
	seen: set[str] = set()
	for guest in attr.args:
		diagnostics.extend(_validate_module_id(guest, span=attr_span))
		if guest == module_id:
			diagnostics.append(_diag(f"module '{module_id}' lists itself in @{PARTIALS_ATTRIBUTE}", attr_span))
		elif guest in seen:
			diagnostics.append(_diag(f"module '{guest}' is listed more than once in @{PARTIALS_ATTRIBUTE}", attr_span))
		seen.add(guest)
	return HostKind(guests=tuple(attr.args), span=attr_span)


def _to_unit(prog: parser_ast.PartFile, module_id: str, path: Path, diagnostics: list[Diagnostic]) -> SourceUnit:
	decl = prog.types[0]
	kind = _classify(decl, module_id, path, diagnostics)
	members = tuple(
		Member(
			name=m.name,
			kind=MemberKind(m.kind),
			text=m.text,
			span=_span_in_file(path, m.loc),
			visibility=m.visibility,
		)
		for m in decl.members
	)
	attributes = tuple(
		Attribute(name=a.name, args=tuple(a.args), span=_span_in_file(path, a.loc)) for a in decl.attributes
	)
	return SourceUnit(
		module_id=module_id,
		name=decl.name,
		members=members,
		kind=kind,
		span=_span_in_file(path, decl.loc),
		attributes=attributes,
		path=str(path),
	)


def _parse_one(path: Path, source: str, diagnostics: list[Diagnostic]) -> Optional[parser_ast.PartFile]:
	try:
		return _parser.parse_part(source)
	except _parser.PartialDeclError as err:
		diagnostics.append(_diag(str(err), _span_in_file(path, err.loc)))
	except UnexpectedInput as err:
		span = Span(
			file=str(path),
			line=getattr(err, "line", None),
			column=getattr(err, "column", None),
			raw=err,
		)
		diagnostics.append(_diag(str(err), span))
	return None


def parse_part_source(
	source: str,
	*,
	path: Path,
	module_id: str | None = None,
) -> Tuple[Optional[SourceUnit], List[Diagnostic]]:
	"""
	Parse a single source text into a SourceUnit.

	`module_id` is used when the file has no `module` header; a header that
	disagrees with it is an error.
	"""
	diagnostics: list[Diagnostic] = []
	prog = _parse_one(path, source, diagnostics)
	if prog is None:
		return None, diagnostics
	declared = prog.module
	decl_span = _span_in_file(path, prog.module_loc) if prog.module_loc else Span(file=str(path), line=1, column=1)
	if declared is not None:
		diagnostics.extend(_validate_module_id(declared, span=decl_span))
		if module_id is not None and declared != module_id:
			diagnostics.append(
				_diag(
					f"module id mismatch: expected '{module_id}', found '{declared}'",
					decl_span,
				)
			)
	mid = declared or module_id
	if mid is None:
		diagnostics.append(_diag("missing `module` declaration (and no module root to infer it from)", decl_span))
	if has_errors(diagnostics):
		return None, diagnostics
	assert mid is not None
	unit = _to_unit(prog, mid, path, diagnostics)
	if has_errors(diagnostics):
		return None, diagnostics
	return unit, diagnostics


def parse_part_files(
	paths: list[Path],
	*,
	module_paths: list[Path] | None = None,
) -> Tuple[List[SourceUnit], List[Diagnostic]]:
	"""
	Parse a set of `.part` files into units.

	- module ids come from `module` headers, or are inferred from `module_paths`
	  (a header, when present, must match the inferred id),
	- duplicate module ids are errors pinned at the second file, with a note at
	  the first,
	- on any error the returned unit list is empty (the build must not start).
	"""
	diagnostics: list[Diagnostic] = []
	if not paths:
		return [], [_diag("no input files", Span())]
	units: list[SourceUnit] = []
	first_by_module: Dict[str, SourceUnit] = {}
	for path in paths:
		inferred: str | None = None
		if module_paths:
			inferred, root = infer_module_id(path, module_paths)
			if inferred is None:
				diagnostics.append(
					_diag(
						f"file '{path}' is not under exactly one configured module root",
						Span(file=str(path), line=1, column=1),
					)
				)
				continue
			diagnostics.extend(_validate_module_id(inferred, span=Span(file=str(path), line=1, column=1)))
		unit, diags = parse_part_source(path.read_text(encoding="utf-8"), path=path, module_id=inferred)
		diagnostics.extend(diags)
		if unit is None:
			continue
		prev = first_by_module.get(unit.module_id)
		if prev is not None:
			diagnostics.append(
				_diag(
					f"duplicate definition of module '{unit.module_id}'",
					unit.span,
					notes=[f"previous definition is at {prev.span.short()}"],
				)
			)
			continue
		first_by_module[unit.module_id] = unit
		units.append(unit)
	if has_errors(diagnostics):
		return [], diagnostics
	return units, diagnostics


__all__ = [
	"PARTIALS_ATTRIBUTE",
	"PART_SUFFIX",
	"discover_part_files",
	"infer_module_id",
	"parse_part_files",
	"parse_part_source",
]
