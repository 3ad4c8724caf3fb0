# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: splice maintainers; created: 2026-09-14
"""
Composition failures that propagate to the forcing host.

A missing cache entry is not an error (see MemberMerger); these are the cases
where the host build must fail. `code` is the diagnostic code the pipeline
reports the failure under.
"""

from __future__ import annotations


class CompositionError(RuntimeError):
	"""Base class for failures that abort a host build."""

	code = "E-PARTIAL-COMPOSE"

	def __init__(self, message: str, *, module_id: str) -> None:
		super().__init__(message)
		self.module_id = module_id


class UnresolvableModuleError(CompositionError):
	"""A forced module id does not name any unit known to the pipeline."""

	code = "E-PARTIAL-UNKNOWN-MODULE"

	def __init__(self, module_id: str) -> None:
		super().__init__(f"unknown module '{module_id}'", module_id=module_id)


class ModuleBuildError(CompositionError):
	"""
	A forced module exists but its own build failed.

	`cause` is the failure that marked the module FAILED, when known.
	"""

	code = "E-PARTIAL-MODULE-FAILED"

	def __init__(self, module_id: str, *, cause: str | None = None) -> None:
		msg = f"module '{module_id}' failed to build"
		if cause:
			msg = f"{msg}: {cause}"
		super().__init__(msg, module_id=module_id)
		self.cause = cause


class NotAGuestError(CompositionError):
	"""A forced module exists but is not a `partial` type, so it has nothing to contribute."""

	code = "E-PARTIAL-NOT-A-GUEST"

	def __init__(self, module_id: str, *, state: str) -> None:
		super().__init__(f"module '{module_id}' is not a partial type (built as {state})", module_id=module_id)
		self.state = state


__all__ = ["CompositionError", "UnresolvableModuleError", "ModuleBuildError", "NotAGuestError"]
