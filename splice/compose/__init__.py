# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
splice.compose: the build-time composition core.

Modules:
  - protocol: HookContext (what the pipeline hands a hook) + UnitResult/UnitState
  - errors: CompositionError and its subclasses
  - cache: ModuleCache (session-lifetime guest member store)
  - capture: guest capture + suppression
  - forcer: force-resolve guests by module id before lookup
  - merger: splice relocated guest members into a host
  - hook: classification glue (`PartialsHook`)
"""

from .cache import ModuleCache
from .capture import capture_members
from .errors import CompositionError, ModuleBuildError, NotAGuestError, UnresolvableModuleError
from .forcer import DependencyForcer
from .hook import PartialsHook
from .merger import MemberMerger
from .protocol import HookContext, UnitResult, UnitState

__all__ = [
	"ModuleCache",
	"capture_members",
	"DependencyForcer",
	"MemberMerger",
	"PartialsHook",
	"HookContext",
	"UnitResult",
	"UnitState",
	"CompositionError",
	"ModuleBuildError",
	"NotAGuestError",
	"UnresolvableModuleError",
]
