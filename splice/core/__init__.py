"""
splice.core: shared value types used across the front-end, core and driver.

Modules:
  - span: best-effort source locations
  - diagnostics: Diagnostic record + span formatting helpers
  - member: opaque Member token and the `with_location` transform
  - unit: SourceUnit and the HostKind/GuestKind tagged variant
"""

__all__ = [
    "span",
    "diagnostics",
    "member",
    "unit",
]
