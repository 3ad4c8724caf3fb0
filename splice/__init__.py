# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
splice: build-time composition of partial types.

Packages:
  core: spans, diagnostics, members and unit kinds shared by every stage
  parser: front-end for `.part` sources (lark grammar -> SourceUnit)
  compose: the composition core (cache, capture, force, merge, build hook)
  driver: build pipeline, incremental session and the `splicec` CLI
"""

__all__ = ["core", "parser", "compose", "driver"]
