# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
splice driver package.

The CLI entrypoint is `splice.driver.splicec:main` (`python -m splice.driver`).
"""

__all__ = []
