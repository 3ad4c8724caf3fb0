# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
CLI entrypoint for `python -m splice.driver`.
"""

from .splicec import main

if __name__ == "__main__":
	import sys
	sys.exit(main())
