# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: splice maintainers; created: 2026-09-14
"""
Session-lifetime store of captured guest members.

Lifetime contract (pinned):
- one ModuleCache is created per BuildSession and handed to every pass,
- entries survive incremental passes; a guest that is not rebuilt in a pass is
  still visible to hosts rebuilt in that pass,
- nothing is written to disk; the cache dies with the process,
- only an explicit clean rebuild (`clear`) drops entries mid-session.

`persistent` advertises that contract to the embedding environment.

All access goes through one re-entrant lock. Entries are stored as tuples of
frozen members, so a reader either sees a complete entry or none at all.
"""

from __future__ import annotations

import threading
from typing import Dict, Iterable, List, Optional, Set, Tuple

from splice.core.member import Member


class ModuleCache:
	persistent = True

	def __init__(self) -> None:
		self._lock = threading.RLock()
		self._entries: Dict[str, Tuple[Member, ...]] = {}
		# Keys written since the last `begin_pass`.
		self._written_this_pass: Set[str] = set()

	def put(self, key: str, members: Iterable[Member]) -> bool:
		"""
		Store `members` under `key`, replacing any previous entry.

		Returns True when `key` was already written during the current pass
		(a double capture); the new members win either way.
		"""
		entry = tuple(members)
		with self._lock:
			double = key in self._written_this_pass
			self._entries[key] = entry
			self._written_this_pass.add(key)
			return double

	def get(self, key: str) -> Optional[Tuple[Member, ...]]:
		"""Return the captured members for `key`, or None when absent."""
		with self._lock:
			return self._entries.get(key)

	def discard(self, key: str) -> None:
		with self._lock:
			self._entries.pop(key, None)
			self._written_this_pass.discard(key)

	def clear(self) -> None:
		with self._lock:
			self._entries.clear()
			self._written_this_pass.clear()

	def begin_pass(self) -> None:
		"""Start a new pass: earlier writes no longer count as double captures."""
		with self._lock:
			self._written_this_pass.clear()

	def keys(self) -> List[str]:
		with self._lock:
			return sorted(self._entries)

	def __contains__(self, key: object) -> bool:
		with self._lock:
			return key in self._entries

	def __len__(self) -> int:
		with self._lock:
			return len(self._entries)


__all__ = ["ModuleCache"]
