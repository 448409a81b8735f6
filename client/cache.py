"""Read-through cache for on-chain values shown by the client.

Keyed by (contract address, account, field). Each entry keeps the last known
good value, when it was fetched, the sequence number of the read that produced
it, and a stale flag:

- reads are numbered in issue order; a completion older than the stored entry
  is dropped, so a slow response can never overwrite a newer one
- a failed read keeps the last known good value and marks it stale
- writes invalidate (mark stale) the keys they touch; the next read refetches
"""

import itertools
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, NamedTuple, Optional

logger = logging.getLogger(__name__)


class CacheKey(NamedTuple):
	contract: Optional[str]
	account: Optional[str]
	field: str


@dataclass
class CachedValue:
	value: Any
	fetched_at: float
	seq: int
	stale: bool = False
	error: str = ""


class ReadThroughCache:

	def __init__(self, clock: Callable[[], float] = time.monotonic):
		self._clock = clock
		self._entries: dict[CacheKey, CachedValue] = {}
		self._seq = itertools.count(1)

	def __contains__(self, key) -> bool:
		return key in self._entries

	def entry(self, key: CacheKey) -> Optional[CachedValue]:
		return self._entries.get(key)

	def peek(self, key: CacheKey, default=None):
		"""
		Last known good value without fetching (stale or not)
		"""
		entry = self._entries.get(key)
		return entry.value if entry else default

	def begin(self, key: CacheKey) -> int:
		"""
		Ticket for a read about to be issued
		"""
		return next(self._seq)

	def complete(self, key: CacheKey, seq: int, value) -> bool:
		"""
		Apply a read result unless a newer one is already stored; True when applied
		"""
		current = self._entries.get(key)
		if current is not None and current.seq > seq:
			logger.debug("dropping out-of-order read %s (seq %s < %s)", key, seq, current.seq)
			return False
		self._entries[key] = CachedValue(value=value, fetched_at=self._clock(), seq=seq)
		return True

	def fail(self, key: CacheKey, seq: int, error: str) -> None:
		current = self._entries.get(key)
		if current is None or current.seq > seq:
			return
		current.stale = True
		current.error = error

	def read(self, key: CacheKey, loader: Callable[[], Any]):
		"""
		Cached value if fresh, otherwise fetch through `loader`
		"""
		entry = self._entries.get(key)
		if entry is not None and not entry.stale:
			return entry.value
		return self.refresh(key, loader)

	def refresh(self, key: CacheKey, loader: Callable[[], Any]):
		seq = self.begin(key)
		try:
			value = loader()
		except Exception as e:
			self.fail(key, seq, str(e))
			raise
		self.complete(key, seq, value)
		return self._entries[key].value

	def invalidate(self, *keys: CacheKey) -> None:
		for key in keys:
			entry = self._entries.get(key)
			if entry is not None:
				entry.stale = True

	def invalidate_matching(self, contract: Optional[str] = None, account: Optional[str] = None) -> None:
		"""
		Mark every entry for a contract and/or account stale
		"""
		for key, entry in self._entries.items():
			if contract is not None and key.contract != contract:
				continue
			if account is not None and key.account != account:
				continue
			entry.stale = True
