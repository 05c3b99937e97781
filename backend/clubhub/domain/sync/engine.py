"""Mirror the registry to the remote endpoint and the local cache."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Optional, Set

from clubhub.domain.registry import models
from clubhub.domain.registry.store import RegistryStore
from clubhub.domain.sync.codec import DecodeError, decode_aggregate, encode_aggregate
from clubhub.infra.local_cache import LocalCache
from clubhub.infra.remote import RemoteStateClient, TransportError
from clubhub.obs import metrics as obs_metrics

if TYPE_CHECKING:  # pragma: no cover
	from clubhub.settings import Settings

logger = logging.getLogger(__name__)

SOURCE_REMOTE = "remote"
SOURCE_CACHE = "cache"
SOURCE_DEFAULT = "default"


@dataclass(slots=True)
class SyncStatus:
	loaded: bool
	state: str
	source: Optional[str]
	last_synced_at: Optional[str]
	last_error: Optional[str]
	consecutive_failures: int
	revision: int

	def as_dict(self) -> dict:
		return asdict(self)


class SyncEngine:
	"""Debounced, fire-and-forget persistence of full registry snapshots.

	At most one push is scheduled at a time; a new mutation replaces it. A push
	already on the wire is never cancelled, so pushes may overlap and the last
	one to land wins. Each push carries the revision it snapshotted: the cache
	never goes back to an older revision, and when an older push reaches the
	remote after a newer one the current state is pushed again. Failed pushes
	retry with exponential backoff until a push succeeds or a newer mutation
	takes over the pending slot.
	"""

	def __init__(
		self,
		store: RegistryStore,
		*,
		remote: Optional[RemoteStateClient] = None,
		cache: Optional[LocalCache] = None,
		debounce_seconds: float = 2.0,
		retry_max_seconds: float = 60.0,
	) -> None:
		self.store = store
		self.remote = remote
		self.cache = cache
		self.debounce_seconds = debounce_seconds
		self.retry_max_seconds = retry_max_seconds
		self._pending: Optional[asyncio.Task] = None
		self._tasks: Set[asyncio.Task] = set()
		self._in_flight = 0
		self._closing = False
		self._cache_lock = asyncio.Lock()
		self._cached_revision = -1
		self._remote_revision = -1
		self._loaded = False
		self._source: Optional[str] = None
		self._revision = 0
		self._failures = 0
		self._last_error: Optional[str] = None
		self._last_synced_at: Optional[str] = None

	@classmethod
	def from_settings(cls, store: RegistryStore, settings: "Settings") -> "SyncEngine":
		remote = None
		if settings.remote_enabled:
			remote = RemoteStateClient(settings.sync_endpoint_url, timeout=settings.sync_timeout_seconds)
		return cls(
			store,
			remote=remote,
			cache=LocalCache(settings.local_cache_path),
			debounce_seconds=settings.sync_debounce_seconds,
			retry_max_seconds=settings.sync_retry_max_seconds,
		)

	# --- loading ---------------------------------------------------------

	async def load(self) -> str:
		"""Populate the store from remote, else the local cache, else defaults."""
		state: Optional[models.RegistryState] = None
		source = SOURCE_DEFAULT
		if self.remote is not None:
			try:
				state = decode_aggregate(await self.remote.fetch())
				source = SOURCE_REMOTE
			except (TransportError, DecodeError):
				logger.warning("sync_load_remote_failed", extra={"event": "sync_load_remote_failed"}, exc_info=True)
		if state is None and self.cache is not None:
			payload = await asyncio.to_thread(self.cache.read)
			if payload is not None:
				try:
					state = decode_aggregate(payload)
					source = SOURCE_CACHE
				except DecodeError:
					logger.warning("sync_load_cache_failed", extra={"event": "sync_load_cache_failed"}, exc_info=True)
		if state is None:
			state = models.RegistryState()
		async with self.store.lock:
			self.store.replace_all(state)
		self._loaded = True
		self._source = source
		obs_metrics.inc_sync_load(source)
		obs_metrics.set_registry_size(
			teachers=len(state.teachers),
			students=len(state.students),
			clubs=len(state.clubs),
			announcements=len(state.announcements),
		)
		logger.info("sync_loaded", extra={"event": "sync_loaded", "source": source})
		return source

	# --- scheduling ------------------------------------------------------

	def notify_state_changed(self) -> None:
		self._revision += 1
		self._schedule(self.debounce_seconds)

	@property
	def has_pending(self) -> bool:
		return self._pending is not None and not self._pending.done()

	def _schedule(self, delay: float) -> None:
		if self.has_pending:
			self._pending.cancel()
		task = asyncio.get_running_loop().create_task(self._delayed_push(delay))
		self._pending = task
		self._tasks.add(task)
		task.add_done_callback(self._tasks.discard)
		obs_metrics.set_sync_pending(True)

	async def _delayed_push(self, delay: float) -> None:
		await asyncio.sleep(delay)
		# Leaving the pending slot before pushing keeps this push from being
		# cancelled by the next mutation.
		if self._pending is asyncio.current_task():
			self._pending = None
			obs_metrics.set_sync_pending(False)
		ok = await self.push_now()
		if not ok and not self.has_pending and not self._closing:
			self._schedule(self._backoff_delay())

	def _backoff_delay(self) -> float:
		exponent = max(self._failures - 1, 0)
		return min(self.debounce_seconds * (2 ** exponent), self.retry_max_seconds)

	# --- pushing ---------------------------------------------------------

	async def push_now(self) -> bool:
		"""Write the current snapshot to the cache and the remote; True on success."""
		async with self.store.lock:
			snapshot = self.store.snapshot()
			revision = self._revision
		aggregate = encode_aggregate(snapshot)
		self._in_flight += 1
		started = time.perf_counter()
		try:
			cache_error: Optional[OSError] = None
			if self.cache is not None:
				try:
					await self._write_cache(aggregate, revision)
				except OSError as exc:
					cache_error = exc
					logger.warning("local_cache_write_failed", extra={"event": "local_cache_write_failed"}, exc_info=True)
			if self.remote is not None:
				await self.remote.push(aggregate)
			elif cache_error is not None:
				raise cache_error
		except (TransportError, OSError) as exc:
			self._record_failure(exc)
			return False
		finally:
			self._in_flight -= 1
		self._record_success(time.perf_counter() - started)
		if self.remote is not None:
			self._settle_remote(revision)
		return True

	async def _write_cache(self, aggregate: dict, revision: int) -> None:
		async with self._cache_lock:
			if revision < self._cached_revision:
				return
			await asyncio.to_thread(self.cache.write, aggregate)
			self._cached_revision = revision

	def _settle_remote(self, revision: int) -> None:
		if revision >= self._remote_revision:
			self._remote_revision = revision
			return
		# An older snapshot landed after a newer one; push the current state again.
		logger.info(
			"sync_stale_push_landed",
			extra={"event": "sync_stale_push_landed", "revision": revision, "latest": self._remote_revision},
		)
		if not self.has_pending and not self._closing:
			self._schedule(self.debounce_seconds)

	def _record_success(self, elapsed: float) -> None:
		self._failures = 0
		self._last_error = None
		self._last_synced_at = models.utc_now_iso()
		obs_metrics.inc_sync_push("success", latency_seconds=elapsed)
		logger.info("sync_pushed", extra={"event": "sync_pushed", "revision": self._revision})

	def _record_failure(self, exc: Exception) -> None:
		self._failures += 1
		self._last_error = str(exc)
		obs_metrics.inc_sync_push("failure")
		logger.warning(
			"sync_push_failed",
			extra={"event": "sync_push_failed", "consecutive_failures": self._failures},
			exc_info=exc,
		)

	# --- status / lifecycle ----------------------------------------------

	def status(self) -> SyncStatus:
		if self._in_flight:
			state = "syncing"
		elif self._failures:
			state = "error"
		elif self.has_pending:
			state = "pending"
		else:
			state = "idle"
		return SyncStatus(
			loaded=self._loaded,
			state=state,
			source=self._source,
			last_synced_at=self._last_synced_at,
			last_error=self._last_error,
			consecutive_failures=self._failures,
			revision=self._revision,
		)

	async def shutdown(self) -> None:
		"""Flush a scheduled push, wait for pushes on the wire, then close the client."""
		self._closing = True
		flush = self.has_pending
		if flush:
			self._pending.cancel()
		if self._tasks:
			await asyncio.gather(*list(self._tasks), return_exceptions=True)
		self._pending = None
		obs_metrics.set_sync_pending(False)
		if flush:
			await self.push_now()
		if self.remote is not None:
			await self.remote.aclose()
