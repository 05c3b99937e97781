"""Health check helpers for liveness and readiness probes."""

from __future__ import annotations

from typing import Any, Dict, Tuple

from clubhub.domain.registry.store import RegistryStore
from clubhub.domain.sync.engine import SyncEngine


async def liveness() -> Dict[str, Any]:
	return {"status": "ok"}


async def readiness(store: RegistryStore, engine: SyncEngine) -> Tuple[int, Dict[str, Any]]:
	status = engine.status()
	# Sync failures degrade the mirror, never the service itself.
	ok = status.loaded
	return (
		200 if ok else 503,
		{
			"status": "ok" if ok and status.state != "error" else "degraded" if ok else "starting",
			"checks": {
				"registry": {
					"ok": True,
					"teachers": len(store.teachers),
					"students": len(store.students),
					"clubs": len(store.clubs),
				},
				"sync": status.as_dict(),
			},
		},
	)
