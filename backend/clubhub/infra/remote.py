"""HTTP client for the spreadsheet-backed state endpoint."""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

import httpx


class TransportError(RuntimeError):
	"""Remote endpoint unreachable, timed out, or answered with an error."""


class RemoteStateClient:
	"""Fetches and pushes the whole registry aggregate.

	The endpoint answers ``GET`` with the aggregate (or ``{"error": ...}``) and
	accepts ``POST {"action": "syncAll", "data": ...}``. Pushes are sent as
	``text/plain`` because the endpoint rejects preflighted content types; the
	push response body carries nothing and is ignored.
	"""

	def __init__(self, endpoint: str, *, timeout: float = 10.0, http: Optional[httpx.AsyncClient] = None) -> None:
		self.endpoint = endpoint
		self.timeout = timeout
		self._owns_client = http is None
		self.http = http or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

	async def fetch(self) -> Dict[str, Any]:
		try:
			response = await self.http.get(self.endpoint, timeout=self.timeout, follow_redirects=True)
			response.raise_for_status()
			payload = response.json()
		except (httpx.HTTPError, ValueError) as exc:
			raise TransportError(f"fetch failed: {exc}") from exc
		if not isinstance(payload, dict):
			raise TransportError("fetch returned a non-object payload")
		if payload.get("error"):
			raise TransportError(f"remote error: {payload['error']}")
		return payload

	async def push(self, aggregate: Dict[str, Any]) -> None:
		body = json.dumps({"action": "syncAll", "data": aggregate}, ensure_ascii=False)
		try:
			response = await self.http.post(
				self.endpoint,
				content=body.encode("utf-8"),
				headers={"Content-Type": "text/plain;charset=utf-8"},
				timeout=self.timeout,
				follow_redirects=True,
			)
			response.raise_for_status()
		except httpx.HTTPError as exc:
			raise TransportError(f"push failed: {exc}") from exc

	async def aclose(self) -> None:
		if self._owns_client:
			await self.http.aclose()
