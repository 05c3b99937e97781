"""Dependency accessors for handles stored on ``app.state``."""

from __future__ import annotations

from fastapi import Request

from clubhub.domain.registry.service import RegistryService
from clubhub.domain.registry.store import RegistryStore
from clubhub.domain.sync.engine import SyncEngine


def get_store(request: Request) -> RegistryStore:
	return request.app.state.store


def get_service(request: Request) -> RegistryService:
	return request.app.state.service


def get_engine(request: Request) -> SyncEngine:
	return request.app.state.engine
