"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clubhub.api import admin, clubs, ops, public, reports, students, teachers
from clubhub.api.errors import install_error_handlers
from clubhub.api.middleware_request_id import RequestIdMiddleware
from clubhub.domain.registry import RegistryService, RegistryStore
from clubhub.domain.sync import SyncEngine
from clubhub.obs import init as obs_init
from clubhub.settings import Settings, settings

logger = logging.getLogger(__name__)

_DEV_ORIGINS = [
	"http://localhost:3000",
	"http://127.0.0.1:3000",
	"http://localhost:5173",
	"http://127.0.0.1:5173",
]


@asynccontextmanager
async def lifespan(app: FastAPI):
	engine: SyncEngine = app.state.engine
	source = await engine.load()
	logger.info(
		"startup_complete",
		extra={"event": "startup_complete", "source": source, "remote_enabled": app.state.settings.remote_enabled},
	)
	try:
		yield
	finally:
		await engine.shutdown()


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
	app_settings = app_settings or settings
	app = FastAPI(title="Club Registration API", lifespan=lifespan)

	store = RegistryStore()
	engine = SyncEngine.from_settings(store, app_settings)
	app.state.settings = app_settings
	app.state.store = store
	app.state.engine = engine
	app.state.service = RegistryService(store, listener=engine)

	install_error_handlers(app)

	if app_settings.cors_allow_origins:
		allow_origins = list(app_settings.cors_allow_origins)
	elif app_settings.is_dev():
		allow_origins = _DEV_ORIGINS
	else:
		allow_origins = []
	app.add_middleware(
		CORSMiddleware,
		allow_origins=allow_origins,
		allow_credentials=True,
		allow_methods=["*"],
		allow_headers=["*"],
	)

	obs_init(app)
	app.add_middleware(RequestIdMiddleware)

	app.include_router(public.router)
	app.include_router(clubs.router)
	app.include_router(students.router)
	app.include_router(teachers.router)
	app.include_router(admin.router)
	app.include_router(reports.router)
	app.include_router(ops.router)
	return app


app = create_app()
