"""Observability package bootstrap."""

from __future__ import annotations

from fastapi import FastAPI

from clubhub.obs import logging as obs_logging
from clubhub.obs import middleware
from clubhub.settings import settings

_logging_configured = False


def init(app: FastAPI) -> None:
	"""Wire logging and request middleware from the settings bound to ``app``."""
	global _logging_configured
	app_settings = getattr(app.state, "settings", settings)
	if not app_settings.obs_enabled:
		return
	if not _logging_configured:
		obs_logging.configure_logging(app_settings)
		_logging_configured = True
	middleware.install(app, enabled=app_settings.obs_enabled)


__all__ = ["init"]
