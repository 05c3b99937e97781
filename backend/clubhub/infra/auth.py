"""Caller identity for FastAPI endpoints.

Teachers identify with their teacher id (``X-Teacher-Id``), which must resolve
to a teacher in the registry. Administrators present ``X-Admin-Token``.
"""

from __future__ import annotations

import secrets
from typing import Optional

from fastapi import Header, HTTPException, Request, status

from clubhub.domain.registry import models


async def get_current_teacher(
	request: Request,
	x_teacher_id: Optional[str] = Header(default=None, alias="X-Teacher-Id"),
) -> models.Teacher:
	if not x_teacher_id or not x_teacher_id.strip():
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="missing_teacher_id")
	teacher = request.app.state.store.get_teacher(x_teacher_id)
	if teacher is None:
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_teacher")
	return teacher


def _resolve_token(x_admin_token: Optional[str], authorization: Optional[str]) -> Optional[str]:
	if x_admin_token:
		return x_admin_token
	if authorization and authorization.lower().startswith("bearer "):
		return authorization.split(" ", 1)[1]
	return None


async def require_admin(
	request: Request,
	x_admin_token: Optional[str] = Header(default=None, alias="X-Admin-Token"),
	authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> None:
	token = request.app.state.settings.admin_token
	if not token:
		raise HTTPException(status.HTTP_403_FORBIDDEN, detail="admin_token_not_configured")
	provided = _resolve_token(x_admin_token, authorization)
	if provided is None or not secrets.compare_digest(provided.encode("utf-8"), token.encode("utf-8")):
		raise HTTPException(status.HTTP_403_FORBIDDEN, detail="forbidden")
