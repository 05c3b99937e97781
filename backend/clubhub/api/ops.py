"""Operations endpoints providing health checks and metrics."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Header, Request, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from clubhub.api.deps import get_engine, get_store
from clubhub.domain.registry.store import RegistryStore
from clubhub.domain.sync.engine import SyncEngine
from clubhub.infra.auth import require_admin
from clubhub.obs import health

router = APIRouter(prefix="", tags=["ops"])


async def require_metrics_access(
	request: Request,
	x_admin_token: Optional[str] = Header(default=None, alias="X-Admin-Token"),
	authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> None:
	if request.app.state.settings.obs_metrics_public:
		return
	await require_admin(request, x_admin_token=x_admin_token, authorization=authorization)


@router.get("/health/live")
async def health_live() -> dict[str, str]:
	return await health.liveness()


@router.get("/health/ready")
async def health_ready(
	store: RegistryStore = Depends(get_store),
	engine: SyncEngine = Depends(get_engine),
) -> Response:
	status_code, payload = await health.readiness(store, engine)
	return JSONResponse(content=payload, status_code=status_code)


@router.get("/metrics", dependencies=[Depends(require_metrics_access)])
async def metrics_endpoint() -> Response:
	return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
