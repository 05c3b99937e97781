"""Administrative reports."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from clubhub.api.deps import get_store
from clubhub.domain.registry import reports as registry_reports
from clubhub.domain.registry.store import RegistryStore
from clubhub.infra.auth import require_admin

router = APIRouter(prefix="/reports", tags=["reports"], dependencies=[Depends(require_admin)])


@router.get("/class")
async def class_report_endpoint(
	level: str = Query(..., description="Grade level, e.g. ม.1"),
	room: str = Query(..., description="Room number 1-13"),
	store: RegistryStore = Depends(get_store),
) -> dict:
	return registry_reports.class_report(store, level, room)
