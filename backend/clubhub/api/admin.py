"""Administrator endpoints: teacher roster, announcements, settings and sync."""

from __future__ import annotations

from typing import Literal, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from clubhub.api.deps import get_engine, get_service, get_store
from clubhub.domain.registry import bulk, reports, schemas
from clubhub.domain.registry.service import BulkImportResult, RegistryService
from clubhub.domain.registry.store import RegistryStore
from clubhub.domain.sync.engine import SyncEngine
from clubhub.infra.auth import require_admin

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


def _bulk_response(result: BulkImportResult) -> schemas.BulkImportResponse:
	message = f"Imported {len(result.inserted)} teachers"
	if result.skipped:
		message += f", skipped {len(result.skipped)} duplicate ids"
	return schemas.BulkImportResponse(message=message + ".", inserted=result.inserted, skipped=result.skipped)


# --- teachers ----------------------------------------------------------------


@router.get("/teachers")
async def list_teachers_endpoint(
	department: Optional[str] = Query(default=None),
	club: Optional[str] = Query(default=None, description="Case-insensitive club name filter"),
	sort: Optional[Literal["asc", "desc"]] = Query(default=None),
	store: RegistryStore = Depends(get_store),
) -> list[dict]:
	return reports.teacher_overview(store, department=department, club_query=club, sort=sort)


@router.post("/teachers", response_model=schemas.MutationResponse, status_code=status.HTTP_201_CREATED)
async def add_teacher_endpoint(
	payload: schemas.TeacherCreateRequest,
	service: RegistryService = Depends(get_service),
) -> schemas.MutationResponse:
	teacher = await service.add_teacher(payload)
	return schemas.MutationResponse(message="Teacher added.", record=teacher.to_dict())


@router.post("/teachers/bulk", response_model=schemas.BulkImportResponse)
async def bulk_add_teachers_endpoint(
	payload: schemas.BulkTeachersRequest,
	service: RegistryService = Depends(get_service),
) -> schemas.BulkImportResponse:
	return _bulk_response(await service.bulk_add_teachers(payload.teachers))


@router.post("/teachers/bulk-text", response_model=schemas.BulkImportResponse)
async def bulk_add_teachers_text_endpoint(
	payload: schemas.BulkTeachersTextRequest,
	service: RegistryService = Depends(get_service),
) -> schemas.BulkImportResponse:
	entries = bulk.parse_teacher_lines(payload.text)
	return _bulk_response(await service.bulk_add_teachers(entries))


@router.put("/teachers/{teacher_id}", response_model=schemas.MutationResponse)
async def update_teacher_endpoint(
	teacher_id: str,
	payload: schemas.TeacherUpdateRequest,
	service: RegistryService = Depends(get_service),
) -> schemas.MutationResponse:
	teacher = await service.update_teacher(teacher_id, payload)
	return schemas.MutationResponse(message="Teacher updated.", record=teacher.to_dict())


@router.delete("/teachers/{teacher_id}", response_model=schemas.MutationResponse)
async def delete_teacher_endpoint(
	teacher_id: str,
	service: RegistryService = Depends(get_service),
) -> schemas.MutationResponse:
	removed = await service.delete_teacher(teacher_id)
	return schemas.MutationResponse(message="Teacher removed." if removed else "Teacher already removed.")


# --- announcements -----------------------------------------------------------


@router.get("/announcements")
async def list_announcements_endpoint(store: RegistryStore = Depends(get_store)) -> list[dict]:
	return [a.to_dict() for a in store.announcements]


@router.post("/announcements", response_model=schemas.MutationResponse, status_code=status.HTTP_201_CREATED)
async def create_announcement_endpoint(
	payload: schemas.AnnouncementCreateRequest,
	service: RegistryService = Depends(get_service),
) -> schemas.MutationResponse:
	announcement = await service.create_announcement(payload)
	return schemas.MutationResponse(message="Announcement published.", record=announcement.to_dict())


@router.put("/announcements/{announcement_id}", response_model=schemas.MutationResponse)
async def update_announcement_endpoint(
	announcement_id: str,
	payload: schemas.AnnouncementUpdateRequest,
	service: RegistryService = Depends(get_service),
) -> schemas.MutationResponse:
	announcement = await service.update_announcement(announcement_id, payload)
	return schemas.MutationResponse(message="Announcement updated.", record=announcement.to_dict())


@router.delete("/announcements/{announcement_id}", response_model=schemas.MutationResponse)
async def delete_announcement_endpoint(
	announcement_id: str,
	service: RegistryService = Depends(get_service),
) -> schemas.MutationResponse:
	removed = await service.delete_announcement(announcement_id)
	return schemas.MutationResponse(message="Announcement deleted." if removed else "Announcement already removed.")


@router.post("/announcements/{announcement_id}/pin", response_model=schemas.MutationResponse)
async def toggle_pin_endpoint(
	announcement_id: str,
	service: RegistryService = Depends(get_service),
) -> schemas.MutationResponse:
	announcement = await service.toggle_announcement_pin(announcement_id)
	return schemas.MutationResponse(message="Pinned." if announcement.is_pinned else "Unpinned.", record=announcement.to_dict())


@router.post("/announcements/{announcement_id}/hide", response_model=schemas.MutationResponse)
async def toggle_hide_endpoint(
	announcement_id: str,
	service: RegistryService = Depends(get_service),
) -> schemas.MutationResponse:
	announcement = await service.toggle_announcement_hidden(announcement_id)
	return schemas.MutationResponse(message="Hidden." if announcement.is_hidden else "Visible.", record=announcement.to_dict())


# --- settings & sync ---------------------------------------------------------


@router.put("/settings/system-open", response_model=schemas.MutationResponse)
async def system_open_endpoint(
	payload: Optional[schemas.SystemOpenRequest] = Body(default=None),
	service: RegistryService = Depends(get_service),
) -> schemas.MutationResponse:
	current = await service.set_system_open(payload.is_open if payload else None)
	message = "Registration opened." if current.is_system_open else "Registration closed."
	return schemas.MutationResponse(message=message, record=current.to_dict())


@router.put("/settings/rules", response_model=schemas.MutationResponse)
async def rules_endpoint(
	payload: schemas.RulesUpdateRequest,
	service: RegistryService = Depends(get_service),
) -> schemas.MutationResponse:
	current = await service.update_registration_rules(payload.rules)
	return schemas.MutationResponse(message="Rules saved.", record=current.to_dict())


@router.post("/sync")
async def force_sync_endpoint(engine: SyncEngine = Depends(get_engine)) -> dict:
	ok = await engine.push_now()
	return {"ok": ok, "status": engine.status().as_dict()}


@router.get("/sync")
async def sync_status_endpoint(engine: SyncEngine = Depends(get_engine)) -> dict:
	return engine.status().as_dict()
