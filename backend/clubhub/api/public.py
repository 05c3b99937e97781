"""Public endpoints: landing overview, announcements, rules and registration."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from clubhub.api.deps import get_service, get_store
from clubhub.domain.registry import reports, schemas
from clubhub.domain.registry.service import RegistryService
from clubhub.domain.registry.store import RegistryStore

router = APIRouter(prefix="", tags=["public"])


@router.get("/public/overview", response_model=schemas.OverviewOut)
async def overview_endpoint(store: RegistryStore = Depends(get_store)) -> schemas.OverviewOut:
	return schemas.OverviewOut(**reports.overview(store))


@router.get("/public/announcements")
async def announcements_endpoint(store: RegistryStore = Depends(get_store)) -> list[dict]:
	return [a.to_dict() for a in reports.public_announcements(store)]


@router.get("/public/rules")
async def rules_endpoint(store: RegistryStore = Depends(get_store)) -> dict:
	return store.settings.to_dict()


@router.post("/registrations", response_model=schemas.MutationResponse, status_code=status.HTTP_201_CREATED)
async def register_endpoint(
	payload: schemas.RegistrationRequest,
	service: RegistryService = Depends(get_service),
) -> schemas.MutationResponse:
	student = await service.register_student(payload)
	return schemas.MutationResponse(message="Registration complete.", record=student.to_dict())
