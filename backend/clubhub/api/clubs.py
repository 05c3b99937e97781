"""Club listing, ranking and advisor-side club management."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from clubhub.api.deps import get_service, get_store
from clubhub.domain.registry import models, policy, reports, schemas
from clubhub.domain.registry.service import RegistryService
from clubhub.domain.registry.store import RANK_ALL, ClubStanding, RegistryStore
from clubhub.infra.auth import get_current_teacher

router = APIRouter(prefix="/clubs", tags=["clubs"])


def _standing_out(item: ClubStanding) -> schemas.ClubStandingOut:
	return schemas.ClubStandingOut(
		club=item.club.to_dict(),
		enrollment=item.enrollment,
		seats_left=item.seats_left,
		is_full=item.is_full,
	)


def _parse_limit(raw: str) -> Optional[int]:
	if raw.strip().lower() == "all":
		return RANK_ALL
	try:
		value = int(raw)
	except ValueError:
		raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="invalid_limit")
	if value < 0:
		raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="invalid_limit")
	return value


@router.get("", response_model=list[schemas.ClubStandingOut])
async def list_clubs_endpoint(
	type: Optional[models.ClubType] = Query(default=None),
	store: RegistryStore = Depends(get_store),
) -> list[schemas.ClubStandingOut]:
	ranked = store.availability_ranking()
	if type is not None:
		ranked = [item for item in ranked if item.club.type is type]
	return [_standing_out(item) for item in ranked]


@router.get("/popular", response_model=list[schemas.ClubStandingOut])
async def popular_clubs_endpoint(
	limit: str = Query(default="10"),
	store: RegistryStore = Depends(get_store),
) -> list[schemas.ClubStandingOut]:
	return [_standing_out(item) for item in store.popularity_ranking(_parse_limit(limit))]


@router.post("", response_model=schemas.MutationResponse, status_code=status.HTTP_201_CREATED)
async def create_club_endpoint(
	payload: schemas.ClubCreateRequest,
	teacher: models.Teacher = Depends(get_current_teacher),
	service: RegistryService = Depends(get_service),
) -> schemas.MutationResponse:
	club = await service.create_club(teacher.id, payload)
	return schemas.MutationResponse(message="Club created.", record=club.to_dict())


@router.put("/{club_id}", response_model=schemas.MutationResponse)
async def update_club_endpoint(
	club_id: str,
	payload: schemas.ClubUpdateRequest,
	teacher: models.Teacher = Depends(get_current_teacher),
	service: RegistryService = Depends(get_service),
) -> schemas.MutationResponse:
	club = await service.update_club(club_id, payload, teacher_id=teacher.id)
	return schemas.MutationResponse(message="Club updated.", record=club.to_dict())


@router.delete("/{club_id}", response_model=schemas.MutationResponse)
async def delete_club_endpoint(
	club_id: str,
	teacher: models.Teacher = Depends(get_current_teacher),
	service: RegistryService = Depends(get_service),
) -> schemas.MutationResponse:
	removed = await service.delete_club(club_id, teacher_id=teacher.id)
	return schemas.MutationResponse(message="Club deleted." if removed else "Club already removed.")


@router.get("/{club_id}/roster")
async def club_roster_endpoint(
	club_id: str,
	teacher: models.Teacher = Depends(get_current_teacher),
	store: RegistryStore = Depends(get_store),
) -> dict:
	club = policy.require_club(store, club_id)
	if not club.advised_by(teacher.id):
		raise policy.RegistryPermissionError("not_club_advisor")
	return reports.club_roster(store, club.id)
