"""Teacher self-service endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from clubhub.api.deps import get_store
from clubhub.domain.registry import models, reports
from clubhub.domain.registry.store import RegistryStore
from clubhub.infra.auth import get_current_teacher

router = APIRouter(prefix="/teachers", tags=["teachers"])


@router.get("/me")
async def me_endpoint(
	teacher: models.Teacher = Depends(get_current_teacher),
	store: RegistryStore = Depends(get_store),
) -> dict:
	clubs = store.teacher_clubs(teacher.id)
	return {
		"teacher": teacher.to_dict(),
		"clubs": [
			{**club.to_dict(), "isLeadAdvisor": club.advisor_id == teacher.id, "enrollment": store.club_enrollment(club.id)}
			for club in clubs
		],
		"canCreateClub": not clubs,
		"studentTotal": store.teacher_student_total(teacher.id),
	}


@router.get("/co-advisor-candidates")
async def co_advisor_candidates_endpoint(
	club_id: Optional[str] = Query(default=None, alias="clubId"),
	teacher: models.Teacher = Depends(get_current_teacher),
	store: RegistryStore = Depends(get_store),
) -> list[dict]:
	return [t.to_dict() for t in reports.co_advisor_candidates(store, teacher.id, club_id=club_id)]
