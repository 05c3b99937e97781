"""Advisor-side student record management."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from clubhub.api.deps import get_service
from clubhub.domain.registry import models, schemas
from clubhub.domain.registry.service import RegistryService
from clubhub.infra.auth import get_current_teacher

router = APIRouter(prefix="/students", tags=["students"])


@router.put("/{student_id}/grade", response_model=schemas.MutationResponse)
async def update_grade_endpoint(
	student_id: str,
	payload: schemas.GradeUpdateRequest,
	teacher: models.Teacher = Depends(get_current_teacher),
	service: RegistryService = Depends(get_service),
) -> schemas.MutationResponse:
	student = await service.update_student_grade(student_id, payload.grade, teacher_id=teacher.id)
	return schemas.MutationResponse(message="Grade saved.", record=student.to_dict())


@router.patch("/{student_id}", response_model=schemas.MutationResponse)
async def update_student_endpoint(
	student_id: str,
	payload: schemas.StudentUpdateRequest,
	teacher: models.Teacher = Depends(get_current_teacher),
	service: RegistryService = Depends(get_service),
) -> schemas.MutationResponse:
	student = await service.update_student_info(student_id, payload, teacher_id=teacher.id)
	return schemas.MutationResponse(message="Student updated.", record=student.to_dict())


@router.delete("/{student_id}", response_model=schemas.MutationResponse)
async def delete_student_endpoint(
	student_id: str,
	teacher: models.Teacher = Depends(get_current_teacher),
	service: RegistryService = Depends(get_service),
) -> schemas.MutationResponse:
	removed = await service.delete_student(student_id, teacher_id=teacher.id)
	return schemas.MutationResponse(message="Student withdrawn." if removed else "Student already removed.")
