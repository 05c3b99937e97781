"""Pydantic schemas for the club registration API."""

from __future__ import annotations

from typing import Annotated, Any, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from clubhub.domain.registry.models import DEPARTMENTS, LEVELS, ROOMS, ClubType, Grade, LevelCategory

STUDENT_ID_PATTERN = r"^\d{5}$"
TEACHER_ID_PATTERN = r"^\S{4}$"
SEAT_PATTERN = r"^\d{1,3}$"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)


def _check_level(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in LEVELS:
        raise ValueError(f"level must be one of {', '.join(LEVELS)}")
    return value


def _check_room(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in ROOMS:
        raise ValueError("room must be between 1 and 13")
    return value


def _check_department(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in DEPARTMENTS:
        raise ValueError("unknown department")
    return value


Level = Annotated[str, AfterValidator(_check_level)]
Room = Annotated[str, AfterValidator(_check_room)]
Department = Annotated[str, AfterValidator(_check_department)]


class RegistrationRequest(_CamelModel):
    id: str = Field(..., pattern=STUDENT_ID_PATTERN)
    name: str = Field(..., min_length=1, max_length=120)
    level: Level
    room: Room
    seat_number: str = Field(..., pattern=SEAT_PATTERN)
    club_id: str = Field(..., min_length=1)


class ClubCreateRequest(_CamelModel):
    name: str = Field(..., min_length=1, max_length=120)
    type: ClubType
    description: str = ""
    level_target: LevelCategory = LevelCategory.BOTH
    capacity: Optional[int] = Field(default=None, ge=1, le=500)
    location: str = ""
    phone: str = ""
    co_advisor_id: Optional[str] = None

    @field_validator("co_advisor_id")
    def _blank_co_advisor(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class ClubUpdateRequest(_CamelModel):
    """Partial update; unset fields keep their current value."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    type: Optional[ClubType] = None
    description: Optional[str] = None
    level_target: Optional[LevelCategory] = None
    capacity: Optional[int] = Field(default=None, ge=1, le=500)
    location: Optional[str] = None
    phone: Optional[str] = None
    co_advisor_id: Optional[str] = None

    @field_validator("co_advisor_id")
    def _blank_co_advisor(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class TeacherCreateRequest(_CamelModel):
    id: str = Field(..., pattern=TEACHER_ID_PATTERN)
    name: str = Field(..., min_length=1, max_length=120)
    department: Department


class TeacherUpdateRequest(_CamelModel):
    id: Optional[str] = Field(default=None, pattern=TEACHER_ID_PATTERN)
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    department: Optional[Department] = None


class BulkTeachersRequest(_CamelModel):
    teachers: List[TeacherCreateRequest] = Field(default_factory=list)


class BulkTeachersTextRequest(_CamelModel):
    text: str = ""


class GradeUpdateRequest(_CamelModel):
    grade: Optional[Grade] = None

    @field_validator("grade", mode="before")
    def _parse_grade(cls, value: Any) -> Optional[Grade]:
        if value is None or value == "":
            return None
        parsed = Grade.parse(value)
        if parsed is None:
            raise ValueError("grade must be pass, fail or null")
        return parsed


class StudentUpdateRequest(_CamelModel):
    id: Optional[str] = Field(default=None, pattern=STUDENT_ID_PATTERN)
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    level: Optional[Level] = None
    room: Optional[Room] = None
    seat_number: Optional[str] = Field(default=None, pattern=SEAT_PATTERN)
    club_id: Optional[str] = None
    note: Optional[str] = None


class AnnouncementCreateRequest(_CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = ""
    is_pinned: bool = False


class AnnouncementUpdateRequest(_CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    content: Optional[str] = None


class SystemOpenRequest(_CamelModel):
    # Omitted means toggle.
    is_open: Optional[bool] = None


class RulesUpdateRequest(_CamelModel):
    rules: List[str]


class MutationResponse(_CamelModel):
    message: str
    record: Optional[dict] = None


class BulkImportResponse(_CamelModel):
    message: str
    inserted: List[str] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)


class ClubStandingOut(_CamelModel):
    club: dict
    enrollment: int
    seats_left: int
    is_full: bool


class OverviewOut(_CamelModel):
    teachers: int
    clubs: int
    students: int
    open_seats: int
    is_system_open: bool
