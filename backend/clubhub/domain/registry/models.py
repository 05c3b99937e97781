"""Domain models for club registration."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional


DEPARTMENTS: tuple[str, ...] = (
    "ภาษาไทย",
    "คณิตศาสตร์",
    "วิทยาศาสตร์และเทคโนโลยี",
    "สังคมศึกษา ศาสนา และวัฒนธรรม",
    "สุขศึกษาและพลศึกษา",
    "ศิลปะ",
    "การงานอาชีพ",
    "ภาษาต่างประเทศ",
)

ROOMS: tuple[str, ...] = tuple(str(i) for i in range(1, 14))

JUNIOR_LEVELS: tuple[str, ...] = ("ม.1", "ม.2", "ม.3")
SENIOR_LEVELS: tuple[str, ...] = ("ม.4", "ม.5", "ม.6")
LEVELS: tuple[str, ...] = JUNIOR_LEVELS + SENIOR_LEVELS

DEFAULT_RULES: tuple[str, ...] = (
    "นักเรียนสามารถสมัครได้เพียงชุมนุมเดียวเท่านั้น",
    "ถ้าต้องการออก หรือย้ายชุมนุมให้นักเรียนแจ้งครูประจำชุมนุมเพื่อย้าย ครูจะคัดชื่อออก",
    "นักเรียนทุกคนจำเป็น ต้องมีชุมนุม และต้องผ่านเท่านั้น เป็นกิจกรรมบังคับ",
    "แต่ละชุมนุมรับนักเรียนได้เพียง 25 คน ยกเว้นมีครู 2 คน สามารถรับนักเรียนได้ 50 คน",
    "นักเรียนที่มีผลการเรียน \"ไม่ผ่าน\" ให้ติดต่อครูที่ปรึกษาชุมนุมเพื่อทำการแก้ไข",
)

UNKNOWN_LABEL = "ไม่ทราบ"


class ClubType(str, Enum):
    """Activity categories a club can belong to."""

    SPORTS = "กีฬา"
    ARTS = "ศิลปะ"
    ACADEMIC = "วิชาการ"
    SERVICE = "บริการ"
    COMPUTER = "คอมพิวเตอร์"
    OTHER = "อื่นๆ"


class LevelCategory(str, Enum):
    """Which grade levels a club accepts."""

    JUNIOR = "ม.ต้น"
    SENIOR = "ม.ปลาย"
    BOTH = "ทั้งต้นและปลาย"

    @property
    def levels(self) -> tuple[str, ...]:
        if self is LevelCategory.JUNIOR:
            return JUNIOR_LEVELS
        if self is LevelCategory.SENIOR:
            return SENIOR_LEVELS
        return LEVELS

    def accepts(self, level: str) -> bool:
        return str(level) in self.levels


class Grade(str, Enum):
    """Pass/fail evaluation; an ungraded student carries ``None``."""

    PASS = "ผ"
    FAIL = "มผ"

    @classmethod
    def parse(cls, value: Any) -> Optional["Grade"]:
        if value is None or isinstance(value, Grade):
            return value
        text = str(value).strip().lower()
        if text in ("ผ", "pass", "passed"):
            return cls.PASS
        if text in ("มผ", "fail", "failed"):
            return cls.FAIL
        return None


def canonical_id(value: Any) -> str:
    """Normalise identifiers arriving as numbers or strings to one string form."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def parse_flag(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def _optional_id(value: Any) -> Optional[str]:
    text = canonical_id(value)
    if not text or text in ("undefined", "null", "none"):
        return None
    return text


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(slots=True)
class Teacher:
    id: str
    name: str
    department: str

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "Teacher":
        return cls(
            id=canonical_id(mapping.get("id")),
            name=_text(mapping.get("name")),
            department=_text(mapping.get("department")),
        )

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "department": self.department}


@dataclass(slots=True)
class Student:
    id: str
    name: str
    level: str
    room: str
    seat_number: str
    club_id: str
    grade: Optional[Grade] = None
    note: Optional[str] = None

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "Student":
        note = mapping.get("note")
        return cls(
            id=canonical_id(mapping.get("id")),
            name=_text(mapping.get("name")),
            level=_text(mapping.get("level")),
            room=_text(mapping.get("room")),
            seat_number=_text(mapping.get("seatNumber", mapping.get("seat_number"))),
            club_id=canonical_id(mapping.get("clubId", mapping.get("club_id"))),
            grade=Grade.parse(mapping.get("grade")),
            note=_text(note) if note not in (None, "") else None,
        )

    def seat_order(self) -> int:
        try:
            return int(self.seat_number)
        except ValueError:
            return 0

    def to_dict(self) -> dict:
        payload = {
            "id": self.id,
            "name": self.name,
            "level": self.level,
            "room": self.room,
            "seatNumber": self.seat_number,
            "clubId": self.club_id,
            "grade": self.grade.value if self.grade else None,
        }
        if self.note:
            payload["note"] = self.note
        return payload


@dataclass(slots=True)
class Club:
    id: str
    name: str
    type: ClubType
    description: str
    level_target: LevelCategory
    capacity: int
    location: str
    phone: str
    advisor_id: str
    co_advisor_id: Optional[str] = None

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any], *, default_capacity: int = 25) -> "Club":
        try:
            club_type = ClubType(_text(mapping.get("type")))
        except ValueError:
            club_type = ClubType.OTHER
        try:
            level_target = LevelCategory(_text(mapping.get("levelTarget", mapping.get("level_target"))))
        except ValueError:
            level_target = LevelCategory.BOTH
        try:
            capacity = int(float(mapping.get("capacity")))  # type: ignore[arg-type]
        except (TypeError, ValueError, OverflowError):
            capacity = default_capacity
        return cls(
            id=canonical_id(mapping.get("id")),
            name=_text(mapping.get("name")),
            type=club_type,
            description=_text(mapping.get("description")),
            level_target=level_target,
            capacity=capacity,
            location=_text(mapping.get("location")),
            phone=_text(mapping.get("phone")),
            advisor_id=canonical_id(mapping.get("advisorId", mapping.get("advisor_id"))),
            co_advisor_id=_optional_id(mapping.get("coAdvisorId", mapping.get("co_advisor_id"))),
        )

    def advised_by(self, teacher_id: str) -> bool:
        teacher_id = canonical_id(teacher_id)
        return self.advisor_id == teacher_id or (self.co_advisor_id is not None and self.co_advisor_id == teacher_id)

    def to_dict(self) -> dict:
        payload = {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "description": self.description,
            "levelTarget": self.level_target.value,
            "capacity": self.capacity,
            "location": self.location,
            "phone": self.phone,
            "advisorId": self.advisor_id,
        }
        if self.co_advisor_id:
            payload["coAdvisorId"] = self.co_advisor_id
        return payload


@dataclass(slots=True)
class Announcement:
    id: str
    title: str
    content: str
    date: str
    is_pinned: bool = False
    is_hidden: bool = False

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "Announcement":
        return cls(
            id=canonical_id(mapping.get("id")),
            title=_text(mapping.get("title")),
            content=_text(mapping.get("content")),
            date=_text(mapping.get("date")) or utc_now_iso(),
            is_pinned=parse_flag(mapping.get("isPinned", mapping.get("is_pinned"))),
            is_hidden=parse_flag(mapping.get("isHidden", mapping.get("is_hidden"))),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "date": self.date,
            "isPinned": self.is_pinned,
            "isHidden": self.is_hidden,
        }


@dataclass(slots=True)
class RegistrySettings:
    is_system_open: bool = True
    registration_rules: list[str] = field(default_factory=lambda: list(DEFAULT_RULES))

    def to_dict(self) -> dict:
        return {
            "isSystemOpen": self.is_system_open,
            "registrationRules": list(self.registration_rules),
        }


def initial_announcements() -> list[Announcement]:
    return [
        Announcement(
            id="1",
            title="ยินดีต้อนรับสู่ระบบสมัครชุมนุม",
            content="เริ่มเปิดให้ลงทะเบียนภาคเรียนที่ 1/2568 ตั้งแต่วันนี้เป็นต้นไป",
            date=utc_now_iso(),
            is_pinned=True,
            is_hidden=False,
        )
    ]


@dataclass(slots=True)
class RegistryState:
    """Aggregate snapshot of every collection plus the settings singleton."""

    teachers: list[Teacher] = field(default_factory=list)
    students: list[Student] = field(default_factory=list)
    clubs: list[Club] = field(default_factory=list)
    announcements: list[Announcement] = field(default_factory=initial_announcements)
    settings: RegistrySettings = field(default_factory=RegistrySettings)
