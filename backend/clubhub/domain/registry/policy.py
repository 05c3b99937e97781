"""Policy helpers enforcing registry invariants before any mutation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from clubhub.domain.registry import models

if TYPE_CHECKING:  # pragma: no cover
	from clubhub.domain.registry.store import RegistryStore


DEFAULT_CAPACITY = 25
CO_ADVISED_CAPACITY = 50

MESSAGES: dict[str, str] = {
	"system_closed": "Registration is closed.",
	"duplicate_student": "This student id is already registered.",
	"club_full": "This club is full.",
	"club_not_found": "Club not found.",
	"level_not_eligible": "This club does not accept students from that level.",
	"teacher_already_advises": "This teacher already advises a club.",
	"co_advisor_unavailable": "The selected co-advisor already advises a club.",
	"co_advisor_is_advisor": "The co-advisor must be a different teacher.",
	"duplicate_teacher": "This teacher id already exists.",
	"teacher_not_found": "Teacher not found.",
	"student_not_found": "Student not found.",
	"announcement_not_found": "Announcement not found.",
	"not_lead_advisor": "Only the lead advisor can manage this club.",
	"not_club_advisor": "This student is not in a club you advise.",
	"rules_empty": "At least one registration rule is required.",
	"bulk_import_invalid": "The teacher list contains invalid lines.",
	"bulk_import_empty": "No teacher data was provided.",
}


class RegistryError(RuntimeError):
	"""Base failure carrying a machine code and a human-readable message."""

	default_status = 400

	def __init__(
		self,
		code: str,
		*,
		status_code: int | None = None,
		message: str | None = None,
		details: Optional[list[str]] = None,
	) -> None:
		self.code = code
		self.status_code = status_code or self.default_status
		self.message = message or MESSAGES.get(code, code)
		self.details = list(details or [])
		super().__init__(self.message)


class RegistryValidationError(RegistryError):
	default_status = 422


class RegistryConflictError(RegistryError):
	default_status = 409


class RegistryNotFoundError(RegistryError):
	default_status = 404


class RegistryPermissionError(RegistryError):
	default_status = 403


def default_capacity(co_advisor_id: Optional[str]) -> int:
	return CO_ADVISED_CAPACITY if co_advisor_id else DEFAULT_CAPACITY


def ensure_system_open(settings: models.RegistrySettings) -> None:
	if not settings.is_system_open:
		raise RegistryConflictError("system_closed")


def ensure_student_id_free(store: "RegistryStore", student_id: str, *, current_id: Optional[str] = None) -> None:
	existing = store.get_student(student_id)
	if existing is not None and existing.id != models.canonical_id(current_id):
		raise RegistryConflictError("duplicate_student")


def ensure_capacity_available(store: "RegistryStore", club: models.Club) -> None:
	if store.is_club_full(club):
		raise RegistryConflictError("club_full")


def ensure_level_eligible(club: models.Club, level: str) -> None:
	if not club.level_target.accepts(level):
		raise RegistryConflictError("level_not_eligible")


def ensure_teacher_id_free(store: "RegistryStore", teacher_id: str) -> None:
	if store.get_teacher(teacher_id) is not None:
		raise RegistryConflictError("duplicate_teacher")


def ensure_teacher_unassigned(
	store: "RegistryStore",
	teacher_id: str,
	*,
	code: str = "teacher_already_advises",
	ignore_club_id: Optional[str] = None,
) -> None:
	ignore = models.canonical_id(ignore_club_id) if ignore_club_id else None
	for club in store.teacher_clubs(teacher_id):
		if club.id != ignore:
			raise RegistryConflictError(code)


def ensure_co_advisor_valid(
	store: "RegistryStore",
	advisor_id: str,
	co_advisor_id: Optional[str],
	*,
	ignore_club_id: Optional[str] = None,
) -> None:
	if not co_advisor_id:
		return
	if models.canonical_id(co_advisor_id) == models.canonical_id(advisor_id):
		raise RegistryConflictError("co_advisor_is_advisor")
	require_teacher(store, co_advisor_id)
	ensure_teacher_unassigned(
		store,
		co_advisor_id,
		code="co_advisor_unavailable",
		ignore_club_id=ignore_club_id,
	)


def ensure_lead_advisor(club: models.Club, teacher_id: str) -> None:
	if club.advisor_id != models.canonical_id(teacher_id):
		raise RegistryPermissionError("not_lead_advisor")


def require_club(store: "RegistryStore", club_id: str) -> models.Club:
	club = store.get_club(club_id)
	if club is None:
		raise RegistryNotFoundError("club_not_found")
	return club


def require_student(store: "RegistryStore", student_id: str) -> models.Student:
	student = store.get_student(student_id)
	if student is None:
		raise RegistryNotFoundError("student_not_found")
	return student


def require_teacher(store: "RegistryStore", teacher_id: str) -> models.Teacher:
	teacher = store.get_teacher(teacher_id)
	if teacher is None:
		raise RegistryNotFoundError("teacher_not_found")
	return teacher


def require_announcement(store: "RegistryStore", announcement_id: str) -> models.Announcement:
	announcement = store.get_announcement(announcement_id)
	if announcement is None:
		raise RegistryNotFoundError("announcement_not_found")
	return announcement
