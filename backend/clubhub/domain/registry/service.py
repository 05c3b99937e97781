"""Registry mutation service: every write to the store goes through here."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Protocol

import ulid

from clubhub.domain.registry import models, policy, schemas
from clubhub.domain.registry.store import RegistryStore
from clubhub.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)


class StateListener(Protocol):
	def notify_state_changed(self) -> None: ...


@dataclass(slots=True)
class BulkImportResult:
	inserted: List[str] = field(default_factory=list)
	skipped: List[str] = field(default_factory=list)


class RegistryService:
	"""Validates and applies mutations atomically under the store lock.

	A rejected mutation leaves the store untouched. Each applied mutation
	notifies the listener (normally the sync engine) exactly once.
	"""

	def __init__(self, store: RegistryStore, listener: Optional[StateListener] = None) -> None:
		self.store = store
		self._listener = listener

	def attach_listener(self, listener: Optional[StateListener]) -> None:
		self._listener = listener

	def _applied(self, operation: str, **fields) -> None:
		obs_metrics.inc_mutation(operation)
		obs_metrics.set_registry_size(
			teachers=len(self.store.teachers),
			students=len(self.store.students),
			clubs=len(self.store.clubs),
			announcements=len(self.store.announcements),
		)
		logger.info("registry_mutation", extra={"event": "registry_mutation", "operation": operation, **fields})
		if self._listener is not None:
			self._listener.notify_state_changed()

	@staticmethod
	def _rejected(operation: str, exc: policy.RegistryError) -> None:
		obs_metrics.inc_mutation_rejected(operation, exc.code)
		logger.info(
			"registry_mutation_rejected",
			extra={"event": "registry_mutation_rejected", "operation": operation, "code": exc.code},
		)

	def _ensure_advises_student(self, student: models.Student, teacher_id: Optional[str]) -> None:
		if teacher_id is None:
			return
		club = self.store.get_club(student.club_id)
		if club is None or not club.advised_by(teacher_id):
			raise policy.RegistryPermissionError("not_club_advisor")

	# --- students --------------------------------------------------------

	async def register_student(self, payload: schemas.RegistrationRequest) -> models.Student:
		async with self.store.lock:
			try:
				policy.ensure_system_open(self.store.settings)
				policy.ensure_student_id_free(self.store, payload.id)
				club = policy.require_club(self.store, payload.club_id)
				policy.ensure_level_eligible(club, payload.level)
				policy.ensure_capacity_available(self.store, club)
			except policy.RegistryError as exc:
				obs_metrics.inc_registration(exc.code)
				self._rejected("register_student", exc)
				raise
			student = models.Student(
				id=models.canonical_id(payload.id),
				name=payload.name,
				level=payload.level,
				room=payload.room,
				seat_number=models.canonical_id(payload.seat_number),
				club_id=club.id,
				grade=None,
			)
			self.store.students.append(student)
			obs_metrics.inc_registration("accepted")
			self._applied("register_student", student_id=student.id, club_id=club.id)
			return student

	async def update_student_grade(
		self,
		student_id: str,
		grade: Optional[models.Grade],
		*,
		teacher_id: Optional[str] = None,
	) -> models.Student:
		async with self.store.lock:
			try:
				student = policy.require_student(self.store, student_id)
				self._ensure_advises_student(student, teacher_id)
			except policy.RegistryError as exc:
				self._rejected("update_student_grade", exc)
				raise
			student.grade = grade
			self._applied("update_student_grade", student_id=student.id)
			return student

	async def update_student_info(
		self,
		student_id: str,
		payload: schemas.StudentUpdateRequest,
		*,
		teacher_id: Optional[str] = None,
	) -> models.Student:
		changes = payload.model_dump(exclude_unset=True)
		async with self.store.lock:
			try:
				student = policy.require_student(self.store, student_id)
				self._ensure_advises_student(student, teacher_id)
				new_id = models.canonical_id(changes.get("id") or student.id)
				if new_id != student.id:
					policy.ensure_student_id_free(self.store, new_id, current_id=student.id)
				new_club_id = models.canonical_id(changes.get("club_id") or student.club_id)
				new_level = changes.get("level") or student.level
				if new_club_id != student.club_id:
					target = policy.require_club(self.store, new_club_id)
					if teacher_id is not None and not target.advised_by(teacher_id):
						raise policy.RegistryPermissionError("not_club_advisor")
					policy.ensure_capacity_available(self.store, target)
				else:
					target = self.store.get_club(new_club_id)
				if target is not None and (new_club_id != student.club_id or new_level != student.level):
					policy.ensure_level_eligible(target, new_level)
			except policy.RegistryError as exc:
				self._rejected("update_student_info", exc)
				raise
			student.id = new_id
			student.club_id = new_club_id
			for name in ("name", "level", "room"):
				if changes.get(name) is not None:
					setattr(student, name, changes[name])
			if changes.get("seat_number") is not None:
				student.seat_number = models.canonical_id(changes["seat_number"])
			if "note" in changes:
				student.note = changes["note"] or None
			self._applied("update_student_info", student_id=student.id)
			return student

	async def delete_student(self, student_id: str, *, teacher_id: Optional[str] = None) -> bool:
		async with self.store.lock:
			student = self.store.get_student(student_id)
			if student is None:
				return False
			try:
				self._ensure_advises_student(student, teacher_id)
			except policy.RegistryError as exc:
				self._rejected("delete_student", exc)
				raise
			self.store.students = [s for s in self.store.students if s.id != student.id]
			self._applied("delete_student", student_id=student.id)
			return True

	# --- clubs -----------------------------------------------------------

	async def create_club(self, teacher_id: str, payload: schemas.ClubCreateRequest) -> models.Club:
		async with self.store.lock:
			try:
				teacher = policy.require_teacher(self.store, teacher_id)
				policy.ensure_teacher_unassigned(self.store, teacher.id)
				policy.ensure_co_advisor_valid(self.store, teacher.id, payload.co_advisor_id)
			except policy.RegistryError as exc:
				self._rejected("create_club", exc)
				raise
			co_advisor_id = models.canonical_id(payload.co_advisor_id) if payload.co_advisor_id else None
			club = models.Club(
				id=str(ulid.new()),
				name=payload.name,
				type=payload.type,
				description=payload.description,
				level_target=payload.level_target,
				capacity=payload.capacity or policy.default_capacity(co_advisor_id),
				location=payload.location,
				phone=payload.phone,
				advisor_id=teacher.id,
				co_advisor_id=co_advisor_id,
			)
			self.store.clubs.append(club)
			self._applied("create_club", club_id=club.id, teacher_id=teacher.id)
			return club

	async def update_club(
		self,
		club_id: str,
		payload: schemas.ClubUpdateRequest,
		*,
		teacher_id: Optional[str] = None,
	) -> models.Club:
		changes = payload.model_dump(exclude_unset=True)
		async with self.store.lock:
			try:
				club = policy.require_club(self.store, club_id)
				if teacher_id is not None:
					policy.ensure_lead_advisor(club, teacher_id)
				if "co_advisor_id" in changes:
					policy.ensure_co_advisor_valid(
						self.store,
						club.advisor_id,
						changes["co_advisor_id"],
						ignore_club_id=club.id,
					)
			except policy.RegistryError as exc:
				self._rejected("update_club", exc)
				raise
			for name in ("name", "type", "description", "level_target", "capacity", "location", "phone"):
				if changes.get(name) is not None:
					setattr(club, name, changes[name])
			if "co_advisor_id" in changes:
				co = changes["co_advisor_id"]
				club.co_advisor_id = models.canonical_id(co) if co else None
			self._applied("update_club", club_id=club.id)
			return club

	async def delete_club(self, club_id: str, *, teacher_id: Optional[str] = None) -> bool:
		async with self.store.lock:
			club = self.store.get_club(club_id)
			if club is None:
				return False
			try:
				if teacher_id is not None:
					policy.ensure_lead_advisor(club, teacher_id)
			except policy.RegistryError as exc:
				self._rejected("delete_club", exc)
				raise
			self.store.clubs = [c for c in self.store.clubs if c.id != club.id]
			self.store.students = [s for s in self.store.students if s.club_id != club.id]
			self._applied("delete_club", club_id=club.id)
			return True

	# --- teachers --------------------------------------------------------

	async def add_teacher(self, payload: schemas.TeacherCreateRequest) -> models.Teacher:
		async with self.store.lock:
			try:
				policy.ensure_teacher_id_free(self.store, payload.id)
			except policy.RegistryError as exc:
				self._rejected("add_teacher", exc)
				raise
			teacher = models.Teacher(
				id=models.canonical_id(payload.id),
				name=payload.name,
				department=payload.department,
			)
			self.store.teachers.append(teacher)
			self._applied("add_teacher", teacher_id=teacher.id)
			return teacher

	async def bulk_add_teachers(self, entries: Iterable[schemas.TeacherCreateRequest]) -> BulkImportResult:
		"""Insert every entry whose id is not taken; duplicates are skipped, not rejected."""
		result = BulkImportResult()
		async with self.store.lock:
			seen = {t.id for t in self.store.teachers}
			for entry in entries:
				teacher_id = models.canonical_id(entry.id)
				if teacher_id in seen:
					result.skipped.append(teacher_id)
					continue
				seen.add(teacher_id)
				self.store.teachers.append(
					models.Teacher(id=teacher_id, name=entry.name, department=entry.department)
				)
				result.inserted.append(teacher_id)
			if result.inserted:
				self._applied("bulk_add_teachers", inserted=len(result.inserted), skipped=len(result.skipped))
		return result

	async def update_teacher(self, teacher_id: str, payload: schemas.TeacherUpdateRequest) -> models.Teacher:
		changes = payload.model_dump(exclude_unset=True)
		async with self.store.lock:
			try:
				teacher = policy.require_teacher(self.store, teacher_id)
				new_id = models.canonical_id(changes.get("id") or teacher.id)
				if new_id != teacher.id:
					policy.ensure_teacher_id_free(self.store, new_id)
			except policy.RegistryError as exc:
				self._rejected("update_teacher", exc)
				raise
			old_id = teacher.id
			if new_id != old_id:
				for club in self.store.clubs:
					if club.advisor_id == old_id:
						club.advisor_id = new_id
					if club.co_advisor_id == old_id:
						club.co_advisor_id = new_id
				teacher.id = new_id
			if changes.get("name") is not None:
				teacher.name = changes["name"]
			if changes.get("department") is not None:
				teacher.department = changes["department"]
			self._applied("update_teacher", teacher_id=teacher.id, previous_id=old_id)
			return teacher

	async def delete_teacher(self, teacher_id: str) -> bool:
		"""Remove a teacher, every club they advise or co-advise, and those clubs' students."""
		async with self.store.lock:
			teacher = self.store.get_teacher(teacher_id)
			if teacher is None:
				return False
			dropped = {c.id for c in self.store.teacher_clubs(teacher.id)}
			self.store.teachers = [t for t in self.store.teachers if t.id != teacher.id]
			self.store.clubs = [c for c in self.store.clubs if c.id not in dropped]
			self.store.students = [s for s in self.store.students if s.club_id not in dropped]
			self._applied("delete_teacher", teacher_id=teacher.id, clubs_removed=len(dropped))
			return True

	# --- announcements ---------------------------------------------------

	async def create_announcement(self, payload: schemas.AnnouncementCreateRequest) -> models.Announcement:
		async with self.store.lock:
			announcement = models.Announcement(
				id=str(ulid.new()),
				title=payload.title,
				content=payload.content,
				date=models.utc_now_iso(),
				is_pinned=payload.is_pinned,
				is_hidden=False,
			)
			self.store.announcements.insert(0, announcement)
			self._applied("create_announcement", announcement_id=announcement.id)
			return announcement

	async def update_announcement(
		self,
		announcement_id: str,
		payload: schemas.AnnouncementUpdateRequest,
	) -> models.Announcement:
		changes = payload.model_dump(exclude_unset=True)
		async with self.store.lock:
			try:
				announcement = policy.require_announcement(self.store, announcement_id)
			except policy.RegistryError as exc:
				self._rejected("update_announcement", exc)
				raise
			if changes.get("title") is not None:
				announcement.title = changes["title"]
			if changes.get("content") is not None:
				announcement.content = changes["content"]
			self._applied("update_announcement", announcement_id=announcement.id)
			return announcement

	async def delete_announcement(self, announcement_id: str) -> bool:
		async with self.store.lock:
			announcement = self.store.get_announcement(announcement_id)
			if announcement is None:
				return False
			self.store.announcements = [a for a in self.store.announcements if a.id != announcement.id]
			self._applied("delete_announcement", announcement_id=announcement.id)
			return True

	async def toggle_announcement_pin(self, announcement_id: str) -> models.Announcement:
		async with self.store.lock:
			try:
				announcement = policy.require_announcement(self.store, announcement_id)
			except policy.RegistryError as exc:
				self._rejected("toggle_announcement_pin", exc)
				raise
			announcement.is_pinned = not announcement.is_pinned
			self._applied("toggle_announcement_pin", announcement_id=announcement.id)
			return announcement

	async def toggle_announcement_hidden(self, announcement_id: str) -> models.Announcement:
		async with self.store.lock:
			try:
				announcement = policy.require_announcement(self.store, announcement_id)
			except policy.RegistryError as exc:
				self._rejected("toggle_announcement_hidden", exc)
				raise
			announcement.is_hidden = not announcement.is_hidden
			self._applied("toggle_announcement_hidden", announcement_id=announcement.id)
			return announcement

	# --- settings --------------------------------------------------------

	async def set_system_open(self, value: Optional[bool] = None) -> models.RegistrySettings:
		"""Set the registration switch, or flip it when ``value`` is None."""
		async with self.store.lock:
			current = self.store.settings.is_system_open
			self.store.settings.is_system_open = (not current) if value is None else bool(value)
			self._applied("set_system_open", is_open=self.store.settings.is_system_open)
			return self.store.settings

	async def update_registration_rules(self, rules: Iterable[str]) -> models.RegistrySettings:
		cleaned = [str(rule).strip() for rule in rules if str(rule).strip()]
		async with self.store.lock:
			if not cleaned:
				exc = policy.RegistryValidationError("rules_empty")
				self._rejected("update_registration_rules", exc)
				raise exc
			self.store.settings.registration_rules = cleaned
			self._applied("update_registration_rules", rules=len(cleaned))
			return self.store.settings
