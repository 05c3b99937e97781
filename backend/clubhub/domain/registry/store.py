"""In-memory authoritative registry of teachers, students, clubs and announcements."""

from __future__ import annotations

import asyncio
import copy
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Optional

from clubhub.domain.registry import models

# Pass as ``limit`` to rank every club.
RANK_ALL: Optional[int] = None


@dataclass(slots=True)
class ClubStanding:
	club: models.Club
	enrollment: int

	@property
	def is_full(self) -> bool:
		return self.enrollment >= self.club.capacity

	@property
	def seats_left(self) -> int:
		return max(self.club.capacity - self.enrollment, 0)


class RegistryStore:
	"""Holds every entity collection and the settings singleton.

	Collections are mutated only by ``RegistryService`` while holding ``lock``;
	everything else reads through the query helpers below. Cross references are
	plain string ids, so lookups that miss return ``None`` instead of raising.
	"""

	def __init__(self, state: Optional[models.RegistryState] = None) -> None:
		self.lock = asyncio.Lock()
		self.teachers: List[models.Teacher] = []
		self.students: List[models.Student] = []
		self.clubs: List[models.Club] = []
		self.announcements: List[models.Announcement] = []
		self.settings = models.RegistrySettings()
		self.replace_all(state or models.RegistryState())

	# --- lifecycle -------------------------------------------------------

	def replace_all(self, state: models.RegistryState) -> None:
		self.teachers = list(state.teachers)
		self.students = list(state.students)
		self.clubs = list(state.clubs)
		self.announcements = list(state.announcements)
		self.settings = state.settings

	def snapshot(self) -> models.RegistryState:
		"""Deep copy of the aggregate, safe to serialise after the lock is released."""
		return models.RegistryState(
			teachers=copy.deepcopy(self.teachers),
			students=copy.deepcopy(self.students),
			clubs=copy.deepcopy(self.clubs),
			announcements=copy.deepcopy(self.announcements),
			settings=copy.deepcopy(self.settings),
		)

	# --- lookups ---------------------------------------------------------

	def get_teacher(self, teacher_id: object) -> Optional[models.Teacher]:
		key = models.canonical_id(teacher_id)
		return next((t for t in self.teachers if t.id == key), None)

	def get_student(self, student_id: object) -> Optional[models.Student]:
		key = models.canonical_id(student_id)
		return next((s for s in self.students if s.id == key), None)

	def get_club(self, club_id: object) -> Optional[models.Club]:
		key = models.canonical_id(club_id)
		return next((c for c in self.clubs if c.id == key), None)

	def get_announcement(self, announcement_id: object) -> Optional[models.Announcement]:
		key = models.canonical_id(announcement_id)
		return next((a for a in self.announcements if a.id == key), None)

	def students_in(self, club_id: object) -> List[models.Student]:
		key = models.canonical_id(club_id)
		return [s for s in self.students if s.club_id == key]

	# --- derived queries -------------------------------------------------

	def enrollment_counts(self) -> Counter[str]:
		return Counter(s.club_id for s in self.students)

	def club_enrollment(self, club_id: object) -> int:
		key = models.canonical_id(club_id)
		return sum(1 for s in self.students if s.club_id == key)

	def is_club_full(self, club: models.Club) -> bool:
		return self.club_enrollment(club.id) >= club.capacity

	def teacher_clubs(self, teacher_id: object) -> List[models.Club]:
		key = models.canonical_id(teacher_id)
		return [c for c in self.clubs if c.advised_by(key)]

	def teacher_student_total(self, teacher_id: object) -> int:
		counts = self.enrollment_counts()
		return sum(counts.get(club.id, 0) for club in self.teacher_clubs(teacher_id))

	def standings(self, clubs: Optional[Iterable[models.Club]] = None) -> List[ClubStanding]:
		counts = self.enrollment_counts()
		return [ClubStanding(club=c, enrollment=counts.get(c.id, 0)) for c in (clubs if clubs is not None else self.clubs)]

	def popularity_ranking(self, limit: Optional[int] = 10) -> List[ClubStanding]:
		"""Clubs by enrollment, highest first; ties keep insertion order."""
		ranked = sorted(self.standings(), key=lambda item: item.enrollment, reverse=True)
		if limit is RANK_ALL:
			return ranked
		return ranked[: max(limit, 0)]

	def availability_ranking(self) -> List[ClubStanding]:
		"""Open clubs before full ones, each group by enrollment descending."""
		return sorted(self.standings(), key=lambda item: (item.is_full, -item.enrollment))

	def assigned_teacher_ids(self, *, ignore_club_id: Optional[str] = None) -> set[str]:
		ignore = models.canonical_id(ignore_club_id) if ignore_club_id else None
		ids: set[str] = set()
		for club in self.clubs:
			if club.id == ignore:
				continue
			ids.add(club.advisor_id)
			if club.co_advisor_id:
				ids.add(club.co_advisor_id)
		return ids
