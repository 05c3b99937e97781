"""Read models derived from the registry store.

Everything here is a pure read. Dangling ids never raise; they fall back to
``UNKNOWN_LABEL`` so rosters still render after a teacher or club is removed.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from clubhub.domain.registry import models, policy
from clubhub.domain.registry.store import RegistryStore

SORT_ASC = "asc"
SORT_DESC = "desc"


def _level_rank(level: str) -> int:
	try:
		return models.LEVELS.index(level)
	except ValueError:
		return len(models.LEVELS)


def _room_rank(room: str) -> int:
	try:
		return int(room)
	except ValueError:
		return 0


def _roster_key(student: models.Student) -> tuple[int, int, int]:
	return (_level_rank(student.level), _room_rank(student.room), student.seat_order())


def _teacher_name(store: RegistryStore, teacher_id: Optional[str]) -> Optional[str]:
	if not teacher_id:
		return None
	teacher = store.get_teacher(teacher_id)
	return teacher.name if teacher else models.UNKNOWN_LABEL


def overview(store: RegistryStore) -> Dict[str, Any]:
	standings = store.standings()
	return {
		"teachers": len(store.teachers),
		"clubs": len(store.clubs),
		"students": len(store.students),
		"open_seats": sum(item.seats_left for item in standings),
		"is_system_open": store.settings.is_system_open,
	}


def grade_stats(students: List[models.Student]) -> Dict[str, int]:
	passed = sum(1 for s in students if s.grade is models.Grade.PASS)
	failed = sum(1 for s in students if s.grade is models.Grade.FAIL)
	return {"total": len(students), "passed": passed, "failed": failed, "pending": len(students) - passed - failed}


def club_roster(store: RegistryStore, club_id: str) -> Dict[str, Any]:
	club = policy.require_club(store, club_id)
	students = sorted(store.students_in(club.id), key=_roster_key)
	return {
		"club": club.to_dict(),
		"advisorName": _teacher_name(store, club.advisor_id),
		"coAdvisorName": _teacher_name(store, club.co_advisor_id),
		"enrollment": len(students),
		"isFull": len(students) >= club.capacity,
		"stats": grade_stats(students),
		"students": [s.to_dict() for s in students],
	}


def class_report(store: RegistryStore, level: str, room: str) -> Dict[str, Any]:
	"""Students of one level and room by seat number, each with their club and advisors."""
	room = models.canonical_id(room)
	members = [s for s in store.students if s.level == level and s.room == room]
	rows: List[Dict[str, Any]] = []
	for student in sorted(members, key=lambda s: s.seat_order()):
		club = store.get_club(student.club_id)
		row = student.to_dict()
		row["clubName"] = club.name if club else models.UNKNOWN_LABEL
		row["advisorName"] = _teacher_name(store, club.advisor_id) if club else models.UNKNOWN_LABEL
		row["coAdvisorName"] = _teacher_name(store, club.co_advisor_id) if club else None
		rows.append(row)
	return {"level": level, "room": room, "students": rows, "stats": grade_stats(members)}


def teacher_overview(
	store: RegistryStore,
	*,
	department: Optional[str] = None,
	club_query: Optional[str] = None,
	sort: Optional[str] = None,
) -> List[Dict[str, Any]]:
	counts = store.enrollment_counts()
	query = (club_query or "").strip().lower()
	rows: List[Dict[str, Any]] = []
	for teacher in store.teachers:
		if department and teacher.department != department:
			continue
		clubs = store.teacher_clubs(teacher.id)
		if query and not any(query in club.name.lower() for club in clubs):
			continue
		rows.append(
			{
				"teacher": teacher.to_dict(),
				"clubs": [
					{"id": c.id, "name": c.name, "role": "advisor" if c.advisor_id == teacher.id else "co_advisor"}
					for c in clubs
				],
				"studentTotal": sum(counts.get(c.id, 0) for c in clubs),
			}
		)
	if sort == SORT_ASC:
		rows.sort(key=lambda row: row["studentTotal"])
	elif sort == SORT_DESC:
		rows.sort(key=lambda row: row["studentTotal"], reverse=True)
	return rows


def public_announcements(store: RegistryStore) -> List[models.Announcement]:
	visible = [a for a in store.announcements if not a.is_hidden]
	return sorted(visible, key=lambda a: not a.is_pinned)


def co_advisor_candidates(
	store: RegistryStore,
	advisor_id: str,
	*,
	club_id: Optional[str] = None,
) -> List[models.Teacher]:
	"""Teachers free to co-advise; when editing ``club_id`` its current co-advisor stays eligible."""
	advisor_id = models.canonical_id(advisor_id)
	taken = store.assigned_teacher_ids(ignore_club_id=club_id)
	return [t for t in store.teachers if t.id != advisor_id and t.id not in taken]
