from clubhub.domain.registry import models, reports
from clubhub.domain.registry.store import RegistryStore

from conftest import make_club, make_student, make_teacher


def _store():
    store = RegistryStore()
    store.teachers.extend(
        [
            make_teacher("T001", name="Malee", department=models.DEPARTMENTS[0]),
            make_teacher("T002", name="Somsak", department=models.DEPARTMENTS[1]),
            make_teacher("T003", name="Napa", department=models.DEPARTMENTS[1]),
            make_teacher("T004", name="Free", department=models.DEPARTMENTS[2]),
        ]
    )
    store.clubs.extend(
        [
            make_club("c1", "T001", name="Chess Club", co_advisor_id="T002", capacity=50),
            make_club("c2", "T003", name="Football", capacity=2),
        ]
    )
    store.students.extend(
        [
            make_student("10003", "c1", level="ม.2", room="1", seat="3"),
            make_student("10001", "c1", level="ม.1", room="10", seat="2"),
            make_student("10002", "c1", level="ม.1", room="2", seat="9"),
            make_student("10004", "c1", level="ม.1", room="2", seat="1"),
            make_student("10005", "c2", level="ม.1", room="2", seat="5"),
            make_student("10006", "ghost", level="ม.1", room="2", seat="3"),
        ]
    )
    store.students[0].grade = models.Grade.PASS
    store.students[1].grade = models.Grade.FAIL
    return store


def test_overview_counts_open_seats():
    summary = reports.overview(_store())
    assert summary == {"teachers": 4, "clubs": 2, "students": 6, "open_seats": 47, "is_system_open": True}


def test_club_roster_sorts_by_level_room_seat_and_counts_grades():
    roster = reports.club_roster(_store(), "c1")
    assert [s["id"] for s in roster["students"]] == ["10004", "10002", "10001", "10003"]
    assert roster["stats"] == {"total": 4, "passed": 1, "failed": 1, "pending": 2}
    assert roster["advisorName"] == "Malee"
    assert roster["coAdvisorName"] == "Somsak"


def test_roster_names_fall_back_for_dangling_advisor():
    store = _store()
    store.teachers = [t for t in store.teachers if t.id != "T003"]
    roster = reports.club_roster(store, "c2")
    assert roster["advisorName"] == models.UNKNOWN_LABEL
    assert roster["coAdvisorName"] is None
    assert roster["isFull"] is False


def test_class_report_orders_by_seat_with_fallbacks():
    report = reports.class_report(_store(), "ม.1", "2")
    rows = report["students"]
    assert [row["id"] for row in rows] == ["10004", "10006", "10005", "10002"]
    ghost = rows[1]
    assert ghost["clubName"] == models.UNKNOWN_LABEL
    assert ghost["advisorName"] == models.UNKNOWN_LABEL
    assert rows[0]["clubName"] == "Chess Club"
    assert rows[0]["coAdvisorName"] == "Somsak"
    assert report["stats"]["total"] == 4


def test_teacher_overview_filters_and_sorts():
    store = _store()
    rows = reports.teacher_overview(store)
    assert [row["teacher"]["id"] for row in rows] == ["T001", "T002", "T003", "T004"]
    assert [row["studentTotal"] for row in rows] == [4, 4, 1, 0]
    assert rows[1]["clubs"][0]["role"] == "co_advisor"

    by_dept = reports.teacher_overview(store, department=models.DEPARTMENTS[1])
    assert [row["teacher"]["id"] for row in by_dept] == ["T002", "T003"]

    by_club = reports.teacher_overview(store, club_query="CHESS")
    assert [row["teacher"]["id"] for row in by_club] == ["T001", "T002"]

    ascending = reports.teacher_overview(store, sort=reports.SORT_ASC)
    assert [row["teacher"]["id"] for row in ascending] == ["T004", "T003", "T001", "T002"]
    descending = reports.teacher_overview(store, sort=reports.SORT_DESC)
    assert [row["teacher"]["id"] for row in descending] == ["T001", "T002", "T003", "T004"]


def test_public_announcements_hide_and_pin_first():
    store = RegistryStore()
    store.announcements = [
        models.Announcement(id="a", title="A", content="", date="2025-01-01"),
        models.Announcement(id="b", title="B", content="", date="2025-01-02", is_pinned=True),
        models.Announcement(id="c", title="C", content="", date="2025-01-03", is_hidden=True),
        models.Announcement(id="d", title="D", content="", date="2025-01-04"),
        models.Announcement(id="e", title="E", content="", date="2025-01-05", is_pinned=True),
    ]
    assert [a.id for a in reports.public_announcements(store)] == ["b", "e", "a", "d"]


def test_co_advisor_candidates_exclude_assigned_teachers():
    store = _store()
    assert [t.id for t in reports.co_advisor_candidates(store, "T004")] == []
    store.teachers.append(make_teacher("T005"))
    assert [t.id for t in reports.co_advisor_candidates(store, "T004")] == ["T005"]
    editing = reports.co_advisor_candidates(store, "T001", club_id="c1")
    assert [t.id for t in editing] == ["T002", "T004", "T005"]
