from clubhub.domain.registry import models
from clubhub.domain.registry.store import RANK_ALL, RegistryStore

from conftest import make_club, make_student, make_teacher


def _store_with_enrollments(counts):
    store = RegistryStore()
    seq = 10000
    for index, count in enumerate(counts):
        club_id = f"c{index}"
        store.clubs.append(make_club(club_id, f"T{index:03d}", capacity=3))
        for _ in range(count):
            seq += 1
            store.students.append(make_student(str(seq), club_id))
    return store


def test_enrollment_and_full_flag():
    store = _store_with_enrollments([3, 1])
    full, open_club = store.clubs
    assert store.club_enrollment("c0") == 3
    assert store.is_club_full(full) is True
    assert store.is_club_full(open_club) is False


def test_lookups_use_canonical_ids():
    store = RegistryStore()
    store.students.append(make_student("12345", "c1"))
    store.clubs.append(make_club("7", "T001"))
    assert store.get_student(12345) is not None
    assert store.get_club(7.0) is not None
    assert store.get_teacher("missing") is None


def test_popularity_ranking_is_stable_and_limited():
    store = _store_with_enrollments([1, 2, 2, 0, 1])
    ranked = store.popularity_ranking(limit=3)
    assert [item.club.id for item in ranked] == ["c1", "c2", "c0"]
    everything = store.popularity_ranking(limit=RANK_ALL)
    assert [item.club.id for item in everything] == ["c1", "c2", "c0", "c4", "c3"]
    assert store.popularity_ranking(limit=0) == []


def test_availability_ranking_puts_full_clubs_last():
    store = _store_with_enrollments([3, 1, 2, 3, 0])
    ranked = store.availability_ranking()
    assert [item.club.id for item in ranked] == ["c2", "c1", "c4", "c0", "c3"]
    assert [item.is_full for item in ranked] == [False, False, False, True, True]


def test_teacher_clubs_include_co_advised_clubs():
    store = RegistryStore()
    store.teachers.extend([make_teacher("T001"), make_teacher("T002")])
    store.clubs.append(make_club("c1", "T001", co_advisor_id="T002", capacity=50))
    store.students.extend([make_student("10001", "c1"), make_student("10002", "c1")])
    assert [c.id for c in store.teacher_clubs("T002")] == ["c1"]
    assert store.teacher_student_total("T001") == 2
    assert store.teacher_student_total("T002") == 2
    assert store.assigned_teacher_ids() == {"T001", "T002"}
    assert store.assigned_teacher_ids(ignore_club_id="c1") == set()


def test_snapshot_is_detached_from_live_state():
    store = RegistryStore()
    store.teachers.append(make_teacher("T001", name="Before"))
    snapshot = store.snapshot()
    store.teachers[0].name = "After"
    store.settings.is_system_open = False
    assert snapshot.teachers[0].name == "Before"
    assert snapshot.settings.is_system_open is True


def test_new_store_starts_with_defaults():
    store = RegistryStore()
    assert store.teachers == [] and store.clubs == [] and store.students == []
    assert len(store.announcements) == 1
    assert store.announcements[0].is_pinned is True
    assert store.settings.registration_rules == list(models.DEFAULT_RULES)
