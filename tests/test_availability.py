from __future__ import annotations

from datetime import date, datetime

from shift_roster.availability import CURRENT, UPCOMING, eligible_people, is_on_leave, leave_status
from shift_roster.entities import Leave, Person


def _leave(person_id: str, start: date, end: date, status: str = "approved", leave_id: str = "l1") -> Leave:
    return Leave(id=leave_id, person_id=person_id, start_date=start, end_date=end, reason="", status=status)


MARCH_LEAVE = _leave("p1", date(2025, 3, 10), date(2025, 3, 14))


def test_is_on_leave_covers_inclusive_range():
    leaves = [MARCH_LEAVE]

    assert is_on_leave(leaves, "p1", date(2025, 3, 10))
    assert is_on_leave(leaves, "p1", date(2025, 3, 12))
    assert is_on_leave(leaves, "p1", date(2025, 3, 14))
    assert not is_on_leave(leaves, "p1", date(2025, 3, 9))
    assert not is_on_leave(leaves, "p1", date(2025, 3, 15))
    assert not is_on_leave(leaves, "p2", date(2025, 3, 12))


def test_is_on_leave_ignores_time_of_day():
    assert is_on_leave([MARCH_LEAVE], "p1", datetime(2025, 3, 14, 23, 59))


def test_pending_and_rejected_leaves_do_not_count():
    leaves = [
        _leave("p1", date(2025, 3, 10), date(2025, 3, 14), status="pending"),
        _leave("p1", date(2025, 3, 20), date(2025, 3, 21), status="rejected", leave_id="l2"),
    ]

    assert not is_on_leave(leaves, "p1", date(2025, 3, 12))
    assert leave_status(leaves, "p1", date(2025, 3, 1)) is None


def test_leave_status_current_upcoming_and_none():
    leaves = [MARCH_LEAVE]

    current = leave_status(leaves, "p1", date(2025, 3, 12))
    assert current is not None
    assert current.status == CURRENT
    assert (current.start, current.end) == (date(2025, 3, 10), date(2025, 3, 14))

    upcoming = leave_status(leaves, "p1", date(2025, 3, 1))
    assert upcoming is not None
    assert upcoming.status == UPCOMING
    assert (upcoming.start, upcoming.end) == (date(2025, 3, 10), date(2025, 3, 14))

    assert leave_status(leaves, "p1", date(2025, 3, 20)) is None


def test_leave_status_prefers_containing_leave_then_earliest_upcoming():
    leaves = [
        _leave("p1", date(2025, 5, 1), date(2025, 5, 3), leave_id="later"),
        _leave("p1", date(2025, 4, 1), date(2025, 4, 2), leave_id="sooner"),
        _leave("p1", date(2025, 3, 1), date(2025, 3, 31), leave_id="now"),
    ]

    assert leave_status(leaves, "p1", date(2025, 3, 15)).start == date(2025, 3, 1)
    last_day = leave_status(leaves, "p1", date(2025, 3, 31))
    assert last_day.status == CURRENT

    upcoming = leave_status(leaves, "p1", date(2025, 2, 1))
    assert upcoming.status == UPCOMING
    assert upcoming.start == date(2025, 3, 1)

    after_march = leave_status(leaves, "p1", date(2025, 4, 10))
    assert after_march.status == UPCOMING
    assert after_march.start == date(2025, 5, 1)


def test_eligible_people_excludes_assigned_on_leave_and_role_mismatch():
    people = [
        Person(id="p1", name="Ana", role_ids=("nurse",)),
        Person(id="p2", name="Ben", role_ids=("nurse", "driver")),
        Person(id="p3", name="Cai", role_ids=("driver",)),
        Person(id="p4", name="Dee", role_ids=("nurse",)),
    ]
    leaves = [_leave("p4", date(2025, 3, 10), date(2025, 3, 14))]

    eligible = eligible_people(people, leaves, date(2025, 3, 12), role_id="nurse", assigned_ids=["p1"])
    assert [person.id for person in eligible] == ["p2"]

    unfiltered = eligible_people(people, leaves, date(2025, 3, 12))
    assert [person.id for person in unfiltered] == ["p1", "p2", "p3"]

    after_leave = eligible_people(people, leaves, date(2025, 3, 15), role_id="nurse")
    assert [person.id for person in after_leave] == ["p1", "p2", "p4"]
