"""Leave availability checks used when staffing shifts.

All functions are pure: they read the leave and person snapshots they are
given and never touch the database. Comparisons are by calendar date; a
``datetime`` argument is reduced to its date first.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Literal

from shift_roster.entities import Leave, Person

CURRENT = "current"
UPCOMING = "upcoming"


@dataclass(frozen=True)
class LeaveWindow:
    status: Literal["current", "upcoming"]
    start: date
    end: date


def as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def approved_leaves_for(leaves: Iterable[Leave], person_id: str) -> list[Leave]:
    return [leave for leave in leaves if leave.person_id == person_id and leave.is_approved]


def is_on_leave(leaves: Iterable[Leave], person_id: str, on_date: date | datetime) -> bool:
    day = as_date(on_date)
    return any(leave.start_date <= day <= leave.end_date for leave in approved_leaves_for(leaves, person_id))


def leave_status(
    leaves: Iterable[Leave],
    person_id: str,
    reference_date: date | datetime,
) -> LeaveWindow | None:
    """Classify a person's approved leave relative to ``reference_date``.

    A leave containing the date wins over any upcoming one; among upcoming
    leaves the one starting soonest is reported.
    """
    day = as_date(reference_date)
    upcoming: Leave | None = None
    for leave in approved_leaves_for(leaves, person_id):
        if leave.start_date <= day <= leave.end_date:
            return LeaveWindow(status=CURRENT, start=leave.start_date, end=leave.end_date)
        if leave.start_date > day and (upcoming is None or leave.start_date < upcoming.start_date):
            upcoming = leave

    if upcoming is None:
        return None
    return LeaveWindow(status=UPCOMING, start=upcoming.start_date, end=upcoming.end_date)


def eligible_people(
    people: Iterable[Person],
    leaves: Iterable[Leave],
    on_date: date | datetime,
    *,
    role_id: str | None = None,
    assigned_ids: Iterable[str] = (),
) -> list[Person]:
    """People who can still be assigned to a role entry on ``on_date``."""
    day = as_date(on_date)
    assigned = set(assigned_ids)
    on_leave = {
        leave.person_id
        for leave in leaves
        if leave.is_approved and leave.start_date <= day <= leave.end_date
    }
    return [
        person
        for person in people
        if person.id not in assigned
        and person.id not in on_leave
        and (role_id is None or person.has_role(role_id))
    ]
