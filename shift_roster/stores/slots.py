"""Role entries and assignments shared by templates, roster shifts and shifts.

Child collections are diffed against what is stored instead of being
deleted and re-inserted: entries for retained roles keep their id and their
assignments.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from typing import Any, Iterable, Sequence

from sqlalchemy import select

from shift_roster.entities import RoleSlot
from shift_roster.extensions import db
from shift_roster.models import Person, Role
from shift_roster.stores.base import WriteRejected, parse_id


def _unique(ids: Iterable[uuid.UUID]) -> list[uuid.UUID]:
    seen: set[uuid.UUID] = set()
    ordered = []
    for item in ids:
        if item not in seen:
            seen.add(item)
            ordered.append(item)
    return ordered


def validate_slots(slots: Sequence[RoleSlot]) -> list[tuple[uuid.UUID, RoleSlot]]:
    parsed: list[tuple[uuid.UUID, RoleSlot]] = []
    seen: set[uuid.UUID] = set()
    for slot in slots:
        role_id = parse_id(slot.role_id, "role")
        if role_id in seen:
            raise WriteRejected("Each role can only be listed once.")
        try:
            required_count = int(slot.required_count)
        except (TypeError, ValueError) as exc:
            raise WriteRejected("Required count must be a number.") from exc
        if required_count < 1:
            raise WriteRejected("Required count must be at least 1.")
        seen.add(role_id)
        parsed.append((role_id, replace(slot, required_count=required_count)))

    if seen:
        known = set(db.session.execute(select(Role.id).where(Role.id.in_(seen))).scalars().all())
        if seen - known:
            raise WriteRejected("Unknown role selected.")
    return parsed


def check_assignable(role_id: uuid.UUID, person_ids: Sequence[uuid.UUID]) -> None:
    """Only existing people holding ``role_id`` may fill an entry for it."""
    if not person_ids:
        return
    rows = db.session.execute(
        select(Person.id, Person.name, Person.role_ids).where(Person.id.in_(person_ids))
    ).all()
    found = {row.id: row for row in rows}
    role = db.session.get(Role, role_id)
    role_name = role.name if role is not None else "this"
    for person_id in person_ids:
        person = found.get(person_id)
        if person is None:
            raise WriteRejected("Unknown person selected.")
        if str(role_id) not in (person.role_ids or []):
            raise WriteRejected(f"{person.name} does not hold the {role_name} role.")


def sync_assignments(
    assignment_model: Any,
    entry_column: str,
    entry_id: uuid.UUID,
    role_id: uuid.UUID,
    person_ids: Iterable[uuid.UUID | str],
) -> None:
    wanted = _unique(parse_id(person_id, "person") for person_id in person_ids)
    existing = {
        assignment.person_id: assignment
        for assignment in db.session.execute(
            select(assignment_model).where(getattr(assignment_model, entry_column) == entry_id)
        )
        .scalars()
        .all()
    }

    added = [person_id for person_id in wanted if person_id not in existing]
    check_assignable(role_id, added)

    for person_id, assignment in existing.items():
        if person_id not in wanted:
            db.session.delete(assignment)
    for person_id in added:
        db.session.add(assignment_model(**{entry_column: entry_id, "person_id": person_id}))


def sync_role_entries(
    entry_model: Any,
    parent_column: str,
    parent_id: uuid.UUID,
    slots: Sequence[RoleSlot],
    *,
    assignment_model: Any = None,
    assignment_column: str | None = None,
) -> None:
    parsed = validate_slots(slots)
    existing = {
        entry.role_id: entry
        for entry in db.session.execute(
            select(entry_model).where(getattr(entry_model, parent_column) == parent_id)
        )
        .scalars()
        .all()
    }
    wanted = {role_id for role_id, _ in parsed}

    for role_id, entry in existing.items():
        if role_id not in wanted:
            db.session.delete(entry)

    entries = []
    for position, (role_id, slot) in enumerate(parsed):
        entry = existing.get(role_id)
        if entry is None:
            entry = entry_model(
                **{parent_column: parent_id},
                id=uuid.uuid4(),
                role_id=role_id,
                required_count=int(slot.required_count),
                position=position,
            )
            db.session.add(entry)
        else:
            entry.required_count = int(slot.required_count)
            entry.position = position
        entries.append((entry, role_id, slot))
    db.session.flush()

    if assignment_model is None or assignment_column is None:
        return
    for entry, role_id, slot in entries:
        if slot.assigned_person_ids is not None:
            sync_assignments(assignment_model, assignment_column, entry.id, role_id, slot.assigned_person_ids)


def assign_to_entry(
    entry_model: Any,
    assignment_model: Any,
    assignment_column: str,
    entry_id: uuid.UUID | str,
    person_id: uuid.UUID | str,
) -> uuid.UUID:
    entry_uuid = parse_id(entry_id, "shift role")
    person_uuid = parse_id(person_id, "person")
    entry = db.session.get(entry_model, entry_uuid)
    if entry is None:
        raise WriteRejected("Shift role not found.")

    already = db.session.execute(
        select(assignment_model.id).where(
            getattr(assignment_model, assignment_column) == entry_uuid,
            assignment_model.person_id == person_uuid,
        )
    ).first()
    if already is not None:
        raise WriteRejected("Person is already assigned to this role.")

    check_assignable(entry.role_id, [person_uuid])
    db.session.add(assignment_model(**{assignment_column: entry_uuid, "person_id": person_uuid}))
    return entry_uuid


def remove_from_entry(
    assignment_model: Any,
    assignment_column: str,
    entry_id: uuid.UUID | str,
    person_id: uuid.UUID | str,
) -> uuid.UUID:
    entry_uuid = parse_id(entry_id, "shift role")
    person_uuid = parse_id(person_id, "person")
    assignment = db.session.execute(
        select(assignment_model).where(
            getattr(assignment_model, assignment_column) == entry_uuid,
            assignment_model.person_id == person_uuid,
        )
    ).scalar_one_or_none()
    if assignment is None:
        raise WriteRejected("Person is not assigned to this role.")
    db.session.delete(assignment)
    return entry_uuid
