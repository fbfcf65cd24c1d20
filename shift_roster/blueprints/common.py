"""Helpers shared by the page blueprints."""

from __future__ import annotations

from datetime import date
from typing import Any, Iterable

from flask import flash, request

from shift_roster.availability import eligible_people
from shift_roster.entities import RoleSlot, StaffedRole
from shift_roster.stores import StoreRegistry, WriteResult, get_stores


def refresh(*names: str) -> StoreRegistry:
    """Re-read the named domains before rendering; failures keep the last snapshot."""
    stores = get_stores()
    for name in names:
        store = getattr(stores, name)
        if not store.fetch():
            flash(f"Could not load {name.replace('_', ' ')}: {store.error or 'unknown error'}.", "warning")
    return stores


def flash_result(result: WriteResult, success_message: str) -> bool:
    if result.ok:
        flash(success_message, "success")
    else:
        flash(result.error or "Could not save changes.", "danger")
    return result.ok


def role_rows_from_request() -> tuple[list[RoleSlot], list[str]]:
    """Parse the dynamic role rows of the template and shift forms.

    Rows without a selected role are skipped so an untouched blank row does
    not fail the whole form.
    """
    role_ids = request.form.getlist("role_id")
    counts = request.form.getlist("required_count")
    slots: list[RoleSlot] = []
    errors: list[str] = []
    for index, role_id in enumerate(role_ids):
        role_id = (role_id or "").strip()
        if not role_id:
            continue
        raw_count = counts[index] if index < len(counts) else "1"
        try:
            required_count = int(raw_count or 1)
        except ValueError:
            errors.append(f"Row {index + 1}: required count must be a number.")
            continue
        if required_count < 1:
            errors.append(f"Row {index + 1}: required count must be at least 1.")
            continue
        slots.append(RoleSlot(role_id=role_id, required_count=required_count))
    return slots, errors


def role_choices(stores: StoreRegistry) -> list[tuple[str, str]]:
    return [(role.id, role.name) for role in stores.roles.roles]


def person_choices(stores: StoreRegistry) -> list[tuple[str, str]]:
    return [(person.id, person.name) for person in stores.people.people]


def staffing_rows(stores: StoreRegistry, on_date: date, roles: Iterable[StaffedRole]) -> list[dict[str, Any]]:
    """Per role entry: who is assigned (with leave badge) and who could be added."""
    people_by_id = {person.id: person for person in stores.people.people}
    rows = []
    for role in roles:
        assigned = []
        for person_id in role.assigned_person_ids:
            person = people_by_id.get(person_id)
            assigned.append(
                {
                    "id": person_id,
                    "name": person.name if person is not None else "Unknown person",
                    "leave": stores.leaves.leave_status(person_id, on_date),
                }
            )
        rows.append(
            {
                "role": role,
                "assigned": assigned,
                "candidates": eligible_people(
                    stores.people.people,
                    stores.leaves.leaves,
                    on_date,
                    role_id=role.role_id,
                    assigned_ids=role.assigned_person_ids,
                ),
            }
        )
    return rows
