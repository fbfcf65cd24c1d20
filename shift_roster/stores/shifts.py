"""Legacy shift store.

Stand-alone dated shifts with their own name and times. New scheduling goes
through rosters; these stay editable for existing data.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, time
from typing import Any, Sequence

from sqlalchemy import select

from shift_roster.aggregation import nest_rows
from shift_roster.entities import RoleSlot, Shift, StaffedRole
from shift_roster.extensions import db
from shift_roster.models import Role, ShiftAssignment, ShiftRole
from shift_roster.models import Shift as ShiftRow
from shift_roster.stores.base import Store, WriteRejected, WriteResult, apply_changes, find_by_id, parse_id
from shift_roster.stores.slots import assign_to_entry, remove_from_entry, sync_role_entries


class ShiftStore(Store):
    name = "shifts"
    entity_type = "shifts"

    def __init__(self) -> None:
        super().__init__()
        self.shifts: list[Shift] = []

    def _load(self) -> dict[str, Any]:
        shift_rows = self._rows(
            select(ShiftRow.__table__).order_by(ShiftRow.shift_date.desc(), ShiftRow.start_time.asc())
        )
        role_rows = self._rows(
            select(
                ShiftRole.id,
                ShiftRole.shift_id,
                ShiftRole.role_id,
                ShiftRole.required_count,
                Role.name.label("role_name"),
            )
            .outerjoin(Role, Role.id == ShiftRole.role_id)
            .order_by(ShiftRole.position.asc(), ShiftRole.created_at.asc())
        )
        assignment_rows = self._rows(
            select(ShiftAssignment.shift_role_id, ShiftAssignment.person_id).order_by(ShiftAssignment.created_at.asc())
        )

        shifts = []
        for row, roles in nest_rows(
            shift_rows,
            role_rows,
            assignment_rows,
            child_fk="shift_id",
            grandchild_fk="shift_role_id",
            grandchild_value="person_id",
        ):
            shifts.append(
                Shift(
                    id=str(row["id"]),
                    name=row["name"],
                    date=row["shift_date"],
                    start_time=row["start_time"],
                    end_time=row["end_time"],
                    roles=tuple(
                        StaffedRole(
                            id=str(role["id"]),
                            role_id=str(role["role_id"]),
                            role_name=role["role_name"] or "",
                            required_count=role["required_count"] or 1,
                            assigned_person_ids=tuple(str(person_id) for person_id in person_ids),
                        )
                        for role, person_ids in roles
                    ),
                    created_at=row["created_at"],
                    updated_at=row["updated_at"],
                )
            )
        return {"shifts": shifts}

    def _apply(self, state: dict[str, Any]) -> None:
        self.shifts = state["shifts"]

    def get(self, shift_id: str | None) -> Shift | None:
        return find_by_id(self.shifts, shift_id)

    def get_shifts_by_date(self, on_date: date | datetime) -> list[Shift]:
        day = on_date.date() if isinstance(on_date, datetime) else on_date
        return sorted((shift for shift in self.shifts if shift.date == day), key=lambda shift: shift.start_time)

    def get_shift_role(self, role_entry_id: str) -> tuple[Shift, StaffedRole] | None:
        for shift in self.shifts:
            for role in shift.roles:
                if role.id == role_entry_id:
                    return shift, role
        return None

    @staticmethod
    def _check(name: str, shift_date: date | None, start_time: time | None, end_time: time | None) -> None:
        if not name:
            raise WriteRejected("Shift name is required.")
        if shift_date is None:
            raise WriteRejected("Shift date is required.")
        if start_time is None or end_time is None:
            raise WriteRejected("Start and end time are required.")

    def add(
        self,
        name: str,
        shift_date: date,
        start_time: time,
        end_time: time,
        roles: Sequence[RoleSlot] = (),
    ) -> WriteResult:
        name = (name or "").strip()

        def operation():
            self._check(name, shift_date, start_time, end_time)
            shift = ShiftRow(id=uuid.uuid4(), name=name, shift_date=shift_date, start_time=start_time, end_time=end_time)
            db.session.add(shift)
            db.session.flush()
            sync_role_entries(
                ShiftRole,
                "shift_id",
                shift.id,
                roles,
                assignment_model=ShiftAssignment,
                assignment_column="shift_role_id",
            )
            return shift.id

        return self._write(
            "SHIFT_CREATED",
            operation,
            payload={"name": name, "date": shift_date, "roles": [slot.role_id for slot in roles]},
        )

    def update(self, shift_id: str, roles: Sequence[RoleSlot] | None = None, **changes: Any) -> WriteResult:
        if "name" in changes:
            changes["name"] = (changes["name"] or "").strip()
        if "date" in changes:
            changes["shift_date"] = changes.pop("date")

        def operation():
            shift = db.session.get(ShiftRow, parse_id(shift_id, "shift"))
            if shift is None:
                raise WriteRejected("Shift not found.")
            self._check(
                changes.get("name", shift.name),
                changes.get("shift_date", shift.shift_date),
                changes.get("start_time", shift.start_time),
                changes.get("end_time", shift.end_time),
            )
            apply_changes(shift, changes, {"name", "shift_date", "start_time", "end_time"})
            if roles is not None:
                sync_role_entries(
                    ShiftRole,
                    "shift_id",
                    shift.id,
                    roles,
                    assignment_model=ShiftAssignment,
                    assignment_column="shift_role_id",
                )
            return shift.id

        return self._write(
            "SHIFT_UPDATED",
            operation,
            payload={**changes, "roles": None if roles is None else [slot.role_id for slot in roles]},
        )

    def delete(self, shift_id: str) -> WriteResult:
        def operation():
            shift = db.session.get(ShiftRow, parse_id(shift_id, "shift"))
            if shift is None:
                raise WriteRejected("Shift not found.")
            db.session.delete(shift)
            return shift.id

        return self._write("SHIFT_DELETED", operation)

    def assign_person(self, role_entry_id: str, person_id: str) -> WriteResult:
        return self._write(
            "SHIFT_PERSON_ASSIGNED",
            lambda: assign_to_entry(ShiftRole, ShiftAssignment, "shift_role_id", role_entry_id, person_id),
            payload={"person_id": person_id},
            entity_type="shift_roles",
        )

    def remove_person(self, role_entry_id: str, person_id: str) -> WriteResult:
        return self._write(
            "SHIFT_PERSON_REMOVED",
            lambda: remove_from_entry(ShiftAssignment, "shift_role_id", role_entry_id, person_id),
            payload={"person_id": person_id},
            entity_type="shift_roles",
        )
