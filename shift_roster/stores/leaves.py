"""Leave store and its availability queries."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from sqlalchemy import select

from shift_roster import availability
from shift_roster.entities import Leave
from shift_roster.extensions import db
from shift_roster.models import Leave as LeaveRow
from shift_roster.models import LeaveStatus, Person
from shift_roster.stores.base import Store, WriteRejected, WriteResult, apply_changes, find_by_id, parse_id

LEAVE_FIELDS = {"person_id", "start_date", "end_date", "reason", "status"}


def _coerce_status(value: LeaveStatus | str) -> LeaveStatus:
    try:
        return LeaveStatus(getattr(value, "value", value))
    except ValueError as exc:
        raise WriteRejected("Invalid leave status.") from exc


def _check_range(start_date: date, end_date: date) -> None:
    if start_date is None or end_date is None:
        raise WriteRejected("Leave start and end dates are required.")
    if end_date < start_date:
        raise WriteRejected("Leave end date must be on or after the start date.")


class LeaveStore(Store):
    name = "leaves"
    entity_type = "leaves"

    def __init__(self) -> None:
        super().__init__()
        self.leaves: list[Leave] = []

    def _load(self) -> dict[str, Any]:
        rows = self._rows(
            select(LeaveRow.__table__).order_by(LeaveRow.start_date.desc(), LeaveRow.created_at.desc())
        )
        return {
            "leaves": [
                Leave(
                    id=str(row["id"]),
                    person_id=str(row["person_id"]),
                    start_date=row["start_date"],
                    end_date=row["end_date"],
                    reason=row["reason"] or "",
                    status=_coerce_status(row["status"]).value,
                    created_at=row["created_at"],
                    updated_at=row["updated_at"],
                )
                for row in rows
            ]
        }

    def _apply(self, state: dict[str, Any]) -> None:
        self.leaves = state["leaves"]

    # Lookups

    def get(self, leave_id: str | None) -> Leave | None:
        return find_by_id(self.leaves, leave_id)

    def get_leaves_by_person(self, person_id: str) -> list[Leave]:
        return [leave for leave in self.leaves if leave.person_id == person_id]

    def is_person_on_leave(self, person_id: str, on_date: date | datetime) -> bool:
        return availability.is_on_leave(self.leaves, person_id, on_date)

    def leave_status(self, person_id: str, reference_date: date | datetime) -> availability.LeaveWindow | None:
        return availability.leave_status(self.leaves, person_id, reference_date)

    def people_on_leave(self, on_date: date | datetime) -> set[str]:
        day = availability.as_date(on_date)
        return {
            leave.person_id
            for leave in self.leaves
            if leave.is_approved and leave.start_date <= day <= leave.end_date
        }

    # Writes

    def add(
        self,
        person_id: str,
        start_date: date,
        end_date: date,
        reason: str = "",
        status: LeaveStatus | str = LeaveStatus.PENDING,
    ) -> WriteResult:
        def operation():
            person_uuid = parse_id(person_id, "person")
            if db.session.get(Person, person_uuid) is None:
                raise WriteRejected("Person not found.")
            _check_range(start_date, end_date)
            leave = LeaveRow(
                person_id=person_uuid,
                start_date=start_date,
                end_date=end_date,
                reason=(reason or "").strip(),
                status=_coerce_status(status),
            )
            db.session.add(leave)
            db.session.flush()
            return leave.id

        return self._write(
            "LEAVE_CREATED",
            operation,
            payload={"person_id": person_id, "start_date": start_date, "end_date": end_date, "status": status},
        )

    def update(self, leave_id: str, **changes: Any) -> WriteResult:
        return self._update(leave_id, "LEAVE_UPDATED", changes)

    def _update(self, leave_id: str, action: str, changes: dict[str, Any]) -> WriteResult:
        def operation():
            leave = db.session.get(LeaveRow, parse_id(leave_id, "leave"))
            if leave is None:
                raise WriteRejected("Leave not found.")
            if "person_id" in changes:
                changes["person_id"] = parse_id(changes["person_id"], "person")
                if db.session.get(Person, changes["person_id"]) is None:
                    raise WriteRejected("Person not found.")
            if "status" in changes:
                changes["status"] = _coerce_status(changes["status"])
            if "reason" in changes:
                changes["reason"] = (changes["reason"] or "").strip()
            _check_range(changes.get("start_date", leave.start_date), changes.get("end_date", leave.end_date))
            apply_changes(leave, changes, LEAVE_FIELDS)
            return leave.id

        return self._write(action, operation, payload=changes)

    def delete(self, leave_id: str) -> WriteResult:
        def operation():
            leave = db.session.get(LeaveRow, parse_id(leave_id, "leave"))
            if leave is None:
                raise WriteRejected("Leave not found.")
            db.session.delete(leave)
            return leave.id

        return self._write("LEAVE_DELETED", operation)

    def approve(self, leave_id: str) -> WriteResult:
        return self._update(leave_id, "LEAVE_APPROVED", {"status": LeaveStatus.APPROVED})

    def reject(self, leave_id: str) -> WriteResult:
        return self._update(leave_id, "LEAVE_REJECTED", {"status": LeaveStatus.REJECTED})
