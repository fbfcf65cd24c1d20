"""Roster store: rosters, their dated shifts, role entries and assignments."""

from __future__ import annotations

import uuid
from datetime import date
from typing import Any, Sequence

from sqlalchemy import select

from shift_roster.aggregation import nest_rows
from shift_roster.entities import RoleSlot, Roster, RosterShift, StaffedRole
from shift_roster.extensions import db
from shift_roster.models import Role
from shift_roster.models import Roster as RosterRow
from shift_roster.models import RosterShift as RosterShiftRow
from shift_roster.models import RosterShiftAssignment, RosterShiftRole, ShiftTemplateRole
from shift_roster.models import ShiftTemplate as ShiftTemplateRow
from shift_roster.snapshots import SnapshotCache
from shift_roster.stores.base import Store, WriteRejected, WriteResult, apply_changes, find_by_id, parse_id
from shift_roster.stores.slots import assign_to_entry, remove_from_entry, sync_role_entries


def _check_period(start_date: date | None, end_date: date | None) -> None:
    if start_date is None or end_date is None:
        raise WriteRejected("Roster start and end dates are required.")
    if end_date < start_date:
        raise WriteRejected("Roster end date must be on or after the start date.")


def _check_within(roster: RosterRow, shift_date: date | None) -> None:
    if shift_date is None:
        raise WriteRejected("Shift date is required.")
    if not roster.start_date <= shift_date <= roster.end_date:
        raise WriteRejected(
            f"Shift date must fall within the roster period "
            f"({roster.start_date.isoformat()} to {roster.end_date.isoformat()})."
        )


def _template_slots(template_id: uuid.UUID) -> list[RoleSlot]:
    rows = db.session.execute(
        select(ShiftTemplateRole.role_id, ShiftTemplateRole.required_count)
        .where(ShiftTemplateRole.template_id == template_id)
        .order_by(ShiftTemplateRole.position.asc(), ShiftTemplateRole.created_at.asc())
    ).all()
    return [RoleSlot(role_id=str(row.role_id), required_count=row.required_count, assigned_person_ids=()) for row in rows]


class RosterStore(Store):
    name = "rosters"
    entity_type = "rosters"

    def __init__(self, snapshots: SnapshotCache | None = None) -> None:
        super().__init__()
        self.rosters: list[Roster] = []
        self.shifts: list[RosterShift] = []
        self.snapshots = snapshots

    def _load(self) -> dict[str, Any]:
        roster_rows = self._rows(
            select(RosterRow.__table__).order_by(RosterRow.start_date.desc(), RosterRow.created_at.desc())
        )
        shift_rows = self._rows(
            select(RosterShiftRow.__table__).order_by(RosterShiftRow.shift_date.asc(), RosterShiftRow.created_at.asc())
        )
        role_rows = self._rows(
            select(
                RosterShiftRole.id,
                RosterShiftRole.roster_shift_id,
                RosterShiftRole.role_id,
                RosterShiftRole.required_count,
                Role.name.label("role_name"),
            )
            .outerjoin(Role, Role.id == RosterShiftRole.role_id)
            .order_by(RosterShiftRole.position.asc(), RosterShiftRole.created_at.asc())
        )
        assignment_rows = self._rows(
            select(RosterShiftAssignment.roster_shift_role_id, RosterShiftAssignment.person_id).order_by(
                RosterShiftAssignment.created_at.asc()
            )
        )

        rosters = [
            Roster(
                id=str(row["id"]),
                name=row["name"],
                start_date=row["start_date"],
                end_date=row["end_date"],
                created_at=row["created_at"],
                updated_at=row["updated_at"],
            )
            for row in roster_rows
        ]
        shifts = [
            RosterShift(
                id=str(shift["id"]),
                roster_id=str(shift["roster_id"]),
                template_id=str(shift["template_id"]) if shift["template_id"] is not None else None,
                date=shift["shift_date"],
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
                created_at=shift["created_at"],
                updated_at=shift["updated_at"],
            )
            for shift, roles in nest_rows(
                shift_rows,
                role_rows,
                assignment_rows,
                child_fk="roster_shift_id",
                grandchild_fk="roster_shift_role_id",
                grandchild_value="person_id",
            )
        ]
        return {"rosters": rosters, "shifts": shifts}

    def _apply(self, state: dict[str, Any]) -> None:
        self.rosters = state["rosters"]
        self.shifts = state["shifts"]

    def _after_publish(self) -> None:
        if self.snapshots is not None:
            self.snapshots.save(
                self.name,
                {
                    "rosters": [roster.to_dict() for roster in self.rosters],
                    "shifts": [shift.to_dict() for shift in self.shifts],
                },
            )

    def restore(self) -> bool:
        """Seed the snapshot from the local cache until the first fetch lands."""
        if self.snapshots is None:
            return False
        payload = self.snapshots.load(self.name)
        if not payload:
            return False
        try:
            rosters = [Roster.from_dict(item) for item in payload.get("rosters", [])]
            shifts = [RosterShift.from_dict(item) for item in payload.get("shifts", [])]
        except (KeyError, TypeError, ValueError):
            self.snapshots.logger.warning("Ignoring malformed %s snapshot.", self.name, exc_info=True)
            return False
        with self._lock:
            if self._published_token != 0:
                return False
            self.rosters = rosters
            self.shifts = shifts
        return True

    # Lookups

    def get(self, roster_id: str | None) -> Roster | None:
        return find_by_id(self.rosters, roster_id)

    get_roster = get

    def get_roster_shifts(self, roster_id: str) -> list[RosterShift]:
        return sorted((shift for shift in self.shifts if shift.roster_id == roster_id), key=lambda shift: shift.date)

    def get_shift(self, shift_id: str | None) -> RosterShift | None:
        return find_by_id(self.shifts, shift_id)

    def get_shift_role(self, role_entry_id: str) -> tuple[RosterShift, StaffedRole] | None:
        for shift in self.shifts:
            for role in shift.roles:
                if role.id == role_entry_id:
                    return shift, role
        return None

    # Roster writes

    def add(self, name: str, start_date: date, end_date: date) -> WriteResult:
        name = (name or "").strip()

        def operation():
            if not name:
                raise WriteRejected("Roster name is required.")
            _check_period(start_date, end_date)
            roster = RosterRow(name=name, start_date=start_date, end_date=end_date)
            db.session.add(roster)
            db.session.flush()
            return roster.id

        return self._write(
            "ROSTER_CREATED",
            operation,
            payload={"name": name, "start_date": start_date, "end_date": end_date},
        )

    def update(self, roster_id: str, **changes: Any) -> WriteResult:
        if "name" in changes:
            changes["name"] = (changes["name"] or "").strip()

        def operation():
            roster = db.session.get(RosterRow, parse_id(roster_id, "roster"))
            if roster is None:
                raise WriteRejected("Roster not found.")
            if "name" in changes and not changes["name"]:
                raise WriteRejected("Roster name is required.")
            start_date = changes.get("start_date", roster.start_date)
            end_date = changes.get("end_date", roster.end_date)
            _check_period(start_date, end_date)
            outside = db.session.execute(
                select(RosterShiftRow.shift_date).where(
                    RosterShiftRow.roster_id == roster.id,
                    (RosterShiftRow.shift_date < start_date) | (RosterShiftRow.shift_date > end_date),
                ).order_by(RosterShiftRow.shift_date)
            ).first()
            if outside is not None:
                raise WriteRejected(
                    f"The roster has a shift on {outside.shift_date.isoformat()}, outside "
                    f"{start_date.isoformat()} to {end_date.isoformat()}."
                )
            apply_changes(roster, changes, {"name", "start_date", "end_date"})
            return roster.id

        return self._write("ROSTER_UPDATED", operation, payload=changes)

    def delete(self, roster_id: str) -> WriteResult:
        def operation():
            roster = db.session.get(RosterRow, parse_id(roster_id, "roster"))
            if roster is None:
                raise WriteRejected("Roster not found.")
            db.session.delete(roster)
            return roster.id

        return self._write("ROSTER_DELETED", operation)

    # Roster shift writes

    def add_roster_shift(
        self,
        roster_id: str,
        template_id: str,
        shift_date: date,
        roles: Sequence[RoleSlot] | None = None,
    ) -> WriteResult:
        """Instantiate a template on ``shift_date``.

        Without ``roles`` the template's role entries are copied with nobody
        assigned; the copy does not follow later template edits.
        """

        def operation():
            roster = db.session.get(RosterRow, parse_id(roster_id, "roster"))
            if roster is None:
                raise WriteRejected("Roster not found.")
            template = db.session.get(ShiftTemplateRow, parse_id(template_id, "template"))
            if template is None:
                raise WriteRejected("Shift template not found.")
            _check_within(roster, shift_date)

            shift = RosterShiftRow(id=uuid.uuid4(), roster_id=roster.id, template_id=template.id, shift_date=shift_date)
            db.session.add(shift)
            db.session.flush()
            slots = roles if roles is not None else _template_slots(template.id)
            sync_role_entries(
                RosterShiftRole,
                "roster_shift_id",
                shift.id,
                slots,
                assignment_model=RosterShiftAssignment,
                assignment_column="roster_shift_role_id",
            )
            return shift.id

        return self._write(
            "ROSTER_SHIFT_CREATED",
            operation,
            payload={"roster_id": roster_id, "template_id": template_id, "date": shift_date},
            entity_type="roster_shifts",
        )

    def update_roster_shift(
        self,
        shift_id: str,
        shift_date: date | None = None,
        roles: Sequence[RoleSlot] | None = None,
    ) -> WriteResult:
        def operation():
            shift = db.session.get(RosterShiftRow, parse_id(shift_id, "shift"))
            if shift is None:
                raise WriteRejected("Roster shift not found.")
            if shift_date is not None and shift_date != shift.shift_date:
                roster = db.session.get(RosterRow, shift.roster_id)
                _check_within(roster, shift_date)
                shift.shift_date = shift_date
            if roles is not None:
                sync_role_entries(
                    RosterShiftRole,
                    "roster_shift_id",
                    shift.id,
                    roles,
                    assignment_model=RosterShiftAssignment,
                    assignment_column="roster_shift_role_id",
                )
            return shift.id

        return self._write(
            "ROSTER_SHIFT_UPDATED",
            operation,
            payload={"date": shift_date, "roles": None if roles is None else [slot.role_id for slot in roles]},
            entity_type="roster_shifts",
        )

    def delete_roster_shift(self, shift_id: str) -> WriteResult:
        def operation():
            shift = db.session.get(RosterShiftRow, parse_id(shift_id, "shift"))
            if shift is None:
                raise WriteRejected("Roster shift not found.")
            db.session.delete(shift)
            return shift.id

        return self._write("ROSTER_SHIFT_DELETED", operation, entity_type="roster_shifts")

    # Assignments

    def assign_person(self, role_entry_id: str, person_id: str) -> WriteResult:
        return self._write(
            "ROSTER_PERSON_ASSIGNED",
            lambda: assign_to_entry(
                RosterShiftRole,
                RosterShiftAssignment,
                "roster_shift_role_id",
                role_entry_id,
                person_id,
            ),
            payload={"person_id": person_id},
            entity_type="roster_shift_roles",
        )

    def remove_person(self, role_entry_id: str, person_id: str) -> WriteResult:
        return self._write(
            "ROSTER_PERSON_REMOVED",
            lambda: remove_from_entry(RosterShiftAssignment, "roster_shift_role_id", role_entry_id, person_id),
            payload={"person_id": person_id},
            entity_type="roster_shift_roles",
        )
