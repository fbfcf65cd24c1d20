"""Group store."""

from __future__ import annotations

import uuid
from typing import Any, Iterable

from sqlalchemy import select

from shift_roster.aggregation import group_values
from shift_roster.entities import Group
from shift_roster.extensions import db
from shift_roster.models import Group as GroupRow
from shift_roster.models import GroupMember, Person
from shift_roster.stores.base import Store, WriteRejected, WriteResult, apply_changes, find_by_id, parse_id


def _sync_members(group_id: uuid.UUID, person_ids: Iterable[str]) -> None:
    wanted: list[uuid.UUID] = []
    for person_id in person_ids:
        parsed = parse_id(person_id, "person")
        if parsed not in wanted:
            wanted.append(parsed)
    if wanted:
        known = set(db.session.execute(select(Person.id).where(Person.id.in_(wanted))).scalars().all())
        if set(wanted) - known:
            raise WriteRejected("Unknown person selected.")

    existing = {
        member.person_id: member
        for member in db.session.execute(select(GroupMember).where(GroupMember.group_id == group_id)).scalars().all()
    }
    for person_id, member in existing.items():
        if person_id not in wanted:
            db.session.delete(member)
    for person_id in wanted:
        if person_id not in existing:
            db.session.add(GroupMember(group_id=group_id, person_id=person_id))


class GroupStore(Store):
    name = "groups"
    entity_type = "groups"

    def __init__(self) -> None:
        super().__init__()
        self.groups: list[Group] = []

    def _load(self) -> dict[str, Any]:
        group_rows = self._rows(select(GroupRow.__table__).order_by(GroupRow.name.asc()))
        member_rows = self._rows(select(GroupMember.group_id, GroupMember.person_id))
        members = group_values(member_rows, "group_id", "person_id")
        return {
            "groups": [
                Group(
                    id=str(row["id"]),
                    name=row["name"],
                    description=row["description"],
                    person_ids=tuple(str(person_id) for person_id in members.get(row["id"], [])),
                    created_at=row["created_at"],
                    updated_at=row["updated_at"],
                )
                for row in group_rows
            ]
        }

    def _apply(self, state: dict[str, Any]) -> None:
        self.groups = state["groups"]

    def get(self, group_id: str | None) -> Group | None:
        return find_by_id(self.groups, group_id)

    def groups_for_person(self, person_id: str) -> list[Group]:
        return [group for group in self.groups if person_id in group.person_ids]

    def add(self, name: str, description: str | None = None, person_ids: Iterable[str] = ()) -> WriteResult:
        name = (name or "").strip()
        person_ids = list(person_ids)

        def operation():
            if not name:
                raise WriteRejected("Group name is required.")
            group = GroupRow(id=uuid.uuid4(), name=name, description=description or None)
            db.session.add(group)
            db.session.flush()
            _sync_members(group.id, person_ids)
            return group.id

        return self._write("GROUP_CREATED", operation, payload={"name": name, "person_ids": person_ids})

    def update(self, group_id: str, person_ids: Iterable[str] | None = None, **changes: Any) -> WriteResult:
        if "name" in changes:
            changes["name"] = (changes["name"] or "").strip()
        if "description" in changes:
            changes["description"] = changes["description"] or None
        person_ids = list(person_ids) if person_ids is not None else None

        def operation():
            group = db.session.get(GroupRow, parse_id(group_id, "group"))
            if group is None:
                raise WriteRejected("Group not found.")
            if "name" in changes and not changes["name"]:
                raise WriteRejected("Group name is required.")
            apply_changes(group, changes, {"name", "description"})
            if person_ids is not None:
                _sync_members(group.id, person_ids)
            return group.id

        return self._write("GROUP_UPDATED", operation, payload={**changes, "person_ids": person_ids})

    def delete(self, group_id: str) -> WriteResult:
        def operation():
            group = db.session.get(GroupRow, parse_id(group_id, "group"))
            if group is None:
                raise WriteRejected("Group not found.")
            db.session.delete(group)
            return group.id

        return self._write("GROUP_DELETED", operation)
