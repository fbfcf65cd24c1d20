"""Person store."""

from __future__ import annotations

from typing import Any, Iterable

from sqlalchemy import select

from shift_roster.entities import Person
from shift_roster.extensions import db
from shift_roster.models import Person as PersonRow
from shift_roster.models import Role as RoleRow
from shift_roster.stores.base import Store, WriteRejected, WriteResult, apply_changes, find_by_id, parse_id

PERSON_FIELDS = {"name", "phone", "designation", "role_ids"}


def _clean_role_ids(role_ids: Iterable[str] | None) -> list[str]:
    cleaned: list[str] = []
    for role_id in role_ids or []:
        value = str(parse_id(role_id, "role"))
        if value not in cleaned:
            cleaned.append(value)
    if cleaned:
        known = {
            str(item)
            for item in db.session.execute(select(RoleRow.id).where(RoleRow.id.in_([parse_id(v) for v in cleaned])))
            .scalars()
            .all()
        }
        if set(cleaned) - known:
            raise WriteRejected("Unknown role selected.")
    return cleaned


class PersonStore(Store):
    name = "people"
    entity_type = "employees"

    def __init__(self) -> None:
        super().__init__()
        self.people: list[Person] = []

    def _load(self) -> dict[str, Any]:
        rows = self._rows(select(PersonRow.__table__).order_by(PersonRow.name.asc()))
        return {
            "people": [
                Person(
                    id=str(row["id"]),
                    name=row["name"],
                    phone=row["phone"] or "",
                    designation=row["designation"] or "",
                    role_ids=tuple(row["role_ids"] or ()),
                    created_at=row["created_at"],
                    updated_at=row["updated_at"],
                )
                for row in rows
            ]
        }

    def _apply(self, state: dict[str, Any]) -> None:
        self.people = state["people"]

    def get(self, person_id: str | None) -> Person | None:
        return find_by_id(self.people, person_id)

    def search(self, query: str) -> list[Person]:
        query = (query or "").strip()
        if not query:
            return list(self.people)
        lowered = query.lower()
        return [
            person
            for person in self.people
            if lowered in person.name.lower() or query in person.phone or lowered in person.designation.lower()
        ]

    def add(
        self,
        name: str,
        phone: str = "",
        designation: str = "",
        role_ids: Iterable[str] = (),
    ) -> WriteResult:
        name = (name or "").strip()

        def operation():
            if not name:
                raise WriteRejected("Name is required.")
            person = PersonRow(
                name=name,
                phone=(phone or "").strip(),
                designation=(designation or "").strip(),
                role_ids=_clean_role_ids(role_ids),
            )
            db.session.add(person)
            db.session.flush()
            return person.id

        return self._write("PERSON_CREATED", operation, payload={"name": name, "role_ids": list(role_ids)})

    def update(self, person_id: str, **changes: Any) -> WriteResult:
        for key in ("name", "phone", "designation"):
            if key in changes:
                changes[key] = (changes[key] or "").strip()

        def operation():
            person = db.session.get(PersonRow, parse_id(person_id, "person"))
            if person is None:
                raise WriteRejected("Person not found.")
            if "name" in changes and not changes["name"]:
                raise WriteRejected("Name is required.")
            if "role_ids" in changes:
                changes["role_ids"] = _clean_role_ids(changes["role_ids"])
            apply_changes(person, changes, PERSON_FIELDS)
            return person.id

        return self._write("PERSON_UPDATED", operation, payload=changes)

    def delete(self, person_id: str) -> WriteResult:
        def operation():
            person = db.session.get(PersonRow, parse_id(person_id, "person"))
            if person is None:
                raise WriteRejected("Person not found.")
            db.session.delete(person)
            return person.id

        return self._write("PERSON_DELETED", operation)
