"""Role store."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select

from shift_roster.entities import Role
from shift_roster.extensions import db
from shift_roster.models import Role as RoleRow
from shift_roster.stores.base import Store, WriteRejected, WriteResult, apply_changes, find_by_id, parse_id


class RoleStore(Store):
    name = "roles"
    entity_type = "roles"

    def __init__(self) -> None:
        super().__init__()
        self.roles: list[Role] = []

    def _load(self) -> dict[str, Any]:
        rows = self._rows(select(RoleRow.__table__).order_by(RoleRow.name.asc()))
        return {
            "roles": [
                Role(
                    id=str(row["id"]),
                    name=row["name"],
                    description=row["description"],
                    created_at=row["created_at"],
                    updated_at=row["updated_at"],
                )
                for row in rows
            ]
        }

    def _apply(self, state: dict[str, Any]) -> None:
        self.roles = state["roles"]

    def get(self, role_id: str | None) -> Role | None:
        return find_by_id(self.roles, role_id)

    def names_by_id(self) -> dict[str, str]:
        return {role.id: role.name for role in self.roles}

    @staticmethod
    def _ensure_unique_name(name: str, exclude_id=None) -> None:
        stmt = select(RoleRow.id).where(RoleRow.name == name)
        if exclude_id is not None:
            stmt = stmt.where(RoleRow.id != exclude_id)
        if db.session.execute(stmt).first() is not None:
            raise WriteRejected("A role with that name already exists.")

    def add(self, name: str, description: str | None = None) -> WriteResult:
        name = (name or "").strip()

        def operation():
            if not name:
                raise WriteRejected("Role name is required.")
            self._ensure_unique_name(name)
            role = RoleRow(name=name, description=description or None)
            db.session.add(role)
            db.session.flush()
            return role.id

        return self._write("ROLE_CREATED", operation, payload={"name": name})

    def update(self, role_id: str, **changes: Any) -> WriteResult:
        if "name" in changes:
            changes["name"] = (changes["name"] or "").strip()
        if "description" in changes:
            changes["description"] = changes["description"] or None

        def operation():
            role = db.session.get(RoleRow, parse_id(role_id, "role"))
            if role is None:
                raise WriteRejected("Role not found.")
            if "name" in changes:
                if not changes["name"]:
                    raise WriteRejected("Role name is required.")
                self._ensure_unique_name(changes["name"], exclude_id=role.id)
            apply_changes(role, changes, {"name", "description"})
            return role.id

        return self._write("ROLE_UPDATED", operation, payload=changes)

    def delete(self, role_id: str) -> WriteResult:
        def operation():
            role = db.session.get(RoleRow, parse_id(role_id, "role"))
            if role is None:
                raise WriteRejected("Role not found.")
            db.session.delete(role)
            return role.id

        return self._write("ROLE_DELETED", operation)
