"""Shift template store."""

from __future__ import annotations

import uuid
from datetime import time
from typing import Any, Sequence

from sqlalchemy import select

from shift_roster.aggregation import index_by
from shift_roster.entities import RoleSlot, ShiftTemplate, TemplateRole
from shift_roster.extensions import db
from shift_roster.models import Role
from shift_roster.models import ShiftTemplate as ShiftTemplateRow
from shift_roster.models import ShiftTemplateRole
from shift_roster.snapshots import SnapshotCache
from shift_roster.stores.base import Store, WriteRejected, WriteResult, apply_changes, find_by_id, parse_id
from shift_roster.stores.slots import sync_role_entries


def _slot_payload(roles: Sequence[RoleSlot] | None) -> list[dict[str, Any]] | None:
    if roles is None:
        return None
    return [{"role_id": slot.role_id, "required_count": slot.required_count} for slot in roles]


class ShiftTemplateStore(Store):
    name = "shift_templates"
    entity_type = "shift_templates"

    def __init__(self, snapshots: SnapshotCache | None = None) -> None:
        super().__init__()
        self.templates: list[ShiftTemplate] = []
        self.snapshots = snapshots

    def _load(self) -> dict[str, Any]:
        template_rows = self._rows(select(ShiftTemplateRow.__table__).order_by(ShiftTemplateRow.name.asc()))
        role_rows = self._rows(
            select(
                ShiftTemplateRole.id,
                ShiftTemplateRole.template_id,
                ShiftTemplateRole.role_id,
                ShiftTemplateRole.required_count,
                Role.name.label("role_name"),
            )
            .outerjoin(Role, Role.id == ShiftTemplateRole.role_id)
            .order_by(ShiftTemplateRole.position.asc(), ShiftTemplateRole.created_at.asc())
        )
        roles_by_template = index_by(role_rows, "template_id")

        templates = []
        for row in template_rows:
            templates.append(
                ShiftTemplate(
                    id=str(row["id"]),
                    name=row["name"],
                    start_time=row["start_time"],
                    end_time=row["end_time"],
                    roles=tuple(
                        TemplateRole(
                            id=str(role["id"]),
                            role_id=str(role["role_id"]),
                            role_name=role["role_name"] or "",
                            required_count=role["required_count"] or 1,
                        )
                        for role in roles_by_template.get(row["id"], [])
                    ),
                    created_at=row["created_at"],
                    updated_at=row["updated_at"],
                )
            )
        return {"templates": templates}

    def _apply(self, state: dict[str, Any]) -> None:
        self.templates = state["templates"]

    def _after_publish(self) -> None:
        if self.snapshots is not None:
            self.snapshots.save(self.name, {"templates": [template.to_dict() for template in self.templates]})

    def restore(self) -> bool:
        """Seed the snapshot from the local cache until the first fetch lands."""
        if self.snapshots is None:
            return False
        payload = self.snapshots.load(self.name)
        if not payload:
            return False
        try:
            templates = [ShiftTemplate.from_dict(item) for item in payload.get("templates", [])]
        except (KeyError, TypeError, ValueError):
            self.snapshots.logger.warning("Ignoring malformed %s snapshot.", self.name, exc_info=True)
            return False
        with self._lock:
            if self._published_token != 0:
                return False
            self.templates = templates
        return True

    def get(self, template_id: str | None) -> ShiftTemplate | None:
        return find_by_id(self.templates, template_id)

    get_template = get

    @staticmethod
    def _check_times(start_time: time | None, end_time: time | None) -> None:
        if start_time is None or end_time is None:
            raise WriteRejected("Start and end time are required.")

    def add(self, name: str, start_time: time, end_time: time, roles: Sequence[RoleSlot] = ()) -> WriteResult:
        name = (name or "").strip()

        def operation():
            if not name:
                raise WriteRejected("Template name is required.")
            self._check_times(start_time, end_time)
            template = ShiftTemplateRow(id=uuid.uuid4(), name=name, start_time=start_time, end_time=end_time)
            db.session.add(template)
            db.session.flush()
            sync_role_entries(ShiftTemplateRole, "template_id", template.id, roles)
            return template.id

        return self._write(
            "SHIFT_TEMPLATE_CREATED",
            operation,
            payload={"name": name, "start_time": start_time, "end_time": end_time, "roles": _slot_payload(roles)},
        )

    def update(self, template_id: str, roles: Sequence[RoleSlot] | None = None, **changes: Any) -> WriteResult:
        if "name" in changes:
            changes["name"] = (changes["name"] or "").strip()

        def operation():
            template = db.session.get(ShiftTemplateRow, parse_id(template_id, "template"))
            if template is None:
                raise WriteRejected("Shift template not found.")
            if "name" in changes and not changes["name"]:
                raise WriteRejected("Template name is required.")
            self._check_times(changes.get("start_time", template.start_time), changes.get("end_time", template.end_time))
            apply_changes(template, changes, {"name", "start_time", "end_time"})
            if roles is not None:
                sync_role_entries(ShiftTemplateRole, "template_id", template.id, roles)
            return template.id

        return self._write(
            "SHIFT_TEMPLATE_UPDATED",
            operation,
            payload={**changes, "roles": _slot_payload(roles)},
        )

    def delete(self, template_id: str) -> WriteResult:
        def operation():
            template = db.session.get(ShiftTemplateRow, parse_id(template_id, "template"))
            if template is None:
                raise WriteRejected("Shift template not found.")
            db.session.delete(template)
            return template.id

        return self._write("SHIFT_TEMPLATE_DELETED", operation)
