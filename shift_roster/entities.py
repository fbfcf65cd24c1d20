"""Immutable snapshot types published by the stores.

Rows are read flat from the database and reassembled into these nested
objects after every fetch. Identifiers are exposed as strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any


def _iso(value: date | time | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


@dataclass(frozen=True)
class Role:
    id: str
    name: str
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class Person:
    id: str
    name: str
    phone: str = ""
    designation: str = ""
    role_ids: tuple[str, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def has_role(self, role_id: str) -> bool:
        return role_id in self.role_ids


@dataclass(frozen=True)
class Group:
    id: str
    name: str
    description: str | None = None
    person_ids: tuple[str, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class Leave:
    id: str
    person_id: str
    start_date: date
    end_date: date
    reason: str
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_approved(self) -> bool:
        return self.status == "approved"


@dataclass(frozen=True)
class TemplateRole:
    id: str
    role_id: str
    role_name: str
    required_count: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "role_id": self.role_id,
            "role_name": self.role_name,
            "required_count": self.required_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TemplateRole":
        return cls(
            id=data["id"],
            role_id=data["role_id"],
            role_name=data.get("role_name", ""),
            required_count=int(data.get("required_count", 1)),
        )


@dataclass(frozen=True)
class ShiftTemplate:
    id: str
    name: str
    start_time: time
    end_time: time
    roles: tuple[TemplateRole, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def role_slots(self) -> list["RoleSlot"]:
        """Slots for a new roster shift: same roles and headcounts, nobody assigned."""
        return [RoleSlot(role_id=role.role_id, required_count=role.required_count, assigned_person_ids=()) for role in self.roles]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "start_time": _iso(self.start_time),
            "end_time": _iso(self.end_time),
            "roles": [role.to_dict() for role in self.roles],
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ShiftTemplate":
        return cls(
            id=data["id"],
            name=data["name"],
            start_time=time.fromisoformat(data["start_time"]),
            end_time=time.fromisoformat(data["end_time"]),
            roles=tuple(TemplateRole.from_dict(item) for item in data.get("roles", [])),
            created_at=_parse_datetime(data.get("created_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
        )


@dataclass(frozen=True)
class StaffedRole:
    """A role entry of a concrete shift with the people assigned to it."""

    id: str
    role_id: str
    role_name: str
    required_count: int = 1
    assigned_person_ids: tuple[str, ...] = ()

    @property
    def open_count(self) -> int:
        return max(self.required_count - len(self.assigned_person_ids), 0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "role_id": self.role_id,
            "role_name": self.role_name,
            "required_count": self.required_count,
            "assigned_person_ids": list(self.assigned_person_ids),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StaffedRole":
        return cls(
            id=data["id"],
            role_id=data["role_id"],
            role_name=data.get("role_name", ""),
            required_count=int(data.get("required_count", 1)),
            assigned_person_ids=tuple(data.get("assigned_person_ids", [])),
        )


# Roster shifts and legacy shifts carry structurally identical role entries.
RosterShiftRole = StaffedRole
ShiftRole = StaffedRole


@dataclass(frozen=True)
class Roster:
    id: str
    name: str
    start_date: date
    end_date: date
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "start_date": _iso(self.start_date),
            "end_date": _iso(self.end_date),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Roster":
        return cls(
            id=data["id"],
            name=data["name"],
            start_date=date.fromisoformat(data["start_date"]),
            end_date=date.fromisoformat(data["end_date"]),
            created_at=_parse_datetime(data.get("created_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
        )


@dataclass(frozen=True)
class RosterShift:
    id: str
    roster_id: str
    template_id: str | None
    date: date
    roles: tuple[StaffedRole, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "roster_id": self.roster_id,
            "template_id": self.template_id,
            "date": _iso(self.date),
            "roles": [role.to_dict() for role in self.roles],
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RosterShift":
        return cls(
            id=data["id"],
            roster_id=data["roster_id"],
            template_id=data.get("template_id"),
            date=date.fromisoformat(data["date"]),
            roles=tuple(StaffedRole.from_dict(item) for item in data.get("roles", [])),
            created_at=_parse_datetime(data.get("created_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
        )


@dataclass(frozen=True)
class Shift:
    id: str
    name: str
    date: date
    start_time: time
    end_time: time
    roles: tuple[StaffedRole, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class RoleSlot:
    """Write-side description of a role entry.

    ``assigned_person_ids=None`` means "leave the stored assignments alone"
    when the slot matches an existing entry; an empty tuple clears them.
    """

    role_id: str
    required_count: int = 1
    assigned_person_ids: tuple[str, ...] | None = field(default=None)
