"""Audit logging helper."""

from __future__ import annotations

import uuid
from typing import Any

from flask import has_request_context
from flask_login import current_user

from shift_roster.extensions import db
from shift_roster.models import AuditLog


def _actor_user_id() -> uuid.UUID | None:
    if not has_request_context() or not current_user.is_authenticated:
        return None
    try:
        return uuid.UUID(current_user.get_id())
    except ValueError:
        return None


def log_audit(
    action: str,
    entity_type: str,
    entity_id: uuid.UUID | None,
    payload: dict[str, Any] | None = None,
) -> None:
    """Queue an audit row on the current session; committed with the write."""
    db.session.add(
        AuditLog(
            actor_user_id=_actor_user_id(),
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            payload_json=payload or {},
        )
    )
