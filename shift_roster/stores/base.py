"""Shared store machinery.

A store owns the published snapshot of one domain. Reads replace the
snapshot wholesale; writes run in one transaction, report through a
``WriteResult`` and always finish by re-reading the domain.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, TypeVar

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql import Select

from shift_roster.audit import log_audit
from shift_roster.extensions import db

Listener = Callable[["Store"], None]
T = TypeVar("T")


class WriteRejected(Exception):
    """Input a store refuses to persist. The message is shown to the user."""


@dataclass(frozen=True)
class WriteResult:
    ok: bool
    error: str | None = None
    entity_id: str | None = None

    @classmethod
    def success(cls, entity_id: uuid.UUID | str | None = None) -> "WriteResult":
        return cls(ok=True, entity_id=str(entity_id) if entity_id is not None else None)

    @classmethod
    def failure(cls, message: str) -> "WriteResult":
        return cls(ok=False, error=message)

    def __bool__(self) -> bool:
        return self.ok


def parse_id(value: uuid.UUID | str | None, label: str = "record") -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError as exc:
        raise WriteRejected(f"Invalid {label} id.") from exc


def describe_error(exc: SQLAlchemyError) -> str:
    source = getattr(exc, "orig", None) or exc
    lines = str(source).strip().splitlines()
    return lines[0] if lines else exc.__class__.__name__


def find_by_id(items: Iterable[T], item_id: uuid.UUID | str | None) -> T | None:
    if item_id is None:
        return None
    wanted = str(item_id)
    return next((item for item in items if getattr(item, "id") == wanted), None)


def apply_changes(target: Any, changes: dict[str, Any], allowed: Iterable[str]) -> dict[str, Any]:
    """Set the changed, allowed attributes on ``target``; return what changed."""
    allowed_names = set(allowed)
    unknown = set(changes) - allowed_names
    if unknown:
        raise TypeError(f"Unsupported fields: {', '.join(sorted(unknown))}")

    changed: dict[str, Any] = {}
    for name, value in changes.items():
        if getattr(target, name) != value:
            setattr(target, name, value)
            changed[name] = value
    return changed


def audit_value(value: Any) -> Any:
    if isinstance(value, (list, tuple, set)):
        return [audit_value(item) for item in value]
    if isinstance(value, uuid.UUID):
        return str(value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return getattr(value, "value", value)


class Store:
    name = "store"
    entity_type = ""

    def __init__(self) -> None:
        self.loading = False
        self.error: str | None = None
        self.last_fetched_at: datetime | None = None
        self._listeners: list[Listener] = []
        self._lock = threading.Lock()
        self._issued_token = 0
        self._published_token = 0

    # Subscription

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # Reads

    def next_token(self) -> int:
        with self._lock:
            self._issued_token += 1
            return self._issued_token

    def fetch(self) -> bool:
        """Re-read the whole domain and publish it. Never raises for database errors."""
        token = self.next_token()
        self.loading = True
        try:
            state = self._load()
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.warning("Fetching %s failed; keeping previous snapshot.", self.name, exc_info=True)
            with self._lock:
                if token >= self._published_token:
                    self.error = describe_error(exc)
                    self.loading = False
            return False
        return self.publish(token, state)

    def publish(self, token: int, state: dict[str, Any]) -> bool:
        with self._lock:
            if token < self._published_token:
                current_app.logger.debug(
                    "Discarding stale %s fetch #%s; #%s already published.",
                    self.name,
                    token,
                    self._published_token,
                )
                return False
            self._published_token = token
            self._apply(state)
            self.error = None
            self.loading = False
            self.last_fetched_at = datetime.now(timezone.utc)
        self._after_publish()
        self._notify()
        return True

    def _rows(self, stmt: Select) -> list[Any]:
        return list(db.session.execute(stmt).mappings().all())

    def _load(self) -> dict[str, Any]:
        raise NotImplementedError

    def _apply(self, state: dict[str, Any]) -> None:
        raise NotImplementedError

    def _after_publish(self) -> None:
        return None

    # Writes

    def _write(
        self,
        action: str,
        operation: Callable[[], uuid.UUID | None],
        *,
        payload: dict[str, Any] | None = None,
        entity_type: str | None = None,
    ) -> WriteResult:
        try:
            entity_id = operation()
            log_audit(
                action=action,
                entity_type=entity_type or self.entity_type,
                entity_id=entity_id,
                payload={key: audit_value(value) for key, value in (payload or {}).items()},
            )
            db.session.commit()
        except WriteRejected as exc:
            db.session.rollback()
            result = WriteResult.failure(str(exc))
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.warning("%s failed.", action, exc_info=True)
            result = WriteResult.failure(f"Could not save changes: {describe_error(exc)}")
        except Exception:
            db.session.rollback()
            raise
        else:
            result = WriteResult.success(entity_id)

        self.fetch()
        if not result.ok:
            self.error = result.error
        return result
