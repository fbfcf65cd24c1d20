"""Flask extension instances and shared listeners."""

from __future__ import annotations

import sqlite3
import uuid

from flask import redirect, request, url_for
from flask_login import LoginManager
from flask_sqlalchemy import SQLAlchemy
from flask_wtf import CSRFProtect
from sqlalchemy import event
from sqlalchemy.engine import Engine


db = SQLAlchemy()
login_manager = LoginManager()
csrf = CSRFProtect()

login_manager.login_view = "auth.login"
login_manager.login_message_category = "warning"

_sqlite_listener_registered = False


@login_manager.unauthorized_handler
def handle_unauthorized() -> str:
    return redirect(url_for("auth.login", next=request.path))


def init_sqlite_foreign_keys() -> None:
    """Enable foreign key enforcement on SQLite connections.

    Roster, shift and template children are removed by ``ON DELETE CASCADE``;
    SQLite ignores those clauses unless the pragma is set per connection.
    """
    global _sqlite_listener_registered
    if _sqlite_listener_registered:
        return

    @event.listens_for(Engine, "connect")
    def enable_foreign_keys(dbapi_connection: object, _connection_record: object) -> None:
        if not isinstance(dbapi_connection, sqlite3.Connection):
            return
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    _sqlite_listener_registered = True


@login_manager.user_loader
def load_user(user_id: str):
    from shift_roster.models import User

    try:
        parsed = uuid.UUID(user_id)
    except ValueError:
        return None
    return db.session.get(User, parsed)
