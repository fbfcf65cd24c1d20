"""Flask CLI commands."""

from __future__ import annotations

import click
from flask import Flask
from sqlalchemy import select

from shift_roster.extensions import db
from shift_roster.models import User
from shift_roster.security import hash_password


def register_commands(app: Flask) -> None:
    @app.cli.command("create-user")
    @click.argument("email")
    @click.argument("password")
    def create_user(email: str, password: str) -> None:
        """Create a login account, or reset the password of an existing one."""
        email = email.strip().lower()
        try:
            password_hash = hash_password(password)
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="PASSWORD") from exc

        user = db.session.execute(select(User).where(User.email == email)).scalar_one_or_none()
        if user is None:
            db.session.add(User(email=email, password_hash=password_hash, is_active=True))
            message = f"Created user {email}."
        else:
            user.password_hash = password_hash
            user.is_active = True
            message = f"Updated password for {email}."
        db.session.commit()
        app.logger.info(message)
        click.echo(message)
