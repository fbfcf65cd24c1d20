"""Authentication routes."""

from __future__ import annotations

from urllib.parse import urlparse

from flask import Blueprint, flash, redirect, render_template, request, url_for
from flask_login import current_user, login_required, login_user, logout_user
from sqlalchemy import select

from shift_roster.extensions import db
from shift_roster.forms import LoginForm
from shift_roster.models import User
from shift_roster.security import verify_password


bp = Blueprint("auth", __name__)


def _is_safe_next(target: str | None) -> bool:
    if not target:
        return False
    parsed = urlparse(target)
    return parsed.scheme == "" and parsed.netloc == "" and target.startswith("/")


@bp.route("/login", methods=["GET", "POST"])
def login():
    if current_user.is_authenticated:
        return redirect(url_for("main.index"))

    form = LoginForm()
    if form.validate_on_submit():
        stmt = select(User).where(User.email == form.email.data.strip().lower())
        user = db.session.execute(stmt).scalar_one_or_none()
        if user is None or not verify_password(user.password_hash, form.password.data):
            flash("Invalid credentials.", "danger")
            return render_template("auth/login.html", form=form), 401

        if not user.is_active:
            flash("User is inactive.", "warning")
            return render_template("auth/login.html", form=form), 403

        login_user(user, remember=form.remember.data)
        next_url = request.args.get("next")
        if _is_safe_next(next_url):
            return redirect(next_url)
        return redirect(url_for("main.index"))

    return render_template("auth/login.html", form=form)


@bp.post("/logout")
@login_required
def logout():
    logout_user()
    flash("Signed out.", "info")
    return redirect(url_for("auth.login"))
