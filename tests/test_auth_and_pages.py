from __future__ import annotations

from urllib.parse import parse_qs, urlparse

from sqlalchemy import select

from shift_roster.extensions import db
from shift_roster.models import User
from shift_roster.security import verify_password


def test_health_is_public(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


def test_pages_require_login(client):
    response = client.get("/people", follow_redirects=False)
    assert response.status_code == 302
    location = urlparse(response.headers["Location"])
    assert location.path == "/login"
    assert parse_qs(location.query)["next"] == ["/people"]


def test_invalid_credentials_are_rejected(client):
    response = client.post("/login", data={"email": "manager@example.com", "password": "wrong-password"})
    assert response.status_code == 401
    assert "Invalid credentials." in response.get_data(as_text=True)


def test_login_initialises_stores_and_shows_dashboard(app, logged_in_client):
    response = logged_in_client.get("/")
    body = response.get_data(as_text=True)

    assert response.status_code == 200
    assert "Dashboard" in body
    assert "On leave today" in body
    assert app.extensions["shift_roster.stores"].initialized


def test_login_redirects_to_safe_next(client):
    response = client.post(
        "/login?next=/rosters",
        data={"email": "manager@example.com", "password": "password123"},
        follow_redirects=False,
    )
    assert response.status_code == 302
    assert response.headers["Location"].endswith("/rosters")


def test_logout(logged_in_client):
    response = logged_in_client.post("/logout", follow_redirects=True)
    assert "Signed out." in response.get_data(as_text=True)
    assert logged_in_client.get("/", follow_redirects=False).status_code == 302


def test_service_worker_uses_configured_cache_version(client):
    response = client.get("/service-worker.js")
    body = response.get_data(as_text=True)

    assert response.status_code == 200
    assert response.headers["Content-Type"].startswith("application/javascript")
    assert '"shiftroster-test"' in body
    assert "Offline - Page not available" in body
    assert "caches.delete" in body


def test_create_user_command(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["create-user", "Lead@Example.com", "longpassword"])
    assert result.exit_code == 0
    assert "Created user lead@example.com." in result.output

    user = db.session.execute(select(User).where(User.email == "lead@example.com")).scalar_one()
    assert verify_password(user.password_hash, "longpassword")

    short = runner.invoke(args=["create-user", "lead@example.com", "short"])
    assert short.exit_code != 0
