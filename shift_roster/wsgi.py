"""WSGI entry point for gunicorn."""

from shift_roster import create_app

app = create_app()
