"""Calendar helpers bound to the configured application timezone."""

from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from flask import current_app


def app_timezone() -> ZoneInfo:
    tz_name = current_app.config.get("APP_TIMEZONE", "UTC")
    try:
        return ZoneInfo(tz_name)
    except ZoneInfoNotFoundError:
        current_app.logger.warning("Unknown APP_TIMEZONE %r; using UTC.", tz_name)
        return ZoneInfo("UTC")


def local_today() -> date:
    """Today's date where the roster is worked, not where the server runs."""
    return datetime.now(app_timezone()).date()
