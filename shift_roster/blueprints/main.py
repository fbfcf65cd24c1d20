"""Dashboard, health check and the offline service worker."""

from __future__ import annotations

from flask import Blueprint, current_app, make_response, render_template
from flask_login import login_required

from shift_roster.blueprints.common import refresh
from shift_roster.timeutils import local_today


bp = Blueprint("main", __name__)


@bp.get("/")
@login_required
def index():
    stores = refresh("people", "roles", "groups", "shifts", "rosters", "leaves")
    today = local_today()
    counts = {
        "people": len(stores.people.people),
        "roles": len(stores.roles.roles),
        "groups": len(stores.groups.groups),
        "shifts": len(stores.shifts.shifts),
        "rosters": len(stores.rosters.rosters),
        "on_leave": len(stores.leaves.people_on_leave(today)),
    }
    return render_template(
        "dashboard.html",
        counts=counts,
        today=today,
        todays_shifts=stores.shifts.get_shifts_by_date(today),
    )


@bp.get("/health")
def health():
    return {"status": "ok"}, 200


@bp.get("/service-worker.js")
def service_worker():
    body = render_template("service-worker.js", cache_name=current_app.config["OFFLINE_CACHE_VERSION"])
    response = make_response(body)
    response.headers["Content-Type"] = "application/javascript; charset=utf-8"
    response.headers["Cache-Control"] = "no-cache"
    response.headers["Service-Worker-Allowed"] = "/"
    return response
