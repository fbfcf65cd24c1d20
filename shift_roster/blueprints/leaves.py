"""Leave management and approvals."""

from __future__ import annotations

from uuid import UUID

from flask import Blueprint, abort, redirect, render_template, request, url_for
from flask_login import login_required

from shift_roster.blueprints.common import flash_result, person_choices, refresh
from shift_roster.forms import LeaveForm
from shift_roster.models import LeaveStatus
from shift_roster.stores import get_stores


bp = Blueprint("leaves", __name__)


@bp.get("/leaves")
@login_required
def leaves_list():
    stores = refresh("people", "leaves")
    status = request.args.get("status", "").strip().lower()
    leaves = stores.leaves.leaves
    if status in {item.value for item in LeaveStatus}:
        leaves = [leave for leave in leaves if leave.status == status]
    person_names = {person.id: person.name for person in stores.people.people}
    return render_template(
        "leaves/list.html",
        leaves=leaves,
        person_names=person_names,
        status=status,
        statuses=[item.value for item in LeaveStatus],
    )


@bp.route("/leaves/new", methods=["GET", "POST"])
@login_required
def leaves_new():
    stores = refresh("people")
    form = LeaveForm()
    form.person_id.choices = person_choices(stores)
    if request.method == "GET" and request.args.get("person_id"):
        form.person_id.data = request.args["person_id"]
    if form.validate_on_submit():
        result = stores.leaves.add(
            person_id=form.person_id.data,
            start_date=form.start_date.data,
            end_date=form.end_date.data,
            reason=form.reason.data or "",
            status=form.status.data,
        )
        if flash_result(result, "Leave created."):
            return redirect(url_for("leaves.leaves_list"))
    return render_template("leaves/form.html", form=form, leave=None)


@bp.route("/leaves/<uuid:leave_id>/edit", methods=["GET", "POST"])
@login_required
def leaves_edit(leave_id: UUID):
    stores = refresh("people", "leaves")
    leave = stores.leaves.get(str(leave_id))
    if leave is None:
        abort(404)

    form = LeaveForm(obj=leave)
    form.person_id.choices = person_choices(stores)
    if form.validate_on_submit():
        result = stores.leaves.update(
            leave.id,
            person_id=form.person_id.data,
            start_date=form.start_date.data,
            end_date=form.end_date.data,
            reason=form.reason.data or "",
            status=form.status.data,
        )
        if flash_result(result, "Leave updated."):
            return redirect(url_for("leaves.leaves_list"))
    return render_template("leaves/form.html", form=form, leave=leave)


@bp.post("/leaves/<uuid:leave_id>/delete")
@login_required
def leaves_delete(leave_id: UUID):
    flash_result(get_stores().leaves.delete(str(leave_id)), "Leave deleted.")
    return redirect(url_for("leaves.leaves_list"))


@bp.post("/leaves/<uuid:leave_id>/approve")
@login_required
def leaves_approve(leave_id: UUID):
    flash_result(get_stores().leaves.approve(str(leave_id)), "Leave approved.")
    return redirect(url_for("leaves.leaves_list"))


@bp.post("/leaves/<uuid:leave_id>/reject")
@login_required
def leaves_reject(leave_id: UUID):
    flash_result(get_stores().leaves.reject(str(leave_id)), "Leave rejected.")
    return redirect(url_for("leaves.leaves_list"))
