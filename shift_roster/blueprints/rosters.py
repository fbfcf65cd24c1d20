"""Rosters, their shifts and staffing."""

from __future__ import annotations

from uuid import UUID

from flask import Blueprint, abort, flash, redirect, render_template, request, url_for
from flask_login import login_required

from shift_roster.blueprints.common import (
    flash_result,
    refresh,
    role_choices,
    role_rows_from_request,
    staffing_rows,
)
from shift_roster.forms import RosterForm, RosterShiftEditForm, RosterShiftForm
from shift_roster.stores import get_stores
from shift_roster.timeutils import local_today


bp = Blueprint("rosters", __name__)


def _roster_or_404(stores, roster_id: UUID):
    roster = stores.rosters.get(str(roster_id))
    if roster is None:
        abort(404)
    return roster


def _shift_or_404(stores, roster, shift_id: UUID):
    shift = stores.rosters.get_shift(str(shift_id))
    if shift is None or shift.roster_id != roster.id:
        abort(404)
    return shift


@bp.get("/rosters")
@login_required
def rosters_list():
    stores = refresh("rosters")
    shift_counts = {roster.id: len(stores.rosters.get_roster_shifts(roster.id)) for roster in stores.rosters.rosters}
    return render_template("rosters/list.html", rosters=stores.rosters.rosters, shift_counts=shift_counts)


@bp.route("/rosters/new", methods=["GET", "POST"])
@login_required
def rosters_new():
    form = RosterForm()
    if form.validate_on_submit():
        result = get_stores().rosters.add(
            name=form.name.data,
            start_date=form.start_date.data,
            end_date=form.end_date.data,
        )
        if flash_result(result, "Roster created."):
            return redirect(url_for("rosters.rosters_detail", roster_id=result.entity_id))
    return render_template("rosters/form.html", form=form, roster=None)


@bp.route("/rosters/<uuid:roster_id>/edit", methods=["GET", "POST"])
@login_required
def rosters_edit(roster_id: UUID):
    stores = refresh("rosters")
    roster = _roster_or_404(stores, roster_id)

    form = RosterForm(obj=roster)
    if form.validate_on_submit():
        result = stores.rosters.update(
            roster.id,
            name=form.name.data,
            start_date=form.start_date.data,
            end_date=form.end_date.data,
        )
        if flash_result(result, "Roster updated."):
            return redirect(url_for("rosters.rosters_detail", roster_id=roster.id))
    return render_template("rosters/form.html", form=form, roster=roster)


@bp.post("/rosters/<uuid:roster_id>/delete")
@login_required
def rosters_delete(roster_id: UUID):
    flash_result(get_stores().rosters.delete(str(roster_id)), "Roster deleted.")
    return redirect(url_for("rosters.rosters_list"))


@bp.get("/rosters/<uuid:roster_id>")
@login_required
def rosters_detail(roster_id: UUID):
    stores = refresh("roles", "people", "leaves", "templates", "rosters")
    roster = _roster_or_404(stores, roster_id)

    shift_form = RosterShiftForm()
    shift_form.template_id.choices = [(template.id, template.name) for template in stores.templates.templates]
    today = local_today()
    shift_form.date.data = today if roster.covers(today) else roster.start_date

    shifts = []
    for shift in stores.rosters.get_roster_shifts(roster.id):
        shifts.append(
            {
                "shift": shift,
                "template": stores.templates.get(shift.template_id),
                "roles": staffing_rows(stores, shift.date, shift.roles),
            }
        )
    return render_template(
        "rosters/detail.html",
        roster=roster,
        shifts=shifts,
        shift_form=shift_form,
        has_templates=bool(stores.templates.templates),
    )


@bp.post("/rosters/<uuid:roster_id>/shifts")
@login_required
def roster_shifts_new(roster_id: UUID):
    stores = refresh("templates")
    form = RosterShiftForm()
    form.template_id.choices = [(template.id, template.name) for template in stores.templates.templates]
    if form.validate_on_submit():
        result = stores.rosters.add_roster_shift(
            roster_id=str(roster_id),
            template_id=form.template_id.data,
            shift_date=form.date.data,
        )
        flash_result(result, "Shift added.")
    else:
        for errors in form.errors.values():
            for error in errors:
                flash(error, "danger")
    return redirect(url_for("rosters.rosters_detail", roster_id=roster_id))


@bp.route("/rosters/<uuid:roster_id>/shifts/<uuid:shift_id>/edit", methods=["GET", "POST"])
@login_required
def roster_shifts_edit(roster_id: UUID, shift_id: UUID):
    stores = refresh("roles", "templates", "rosters")
    roster = _roster_or_404(stores, roster_id)
    shift = _shift_or_404(stores, roster, shift_id)

    form = RosterShiftEditForm(obj=shift)
    rows = shift.roles
    if form.validate_on_submit():
        rows, errors = role_rows_from_request()
        if errors:
            for error in errors:
                flash(error, "danger")
        else:
            result = stores.rosters.update_roster_shift(shift.id, shift_date=form.date.data, roles=rows)
            if flash_result(result, "Shift updated."):
                return redirect(url_for("rosters.rosters_detail", roster_id=roster.id))
    return render_template(
        "rosters/shift_form.html",
        form=form,
        roster=roster,
        shift=shift,
        rows=rows,
        role_choices=role_choices(stores),
    )


@bp.post("/rosters/<uuid:roster_id>/shifts/<uuid:shift_id>/delete")
@login_required
def roster_shifts_delete(roster_id: UUID, shift_id: UUID):
    flash_result(get_stores().rosters.delete_roster_shift(str(shift_id)), "Shift deleted.")
    return redirect(url_for("rosters.rosters_detail", roster_id=roster_id))


@bp.post("/rosters/<uuid:roster_id>/entries/<uuid:entry_id>/assign")
@login_required
def roster_entries_assign(roster_id: UUID, entry_id: UUID):
    person_id = request.form.get("person_id", "").strip()
    if not person_id:
        flash("Select a person to assign.", "warning")
    else:
        flash_result(get_stores().rosters.assign_person(str(entry_id), person_id), "Person assigned.")
    return redirect(url_for("rosters.rosters_detail", roster_id=roster_id))


@bp.post("/rosters/<uuid:roster_id>/entries/<uuid:entry_id>/remove/<uuid:person_id>")
@login_required
def roster_entries_remove(roster_id: UUID, entry_id: UUID, person_id: UUID):
    flash_result(get_stores().rosters.remove_person(str(entry_id), str(person_id)), "Person removed.")
    return redirect(url_for("rosters.rosters_detail", roster_id=roster_id))
