"""Legacy stand-alone shifts."""

from __future__ import annotations

from datetime import date
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
from shift_roster.forms import ShiftForm
from shift_roster.stores import get_stores


bp = Blueprint("shifts", __name__)


def _parse_day(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


@bp.get("/shifts")
@login_required
def shifts_list():
    stores = refresh("shifts")
    day = _parse_day(request.args.get("date"))
    shifts = stores.shifts.get_shifts_by_date(day) if day is not None else stores.shifts.shifts
    return render_template("shifts/list.html", shifts=shifts, day=day)


def _render_form(form: ShiftForm, shift, rows):
    return render_template(
        "shifts/form.html",
        form=form,
        shift=shift,
        rows=rows,
        role_choices=role_choices(get_stores()),
    )


@bp.route("/shifts/new", methods=["GET", "POST"])
@login_required
def shifts_new():
    stores = refresh("roles")
    form = ShiftForm()
    rows = []
    if form.validate_on_submit():
        rows, errors = role_rows_from_request()
        if errors:
            for error in errors:
                flash(error, "danger")
        else:
            result = stores.shifts.add(
                name=form.name.data,
                shift_date=form.date.data,
                start_time=form.start_time.data,
                end_time=form.end_time.data,
                roles=rows,
            )
            if flash_result(result, "Shift created."):
                return redirect(url_for("shifts.shifts_detail", shift_id=result.entity_id))
    return _render_form(form, None, rows)


@bp.route("/shifts/<uuid:shift_id>/edit", methods=["GET", "POST"])
@login_required
def shifts_edit(shift_id: UUID):
    stores = refresh("roles", "shifts")
    shift = stores.shifts.get(str(shift_id))
    if shift is None:
        abort(404)

    form = ShiftForm(obj=shift)
    rows = shift.roles
    if form.validate_on_submit():
        rows, errors = role_rows_from_request()
        if errors:
            for error in errors:
                flash(error, "danger")
        else:
            result = stores.shifts.update(
                shift.id,
                roles=rows,
                name=form.name.data,
                date=form.date.data,
                start_time=form.start_time.data,
                end_time=form.end_time.data,
            )
            if flash_result(result, "Shift updated."):
                return redirect(url_for("shifts.shifts_detail", shift_id=shift.id))
    return _render_form(form, shift, rows)


@bp.post("/shifts/<uuid:shift_id>/delete")
@login_required
def shifts_delete(shift_id: UUID):
    flash_result(get_stores().shifts.delete(str(shift_id)), "Shift deleted.")
    return redirect(url_for("shifts.shifts_list"))


@bp.get("/shifts/<uuid:shift_id>")
@login_required
def shifts_detail(shift_id: UUID):
    stores = refresh("roles", "people", "leaves", "shifts")
    shift = stores.shifts.get(str(shift_id))
    if shift is None:
        abort(404)
    return render_template("shifts/detail.html", shift=shift, roles=staffing_rows(stores, shift.date, shift.roles))


@bp.post("/shifts/<uuid:shift_id>/entries/<uuid:entry_id>/assign")
@login_required
def shift_entries_assign(shift_id: UUID, entry_id: UUID):
    person_id = request.form.get("person_id", "").strip()
    if not person_id:
        flash("Select a person to assign.", "warning")
    else:
        flash_result(get_stores().shifts.assign_person(str(entry_id), person_id), "Person assigned.")
    return redirect(url_for("shifts.shifts_detail", shift_id=shift_id))


@bp.post("/shifts/<uuid:shift_id>/entries/<uuid:entry_id>/remove/<uuid:person_id>")
@login_required
def shift_entries_remove(shift_id: UUID, entry_id: UUID, person_id: UUID):
    flash_result(get_stores().shifts.remove_person(str(entry_id), str(person_id)), "Person removed.")
    return redirect(url_for("shifts.shifts_detail", shift_id=shift_id))
