"""Shift template pages."""

from __future__ import annotations

from uuid import UUID

from flask import Blueprint, abort, flash, redirect, render_template, request, url_for
from flask_login import login_required

from shift_roster.blueprints.common import flash_result, refresh, role_choices, role_rows_from_request
from shift_roster.forms import ShiftTemplateForm
from shift_roster.stores import get_stores


bp = Blueprint("shift_templates", __name__)


@bp.get("/templates")
@login_required
def templates_list():
    stores = refresh("templates")
    return render_template("shift_templates/list.html", templates=stores.templates.templates)


def _render_form(form: ShiftTemplateForm, template, rows):
    stores = get_stores()
    return render_template(
        "shift_templates/form.html",
        form=form,
        template=template,
        rows=rows,
        role_choices=role_choices(stores),
    )


@bp.route("/templates/new", methods=["GET", "POST"])
@login_required
def templates_new():
    stores = refresh("roles")
    form = ShiftTemplateForm()
    rows = []
    if form.validate_on_submit():
        rows, errors = role_rows_from_request()
        if errors:
            for error in errors:
                flash(error, "danger")
        else:
            result = stores.templates.add(
                name=form.name.data,
                start_time=form.start_time.data,
                end_time=form.end_time.data,
                roles=rows,
            )
            if flash_result(result, "Template created."):
                return redirect(url_for("shift_templates.templates_list"))
    return _render_form(form, None, rows)


@bp.route("/templates/<uuid:template_id>/edit", methods=["GET", "POST"])
@login_required
def templates_edit(template_id: UUID):
    stores = refresh("roles", "templates")
    template = stores.templates.get(str(template_id))
    if template is None:
        abort(404)

    form = ShiftTemplateForm(obj=template)
    rows = template.role_slots()
    if form.validate_on_submit():
        rows, errors = role_rows_from_request()
        if errors:
            for error in errors:
                flash(error, "danger")
        else:
            result = stores.templates.update(
                template.id,
                roles=rows,
                name=form.name.data,
                start_time=form.start_time.data,
                end_time=form.end_time.data,
            )
            if flash_result(result, "Template updated."):
                return redirect(url_for("shift_templates.templates_list"))
    return _render_form(form, template, rows)


@bp.post("/templates/<uuid:template_id>/delete")
@login_required
def templates_delete(template_id: UUID):
    flash_result(get_stores().templates.delete(str(template_id)), "Template deleted.")
    return redirect(url_for("shift_templates.templates_list"))
