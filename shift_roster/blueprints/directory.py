"""People, roles and groups."""

from __future__ import annotations

from uuid import UUID

from flask import Blueprint, abort, redirect, render_template, request, url_for
from flask_login import login_required

from shift_roster.blueprints.common import flash_result, person_choices, refresh, role_choices
from shift_roster.forms import GroupForm, PersonForm, RoleForm
from shift_roster.stores import get_stores
from shift_roster.timeutils import local_today


bp = Blueprint("directory", __name__)


# People


@bp.get("/people")
@login_required
def people_list():
    stores = refresh("roles", "people", "leaves")
    query = request.args.get("q", "").strip()
    today = local_today()
    return render_template(
        "people/list.html",
        people=stores.people.search(query),
        query=query,
        role_names=stores.roles.names_by_id(),
        leave_status={person.id: stores.leaves.leave_status(person.id, today) for person in stores.people.people},
    )


@bp.route("/people/new", methods=["GET", "POST"])
@login_required
def people_new():
    stores = refresh("roles")
    form = PersonForm()
    form.role_ids.choices = role_choices(stores)
    if form.validate_on_submit():
        result = stores.people.add(
            name=form.name.data,
            phone=form.phone.data or "",
            designation=form.designation.data or "",
            role_ids=form.role_ids.data or [],
        )
        if flash_result(result, "Person created."):
            return redirect(url_for("directory.people_list"))
    return render_template("people/form.html", form=form, person=None)


@bp.route("/people/<uuid:person_id>/edit", methods=["GET", "POST"])
@login_required
def people_edit(person_id: UUID):
    stores = refresh("roles", "people")
    person = stores.people.get(str(person_id))
    if person is None:
        abort(404)

    form = PersonForm(obj=person)
    form.role_ids.choices = role_choices(stores)
    if form.validate_on_submit():
        result = stores.people.update(
            person.id,
            name=form.name.data,
            phone=form.phone.data or "",
            designation=form.designation.data or "",
            role_ids=form.role_ids.data or [],
        )
        if flash_result(result, "Person updated."):
            return redirect(url_for("directory.people_list"))
    return render_template("people/form.html", form=form, person=person)


@bp.post("/people/<uuid:person_id>/delete")
@login_required
def people_delete(person_id: UUID):
    flash_result(get_stores().people.delete(str(person_id)), "Person deleted.")
    return redirect(url_for("directory.people_list"))


# Roles


@bp.get("/roles")
@login_required
def roles_list():
    stores = refresh("roles", "people")
    holders = {
        role.id: sum(1 for person in stores.people.people if person.has_role(role.id)) for role in stores.roles.roles
    }
    return render_template("roles/list.html", roles=stores.roles.roles, holders=holders)


@bp.route("/roles/new", methods=["GET", "POST"])
@login_required
def roles_new():
    form = RoleForm()
    if form.validate_on_submit():
        result = get_stores().roles.add(name=form.name.data, description=form.description.data)
        if flash_result(result, "Role created."):
            return redirect(url_for("directory.roles_list"))
    return render_template("roles/form.html", form=form, role=None)


@bp.route("/roles/<uuid:role_id>/edit", methods=["GET", "POST"])
@login_required
def roles_edit(role_id: UUID):
    stores = refresh("roles")
    role = stores.roles.get(str(role_id))
    if role is None:
        abort(404)

    form = RoleForm(obj=role)
    if form.validate_on_submit():
        result = stores.roles.update(role.id, name=form.name.data, description=form.description.data)
        if flash_result(result, "Role updated."):
            return redirect(url_for("directory.roles_list"))
    return render_template("roles/form.html", form=form, role=role)


@bp.post("/roles/<uuid:role_id>/delete")
@login_required
def roles_delete(role_id: UUID):
    flash_result(get_stores().roles.delete(str(role_id)), "Role deleted.")
    return redirect(url_for("directory.roles_list"))


# Groups


@bp.get("/groups")
@login_required
def groups_list():
    stores = refresh("people", "groups")
    person_names = {person.id: person.name for person in stores.people.people}
    return render_template("groups/list.html", groups=stores.groups.groups, person_names=person_names)


@bp.route("/groups/new", methods=["GET", "POST"])
@login_required
def groups_new():
    stores = refresh("people")
    form = GroupForm()
    form.person_ids.choices = person_choices(stores)
    if form.validate_on_submit():
        result = stores.groups.add(
            name=form.name.data,
            description=form.description.data,
            person_ids=form.person_ids.data or [],
        )
        if flash_result(result, "Group created."):
            return redirect(url_for("directory.groups_list"))
    return render_template("groups/form.html", form=form, group=None)


@bp.route("/groups/<uuid:group_id>/edit", methods=["GET", "POST"])
@login_required
def groups_edit(group_id: UUID):
    stores = refresh("people", "groups")
    group = stores.groups.get(str(group_id))
    if group is None:
        abort(404)

    form = GroupForm(obj=group)
    form.person_ids.choices = person_choices(stores)
    if form.validate_on_submit():
        result = stores.groups.update(
            group.id,
            person_ids=form.person_ids.data or [],
            name=form.name.data,
            description=form.description.data,
        )
        if flash_result(result, "Group updated."):
            return redirect(url_for("directory.groups_list"))
    return render_template("groups/form.html", form=form, group=group)


@bp.post("/groups/<uuid:group_id>/delete")
@login_required
def groups_delete(group_id: UUID):
    flash_result(get_stores().groups.delete(str(group_id)), "Group deleted.")
    return redirect(url_for("directory.groups_list"))
