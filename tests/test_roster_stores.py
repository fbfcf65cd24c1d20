from __future__ import annotations

from datetime import date, time

from shift_roster.entities import RoleSlot


def _setup_staff(stores):
    nurse = stores.roles.add("Nurse").entity_id
    driver = stores.roles.add("Driver").entity_id
    ana = stores.people.add("Ana", role_ids=[nurse]).entity_id
    ben = stores.people.add("Ben", role_ids=[nurse, driver]).entity_id
    cai = stores.people.add("Cai", role_ids=[driver]).entity_id
    return {"nurse": nurse, "driver": driver, "ana": ana, "ben": ben, "cai": cai}


def _template(stores, staff) -> str:
    result = stores.templates.add(
        "Morning",
        time(7, 0),
        time(15, 0),
        roles=[RoleSlot(staff["nurse"], 2), RoleSlot(staff["driver"], 1)],
    )
    assert result.ok, result.error
    return result.entity_id


def _roster(stores) -> str:
    result = stores.rosters.add("Week 11", date(2025, 3, 10), date(2025, 3, 16))
    assert result.ok, result.error
    return result.entity_id


def test_template_instantiation_copies_roles_without_assignments(stores):
    staff = _setup_staff(stores)
    template_id = _template(stores, staff)
    roster_id = _roster(stores)

    result = stores.rosters.add_roster_shift(roster_id, template_id, date(2025, 3, 12))
    assert result.ok, result.error

    shift = stores.rosters.get_shift(result.entity_id)
    assert shift.template_id == template_id
    assert shift.date == date(2025, 3, 12)
    assert [(role.role_id, role.role_name, role.required_count) for role in shift.roles] == [
        (staff["nurse"], "Nurse", 2),
        (staff["driver"], "Driver", 1),
    ]
    assert all(role.assigned_person_ids == () for role in shift.roles)
    assert stores.rosters.get_roster_shifts(roster_id) == [shift]


def test_template_edit_does_not_change_existing_roster_shifts(stores):
    staff = _setup_staff(stores)
    template_id = _template(stores, staff)
    roster_id = _roster(stores)
    shift_id = stores.rosters.add_roster_shift(roster_id, template_id, date(2025, 3, 12)).entity_id

    assert stores.templates.update(template_id, roles=[RoleSlot(staff["driver"], 4)]).ok
    stores.rosters.fetch()

    template = stores.templates.get_template(template_id)
    assert [(role.role_name, role.required_count) for role in template.roles] == [("Driver", 4)]
    assert len(stores.rosters.get_shift(shift_id).roles) == 2


def test_shift_date_outside_roster_period_is_rejected(stores):
    staff = _setup_staff(stores)
    template_id = _template(stores, staff)
    roster_id = _roster(stores)

    result = stores.rosters.add_roster_shift(roster_id, template_id, date(2025, 3, 20))

    assert not result.ok
    assert "within the roster period" in result.error
    assert stores.rosters.shifts == []


def test_shrinking_roster_period_past_its_shifts_is_rejected(stores):
    staff = _setup_staff(stores)
    roster_id = _roster(stores)
    assert stores.rosters.add_roster_shift(roster_id, _template(stores, staff), date(2025, 3, 15)).ok

    result = stores.rosters.update(roster_id, start_date=date(2025, 3, 10), end_date=date(2025, 3, 12))

    assert not result.ok
    assert result.error == "The roster has a shift on 2025-03-15, outside 2025-03-10 to 2025-03-12."
    roster = stores.rosters.get_roster(roster_id)
    assert (roster.start_date, roster.end_date) == (date(2025, 3, 10), date(2025, 3, 16))

    assert stores.rosters.update(roster_id, start_date=date(2025, 3, 14), end_date=date(2025, 3, 15)).ok


def test_non_numeric_required_count_is_rejected_without_partial_write(stores):
    nurse = stores.roles.add("Nurse").entity_id

    result = stores.templates.add("Leaky", time(7, 0), time(15, 0), roles=[RoleSlot(nurse, "abc")])

    assert not result.ok
    assert result.error == "Required count must be a number."
    assert stores.templates.templates == []

    assert stores.roles.add("Driver").ok
    stores.templates.fetch()
    assert stores.templates.templates == []


def test_assign_then_remove_leaves_role_empty(stores):
    staff = _setup_staff(stores)
    roster_id = _roster(stores)
    shift_id = stores.rosters.add_roster_shift(roster_id, _template(stores, staff), date(2025, 3, 12)).entity_id
    nurse_entry = stores.rosters.get_shift(shift_id).roles[0]

    assert stores.rosters.assign_person(nurse_entry.id, staff["ana"]).ok
    shift, role = stores.rosters.get_shift_role(nurse_entry.id)
    assert role.assigned_person_ids == (staff["ana"],)
    assert role.open_count == 1

    duplicate = stores.rosters.assign_person(nurse_entry.id, staff["ana"])
    assert duplicate.error == "Person is already assigned to this role."

    assert stores.rosters.remove_person(nurse_entry.id, staff["ana"]).ok
    _, role = stores.rosters.get_shift_role(nurse_entry.id)
    assert role.assigned_person_ids == ()

    missing = stores.rosters.remove_person(nurse_entry.id, staff["ana"])
    assert missing.error == "Person is not assigned to this role."


def test_assigning_person_without_role_is_rejected(stores):
    staff = _setup_staff(stores)
    roster_id = _roster(stores)
    shift_id = stores.rosters.add_roster_shift(roster_id, _template(stores, staff), date(2025, 3, 12)).entity_id
    nurse_entry = stores.rosters.get_shift(shift_id).roles[0]

    result = stores.rosters.assign_person(nurse_entry.id, staff["cai"])

    assert not result.ok
    assert result.error == "Cai does not hold the Nurse role."
    assert stores.rosters.get_shift_role(nurse_entry.id)[1].assigned_person_ids == ()


def test_updating_roles_keeps_assignments_of_retained_roles(stores):
    staff = _setup_staff(stores)
    roster_id = _roster(stores)
    shift_id = stores.rosters.add_roster_shift(roster_id, _template(stores, staff), date(2025, 3, 12)).entity_id
    nurse_entry, driver_entry = stores.rosters.get_shift(shift_id).roles
    assert stores.rosters.assign_person(nurse_entry.id, staff["ana"]).ok
    assert stores.rosters.assign_person(driver_entry.id, staff["cai"]).ok

    result = stores.rosters.update_roster_shift(
        shift_id,
        shift_date=date(2025, 3, 13),
        roles=[RoleSlot(staff["nurse"], 3)],
    )
    assert result.ok, result.error

    shift = stores.rosters.get_shift(shift_id)
    assert shift.date == date(2025, 3, 13)
    assert [(role.id, role.required_count, role.assigned_person_ids) for role in shift.roles] == [
        (nurse_entry.id, 3, (staff["ana"],)),
    ]


def test_deleting_roster_removes_its_shifts(stores):
    staff = _setup_staff(stores)
    roster_id = _roster(stores)
    stores.rosters.add_roster_shift(roster_id, _template(stores, staff), date(2025, 3, 12))

    assert stores.rosters.delete(roster_id).ok

    assert stores.rosters.rosters == []
    assert stores.rosters.shifts == []


def test_inverted_roster_period_is_rejected(stores):
    result = stores.rosters.add("Bad", date(2025, 3, 16), date(2025, 3, 10))
    assert result.error == "Roster end date must be on or after the start date."


def test_legacy_shift_crud_and_staffing(stores):
    staff = _setup_staff(stores)
    result = stores.shifts.add(
        "Ambulance A",
        date(2025, 3, 12),
        time(8, 0),
        time(20, 0),
        roles=[RoleSlot(staff["driver"], 1, assigned_person_ids=(staff["ben"],))],
    )
    assert result.ok, result.error
    shift_id = result.entity_id

    shift = stores.shifts.get(shift_id)
    assert shift.roles[0].assigned_person_ids == (staff["ben"],)
    assert [item.id for item in stores.shifts.get_shifts_by_date(date(2025, 3, 12))] == [shift_id]
    assert stores.shifts.get_shifts_by_date(date(2025, 3, 13)) == []

    entry_id = shift.roles[0].id
    assert stores.shifts.assign_person(entry_id, staff["cai"]).ok
    assert stores.shifts.remove_person(entry_id, staff["ben"]).ok
    assert stores.shifts.get(shift_id).roles[0].assigned_person_ids == (staff["cai"],)

    assert stores.shifts.update(shift_id, name="Ambulance B", date=date(2025, 3, 13)).ok
    assert stores.shifts.get(shift_id).name == "Ambulance B"
    assert stores.shifts.get(shift_id).roles[0].assigned_person_ids == (staff["cai"],)

    assert stores.shifts.delete(shift_id).ok
    assert stores.shifts.shifts == []


def test_role_slot_rejects_people_without_the_role(stores):
    staff = _setup_staff(stores)
    result = stores.shifts.add(
        "Ward",
        date(2025, 3, 12),
        time(8, 0),
        time(20, 0),
        roles=[RoleSlot(staff["nurse"], 1, assigned_person_ids=(staff["cai"],))],
    )
    assert not result.ok
    assert stores.shifts.shifts == []
