from __future__ import annotations

from datetime import date

from sqlalchemy import func, select

from shift_roster.extensions import db
from shift_roster.models import AuditLog, GroupMember, LeaveStatus


def _role(stores, name: str) -> str:
    result = stores.roles.add(name)
    assert result.ok, result.error
    return result.entity_id


def _person(stores, name: str, role_ids=(), **fields) -> str:
    result = stores.people.add(name, role_ids=role_ids, **fields)
    assert result.ok, result.error
    return result.entity_id


def test_role_add_update_delete(stores):
    role_id = _role(stores, "Nurse")
    assert [role.name for role in stores.roles.roles] == ["Nurse"]

    duplicate = stores.roles.add("Nurse")
    assert not duplicate.ok
    assert duplicate.error == "A role with that name already exists."
    assert stores.roles.error == "A role with that name already exists."

    assert stores.roles.update(role_id, name="Senior nurse", description="Ward lead").ok
    assert stores.roles.get(role_id).name == "Senior nurse"
    assert stores.roles.get(role_id).description == "Ward lead"
    assert stores.roles.error is None

    assert stores.roles.delete(role_id).ok
    assert stores.roles.roles == []
    assert not stores.roles.delete(role_id).ok


def test_person_writes_are_audited(stores):
    role_id = _role(stores, "Driver")
    person_id = _person(stores, "Ana Lopez", role_ids=[role_id], phone="555-0101", designation="Paramedic")

    person = stores.people.get(person_id)
    assert person.role_ids == (role_id,)
    assert person.phone == "555-0101"

    actions = db.session.execute(select(AuditLog.action)).scalars().all()
    assert sorted(actions) == ["PERSON_CREATED", "ROLE_CREATED"]


def test_person_requires_name_and_known_roles(stores):
    assert stores.people.add("  ").error == "Name is required."
    unknown = stores.people.add("Ben", role_ids=["00000000-0000-0000-0000-000000000001"])
    assert not unknown.ok
    assert unknown.error == "Unknown role selected."
    assert stores.people.people == []


def test_person_search_matches_name_phone_and_designation(stores):
    _person(stores, "Ana Lopez", phone="555-0101", designation="Paramedic")
    _person(stores, "Ben Ortiz", phone="555-0202", designation="Driver")

    assert [person.name for person in stores.people.search("ana")] == ["Ana Lopez"]
    assert [person.name for person in stores.people.search("0202")] == ["Ben Ortiz"]
    assert [person.name for person in stores.people.search("DRIVER")] == ["Ben Ortiz"]
    assert len(stores.people.search("")) == 2


def test_group_membership_is_diffed(stores):
    ana = _person(stores, "Ana")
    ben = _person(stores, "Ben")
    cai = _person(stores, "Cai")

    result = stores.groups.add("Night team", person_ids=[ana, ben])
    assert result.ok
    group_id = result.entity_id
    assert set(stores.groups.get(group_id).person_ids) == {ana, ben}

    assert stores.groups.update(group_id, person_ids=[ben, cai]).ok
    assert set(stores.groups.get(group_id).person_ids) == {ben, cai}
    assert [group.id for group in stores.groups.groups_for_person(ana)] == []

    assert stores.groups.delete(group_id).ok
    assert db.session.execute(select(func.count()).select_from(GroupMember)).scalar_one() == 0


def test_leave_lifecycle_and_queries(stores):
    ana = _person(stores, "Ana")
    result = stores.leaves.add(ana, date(2025, 3, 10), date(2025, 3, 14), reason="Holiday")
    assert result.ok
    leave_id = result.entity_id
    assert stores.leaves.get(leave_id).status == "pending"
    assert not stores.leaves.is_person_on_leave(ana, date(2025, 3, 12))

    assert stores.leaves.approve(leave_id).ok
    assert stores.leaves.get(leave_id).status == "approved"
    assert stores.leaves.is_person_on_leave(ana, date(2025, 3, 12))
    assert stores.leaves.people_on_leave(date(2025, 3, 12)) == {ana}
    assert stores.leaves.leave_status(ana, date(2025, 3, 1)).status == "upcoming"

    assert stores.leaves.reject(leave_id).ok
    assert stores.leaves.people_on_leave(date(2025, 3, 12)) == set()
    assert [leave.id for leave in stores.leaves.get_leaves_by_person(ana)] == [leave_id]


def test_inverted_leave_range_is_rejected(stores):
    ana = _person(stores, "Ana")

    result = stores.leaves.add(ana, date(2025, 3, 14), date(2025, 3, 10), status=LeaveStatus.APPROVED)

    assert not result.ok
    assert result.error == "Leave end date must be on or after the start date."
    assert stores.leaves.leaves == []


def test_deleting_person_cascades_to_leaves_and_groups(stores):
    ana = _person(stores, "Ana")
    assert stores.leaves.add(ana, date(2025, 3, 10), date(2025, 3, 14)).ok
    assert stores.groups.add("Team", person_ids=[ana]).ok

    assert stores.people.delete(ana).ok
    stores.leaves.fetch()
    stores.groups.fetch()

    assert stores.leaves.leaves == []
    assert stores.groups.groups[0].person_ids == ()


def test_invalid_ids_are_rejected_without_raising(stores):
    assert stores.people.update("not-a-uuid", name="X").error == "Invalid person id."
    assert stores.leaves.approve("00000000-0000-0000-0000-000000000009").error == "Leave not found."
