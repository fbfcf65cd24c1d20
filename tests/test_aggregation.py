from __future__ import annotations

from shift_roster.aggregation import group_values, index_by, nest_rows


SHIFTS = [{"id": "s1", "name": "Morning"}, {"id": "s2", "name": "Night"}, {"id": "s3", "name": "Empty"}]
ROLES = [
    {"id": "r1", "shift_id": "s1", "role_id": "nurse"},
    {"id": "r2", "shift_id": "s2", "role_id": "nurse"},
    {"id": "r3", "shift_id": "s1", "role_id": "driver"},
    {"id": "r4", "shift_id": "missing", "role_id": "driver"},
]
ASSIGNMENTS = [
    {"shift_role_id": "r1", "person_id": "p1"},
    {"shift_role_id": "r3", "person_id": "p2"},
    {"shift_role_id": "r1", "person_id": "p3"},
]


def _nest():
    return nest_rows(
        SHIFTS,
        ROLES,
        ASSIGNMENTS,
        child_fk="shift_id",
        grandchild_fk="shift_role_id",
        grandchild_value="person_id",
    )


def test_nest_rows_attaches_children_in_input_order():
    nested = _nest()

    assert [parent["id"] for parent, _ in nested] == ["s1", "s2", "s3"]
    morning_roles = nested[0][1]
    assert [(role["id"], people) for role, people in morning_roles] == [("r1", ["p1", "p3"]), ("r3", ["p2"])]
    assert [(role["id"], people) for role, people in nested[1][1]] == [("r2", [])]
    assert nested[2][1] == []


def test_nest_rows_is_deterministic():
    assert _nest() == _nest()


def test_orphan_children_are_dropped():
    child_ids = {role["id"] for _, roles in _nest() for role, _ in roles}
    assert "r4" not in child_ids


def test_index_and_group_helpers():
    assert sorted(index_by(ROLES, "shift_id")) == ["missing", "s1", "s2"]
    assert group_values(ASSIGNMENTS, "shift_role_id", "person_id") == {"r1": ["p1", "p3"], "r3": ["p2"]}
