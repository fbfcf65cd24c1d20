"""Reassembly of flat relational rows into nested structures.

Each helper makes a single pass over its input and builds an index map, so
joining N parents, M children and K grandchildren costs O(N + M + K).
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Hashable, Iterable, Mapping, Sequence

Row = Mapping[str, Any]


def index_by(rows: Iterable[Row], key: str) -> dict[Hashable, list[Row]]:
    index: dict[Hashable, list[Row]] = defaultdict(list)
    for row in rows:
        index[row[key]].append(row)
    return dict(index)


def group_values(rows: Iterable[Row], key: str, value: str) -> dict[Hashable, list[Any]]:
    grouped: dict[Hashable, list[Any]] = defaultdict(list)
    for row in rows:
        grouped[row[key]].append(row[value])
    return dict(grouped)


def nest_rows(
    parents: Sequence[Row],
    children: Iterable[Row],
    grandchildren: Iterable[Row],
    *,
    child_fk: str,
    grandchild_fk: str,
    grandchild_value: str,
    id_key: str = "id",
) -> list[tuple[Row, list[tuple[Row, list[Any]]]]]:
    """Attach children to parents and grandchild values to children.

    Output order follows the input order of ``parents`` and, within each
    parent, the input order of ``children``.
    """
    values_by_child = group_values(grandchildren, grandchild_fk, grandchild_value)
    children_by_parent = index_by(children, child_fk)

    nested = []
    for parent in parents:
        parent_children = children_by_parent.get(parent[id_key], [])
        nested.append(
            (
                parent,
                [(child, list(values_by_child.get(child[id_key], []))) for child in parent_children],
            )
        )
    return nested
