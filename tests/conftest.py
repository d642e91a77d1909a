"""Shared fixtures: a small two-province kingdom."""

import pytest

from py_realm.core.models import Link, Node, NodeKind


@pytest.fixture
def kingdom_nodes():
    """One country, two provinces either side of it, one city in each."""
    return [
        Node(id="c1", kind=NodeKind.COUNTRY, x=600, y=400, name="Aldmark"),
        Node(id="pa", kind=NodeKind.PROVINCE, x=450, y=400, parent_id="c1", name="Westfold"),
        Node(id="pb", kind=NodeKind.PROVINCE, x=750, y=400, parent_id="c1", name="Eastmere"),
        Node(
            id="ca",
            kind=NodeKind.CITY,
            x=430,
            y=380,
            parent_id="pa",
            name="Highgate",
            description_text="A walled mountain town",
        ),
        Node(
            id="cb",
            kind=NodeKind.CITY,
            x=770,
            y=420,
            parent_id="pb",
            name="Lowford",
            description_text="Market town on the old road",
        ),
    ]


@pytest.fixture
def kingdom_links():
    return [Link(source="ca", target="cb")]
