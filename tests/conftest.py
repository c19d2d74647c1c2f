"""Shared test fixtures for kriskogram tests."""

import pytest

from kriskogram.config import Config
from kriskogram.graph.validation import prepare_snapshot
from kriskogram.models import Dataset, Edge, Node, Snapshot


def snapshot(year: int, nodes: list[str], edges: list[tuple[str, str, float]], **attrs) -> Snapshot:
    """Build a snapshot from ids and (source, target, value) triples.

    ``attrs`` maps a node id to its attribute dict.
    """
    return Snapshot(
        year=year,
        nodes=[Node(id=n, attributes=attrs.get(n, {})) for n in nodes],
        edges=[Edge(source=s, target=t, value=v) for s, t, v in edges],
    )


@pytest.fixture()
def abc_dataset():
    """Single year: A->B (10), B->C (5)."""
    return Dataset(
        name="abc",
        snapshots=[snapshot(2020, ["A", "B", "C"], [("A", "B", 10), ("B", "C", 5)])],
    )


@pytest.fixture()
def three_year_dataset():
    """2019-2021 over the same nodes, with a distinct edge per year."""
    nodes = ["A", "B", "C", "D"]
    return Dataset(
        name="three-year",
        snapshots=[
            snapshot(2019, nodes, [("A", "C", 4), ("C", "D", 2)]),
            snapshot(2020, nodes, [("A", "B", 10), ("B", "C", 5)]),
            snapshot(2021, nodes, [("B", "D", 7), ("D", "A", 3)]),
        ],
    )


@pytest.fixture()
def regional_dataset():
    """Four states in two regions; one intra-region and two inter-region flows."""
    attrs = {
        "CA": {"region": "West", "division": "Pacific", "population": 39.0},
        "OR": {"region": "West", "division": "Pacific", "population": 4.2},
        "NY": {"region": "Northeast", "division": "Mid-Atlantic", "population": 19.5},
        "TX": {"region": "South", "division": "West South Central", "population": 30.0},
    }
    return Dataset(
        name="states",
        snapshots=[
            snapshot(
                2020,
                ["CA", "OR", "NY", "TX"],
                [("CA", "OR", 50), ("CA", "NY", 30), ("NY", "TX", 20), ("TX", "TX", 8)],
                **attrs,
            ),
        ],
    )


@pytest.fixture()
def chain_dataset():
    """Path A-B-C-D-E, values falling along the chain."""
    return Dataset(
        snapshots=[
            snapshot(
                2020,
                ["A", "B", "C", "D", "E"],
                [("A", "B", 40), ("B", "C", 30), ("C", "D", 20), ("D", "E", 10)],
            ),
        ],
    )


@pytest.fixture()
def coded_regions_dataset():
    """Numeric region codes: A and B in region 1, C in region 2."""
    attrs = {"A": {"region": 1}, "B": {"region": 1}, "C": {"region": 2}}
    return Dataset(
        snapshots=[snapshot(2020, ["A", "B", "C"], [("A", "B", 10), ("B", "C", 5)], **attrs)],
    )


@pytest.fixture()
def default_config():
    return Config()


@pytest.fixture()
def prepared_abc(abc_dataset):
    return prepare_snapshot(abc_dataset.snapshots[0])


@pytest.fixture()
def make_snapshot():
    """Factory fixture exposing ``snapshot`` to test modules."""
    return snapshot
