"""Dataset-global statistics used to keep encodings stable across filters."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from pydantic import BaseModel, Field

from kriskogram.graph.filtering import as_category
from kriskogram.graph.validation import PreparedSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DatasetStats:
    """Min/max bounds over every snapshot of a dataset."""

    edge_min: float = 0.0
    edge_max: float = 0.0
    max_edges_count: int = 0
    net_min: float = 0.0
    net_max: float = 0.0
    max_year_incoming: float = 0.0
    max_year_outgoing: float = 0.0
    max_self_flow: float = 0.0
    node_numeric_ranges: dict[str, tuple[float, float]] = field(default_factory=dict)
    edge_numeric_ranges: dict[str, tuple[float, float]] = field(default_factory=dict)
    # Distinct values in first-appearance order across all snapshots.
    node_categories: dict[str, list[str]] = field(default_factory=dict)
    edge_categories: dict[str, list[str]] = field(default_factory=dict)
    # Every node attribute value in text form, numbers included. Used for grouping.
    node_groups: dict[str, list[str]] = field(default_factory=dict)

    @property
    def net_abs(self) -> float:
        return max(abs(self.net_min), abs(self.net_max))


class DatasetMetadata(BaseModel):
    """Property names found on nodes and edges, split by value type."""
    snapshots: int = 0
    years: list[int] = Field(default_factory=list)
    node_properties: list[str] = Field(default_factory=list)
    edge_properties: list[str] = Field(default_factory=list)
    numeric_node_properties: list[str] = Field(default_factory=list)
    numeric_edge_properties: list[str] = Field(default_factory=list)
    categorical_node_properties: list[str] = Field(default_factory=list)
    categorical_edge_properties: list[str] = Field(default_factory=list)
    edge_min: float = 0.0
    edge_max: float = 0.0
    max_edges_count: int = 0


def _widen(ranges: dict[str, tuple[float, float]], key: str, value: float) -> None:
    lo, hi = ranges.get(key, (value, value))
    ranges[key] = (min(lo, value), max(hi, value))


def _record(categories: dict[str, list[str]], key: str, value: str) -> None:
    seen = categories.setdefault(key, [])
    if value not in seen:
        seen.append(value)


def compute_stats(snapshots: Iterable[PreparedSnapshot]) -> DatasetStats:
    edge_min = float("inf")
    edge_max = float("-inf")
    max_edges_count = 0
    net_min = float("inf")
    net_max = float("-inf")
    max_in = 0.0
    max_out = 0.0
    max_self = 0.0
    node_ranges: dict[str, tuple[float, float]] = {}
    edge_ranges: dict[str, tuple[float, float]] = {}
    node_categories: dict[str, list[str]] = {}
    edge_categories: dict[str, list[str]] = {}
    node_groups: dict[str, list[str]] = {}

    for snapshot in snapshots:
        max_edges_count = max(max_edges_count, len(snapshot.edges))
        for edge in snapshot.edges:
            edge_min = min(edge_min, edge.value)
            edge_max = max(edge_max, edge.value)
            for key, value in edge.attributes.items():
                if isinstance(value, float):
                    _widen(edge_ranges, key, value)
                else:
                    _record(edge_categories, key, value)

        for node_id, node in snapshot.nodes.items():
            net = snapshot.net_year(node_id)
            net_min = min(net_min, net)
            net_max = max(net_max, net)
            max_in = max(max_in, snapshot.year_incoming.get(node_id, 0.0))
            max_out = max(max_out, snapshot.year_outgoing.get(node_id, 0.0))
            for key, value in node.attributes.items():
                if isinstance(value, float):
                    _widen(node_ranges, key, value)
                else:
                    _record(node_categories, key, value)
                _record(node_groups, key, as_category(value))

        max_self = max([max_self, *snapshot.self_flow.values()])

    if edge_min == float("inf"):
        edge_min = edge_max = 0.0
    if net_min == float("inf"):
        net_min = net_max = 0.0

    stats = DatasetStats(
        edge_min=edge_min,
        edge_max=edge_max,
        max_edges_count=max_edges_count,
        net_min=net_min,
        net_max=net_max,
        max_year_incoming=max_in,
        max_year_outgoing=max_out,
        max_self_flow=max_self,
        node_numeric_ranges=node_ranges,
        edge_numeric_ranges=edge_ranges,
        node_categories=node_categories,
        edge_categories=edge_categories,
        node_groups=node_groups,
    )
    logger.debug("Dataset stats: edges %.3g..%.3g, net %.3g..%.3g", edge_min, edge_max, net_min, net_max)
    return stats


def describe_dataset(snapshots: list[PreparedSnapshot]) -> DatasetMetadata:
    """Summarize property names and value bounds (for the ``stats`` command)."""
    stats = compute_stats(snapshots)
    node_props: list[str] = []
    edge_props: list[str] = []
    for snapshot in snapshots:
        for node in snapshot.nodes.values():
            node_props.extend(k for k in node.attributes if k not in node_props)
        for edge in snapshot.edges:
            edge_props.extend(k for k in edge.attributes if k not in edge_props)

    return DatasetMetadata(
        snapshots=len(snapshots),
        years=sorted(s.year for s in snapshots),
        node_properties=node_props,
        edge_properties=edge_props,
        numeric_node_properties=[k for k in node_props if k in stats.node_numeric_ranges],
        numeric_edge_properties=[k for k in edge_props if k in stats.edge_numeric_ranges],
        categorical_node_properties=[k for k in node_props if k in stats.node_categories],
        categorical_edge_properties=[k for k in edge_props if k in stats.edge_categories],
        edge_min=stats.edge_min,
        edge_max=stats.edge_max,
        max_edges_count=stats.max_edges_count,
    )
