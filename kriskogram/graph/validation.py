"""Snapshot preparation — drop invalid edges, synthesize stub nodes, split self-flow."""

import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field

from kriskogram.models import Edge, Node, Snapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedSnapshot:
    """A snapshot that is safe to filter.

    ``edges`` holds every valid non-self edge in input order; self-loops are
    summed into ``self_flow`` instead. ``nodes`` preserves input order with
    stub nodes appended in first-reference order.
    """

    year: int
    nodes: dict[str, Node]
    edges: tuple[Edge, ...]
    self_flow: dict[str, float]
    year_incoming: dict[str, float]
    year_outgoing: dict[str, float]
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def net_year(self, node_id: str) -> float:
        return self.year_incoming.get(node_id, 0.0) - self.year_outgoing.get(node_id, 0.0)


def prepare_snapshot(snapshot: Snapshot) -> PreparedSnapshot:
    """Validate one snapshot without touching the caller's objects."""
    warnings: list[str] = []

    nodes: dict[str, Node] = {}
    for node in snapshot.nodes:
        if node.id in nodes:
            warnings.append(f"{snapshot.year}: duplicate node id {node.id!r}, keeping first")
            continue
        nodes[node.id] = node

    valid: list[Edge] = []
    seen: set[tuple[str, str]] = set()
    self_flow: dict[str, float] = defaultdict(float)
    incoming: dict[str, float] = defaultdict(float)
    outgoing: dict[str, float] = defaultdict(float)

    for edge in snapshot.edges:
        if not math.isfinite(edge.value) or edge.value <= 0:
            warnings.append(
                f"{snapshot.year}: dropped edge {edge.source}->{edge.target} "
                f"with non-finite or non-positive value {edge.value}"
            )
            continue

        for endpoint in (edge.source, edge.target):
            if endpoint not in nodes:
                nodes[endpoint] = Node(id=endpoint)

        key = (edge.source, edge.target)
        if key in seen:
            # Ambiguous intent; both are kept.
            warnings.append(f"{snapshot.year}: duplicate edge {edge.source}->{edge.target}")
        seen.add(key)

        outgoing[edge.source] += edge.value
        incoming[edge.target] += edge.value

        if edge.is_self_loop:
            self_flow[edge.source] += edge.value
            continue
        valid.append(edge)

    for message in warnings:
        logger.warning(message)

    return PreparedSnapshot(
        year=snapshot.year,
        nodes=nodes,
        edges=tuple(valid),
        self_flow=dict(self_flow),
        year_incoming=dict(incoming),
        year_outgoing=dict(outgoing),
        warnings=tuple(warnings),
    )
