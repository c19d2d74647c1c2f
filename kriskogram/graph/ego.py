"""Ego expansion — breadth-first neighborhood around a focus node."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from kriskogram.config import EgoConfig
from kriskogram.graph.filtering import FilterResult
from kriskogram.graph.validation import PreparedSnapshot
from kriskogram.models import Edge

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EgoResult:
    """Outcome of ego expansion on one filtered snapshot.

    ``edge_steps`` maps an index into the filtered edge list to the BFS depth
    that first reached it. When ``active`` is False no restriction applies.
    """

    active: bool
    cleared: bool
    node_id: str | None
    edge_steps: dict[int, int]
    reachable_node_ids: frozenset[str]

    def keeps(self, index: int) -> bool:
        return not self.active or index in self.edge_steps


def bfs_edge_steps(
    edges: Sequence[Edge],
    start: str,
    max_depth: int,
) -> tuple[dict[int, int], frozenset[str]]:
    """Breadth-first search over edges treated as undirected.

    At depth d every edge touching the frontier is tagged with d unless an
    earlier depth already reached it; unvisited endpoints form the next
    frontier. Returns (edge index -> step, visited node ids).
    """
    adjacency: dict[str, list[int]] = {}
    for index, edge in enumerate(edges):
        adjacency.setdefault(edge.source, []).append(index)
        if edge.target != edge.source:
            adjacency.setdefault(edge.target, []).append(index)

    steps: dict[int, int] = {}
    visited: set[str] = {start}
    frontier: list[str] = [start]

    depth = 1
    while frontier and depth <= max_depth:
        next_frontier: list[str] = []
        for node_id in frontier:
            for index in adjacency.get(node_id, ()):
                steps.setdefault(index, depth)
                edge = edges[index]
                for endpoint in (edge.source, edge.target):
                    if endpoint not in visited:
                        visited.add(endpoint)
                        next_frontier.append(endpoint)
        frontier = next_frontier
        depth += 1

    return steps, frozenset(visited)


def expand_ego(
    filtered: FilterResult,
    snapshot: PreparedSnapshot,
    ego: EgoConfig,
) -> EgoResult:
    """Restrict a filtered snapshot to the ego neighborhood, if one is set."""
    if not ego.node_id:
        return EgoResult(False, False, None, {}, frozenset())

    if ego.node_id not in snapshot.nodes:
        logger.info("Ego node %r not in %d, clearing ego focus", ego.node_id, snapshot.year)
        return EgoResult(False, True, None, {}, frozenset())

    steps, visited = bfs_edge_steps(filtered.edges, ego.node_id, ego.steps)
    logger.debug(
        "Ego %r: %d edges within %d steps (max step used %d)",
        ego.node_id, len(steps), ego.steps, max(steps.values(), default=0),
    )
    return EgoResult(True, False, ego.node_id, steps, visited)
