"""Graph filter — attribute allow-list, scope, thresholds and top-N selection."""

import logging
from dataclasses import dataclass

from kriskogram.config import FilterConfig, ScopeFilter
from kriskogram.graph.validation import PreparedSnapshot
from kriskogram.models import AttributeValue, Edge, Node

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterResult:
    """Edges surviving the filter, strongest first, plus the allowed node set."""

    year: int
    edges: tuple[Edge, ...]
    allowed_node_ids: frozenset[str]


def allowed_nodes(snapshot: PreparedSnapshot, criteria: FilterConfig) -> frozenset[str]:
    """Ids passing the categorical allow-list (all ids when no list is set)."""
    attribute = criteria.node_filter_attribute
    values = criteria.node_filter_values
    if not attribute or values is None:
        return frozenset(snapshot.nodes)
    wanted = set(values)
    return frozenset(
        node_id for node_id, node in snapshot.nodes.items()
        if _category(node, attribute) in wanted
    )


def _category(node: Node, attribute: str) -> str | None:
    return as_category(node.attributes.get(attribute))


def as_category(value: AttributeValue | None) -> str | None:
    """Text form of an attribute value; whole numbers drop the trailing ".0"."""
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _in_scope(source: Node, target: Node, criteria: FilterConfig) -> bool:
    attribute = criteria.grouping_attribute
    if attribute is None:
        return True
    a = source.attributes.get(attribute)
    b = target.attributes.get(attribute)
    # Both endpoints must carry the grouping attribute for any scope test.
    if a in (None, "") or b in (None, ""):
        return False
    if criteria.scope in (ScopeFilter.INTRA_REGION, ScopeFilter.INTRA_DIVISION):
        return a == b
    return a != b


def filter_snapshot(snapshot: PreparedSnapshot, criteria: FilterConfig) -> FilterResult:
    """Select at most ``max_edges`` edges from one snapshot.

    Steps: allow-list, endpoint check, edge category, scope, thresholds,
    then a stable descending sort by value and truncation. Equal values
    keep their input order, so the cut at ``max_edges`` is deterministic.
    """
    allowed = allowed_nodes(snapshot, criteria)

    kept: list[Edge] = []
    for edge in snapshot.edges:
        if edge.source not in allowed or edge.target not in allowed:
            continue
        if criteria.edge_filter_attribute and criteria.edge_filter_value is not None:
            category = as_category(edge.attributes.get(criteria.edge_filter_attribute))
            if category != criteria.edge_filter_value:
                continue
        if not _in_scope(snapshot.nodes[edge.source], snapshot.nodes[edge.target], criteria):
            continue
        if edge.value < criteria.min_threshold:
            continue
        if criteria.max_threshold is not None and edge.value > criteria.max_threshold:
            continue
        kept.append(edge)

    # sorted() is stable, and reverse=True keeps ties in input order.
    ranked = sorted(kept, key=lambda e: e.value, reverse=True)[: criteria.max_edges]

    logger.debug(
        "Filtered %d: %d/%d edges kept (%d allowed nodes)",
        snapshot.year, len(ranked), len(snapshot.edges), len(allowed),
    )
    return FilterResult(year=snapshot.year, edges=tuple(ranked), allowed_node_ids=allowed)
