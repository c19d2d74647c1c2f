"""Arc layout — node ordering, baseline placement and arc geometry."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from kriskogram.config import LayoutConfig, LensConfig
from kriskogram.models import Node

logger = logging.getLogger(__name__)

ALPHABETICAL = "alphabetical"
LENS_GAIN = 1.5


# --- Node order ---


def _order_key(node: Node, attribute: str) -> tuple:
    value = node.attributes.get(attribute)
    if isinstance(value, float):
        return (0, -value, "", node.label, node.id)
    if isinstance(value, str) and value:
        return (1, 0.0, value, node.label, node.id)
    return (2, 0.0, "", node.label, node.id)


def order_nodes(nodes: Iterable[Node], order_mode: str = ALPHABETICAL) -> list[Node]:
    """Sort nodes for the baseline.

    ``alphabetical`` sorts by label. Any other mode is an attribute key:
    numeric values descending, then text ascending, then nodes missing the
    attribute. Remaining ties fall back to label, then id.
    """
    if order_mode == ALPHABETICAL:
        return sorted(nodes, key=lambda n: (n.label, n.id))
    return sorted(nodes, key=lambda n: _order_key(n, order_mode))


# --- Positions ---


def baseline_y(layout: LayoutConfig) -> float:
    return layout.height / 2


def node_positions(ordered_ids: list[str], layout: LayoutConfig) -> dict[str, float]:
    """Evenly spaced x positions with half a step of padding at each end."""
    left = layout.margin.left
    span = layout.width - layout.margin.right - left
    n = len(ordered_ids)
    step = span / max(1, n)
    return {node_id: left + step * (i + 0.5) for i, node_id in enumerate(ordered_ids)}


# --- Arcs ---


@dataclass(frozen=True)
class ArcGeometry:
    x1: float
    x2: float
    y1: float
    y2: float
    is_above: bool
    arc_height: float
    sweep: int


def lens_factor(x1: float, x2: float, baseline: float, lens: LensConfig | None) -> float:
    """Curvature multiplier for an arc whose midpoint sits under the lens."""
    if lens is None or not lens.enabled:
        return 1.0
    if abs(baseline - lens.y) > lens.radius:
        return 1.0
    mid_x = (x1 + x2) / 2
    proximity = max(0.0, 1 - abs(lens.x - mid_x) / (lens.radius + 1e-6))
    return 1 + LENS_GAIN * proximity


def sweep_flag(x1: float, x2: float, is_above: bool) -> int:
    if x1 < x2:
        return 0 if is_above else 1
    return 1 if is_above else 0


def arc_geometry(
    x1: float,
    x2: float,
    baseline: float,
    lens: LensConfig | None = None,
    initial_gap: float = 0.0,
) -> ArcGeometry:
    """Geometry of one arc; leftward edges (x1 > x2) are drawn above the baseline.

    ``initial_gap`` lifts both endpoints off the baseline on the arc's own side.
    """
    is_above = x1 > x2
    arc_height = abs(x2 - x1) / 2 * lens_factor(x1, x2, baseline, lens)
    y = baseline - initial_gap if is_above else baseline + initial_gap
    return ArcGeometry(
        x1=x1,
        x2=x2,
        y1=y,
        y2=y,
        is_above=is_above,
        arc_height=arc_height,
        sweep=sweep_flag(x1, x2, is_above),
    )
