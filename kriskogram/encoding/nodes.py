"""Node encodings — fill color, radius and stroke from flow metrics or attributes."""

import logging

from kriskogram.config import NodeEncodingConfig, NodeMetric
from kriskogram.encoding.colors import FALLBACK, NEUTRAL, hsl, palette_color
from kriskogram.encoding.scales import normalize, value_for_fraction
from kriskogram.models import Node, NodeAggregates
from kriskogram.stats import DatasetStats

logger = logging.getLogger(__name__)

FIXED_RADIUS = 6.0
MIN_RADIUS = 3.0
RADIUS_RANGE = 9.0

DEFAULT_STROKE = "#ffffff"
DEFAULT_STROKE_WIDTH = 2.0

# (hue, saturation) per gradient metric
_GRADIENTS = {
    NodeMetric.VISIBLE_OUTGOING: (24, 85),
    NodeMetric.YEAR_OUTGOING: (24, 85),
    NodeMetric.VISIBLE_INCOMING: (160, 70),
    NodeMetric.YEAR_INCOMING: (160, 70),
    NodeMetric.SELF_YEAR: (280, 70),
}

_NET_METRICS = (NodeMetric.NET_VISIBLE, NodeMetric.NET_YEAR)
_STATIC = (NodeMetric.SINGLE, NodeMetric.FIXED)


def gradient_color(hue: float, saturation: float, ratio: float) -> str:
    ratio = max(0.0, min(1.0, ratio))
    return hsl(hue, saturation, 85 - ratio * 45)


class NodeEncoder:
    """Maps nodes to fill color and radius using dataset-global bounds."""

    def __init__(self, config: NodeEncodingConfig, stats: DatasetStats) -> None:
        self.config = config
        self.stats = stats

    # --- Metric access ---

    def metric_value(self, metric: NodeMetric, node: Node, aggregates: NodeAggregates, attribute: str | None) -> float | None:
        if metric == NodeMetric.VISIBLE_INCOMING:
            return aggregates.visible_incoming
        if metric == NodeMetric.VISIBLE_OUTGOING:
            return aggregates.visible_outgoing
        if metric == NodeMetric.YEAR_INCOMING:
            return aggregates.year_incoming
        if metric == NodeMetric.YEAR_OUTGOING:
            return aggregates.year_outgoing
        if metric == NodeMetric.NET_VISIBLE:
            return aggregates.net_visible
        if metric == NodeMetric.NET_YEAR:
            return aggregates.net_year
        if metric == NodeMetric.SELF_YEAR:
            return aggregates.self_flow_year
        if metric == NodeMetric.ATTRIBUTE and attribute:
            return node.numeric(attribute)
        return None

    def metric_bounds(self, metric: NodeMetric, attribute: str | None) -> tuple[float, float] | None:
        """Global (lo, hi) for a metric; net metrics are bounded by magnitude."""
        if metric in (NodeMetric.VISIBLE_INCOMING, NodeMetric.YEAR_INCOMING):
            return 0.0, self.stats.max_year_incoming
        if metric in (NodeMetric.VISIBLE_OUTGOING, NodeMetric.YEAR_OUTGOING):
            return 0.0, self.stats.max_year_outgoing
        if metric in _NET_METRICS:
            return 0.0, self.stats.net_abs
        if metric == NodeMetric.SELF_YEAR:
            return 0.0, self.stats.max_self_flow
        if metric == NodeMetric.ATTRIBUTE and attribute:
            return self.stats.node_numeric_ranges.get(attribute)
        return None

    def ratio(self, metric: NodeMetric, node: Node, aggregates: NodeAggregates, attribute: str | None) -> float | None:
        value = self.metric_value(metric, node, aggregates, attribute)
        bounds = self.metric_bounds(metric, attribute)
        if value is None or bounds is None:
            return None
        if metric in _NET_METRICS:
            value = abs(value)
        return normalize(value, bounds[0], bounds[1], self.config.scale)

    # --- Color ---

    def fill(self, node: Node, aggregates: NodeAggregates) -> str:
        metric = self.config.color_mode
        attribute = self.config.color_attribute
        if metric in _STATIC:
            return FALLBACK

        if metric in _NET_METRICS:
            net = self.metric_value(metric, node, aggregates, attribute) or 0.0
            if abs(net) < 1e-6:
                return NEUTRAL
            intensity = self.ratio(metric, node, aggregates, attribute) or 0.0
            return hsl(0 if net > 0 else 210, 75, 85 - intensity * 45)

        if metric == NodeMetric.ATTRIBUTE:
            if not attribute:
                return FALLBACK
            value = node.attributes.get(attribute)
            if value is None:
                return NEUTRAL
            if isinstance(value, str):
                categories = self.stats.node_categories.get(attribute, [])
                return palette_color(categories.index(value)) if value in categories else FALLBACK
            n = self.ratio(metric, node, aggregates, attribute) or 0.0
            return hsl(120 - n * 120, 70, 50)

        hue, saturation = _GRADIENTS[metric]
        return gradient_color(hue, saturation, self.ratio(metric, node, aggregates, attribute) or 0.0)

    # --- Size ---

    @property
    def sized_by_data(self) -> bool:
        return self.config.size_mode not in _STATIC

    def radius(self, node: Node, aggregates: NodeAggregates) -> float:
        if not self.sized_by_data:
            return FIXED_RADIUS
        ratio = self.ratio(self.config.size_mode, node, aggregates, self.config.size_attribute)
        if ratio is None:
            return FIXED_RADIUS
        return radius_for(ratio)

    def size_sample(self, fraction: float) -> tuple[float, float] | None:
        """(raw value, radius) at a normalized fraction of the size metric."""
        bounds = self.metric_bounds(self.config.size_mode, self.config.size_attribute)
        if not self.sized_by_data or bounds is None:
            return None
        value = value_for_fraction(fraction, bounds[0], bounds[1], self.config.scale)
        return value, radius_for(fraction)


def radius_for(ratio: float) -> float:
    return MIN_RADIUS + max(0.0, min(1.0, ratio)) * RADIUS_RANGE
