"""Legend synthesis — descriptors matching the encodings active in a scene."""

import logging
from collections.abc import Sequence

from kriskogram.config import Config, EdgeWidthMode, HueSource, NodeMetric
from kriskogram.encoding.edges import EdgeEncoder, ego_step_color
from kriskogram.encoding.nodes import NodeEncoder
from kriskogram.encoding.scales import value_for_fraction
from kriskogram.graph.temporal import TemporalOverlay
from kriskogram.labels import field_label, flow_mode_label
from kriskogram.models import (
    CategoricalLegend,
    DirectionLegend,
    Edge,
    EdgeWidthLegend,
    EgoStepEntry,
    EgoStepLegend,
    LegendItem,
    Node,
    NodeSizeLegend,
    NodeSizeSample,
    Swatch,
    TemporalEntry,
    TemporalOverlayLegend,
    WeightLegend,
    WeightSample,
)

logger = logging.getLogger(__name__)

SAMPLE_FRACTIONS = (0.0, 0.5, 1.0)
SIZE_LABELS = ("small", "typical", "large")
MAX_SWATCHES = 10
INTER_NOTE = "Inter edges: grayscale by intensity"


def ego_step_label(step: int) -> str:
    return "Step 1 (direct neighbors)" if step == 1 else f"Step {step}"


def _distinct(values: Sequence[str | None]) -> list[str]:
    seen: list[str] = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return seen


class LegendSynthesizer:
    """Builds the legend list from the same encoders used to style the scene."""

    def __init__(
        self,
        config: Config,
        edge_encoder: EdgeEncoder,
        node_encoder: NodeEncoder,
        overlay: TemporalOverlay,
        year: int,
        ego_step_max: int = 0,
    ) -> None:
        self.config = config
        self.edges = edge_encoder
        self.nodes = node_encoder
        self.overlay = overlay
        self.year = year
        self.ego_step_max = ego_step_max

    def build(self, visible_nodes: Sequence[Node], visible_edges: Sequence[Edge]) -> list[LegendItem]:
        items: list[LegendItem] = [self.direction()]

        primary = (
            self.temporal()
            or self.ego_steps()
            or self.categorical(visible_nodes, visible_edges)
            or self.weight()
        )
        items.append(primary)

        if self.config.edges.width_mode == EdgeWidthMode.WEIGHT:
            items.append(self.edge_width())
        size = self.node_size()
        if size is not None:
            items.append(size)

        logger.debug("Legend: %s", [item.kind for item in items])
        return items

    # --- Always present ---

    def direction(self) -> DirectionLegend:
        return DirectionLegend(
            above_label="Right to left (above baseline)",
            below_label="Left to right (below baseline)",
            above_color=self.edges.direction_color(True),
            below_color=self.edges.direction_color(False),
        )

    # --- Exactly one of ---

    def temporal(self) -> TemporalOverlayLegend | None:
        if not self.overlay.active:
            return None
        palette = self.overlay.palette
        offsets = sorted([*self.overlay.offsets, (0, self.year)])
        entries = []
        for offset, year in offsets:
            designation = "past" if offset < 0 else "future" if offset > 0 else "current"
            entries.append(TemporalEntry(
                offset=offset,
                year=year,
                designation=designation,
                label=f"{year} ({designation})",
                color=palette.color_for(offset),
            ))
        return TemporalOverlayLegend(entries=entries)

    def ego_steps(self) -> EgoStepLegend | None:
        if not self.config.ego.step_coloring or self.ego_step_max <= 0:
            return None
        entries = [
            EgoStepEntry(step=step, label=ego_step_label(step), color=ego_step_color(step, self.ego_step_max))
            for step in range(1, self.ego_step_max + 1)
        ]
        return EgoStepLegend(entries=entries)

    def categorical(self, visible_nodes: Sequence[Node], visible_edges: Sequence[Edge]) -> CategoricalLegend | None:
        hue = self.config.edges.hue
        note = INTER_NOTE if self.config.edges.inter_grayscale else None

        if hue in (HueSource.REGION, HueSource.DIVISION):
            values = _distinct([self.edges.group_of(node.id) for node in visible_nodes])
            if not values:
                return None
            title = "Regions" if hue == HueSource.REGION else "Divisions"
            entries = [Swatch(label=v, color=self.edges.group_color(v)) for v in values[:MAX_SWATCHES]]
            return CategoricalLegend(title=title, entries=entries, inter_note=note)

        if hue == HueSource.ATTRIBUTE and self.config.edges.hue_attribute:
            attribute = self.config.edges.hue_attribute
            raw = [edge.attributes.get(attribute) for edge in visible_edges]
            values = _distinct([v for v in raw if isinstance(v, str)])
            if not values:
                return None
            entries = [
                Swatch(label=v, color=self.edges.category_color(attribute, v, edges=True))
                for v in values[:MAX_SWATCHES]
            ]
            return CategoricalLegend(title=field_label(attribute), entries=entries)

        return None

    def _weight_samples(self) -> list[WeightSample]:
        stats = self.edges.stats
        scale = self.config.edges.weight_scale
        samples = []
        for fraction in SAMPLE_FRACTIONS:
            value = value_for_fraction(fraction, stats.edge_min, stats.edge_max, scale)
            samples.append(WeightSample(
                fraction=self.edges.weight_fraction(value),
                value=value,
                color=self.edges.sample_color(fraction),
                width=self.edges.width(value),
            ))
        return samples

    def weight(self) -> WeightLegend:
        stats = self.edges.stats
        return WeightLegend(
            scale=self.config.edges.weight_scale.value,
            min=stats.edge_min,
            max=stats.edge_max,
            samples=self._weight_samples(),
        )

    # --- Appended when applicable ---

    def edge_width(self) -> EdgeWidthLegend:
        return EdgeWidthLegend(scale=self.config.edges.weight_scale.value, samples=self._weight_samples())

    def node_size(self) -> NodeSizeLegend | None:
        samples = []
        for label, fraction in zip(SIZE_LABELS, SAMPLE_FRACTIONS):
            sample = self.nodes.size_sample(fraction)
            if sample is None:
                return None
            value, radius = sample
            samples.append(NodeSizeSample(label=label, value=value, radius=radius))

        mode = self.config.nodes.size_mode
        if mode == NodeMetric.ATTRIBUTE:
            title = field_label(self.config.nodes.size_attribute or "")
        else:
            title = flow_mode_label(mode.value)
        return NodeSizeLegend(title=f"Node size: {title}", samples=samples)
