"""Scene pipeline — filter, ego, overlay, encode, lay out and build the legend.

``compute`` is a pure function of (dataset, config). Every stage returns new
records; the caller's dataset is never modified.
"""

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass

from kriskogram.config import Config, EdgeStyle, NodeStyle
from kriskogram.encoding.edges import EdgeEncoder, ego_step_color
from kriskogram.encoding.nodes import DEFAULT_STROKE, DEFAULT_STROKE_WIDTH, NodeEncoder
from kriskogram.graph.ego import EgoResult, expand_ego
from kriskogram.graph.filtering import filter_snapshot
from kriskogram.graph.temporal import TemporalOverlay, resolve_overlay
from kriskogram.graph.validation import PreparedSnapshot, prepare_snapshot
from kriskogram.models import (
    Dataset,
    Edge,
    Node,
    NodeAggregates,
    PositionedNode,
    Scene,
    SceneStatus,
    StyledArc,
)
from kriskogram.output.layout import arc_geometry, baseline_y, node_positions, order_nodes
from kriskogram.output.legend import LegendSynthesizer
from kriskogram.stats import compute_stats

logger = logging.getLogger(__name__)

OVERLAY_OPACITY_FACTOR = 0.65
MIN_OVERLAY_OPACITY = 0.25
OVERLAY_NODE_STROKE_WIDTH = 3.0


@dataclass(frozen=True)
class _Candidate:
    """An edge selected for display before styling."""
    edge: Edge
    year: int
    temporal_delta: int | None = None
    ego_step: int | None = None

    @property
    def is_overlay(self) -> bool:
        return self.temporal_delta is not None and self.temporal_delta != 0


# --- Preparation ---


def prepare_dataset(dataset: Dataset) -> tuple[dict[int, PreparedSnapshot], list[str]]:
    """Prepare every snapshot, keyed by year; the first snapshot of a year wins."""
    prepared: dict[int, PreparedSnapshot] = {}
    warnings: list[str] = []
    for snapshot in sorted(dataset.snapshots, key=lambda s: s.year):
        if snapshot.year in prepared:
            message = f"{snapshot.year}: duplicate snapshot, keeping first"
            logger.warning(message)
            warnings.append(message)
            continue
        result = prepare_snapshot(snapshot)
        prepared[snapshot.year] = result
        warnings.extend(result.warnings)
    return prepared, warnings


def _select_edges(
    snapshot: PreparedSnapshot,
    config: Config,
    ego: EgoResult,
    filtered_edges: tuple[Edge, ...],
    overlay: TemporalOverlay,
) -> list[_Candidate]:
    current = [
        _Candidate(
            edge=edge,
            year=snapshot.year,
            temporal_delta=0 if overlay.active else None,
            ego_step=ego.edge_steps[index] if ego.active else None,
        )
        for index, edge in enumerate(filtered_edges)
        if ego.keeps(index)
    ]
    past_and_future = [
        _Candidate(edge=o.edge, year=o.year, temporal_delta=o.temporal_delta)
        for o in overlay.edges
    ]
    return (current + past_and_future)[: config.filter.max_edges]


def _aggregates(
    node_id: str,
    snapshot: PreparedSnapshot,
    incoming: dict[str, float],
    outgoing: dict[str, float],
    overlay: TemporalOverlay,
) -> NodeAggregates:
    totals = overlay.totals_for(node_id)
    visible_in = incoming.get(node_id, 0.0)
    visible_out = outgoing.get(node_id, 0.0)
    return NodeAggregates(
        visible_incoming=visible_in,
        visible_outgoing=visible_out,
        net_visible=visible_in - visible_out,
        year_incoming=snapshot.year_incoming.get(node_id, 0.0),
        year_outgoing=snapshot.year_outgoing.get(node_id, 0.0),
        net_year=snapshot.net_year(node_id),
        self_flow_year=snapshot.self_flow.get(node_id, 0.0),
        overlay_past_total=totals.past_total,
        overlay_future_total=totals.future_total,
        overlay_delta=totals.delta,
    )


# --- Entry point ---


def compute(dataset: Dataset, config: Config) -> Scene:
    """Resolve one year of ``dataset`` into a renderer-agnostic scene."""
    prepared, warnings = prepare_dataset(dataset)
    stats = compute_stats(prepared.values())

    year = config.year
    if year is None and dataset.time_range is not None:
        year = dataset.time_range.start

    status = SceneStatus(year=year, warnings=list(warnings))

    if year is None or year not in prepared:
        message = f"no snapshot for year {year}"
        logger.warning(message)
        status.snapshot_missing = True
        status.warnings.append(message)
        return Scene(status=status)

    snapshot = prepared[year]
    status.total_nodes = len(snapshot.nodes)
    status.total_edges = len(snapshot.edges)

    filtered = filter_snapshot(snapshot, config.filter)
    if not filtered.allowed_node_ids:
        logger.info("No nodes pass the attribute filter for %d", year)
        return Scene(status=status)

    ego = expand_ego(filtered, snapshot, config.ego)
    status.ego_cleared = ego.cleared

    overlay = resolve_overlay(
        prepared,
        year,
        config.filter,
        config.temporal,
        restrict_to=ego.reachable_node_ids if ego.active else None,
    )
    status.overlay_active = overlay.active
    status.overlay_years = overlay.years

    candidates = _select_edges(snapshot, config, ego, filtered.edges, overlay)

    # --- Visible nodes ---

    visible_ids: set[str] = set()
    for candidate in candidates:
        visible_ids.update((candidate.edge.source, candidate.edge.target))
    if config.filter.show_all_nodes:
        visible_ids.update(filtered.allowed_node_ids)
    if ego.active and ego.node_id in filtered.allowed_node_ids:
        visible_ids.add(ego.node_id)

    lookup: dict[str, Node] = {**overlay.nodes, **snapshot.nodes}
    ordered = order_nodes([lookup[node_id] for node_id in visible_ids], config.nodes.order_mode)
    positions = node_positions([node.id for node in ordered], config.layout)
    baseline = baseline_y(config.layout)

    incoming: dict[str, float] = defaultdict(float)
    outgoing: dict[str, float] = defaultdict(float)
    for candidate in candidates:
        if not candidate.is_overlay:
            incoming[candidate.edge.target] += candidate.edge.value
            outgoing[candidate.edge.source] += candidate.edge.value

    edge_encoder = EdgeEncoder(
        config.edges,
        stats,
        lookup,
        region_attribute=config.filter.region_attribute,
        division_attribute=config.filter.division_attribute,
    )
    node_encoder = NodeEncoder(config.nodes, stats)

    # --- Nodes ---

    nodes: list[PositionedNode] = []
    for node in ordered:
        aggregates = _aggregates(node.id, snapshot, incoming, outgoing, overlay)
        fill = node_encoder.fill(node, aggregates)
        stroke = DEFAULT_STROKE
        stroke_width = DEFAULT_STROKE_WIDTH
        if overlay.active and (aggregates.overlay_past_total or aggregates.overlay_future_total):
            color = overlay.palette.node_color(aggregates.overlay_delta, overlay.max_abs_delta)
            if config.temporal.node_style == NodeStyle.OUTLINE:
                stroke, stroke_width = color, OVERLAY_NODE_STROKE_WIDTH
            else:
                fill = color
        nodes.append(PositionedNode(
            id=node.id,
            label=node.label,
            x=positions[node.id],
            y=baseline,
            radius=node_encoder.radius(node, aggregates),
            fill_color=fill,
            stroke_color=stroke,
            stroke_width=stroke_width,
            attributes=dict(node.attributes),
            aggregates=aggregates,
        ))

    # --- Edges ---

    edge_config = config.edges
    ego_step_max = max((c.ego_step or 0 for c in candidates), default=0)
    ids: Counter[tuple[int, str, str]] = Counter()
    arcs: list[StyledArc] = []
    for candidate in candidates:
        edge = candidate.edge
        key = (candidate.year, edge.source, edge.target)
        ids[key] += 1

        style = config.temporal.edge_style if candidate.is_overlay else EdgeStyle.FILLED
        segmented = style == EdgeStyle.SEGMENTED
        geometry = arc_geometry(
            positions[edge.source],
            positions[edge.target],
            baseline,
            lens=config.layout.lens,
            initial_gap=edge_config.segment_offset if segmented else 0.0,
        )

        if candidate.is_overlay:
            color = overlay.palette.color_for(candidate.temporal_delta)
            opacity = max(MIN_OVERLAY_OPACITY, edge_config.opacity * OVERLAY_OPACITY_FACTOR)
        elif overlay.active:
            color = overlay.palette.current
            opacity = edge_config.opacity
        elif candidate.ego_step is not None and config.ego.step_coloring:
            color = ego_step_color(candidate.ego_step, ego_step_max)
            opacity = edge_config.opacity
        else:
            color = edge_encoder.color(edge, geometry.is_above)
            opacity = edge_config.opacity

        arcs.append(StyledArc(
            id=f"{candidate.year}:{edge.source}->{edge.target}#{ids[key]}",
            source_id=edge.source,
            target_id=edge.target,
            year=candidate.year,
            value=edge.value,
            x1=geometry.x1,
            x2=geometry.x2,
            y1=geometry.y1,
            y2=geometry.y2,
            is_above=geometry.is_above,
            arc_height=geometry.arc_height,
            sweep=geometry.sweep,
            width=edge_encoder.width(edge.value, style),
            color=color,
            opacity=opacity,
            dash_array=[edge_config.segment_length, edge_config.segment_gap] if segmented else None,
            dash_offset=edge_config.segment_offset if segmented else 0.0,
            line_cap=edge_config.segment_cap if segmented else "round",
            animate=edge_config.segment_animate if segmented else False,
            outline_gap=edge_config.outline_gap if style == EdgeStyle.OUTLINE else None,
            is_overlay=candidate.is_overlay,
            temporal_delta=candidate.temporal_delta,
            ego_step=candidate.ego_step,
        ))

    status.ego_step_max = ego_step_max
    status.visible_nodes = len(nodes)
    status.visible_edges = len(arcs)

    legend = LegendSynthesizer(
        config,
        edge_encoder,
        node_encoder,
        overlay,
        year,
        ego_step_max=ego_step_max,
    ).build(ordered, [c.edge for c in candidates])

    logger.info(
        "Scene %d: %d/%d nodes, %d/%d edges%s",
        year, len(nodes), status.total_nodes, len(arcs), status.total_edges,
        f", overlay years {overlay.years}" if overlay.active else "",
    )
    return Scene(nodes=nodes, edges=arcs, legend=legend, status=status)
