"""Temporal overlay — blend in filtered edges from neighboring years.

For each offset in [-years_past, -1] and [1, years_future] the sibling
snapshot (if any) is run through the same graph filter, and every surviving
edge is tagged with its offset. Node totals accumulate overlay flow from
past and future years separately; ``delta = future - past``.

Colors ramp through RGB space: past -> mid as offsets approach zero from
below, mid -> future above zero. The current year uses black or the mid
color depending on ``use_black_for_current``.
"""

import logging
from collections import defaultdict
from collections.abc import Mapping
from dataclasses import dataclass, field

from kriskogram.config import FilterConfig, TemporalOverlayConfig
from kriskogram.encoding.colors import interpolate_rgb
from kriskogram.graph.filtering import filter_snapshot
from kriskogram.graph.validation import PreparedSnapshot
from kriskogram.models import Edge, Node

logger = logging.getLogger(__name__)

BLACK = "#000000"


# --- Colors ---


@dataclass(frozen=True)
class OverlayPalette:
    past: str
    mid: str
    future: str
    years_past: int
    years_future: int
    use_black_for_current: bool = True

    @classmethod
    def from_config(cls, config: TemporalOverlayConfig) -> "OverlayPalette":
        return cls(
            past=config.color_past,
            mid=config.color_mid,
            future=config.color_future,
            years_past=config.years_past,
            years_future=config.years_future,
            use_black_for_current=config.use_black_for_current,
        )

    @property
    def current(self) -> str:
        return BLACK if self.use_black_for_current else self.mid

    def color_for(self, delta: float) -> str:
        """Color for a signed year offset (or a value scaled to one)."""
        if delta == 0:
            return self.current
        if delta < 0:
            t = min(1.0, abs(delta) / max(self.years_past, 1))
            return interpolate_rgb(self.mid, self.past, t)
        t = min(1.0, delta / max(self.years_future, 1))
        return interpolate_rgb(self.mid, self.future, t)

    def node_color(self, delta: float, max_abs_delta: float) -> str:
        """Color for a node flow delta, scaled so the largest change hits the ramp end."""
        if delta == 0 or max_abs_delta <= 0:
            return self.current
        reach = self.years_past if delta < 0 else self.years_future
        return self.color_for(delta / max_abs_delta * max(reach, 1))


# --- Overlay data ---


@dataclass(frozen=True)
class OverlayEdge:
    edge: Edge
    year: int
    temporal_delta: int


@dataclass
class OverlayTotals:
    past_total: float = 0.0
    future_total: float = 0.0

    @property
    def delta(self) -> float:
        return self.future_total - self.past_total


@dataclass(frozen=True)
class TemporalOverlay:
    active: bool
    palette: OverlayPalette
    edges: tuple[OverlayEdge, ...] = ()
    node_totals: dict[str, OverlayTotals] = field(default_factory=dict)
    # (offset, year) for every sibling snapshot that was found
    offsets: tuple[tuple[int, int], ...] = ()
    # Nodes referenced by overlay edges, taken from their own year
    nodes: dict[str, Node] = field(default_factory=dict)

    @property
    def years(self) -> list[int]:
        return [year for _offset, year in self.offsets]

    @property
    def max_abs_delta(self) -> float:
        return max((abs(t.delta) for t in self.node_totals.values()), default=0.0)

    def totals_for(self, node_id: str) -> OverlayTotals:
        return self.node_totals.get(node_id, OverlayTotals())


def overlay_offsets(years_past: int, years_future: int) -> list[int]:
    return [*range(-years_past, 0), *range(1, years_future + 1)]


def resolve_overlay(
    snapshots: Mapping[int, PreparedSnapshot],
    year: int,
    criteria: FilterConfig,
    config: TemporalOverlayConfig,
    restrict_to: frozenset[str] | None = None,
) -> TemporalOverlay:
    """Collect overlay edges around ``year``.

    ``restrict_to`` limits overlay edges to those with both endpoints in the
    given node set (used while an ego focus is active).
    """
    palette = OverlayPalette.from_config(config)
    if not config.enabled:
        return TemporalOverlay(active=False, palette=palette)
    if len(snapshots) < 2 or (config.years_past == 0 and config.years_future == 0):
        # Single-year datasets have no neighbors; not worth a warning.
        return TemporalOverlay(active=False, palette=palette)

    edges: list[OverlayEdge] = []
    totals: dict[str, OverlayTotals] = defaultdict(OverlayTotals)
    offsets: list[tuple[int, int]] = []
    nodes: dict[str, Node] = {}

    for offset in overlay_offsets(config.years_past, config.years_future):
        sibling = snapshots.get(year + offset)
        if sibling is None:
            continue
        offsets.append((offset, sibling.year))

        result = filter_snapshot(sibling, criteria)
        for edge in result.edges:
            if restrict_to is not None and (
                edge.source not in restrict_to or edge.target not in restrict_to
            ):
                continue
            edges.append(OverlayEdge(edge=edge, year=sibling.year, temporal_delta=offset))
            for endpoint in (edge.source, edge.target):
                nodes.setdefault(endpoint, sibling.nodes[endpoint])
                if offset < 0:
                    totals[endpoint].past_total += edge.value
                else:
                    totals[endpoint].future_total += edge.value

    logger.debug(
        "Overlay around %d: %d edges from years %s",
        year, len(edges), [y for _o, y in offsets],
    )
    return TemporalOverlay(
        active=True,
        palette=palette,
        edges=tuple(edges),
        node_totals=dict(totals),
        offsets=tuple(offsets),
        nodes=nodes,
    )
