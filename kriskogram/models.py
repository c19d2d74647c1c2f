"""Pydantic models for kriskogram datasets and rendered scenes."""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Attribute bags are open-ended; values are either numeric or categorical.
AttributeValue = Union[float, str]


# --- Input models (what the caller hands to compute) ---


class Node(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: str = ""
    attributes: dict[str, AttributeValue] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _default_label(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("label"):
            data = {**data, "label": data.get("id", "")}
        return data

    def numeric(self, key: str) -> float | None:
        value = self.attributes.get(key)
        return value if isinstance(value, float) else None


class Edge(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str
    target: str
    value: float
    attributes: dict[str, AttributeValue] = Field(default_factory=dict)

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target


class Snapshot(BaseModel):
    """Graph state at one year."""
    model_config = ConfigDict(frozen=True)

    year: int
    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)


class TimeRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: int
    end: int


class Dataset(BaseModel):
    """Ordered snapshots of one flow graph."""
    model_config = ConfigDict(frozen=True)

    name: str = ""
    snapshots: list[Snapshot] = Field(default_factory=list)

    @property
    def years(self) -> list[int]:
        return sorted({s.year for s in self.snapshots})

    @property
    def time_range(self) -> TimeRange | None:
        years = self.years
        if not years:
            return None
        return TimeRange(start=years[0], end=years[-1])


# --- Output models (what the renderer consumes) ---


class NodeAggregates(BaseModel):
    """Per-node flow totals for the rendered year."""
    visible_incoming: float = 0.0
    visible_outgoing: float = 0.0
    net_visible: float = 0.0
    year_incoming: float = 0.0
    year_outgoing: float = 0.0
    net_year: float = 0.0
    self_flow_year: float = 0.0
    overlay_past_total: float = 0.0
    overlay_future_total: float = 0.0
    overlay_delta: float = 0.0


class PositionedNode(BaseModel):
    id: str
    label: str
    x: float
    y: float
    radius: float
    fill_color: str
    stroke_color: str
    stroke_width: float
    attributes: dict[str, AttributeValue] = Field(default_factory=dict)
    aggregates: NodeAggregates = Field(default_factory=NodeAggregates)


class StyledArc(BaseModel):
    id: str
    source_id: str
    target_id: str
    year: int
    value: float
    x1: float
    x2: float
    y1: float
    y2: float
    is_above: bool
    arc_height: float
    sweep: int
    width: float
    color: str
    opacity: float
    dash_array: list[float] | None = None
    dash_offset: float = 0.0
    line_cap: str = "round"
    animate: bool = False
    outline_gap: float | None = None
    is_overlay: bool = False
    temporal_delta: int | None = None
    ego_step: int | None = None


# --- Legend items (tagged by kind) ---


class DirectionLegend(BaseModel):
    kind: Literal["direction"] = "direction"
    above_label: str
    below_label: str
    above_color: str
    below_color: str


class WeightSample(BaseModel):
    fraction: float
    value: float
    color: str
    width: float


class WeightLegend(BaseModel):
    kind: Literal["weight"] = "weight"
    title: str = "Edge weight intensity"
    scale: str
    min: float
    max: float
    samples: list[WeightSample]


class Swatch(BaseModel):
    label: str
    color: str


class CategoricalLegend(BaseModel):
    kind: Literal["categorical"] = "categorical"
    title: str
    entries: list[Swatch]
    inter_note: str | None = None


class TemporalEntry(BaseModel):
    offset: int
    year: int
    designation: Literal["past", "current", "future"]
    label: str
    color: str


class TemporalOverlayLegend(BaseModel):
    kind: Literal["temporal_overlay"] = "temporal_overlay"
    title: str = "Temporal overlay"
    entries: list[TemporalEntry]


class EgoStepEntry(BaseModel):
    step: int
    label: str
    color: str


class EgoStepLegend(BaseModel):
    kind: Literal["ego_steps"] = "ego_steps"
    title: str = "Ego neighbor steps"
    entries: list[EgoStepEntry]


class EdgeWidthLegend(BaseModel):
    kind: Literal["edge_width"] = "edge_width"
    title: str = "Edge width"
    scale: str
    samples: list[WeightSample]


class NodeSizeSample(BaseModel):
    label: Literal["small", "typical", "large"]
    value: float
    radius: float


class NodeSizeLegend(BaseModel):
    kind: Literal["node_size"] = "node_size"
    title: str
    samples: list[NodeSizeSample]


LegendItem = Annotated[
    Union[
        DirectionLegend,
        WeightLegend,
        CategoricalLegend,
        TemporalOverlayLegend,
        EgoStepLegend,
        EdgeWidthLegend,
        NodeSizeLegend,
    ],
    Field(discriminator="kind"),
]


# --- Scene ---


class SceneStatus(BaseModel):
    """Recoverable conditions encountered while building a scene."""
    year: int | None = None
    snapshot_missing: bool = False
    ego_cleared: bool = False
    ego_step_max: int = 0
    overlay_active: bool = False
    overlay_years: list[int] = Field(default_factory=list)
    total_nodes: int = 0
    total_edges: int = 0
    visible_nodes: int = 0
    visible_edges: int = 0
    warnings: list[str] = Field(default_factory=list)


class Scene(BaseModel):
    nodes: list[PositionedNode] = Field(default_factory=list)
    edges: list[StyledArc] = Field(default_factory=list)
    legend: list[LegendItem] = Field(default_factory=list)
    status: SceneStatus = Field(default_factory=SceneStatus)
