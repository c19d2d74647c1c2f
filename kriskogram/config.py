"""Configuration loading for kriskogram scenes."""

import re
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


class ScopeFilter(str, Enum):
    NONE = "none"
    INTRA_REGION = "intraRegion"
    INTRA_DIVISION = "intraDivision"
    INTER_REGION = "interRegion"
    INTER_DIVISION = "interDivision"


class ScaleMode(str, Enum):
    LINEAR = "linear"
    SQRT = "sqrt"
    LOG = "log"


class EdgeWidthMode(str, Enum):
    FIXED = "fixed"
    WEIGHT = "weight"


class EdgeStyle(str, Enum):
    FILLED = "filled"
    SEGMENTED = "segmented"
    OUTLINE = "outline"


class NodeStyle(str, Enum):
    FILLED = "filled"
    OUTLINE = "outline"


class HueSource(str, Enum):
    DIRECTION = "direction"
    REGION = "region"
    DIVISION = "division"
    ATTRIBUTE = "attribute"
    SINGLE = "single"


class IntensitySource(str, Enum):
    CONSTANT = "constant"
    WEIGHT = "weight"
    ATTRIBUTE = "attribute"


class NodeMetric(str, Enum):
    """Node color and size sources. SINGLE and FIXED mean "not data-driven"."""
    SINGLE = "single"
    FIXED = "fixed"
    VISIBLE_INCOMING = "visible_incoming"
    VISIBLE_OUTGOING = "visible_outgoing"
    YEAR_INCOMING = "year_incoming"
    YEAR_OUTGOING = "year_outgoing"
    NET_VISIBLE = "net_visible"
    NET_YEAR = "net_year"
    SELF_YEAR = "self_year"
    ATTRIBUTE = "attribute"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class FilterConfig(_Frozen):
    min_threshold: float = 0.0
    max_threshold: float | None = None  # None = unbounded
    max_edges: int = Field(default=500, ge=1)
    scope: ScopeFilter = ScopeFilter.NONE
    region_attribute: str = "region"
    division_attribute: str = "division"
    node_filter_attribute: str | None = None
    node_filter_values: list[str] | None = None
    edge_filter_attribute: str | None = None
    edge_filter_value: str | None = None
    show_all_nodes: bool = False

    @model_validator(mode="after")
    def _check_bounds(self) -> "FilterConfig":
        if self.max_threshold is not None and self.max_threshold < self.min_threshold:
            raise ValueError(
                f"max_threshold ({self.max_threshold}) is below min_threshold ({self.min_threshold})"
            )
        return self

    @property
    def grouping_attribute(self) -> str | None:
        if self.scope in (ScopeFilter.INTRA_REGION, ScopeFilter.INTER_REGION):
            return self.region_attribute
        if self.scope in (ScopeFilter.INTRA_DIVISION, ScopeFilter.INTER_DIVISION):
            return self.division_attribute
        return None


class EgoConfig(_Frozen):
    node_id: str | None = None
    steps: int = Field(default=1, ge=1)
    step_coloring: bool = False


class EdgeEncodingConfig(_Frozen):
    width_mode: EdgeWidthMode = EdgeWidthMode.WEIGHT
    base_width: float = Field(default=2.0, gt=0)
    weight_scale: ScaleMode = ScaleMode.LINEAR
    hue: HueSource = HueSource.DIRECTION
    hue_attribute: str | None = None
    intensity: IntensitySource = IntensitySource.WEIGHT
    intensity_attribute: str | None = None
    intensity_constant: float = Field(default=0.6, ge=0.0, le=1.0)
    inter_grayscale: bool = True
    opacity: float = Field(default=0.85, ge=0.0, le=1.0)
    segment_length: float = 8.0
    segment_gap: float = 4.0
    segment_offset: float = 0.0
    segment_cap: str = "round"
    segment_animate: bool = False
    outline_thickness: float = 3.0
    outline_gap: float = 2.0


class NodeEncodingConfig(_Frozen):
    color_mode: NodeMetric = NodeMetric.SINGLE
    color_attribute: str | None = None
    size_mode: NodeMetric = NodeMetric.FIXED
    size_attribute: str | None = None
    scale: ScaleMode = ScaleMode.LINEAR
    order_mode: str = "alphabetical"  # or a node attribute key


class TemporalOverlayConfig(_Frozen):
    enabled: bool = False
    years_past: int = Field(default=1, ge=0)
    years_future: int = Field(default=1, ge=0)
    edge_style: EdgeStyle = EdgeStyle.FILLED
    node_style: NodeStyle = NodeStyle.FILLED
    color_past: str = "#2563eb"
    color_mid: str = "#9ca3af"
    color_future: str = "#dc2626"
    use_black_for_current: bool = True

    @field_validator("color_past", "color_mid", "color_future")
    @classmethod
    def _hex_color(cls, value: str) -> str:
        if not _HEX_COLOR.match(value):
            raise ValueError(f"expected a #rrggbb color, got {value!r}")
        return value.lower()


class Margin(_Frozen):
    top: float = 40.0
    right: float = 40.0
    bottom: float = 40.0
    left: float = 40.0


class LensConfig(_Frozen):
    enabled: bool = False
    x: float = 0.0
    y: float = 0.0
    radius: float = Field(default=80.0, gt=0)


class LayoutConfig(_Frozen):
    width: float = 800.0
    height: float = 400.0
    margin: Margin = Field(default_factory=Margin)
    lens: LensConfig = Field(default_factory=LensConfig)


class Config(_Frozen):
    year: int | None = None
    filter: FilterConfig = Field(default_factory=FilterConfig)
    ego: EgoConfig = Field(default_factory=EgoConfig)
    edges: EdgeEncodingConfig = Field(default_factory=EdgeEncodingConfig)
    nodes: NodeEncodingConfig = Field(default_factory=NodeEncodingConfig)
    temporal: TemporalOverlayConfig = Field(default_factory=TemporalOverlayConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)


def _project_root() -> Path:
    """Return the kriskogram project root directory."""
    return Path(__file__).parent.parent


def load_config(config_path: Path | None = None) -> Config:
    """Load config from YAML file. Falls back to defaults if file missing."""
    if config_path is None:
        config_path = _project_root() / "config.yaml"

    if config_path.exists():
        raw: dict[str, Any] = yaml.safe_load(config_path.read_text()) or {}
        return Config(**raw)

    return Config()
