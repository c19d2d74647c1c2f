"""Edge encodings — width and color from value, direction and attributes."""

import logging
from collections.abc import Mapping

from kriskogram.config import EdgeEncodingConfig, EdgeStyle, EdgeWidthMode, HueSource, IntensitySource
from kriskogram.encoding.colors import FALLBACK, hsl, hue_saturation, palette_color
from kriskogram.encoding.scales import normalize
from kriskogram.graph.filtering import as_category
from kriskogram.models import Edge, Node
from kriskogram.stats import DatasetStats

logger = logging.getLogger(__name__)

# Width growth per unit of normalized weight, by rendering style.
WIDTH_MULTIPLIERS = {
    EdgeStyle.FILLED: 7.5,
    EdgeStyle.SEGMENTED: 5.0,
}

DIRECTION_HUES = {True: 0.0, False: 210.0}  # keyed by is_above
SINGLE_HUE = 210.0
BASE_SATURATION = 70.0


def lightness_for(intensity: float) -> float:
    return 80.0 - max(0.0, min(1.0, intensity)) * 55.0


def ego_step_color(step: int, max_step: int) -> str:
    """Blue for direct neighbors, shifting toward green and darker with depth."""
    if max_step <= 1:
        return hsl(210, 80, 55)
    clamped = max(1, min(step, max_step))
    ratio = (clamped - 1) / (max_step - 1)
    return hsl(round(210 - ratio * 150), 80, round(60 - ratio * 20))


class EdgeEncoder:
    """Resolves width and color for edges of one scene.

    Bounds come from ``DatasetStats`` (all years), never from the visible
    subset, so that widths and colors do not jump while filters change.
    """

    def __init__(
        self,
        config: EdgeEncodingConfig,
        stats: DatasetStats,
        nodes: Mapping[str, Node],
        region_attribute: str = "region",
        division_attribute: str = "division",
    ) -> None:
        self.config = config
        self.stats = stats
        self.nodes = nodes
        self.region_attribute = region_attribute
        self.division_attribute = division_attribute

    # --- Width ---

    def weight_fraction(self, value: float) -> float:
        return normalize(value, self.stats.edge_min, self.stats.edge_max, self.config.weight_scale)

    def width(self, value: float, style: EdgeStyle = EdgeStyle.FILLED) -> float:
        if style == EdgeStyle.OUTLINE:
            return self.config.outline_thickness
        if self.config.width_mode == EdgeWidthMode.FIXED:
            return self.config.base_width
        k = WIDTH_MULTIPLIERS[style]
        return self.config.base_width * (0.5 + self.weight_fraction(value) * k)

    # --- Intensity ---

    def intensity(self, edge: Edge) -> float:
        source = self.config.intensity
        if source == IntensitySource.WEIGHT:
            return self.weight_fraction(edge.value)
        if source == IntensitySource.ATTRIBUTE and self.config.intensity_attribute:
            value = edge.attributes.get(self.config.intensity_attribute)
            bounds = self.stats.edge_numeric_ranges.get(self.config.intensity_attribute)
            if isinstance(value, float) and bounds is not None:
                return normalize(value, bounds[0], bounds[1])
        return self.config.intensity_constant

    # --- Hue ---

    @property
    def group_attribute(self) -> str | None:
        if self.config.hue == HueSource.REGION:
            return self.region_attribute
        if self.config.hue == HueSource.DIVISION:
            return self.division_attribute
        return None

    def category_color(self, attribute: str, value: str, edges: bool = False) -> str:
        categories = (self.stats.edge_categories if edges else self.stats.node_categories).get(attribute, [])
        if value not in categories:
            return FALLBACK
        return palette_color(categories.index(value))

    def group_of(self, node_id: str) -> str | None:
        """Region or division of a node as text; numeric codes count too."""
        node = self.nodes.get(node_id)
        if node is None or self.group_attribute is None:
            return None
        return as_category(node.attributes.get(self.group_attribute)) or None

    def group_color(self, group: str | None) -> str:
        groups = self.stats.node_groups.get(self.group_attribute or "", [])
        if group is None or group not in groups:
            return FALLBACK
        return palette_color(groups.index(group))

    def _hue(self, edge: Edge, is_above: bool) -> tuple[float, float]:
        hue = self.config.hue
        if hue == HueSource.DIRECTION:
            return DIRECTION_HUES[is_above], BASE_SATURATION
        if hue == HueSource.SINGLE:
            return SINGLE_HUE, BASE_SATURATION

        if hue in (HueSource.REGION, HueSource.DIVISION):
            return hue_saturation(self.group_color(self.group_of(edge.source)))

        # HueSource.ATTRIBUTE
        key = self.config.hue_attribute
        value = edge.attributes.get(key) if key else None
        if isinstance(value, float):
            lo, hi = self.stats.edge_numeric_ranges.get(key, (value, value))
            n = normalize(value, lo, hi)
            return 120.0 - n * 120.0, BASE_SATURATION
        if isinstance(value, str):
            return hue_saturation(self.category_color(key, value, edges=True))
        return hue_saturation(FALLBACK)

    def is_inter_group(self, edge: Edge) -> bool:
        attribute = self.group_attribute
        if attribute is None:
            return False
        a = self.group_of(edge.source)
        b = self.group_of(edge.target)
        return not a or a != b

    def color(self, edge: Edge, is_above: bool) -> str:
        """Generic hue/intensity color; overlay and ego coloring are layered on by the caller."""
        light = lightness_for(self.intensity(edge))
        if self.config.inter_grayscale and self.is_inter_group(edge):
            return hsl(0, 0, light)
        hue, saturation = self._hue(edge, is_above)
        return hsl(hue, saturation, light)

    def direction_color(self, is_above: bool, intensity: float | None = None) -> str:
        if intensity is None:
            intensity = self.config.intensity_constant
        return hsl(DIRECTION_HUES[is_above], BASE_SATURATION, lightness_for(intensity))

    def sample_color(self, fraction: float) -> str:
        """Color of a weight-legend tick at a normalized fraction."""
        hue = DIRECTION_HUES[True] if self.config.hue == HueSource.DIRECTION else SINGLE_HUE
        return hsl(hue, BASE_SATURATION, lightness_for(fraction))
