"""End-to-end tests for compute(dataset, config)."""

import logging

import pytest

from kriskogram.config import (
    Config,
    EdgeEncodingConfig,
    EdgeStyle,
    EgoConfig,
    FilterConfig,
    HueSource,
    LayoutConfig,
    LensConfig,
    NodeStyle,
    ScaleMode,
    TemporalOverlayConfig,
)
from kriskogram.encoding.edges import ego_step_color
from kriskogram.models import Dataset
from kriskogram.pipeline import compute


def _pairs(scene):
    return [(e.source_id, e.target_id) for e in scene.edges]


def _node(scene, node_id):
    return next(n for n in scene.nodes if n.id == node_id)


# --- Worked examples ---


class TestExamples:
    def test_both_edges_shown(self, abc_dataset):
        config = Config(filter=FilterConfig(min_threshold=0, max_threshold=100, max_edges=10))
        scene = compute(abc_dataset, config)
        assert _pairs(scene) == [("A", "B"), ("B", "C")]
        a_to_b = scene.edges[0]
        assert a_to_b.is_above == (_node(scene, "A").x > _node(scene, "B").x)
        assert a_to_b.is_above is False

    def test_max_edges_one(self, abc_dataset):
        scene = compute(abc_dataset, Config(filter=FilterConfig(max_edges=1)))
        assert _pairs(scene) == [("A", "B")]
        assert scene.edges[0].value == 10

    def test_ego_one_step(self, abc_dataset):
        scene = compute(abc_dataset, Config(ego=EgoConfig(node_id="B", steps=1)))
        assert _pairs(scene) == [("A", "B"), ("B", "C")]
        assert [e.ego_step for e in scene.edges] == [1, 1]

    def test_temporal_overlay(self, three_year_dataset):
        config = Config(year=2020, temporal=TemporalOverlayConfig(enabled=True, years_past=1, years_future=1))
        scene = compute(three_year_dataset, config)
        past = [e for e in scene.edges if e.year == 2019]
        future = [e for e in scene.edges if e.year == 2021]
        assert past and future
        assert all(e.temporal_delta == -1 and e.is_overlay for e in past)
        assert all(e.temporal_delta == 1 and e.is_overlay for e in future)
        assert {e.color for e in past} == {"#2563eb"}
        assert {e.color for e in future} == {"#dc2626"}
        assert scene.status.overlay_years == [2019, 2021]

    def test_negative_edge_dropped(self, make_snapshot, caplog):
        dataset = Dataset(snapshots=[make_snapshot(2020, ["A", "B"], [("A", "B", -3)])])
        with caplog.at_level(logging.WARNING):
            scene = compute(dataset, Config())
        assert scene.edges == []
        assert len(scene.status.warnings) == 1
        assert "non-positive" in caplog.text


# --- Properties ---


CONFIGS = [
    Config(),
    Config(filter=FilterConfig(max_edges=1)),
    Config(filter=FilterConfig(max_edges=2, min_threshold=3)),
    Config(year=2020, filter=FilterConfig(max_edges=2), temporal=TemporalOverlayConfig(enabled=True)),
    Config(year=2020, filter=FilterConfig(max_edges=3), temporal=TemporalOverlayConfig(enabled=True, years_past=2)),
    Config(year=2020, ego=EgoConfig(node_id="A", steps=2), temporal=TemporalOverlayConfig(enabled=True)),
]


class TestProperties:
    @pytest.mark.parametrize("config", CONFIGS)
    def test_edge_cap(self, three_year_dataset, config):
        scene = compute(three_year_dataset, config)
        assert len(scene.edges) <= config.filter.max_edges

    @pytest.mark.parametrize("bounds", [(0, None), (3, 8), (5, 5), (11, 20)])
    def test_thresholds_hold_for_current_edges(self, three_year_dataset, bounds):
        lo, hi = bounds
        config = Config(
            year=2020,
            filter=FilterConfig(min_threshold=lo, max_threshold=hi),
            temporal=TemporalOverlayConfig(enabled=True),
        )
        for edge in compute(three_year_dataset, config).edges:
            if not edge.is_overlay:
                assert lo <= edge.value
                assert hi is None or edge.value <= hi

    @pytest.mark.parametrize("config", CONFIGS)
    def test_idempotent(self, three_year_dataset, config):
        first = compute(three_year_dataset, config)
        second = compute(three_year_dataset, config)
        assert first == second
        assert first.model_dump_json() == second.model_dump_json()

    def test_input_not_mutated(self, three_year_dataset):
        before = three_year_dataset.model_dump()
        compute(three_year_dataset, Config(year=2020, temporal=TemporalOverlayConfig(enabled=True)))
        assert three_year_dataset.model_dump() == before

    @pytest.mark.parametrize("scale", list(ScaleMode))
    def test_width_monotonic_in_scene(self, chain_dataset, scale):
        scene = compute(chain_dataset, Config(edges=EdgeEncodingConfig(weight_scale=scale)))
        ranked = sorted(scene.edges, key=lambda e: e.value)
        widths = [e.width for e in ranked]
        assert widths == sorted(widths)

    def test_ego_step_hop_distance(self, chain_dataset):
        scene = compute(chain_dataset, Config(ego=EgoConfig(node_id="B", steps=3)))
        hops = {"B": 0, "A": 1, "C": 1, "D": 2, "E": 3}
        for edge in scene.edges:
            assert min(hops[edge.source_id], hops[edge.target_id]) <= edge.ego_step - 1


# --- Nodes ---


class TestNodes:
    def test_positions_follow_alphabetical_order(self, abc_dataset):
        scene = compute(abc_dataset, Config())
        assert [n.id for n in scene.nodes] == ["A", "B", "C"]
        xs = [n.x for n in scene.nodes]
        assert xs == sorted(xs)
        assert all(n.y == 200 for n in scene.nodes)

    def test_default_style(self, abc_dataset):
        node = compute(abc_dataset, Config()).nodes[0]
        assert node.radius == 6
        assert node.stroke_color == "#ffffff"
        assert node.stroke_width == 2

    def test_aggregates(self, regional_dataset):
        scene = compute(regional_dataset, Config())
        ca = _node(scene, "CA").aggregates
        assert ca.visible_outgoing == 80
        assert ca.net_visible == -80
        tx = _node(scene, "TX").aggregates
        assert tx.self_flow_year == 8
        assert tx.visible_incoming == 20
        assert tx.year_incoming == 28

    def test_node_fields(self, abc_dataset):
        node = compute(abc_dataset, Config()).nodes[0]
        assert set(node.model_dump()) == {
            "id", "label", "x", "y", "radius", "fill_color", "stroke_color", "stroke_width",
            "attributes", "aggregates",
        }

    def test_attributes_carried(self, regional_dataset):
        scene = compute(regional_dataset, Config())
        assert _node(scene, "CA").attributes["region"] == "West"

    def test_only_edge_endpoints_placed(self, regional_dataset):
        scene = compute(regional_dataset, Config(filter=FilterConfig(max_edges=1)))
        assert {n.id for n in scene.nodes} == {"CA", "OR"}

    def test_show_all_nodes(self, regional_dataset):
        config = Config(filter=FilterConfig(max_edges=1, show_all_nodes=True))
        assert len(compute(regional_dataset, config).nodes) == 4

    def test_self_loop_never_drawn(self, regional_dataset):
        scene = compute(regional_dataset, Config())
        assert all(e.source_id != e.target_id for e in scene.edges)

    def test_overlay_node_fill(self, three_year_dataset):
        config = Config(year=2020, temporal=TemporalOverlayConfig(enabled=True))
        scene = compute(three_year_dataset, config)
        # D gains the most flow in 2021.
        assert _node(scene, "D").fill_color == "#dc2626"
        assert _node(scene, "D").aggregates.overlay_delta == 8

    def test_overlay_node_outline(self, three_year_dataset):
        config = Config(year=2020, temporal=TemporalOverlayConfig(enabled=True, node_style=NodeStyle.OUTLINE))
        d = _node(compute(three_year_dataset, config), "D")
        assert d.stroke_color == "#dc2626"
        assert d.stroke_width == 3
        assert d.fill_color == "#2563eb"


# --- Edges ---


class TestEdges:
    def test_current_edges_black_with_overlay(self, three_year_dataset):
        config = Config(year=2020, temporal=TemporalOverlayConfig(enabled=True))
        current = [e for e in compute(three_year_dataset, config).edges if not e.is_overlay]
        assert {e.color for e in current} == {"#000000"}
        assert {e.temporal_delta for e in current} == {0}

    def test_current_edges_first(self, three_year_dataset):
        config = Config(year=2020, temporal=TemporalOverlayConfig(enabled=True))
        years = [e.year for e in compute(three_year_dataset, config).edges]
        assert years == [2020, 2020, 2019, 2019, 2021, 2021]

    def test_overlay_opacity(self, three_year_dataset):
        config = Config(year=2020, temporal=TemporalOverlayConfig(enabled=True))
        scene = compute(three_year_dataset, config)
        for edge in scene.edges:
            expected = max(0.25, 0.85 * 0.65) if edge.is_overlay else 0.85
            assert edge.opacity == pytest.approx(expected)

    def test_segmented_overlay_style(self, three_year_dataset):
        config = Config(
            year=2020,
            edges=EdgeEncodingConfig(segment_length=6, segment_gap=3, segment_offset=2, segment_animate=True),
            temporal=TemporalOverlayConfig(enabled=True, edge_style=EdgeStyle.SEGMENTED),
        )
        scene = compute(three_year_dataset, config)
        overlay = [e for e in scene.edges if e.is_overlay]
        assert all(e.dash_array == [6, 3] for e in overlay)
        assert all(e.animate for e in overlay)
        assert all(abs(e.y1 - 200) == 2 for e in overlay)
        assert all(e.dash_array is None for e in scene.edges if not e.is_overlay)

    def test_outline_overlay_style(self, three_year_dataset):
        config = Config(year=2020, temporal=TemporalOverlayConfig(enabled=True, edge_style=EdgeStyle.OUTLINE))
        overlay = [e for e in compute(three_year_dataset, config).edges if e.is_overlay]
        assert all(e.width == 3 and e.outline_gap == 2 for e in overlay)

    def test_ego_step_coloring(self, chain_dataset):
        scene = compute(chain_dataset, Config(ego=EgoConfig(node_id="A", steps=2, step_coloring=True)))
        assert [e.ego_step for e in scene.edges] == [1, 2]
        assert scene.edges[0].color == ego_step_color(1, 2)
        assert scene.edges[1].color == ego_step_color(2, 2)

    def test_overlay_restricted_to_ego_neighborhood(self, three_year_dataset):
        config = Config(year=2020, ego=EgoConfig(node_id="A", steps=1), temporal=TemporalOverlayConfig(enabled=True))
        scene = compute(three_year_dataset, config)
        assert _pairs(scene) == [("A", "B")]

    def test_duplicate_edges_get_distinct_ids(self, make_snapshot):
        dataset = Dataset(snapshots=[make_snapshot(2020, ["A", "B"], [("A", "B", 3), ("A", "B", 3)])])
        scene = compute(dataset, Config())
        assert [e.id for e in scene.edges] == ["2020:A->B#1", "2020:A->B#2"]
        assert any("duplicate edge" in w for w in scene.status.warnings)

    def test_numeric_region_codes_keep_intra_hue(self, coded_regions_dataset):
        config = Config(edges=EdgeEncodingConfig(hue=HueSource.REGION))
        colors = {(e.source_id, e.target_id): e.color for e in compute(coded_regions_dataset, config).edges}
        intra, inter = colors[("A", "B")], colors[("B", "C")]
        assert not (intra[1:3] == intra[3:5] == intra[5:7])
        assert inter[1:3] == inter[3:5] == inter[5:7]

    def test_lens_raises_arcs(self, abc_dataset):
        plain = compute(abc_dataset, Config())
        lens = LensConfig(enabled=True, x=plain.edges[0].x1, y=200, radius=400)
        lensed = compute(abc_dataset, Config(layout=LayoutConfig(lens=lens)))
        assert lensed.edges[0].arc_height > plain.edges[0].arc_height


# --- Status and recovery ---


class TestStatus:
    def test_ego_missing_clears_focus(self, abc_dataset):
        scene = compute(abc_dataset, Config(ego=EgoConfig(node_id="Z")))
        assert scene.status.ego_cleared
        assert len(scene.edges) == 2

    def test_single_year_overlay_silent(self, abc_dataset, caplog):
        with caplog.at_level(logging.WARNING):
            scene = compute(abc_dataset, Config(temporal=TemporalOverlayConfig(enabled=True)))
        assert not scene.status.overlay_active
        assert scene.status.warnings == []
        assert caplog.text == ""

    def test_no_allowed_nodes(self, regional_dataset):
        config = Config(filter=FilterConfig(node_filter_attribute="region", node_filter_values=["Nowhere"]))
        scene = compute(regional_dataset, config)
        assert scene.nodes == [] and scene.edges == []
        assert not scene.status.snapshot_missing

    def test_missing_year(self, abc_dataset):
        scene = compute(abc_dataset, Config(year=1999))
        assert scene.status.snapshot_missing
        assert scene.nodes == [] and scene.edges == []
        assert "no snapshot for year 1999" in scene.status.warnings

    def test_empty_dataset(self):
        scene = compute(Dataset(), Config())
        assert scene.status.snapshot_missing
        assert scene.status.year is None

    def test_year_defaults_to_first(self, three_year_dataset):
        assert compute(three_year_dataset, Config()).status.year == 2019

    def test_counts(self, regional_dataset):
        status = compute(regional_dataset, Config(filter=FilterConfig(max_edges=2))).status
        assert (status.total_nodes, status.total_edges) == (4, 3)
        assert (status.visible_nodes, status.visible_edges) == (3, 2)
