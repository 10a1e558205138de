"""Unit tests for the spatial adapter and hop-ring layout."""

import math

import numpy as np
import pytest

from actornet.graph.aggregation import aggregate
from actornet.graph.metrics import timestamp_to_depth
from actornet.layout.spatial import (
    adapt_to_spatial_graph,
    compute_ring_positions,
    ring_radius_band,
)
from actornet.models import RelationshipRecord, SpatialNode, ViewMode

PRINCIPAL = "Jeffrey Epstein"


def _spatial_node(node_id: str, hop: int | None, importance: float = 0.5) -> SpatialNode:
    return SpatialNode(
        id=node_id,
        connections=1,
        x=0.0,
        y=0.0,
        z=0.0,
        importance=importance,
        hop_distance=hop,
        earliest_timestamp=None,
        latest_timestamp=None,
        radius=5.0,
        opacity=1.0,
    )


class TestAdaptToSpatialGraph:
    """Tests for adapt_to_spatial_graph."""

    def test_graph_mode_is_flat(self, sample_records: list[RelationshipRecord]) -> None:
        result = aggregate(sample_records, principal=PRINCIPAL)

        data = adapt_to_spatial_graph(
            result.graph, sample_records, ViewMode.GRAPH, PRINCIPAL, result.hop_distances
        )

        assert len(data.nodes) == len(result.graph.nodes)
        assert all(node.z == 0.0 for node in data.nodes)

    def test_depth_mode_uses_median_timestamp(
        self, sample_records: list[RelationshipRecord]
    ) -> None:
        result = aggregate(sample_records, principal=PRINCIPAL)

        data = adapt_to_spatial_graph(
            result.graph, sample_records, ViewMode.DEPTH, PRINCIPAL, result.hop_distances
        )

        alice = data.get_node("Alice")
        assert alice.z == pytest.approx(timestamp_to_depth("2001-06-15"))
        assert alice.earliest_timestamp == "1999-03-01"
        assert alice.latest_timestamp == "2003-01-10"
        # Undated entities sit at the center of the depth axis
        assert data.get_node("Eve").z == 0.0

    def test_mixed_timestamp_formats(self, make_record) -> None:
        """Date-only, partial and zoned timestamps share one time axis."""
        records = [
            make_record(PRINCIPAL, "Alice", "2001-03-01"),
            make_record(PRINCIPAL, "Alice", "2002-05-01T10:00:00Z"),
            make_record(PRINCIPAL, "Alice", "2001"),
            make_record(PRINCIPAL, "Alice", "2001-06-01T09:00:00+02:00"),
            make_record(PRINCIPAL, "Alice", "2001-06"),
        ]
        result = aggregate(records, principal=PRINCIPAL)

        data = adapt_to_spatial_graph(
            result.graph, records, ViewMode.DEPTH, PRINCIPAL, result.hop_distances
        )

        alice = data.get_node("Alice")
        assert alice.earliest_timestamp == "2001"
        assert alice.latest_timestamp == "2002-05-01T10:00:00Z"
        assert alice.z == pytest.approx(timestamp_to_depth("2001-06"))
        assert data.earliest.year == 2001
        assert data.latest.year == 2002

    def test_node_metrics(self, sample_records: list[RelationshipRecord]) -> None:
        result = aggregate(sample_records, principal=PRINCIPAL)

        data = adapt_to_spatial_graph(result.graph, sample_records, principal=PRINCIPAL)

        principal = data.get_node(PRINCIPAL)
        assert principal.importance == pytest.approx(1.0)
        assert principal.hop_distance == 0
        assert data.get_node("Eve").hop_distance is None
        assert not data.get_node("Eve").is_reachable
        assert data.get_node("Eve").opacity == pytest.approx(0.3)
        assert data.get_node("Dave").opacity == 1.0
        assert principal.radius > data.get_node("Dave").radius

    def test_links(self, sample_records: list[RelationshipRecord]) -> None:
        result = aggregate(sample_records, principal=PRINCIPAL)

        data = adapt_to_spatial_graph(result.graph, sample_records, principal=PRINCIPAL)
        links = {(l.source, l.target): l for l in data.links}

        strongest = links[(PRINCIPAL, "Alice")]
        assert strongest.strength == 1.0
        assert not strongest.is_weak_link
        assert links[(PRINCIPAL, "Bob")].strength == pytest.approx(1 / 3)

    def test_time_range_and_bounds(self, sample_records: list[RelationshipRecord]) -> None:
        result = aggregate(sample_records, principal=PRINCIPAL)
        for i, node in enumerate(result.graph.nodes):
            node.x, node.y = float(i * 10), float(-i)

        data = adapt_to_spatial_graph(result.graph, sample_records, principal=PRINCIPAL)

        assert data.earliest.year == 1995
        assert data.latest.year == 2004
        assert data.bounds.min_x == 0.0
        assert data.bounds.max_x == float((len(data.nodes) - 1) * 10)

    def test_flat_graph_not_modified(self, sample_records: list[RelationshipRecord]) -> None:
        result = aggregate(sample_records, principal=PRINCIPAL)

        adapt_to_spatial_graph(result.graph, sample_records, ViewMode.SPATIAL, PRINCIPAL)

        assert all(node.x is None for node in result.graph.nodes)

    def test_empty_graph(self) -> None:
        result = aggregate([], principal=PRINCIPAL)

        data = adapt_to_spatial_graph(result.graph, [], ViewMode.SPATIAL, PRINCIPAL)

        assert data.nodes == []
        assert data.links == []
        assert data.earliest is None


class TestRingPositions:
    """Tests for compute_ring_positions."""

    def test_principal_at_origin(self) -> None:
        nodes = [_spatial_node(PRINCIPAL, 0), _spatial_node("a", 1)]

        positions = compute_ring_positions(nodes, PRINCIPAL, np.random.default_rng(0))

        assert positions[PRINCIPAL] == (0.0, 0.0, 0.0)

    def test_ring_membership(self) -> None:
        """Planar distance falls in the band for the node's hop."""
        nodes = [_spatial_node(PRINCIPAL, 0)]
        nodes += [_spatial_node(f"h1-{i}", 1) for i in range(8)]
        nodes += [_spatial_node(f"h2-{i}", 2) for i in range(12)]
        nodes += [_spatial_node(f"h3-{i}", 3) for i in range(5)]

        positions = compute_ring_positions(nodes, PRINCIPAL, np.random.default_rng(42))

        for node in nodes[1:]:
            x, _, z = positions[node.id]
            low, high = ring_radius_band(node.hop_distance)
            assert low <= math.hypot(x, z) <= high

    def test_bands_are_monotonic(self) -> None:
        bands = [ring_radius_band(hop) for hop in range(1, 5)]

        for (_, inner_high), (outer_low, _) in zip(bands, bands[1:]):
            assert inner_high < outer_low

    def test_unreachable_on_overflow_ring(self, test_settings) -> None:
        nodes = [_spatial_node(PRINCIPAL, 0), _spatial_node("lost", None)]

        positions = compute_ring_positions(nodes, PRINCIPAL, np.random.default_rng(1))

        x, _, z = positions["lost"]
        low, high = ring_radius_band(test_settings.ring_overflow_hop)
        assert low <= math.hypot(x, z) <= high

    def test_importance_lifts_height(self) -> None:
        """Height stays within the random band shifted by importance."""
        nodes = [
            _spatial_node(PRINCIPAL, 0),
            _spatial_node("hub", 1, importance=1.0),
            _spatial_node("leaf", 1, importance=0.0),
        ]

        positions = compute_ring_positions(nodes, PRINCIPAL, np.random.default_rng(3))

        assert 10.0 - 20.0 <= positions["hub"][1] <= 10.0 + 20.0
        assert -10.0 - 20.0 <= positions["leaf"][1] <= -10.0 + 20.0

    def test_every_node_placed(self) -> None:
        nodes = [_spatial_node(f"n{i}", i % 4 or None) for i in range(20)]

        positions = compute_ring_positions(nodes, "absent", np.random.default_rng(5))

        assert set(positions) == {n.id for n in nodes}
