"""Spatial adapter and hop-ring layout for the depth and 3D views.

Spatial semantics:
- X/Y: force-directed position carried over from the flat graph
- Z (depth): median timestamp of the entity's records (0 in graph mode)
- Ring placement: hop distance from the principal, importance lifts nodes
"""

import logging
import math
from collections.abc import Sequence
from datetime import datetime

import numpy as np

from actornet.config import settings
from actornet.graph.hops import calculate_hop_distances, group_by_hop
from actornet.graph.metrics import (
    calculate_importance,
    calculate_link_strength,
    hop_opacity,
    importance_to_radius,
    is_weak_link,
    timestamp_to_depth,
)
from actornet.models.graph import (
    Bounds,
    Position3D,
    SpatialGraphData,
    SpatialLink,
    SpatialNode,
    TopGraph,
    ViewMode,
)
from actornet.models.relationship import RelationshipRecord, parse_timestamp

logger = logging.getLogger(__name__)


def _node_timestamps(records: Sequence[RelationshipRecord]) -> dict[str, list[str]]:
    """Parseable timestamps per entity, in chronological order."""
    stamps: dict[str, list[tuple[datetime, str]]] = {}
    for record in records:
        if not record.is_valid:
            continue
        parsed = parse_timestamp(record.timestamp)
        if parsed is None:
            continue
        stamps.setdefault(record.actor, []).append((parsed, record.timestamp))
        if record.target != record.actor:
            stamps.setdefault(record.target, []).append((parsed, record.timestamp))
    return {
        name: [raw for _, raw in sorted(values, key=lambda item: item[0])]
        for name, values in stamps.items()
    }


def _bounds(nodes: Sequence[SpatialNode]) -> Bounds:
    if not nodes:
        return Bounds()
    return Bounds(
        min_x=min(n.x for n in nodes),
        max_x=max(n.x for n in nodes),
        min_y=min(n.y for n in nodes),
        max_y=max(n.y for n in nodes),
        min_z=min(n.z for n in nodes),
        max_z=max(n.z for n in nodes),
    )


def adapt_to_spatial_graph(
    graph: TopGraph,
    records: Sequence[RelationshipRecord],
    mode: ViewMode = ViewMode.GRAPH,
    principal: str | None = None,
    hop_distances: dict[str, int] | None = None,
) -> SpatialGraphData:
    """
    Derive spatial nodes and links from a positioned flat graph.

    Non-destructive: the flat graph is read, never modified. In depth and
    spatial modes each node's Z is the depth of its median timestamp.
    """
    principal = principal or settings.principal_entity
    if hop_distances is None:
        hop_distances = calculate_hop_distances(graph.node_ids, graph.links, principal)

    stamps = _node_timestamps(records)
    max_connections = max((n.connections for n in graph.nodes), default=1)

    nodes: list[SpatialNode] = []
    for node in graph.nodes:
        sorted_stamps = stamps.get(node.id, [])
        z = 0.0
        if mode != ViewMode.GRAPH and sorted_stamps:
            z = timestamp_to_depth(sorted_stamps[len(sorted_stamps) // 2])

        importance = calculate_importance(node.connections, max_connections)
        hop = hop_distances.get(node.id)
        nodes.append(
            SpatialNode(
                id=node.id,
                connections=node.connections,
                x=node.x if node.x is not None else 0.0,
                y=node.y if node.y is not None else 0.0,
                z=z,
                importance=importance,
                hop_distance=hop,
                earliest_timestamp=sorted_stamps[0] if sorted_stamps else None,
                latest_timestamp=sorted_stamps[-1] if sorted_stamps else None,
                radius=importance_to_radius(importance),
                opacity=hop_opacity(hop),
            )
        )

    by_id = {n.id: n for n in nodes}
    max_link_count = max((l.count for l in graph.links), default=0)
    links: list[SpatialLink] = []
    for link in graph.links:
        source = by_id.get(link.source)
        target = by_id.get(link.target)
        strength = calculate_link_strength(link.count, max_link_count)
        links.append(
            SpatialLink(
                source=link.source,
                target=link.target,
                count=link.count,
                strength=strength,
                is_weak_link=is_weak_link(strength),
                source_position=(source.x, source.y, source.z) if source else (0.0, 0.0, 0.0),
                target_position=(target.x, target.y, target.z) if target else (0.0, 0.0, 0.0),
            )
        )

    parsed = [p for p in (parse_timestamp(r.timestamp) for r in records) if p is not None]

    return SpatialGraphData(
        nodes=nodes,
        links=links,
        bounds=_bounds(nodes),
        earliest=min(parsed) if parsed else None,
        latest=max(parsed) if parsed else None,
    )


def ring_radius_band(
    hop: int,
    spacing: float | None = None,
    jitter: float | None = None,
    variance: float | None = None,
) -> tuple[float, float]:
    """Planar distance range a node on ring ``hop`` can land in."""
    spacing = spacing if spacing is not None else settings.ring_hop_spacing
    jitter = jitter if jitter is not None else settings.ring_radius_jitter
    variance = variance if variance is not None else settings.ring_variance
    return (hop * spacing - variance / 2, hop * spacing + jitter + variance / 2)


def compute_ring_positions(
    nodes: Sequence[SpatialNode],
    principal: str | None = None,
    rng: np.random.Generator | None = None,
) -> dict[str, Position3D]:
    """
    Place nodes on concentric rings by hop distance.

    The principal sits at the origin. Each ring lies in the X/Z plane with
    entities spread at even angles, the ring rotated by its hop so rings
    don't line up. Y is random height plus a lift for important nodes.
    Unreachable nodes share the overflow ring.
    """
    principal = principal or settings.principal_entity
    rng = rng if rng is not None else np.random.default_rng()

    spacing = settings.ring_hop_spacing
    jitter = settings.ring_radius_jitter
    variance = settings.ring_variance
    height_variance = settings.ring_height_variance
    bias = settings.ring_importance_bias

    by_id = {n.id: n for n in nodes}
    distances = {n.id: n.hop_distance for n in nodes if n.hop_distance is not None}
    groups = group_by_hop(by_id, distances, settings.ring_overflow_hop)

    positions: dict[str, Position3D] = {}
    if principal in by_id:
        positions[principal] = (0.0, 0.0, 0.0)

    for hop, members in groups.items():
        if hop == 0:
            continue
        radius = hop * spacing + rng.random() * jitter
        count = len(members)
        for i, node_id in enumerate(members):
            if node_id in positions:
                continue
            angle = (i / count) * math.pi * 2 + hop * settings.ring_rotation_step
            radial = radius + (rng.random() - 0.5) * variance
            height = (rng.random() - 0.5) * height_variance
            y = height + (by_id[node_id].importance - 0.5) * bias
            positions[node_id] = (math.cos(angle) * radial, y, math.sin(angle) * radial)

    logger.debug(f"Ring layout: {len(positions)} nodes on {len(groups)} rings")
    return positions
