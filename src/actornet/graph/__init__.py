"""Relationship aggregation, hop distances and metric transforms."""

from actornet.graph.aggregation import (
    Aggregation,
    aggregate,
    build_cooccurrence_network,
    build_location_index,
    build_top_graph,
    group_connections,
)
from actornet.graph.hops import calculate_hop_distances
from actornet.graph.locations import LocationResolver, normalize_location

__all__ = [
    "Aggregation",
    "aggregate",
    "build_top_graph",
    "build_location_index",
    "build_cooccurrence_network",
    "group_connections",
    "calculate_hop_distances",
    "LocationResolver",
    "normalize_location",
]
