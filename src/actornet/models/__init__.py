"""Actornet data models."""

from actornet.models.filters import FilterState
from actornet.models.graph import (
    UNKNOWN_LOCATION,
    VIEW_MODES,
    Bounds,
    BubbleNode,
    ConnectionGroup,
    CooccurrenceLink,
    CooccurrenceNetwork,
    CooccurrencePerson,
    EntitySummary,
    GraphNode,
    Link,
    LocationBucket,
    LocationIndex,
    SpatialGraphData,
    SpatialLink,
    SpatialNode,
    TopGraph,
    ViewMode,
    ViewModeConfig,
    pair_key,
)
from actornet.models.relationship import RelationshipRecord, parse_timestamp
from actornet.models.search import (
    Actor,
    DeepSearchResult,
    DocumentSummary,
    DocumentView,
    Excerpt,
    Stats,
    TagCluster,
)

__all__ = [
    "RelationshipRecord",
    "parse_timestamp",
    "FilterState",
    # Graph
    "ViewMode",
    "ViewModeConfig",
    "VIEW_MODES",
    "pair_key",
    "GraphNode",
    "Link",
    "TopGraph",
    "EntitySummary",
    "ConnectionGroup",
    "UNKNOWN_LOCATION",
    "LocationBucket",
    "LocationIndex",
    "CooccurrencePerson",
    "CooccurrenceLink",
    "CooccurrenceNetwork",
    "BubbleNode",
    "SpatialNode",
    "SpatialLink",
    "Bounds",
    "SpatialGraphData",
    # Search
    "Actor",
    "DocumentSummary",
    "DocumentView",
    "Excerpt",
    "DeepSearchResult",
    "TagCluster",
    "Stats",
]
