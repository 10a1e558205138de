"""Derived graph structures: nodes, links, groups, buckets."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from actornet.models.relationship import RelationshipRecord

Position3D = tuple[float, float, float]


class ViewMode(str, Enum):
    """Graph rendering modes."""

    GRAPH = "graph"  # Flat 2D force layout, z = 0
    DEPTH = "depth"  # 2.5D, time as depth
    SPATIAL = "spatial"  # Full 3D, hop rings + time depth


@dataclass(frozen=True)
class ViewModeConfig:
    id: ViewMode
    label: str
    description: str
    requires_webgl: bool


VIEW_MODES: tuple[ViewModeConfig, ...] = (
    ViewModeConfig(ViewMode.GRAPH, "2D", "Classic force-directed graph", False),
    ViewModeConfig(ViewMode.DEPTH, "2.5D", "Time as depth", True),
    ViewModeConfig(ViewMode.SPATIAL, "3D", "Full spatial exploration", True),
)


def pair_key(a: str, b: str) -> tuple[str, str]:
    """Canonical key for an unordered entity pair."""
    return (a, b) if a <= b else (b, a)


@dataclass
class GraphNode:
    """
    Entity node in the flat graph.

    Position fields are owned by the force simulation while it runs.
    ``fx``/``fy`` pin the node (principal, or a node being dragged).
    """

    id: str
    connections: int
    x: float | None = None
    y: float | None = None
    fx: float | None = None
    fy: float | None = None

    @property
    def is_pinned(self) -> bool:
        return self.fx is not None and self.fy is not None


@dataclass(frozen=True)
class Link:
    """Unordered entity pair with the number of records collapsed onto it."""

    source: str
    target: str
    count: int = 1
    strength: float = 1.0

    @property
    def key(self) -> tuple[str, str]:
        return pair_key(self.source, self.target)

    def touches(self, name: str) -> bool:
        return self.source == name or self.target == name


@dataclass
class TopGraph:
    """Top-N entity graph for the flat view."""

    nodes: list[GraphNode] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)

    @property
    def node_ids(self) -> list[str]:
        return [n.id for n in self.nodes]

    def get_node(self, node_id: str) -> GraphNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None


@dataclass(frozen=True)
class EntitySummary:
    """On-demand attributes of an entity over the current record set."""

    name: str
    connection_count: int
    counterparties: frozenset[str]
    earliest_timestamp: str | None
    latest_timestamp: str | None


@dataclass
class ConnectionGroup:
    """All records between a focal entity and one counterparty."""

    counterparty: str
    relationships: list[RelationshipRecord] = field(default_factory=list)
    earliest_date: str | None = None
    latest_date: str | None = None

    @property
    def count(self) -> int:
        return len(self.relationships)


UNKNOWN_LOCATION = "Unknown/Unspecified"


@dataclass
class LocationBucket:
    """Records whose location normalizes to the same display name."""

    name: str
    coords: tuple[float, float] | None
    relationships: list[RelationshipRecord] = field(default_factory=list)
    people: set[str] = field(default_factory=set)
    is_unknown: bool = False

    @property
    def event_count(self) -> int:
        return len(self.relationships)


@dataclass
class LocationIndex:
    """Partition of a record set into located buckets plus the unknown bucket."""

    located: list[LocationBucket] = field(default_factory=list)  # By event count desc
    unknown: LocationBucket | None = None

    @property
    def buckets(self) -> list[LocationBucket]:
        return self.located + ([self.unknown] if self.unknown else [])

    @property
    def total_located_events(self) -> int:
        return sum(b.event_count for b in self.located)

    @property
    def total_unknown_events(self) -> int:
        return self.unknown.event_count if self.unknown else 0

    def get(self, name: str) -> LocationBucket | None:
        if name == UNKNOWN_LOCATION:
            return self.unknown
        for bucket in self.located:
            if bucket.name == name:
                return bucket
        return None


@dataclass
class CooccurrencePerson:
    name: str
    connections: int = 0
    relationships: list[RelationshipRecord] = field(default_factory=list)


@dataclass
class CooccurrenceLink:
    source: str
    target: str
    relationships: list[RelationshipRecord] = field(default_factory=list)


@dataclass
class CooccurrenceNetwork:
    """Person co-occurrence network built from unlocated records."""

    nodes: list[CooccurrencePerson] = field(default_factory=list)  # By degree desc
    links: list[CooccurrenceLink] = field(default_factory=list)

    def events_for(self, name: str) -> list[RelationshipRecord]:
        for node in self.nodes:
            if node.name == name:
                return list(node.relationships)
        return []


@dataclass
class BubbleNode:
    """Positioned circle in the co-occurrence bubble map."""

    name: str
    connections: int
    x: float
    y: float
    radius: float


@dataclass
class SpatialNode:
    """Entity node with derived spatial coordinates and metrics."""

    id: str
    connections: int
    x: float
    y: float
    z: float  # Time depth; always 0 in graph mode
    importance: float
    hop_distance: int | None  # None = unreachable from the principal
    earliest_timestamp: str | None
    latest_timestamp: str | None
    radius: float
    opacity: float

    @property
    def is_reachable(self) -> bool:
        return self.hop_distance is not None


@dataclass(frozen=True)
class SpatialLink:
    source: str
    target: str
    count: int
    strength: float
    is_weak_link: bool
    source_position: Position3D
    target_position: Position3D
    temporal_span: float = 0.0


@dataclass(frozen=True)
class Bounds:
    min_x: float = 0.0
    max_x: float = 0.0
    min_y: float = 0.0
    max_y: float = 0.0
    min_z: float = 0.0
    max_z: float = 0.0


@dataclass
class SpatialGraphData:
    nodes: list[SpatialNode] = field(default_factory=list)
    links: list[SpatialLink] = field(default_factory=list)
    bounds: Bounds = field(default_factory=Bounds)
    earliest: datetime | None = None
    latest: datetime | None = None

    def get_node(self, node_id: str) -> SpatialNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None
