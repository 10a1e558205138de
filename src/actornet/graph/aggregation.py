"""Aggregation of relationship records into entities, locations and graphs.

Everything here is a pure function of the input record list: no hidden
randomness or mutable state, so re-running on the same list yields
structurally identical output.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace

from actornet.config import settings
from actornet.graph.hops import calculate_hop_distances
from actornet.graph.locations import LocationResolver, default_resolver
from actornet.graph.metrics import calculate_link_strength
from actornet.models.graph import (
    UNKNOWN_LOCATION,
    ConnectionGroup,
    CooccurrenceLink,
    CooccurrenceNetwork,
    CooccurrencePerson,
    EntitySummary,
    GraphNode,
    Link,
    LocationBucket,
    LocationIndex,
    TopGraph,
    pair_key,
)
from actornet.models.relationship import RelationshipRecord

logger = logging.getLogger(__name__)


def valid_records(records: Iterable[RelationshipRecord]) -> list[RelationshipRecord]:
    """Drop records with an empty actor or target."""
    return [r for r in records if r.is_valid]


def _endpoints(record: RelationshipRecord) -> tuple[str, ...]:
    if record.actor == record.target:
        return (record.actor,)
    return (record.actor, record.target)


def count_connections(records: Iterable[RelationshipRecord]) -> dict[str, int]:
    """Number of distinct records mentioning each entity, in first-seen order."""
    counts: dict[str, int] = {}
    for record in valid_records(records):
        for name in _endpoints(record):
            counts[name] = counts.get(name, 0) + 1
    return counts


def select_top_entities(counts: dict[str, int], top_n: int) -> list[tuple[str, int]]:
    """Highest-count entities; ties keep first-seen order."""
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return ranked[:top_n]


def collapse_links(
    records: Iterable[RelationshipRecord],
    allowed: set[str] | None = None,
) -> list[Link]:
    """
    Collapse records into one link per unordered entity pair.

    Self-references are skipped. When ``allowed`` is given, only pairs with
    both endpoints in it are kept. Strength is multiplicity over the
    largest multiplicity in the result.
    """
    multiplicity: dict[tuple[str, str], int] = {}
    first_seen: dict[tuple[str, str], tuple[str, str]] = {}

    for record in valid_records(records):
        if record.actor == record.target:
            continue
        if allowed is not None and (record.actor not in allowed or record.target not in allowed):
            continue
        key = pair_key(record.actor, record.target)
        if key not in multiplicity:
            multiplicity[key] = 0
            first_seen[key] = (record.actor, record.target)
        multiplicity[key] += 1

    max_count = max(multiplicity.values(), default=0)
    return [
        Link(
            source=first_seen[key][0],
            target=first_seen[key][1],
            count=count,
            strength=calculate_link_strength(count, max_count),
        )
        for key, count in multiplicity.items()
    ]


def build_top_graph(
    records: Sequence[RelationshipRecord],
    top_n: int | None = None,
) -> TopGraph:
    """
    Flat graph of the ``top_n`` most-connected entities.

    Links with an endpoint outside the top set are omitted, not rerouted.
    """
    top_n = top_n if top_n is not None else settings.graph_top_n
    counts = count_connections(records)
    top = select_top_entities(counts, top_n)
    top_set = {name for name, _ in top}

    nodes = [GraphNode(id=name, connections=count) for name, count in top]
    links = collapse_links(records, allowed=top_set)

    logger.debug(
        f"Top graph: {len(nodes)}/{len(counts)} entities, {len(links)} links"
    )
    return TopGraph(nodes=nodes, links=links)


def summarize_entities(records: Iterable[RelationshipRecord]) -> dict[str, EntitySummary]:
    """Connection count, counterparties and date span for every entity."""
    counts: dict[str, int] = {}
    partners: dict[str, set[str]] = {}
    earliest: dict[str, str] = {}
    latest: dict[str, str] = {}

    for record in valid_records(records):
        for name in _endpoints(record):
            counts[name] = counts.get(name, 0) + 1
            partners.setdefault(name, set()).add(record.counterparty(name))
            ts = record.timestamp
            if ts:
                if name not in earliest or ts < earliest[name]:
                    earliest[name] = ts
                if name not in latest or ts > latest[name]:
                    latest[name] = ts

    return {
        name: EntitySummary(
            name=name,
            connection_count=count,
            counterparties=frozenset(partners[name]),
            earliest_timestamp=earliest.get(name),
            latest_timestamp=latest.get(name),
        )
        for name, count in counts.items()
    }


def group_connections(
    records: Iterable[RelationshipRecord],
    focal: str,
) -> list[ConnectionGroup]:
    """
    Records touching ``focal`` grouped by counterparty.

    Groups are sorted by descending record count; ties keep input order.
    """
    groups: dict[str, ConnectionGroup] = {}

    for record in valid_records(records):
        if not record.involves(focal):
            continue
        other = record.counterparty(focal)
        group = groups.get(other)
        if group is None:
            group = ConnectionGroup(counterparty=other)
            groups[other] = group
        group.relationships.append(record)

        ts = record.timestamp
        if ts:
            if group.earliest_date is None or ts < group.earliest_date:
                group.earliest_date = ts
            if group.latest_date is None or ts > group.latest_date:
                group.latest_date = ts

    return sorted(groups.values(), key=lambda g: g.count, reverse=True)


def records_for_entity(
    records: Iterable[RelationshipRecord],
    name: str,
) -> list[RelationshipRecord]:
    return [r for r in valid_records(records) if r.involves(name)]


def build_location_index(
    records: Iterable[RelationshipRecord],
    resolver: LocationResolver | None = None,
) -> LocationIndex:
    """
    Partition records into location buckets.

    Every valid record lands in exactly one bucket; records with no location
    or one that doesn't resolve to coordinates go to the Unknown bucket.
    """
    resolver = resolver or default_resolver
    located: dict[str, LocationBucket] = {}
    unknown = LocationBucket(name=UNKNOWN_LOCATION, coords=None, is_unknown=True)

    for record in valid_records(records):
        match = resolver.resolve(record.location)
        if match is None:
            bucket = unknown
        else:
            bucket = located.get(match.name)
            if bucket is None:
                bucket = LocationBucket(name=match.name, coords=match.coords)
                located[match.name] = bucket
        bucket.relationships.append(record)
        bucket.people.add(record.actor)
        bucket.people.add(record.target)

    ordered = sorted(located.values(), key=lambda b: b.event_count, reverse=True)
    return LocationIndex(
        located=ordered,
        unknown=unknown if unknown.relationships else None,
    )


def build_cooccurrence_network(records: Iterable[RelationshipRecord]) -> CooccurrenceNetwork:
    """
    Person network where each record links its actor and target.

    Used for the unlocated-events bubble map. Nodes are sorted by degree,
    links are one per unordered pair.
    """
    people: dict[str, CooccurrencePerson] = {}
    pairs: dict[tuple[str, str], CooccurrenceLink] = {}

    for record in valid_records(records):
        for name in _endpoints(record):
            person = people.get(name)
            if person is None:
                person = CooccurrencePerson(name=name)
                people[name] = person
            person.connections += 1
            person.relationships.append(record)

        if record.actor == record.target:
            continue
        key = pair_key(record.actor, record.target)
        link = pairs.get(key)
        if link is None:
            link = CooccurrenceLink(source=key[0], target=key[1])
            pairs[key] = link
        link.relationships.append(record)

    nodes = sorted(people.values(), key=lambda p: p.connections, reverse=True)
    return CooccurrenceNetwork(nodes=nodes, links=list(pairs.values()))


def connected_to(links: Iterable[Link], name: str) -> set[str]:
    """Direct neighbours of ``name`` in a link list."""
    neighbours: set[str] = set()
    for link in links:
        if link.source == name:
            neighbours.add(link.target)
        elif link.target == name:
            neighbours.add(link.source)
    return neighbours


def search_nodes(nodes: Iterable[GraphNode], query: str, limit: int | None = None) -> list[GraphNode]:
    """Case-insensitive substring search over node names."""
    limit = limit if limit is not None else settings.node_search_limit
    q = query.strip().lower()
    if not q:
        return []
    return [n for n in nodes if q in n.id.lower()][:limit]


def apply_density_threshold(
    counts: dict[str, int],
    hop_distances: dict[str, int],
    min_density: int,
    principal: str | None = None,
) -> set[str]:
    """
    Entities whose connection count reaches ``min_density`` percent of the
    average count of their hop tier.

    Unreachable entities form their own tier. The comparison is inclusive
    and the principal is always kept. ``min_density`` of 0 keeps everyone.
    """
    if min_density <= 0:
        return set(counts)

    tiers: dict[int | None, list[int]] = {}
    for name, count in counts.items():
        tiers.setdefault(hop_distances.get(name), []).append(count)
    averages = {tier: sum(values) / len(values) for tier, values in tiers.items()}

    kept: set[str] = set()
    for name, count in counts.items():
        if name == principal:
            kept.add(name)
            continue
        average = averages[hop_distances.get(name)]
        if count * 100 >= min_density * average:
            kept.add(name)
    return kept


@dataclass
class Aggregation:
    """All record-derived structures for one recomputation cycle."""

    graph: TopGraph = field(default_factory=TopGraph)
    hop_distances: dict[str, int] = field(default_factory=dict)
    locations: LocationIndex = field(default_factory=LocationIndex)
    unlocated_network: CooccurrenceNetwork = field(default_factory=CooccurrenceNetwork)
    entities: dict[str, EntitySummary] = field(default_factory=dict)


def aggregate(
    records: Sequence[RelationshipRecord],
    principal: str | None = None,
    top_n: int | None = None,
    min_density: int = 0,
    resolver: LocationResolver | None = None,
) -> Aggregation:
    """Run every aggregation stage over one immutable record list."""
    principal = principal or settings.principal_entity
    records = valid_records(records)

    graph = build_top_graph(records, top_n=top_n)
    hop_distances = calculate_hop_distances(graph.node_ids, graph.links, principal)

    if min_density > 0:
        counts = {n.id: n.connections for n in graph.nodes}
        kept = apply_density_threshold(counts, hop_distances, min_density, principal)
        links = [l for l in graph.links if l.source in kept and l.target in kept]
        max_count = max((l.count for l in links), default=0)
        graph = TopGraph(
            nodes=[n for n in graph.nodes if n.id in kept],
            links=[
                replace(l, strength=calculate_link_strength(l.count, max_count))
                for l in links
            ],
        )
        # Pruning can remove the only short path to an entity, so distances are
        # recomputed on the graph that is actually shown.
        hop_distances = calculate_hop_distances(graph.node_ids, graph.links, principal)

    locations = build_location_index(records, resolver)
    unknown_records = locations.unknown.relationships if locations.unknown else []

    return Aggregation(
        graph=graph,
        hop_distances=hop_distances,
        locations=locations,
        unlocated_network=build_cooccurrence_network(unknown_records),
        entities=summarize_entities(records),
    )
