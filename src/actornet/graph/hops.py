"""Breadth-first hop distances from the principal entity."""

import logging
from collections import deque
from collections.abc import Iterable

from actornet.models.graph import Link

logger = logging.getLogger(__name__)


def build_adjacency(
    node_ids: Iterable[str],
    links: Iterable[Link | tuple[str, str]],
) -> dict[str, set[str]]:
    """Undirected adjacency sets restricted to the given nodes."""
    adjacency: dict[str, set[str]] = {node_id: set() for node_id in node_ids}
    for link in links:
        if isinstance(link, Link):
            source, target = link.source, link.target
        else:
            source, target = link
        if source in adjacency and target in adjacency:
            adjacency[source].add(target)
            adjacency[target].add(source)
    return adjacency


def calculate_hop_distances(
    node_ids: Iterable[str],
    links: Iterable[Link | tuple[str, str]],
    principal: str,
) -> dict[str, int]:
    """
    Shortest hop count from ``principal`` to every reachable node.

    Unreachable nodes are absent from the result. Uses an iterative queue,
    so graph size is not bounded by recursion depth. Order within one
    distance tier is not significant.
    """
    adjacency = build_adjacency(node_ids, links)
    if principal not in adjacency:
        logger.debug(f"Principal {principal!r} not in graph, no hop distances")
        return {}

    distances: dict[str, int] = {principal: 0}
    queue: deque[str] = deque([principal])

    while queue:
        current = queue.popleft()
        next_distance = distances[current] + 1
        for neighbor in adjacency[current]:
            if neighbor not in distances:
                distances[neighbor] = next_distance
                queue.append(neighbor)

    return distances


def group_by_hop(
    node_ids: Iterable[str],
    distances: dict[str, int],
    overflow_hop: int,
) -> dict[int, list[str]]:
    """Group nodes by hop distance; unreachable nodes go to ``overflow_hop``."""
    groups: dict[int, list[str]] = {}
    for node_id in node_ids:
        hop = distances.get(node_id, overflow_hop)
        groups.setdefault(hop, []).append(node_id)
    return groups
