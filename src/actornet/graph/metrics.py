"""Coordinate and metric transforms for graph views.

Spatial semantics:
- Z (depth): time, earlier dates further back
- Size: entity importance (log-scaled connection count)
- Link strength: record multiplicity relative to the strongest link
"""

import math
from datetime import date, datetime, timezone

from actornet.config import settings
from actornet.models.relationship import parse_timestamp

IMPORTANCE_FALLBACK = 0.5


def _epoch_seconds(value: datetime | date) -> float:
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def timestamp_to_depth(
    timestamp: str | None,
    window_start: date | None = None,
    window_end: date | None = None,
    depth_scale: float | None = None,
) -> float:
    """
    Map a timestamp onto the depth axis.

    The time window maps linearly onto [-depth_scale/2, depth_scale/2].
    Dates outside the window clamp to its edges. Missing or unparseable
    timestamps sit at the center (0).
    """
    window_start = window_start or settings.time_window_start
    window_end = window_end or settings.time_window_end
    depth_scale = depth_scale if depth_scale is not None else settings.depth_scale

    parsed = parse_timestamp(timestamp)
    if parsed is None:
        return 0.0

    start = _epoch_seconds(window_start)
    end = _epoch_seconds(window_end)
    if end <= start:
        return 0.0

    normalized = (_epoch_seconds(parsed) - start) / (end - start)
    clamped = max(0.0, min(1.0, normalized))
    return (clamped - 0.5) * depth_scale


def extract_year(timestamp: str | None) -> int | None:
    """Year of a timestamp for display, or None if undated."""
    parsed = parse_timestamp(timestamp)
    return parsed.year if parsed else None


def calculate_importance(count: int, max_count: int) -> float:
    """
    Node importance from connection count, log-scaled into [0, 1].

    Logarithmic scaling keeps a handful of hubs from dominating.
    """
    if max_count <= 1:
        return IMPORTANCE_FALLBACK

    log_val = math.log(max(count, 0) + 1)
    log_max = math.log(max_count + 1)
    return max(0.0, min(1.0, log_val / log_max))


def importance_to_radius(
    importance: float,
    min_radius: float | None = None,
    max_radius: float | None = None,
) -> float:
    """Map importance to a visual radius within [min_radius, max_radius]."""
    min_radius = min_radius if min_radius is not None else settings.min_node_radius
    max_radius = max_radius if max_radius is not None else settings.max_node_radius
    importance = max(0.0, min(1.0, importance))
    return min_radius + importance * (max_radius - min_radius)


def calculate_link_strength(count: int, max_count: int) -> float:
    """Link strength as the ratio to the strongest link, capped at 1."""
    if max_count <= 0:
        return 0.0
    return max(0.0, min(1.0, count / max_count))


def is_weak_link(strength: float, threshold: float | None = None) -> bool:
    threshold = threshold if threshold is not None else settings.weak_link_threshold
    return strength < threshold


def hop_opacity(hop_distance: int | None) -> float:
    """Fade nodes beyond three hops, never below 0.3."""
    if hop_distance is None:
        return 0.3
    if hop_distance <= 3:
        return 1.0
    return max(0.3, 1.0 - (hop_distance - 3) * 0.15)
