"""Layout engines: force-directed graph, hop rings, bubble map."""

from actornet.layout.bubble import BubbleViewport, layout_bubbles
from actornet.layout.force import ForceSimulation, compute_force_layout
from actornet.layout.spatial import (
    adapt_to_spatial_graph,
    compute_ring_positions,
    ring_radius_band,
)

__all__ = [
    "BubbleViewport",
    "ForceSimulation",
    "adapt_to_spatial_graph",
    "compute_force_layout",
    "compute_ring_positions",
    "layout_bubbles",
    "ring_radius_band",
]
