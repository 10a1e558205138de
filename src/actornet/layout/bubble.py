"""Bubble map layout for the person network of unlocated events."""

import logging
import math
from dataclasses import dataclass

import numpy as np

from actornet.config import settings
from actornet.models.graph import BubbleNode, CooccurrenceNetwork

logger = logging.getLogger(__name__)

SPIRAL_ANGLE_STEP = 0.5
SPIRAL_START_RADIUS = 50.0
SPIRAL_RADIUS_STEP = 3.0
REPULSION_FACTOR = 0.3
# Each side of a pair takes half the correction, closing the overlap in one step.
SETTLE_FACTOR = 0.5
SETTLE_PASSES = 200
# Pixels of gap a settled pair may still be short by.
SETTLE_SLACK = 1.0
MAX_BUBBLE_RADIUS = 35.0


def bubble_radius(connections: int) -> float:
    return min(math.sqrt(connections) * 6 + 8, MAX_BUBBLE_RADIUS)


def _separate(
    x: np.ndarray,
    y: np.ndarray,
    radii: np.ndarray,
    gap: float,
    factor: float,
    slack: float = 0.0,
) -> bool:
    """One pairwise push pass in place. Returns True if any pair was closer than allowed.

    Pairs within ``slack`` of their minimum distance are left alone.
    """
    moved = False
    for i in range(len(x) - 1):
        dx = x[i + 1:] - x[i]
        dy = y[i + 1:] - y[i]
        dist = np.sqrt(dx * dx + dy * dy)
        dist[dist == 0] = 1.0
        min_dist = radii[i] + radii[i + 1:] + gap
        overlapping = dist < min_dist - slack
        if not overlapping.any():
            continue
        moved = True
        force = np.where(overlapping, (min_dist - dist) / dist * factor, 0.0)
        x[i] -= (dx * force).sum()
        y[i] -= (dy * force).sum()
        x[i + 1:] += dx * force
        y[i + 1:] += dy * force
    return moved


def layout_bubbles(
    network: CooccurrenceNetwork,
    iterations: int | None = None,
    canvas_size: float | None = None,
    gap: float | None = None,
    center_pull: float | None = None,
) -> list[BubbleNode]:
    """
    Position one circle per person without gross overlap.

    Nodes start on an expanding spiral in network order, then relax for a
    fixed number of iterations: everyone drifts slightly toward the canvas
    center, then overlapping pairs push apart. A short settling phase with
    no center pull follows, so crowded hubs end up separated. Deterministic
    for a given network.
    """
    iterations = iterations if iterations is not None else settings.bubble_iterations
    canvas_size = canvas_size if canvas_size is not None else settings.bubble_canvas_size
    gap = gap if gap is not None else settings.bubble_gap
    center_pull = center_pull if center_pull is not None else settings.bubble_center_pull

    n = len(network.nodes)
    if n == 0:
        return []

    center = canvas_size / 2
    index = np.arange(n)
    angles = index * SPIRAL_ANGLE_STEP
    spiral = SPIRAL_START_RADIUS + index * SPIRAL_RADIUS_STEP
    x = center + np.cos(angles) * spiral
    y = center + np.sin(angles) * spiral
    radii = np.array([bubble_radius(p.connections) for p in network.nodes])

    for _ in range(iterations):
        x += (center - x) * center_pull
        y += (center - y) * center_pull
        _separate(x, y, radii, gap, REPULSION_FACTOR)

    settled = 0
    if iterations > 0:
        while settled < SETTLE_PASSES and _separate(x, y, radii, gap, SETTLE_FACTOR, SETTLE_SLACK):
            settled += 1

    logger.debug(f"Bubble layout: {n} nodes, {iterations} iterations, {settled} settling passes")
    return [
        BubbleNode(
            name=person.name,
            connections=person.connections,
            x=float(x[i]),
            y=float(y[i]),
            radius=float(radii[i]),
        )
        for i, person in enumerate(network.nodes)
    ]


def worst_overlap(nodes: list[BubbleNode]) -> float:
    """Largest fraction by which any pair's radii overlap (0 = none)."""
    worst = 0.0
    for i, a in enumerate(nodes):
        for b in nodes[i + 1:]:
            dist = math.hypot(a.x - b.x, a.y - b.y)
            reach = a.radius + b.radius
            if dist < reach:
                worst = max(worst, (reach - dist) / min(a.radius, b.radius))
    return worst


def find_bubble(nodes: list[BubbleNode], x: float, y: float) -> BubbleNode | None:
    """Bubble containing a canvas point, for click selection."""
    for node in nodes:
        if (node.x - x) ** 2 + (node.y - y) ** 2 < node.radius ** 2:
            return node
    return None


@dataclass
class BubbleViewport:
    """Zoom and pan of the bubble canvas."""

    zoom: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0

    def focus_on(
        self,
        node: BubbleNode,
        width: float,
        height: float,
        zoom: float | None = None,
    ) -> "BubbleViewport":
        """Viewport that centers ``node`` in a ``width`` x ``height`` canvas."""
        zoom = zoom if zoom is not None else settings.bubble_zoom_level
        return BubbleViewport(
            zoom=zoom,
            pan_x=width / 2 - node.x * zoom,
            pan_y=height / 2 - node.y * zoom,
        )

    def interpolate(self, target: "BubbleViewport", t: float) -> "BubbleViewport":
        return BubbleViewport(
            zoom=self.zoom + (target.zoom - self.zoom) * t,
            pan_x=self.pan_x + (target.pan_x - self.pan_x) * t,
            pan_y=self.pan_y + (target.pan_y - self.pan_y) * t,
        )
