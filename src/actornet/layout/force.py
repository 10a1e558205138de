"""2D force-directed layout for the flat graph view.

A d3-force style simulation: link springs, many-body repulsion, centering
and collision, integrated with velocity decay while ``alpha`` cools.
The principal entity is pinned at the viewport center; a dragged node is
pinned at the drag position until released.
"""

import logging
import math

import numpy as np

from actornet.config import settings
from actornet.models.graph import GraphNode, Link

logger = logging.getLogger(__name__)

ALPHA_MIN = 0.001
INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))


class ForceSimulation:
    """
    Iterative spring/repulsion relaxation over a fixed node set.

    Positions live in numpy arrays while the simulation runs and are
    written back to the GraphNode objects by ``run``/``write_back``.
    """

    def __init__(
        self,
        nodes: list[GraphNode],
        links: list[Link],
        principal: str | None = None,
        width: float | None = None,
        height: float | None = None,
        link_distance: float | None = None,
        link_strength: float | None = None,
        charge_strength: float | None = None,
        collide_radius: float | None = None,
        velocity_decay: float | None = None,
        seed: int | None = None,
    ) -> None:
        self.nodes = nodes
        self.principal = principal or settings.principal_entity
        self.width = width or settings.viewport_width
        self.height = height or settings.viewport_height
        self.link_distance = link_distance or settings.force_link_distance
        self.link_strength = link_strength or settings.force_link_strength
        self.charge_strength = charge_strength or settings.force_charge_strength
        self.collide_radius = collide_radius or settings.force_collide_radius
        self.velocity_decay = velocity_decay or settings.force_velocity_decay
        self._rng = np.random.default_rng(seed)

        self.alpha = 1.0
        self.alpha_target = 0.0
        self.alpha_decay = 1 - ALPHA_MIN ** (1 / 300)
        self.iterations = 0

        self._index = {node.id: i for i, node in enumerate(nodes)}
        n = len(nodes)
        self.x = np.zeros(n)
        self.y = np.zeros(n)
        self.vx = np.zeros(n)
        self.vy = np.zeros(n)
        self.fx = np.full(n, np.nan)
        self.fy = np.full(n, np.nan)

        cx, cy = self.center
        for i, node in enumerate(nodes):
            if node.x is None or node.y is None:
                # Phyllotaxis arrangement, like d3's initial placement
                radius = INITIAL_RADIUS * math.sqrt(0.5 + i)
                angle = i * INITIAL_ANGLE
                self.x[i] = cx + radius * math.cos(angle)
                self.y[i] = cy + radius * math.sin(angle)
            else:
                self.x[i] = node.x
                self.y[i] = node.y
            if node.fx is not None and node.fy is not None:
                self.fx[i] = node.fx
                self.fy[i] = node.fy

        if self.principal in self._index:
            i = self._index[self.principal]
            self.fx[i], self.fy[i] = cx, cy
            self.x[i], self.y[i] = cx, cy

        pairs = [
            (self._index[l.source], self._index[l.target])
            for l in links
            if l.source in self._index and l.target in self._index and l.source != l.target
        ]
        self._src = np.array([s for s, _ in pairs], dtype=int)
        self._tgt = np.array([t for _, t in pairs], dtype=int)
        degree = np.zeros(n)
        np.add.at(degree, self._src, 1)
        np.add.at(degree, self._tgt, 1)
        if pairs:
            self._bias = degree[self._src] / (degree[self._src] + degree[self._tgt])
        else:
            self._bias = np.zeros(0)

    @property
    def center(self) -> tuple[float, float]:
        return (self.width / 2, self.height / 2)

    @property
    def is_cooled(self) -> bool:
        return self.alpha < ALPHA_MIN and self.alpha_target < ALPHA_MIN

    def _jiggle(self, shape: tuple[int, ...] | int) -> np.ndarray:
        return (self._rng.random(shape) - 0.5) * 1e-6

    def _apply_links(self) -> None:
        if self._src.size == 0:
            return
        s, t = self._src, self._tgt
        dx = self.x[t] + self.vx[t] - self.x[s] - self.vx[s]
        dy = self.y[t] + self.vy[t] - self.y[s] - self.vy[s]
        zero = (dx == 0) & (dy == 0)
        if zero.any():
            dx[zero] = self._jiggle(int(zero.sum()))
        length = np.sqrt(dx * dx + dy * dy)
        factor = (length - self.link_distance) / length * self.alpha * self.link_strength
        dx *= factor
        dy *= factor
        np.subtract.at(self.vx, t, dx * self._bias)
        np.subtract.at(self.vy, t, dy * self._bias)
        np.add.at(self.vx, s, dx * (1 - self._bias))
        np.add.at(self.vy, s, dy * (1 - self._bias))

    def _apply_charge(self) -> None:
        n = self.x.size
        if n < 2:
            return
        dx = self.x[None, :] - self.x[:, None]
        dy = self.y[None, :] - self.y[:, None]
        coincident = (dx == 0) & (dy == 0)
        np.fill_diagonal(coincident, False)
        if coincident.any():
            dx[coincident] = self._jiggle(int(coincident.sum()))
        dist2 = dx * dx + dy * dy
        # Soften very close pairs (distanceMin = 1)
        dist2 = np.where(dist2 < 1, np.sqrt(dist2), dist2)
        np.fill_diagonal(dist2, np.inf)
        weight = self.charge_strength * self.alpha / dist2
        self.vx += (dx * weight).sum(axis=1)
        self.vy += (dy * weight).sum(axis=1)

    def _apply_center(self) -> None:
        if self.x.size == 0:
            return
        cx, cy = self.center
        self.x -= self.x.mean() - cx
        self.y -= self.y.mean() - cy

    def _apply_collision(self) -> None:
        n = self.x.size
        if n < 2:
            return
        px = self.x + self.vx
        py = self.y + self.vy
        dx = px[:, None] - px[None, :]
        dy = py[:, None] - py[None, :]
        dist2 = dx * dx + dy * dy
        min_dist = 2 * self.collide_radius
        overlap = dist2 < min_dist * min_dist
        np.fill_diagonal(overlap, False)
        if not overlap.any():
            return
        coincident = overlap & (dist2 == 0)
        if coincident.any():
            dx[coincident] = self._jiggle(int(coincident.sum()))
            dist2 = dx * dx + dy * dy
        length = np.sqrt(np.where(overlap, dist2, 1.0))
        factor = np.where(overlap, (min_dist - length) / length, 0.0)
        # Equal radii: each node of a pair takes half the correction
        self.vx += (dx * factor * 0.5).sum(axis=1)
        self.vy += (dy * factor * 0.5).sum(axis=1)

    def tick(self) -> None:
        """Advance the simulation by one step."""
        self.alpha += (self.alpha_target - self.alpha) * self.alpha_decay

        self._apply_links()
        self._apply_charge()
        self._apply_center()
        self._apply_collision()

        fixed = ~np.isnan(self.fx)
        free = ~fixed
        self.vx[free] *= 1 - self.velocity_decay
        self.vy[free] *= 1 - self.velocity_decay
        self.x[free] += self.vx[free]
        self.y[free] += self.vy[free]
        self.x[fixed] = self.fx[fixed]
        self.y[fixed] = self.fy[fixed]
        self.vx[fixed] = 0.0
        self.vy[fixed] = 0.0
        self.iterations += 1

    def run(self, max_iterations: int | None = None) -> list[GraphNode]:
        """Tick until cooled or ``max_iterations`` reached, then write back."""
        max_iterations = max_iterations if max_iterations is not None else settings.force_iterations
        for _ in range(max_iterations):
            if self.is_cooled:
                break
            self.tick()
        self.write_back()
        logger.debug(
            f"Force layout: {len(self.nodes)} nodes, {self.iterations} ticks, alpha={self.alpha:.4f}"
        )
        return self.nodes

    def write_back(self) -> None:
        for i, node in enumerate(self.nodes):
            node.x = float(self.x[i])
            node.y = float(self.y[i])
            pinned = not math.isnan(self.fx[i])
            node.fx = float(self.fx[i]) if pinned else None
            node.fy = float(self.fy[i]) if pinned else None

    def positions(self) -> dict[str, tuple[float, float]]:
        return {node.id: (float(self.x[i]), float(self.y[i])) for i, node in enumerate(self.nodes)}

    # ------------------------------------------------------------------
    # Drag interaction
    # ------------------------------------------------------------------

    def start_drag(self, node_id: str) -> None:
        """Pin a node where it is and reheat the simulation."""
        i = self._index[node_id]
        self.alpha_target = 0.3
        self.fx[i] = self.x[i]
        self.fy[i] = self.y[i]

    def drag_to(self, node_id: str, x: float, y: float) -> None:
        i = self._index[node_id]
        self.fx[i] = x
        self.fy[i] = y

    def end_drag(self, node_id: str) -> None:
        """Release a dragged node; the principal stays pinned."""
        i = self._index[node_id]
        self.alpha_target = 0.0
        if node_id != self.principal:
            self.fx[i] = np.nan
            self.fy[i] = np.nan


def compute_force_layout(
    nodes: list[GraphNode],
    links: list[Link],
    principal: str | None = None,
    seed: int | None = None,
    iterations: int | None = None,
) -> list[GraphNode]:
    """Run a full force simulation and return the positioned nodes."""
    simulation = ForceSimulation(nodes, links, principal=principal, seed=seed)
    return simulation.run(iterations)
