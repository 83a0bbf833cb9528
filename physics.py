# physics.py
"""
Force-directed / hierarchical layout engine that renders onto a display surface.

A ``ForceNetwork`` owns node positions for one ``FoodGraph`` and draws them on
a surface (anything with ``draw(network)`` and ``release()``). It takes the
nested options mapping produced by ``layout_options`` and exposes a one-shot
``stabilize()``. The solver kind is fixed for the lifetime of an instance.
"""

import logging
import math
from collections import deque
from typing import Dict, Optional

from PyQt5.QtCore import QPointF

from food_graph import FoodGraph
from layout_options import STABILIZATION_ITERATIONS, HierarchyDefaults
from utils_geom import (
    circle_point, circle_radius_for, hash01, v_add, v_dist
)

logger = logging.getLogger(__name__)

TIMESTEP = 0.5
MAX_VELOCITY = 50.0
MIN_VELOCITY = 0.1
MIN_DISTANCE = 1.0          # clamp for coincident nodes in the repulsion term
SEED_SPACING = 100.0
GOLDEN_ANGLE = math.pi * (3.0 - math.sqrt(5.0))


class RendererError(RuntimeError):
    pass


class SolverChangeError(RendererError):
    """The requested options need a different solver than this instance runs."""


def solver_of(options) -> str:
    if options.get("layout", {}).get("hierarchical", {}).get("enabled"):
        return "hierarchical"
    return options.get("physics", {}).get("solver", "barnesHut")


class ForceNetwork:
    def __init__(self, surface, graph: FoodGraph, options: dict):
        self._surface = surface
        self._destroyed = False
        self._solver = solver_of(options)
        self.options: dict = {}
        self.graph = FoodGraph()
        self.positions: Dict[str, QPointF] = {}
        self.velocities: Dict[str, QPointF] = {}
        self.last_iterations = 0

        self._apply_options(options)
        self.set_data(graph)

    # --------------------------
    # Small helpers
    # --------------------------
    def _check_alive(self):
        if self._destroyed:
            raise RendererError("Network has been destroyed.")

    def _apply_options(self, options: dict):
        self.options = options
        physics = options.get("physics", {})
        self._params = dict(physics.get(self._solver, {}))
        self._physics_enabled = bool(physics.get("enabled", True)) and self._solver != "hierarchical"
        stab = physics.get("stabilization", {})
        self._max_iterations = int(stab.get("iterations", STABILIZATION_ITERATIONS))
        self._hier = options.get("layout", {}).get("hierarchical", {})

    def _seed_position(self, name: str, order: int, total: int) -> QPointF:
        if self.options.get("layout", {}).get("initial") == "circle":
            return circle_point(QPointF(0, 0), circle_radius_for(total, SEED_SPACING), order, total)

        # Next to an already placed neighbour, else on a golden-angle spiral
        for e in self.graph.edges:
            other = e.target if e.source == name else (e.source if e.target == name else None)
            if other is not None and other != name and other in self.positions:
                a = 2 * math.pi * hash01(name, other)
                off = QPointF(math.cos(a) * SEED_SPACING * 0.5, math.sin(a) * SEED_SPACING * 0.5)
                return v_add(self.positions[other], off)
        r = SEED_SPACING * math.sqrt(order + 0.5)
        a = order * GOLDEN_ANGLE + 0.1 * hash01(name)
        return QPointF(r * math.cos(a), r * math.sin(a))

    # --------------------------
    # Data / options
    # --------------------------
    def set_data(self, graph: FoodGraph):
        """Replace nodes and edges in place; surviving nodes keep their positions."""
        self._check_alive()
        self.graph = graph
        names = graph.names()
        keep = set(names)
        for gone in [n for n in self.positions if n not in keep]:
            del self.positions[gone]
            self.velocities.pop(gone, None)
        for order, name in enumerate(names):
            if name not in self.positions:
                self.positions[name] = self._seed_position(name, order, len(names))
                self.velocities[name] = QPointF(0.0, 0.0)
        self.stabilize()

    def set_options(self, options: dict, stabilize: bool = True):
        """Apply options in place. Pass stabilize=False when a set_data call follows."""
        self._check_alive()
        wanted = solver_of(options)
        if wanted != self._solver:
            raise SolverChangeError(f"Cannot switch solver {self._solver} -> {wanted} in place.")
        self._apply_options(options)
        if stabilize:
            self.stabilize()

    @property
    def solver(self) -> str:
        return self._solver

    def edge_style(self) -> Optional[dict]:
        smooth = self.options.get("edges", {}).get("smooth", {})
        return smooth if smooth.get("enabled") else None

    # --------------------------
    # Physics
    # --------------------------
    def step(self) -> float:
        """One integration tick. Returns the largest node speed afterwards."""
        self._check_alive()
        names = list(self.positions)
        if not names:
            return 0.0
        G = float(self._params.get("gravitationalConstant", -2000.0))
        central = float(self._params.get("centralGravity", 0.3))
        k = float(self._params.get("springConstant", 0.04))
        rest = float(self._params.get("springLength", 95.0))
        damping = float(self._params.get("damping", 0.09))

        fx = {n: 0.0 for n in names}
        fy = {n: 0.0 for n in names}

        # Pairwise gravity (G < 0 pushes apart)
        for i in range(len(names)):
            a = names[i]
            pa = self.positions[a]
            for j in range(i + 1, len(names)):
                b = names[j]
                pb = self.positions[b]
                dx = pb.x() - pa.x()
                dy = pb.y() - pa.y()
                d = math.hypot(dx, dy)
                if d < MIN_DISTANCE:
                    ang = 2 * math.pi * hash01(a, b)
                    dx, dy, d = math.cos(ang) * MIN_DISTANCE, math.sin(ang) * MIN_DISTANCE, MIN_DISTANCE
                f = G / (d * d * d)
                fx[a] += f * dx; fy[a] += f * dy
                fx[b] -= f * dx; fy[b] -= f * dy

        # Springs along edges (loops carry no spring)
        for e in self.graph.edges:
            if e.isLoop():
                continue
            p1 = self.positions.get(e.source)
            p2 = self.positions.get(e.target)
            if p1 is None or p2 is None:
                continue
            dx = p1.x() - p2.x()
            dy = p1.y() - p2.y()
            L = max(math.hypot(dx, dy), 0.01)
            s = k * (rest - L) / L
            fx[e.source] += dx * s; fy[e.source] += dy * s
            fx[e.target] -= dx * s; fy[e.target] -= dy * s

        # Central gravity: constant pull toward the origin
        for n in names:
            p = self.positions[n]
            d = math.hypot(p.x(), p.y())
            if d > 0:
                fx[n] -= p.x() * central / d
                fy[n] -= p.y() * central / d

        top = 0.0
        for n in names:
            v = self.velocities.get(n, QPointF(0.0, 0.0))
            vx = v.x() + (fx[n] - damping * v.x()) * TIMESTEP
            vy = v.y() + (fy[n] - damping * v.y()) * TIMESTEP
            speed = math.hypot(vx, vy)
            if speed > MAX_VELOCITY:
                vx, vy = vx * MAX_VELOCITY / speed, vy * MAX_VELOCITY / speed
                speed = MAX_VELOCITY
            self.velocities[n] = QPointF(vx, vy)
            p = self.positions[n]
            self.positions[n] = QPointF(p.x() + vx * TIMESTEP, p.y() + vy * TIMESTEP)
            top = max(top, speed)
        return top

    def stabilize(self, iterations: Optional[int] = None) -> int:
        """
        Settle the current dataset and redraw. Force solvers run until the
        fastest node is below MIN_VELOCITY or the iteration cap; the
        hierarchical solver places levels in a single pass.
        """
        self._check_alive()
        if self._solver == "hierarchical":
            self._layout_hierarchical()
            count = 1 if self.positions else 0
        elif not self._physics_enabled or not self.positions:
            count = 0
        else:
            cap = self._max_iterations if iterations is None else max(1, int(iterations))
            for n in self.velocities:
                self.velocities[n] = QPointF(0.0, 0.0)
            count = 0
            while count < cap:
                count += 1
                if self.step() < MIN_VELOCITY:
                    break
        self.last_iterations = count
        logger.debug("Stabilized %d nodes in %d iterations (%s)", len(self.positions), count, self._solver)
        self._surface.draw(self)
        return count

    # --------------------------
    # Hierarchical placement
    # --------------------------
    def _levels_directed(self):
        names = self.graph.names()
        level = {n: 0 for n in names}
        # Longest-path relaxation; cycles are cut off after len(names) passes
        for _ in range(len(names)):
            changed = False
            for e in self.graph.edges:
                if e.isLoop():
                    continue
                if level[e.target] < level[e.source] + 1:
                    level[e.target] = level[e.source] + 1
                    changed = True
            if not changed:
                break
        return level

    def _levels_hubsize(self):
        names = self.graph.names()
        adj = {n: set() for n in names}
        for e in self.graph.edges:
            if not e.isLoop():
                adj[e.source].add(e.target)
                adj[e.target].add(e.source)
        level = {}
        order = {n: i for i, n in enumerate(names)}
        while len(level) < len(names):
            root = max((n for n in names if n not in level), key=lambda n: (len(adj[n]), -order[n]))
            level[root] = 0
            queue = deque([root])
            while queue:
                u = queue.popleft()
                for w in sorted(adj[u], key=order.get):
                    if w not in level:
                        level[w] = level[u] + 1
                        queue.append(w)
        return level

    def _layout_hierarchical(self):
        if not self.positions:
            return
        method = self._hier.get("sortMethod", "directed")
        level = self._levels_hubsize() if method == "hubsize" else self._levels_directed()
        sep = float(self._hier.get("levelSeparation", HierarchyDefaults.level_separation))
        spacing = float(self._hier.get("nodeSpacing", HierarchyDefaults.node_spacing))
        direction = self._hier.get("direction", "UD")

        rows = {}
        for name in self.graph.names():
            rows.setdefault(level[name], []).append(name)
        for lv, members in rows.items():
            m = len(members)
            for i, name in enumerate(members):
                across = (i - (m - 1) / 2.0) * spacing
                along = lv * sep
                if direction == "UD":
                    p = QPointF(across, along)
                elif direction == "DU":
                    p = QPointF(across, -along)
                elif direction == "LR":
                    p = QPointF(along, across)
                else:
                    p = QPointF(-along, across)
                self.positions[name] = p
                self.velocities[name] = QPointF(0.0, 0.0)

    # --------------------------
    # Getters / lifecycle
    # --------------------------
    def getPosition(self, name: str) -> QPointF:
        return self.positions[name]

    def get_bounding_box(self):
        if not self.positions:
            return (0.0, 0.0, 0.0, 0.0)
        xs = [p.x() for p in self.positions.values()]
        ys = [p.y() for p in self.positions.values()]
        return (min(xs), min(ys), max(xs), max(ys))

    def spread(self) -> float:
        # Largest pairwise distance; a cheap "did the layout collapse" check
        pts = list(self.positions.values())
        best = 0.0
        for i in range(len(pts)):
            for j in range(i + 1, len(pts)):
                best = max(best, v_dist(pts[i], pts[j]))
        return best

    def is_destroyed(self) -> bool:
        return self._destroyed

    def destroy(self):
        if self._destroyed:
            return
        self._destroyed = True
        try:
            self._surface.release()
        finally:
            self._surface = None
            self.positions.clear()
            self.velocities.clear()
