# layout_options.py
"""
User facing layout settings and their mapping to renderer options.

``GraphOptions`` is what the controls edit. ``configure()`` turns it into one
``LayoutConfig`` variant per mode, and ``LayoutConfig.to_options()`` produces
the nested options mapping the renderer consumes.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Union

DIRECTIONS = ("UD", "DU", "LR", "RL")
DIRECTION_LABELS = {
    "UD": "Top-down",
    "DU": "Bottom-up",
    "LR": "Left-right",
    "RL": "Right-left",
}
SORT_METHODS = ("directed", "hubsize")


class LayoutMode(Enum):
    DEFAULT = "default"
    HIERARCHICAL = "hierarchical"
    CIRCULAR = "circular"


@dataclass(frozen=True)
class PhysicsSettings:
    spring_length: float = 200.0
    spring_constant: float = 0.05
    central_gravity: float = 0.3
    # Magnitude only; emitted negative (attractive-negative convention)
    gravitational_constant: float = 2000.0


@dataclass(frozen=True)
class HierarchySettings:
    direction: str = "UD"
    sort_method: str = "directed"


@dataclass(frozen=True)
class GraphOptions:
    mode: LayoutMode = LayoutMode.DEFAULT
    physics: PhysicsSettings = field(default_factory=PhysicsSettings)
    layout: HierarchySettings = field(default_factory=HierarchySettings)


# --------------------------
# Renderer defaults (per solver)
# --------------------------
@dataclass(frozen=True)
class PhysicsDefaults:
    gravitational_constant: float = -2000.0
    central_gravity: float = 0.3
    spring_length: float = 95.0
    spring_constant: float = 0.04
    damping: float = 0.09


@dataclass(frozen=True)
class HierarchyDefaults:
    level_separation: float = 150.0
    node_spacing: float = 100.0


BARNES_HUT = PhysicsDefaults()
STABILIZATION_ITERATIONS = 1000


# --------------------------
# Typed updates (pure; only the named field changes)
# --------------------------
def _non_negative(value, what):
    v = float(value)
    if v < 0:
        raise ValueError(f"{what} must be >= 0, got {value!r}")
    return v


def set_mode(options: GraphOptions, mode) -> GraphOptions:
    return replace(options, mode=LayoutMode(mode))


def set_spring_length(options: GraphOptions, value) -> GraphOptions:
    return replace(options, physics=replace(options.physics, spring_length=_non_negative(value, "Spring length")))


def set_spring_constant(options: GraphOptions, value) -> GraphOptions:
    return replace(options, physics=replace(options.physics, spring_constant=_non_negative(value, "Spring constant")))


def set_central_gravity(options: GraphOptions, value) -> GraphOptions:
    return replace(options, physics=replace(options.physics, central_gravity=_non_negative(value, "Central gravity")))


def set_gravitational_constant(options: GraphOptions, value) -> GraphOptions:
    # UI passes the magnitude; a negative entry is taken as its magnitude
    return replace(options, physics=replace(options.physics, gravitational_constant=abs(float(value))))


def set_hierarchical_direction(options: GraphOptions, direction: str) -> GraphOptions:
    if direction not in DIRECTIONS:
        raise ValueError(f"Unknown hierarchical direction {direction!r}; expected one of {DIRECTIONS}")
    return replace(options, layout=replace(options.layout, direction=direction))


def set_hierarchical_sort_method(options: GraphOptions, method: str) -> GraphOptions:
    if method not in SORT_METHODS:
        raise ValueError(f"Unknown sort method {method!r}; expected one of {SORT_METHODS}")
    return replace(options, layout=replace(options.layout, sort_method=method))


# --------------------------
# Per-mode renderer configuration
# --------------------------
def _stabilization():
    return {"enabled": True, "iterations": STABILIZATION_ITERATIONS, "updateInterval": 25}


@dataclass(frozen=True)
class ForceLayout:
    """General purpose force-directed layout with the renderer's own defaults."""
    physics: PhysicsDefaults = BARNES_HUT

    solver = "barnesHut"

    def to_options(self) -> dict:
        p = self.physics
        return {
            "layout": {"hierarchical": {"enabled": False}},
            "physics": {
                "enabled": True,
                "solver": self.solver,
                self.solver: {
                    "gravitationalConstant": p.gravitational_constant,
                    "centralGravity": p.central_gravity,
                    "springLength": p.spring_length,
                    "springConstant": p.spring_constant,
                    "damping": p.damping,
                },
                "stabilization": _stabilization(),
            },
            "edges": {"arrows": "to", "smooth": {"enabled": False}},
            "nodes": {"shape": "box"},
        }


@dataclass(frozen=True)
class HierarchicalLayout:
    direction: str = "UD"
    sort_method: str = "directed"
    spacing: HierarchyDefaults = HierarchyDefaults()

    solver = "hierarchical"

    def axis(self) -> str:
        return "vertical" if self.direction in ("UD", "DU") else "horizontal"

    def to_options(self) -> dict:
        return {
            "layout": {
                "hierarchical": {
                    "enabled": True,
                    "direction": self.direction,
                    "sortMethod": self.sort_method,
                    "levelSeparation": self.spacing.level_separation,
                    "nodeSpacing": self.spacing.node_spacing,
                }
            },
            "physics": {"enabled": False, "solver": self.solver},
            "edges": {
                "arrows": "to",
                "smooth": {"enabled": True, "type": "cubicBezier",
                           "forceDirection": self.axis(), "roundness": 0.4},
            },
            "nodes": {"shape": "box"},
        }


@dataclass(frozen=True)
class CircularLayout:
    """Nodes seeded on a circle, then relaxed with the user's physics values."""
    physics: PhysicsSettings = PhysicsSettings()
    damping: float = 0.09

    solver = "repulsion"

    def to_options(self) -> dict:
        p = self.physics
        return {
            "layout": {"hierarchical": {"enabled": False}, "initial": "circle"},
            "physics": {
                "enabled": True,
                "solver": self.solver,
                self.solver: {
                    "springLength": p.spring_length,
                    "springConstant": p.spring_constant,
                    "centralGravity": p.central_gravity,
                    "gravitationalConstant": -abs(p.gravitational_constant),
                    "damping": self.damping,
                },
                "stabilization": _stabilization(),
            },
            "edges": {"arrows": "to", "smooth": {"enabled": False}},
            "nodes": {"shape": "box"},
        }


LayoutConfig = Union[ForceLayout, HierarchicalLayout, CircularLayout]


def configure(options: GraphOptions) -> LayoutConfig:
    if options.mode is LayoutMode.HIERARCHICAL:
        return HierarchicalLayout(options.layout.direction, options.layout.sort_method)
    if options.mode is LayoutMode.CIRCULAR:
        return CircularLayout(options.physics)
    return ForceLayout()
