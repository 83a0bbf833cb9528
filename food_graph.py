# food_graph.py

import logging
from typing import Dict, Iterable, List, Optional

from creature import Creature, DEFAULT_COLOR, BLACK_TEXT, WHITE_TEXT
from node import Node, CREATURE, FOOD
from edge import Edge

logger = logging.getLogger(__name__)


def text_color_for(fill: str) -> str:
    """
    Binary contrast rule: black text on the default gray, white on anything else.

    This is not a luminance test. Light custom fills (e.g. "#ffffff") get
    white text and become hard to read.
    """
    return BLACK_TEXT if (fill or "").lower() == DEFAULT_COLOR else WHITE_TEXT


class FoodGraph:
    """Derived node/edge sets. Nodes are unique by name, edges are not deduplicated."""

    def __init__(self):
        self.nodes: Dict[str, Node] = {}
        self.edges: List[Edge] = []

    def _add_node(self, node: Node) -> bool:
        if node.getName() in self.nodes:
            return False
        self.nodes[node.getName()] = node
        return True

    def node(self, name: str) -> Optional[Node]:
        return self.nodes.get(name)

    def getNodes(self):
        return list(self.nodes.values())

    def getEdges(self):
        return list(self.edges)

    def names(self):
        return list(self.nodes.keys())

    def get_stats(self):
        return {
            "nodes": len(self.nodes),
            "creatures": sum(1 for n in self.nodes.values() if not n.isLeafFood()),
            "leaf_food": sum(1 for n in self.nodes.values() if n.isLeafFood()),
            "edges": len(self.edges),
            "loops": sum(1 for e in self.edges if e.isLoop()),
        }

    def __eq__(self, other) -> bool:
        if not isinstance(other, FoodGraph):
            return NotImplemented
        return list(self.nodes.items()) == list(other.nodes.items()) and self.edges == other.edges

    def __repr__(self):
        return f"FoodGraph(nodes={len(self.nodes)}, edges={len(self.edges)})"


def _fields(record):
    # Accept Creature objects and plain dicts (records adopted from an import)
    if isinstance(record, Creature):
        return record.name, record.eats, record.color
    return record["name"], record.get("eats", ()), record.get("color", DEFAULT_COLOR)


def build_graph(creatures: Iterable) -> FoodGraph:
    """
    Map creature records to a FoodGraph.

    Records are visited in store order and the first sighting of a name fixes
    its node: a creature seen first keeps its own color, a name first seen as
    prey becomes a gray leaf food node even if its creature record comes later.
    Every (creature, prey) pair yields one prey -> predator edge, duplicates and
    self-loops included.
    """
    graph = FoodGraph()
    for record in creatures:
        name, eats, color = _fields(record)
        color = color or DEFAULT_COLOR
        graph._add_node(Node(name, color, text_color_for(color), CREATURE))

        for food in eats:
            graph._add_node(Node(food, DEFAULT_COLOR, BLACK_TEXT, FOOD))
            graph.edges.append(Edge(food, name))

    logger.debug("Built graph: %s", graph)
    return graph
