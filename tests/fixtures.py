"""Shared helpers for renderer and session tests."""

from creature import Creature, DEFAULT_COLOR
from food_graph import build_graph


class RecordingSurface:
    """Stand-in display surface: remembers what was drawn and whether it was released."""

    def __init__(self):
        self.draws = 0
        self.released = 0
        self.last_positions = None

    def draw(self, network):
        self.draws += 1
        self.last_positions = dict(network.positions)

    def release(self):
        self.released += 1


def sample_graph():
    return build_graph([
        Creature("Fox", ["Rabbit", "Mouse"], "#ff0000"),
        Creature("Owl", ["Mouse"], "#333333"),
        Creature("Rabbit", ["Grass"], DEFAULT_COLOR),
        Creature("Mouse", ["Grass", "Seeds"], "#999999"),
    ])
