# edge.py
from __future__ import annotations
from typing import Tuple


class Edge:
    """Directed prey -> predator link. Loops are allowed (a creature eating itself)."""
    __slots__ = ("_prey", "_predator")

    def __init__(self, prey: str, predator: str):
        self._prey = prey
        self._predator = predator

    # --- Getters ---
    def getPrey(self) -> str: return self._prey
    def getPredator(self) -> str: return self._predator
    def isLoop(self) -> bool: return self._prey == self._predator

    # Renderer-facing aliases (arrow points from -> to)
    @property
    def source(self) -> str: return self._prey
    @property
    def target(self) -> str: return self._predator

    def key(self) -> Tuple[str, str]:
        return (self._prey, self._predator)

    def __eq__(self, other) -> bool:
        return isinstance(other, Edge) and self.key() == other.key()

    def __hash__(self) -> int:
        return hash(self.key())

    def __repr__(self):
        return f"E({self._prey} -> {self._predator})"
