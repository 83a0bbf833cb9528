# node.py
from creature import DEFAULT_COLOR, BLACK_TEXT

CREATURE = "creature"
FOOD = "food"       # leaf food item: only ever appears as prey


class Node:
    __slots__ = ("_name", "_fill", "_textColor", "_kind")

    def __init__(self, name: str, fill: str = DEFAULT_COLOR,
                 textColor: str = BLACK_TEXT, kind: str = CREATURE):
        self._name = name
        self._fill = fill
        self._textColor = textColor
        self._kind = kind

    # --- Getters ---
    def getName(self) -> str:
        return self._name

    def getLabel(self) -> str:
        return self._name

    def getFill(self) -> str:
        return self._fill

    def getTextColor(self) -> str:
        return self._textColor

    def getKind(self) -> str:
        return self._kind

    def isLeafFood(self) -> bool:
        return self._kind == FOOD

    def key(self):
        return (self._name, self._fill, self._textColor, self._kind)

    def __eq__(self, other) -> bool:
        return isinstance(other, Node) and self.key() == other.key()

    def __hash__(self) -> int:
        return hash(self.key())

    def __repr__(self) -> str:
        return f"N({self._name}, {self._fill}/{self._textColor})"
