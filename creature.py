# creature.py
from __future__ import annotations
from typing import Iterable, List, Tuple

DEFAULT_COLOR = "#f0f0f0"   # neutral gray: leaf food fill and contrast threshold
BLACK_TEXT = "#000000"
WHITE_TEXT = "#ffffff"


def parse_eats(text) -> List[str]:
    """
    Split a comma separated prey list. Tokens are trimmed and empty ones
    (stray or doubled commas) are dropped, so "a,,b" gives ["a", "b"].
    """
    if text is None:
        return []
    s = str(text).strip()
    if not s:
        return []
    return [tok.strip() for tok in s.split(",") if tok.strip()]


def format_eats(eats: Iterable[str]) -> str:
    return ", ".join(eats)


class Creature:
    __slots__ = ("_name", "_eats", "_color")

    def __init__(self, name: str, eats: Iterable[str] = (), color: str = DEFAULT_COLOR):
        name = str(name).strip()
        if not name:
            raise ValueError("Creature name must be non-empty.")
        self._name = name
        self._eats: Tuple[str, ...] = tuple(str(e) for e in eats)
        self._color = color or DEFAULT_COLOR

    @classmethod
    def from_input(cls, name: str, eats_text: str, color: str = DEFAULT_COLOR) -> "Creature":
        return cls(name, parse_eats(eats_text), color)

    @classmethod
    def from_dict(cls, data) -> "Creature":
        eats = data.get("eats", [])
        if isinstance(eats, str):
            eats = parse_eats(eats)
        return cls(data["name"], eats, data.get("color", DEFAULT_COLOR))

    # --- Getters ---
    @property
    def name(self) -> str:
        return self._name

    @property
    def eats(self) -> Tuple[str, ...]:
        return self._eats

    @property
    def color(self) -> str:
        return self._color

    def eats_text(self) -> str:
        return format_eats(self._eats)

    def to_dict(self) -> dict:
        return {"name": self._name, "eats": list(self._eats), "color": self._color}

    def __eq__(self, other) -> bool:
        if not isinstance(other, Creature):
            return NotImplemented
        return (self._name, self._eats, self._color) == (other._name, other._eats, other._color)

    def __hash__(self) -> int:
        return hash((self._name, self._eats, self._color))

    def __repr__(self) -> str:
        return f"Creature({self._name!r} eats {list(self._eats)!r})"
