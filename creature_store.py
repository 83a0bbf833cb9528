# creature_store.py

import json
import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from creature import Creature, DEFAULT_COLOR, parse_eats

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "food-web.json"
HEX_COLOR = re.compile(r"#[0-9a-fA-F]{6}")


@dataclass
class CreatureForm:
    # Mirrors the input fields: name, comma separated eats, color picker
    name: str = ""
    eats: str = ""
    color: str = DEFAULT_COLOR


class CreatureStore:
    """
    Ordered creature records; the single source of truth for the food web.

    Mutations go through add / commitEdit / remove / import_snapshot only.
    Failures never raise: they set a flag plus ``error_message`` for the
    inline UI text and leave the records untouched.
    """

    def __init__(self, creatures=()):
        self._creatures: List[Creature] = list(creatures)
        self.form = CreatureForm()
        self.editing: Optional[int] = None
        self.duplicate_error = False
        self.import_error = False
        self.error_message = ""

    # --------------------------
    # Small helpers
    # --------------------------
    def _reset_form(self):
        self.form = CreatureForm()
        self.editing = None

    def _check_index(self, index: int):
        if not 0 <= index < len(self._creatures):
            raise IndexError(f"No creature at position {index}.")

    def _fail(self, message: str):
        self.error_message = message
        logger.info(message)
        return False

    # --------------------------
    # Add / edit / delete
    # --------------------------
    def add(self, name: str, eats_text: str = "", color: str = DEFAULT_COLOR) -> bool:
        name = (name or "").strip()
        self.duplicate_error = False
        self.import_error = False
        if not name:
            self.duplicate_error = True
            return self._fail("Creature name cannot be empty.")
        if name in self.names():
            self.duplicate_error = True
            return self._fail(f"A creature named '{name}' already exists.")

        self._creatures.append(Creature(name, parse_eats(eats_text), color or DEFAULT_COLOR))
        self.error_message = ""
        self._reset_form()
        logger.debug("Added creature %s (total=%d)", name, len(self._creatures))
        return True

    def startEdit(self, index: int) -> CreatureForm:
        self._check_index(index)
        c = self._creatures[index]
        self.form = CreatureForm(c.name, c.eats_text(), c.color)
        self.editing = index
        self.duplicate_error = False
        self.error_message = ""
        return self.form

    def commitEdit(self, index: int, name: str, eats_text: str = "", color: str = DEFAULT_COLOR) -> bool:
        name = (name or "").strip()
        if not name:
            return False
        self._check_index(index)

        # Uniqueness is deliberately not re-checked here, unlike add().
        clash = [i for i, c in enumerate(self._creatures) if i != index and c.name == name]
        if clash:
            logger.warning("Edit of position %d reuses the name '%s' held by position %d",
                           index, name, clash[0])

        self._creatures[index] = Creature(name, parse_eats(eats_text), color or DEFAULT_COLOR)
        self.error_message = ""
        self._reset_form()
        return True

    def cancelEdit(self):
        self._reset_form()
        self.duplicate_error = False
        self.error_message = ""

    def remove(self, index: int) -> Creature:
        self._check_index(index)
        removed = self._creatures.pop(index)
        if self.editing is not None:
            if self.editing == index:
                self._reset_form()
            elif self.editing > index:
                self.editing -= 1
        logger.debug("Removed creature %s", removed.name)
        return removed

    # --------------------------
    # Persistence (JSON snapshot)
    # --------------------------
    def export_snapshot(self) -> str:
        return json.dumps([c.to_dict() for c in self._creatures], indent=2, ensure_ascii=False)

    def import_snapshot(self, text) -> bool:
        if isinstance(text, (bytes, bytearray)):
            try:
                text = text.decode("utf-8")
            except UnicodeDecodeError as e:
                return self._import_failed(f"File is not UTF-8 text: {e}")
        try:
            data = json.loads(text)
        except (TypeError, ValueError) as e:
            return self._import_failed(f"Could not parse JSON: {e}")

        if not isinstance(data, list):
            return self._import_failed("Expected a JSON array of creatures.")

        creatures = []
        seen = set()
        for pos, item in enumerate(data):
            problem = _record_problem(item)
            if problem:
                return self._import_failed(f"Entry {pos}: {problem}")
            c = Creature.from_dict(item)
            if c.name in seen:
                return self._import_failed(f"Entry {pos}: duplicate creature name '{c.name}'.")
            seen.add(c.name)
            creatures.append(c)

        self._creatures = creatures
        self.import_error = False
        self.duplicate_error = False
        self.error_message = ""
        self._reset_form()
        logger.info("Imported %d creatures", len(creatures))
        return True

    def _import_failed(self, message: str) -> bool:
        self.import_error = True
        self.error_message = message
        logger.warning("Import rejected: %s", message)
        return False

    # --------------------------
    # Getters (used by UI)
    # --------------------------
    @property
    def creatures(self) -> Tuple[Creature, ...]:
        return tuple(self._creatures)

    def names(self):
        return [c.name for c in self._creatures]

    def __len__(self):
        return len(self._creatures)

    def __iter__(self):
        return iter(tuple(self._creatures))

    def __getitem__(self, index: int) -> Creature:
        return self._creatures[index]

    def get_stats(self):
        names = set(self.names())
        prey = {p for c in self._creatures for p in c.eats}
        return {
            "creatures": len(self._creatures),
            "links": sum(len(c.eats) for c in self._creatures),
            "distinct_prey": len(prey),
            "leaf_food": len(prey - names),
        }


def _record_problem(item) -> Optional[str]:
    if not isinstance(item, dict):
        return "expected an object with name, eats and color."
    name = item.get("name")
    if not isinstance(name, str) or not name.strip():
        return "'name' must be a non-empty string."
    eats = item.get("eats", [])
    if isinstance(eats, list):
        if not all(isinstance(e, str) for e in eats):
            return "'eats' must contain only strings."
    elif not isinstance(eats, str):
        return "'eats' must be a list of names."
    color = item.get("color", DEFAULT_COLOR)
    if not isinstance(color, str) or not HEX_COLOR.fullmatch(color):
        return "'color' must be a #rrggbb string."
    return None
