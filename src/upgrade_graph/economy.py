"""Reference economy: upgrade catalog, gold, purchase rules.

``Economy`` implements ``PurchaseStateProvider`` so the graph view can be
driven end to end. The surrounding game may supply its own provider instead.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

from upgrade_graph.effects import BreakerStats, Effect, EffectKind, apply_effect
from upgrade_graph.model import coerce_ids, prerequisites_field

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpgradeDefinition:
    """One row of the upgrade table."""

    id: str
    name: str
    cost: int
    prerequisite_ids: tuple[str, ...] = ()
    description: str = ""
    effect: Effect | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "cost": self.cost,
            "prerequisiteIds": list(self.prerequisite_ids),
            "description": self.description,
            "effect": self.effect.to_dict() if self.effect else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> UpgradeDefinition:
        """Build a definition from one table row. Raises ValueError when ``id`` is missing."""
        if not data.get("id"):
            raise ValueError("row missing id")
        effect = data.get("effect")
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            cost=int(data.get("cost") or 0),
            prerequisite_ids=coerce_ids(prerequisites_field(data)),
            description=str(data.get("description") or ""),
            effect=Effect.from_dict(effect) if effect else None,
        )


def _u(
    code: str, cost: int, requires: str | None, name: str, description: str, kind: EffectKind, stat: str, amount: float
) -> UpgradeDefinition:
    return UpgradeDefinition(
        id=code,
        name=name,
        cost=cost,
        prerequisite_ids=(requires,) if requires else (),
        description=description,
        effect=Effect(kind, stat, amount),
    )


ADD, MUL, SET = EffectKind.ADD, EffectKind.MULTIPLY, EffectKind.SET

# fmt: off
DEFAULT_UPGRADES: tuple[UpgradeDefinition, ...] = (
    _u("U1", 2, None, "+Session Time", "+2 seconds to session length.", ADD, "session_duration", 2.0),
    _u("U2", 2, None, "+Breaker Radius I", "Breaker radius +15%.", MUL, "breaker_radius", 1.15),
    _u("U3", 6, "U1", "+Breaker Damage I", "Increase breaker damage by 10%.", MUL, "breaker_damage", 1.10),
    _u("U4", 7, None, "+Max Ducks I", "Increase max ducks to 30.", SET, "max_ducks", 30),
    _u("U5", 7, "U2", "+Breaker Radius II", "Breaker radius +25%.", MUL, "breaker_radius", 1.25),
    _u("U6", 18, "U3", "+Breaker Damage II", "Add +1 flat breaker damage.", ADD, "breaker_damage", 1.0),
    _u("U7", 25, "U4", "+Max Ducks II", "Increase max ducks to 55.", SET, "max_ducks", 55),
    _u("U8", 30, "U7", "+Breaker Speed I", "Breaker ticks 25% faster.", MUL, "breaker_speed_multiplier", 1.25),
    _u("U9", 20, None, "+Crit Chance I", "+10% chance for critical breaker hits.", ADD, "breaker_crit_chance", 0.10),
    _u("U10", 20, "U8", "+Duck Size I", "Increase duck size by 10%.", ADD, "duck_size_multiplier", 0.10),
    _u("U11", 15, "U9", "+Crit Chance II", "+5% chance for critical breaker hits.", ADD, "breaker_crit_chance", 0.05),
    _u("U12", 40, "U8", "+Breaker Speed II", "Breaker ticks another 25% faster.", MUL, "breaker_speed_multiplier", 1.25),
    _u("U13", 40, "U5", "+Breaker Radius III", "Breaker radius +25%.", MUL, "breaker_radius", 1.25),
    _u("U14", 50, "U11", "+Breaker Damage III", "Increase breaker damage by 10%.", MUL, "breaker_damage", 1.10),
    _u("U15", 60, "U10", "+Duck Size II", "Increase duck size by another 10%.", ADD, "duck_size_multiplier", 0.10),
    _u("U16", 60, "U15", "+Breaker Speed III", "Breaker ticks 25% faster again.", MUL, "breaker_speed_multiplier", 1.25),
    _u("U17", 60, "U16", "+Duck Mass I", "Ducks award 40% more gold.", MUL, "duck_gold_multiplier", 1.4),
    _u("U18", 80, "U17", "+Breaker Damage IV", "Add +2 flat breaker damage.", ADD, "breaker_damage", 2.0),
    _u("U19", 60, "U18", "+Breaker Damage V", "Add +1 flat breaker damage.", ADD, "breaker_damage", 1.0),
    _u("U20", 60, "U16", "+Crit Chance III", "+10% chance for critical breaker hits.", ADD, "breaker_crit_chance", 0.10),
    _u("U21", 65, "U16", "+Crit Damage", "+25% extra damage on crits.", ADD, "breaker_crit_bonus", 0.25),
    _u("U22", 70, "U20", "+Duck Mass II", "Ducks award 50% more gold.", MUL, "duck_gold_multiplier", 1.5),
)
# fmt: on


def load_definitions(path: str | Path) -> list[UpgradeDefinition]:
    """Read an upgrade table from a JSON file holding a list of rows."""
    rows = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(rows, list):
        raise ValueError(f"{path}: expected a JSON list of upgrade definitions")
    definitions: list[UpgradeDefinition] = []
    for row in rows:
        if not isinstance(row, Mapping) or not row.get("id"):
            raise ValueError(f"{path}: row missing id")
        definitions.append(UpgradeDefinition.from_dict(row))
    return definitions


def dump_definitions(definitions: Iterable[UpgradeDefinition], path: str | Path) -> None:
    Path(path).write_text(json.dumps([d.to_dict() for d in definitions], indent=2) + "\n", encoding="utf-8")


class Economy:
    """Gold, purchased upgrades and the stats they modify.

    Attributes:
        gold: Current balance.
        stats: Runtime stats, mutated by purchased effects.
    """

    def __init__(
        self,
        definitions: Iterable[UpgradeDefinition] = DEFAULT_UPGRADES,
        gold: int = 0,
        stats: BreakerStats | None = None,
    ) -> None:
        self.definitions: dict[str, UpgradeDefinition] = {d.id: d for d in definitions}
        self.gold = gold
        self.stats = stats or BreakerStats()
        self._purchased: set[str] = set()
        self._listeners: list[Callable[[], None]] = []

    # PurchaseStateProvider

    def is_purchased(self, upgrade_id: str) -> bool:
        return upgrade_id in self._purchased

    def cost(self, upgrade_id: str) -> int:
        definition = self.definitions.get(upgrade_id)
        return definition.cost if definition else sys.maxsize

    def current_balance(self) -> int:
        return self.gold

    # Purchase rules

    def is_available(self, upgrade_id: str) -> bool:
        """Not yet purchased and every known prerequisite purchased."""
        definition = self.definitions.get(upgrade_id)
        if definition is None or upgrade_id in self._purchased:
            return False
        return all(req in self._purchased for req in definition.prerequisite_ids if req in self.definitions)

    def can_afford(self, upgrade_id: str) -> bool:
        return self.gold >= self.cost(upgrade_id)

    def purchase(self, upgrade_id: str) -> bool:
        """Buy ``upgrade_id``. Returns False and changes nothing when not allowed."""
        if not self.is_available(upgrade_id):
            logger.debug("purchase of %r rejected: not available", upgrade_id)
            return False
        if not self.can_afford(upgrade_id):
            logger.debug("purchase of %r rejected: %d < %d gold", upgrade_id, self.gold, self.cost(upgrade_id))
            return False

        definition = self.definitions[upgrade_id]
        self.gold -= definition.cost
        if definition.effect is not None:
            apply_effect(self.stats, definition.effect)
        self._purchased.add(upgrade_id)
        logger.info("purchased upgrade %s for %d gold", upgrade_id, definition.cost)

        for listener in list(self._listeners):
            listener()
        return True

    def add_gold(self, amount: int) -> None:
        self.gold += amount
        for listener in list(self._listeners):
            listener()

    def subscribe(self, listener: Callable[[], None]) -> None:
        """Call ``listener()`` after every change to gold or purchases."""
        self._listeners.append(listener)

    @property
    def purchased(self) -> frozenset[str]:
        return frozenset(self._purchased)
