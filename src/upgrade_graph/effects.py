"""Upgrade effects as data.

An effect is a tagged variant over a fixed set of kinds, applied to a stat
block through ``apply_effect``. Keeping effects as plain values makes upgrade
tables serializable and testable without the layout engine.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, fields


class EffectKind(enum.Enum):
    ADD = "add"  # stat += amount
    MULTIPLY = "multiply"  # stat *= amount
    SET = "set"  # capacity override: stat = amount


@dataclass(frozen=True)
class Effect:
    kind: EffectKind
    stat: str
    amount: float

    def to_dict(self) -> dict[str, object]:
        return {"kind": self.kind.value, "stat": self.stat, "amount": self.amount}

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> Effect:
        return cls(kind=EffectKind(data["kind"]), stat=str(data["stat"]), amount=float(data["amount"]))


@dataclass
class BreakerStats:
    """Runtime stats affected by upgrades, with the game's starting values."""

    session_duration: float = 10.0
    breaker_radius: float = 1.4
    breaker_damage: float = 1.0
    breaker_speed_multiplier: float = 1.0
    breaker_crit_chance: float = 0.0
    breaker_crit_bonus: float = 0.0
    max_ducks: int = 20
    ducks_per_death: int = 1
    duck_size_multiplier: float = 1.0
    duck_gold_multiplier: float = 1.0


STAT_NAMES: frozenset[str] = frozenset(f.name for f in fields(BreakerStats))


def apply_effect(stats: BreakerStats, effect: Effect) -> None:
    """Apply ``effect`` to ``stats`` in place."""
    if effect.stat not in STAT_NAMES:
        raise ValueError(f"unknown stat {effect.stat!r}")

    current = getattr(stats, effect.stat)
    if effect.kind is EffectKind.ADD:
        value = current + effect.amount
    elif effect.kind is EffectKind.MULTIPLY:
        value = current * effect.amount
    else:
        value = effect.amount

    # Integer stats (duck counts) stay integers.
    if isinstance(current, int):
        value = int(round(value))
    setattr(stats, effect.stat, value)
