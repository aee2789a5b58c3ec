"""Tunable battle rules shared by the resolver, enemy policy and orchestrator."""
from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class AmbientDefense:
    """Baseline dodge/block odds applied when the defender has nothing queued."""

    dodge_rate: float
    block_rate: float
    block_retained: float


# Basic attacks and skill attacks roll different ambient odds. The asymmetry
# is tuned by game design and kept as data so it can be revisited.
BASIC_ATTACK_AMBIENT = AmbientDefense(dodge_rate=0.15, block_rate=0.10, block_retained=0.6)
SKILL_ATTACK_AMBIENT = AmbientDefense(dodge_rate=0.20, block_rate=0.15, block_retained=0.5)


@dataclass(frozen=True, slots=True)
class BattleRules:
    """Numbers that drive battle resolution."""

    default_dodge_chance: float = 0.5
    default_block_reduction: float = 0.5
    default_heal_amount: int = 50
    basic_ambient: AmbientDefense = BASIC_ATTACK_AMBIENT
    skill_ambient: AmbientDefense = SKILL_ATTACK_AMBIENT
    enemy_heal_threshold: float = 0.3
    enemy_skill_chance: float = 0.7
    enemy_scale_min: float = 0.9
    enemy_scale_max: float = 1.2
    run_length: int | None = None

    def without_ambient(self) -> "BattleRules":
        """Return a copy with ambient dodge/block disabled."""
        off = AmbientDefense(dodge_rate=0.0, block_rate=0.0, block_retained=1.0)
        return replace(self, basic_ambient=off, skill_ambient=off)


DEFAULT_RULES = BattleRules()

__all__ = [
    "AmbientDefense",
    "BASIC_ATTACK_AMBIENT",
    "BattleRules",
    "DEFAULT_RULES",
    "SKILL_ATTACK_AMBIENT",
]
