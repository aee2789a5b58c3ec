"""Skill definition structures."""
from __future__ import annotations

from dataclasses import dataclass

from monrun.core.types import ATTACK_SKILL_TYPES, SkillType


@dataclass(frozen=True, slots=True)
class SkillDef:
    """Describes one skill of a four-slot loadout.

    ``range`` is the number of cells the skill is designed to cover
    (1 single target, 3 a line, 9 the whole field). Battles are one on one,
    so resolution always applies the skill to the single opposing combatant.
    """

    id: str
    name: str
    description: str
    type: SkillType
    cooldown: int
    range: int = 1
    damage: int | None = None
    heal_amount: int | None = None
    dodge_chance: float | None = None
    block_reduction: float | None = None
    element: str | None = None
    animation: str | None = None

    @property
    def is_attack(self) -> bool:
        return self.type in ATTACK_SKILL_TYPES
