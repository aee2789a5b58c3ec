"""Deterministic wild enemy stat scaling helpers."""
from __future__ import annotations

import math
from typing import Tuple

from monrun.domain.defs import SkillDef

# Wild enemies mirror the active player combatant instead of a fixed table.
# HP and attack each roll their own factor inside the rules' scale range, so
# every encounter sits near the player's strength with a little spread.
# Skill numbers are offsets from the rolled attack to keep skills relevant.
STRONG_ATTACK_BONUS = 15
WIDE_ATTACK_BONUS = 10
WILD_HEAL_AMOUNT = 40
WILD_SKILL_COOLDOWN = 3
WILD_HEAL_COOLDOWN = 4


def scale_stat(base: int, factor: float) -> int:
    return math.floor(base * factor)


def scale_enemy_stats(max_hp: int, attack: int, *, hp_factor: float, attack_factor: float) -> Tuple[int, int]:
    """Return (max_hp, attack) for a wild enemy, never below 1."""
    return max(1, scale_stat(max_hp, hp_factor)), max(1, scale_stat(attack, attack_factor))


def build_wild_loadout(attack: int) -> Tuple[SkillDef, ...]:
    """Return the fixed strong attack / heal / wide attack / block loadout."""
    return (
        SkillDef(
            id="enemy_skill_1",
            name="Wild Strike",
            description="Hits hard with a wild blow.",
            type="strong_attack",
            damage=attack + STRONG_ATTACK_BONUS,
            range=1,
            cooldown=WILD_SKILL_COOLDOWN,
        ),
        SkillDef(
            id="enemy_skill_2",
            name="Wild Recovery",
            description="Restores its own HP.",
            type="heal",
            heal_amount=WILD_HEAL_AMOUNT,
            range=1,
            cooldown=WILD_HEAL_COOLDOWN,
        ),
        SkillDef(
            id="enemy_skill_3",
            name="Wild Rush",
            description="Charges across a wide area.",
            type="wide_attack",
            damage=attack + WIDE_ATTACK_BONUS,
            range=3,
            cooldown=WILD_SKILL_COOLDOWN,
        ),
        SkillDef(
            id="enemy_skill_4",
            name="Wild Guard",
            description="Halves the damage of the next attack.",
            type="block",
            range=1,
            cooldown=WILD_SKILL_COOLDOWN,
        ),
    )
