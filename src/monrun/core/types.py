"""Shared type aliases for the core and domain layers."""
from typing import Literal

SkillType = Literal["heal", "wide_attack", "strong_attack", "dodge", "block"]
ActionType = Literal["attack", "skill", "dodge", "block"]
Rarity = Literal["common", "rare", "unique"]
Actor = Literal["player", "enemy"]
BattlePhase = Literal["selection", "resolution", "completed"]
TurnTransition = Literal["continue", "combatant-switch", "enemy-replaced", "run-won", "run-lost"]

SKILL_TYPES: tuple[str, ...] = ("heal", "wide_attack", "strong_attack", "dodge", "block")
ATTACK_SKILL_TYPES: tuple[str, ...] = ("wide_attack", "strong_attack")
RARITIES: tuple[str, ...] = ("common", "rare", "unique")

__all__ = [
    "ATTACK_SKILL_TYPES",
    "ActionType",
    "Actor",
    "BattlePhase",
    "RARITIES",
    "Rarity",
    "SKILL_TYPES",
    "SkillType",
    "TurnTransition",
]
