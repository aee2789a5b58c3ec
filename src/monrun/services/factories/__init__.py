"""Factory helpers for runtime entities."""

from .enemy_factory import create_wild_enemy
from .id_factory import make_instance_id
from .monster_factory import create_combatant, create_combatant_from_def, prepare_team

__all__ = [
    "create_combatant",
    "create_combatant_from_def",
    "create_wild_enemy",
    "make_instance_id",
    "prepare_team",
]
