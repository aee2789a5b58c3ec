"""Factory for generating wild enemies during a run."""
from __future__ import annotations

from monrun.core.rng import RNG
from monrun.core.settings import DEFAULT_RULES, BattleRules
from monrun.domain.battle_models import Combatant
from monrun.domain.enemy_scaling import build_wild_loadout, scale_enemy_stats

from .id_factory import make_instance_id

WILD_ENEMY_NAME = "Wild Monster"


def create_wild_enemy(player: Combatant, rng: RNG, rules: BattleRules = DEFAULT_RULES) -> Combatant:
    """Generate an enemy balanced against the given player combatant."""
    hp_factor = rng.uniform_factor(rules.enemy_scale_min, rules.enemy_scale_max)
    attack_factor = rng.uniform_factor(rules.enemy_scale_min, rules.enemy_scale_max)
    max_hp, attack = scale_enemy_stats(
        player.max_hp,
        player.attack,
        hp_factor=hp_factor,
        attack_factor=attack_factor,
    )
    skills = build_wild_loadout(attack)
    return Combatant(
        instance_id=make_instance_id("enemy", rng),
        name=WILD_ENEMY_NAME,
        rarity="common",
        type="enemy",
        hp=max_hp,
        max_hp=max_hp,
        attack=attack,
        skills=skills,
        skill_cooldowns=[0] * len(skills),
    )
