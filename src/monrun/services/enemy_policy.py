"""Heuristic action choice for wild enemies."""
from __future__ import annotations

import logging

from monrun.core.rng import RNG
from monrun.core.settings import DEFAULT_RULES, BattleRules
from monrun.domain.battle_models import BattleAction, Combatant

logger = logging.getLogger(__name__)


def choose_enemy_action(
    enemy: Combatant,
    opponent: Combatant,
    rng: RNG,
    rules: BattleRules = DEFAULT_RULES,
) -> BattleAction:
    """Pick the enemy's action for this turn.

    A ready heal is always used below the HP threshold. Otherwise a ready skill
    is picked uniformly with ``rules.enemy_skill_chance``, falling back to a
    basic attack. The opponent's pending action is never consulted.
    """
    ready = enemy.ready_skill_indices()
    if ready:
        if enemy.hp / enemy.max_hp < rules.enemy_heal_threshold:
            heal_index = next((index for index in ready if enemy.skills[index].type == "heal"), None)
            if heal_index is not None:
                logger.debug("%s is low on HP and heals", enemy.name)
                return BattleAction.skill(enemy.instance_id, heal_index)

        if rng.chance(rules.enemy_skill_chance):
            index = rng.choice(ready)
            logger.debug("%s picks %s against %s", enemy.name, enemy.skills[index].name, opponent.name)
            return BattleAction.skill(enemy.instance_id, index)

    return BattleAction.attack(enemy.instance_id)
