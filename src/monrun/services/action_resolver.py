"""Pure resolution of a single battle action.

Resolution never touches the combatants it is given. It works on copies and
returns an :class:`ActionOutcome` describing the HP change and cooldown
updates; the battle service decides when to commit them.
"""
from __future__ import annotations

import logging
import math

from monrun.core.rng import RNG
from monrun.core.settings import DEFAULT_RULES, AmbientDefense, BattleRules
from monrun.domain.battle_models import (
    ActionOutcome,
    BattleAction,
    BattleResult,
    Combatant,
    CooldownUpdate,
    HpChange,
)
from monrun.domain.defs import SkillDef

logger = logging.getLogger(__name__)


def resolve_action(
    action: BattleAction,
    attacker: Combatant,
    target: Combatant,
    rng: RNG,
    rules: BattleRules = DEFAULT_RULES,
) -> ActionOutcome | None:
    """Resolve ``action`` performed by ``attacker`` against ``target``.

    Returns None when the action references a skill slot that does not exist
    or is still cooling down. Callers must treat that as a rejected submission.
    """
    attacker_copy = attacker.copy()
    target_copy = target.copy()
    cooldown_updates: list[CooldownUpdate] = []

    if action.type == "skill":
        index = action.skill_index
        if index is None or not 0 <= index < len(attacker_copy.skills):
            logger.warning("%s has no skill in slot %s", attacker.name, index)
            return None
        if not attacker_copy.is_skill_ready(index):
            logger.debug(
                "%s tried %s with %s turn(s) of cooldown left",
                attacker.name,
                attacker_copy.skills[index].name,
                attacker_copy.skill_cooldowns[index],
            )
            return None
        skill = attacker_copy.skills[index]
        result = _resolve_skill(attacker_copy, skill, target_copy, rng, rules)
        cooldown_updates.append(
            CooldownUpdate(monster_id=attacker.instance_id, skill_index=index, new_cooldown=skill.cooldown)
        )
    elif action.type == "attack":
        result = _resolve_basic_attack(attacker_copy, target_copy, rng, rules)
    elif action.type == "dodge":
        _queue_dodge(attacker_copy, rules.default_dodge_chance)
        result = BattleResult(attacker=attacker_copy, target=attacker_copy)
    elif action.type == "block":
        _queue_block(attacker_copy, rules.default_block_reduction)
        result = BattleResult(attacker=attacker_copy, target=attacker_copy)
    else:
        logger.warning("Unknown action type %r from %s", action.type, attacker.name)
        return None

    if result.target is result.attacker:
        hp_change = HpChange(target_id=attacker.instance_id, new_hp=attacker_copy.hp, original_hp=attacker.hp)
    else:
        hp_change = HpChange(target_id=target.instance_id, new_hp=target_copy.hp, original_hp=target.hp)
    return ActionOutcome(result=result, hp_change=hp_change, cooldown_updates=cooldown_updates)


def _resolve_basic_attack(attacker: Combatant, target: Combatant, rng: RNG, rules: BattleRules) -> BattleResult:
    result = BattleResult(attacker=attacker, target=target)
    damage = _defense_check(attacker.attack, target, rng, rules, rules.basic_ambient, result)
    _apply_damage(target, damage, result)
    logger.debug("%s attacks %s for %s (hp %s)", attacker.name, target.name, result.damage, target.hp)
    return result


def _resolve_skill(
    attacker: Combatant, skill: SkillDef, target: Combatant, rng: RNG, rules: BattleRules
) -> BattleResult:
    if skill.is_attack:
        result = BattleResult(attacker=attacker, target=target, skill=skill)
        base_damage = skill.damage if skill.damage is not None else attacker.attack
        damage = _defense_check(base_damage, target, rng, rules, rules.skill_ambient, result)
        _apply_damage(target, damage, result)
        logger.debug(
            "%s uses %s on %s for %s (hp %s)", attacker.name, skill.name, target.name, result.damage, target.hp
        )
        return result

    if skill.type == "heal":
        amount = skill.heal_amount if skill.heal_amount is not None else rules.default_heal_amount
        healed = max(0, min(amount, attacker.max_hp - attacker.hp))
        attacker.hp += healed
        logger.debug("%s uses %s and recovers %s", attacker.name, skill.name, healed)
        return BattleResult(attacker=attacker, target=attacker, healed=healed, skill=skill)

    if skill.type == "dodge":
        chance = skill.dodge_chance if skill.dodge_chance is not None else rules.default_dodge_chance
        _queue_dodge(attacker, chance)
        return BattleResult(attacker=attacker, target=attacker, skill=skill)

    reduction = skill.block_reduction if skill.block_reduction is not None else rules.default_block_reduction
    _queue_block(attacker, reduction)
    return BattleResult(attacker=attacker, target=attacker, skill=skill)


def _defense_check(
    damage: int,
    target: Combatant,
    rng: RNG,
    rules: BattleRules,
    ambient: AmbientDefense,
    result: BattleResult,
) -> int:
    """Apply the dodge, block, ambient ladder and return the damage that lands."""
    if target.dodge_next_attack:
        result.dodge_attempted = True
        chance = target.dodge_chance if target.dodge_chance is not None else rules.default_dodge_chance
        if rng.chance(chance):
            result.dodged = True
            damage = 0
        target.clear_dodge()
        return damage

    if target.block_next_attack:
        result.block_attempted = True
        result.blocked = True
        reduction = target.block_reduction if target.block_reduction is not None else rules.default_block_reduction
        target.clear_block()
        return _scaled(damage, 1 - reduction)

    if rng.chance(ambient.dodge_rate):
        result.dodged = True
        return 0
    if rng.chance(ambient.block_rate):
        result.blocked = True
        return _scaled(damage, ambient.block_retained)
    return damage


def _scaled(damage: int, factor: float) -> int:
    # round first so 1 - 0.9 style float noise cannot drop a whole point
    return max(0, math.floor(round(damage * factor, 9)))


def _apply_damage(target: Combatant, damage: int, result: BattleResult) -> None:
    landed = max(0, damage)
    target.hp = max(0, target.hp - landed)
    result.damage = landed


def _queue_dodge(combatant: Combatant, chance: float) -> None:
    combatant.dodge_next_attack = True
    combatant.dodge_chance = chance


def _queue_block(combatant: Combatant, reduction: float) -> None:
    combatant.block_next_attack = True
    combatant.block_reduction = reduction
