"""Factory for creating battle combatants from monster templates."""
from __future__ import annotations

from typing import List, Sequence

from monrun.core.rng import RNG
from monrun.data.repositories import MonstersRepository
from monrun.data.repositories.monsters_repo import LOADOUT_SIZE
from monrun.domain.battle_models import Combatant
from monrun.domain.defs import MonsterDef
from monrun.services.errors import FactoryError

from .id_factory import make_instance_id


def create_combatant_from_def(monster_def: MonsterDef, rng: RNG) -> Combatant:
    """Instantiate a full-HP combatant for the given template."""
    if len(monster_def.skills) != LOADOUT_SIZE:
        raise FactoryError(f"Monster '{monster_def.id}' must have exactly {LOADOUT_SIZE} skills.")
    return Combatant(
        instance_id=make_instance_id(monster_def.id, rng),
        name=monster_def.name,
        rarity=monster_def.rarity,
        type=monster_def.type,
        hp=monster_def.max_hp,
        max_hp=monster_def.max_hp,
        attack=monster_def.attack,
        skills=monster_def.skills,
        skill_cooldowns=[0] * len(monster_def.skills),
        template_id=monster_def.id,
    )


def create_combatant(template_id: str, monsters_repo: MonstersRepository, rng: RNG) -> Combatant:
    """Instantiate a combatant using the provided repository."""
    try:
        monster_def = monsters_repo.get(template_id)
    except KeyError as exc:
        raise FactoryError(f"Monster '{template_id}' not found.") from exc
    return create_combatant_from_def(monster_def, rng)


def prepare_team(members: Sequence[Combatant]) -> List[Combatant]:
    """Return fresh battle copies: full HP, ready skills, nothing queued."""
    if not members:
        raise FactoryError("A team needs at least one monster.")
    team: List[Combatant] = []
    seen: set[str] = set()
    for member in members:
        if member.instance_id in seen:
            raise FactoryError(f"Monster instance '{member.instance_id}' appears twice in the team.")
        if len(member.skills) != LOADOUT_SIZE:
            raise FactoryError(f"Monster '{member.name}' must have exactly {LOADOUT_SIZE} skills.")
        seen.add(member.instance_id)
        fresh = member.copy()
        fresh.hp = fresh.max_hp
        fresh.skill_cooldowns = [0] * len(fresh.skills)
        fresh.clear_defenses()
        team.append(fresh)
    return team
