import pytest

from monrun.core.rng import RNG
from monrun.data.repositories import MonstersRepository
from monrun.services.errors import FactoryError
from monrun.services.factories import create_combatant, prepare_team
from tests.helpers.combatants import STRIKE, make_combatant


def test_create_combatant_from_template() -> None:
    combatant = create_combatant("fire_pup", MonstersRepository(), RNG(1))

    assert combatant.name == "Fire Pup"
    assert combatant.template_id == "fire_pup"
    assert combatant.instance_id.startswith("fire_pup_")
    assert combatant.hp == combatant.max_hp == 120
    assert combatant.attack == 20
    assert combatant.skill_cooldowns == [0, 0, 0, 0]
    assert not combatant.has_defense_queued


def test_create_combatant_ids_are_deterministic_per_seed() -> None:
    repo = MonstersRepository()

    first = create_combatant("ice_fox", repo, RNG(42))
    second = create_combatant("ice_fox", repo, RNG(42))

    assert first.instance_id == second.instance_id


def test_create_combatant_unknown_template_raises() -> None:
    with pytest.raises(FactoryError):
        create_combatant("missing_mon", MonstersRepository(), RNG(1))


def test_prepare_team_returns_fresh_copies() -> None:
    worn = make_combatant("worn", hp=3, cooldowns=[2, 0, 1, 0])
    worn.dodge_next_attack = True
    worn.dodge_chance = 0.5

    team = prepare_team([worn])

    assert team[0] is not worn
    assert team[0].hp == team[0].max_hp
    assert team[0].skill_cooldowns == [0, 0, 0, 0]
    assert team[0].dodge_next_attack is False
    assert worn.hp == 3
    assert worn.skill_cooldowns == [2, 0, 1, 0]


def test_prepare_team_rejects_empty_duplicate_and_short_loadout() -> None:
    member = make_combatant("dup")

    with pytest.raises(FactoryError):
        prepare_team([])
    with pytest.raises(FactoryError):
        prepare_team([member, member])
    with pytest.raises(FactoryError):
        prepare_team([make_combatant("short", skills=(STRIKE,))])
