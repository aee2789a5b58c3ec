from __future__ import annotations

import pytest

from monrun.core.rng import RNG
from monrun.core.settings import DEFAULT_RULES, BattleRules
from monrun.data.repositories import MonstersRepository
from monrun.domain.battle_models import BattleAction, CooldownUpdate
from monrun.domain.run_progress import RunProgress
from monrun.services import battle_service as battle_service_module
from monrun.services.battle_service import (
    BattleService,
    BattleStartedEvent,
    CombatantSwitchedEvent,
    EnemyReplacedEvent,
    RunEndedEvent,
    TurnFailedEvent,
    TurnRejectedEvent,
    decide_winner,
)
from monrun.services.errors import BattleStateError
from tests.helpers.combatants import make_combatant
from tests.helpers.scripted_rng import ScriptedRNG

NO_AMBIENT = DEFAULT_RULES.without_ambient()
ENEMY_BASIC_ATTACK = 0.99


def _make_battle_service(rules: BattleRules = NO_AMBIENT) -> BattleService:
    return BattleService(MonstersRepository(), rules)


def _start(service, team, rng, progress=None):
    session, _ = service.start_battle(team, rng, progress)
    return session


def _set_enemy(session, *, hp: int, attack: int) -> None:
    session.enemy.max_hp = hp
    session.enemy.hp = hp
    session.enemy.attack = attack


def test_start_battle_copies_team_and_scales_enemy_from_lead() -> None:
    service = _make_battle_service()
    lead = make_combatant("lead", hp=5, max_hp=200, attack=30)
    rng = ScriptedRNG([0.0, 0.0])

    session, events = service.start_battle([lead, make_combatant("second")], rng)

    assert isinstance(events[0], BattleStartedEvent)
    assert session.player is not lead
    assert session.player.hp == 200
    assert lead.hp == 5
    assert session.enemy.max_hp == 180
    assert session.enemy.attack == 27
    assert session.turn_count == 1
    assert session.phase == "selection"


def test_basic_attack_against_undefended_enemy_deals_attack_damage() -> None:
    service = _make_battle_service()
    rng = ScriptedRNG()
    session = _start(service, [make_combatant("player", max_hp=200, attack=30)], rng)
    _set_enemy(session, hp=300, attack=10)
    rng.push(ENEMY_BASIC_ATTACK)

    report = service.play_turn(session, BattleAction.attack("player"))

    assert report.transition == "continue"
    assert report.turn == 1
    assert [step.actor for step in report.sequence] == ["player", "enemy"]
    assert report.sequence[0].outcome.hp_change.delta == -30
    assert session.enemy.hp == 270
    assert session.player.hp == 190
    assert session.turn_count == 2
    assert session.phase == "selection"


def test_player_block_halves_enemy_attack_in_same_turn() -> None:
    service = _make_battle_service()
    rng = ScriptedRNG()
    session = _start(service, [make_combatant("player", max_hp=200)], rng)
    _set_enemy(session, hp=300, attack=40)
    rng.push(ENEMY_BASIC_ATTACK)

    report = service.play_turn(session, BattleAction.block("player"))

    enemy_result = report.sequence[1].outcome.result
    assert enemy_result.damage == 20
    assert enemy_result.blocked is True
    assert enemy_result.block_attempted is True
    assert session.player.hp == 180
    assert session.player.block_next_attack is False
    assert session.player.block_reduction is None


def test_losing_last_member_ends_run_and_resets_current_streak() -> None:
    service = _make_battle_service()
    rng = ScriptedRNG()
    progress = RunProgress(defeated_enemies=2, current_win_streak=2, best_win_streak=5)
    session = _start(service, [make_combatant("player", max_hp=200)], rng, progress)
    session.player.hp = 1
    _set_enemy(session, hp=500, attack=40)
    rng.push(ENEMY_BASIC_ATTACK)

    report = service.play_turn(session, BattleAction.attack("player"))

    assert report.transition == "run-lost"
    assert session.is_over
    assert session.winner == "enemy"
    assert report.progress == RunProgress(defeated_enemies=2, current_win_streak=0, best_win_streak=5)
    assert any(isinstance(evt, RunEndedEvent) for evt in report.events)
    with pytest.raises(BattleStateError):
        service.select_player_action(session, BattleAction.attack("player"))


def test_enemy_knockout_replaces_enemy_and_skips_its_action() -> None:
    service = _make_battle_service()
    rng = ScriptedRNG()
    session = _start(service, [make_combatant("player", max_hp=200, attack=30)], rng)
    _set_enemy(session, hp=10, attack=40)
    old_enemy = session.enemy
    rng.push(ENEMY_BASIC_ATTACK)

    report = service.play_turn(session, BattleAction.attack("player"))

    assert report.transition == "enemy-replaced"
    assert len(report.sequence) == 1
    assert session.player.hp == 200
    new_enemy = session.enemy
    assert new_enemy is not old_enemy
    assert 180 <= new_enemy.max_hp <= 240
    assert 27 <= new_enemy.attack <= 36
    assert new_enemy.hp == new_enemy.max_hp
    assert new_enemy.skill_cooldowns == [0, 0, 0, 0]
    assert session.progress == RunProgress(defeated_enemies=1, current_win_streak=1, best_win_streak=1)
    assert any(isinstance(evt, EnemyReplacedEvent) for evt in report.events)
    assert session.phase == "selection"


def test_skill_cooldown_counts_down_over_three_turns() -> None:
    service = _make_battle_service()
    rng = ScriptedRNG(seed=7)
    session = _start(service, [make_combatant("player", max_hp=1000, attack=5)], rng)
    _set_enemy(session, hp=1000, attack=1)

    first = service.play_turn(session, BattleAction.skill("player", 0))
    assert first.sequence[0].outcome.cooldown_updates == [
        CooldownUpdate(monster_id="player", skill_index=0, new_cooldown=3)
    ]
    assert session.player.skill_cooldowns[0] == 2

    service.play_turn(session, BattleAction.attack("player"))
    assert session.player.skill_cooldowns[0] == 1
    service.play_turn(session, BattleAction.attack("player"))
    assert session.player.skill_cooldowns[0] == 0
    assert session.player.is_skill_ready(0)


def test_skill_on_cooldown_rejects_turn_without_consuming_it() -> None:
    service = _make_battle_service()
    rng = ScriptedRNG(seed=7)
    session = _start(service, [make_combatant("player", max_hp=1000, attack=5)], rng)
    _set_enemy(session, hp=1000, attack=1)
    service.play_turn(session, BattleAction.skill("player", 0))
    player_hp = session.player.hp
    enemy_hp = session.enemy.hp

    report = service.play_turn(session, BattleAction.skill("player", 0))

    assert report.accepted is False
    assert report.sequence == []
    assert isinstance(report.events[0], TurnRejectedEvent)
    assert report.events[0].actor == "player"
    assert session.turn_count == 2
    assert session.phase == "selection"
    assert session.player_action is None
    assert session.player.hp == player_hp
    assert session.enemy.hp == enemy_hp
    assert session.player.skill_cooldowns[0] == 2


def test_queued_defense_covers_exactly_one_opposing_action() -> None:
    service = _make_battle_service()
    rng = ScriptedRNG()
    session = _start(service, [make_combatant("player", max_hp=200, attack=30)], rng)
    _set_enemy(session, hp=500, attack=10)
    # enemy rolls a skill and picks its guard slot
    rng.push(0.0, 0.8)

    service.play_turn(session, BattleAction.block("player"))

    # the enemy's guard was not an attack, the player's block still expired
    assert session.player.block_next_attack is False
    assert session.enemy.block_next_attack is True

    rng.push(ENEMY_BASIC_ATTACK)
    report = service.play_turn(session, BattleAction.attack("player"))

    player_result = report.sequence[0].outcome.result
    assert player_result.blocked is True
    assert player_result.damage == 15
    assert session.enemy.block_next_attack is False


def test_attack_into_both_queued_defenses_clears_both_flags() -> None:
    service = _make_battle_service()
    rng = ScriptedRNG()
    session = _start(service, [make_combatant("player", attack=30)], rng)
    _set_enemy(session, hp=500, attack=10)
    session.enemy.dodge_next_attack = True
    session.enemy.dodge_chance = 0.0
    session.enemy.block_next_attack = True
    session.enemy.block_reduction = 0.5
    # enemy policy roll, then the player's attack rolls against the dodge
    rng.push(ENEMY_BASIC_ATTACK, 0.5)

    report = service.play_turn(session, BattleAction.attack("player"))

    player_result = report.sequence[0].outcome.result
    assert player_result.damage == 30
    assert player_result.blocked is False
    assert session.enemy.hp == 470
    assert session.enemy.dodge_next_attack is False
    assert session.enemy.block_next_attack is False
    assert session.enemy.block_reduction is None


def test_knocked_out_player_switches_to_next_member() -> None:
    service = _make_battle_service()
    rng = ScriptedRNG()
    team = [make_combatant("first", max_hp=200), make_combatant("second", max_hp=150)]
    session = _start(service, team, rng)
    session.player.hp = 1
    _set_enemy(session, hp=500, attack=40)
    rng.push(ENEMY_BASIC_ATTACK)

    report = service.play_turn(session, BattleAction.attack("first"))

    assert report.transition == "combatant-switch"
    assert session.current_index == 1
    assert session.player.instance_id == "second"
    assert session.team[0].hp == 0
    assert any(isinstance(evt, CombatantSwitchedEvent) for evt in report.events)
    assert not session.is_over
    with pytest.raises(BattleStateError):
        service.select_player_action(session, BattleAction.attack("first"))


def test_failed_turn_restores_pre_turn_state(monkeypatch: pytest.MonkeyPatch) -> None:
    service = _make_battle_service()
    rng = ScriptedRNG()
    session = _start(service, [make_combatant("player", max_hp=200, attack=30)], rng)
    _set_enemy(session, hp=500, attack=10)
    enemy_before = session.enemy
    real_resolve = battle_service_module.resolve_action
    calls = []

    def flaky_resolve(action, attacker, target, rng, rules):
        calls.append(action)
        if len(calls) == 2:
            raise RuntimeError("boom")
        return real_resolve(action, attacker, target, rng, rules)

    monkeypatch.setattr(battle_service_module, "resolve_action", flaky_resolve)
    rng.push(ENEMY_BASIC_ATTACK)

    report = service.play_turn(session, BattleAction.attack("player"))

    assert report.accepted is False
    assert isinstance(report.events[0], TurnFailedEvent)
    assert "boom" in report.events[0].reason
    assert session.enemy is enemy_before
    assert session.enemy.hp == 500
    assert session.player.hp == 200
    assert session.turn_count == 1
    assert session.phase == "selection"
    assert session.enemy_action is None


def test_finite_run_is_won_when_enough_enemies_fall() -> None:
    service = _make_battle_service(BattleRules(run_length=1).without_ambient())
    rng = ScriptedRNG()
    session = _start(service, [make_combatant("player", attack=30)], rng)
    _set_enemy(session, hp=10, attack=5)
    rng.push(ENEMY_BASIC_ATTACK)

    report = service.play_turn(session, BattleAction.attack("player"))

    assert report.transition == "run-won"
    assert session.winner == "player"
    assert session.is_over
    assert session.progress.defeated_enemies == 1


def test_reset_run_keeps_best_streak() -> None:
    service = _make_battle_service()
    progress = RunProgress(defeated_enemies=3, current_win_streak=3, best_win_streak=4)
    session = _start(service, [make_combatant("player")], RNG(1), progress)

    result = service.reset_run(session)

    assert result == RunProgress(defeated_enemies=0, current_win_streak=0, best_win_streak=4)
    assert session.is_over


def test_turn_flow_guards_phase_and_actor() -> None:
    service = _make_battle_service()
    session = _start(service, [make_combatant("player")], RNG(1))

    with pytest.raises(BattleStateError):
        service.resolve_turn(session)
    with pytest.raises(BattleStateError):
        service.select_player_action(session, BattleAction.attack(session.enemy.instance_id))

    service.select_player_action(session, BattleAction.attack("player"))
    assert session.phase == "resolution"
    assert session.enemy_action is not None
    with pytest.raises(BattleStateError):
        service.select_player_action(session, BattleAction.attack("player"))


def test_decide_winner() -> None:
    assert decide_winner(True, False) == "player"
    assert decide_winner(False, True) == "enemy"
    assert decide_winner(False, False) is None
    assert decide_winner(True, True) is None


def test_battle_view_reflects_session() -> None:
    service = _make_battle_service()
    session = _start(service, [make_combatant("player", hp=50, max_hp=120), make_combatant("bench")], RNG(1))
    session.player.hp = 60

    view = service.get_battle_view(session)

    assert view.player.hp_display == "60/120"
    assert [member.instance_id for member in view.team] == ["player", "bench"]
    assert view.enemy.instance_id == session.enemy.instance_id
    assert view.turn_count == 1


def test_seeded_run_keeps_invariants() -> None:
    service = BattleService(MonstersRepository())
    rng = RNG(99)
    chooser = RNG(5)
    progress = RunProgress()
    session = _start(service, service.build_team(["fire_pup", "rock_turtle", "flame_wolf"], rng), rng, progress)

    for _ in range(300):
        if session.is_over:
            service.reset_run(session)
            team = service.build_team(["water_cat", "ice_fox"], rng)
            session = _start(service, team, rng, progress)
        player = session.player
        options = [
            BattleAction.attack(player.instance_id),
            BattleAction.dodge(player.instance_id),
            BattleAction.block(player.instance_id),
        ] + [BattleAction.skill(player.instance_id, index) for index in player.ready_skill_indices()]

        report = service.play_turn(session, chooser.choice(options))

        assert report.accepted
        for combatant in session.team + [session.enemy]:
            assert 0 <= combatant.hp <= combatant.max_hp
            for skill, cooldown in zip(combatant.skills, combatant.skill_cooldowns):
                assert 0 <= cooldown <= skill.cooldown
        assert session.progress.best_win_streak >= session.progress.current_win_streak
