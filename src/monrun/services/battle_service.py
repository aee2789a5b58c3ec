"""Battle service orchestrating simultaneous-choice, sequential-resolution turns."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from monrun.core.rng import RNG
from monrun.core.settings import DEFAULT_RULES, BattleRules
from monrun.core.types import Actor, BattlePhase, TurnTransition
from monrun.data.repositories import MonstersRepository
from monrun.domain.battle_models import (
    ActionOutcome,
    ActionStep,
    BattleAction,
    BattleSession,
    Combatant,
    CombatantView,
)
from monrun.domain.run_progress import RunProgress
from monrun.services.action_resolver import resolve_action
from monrun.services.enemy_policy import choose_enemy_action
from monrun.services.errors import BattleStateError
from monrun.services.factories import create_combatant, create_wild_enemy, make_instance_id, prepare_team

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BattleView:
    """Presentation view for the current battle state."""

    session_id: str
    player: CombatantView
    enemy: CombatantView
    team: List[CombatantView]
    phase: BattlePhase
    turn_count: int
    progress: RunProgress


@dataclass(slots=True)
class BattleEvent:
    """Base battle event."""


@dataclass(slots=True)
class BattleStartedEvent(BattleEvent):
    session_id: str
    player_name: str
    enemy_name: str


@dataclass(slots=True)
class ActionsSelectedEvent(BattleEvent):
    player_action: BattleAction
    enemy_action: BattleAction


@dataclass(slots=True)
class AttackResolvedEvent(BattleEvent):
    actor: Actor
    attacker_id: str
    attacker_name: str
    target_id: str
    target_name: str
    damage: int
    target_hp: int
    dodged: bool
    blocked: bool
    dodge_attempted: bool
    block_attempted: bool
    skill_name: str | None = None


@dataclass(slots=True)
class HealResolvedEvent(BattleEvent):
    actor: Actor
    combatant_id: str
    combatant_name: str
    skill_name: str
    healed: int
    hp: int


@dataclass(slots=True)
class DefenseQueuedEvent(BattleEvent):
    actor: Actor
    combatant_id: str
    combatant_name: str
    kind: str
    amount: float
    skill_name: str | None = None


@dataclass(slots=True)
class CombatantDefeatedEvent(BattleEvent):
    combatant_id: str
    combatant_name: str


@dataclass(slots=True)
class CombatantSwitchedEvent(BattleEvent):
    previous_id: str
    combatant_id: str
    combatant_name: str


@dataclass(slots=True)
class EnemyReplacedEvent(BattleEvent):
    enemy_id: str
    enemy_name: str
    max_hp: int
    attack: int


@dataclass(slots=True)
class RunEndedEvent(BattleEvent):
    winner: Actor | None
    defeated_enemies: int
    best_win_streak: int


@dataclass(slots=True)
class TurnRejectedEvent(BattleEvent):
    actor: Actor
    reason: str


@dataclass(slots=True)
class TurnFailedEvent(BattleEvent):
    reason: str


@dataclass(slots=True)
class TurnReport:
    """Everything the presentation layer needs about one submitted turn.

    ``transition`` is None when the turn was rejected or failed; the session
    is then back in selection exactly as it was before the submission.
    """

    turn: int
    transition: TurnTransition | None
    player_action: BattleAction | None
    enemy_action: BattleAction | None
    sequence: List[ActionStep] = field(default_factory=list)
    events: List[BattleEvent] = field(default_factory=list)
    progress: RunProgress = field(default_factory=RunProgress)

    @property
    def accepted(self) -> bool:
        return self.transition is not None


def decide_winner(player_alive: bool, enemy_alive: bool) -> Actor | None:
    """Return the winning side, or None for a draw or an ongoing fight."""
    if player_alive and not enemy_alive:
        return "player"
    if enemy_alive and not player_alive:
        return "enemy"
    return None


@dataclass(slots=True)
class _SessionSnapshot:
    """Pre-turn state, restored in place when a turn is rejected or fails."""

    team: List[Tuple[Combatant, Combatant]]
    enemy: Tuple[Combatant, Combatant]
    progress: RunProgress
    current_index: int
    turn_count: int
    winner: Actor | None

    @classmethod
    def capture(cls, session: BattleSession) -> _SessionSnapshot:
        return cls(
            team=[(member, member.copy()) for member in session.team],
            enemy=(session.enemy, session.enemy.copy()),
            progress=session.progress.snapshot(),
            current_index=session.current_index,
            turn_count=session.turn_count,
            winner=session.winner,
        )

    def restore(self, session: BattleSession) -> None:
        for live, saved in self.team:
            live.restore_state(saved)
        session.team = [live for live, _ in self.team]
        live_enemy, saved_enemy = self.enemy
        live_enemy.restore_state(saved_enemy)
        session.enemy = live_enemy
        session.progress.defeated_enemies = self.progress.defeated_enemies
        session.progress.current_win_streak = self.progress.current_win_streak
        session.progress.best_win_streak = self.progress.best_win_streak
        session.current_index = self.current_index
        session.turn_count = self.turn_count
        session.winner = self.winner
        session.phase = "selection"
        session.player_action = None
        session.enemy_action = None


class BattleService:
    """Deterministic run orchestrator.

    The player's action always resolves first and is committed before the
    enemy's action is resolved, so a dodge or block queued by the player is
    live for the enemy's action in the same turn. The service is the only
    writer of session state.
    """

    def __init__(self, monsters_repo: MonstersRepository, rules: BattleRules = DEFAULT_RULES) -> None:
        self._monsters_repo = monsters_repo
        self._rules = rules

    @property
    def rules(self) -> BattleRules:
        return self._rules

    # -----------------------
    # Run Lifecycle
    # -----------------------
    def build_team(self, template_ids: Sequence[str], rng: RNG) -> List[Combatant]:
        """Instantiate fresh combatants for the given collection templates."""
        return [create_combatant(template_id, self._monsters_repo, rng) for template_id in template_ids]

    def start_battle(
        self,
        team: Sequence[Combatant],
        rng: RNG,
        progress: RunProgress | None = None,
    ) -> tuple[BattleSession, List[BattleEvent]]:
        """Start a run with the given team against a freshly generated enemy."""
        members = prepare_team(team)
        enemy = create_wild_enemy(members[0], rng, self._rules)
        session = BattleSession(
            session_id=make_instance_id("battle", rng),
            team=members,
            enemy=enemy,
            rng=rng,
            progress=progress if progress is not None else RunProgress(),
        )
        logger.info(
            "Battle %s started: %s vs %s (hp %s, atk %s)",
            session.session_id,
            session.player.name,
            enemy.name,
            enemy.max_hp,
            enemy.attack,
        )
        events: List[BattleEvent] = [
            BattleStartedEvent(session_id=session.session_id, player_name=session.player.name, enemy_name=enemy.name)
        ]
        return session, events

    def reset_run(self, session: BattleSession) -> RunProgress:
        """End the session for a new game. The best streak is kept."""
        session.phase = "completed"
        session.player_action = None
        session.enemy_action = None
        session.progress.reset()
        logger.info("Run reset; best streak stays at %s", session.progress.best_win_streak)
        return session.progress

    def get_battle_view(self, session: BattleSession) -> BattleView:
        """Return structured information for rendering."""
        return BattleView(
            session_id=session.session_id,
            player=self._to_view(session.player),
            enemy=self._to_view(session.enemy),
            team=[self._to_view(member) for member in session.team],
            phase=session.phase,
            turn_count=session.turn_count,
            progress=session.progress.snapshot(),
        )

    # -----------------------
    # Turn Flow
    # -----------------------
    def select_player_action(self, session: BattleSession, action: BattleAction) -> BattleAction:
        """Record the player's choice and commit the enemy's choice alongside it."""
        if session.is_over:
            raise BattleStateError("The run is already over.")
        if session.phase != "selection":
            raise BattleStateError(f"Cannot select an action during {session.phase}.")
        if action.monster_id != session.player.instance_id:
            raise BattleStateError(f"'{action.monster_id}' is not the active combatant.")

        enemy_action = choose_enemy_action(session.enemy, session.player, session.rng, self._rules)
        session.player_action = action
        session.enemy_action = enemy_action
        session.phase = "resolution"
        return enemy_action

    def resolve_turn(self, session: BattleSession) -> TurnReport:
        """Resolve both selected actions. Failures leave the session untouched."""
        if session.phase != "resolution" or session.player_action is None or session.enemy_action is None:
            raise BattleStateError("Both actions must be selected before resolving a turn.")

        snapshot = _SessionSnapshot.capture(session)
        try:
            return self._resolve_turn(session, snapshot)
        except Exception as exc:
            logger.exception("Turn %s failed; restoring the previous state", session.turn_count)
            report = TurnReport(
                turn=snapshot.turn_count,
                transition=None,
                player_action=session.player_action,
                enemy_action=session.enemy_action,
                events=[TurnFailedEvent(reason=str(exc) or exc.__class__.__name__)],
            )
            snapshot.restore(session)
            report.progress = session.progress.snapshot()
            return report

    def play_turn(self, session: BattleSession, action: BattleAction) -> TurnReport:
        """Select and immediately resolve a turn."""
        self.select_player_action(session, action)
        return self.resolve_turn(session)

    # -----------------------
    # Helpers
    # -----------------------
    def _resolve_turn(self, session: BattleSession, snapshot: _SessionSnapshot) -> TurnReport:
        player_action = session.player_action
        enemy_action = session.enemy_action
        assert player_action is not None and enemy_action is not None
        report = TurnReport(
            turn=session.turn_count,
            transition=None,
            player_action=player_action,
            enemy_action=enemy_action,
            events=[ActionsSelectedEvent(player_action=player_action, enemy_action=enemy_action)],
        )

        player = session.player
        enemy = session.enemy
        player_outcome = resolve_action(player_action, player, enemy, session.rng, self._rules)
        if player_outcome is None:
            return self._reject(session, snapshot, report, "player")
        self._commit(player_outcome, player, enemy)
        report.sequence.append(ActionStep(actor="player", action=player_action, outcome=player_outcome))
        report.events.append(self._outcome_event("player", player_outcome))

        if enemy.is_alive:
            enemy_outcome = resolve_action(enemy_action, enemy, player, session.rng, self._rules)
            if enemy_outcome is None:
                return self._reject(session, snapshot, report, "enemy")
            self._commit(enemy_outcome, enemy, player)
            report.sequence.append(ActionStep(actor="enemy", action=enemy_action, outcome=enemy_outcome))
            report.events.append(self._outcome_event("enemy", enemy_outcome))
        else:
            logger.debug("%s was knocked out before acting", enemy.name)

        player.decay_cooldowns()
        enemy.decay_cooldowns()

        report.transition = self._settle_turn(session, report.events)
        session.turn_count += 1
        session.player_action = None
        session.enemy_action = None
        if session.phase != "completed":
            session.phase = "selection"
        report.progress = session.progress.snapshot()
        logger.info("Turn %s resolved: %s", report.turn, report.transition)
        return report

    def _reject(
        self, session: BattleSession, snapshot: _SessionSnapshot, report: TurnReport, actor: Actor
    ) -> TurnReport:
        action = session.player_action if actor == "player" else session.enemy_action
        logger.warning("Rejected %s action %s; the turn is not consumed", actor, action)
        snapshot.restore(session)
        report.sequence.clear()
        report.events = [TurnRejectedEvent(actor=actor, reason="skill_unavailable")]
        report.progress = session.progress.snapshot()
        return report

    def _commit(self, outcome: ActionOutcome, actor: Combatant, opponent: Combatant) -> None:
        """Apply an outcome's deltas to the live combatants."""
        result = outcome.result
        for combatant in (actor, opponent):
            if combatant.instance_id == outcome.hp_change.target_id:
                combatant.hp = max(0, min(combatant.max_hp, outcome.hp_change.new_hp))

        self._sync_defenses(actor, result.attacker)
        if result.target is not result.attacker:
            self._sync_defenses(opponent, result.target)
        # a queued defense covers exactly one opposing action
        opponent.clear_defenses()

        for update in outcome.cooldown_updates:
            if update.monster_id == actor.instance_id:
                actor.skill_cooldowns[update.skill_index] = update.new_cooldown

    @staticmethod
    def _sync_defenses(live: Combatant, resolved: Combatant) -> None:
        live.dodge_next_attack = resolved.dodge_next_attack
        live.dodge_chance = resolved.dodge_chance
        live.block_next_attack = resolved.block_next_attack
        live.block_reduction = resolved.block_reduction

    def _settle_turn(self, session: BattleSession, events: List[BattleEvent]) -> TurnTransition:
        player = session.player
        enemy = session.enemy

        if not player.is_alive:
            events.append(CombatantDefeatedEvent(combatant_id=player.instance_id, combatant_name=player.name))
            next_index = self._next_member_index(session)
            if next_index is None:
                session.progress.record_team_lost()
                return self._end_run(session, decide_winner(False, enemy.is_alive), events, "run-lost")
            session.current_index = next_index
            enemy.clear_defenses()
            events.append(
                CombatantSwitchedEvent(
                    previous_id=player.instance_id,
                    combatant_id=session.player.instance_id,
                    combatant_name=session.player.name,
                )
            )
            logger.info("%s fell; %s steps in", player.name, session.player.name)
            return "combatant-switch"

        if not enemy.is_alive:
            events.append(CombatantDefeatedEvent(combatant_id=enemy.instance_id, combatant_name=enemy.name))
            session.progress.record_enemy_defeated()
            run_length = self._rules.run_length
            if run_length is not None and session.progress.defeated_enemies >= run_length:
                return self._end_run(session, "player", events, "run-won")
            session.enemy = create_wild_enemy(player, session.rng, self._rules)
            player.clear_defenses()
            events.append(
                EnemyReplacedEvent(
                    enemy_id=session.enemy.instance_id,
                    enemy_name=session.enemy.name,
                    max_hp=session.enemy.max_hp,
                    attack=session.enemy.attack,
                )
            )
            logger.info(
                "Enemy defeated (%s total, streak %s); next enemy hp %s atk %s",
                session.progress.defeated_enemies,
                session.progress.current_win_streak,
                session.enemy.max_hp,
                session.enemy.attack,
            )
            return "enemy-replaced"

        return "continue"

    def _end_run(
        self,
        session: BattleSession,
        winner: Actor | None,
        events: List[BattleEvent],
        transition: TurnTransition,
    ) -> TurnTransition:
        session.phase = "completed"
        session.winner = winner
        events.append(
            RunEndedEvent(
                winner=winner,
                defeated_enemies=session.progress.defeated_enemies,
                best_win_streak=session.progress.best_win_streak,
            )
        )
        logger.info("Run over (%s) after %s enemies", transition, session.progress.defeated_enemies)
        return transition

    @staticmethod
    def _next_member_index(session: BattleSession) -> int | None:
        for index in range(session.current_index + 1, len(session.team)):
            if session.team[index].is_alive:
                return index
        return None

    @staticmethod
    def _outcome_event(actor: Actor, outcome: ActionOutcome) -> BattleEvent:
        result = outcome.result
        skill_name = result.skill.name if result.skill else None
        caster = result.attacker
        if result.target is result.attacker:
            if result.skill is not None and result.skill.type == "heal":
                return HealResolvedEvent(
                    actor=actor,
                    combatant_id=caster.instance_id,
                    combatant_name=caster.name,
                    skill_name=result.skill.name,
                    healed=result.healed,
                    hp=caster.hp,
                )
            if caster.dodge_next_attack:
                kind, amount = "dodge", caster.dodge_chance or 0.0
            else:
                kind, amount = "block", caster.block_reduction or 0.0
            return DefenseQueuedEvent(
                actor=actor,
                combatant_id=caster.instance_id,
                combatant_name=caster.name,
                kind=kind,
                amount=amount,
                skill_name=skill_name,
            )
        return AttackResolvedEvent(
            actor=actor,
            attacker_id=caster.instance_id,
            attacker_name=caster.name,
            target_id=result.target.instance_id,
            target_name=result.target.name,
            damage=result.damage,
            target_hp=outcome.hp_change.new_hp,
            dodged=result.dodged,
            blocked=result.blocked,
            dodge_attempted=result.dodge_attempted,
            block_attempted=result.block_attempted,
            skill_name=skill_name,
        )

    @staticmethod
    def _to_view(combatant: Combatant) -> CombatantView:
        if combatant.dodge_next_attack:
            defense: str | None = "dodge"
        elif combatant.block_next_attack:
            defense = "block"
        else:
            defense = None
        return CombatantView(
            instance_id=combatant.instance_id,
            name=combatant.name,
            hp_display=f"{combatant.hp}/{combatant.max_hp}",
            current_hp=combatant.hp,
            max_hp=combatant.max_hp,
            attack=combatant.attack,
            is_alive=combatant.is_alive,
            skill_names=[skill.name for skill in combatant.skills],
            skill_cooldowns=list(combatant.skill_cooldowns),
            defense=defense,
        )
