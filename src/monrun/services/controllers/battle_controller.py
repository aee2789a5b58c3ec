"""UI-agnostic battle controller that separates state progression from rendering."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from monrun.core.types import ActionType
from monrun.domain.battle_models import BattleAction, BattleSession
from monrun.domain.defs import SkillDef
from monrun.services.battle_service import BattleService, BattleView, TurnReport


@dataclass(slots=True)
class AvailableActions:
    """What the active combatant may submit this turn."""

    can_attack: bool = False
    can_dodge: bool = False
    can_block: bool = False
    can_use_skill: bool = False
    ready_skill_indices: List[int] = field(default_factory=list)
    skills: List[SkillDef] = field(default_factory=list)
    skill_cooldowns: List[int] = field(default_factory=list)


class BattleController:
    """
    UI-agnostic controller for battle state progression.

    This controller wraps BattleService and exposes only structured state and actions.
    It does NOT handle rendering, formatting, or input prompts.

    Responsibilities:
    - Expose structured state (active combatant, available actions)
    - Translate player choices into battle actions and resolve the turn
    - Return turn reports for the presentation layer
    """

    def __init__(self, battle_service: BattleService) -> None:
        self._service = battle_service

    def get_battle_view(self, session: BattleSession) -> BattleView:
        """Return structured view of current battle state for rendering."""
        return self._service.get_battle_view(session)

    def is_awaiting_player(self, session: BattleSession) -> bool:
        """Check whether the session is waiting for a player choice."""
        return not session.is_over and session.phase == "selection"

    def get_available_actions(self, session: BattleSession) -> AvailableActions:
        """Return the actions the active combatant can submit right now."""
        if not self.is_awaiting_player(session):
            return AvailableActions()
        player = session.player
        ready = player.ready_skill_indices()
        return AvailableActions(
            can_attack=True,
            can_dodge=True,
            can_block=True,
            can_use_skill=bool(ready),
            ready_skill_indices=ready,
            skills=list(player.skills),
            skill_cooldowns=list(player.skill_cooldowns),
        )

    def apply_player_action(
        self, session: BattleSession, action_type: ActionType, skill_index: int | None = None
    ) -> TurnReport:
        """
        Submit the active combatant's action and resolve the turn.

        This method does NOT print or format anything. A skill still cooling
        down is passed through so the service reports the rejected turn.
        """
        if session.is_over:
            raise ValueError("The run is already over.")
        actor_id = session.player.instance_id

        if action_type == "attack":
            action = BattleAction.attack(actor_id)
        elif action_type == "dodge":
            action = BattleAction.dodge(actor_id)
        elif action_type == "block":
            action = BattleAction.block(actor_id)
        elif action_type == "skill":
            if skill_index is None:
                raise ValueError("Skill action requires skill_index.")
            action = BattleAction.skill(actor_id, skill_index)
        else:
            raise ValueError(f"Unknown action type: {action_type}")

        return self._service.play_turn(session, action)

    def start_new_run(self, session: BattleSession) -> None:
        """Abandon the current run, keeping the best streak."""
        self._service.reset_run(session)
