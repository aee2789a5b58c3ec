"""Service layer exports."""

from .errors import BattleStateError, FactoryError
from .action_resolver import resolve_action
from .enemy_policy import choose_enemy_action
from .battle_service import BattleService, BattleView, TurnReport, decide_winner

__all__ = [
    "BattleStateError",
    "FactoryError",
    "resolve_action",
    "choose_enemy_action",
    "BattleService",
    "BattleView",
    "TurnReport",
    "decide_winner",
]
