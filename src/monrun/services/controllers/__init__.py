"""UI-agnostic controllers for game flow orchestration."""
from __future__ import annotations

from .battle_controller import AvailableActions, BattleController

__all__ = [
    "AvailableActions",
    "BattleController",
]
