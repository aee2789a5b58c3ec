"""Run progression counters."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class RunProgress:
    """Counts enemy knockouts and win streaks across a session."""

    defeated_enemies: int = 0
    current_win_streak: int = 0
    best_win_streak: int = 0

    def record_enemy_defeated(self) -> None:
        self.defeated_enemies += 1
        self.current_win_streak += 1
        self.best_win_streak = max(self.best_win_streak, self.current_win_streak)

    def record_team_lost(self) -> None:
        self.current_win_streak = 0

    def reset(self) -> None:
        """Start a new game. The best streak survives."""
        self.defeated_enemies = 0
        self.current_win_streak = 0

    def snapshot(self) -> RunProgress:
        return RunProgress(
            defeated_enemies=self.defeated_enemies,
            current_win_streak=self.current_win_streak,
            best_win_streak=self.best_win_streak,
        )
