"""File-system helpers for lifetime run statistics."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from monrun.domain.run_progress import RunProgress
from monrun.presentation.cli import config

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LifetimeStats:
    """Totals kept between launches."""

    best_win_streak: int = 0
    defeated_enemies: int = 0


class RunStatsStore:
    """Persists the best streak and lifetime knockouts on disk."""

    def __init__(self, path: Path | str | None = None) -> None:
        self._path = Path(path) if path is not None else config.get_stats_path()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> LifetimeStats:
        """Read the stored totals, or zeroes when the file is missing or unreadable."""
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return LifetimeStats()
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable stats %s: %s", self._path, exc)
            return LifetimeStats()
        if not isinstance(payload, dict):
            return LifetimeStats()
        return LifetimeStats(
            best_win_streak=_count(payload.get("best_win_streak")),
            defeated_enemies=_count(payload.get("defeated_enemies")),
        )

    def load_progress(self) -> RunProgress:
        """Return fresh run progress seeded with the stored best streak."""
        return RunProgress(best_win_streak=self.load().best_win_streak)

    def record_run(self, progress: RunProgress) -> LifetimeStats:
        """Fold one finished run into the stored totals and write them back."""
        stored = self.load()
        stats = LifetimeStats(
            best_win_streak=max(stored.best_win_streak, progress.best_win_streak),
            defeated_enemies=stored.defeated_enemies + progress.defeated_enemies,
        )
        self.write(stats)
        return stats

    def write(self, stats: LifetimeStats) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload: Dict[str, Any] = {
            "best_win_streak": stats.best_win_streak,
            "defeated_enemies": stats.defeated_enemies,
        }
        self._path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")


def _count(value: object) -> int:
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    return 0
