import json
from pathlib import Path

from monrun.domain.run_progress import RunProgress
from monrun.presentation.cli import config as config_module
from monrun.presentation.cli.stats_store import LifetimeStats, RunStatsStore


def test_missing_stats_start_from_zero(tmp_path: Path) -> None:
    store = RunStatsStore(tmp_path / "stats.json")

    assert store.load() == LifetimeStats()
    assert store.load_progress() == RunProgress()


def test_best_streak_survives_a_reload(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "stats.json"
    progress = RunProgress()
    for _ in range(3):
        progress.record_enemy_defeated()
    progress.record_team_lost()

    RunStatsStore(path).record_run(progress)
    reloaded = RunStatsStore(path).load_progress()

    assert reloaded.best_win_streak == 3
    assert reloaded.current_win_streak == 0
    assert reloaded.defeated_enemies == 0


def test_recording_runs_accumulates_knockouts_and_keeps_the_best(tmp_path: Path) -> None:
    store = RunStatsStore(tmp_path / "stats.json")
    first = RunProgress(defeated_enemies=5, best_win_streak=5)
    second = RunProgress(defeated_enemies=2, best_win_streak=2)

    store.record_run(first)
    stats = store.record_run(second)

    assert stats == LifetimeStats(best_win_streak=5, defeated_enemies=7)
    assert json.loads(store.path.read_text(encoding="utf-8")) == {"best_win_streak": 5, "defeated_enemies": 7}


def test_unreadable_stats_fall_back_to_zero(tmp_path: Path) -> None:
    path = tmp_path / "stats.json"
    path.write_text("{broken", encoding="utf-8")
    assert RunStatsStore(path).load() == LifetimeStats()

    path.write_text(json.dumps({"best_win_streak": -2, "defeated_enemies": "many"}), encoding="utf-8")
    assert RunStatsStore(path).load() == LifetimeStats()


def test_default_path_lives_in_user_data_dir(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(config_module, "get_user_data_dir", lambda: tmp_path)

    assert RunStatsStore().path == tmp_path / "stats.json"
