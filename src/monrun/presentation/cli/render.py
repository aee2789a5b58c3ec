"""Shared CLI rendering helpers."""
from __future__ import annotations

import os
from typing import Iterable, List, Sequence

from monrun.domain.battle_models import CombatantView
from monrun.domain.run_progress import RunProgress
from monrun.services.battle_service import (
    ActionsSelectedEvent,
    AttackResolvedEvent,
    BattleEvent,
    BattleStartedEvent,
    BattleView,
    CombatantDefeatedEvent,
    CombatantSwitchedEvent,
    DefenseQueuedEvent,
    EnemyReplacedEvent,
    HealResolvedEvent,
    RunEndedEvent,
    TurnFailedEvent,
    TurnRejectedEvent,
)


def debug_enabled() -> bool:
    """Return True only when MONRUN_DEBUG is explicitly set to '1'."""
    return os.getenv("MONRUN_DEBUG") == "1"


def render_heading(title: str) -> None:
    """Print a consistent section heading."""
    print(f"\n=== {title} ===")


def render_menu(title: str, options: Sequence[str]) -> None:
    """Display a menu section with numbered options."""
    render_heading(title)
    for idx, label in enumerate(options, start=1):
        print(f"{idx}. {label}")


def render_bullet_lines(lines: Iterable[str]) -> None:
    """Print bullet-prefixed lines."""
    for line in lines:
        print(f"- {line}")


def format_combatant_line(view: CombatantView, *, debug: bool = False) -> str:
    status = view.hp_display if view.is_alive else "DOWN"
    line = f"{view.name:<16} HP {status:<9} ATK {view.attack}"
    if view.defense:
        line += f" [{view.defense}]"
    if debug:
        line += f" ({view.instance_id})"
    return line


def format_skill_option(name: str, cooldown: int) -> str:
    if cooldown > 0:
        return f"{name} (cooldown {cooldown})"
    return name


def render_battle_view(view: BattleView) -> None:
    debug = debug_enabled()
    render_heading(f"Turn {view.turn_count}")
    print("Your team:")
    for member in view.team:
        marker = "*" if member.instance_id == view.player.instance_id else " "
        print(f"{marker} {format_combatant_line(member, debug=debug)}")
    print("Enemy:")
    print(f"  {format_combatant_line(view.enemy, debug=debug)}")
    print(f"Defeated: {view.progress.defeated_enemies}  Streak: {view.progress.current_win_streak}")


def format_battle_event(event: BattleEvent) -> str | None:
    """Return a one-line description of ``event``, or None to stay silent."""
    if isinstance(event, BattleStartedEvent):
        return f"Battle started: {event.player_name} vs {event.enemy_name}."
    if isinstance(event, ActionsSelectedEvent):
        return None
    if isinstance(event, AttackResolvedEvent):
        verb = f"uses {event.skill_name} on" if event.skill_name else "attacks"
        if event.dodged:
            return f"{event.attacker_name} {verb} {event.target_name}, but {event.target_name} dodges!"
        suffix = " (blocked)" if event.blocked else ""
        return (
            f"{event.attacker_name} {verb} {event.target_name} for {event.damage} damage{suffix} "
            f"(HP now {event.target_hp})."
        )
    if isinstance(event, HealResolvedEvent):
        return f"{event.combatant_name} uses {event.skill_name} and recovers {event.healed} HP (HP now {event.hp})."
    if isinstance(event, DefenseQueuedEvent):
        source = event.skill_name or event.kind.title()
        if event.kind == "dodge":
            return f"{event.combatant_name} readies {source} ({event.amount:.0%} dodge chance)."
        return f"{event.combatant_name} readies {source} ({event.amount:.0%} damage reduction)."
    if isinstance(event, CombatantDefeatedEvent):
        return f"{event.combatant_name} is knocked out."
    if isinstance(event, CombatantSwitchedEvent):
        return f"{event.combatant_name} steps in."
    if isinstance(event, EnemyReplacedEvent):
        return f"A new {event.enemy_name} appears (HP {event.max_hp}, ATK {event.attack})."
    if isinstance(event, RunEndedEvent):
        outcome = "You win the run!" if event.winner == "player" else "Your team has fallen."
        return f"{outcome} Enemies defeated: {event.defeated_enemies}."
    if isinstance(event, TurnRejectedEvent):
        if event.actor == "player":
            return "That skill is not ready. Choose another action."
        return "The turn was cancelled; choose again."
    if isinstance(event, TurnFailedEvent):
        return f"Something went wrong resolving the turn ({event.reason})."
    return str(event)


def render_events(events: Sequence[BattleEvent]) -> None:
    lines: List[str] = []
    for event in events:
        line = format_battle_event(event)
        if line is not None:
            lines.append(line)
    render_bullet_lines(lines)


def render_run_summary(progress: RunProgress, lifetime_defeated: int | None = None) -> None:
    render_heading("Run Summary")
    print(f"Enemies defeated: {progress.defeated_enemies}")
    print(f"Best win streak: {progress.best_win_streak}")
    if lifetime_defeated is not None:
        print(f"Enemies defeated across all runs: {lifetime_defeated}")
