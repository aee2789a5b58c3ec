"""Console-driven UI loops for monrun."""
from __future__ import annotations

import logging
import secrets
from typing import List, Literal, Sequence

from monrun.core.rng import RNG
from monrun.data.repositories import MonstersRepository, SkillsRepository
from monrun.domain.battle_models import BattleSession
from monrun.domain.defs import MonsterDef
from monrun.services import BattleService
from monrun.services.controllers import AvailableActions, BattleController
from monrun.presentation.cli.config import load_config
from monrun.presentation.cli.render import (
    format_skill_option,
    render_battle_view,
    render_events,
    render_heading,
    render_menu,
    render_run_summary,
)
from monrun.presentation.cli.stats_store import RunStatsStore

MenuAction = Literal["new_game", "quit"]
PlayerChoice = Literal["attack", "skill", "dodge", "block", "abandon"]
MAX_TEAM_SIZE = 3
_MAX_RANDOM_SEED = 2**31 - 1

logger = logging.getLogger(__name__)


def main() -> None:
    """Start the interactive CLI session."""
    config = load_config()
    logging.basicConfig(
        level=str(config["log_level"]),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    monsters_repo = MonstersRepository(SkillsRepository())
    battle_service = BattleService(monsters_repo)
    controller = BattleController(battle_service)
    default_team = [str(entry) for entry in config["default_team"]]  # type: ignore[union-attr]
    stats_store = RunStatsStore()
    progress = stats_store.load_progress()

    print("=== Monster Run ===")
    while True:
        if _main_menu_loop() == "quit":
            break
        seed = _prompt_seed()
        rng = RNG(seed)
        print(f"Run started with seed: {seed}")
        template_ids = _prompt_team(monsters_repo, default_team)
        team = battle_service.build_team(template_ids, rng)
        session, start_events = battle_service.start_battle(team, rng, progress)
        render_events(start_events)
        _run_battle_loop(controller, session)
        lifetime = stats_store.record_run(session.progress)
        render_run_summary(session.progress, lifetime.defeated_enemies)
        controller.start_new_run(session)
    print("Goodbye!")


def _main_menu_loop() -> MenuAction:
    while True:
        render_menu("Main Menu", ["New Run", "Quit"])
        choice = input("Select an option: ").strip()
        if choice == "1":
            return "new_game"
        if choice == "2":
            return "quit"
        print("Invalid selection. Please enter 1 or 2.")


def _prompt_seed() -> int:
    while True:
        raw_value = input("Enter seed (blank for random): ").strip()
        if not raw_value:
            return secrets.randbelow(_MAX_RANDOM_SEED)
        try:
            return int(raw_value)
        except ValueError:
            print("Invalid seed. Please enter a valid integer.")


def _prompt_team(monsters_repo: MonstersRepository, default_team: Sequence[str]) -> List[str]:
    templates = monsters_repo.all()
    known_ids = {template.id for template in templates}
    fallback = [template_id for template_id in default_team if template_id in known_ids][:MAX_TEAM_SIZE]
    while True:
        render_menu("Collection", [_describe_template(template) for template in templates])
        hint = ", ".join(fallback) if fallback else "none"
        raw = input(f"Pick up to {MAX_TEAM_SIZE} monsters, comma-separated (blank for {hint}): ").strip()
        if not raw:
            if fallback:
                return fallback
            print("No default team is configured.")
            continue
        parts = [part.strip() for part in raw.split(",") if part.strip()]
        try:
            indices = [int(part) - 1 for part in parts]
        except ValueError:
            print("Please enter numbers separated by commas.")
            continue
        if not indices or len(indices) > MAX_TEAM_SIZE:
            print(f"Select between 1 and {MAX_TEAM_SIZE} monsters.")
            continue
        if any(index < 0 or index >= len(templates) for index in indices):
            print("Invalid monster selection.")
            continue
        return [templates[index].id for index in indices]


def _describe_template(template: MonsterDef) -> str:
    skills = ", ".join(skill.name for skill in template.skills)
    return f"{template.name} [{template.rarity}] HP {template.max_hp} ATK {template.attack} - {skills}"


def _run_battle_loop(controller: BattleController, session: BattleSession) -> None:
    """Play turns until the run ends or the player abandons it."""
    while controller.is_awaiting_player(session):
        render_battle_view(controller.get_battle_view(session))
        available = controller.get_available_actions(session)
        choice = _prompt_battle_action(available)
        if choice == "abandon":
            logger.info("Run abandoned at turn %s", session.turn_count)
            return
        skill_index = _prompt_skill_choice(available) if choice == "skill" else None
        report = controller.apply_player_action(session, choice, skill_index)  # type: ignore[arg-type]
        render_heading("Events")
        render_events(report.events)


def _prompt_battle_action(available: AvailableActions) -> PlayerChoice:
    options: List[tuple[PlayerChoice, str]] = [("attack", "Attack")]
    if available.can_use_skill:
        options.append(("skill", "Use Skill"))
    options.append(("dodge", "Dodge"))
    options.append(("block", "Block"))
    options.append(("abandon", "Abandon Run"))
    while True:
        print("\nActions:")
        for idx, (_, label) in enumerate(options, start=1):
            print(f"{idx}. {label}")
        choice = input("Choose action: ").strip()
        try:
            index = int(choice) - 1
        except ValueError:
            print("Invalid selection.")
            continue
        if 0 <= index < len(options):
            return options[index][0]
        print("Invalid selection.")


def _prompt_skill_choice(available: AvailableActions) -> int:
    skills = available.skills
    while True:
        print("\nSkills:")
        for idx, skill in enumerate(skills):
            label = format_skill_option(skill.name, available.skill_cooldowns[idx])
            print(f"{idx + 1}. {label} - {skill.description}")
        choice = input("Select skill: ").strip()
        try:
            index = int(choice) - 1
        except ValueError:
            print("Invalid selection.")
            continue
        if 0 <= index < len(skills):
            return index
        print("Invalid selection.")
