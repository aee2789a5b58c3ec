"""Battle domain models."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Tuple

from monrun.core.rng import RNG
from monrun.core.types import ActionType, Actor, BattlePhase, Rarity
from monrun.domain.defs import SkillDef
from monrun.domain.run_progress import RunProgress


@dataclass(slots=True)
class Combatant:
    """A monster instance participating in battle."""

    instance_id: str
    name: str
    rarity: Rarity
    type: str
    hp: int
    max_hp: int
    attack: int
    skills: Tuple[SkillDef, ...]
    skill_cooldowns: List[int]
    template_id: str | None = None
    dodge_next_attack: bool = False
    dodge_chance: float | None = None
    block_next_attack: bool = False
    block_reduction: float | None = None

    @property
    def is_alive(self) -> bool:
        return self.hp > 0

    @property
    def has_defense_queued(self) -> bool:
        return self.dodge_next_attack or self.block_next_attack

    def copy(self) -> Combatant:
        """Return a working copy that shares skills but not mutable state."""
        return replace(self, skill_cooldowns=list(self.skill_cooldowns))

    def restore_state(self, saved: Combatant) -> None:
        """Overwrite mutable battle state with the values held by ``saved``."""
        self.hp = saved.hp
        self.skill_cooldowns = list(saved.skill_cooldowns)
        self.dodge_next_attack = saved.dodge_next_attack
        self.dodge_chance = saved.dodge_chance
        self.block_next_attack = saved.block_next_attack
        self.block_reduction = saved.block_reduction

    def is_skill_ready(self, skill_index: int) -> bool:
        if not 0 <= skill_index < len(self.skills):
            return False
        return self.skill_cooldowns[skill_index] == 0

    def ready_skill_indices(self) -> List[int]:
        return [index for index in range(len(self.skills)) if self.skill_cooldowns[index] == 0]

    def clear_dodge(self) -> None:
        self.dodge_next_attack = False
        self.dodge_chance = None

    def clear_block(self) -> None:
        self.block_next_attack = False
        self.block_reduction = None

    def clear_defenses(self) -> None:
        self.clear_dodge()
        self.clear_block()

    def decay_cooldowns(self) -> None:
        self.skill_cooldowns = [max(0, cooldown - 1) for cooldown in self.skill_cooldowns]


@dataclass(frozen=True, slots=True)
class BattleAction:
    """One combatant's committed choice for a turn."""

    monster_id: str
    type: ActionType
    skill_index: int | None = None

    @classmethod
    def attack(cls, monster_id: str) -> BattleAction:
        return cls(monster_id=monster_id, type="attack")

    @classmethod
    def skill(cls, monster_id: str, skill_index: int) -> BattleAction:
        return cls(monster_id=monster_id, type="skill", skill_index=skill_index)

    @classmethod
    def dodge(cls, monster_id: str) -> BattleAction:
        return cls(monster_id=monster_id, type="dodge")

    @classmethod
    def block(cls, monster_id: str) -> BattleAction:
        return cls(monster_id=monster_id, type="block")


@dataclass(slots=True)
class BattleResult:
    """What happened when one action resolved.

    ``dodged``/``blocked`` report a successful defense, ``dodge_attempted`` and
    ``block_attempted`` report that a queued defense was checked at all.
    ``attacker`` and ``target`` are the post-resolution working copies; for
    heals and self-buffs ``target`` is the caster.
    """

    attacker: Combatant
    target: Combatant
    damage: int = 0
    healed: int = 0
    dodged: bool = False
    blocked: bool = False
    dodge_attempted: bool = False
    block_attempted: bool = False
    skill: SkillDef | None = None


@dataclass(frozen=True, slots=True)
class HpChange:
    target_id: str
    new_hp: int
    original_hp: int

    @property
    def delta(self) -> int:
        return self.new_hp - self.original_hp


@dataclass(frozen=True, slots=True)
class CooldownUpdate:
    monster_id: str
    skill_index: int
    new_cooldown: int


@dataclass(slots=True)
class ActionOutcome:
    """Deferred changes produced by resolving one action."""

    result: BattleResult
    hp_change: HpChange
    cooldown_updates: List[CooldownUpdate] = field(default_factory=list)


@dataclass(slots=True)
class ActionStep:
    """One entry of a turn's resolution sequence."""

    actor: Actor
    action: BattleAction
    outcome: ActionOutcome


@dataclass(slots=True)
class BattleSession:
    """Tracks the state of an ongoing run."""

    session_id: str
    team: List[Combatant]
    enemy: Combatant
    rng: RNG
    progress: RunProgress = field(default_factory=RunProgress)
    current_index: int = 0
    phase: BattlePhase = "selection"
    turn_count: int = 1
    player_action: BattleAction | None = None
    enemy_action: BattleAction | None = None
    winner: Actor | None = None

    @property
    def player(self) -> Combatant:
        return self.team[self.current_index]

    @property
    def is_over(self) -> bool:
        return self.phase == "completed"


@dataclass(slots=True)
class CombatantView:
    """Read-only information for rendering a combatant."""

    instance_id: str
    name: str
    hp_display: str
    current_hp: int
    max_hp: int
    attack: int
    is_alive: bool
    skill_names: List[str]
    skill_cooldowns: List[int]
    defense: str | None
