"""Monster template definition structures."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from monrun.core.types import Rarity

from .skill_def import SkillDef


@dataclass(frozen=True, slots=True)
class MonsterDef:
    """Collection template a battle combatant is instantiated from."""

    id: str
    name: str
    type: str
    rarity: Rarity
    max_hp: int
    attack: int
    skills: Tuple[SkillDef, ...]
    image: str | None = None
