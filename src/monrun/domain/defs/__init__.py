"""Domain definition exports."""

from .monster_def import MonsterDef
from .skill_def import SkillDef

__all__ = [
    "MonsterDef",
    "SkillDef",
]
