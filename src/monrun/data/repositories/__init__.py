"""Repository exports."""

from .monsters_repo import MonstersRepository
from .skills_repo import SkillsRepository

__all__ = [
    "MonstersRepository",
    "SkillsRepository",
]
