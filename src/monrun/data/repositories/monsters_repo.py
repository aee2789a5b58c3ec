"""Monster template repository."""
from __future__ import annotations

from typing import Dict, List

from monrun.core.types import RARITIES
from monrun.data.errors import DataReferenceError, DataValidationError
from monrun.data.repositories.base import RepositoryBase
from monrun.data.repositories.skills_repo import SkillsRepository
from monrun.domain.defs import MonsterDef, SkillDef

LOADOUT_SIZE = 4


class MonstersRepository(RepositoryBase[MonsterDef]):
    """Loads monster templates and resolves their skill loadouts."""

    def __init__(self, skills_repo: SkillsRepository | None = None, base_path=None) -> None:
        super().__init__("monsters.json", base_path)
        self._skills_repo = skills_repo or SkillsRepository(base_path=base_path)

    def _build(self, raw: dict[str, object]) -> Dict[str, MonsterDef]:
        monsters: Dict[str, MonsterDef] = {}
        for raw_id, payload in raw.items():
            if not isinstance(raw_id, str):
                raise DataValidationError("Monster IDs must be strings.")
            context = f"monster '{raw_id}'"
            monster_data = self._require_mapping(payload, context)
            self._assert_required(monster_data, {"name", "type", "rarity", "max_hp", "attack", "skills"}, context)

            skill_ids = self._require_str_list(monster_data["skills"], f"{context} skills")
            if len(skill_ids) != LOADOUT_SIZE:
                raise DataValidationError(f"{context} must list exactly {LOADOUT_SIZE} skills.")

            monsters[raw_id] = MonsterDef(
                id=raw_id,
                name=self._require_str(monster_data["name"], f"{context} name"),
                type=self._require_str(monster_data["type"], f"{context} type"),
                rarity=self._require_literal(monster_data["rarity"], RARITIES, f"{context} rarity"),  # type: ignore[arg-type]
                max_hp=self._require_int(monster_data["max_hp"], f"{context} max_hp", minimum=1),
                attack=self._require_int(monster_data["attack"], f"{context} attack", minimum=0),
                skills=tuple(self._resolve_skills(skill_ids, context)),
                image=self._optional_str(monster_data, "image", context),
            )
        return monsters

    def by_rarity(self, rarity: str) -> List[MonsterDef]:
        """Return templates of one rarity, sorted by id."""
        return [monster for monster in self.all() if monster.rarity == rarity]

    def _resolve_skills(self, skill_ids: List[str], context: str) -> List[SkillDef]:
        skills: List[SkillDef] = []
        for skill_id in skill_ids:
            try:
                skills.append(self._skills_repo.get(skill_id))
            except KeyError as exc:
                raise DataReferenceError(f"{context} references unknown skill '{skill_id}'.") from exc
        return skills
