"""Skills repository."""
from __future__ import annotations

from typing import Dict

from monrun.core.types import ATTACK_SKILL_TYPES, SKILL_TYPES
from monrun.data.errors import DataValidationError
from monrun.data.repositories.base import RepositoryBase
from monrun.domain.defs import SkillDef

VALID_RANGES = {1, 3, 9}


class SkillsRepository(RepositoryBase[SkillDef]):
    """Loads the skill catalogue."""

    def __init__(self, base_path=None) -> None:
        super().__init__("skills.json", base_path)

    def _build(self, raw: dict[str, object]) -> Dict[str, SkillDef]:
        skills: Dict[str, SkillDef] = {}
        for raw_id, payload in raw.items():
            if not isinstance(raw_id, str):
                raise DataValidationError("Skill IDs must be strings.")
            context = f"skill '{raw_id}'"
            skill_data = self._require_mapping(payload, context)
            self._assert_required(skill_data, {"name", "description", "type", "cooldown"}, context)

            skill_type = self._require_literal(skill_data["type"], SKILL_TYPES, f"{context} type")
            skill_range = self._require_int(skill_data.get("range", 1), f"{context} range")
            if skill_range not in VALID_RANGES:
                raise DataValidationError(f"{context} range must be one of {sorted(VALID_RANGES)}.")

            damage = self._optional_int(skill_data, "damage", context)
            heal_amount = self._optional_int(skill_data, "heal_amount", context)
            if skill_type in ATTACK_SKILL_TYPES and heal_amount is not None:
                raise DataValidationError(f"{context} is an attack and cannot define heal_amount.")
            if skill_type == "heal" and damage:
                raise DataValidationError(f"{context} is a heal and cannot define damage.")

            skills[raw_id] = SkillDef(
                id=raw_id,
                name=self._require_str(skill_data["name"], f"{context} name"),
                description=self._require_str(skill_data["description"], f"{context} description"),
                type=skill_type,  # type: ignore[arg-type]
                cooldown=self._require_int(skill_data["cooldown"], f"{context} cooldown", minimum=0),
                range=skill_range,
                damage=damage,
                heal_amount=heal_amount,
                dodge_chance=self._optional_fraction(skill_data, "dodge_chance", context),
                block_reduction=self._optional_fraction(skill_data, "block_reduction", context),
                element=self._optional_str(skill_data, "element", context),
                animation=self._optional_str(skill_data, "animation", context),
            )
        return skills
