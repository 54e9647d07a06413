"""Skill and saving throw bonuses from proficiency modifiers."""

from typing import Optional

from ..data.models import ABILITY_NAMES, CharacterRecord
from ..data.modifiers import ModifierIndex
from ..logging.config import get_logger
from ..models.resolved import AbilityScores, ProficiencyLevel, SkillResult, SkillSummary
from ..rules.tables import RuleTables, get_rule_tables

logger = get_logger(__name__)

# Jack of All Trades style grants use this subtype instead of a skill name
ALL_ABILITY_CHECKS = "ability-checks"


def proficiency_bonus(total_level: int) -> int:
    """Proficiency bonus for a total character level: +2 at 1-4 up to +6 at 17-20."""
    return 2 + (max(total_level, 1) - 1) // 4


def _proficiency_bonus_for(level: ProficiencyLevel, bonus: int) -> int:
    if level == ProficiencyLevel.EXPERTISE:
        return bonus * 2
    if level == ProficiencyLevel.PROFICIENT:
        return bonus
    if level == ProficiencyLevel.HALF:
        return bonus // 2
    return 0


def resolve_saving_throws(
    abilities: AbilityScores,
    index: ModifierIndex,
    prof_bonus: int,
    tables: Optional[RuleTables] = None
) -> tuple[SkillResult, ...]:
    """Saving throw bonus per ability."""
    tables = tables or get_rule_tables()
    suffix = tables.proficiencies["saving_throw_suffix"]

    results = []
    for ability in ABILITY_NAMES:
        proficient = index.has("proficiency", f"{ability}{suffix}")
        level = ProficiencyLevel.PROFICIENT if proficient else ProficiencyLevel.NONE
        results.append(SkillResult(
            name=f"{ability}-saving-throw",
            ability=ability,
            proficiency=level,
            bonus=abilities.modifier(ability) + _proficiency_bonus_for(level, prof_bonus),
        ))
    return tuple(results)


def _skill_level(skill: str, index: ModifierIndex) -> ProficiencyLevel:
    """Highest proficiency level granted for a skill."""
    if index.has("expertise", skill):
        return ProficiencyLevel.EXPERTISE
    if index.has("proficiency", skill):
        return ProficiencyLevel.PROFICIENT
    if index.has("half-proficiency", skill) or index.has("half-proficiency", ALL_ABILITY_CHECKS):
        return ProficiencyLevel.HALF
    return ProficiencyLevel.NONE


def resolve_skills(
    record: CharacterRecord,
    abilities: AbilityScores,
    index: Optional[ModifierIndex] = None,
    tables: Optional[RuleTables] = None
) -> SkillSummary:
    """
    Resolve all 18 skills, the six saving throws and passive perception.

    Args:
        record: Parsed character record
        abilities: Resolved ability scores
        index: Modifier index for the record (built if not given)
        tables: Rule tables (bundled tables if not given)

    Returns:
        SkillSummary
    """
    tables = tables or get_rule_tables()
    index = index or ModifierIndex.from_record(record)
    prof_bonus = proficiency_bonus(record.total_level)

    skills = []
    for skill, ability in tables.proficiencies["skills"].items():
        level = _skill_level(skill, index)
        skills.append(SkillResult(
            name=skill,
            ability=ability,
            proficiency=level,
            bonus=abilities.modifier(ability) + _proficiency_bonus_for(level, prof_bonus),
        ))

    summary = SkillSummary(
        skills=tuple(skills),
        saving_throws=resolve_saving_throws(abilities, index, prof_bonus, tables),
        passive_perception=10 + next(s.bonus for s in skills if s.name == "perception"),
    )

    logger.debug(
        "Resolved skills",
        character_id=record.id,
        proficient=[s.name for s in skills if s.proficiency != ProficiencyLevel.NONE],
        passive_perception=summary.passive_perception,
    )

    return summary
