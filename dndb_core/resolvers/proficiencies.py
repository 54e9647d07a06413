"""Weapon, armor and tool proficiency resolution with category subsumption."""

from typing import Optional

from ..config.defaults import ResolutionConfig, get_default_config
from ..data.models import CharacterRecord, ModifierEntry
from ..data.modifiers import ModifierIndex
from ..errors import UnmappedEntryError
from ..logging.config import get_logger
from ..models.resolved import (
    ProficiencyCategory,
    ProficiencyEntry,
    ProficiencyResult,
    SkippedEntry,
)
from ..rules.tables import RuleTables, get_rule_tables

logger = get_logger(__name__)

UNRESOLVED_CHOICE = "Unresolved choice proficiency"
NO_MAPPING = "No mapping found"

# Weapon category key -> dictionary of the specific weapons it covers
SUBSUMING_CATEGORIES = {
    "simple-weapons": "simple_weapons",
    "martial-weapons": "martial_weapons",
}


def is_skill_or_save(entry: ModifierEntry, tables: RuleTables) -> bool:
    """Skill and saving throw proficiencies belong to the skills resolver."""
    rules = tables.proficiencies
    key = entry.subtype.lower()
    if rules["entity_type_ids"].get(entry.entity_type_id) == "skill":
        return True
    return key in rules["skills"] or key.endswith(rules["saving_throw_suffix"])


def is_unresolved_choice(subtype: str, tables: RuleTables) -> bool:
    markers = tables.proficiencies["choice_markers"]
    key = subtype.lower()
    return (any(key.startswith(prefix) for prefix in markers["prefixes"])
            or any(marker in key for marker in markers["substrings"]))


def map_proficiency(key: str, entity_type_id: Optional[int], tables: RuleTables) -> tuple[str, ProficiencyCategory]:
    """
    Map a proficiency subtype to its display name and category.

    The entity type id decides the category when it is a known one;
    otherwise the dictionary holding the key does.

    Raises:
        UnmappedEntryError: If no dictionary has the key
    """
    rules = tables.proficiencies
    dictionaries = (
        (ProficiencyCategory.WEAPON, rules["weapon_categories"]),
        (ProficiencyCategory.WEAPON, rules["simple_weapons"]),
        (ProficiencyCategory.WEAPON, rules["martial_weapons"]),
        (ProficiencyCategory.ARMOR, rules["armor"]),
        (ProficiencyCategory.TOOL, rules["tools"]),
    )

    for category, names in dictionaries:
        if key in names:
            typed = rules["entity_type_ids"].get(entity_type_id)
            if typed in (c.value for c in ProficiencyCategory):
                category = ProficiencyCategory(typed)
            return names[key], category

    raise UnmappedEntryError(f"No proficiency mapping for '{key}'", table="proficiencies", key=key)


def resolve_proficiencies(
    record: CharacterRecord,
    index: Optional[ModifierIndex] = None,
    config: Optional[ResolutionConfig] = None,
    tables: Optional[RuleTables] = None
) -> ProficiencyResult:
    """
    Resolve weapon, armor and tool proficiencies.

    Entries are deduplicated by source key, then specific simple/martial
    weapons are dropped when the matching category is held.

    Args:
        record: Parsed character record
        index: Modifier index for the record (built if not given)
        config: Resolution configuration
        tables: Rule tables (bundled tables if not given)

    Returns:
        ProficiencyResult
    """
    params = (config or get_default_config()).proficiencies
    tables = tables or get_rule_tables()
    index = index or ModifierIndex.from_record(record)

    order = list(params.source_order) + [s for s in index.sources if s not in params.source_order]

    collected: list[ProficiencyEntry] = []
    skipped: list[SkippedEntry] = []
    seen: set[str] = set()

    for entry in index.by_type("proficiency", sources=order):
        key = entry.subtype.lower()
        if not key or is_skill_or_save(entry, tables):
            continue

        if is_unresolved_choice(key, tables):
            skipped.append(SkippedEntry(
                source=entry.source, key=key, reason=UNRESOLVED_CHOICE,
                label=entry.friendly_subtype_name,
            ))
            continue

        if key in seen:
            continue

        try:
            display_name, category = map_proficiency(key, entry.entity_type_id, tables)
        except UnmappedEntryError as e:
            skipped.append(SkippedEntry(
                source=entry.source, key=key, reason=NO_MAPPING,
                label=entry.friendly_subtype_name,
            ))
            logger.debug("Skipping unmapped proficiency", key=e.key, source=entry.source)
            continue

        seen.add(key)
        collected.append(ProficiencyEntry(
            source_key=key,
            display_name=display_name,
            category=category,
            granted_by=entry.source,
        ))

    if params.apply_category_subsumption:
        subsumed: set[str] = set()
        for category_key, table_name in SUBSUMING_CATEGORIES.items():
            if category_key in seen:
                subsumed.update(tables.proficiencies[table_name])
        collected = [p for p in collected if p.source_key not in subsumed]

    warnings = []
    if skipped:
        warnings.append(f"{len(skipped)} proficiencies skipped")

    logger.debug(
        "Resolved proficiencies",
        character_id=record.id,
        count=len(collected),
        skipped=len(skipped),
    )

    return ProficiencyResult(
        weapons=tuple(p for p in collected if p.category == ProficiencyCategory.WEAPON),
        armor=tuple(p for p in collected if p.category == ProficiencyCategory.ARMOR),
        tools=tuple(p for p in collected if p.category == ProficiencyCategory.TOOL),
        skipped=tuple(skipped),
        warnings=tuple(warnings),
    )
