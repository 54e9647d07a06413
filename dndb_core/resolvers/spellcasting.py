"""
Caster progression: archetype classification, multiclass caster level and
the two independent spell slot tables (regular and pact magic).
"""

from typing import Optional

from ..config.defaults import ResolutionConfig, SpellcastingParams, get_default_config
from ..data.models import CharacterRecord, ClassEntry
from ..errors import GracefulDegradationError
from ..logging.config import get_logger
from ..models.resolved import (
    CasterClassInfo,
    CasterType,
    SlotCalculationMethod,
    SpellcastingResult,
    SpellSlotTable,
)
from ..rules.tables import RuleTables, get_rule_tables
from ..utils.text import normalize_name

logger = get_logger(__name__)

REGULAR_CASTER_TYPES = (CasterType.FULL, CasterType.HALF, CasterType.ARTIFICER, CasterType.THIRD)


def caster_level_contribution(caster_type: CasterType, level: int) -> int:
    """
    Per-class contribution to the shared multiclass caster level.

    Args:
        caster_type: Archetype of the class
        level: Class level

    Returns:
        Contribution after archetype rounding
    """
    if caster_type == CasterType.FULL:
        return level
    if caster_type == CasterType.HALF:
        return level // 2
    if caster_type == CasterType.ARTIFICER:
        # Artificers round up and cast from level 1
        return (level + 1) // 2
    if caster_type == CasterType.THIRD:
        return level // 3
    return 0


def classify_caster(
    class_entry: ClassEntry,
    tables: RuleTables,
    params: Optional[SpellcastingParams] = None
) -> CasterClassInfo:
    """
    Classify one class entry by caster archetype.

    Third casters only count with their spellcasting subclass (Eldritch
    Knight, Arcane Trickster); a spell-less subclass variant removes
    spellcasting entirely.
    """
    params = params or SpellcastingParams()
    rules = tables.spellcasting
    class_key = class_entry.name.lower()
    subclass = normalize_name(class_entry.subclass_name or "")

    caster_type = CasterType(rules["caster_types"].get(class_key, CasterType.NONE.value))

    if caster_type != CasterType.NONE:
        required = [normalize_name(name) for name in rules["spellcasting_subclasses"].get(class_key, [])]
        if required and subclass not in required:
            caster_type = CasterType.NONE
        elif params.honor_spellless_subclasses and any(
            marker in subclass for marker in rules["spellless_markers"]
        ):
            caster_type = CasterType.NONE

    return CasterClassInfo(
        class_name=class_entry.name,
        level=class_entry.level,
        caster_type=caster_type,
        caster_level_contribution=caster_level_contribution(caster_type, class_entry.level),
        is_pact_magic=caster_type == CasterType.PACT,
        spellcasting_ability=(
            rules["spellcasting_abilities"].get(class_key) if caster_type != CasterType.NONE else None
        ),
    )


def _slot_table(tables: RuleTables, table: str, level: int) -> SpellSlotTable:
    """Look up a regular slot row, raising when the table has no entry."""
    row = tables.slot_row(table, level)
    if row is None:
        raise GracefulDegradationError(
            f"No {table} spell slot entry for level {level}",
            degraded_functionality="spell_slots",
            fallback_strategy="zeroed_slots",
        )
    return SpellSlotTable(slots=row)


def _pact_table(tables: RuleTables, warlock_level: int) -> tuple[SpellSlotTable, int]:
    """Build the pact magic table: all slots sit at a single spell level."""
    row = tables.pact_row(warlock_level)
    if row is None:
        raise GracefulDegradationError(
            f"No pact magic entry for warlock level {warlock_level}",
            degraded_functionality="pact_slots",
            fallback_strategy="zeroed_slots",
        )
    slot_level, count = row
    slots = [0] * 9
    slots[slot_level - 1] = count
    return SpellSlotTable(slots=tuple(slots)), slot_level


def _has_spellcasting_yet(info: CasterClassInfo, tables: RuleTables) -> bool:
    """Whether the class grants slots at its own level (paladin 1 or an EK below 3 do not)."""
    row = tables.slot_row(info.caster_type.value, info.level)
    return bool(row) and any(row)


def resolve_spellcasting(
    record: CharacterRecord,
    config: Optional[ResolutionConfig] = None,
    tables: Optional[RuleTables] = None
) -> SpellcastingResult:
    """
    Resolve caster classification and spell slots for every class.

    A single spellcasting class uses its own progression table at its own
    level; two or more use the full-caster table at the summed caster level.
    Pact magic is always computed separately from the warlock level and is
    never merged into the regular table.

    Args:
        record: Parsed character record
        config: Resolution configuration
        tables: Rule tables (bundled tables if not given)

    Returns:
        SpellcastingResult
    """
    params = (config or get_default_config()).spellcasting
    tables = tables or get_rule_tables()

    infos = tuple(classify_caster(entry, tables, params) for entry in record.classes)
    warnings: list[str] = []

    regular = [info for info in infos if info.caster_type in REGULAR_CASTER_TYPES]
    active = [info for info in regular if _has_spellcasting_yet(info, tables)]
    caster_level = sum(info.caster_level_contribution for info in regular)

    regular_slots = SpellSlotTable.empty()
    try:
        if len(active) == 1:
            only = active[0]
            regular_slots = _slot_table(tables, only.caster_type.value, only.level)
            method = SlotCalculationMethod.SINGLE_CLASS
        elif len(active) > 1:
            regular_slots = _slot_table(tables, CasterType.FULL.value, caster_level)
            method = SlotCalculationMethod.MULTICLASS
        else:
            method = SlotCalculationMethod.NONE
    except GracefulDegradationError as e:
        warnings.append(str(e))
        method = SlotCalculationMethod.SINGLE_CLASS if len(active) == 1 else SlotCalculationMethod.MULTICLASS
        logger.warning(
            "Spell slot lookup failed, using zeroed slots",
            character_id=record.id,
            error=str(e),
            fallback=e.fallback_strategy,
        )

    pact_slots = SpellSlotTable.empty()
    pact_slot_level = 0
    pact_classes = [info for info in infos if info.is_pact_magic]
    if pact_classes:
        warlock_level = sum(info.level for info in pact_classes)
        try:
            pact_slots, pact_slot_level = _pact_table(tables, warlock_level)
        except GracefulDegradationError as e:
            warnings.append(str(e))
            logger.warning(
                "Pact magic lookup failed, using zeroed slots",
                character_id=record.id,
                error=str(e),
            )
        if method == SlotCalculationMethod.NONE:
            method = SlotCalculationMethod.PACT_MAGIC_ONLY

    logger.debug(
        "Resolved spellcasting",
        character_id=record.id,
        caster_level=caster_level,
        method=method.value,
        regular=regular_slots.as_dict(),
        pact=pact_slots.as_dict(),
    )

    return SpellcastingResult(
        classes=infos,
        caster_level=caster_level,
        regular_slots=regular_slots,
        pact_slots=pact_slots,
        pact_slot_level=pact_slot_level,
        calculation_method=method,
        warnings=tuple(warnings),
    )
