"""Damage resistances, immunities and vulnerabilities from modifiers."""

from typing import Optional

from ..data.models import CharacterRecord
from ..data.modifiers import ModifierIndex
from ..logging.config import get_logger
from ..models.resolved import DefenseResult
from ..utils.text import title_from_key

logger = get_logger(__name__)

DEFENSE_TYPES = ("resistance", "immunity", "vulnerability")


def _collect(index: ModifierIndex, modifier_type: str) -> tuple[str, ...]:
    names: dict[str, str] = {}
    for entry in index.by_type(modifier_type):
        key = entry.subtype.lower()
        if not key or key in names:
            continue
        names[key] = entry.friendly_subtype_name or title_from_key(key)
    return tuple(sorted(names.values()))


def resolve_defenses(record: CharacterRecord, index: Optional[ModifierIndex] = None) -> DefenseResult:
    """Collect each defense type across every modifier source, deduplicated by subtype."""
    index = index or ModifierIndex.from_record(record)
    resistances, immunities, vulnerabilities = (_collect(index, t) for t in DEFENSE_TYPES)

    logger.debug(
        "Resolved defenses",
        character_id=record.id,
        resistances=len(resistances),
        immunities=len(immunities),
        vulnerabilities=len(vulnerabilities),
    )

    return DefenseResult(
        resistances=resistances,
        immunities=immunities,
        vulnerabilities=vulnerabilities,
    )
