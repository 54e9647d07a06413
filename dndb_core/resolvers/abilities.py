"""Ability score resolution: base + summed bonus modifiers, or override."""

from typing import Optional

from ..config.defaults import ResolutionConfig, get_default_config
from ..data.models import ABILITY_IDS, CharacterRecord
from ..data.modifiers import ModifierIndex
from ..logging.config import get_logger
from ..models.resolved import AbilityResult, AbilityScores

logger = get_logger(__name__)


def ability_modifier(total: int) -> int:
    """
    Calculate the ability modifier for a score.

    Floors toward negative infinity, so 7 gives -2 rather than -1.
    """
    return (total - 10) // 2


def resolve_abilities(
    record: CharacterRecord,
    index: Optional[ModifierIndex] = None,
    config: Optional[ResolutionConfig] = None
) -> AbilityScores:
    """
    Resolve all six ability scores.

    Bonuses are always re-summed from the raw ``<ability>-score`` bonus
    modifiers; the record's pre-aggregated bonus stats are not added, since
    they restate the same modifiers.

    Args:
        record: Parsed character record
        index: Modifier index for the record (built if not given)
        config: Resolution configuration

    Returns:
        AbilityScores with one AbilityResult per ability
    """
    params = (config or get_default_config()).abilities
    index = index or ModifierIndex.from_record(record)

    entries = []
    warnings = []

    for stat_id, name in ABILITY_IDS.items():
        stored = record.base_stats.get(stat_id)
        if stored is None:
            base = params.default_score
            warnings.append(f"No base score for {name}, using {params.default_score}")
        else:
            base = stored

        bonus = index.sum_fixed_values("bonus", f"{name}-score", sources=params.bonus_sources)

        override = record.override_stats.get(stat_id)
        total = override if override is not None else base + bonus

        if not params.min_score <= total <= params.max_score:
            warnings.append(
                f"{name.capitalize()} total {total} is outside {params.min_score}-{params.max_score}"
            )

        aggregated = record.bonus_stats.get(stat_id)
        if aggregated:
            logger.debug(
                "Ignoring pre-aggregated ability bonus",
                ability=name,
                aggregated=aggregated,
                summed=bonus,
            )

        entries.append(AbilityResult(
            name=name,
            base=base,
            bonus=bonus,
            override=override,
            total=total,
            modifier=ability_modifier(total),
        ))

    logger.debug(
        "Resolved ability scores",
        character_id=record.id,
        totals={entry.name: entry.total for entry in entries},
    )

    return AbilityScores(entries=tuple(entries), warnings=tuple(warnings))
