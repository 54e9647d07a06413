"""Carrying capacity and encumbrance tier from carried weight and strength."""

from typing import Optional

from ..config.defaults import EncumbranceParams, ResolutionConfig, get_default_config
from ..data.models import CharacterRecord
from ..logging.config import get_logger
from ..models.resolved import CarryingCapacity, EncumbranceLevel, EncumbranceResult

logger = get_logger(__name__)

POWERFUL_BUILD = "powerful build"
POWERFUL_BUILD_RACES = ("goliath",)

# (speed penalty, disadvantage on STR/DEX/CON checks) per tier
TIER_PENALTIES = {
    EncumbranceLevel.UNENCUMBERED: (0, False),
    EncumbranceLevel.ENCUMBERED: (10, False),
    EncumbranceLevel.HEAVILY_ENCUMBERED: (20, True),
    EncumbranceLevel.OVERLOADED: (0, True),
}


def has_powerful_build(record: CharacterRecord) -> bool:
    """Whether the race or a feat grants Powerful Build."""
    race = record.race
    race_names = f"{race.full_name} {race.base_name}".lower()
    if any(name in race_names for name in POWERFUL_BUILD_RACES):
        return True

    trait_names = [trait.name for trait in race.racial_traits + race.subrace_traits]
    return any(name.lower() == POWERFUL_BUILD for name in trait_names + list(record.feat_names))


def effective_strength(strength: int, powerful_build: bool, params: EncumbranceParams) -> int:
    """Strength used for capacity; Powerful Build doubles it up to the cap."""
    if powerful_build and params.apply_racial_traits:
        return min(strength * 2, params.powerful_build_cap)
    return strength


def carrying_capacity(strength: int, params: EncumbranceParams) -> CarryingCapacity:
    maximum = strength * params.maximum_multiplier
    return CarryingCapacity(
        unencumbered_limit=strength * params.unencumbered_multiplier,
        encumbered_limit=strength * params.encumbered_multiplier,
        maximum=maximum,
        push_drag_lift=maximum * params.push_drag_lift_factor,
    )


def encumbrance_level(total_weight: float, capacity: CarryingCapacity) -> EncumbranceLevel:
    """Tier for a weight; each boundary value belongs to the lighter tier."""
    if total_weight <= capacity.unencumbered_limit:
        return EncumbranceLevel.UNENCUMBERED
    if total_weight <= capacity.encumbered_limit:
        return EncumbranceLevel.ENCUMBERED
    if total_weight <= capacity.maximum:
        return EncumbranceLevel.HEAVILY_ENCUMBERED
    return EncumbranceLevel.OVERLOADED


def resolve_encumbrance(
    total_weight: float,
    strength: int,
    powerful_build: bool = False,
    config: Optional[ResolutionConfig] = None
) -> EncumbranceResult:
    """
    Resolve the encumbrance tier for a carried weight.

    Args:
        total_weight: Container-aware carried weight
        strength: Resolved strength total
        powerful_build: Whether Powerful Build applies
        config: Resolution configuration

    Returns:
        EncumbranceResult
    """
    params = (config or get_default_config()).encumbrance

    strength_for_capacity = effective_strength(strength, powerful_build, params)
    capacity = carrying_capacity(strength_for_capacity, params)
    level = encumbrance_level(total_weight, capacity)
    speed_penalty, disadvantage = TIER_PENALTIES[level]

    logger.debug(
        "Resolved encumbrance",
        total_weight=total_weight,
        effective_strength=strength_for_capacity,
        level=level.value,
    )

    return EncumbranceResult(
        total_weight=total_weight,
        effective_strength=strength_for_capacity,
        powerful_build=powerful_build and params.apply_racial_traits,
        carrying_capacity=capacity,
        level=level,
        speed_penalty=speed_penalty,
        disadvantage_on_checks=disadvantage,
        movement_prevented=level == EncumbranceLevel.OVERLOADED,
    )
