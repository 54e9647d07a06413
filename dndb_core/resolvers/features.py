"""
Class feature and racial trait extraction.

Features are deduplicated by their numeric id, never by name: two
different features that share a name (Extra Attack from two classes) both
survive, while the same id listed twice collapses into one entry.
"""

import re
from typing import Optional

from ..config.defaults import FeatureParams, ResolutionConfig, get_default_config
from ..data.models import CharacterRecord, ClassEntry, RawFeature, RawTrait
from ..logging.config import get_logger
from ..models.resolved import (
    FeatureCategory,
    FeatureEntry,
    FeatureResult,
    FeatureUsage,
    Recharge,
    SkippedEntry,
    TraitEntry,
    TraitMechanics,
)
from ..rules.tables import RuleTables, get_rule_tables
from ..utils.text import strip_html

logger = get_logger(__name__)

DARKVISION_RE = re.compile(r"(\d+)\s*feet", re.IGNORECASE)
FAST_MOVEMENT_SPEED = 35

EXCLUDED = "Administrative entry"
HIDDEN = "Hidden trait"


def is_excluded_name(name: str, tables: RuleTables) -> bool:
    """Case-insensitive substring match against the exclusion list."""
    lowered = name.lower()
    return any(excluded.lower() in lowered for excluded in tables.features["excluded_names"])


def _classify(name: str, owner_types: dict[str, str], keywords: list) -> FeatureCategory:
    if name in owner_types:
        return FeatureCategory(owner_types[name])
    lowered = name.lower()
    for keyword, category in keywords:
        if keyword in lowered:
            return FeatureCategory(category)
    return FeatureCategory.PASSIVE


def classify_feature(name: str, class_name: str, tables: RuleTables) -> FeatureCategory:
    """Per-class override table first, keyword fallback second."""
    rules = tables.features
    owner_types = rules["class_feature_types"].get((class_name or "").lower(), {})
    return _classify(name, owner_types, rules["feature_keywords"])


def classify_trait(name: str, race_names: tuple[str, ...], tables: RuleTables) -> FeatureCategory:
    rules = tables.features
    owner_types: dict[str, str] = {}
    for race_name in race_names:
        owner_types = rules["racial_trait_types"].get((race_name or "").lower(), {})
        if owner_types:
            break
    return _classify(name, owner_types, rules["trait_keywords"])


def feature_usage(name: str, class_name: str, class_level: int, tables: RuleTables) -> Optional[FeatureUsage]:
    """Limited-use recharge for known features, scaled by class level."""
    usage = tables.features["feature_usage"].get((class_name or "").lower(), {}).get(name)
    if usage is None:
        return None

    amount = usage["amount"]
    for level, scaled in sorted((usage.get("scaling") or {}).items()):
        if class_level >= level:
            amount = scaled

    return FeatureUsage(recharge=Recharge(usage["recharge"]), amount=amount)


def extract_trait_mechanics(name: str, description: str) -> Optional[TraitMechanics]:
    """Pull darkvision range and speed changes out of a trait."""
    darkvision = None
    speed = None
    lowered = name.lower()

    if "darkvision" in lowered:
        match = DARKVISION_RE.search(description or "")
        if match:
            darkvision = int(match.group(1))

    if "fleet" in lowered or "swift" in lowered:
        speed = FAST_MOVEMENT_SPEED

    if darkvision is None and speed is None:
        return None
    return TraitMechanics(darkvision_range=darkvision, speed=speed)


def _description(text: str, params: FeatureParams) -> str:
    if not params.include_descriptions:
        return ""
    return strip_html(text) if params.strip_html else text


def _identity(item_id: Optional[int], owner: str, name: str) -> str:
    """Dedup key: the numeric id, or owner+name when the record omits it."""
    return f"id:{item_id}" if item_id is not None else f"name:{owner.lower()}:{name.lower()}"


def _collect_class_features(
    class_entry: ClassEntry,
    raw_features: tuple[RawFeature, ...],
    source: str,
    seen: set[str],
    excluded: list[SkippedEntry],
    params: FeatureParams,
    tables: RuleTables
) -> list[FeatureEntry]:
    features = []
    for raw in raw_features:
        key = _identity(raw.id, class_entry.name, raw.name)
        if key in seen:
            continue
        seen.add(key)

        if is_excluded_name(raw.name, tables):
            excluded.append(SkippedEntry(source=source, key=key, reason=EXCLUDED, label=raw.name))
            continue

        if params.filter_by_level and raw.required_level > class_entry.level:
            continue
        if raw.required_level > params.max_level:
            continue

        features.append(FeatureEntry(
            id=raw.id,
            name=raw.name,
            description=_description(raw.description, params),
            required_level=raw.required_level,
            source=source,
            owner=class_entry.name,
            sub_owner=class_entry.subclass_name if source == "subclass" else None,
            category=classify_feature(raw.name, class_entry.name, tables),
            usage=feature_usage(raw.name, class_entry.name, class_entry.level, tables),
        ))
    return features


def resolve_class_features(
    record: CharacterRecord,
    config: Optional[ResolutionConfig] = None,
    tables: Optional[RuleTables] = None
) -> tuple[tuple[FeatureEntry, ...], tuple[SkippedEntry, ...]]:
    """
    Gather base class and subclass features for every class entry.

    Returns:
        (features, excluded entries)
    """
    params = (config or get_default_config()).features
    tables = tables or get_rule_tables()

    seen: set[str] = set()
    excluded: list[SkippedEntry] = []
    features: list[FeatureEntry] = []

    for class_entry in record.classes:
        per_class = _collect_class_features(
            class_entry, class_entry.class_features, "class", seen, excluded, params, tables
        )
        per_class += _collect_class_features(
            class_entry, class_entry.subclass_features, "subclass", seen, excluded, params, tables
        )
        per_class += _collect_class_features(
            class_entry, class_entry.extra_features, "class", seen, excluded, params, tables
        )
        per_class.sort(key=lambda feature: feature.required_level)
        features.extend(per_class)

    return tuple(features), tuple(excluded)


def _make_trait(raw: RawTrait, source: str, record: CharacterRecord,
                params: FeatureParams, tables: RuleTables) -> TraitEntry:
    race = record.race
    return TraitEntry(
        id=raw.id,
        name=raw.name,
        description=_description(raw.description, params),
        source=source,
        owner=race.base_name or race.full_name,
        sub_owner=race.subrace_name if source == "subrace" else None,
        category=classify_trait(raw.name, (race.base_name, race.full_name), tables),
        mechanics=extract_trait_mechanics(raw.name, raw.description),
    )


def resolve_racial_traits(
    record: CharacterRecord,
    config: Optional[ResolutionConfig] = None,
    tables: Optional[RuleTables] = None
) -> tuple[tuple[TraitEntry, ...], tuple[SkippedEntry, ...]]:
    """
    Gather race and subrace traits.

    A subrace trait with the same name as an already collected race trait
    replaces it. Output lists subrace traits first, then race traits, each
    sorted by name.

    Returns:
        (traits, excluded entries)
    """
    params = (config or get_default_config()).features
    tables = tables or get_rule_tables()
    hidden = {name.lower() for name in tables.features["hidden_traits"]}
    owner = record.race.base_name or record.race.full_name

    seen: set[str] = set()
    excluded: list[SkippedEntry] = []
    traits: list[TraitEntry] = []

    for source, raw_traits in (("race", record.race.racial_traits),
                               ("subrace", record.race.subrace_traits)):
        for raw in raw_traits:
            key = _identity(raw.id, owner, raw.name)
            if key in seen:
                continue
            seen.add(key)

            if params.hide_administrative_traits and raw.name.lower() in hidden:
                excluded.append(SkippedEntry(source=source, key=key, reason=HIDDEN, label=raw.name))
                continue
            if is_excluded_name(raw.name, tables):
                excluded.append(SkippedEntry(source=source, key=key, reason=EXCLUDED, label=raw.name))
                continue

            if source == "subrace":
                traits = [t for t in traits
                          if not (t.source == "race" and t.name.lower() == raw.name.lower())]

            traits.append(_make_trait(raw, source, record, params, tables))

    traits.sort(key=lambda trait: (0 if trait.source == "subrace" else 1, trait.name))
    return tuple(traits), tuple(excluded)


def resolve_features(
    record: CharacterRecord,
    config: Optional[ResolutionConfig] = None,
    tables: Optional[RuleTables] = None
) -> FeatureResult:
    """
    Resolve class features and racial traits.

    Args:
        record: Parsed character record
        config: Resolution configuration
        tables: Rule tables (bundled tables if not given)

    Returns:
        FeatureResult
    """
    tables = tables or get_rule_tables()

    features, excluded_features = resolve_class_features(record, config, tables)
    traits, excluded_traits = resolve_racial_traits(record, config, tables)

    warnings = []
    if record.classes and not features:
        warnings.append("No class features found")

    logger.debug(
        "Resolved features",
        character_id=record.id,
        features=len(features),
        traits=len(traits),
        excluded=len(excluded_features) + len(excluded_traits),
    )

    return FeatureResult(
        class_features=features,
        racial_traits=traits,
        excluded=excluded_features + excluded_traits,
        warnings=tuple(warnings),
    )
