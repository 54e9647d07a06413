"""
D&D Beyond character payload parsers.

This module decodes raw character JSON (via orjson) and converts the
loosely-typed mapping into the immutable record models in ``models``.
Parsing is tolerant: absent sections become empty defaults, and structural
problems are left for ``validators`` to report.
"""

from typing import Any, Optional, Union

import orjson

from .models import (
    MODIFIER_SOURCES,
    Biography,
    CharacterChoice,
    CharacterRecord,
    ClassEntry,
    Currency,
    InventoryItem,
    ModifierEntry,
    RaceEntry,
    RawFeature,
    RawTrait,
)


class ParseError(Exception):
    """Raised when a payload cannot be decoded into a character mapping."""
    pass


def parse_character_payload(raw_data: Union[str, bytes]) -> dict[str, Any]:
    """
    Decode a raw character service response into the character mapping.

    Args:
        raw_data: Raw JSON text or bytes

    Returns:
        Character mapping

    Raises:
        ParseError: If the JSON is invalid or holds no character mapping
    """
    try:
        payload = orjson.loads(raw_data)
    except orjson.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON: {e}")

    if not isinstance(payload, dict):
        raise ParseError("Character payload must be a JSON object")

    return unwrap_character(payload)


def unwrap_character(payload: dict[str, Any]) -> dict[str, Any]:
    """
    Strip the service response envelope.

    The service wraps the character in ``{"success": true, "data": {...}}``;
    a bare character mapping is returned unchanged.

    Raises:
        ParseError: If the envelope's data field is not an object
    """
    data = payload.get("data")
    if isinstance(data, dict) and ("success" in payload or "id" not in payload):
        return data

    if "data" in payload and not isinstance(data, dict):
        raise ParseError("'data' field must be an object")

    return payload


def parse_character_record(data: dict[str, Any]) -> CharacterRecord:
    """
    Convert a character mapping into a CharacterRecord.

    Args:
        data: Character mapping (already unwrapped from the response envelope)

    Returns:
        Parsed CharacterRecord
    """
    return CharacterRecord(
        id=_to_int(data.get("id"), 0),
        name=str(data.get("name") or ""),
        base_stats=_parse_stats(data.get("stats")),
        bonus_stats=_parse_stats(data.get("bonusStats")),
        override_stats=_parse_stats(data.get("overrideStats")),
        modifiers=_parse_modifiers(data.get("modifiers")),
        classes=tuple(_parse_class(entry) for entry in _as_list(data.get("classes"))
                      if isinstance(entry, dict)),
        race=_parse_race(data.get("race")),
        inventory=tuple(_parse_item(entry) for entry in _as_list(data.get("inventory"))
                        if isinstance(entry, dict)),
        currencies=_parse_currencies(data.get("currencies")),
        choices=_parse_choices(data.get("choices")),
        biography=_parse_biography(data),
        feat_names=tuple(
            name for name in (_definition(feat).get("name") for feat in _as_list(data.get("feats")))
            if name
        ),
    )


def _to_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    """Coerce to int, returning default for None or unparseable values."""
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _to_float(value: Any, default: Optional[float] = None) -> Optional[float]:
    """Coerce to float, returning default for None or unparseable values."""
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _definition(entry: Any) -> dict[str, Any]:
    """Return the nested definition mapping, or the entry itself when flat."""
    if not isinstance(entry, dict):
        return {}
    nested = entry.get("definition")
    return nested if isinstance(nested, dict) else entry


def _parse_stats(stats: Any) -> dict[int, Optional[int]]:
    """Parse a list of {id, value} stat entries keyed by stat id."""
    result: dict[int, Optional[int]] = {}
    for entry in _as_list(stats):
        if not isinstance(entry, dict):
            continue
        stat_id = _to_int(entry.get("id"))
        if stat_id is None:
            continue
        result[stat_id] = _to_int(entry.get("value"))
    return result


def _parse_modifiers(modifiers: Any) -> dict[str, tuple[ModifierEntry, ...]]:
    """Parse the per-source modifier lists."""
    result: dict[str, tuple[ModifierEntry, ...]] = {}
    if not isinstance(modifiers, dict):
        return result

    # Known sources first so iteration order is stable
    ordered = [s for s in MODIFIER_SOURCES if s in modifiers]
    ordered += [s for s in modifiers if s not in MODIFIER_SOURCES]

    for source in ordered:
        entries = []
        for raw in _as_list(modifiers.get(source)):
            if not isinstance(raw, dict) or not raw.get("type"):
                continue
            entries.append(ModifierEntry(
                source=source,
                type=str(raw.get("type")),
                subtype=str(raw.get("subType") or ""),
                fixed_value=_to_float(raw.get("fixedValue", raw.get("value"))),
                entity_type_id=_to_int(raw.get("entityTypeId")),
                friendly_subtype_name=raw.get("friendlySubtypeName"),
                is_granted=bool(raw.get("isGranted", False)),
                modifier_id=str(raw["id"]) if raw.get("id") is not None else None,
            ))
        result[source] = tuple(entries)

    return result


def _parse_features(entries: Any) -> tuple[RawFeature, ...]:
    features = []
    for entry in _as_list(entries):
        definition = _definition(entry)
        name = definition.get("name")
        if not name:
            continue
        features.append(RawFeature(
            id=_to_int(definition.get("id")),
            name=str(name),
            description=str(definition.get("description") or ""),
            required_level=_to_int(definition.get("requiredLevel"), 1),
        ))
    return tuple(features)


def _parse_class(entry: dict[str, Any]) -> ClassEntry:
    definition = entry.get("definition") if isinstance(entry.get("definition"), dict) else {}
    subclass = entry.get("subclassDefinition") if isinstance(entry.get("subclassDefinition"), dict) else {}

    # Entry-level lists repeat definition and subclass features; collected last so id dedup keeps the tagged copies
    extra_features = _parse_features(entry.get("classFeatures")) + _parse_features(entry.get("grantedClassFeatures"))

    return ClassEntry(
        name=str(definition.get("name") or ""),
        level=_to_int(entry.get("level"), 0),
        subclass_name=subclass.get("name") or None,
        is_starting_class=bool(entry.get("isStartingClass", False)),
        class_features=_parse_features(definition.get("classFeatures")),
        subclass_features=_parse_features(subclass.get("classFeatures")),
        extra_features=extra_features,
    )


def _parse_traits(entries: Any) -> tuple[RawTrait, ...]:
    traits = []
    for entry in _as_list(entries):
        if not isinstance(entry, dict):
            continue
        definition = _definition(entry)
        name = definition.get("name")
        if not name:
            continue
        trait_id = _to_int(definition.get("id"))
        if trait_id is None:
            trait_id = _to_int(entry.get("id"))
        traits.append(RawTrait(
            id=trait_id,
            name=str(name),
            description=str(definition.get("description") or ""),
        ))
    return tuple(traits)


def _parse_race(race: Any) -> RaceEntry:
    if not isinstance(race, dict):
        return RaceEntry()

    subrace = race.get("subraceDefinition") if isinstance(race.get("subraceDefinition"), dict) else {}

    return RaceEntry(
        full_name=str(race.get("fullName") or ""),
        base_name=str(race.get("baseName") or race.get("baseRaceName") or race.get("fullName") or ""),
        is_subrace=bool(race.get("isSubRace", False)),
        subrace_name=subrace.get("name") or race.get("subRaceShortName") or None,
        racial_traits=_parse_traits(race.get("racialTraits")),
        subrace_traits=_parse_traits(subrace.get("racialTraits")),
    )


def _parse_item(entry: dict[str, Any]) -> InventoryItem:
    item_id = _to_int(entry.get("id"), 0)
    definition = entry.get("definition")
    quantity = _to_float(entry.get("quantity"))

    if not isinstance(definition, dict):
        return InventoryItem(
            id=item_id,
            name="",
            quantity=quantity or 0.0,
            unit_weight=0.0,
            container_id=_to_int(entry.get("containerEntityId")),
            has_definition=False,
        )

    weight = _to_float(entry.get("customWeight"))
    if weight is None:
        weight = _to_float(definition.get("weight"), 0.0)
    bundle_size = _to_float(definition.get("bundleSize"), 1.0) or 1.0

    multiplier = _to_float(definition.get("weightMultiplier"), 1.0)

    return InventoryItem(
        id=item_id,
        name=str(definition.get("name") or ""),
        quantity=quantity if quantity is not None else float("nan"),
        unit_weight=weight / bundle_size,
        container_id=_to_int(entry.get("containerEntityId")),
        is_container=bool(definition.get("isContainer", False)),
        weight_multiplier=multiplier,
        cost=_to_float(definition.get("cost")),
        equipped=bool(entry.get("equipped", False)),
        attuned=bool(entry.get("isAttuned", False)),
        is_magic=bool(definition.get("magic", False)),
        item_type=definition.get("filterType") or definition.get("type"),
    )


def _parse_currencies(currencies: Any) -> Currency:
    if not isinstance(currencies, dict):
        return Currency()
    return Currency(**{
        denomination: _to_int(currencies.get(denomination), 0)
        for denomination in ("pp", "gp", "ep", "sp", "cp")
    })


def _parse_choices(choices: Any) -> tuple[CharacterChoice, ...]:
    if not isinstance(choices, dict):
        return ()

    result = []
    for source, entries in choices.items():
        for entry in _as_list(entries):
            if not isinstance(entry, dict):
                continue
            result.append(CharacterChoice(
                id=str(entry.get("id") or ""),
                label=str(entry.get("label") or ""),
                source=str(source),
                is_optional=bool(entry.get("isOptional", False)),
                option_value=_to_int(entry.get("optionValue")),
            ))
    return tuple(result)


def _parse_biography(data: dict[str, Any]) -> Biography:
    background = _definition(data.get("background"))
    return Biography(
        gender=data.get("gender"),
        age=_to_int(data.get("age")),
        hair=data.get("hair"),
        eyes=data.get("eyes"),
        skin=data.get("skin"),
        height=data.get("height"),
        weight=_to_int(data.get("weight")),
        faith=data.get("faith"),
        alignment_id=_to_int(data.get("alignmentId")),
        background=background.get("name"),
    )
