"""Unit tests for character payload parsing."""

import math
from typing import Any, Dict

import orjson
import pytest

from dndb_core.data.parsers import (
    ParseError,
    parse_character_payload,
    parse_character_record,
    unwrap_character,
)


class TestPayloadDecoding:
    """Test suite for raw payload decoding."""

    def test_envelope_is_unwrapped(self, raw_character: Dict[str, Any]) -> None:
        """The service envelope is stripped."""
        payload = orjson.dumps({"success": True, "message": "ok", "data": raw_character})
        assert parse_character_payload(payload)["id"] == raw_character["id"]

    def test_bare_mapping_accepted(self, raw_character: Dict[str, Any]) -> None:
        """A bare character mapping passes through."""
        assert parse_character_payload(orjson.dumps(raw_character))["name"] == "Sylas Thornwood"

    def test_invalid_json(self) -> None:
        """Invalid JSON raises ParseError."""
        with pytest.raises(ParseError, match="Invalid JSON"):
            parse_character_payload(b"{not json")

    def test_non_object_payload(self) -> None:
        """A JSON array is rejected."""
        with pytest.raises(ParseError):
            parse_character_payload("[1, 2, 3]")

    def test_bad_data_field(self) -> None:
        """An envelope whose data is not an object is rejected."""
        with pytest.raises(ParseError):
            unwrap_character({"success": True, "data": "nope"})


class TestRecordParsing:
    """Test suite for record conversion."""

    def test_identity_and_stats(self, raw_character: Dict[str, Any]) -> None:
        """Identity fields and stats are keyed by stat id."""
        record = parse_character_record(raw_character)
        assert record.id == 1001
        assert record.base_stats[2] == 16
        assert record.override_stats[1] is None
        assert record.total_level == 9

    def test_classes(self, raw_character: Dict[str, Any]) -> None:
        """Classes carry their subclass and features."""
        record = parse_character_record(raw_character)
        ranger = record.get_class("ranger")
        assert ranger is not None
        assert ranger.subclass_name == "Hunter"
        assert ranger.is_starting_class is True
        assert [f.id for f in ranger.subclass_features] == [401]

    def test_entry_level_features_kept_apart(self, raw_character: Dict[str, Any]) -> None:
        """Entry-level feature lists do not merge into the definition's list."""
        raw_character["classes"][0]["classFeatures"] = [{"id": 401, "name": "Hunter's Prey"}]
        raw_character["classes"][0]["grantedClassFeatures"] = [{"id": 900, "name": "Primeval Awareness"}]
        ranger = parse_character_record(raw_character).get_class("ranger")

        assert 401 not in [f.id for f in ranger.class_features]
        assert [f.id for f in ranger.extra_features] == [401, 900]

    def test_modifiers_grouped_by_source(self, raw_character: Dict[str, Any]) -> None:
        """Modifiers keep their source and known sources come first."""
        record = parse_character_record(raw_character)
        assert list(record.modifiers)[:3] == ["race", "class", "background"]
        first = record.modifiers["race"][0]
        assert (first.type, first.subtype, first.fixed_value) == ("bonus", "dexterity-score", 2.0)

    def test_is_granted_defaults_to_false(self) -> None:
        """Modifiers without isGranted are not granted."""
        record = parse_character_record({
            "modifiers": {"race": [{"type": "language", "subType": "common"}]},
        })
        assert record.modifiers["race"][0].is_granted is False

    def test_race_and_traits(self, raw_character: Dict[str, Any]) -> None:
        """Race names and both trait lists are parsed."""
        race = parse_character_record(raw_character).race
        assert race.full_name == "Wood Elf"
        assert race.base_name == "Elf"
        assert race.subrace_name == "Wood Elf"
        assert [t.name for t in race.subrace_traits] == ["Fleet of Foot", "Mask of the Wild"]

    def test_item_weight_divided_by_bundle(self, raw_character: Dict[str, Any]) -> None:
        """Unit weight is the definition weight over the bundle size."""
        record = parse_character_record(raw_character)
        arrows = next(item for item in record.inventory if item.id == 6)
        assert arrows.unit_weight == pytest.approx(0.05)

    def test_custom_weight_overrides_definition(self) -> None:
        """customWeight replaces the definition weight."""
        record = parse_character_record({"inventory": [
            {"id": 1, "quantity": 1, "customWeight": 7, "definition": {"name": "Sack", "weight": 0.5}},
        ]})
        assert record.inventory[0].unit_weight == 7

    def test_item_without_definition(self) -> None:
        """Items with no definition are flagged rather than dropped."""
        record = parse_character_record({"inventory": [{"id": 4, "quantity": 1}]})
        assert record.inventory[0].has_definition is False

    def test_non_numeric_quantity(self) -> None:
        """An unreadable quantity becomes NaN for the inventory resolver to skip."""
        record = parse_character_record({"inventory": [
            {"id": 4, "quantity": "lots", "definition": {"name": "Caltrops", "weight": 2}},
        ]})
        assert math.isnan(record.inventory[0].quantity)

    def test_currencies_and_biography(self, raw_character: Dict[str, Any]) -> None:
        """Coins and descriptive fields pass through."""
        record = parse_character_record(raw_character)
        assert record.currencies.gp == 25
        assert record.biography.background == "Outlander"
        assert record.biography.age == 112

    def test_choices(self, raw_character: Dict[str, Any]) -> None:
        """Choice entries remember the block they came from."""
        record = parse_character_record(raw_character)
        assert [(c.source, c.label) for c in record.choices] == [
            ("race", "Choose a Language"),
            ("class", "Choose a Fighting Style"),
        ]

    def test_empty_mapping(self) -> None:
        """An empty mapping parses into an empty record."""
        record = parse_character_record({})
        assert record.classes == ()
        assert record.total_level == 1
        assert record.modifiers == {}
