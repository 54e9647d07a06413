"""Tests for weapon, armor and tool proficiency resolution."""

from dataclasses import replace

import pytest

from dndb_core.errors import UnmappedEntryError
from dndb_core.models.resolved import ProficiencyCategory
from dndb_core.resolvers.proficiencies import (
    NO_MAPPING,
    UNRESOLVED_CHOICE,
    is_unresolved_choice,
    map_proficiency,
    resolve_proficiencies,
)


class TestMapping:
    """Test proficiency dictionary lookups."""

    def test_known_keys(self, rule_tables) -> None:
        assert map_proficiency("thieves-tools", None, rule_tables) == ("Thieves' tools", ProficiencyCategory.TOOL)
        assert map_proficiency("shields", None, rule_tables) == ("Shields", ProficiencyCategory.ARMOR)
        assert map_proficiency("longsword", None, rule_tables) == ("Longsword", ProficiencyCategory.WEAPON)

    def test_entity_type_decides_category(self, rule_tables) -> None:
        """A known entity type id overrides the dictionary category."""
        _, category = map_proficiency("dagger", 2103445194, rule_tables)
        assert category == ProficiencyCategory.TOOL

    def test_unmapped_key_raises(self, rule_tables) -> None:
        with pytest.raises(UnmappedEntryError) as exc_info:
            map_proficiency("laser-rifle", None, rule_tables)
        assert exc_info.value.key == "laser-rifle"
        assert exc_info.value.recoverable is True

    @pytest.mark.parametrize("subtype,expected", [
        ("choose-a-martial-weapon", True),
        ("tool-choice", True),
        ("martial-weapons", False),
    ])
    def test_choice_detection(self, rule_tables, subtype, expected) -> None:
        assert is_unresolved_choice(subtype, rule_tables) is expected


class TestResolveProficiencies:
    """Test resolve_proficiencies."""

    def test_sample_character(self, character_record, rule_tables) -> None:
        """Categories subsume specific weapons; skills and saves are left out."""
        result = resolve_proficiencies(character_record, tables=rule_tables)

        assert [p.display_name for p in result.weapons] == ["Simple Weapons", "Martial Weapons"]
        assert [p.display_name for p in result.armor] == ["Light Armor", "Medium Armor", "Shields"]
        assert [p.display_name for p in result.tools] == ["Thieves' tools", "Herbalism kit"]
        assert "perception" not in result.keys()
        assert "strength-saving-throws" not in result.keys()

    def test_choices_are_skipped_with_reason(self, character_record, rule_tables) -> None:
        result = resolve_proficiencies(character_record, tables=rule_tables)

        assert [(s.key, s.reason) for s in result.skipped] == [("choose-a-skill", UNRESOLVED_CHOICE)]
        assert result.warnings == ("1 proficiencies skipped",)

    def test_dedup_keeps_first_source(self, make_modifier, make_record, rule_tables) -> None:
        """The same key from two sources appears once, attributed by source order."""
        record = make_record(modifiers=[
            make_modifier("proficiency", "light-armor", source="background"),
            make_modifier("proficiency", "light-armor", source="class"),
        ])
        result = resolve_proficiencies(record, tables=rule_tables)

        assert len(result.armor) == 1
        assert result.armor[0].granted_by == "class"

    def test_simple_weapons_subsume_dagger(self, make_modifier, make_record, rule_tables) -> None:
        record = make_record(modifiers=[
            make_modifier("proficiency", "dagger", source="race"),
            make_modifier("proficiency", "simple-weapons", source="class"),
            make_modifier("proficiency", "longsword", source="race"),
        ])
        result = resolve_proficiencies(record, tables=rule_tables)

        assert result.keys() == {"simple-weapons", "longsword"}

    def test_subsumption_can_be_disabled(self, make_modifier, make_record, rule_tables, default_config) -> None:
        config = replace(
            default_config,
            proficiencies=replace(default_config.proficiencies, apply_category_subsumption=False),
        )
        record = make_record(modifiers=[
            make_modifier("proficiency", "dagger", source="race"),
            make_modifier("proficiency", "simple-weapons", source="class"),
        ])
        result = resolve_proficiencies(record, config=config, tables=rule_tables)

        assert result.keys() == {"simple-weapons", "dagger"}

    def test_unmapped_entry_is_skipped(self, make_modifier, make_record, rule_tables) -> None:
        record = make_record(modifiers=[make_modifier("proficiency", "laser-rifle", source="item")])
        result = resolve_proficiencies(record, tables=rule_tables)

        assert result.all == ()
        assert result.skipped[0].reason == NO_MAPPING

    def test_skill_entity_type_is_ignored(self, make_modifier, make_record, rule_tables) -> None:
        """Entries typed as skills belong to the skills resolver."""
        record = make_record(modifiers=[
            make_modifier("proficiency", "some-homebrew-skill", entity_type_id=1958004211),
        ])
        result = resolve_proficiencies(record, tables=rule_tables)

        assert result.all == ()
        assert result.skipped == ()
