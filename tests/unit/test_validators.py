"""Unit tests for structural record validation."""

from typing import Any, Dict

from dndb_core.config.defaults import SpellcastingParams
from dndb_core.data.validators import RecordValidator


class TestRecordValidator:
    """Test suite for RecordValidator."""

    def test_valid_record(self, raw_character: Dict[str, Any]) -> None:
        """The sample character validates cleanly."""
        report = RecordValidator().validate(raw_character)
        assert report.is_valid
        assert report.warnings == ()

    def test_not_a_mapping(self) -> None:
        """Non-mapping input is a blocking issue."""
        report = RecordValidator().validate(["not", "a", "character"])
        assert not report.is_valid

    def test_missing_classes_blocks(self, raw_character: Dict[str, Any]) -> None:
        """A record without classes cannot be resolved."""
        del raw_character["classes"]
        report = RecordValidator().validate(raw_character)
        assert report.issues == ("Character has no classes",)

    def test_class_level_out_of_range(self, raw_character: Dict[str, Any]) -> None:
        """Class levels outside 1-20 block resolution."""
        raw_character["classes"][0]["level"] = 21
        report = RecordValidator().validate(raw_character)
        assert not report.is_valid
        assert "outside 1-20" in report.issues[0]

    def test_level_range_comes_from_params(self, raw_character: Dict[str, Any]) -> None:
        """The allowed range follows the configured parameters."""
        params = SpellcastingParams(max_class_level=5)
        report = RecordValidator(params).validate(raw_character)
        assert "Class Ranger level 6 is outside 1-5" in report.issues

    def test_class_without_name(self, raw_character: Dict[str, Any]) -> None:
        """Class entries need a definition name."""
        raw_character["classes"][1]["definition"] = {}
        report = RecordValidator().validate(raw_character)
        assert report.issues == ("Class entry 1 has no class name",)

    def test_gaps_are_warnings(self, raw_character: Dict[str, Any]) -> None:
        """Missing optional sections only warn."""
        del raw_character["stats"]
        del raw_character["race"]
        raw_character["modifiers"]["race"] = "broken"

        report = RecordValidator().validate(raw_character)

        assert report.is_valid
        assert "Ability scores are missing, defaulting to 10" in report.warnings
        assert "Race data is missing" in report.warnings
        assert "Modifier source 'race' is not a list" in report.warnings
