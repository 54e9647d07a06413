"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from dndb_core.config.defaults import ResolutionConfig, get_default_config
from dndb_core.config.loader import ConfigLoader, load_config
from dndb_core.config.validation import ConfigValidator
from dndb_core.errors import InvalidConfigurationError


class TestDefaultConfig:
    """Test suite for default configuration."""

    def test_default_config_creation(self) -> None:
        """Test that default configuration can be created."""
        config = get_default_config()
        assert isinstance(config, ResolutionConfig)
        assert config.abilities.default_score == 10
        assert config.encumbrance.powerful_build_cap == 29
        assert config.inventory.include_zero_quantity_items is False

    def test_default_config_is_frozen(self) -> None:
        """Configuration objects cannot be mutated after creation."""
        config = get_default_config()
        with pytest.raises(AttributeError):
            config.abilities.default_score = 12  # type: ignore[misc]


class TestConfigLoader:
    """Test suite for configuration loader."""

    def test_config_loader_creation(self) -> None:
        """Test that ConfigLoader can be created."""
        loader = ConfigLoader.create()
        assert isinstance(loader.config_dir, Path)

    def test_merge_config_defaults_only(self, tmp_path: Path) -> None:
        """Without overrides the merged config equals the defaults."""
        loader = ConfigLoader.create(tmp_path)
        config = loader.merge_config()

        assert config["abilities"]["default_score"] == 10
        assert config["features"]["filter_by_level"] is True

    def test_call_overrides_win_over_file(self, tmp_path: Path) -> None:
        """Per-call overrides take precedence over resolution.yaml."""
        (tmp_path / "resolution.yaml").write_text(
            "resolution:\n"
            "  features:\n"
            "    include_descriptions: false\n"
            "  inventory:\n"
            "    max_container_depth: 4\n"
        )
        loader = ConfigLoader.create(tmp_path)

        config = loader.build_config({"inventory": {"max_container_depth": 6}})

        assert config.features.include_descriptions is False
        assert config.inventory.max_container_depth == 6
        # Untouched values keep their defaults
        assert config.features.strip_html is True

    def test_empty_file_is_ignored(self, tmp_path: Path) -> None:
        """A resolution.yaml with no resolution section changes nothing."""
        (tmp_path / "resolution.yaml").write_text("# nothing here\n")
        config = load_config(tmp_path)
        assert config == get_default_config()

    def test_lists_become_tuples(self, tmp_path: Path) -> None:
        """YAML lists are stored as tuples on the frozen dataclasses."""
        config = load_config(tmp_path, {"proficiencies": {"source_order": ["race", "class"]}})
        assert config.proficiencies.source_order == ("race", "class")

    def test_unknown_keys_are_ignored(self, tmp_path: Path) -> None:
        """Keys without a matching parameter are dropped."""
        config = load_config(tmp_path, {"abilities": {"not_a_setting": 3}})
        assert config.abilities == get_default_config().abilities

    def test_invalid_override_raises(self, tmp_path: Path) -> None:
        """Invalid merged values raise InvalidConfigurationError with details."""
        with pytest.raises(InvalidConfigurationError) as exc_info:
            load_config(tmp_path, {"encumbrance": {"powerful_build_cap": -1}})

        assert exc_info.value.recoverable is False
        assert any("powerful_build_cap" in error for error in exc_info.value.errors)


class TestConfigValidator:
    """Test suite for configuration validation."""

    def test_valid_ability_params(self) -> None:
        """Test validation of valid ability parameters."""
        errors = ConfigValidator.validate_ability_params({"min_score": 1, "max_score": 30})
        assert errors == []

    def test_min_above_max(self) -> None:
        """Test validation of an inverted score range."""
        errors = ConfigValidator.validate_ability_params({"min_score": 20, "max_score": 10})
        assert len(errors) == 1
        assert errors[0].field == "max_score"

    def test_class_level_above_table_range(self) -> None:
        """Slot tables end at level 20."""
        errors = ConfigValidator.validate_spellcasting_params({"max_class_level": 25})
        assert [e.field for e in errors] == ["max_class_level"]

    def test_non_boolean_flag(self) -> None:
        """Test validation of a non-boolean switch."""
        errors = ConfigValidator.validate_feature_params({"strip_html": "yes"})
        assert len(errors) == 1
        assert errors[0].value == "yes"

    def test_toggle_sections(self) -> None:
        """Language and proficiency switches must be booleans."""
        assert ConfigValidator.validate_toggle_params({"warn_missing_common": False}) == []
        errors = ConfigValidator.validate_toggle_params({"warn_missing_common": 1})
        assert errors[0].field == "warn_missing_common"

    def test_encumbrance_tiers_must_increase(self) -> None:
        """Tier multipliers must be strictly increasing."""
        errors = ConfigValidator.validate_encumbrance_params({
            "unencumbered_multiplier": 10,
            "encumbered_multiplier": 10,
            "maximum_multiplier": 15,
        })
        assert len(errors) == 1
        assert errors[0].field == "maximum_multiplier"

    def test_validate_config_collects_all_sections(self) -> None:
        """Errors from every section are reported together."""
        errors = ConfigValidator.validate_config({
            "abilities": {"default_score": 0},
            "inventory": {"max_container_depth": "deep"},
        })
        assert {e.field for e in errors} == {"default_score", "max_container_depth"}
