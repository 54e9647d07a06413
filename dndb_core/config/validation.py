"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _check_bool(params: dict[str, Any], name: str, errors: list[ValidationError]) -> None:
    if name in params and not isinstance(params[name], bool):
        errors.append(ValidationError(field=name, message="Must be a boolean", value=params[name]))


def _check_positive_int(params: dict[str, Any], name: str, errors: list[ValidationError]) -> None:
    if name in params:
        value = params[name]
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            errors.append(ValidationError(field=name, message="Must be a positive integer", value=value))


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_ability_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate ability parameters."""
        errors: list[ValidationError] = []

        _check_positive_int(params, "default_score", errors)
        _check_positive_int(params, "min_score", errors)
        _check_positive_int(params, "max_score", errors)

        min_score = params.get("min_score", 1)
        max_score = params.get("max_score", 30)
        if isinstance(min_score, int) and isinstance(max_score, int) and min_score > max_score:
            errors.append(ValidationError(
                field="max_score",
                message="Must not be lower than min_score",
                value=max_score
            ))

        return errors

    @staticmethod
    def validate_spellcasting_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate caster progression parameters."""
        errors: list[ValidationError] = []

        _check_positive_int(params, "min_class_level", errors)
        _check_positive_int(params, "max_class_level", errors)
        _check_bool(params, "honor_spellless_subclasses", errors)

        # Slot tables only cover levels 1-20
        if "max_class_level" in params and isinstance(params["max_class_level"], int):
            if params["max_class_level"] > 20:
                errors.append(ValidationError(
                    field="max_class_level",
                    message="Must not exceed 20",
                    value=params["max_class_level"]
                ))

        return errors

    @staticmethod
    def validate_feature_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate feature parameters."""
        errors: list[ValidationError] = []

        _check_bool(params, "filter_by_level", errors)
        _check_bool(params, "include_descriptions", errors)
        _check_bool(params, "strip_html", errors)
        _check_bool(params, "hide_administrative_traits", errors)
        _check_positive_int(params, "max_level", errors)

        return errors

    @staticmethod
    def validate_toggle_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate sections made only of on/off switches (proficiencies, languages)."""
        errors: list[ValidationError] = []

        for name in params:
            if name != "source_order":
                _check_bool(params, name, errors)

        return errors

    @staticmethod
    def validate_inventory_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate inventory parameters."""
        errors: list[ValidationError] = []

        _check_bool(params, "include_zero_quantity_items", errors)
        _check_positive_int(params, "max_container_depth", errors)

        return errors

    @staticmethod
    def validate_encumbrance_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate encumbrance parameters."""
        errors: list[ValidationError] = []

        _check_bool(params, "apply_racial_traits", errors)
        for name in ("powerful_build_cap", "unencumbered_multiplier", "encumbered_multiplier",
                     "maximum_multiplier", "push_drag_lift_factor"):
            _check_positive_int(params, name, errors)

        tiers = [params.get(name) for name in
                 ("unencumbered_multiplier", "encumbered_multiplier", "maximum_multiplier")]
        if all(isinstance(t, int) for t in tiers) and not tiers[0] < tiers[1] < tiers[2]:
            errors.append(ValidationError(
                field="maximum_multiplier",
                message="Tier multipliers must be strictly increasing",
                value=tiers
            ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        if "abilities" in config:
            errors.extend(ConfigValidator.validate_ability_params(config["abilities"]))

        if "spellcasting" in config:
            errors.extend(ConfigValidator.validate_spellcasting_params(config["spellcasting"]))

        if "features" in config:
            errors.extend(ConfigValidator.validate_feature_params(config["features"]))

        for section in ("proficiencies", "languages"):
            if section in config:
                errors.extend(ConfigValidator.validate_toggle_params(config[section]))

        if "inventory" in config:
            errors.extend(ConfigValidator.validate_inventory_params(config["inventory"]))

        if "encumbrance" in config:
            errors.extend(ConfigValidator.validate_encumbrance_params(config["encumbrance"]))

        return errors
