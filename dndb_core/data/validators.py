"""
Structural validation for raw character mappings.

Issues block resolution (the record cannot be processed at all); warnings
describe gaps that resolvers will fill with defaults.
"""

from dataclasses import dataclass
from typing import Any, Optional

from ..config.defaults import SpellcastingParams


@dataclass(frozen=True)
class ValidationReport:
    """Outcome of validating one raw character mapping."""
    issues: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.issues


class RecordValidator:
    """Validates a raw character mapping before parsing."""

    def __init__(self, params: Optional[SpellcastingParams] = None):
        """
        Initialize validator.

        Args:
            params: Caster parameters carrying the allowed class level range
        """
        self.params = params or SpellcastingParams()

    def validate(self, data: Any) -> ValidationReport:
        """
        Validate a raw character mapping.

        Args:
            data: Character mapping as decoded from the service payload

        Returns:
            ValidationReport with blocking issues and non-blocking warnings
        """
        if not isinstance(data, dict):
            return ValidationReport(issues=("Character data must be a mapping",))

        issues: list[str] = []
        warnings: list[str] = []

        self._validate_identity(data, warnings)
        self._validate_classes(data, issues)
        self._validate_stats(data, warnings)
        self._validate_modifiers(data, warnings)

        if not isinstance(data.get("race"), dict):
            warnings.append("Race data is missing")

        if not isinstance(data.get("inventory"), list):
            warnings.append("Inventory list is missing")

        return ValidationReport(issues=tuple(issues), warnings=tuple(warnings))

    def _validate_identity(self, data: dict[str, Any], warnings: list[str]) -> None:
        """Check id and name."""
        character_id = data.get("id")
        if isinstance(character_id, bool) or not isinstance(character_id, int):
            warnings.append("Character id is missing or not a number")

        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            warnings.append("Character name is missing")

    def _validate_classes(self, data: dict[str, Any], issues: list[str]) -> None:
        """Class list must be present, and each class needs a name and a legal level."""
        classes = data.get("classes")
        if not isinstance(classes, list) or not classes:
            issues.append("Character has no classes")
            return

        for index, entry in enumerate(classes):
            if not isinstance(entry, dict):
                issues.append(f"Class entry {index} is not a mapping")
                continue

            definition = entry.get("definition")
            if not isinstance(definition, dict) or not definition.get("name"):
                issues.append(f"Class entry {index} has no class name")
                continue

            level = entry.get("level")
            if isinstance(level, bool) or not isinstance(level, int):
                issues.append(f"Class {definition['name']} has a non-numeric level")
            elif not self.params.min_class_level <= level <= self.params.max_class_level:
                issues.append(
                    f"Class {definition['name']} level {level} is outside "
                    f"{self.params.min_class_level}-{self.params.max_class_level}"
                )

    def _validate_stats(self, data: dict[str, Any], warnings: list[str]) -> None:
        stats = data.get("stats")
        if not isinstance(stats, list):
            warnings.append("Ability scores are missing, defaulting to 10")
        elif len(stats) < 6:
            warnings.append(f"Only {len(stats)} of 6 ability scores present")

    def _validate_modifiers(self, data: dict[str, Any], warnings: list[str]) -> None:
        modifiers = data.get("modifiers")
        if modifiers is None:
            warnings.append("Modifier lists are missing")
            return
        if not isinstance(modifiers, dict):
            warnings.append("Modifiers must be a mapping keyed by source")
            return

        for source, entries in modifiers.items():
            if not isinstance(entries, list):
                warnings.append(f"Modifier source '{source}' is not a list")
