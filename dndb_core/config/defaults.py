"""Default configuration parameters for the character resolution pipeline."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AbilityParams:
    """Ability score resolution parameters."""
    default_score: int = 10                          # Base score when a stat is absent
    min_score: int = 1                               # Totals below this raise a warning
    max_score: int = 30                              # Totals above this raise a warning
    bonus_sources: tuple[str, ...] = ("race", "class", "background", "item", "feat")


@dataclass(frozen=True)
class SpellcastingParams:
    """Caster progression parameters."""
    min_class_level: int = 1
    max_class_level: int = 20
    honor_spellless_subclasses: bool = True          # Spell-less variants contribute 0


@dataclass(frozen=True)
class ProficiencyParams:
    """Weapon/armor/tool proficiency parameters."""
    source_order: tuple[str, ...] = ("class", "race", "background", "feat", "item")
    apply_category_subsumption: bool = True


@dataclass(frozen=True)
class FeatureParams:
    """Class feature and racial trait parameters."""
    filter_by_level: bool = True                     # Drop features above the class level
    max_level: int = 20                              # Global level cap
    include_descriptions: bool = True
    strip_html: bool = True
    hide_administrative_traits: bool = True          # Age, Size, Speed and similar


@dataclass(frozen=True)
class LanguageParams:
    """Language resolution parameters."""
    include_character_choices: bool = True           # Read choices block as well as modifiers
    warn_missing_common: bool = True


@dataclass(frozen=True)
class InventoryParams:
    """Inventory hierarchy parameters."""
    include_zero_quantity_items: bool = False
    max_container_depth: int = 10


@dataclass(frozen=True)
class EncumbranceParams:
    """Carrying capacity parameters."""
    apply_racial_traits: bool = True                 # Powerful Build
    powerful_build_cap: int = 29
    unencumbered_multiplier: int = 5
    encumbered_multiplier: int = 10
    maximum_multiplier: int = 15
    push_drag_lift_factor: int = 2


@dataclass(frozen=True)
class ResolutionConfig:
    """Complete resolution configuration, passed explicitly into every resolver."""
    abilities: AbilityParams
    spellcasting: SpellcastingParams
    proficiencies: ProficiencyParams
    features: FeatureParams
    languages: LanguageParams
    inventory: InventoryParams
    encumbrance: EncumbranceParams


def get_default_config() -> ResolutionConfig:
    """Get the default configuration instance."""
    return ResolutionConfig(
        abilities=AbilityParams(),
        spellcasting=SpellcastingParams(),
        proficiencies=ProficiencyParams(),
        features=FeatureParams(),
        languages=LanguageParams(),
        inventory=InventoryParams(),
        encumbrance=EncumbranceParams(),
    )
