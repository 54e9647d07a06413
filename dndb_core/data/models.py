"""
Canonical data models for parsed character records.

This module defines immutable data structures that represent a D&D Beyond
character record after parsing from the raw service payload. Resolvers read
only these types, never the raw mapping.
"""

from dataclasses import dataclass, field
from typing import Optional

ABILITY_NAMES = ("strength", "dexterity", "constitution", "intelligence", "wisdom", "charisma")

# Stat id (1-6) as used by the character service
ABILITY_IDS = {index + 1: name for index, name in enumerate(ABILITY_NAMES)}

MODIFIER_SOURCES = ("race", "class", "background", "item", "feat", "condition")


@dataclass(frozen=True)
class ModifierEntry:
    """One raw modifier from a per-source modifier list."""
    source: str                                  # race|class|background|item|feat|condition
    type: str                                    # bonus|proficiency|language|resistance|...
    subtype: str
    fixed_value: Optional[float] = None
    entity_type_id: Optional[int] = None
    friendly_subtype_name: Optional[str] = None
    is_granted: bool = True
    modifier_id: Optional[str] = None


@dataclass(frozen=True)
class RawFeature:
    """Class or subclass feature as listed on the class definition."""
    id: Optional[int]
    name: str
    description: str = ""
    required_level: int = 1


@dataclass(frozen=True)
class ClassEntry:
    """A class the character has levels in."""
    name: str
    level: int
    subclass_name: Optional[str] = None
    is_starting_class: bool = False
    class_features: tuple[RawFeature, ...] = ()
    subclass_features: tuple[RawFeature, ...] = ()
    extra_features: tuple[RawFeature, ...] = ()     # Entry-level classFeatures/grantedClassFeatures


@dataclass(frozen=True)
class RawTrait:
    """Racial or subracial trait definition."""
    id: Optional[int]
    name: str
    description: str = ""


@dataclass(frozen=True)
class RaceEntry:
    """Race and optional subrace of the character."""
    full_name: str = ""
    base_name: str = ""
    is_subrace: bool = False
    subrace_name: Optional[str] = None
    racial_traits: tuple[RawTrait, ...] = ()
    subrace_traits: tuple[RawTrait, ...] = ()


@dataclass(frozen=True)
class InventoryItem:
    """Flat inventory row with its definition fields pulled up."""
    id: int
    name: str
    quantity: float
    unit_weight: float                           # Already divided by bundle size
    container_id: Optional[int]
    is_container: bool = False
    weight_multiplier: float = 1.0
    cost: Optional[float] = None
    equipped: bool = False
    attuned: bool = False
    is_magic: bool = False
    item_type: Optional[str] = None
    has_definition: bool = True


@dataclass(frozen=True)
class Currency:
    """Coins carried, by denomination."""
    pp: int = 0
    gp: int = 0
    ep: int = 0
    sp: int = 0
    cp: int = 0


@dataclass(frozen=True)
class CharacterChoice:
    """An entry from the record's choices block."""
    id: str
    label: str
    source: str
    is_optional: bool = False
    option_value: Optional[int] = None


@dataclass(frozen=True)
class Biography:
    """Descriptive character fields passed through to exporters."""
    gender: Optional[str] = None
    age: Optional[int] = None
    hair: Optional[str] = None
    eyes: Optional[str] = None
    skin: Optional[str] = None
    height: Optional[str] = None
    weight: Optional[int] = None
    faith: Optional[str] = None
    alignment_id: Optional[int] = None
    background: Optional[str] = None


@dataclass(frozen=True)
class CharacterRecord:
    """Parsed character record, immutable for the duration of one resolution."""
    id: int
    name: str
    base_stats: dict[int, Optional[int]] = field(default_factory=dict)
    bonus_stats: dict[int, Optional[int]] = field(default_factory=dict)
    override_stats: dict[int, Optional[int]] = field(default_factory=dict)
    modifiers: dict[str, tuple[ModifierEntry, ...]] = field(default_factory=dict)
    classes: tuple[ClassEntry, ...] = ()
    race: RaceEntry = field(default_factory=RaceEntry)
    inventory: tuple[InventoryItem, ...] = ()
    currencies: Currency = field(default_factory=Currency)
    choices: tuple[CharacterChoice, ...] = ()
    biography: Biography = field(default_factory=Biography)
    feat_names: tuple[str, ...] = ()

    @property
    def total_level(self) -> int:
        """Sum of class levels, 1 when no class carries a level."""
        total = sum(cls.level for cls in self.classes)
        return total if total > 0 else 1

    def get_class(self, name: str) -> Optional[ClassEntry]:
        """Find a class entry by case-insensitive name."""
        for cls in self.classes:
            if cls.name.lower() == name.lower():
                return cls
        return None

