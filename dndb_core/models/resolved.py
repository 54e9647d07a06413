"""
Resolved character data models.

Immutable outputs of the resolvers. Every collection is a tuple so a
finished ResolvedCharacter cannot be altered by the exporters that read it.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Optional

from ..data.models import Biography


class CasterType(str, Enum):
    """Spellcasting archetypes."""
    FULL = "full"
    HALF = "half"
    ARTIFICER = "artificer"
    THIRD = "third"
    PACT = "pact"
    NONE = "none"


class SlotCalculationMethod(str, Enum):
    """How the regular slot table was chosen."""
    NONE = "none"
    SINGLE_CLASS = "single_class"
    MULTICLASS = "multiclass"
    PACT_MAGIC_ONLY = "pact_magic_only"


class ProficiencyCategory(str, Enum):
    WEAPON = "weapon"
    ARMOR = "armor"
    TOOL = "tool"


class ProficiencyLevel(str, Enum):
    """Skill and saving throw proficiency levels, lowest first."""
    NONE = "none"
    HALF = "half"
    PROFICIENT = "proficient"
    EXPERTISE = "expertise"


class FeatureCategory(str, Enum):
    PASSIVE = "passive"
    ACTIVE = "active"
    RESOURCE = "resource"
    SPELL = "spell"
    PROFICIENCY = "proficiency"      # Racial traits only


class Recharge(str, Enum):
    SHORT_REST = "short_rest"
    LONG_REST = "long_rest"


class EncumbranceLevel(str, Enum):
    """Carried-weight tiers in ascending order."""
    UNENCUMBERED = "unencumbered"
    ENCUMBERED = "encumbered"
    HEAVILY_ENCUMBERED = "heavily_encumbered"
    OVERLOADED = "overloaded"


@dataclass(frozen=True)
class AbilityResult:
    """Resolved score for one ability."""
    name: str
    base: int
    bonus: int
    override: Optional[int]
    total: int
    modifier: int


@dataclass(frozen=True)
class AbilityScores:
    """The six resolved abilities, addressable by name."""
    entries: tuple[AbilityResult, ...]
    warnings: tuple[str, ...] = ()

    def __getitem__(self, name: str) -> AbilityResult:
        for entry in self.entries:
            if entry.name == name:
                return entry
        raise KeyError(name)

    def modifier(self, name: str) -> int:
        return self[name].modifier

    def total(self, name: str) -> int:
        return self[name].total


@dataclass(frozen=True)
class CasterClassInfo:
    """Caster classification of one class entry."""
    class_name: str
    level: int
    caster_type: CasterType
    caster_level_contribution: int
    is_pact_magic: bool
    spellcasting_ability: Optional[str] = None


@dataclass(frozen=True)
class SpellSlotTable:
    """Slot counts for spell levels 1-9."""
    slots: tuple[int, ...] = (0,) * 9

    def __post_init__(self) -> None:
        if len(self.slots) != 9:
            raise ValueError(f"Spell slot table needs 9 levels, got {len(self.slots)}")

    @classmethod
    def empty(cls) -> "SpellSlotTable":
        return cls()

    def get(self, spell_level: int) -> int:
        """Slots available at a spell level (1-9)."""
        if not 1 <= spell_level <= 9:
            raise ValueError(f"Spell level must be 1-9, got {spell_level}")
        return self.slots[spell_level - 1]

    @property
    def total(self) -> int:
        return sum(self.slots)

    @property
    def is_empty(self) -> bool:
        return self.total == 0

    def as_dict(self) -> dict[int, int]:
        """Non-zero levels only."""
        return {level: count for level, count in enumerate(self.slots, start=1) if count}


@dataclass(frozen=True)
class SpellcastingResult:
    """Caster progression outcome with independent regular and pact tables."""
    classes: tuple[CasterClassInfo, ...]
    caster_level: int
    regular_slots: SpellSlotTable
    pact_slots: SpellSlotTable
    pact_slot_level: int
    calculation_method: SlotCalculationMethod
    warnings: tuple[str, ...] = ()

    @property
    def is_spellcaster(self) -> bool:
        return not (self.regular_slots.is_empty and self.pact_slots.is_empty)


@dataclass(frozen=True)
class ProficiencyEntry:
    """A weapon, armor or tool proficiency after dedup."""
    source_key: str
    display_name: str
    category: ProficiencyCategory
    granted_by: str


@dataclass(frozen=True)
class SkippedEntry:
    """A raw entry a resolver could not use, with the reason."""
    source: str
    key: str
    reason: str
    label: Optional[str] = None


@dataclass(frozen=True)
class ProficiencyResult:
    weapons: tuple[ProficiencyEntry, ...]
    armor: tuple[ProficiencyEntry, ...]
    tools: tuple[ProficiencyEntry, ...]
    skipped: tuple[SkippedEntry, ...]
    warnings: tuple[str, ...] = ()

    @property
    def all(self) -> tuple[ProficiencyEntry, ...]:
        return self.weapons + self.armor + self.tools

    def keys(self) -> set[str]:
        return {entry.source_key for entry in self.all}


@dataclass(frozen=True)
class SkillResult:
    """Bonus for one skill or saving throw."""
    name: str
    ability: str
    proficiency: ProficiencyLevel
    bonus: int


@dataclass(frozen=True)
class SkillSummary:
    skills: tuple[SkillResult, ...]
    saving_throws: tuple[SkillResult, ...]
    passive_perception: int

    def skill(self, name: str) -> SkillResult:
        for entry in self.skills:
            if entry.name == name:
                return entry
        raise KeyError(name)

    def saving_throw(self, ability: str) -> SkillResult:
        for entry in self.saving_throws:
            if entry.ability == ability:
                return entry
        raise KeyError(ability)


@dataclass(frozen=True)
class DefenseResult:
    """Damage and condition defenses granted by modifiers."""
    resistances: tuple[str, ...] = ()
    immunities: tuple[str, ...] = ()
    vulnerabilities: tuple[str, ...] = ()


@dataclass(frozen=True)
class FeatureUsage:
    recharge: Recharge
    amount: int


@dataclass(frozen=True)
class FeatureEntry:
    """Class or subclass feature."""
    id: Optional[int]
    name: str
    description: str
    required_level: int
    source: str                      # class|subclass
    owner: str                       # Class name
    sub_owner: Optional[str]         # Subclass name
    category: FeatureCategory
    usage: Optional[FeatureUsage] = None


@dataclass(frozen=True)
class TraitMechanics:
    darkvision_range: Optional[int] = None
    speed: Optional[int] = None


@dataclass(frozen=True)
class TraitEntry:
    """Race or subrace trait."""
    id: Optional[int]
    name: str
    description: str
    source: str                      # race|subrace
    owner: str                       # Race name
    sub_owner: Optional[str]         # Subrace name
    category: FeatureCategory
    mechanics: Optional[TraitMechanics] = None


@dataclass(frozen=True)
class FeatureResult:
    class_features: tuple[FeatureEntry, ...]
    racial_traits: tuple[TraitEntry, ...]
    excluded: tuple[SkippedEntry, ...] = ()
    warnings: tuple[str, ...] = ()

    def features_for(self, class_name: str) -> tuple[FeatureEntry, ...]:
        return tuple(f for f in self.class_features if f.owner.lower() == class_name.lower())


@dataclass(frozen=True)
class LanguageEntry:
    id: str
    name: str
    subtype: str
    source: str
    is_granted: bool
    category: str = "standard"


@dataclass(frozen=True)
class LanguageChoice:
    """Unresolved language selection; never part of the granted list."""
    id: str
    label: str
    subtype: str
    source: str
    is_optional: bool = False


@dataclass(frozen=True)
class LanguageResult:
    languages: tuple[LanguageEntry, ...]
    choices: tuple[LanguageChoice, ...]
    skipped: tuple[SkippedEntry, ...]
    warnings: tuple[str, ...] = ()

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(language.name for language in self.languages)


@dataclass(frozen=True)
class ResolvedItem:
    """Inventory item with its effective weight under container rules."""
    id: int
    name: str
    quantity: float
    unit_weight: float
    effective_weight: float
    container_id: Optional[int]
    equipped: bool = False
    attuned: bool = False
    is_magic: bool = False
    item_type: Optional[str] = None
    cost: Optional[float] = None


@dataclass(frozen=True)
class ContainerItem:
    """Container with its resolved contents."""
    item: ResolvedItem
    weight_multiplier: float
    contents: tuple[ResolvedItem, ...]
    contents_weight: float                # Weight the contents add to the carrier

    @property
    def is_magic(self) -> bool:
        return self.weight_multiplier == 0


@dataclass(frozen=True)
class InventoryStatistics:
    total_items: int
    root_items: int
    container_count: int
    magic_containers: int
    equipped_items: int
    attuned_items: int


@dataclass(frozen=True)
class InventoryResult:
    root_items: tuple[ResolvedItem, ...]
    containers: tuple[ContainerItem, ...]
    total_weight: float
    statistics: InventoryStatistics
    skipped: tuple[SkippedEntry, ...] = ()
    warnings: tuple[str, ...] = ()

    def container(self, item_id: int) -> Optional[ContainerItem]:
        for container in self.containers:
            if container.item.id == item_id:
                return container
        return None

    def item_weight(self, item_id: int) -> float:
        """Effective weight of any resolved item."""
        for item in self.root_items:
            if item.id == item_id:
                return item.effective_weight
        for container in self.containers:
            for item in container.contents:
                if item.id == item_id:
                    return item.effective_weight
        raise KeyError(item_id)


@dataclass(frozen=True)
class CurrencyResult:
    pp: int = 0
    gp: int = 0
    ep: int = 0
    sp: int = 0
    cp: int = 0

    @property
    def total_gold_value(self) -> float:
        return self.pp * 10 + self.gp + self.ep * 0.5 + self.sp * 0.1 + self.cp * 0.01

    @property
    def coin_count(self) -> int:
        return self.pp + self.gp + self.ep + self.sp + self.cp


@dataclass(frozen=True)
class CarryingCapacity:
    unencumbered_limit: int
    encumbered_limit: int
    maximum: int
    push_drag_lift: int


@dataclass(frozen=True)
class EncumbranceResult:
    total_weight: float
    effective_strength: int
    powerful_build: bool
    carrying_capacity: CarryingCapacity
    level: EncumbranceLevel
    speed_penalty: int
    disadvantage_on_checks: bool
    movement_prevented: bool = False


@dataclass(frozen=True)
class ConversionIssue:
    """Warning or error recorded against a pipeline step."""
    step: str
    kind: str                        # errors: validation|data|processing|system; warnings: data_missing|fallback_used|feature_unsupported
    message: str
    recoverable: bool = True
    impact: str = "low"


@dataclass(frozen=True)
class StepRecord:
    name: str
    duration_ms: float
    status: str


@dataclass(frozen=True)
class ProcessingMetadata:
    started_at: str
    finished_at: str
    duration_ms: float
    steps: tuple[StepRecord, ...]
    warnings: tuple[ConversionIssue, ...] = ()
    errors: tuple[ConversionIssue, ...] = ()


@dataclass(frozen=True)
class ResolvedCharacter:
    """Single resolved artifact handed to exporters; never mutated once built."""
    id: int
    name: str
    total_level: int
    proficiency_bonus: int
    abilities: AbilityScores
    spellcasting: SpellcastingResult
    proficiencies: ProficiencyResult
    skills: SkillSummary
    defenses: DefenseResult
    features: FeatureResult
    languages: LanguageResult
    inventory: InventoryResult
    currency: CurrencyResult
    encumbrance: EncumbranceResult
    biography: Biography = field(default_factory=Biography)
    classes: tuple[tuple[str, int, Optional[str]], ...] = ()
    race: str = ""
    metadata: Optional[ProcessingMetadata] = None

    def to_dict(self) -> dict[str, Any]:
        """Plain-data rendering for exporters."""
        return asdict(self)


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of one orchestrated resolution."""
    success: bool
    character: Optional[ResolvedCharacter] = None
    errors: tuple[ConversionIssue, ...] = ()
    warnings: tuple[ConversionIssue, ...] = ()

    @property
    def failed_step(self) -> Optional[str]:
        """Step of the first unrecoverable error, if any."""
        for error in self.errors:
            if not error.recoverable:
                return error.step
        return None
