"""
Main resolution engine coordinator.

Orchestrates the character resolution pipeline as an ordered list of step
functions. Each step returns a tagged StepOutcome; a reducer folds the
outcomes into the pipeline state:

Payload → Validate → Parse → Abilities → Spellcasting → Proficiencies →
Skills → Defenses → Features → Languages → Inventory → Encumbrance
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from functools import cached_property
from pathlib import Path
from typing import Any, Callable, Optional, Union

from .config.defaults import ResolutionConfig
from .config.loader import ConfigLoader
from .data.modifiers import ModifierIndex
from .data.models import ABILITY_NAMES, CharacterRecord
from .data.parsers import ParseError, parse_character_payload, parse_character_record, unwrap_character
from .data.validators import RecordValidator
from .errors import (
    GracefulDegradationError,
    MalformedRecordDataError,
    MissingRecordDataError,
    RecordDataError,
    RecordValidationError,
    RecoverableError,
    ResolutionFailureError,
    StepExecutionError,
)
from .logging.config import get_logger, get_step_logger, log_step_outcome
from .models.resolved import (
    AbilityResult,
    AbilityScores,
    ConversionIssue,
    ConversionResult,
    CurrencyResult,
    DefenseResult,
    FeatureResult,
    InventoryResult,
    InventoryStatistics,
    LanguageResult,
    ProcessingMetadata,
    ProficiencyResult,
    ResolvedCharacter,
    SkillSummary,
    SlotCalculationMethod,
    SpellcastingResult,
    SpellSlotTable,
    StepRecord,
)
from .resolvers.abilities import ability_modifier, resolve_abilities
from .resolvers.defenses import resolve_defenses
from .resolvers.encumbrance import has_powerful_build, resolve_encumbrance
from .resolvers.features import resolve_features
from .resolvers.inventory import resolve_currency, resolve_inventory
from .resolvers.languages import resolve_languages
from .resolvers.proficiencies import resolve_proficiencies
from .resolvers.skills import proficiency_bonus, resolve_skills
from .resolvers.spellcasting import resolve_spellcasting
from .rules.tables import RuleTables, get_rule_tables
from .utils.time import elapsed_ms, format_timestamp, monotonic_ms, utc_now

logger = get_logger(__name__)
step_logger = get_step_logger(__name__)


class StepStatus(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    FATAL = "fatal"


@dataclass(frozen=True)
class StepOutcome:
    """Tagged result of one pipeline step."""
    status: StepStatus
    data: Any = None
    warnings: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()             # Recoverable errors behind a fallback
    error_kind: str = "processing"

    @classmethod
    def ok(cls, data: Any = None, warnings: tuple[str, ...] = ()) -> "StepOutcome":
        status = StepStatus.WARNING if warnings else StepStatus.SUCCESS
        return cls(status=status, data=data, warnings=tuple(warnings))

    @classmethod
    def fatal(cls, message: str, kind: str = "processing") -> "StepOutcome":
        return cls(status=StepStatus.FATAL, errors=(message,), error_kind=kind)

    @classmethod
    def degraded(cls, data: Any, message: str, kind: str) -> "StepOutcome":
        return cls(
            status=StepStatus.WARNING,
            data=data,
            warnings=("Default result used after a processing error",),
            errors=(message,),
            error_kind=kind,
        )


@dataclass
class PipelineState:
    """Context threaded through the steps; only the reducer writes to it."""
    payload: Any
    config: ResolutionConfig
    tables: RuleTables
    results: dict[str, Any] = field(default_factory=dict)
    steps: list[StepRecord] = field(default_factory=list)
    warnings: list[ConversionIssue] = field(default_factory=list)
    errors: list[ConversionIssue] = field(default_factory=list)
    halted: bool = False

    @property
    def character_data(self) -> dict[str, Any]:
        return self.results["decode"]

    @property
    def record(self) -> CharacterRecord:
        return self.results["parse"]

    @cached_property
    def index(self) -> ModifierIndex:
        return ModifierIndex.from_record(self.record)

    @property
    def character_id(self) -> Any:
        record = self.results.get("parse")
        if record is not None:
            return record.id
        data = self.results.get("decode")
        return data.get("id") if isinstance(data, dict) else None


@dataclass(frozen=True)
class PipelineStep:
    """
    One named resolution step.

    Args:
        name: Step name used in results, logs and issues
        run: Step function
        fallback: Default result used when the step hits a recoverable error;
            None makes every error in the step fatal
        warning_kind: Kind recorded for the step's own warnings
    """
    name: str
    run: Callable[[PipelineState], StepOutcome]
    fallback: Optional[Callable[[PipelineState], Any]] = None
    warning_kind: str = "data_missing"


def _decode(state: PipelineState) -> StepOutcome:
    payload = state.payload
    if payload is None:
        raise MissingRecordDataError("No character data supplied", section="character")

    try:
        if isinstance(payload, (str, bytes)):
            return StepOutcome.ok(parse_character_payload(payload))
        if isinstance(payload, dict):
            return StepOutcome.ok(unwrap_character(payload))
    except ParseError as e:
        raise MalformedRecordDataError(
            f"Character payload could not be decoded: {e}",
            raw_data=str(payload)[:100],
            expected_format="JSON object",
        ) from e

    raise MalformedRecordDataError(
        f"Character payload must be a mapping or JSON, got {type(payload).__name__}",
        raw_data=str(payload)[:100],
        expected_format="JSON object",
    )


def _validate(state: PipelineState) -> StepOutcome:
    report = RecordValidator(state.config.spellcasting).validate(state.character_data)
    if not report.is_valid:
        raise RecordValidationError(
            "; ".join(report.issues),
            step="validate",
            issues=list(report.issues),
        )
    return StepOutcome.ok(report, report.warnings)


def _parse(state: PipelineState) -> StepOutcome:
    return StepOutcome.ok(parse_character_record(state.character_data))


def _abilities(state: PipelineState) -> StepOutcome:
    abilities = resolve_abilities(state.record, state.index, state.config)
    return StepOutcome.ok(abilities, abilities.warnings)


def _default_abilities(state: PipelineState) -> AbilityScores:
    score = state.config.abilities.default_score
    return AbilityScores(entries=tuple(
        AbilityResult(name=name, base=score, bonus=0, override=None, total=score,
                      modifier=ability_modifier(score))
        for name in ABILITY_NAMES
    ))


def _spellcasting(state: PipelineState) -> StepOutcome:
    spellcasting = resolve_spellcasting(state.record, state.config, state.tables)
    return StepOutcome.ok(spellcasting, spellcasting.warnings)


def _default_spellcasting(state: PipelineState) -> SpellcastingResult:
    return SpellcastingResult(
        classes=(),
        caster_level=0,
        regular_slots=SpellSlotTable.empty(),
        pact_slots=SpellSlotTable.empty(),
        pact_slot_level=0,
        calculation_method=SlotCalculationMethod.NONE,
    )


def _proficiencies(state: PipelineState) -> StepOutcome:
    proficiencies = resolve_proficiencies(state.record, state.index, state.config, state.tables)
    return StepOutcome.ok(proficiencies, proficiencies.warnings)


def _skills(state: PipelineState) -> StepOutcome:
    return StepOutcome.ok(resolve_skills(state.record, state.results["abilities"], state.index, state.tables))


def _defenses(state: PipelineState) -> StepOutcome:
    return StepOutcome.ok(resolve_defenses(state.record, state.index))


def _features(state: PipelineState) -> StepOutcome:
    features = resolve_features(state.record, state.config, state.tables)
    return StepOutcome.ok(features, features.warnings)


def _languages(state: PipelineState) -> StepOutcome:
    languages = resolve_languages(state.record, state.index, state.config, state.tables)
    return StepOutcome.ok(languages, languages.warnings)


def _inventory(state: PipelineState) -> StepOutcome:
    inventory = resolve_inventory(state.record, state.config)
    return StepOutcome.ok((inventory, resolve_currency(state.record)), inventory.warnings)


def _default_inventory(state: PipelineState) -> tuple[InventoryResult, CurrencyResult]:
    empty = InventoryResult(
        root_items=(),
        containers=(),
        total_weight=0.0,
        statistics=InventoryStatistics(0, 0, 0, 0, 0, 0),
    )
    return empty, CurrencyResult()


def _encumbrance(state: PipelineState) -> StepOutcome:
    inventory, _ = state.results["inventory"]
    abilities = state.results["abilities"]
    return StepOutcome.ok(resolve_encumbrance(
        inventory.total_weight,
        abilities.total("strength"),
        has_powerful_build(state.record),
        state.config,
    ))


def _default_encumbrance(state: PipelineState) -> Any:
    return resolve_encumbrance(0.0, state.config.abilities.default_score, False, state.config)


DEFAULT_STEPS: tuple[PipelineStep, ...] = (
    PipelineStep("decode", _decode),
    PipelineStep("validate", _validate),
    PipelineStep("parse", _parse),
    PipelineStep("abilities", _abilities, _default_abilities),
    PipelineStep("spellcasting", _spellcasting, _default_spellcasting, "fallback_used"),
    PipelineStep("proficiencies", _proficiencies,
                 lambda state: ProficiencyResult((), (), (), ()), "feature_unsupported"),
    PipelineStep("skills", _skills, lambda state: SkillSummary((), (), 10)),
    PipelineStep("defenses", _defenses, lambda state: DefenseResult()),
    PipelineStep("features", _features, lambda state: FeatureResult((), ())),
    PipelineStep("languages", _languages,
                 lambda state: LanguageResult((), (), ()), "feature_unsupported"),
    PipelineStep("inventory", _inventory, _default_inventory),
    PipelineStep("encumbrance", _encumbrance, _default_encumbrance),
)


def fold_outcome(
    state: PipelineState,
    step: PipelineStep,
    outcome: StepOutcome,
    duration_ms: float
) -> PipelineState:
    """
    Reduce one step outcome into the pipeline state.

    Fatal outcomes halt the pipeline; anything else stores the step's data
    under its name and records its warnings and recoverable errors.
    """
    state.steps.append(StepRecord(name=step.name, duration_ms=duration_ms, status=outcome.status.value))

    if outcome.status == StepStatus.FATAL:
        for message in outcome.errors:
            state.errors.append(ConversionIssue(
                step=step.name, kind=outcome.error_kind, message=message,
                recoverable=False, impact="high",
            ))
        state.halted = True
        return state

    for message in outcome.errors:
        state.errors.append(ConversionIssue(
            step=step.name, kind=outcome.error_kind, message=message,
            recoverable=True, impact="medium",
        ))

    warning_kind = "fallback_used" if outcome.errors else step.warning_kind
    for message in outcome.warnings:
        state.warnings.append(ConversionIssue(
            step=step.name, kind=warning_kind, message=message,
            impact="medium" if outcome.errors else "low",
        ))

    state.results[step.name] = outcome.data
    return state


class ConversionOrchestrator:
    """
    Coordinator for the character resolution pipeline.

    Runs each step in order, converting step failures into structured
    issues. Only fatal problems (undecodable payload, failed validation,
    broken rule data) stop a run; everything else degrades to a default.
    """

    def __init__(
        self,
        config: Optional[ResolutionConfig] = None,
        tables: Optional[RuleTables] = None,
        steps: Optional[tuple[PipelineStep, ...]] = None
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            config: Resolution configuration (defaults plus config/resolution.yaml if not given)
            tables: Rule tables (bundled tables if not given)
            steps: Pipeline steps, DEFAULT_STEPS if not given
        """
        self.config = config or ConfigLoader.create().build_config()
        self.tables = tables or get_rule_tables()
        self.steps = steps or DEFAULT_STEPS
        self.logger = logger

    @classmethod
    def from_config_dir(
        cls,
        config_dir: Optional[Path] = None,
        overrides: Optional[dict[str, Any]] = None
    ) -> "ConversionOrchestrator":
        """Build an orchestrator from a config directory and per-call overrides."""
        return cls(config=ConfigLoader.create(config_dir).build_config(overrides))

    def resolve(self, payload: Union[dict[str, Any], str, bytes]) -> ConversionResult:
        """
        Resolve one character.

        Args:
            payload: Character mapping, service response envelope, or raw JSON

        Returns:
            ConversionResult; ``character`` is None when a fatal error stopped the run
        """
        started_at = utc_now()
        start_ms = monotonic_ms()
        state = PipelineState(payload=payload, config=self.config, tables=self.tables)

        for step in self.steps:
            if state.halted:
                break

            step_start = monotonic_ms()
            outcome = self._run_step(step, state)
            duration = elapsed_ms(step_start)

            state = fold_outcome(state, step, outcome, duration)

            log_step_outcome(
                step_logger,
                state.character_id,
                step.name,
                outcome.status.value,
                duration,
                warnings=list(outcome.warnings),
                context={"errors": list(outcome.errors)} if outcome.errors else None,
            )

        metadata = ProcessingMetadata(
            started_at=format_timestamp(started_at),
            finished_at=format_timestamp(utc_now()),
            duration_ms=elapsed_ms(start_ms),
            steps=tuple(state.steps),
            warnings=tuple(state.warnings),
            errors=tuple(state.errors),
        )

        if state.halted:
            self.logger.warning(
                "Character resolution failed",
                character_id=state.character_id,
                step=state.steps[-1].name,
                errors=[error.message for error in state.errors if not error.recoverable],
            )
            return ConversionResult(success=False, errors=metadata.errors, warnings=metadata.warnings)

        character = self._assemble(state, metadata)

        self.logger.info(
            "Character resolved",
            character_id=character.id,
            total_level=character.total_level,
            warnings=len(metadata.warnings),
            errors=len(metadata.errors),
            duration_ms=round(metadata.duration_ms, 3),
        )

        return ConversionResult(
            success=True,
            character=character,
            errors=metadata.errors,
            warnings=metadata.warnings,
        )

    def resolve_or_raise(self, payload: Union[dict[str, Any], str, bytes]) -> ResolvedCharacter:
        """
        Resolve one character, raising on fatal errors.

        Raises:
            StepExecutionError: If a fatal error stopped the pipeline
        """
        result = self.resolve(payload)
        if result.character is None:
            fatal = [error for error in result.errors if not error.recoverable]
            raise StepExecutionError(
                fatal[0].message if fatal else "Character resolution failed",
                step=result.failed_step,
                context={"errors": [asdict(error) for error in result.errors]},
            )
        return result.character

    def _run_step(self, step: PipelineStep, state: PipelineState) -> StepOutcome:
        """Run a step, mapping exceptions onto outcomes."""
        try:
            return step.run(state)

        except ResolutionFailureError as e:
            kind = "validation" if isinstance(e, RecordValidationError) else "system"
            return StepOutcome.fatal(str(e), kind)

        except (RecordDataError, RecoverableError, GracefulDegradationError) as e:
            self.logger.warning(
                "Recoverable error in resolution step",
                step=step.name,
                character_id=state.character_id,
                error=str(e),
                error_type=type(e).__name__,
                context=getattr(e, "context", {}),
            )
            if step.fallback is None:
                return StepOutcome.fatal(str(e), "data")
            return StepOutcome.degraded(step.fallback(state), str(e), "data")

        except Exception as e:
            self.logger.error(
                "Unexpected error in resolution step",
                step=step.name,
                character_id=state.character_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            if step.fallback is None:
                return StepOutcome.fatal(f"{type(e).__name__}: {e}", "system")
            return StepOutcome.degraded(step.fallback(state), f"{type(e).__name__}: {e}", "processing")

    def _assemble(self, state: PipelineState, metadata: ProcessingMetadata) -> ResolvedCharacter:
        record = state.record
        inventory, currency = state.results["inventory"]

        return ResolvedCharacter(
            id=record.id,
            name=record.name,
            total_level=record.total_level,
            proficiency_bonus=proficiency_bonus(record.total_level),
            abilities=state.results["abilities"],
            spellcasting=state.results["spellcasting"],
            proficiencies=state.results["proficiencies"],
            skills=state.results["skills"],
            defenses=state.results["defenses"],
            features=state.results["features"],
            languages=state.results["languages"],
            inventory=inventory,
            currency=currency,
            encumbrance=state.results["encumbrance"],
            biography=record.biography,
            classes=tuple((cls.name, cls.level, cls.subclass_name) for cls in record.classes),
            race=record.race.full_name,
            metadata=metadata,
        )


def resolve_character(
    payload: Union[dict[str, Any], str, bytes],
    config: Optional[ResolutionConfig] = None
) -> ConversionResult:
    """Resolve one character with a fresh orchestrator."""
    return ConversionOrchestrator(config=config).resolve(payload)
