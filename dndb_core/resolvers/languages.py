"""Granted languages versus unresolved language choices."""

from dataclasses import replace
from typing import Optional

from ..config.defaults import ResolutionConfig, get_default_config
from ..data.models import CharacterRecord
from ..data.modifiers import ModifierIndex
from ..logging.config import get_logger
from ..models.resolved import LanguageChoice, LanguageEntry, LanguageResult, SkippedEntry
from ..rules.tables import RuleTables, get_rule_tables
from ..utils.text import normalize_key, title_from_key

logger = get_logger(__name__)

KNOWN_SOURCES = ("race", "class", "background", "feat")

NOT_GRANTED = "Not granted"
DUPLICATE = "Duplicate language"


def is_language_choice(subtype: str, tables: RuleTables) -> bool:
    """Whether a subtype is a choice placeholder rather than a language."""
    lowered = subtype.lower()
    return any(pattern in lowered for pattern in tables.languages["choice_patterns"])


def language_display(subtype: str, tables: RuleTables) -> tuple[str, str]:
    """
    Display name and category for a language subtype.

    Returns:
        (name, category); unknown languages get a title-cased name and
        the "exotic" category
    """
    key = normalize_key(subtype)
    known = tables.languages["languages"].get(key)
    if known is not None:
        return known["name"], known["category"]
    return title_from_key(key), "exotic"


def _source_label(source: str) -> str:
    return source if source in KNOWN_SOURCES else "other"


def resolve_languages(
    record: CharacterRecord,
    index: Optional[ModifierIndex] = None,
    config: Optional[ResolutionConfig] = None,
    tables: Optional[RuleTables] = None
) -> LanguageResult:
    """
    Resolve granted languages and pending language choices.

    Choice placeholders never enter the granted list, even when their
    subtype names a real language. Only modifiers flagged as granted count;
    the rest, and duplicates by normalized subtype, are reported as skipped.

    Args:
        record: Parsed character record
        index: Modifier index for the record (built if not given)
        config: Resolution configuration
        tables: Rule tables (bundled tables if not given)

    Returns:
        LanguageResult
    """
    params = (config or get_default_config()).languages
    tables = tables or get_rule_tables()
    index = index or ModifierIndex.from_record(record)

    granted: list[LanguageEntry] = []
    choices: list[LanguageChoice] = []
    skipped: list[SkippedEntry] = []
    seen: set[str] = set()

    for entry in index.by_type("language"):
        subtype = entry.subtype
        if not subtype:
            continue

        if is_language_choice(subtype, tables):
            choices.append(LanguageChoice(
                id=entry.modifier_id or f"modifier-{len(choices) + 1}",
                label=entry.friendly_subtype_name or title_from_key(normalize_key(subtype)),
                subtype=subtype,
                source=_source_label(entry.source),
            ))
            continue

        key = normalize_key(subtype)
        if not entry.is_granted:
            skipped.append(SkippedEntry(source=entry.source, key=key, reason=NOT_GRANTED,
                                        label=entry.friendly_subtype_name))
            continue
        if key in seen:
            skipped.append(SkippedEntry(source=entry.source, key=key, reason=DUPLICATE,
                                        label=entry.friendly_subtype_name))
            continue
        seen.add(key)

        name, category = language_display(subtype, tables)
        granted.append(LanguageEntry(
            id="",
            name=name,
            subtype=key,
            source=_source_label(entry.source),
            is_granted=True,
            category=category,
        ))

    if params.include_character_choices:
        for choice in record.choices:
            if "language" not in choice.label.lower():
                continue
            choices.append(LanguageChoice(
                id=choice.id or f"choice-{len(choices) + 1}",
                label=choice.label,
                subtype="",
                source=_source_label(choice.source),
                is_optional=choice.is_optional,
            ))

    granted.sort(key=lambda language: language.name)
    languages = tuple(
        replace(language, id=f"language-{position}")
        for position, language in enumerate(granted, start=1)
    )
    choices.sort(key=lambda choice: choice.label)

    warnings = []
    if not languages:
        warnings.append("No languages found")
    if skipped:
        warnings.append(f"{len(skipped)} language entries skipped")
    if choices:
        warnings.append(f"{len(choices)} language choices unresolved")
    if params.warn_missing_common and languages and tables.languages["common_key"] not in seen:
        warnings.append("Character does not know Common")

    logger.debug(
        "Resolved languages",
        character_id=record.id,
        languages=[language.name for language in languages],
        choices=len(choices),
        skipped=len(skipped),
    )

    return LanguageResult(
        languages=languages,
        choices=tuple(choices),
        skipped=tuple(skipped),
        warnings=tuple(warnings),
    )
