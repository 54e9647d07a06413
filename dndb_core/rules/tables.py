"""Loader for the bundled YAML rule tables."""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import RuleTableError

DATA_DIR = Path(__file__).parent / "data"

REQUIRED_SECTIONS = {
    "spellcasting": ("caster_types", "spellcasting_subclasses", "spellless_markers",
                     "spellcasting_abilities",
                     "slot_tables", "pact_table"),
    "proficiencies": ("entity_type_ids", "weapon_categories", "simple_weapons",
                      "martial_weapons", "armor", "tools", "skills",
                      "saving_throw_suffix", "choice_markers"),
    "languages": ("languages", "choice_patterns", "common_key"),
    "features": ("excluded_names", "hidden_traits", "class_feature_types",
                 "feature_keywords", "racial_trait_types", "trait_keywords",
                 "feature_usage"),
}

SLOT_TABLE_NAMES = ("full", "half", "artificer", "third")


@dataclass(frozen=True)
class RuleTables:
    """Parsed rule data, shared read-only across resolutions."""
    spellcasting: dict[str, Any]
    proficiencies: dict[str, Any]
    languages: dict[str, Any]
    features: dict[str, Any]

    def slot_row(self, table: str, level: int) -> Optional[tuple[int, ...]]:
        """Return the nine-entry slot row for a progression table, or None if absent."""
        row = self.spellcasting["slot_tables"].get(table, {}).get(level)
        if row is None:
            return None
        counts = [int(count) for count in row]
        return tuple(counts + [0] * (9 - len(counts)))

    def pact_row(self, level: int) -> Optional[tuple[int, int]]:
        """Return (slot level, slot count) for a warlock level, or None if absent."""
        row = self.spellcasting["pact_table"].get(level)
        if row is None:
            return None
        return int(row[0]), int(row[1])


def _load_section(path: Path, name: str) -> dict[str, Any]:
    """Load and check one YAML rule file."""
    if not path.exists():
        raise RuleTableError(f"Rule table file not found: {path}", table=name, path=str(path))

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise RuleTableError(f"Rule table {name} is not valid YAML: {e}", table=name, path=str(path))

    if not isinstance(data, dict):
        raise RuleTableError(f"Rule table {name} must be a mapping", table=name, path=str(path))

    missing = [key for key in REQUIRED_SECTIONS[name] if key not in data]
    if missing:
        raise RuleTableError(
            f"Rule table {name} is missing sections: {', '.join(missing)}",
            table=name,
            path=str(path),
        )

    return data


def load_rule_tables(data_dir: Optional[Path] = None) -> RuleTables:
    """
    Load every rule table from YAML.

    Args:
        data_dir: Directory holding the YAML files (defaults to the bundled data)

    Returns:
        RuleTables instance

    Raises:
        RuleTableError: If a file is missing, unreadable or lacks a section
    """
    data_dir = Path(data_dir) if data_dir is not None else DATA_DIR

    sections = {
        name: _load_section(data_dir / f"{name}.yaml", name)
        for name in REQUIRED_SECTIONS
    }

    slot_tables = sections["spellcasting"]["slot_tables"]
    for table in SLOT_TABLE_NAMES:
        if table not in slot_tables:
            raise RuleTableError(f"Spell slot table '{table}' is missing", table="spellcasting")

    return RuleTables(**sections)


@lru_cache(maxsize=1)
def get_rule_tables() -> RuleTables:
    """Get the process-wide bundled rule tables (loaded once)."""
    return load_rule_tables()
