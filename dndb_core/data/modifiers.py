"""Queryable index over a record's per-source modifier lists."""

from collections import defaultdict
from typing import Iterable, Optional

from .models import CharacterRecord, ModifierEntry


class ModifierIndex:
    """
    Groups modifiers by type and by (type, subtype).

    The same fact often appears in several source lists (race, class,
    background, feat, item); the index keeps every entry and leaves
    deduplication to the resolver that knows the rule.
    """

    def __init__(self, modifiers: dict[str, tuple[ModifierEntry, ...]]):
        self._sources = tuple(modifiers.keys())

        entries: list[ModifierEntry] = []
        by_type: dict[str, list[ModifierEntry]] = defaultdict(list)
        by_key: dict[tuple[str, str], list[ModifierEntry]] = defaultdict(list)

        for source in self._sources:
            for entry in modifiers[source]:
                type_key = entry.type.lower()
                entries.append(entry)
                by_type[type_key].append(entry)
                by_key[(type_key, entry.subtype.lower())].append(entry)

        self._entries = tuple(entries)
        self._by_type = {key: tuple(value) for key, value in by_type.items()}
        self._by_key = {key: tuple(value) for key, value in by_key.items()}

    @classmethod
    def from_record(cls, record: CharacterRecord) -> "ModifierIndex":
        """Build an index over a parsed record's modifiers."""
        return cls(record.modifiers)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def sources(self) -> tuple[str, ...]:
        """Source names in index order."""
        return self._sources

    def all(self) -> tuple[ModifierEntry, ...]:
        return self._entries

    def by_type(self, modifier_type: str, sources: Optional[Iterable[str]] = None) -> tuple[ModifierEntry, ...]:
        """
        Get every modifier of a type.

        Args:
            modifier_type: Modifier type (bonus, proficiency, language, ...)
            sources: Restrict to these sources, yielded in this order

        Returns:
            Matching modifiers
        """
        matches = self._by_type.get(modifier_type.lower(), ())
        if sources is None:
            return matches

        ordered: list[ModifierEntry] = []
        for source in sources:
            ordered.extend(entry for entry in matches if entry.source == source)
        return tuple(ordered)

    def lookup(self, modifier_type: str, subtype: str) -> tuple[ModifierEntry, ...]:
        """Get modifiers matching an exact type and subtype."""
        return self._by_key.get((modifier_type.lower(), subtype.lower()), ())

    def has(self, modifier_type: str, subtype: str) -> bool:
        return bool(self.lookup(modifier_type, subtype))

    def sum_fixed_values(
        self,
        modifier_type: str,
        subtype: str,
        sources: Optional[Iterable[str]] = None
    ) -> int:
        """
        Sum the integer fixed values of matching modifiers.

        Args:
            modifier_type: Modifier type to match
            subtype: Subtype to match
            sources: Only count modifiers from these sources

        Returns:
            Integer total
        """
        allowed = set(sources) if sources is not None else None
        total = 0
        for entry in self.lookup(modifier_type, subtype):
            if allowed is not None and entry.source not in allowed:
                continue
            if entry.fixed_value is None:
                continue
            total += int(entry.fixed_value)
        return total
