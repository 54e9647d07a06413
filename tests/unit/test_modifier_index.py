"""Unit tests for the modifier index."""

from dndb_core.data.modifiers import ModifierIndex


class TestModifierIndex:
    """Test suite for ModifierIndex lookups."""

    def test_by_type_keeps_every_source(self, make_modifier, make_record) -> None:
        """Entries from all sources are indexed without dedup."""
        record = make_record(modifiers=[
            make_modifier("language", "common", source="race"),
            make_modifier("language", "common", source="background"),
            make_modifier("proficiency", "stealth", source="class"),
        ])
        index = ModifierIndex.from_record(record)

        assert len(index) == 3
        assert len(index.by_type("language")) == 2

    def test_by_type_orders_by_requested_sources(self, make_modifier, make_record) -> None:
        """A source list filters and orders the result."""
        record = make_record(modifiers=[
            make_modifier("proficiency", "dagger", source="race"),
            make_modifier("proficiency", "shields", source="class"),
            make_modifier("proficiency", "lute", source="item"),
        ])
        index = ModifierIndex.from_record(record)

        entries = index.by_type("proficiency", sources=["class", "race"])
        assert [e.subtype for e in entries] == ["shields", "dagger"]

    def test_lookup_is_case_insensitive(self, make_modifier, make_record) -> None:
        """Type and subtype matching ignores case."""
        record = make_record(modifiers=[make_modifier("Expertise", "Stealth")])
        index = ModifierIndex.from_record(record)
        assert index.has("expertise", "stealth")
        assert not index.has("expertise", "arcana")

    def test_sum_fixed_values(self, make_modifier, make_record) -> None:
        """Fixed values are summed, negatives included, None skipped."""
        record = make_record(modifiers=[
            make_modifier("bonus", "strength-score", source="race", value=2),
            make_modifier("bonus", "strength-score", source="item", value=-1),
            make_modifier("bonus", "strength-score", source="feat", value=None),
            make_modifier("bonus", "strength-score", source="condition", value=4),
        ])
        index = ModifierIndex.from_record(record)

        assert index.sum_fixed_values("bonus", "strength-score") == 5
        assert index.sum_fixed_values("bonus", "strength-score", sources=("race", "item")) == 1

    def test_empty_index(self) -> None:
        """An index over no modifiers answers every query with nothing."""
        index = ModifierIndex({})
        assert len(index) == 0
        assert index.by_type("bonus") == ()
        assert index.sum_fixed_values("bonus", "strength-score") == 0
