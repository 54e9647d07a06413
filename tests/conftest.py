"""Pytest configuration and shared fixtures."""

import copy
from collections import defaultdict
from typing import Any, Callable, Dict

import pytest

from dndb_core.config.defaults import get_default_config
from dndb_core.data.models import CharacterRecord, ModifierEntry
from dndb_core.data.parsers import parse_character_record
from dndb_core.rules.tables import get_rule_tables

CHARACTER_ID = 1001

RAW_CHARACTER: Dict[str, Any] = {
    "id": CHARACTER_ID,
    "name": "Sylas Thornwood",
    "gender": "Male",
    "age": 112,
    "hair": "Silver",
    "eyes": "Green",
    "skin": "Pale",
    "height": "5'9\"",
    "weight": 140,
    "faith": None,
    "alignmentId": 5,
    "background": {"definition": {"name": "Outlander"}},
    "stats": [
        {"id": 1, "value": 12},
        {"id": 2, "value": 16},
        {"id": 3, "value": 14},
        {"id": 4, "value": 10},
        {"id": 5, "value": 13},
        {"id": 6, "value": 8},
    ],
    "bonusStats": [{"id": i, "value": None} for i in range(1, 7)],
    "overrideStats": [{"id": i, "value": None} for i in range(1, 7)],
    "race": {
        "fullName": "Wood Elf",
        "baseName": "Elf",
        "isSubRace": True,
        "racialTraits": [
            {"definition": {"id": 101, "name": "Darkvision",
                            "description": "<p>You can see in dim light within 60 feet of you.</p>"}},
            {"definition": {"id": 102, "name": "Keen Senses",
                            "description": "You have proficiency in the Perception skill."}},
            {"definition": {"id": 103, "name": "Fey Ancestry",
                            "description": "Advantage on saves against being charmed."}},
            {"definition": {"id": 104, "name": "Age", "description": "Elves live long."}},
            {"definition": {"id": 105, "name": "Languages", "description": "Common and Elvish."}},
        ],
        "subraceDefinition": {
            "name": "Wood Elf",
            "racialTraits": [
                {"definition": {"id": 201, "name": "Fleet of Foot",
                                "description": "Your base walking speed increases to 35 feet."}},
                {"definition": {"id": 202, "name": "Mask of the Wild",
                                "description": "You can attempt to hide when lightly obscured."}},
            ],
        },
    },
    "classes": [
        {
            "level": 6,
            "isStartingClass": True,
            "definition": {
                "name": "Ranger",
                "classFeatures": [
                    {"id": 301, "name": "Favored Enemy", "requiredLevel": 1},
                    {"id": 302, "name": "Natural Explorer", "requiredLevel": 1},
                    {"id": 303, "name": "Fighting Style", "requiredLevel": 2},
                    {"id": 304, "name": "Spellcasting", "requiredLevel": 2},
                    {"id": 305, "name": "Extra Attack", "requiredLevel": 5},
                    {"id": 306, "name": "Land's Stride", "requiredLevel": 8},
                    {"id": 307, "name": "Proficiencies", "requiredLevel": 1},
                ],
            },
            "subclassDefinition": {
                "name": "Hunter",
                "classFeatures": [
                    {"id": 401, "name": "Hunter's Prey", "requiredLevel": 3},
                ],
            },
        },
        {
            "level": 3,
            "isStartingClass": False,
            "definition": {
                "name": "Rogue",
                "classFeatures": [
                    {"id": 501, "name": "Expertise", "requiredLevel": 1},
                    {"id": 502, "name": "Sneak Attack", "requiredLevel": 1},
                    {"id": 503, "name": "Thieves' Cant", "requiredLevel": 1},
                    {"id": 504, "name": "Cunning Action", "requiredLevel": 2},
                ],
            },
            "subclassDefinition": {
                "name": "Arcane Trickster",
                "classFeatures": [
                    {"id": 601, "name": "Spellcasting", "requiredLevel": 3},
                    {"id": 602, "name": "Mage Hand Legerdemain", "requiredLevel": 3},
                ],
            },
        },
    ],
    "modifiers": {
        "race": [
            {"type": "bonus", "subType": "dexterity-score", "fixedValue": 2, "isGranted": True},
            {"type": "bonus", "subType": "wisdom-score", "fixedValue": 1, "isGranted": True},
            {"type": "proficiency", "subType": "perception", "entityTypeId": 1958004211, "isGranted": True},
            {"type": "proficiency", "subType": "longsword", "entityTypeId": 1782728300,
             "friendlySubtypeName": "Longsword", "isGranted": True},
            {"type": "proficiency", "subType": "shortbow", "entityTypeId": 1782728300, "isGranted": True},
            {"type": "language", "subType": "common", "friendlySubtypeName": "Common", "isGranted": True},
            {"type": "language", "subType": "elvish", "friendlySubtypeName": "Elvish", "isGranted": True},
        ],
        "class": [
            {"type": "proficiency", "subType": "simple-weapons", "entityTypeId": 660121713, "isGranted": True},
            {"type": "proficiency", "subType": "martial-weapons", "entityTypeId": 660121713, "isGranted": True},
            {"type": "proficiency", "subType": "light-armor", "entityTypeId": 174869515, "isGranted": True},
            {"type": "proficiency", "subType": "medium-armor", "entityTypeId": 174869515, "isGranted": True},
            {"type": "proficiency", "subType": "shields", "isGranted": True},
            {"type": "proficiency", "subType": "strength-saving-throws", "isGranted": True},
            {"type": "proficiency", "subType": "dexterity-saving-throws", "isGranted": True},
            {"type": "proficiency", "subType": "stealth", "isGranted": True},
            {"type": "proficiency", "subType": "survival", "isGranted": True},
            {"type": "expertise", "subType": "stealth", "isGranted": True},
            {"type": "proficiency", "subType": "thieves-tools", "entityTypeId": 2103445194, "isGranted": True},
            {"type": "proficiency", "subType": "choose-a-skill", "friendlySubtypeName": "Choose a Skill",
             "isGranted": True},
            {"type": "language", "subType": "thieves-cant", "isGranted": True},
        ],
        "background": [
            {"type": "proficiency", "subType": "athletics", "isGranted": True},
            {"type": "proficiency", "subType": "herbalism-kit", "isGranted": True},
            {"type": "language", "subType": "choose-a-language", "friendlySubtypeName": "Choose a Language",
             "isGranted": True, "id": "bg-lang-1"},
            {"type": "language", "subType": "sylvan", "isGranted": True},
            {"type": "language", "subType": "elvish", "isGranted": True},
        ],
        "item": [
            {"type": "resistance", "subType": "necrotic", "friendlySubtypeName": "Necrotic", "isGranted": True},
        ],
        "feat": [],
    },
    "inventory": [
        {"id": 1, "quantity": 1, "containerEntityId": CHARACTER_ID, "equipped": True,
         "definition": {"name": "Longsword", "weight": 3, "filterType": "Weapon", "cost": 15}},
        {"id": 2, "quantity": 1, "containerEntityId": CHARACTER_ID, "equipped": True,
         "definition": {"name": "Backpack", "weight": 5, "isContainer": True, "weightMultiplier": 1}},
        {"id": 3, "quantity": 1, "containerEntityId": 2,
         "definition": {"name": "Rope, Hempen (50 feet)", "weight": 10}},
        {"id": 4, "quantity": 5, "containerEntityId": 2,
         "definition": {"name": "Rations (1 day)", "weight": 2}},
        {"id": 5, "quantity": 1, "containerEntityId": CHARACTER_ID, "equipped": True, "isAttuned": False,
         "definition": {"name": "Bag of Holding", "weight": 15, "isContainer": True,
                        "weightMultiplier": 0, "magic": True, "filterType": "Wondrous item"}},
        {"id": 6, "quantity": 40, "containerEntityId": 5,
         "definition": {"name": "Arrows", "weight": 1, "bundleSize": 20}},
        {"id": 7, "quantity": 3, "containerEntityId": 999,
         "definition": {"name": "Torch", "weight": 1}},
        {"id": 8, "quantity": 0, "containerEntityId": CHARACTER_ID,
         "definition": {"name": "Potion of Healing", "weight": 0.5}},
    ],
    "currencies": {"pp": 1, "gp": 25, "ep": 0, "sp": 14, "cp": 30},
    "choices": {
        "race": [{"id": "choice-1", "label": "Choose a Language", "isOptional": False}],
        "class": [{"id": "choice-2", "label": "Choose a Fighting Style", "isOptional": False}],
    },
    "feats": [],
}


@pytest.fixture
def raw_character() -> Dict[str, Any]:
    """Raw multiclass character mapping (Ranger 6 / Arcane Trickster 3 wood elf)."""
    return copy.deepcopy(RAW_CHARACTER)


@pytest.fixture
def character_record(raw_character: Dict[str, Any]) -> CharacterRecord:
    """The sample character parsed into a record."""
    return parse_character_record(raw_character)


@pytest.fixture
def default_config():
    """Default resolution configuration."""
    return get_default_config()


@pytest.fixture
def rule_tables():
    """Bundled rule tables."""
    return get_rule_tables()


@pytest.fixture
def make_modifier() -> Callable[..., ModifierEntry]:
    """Builder for single modifier entries."""
    def _make(type: str, subtype: str, source: str = "class", value=None, **kwargs) -> ModifierEntry:
        return ModifierEntry(source=source, type=type, subtype=subtype, fixed_value=value, **kwargs)
    return _make


@pytest.fixture
def make_record() -> Callable[..., CharacterRecord]:
    """Builder for records; modifiers are given as a flat list and grouped by source."""
    def _make(modifiers=(), **kwargs) -> CharacterRecord:
        grouped = defaultdict(list)
        for entry in modifiers:
            grouped[entry.source].append(entry)
        kwargs.setdefault("id", CHARACTER_ID)
        kwargs.setdefault("name", "Test Character")
        return CharacterRecord(
            modifiers={source: tuple(entries) for source, entries in grouped.items()},
            **kwargs,
        )
    return _make
