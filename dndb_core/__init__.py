"""
DNDB Core - Character Resolution Pipeline

Turns raw D&D Beyond character records into a single resolved, deduplicated
statistics record (abilities, spell slots, proficiencies, features, languages,
inventory weight and encumbrance) for downstream virtual-tabletop exporters.
"""

__version__ = "0.1.0"
__author__ = "DNDB Core Team"
