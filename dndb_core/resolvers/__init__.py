"""
Resolver module.

Pure functions that derive one aspect of a character (abilities, spell
slots, proficiencies, skills, defenses, features, languages, inventory,
encumbrance) from a parsed CharacterRecord and an explicit ResolutionConfig.
"""
