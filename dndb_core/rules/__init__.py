"""
Rule table module.

Read-only 5e rule data (spell slot progressions, proficiency and language
dictionaries, feature classification tables) loaded from bundled YAML.
"""
