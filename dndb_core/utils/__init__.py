"""
Utility functions module.

Common helpers for wall-clock timing of pipeline steps and for normalizing
and cleaning text taken from character records.
"""
