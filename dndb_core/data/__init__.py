"""
Character record ingestion module.

Handles decoding of raw character payloads, conversion into immutable
record models, structural validation and the modifier index.
"""
