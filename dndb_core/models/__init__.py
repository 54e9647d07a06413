"""
Resolved data models module.

Immutable result structures produced by the resolvers and assembled into
the ResolvedCharacter record. Follows functional programming principles
with frozen dataclasses.
"""
