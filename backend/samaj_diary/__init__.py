"""Samaj Diary: community directory backend for a regional kinship association.

Invariants:
    - Package root contains no executable code (no import side effects)
"""
