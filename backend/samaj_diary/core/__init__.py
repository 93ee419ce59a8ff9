"""Core Layer: pure domain logic (validation, directory queries, OTP, wizard, content cache).

Invariants:
    - Core never performs IO: no HTTP, no clock reads unless passed in
    - Infrastructure and services import core, never the reverse
"""
