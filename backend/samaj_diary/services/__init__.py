"""Service Layer: orchestrates core logic around document-store, gateway and model IO.

Invariants:
    - Services receive their collaborators through constructors (Protocols)
    - Pure decisions are delegated to core/; services only sequence IO around them
"""
