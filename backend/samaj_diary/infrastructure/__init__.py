"""Infrastructure Layer: HTTP clients for external collaborators and logging setup.

Invariants:
    - Infrastructure never imports services or api
    - Every client maps its transport failures to a SamajError subclass
"""
