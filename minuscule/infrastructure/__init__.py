"""Infrastructure Layer — logging setup and other process-wide concerns.

Invariants:
    - Infrastructure never imports from api/

Design Decisions:
    - Configured once on startup, never per request
"""
