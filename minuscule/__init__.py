"""minuscule — thin route/validation/error layer over a FastAPI application.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: callers import from minuscule.api / minuscule.core explicitly
"""
