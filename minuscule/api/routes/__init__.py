"""Route Modules — one file per resource/concern.

Invariants:
    - Each module exposes register(m) taking a Minuscule adapter
    - Routes never contain business logic (delegate to core/ helpers)

Design Decisions:
    - Explicit registration in main.py over auto-discovery
"""
