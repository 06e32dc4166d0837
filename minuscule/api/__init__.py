"""API Layer — route registration adapter, request context, error reporting.

Invariants:
    - Every failure inside a registered step chain yields exactly one response
    - The host FastAPI app owns routing, parsing, and serialization

Design Decisions:
    - Adapter over subclassing FastAPI: the app stays externally owned
"""
