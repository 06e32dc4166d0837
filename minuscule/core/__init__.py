"""Core Layer — structured errors and the declarative payload validator.

Invariants:
    - No module in core/ imports from api/, infrastructure/, or the web framework
    - Validation is pure and synchronous: same input + rule set, same result

Design Decisions:
    - Functional core separated from the request-handling shell
"""
