"""Health Probe — liveness endpoint registered through the adapter.

Invariants:
    - GET /health always returns 200 if the process is up
"""

from minuscule.api.request_context import RequestContext
from minuscule.api.router_adapter import Minuscule

SERVICE_NAME = "minuscule"


async def health_check(ctx: RequestContext) -> dict:
    """Basic liveness probe."""
    return {"status": "healthy", "service": SERVICE_NAME}


def register(m: Minuscule) -> None:
    m.get("/health", health_check)
