"""Request Context — the per-request object every step in a chain receives.

Invariants:
    - One context per step chain; all route steps see the same instance
    - `state` is the Starlette request.state, shared with `use` middleware steps
    - `body` is {} for an empty body, a dict for JSON objects and forms
    - A malformed JSON body raises WebError(400), reported like any step failure

Design Decisions:
    - Body parsed once, before the first step: steps stay synchronous-friendly
    - Form parsing delegated to Starlette (python-multipart) rather than hand-rolled
"""

import json
from dataclasses import dataclass, field
from typing import Any

from starlette.datastructures import State
from starlette.requests import Request

from minuscule.core.errors import WebError

FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


@dataclass
class RequestContext:
    """In-flight request as seen by handler steps."""
    request: Request
    body: Any = field(default_factory=dict)

    @property
    def url(self) -> str:
        return str(self.request.url)

    @property
    def method(self) -> str:
        return self.request.method

    @property
    def client(self) -> str | None:
        return self.request.client.host if self.request.client else None

    @property
    def params(self) -> dict[str, Any]:
        return self.request.path_params

    @property
    def query(self) -> dict[str, str]:
        return dict(self.request.query_params)

    @property
    def state(self) -> State:
        return self.request.state

    async def load_body(self) -> Any:
        """Parse the request body into `self.body`."""
        self.body = await parse_body(self.request)
        return self.body


async def parse_body(request: Request) -> Any:
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    # body() caches the bytes, so middleware and route contexts can both parse
    raw = await request.body()
    if content_type in FORM_TYPES:
        form = await request.form()
        return dict(form)
    if not raw.strip():
        return {}
    if content_type == "application/json" or content_type.endswith("+json"):
        try:
            return json.loads(raw)
        except ValueError:
            raise WebError(400, "request body is not valid JSON") from None
    return raw.decode("utf-8", errors="replace")
