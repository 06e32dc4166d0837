"""Router Adapter — registers step chains on a FastAPI app with uniform error handling.

Invariants:
    - Steps run strictly in order; the last step's return value is the response body
    - A raising step short-circuits the chain and is reported exactly once
    - `use` steps run before route steps, in registration order, for every request
    - Registration misuse raises ConfigurationError immediately, at setup time
    - The adapter holds registration-time configuration only, never request state

Design Decisions:
    - One HTTP middleware dispatches every `use` step: Starlette stacks middleware
      last-added-first, so a single ordered list keeps registration order
    - Express-style `:param` paths translated to FastAPI `{param}` at registration
    - Sync and async steps both accepted: awaitable results are awaited
    - Results encoded inside the chain's try block, so an unserializable body
      is reported like any other step failure
    - Dispatch middleware installed with the adapter: use() never touches a started app
"""

import inspect
import logging
import re
from collections.abc import Callable
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from starlette.responses import JSONResponse, Response

from minuscule.api.error_reporter import ErrorReporter
from minuscule.api.request_context import RequestContext
from minuscule.config import Settings, get_settings
from minuscule.core.errors import ConfigurationError, WebError, error as make_error
from minuscule.core.validate import validate as validate_payload

logger = logging.getLogger(__name__)

Step = Callable[[RequestContext], Any]

VERBS = frozenset({"get", "post", "put", "patch", "delete", "head", "options"})
_PATH_PARAM = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")


def to_framework_path(path: str) -> str:
    """Translate `/projects/:projectId` into `/projects/{projectId}`."""
    return _PATH_PARAM.sub(r"{\1}", path)


def to_response(result: Any) -> Response:
    """Encode a step result as JSON; Response objects pass through untouched."""
    if isinstance(result, Response):
        return result
    return JSONResponse(jsonable_encoder(result))


async def run_step(step: Step, ctx: RequestContext) -> Any:
    result = step(ctx)
    if inspect.isawaitable(result):
        result = await result
    return result


class Minuscule:
    """Route/middleware registration over an externally owned FastAPI app."""

    def __init__(
        self,
        app: FastAPI,
        *,
        reporter: ErrorReporter | None = None,
        settings: Settings | None = None,
    ):
        if app is None:
            raise ConfigurationError("Minuscule() requires the application object")
        settings = settings or get_settings()
        self.app = app
        self.reporter = reporter or ErrorReporter(production=settings.production)
        self._middleware: list[Step] = []
        try:
            app.middleware("http")(self._dispatch_middleware)
        except RuntimeError as exc:
            raise ConfigurationError(
                "Minuscule() must wrap the app before it starts serving"
            ) from exc

    # ─── Registration ────────────────────────────────────────────

    def use(self, step: Step) -> None:
        """Run `step` for every request before route steps."""
        if not callable(step):
            raise ConfigurationError("use() must be called with a callable step")
        self._middleware.append(step)

    def route(self, verb: str, path: str, *steps: Step) -> None:
        """Register `steps` for `verb` `path`; the last step produces the body."""
        if not isinstance(verb, str) or verb.lower() not in VERBS:
            raise ConfigurationError(
                f"route() verb must be one of {sorted(VERBS)}, got {verb!r}"
            )
        self._check_path_and_steps("route", path, steps)
        verb = verb.lower()
        reporter = self.reporter

        async def endpoint(request: Request):
            ctx = RequestContext(request)
            try:
                await ctx.load_body()
                for step in steps:
                    result = await run_step(step, ctx)
                return to_response(result)
            except Exception as exc:
                return reporter.report(ctx, exc)

        endpoint.__name__ = f"{verb}_{_endpoint_suffix(path)}"
        self.app.add_api_route(
            to_framework_path(path), endpoint, methods=[verb.upper()],
        )
        logger.debug(f"Registered {verb.upper()} {path} ({len(steps)} steps)")

    def get(self, path: str, *steps: Step) -> None:
        self._check_path_and_steps("get", path, steps)
        self.route("get", path, *steps)

    def post(self, path: str, *steps: Step) -> None:
        self._check_path_and_steps("post", path, steps)
        self.route("post", path, *steps)

    def put(self, path: str, *steps: Step) -> None:
        self._check_path_and_steps("put", path, steps)
        self.route("put", path, *steps)

    def patch(self, path: str, *steps: Step) -> None:
        self._check_path_and_steps("patch", path, steps)
        self.route("patch", path, *steps)

    def delete(self, path: str, *steps: Step) -> None:
        self._check_path_and_steps("delete", path, steps)
        self.route("delete", path, *steps)

    # ─── Helpers exposed to handlers ─────────────────────────────

    @staticmethod
    def error(status: int, message: str) -> WebError:
        return make_error(status, message)

    @staticmethod
    def validate(
        payload: Any, rule_set: Any, cross_field_validators: Any = None,
    ) -> dict[str, Any]:
        return validate_payload(payload, rule_set, cross_field_validators)

    # ─── Internals ───────────────────────────────────────────────

    @staticmethod
    def _check_path_and_steps(name: str, path: str, steps: tuple) -> None:
        if not isinstance(path, str) or not path:
            raise ConfigurationError(
                f"{name}() must be called with (path, [...middleware steps], handler)"
            )
        if not steps or not all(callable(step) for step in steps):
            raise ConfigurationError(
                f"{name}() steps must be callables, and the handler is required"
            )

    async def _dispatch_middleware(self, request: Request, call_next):
        if not self._middleware:
            return await call_next(request)
        ctx = RequestContext(request)
        try:
            await ctx.load_body()
            for step in list(self._middleware):
                await run_step(step, ctx)
        except Exception as exc:
            return self.reporter.report(ctx, exc)
        response: Response = await call_next(request)
        return response


def _endpoint_suffix(path: str) -> str:
    return re.sub(r"\W+", "_", path).strip("_") or "root"
