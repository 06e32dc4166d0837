"""API test fixtures — a small projects service built on the adapter + httpx client.

Invariants:
    - Every test gets a fresh app and a fresh in-memory project list
    - Handlers await asyncio.sleep to exercise async step chains

Design Decisions:
    - httpx ASGITransport over a live server: no ports, no lifespan side effects
"""

import asyncio
import re

import pytest
from httpx import ASGITransport, AsyncClient

from minuscule.api.request_context import RequestContext
from minuscule.config import Settings
from minuscule.core.errors import WebError
from minuscule.core.rules import compile_rule_set
from minuscule.main import create_app


PROJECT_RULES = compile_rule_set(
    {
        "shortName": {"validator": str, "required": True},
        "prod": bool,
        # Optional, but must be a string if present
        "longName": str,
        "altName": str,
        # Only relevant if longName is present (longName listed first)
        "code": {
            "error": "code must be a string and must match \\w+",
            "requires": ["longName"],
            "validator": [str, lambda v: re.match(r"^\w+", v)],
        },
        "bonusCode": {
            "error": 'bonusCode must be a string and "code" must start with eligible-',
            "validator": [str, lambda v, ctx: ctx["code"].startswith("eligible-")],
        },
    },
    [
        {
            "validator": lambda r: r.get("longName") is not None or r.get("altName") is not None,
            "error": "At least one of longName and altName must be provided",
        },
    ],
)


async def pause() -> None:
    await asyncio.sleep(0.01)


def build_projects_app():
    app, m = create_app(Settings(env="test"))
    data: list[dict] = []
    next_id = iter(range(1, 1_000_000))

    async def expect_project_id(ctx: RequestContext) -> None:
        if not re.fullmatch(r"\w+", ctx.params["projectId"]):
            raise WebError(400, "projectId must contain only letters, digits and underscores")
        ctx.state.project_id = ctx.params["projectId"]

    def find(project_id: str) -> dict:
        for datum in data:
            if datum["id"] == project_id:
                return datum
        raise m.error(404, "project not found")

    async def list_projects(ctx: RequestContext) -> dict:
        await pause()
        return {"results": data}

    async def get_project(ctx: RequestContext) -> dict:
        await pause()
        return find(ctx.state.project_id)

    async def create_project(ctx: RequestContext) -> dict:
        project = m.validate(ctx.body, PROJECT_RULES)
        await pause()
        project["id"] = str(next(next_id))
        data.append(project)
        return project

    async def patch_project(ctx: RequestContext) -> dict:
        await pause()
        current = find(ctx.state.project_id)
        valid = m.validate({**current, **ctx.body}, PROJECT_RULES)
        valid["id"] = current["id"]
        data[data.index(current)] = valid
        return valid

    m.get("/projects", list_projects)
    m.get("/projects/:projectId", expect_project_id, get_project)
    m.post("/projects", create_project)
    m.patch("/projects/:projectId", expect_project_id, patch_project)
    return app, m


@pytest.fixture
def projects_app():
    return build_projects_app()


@pytest.fixture
async def client(projects_app):
    app, _ = projects_app
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
