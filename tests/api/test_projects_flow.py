"""Projects Flow — end-to-end requests through the adapter, validator and reporter.

Tests cover:
    - listing, creating, fetching and patching projects over HTTP
    - validation failures surface as 400 with the rule's message
    - middleware step failure short-circuits the handler (400 / 404)
    - context access between validated fields
"""

VALID_PROJECT = {
    "shortName": "test1",
    "prod": False,
    "longName": "test one",
    "code": "eligible-x999",
    "bonusCode": "cool-bonus",
}


async def test_fetch_empty_project_list(client):
    res = await client.get("/projects")
    assert res.status_code == 200
    assert res.json() == {"results": []}


async def test_create_project(client):
    res = await client.post("/projects", json=VALID_PROJECT)
    assert res.status_code == 200
    body = res.json()
    assert body["shortName"] == "test1"
    assert body["longName"] == "test one"
    assert body["code"] == "eligible-x999"
    assert body["id"] == "1"


async def test_create_project_drops_unknown_fields(client):
    res = await client.post("/projects", json={**VALID_PROJECT, "owner": "mallory"})
    assert res.status_code == 200
    assert "owner" not in res.json()


async def test_create_project_with_bad_code_type_fails(client):
    res = await client.post("/projects", json={
        "shortName": "test2", "prod": False, "longName": "test one", "code": 999,
    })
    assert res.status_code == 400
    assert res.text == "code must be a string and must match \\w+"


async def test_bonus_code_requires_eligible_code(client):
    res = await client.post("/projects", json={
        "shortName": "test3", "prod": False, "longName": "test one",
        "code": "ineligible-5", "bonusCode": "sneaky",
    })
    assert res.status_code == 400
    assert "eligible-" in res.text


async def test_code_requires_long_name(client):
    res = await client.post("/projects", json={
        "shortName": "test4", "altName": "alt", "code": "x1",
    })
    assert res.status_code == 400
    assert res.text == "code requires longName"


async def test_missing_short_name_is_required(client):
    res = await client.post("/projects", json={"longName": "x"})
    assert res.status_code == 400
    assert res.text == "shortName is required"


async def test_fetch_and_patch_created_project(client):
    await client.post("/projects", json=VALID_PROJECT)

    listing = (await client.get("/projects")).json()
    assert len(listing["results"]) == 1
    project = listing["results"][0]
    assert project["shortName"] == "test1"

    fetched = await client.get(f"/projects/{project['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["shortName"] == "test1"

    patched = await client.patch(f"/projects/{project['id']}", json={"longName": "test one2"})
    assert patched.status_code == 200
    body = patched.json()
    assert body["shortName"] == "test1"
    assert body["longName"] == "test one2"
    assert body["code"] == "eligible-x999"
    assert body["id"] == project["id"]


async def test_bogus_project_id_is_404(client):
    res = await client.get("/projects/madethisup")
    assert res.status_code == 404
    assert res.text == "project not found"


async def test_malformed_project_id_rejected_before_handler(client):
    res = await client.get("/projects/bad-id")
    assert res.status_code == 400
    assert res.text == "projectId must contain only letters, digits and underscores"


async def test_long_name_or_alt_name_required(client):
    res = await client.post("/projects", json={"shortName": "test3", "prod": False})
    assert res.status_code == 400
    assert res.text == "At least one of longName and altName must be provided"

    res = await client.post("/projects", json={
        "shortName": "test3", "prod": False, "altName": "alt name provided",
    })
    assert res.status_code == 200
    res = await client.post("/projects", json={
        "shortName": "test3", "prod": False, "longName": "long name provided",
    })
    assert res.status_code == 200


async def test_form_submission_is_validated(client):
    res = await client.post("/projects", data={"shortName": "formy", "altName": "alt"})
    assert res.status_code == 200
    assert res.json()["shortName"] == "formy"


async def test_invalid_json_body_is_400(client):
    res = await client.post(
        "/projects", content=b"{not json", headers={"content-type": "application/json"},
    )
    assert res.status_code == 400
    assert res.text == "request body is not valid JSON"


async def test_non_object_json_body_is_400(client):
    res = await client.post("/projects", json=["shortName"])
    assert res.status_code == 400


async def test_health_route_registered(client):
    res = await client.get("/health")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"
