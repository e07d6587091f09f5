"""API Key Gate: verifies x-api-key enforcement and the docs bypass.

Invariants checked:
    - No header -> 403 "Missing header x-api-key."
    - Unknown key -> 403 "Invalid API key."
    - Any configured key (whitespace around commas ignored) -> request proceeds
    - /docs and /docs/openapi.json need no key
    - Rejection happens before routing: nothing is written for rejected creates
"""

import pytest

from car_service.api.middleware.api_key import is_docs_path


async def test_missing_header_is_403(anon_client):
    res = await anon_client.get("/car/all")
    assert res.status_code == 403
    error = res.json()["error"]
    assert error["code"] == "FORBIDDEN"
    assert error["message"] == "Missing header x-api-key."


async def test_unknown_key_is_403(anon_client):
    res = await anon_client.get("/car/all", headers={"x-api-key": "nope"})
    assert res.status_code == 403
    assert res.json()["error"]["message"] == "Invalid API key."


async def test_empty_key_counts_as_missing(anon_client):
    res = await anon_client.get("/car/all", headers={"x-api-key": ""})
    assert res.status_code == 403
    assert res.json()["error"]["message"] == "Missing header x-api-key."


@pytest.mark.parametrize("key", ["test-key-1", "test-key-2"])
async def test_configured_keys_proceed(anon_client, key):
    res = await anon_client.get("/car/all", headers={"x-api-key": key})
    assert res.status_code == 200


async def test_unknown_routes_are_gated_too(anon_client):
    res = await anon_client.get("/nowhere")
    assert res.status_code == 403


async def test_rejected_create_writes_nothing(anon_client, client, bmw_car):
    res = await anon_client.post("/car/create", json=bmw_car)
    assert res.status_code == 403
    assert (await client.get("/car/all")).json() == {"cars": []}


async def test_docs_need_no_key(anon_client):
    res = await anon_client.get("/docs")
    assert res.status_code == 200
    assert "swagger" in res.text.lower()


async def test_openapi_document_needs_no_key(anon_client):
    res = await anon_client.get("/docs/openapi.json")
    assert res.status_code == 200


@pytest.mark.parametrize("path,expected", [
    ("/docs", True),
    ("/docs/", True),
    ("/docs/openapi.json", True),
    ("/docs/oauth2-redirect", True),
    ("/car/all", False),
    ("/car/docs-like/delete", False),
    ("/documentation", False),
])
def test_docs_path_detection(path, expected):
    assert is_docs_path(path) is expected
