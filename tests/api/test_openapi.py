"""OpenAPI Document: verifies components, request bodies and security scheme."""


async def _document(anon_client) -> dict:
    res = await anon_client.get("/docs/openapi.json")
    assert res.status_code == 200
    return res.json()


async def test_info_block(anon_client):
    info = (await _document(anon_client))["info"]
    assert info["title"] == "Car Management"
    assert info["version"] == "1.0.0"


async def test_component_schemas_use_wire_names(anon_client):
    schemas = (await _document(anon_client))["components"]["schemas"]
    car = schemas["Car"]
    assert set(car["required"]) == {"manufacturer", "brand", "color"}
    assert "carModel" in car["properties"]
    assert car["additionalProperties"] is False
    assert car["properties"]["manufacturer"]["$ref"] == "#/components/schemas/Manufacturer"
    manufacturer = schemas["Manufacturer"]
    assert set(manufacturer["required"]) == {"companyName", "country"}
    assert manufacturer["additionalProperties"] is False


async def test_create_body_references_car(anon_client):
    paths = (await _document(anon_client))["paths"]
    body = paths["/car/create"]["post"]["requestBody"]
    assert body["content"]["application/json"]["schema"] == {
        "$ref": "#/components/schemas/Car",
    }


async def test_every_route_is_documented(anon_client):
    paths = (await _document(anon_client))["paths"]
    assert set(paths) == {
        "/car/create", "/car/all", "/car/{car_id}",
        "/car/{car_id}/delete", "/car/{car_id}/update",
    }


async def test_api_key_security_scheme(anon_client):
    doc = await _document(anon_client)
    assert doc["components"]["securitySchemes"]["ApiKeyAuth"] == {
        "type": "apiKey", "in": "header", "name": "x-api-key",
    }
    assert doc["security"] == [{"ApiKeyAuth": []}]
