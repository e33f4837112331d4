def test_openapi_describes_user_routes(client):
    response = client.get("/openapi.json")
    assert response.status_code == 200
    paths = response.json()["paths"]

    assert set(paths["/users"]) == {"get", "post"}
    assert set(paths["/users/{user_id}"]) == {"get", "put", "delete"}
    assert "201" in paths["/users"]["post"]["responses"]
    assert "204" in paths["/users/{user_id}"]["delete"]["responses"]
    for method in ("get", "put", "delete"):
        operation = paths["/users/{user_id}"][method]
        assert "404" in operation["responses"]
        assert operation["parameters"][0]["name"] == "user_id"
        assert operation["parameters"][0]["schema"]["type"] == "integer"


def test_openapi_schemas(client):
    schemas = client.get("/openapi.json").json()["components"]["schemas"]
    assert set(schemas["UserOut"]["properties"]) == {"id", "name", "email"}
    assert schemas["Message"]["required"] == ["message"]


def test_metrics_hidden_from_openapi(client):
    assert "/metrics" not in client.get("/openapi.json").json()["paths"]


def test_swagger_ui_is_served(client):
    response = client.get("/swagger")
    assert response.status_code == 200
    assert "swagger-ui" in response.text
