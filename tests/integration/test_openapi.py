"""
Integration tests for OpenAPI documentation.

Verifies OpenAPI schema is correctly generated for all endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from otpgate import __version__
from otpgate.api.main import create_app


@pytest.fixture
def client(app_settings) -> TestClient:
    """Client without lifespan; schema generation needs no stores."""
    return TestClient(create_app(app_settings))


@pytest.fixture
def schema(client: TestClient) -> dict:
    response = client.get("/openapi.json")
    assert response.status_code == 200
    return response.json()


class TestOpenAPISchema:
    def test_title_and_version(self, schema: dict) -> None:
        assert schema["info"]["title"] == "otpgate"
        assert schema["info"]["version"] == __version__

    @pytest.mark.parametrize("path", ["/v1/send-otp", "/v1/register", "/v1/login"])
    def test_v1_endpoints_documented(self, schema: dict, path: str) -> None:
        assert "post" in schema["paths"][path]
        assert "v1" in schema["paths"][path]["post"]["tags"]

    def test_health_documented(self, schema: dict) -> None:
        assert "get" in schema["paths"]["/health"]

    def test_register_request_schema(self, schema: dict) -> None:
        props = schema["components"]["schemas"]["RegisterRequest"]["properties"]
        assert set(props) == {"name", "email", "password", "code"}

    def test_user_response_has_no_password(self, schema: dict) -> None:
        props = schema["components"]["schemas"]["UserResponse"]["properties"]
        assert set(props) == {"id", "name", "email"}

    def test_error_responses_documented(self, schema: dict) -> None:
        register = schema["paths"]["/v1/register"]["post"]["responses"]
        login = schema["paths"]["/v1/login"]["post"]["responses"]
        assert {"400", "409", "422"} <= set(register)
        assert {"401", "404", "422"} <= set(login)

    def test_v1_tag_in_schema(self, schema: dict) -> None:
        assert "v1" in [t["name"] for t in schema.get("tags", [])]


class TestSwaggerUI:
    def test_docs_endpoint_accessible(self, client: TestClient) -> None:
        response = client.get("/docs")
        assert response.status_code == 200
        assert "swagger" in response.text.lower()
