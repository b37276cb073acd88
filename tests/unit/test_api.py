"""Unit tests for the HTTP query API."""

from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from design_system_mcp.api import create_app
from design_system_mcp.config import AppConfig, DataSettings, PerformanceSettings


def _config(data_dir: Path, **performance: Any) -> AppConfig:
    return AppConfig(
        data=DataSettings(data_path=data_dir, enable_file_watching=False),
        performance=dataclasses.replace(PerformanceSettings(), **performance),
    )


@pytest.fixture
def client(data_dir: Path) -> Any:
    with TestClient(create_app(_config(data_dir))) as test_client:
        yield test_client


class TestHealth:
    """Tests for /health."""

    def test_healthy(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["name"] == "design-system-mcp"
        assert body["data"]["counts"] == {"design_tokens": 3, "components": 2, "guidelines": 2}
        assert body["open_circuits"] == []

    def test_unhealthy_without_data(self, tmp_path: Path, write_files: Any) -> None:
        data_dir = write_files(tmp_path / "data", tokens=[{}])
        with TestClient(create_app(_config(data_dir))) as client:
            response = client.get("/health")
        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"
        assert response.json()["data"]["last_errors"]

    def test_liveness(self, client: TestClient) -> None:
        assert client.get("/health/live").json() == {"status": "alive"}


class TestQueries:
    """Tests for the token, component and guideline endpoints."""

    def test_list_tokens_with_filters(self, client: TestClient) -> None:
        body = client.get("/tokens", params={"category": "color"}).json()
        assert body["total"] == 1
        assert body["tokens"][0]["name"] == "primary-blue"

        body = client.get("/tokens", params={"deprecated": "true"}).json()
        assert [t["name"] for t in body["tokens"]] == ["spacing-sm"]

    def test_invalid_token_category_is_rejected(self, client: TestClient) -> None:
        assert client.get("/tokens", params={"category": "shadow"}).status_code == 422

    def test_search_tokens(self, client: TestClient) -> None:
        body = client.get("/tokens", params={"q": "brand"}).json()
        assert [t["name"] for t in body["tokens"]] == ["primary-blue"]

    def test_get_token(self, client: TestClient) -> None:
        response = client.get("/tokens/primary-blue")
        assert response.status_code == 200
        assert response.json()["aliases"] == ["brand-blue"]

    def test_missing_token_is_404_with_suggestions(self, client: TestClient) -> None:
        response = client.get("/tokens/primary-red")
        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == "RESOURCE_NOT_FOUND"
        assert error["retryable"] is False
        assert error["suggestions"][0].startswith("Available design tokens:")

    def test_empty_search_is_400(self, client: TestClient) -> None:
        response = client.get("/components", params={"q": "  "})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_QUERY"

    def test_component_uses_camel_case_keys(self, client: TestClient) -> None:
        body = client.get("/components/Button").json()
        assert body["accessibility"]["ariaLabels"] == ["aria-pressed"]
        assert body["accessibility"]["keyboardNavigation"].startswith("Enter")

    def test_category_and_tag_listings(self, client: TestClient) -> None:
        assert client.get("/tokens/categories").json() == {
            "categories": ["color", "spacing", "typography"]
        }
        assert client.get("/components/categories").json() == {"categories": ["actions", "layout"]}
        assert client.get("/guidelines/categories").json() == {"categories": ["color", "layout"]}
        assert client.get("/guidelines/tags").json() == {"tags": ["brand", "color", "spacing"]}

    def test_component_props_and_examples(self, client: TestClient) -> None:
        props = client.get("/components/Button/props", params={"required": "true"}).json()
        assert [p["name"] for p in props["props"]] == ["variant"]
        examples = client.get("/components/button/examples").json()
        assert examples["total"] == 1
        assert client.get("/components/Modal/examples").status_code == 404

    def test_components_by_name_fragment(self, client: TestClient) -> None:
        body = client.get("/components", params={"name": "car"}).json()
        assert [c["name"] for c in body["components"]] == ["Card"]

    def test_guidelines(self, client: TestClient) -> None:
        body = client.get("/guidelines", params={"component": "Button"}).json()
        assert [g["id"] for g in body["guidelines"]] == ["color-usage"]
        guideline = client.get("/guidelines/spacing-rhythm").json()
        assert guideline["lastUpdated"].startswith("2024-02-01T12:30:00")


class TestCircuits:
    """Tests for /circuits."""

    def test_list_and_get(self, client: TestClient) -> None:
        body = client.get("/circuits").json()
        assert body["total"] == 3
        assert {c["name"] for c in body["circuits"]} == {"design-tokens", "components", "guidelines"}
        assert client.get("/circuits/components").json()["state"] == "CLOSED"

    def test_unknown_circuit_is_404(self, client: TestClient) -> None:
        response = client.get("/circuits/payments")
        assert response.status_code == 404
        assert response.json()["error"]["suggestions"][0].startswith("Registered circuits:")

    def test_open_circuit_returns_503_with_retry_after(
        self, tmp_path: Path, write_files: Any
    ) -> None:
        data_dir = write_files(tmp_path / "data", tokens=[{}])
        app = create_app(_config(data_dir, failure_threshold=1, recovery_timeout=30.0))
        with TestClient(app) as client:
            assert client.get("/tokens").status_code == 400

            response = client.get("/tokens")
            assert response.status_code == 503
            assert response.headers["Retry-After"] == "30"
            assert response.json()["error"]["retryable"] is True

            health = client.get("/health").json()
            assert health["open_circuits"] == ["design-tokens"]

            reset = client.post("/circuits/design-tokens/reset").json()
            assert reset["state"] == "CLOSED"
            assert reset["total_requests"] == 0


class TestReload:
    """Tests for POST /data/reload."""

    def test_reload_success(self, client: TestClient) -> None:
        response = client.post("/data/reload")
        assert response.status_code == 200
        assert response.json()["counts"]["components"] == 2

    def test_reload_failure_keeps_serving_previous_data(
        self, client: TestClient, data_dir: Path, write_files: Any
    ) -> None:
        write_files(data_dir, components=[{"name": "Broken"}])

        response = client.post("/data/reload")

        assert response.status_code == 422
        assert response.json()["success"] is False
        assert response.json()["errors"]
        assert client.get("/components/Card").status_code == 200


class TestErrorHandling:
    """Tests for the generic error handler."""

    def test_unexpected_error_is_sanitized_500(self, data_dir: Path) -> None:
        app = create_app(_config(data_dir))
        with TestClient(app, raise_server_exceptions=False) as client:

            def explode() -> dict[str, Any]:
                raise RuntimeError("secret internals")

            app.state.context.health = explode
            response = client.get("/health")

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["code"] == "INTERNAL_ERROR"
        assert error["message"] == "Internal server error"
        assert "secret" not in response.text
