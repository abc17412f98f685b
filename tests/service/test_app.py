"""Tests for the FastAPI service mode."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from formexport.assemblers.adapter_files import AdapterExportManager
from formexport.orchestrator import ExportPipeline
from formexport.packages import PackageManager
from formexport.service import create_app
from tests._fixtures.export_sources import adapter_sources

FORM = {
    "functionId": "transfer",
    "fields": [{"type": "text", "id": "to", "name": "to"}],
    "uiKitConfig": {"kitName": "rainbowkit", "kitConfig": {}},
}
NETWORK = {"id": "ethereum-sepolia", "name": "Sepolia", "ecosystem": "evm"}


@pytest.fixture
def client(package_manager: PackageManager) -> TestClient:
    built = []

    def _factory() -> ExportPipeline:
        built.append(1)
        return ExportPipeline(package_manager, AdapterExportManager(adapter_sources()))

    app = create_app(_factory)
    app.state.built = built  # type: ignore[attr-defined]
    return TestClient(app)


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_ecosystems_endpoint(client: TestClient) -> None:
    response = client.get("/ecosystems")
    assert response.status_code == 200
    assert response.json() == {"ecosystems": ["evm", "midnight", "solana"]}


def test_export_endpoint(client: TestClient) -> None:
    response = client.post(
        "/export",
        json={"form": FORM, "network": NETWORK, "options": {"env": "local", "project_name": "demo"}},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["ecosystem"] == "evm"
    assert data["env"] == "local"
    assert "src/adapters/evm/adapter.ts" in data["files"]
    assert "public/app.config.json" in data["files"]
    assert '"name": "demo"' in data["files"]["package.json"]


def test_pipeline_is_built_once(client: TestClient) -> None:
    client.get("/ecosystems")
    client.post("/export", json={"form": FORM, "network": NETWORK})

    assert client.app.state.built == [1]


def test_unsupported_ecosystem_returns_404(client: TestClient) -> None:
    network = dict(NETWORK, ecosystem="stellar", id="stellar-testnet")
    response = client.post("/export", json={"form": FORM, "network": network})
    assert response.status_code == 404
    assert "stellar" in response.json()["detail"]


def test_invalid_form_returns_400(client: TestClient) -> None:
    response = client.post("/export", json={"form": {"fields": "nope"}, "network": NETWORK})
    assert response.status_code == 400
