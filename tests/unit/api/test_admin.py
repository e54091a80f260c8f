"""Tests for the admin endpoints."""

from collections.abc import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from app.core.container import get_remote_model_lister
from app.core.exceptions import ConfigError, ExternalAPIError, ResourceNotFoundError
from app.main import app
from app.services.catalog.model_grouping import RemoteModel


@pytest.fixture
def lister() -> Generator[MagicMock, None, None]:
    """Override the model lister dependency."""
    mock = MagicMock()
    mock.list_models = AsyncMock(
        return_value=[
            RemoteModel(id="flux-image-square", owned_by="bfl"),
            RemoteModel(id="flux-image-landscape-2k"),
            RemoteModel(id="dall-e-3"),
        ]
    )
    app.dependency_overrides[get_remote_model_lister] = lambda: mock
    yield mock
    app.dependency_overrides.clear()


@pytest.fixture
def client(lister) -> TestClient:
    """Create test client."""
    return TestClient(app)


@pytest.mark.unit
class TestImageChannelModels:
    """Tests for GET /api/admin/image-channels/models."""

    def test_flat_listing(self, client, lister):
        """Test the plain listing."""
        response = client.get("/api/admin/image-channels/models", params={"channel_id": "img"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data[0] == {"id": "flux-image-square", "owned_by": "bfl"}
        assert data[2] == {"id": "dall-e-3", "owned_by": "unknown"}
        lister.list_models.assert_awaited_once_with("img")

    def test_grouped_listing(self, client):
        """Test the grouped listing."""
        response = client.get(
            "/api/admin/image-channels/models", params={"channel_id": "img", "group": "true"}
        )

        data = response.json()["data"]
        assert len(data["grouped"]) == 1
        group = data["grouped"][0]
        assert group["baseName"] == "flux-image"
        assert group["displayName"] == "Flux Image"
        assert group["aspectRatios"] == ["1:1", "16:9"]
        assert group["imageSizes"] == ["1K", "2K"]
        assert group["resolutions"]["16:9"] == {"2K": "flux-image-landscape-2k"}
        assert data["ungrouped"] == [{"id": "dall-e-3", "owned_by": "unknown"}]

    def test_missing_channel_id(self, client):
        """Test the channel id is required."""
        response = client.get("/api/admin/image-channels/models")
        assert response.status_code == 422

    def test_config_error(self, client, lister):
        """Test unsupported channels are a client error."""
        lister.list_models.side_effect = ConfigError("This channel type does not support it")

        response = client.get("/api/admin/image-channels/models", params={"channel_id": "img"})

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_unknown_channel(self, client, lister):
        """Test unknown channels return 404."""
        lister.list_models.side_effect = ResourceNotFoundError("image_channel", "ghost")

        response = client.get("/api/admin/image-channels/models", params={"channel_id": "ghost"})

        assert response.status_code == 404

    def test_upstream_error(self, client, lister):
        """Test upstream failures return 502."""
        lister.list_models.side_effect = ExternalAPIError("Images", "failed", status_code=401)

        response = client.get("/api/admin/image-channels/models", params={"channel_id": "img"})

        assert response.status_code == 502
