"""Unit tests for Dependency Injection Container.

Tests cover:
- Container initialization and configuration
- Provider types (Singleton, Factory)
- Sub-container composition
- FastAPI integration helpers
- Testing utilities (overrides)
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.core.config import Config
from app.core.config_loader import SiteConfigService
from app.core.container import (
    close_clients,
    container,
    create_container,
    get_character_card_streamer,
    get_container,
    get_remote_model_lister,
    get_sora_backend_client,
    get_video_pipeline,
    override_http_client,
    override_site_config_service,
)
from app.infrastructure.http_client import HTTPClient
from app.services.catalog.model_grouping import RemoteModelLister
from app.services.pipeline.video_generation import VideoGenerationPipeline
from app.services.video.adapter import VideoChannelAdapter
from app.services.video.character_card import CharacterCardStreamer
from app.services.video.unwatermark import SoraBackendClient


class TestContainerCreation:
    """Tests for container creation and configuration."""

    def test_create_container_returns_container_with_providers(self) -> None:
        """Test that create_container returns a container with expected providers."""
        new_container = create_container()
        assert hasattr(new_container, "config")
        assert hasattr(new_container, "infrastructure")
        assert hasattr(new_container, "services")

    def test_container_has_config(self) -> None:
        """Test that container has configuration wired."""
        new_container = create_container()
        config = new_container.config()
        assert isinstance(config, Config)
        assert config.site_config_path

    def test_global_container_exists(self) -> None:
        """Test that global container is initialized."""
        assert container is not None
        assert get_container() is container


class TestInfrastructureContainer:
    """Tests for InfrastructureContainer."""

    def test_has_client_providers(self) -> None:
        """Test that infrastructure container has client providers."""
        assert hasattr(container.infrastructure, "http_client")
        assert hasattr(container.infrastructure, "streaming_http_client")
        assert hasattr(container.infrastructure, "llm_client")
        assert hasattr(container.infrastructure, "site_config_service")

    def test_site_config_service_is_singleton(self) -> None:
        """Test that the site config service is shared."""
        new_container = create_container()
        first = new_container.infrastructure.site_config_service()
        second = new_container.infrastructure.site_config_service()

        assert isinstance(first, SiteConfigService)
        assert first is second


class TestServiceContainer:
    """Tests for ServiceContainer."""

    def test_has_video_services(self) -> None:
        """Test that service container has video service providers."""
        assert hasattr(container.services, "sora_video_client")
        assert hasattr(container.services, "video_adapter")
        assert hasattr(container.services, "sora_backend_client")
        assert hasattr(container.services, "character_card_streamer")

    def test_has_prompt_and_catalog_services(self) -> None:
        """Test that service container has prompt and catalog providers."""
        assert hasattr(container.services, "prompt_processor")
        assert hasattr(container.services, "remote_model_lister")
        assert hasattr(container.services, "video_pipeline")

    def test_services_are_transient(self) -> None:
        """Test that Factory providers create new instances."""
        new_container = create_container()
        first = new_container.services.video_adapter()
        second = new_container.services.video_adapter()

        assert isinstance(first, VideoChannelAdapter)
        assert first is not second
        assert first.http_client is second.http_client


class TestFastAPIHelpers:
    """Tests for FastAPI dependency helpers."""

    def test_get_video_pipeline(self) -> None:
        """Test pipeline dependency."""
        assert isinstance(get_video_pipeline(), VideoGenerationPipeline)

    def test_get_sora_backend_client(self) -> None:
        """Test backend client dependency."""
        assert isinstance(get_sora_backend_client(), SoraBackendClient)

    def test_get_character_card_streamer(self) -> None:
        """Test streamer dependency."""
        assert isinstance(get_character_card_streamer(), CharacterCardStreamer)

    def test_get_remote_model_lister(self) -> None:
        """Test model lister dependency."""
        assert isinstance(get_remote_model_lister(), RemoteModelLister)


class TestOverrides:
    """Tests for testing utilities."""

    def test_override_http_client(self) -> None:
        """Test HTTP client override reaches services."""
        mock_client = MagicMock()

        with override_http_client(mock_client):
            client = container.services.sora_backend_client()
            assert client.http_client is mock_client

        assert container.services.sora_backend_client().http_client is not mock_client

    def test_override_site_config_service(self) -> None:
        """Test site config override reaches services."""
        mock_service = MagicMock()

        with override_site_config_service(mock_service):
            adapter = container.services.video_adapter()
            assert adapter.site_config_service is mock_service


class TestCloseClients:
    """Tests for shutdown cleanup."""

    @pytest.mark.asyncio
    async def test_close_clients_closes_http_clients(self) -> None:
        """Test both shared HTTP clients are closed."""
        regular = MagicMock(spec=HTTPClient)
        regular.close = AsyncMock()
        streaming = MagicMock(spec=HTTPClient)
        streaming.close = AsyncMock()

        with (
            container.infrastructure.http_client.override(regular),
            container.infrastructure.streaming_http_client.override(streaming),
        ):
            await close_clients()

        regular.close.assert_awaited_once()
        streaming.close.assert_awaited_once()
