"""Dependency Injection Container.

This module provides a centralized DI container using dependency-injector.
Lifecycles:
- Singleton: One instance for the entire application (clients, config)
- Transient: New instance every time (Factory), used for services

Usage:
    # In FastAPI
    from app.core.container import get_video_pipeline

    @router.post("/video")
    async def generate(pipeline: VideoGenerationPipeline = Depends(get_video_pipeline)):
        ...

    # In tests
    with override_site_config_service(service):
        ...
"""

from dependency_injector import containers, providers

from app.core.config import Config, get_config
from app.core.config_loader import SiteConfigService
from app.core.logging import get_logger
from app.infrastructure.http_client import HTTPClient

logger = get_logger(__name__)


class InfrastructureContainer(containers.DeclarativeContainer):
    """Infrastructure layer dependencies (external clients, site config).

    These are Singleton: created once, closed at application shutdown.
    """

    global_config = providers.Dependency(instance_of=Config)

    # ============================================
    # Site Configuration
    # ============================================

    site_config_service = providers.Singleton(
        "app.core.config_loader.SiteConfigService",
        config_path=global_config.provided.site_config_path,
    )

    # ============================================
    # LLM Client
    # ============================================

    # Unified LLM client (LiteLLM-based, provider-agnostic)
    llm_client = providers.Singleton(
        "app.infrastructure.llm.LLMClient",
    )

    # ============================================
    # HTTP Clients
    # ============================================

    http_client = providers.Singleton(
        "app.infrastructure.http_client.HTTPClient",
        timeout=global_config.provided.http_timeout,
    )

    # Long-running uploads (character cards): no read timeout
    streaming_http_client = providers.Singleton(
        "app.infrastructure.http_client.create_streaming_client",
    )


class ServiceContainer(containers.DeclarativeContainer):
    """Service layer dependencies.

    Services are Transient (Factory).
    They receive infrastructure dependencies via injection.
    """

    global_config = providers.Dependency(instance_of=Config)
    infrastructure = providers.DependenciesContainer()

    # ============================================
    # Prompt Services
    # ============================================

    prompt_processor = providers.Factory(
        "app.services.prompt.processor.PromptProcessor",
        llm_client=infrastructure.llm_client,
        site_config_service=infrastructure.site_config_service,
    )

    # ============================================
    # Video Services
    # ============================================

    sora_video_client = providers.Factory(
        "app.services.video.sora_client.SoraVideoClient",
        http_client=infrastructure.http_client,
        config=global_config,
    )

    video_adapter = providers.Factory(
        "app.services.video.adapter.VideoChannelAdapter",
        http_client=infrastructure.http_client,
        sora_client=sora_video_client,
        site_config_service=infrastructure.site_config_service,
        config=global_config,
    )

    sora_backend_client = providers.Factory(
        "app.services.video.unwatermark.SoraBackendClient",
        http_client=infrastructure.http_client,
        config=global_config,
    )

    character_card_streamer = providers.Factory(
        "app.services.video.character_card.CharacterCardStreamer",
        http_client=infrastructure.streaming_http_client,
        config=global_config,
    )

    # ============================================
    # Catalog Services
    # ============================================

    remote_model_lister = providers.Factory(
        "app.services.catalog.model_grouping.RemoteModelLister",
        http_client=infrastructure.http_client,
        site_config_service=infrastructure.site_config_service,
    )

    # ============================================
    # Pipeline (Orchestrator)
    # ============================================

    video_pipeline = providers.Factory(
        "app.services.pipeline.video_generation.VideoGenerationPipeline",
        prompt_processor=prompt_processor,
        adapter=video_adapter,
        site_config_service=infrastructure.site_config_service,
    )


class ApplicationContainer(containers.DeclarativeContainer):
    """Root application container.

    Composes all sub-containers and provides the main entry point.
    """

    # Global Config singleton (environment variables)
    # Uses get_config() to ensure same instance across the app
    config = providers.Singleton(get_config)

    # Sub-containers
    infrastructure = providers.Container(
        InfrastructureContainer,
        global_config=config,
    )

    services = providers.Container(
        ServiceContainer,
        global_config=config,
        infrastructure=infrastructure,
    )

    # ============================================
    # Convenience accessors (shortcuts)
    # ============================================

    http_client = providers.Singleton(
        lambda client: client,
        client=infrastructure.http_client,
    )

    site_config_service = providers.Singleton(
        lambda svc: svc,
        svc=infrastructure.site_config_service,
    )

    video_pipeline = providers.Factory(
        lambda svc: svc,
        svc=services.video_pipeline,
    )

    sora_backend_client = providers.Factory(
        lambda svc: svc,
        svc=services.sora_backend_client,
    )

    character_card_streamer = providers.Factory(
        lambda svc: svc,
        svc=services.character_card_streamer,
    )

    remote_model_lister = providers.Factory(
        lambda svc: svc,
        svc=services.remote_model_lister,
    )


def create_container() -> ApplicationContainer:
    """Create and configure the application container.

    Returns:
        Configured ApplicationContainer instance
    """
    return ApplicationContainer()


# Global container instance
container = create_container()


# ============================================
# FastAPI Integration
# ============================================


def get_container() -> ApplicationContainer:
    """Get the global container (for FastAPI Depends)."""
    return container


def get_video_pipeline():
    """FastAPI dependency for the video generation pipeline."""
    return container.video_pipeline()


def get_sora_backend_client():
    """FastAPI dependency for the Sora backend client."""
    return container.sora_backend_client()


def get_character_card_streamer():
    """FastAPI dependency for the character card streamer."""
    return container.character_card_streamer()


def get_remote_model_lister():
    """FastAPI dependency for the remote model lister."""
    return container.remote_model_lister()


async def close_clients() -> None:
    """Close shared HTTP clients and reset singletons.

    Called once at application shutdown.
    """
    for provider in (
        container.infrastructure.http_client,
        container.infrastructure.streaming_http_client,
    ):
        client = provider()
        if isinstance(client, HTTPClient):
            await client.close()
    container.infrastructure.reset_singletons()
    logger.info("Shared clients closed")


# ============================================
# Testing Utilities
# ============================================


def override_http_client(mock_client: HTTPClient):
    """Context manager to override the shared HTTP client for testing.

    Usage:
        with override_http_client(mock_client):
            # All services use mock_client
            ...
    """
    return container.infrastructure.http_client.override(mock_client)


def override_site_config_service(service: SiteConfigService):
    """Context manager to override the site configuration for testing.

    Usage:
        with override_site_config_service(SiteConfigService(tmp_path / "site.yaml")):
            ...
    """
    return container.infrastructure.site_config_service.override(service)


__all__ = [
    "ApplicationContainer",
    "InfrastructureContainer",
    "ServiceContainer",
    "container",
    "create_container",
    "get_container",
    "get_video_pipeline",
    "get_sora_backend_client",
    "get_character_card_streamer",
    "get_remote_model_lister",
    "close_clients",
    "override_http_client",
    "override_site_config_service",
]
