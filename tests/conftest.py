"""Pytest configuration and fixtures.

This module provides common fixtures used across all tests.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
import yaml

from app.config import SiteConfig
from app.core.config import Config
from app.core.logging import setup_logging

# Setup logging for tests
setup_logging()


@pytest.fixture
def site_config_data() -> dict[str, Any]:
    """Get a valid site configuration dictionary.

    Returns:
        Site configuration with one channel of each type
    """
    return {
        "prompt_processing": {
            "blocklist_enabled": True,
            "blocklist_words": "forbidden\nsub:badword\n/dr[a@]gon/i",
        },
        "pricing": {"sora_video_10s": 100, "sora_video_15s": 150, "sora_video_25s": 250},
        "chat_models": [
            {
                "id": "gpt-mini",
                "name": "GPT Mini",
                "api_url": "https://llm.example.com/v1/chat/completions",
                "api_key": "sk-chat",
                "model_id": "gpt-4o-mini",
                "max_tokens": 4096,
            }
        ],
        "video_channels": [
            {
                "id": "sora-main",
                "name": "Sora",
                "type": "sora",
                "base_url": "https://sora.example.com",
                "api_key": "sk-sora",
            },
            {
                "id": "flow",
                "name": "Flow",
                "type": "flow2api",
                "base_url": "https://flow.example.com",
                "api_key": "sk-flow",
            },
            {
                "id": "grok",
                "name": "Grok",
                "type": "grok2api",
                "base_url": "https://grok.example.com",
                "api_key": "sk-grok",
            },
            {
                "id": "gateway",
                "name": "Gateway",
                "type": "openai-compatible",
                "base_url": "https://gw.example.com",
                "api_key": "sk-gw",
            },
        ],
        "video_models": [
            {
                "id": "sora-10s",
                "channel_id": "sora-main",
                "name": "Sora 2",
                "api_model": "sora2",
            },
            {
                "id": "veo",
                "channel_id": "flow",
                "name": "Veo 3.1",
                "api_model": "veo_3_1_t2v_fast",
                "features": {"text_to_video": True, "image_to_video": True},
            },
            {
                "id": "grok-video",
                "channel_id": "grok",
                "name": "Grok Imagine",
                "api_model": "grok-imagine-0.9",
                "video_config_object": {"aspect_ratio": "3:2", "video_length": 8, "preset": "fun"},
            },
            {
                "id": "gw-model",
                "channel_id": "gateway",
                "name": "Gateway model",
                "api_model": "custom-video",
                "durations": [
                    {"value": "10s", "label": "10s", "cost": 80},
                    {"value": "15s", "label": "15s", "cost": 120},
                ],
            },
        ],
        "image_channels": [
            {
                "id": "img",
                "name": "Images",
                "type": "openai-compatible",
                "base_url": "https://img.example.com/",
                "api_key": "key-one, key-two",
            }
        ],
    }


@pytest.fixture
def site_config(site_config_data: dict[str, Any]) -> SiteConfig:
    """Get a validated SiteConfig.

    Returns:
        SiteConfig built from site_config_data
    """
    return SiteConfig(**site_config_data)


@pytest.fixture
def site_config_service(site_config: SiteConfig) -> MagicMock:
    """Get a mock SiteConfigService returning site_config.

    Returns:
        Mock with get() wired to the site config
    """
    service = MagicMock()
    service.get.return_value = site_config
    return service


@pytest.fixture
def write_site_config(tmp_path: Path) -> Callable[[dict[str, Any]], Path]:
    """Get a helper that writes a site config dictionary to a YAML file.

    Returns:
        Callable returning the written path
    """

    def _write(data: dict[str, Any], name: str = "site.yaml") -> Path:
        path = tmp_path / name
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(data, f)
        return path

    return _write


@pytest.fixture
def app_config() -> Config:
    """Get an application Config with upstream settings filled in.

    Returns:
        Config ignoring any local .env file
    """
    return Config(
        _env_file=None,
        sora_base_url="https://sora.example.com/",
        sora_api_key="sk-global",
        sora_backend_url="https://backend.example.com",
        sora_backend_token="backend-token",
        sora_poll_interval_seconds=0.01,
        sora_max_poll_seconds=60,
        http_max_retries=1,
        http_retry_backoff=0.0,
    )


@pytest.fixture
def anyio_backend() -> str:
    """Specify backend for anyio.

    Returns:
        Backend name
    """
    return "asyncio"
