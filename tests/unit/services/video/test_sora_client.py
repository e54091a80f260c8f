"""Unit tests for the native Sora job client."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from app.core.config import Config
from app.core.exceptions import ConfigError, ContentExtractionError, ExternalAPIError
from app.services.video.base import SoraVideoRequest
from app.services.video.sora_client import SoraVideoClient


@pytest.fixture
def http_client() -> MagicMock:
    """Create a mock HTTP client."""
    client = MagicMock()
    client.post_with_retry = AsyncMock()
    client.get = AsyncMock()
    return client


@pytest.fixture
def sora_client(http_client, app_config) -> SoraVideoClient:
    """Create a client with polling sleeps disabled."""
    return SoraVideoClient(http_client, app_config, logger=MagicMock())


@pytest.fixture(autouse=True)
def no_sleep():
    """Skip real waits between polls."""
    with patch("app.services.video.sora_client.asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep


class TestSoraVideoClientGenerate:
    """Tests for SoraVideoClient.generate."""

    @pytest.mark.asyncio
    async def test_create_and_poll(self, sora_client, http_client):
        """Test a job is created, polled and its output returned."""
        http_client.post_with_retry.return_value = httpx.Response(200, json={"id": "job-1"})
        http_client.get.side_effect = [
            httpx.Response(200, json={"status": "in_progress", "progress": 40}),
            httpx.Response(
                200,
                json={
                    "status": "completed",
                    "data": [
                        {
                            "url": "https://cdn.example.com/job-1.mp4",
                            "permalink": "https://sora.example.com/p/1",
                        }
                    ],
                },
            ),
        ]
        progress: list[int] = []

        result = await sora_client.generate(
            SoraVideoRequest(prompt="a fox", seconds="15"), progress.append
        )

        assert result.id == "job-1"
        assert result.data[0].url == "https://cdn.example.com/job-1.mp4"
        assert result.data[0].permalink == "https://sora.example.com/p/1"
        assert progress == [1, 40, 100]

        call = http_client.post_with_retry.call_args
        assert call.args[0] == "https://sora.example.com/v1/videos"
        assert call.kwargs["json"] == {
            "prompt": "a fox",
            "model": "sora-2",
            "orientation": "landscape",
            "seconds": "15",
            "size": "1280x720",
        }
        assert call.kwargs["headers"]["Authorization"] == "Bearer sk-global"
        http_client.get.assert_called_with(
            "https://sora.example.com/v1/videos/job-1", headers=call.kwargs["headers"]
        )

    @pytest.mark.asyncio
    async def test_channel_overrides(self, sora_client, http_client):
        """Test base URL and key overrides are used."""
        http_client.post_with_retry.return_value = httpx.Response(200, json={"id": "j"})
        http_client.get.return_value = httpx.Response(
            200, json={"status": "succeeded", "url": "https://x/v.mp4"}
        )

        result = await sora_client.generate(
            SoraVideoRequest(prompt="p"),
            base_url="https://channel.example.com/",
            api_key="sk-channel",
            channel_id="sora-main",
        )

        call = http_client.post_with_retry.call_args
        assert call.args[0] == "https://channel.example.com/v1/videos"
        assert call.kwargs["headers"]["Authorization"] == "Bearer sk-channel"
        assert result.channel_id == "sora-main"
        assert result.status == "succeeded"

    @pytest.mark.asyncio
    async def test_channel_url_without_key_sends_no_key(self, sora_client, http_client):
        """Test the configured key is not sent to a channel base URL."""
        http_client.post_with_retry.return_value = httpx.Response(200, json={"id": "j"})
        http_client.get.return_value = httpx.Response(
            200, json={"status": "completed", "url": "https://x/v.mp4"}
        )

        await sora_client.generate(
            SoraVideoRequest(prompt="p"),
            base_url="https://third-party.example.net",
            api_key=None,
        )

        call = http_client.post_with_retry.call_args
        assert call.args[0] == "https://third-party.example.net/v1/videos"
        assert "Authorization" not in call.kwargs["headers"]
        for get_call in http_client.get.call_args_list:
            assert "Authorization" not in get_call.kwargs["headers"]

    @pytest.mark.asyncio
    async def test_key_without_url_is_ignored(self, sora_client, http_client):
        """Test a key without its base URL is not sent to the configured host."""
        http_client.post_with_retry.return_value = httpx.Response(200, json={"id": "j"})
        http_client.get.return_value = httpx.Response(
            200, json={"status": "completed", "url": "https://x/v.mp4"}
        )

        await sora_client.generate(SoraVideoRequest(prompt="p"), api_key="sk-channel")

        call = http_client.post_with_retry.call_args
        assert call.args[0] == "https://sora.example.com/v1/videos"
        assert call.kwargs["headers"]["Authorization"] == "Bearer sk-global"

    @pytest.mark.asyncio
    async def test_content_url_fallback(self, sora_client, http_client):
        """Test the content endpoint is used when the job has no URL."""
        http_client.post_with_retry.return_value = httpx.Response(200, json={"id": "j9"})
        http_client.get.return_value = httpx.Response(200, json={"status": "completed"})

        result = await sora_client.generate(SoraVideoRequest(prompt="p"))

        assert result.data[0].url == "https://sora.example.com/v1/videos/j9/content"

    @pytest.mark.asyncio
    async def test_progress_clamped(self, sora_client, http_client):
        """Test poll progress is clamped to 1..99."""
        http_client.post_with_retry.return_value = httpx.Response(200, json={"id": "j"})
        http_client.get.side_effect = [
            httpx.Response(200, json={"status": "queued", "progress": 0}),
            httpx.Response(200, json={"status": "running", "progress": 100}),
            httpx.Response(200, json={"status": "completed"}),
        ]
        callback = AsyncMock()

        await sora_client.generate(SoraVideoRequest(prompt="p"), callback)

        assert [c.args[0] for c in callback.await_args_list] == [1, 1, 99, 100]

    @pytest.mark.asyncio
    async def test_missing_base_url(self, http_client):
        """Test a missing base URL is a configuration error."""
        client = SoraVideoClient(http_client, Config(_env_file=None, sora_base_url=""))

        with pytest.raises(ConfigError):
            await client.generate(SoraVideoRequest(prompt="p"))

        http_client.post_with_retry.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_failure(self, sora_client, http_client):
        """Test a failed creation raises with the upstream message."""
        http_client.post_with_retry.return_value = httpx.Response(
            400, json={"error": {"message": "prompt rejected"}}
        )

        with pytest.raises(ExternalAPIError) as exc_info:
            await sora_client.generate(SoraVideoRequest(prompt="p"))

        assert exc_info.value.status_code == 400
        assert "prompt rejected" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_missing_job_id(self, sora_client, http_client):
        """Test a creation response without id is rejected."""
        http_client.post_with_retry.return_value = httpx.Response(200, json={"status": "queued"})

        with pytest.raises(ContentExtractionError):
            await sora_client.generate(SoraVideoRequest(prompt="p"))

    @pytest.mark.asyncio
    async def test_failed_job(self, sora_client, http_client):
        """Test a failed job raises with its error."""
        http_client.post_with_retry.return_value = httpx.Response(200, json={"id": "j"})
        http_client.get.return_value = httpx.Response(
            200, json={"status": "failed", "error": "content policy"}
        )

        with pytest.raises(ExternalAPIError, match="content policy"):
            await sora_client.generate(SoraVideoRequest(prompt="p"))

    @pytest.mark.asyncio
    async def test_transient_poll_errors_recover(self, sora_client, http_client):
        """Test poll errors below the limit are tolerated."""
        http_client.post_with_retry.return_value = httpx.Response(200, json={"id": "j"})
        http_client.get.side_effect = [
            httpx.ConnectError("reset"),
            httpx.Response(502, text="bad gateway"),
            httpx.Response(200, json={"status": "completed", "url": "https://x/v.mp4"}),
        ]

        result = await sora_client.generate(SoraVideoRequest(prompt="p"))

        assert result.data[0].url == "https://x/v.mp4"

    @pytest.mark.asyncio
    async def test_poll_errors_exhausted(self, sora_client, http_client):
        """Test consecutive poll errors up to the limit propagate."""
        http_client.post_with_retry.return_value = httpx.Response(200, json={"id": "j"})
        http_client.get.side_effect = httpx.ConnectError("down")

        with pytest.raises(httpx.ConnectError):
            await sora_client.generate(SoraVideoRequest(prompt="p"))

        assert http_client.get.call_count == 3

    @pytest.mark.asyncio
    async def test_timeout(self, sora_client, http_client):
        """Test the job gives up after the polling deadline."""
        http_client.post_with_retry.return_value = httpx.Response(200, json={"id": "j"})

        with patch("app.services.video.sora_client.time") as mock_time:
            mock_time.monotonic.side_effect = [0.0, 100.0]

            with pytest.raises(ExternalAPIError, match="timed out"):
                await sora_client.generate(SoraVideoRequest(prompt="p"))

        http_client.get.assert_not_called()
