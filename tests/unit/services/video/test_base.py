"""Unit tests for video request and result types."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.services.video.base import (
    GenerateResult,
    MediaFile,
    SoraGenerateRequest,
    report_progress,
)


class TestReportProgress:
    """Tests for report_progress."""

    @pytest.mark.asyncio
    async def test_sync_callback(self):
        """Test plain callables are called."""
        callback = MagicMock(return_value=None)
        await report_progress(callback, 50)
        callback.assert_called_once_with(50)

    @pytest.mark.asyncio
    async def test_async_callback(self):
        """Test coroutine callbacks are awaited."""
        callback = AsyncMock()
        await report_progress(callback, 100)
        callback.assert_awaited_once_with(100)

    @pytest.mark.asyncio
    async def test_no_callback(self):
        """Test a missing callback is ignored."""
        await report_progress(None, 10)


class TestSoraGenerateRequest:
    """Tests for SoraGenerateRequest."""

    def test_aliases(self):
        """Test camelCase fields are accepted."""
        request = SoraGenerateRequest.model_validate(
            {
                "prompt": "a cat",
                "modelId": "veo",
                "aspectRatio": "portrait",
                "files": [{"mimeType": "image/png", "data": "AAAA"}],
            }
        )
        assert request.model_id == "veo"
        assert request.aspect_ratio == "portrait"
        assert request.model == "sora2-landscape-10s"

    def test_first_image(self):
        """Test the first image attachment is found."""
        request = SoraGenerateRequest(
            files=[
                MediaFile(mime_type="video/mp4", data="v"),
                MediaFile(mime_type="image/jpeg", data="i"),
            ]
        )
        assert request.first_image.data == "i"
        assert request.first_image.to_data_url() == "data:image/jpeg;base64,i"
        assert SoraGenerateRequest().first_image is None


class TestGenerateResult:
    """Tests for GenerateResult."""

    def test_serialized_by_alias(self):
        """Test the API shape uses camelCase keys."""
        result = GenerateResult(url="https://x/v.mp4", cost=100, channel_id="flow")
        assert result.model_dump(by_alias=True, exclude_none=True) == {
            "type": "sora-video",
            "url": "https://x/v.mp4",
            "cost": 100,
            "channelId": "flow",
        }
