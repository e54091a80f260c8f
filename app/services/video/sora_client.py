"""Native Sora video job client.

Drives the asynchronous job API:

1. ``POST {base}/v1/videos`` creates a job
2. ``GET {base}/v1/videos/{id}`` is polled until the job finishes
3. The video URL is read from the finished job, falling back to
   ``{base}/v1/videos/{id}/content``
"""

import asyncio
import time
from typing import Any

import httpx

from app.core.config import Config
from app.core.exceptions import ConfigError, ContentExtractionError, ExternalAPIError
from app.core.logging import get_logger
from app.infrastructure.http_client import HTTPClient
from app.services.video.base import (
    ProgressCallback,
    SoraVideoOutput,
    SoraVideoRequest,
    SoraVideoResult,
    report_progress,
)

SERVICE_NAME = "Sora"

COMPLETED_STATUSES = frozenset({"completed", "succeeded"})
FAILED_STATUSES = frozenset({"failed", "error", "cancelled"})


def _error_message(payload: Any, default: str) -> str:
    """Pull an error message out of an upstream payload."""
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        if isinstance(error, str) and error:
            return error
        if isinstance(payload.get("message"), str) and payload["message"]:
            return payload["message"]
    return default


def _result_url(payload: dict[str, Any]) -> str | None:
    for key in ("url", "video_url"):
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value

    data = payload.get("data")
    if isinstance(data, list) and data and isinstance(data[0], dict):
        value = data[0].get("url")
        if isinstance(value, str) and value:
            return value
    return None


def _first_output_field(payload: dict[str, Any], key: str) -> str | None:
    value = payload.get(key)
    if isinstance(value, str):
        return value
    data = payload.get("data")
    if isinstance(data, list) and data and isinstance(data[0], dict):
        nested = data[0].get(key)
        if isinstance(nested, str):
            return nested
    return None


class SoraVideoClient:
    """Client for the native Sora job API.

    Example:
        >>> client = SoraVideoClient(http_client, config)
        >>> result = await client.generate(SoraVideoRequest(prompt="a red fox"))
        >>> print(result.data[0].url)
    """

    def __init__(
        self,
        http_client: HTTPClient,
        config: Config,
        logger: Any | None = None,
    ) -> None:
        """Initialize SoraVideoClient.

        Args:
            http_client: Shared HTTP client
            config: Application configuration (base URL, key, polling limits)
            logger: Logger instance (defaults to the module logger)
        """
        self.http_client = http_client
        self.config = config
        self._logger = logger or get_logger(__name__)

    async def generate(
        self,
        request: SoraVideoRequest,
        on_progress: ProgressCallback | None = None,
        *,
        base_url: str | None = None,
        api_key: str | None = None,
        channel_id: str | None = None,
    ) -> SoraVideoResult:
        """Create a video job and wait for it to finish.

        Args:
            request: Native job parameters
            on_progress: Progress callback (percent)
            base_url: Upstream base URL; when unset the configured URL and key
                are used together
            api_key: API key for ``base_url``, never replaced by the configured key
            channel_id: Channel reported back in the result

        Returns:
            Finished job with at least one output URL

        Raises:
            ConfigError: If no base URL is configured
            ExternalAPIError: If the job cannot be created, fails or times out
            ContentExtractionError: If the upstream omits the job id
        """
        if base_url:
            base, key = base_url.rstrip("/"), api_key
        else:
            base, key = self.config.sora_base_url.rstrip("/"), self.config.sora_api_key
        if not base:
            raise ConfigError("Sora base URL is not configured", config_path="sora_base_url")

        headers = {"Content-Type": "application/json"}
        if key:
            headers["Authorization"] = f"Bearer {key}"

        job_id = await self._create_job(base, headers, request)
        await report_progress(on_progress, 1)

        payload = await self._wait_for_job(base, headers, job_id, on_progress)

        url = _result_url(payload) or f"{base}/v1/videos/{job_id}/content"
        await report_progress(on_progress, 100)

        self._logger.info("Sora job completed", job_id=job_id, model=request.model)
        return SoraVideoResult(
            id=job_id,
            status=str(payload.get("status", "completed")),
            data=[
                SoraVideoOutput(
                    url=url,
                    permalink=_first_output_field(payload, "permalink"),
                    revised_prompt=_first_output_field(payload, "revised_prompt"),
                )
            ],
            channel_id=channel_id,
        )

    async def _create_job(
        self, base: str, headers: dict[str, str], request: SoraVideoRequest
    ) -> str:
        endpoint = f"{base}/v1/videos"
        self._logger.info(
            "Creating Sora job",
            model=request.model,
            seconds=request.seconds,
            size=request.size,
            has_image=request.input_image is not None,
        )
        response = await self.http_client.post_with_retry(
            endpoint,
            json=request.model_dump(exclude_none=True),
            headers=headers,
            max_retries=self.config.http_max_retries,
            backoff=self.config.http_retry_backoff,
        )
        payload = self._json(response)

        if not response.is_success:
            raise ExternalAPIError(
                SERVICE_NAME,
                _error_message(payload, f"job creation failed ({response.status_code})"),
                status_code=response.status_code,
                endpoint=endpoint,
                response_body=response.text,
            )

        job_id = payload.get("id") if isinstance(payload, dict) else None
        if not isinstance(job_id, str) or not job_id:
            raise ContentExtractionError(
                "Sora job response is missing the job id",
                content_type="video_job",
                snippet=response.text,
            )
        return job_id

    async def _wait_for_job(
        self,
        base: str,
        headers: dict[str, str],
        job_id: str,
        on_progress: ProgressCallback | None,
    ) -> dict[str, Any]:
        endpoint = f"{base}/v1/videos/{job_id}"
        deadline = time.monotonic() + self.config.sora_max_poll_seconds
        consecutive_errors = 0

        while True:
            if time.monotonic() > deadline:
                raise ExternalAPIError(
                    SERVICE_NAME,
                    f"video job {job_id} timed out",
                    endpoint=endpoint,
                    context={"job_id": job_id},
                )

            await asyncio.sleep(self.config.sora_poll_interval_seconds)

            try:
                response = await self.http_client.get(endpoint, headers=headers)
                if not response.is_success:
                    raise ExternalAPIError(
                        SERVICE_NAME,
                        f"status poll failed ({response.status_code})",
                        status_code=response.status_code,
                        endpoint=endpoint,
                        response_body=response.text,
                    )
                payload = self._json(response)
            except (httpx.RequestError, ExternalAPIError) as e:
                consecutive_errors += 1
                self._logger.warning(
                    "Sora status poll failed",
                    job_id=job_id,
                    error=str(e),
                    consecutive_errors=consecutive_errors,
                )
                if consecutive_errors >= self.config.sora_poll_max_errors:
                    raise
                continue

            consecutive_errors = 0
            if not isinstance(payload, dict):
                continue

            status = str(payload.get("status", "")).lower()
            if status in COMPLETED_STATUSES:
                return payload
            if status in FAILED_STATUSES:
                raise ExternalAPIError(
                    SERVICE_NAME,
                    _error_message(payload, f"video job {status}"),
                    endpoint=endpoint,
                    context={"job_id": job_id, "status": status},
                )

            progress = payload.get("progress")
            if isinstance(progress, int | float) and not isinstance(progress, bool):
                await report_progress(on_progress, max(1, min(99, int(progress))))

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None


__all__ = ["SoraVideoClient", "COMPLETED_STATUSES", "FAILED_STATUSES"]
