"""Unwatermarked download links from the Sora backend."""

from typing import Any

from app.core.config import Config
from app.core.exceptions import ConfigError, ExternalAPIError
from app.core.logging import get_logger
from app.infrastructure.http_client import HTTPClient

SERVICE_NAME = "Sora backend"


class SoraBackendClient:
    """Client for the Sora backend ``/get-sora-link`` endpoint.

    Example:
        >>> client = SoraBackendClient(http_client, config)
        >>> link = await client.get_download_link("https://sora.chatgpt.com/p/s_123")
    """

    def __init__(
        self,
        http_client: HTTPClient,
        config: Config,
        logger: Any | None = None,
    ) -> None:
        """Initialize SoraBackendClient.

        Args:
            http_client: Shared HTTP client
            config: Application configuration (backend URL and token)
            logger: Logger instance (defaults to the module logger)
        """
        self.http_client = http_client
        self.config = config
        self._logger = logger or get_logger(__name__)

    async def get_download_link(self, permalink: str) -> str:
        """Resolve a Sora share link into an unwatermarked download link.

        Args:
            permalink: Sora share link (e.g., https://sora.chatgpt.com/p/s_xxx)

        Returns:
            Download link

        Raises:
            ConfigError: If the backend URL is not configured
            ExternalAPIError: If the backend rejects the request
        """
        if not self.config.sora_backend_url:
            raise ConfigError("Sora backend is not configured", config_path="sora_backend_url")

        endpoint = f"{self.config.sora_backend_url.rstrip('/')}/get-sora-link"
        body: dict[str, Any] = {"url": permalink}
        if self.config.sora_backend_token:
            body["token"] = self.config.sora_backend_token

        self._logger.info("Requesting unwatermarked link", permalink=permalink)
        response = await self.http_client.post(endpoint, json=body)

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if not response.is_success:
            error = data.get("error")
            raise ExternalAPIError(
                SERVICE_NAME,
                error if isinstance(error, str) and error else "failed to get download link",
                status_code=response.status_code,
                endpoint=endpoint,
                response_body=response.text,
            )

        link = data.get("download_link")
        if not isinstance(link, str) or not link:
            raise ExternalAPIError(
                SERVICE_NAME,
                "response has no download_link",
                status_code=response.status_code,
                endpoint=endpoint,
                response_body=response.text,
            )
        return link


__all__ = ["SoraBackendClient"]
