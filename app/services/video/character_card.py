"""Character card extraction over a streamed chat completion.

A source video is uploaded to the Sora chat endpoint with ``stream: true``.
The upstream reasons about the video for minutes before it settles on a
character handle (``@name``), so the response is consumed frame by frame
on a client without read timeout.
"""

import json
import re
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any, Literal

from app.core.config import Config
from app.core.exceptions import ConfigError, ExternalAPIError
from app.core.logging import get_logger
from app.infrastructure.http_client import HTTPClient

SERVICE_NAME = "Sora"
CHARACTER_CARD_MODEL = "sora-video-landscape-10s"
UNNAMED_CHARACTER = "Unnamed character"

_HANDLE = re.compile(r"@\w+")
_DATA_PREFIX = "data: "
_DONE = "[DONE]"


@dataclass
class CharacterCardEvent:
    """Event emitted while a character card is processed.

    Attributes:
        event: "progress" or "completed"
        data: Event payload
    """

    event: Literal["progress", "completed"]
    data: dict[str, Any] = field(default_factory=dict)


def build_character_card_payload(video_base64: str) -> dict[str, Any]:
    """Build the streamed chat request carrying the source video."""
    return {
        "model": CHARACTER_CARD_MODEL,
        "messages": [
            {
                "role": "user",
                "content": [
                    {
                        "type": "video_url",
                        "video_url": {"url": f"data:video/mp4;base64,{video_base64}"},
                    }
                ],
            }
        ],
        "stream": True,
    }


def find_character_handle(text: str | None) -> str | None:
    """Return the first ``@handle`` in a text chunk."""
    if not text:
        return None
    matched = _HANDLE.search(text)
    return matched.group(0) if matched else None


class CharacterCardStreamer:
    """Streams character card extraction from the Sora chat endpoint.

    Example:
        >>> streamer = CharacterCardStreamer(streaming_client, config)
        >>> async for event in streamer.stream(video_base64):
        ...     print(event.event, event.data)
    """

    def __init__(
        self,
        http_client: HTTPClient,
        config: Config,
        logger: Any | None = None,
    ) -> None:
        """Initialize CharacterCardStreamer.

        Args:
            http_client: Long-running client (see create_streaming_client)
            config: Application configuration (Sora base URL and key)
            logger: Logger instance (defaults to the module logger)
        """
        self.http_client = http_client
        self.config = config
        self._logger = logger or get_logger(__name__)

    async def stream(self, video_base64: str) -> AsyncIterator[CharacterCardEvent]:
        """Upload a video and yield progress until a handle is settled.

        Args:
            video_base64: Base64 encoded MP4

        Yields:
            "progress" events with reasoning text, then one "completed"
            event with the character name

        Raises:
            ConfigError: If the Sora base URL or API key is missing
            ExternalAPIError: If the upstream rejects the request
        """
        if not self.config.sora_base_url:
            raise ConfigError("Sora base URL is not configured", config_path="sora_base_url")
        if not self.config.sora_api_key:
            raise ConfigError("Sora API key is not configured", config_path="sora_api_key")

        endpoint = f"{self.config.sora_base_url.rstrip('/')}/v1/chat/completions"
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.config.sora_api_key}",
        }

        character_name = ""
        self._logger.info("Starting character card stream", endpoint=endpoint)

        async with self.http_client.stream(
            "POST", endpoint, json=build_character_card_payload(video_base64), headers=headers
        ) as response:
            if not response.is_success:
                body = (await response.aread()).decode("utf-8", errors="replace")
                raise ExternalAPIError(
                    SERVICE_NAME,
                    f"character card request failed ({response.status_code})",
                    status_code=response.status_code,
                    endpoint=endpoint,
                    response_body=body,
                )

            async for line in response.aiter_lines():
                if not line.startswith(_DATA_PREFIX):
                    continue
                data = line[len(_DATA_PREFIX) :].strip()
                if data == _DONE:
                    continue

                try:
                    parsed = json.loads(data)
                    choice = parsed["choices"][0]
                    delta = choice.get("delta") or {}
                except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
                    self._logger.warning("Skipping malformed SSE frame", error=str(e))
                    continue

                reasoning = delta.get("reasoning_content")
                if isinstance(reasoning, str) and reasoning:
                    yield CharacterCardEvent(event="progress", data={"message": reasoning})
                    character_name = find_character_handle(reasoning) or character_name

                content = delta.get("content")
                if isinstance(content, str) and content:
                    character_name = find_character_handle(content) or character_name

                finish_reason = choice.get("finish_reason")
                if isinstance(finish_reason, str) and finish_reason.lower() == "stop":
                    break

        final_name = character_name or UNNAMED_CHARACTER
        self._logger.info("Character card completed", character_name=final_name)
        yield CharacterCardEvent(event="completed", data={"characterName": final_name})


__all__ = [
    "CHARACTER_CARD_MODEL",
    "UNNAMED_CHARACTER",
    "CharacterCardEvent",
    "CharacterCardStreamer",
    "build_character_card_payload",
    "find_character_handle",
]
