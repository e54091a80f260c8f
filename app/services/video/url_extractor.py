"""Video URL extraction from chat completion content.

Gateways answer video requests with free-form message content. The URL
is searched for in this order:

1. JSON media envelope ``{"type": "video", "url": ...}``
2. HTML ``<video src|poster>`` tag, then ``<source src>``
3. Markdown image, then markdown link
4. Bare URL, preferring video-like files and paths
"""

import json
import re
from typing import Literal

MediaType = Literal["video", "image"]

_HTML_VIDEO = re.compile(r"""<video[^>]*\s(?:src|poster)=['"]([^'"]+)['"]""", re.IGNORECASE)
_HTML_SOURCE = re.compile(r"""<source[^>]*\ssrc=['"]([^'"]+)['"]""", re.IGNORECASE)
_MARKDOWN_IMAGE = re.compile(r"!\[[^\]]*]\((https?://[^)\s]+)\)", re.IGNORECASE)
_MARKDOWN_LINK = re.compile(r"(?<!!)\[[^\]]*]\((https?://[^)\s]+)\)", re.IGNORECASE)
_BARE_URL = re.compile(r"""https?://[^\s"'<>`]+""", re.IGNORECASE)
_VIDEO_EXTENSION = re.compile(r"\.(?:mp4|mov|webm|mkv)(?:[?#]|$)")


def build_media_json(media_type: MediaType, url: str) -> str:
    """Serialize a media envelope."""
    return json.dumps({"type": media_type, "url": url})


def parse_media_json(content: str) -> tuple[MediaType, str] | None:
    """Parse a ``{"type", "url"}`` media envelope.

    Args:
        content: Candidate JSON text

    Returns:
        (type, url) pair, or None if the content is not an envelope
    """
    try:
        parsed = json.loads(content)
    except ValueError:
        return None

    if not isinstance(parsed, dict):
        return None

    media_type = parsed.get("type")
    url = parsed.get("url")
    if media_type in ("video", "image") and isinstance(url, str) and url.strip():
        return media_type, url.strip()
    return None


def is_video_like_url(url: str) -> bool:
    """Whether a URL points at a video file or a video path."""
    lower = url.lower()
    return bool(_VIDEO_EXTENSION.search(lower)) or "/video/" in lower


def extract_video_url(content: str | None) -> str | None:
    """Locate the video URL in chat completion content.

    Args:
        content: Message content returned by the gateway

    Returns:
        Video URL, or None if the content holds no URL
    """
    trimmed = (content or "").strip()
    if not trimmed:
        return None

    media = parse_media_json(trimmed)
    if media is not None and media[0] == "video":
        return media[1]

    for pattern in (_HTML_VIDEO, _HTML_SOURCE, _MARKDOWN_IMAGE, _MARKDOWN_LINK):
        matched = pattern.search(trimmed)
        if matched and matched.group(1).strip():
            return matched.group(1).strip()

    urls = [url.strip() for url in _BARE_URL.findall(trimmed)]
    if not urls:
        return None
    return next((url for url in urls if is_video_like_url(url)), urls[0])


__all__ = [
    "build_media_json",
    "parse_media_json",
    "is_video_like_url",
    "extract_video_url",
]
