"""Video generation services.

Provides the channel adapter and the Sora upstream clients:
- VideoChannelAdapter: routes requests to chat-completion or native channels
- SoraVideoClient: native job create/poll API
- SoraBackendClient: unwatermarked download links
- CharacterCardStreamer: streamed character card extraction
"""

from app.services.video.adapter import VideoChannelAdapter
from app.services.video.base import GenerateResult, MediaFile, SoraGenerateRequest
from app.services.video.character_card import CharacterCardEvent, CharacterCardStreamer
from app.services.video.sora_client import SoraVideoClient
from app.services.video.unwatermark import SoraBackendClient

__all__ = [
    "VideoChannelAdapter",
    "GenerateResult",
    "MediaFile",
    "SoraGenerateRequest",
    "CharacterCardEvent",
    "CharacterCardStreamer",
    "SoraVideoClient",
    "SoraBackendClient",
]
