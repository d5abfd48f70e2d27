"""Bluesky adapter resource package."""

from resources.adapters.bluesky.adapter import (
    BlueskyAdapter,
    BlueskyAdapterDependencyError,
    BlueskyAdapterError,
    BlueskyAdapterHealthResult,
    BlueskyAdapterInternalError,
    BlueskyProfile,
    ChatLogPage,
    ChatMessage,
    LabelerServiceRecord,
    LabelLocale,
    LabelValueDefinition,
    LikeNotification,
)
from resources.adapters.bluesky.bluesky_adapter import HttpBlueskyAdapter
from resources.adapters.bluesky.component import RESOURCE_COMPONENT_ID
from resources.adapters.bluesky.config import (
    BlueskyAdapterSettings,
    resolve_bluesky_adapter_settings,
)

__all__ = [
    "BlueskyAdapter",
    "BlueskyAdapterDependencyError",
    "BlueskyAdapterError",
    "BlueskyAdapterHealthResult",
    "BlueskyAdapterInternalError",
    "BlueskyAdapterSettings",
    "BlueskyProfile",
    "ChatLogPage",
    "ChatMessage",
    "HttpBlueskyAdapter",
    "LabelLocale",
    "LabelValueDefinition",
    "LabelerServiceRecord",
    "LikeNotification",
    "RESOURCE_COMPONENT_ID",
    "resolve_bluesky_adapter_settings",
]
