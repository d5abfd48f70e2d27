"""Component identity for the Bluesky adapter resource."""

from __future__ import annotations

RESOURCE_COMPONENT_ID = "adapter_bluesky"
