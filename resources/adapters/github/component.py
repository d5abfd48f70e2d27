"""Component identity for the GitHub adapter resource."""

from __future__ import annotations

RESOURCE_COMPONENT_ID = "adapter_github"
