"""Component identity for Labeler Bot Service."""

from __future__ import annotations

SERVICE_COMPONENT_ID = "service_labeler_bot"
