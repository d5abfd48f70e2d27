"""Component identity for Conversation Phase Service."""

from __future__ import annotations

SERVICE_COMPONENT_ID = "service_conversation_phase"
