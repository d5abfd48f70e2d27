"""Component identity for Entitlement Service."""

from __future__ import annotations

SERVICE_COMPONENT_ID = "service_entitlement"
