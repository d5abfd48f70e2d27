"""Component identity for Identity Verification Service."""

from __future__ import annotations

SERVICE_COMPONENT_ID = "service_identity_verification"
