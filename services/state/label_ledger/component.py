"""Component identity for Label Ledger Service."""

from __future__ import annotations

SERVICE_COMPONENT_ID = "service_label_ledger"
