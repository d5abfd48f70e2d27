"""Entitlement Service package exports."""

from services.action.entitlement.domain import EntitlementDecision, GrantReason
from services.action.entitlement.implementation import DefaultEntitlementService
from services.action.entitlement.service import (
    EntitlementService,
    build_entitlement_service,
)

__all__ = [
    "DefaultEntitlementService",
    "EntitlementDecision",
    "EntitlementService",
    "GrantReason",
    "build_entitlement_service",
]
