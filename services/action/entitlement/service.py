"""Authoritative in-process Python API for Entitlement Service."""

from __future__ import annotations

from abc import ABC, abstractmethod

from packages.labeler_shared.envelope import Envelope, EnvelopeMeta
from resources.adapters.github import GithubAdapter
from services.action.entitlement.domain import EntitlementDecision


class EntitlementService(ABC):
    """Public API deciding whether a verified user earns a repository label."""

    @abstractmethod
    def evaluate(
        self,
        *,
        meta: EnvelopeMeta,
        verified_handle: str,
        claim: str,
    ) -> Envelope[EntitlementDecision]:
        """Grant on ownership or a merged contribution to ``claim``."""


def build_entitlement_service(*, github: GithubAdapter) -> EntitlementService:
    """Build default Entitlement implementation over one GitHub adapter."""
    from services.action.entitlement.implementation import DefaultEntitlementService

    return DefaultEntitlementService(github=github)
