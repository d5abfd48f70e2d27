"""Authoritative in-process Python API for Identity Verification Service."""

from __future__ import annotations

from abc import ABC, abstractmethod

from packages.labeler_shared.config import LabelerSettings
from packages.labeler_shared.envelope import Envelope, EnvelopeMeta
from resources.adapters.bluesky import BlueskyAdapter
from resources.adapters.github import GithubAdapter
from services.action.identity_verification.domain import VerificationClaim


class IdentityVerificationService(ABC):
    """Public API for proving control of a GitHub account."""

    @abstractmethod
    def verify(
        self,
        *,
        meta: EnvelopeMeta,
        claimed_handle: str,
        sender_did: str,
    ) -> Envelope[VerificationClaim]:
        """Verify that ``sender_did`` is the Bluesky account ``claimed_handle`` lists."""


def build_identity_verification_service(
    *,
    settings: LabelerSettings,
    github: GithubAdapter,
    bluesky: BlueskyAdapter,
) -> IdentityVerificationService:
    """Build default Identity Verification implementation from typed settings."""
    from services.action.identity_verification.config import (
        resolve_identity_verification_settings,
    )
    from services.action.identity_verification.implementation import (
        DefaultIdentityVerificationService,
    )

    return DefaultIdentityVerificationService(
        settings=resolve_identity_verification_settings(settings),
        github=github,
        bluesky=bluesky,
    )
