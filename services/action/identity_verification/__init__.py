"""Identity Verification Service package exports."""

from services.action.identity_verification.config import (
    IdentityVerificationSettings,
    resolve_identity_verification_settings,
)
from services.action.identity_verification.domain import VerificationClaim
from services.action.identity_verification.implementation import (
    DefaultIdentityVerificationService,
)
from services.action.identity_verification.service import (
    IdentityVerificationService,
    build_identity_verification_service,
)

__all__ = [
    "DefaultIdentityVerificationService",
    "IdentityVerificationService",
    "IdentityVerificationSettings",
    "VerificationClaim",
    "build_identity_verification_service",
    "resolve_identity_verification_settings",
]
