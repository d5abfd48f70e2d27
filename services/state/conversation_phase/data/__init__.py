"""Data-layer exports for Conversation Phase Service."""

from services.state.conversation_phase.data.repository import (
    SqlVerificationStateRepository,
)
from services.state.conversation_phase.data.runtime import PhasePostgresRuntime

__all__ = ["PhasePostgresRuntime", "SqlVerificationStateRepository"]
