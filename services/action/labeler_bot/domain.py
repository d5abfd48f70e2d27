"""Domain contracts for Labeler Bot Service payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from services.action.labeler_bot.commands import CommandKind


class BotReply(BaseModel):
    """Outcome of handling one inbound message or onboarding trigger.

    ``outcome`` is ``"ok"`` or the error code that selected the reply text.
    ``delivered`` is false when sending the reply failed.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    convo_id: str
    command: CommandKind | None
    outcome: str
    text: str
    delivered: bool
