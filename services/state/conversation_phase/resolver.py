"""Recover a verified GitHub handle from conversation history.

Subjects verified before explicit state was stored only have the bot's
success acknowledgment in their chat history. The claim message that
triggered it sits right before it, so the handle can be read back from there.
Only acknowledgments sent by the bot count, and only claims sent by the
subject, so pasting the marker text proves nothing.
"""

from __future__ import annotations

from collections.abc import Sequence

from services.state.conversation_phase.interfaces import HistoryMessage

SUCCESS_MARKER = "Success! We've verified your GitHub account."


def resolve_verified_handle(
    history: Sequence[HistoryMessage],
    *,
    bot_did: str,
    subject: str,
) -> str | None:
    """Return the handle confirmed by the bot's most recent success marker.

    ``history`` is newest first, as the chat API returns it, so the claim
    preceding the marker chronologically is the next list element. Returns
    ``None`` when there is no bot marker, or when the claim before it is
    missing, malformed, or was not sent by ``subject``.
    """
    for index, message in enumerate(history):
        if message.sender_did != bot_did:
            continue
        if not message.text.startswith(SUCCESS_MARKER):
            continue
        if index + 1 >= len(history):
            return None
        claim = history[index + 1]
        if claim.sender_did != subject:
            return None
        return parse_claim(claim.text)
    return None


def parse_claim(text: str) -> str | None:
    """Parse ``<prefix>: <handle>`` and return the handle."""
    prefix, separator, rest = text.partition(":")
    handle = rest.strip()
    if not separator or prefix.strip() == "" or handle == "":
        return None
    if any(char.isspace() for char in handle):
        return None
    return handle
