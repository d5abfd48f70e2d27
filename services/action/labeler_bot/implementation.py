"""Concrete Labeler Bot Service implementation."""

from __future__ import annotations

from typing import Any

from packages.labeler_shared.envelope import (
    Envelope,
    EnvelopeMeta,
    child_meta,
    failure,
    success,
    validate_meta,
)
from packages.labeler_shared.errors import (
    codes,
    dependency_error,
    validation_error,
)
from packages.labeler_shared.logging import get_logger, public_api_instrumented
from resources.adapters.bluesky import (
    BlueskyAdapter,
    BlueskyAdapterError,
    ChatMessage,
)
from services.action.entitlement.domain import LABEL_IDENTIFIER_TOO_LONG, GrantReason
from services.action.entitlement.service import EntitlementService
from services.action.identity_verification.service import (
    IdentityVerificationService,
)
from services.action.labeler_bot import messages
from services.action.labeler_bot.commands import Command, CommandKind, parse_command
from services.action.labeler_bot.component import SERVICE_COMPONENT_ID
from services.action.labeler_bot.config import LabelerBotSettings
from services.action.labeler_bot.domain import BotReply
from services.action.labeler_bot.service import LabelerBotService
from services.state.conversation_phase.service import ConversationPhaseService
from services.state.label_ledger.service import LabelLedgerService

_LOGGER = get_logger(__name__)

OUTCOME_OK = "ok"

_VERIFY_REPLIES = {
    codes.MALFORMED_INPUT: messages.MISSING_USERNAME,
    codes.NOT_LINKED: messages.NOT_LINKED,
    codes.IDENTITY_MISMATCH: messages.IDENTITY_MISMATCH,
    codes.LOOKUP_FAILURE: messages.VERIFY_LOOKUP_FAILED,
}

_ENTITLEMENT_REPLIES = {
    codes.MALFORMED_INPUT: messages.MALFORMED_REPO,
    codes.NO_CONTRIBUTION: messages.NO_CONTRIBUTION,
}


class DefaultLabelerBotService(LabelerBotService):
    """Command dispatcher wiring verification, entitlement, and the ledger.

    Every failure code coming back from a collaborator ends up as a reply to
    the sender; the envelope itself only fails when there is nobody to reply
    to.
    """

    def __init__(
        self,
        *,
        settings: LabelerBotSettings,
        max_labels: int,
        bluesky: BlueskyAdapter,
        identity: IdentityVerificationService,
        phase: ConversationPhaseService,
        entitlement: EntitlementService,
        ledger: LabelLedgerService,
    ) -> None:
        self._settings = settings
        self._max_labels = max_labels
        self._bluesky = bluesky
        self._identity = identity
        self._phase = phase
        self._entitlement = entitlement
        self._ledger = ledger

    @public_api_instrumented(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def handle_message(
        self, *, meta: EnvelopeMeta, message: ChatMessage
    ) -> Envelope[BotReply]:
        """Dispatch one inbound chat message and send the reply."""
        errors = validate_meta(meta)
        if errors:
            return failure(meta=meta, errors=errors)
        _LOGGER.debug("Received message from %s: %s", message.sender_did, message.text)

        convo_id = message.convo_id or self._conversation_id(message.sender_did)
        if convo_id is None:
            return self._no_conversation(meta=meta, member_did=message.sender_did)

        command = parse_command(message.text)
        outcome, text = self._dispatch(
            meta=child_meta(meta, source=SERVICE_COMPONENT_ID),
            command=command,
            sender_did=message.sender_did,
            convo_id=convo_id,
        )
        return success(
            meta=meta,
            payload=BotReply(
                convo_id=convo_id,
                command=command.kind,
                outcome=outcome,
                text=text,
                delivered=self._send(convo_id=convo_id, text=text),
            ),
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=SERVICE_COMPONENT_ID,
        id_fields=("member_did",),
    )
    def greet(self, *, meta: EnvelopeMeta, member_did: str) -> Envelope[BotReply]:
        """Send the onboarding greeting to one member."""
        errors = validate_meta(meta)
        if member_did.strip() == "":
            errors.append(
                validation_error(
                    "member_did is required",
                    code=codes.INVALID_ARGUMENT,
                    metadata={"field": "member_did"},
                )
            )
        if errors:
            return failure(meta=meta, errors=errors)

        convo_id = self._conversation_id(member_did)
        if convo_id is None:
            return self._no_conversation(meta=meta, member_did=member_did)

        text = messages.greeting(max_labels=self._max_labels)
        _LOGGER.info("Greeting %s after a like", member_did)
        return success(
            meta=meta,
            payload=BotReply(
                convo_id=convo_id,
                command=None,
                outcome=OUTCOME_OK,
                text=text,
                delivered=self._send(convo_id=convo_id, text=text),
            ),
        )

    def _dispatch(
        self,
        *,
        meta: EnvelopeMeta,
        command: Command,
        sender_did: str,
        convo_id: str,
    ) -> tuple[str, str]:
        """Run one command and return ``(outcome, reply text)``."""
        if command.kind is CommandKind.VERIFY:
            return self._verify(meta=meta, handle=command.argument, sender_did=sender_did)
        if command.kind is CommandKind.CLAIM_REPO:
            return self._claim_repo(
                meta=meta,
                claim=command.argument,
                sender_did=sender_did,
                convo_id=convo_id,
            )
        if command.kind is CommandKind.RESET:
            return self._reset(meta=meta, sender_did=sender_did)
        if command.kind is CommandKind.LIST_LABELS:
            return self._list_labels(meta=meta, sender_did=sender_did)
        return OUTCOME_OK, messages.help_text(source_url=self._settings.source_url)

    def _verify(
        self, *, meta: EnvelopeMeta, handle: str, sender_did: str
    ) -> tuple[str, str]:
        verified = self._identity.verify(
            meta=meta, claimed_handle=handle, sender_did=sender_did
        )
        if not verified.ok or verified.payload is None:
            code = _first_code(verified)
            return code, _VERIFY_REPLIES.get(code, messages.GENERIC_FAILURE)

        claim = verified.payload
        recorded = self._phase.record_verification(
            meta=meta, subject=claim.subject, verified_handle=claim.claimed_handle
        )
        if not recorded.ok:
            # The marker reply still lets the history scan recover the handle.
            _LOGGER.warning(
                "Verification state not stored for %s: %s",
                claim.subject,
                ",".join(recorded.error_codes),
            )
        _LOGGER.info("Verified %s as GitHub %s", claim.subject, claim.claimed_handle)
        return OUTCOME_OK, messages.VERIFIED

    def _claim_repo(
        self,
        *,
        meta: EnvelopeMeta,
        claim: str,
        sender_did: str,
        convo_id: str,
    ) -> tuple[str, str]:
        bot_did = self._account_did()
        if bot_did is None:
            return codes.DEPENDENCY_UNAVAILABLE, messages.GENERIC_FAILURE
        phase = self._phase.resolve_verified_handle(
            meta=meta,
            subject=sender_did,
            history_loader=lambda limit: self._bluesky.list_messages(
                convo_id=convo_id, limit=limit
            ),
            bot_did=bot_did,
        )
        if not phase.ok or phase.payload is None or not phase.payload.verified_handle:
            code = _first_code(phase)
            if code == codes.PHASE_NOT_FOUND:
                return code, messages.NOT_VERIFIED
            return code, messages.GENERIC_FAILURE

        decision = self._entitlement.evaluate(
            meta=meta, verified_handle=phase.payload.verified_handle, claim=claim
        )
        if not decision.ok or decision.payload is None:
            code = _first_code(decision)
            if _first_reason(decision) == LABEL_IDENTIFIER_TOO_LONG:
                return code, messages.REPO_NAME_TOO_LONG
            return code, _ENTITLEMENT_REPLIES.get(code, messages.GENERIC_FAILURE)

        granted = decision.payload
        result = self._ledger.grant(
            meta=meta,
            subject=sender_did,
            identifier=granted.identifier,
            name=granted.label_name,
            description=granted.label_description,
        )
        if not result.ok or result.payload is None:
            code = _first_code(result)
            if code == codes.CAP_REACHED:
                return code, messages.cap_reached(max_labels=self._max_labels)
            if code == codes.IDENTIFIER_COLLISION:
                return code, messages.identifier_collision(granted.label_name)
            return code, messages.GENERIC_FAILURE

        if not result.payload.appended:
            return OUTCOME_OK, messages.already_labeled(granted.label_name)
        if granted.reason is GrantReason.OWNERSHIP:
            return OUTCOME_OK, messages.owned(granted.label_name)
        return OUTCOME_OK, messages.contributed(granted.label_name)

    def _reset(self, *, meta: EnvelopeMeta, sender_did: str) -> tuple[str, str]:
        result = self._ledger.reset_all(meta=meta, subject=sender_did)
        if not result.ok:
            return _first_code(result), messages.GENERIC_FAILURE
        return OUTCOME_OK, messages.RESET

    def _list_labels(self, *, meta: EnvelopeMeta, sender_did: str) -> tuple[str, str]:
        result = self._ledger.active_labels(meta=meta, subject=sender_did)
        if not result.ok or result.payload is None:
            return _first_code(result), messages.GENERIC_FAILURE
        return OUTCOME_OK, messages.active_labels(
            result.payload.values, max_labels=result.payload.max_labels
        )

    def _account_did(self) -> str | None:
        """Return the bot DID whose success markers the history scan trusts."""
        if self._settings.labeler_did:
            return self._settings.labeler_did
        try:
            return self._bluesky.account_did()
        except BlueskyAdapterError as exc:
            _LOGGER.warning("bot account lookup failed: %s", str(exc))
            return None

    def _conversation_id(self, member_did: str) -> str | None:
        try:
            return self._bluesky.get_conversation_id(member_did=member_did)
        except BlueskyAdapterError as exc:
            _LOGGER.warning(
                "conversation lookup failed for %s: %s", member_did, str(exc)
            )
            return None

    def _send(self, *, convo_id: str, text: str) -> bool:
        """Send one reply; failures are logged and reported, never raised."""
        try:
            self._bluesky.send_message(convo_id=convo_id, text=text)
        except BlueskyAdapterError as exc:
            _LOGGER.warning(
                "reply to conversation %s not delivered: exception_type=%s",
                convo_id,
                type(exc).__name__,
                exc_info=exc,
            )
            return False
        return True

    def _no_conversation(self, *, meta: EnvelopeMeta, member_did: str) -> Envelope[Any]:
        return failure(
            meta=meta,
            errors=[
                dependency_error(
                    "conversation lookup failed",
                    code=codes.DEPENDENCY_UNAVAILABLE,
                    metadata={"member_did": member_did},
                )
            ],
        )


def _first_code(envelope: Envelope[Any]) -> str:
    codes_seen = envelope.error_codes
    return codes_seen[0] if codes_seen else codes.INTERNAL_ERROR


def _first_reason(envelope: Envelope[Any]) -> str:
    if not envelope.errors:
        return ""
    return envelope.errors[0].metadata.get("reason", "")
