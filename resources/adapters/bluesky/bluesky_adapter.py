"""Bluesky adapter implementation over XRPC HTTP endpoints."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from threading import Lock
from time import sleep
from typing import Any

import httpx

from packages.labeler_shared.http import (
    HttpClient,
    HttpClientError,
    HttpJsonDecodeError,
    HttpRequestError,
    HttpStatusError,
    with_retries,
)
from packages.labeler_shared.logging import get_logger, public_api_instrumented
from resources.adapters.bluesky.adapter import (
    LABELER_SERVICE_COLLECTION,
    LABELER_SERVICE_RKEY,
    BlueskyAdapter,
    BlueskyAdapterDependencyError,
    BlueskyAdapterError,
    BlueskyAdapterHealthResult,
    BlueskyAdapterInternalError,
    BlueskyProfile,
    ChatLogPage,
    ChatMessage,
    LabelerServiceRecord,
    LabelLocale,
    LabelValueDefinition,
    LikeNotification,
)
from resources.adapters.bluesky.component import RESOURCE_COMPONENT_ID
from resources.adapters.bluesky.config import BlueskyAdapterSettings

_LOGGER = get_logger(__name__)
_PROXY_HEADER = "atproto-proxy"
_MESSAGE_VIEW = "chat.bsky.convo.defs#messageView"
_LOG_CREATE_MESSAGE = "chat.bsky.convo.defs#logCreateMessage"


@dataclass(frozen=True)
class _Session:
    did: str
    handle: str
    access_jwt: str
    refresh_jwt: str


class HttpBlueskyAdapter(BlueskyAdapter):
    """Bluesky adapter authenticating as the bot account against its PDS.

    Chat calls are proxied through the PDS to the chat service with the
    ``atproto-proxy`` header. Access tokens are refreshed transparently when
    the PDS reports ``ExpiredToken``.
    """

    def __init__(
        self,
        *,
        settings: BlueskyAdapterSettings,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._retry_policy = settings.retry_policy()
        self._sleep: Callable[[float], None] = sleep
        self._client = HttpClient(
            base_url=settings.service_url,
            timeout_seconds=settings.timeout_seconds,
            headers={"User-Agent": "github-labeler"},
            transport=transport,
        )
        self._lock = Lock()
        self._session: _Session | None = None

    def close(self) -> None:
        """Release pooled HTTP connections."""
        self._client.close()

    @public_api_instrumented(logger=_LOGGER, component_id=RESOURCE_COMPONENT_ID)
    def health(self) -> BlueskyAdapterHealthResult:
        """Return adapter health by ensuring an authenticated session exists."""
        try:
            session = self._ensure_session()
        except (BlueskyAdapterError, HttpClientError) as exc:
            return BlueskyAdapterHealthResult(
                adapter_ready=False,
                detail=str(exc) or "bluesky session unavailable",
            )
        return BlueskyAdapterHealthResult(
            adapter_ready=True,
            detail=f"ok; did={session.did}",
        )

    def account_did(self) -> str:
        """Return the DID of the authenticated bot account."""
        try:
            return self._ensure_session().did
        except HttpClientError as exc:
            raise BlueskyAdapterDependencyError(
                str(exc) or "bluesky login unavailable"
            ) from None

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=RESOURCE_COMPONENT_ID,
        id_fields=("actor",),
    )
    def get_profile(self, *, actor: str) -> BlueskyProfile:
        """Resolve one handle or DID to a profile."""
        payload = self._xrpc(
            "GET", "app.bsky.actor.getProfile", params={"actor": actor.strip()}
        )
        did = _str_field(payload, "did")
        if did == "":
            raise BlueskyAdapterInternalError("bluesky profile response missing did")
        return BlueskyProfile(
            did=did,
            handle=_str_field(payload, "handle"),
            display_name=_str_field(payload, "displayName"),
        )

    @public_api_instrumented(logger=_LOGGER, component_id=RESOURCE_COMPONENT_ID)
    def get_labeler_service(self) -> LabelerServiceRecord:
        """Read the labeler service record holding label definitions."""
        payload = self._xrpc(
            "GET",
            "com.atproto.repo.getRecord",
            params={
                "repo": self.account_did(),
                "collection": LABELER_SERVICE_COLLECTION,
                "rkey": LABELER_SERVICE_RKEY,
            },
            missing_ok=True,
        )
        if payload is None:
            return LabelerServiceRecord(
                cid=None,
                raw={
                    "$type": LABELER_SERVICE_COLLECTION,
                    "policies": {"labelValues": []},
                    "createdAt": _now_iso(),
                },
            )
        value = payload.get("value")
        if not isinstance(value, dict):
            raise BlueskyAdapterInternalError("labeler service record has no value")
        policies = value.get("policies")
        policies = policies if isinstance(policies, dict) else {}
        raw_values = policies.get("labelValues")
        raw_definitions = policies.get("labelValueDefinitions")
        return LabelerServiceRecord(
            cid=_str_field(payload, "cid") or None,
            label_values=tuple(
                str(item) for item in raw_values or () if isinstance(item, str)
            ),
            definitions=tuple(
                definition
                for definition in (
                    _definition_from_json(item) for item in raw_definitions or ()
                )
                if definition is not None
            ),
            raw=value,
        )

    @public_api_instrumented(logger=_LOGGER, component_id=RESOURCE_COMPONENT_ID)
    def put_labeler_service(
        self,
        *,
        record: LabelerServiceRecord,
        definitions: tuple[LabelValueDefinition, ...],
    ) -> LabelerServiceRecord:
        """Write ``definitions`` into the labeler service record.

        The write is guarded with ``swapRecord`` so a concurrent edit of the
        record fails instead of being overwritten.
        """
        label_values = list(record.label_values)
        for definition in definitions:
            if definition.identifier not in label_values:
                label_values.append(definition.identifier)

        value = dict(record.raw)
        value.setdefault("$type", LABELER_SERVICE_COLLECTION)
        value.setdefault("createdAt", _now_iso())
        policies = dict(value.get("policies") or {})
        policies["labelValues"] = label_values
        policies["labelValueDefinitions"] = [
            _definition_to_json(item) for item in definitions
        ]
        value["policies"] = policies

        body: dict[str, Any] = {
            "repo": self.account_did(),
            "collection": LABELER_SERVICE_COLLECTION,
            "rkey": LABELER_SERVICE_RKEY,
            "record": value,
        }
        if record.cid is not None:
            body["swapRecord"] = record.cid
        payload = self._xrpc("POST", "com.atproto.repo.putRecord", body=body)
        return LabelerServiceRecord(
            cid=_str_field(payload, "cid") or None,
            label_values=tuple(label_values),
            definitions=definitions,
            raw=value,
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=RESOURCE_COMPONENT_ID,
        id_fields=("member_did",),
    )
    def get_conversation_id(self, *, member_did: str) -> str:
        """Return the direct conversation id shared with ``member_did``."""
        payload = self._xrpc(
            "GET",
            "chat.bsky.convo.getConvoForMembers",
            params={"members": [member_did]},
            chat=True,
        )
        convo = payload.get("convo")
        convo_id = _str_field(convo, "id") if isinstance(convo, dict) else ""
        if convo_id == "":
            raise BlueskyAdapterInternalError("conversation response missing id")
        return convo_id

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=RESOURCE_COMPONENT_ID,
        id_fields=("convo_id",),
    )
    def list_messages(self, *, convo_id: str, limit: int) -> list[ChatMessage]:
        """Return up to ``limit`` messages of one conversation, newest first."""
        payload = self._xrpc(
            "GET",
            "chat.bsky.convo.getMessages",
            params={"convoId": convo_id, "limit": str(limit)},
            chat=True,
        )
        messages: list[ChatMessage] = []
        for item in payload.get("messages") or ():
            message = _message_from_json(item, convo_id=convo_id)
            if message is not None:
                messages.append(message)
        return messages

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=RESOURCE_COMPONENT_ID,
        id_fields=("convo_id",),
    )
    def send_message(self, *, convo_id: str, text: str) -> ChatMessage:
        """Send one text message to a conversation."""
        if text.strip() == "":
            raise BlueskyAdapterInternalError("message text must be non-empty")
        payload = self._xrpc(
            "POST",
            "chat.bsky.convo.sendMessage",
            body={"convoId": convo_id, "message": {"text": text}},
            chat=True,
            retry=False,
        )
        message = _message_from_json(payload, convo_id=convo_id)
        if message is None:
            raise BlueskyAdapterInternalError("send message response is not a message")
        return message

    def get_chat_log(self, *, cursor: str | None) -> ChatLogPage:
        """Return messages created since ``cursor``.

        Called on every poll, so it is not instrumented to keep idle loops
        quiet in the logs.
        """
        params = {"cursor": cursor} if cursor else None
        payload = self._xrpc(
            "GET", "chat.bsky.convo.getLog", params=params, chat=True
        )
        messages: list[ChatMessage] = []
        for entry in payload.get("logs") or ():
            if not isinstance(entry, dict) or entry.get("$type") != _LOG_CREATE_MESSAGE:
                continue
            message = _message_from_json(
                entry.get("message"),
                convo_id=_str_field(entry, "convoId"),
            )
            if message is not None:
                messages.append(message)
        next_cursor = payload.get("cursor")
        return ChatLogPage(
            cursor=next_cursor if isinstance(next_cursor, str) else cursor,
            messages=tuple(messages),
        )

    def list_like_notifications(self, *, limit: int) -> list[LikeNotification]:
        """Return recent ``like`` notifications, newest first."""
        payload = self._xrpc(
            "GET",
            "app.bsky.notification.listNotifications",
            params={"limit": str(limit), "reasons": ["like"]},
        )
        notifications: list[LikeNotification] = []
        for item in payload.get("notifications") or ():
            if not isinstance(item, dict) or item.get("reason") != "like":
                continue
            author = item.get("author")
            author_did = _str_field(author, "did") if isinstance(author, dict) else ""
            if author_did == "":
                continue
            notifications.append(
                LikeNotification(
                    author_did=author_did,
                    subject_uri=_str_field(item, "reasonSubject"),
                    indexed_at=_str_field(item, "indexedAt"),
                )
            )
        return notifications

    def _xrpc(
        self,
        method: str,
        nsid: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: Mapping[str, Any] | None = None,
        chat: bool = False,
        missing_ok: bool = False,
        retry: bool = True,
    ) -> Any:
        """Issue one authenticated XRPC call with typed failures.

        Retries apply only when ``retry`` is set; sends pass ``False`` so a
        slow or failed response never delivers the same message twice.
        """

        def call() -> Any:
            session = self._ensure_session()
            try:
                return self._authorized(method, nsid, session, params, body, chat)
            except HttpStatusError as exc:
                if not _is_expired_token(exc):
                    raise
            refreshed = self._refresh_session(session)
            return self._authorized(method, nsid, refreshed, params, body, chat)

        try:
            if retry:
                payload = with_retries(
                    call, policy=self._retry_policy, sleep_fn=self._sleep
                )
            else:
                payload = call()
        except HttpStatusError as exc:
            if missing_ok and _is_record_not_found(exc):
                return None
            raise BlueskyAdapterDependencyError(
                f"bluesky {nsid} failed with status {exc.status_code}"
            ) from None
        except HttpRequestError as exc:
            raise BlueskyAdapterDependencyError(
                str(exc) or f"bluesky {nsid} unavailable"
            ) from None
        except HttpJsonDecodeError as exc:
            raise BlueskyAdapterInternalError(
                f"bluesky {nsid} response JSON invalid: {exc}"
            ) from None
        if not isinstance(payload, dict):
            raise BlueskyAdapterInternalError(
                f"bluesky {nsid} response must be a JSON object"
            )
        return payload

    def _authorized(
        self,
        method: str,
        nsid: str,
        session: _Session,
        params: Mapping[str, Any] | None,
        body: Mapping[str, Any] | None,
        chat: bool,
    ) -> Any:
        headers = {"Authorization": f"Bearer {session.access_jwt}"}
        if chat:
            headers[_PROXY_HEADER] = self._settings.chat_service_did
        return self._client.request_json(
            method,
            f"/xrpc/{nsid}",
            params=params,
            json=body,
            headers=headers,
        )

    def _ensure_session(self) -> _Session:
        """Return the current session, logging in on first use."""
        with self._lock:
            if self._session is None:
                self._session = self._create_session()
            return self._session

    def _create_session(self) -> _Session:
        if self._settings.identifier == "" or self._settings.password == "":
            raise BlueskyAdapterInternalError(
                "bluesky identifier and password must be configured"
            )
        payload = self._client.post_json(
            "/xrpc/com.atproto.server.createSession",
            json={
                "identifier": self._settings.identifier,
                "password": self._settings.password,
            },
        )
        session = _session_from_json(payload)
        _LOGGER.info("Bluesky session created for %s", session.did)
        return session

    def _refresh_session(self, stale: _Session) -> _Session:
        """Refresh tokens once, falling back to a fresh login."""
        with self._lock:
            if self._session is not None and self._session != stale:
                return self._session
            try:
                payload = self._client.post_json(
                    "/xrpc/com.atproto.server.refreshSession",
                    json=None,
                    headers={"Authorization": f"Bearer {stale.refresh_jwt}"},
                )
                self._session = _session_from_json(payload)
            except HttpStatusError:
                _LOGGER.info("Bluesky refresh token rejected; logging in again")
                self._session = self._create_session()
            return self._session


def _session_from_json(payload: object) -> _Session:
    if not isinstance(payload, dict):
        raise BlueskyAdapterInternalError("session response must be a JSON object")
    session = _Session(
        did=_str_field(payload, "did"),
        handle=_str_field(payload, "handle"),
        access_jwt=_str_field(payload, "accessJwt"),
        refresh_jwt=_str_field(payload, "refreshJwt"),
    )
    if session.did == "" or session.access_jwt == "":
        raise BlueskyAdapterInternalError("session response missing did or token")
    return session


def _message_from_json(item: object, *, convo_id: str) -> ChatMessage | None:
    """Map one message view; deleted or non-text messages map to ``None``."""
    if not isinstance(item, dict):
        return None
    if item.get("$type", _MESSAGE_VIEW) != _MESSAGE_VIEW:
        return None
    sender = item.get("sender")
    sender_did = _str_field(sender, "did") if isinstance(sender, dict) else ""
    message_id = _str_field(item, "id")
    if message_id == "" or sender_did == "":
        return None
    return ChatMessage(
        id=message_id,
        convo_id=convo_id,
        sender_did=sender_did,
        text=_str_field(item, "text"),
        sent_at=_str_field(item, "sentAt"),
    )


def _definition_from_json(item: object) -> LabelValueDefinition | None:
    if not isinstance(item, dict):
        return None
    identifier = _str_field(item, "identifier")
    if identifier == "":
        return None
    locales = tuple(
        LabelLocale(
            lang=_str_field(locale, "lang") or "en",
            name=_str_field(locale, "name"),
            description=_str_field(locale, "description"),
        )
        for locale in item.get("locales") or ()
        if isinstance(locale, dict)
    )
    return LabelValueDefinition(
        identifier=identifier,
        severity=_str_field(item, "severity") or "inform",
        blurs=_str_field(item, "blurs") or "none",
        default_setting=_str_field(item, "defaultSetting") or "warn",
        adult_only=bool(item.get("adultOnly", False)),
        locales=locales,
    )


def _definition_to_json(definition: LabelValueDefinition) -> dict[str, Any]:
    return {
        "identifier": definition.identifier,
        "severity": definition.severity,
        "blurs": definition.blurs,
        "defaultSetting": definition.default_setting,
        "adultOnly": definition.adult_only,
        "locales": [
            {
                "lang": locale.lang,
                "name": locale.name,
                "description": locale.description,
            }
            for locale in definition.locales
        ],
    }


def _is_expired_token(exc: HttpStatusError) -> bool:
    return exc.status_code in (400, 401) and "ExpiredToken" in exc.response_body


def _is_record_not_found(exc: HttpStatusError) -> bool:
    return exc.status_code == 400 and "RecordNotFound" in exc.response_body


def _str_field(payload: object, name: str) -> str:
    if not isinstance(payload, dict):
        return ""
    value = payload.get(name)
    return value if isinstance(value, str) else ""


def _now_iso() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")
