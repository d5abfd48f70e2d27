"""Process entrypoint: load settings, migrate, wire components, and poll."""

from __future__ import annotations

import signal
import threading
from dataclasses import dataclass

import uvicorn
from fastapi import APIRouter

from packages.labeler_core.health_api import register_routes
from packages.labeler_core.migrations import run_startup_migrations
from packages.labeler_shared.config import LabelerSettings, load_settings
from packages.labeler_shared.http.server import create_app, start_app_thread
from packages.labeler_shared.logging import configure_logging, get_logger
from resources.adapters.bluesky import (
    HttpBlueskyAdapter,
    RESOURCE_COMPONENT_ID as BLUESKY_COMPONENT_ID,
    resolve_bluesky_adapter_settings,
)
from resources.adapters.github import (
    HttpGithubAdapter,
    resolve_github_adapter_settings,
)
from services.action.entitlement.service import build_entitlement_service
from services.action.identity_verification.service import (
    build_identity_verification_service,
)
from services.action.labeler_bot.config import resolve_labeler_bot_settings
from services.action.labeler_bot.runner import LabelerBotRunner
from services.action.labeler_bot.service import build_labeler_bot_service
from services.state.conversation_phase.component import (
    SERVICE_COMPONENT_ID as PHASE_COMPONENT_ID,
)
from services.state.conversation_phase.service import (
    ConversationPhaseService,
    build_conversation_phase_service,
)
from services.state.label_ledger.component import (
    SERVICE_COMPONENT_ID as LEDGER_COMPONENT_ID,
)
from services.state.label_ledger.service import (
    LabelLedgerService,
    build_label_ledger_service,
)

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class LabelerRuntime:
    """Every long-lived object the process owns."""

    github: HttpGithubAdapter
    bluesky: HttpBlueskyAdapter
    ledger: LabelLedgerService
    phase: ConversationPhaseService
    runner: LabelerBotRunner

    def health_components(self) -> dict[str, object]:
        return {
            BLUESKY_COMPONENT_ID: self.bluesky,
            LEDGER_COMPONENT_ID: self.ledger,
            PHASE_COMPONENT_ID: self.phase,
        }

    def close(self) -> None:
        self.github.close()
        self.bluesky.close()


def build_runtime(settings: LabelerSettings) -> LabelerRuntime:
    """Construct adapters and services leaves first."""
    github = HttpGithubAdapter(settings=resolve_github_adapter_settings(settings))
    bluesky = HttpBlueskyAdapter(settings=resolve_bluesky_adapter_settings(settings))
    ledger = build_label_ledger_service(settings=settings, bluesky=bluesky)
    phase = build_conversation_phase_service(settings=settings)
    bot = build_labeler_bot_service(
        settings=settings,
        bluesky=bluesky,
        identity=build_identity_verification_service(
            settings=settings, github=github, bluesky=bluesky
        ),
        phase=phase,
        entitlement=build_entitlement_service(github=github),
        ledger=ledger,
    )
    runner = LabelerBotRunner(
        settings=resolve_labeler_bot_settings(settings),
        bluesky=bluesky,
        bot=bot,
    )
    return LabelerRuntime(
        github=github,
        bluesky=bluesky,
        ledger=ledger,
        phase=phase,
        runner=runner,
    )


def _start_health_server(
    *, settings: LabelerSettings, runtime: LabelerRuntime
) -> tuple[uvicorn.Server, threading.Thread] | None:
    health = settings.core.health
    if not health.enabled:
        return None
    app = create_app(title="GitHub Labeler")
    router = APIRouter()
    register_routes(
        router=router,
        components=runtime.health_components(),
        max_timeout_seconds=health.max_timeout_seconds,
    )
    app.include_router(router)
    server, thread = start_app_thread(app, host=health.host, port=health.port)
    _LOGGER.info("health endpoint listening on %s:%d", health.host, health.port)
    return server, thread


def main() -> None:
    """Run the labeler until SIGINT or SIGTERM."""
    settings = load_settings()
    configure_logging(
        level=settings.logging.level,
        json_output=settings.logging.json_output,
        service=settings.logging.service,
        environment=settings.logging.environment,
    )

    if settings.core.run_migrations_on_startup:
        run_startup_migrations(settings=settings)

    runtime = build_runtime(settings)
    health_server = _start_health_server(settings=settings, runtime=runtime)

    def _handle_shutdown(_signum: int, _frame: object) -> None:
        runtime.runner.stop()

    signal.signal(signal.SIGINT, _handle_shutdown)
    signal.signal(signal.SIGTERM, _handle_shutdown)
    try:
        runtime.runner.run()
    finally:
        if health_server is not None:
            server, thread = health_server
            server.should_exit = True
            thread.join(timeout=5.0)
        runtime.close()
        _LOGGER.info("labeler stopped")


if __name__ == "__main__":
    main()
