"""HTTP route exposing aggregate process health."""

from __future__ import annotations

from collections.abc import Mapping

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from packages.labeler_core.health import evaluate_core_health


def register_routes(
    *,
    router: APIRouter,
    components: Mapping[str, object],
    max_timeout_seconds: float,
) -> None:
    """Register ``GET /health`` answering 200 when ready and 503 otherwise."""

    @router.get("/health")
    def health() -> JSONResponse:
        result = evaluate_core_health(
            components=components,
            max_timeout_seconds=max_timeout_seconds,
        )
        return JSONResponse(
            status_code=200 if result.ready else 503,
            content=result.model_dump(mode="json"),
        )
