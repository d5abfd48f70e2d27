"""Aggregate health evaluation across the wired components."""

from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError

from pydantic import BaseModel, ConfigDict, Field

from packages.labeler_shared.envelope import EnvelopeKind, new_meta


class ComponentHealthResult(BaseModel):
    """One component-level readiness result."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ready: bool
    detail: str = ""


class CoreHealthResult(BaseModel):
    """Aggregate readiness across components."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ready: bool
    components: dict[str, ComponentHealthResult] = Field(default_factory=dict)


def evaluate_core_health(
    *,
    components: Mapping[str, object],
    max_timeout_seconds: float,
) -> CoreHealthResult:
    """Evaluate every component's ``health()`` under one timeout each."""
    results = {
        component_id: _evaluate_component_health(
            component=component,
            max_timeout_seconds=max_timeout_seconds,
        )
        for component_id, component in components.items()
    }
    return CoreHealthResult(
        ready=all(item.ready for item in results.values()),
        components=results,
    )


def _evaluate_component_health(
    *,
    component: object,
    max_timeout_seconds: float,
) -> ComponentHealthResult:
    """Evaluate one component health with timeout enforcement."""
    health_fn = getattr(component, "health", None)
    if not callable(health_fn):
        return ComponentHealthResult(
            ready=False,
            detail="component does not expose health()",
        )

    call: Callable[[], object]
    if _health_accepts_meta(health_fn):
        meta = new_meta(
            kind=EnvelopeKind.RESULT,
            source="core_health",
            principal="system",
        )

        def _call_with_meta() -> object:
            return health_fn(meta=meta)

        call = _call_with_meta
    else:
        call = health_fn

    executor = ThreadPoolExecutor(max_workers=1)
    try:
        future = executor.submit(call)
        result = future.result(timeout=max_timeout_seconds)
    except FutureTimeoutError:
        return ComponentHealthResult(
            ready=False,
            detail=f"health() exceeded max timeout ({max_timeout_seconds:.3f}s)",
        )
    except Exception as exc:  # noqa: BLE001
        return ComponentHealthResult(
            ready=False,
            detail=f"health() raised {type(exc).__name__}",
        )
    finally:
        executor.shutdown(wait=False)

    ready, detail = _coerce_health_result(result)
    return ComponentHealthResult(ready=ready, detail=detail or "ok")


def _health_accepts_meta(health_fn: Callable[..., object]) -> bool:
    """Return True when callable health function accepts ``meta``."""
    try:
        signature = inspect.signature(health_fn)
    except (TypeError, ValueError):
        return False
    parameters = signature.parameters
    if "meta" in parameters:
        return True
    return any(
        parameter.kind == inspect.Parameter.VAR_KEYWORD
        for parameter in parameters.values()
    )


def _coerce_health_result(result: object) -> tuple[bool, str]:
    """Normalize envelope, model, dict, and bool health results."""
    if isinstance(result, bool):
        return result, "ok" if result else "not ready"

    if hasattr(result, "ok") and hasattr(result, "errors"):
        if not bool(getattr(result, "ok", False)):
            errors = getattr(result, "errors", ())
            message = getattr(errors[0], "message", "") if errors else ""
            return False, message if isinstance(message, str) else ""
        result = getattr(result, "payload", None)
        if result is None:
            return True, "ok"

    if hasattr(result, "model_dump"):
        values = result.model_dump(mode="python")
    elif isinstance(result, dict):
        values = result
    else:
        return False, "health() returned unsupported result"

    detail_value = values.get("detail")
    detail = detail_value if isinstance(detail_value, str) else ""
    ready_value = values.get("ready")
    if isinstance(ready_value, bool):
        return ready_value, detail

    ready_fields = [
        value
        for key, value in values.items()
        if key.endswith("_ready") and isinstance(value, bool)
    ]
    if len(ready_fields) > 0:
        return all(ready_fields), detail

    return False, "health() result missing readiness fields"
