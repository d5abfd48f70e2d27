"""Tests for process wiring in the core entrypoint."""

from __future__ import annotations

from pathlib import Path

from packages.labeler_core.main import _start_health_server, build_runtime
from packages.labeler_shared.config import LabelerSettings


def _settings(tmp_path: Path, *, health_enabled: bool = False) -> LabelerSettings:
    return LabelerSettings(
        core={"health": {"enabled": health_enabled}},
        components={
            "substrate": {
                "postgres": {"url": f"sqlite:///{tmp_path / 'labeler.db'}"}
            },
            "service": {"label_ledger": {"source_did": "did:plc:labeler"}},
        },
    )


def test_build_runtime_wires_health_components(tmp_path: Path) -> None:
    """The runtime should expose the adapter and both state services."""
    runtime = build_runtime(_settings(tmp_path))
    try:
        components = runtime.health_components()
    finally:
        runtime.close()

    assert set(components) == {
        "adapter_bluesky",
        "service_label_ledger",
        "service_conversation_phase",
    }
    assert components["adapter_bluesky"] is runtime.bluesky
    assert runtime.runner.stopped is False


def test_health_server_is_skipped_when_disabled(tmp_path: Path) -> None:
    """No server thread starts when ``core.health.enabled`` is false."""
    settings = _settings(tmp_path)
    runtime = build_runtime(settings)
    try:
        assert _start_health_server(settings=settings, runtime=runtime) is None
    finally:
        runtime.close()
