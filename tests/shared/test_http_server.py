"""Unit tests for shared FastAPI/uvicorn server helpers."""

from __future__ import annotations

from fastapi.testclient import TestClient

from packages.labeler_shared.http.server import create_app


def test_create_app_returns_fastapi_app() -> None:
    """create_app should return a FastAPI instance with configured metadata."""
    app = create_app(title="labeler-test", version="1.2.3")

    assert app.title == "labeler-test"
    assert app.version == "1.2.3"


def test_create_app_serves_registered_routes() -> None:
    """Routes added to the app should be reachable through the test client."""
    app = create_app()

    @app.get("/ping")
    def ping() -> dict[str, bool]:
        return {"ok": True}

    response = TestClient(app).get("/ping")

    assert response.status_code == 200
    assert response.json() == {"ok": True}
