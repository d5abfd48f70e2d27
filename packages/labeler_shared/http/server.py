"""Minimal FastAPI and uvicorn helpers for the process health endpoint."""

from __future__ import annotations

import threading

import uvicorn
from fastapi import FastAPI


def create_app(*, title: str = "github-labeler", version: str = "0.0.0") -> FastAPI:
    """Create a FastAPI app with project defaults."""
    return FastAPI(title=title, version=version)


def start_app_thread(
    app: FastAPI,
    *,
    host: str = "127.0.0.1",
    port: int = 8000,
    log_level: str = "warning",
) -> tuple[uvicorn.Server, threading.Thread]:
    """Run one FastAPI app through uvicorn on a daemon thread.

    Set ``server.should_exit = True`` and join the thread to stop it.
    """
    server = uvicorn.Server(
        uvicorn.Config(app, host=host, port=port, log_level=log_level)
    )
    thread = threading.Thread(target=server.run, name="health-http", daemon=True)
    thread.start()
    return server, thread
