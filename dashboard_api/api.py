"""FastAPI application exposing dashboard metrics."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .builder import API_NAME, API_VERSION, ResponseBuilder, SamplerError
from .config import Settings, get_settings
from .metrics import create_source
from .state import DashboardState


def create_builder(settings: Settings) -> ResponseBuilder:
    source = create_source(settings.metric_source, disk_path=settings.disk_path)
    return ResponseBuilder(source, DashboardState(), log_lines=settings.log_lines)


def create_app(settings: Optional[Settings] = None, builder: Optional[ResponseBuilder] = None) -> FastAPI:
    settings = settings or get_settings()
    builder = builder or create_builder(settings)

    app = FastAPI(
        title=API_NAME,
        description="Host metrics for the dashboard front-end.",
        version=API_VERSION,
    )
    app.state.builder = builder
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(SamplerError)
    async def sampler_error_handler(request: Request, exc: SamplerError):
        logging.warning("Request %s failed: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"error": str(exc)})

    @app.get("/", summary="API index", tags=["meta"])
    def index():
        return builder.index()

    @app.get("/health", summary="Service health check", tags=["meta"])
    def health():
        return builder.health()

    @app.get("/api/status", summary="CPU, memory, disk and uptime", tags=["metrics"])
    def status():
        return builder.status()

    @app.get("/api/network", summary="Current network throughput", tags=["metrics"])
    def network():
        return builder.network()

    @app.get("/api/network/history", summary="Recent network throughput samples", tags=["metrics"])
    def network_history():
        return builder.network_history()

    @app.get("/api/http", summary="Cumulative HTTP status counters", tags=["metrics"])
    def http():
        return builder.http()

    @app.get("/api/connections", summary="Active connections and top processes", tags=["metrics"])
    def connections():
        return builder.connections()

    @app.get("/api/processes", summary="Top processes by CPU", tags=["metrics"])
    def processes():
        return builder.processes()

    @app.get("/api/logs", summary="Recent log lines", tags=["metrics"])
    def logs():
        return builder.logs()

    @app.get("/api/custom", summary="Custom dashboard widgets", tags=["metrics"])
    def custom():
        return builder.custom()

    return app


app = create_app()
