"""FastAPI entry-point exposing orchestrator controls."""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from agentverse.api.departments import router as departments_router
from agentverse.api.messages import router as messages_router
from agentverse.api.routes import router as agents_router
from agentverse.config import Config
from agentverse.core.errors import AgentNotFoundError
from agentverse.core.logging_config import setup_logging
from agentverse.runtime import Runtime, build_runtime


def create_app(runtime: Optional[Runtime] = None) -> FastAPI:
    """Build the API; pass ``runtime`` to supply preconfigured services."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        config = runtime.config if runtime is not None else Config.from_env()
        setup_logging(config.log_level)
        app.state.runtime = runtime if runtime is not None else build_runtime(config)
        yield
        app.state.runtime.orchestrator.clear()

    app = FastAPI(title="AgentVerse Orchestrator", lifespan=lifespan)
    app.include_router(agents_router)
    app.include_router(messages_router)
    app.include_router(departments_router)

    @app.exception_handler(AgentNotFoundError)
    async def agent_not_found(request: Request, exc: AgentNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
