from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.exception_handlers import register_exception_handlers
from app.api.schemas import HealthOut
from app.core.db import close_db, init_db
from app.core.logging import setup_logging
from app.core.metrics import PrometheusMetricsMiddleware, metrics_router
from app.core.middleware.http_logging import HttpLoggingMiddleware
from app.core.settings import get_settings
from app.forms.router import public_router
from app.forms.router import router as form_fills_router

setup_logging()


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Settings are read at startup so importing the app does not require DATABASE_URL.
        settings = get_settings()
        init_db(app=app, database_url=str(settings.database_url))
        yield
        await close_db(app=app)

    app = FastAPI(
        title="Benefit Form Filler API",
        description=(
            "Fills government benefit forms with an LLM and publishes the result.\n\n"
            "- Each request loads a benefit document, asks the LLM to fill it with the "
            "contact's details, stores the text file and returns a public download link.\n"
            "- Batches are processed in order; the first failure aborts the batch.\n"
            "- Logs and metrics carry identifiers and metadata only, never prompts or "
            "generated text."
        ),
        lifespan=lifespan,
        openapi_tags=[
            {
                "name": "health",
                "description": "Basic uptime check for load balancers and monitoring.",
            },
            {
                "name": "form-fills",
                "description": "Fill benefit forms and get public download links.",
            },
            {
                "name": "public-files",
                "description": "Unauthenticated downloads of generated forms.",
            },
            {
                "name": "metrics",
                "description": "Prometheus-compatible metrics endpoint.",
            },
        ],
    )

    app.add_middleware(PrometheusMetricsMiddleware)
    app.add_middleware(HttpLoggingMiddleware)

    register_exception_handlers(app)

    @app.get(
        "/health",
        response_model=HealthOut,
        tags=["health"],
        summary="Health check",
        description=(
            "Verifies the API process is running. Does not check the database or the LLM "
            "service."
        ),
    )
    async def health() -> HealthOut:
        return HealthOut(status="ok")

    app.include_router(metrics_router)
    app.include_router(form_fills_router)
    app.include_router(public_router)
    return app


app = create_app()
