"""FastAPI application entrypoint for grepbase."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from grepbase.api.middleware.logging import LoggingMiddleware
from grepbase.api.routes import documents
from grepbase.core.config import Settings, settings as default_settings
from grepbase.core.exceptions import GrepbaseError
from grepbase.core.observability import setup_tracing
from grepbase.processing import LoggingHooks
from grepbase.service import Grepbase
from grepbase.tag_schema import initialize_tag_schema, load_tag_schema
from grepbase.utils.llm import LLMClient

logger = logging.getLogger(__name__)


async def build_grepbase(config: Settings) -> Grepbase:
    """Resolve the tag schema and open the store described by the settings."""

    model = LLMClient(config)
    supplied = None
    if config.TAG_SCHEMA_PATH is not None:
        supplied = await asyncio.to_thread(load_tag_schema, config.TAG_SCHEMA_PATH)
    tag_schema = await initialize_tag_schema(
        config.BASE_DIR,
        model,
        config.TOPIC,
        supplied,
        override=config.TAG_SCHEMA_OVERRIDE,
    )
    return await Grepbase.create(
        config.BASE_DIR,
        config.TOPIC,
        model,
        tag_schema,
        workers=config.WORKERS,
        custom_processing_prompts=config.CUSTOM_PROCESSING_PROMPTS,
        hooks=[LoggingHooks()],
        idle_sleep=config.IDLE_SLEEP_SECONDS,
    )


def create_app(grepbase: Optional[Grepbase] = None, config: Optional[Settings] = None) -> FastAPI:
    config = config or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Open the store and run the enrichment workers for the app's lifetime."""

        if getattr(app.state, "grepbase", None) is None:
            app.state.grepbase = await build_grepbase(config)
        await app.state.grepbase.start()

        try:
            yield
        finally:
            await app.state.grepbase.stop()

    app = FastAPI(
        title=config.API_TITLE,
        version=config.API_VERSION,
        debug=config.DEBUG,
        lifespan=lifespan,
    )
    app.state.grepbase = grepbase

    setup_tracing(app)

    app.add_middleware(LoggingMiddleware)
    app.include_router(documents.router, prefix="/api")
    if config.ENABLE_METRICS_ENDPOINT:
        app.mount("/metrics", make_asgi_app())

    @app.exception_handler(GrepbaseError)
    async def handle_grepbase_error(_: Request, exc: GrepbaseError):
        """Return standardized responses for application layer exceptions."""

        return JSONResponse(status_code=500, content={"detail": exc.message, "code": exc.error_code})

    return app
