"""FastAPI application factory, error translation, and health reporting.

Invariants:
- The store and matcher registry are built once per app and reached only
  through ``app.state``; nothing in the request path uses a global registry.
- Error responses carry ``public_detail`` only, never internal exception text.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from zeitgeist.api.router import api_router
from zeitgeist.core.config import settings
from zeitgeist.core.errors import QuotaExceeded, ZeitgeistError
from zeitgeist.core.logging_config import configure_logging
from zeitgeist.jobs.schedule_registry import ensure_schedules
from zeitgeist.matchers.registry import MatcherRegistry, build_matcher_registry
from zeitgeist.services.quota_service import quota_exceeded_headers
from zeitgeist.services.task_queue import task_queue
from zeitgeist.store import build_store
from zeitgeist.store.base import Store

logger = logging.getLogger("zeitgeist.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Register scheduled jobs on startup and release the store on shutdown."""
    configure_logging()
    logger.info("Starting %s (store: %s)", settings.app_name, app.state.store.backend_name)
    ensure_schedules()
    yield
    logger.info("Shutting down %s", settings.app_name)
    await app.state.store.close()


async def zeitgeist_error_handler(request: Request, exc: ZeitgeistError) -> JSONResponse:
    headers = quota_exceeded_headers(exc) if isinstance(exc, QuotaExceeded) else None
    if exc.status_code >= 500:
        logger.error("%s failed with %s", request.url.path, exc.code)
    return JSONResponse(status_code=exc.status_code, content=exc.public_detail(), headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "validation_error",
            "message": first.get("msg", "Invalid request"),
            "field": field or None,
            "errors": [{"loc": list(error.get("loc", ())), "msg": error.get("msg")} for error in errors],
        },
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "internal_error", "message": "Internal server error"},
    )


def create_app(store: Store | None = None, matchers: MatcherRegistry | None = None) -> FastAPI:
    """Build the API with its own store and matcher registry."""
    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.store = store or build_store()
    app.state.matchers = matchers or build_matcher_registry(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ZeitgeistError, zeitgeist_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health", tags=["internal"])
    @app.get(f"{settings.api_prefix}/health", tags=["internal"])
    async def health(request: Request) -> dict[str, Any]:
        """Liveness plus which store backend and job runner are active."""
        return {
            "status": "ok",
            "store": request.app.state.store.backend_name,
            "queue": "online" if task_queue.enabled else "inline",
        }

    return app


app = create_app()
