# brokerdesk/main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .config import settings
from .db import init_db
from .errors import BrokerDeskError, InternalError
from .logging_config import configure_logging
from .middleware.structured_logging import StructuredLoggingMiddleware

from .routers.health import router as health_router
from .routers.auth import router as auth_router
from .routers.uploads import files_router as upload_files_router
from .routers.uploads import router as uploads_router
from .routers.clients import router as clients_router
from .routers.properties import router as properties_router
from .routers.appointments import router as appointments_router
from .routers.dashboards import router as dashboards_router

API_PREFIX = "/api"

log = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    val = getattr(settings, "cors_allow_origins", ["*"])
    if isinstance(val, str):
        v = val.strip()
        return ["*"] if v == "*" else [x.strip() for x in v.split(",") if x.strip()]
    if isinstance(val, list) and val:
        return val
    return ["*"]


def _validation_message(errors: list[dict[str, Any]]) -> str:
    if not errors:
        return "invalid request"
    first = errors[0]
    loc = [str(x) for x in first.get("loc", ()) if x not in ("body", "query", "path", "header")]
    field = ".".join(loc) or "body"
    if first.get("type") == "missing":
        return f"{field} is required"
    return f"{field}: {first.get('msg', 'invalid value')}"


async def _domain_error_handler(request: Request, exc: BrokerDeskError) -> JSONResponse:
    if isinstance(exc, InternalError):
        log.warning("internal error: %s", exc.message, extra={"path": request.url.path})
        message = "internal server error"
    else:
        message = exc.message
    return JSONResponse(status_code=exc.status_code, content={"detail": message, "error": exc.code})


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"detail": _validation_message(list(exc.errors())), "error": "validation_error"},
    )


async def _storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    log.exception("unhandled storage error", extra={"path": request.url.path})
    return JSONResponse(status_code=500, content={"detail": "internal server error", "error": "internal_error"})


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="BrokerDesk Backend",
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(StructuredLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BrokerDeskError, _domain_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, _storage_error_handler)

    app.include_router(health_router)
    app.include_router(upload_files_router)
    app.include_router(auth_router, prefix=API_PREFIX)
    app.include_router(uploads_router, prefix=API_PREFIX)
    app.include_router(clients_router, prefix=API_PREFIX)
    app.include_router(properties_router, prefix=API_PREFIX)
    app.include_router(appointments_router, prefix=API_PREFIX)
    app.include_router(dashboards_router, prefix=API_PREFIX)

    return app


app = create_app()
