"""FastAPI application for the Hi Tek project dashboard."""

from __future__ import annotations

from contextlib import asynccontextmanager
from uuid import uuid4

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from hitek.core.logging import configure_logging
from hitek.web.dependencies import close_sheet_client
from hitek.web.routes import auth, dashboard, health, projects

configure_logging()
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_sheet_client()


app = FastAPI(
    title="Hi Tek Project Dashboard",
    description="Project, workflow, material and expense tracking for Hi Tek",
    version="1.0.0",
    lifespan=lifespan,
)


# Request Logging Middleware
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        structlog.contextvars.clear_contextvars()

        request_id = request.headers.get("X-Request-ID", str(uuid4()))
        structlog.contextvars.bind_contextvars(request_id=request_id)

        logger.info(
            "request_started",
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error("request_failed", error=str(exc))
            raise

        logger.info("request_completed", status_code=response.status_code)
        response.headers["X-Request-ID"] = request_id
        return response


app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Turn 3xx HTTP exceptions into redirects, everything else into JSON."""
    if (
        exc.status_code in [301, 302, 303, 307, 308]
        and exc.headers
        and "Location" in exc.headers
    ):
        return RedirectResponse(
            url=exc.headers["Location"], status_code=exc.status_code
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )


app.include_router(health.router)
app.include_router(auth.router)
app.include_router(projects.router)
app.include_router(dashboard.router)
