"""Request context middleware for the catalog API.

Every request carries three pieces of context that shape what it may
see: a correlation ID (``X-Request-ID``), the actor's role IDs
(``X-Role-Ids``) and the tenant site (``X-Site-Id``). They are bound to
the structlog context for the duration of the request, so every log line
of the category service can be traced back to the actor and site whose
visibility rules produced it.
"""

import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"
ROLE_IDS_HEADER = "X-Role-Ids"
SITE_ID_HEADER = "X-Site-Id"

LOG_CONTEXT_KEYS = ("request_id", "role_ids", "site_id")


def request_log_context(request: Request) -> dict[str, str | None]:
    """Collect the catalog context of a request as raw header values.

    Headers are not validated here; the API dependencies reject bad
    values. Logging them as sent keeps malformed requests traceable.

    Args:
        request: Incoming request.

    Returns:
        Request ID, role IDs and site ID.
    """
    return {
        "request_id": request.headers.get(REQUEST_ID_HEADER) or str(uuid4()),
        "role_ids": request.headers.get(ROLE_IDS_HEADER),
        "site_id": request.headers.get(SITE_ID_HEADER),
    }


# ============================================================================
# Request Context Middleware
# ============================================================================


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds request ID, roles and site to request state and log context.

    The request ID is echoed in the ``X-Request-ID`` response header.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Run the request inside its catalog log context.

        Args:
            request: Incoming request.
            call_next: Next middleware/handler.

        Returns:
            Response with request ID header.
        """
        context = request_log_context(request)
        request.state.request_id = context["request_id"]
        request.state.log_context = context

        structlog.contextvars.bind_contextvars(**context)

        start_time = time.perf_counter()
        response = None
        try:
            response = await call_next(request)
        finally:
            logger.info(
                "Catalog request completed",
                method=request.method,
                path=request.url.path,
                status_code=getattr(response, "status_code", 500),
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            structlog.contextvars.unbind_contextvars(*LOG_CONTEXT_KEYS)

        response.headers[REQUEST_ID_HEADER] = context["request_id"]
        return response


# ============================================================================
# Unhandled Error Middleware
# ============================================================================


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turns unhandled exceptions into the standard error envelope.

    The envelope names the site and roles the failing request was served
    for, alongside the request ID.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            context = getattr(request.state, "log_context", None) or request_log_context(request)

            logger.exception(
                "Unhandled exception in catalog request",
                path=request.url.path,
                method=request.method,
                error=str(e),
                **context,
            )

            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error_code": "INTERNAL_ERROR",
                    "message": "An internal error occurred",
                    "details": [],
                    "request_id": context["request_id"],
                    "site_id": context["site_id"],
                    "role_ids": context["role_ids"],
                },
            )


def setup_middleware(app: FastAPI) -> None:
    """Install both middlewares.

    The last added runs outermost, so the error envelope sits inside the
    request context and can read it from request state.
    """
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(RequestContextMiddleware)
