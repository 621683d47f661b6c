from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.domain.exceptions import CallableError

logger = logging.getLogger("app.callable_errors")


def register_exception_handlers(app: FastAPI) -> None:
    """Register application exception handlers."""

    @app.exception_handler(CallableError)
    async def handle_callable_error(request: Request, exc: CallableError) -> JSONResponse:
        # Metadata only: never log payloads or upstream bodies.
        request_id = getattr(request.state, "request_id", None) or request.headers.get(
            "X-Request-ID"
        )
        logger.info(
            "Callable error returned",
            extra={
                "request_id": request_id,
                "http_method": request.method,
                "request_path": request.url.path,  # no query string
                "status_code": exc.http_status,
                "error": exc.status,
            },
        )
        body: dict[str, object] = {"status": exc.status, "message": exc.message}
        if exc.details is not None:
            body["details"] = exc.details
        return JSONResponse(status_code=exc.http_status, content={"error": body})
