"""
Middleware and error handlers for the LegalSwami API.

This module contains HTTP middleware for logging and request tracking,
as well as custom exception handlers for service-specific errors.
"""

import time
import uuid

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from legalswami.exceptions import (
    AllModelsFailedError,
    ChatNotFoundError,
    LegalSwamiException,
    ModelNotFoundError,
    ServiceUnavailableError,
)

UNAVAILABLE_MESSAGE = "The legal assistant is temporarily unavailable. Please try again in a few moments."


async def logging_middleware(request: Request, call_next):
    """
    HTTP middleware that logs all requests and responses with timing information.

    Reuses the caller's X-Request-ID when present, otherwise assigns a new one,
    binds it to the logging context and echoes it in the response headers.

    Args:
        request: The incoming HTTP request
        call_next: Function to call the next middleware/endpoint

    Returns:
        Response from the endpoint with X-Request-ID header
    """
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id)

    start_time = time.time()
    try:
        response = await call_next(request)
        process_time = time.time() - start_time

        response.headers["X-Request-ID"] = request_id

        structlog.get_logger().info(
            "http_request",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            latency_s=process_time,
        )
        return response
    except Exception as e:
        process_time = time.time() - start_time
        structlog.get_logger().error(
            "request_failed",
            method=request.method,
            path=request.url.path,
            latency_s=process_time,
            error=str(e),
        )
        raise


async def service_unavailable_handler(request: Request, exc: ServiceUnavailableError) -> JSONResponse:
    """
    Handler for ServiceUnavailableError exceptions.

    Returns a 503 with a user-facing message. The models tried are included
    when every model failed; upstream error text is only logged.

    Args:
        request: The HTTP request that triggered the error
        exc: The ServiceUnavailableError exception

    Returns:
        JSONResponse with 503 status code
    """
    content = {"detail": UNAVAILABLE_MESSAGE}
    if isinstance(exc, AllModelsFailedError):
        content["models_tried"] = exc.models

    return JSONResponse(status_code=503, content=content)


async def not_found_handler(request: Request, exc: LegalSwamiException) -> JSONResponse:
    """
    Handler for unknown models and chats.

    Returns:
        JSONResponse with 404 status code
    """
    return JSONResponse(
        status_code=404,
        content={"detail": str(exc)},
    )


async def legalswami_exception_handler(request: Request, exc: LegalSwamiException) -> JSONResponse:
    """
    Handler for any other LegalSwami exception.

    Returns:
        JSONResponse with 500 status code
    """
    return JSONResponse(
        status_code=500,
        content={"detail": f"Internal error: {str(exc)}"},
    )


def register_middleware(app: FastAPI) -> None:
    """
    Register all middleware with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.middleware("http")(logging_middleware)


def register_error_handlers(app: FastAPI) -> None:
    """
    Register all custom exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(ServiceUnavailableError, service_unavailable_handler)
    app.add_exception_handler(ModelNotFoundError, not_found_handler)
    app.add_exception_handler(ChatNotFoundError, not_found_handler)
    app.add_exception_handler(LegalSwamiException, legalswami_exception_handler)
