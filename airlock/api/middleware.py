"""Exception handlers for serving serialized records over FastAPI.

Serialization configuration errors are server-side setup mistakes, never
bad client input, so they map to 500.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from airlock.core.exceptions import AirlockException, SerializationConfigurationError
from airlock.core.logging import logger

api_logger = logger.with_prefix("API: ").with_context(component="api")


async def serialization_configuration_exception_handler(
    request: Request, exc: SerializationConfigurationError
) -> JSONResponse:
    """Exception handler for SerializationConfigurationError.

    Args:
    ----
        request (Request): The incoming request that triggered the exception.
        exc (SerializationConfigurationError): The exception object that was raised.

    Returns:
    -------
        JSONResponse: A 500 Internal Server Error response with the error reason.

    """
    api_logger.error(
        f"Serialization misconfigured while handling {request.method} {request.url.path}: {exc}",
        extra={"reason": exc.reason.value},
    )
    return JSONResponse(status_code=500, content={"detail": str(exc), "reason": exc.reason.value})


async def airlock_exception_handler(request: Request, exc: AirlockException) -> JSONResponse:
    """Generic exception handler for all AirlockException types."""
    return JSONResponse(status_code=500, content={"detail": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    """Register Airlock exception handlers, most specific first."""
    app.exception_handler(SerializationConfigurationError)(
        serialization_configuration_exception_handler
    )
    app.exception_handler(AirlockException)(airlock_exception_handler)
