"""
Exception handling for the HTTP API.

Raster errors raised anywhere below a router are translated into HTTP
responses by the handlers registered here; `safe_endpoint` turns anything
unexpected into a logged 500.
"""

import functools
import logging
from typing import Dict, Type

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from rasterflow.core.exceptions import (
    AllocationError,
    ConcurrencyError,
    ConfigError,
    DecodeError,
    EmptyBufferError,
    EncodeError,
    ImageNotFoundError,
    RasterError,
)

logger = logging.getLogger(__name__)

# Most specific classes first
STATUS_CODES: Dict[Type[RasterError], int] = {
    ImageNotFoundError: 404,
    ConfigError: 400,
    EmptyBufferError: 409,
    DecodeError: 422,
    AllocationError: 507,
    EncodeError: 500,
    ConcurrencyError: 500,
}


def status_for(exc: RasterError) -> int:
    """HTTP status for a raster error"""
    for exc_type, status_code in STATUS_CODES.items():
        if isinstance(exc, exc_type):
            return status_code
    return 500


def error_body(exc: RasterError) -> dict:
    body = {"detail": str(exc), "error": type(exc).__name__}
    parameter = getattr(exc, "parameter", None)
    if parameter:
        body["parameter"] = parameter
    return body


def safe_endpoint(func):
    """
    Decorator for async endpoints.

    HTTP and raster errors propagate to the registered handlers; any other
    exception is logged and reported as a 500.
    """

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except (HTTPException, RasterError):
            raise
        except Exception as e:
            logger.error(f"Unhandled error in {func.__name__}: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail=f"Internal server error: {e}") from e

    return wrapper


async def raster_error_handler(request: Request, exc: RasterError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(status_code=status_code, content=error_body(exc))


def register_exception_handlers(app: FastAPI):
    """Register raster error handlers on the application"""
    app.add_exception_handler(RasterError, raster_error_handler)
