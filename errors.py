from __future__ import annotations

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger("math-practice.errors")

GENERIC_ERROR_MSG = "Something went wrong. Please try again."


class AppError(Exception):
    """
    Base for errors surfaced to API callers.

    `public_message` is what the client sees; the exception text itself
    (internal detail) only goes to the server log.
    """

    status_code = 500
    public_message = GENERIC_ERROR_MSG

    def __init__(self, detail: str = "", *, public_message: str | None = None):
        super().__init__(detail or self.public_message)
        if public_message is not None:
            self.public_message = public_message


class BadRequest(AppError):
    status_code = 400
    public_message = "Invalid request payload."


class NotFound(AppError):
    status_code = 404
    public_message = "Not found."


class InvalidGenerationResponse(AppError):
    public_message = "The problem generator returned an unexpected response."


class GenerationFailure(AppError):
    public_message = "The problem generator is unavailable. Please try again."


class StorageFailure(AppError):
    public_message = "Could not reach the database. Please try again."


# --- FastAPI handlers --------------------------------------------------------------


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.exception(
            "%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc
        )
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("%s %s invalid payload: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": BadRequest.public_message})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("%s %s crashed", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": GENERIC_ERROR_MSG})
