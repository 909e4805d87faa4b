"""
Error taxonomy and the FastAPI handlers that turn it into responses.

Route handlers raise one of the ``ApiError`` subclasses below and never
build error responses themselves. Every error body has the shape
``{"error": <message>}`` and only ever carries the public message.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from userbucket.logger import log_error

INVALID_BODY_MESSAGE = "Corpo da requisição inválido."
INTERNAL_ERROR_MESSAGE = "Erro interno do servidor."


class ApiError(Exception):
    """Base class for errors that map to an HTTP status."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ApiError):
    status_code = 400


class NotFoundError(ApiError):
    status_code = 404


class PayloadTooLargeError(ApiError):
    status_code = 413


class StoreError(ApiError):
    """
    A document-store or object-store call failed.

    Raised by the clients with a generic message and chained to the
    driver exception; routes re-raise it with a route-specific message.
    """

    status_code = 500


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        log_error(exc.message, request, exc.__cause__ or exc)
    return _error_response(exc.status_code, exc.message)


async def request_validation_error_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    return _error_response(400, INVALID_BODY_MESSAGE)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log_error("Erro não tratado", request, exc)
    return _error_response(500, INTERNAL_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, generic_exception_handler)


@contextmanager
def store_failure(message: str) -> Iterator[None]:
    """Re-raise any ``StoreError`` in the block with a route-specific message."""
    try:
        yield
    except StoreError as exc:
        raise StoreError(message) from exc
