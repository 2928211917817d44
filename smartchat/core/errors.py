"""
smartchat/core/errors.py
─────────────────────────
API error taxonomy and the handlers that render it.

Every user-visible failure is a JSON object with a single "error" string:

  BadRequestError           400  missing / invalid input
  UnauthorizedError         401  bad credential or no session
  NotFoundError             404  lookup target absent
  ServerMisconfiguredError  500  required secret not configured
  UpstreamError             500  Stripe or Supabase call failed

Internal detail is logged by the raising handler, never returned.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

log = logging.getLogger(__name__)


class APIError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequestError(APIError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class UnauthorizedError(APIError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class NotFoundError(APIError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ServerMisconfiguredError(APIError):
    # Never name the missing variable in the message.
    default_message = "Server configuration error"


class UpstreamError(APIError):
    default_message = "Internal server error"


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    return error_response(exc.status_code, exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Locations only; the raw input may hold secrets.
    locations = [err.get("loc") for err in exc.errors()]
    log.info(f"[API] Rejected malformed request to {request.url.path}: {locations}")
    return error_response(status.HTTP_400_BAD_REQUEST, "Invalid request")


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.error(f"[API] Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
