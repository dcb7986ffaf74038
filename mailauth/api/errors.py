"""
Mapping of core exceptions to HTTP responses.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from mailauth.core.exceptions import (
    DNSLookupError,
    DuplicateDomainError,
    InvalidInputError,
    MailAuthError,
    NotFoundError,
    PermissionDeniedError,
    VerificationError,
)

logger = logging.getLogger(__name__)

STATUS_CODES = {
    InvalidInputError: 400,
    VerificationError: 400,
    NotFoundError: 404,
    PermissionDeniedError: 403,
    DuplicateDomainError: 409,
    DNSLookupError: 502,
}


def status_code_for(exc: MailAuthError) -> int:
    for exc_type, status_code in STATUS_CODES.items():
        if isinstance(exc, exc_type):
            return status_code
    return 500


async def mailauth_error_handler(request: Request, exc: MailAuthError) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(MailAuthError, mailauth_error_handler)
