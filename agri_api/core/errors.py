import logging
import uuid
from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

INTERNAL_ERROR = 'Internal server error'

_REQUEST_LOCATIONS = {'body', 'query', 'path', 'header', 'cookie'}


def field_errors(errors: List[Dict[str, Any]]) -> Dict[str, List[str]]:
    """Group pydantic errors by field path, e.g. ``{"email_address": ["..."]}``."""
    out: Dict[str, List[str]] = {}
    for err in errors:
        loc = [str(p) for p in (err.get('loc') or ())]
        if loc and loc[0] in _REQUEST_LOCATIONS:
            loc = loc[1:]
        key = '.'.join(loc) or '(root)'
        msg = str(err.get('msg', 'Invalid value'))
        # pydantic prefixes messages from custom validators
        if msg.startswith('Value error, '):
            msg = msg[len('Value error, '):]
        out.setdefault(key, []).append(msg)
    return out


def parse_id(value: str, what: str) -> str:
    """Reject blank or non-UUID identifiers with a 400 before touching the db."""
    if not value or not value.strip():
        raise HTTPException(status_code=400, detail=f'{what} ID cannot be null or empty.')
    try:
        return str(uuid.UUID(value.strip()))
    except ValueError:
        raise HTTPException(status_code=400, detail=f'{what} ID is not valid.')


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError):
        errors = field_errors(exc.errors())
        logger.warning("Validation failed on %s %s: %s", request.method, request.url.path, list(errors))
        return JSONResponse(status_code=400, content=errors)

    @app.exception_handler(SQLAlchemyError)
    async def db_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={'detail': INTERNAL_ERROR})

    @app.exception_handler(Exception)
    async def unexpected_handler(request: Request, exc: Exception):
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={'detail': INTERNAL_ERROR})
