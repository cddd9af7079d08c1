import json
import logging
from typing import Any, Dict, List

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse

logger = logging.getLogger(__name__)

LOGIN_PATH = '/account/login'
ACCESS_DENIED_PATH = '/account/access-denied'


class LoginRequired(Exception):
    """No authenticated session for a page that needs one."""


class AccessDenied(Exception):
    """Session role does not match the page's required role."""


class ApiError(Exception):
    def __init__(self, status_code: int, body: str = ''):
        super().__init__(f'API responded {status_code}')
        self.status_code = status_code
        self.body = body

    def field_errors(self) -> Dict[str, List[str]]:
        """API 400 bodies are either ``{field: [messages]}`` or a plain message."""
        try:
            data: Any = json.loads(self.body)
        except ValueError:
            return {'': [self.message()]}
        if isinstance(data, dict) and data and all(isinstance(v, list) for v in data.values()):
            return {str(k): [str(m) for m in v] for k, v in data.items()}
        return {'': [self.message()]}

    def message(self) -> str:
        try:
            data: Any = json.loads(self.body)
        except ValueError:
            return self.body.strip() or f'Request failed ({self.status_code}).'
        if isinstance(data, dict) and isinstance(data.get('detail'), str):
            return data['detail']
        if isinstance(data, str):
            return data
        return f'Request failed ({self.status_code}).'


class ApiUnauthorized(ApiError):
    """The API rejected (or never received) the bearer token."""


class ApiForbidden(ApiError):
    pass


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(LoginRequired)
    async def login_required_handler(request: Request, exc: LoginRequired):
        return RedirectResponse(LOGIN_PATH, status_code=303)

    @app.exception_handler(AccessDenied)
    async def access_denied_handler(request: Request, exc: AccessDenied):
        return RedirectResponse(ACCESS_DENIED_PATH, status_code=303)

    @app.exception_handler(ApiForbidden)
    async def api_forbidden_handler(request: Request, exc: ApiForbidden):
        logger.warning("API returned 403 for %s %s", request.method, request.url.path)
        return RedirectResponse(ACCESS_DENIED_PATH, status_code=303)
