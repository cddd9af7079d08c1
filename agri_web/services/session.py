"""Session bridge between the API's bearer tokens and the browser session.

Login exchanges credentials for a token, reads the token's claims, keeps
those claims in the signed session cookie (``SessionMiddleware``) and writes
the raw token to a separate HttpOnly cookie. Page handlers authorize against
the session claims; outbound API calls read the token cookie.

States: ``ANONYMOUS`` -> ``AUTHENTICATING`` -> ``AUTHENTICATED``, back to
``ANONYMOUS`` on a failed login, on logout or once the claims expire.
"""
import logging
import time
from enum import Enum
from typing import List, Optional

import jwt
from fastapi import Request, Response
from pydantic import BaseModel, ValidationError

from agri_web.core.config import Settings
from agri_web.core.errors import ApiError
from agri_web.schemas import Role, TokenPayload
from agri_web.services.api_client import AgriApi

logger = logging.getLogger(__name__)

SESSION_KEY = 'claims'
FLASH_KEY = 'flash'


class SessionState(str, Enum):
    ANONYMOUS = 'anonymous'
    AUTHENTICATING = 'authenticating'
    AUTHENTICATED = 'authenticated'


class SessionPrincipal(BaseModel):
    """Claims kept in the session cookie for the signed-in user."""
    user_id: str
    subject: str
    name: str
    role: Role
    access_token: str
    expires_at: int

    def is_expired(self, now: Optional[float] = None) -> bool:
        return (now if now is not None else time.time()) >= self.expires_at

    def has_role(self, *roles: Role) -> bool:
        return self.role in roles


class LoginFailed(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def read_token_claims(token: str) -> TokenPayload:
    """Parse the token payload without checking the signature.

    The web tier does not hold the signing key; the API verifies the token on
    every call it receives.
    """
    payload = jwt.decode(token, options={'verify_signature': False, 'verify_exp': False, 'verify_aud': False})
    return TokenPayload.model_validate(payload)


def session_state(request: Request) -> SessionState:
    return SessionState.AUTHENTICATED if current_principal(request) else SessionState.ANONYMOUS


def current_principal(request: Request) -> Optional[SessionPrincipal]:
    raw = request.session.get(SESSION_KEY)
    if not raw:
        return None
    try:
        principal = SessionPrincipal.model_validate(raw)
    except ValidationError:
        logger.warning("Dropping malformed session claims")
        request.session.pop(SESSION_KEY, None)
        return None
    if principal.is_expired():
        logger.info("Session for %s expired", principal.subject)
        request.session.pop(SESSION_KEY, None)
        return None
    return principal


def authenticate(api: AgriApi, email: str, password: str) -> SessionPrincipal:
    """Run the AUTHENTICATING step: credentials in, session principal out."""
    try:
        result = api.login(email, password)
    except ApiError as exc:
        logger.warning("Login failed for %s: %s", email, exc.message())
        raise LoginFailed(f'Login failed: {exc.message()}') from exc

    try:
        claims = read_token_claims(result.token)
    except (jwt.DecodeError, ValidationError) as exc:
        logger.error("Login for %s returned an unreadable token: %s", email, exc)
        raise LoginFailed('Login failed: Invalid response from server.') from exc

    principal = SessionPrincipal(
        user_id=result.id,
        subject=claims.sub,
        name=email,
        role=claims.role,
        access_token=result.token,
        expires_at=claims.exp,
    )
    return principal


def establish_session(request: Request, response: Response, principal: SessionPrincipal, cfg: Settings) -> None:
    request.session[SESSION_KEY] = principal.model_dump(mode='json')
    max_age = max(0, min(cfg.session_max_age, int(principal.expires_at - time.time())))
    response.set_cookie(
        key=cfg.AUTH_COOKIE_NAME,
        value=principal.access_token,
        max_age=max_age,
        httponly=True,
        secure=cfg.COOKIE_SECURE,
        samesite='strict',
        path='/',
    )
    logger.info("User %s logged in as %s", principal.subject, principal.role.value)


def clear_session(request: Request, response: Response, cfg: Settings) -> None:
    request.session.pop(SESSION_KEY, None)
    response.delete_cookie(
        key=cfg.AUTH_COOKIE_NAME,
        path='/',
        httponly=True,
        secure=cfg.COOKIE_SECURE,
        samesite='strict',
    )


def landing_path(principal: Optional[SessionPrincipal]) -> str:
    if principal is None:
        return '/'
    if principal.role == Role.FARMER:
        return '/home/farmer'
    if principal.role == Role.EMPLOYEE:
        return '/home/employee'
    return '/'


def read_token_cookie(request: Request, cfg: Settings) -> Optional[str]:
    token = request.cookies.get(cfg.AUTH_COOKIE_NAME)
    return token if token and token.strip() else None


# --- flash messages, carried across one redirect ---

def flash(request: Request, message: str, category: str = 'success') -> None:
    request.session.setdefault(FLASH_KEY, []).append({'category': category, 'message': message})


def pop_flashes(request: Request) -> List[dict]:
    return request.session.pop(FLASH_KEY, [])
