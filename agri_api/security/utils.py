from passlib.context import CryptContext
from datetime import datetime, timedelta, timezone
from enum import Enum
from pydantic import BaseModel
import jwt

from agri_api.core.config import Settings

pwd_ctx = CryptContext(schemes=['bcrypt'], deprecated='auto')

class Role(str, Enum):
    FARMER = 'Farmer'
    EMPLOYEE = 'Employee'

class TokenClaims(BaseModel):
    """Identity carried by an access token once it has been verified."""
    sub: str
    nameid: str
    role: Role
    iss: str
    aud: str
    exp: int

def hash_password(p: str) -> str: return pwd_ctx.hash(p)

def verify_password(p: str, h: str) -> bool:
    if not p or not h:
        return False
    return pwd_ctx.verify(p, h)

def now_utc() -> datetime: return datetime.now(timezone.utc)

def create_access_token(cfg: Settings, *, subject: str, user_id: str, role: Role) -> str:
    """Sign a token for an already authenticated user.

    The payload holds the three identity claims (``sub``, ``nameid``,
    ``role``) plus ``iss``, ``aud`` and ``exp``. There is no ``jti``: tokens
    are not tracked server side and stay valid until they expire.
    """
    role = Role(role)
    exp = now_utc() + timedelta(hours=cfg.JWT_EXPIRE_HOURS)
    payload = {
        'sub': subject,
        'nameid': user_id,
        'role': role.value,
        'iss': cfg.JWT_ISSUER,
        'aud': cfg.JWT_AUDIENCE,
        'exp': exp,
    }
    return jwt.encode(payload, cfg.JWT_SECRET, algorithm=cfg.JWT_ALGORITHM)

def decode_access_token(cfg: Settings, token: str) -> TokenClaims:
    """Verify signature, issuer, audience and expiry, then parse the claims.

    Raises ``jwt.InvalidTokenError`` for any token problem and
    ``pydantic.ValidationError`` when the role claim is not a known ``Role``.
    """
    payload = jwt.decode(
        token,
        cfg.JWT_SECRET,
        algorithms=[cfg.JWT_ALGORITHM],
        audience=cfg.JWT_AUDIENCE,
        issuer=cfg.JWT_ISSUER,
        options={'require': ['exp', 'iss', 'aud', 'sub']},
    )
    return TokenClaims.model_validate(payload)
