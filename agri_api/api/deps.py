from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from pydantic import ValidationError
import jwt, logging
from agri_api.core.config import Settings, get_settings
from agri_api.db.session import SessionLocal
from agri_api.security.utils import Role, TokenClaims, decode_access_token

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

_CHALLENGE = {'WWW-Authenticate': 'Bearer'}

def get_db():
    db = SessionLocal()
    try: yield db
    finally: db.close()

def get_current_identity(
    creds: HTTPAuthorizationCredentials = Depends(security),
    cfg: Settings = Depends(get_settings),
) -> TokenClaims:
    if not creds or not creds.credentials:
        raise HTTPException(status_code=401, detail='Not authenticated', headers=_CHALLENGE)
    try:
        return decode_access_token(cfg, creds.credentials)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail='Token expired', headers=_CHALLENGE)
    except (jwt.InvalidTokenError, ValidationError) as exc:
        logger.warning("Rejected bearer token: %s", exc.__class__.__name__)
        raise HTTPException(status_code=401, detail='Invalid token', headers=_CHALLENGE)

def require_role(*allowed: Role):
    def _checker(identity: TokenClaims = Depends(get_current_identity)) -> TokenClaims:
        if identity.role not in allowed:
            logger.warning("Role %s denied, requires one of %s", identity.role.value, [r.value for r in allowed])
            raise HTTPException(status_code=403, detail='Forbidden')
        return identity
    return _checker

require_employee = require_role(Role.EMPLOYEE)
require_farmer = require_role(Role.FARMER)
