from functools import lru_cache
from pydantic import BaseModel
import os

class Settings(BaseModel):
    API_BASE_URL: str = os.getenv('API_BASE_URL', 'http://localhost:8000')

    # Session bridge
    SESSION_SECRET: str      = os.getenv('SESSION_SECRET', 'dev-only-session-secret')
    SESSION_COOKIE_NAME: str = os.getenv('SESSION_COOKIE_NAME', 'agri_session')
    AUTH_COOKIE_NAME: str    = os.getenv('AUTH_COOKIE_NAME', 'AuthToken')
    COOKIE_SECURE: bool      = os.getenv('COOKIE_SECURE', 'true').lower() == 'true'
    # must match the API's token lifetime
    JWT_EXPIRE_HOURS: float  = float(os.getenv('JWT_EXPIRE_HOURS', '2'))

    LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')

    class Config: frozen = True

    @property
    def session_max_age(self) -> int:
        return int(self.JWT_EXPIRE_HOURS * 3600)

settings = Settings()

@lru_cache
def get_settings() -> Settings:
    return settings
