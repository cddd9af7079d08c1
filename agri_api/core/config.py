from functools import lru_cache
from pydantic import BaseModel
import os

class Settings(BaseModel):
    DATABASE_URL: str = os.getenv('DATABASE_URL', 'sqlite:///./agri_energy.db')

    # Auth/JWT
    JWT_SECRET: str      = os.getenv('JWT_SECRET', 'dev-only-signing-key-change-me-0123456789')
    JWT_ALGORITHM: str   = os.getenv('JWT_ALGORITHM', 'HS256')
    JWT_ISSUER: str      = os.getenv('JWT_ISSUER', 'AgriEnergyConnectAPI')
    JWT_AUDIENCE: str    = os.getenv('JWT_AUDIENCE', 'AgriEnergyConnectClient')
    JWT_EXPIRE_HOURS: float = float(os.getenv('JWT_EXPIRE_HOURS', '2'))

    # Seeding
    SEED_EMPLOYEE_EMAIL: str    = os.getenv('SEED_EMPLOYEE_EMAIL', 'employee@agrienergy.com')
    SEED_EMPLOYEE_PASSWORD: str = os.getenv('SEED_EMPLOYEE_PASSWORD', 'Password123!')
    SEED_DEMO_DATA: bool        = os.getenv('SEED_DEMO_DATA', 'true').lower() == 'true'

    LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')

    class Config: frozen = True

settings = Settings()

@lru_cache
def get_settings() -> Settings:
    return settings
