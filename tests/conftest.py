from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from agri_api.api.deps import get_db
from agri_api.core.config import Settings, get_settings
from agri_api.db import models
from agri_api.db.session import Base, make_engine
from agri_api.main import app as api_app
from agri_api.security.utils import Role, create_access_token, hash_password
from agri_web.api.deps import get_http_client
from agri_web.main import app as web_app

PASSWORD = 'Password123!'

TEST_SETTINGS = Settings(
    DATABASE_URL='sqlite://',
    JWT_SECRET='test-signing-key-0123456789abcdef0123456789',
    SEED_DEMO_DATA=False,
)


@pytest.fixture
def settings() -> Settings:
    return TEST_SETTINGS


@pytest.fixture
def session_factory():
    engine = make_engine('sqlite://', poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    """API client on a fresh in-memory database; start-up seeding is not run."""
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    api_app.dependency_overrides[get_db] = _get_db
    api_app.dependency_overrides[get_settings] = lambda: TEST_SETTINGS
    yield TestClient(api_app, raise_server_exceptions=False)
    api_app.dependency_overrides.clear()


@pytest.fixture
def web(client):
    """Web client whose outbound calls land on the API app in-process."""
    def _http_client():
        # no context manager: start-up seeding would hit the real database
        api = TestClient(api_app, raise_server_exceptions=False)
        try:
            yield api
        finally:
            api.close()

    web_app.dependency_overrides[get_http_client] = _http_client
    # secure cookies only travel over https
    yield TestClient(web_app, base_url='https://testserver')
    web_app.dependency_overrides.clear()


def _user(db, email: str, role: Role, full_name: str, **extra) -> models.User:
    user = models.User(
        email=email,
        password_hash=hash_password(PASSWORD),
        full_name=full_name,
        phone_number='082-555-0100',
        role=role.value,
        **extra,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def employee(db):
    return _user(db, 'employee@agrienergy.com', Role.EMPLOYEE, 'John Doe')


@pytest.fixture
def farmer(db):
    return _user(db, 'farmer@agrienergy.com', Role.FARMER, 'Jane Mokoena', address='7 Riverside Farm Rd')


@pytest.fixture
def other_farmer(db):
    return _user(db, 'sipho@agrienergy.com', Role.FARMER, 'Sipho Dlamini', address='12 Hilltop Rd')


@pytest.fixture
def category(db):
    cat = models.Category(name='Dairy')
    db.add(cat)
    db.commit()
    db.refresh(cat)
    return cat


@pytest.fixture
def product(db, farmer, category):
    p = models.Product(
        name='Free-range milk',
        description='Fresh full-cream milk.',
        price=Decimal('34.99'),
        quantity=40,
        production_date=datetime(2025, 6, 1),
        farmer_id=farmer.id,
        category_id=category.id,
    )
    db.add(p)
    db.commit()
    db.refresh(p)
    return p


def bearer(user: models.User, cfg: Settings = TEST_SETTINGS) -> dict:
    token = create_access_token(cfg, subject=user.email, user_id=user.id, role=Role(user.role))
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def auth():
    return bearer
