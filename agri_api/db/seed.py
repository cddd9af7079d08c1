"""Default accounts and reference data.

Runs on API start-up and from ``scripts/seed.py``; every step checks before it
inserts, so running it twice is harmless.
"""
import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Session

from agri_api.core.config import Settings
from agri_api.db.models import Category, Product, User, category_key
from agri_api.security.utils import Role, hash_password

logger = logging.getLogger(__name__)

DEMO_FARMER_EMAIL = 'farmer@agrienergy.com'
DEMO_CATEGORIES = ('Dairy', 'Grains', 'Renewable Energy', 'Vegetables')


def _ensure_user(db: Session, *, email: str, password: str, role: Role, **profile) -> User:
    user = db.query(User).filter(User.email == email.lower()).first()
    if user:
        return user
    user = User(email=email.lower(), password_hash=hash_password(password), role=role.value, **profile)
    db.add(user)
    db.flush()
    logger.info("Seeded %s account %s", role.value, email)
    return user


def seed_defaults(db: Session, cfg: Settings) -> None:
    _ensure_user(
        db,
        email=cfg.SEED_EMPLOYEE_EMAIL,
        password=cfg.SEED_EMPLOYEE_PASSWORD,
        role=Role.EMPLOYEE,
        full_name='John Doe',
        phone_number='083-678-6545',
        address='123 Agri Energy St, Greenfield',
    )
    if cfg.SEED_DEMO_DATA:
        _seed_demo(db, cfg)
    db.commit()


def _seed_demo(db: Session, cfg: Settings) -> None:
    farmer = _ensure_user(
        db,
        email=DEMO_FARMER_EMAIL,
        password=cfg.SEED_EMPLOYEE_PASSWORD,
        role=Role.FARMER,
        full_name='Jane Mokoena',
        phone_number='082-555-0199',
        address='7 Riverside Farm Rd, Stellenbosch',
    )
    categories = {}
    for name in DEMO_CATEGORIES:
        cat = db.query(Category).filter(Category.name_key == category_key(name)).first()
        if not cat:
            cat = Category(name=name)
            db.add(cat)
        categories[name] = cat
    db.flush()

    if not farmer.products:
        db.add(Product(
            name='Free-range milk',
            description='Fresh full-cream milk, 2 litre bottles.',
            price=Decimal('34.99'),
            quantity=40,
            production_date=datetime(2025, 6, 1),
            farmer=farmer,
            category=categories['Dairy'],
        ))
