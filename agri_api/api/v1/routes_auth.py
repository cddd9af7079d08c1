import logging
from typing import Union

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from agri_api.api.deps import get_db, require_employee
from agri_api.api.v1.schemas import (
    LoginPayload,
    LoginResult,
    FarmerRegisterPayload,
    EmployeeRegisterPayload,
)
from agri_api.core.config import Settings, get_settings
from agri_api.db.models import User
from agri_api.security.utils import (
    Role,
    hash_password,
    verify_password,
    create_access_token,
)

logger = logging.getLogger(__name__)

router = APIRouter()  # main.py mounts at /api/auth


def find_user_by_email(db: Session, email: str) -> Union[User, None]:
    return db.query(User).filter(User.email == email.lower()).first()


def _register(db: Session, payload: EmployeeRegisterPayload, role: Role, address: Union[str, None] = None) -> None:
    email = str(payload.email_address).lower()
    if find_user_by_email(db, email):
        logger.warning("User with email %s already exists.", email)
        raise HTTPException(status_code=400, detail="User with this email already exists.")

    user = User(
        email=email,
        password_hash=hash_password(payload.password),
        full_name=payload.full_name,
        phone_number=payload.phone_number,
        address=address,
        role=role.value,
    )
    try:
        db.add(user)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    logger.info("%s registered successfully for email: %s", role.value, email)


@router.post("/register/farmer")
def register_farmer(payload: FarmerRegisterPayload, db: Session = Depends(get_db), _=Depends(require_employee)) -> dict:
    logger.info("Farmer registration initiated by employee for email: %s", payload.email_address)
    _register(db, payload, Role.FARMER, address=payload.address)
    return {"status": "ok"}


@router.post("/register/employee")
def register_employee(payload: EmployeeRegisterPayload, db: Session = Depends(get_db), _=Depends(require_employee)) -> dict:
    logger.info("Employee registration initiated by employee for email: %s", payload.email_address)
    _register(db, payload, Role.EMPLOYEE)
    return {"status": "ok"}


@router.post("/login", response_model=LoginResult)
def login(payload: LoginPayload, db: Session = Depends(get_db), cfg: Settings = Depends(get_settings)) -> LoginResult:
    user = find_user_by_email(db, str(payload.email))
    if not user:
        logger.warning("User with email %s not found.", payload.email)
        raise HTTPException(status_code=401, detail="User not found.")

    if not verify_password(payload.password, user.password_hash):
        logger.warning("Invalid password for user with email: %s", payload.email)
        raise HTTPException(status_code=401, detail="Invalid credentials.")

    if not user.role:
        logger.warning("User with email %s has no roles assigned.", payload.email)
        raise HTTPException(status_code=401, detail="User has no role assigned.")

    try:
        role = Role(user.role)
    except ValueError:
        logger.warning("Invalid role %r for user with email %s", user.role, payload.email)
        raise HTTPException(status_code=401, detail="Invalid role.")

    token = create_access_token(cfg, subject=user.email, user_id=user.id, role=role)
    logger.info("User with email %s logged in successfully. Token generated.", payload.email)
    return LoginResult(token=token, id=user.id)
