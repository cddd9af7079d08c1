import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from agri_api.api.deps import get_db, require_employee
from agri_api.api.v1.schemas import FarmerRead, FarmerUpdatePayload
from agri_api.core.errors import parse_id
from agri_api.db.models import User
from agri_api.security.utils import Role

logger = logging.getLogger(__name__)

# every farmer-account operation is employee-only
router = APIRouter(dependencies=[Depends(require_employee)])


def _get_farmer(db: Session, farmer_id: str) -> User:
    farmer_id = parse_id(farmer_id, 'Farmer')
    farmer = db.get(User, farmer_id)
    if not farmer or farmer.role != Role.FARMER.value:
        logger.warning("Farmer with ID: %s not found.", farmer_id)
        raise HTTPException(status_code=404, detail=f"Farmer with ID: {farmer_id} not found.")
    return farmer


@router.get("/farmer/all", response_model=List[FarmerRead])
def list_farmers(db: Session = Depends(get_db)):
    logger.info("Fetching all farmers.")
    farmers = (
        db.query(User)
        .filter(User.role == Role.FARMER.value)
        .order_by(User.full_name, User.email)
        .all()
    )
    logger.info("Found %d farmers.", len(farmers))
    return farmers


@router.get("/farmer/{farmer_id}", response_model=FarmerRead)
def get_farmer(farmer_id: str, db: Session = Depends(get_db)):
    logger.info("Fetching farmer with ID: %s", farmer_id)
    return _get_farmer(db, farmer_id)


@router.put("/farmer/{farmer_id}", response_model=FarmerRead)
def update_farmer(farmer_id: str, payload: FarmerUpdatePayload, db: Session = Depends(get_db)):
    logger.info("Updating farmer with ID: %s", farmer_id)
    farmer = _get_farmer(db, farmer_id)

    email = str(payload.email_address).lower()
    taken = db.query(User).filter(User.email == email, User.id != farmer.id).first()
    if taken:
        logger.warning("Email %s already belongs to another account.", email)
        raise HTTPException(status_code=400, detail="User with this email already exists.")

    farmer.email = email
    farmer.full_name = payload.full_name
    farmer.address = payload.address
    farmer.phone_number = payload.phone_number
    try:
        db.add(farmer); db.commit(); db.refresh(farmer)
    except SQLAlchemyError:
        db.rollback()
        raise
    logger.info("Successfully updated farmer with ID: %s", farmer.id)
    return farmer


@router.delete("/farmer/{farmer_id}")
def delete_farmer(farmer_id: str, db: Session = Depends(get_db)) -> dict:
    logger.info("Deleting farmer with ID: %s", farmer_id)
    farmer = _get_farmer(db, farmer_id)
    # products go with the farmer (ON DELETE CASCADE)
    try:
        db.delete(farmer); db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    logger.info("Successfully deleted farmer with ID: %s", farmer_id)
    return {"status": "deleted"}
