import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from agri_api.api.deps import get_db, get_current_identity, require_employee
from agri_api.api.v1.schemas import CategoryCreate, CategoryRead
from agri_api.core.errors import parse_id
from agri_api.db.models import Category, Product, category_key

logger = logging.getLogger(__name__)

router = APIRouter()


def _product_count(db: Session, category_id: str) -> int:
    return db.query(func.count(Product.id)).filter(Product.category_id == category_id).scalar() or 0


@router.get('/all', response_model=List[CategoryRead])
def list_categories(db: Session = Depends(get_db)):
    logger.info("Fetching all categories.")
    rows = (
        db.query(Category, func.count(Product.id))
        .outerjoin(Product, Product.category_id == Category.id)
        .group_by(Category.id)
        .order_by(Category.name)
        .all()
    )
    logger.info("Found %d categories.", len(rows))
    return [CategoryRead(id=c.id, name=c.name, number_of_products=n) for c, n in rows]


@router.get('/{category_id}', response_model=CategoryRead, dependencies=[Depends(get_current_identity)])
def get_category(category_id: str, db: Session = Depends(get_db)):
    category_id = parse_id(category_id, 'Category')
    obj = db.get(Category, category_id)
    if not obj:
        logger.warning("Category with ID %s not found.", category_id)
        raise HTTPException(status_code=404, detail=f'Category with ID {category_id} not found.')
    return CategoryRead(id=obj.id, name=obj.name, number_of_products=_product_count(db, obj.id))


@router.post('', response_model=CategoryRead, dependencies=[Depends(get_current_identity)])
def create_category(payload: CategoryCreate, db: Session = Depends(get_db)):
    logger.info("Creating new category: %s", payload.name)
    if db.query(Category).filter(Category.name_key == category_key(payload.name)).first():
        logger.warning("Category with name %s already exists.", payload.name)
        raise HTTPException(status_code=400, detail=f'Category with name {payload.name} already exists.')
    obj = Category(name=payload.name)
    try:
        db.add(obj); db.commit(); db.refresh(obj)
    except IntegrityError:
        # lost a race against a concurrent create with the same name
        db.rollback()
        raise HTTPException(status_code=400, detail=f'Category with name {payload.name} already exists.')
    except SQLAlchemyError:
        db.rollback()
        raise
    logger.info("Category created with ID: %s", obj.id)
    return CategoryRead(id=obj.id, name=obj.name, number_of_products=0)


@router.delete('/{category_id}')
def delete_category(category_id: str, db: Session = Depends(get_db), _=Depends(require_employee)) -> dict:
    category_id = parse_id(category_id, 'Category')
    logger.info("Deleting category with ID: %s", category_id)
    obj = db.get(Category, category_id)
    if not obj:
        logger.warning("Category with ID %s not found.", category_id)
        raise HTTPException(status_code=404, detail=f'Category with ID {category_id} not found.')
    name = obj.name
    in_use = _product_count(db, obj.id)
    if in_use:
        logger.warning("Category %s still has %d products.", category_id, in_use)
        raise HTTPException(status_code=400, detail=f'Category {name} still has {in_use} products and cannot be deleted.')
    try:
        db.delete(obj); db.commit()
    except IntegrityError:
        # a product was added between the check and the delete; the FK refused it
        db.rollback()
        raise HTTPException(status_code=400, detail=f'Category {name} still has products and cannot be deleted.')
    except SQLAlchemyError:
        db.rollback()
        raise
    logger.info("Category with ID %s deleted.", category_id)
    return {'status': 'deleted'}
