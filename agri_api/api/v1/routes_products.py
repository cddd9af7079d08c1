import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from agri_api.api.deps import get_db, get_current_identity, require_farmer, require_role
from agri_api.api.v1.schemas import ProductCreate, ProductUpdate, ProductRead
from agri_api.core.errors import parse_id
from agri_api.db import models
from agri_api.security.utils import Role, TokenClaims

logger = logging.getLogger(__name__)

router = APIRouter()

require_owner_roles = require_role(Role.FARMER, Role.EMPLOYEE)


def _enriched():
    return select(models.Product).options(
        joinedload(models.Product.farmer), joinedload(models.Product.category)
    )


def _list(db: Session, stmt) -> List[ProductRead]:
    rows = db.execute(stmt.order_by(models.Product.name)).scalars().unique().all()
    return [ProductRead.from_model(p) for p in rows]


def _get_product(db: Session, product_id: str) -> models.Product:
    product_id = parse_id(product_id, 'Product')
    obj = db.execute(_enriched().where(models.Product.id == product_id)).scalars().first()
    if not obj:
        logger.warning("Product with ID %s not found.", product_id)
        raise HTTPException(status_code=404, detail=f'Product with ID {product_id} not found.')
    return obj


def _get_category(db: Session, category_id: str) -> models.Category:
    category = db.get(models.Category, parse_id(category_id, 'Category'))
    if not category:
        logger.warning("Category with ID %s not found.", category_id)
        raise HTTPException(status_code=404, detail=f'Category with ID {category_id} not found.')
    return category


def _check_owner(identity: TokenClaims, obj: models.Product) -> None:
    if identity.role == Role.FARMER and obj.farmer_id != identity.nameid:
        logger.warning("Farmer %s tried to modify product %s owned by %s", identity.nameid, obj.id, obj.farmer_id)
        raise HTTPException(status_code=403, detail='Forbidden')


@router.get('/all', response_model=List[ProductRead], dependencies=[Depends(get_current_identity)])
def list_products(db: Session = Depends(get_db)):
    logger.info("Fetching all products.")
    return _list(db, _enriched())


@router.get('/category/{category_id}', response_model=List[ProductRead], dependencies=[Depends(get_current_identity)])
def list_products_by_category(category_id: str, db: Session = Depends(get_db)):
    category_id = parse_id(category_id, 'Category')
    logger.info("Fetching products for category with ID: %s", category_id)
    return _list(db, _enriched().where(models.Product.category_id == category_id))


@router.get('/farmer/{farmer_id}', response_model=List[ProductRead], dependencies=[Depends(get_current_identity)])
def list_products_by_farmer(farmer_id: str, db: Session = Depends(get_db)):
    farmer_id = parse_id(farmer_id, 'Farmer')
    logger.info("Fetching products for farmer with ID: %s", farmer_id)
    return _list(db, _enriched().where(models.Product.farmer_id == farmer_id))


@router.get('/{product_id}', response_model=ProductRead, dependencies=[Depends(get_current_identity)])
def get_product(product_id: str, db: Session = Depends(get_db)):
    logger.info("Fetching product with ID: %s", product_id)
    return ProductRead.from_model(_get_product(db, product_id))


@router.post('', response_model=ProductRead)
def create_product(payload: ProductCreate, db: Session = Depends(get_db), identity: TokenClaims = Depends(require_farmer)):
    logger.info("Creating product: %s", payload.name)
    farmer = db.get(models.User, identity.nameid)
    if not farmer:
        logger.warning("Farmer with ID %s not found.", identity.nameid)
        raise HTTPException(status_code=404, detail=f'Farmer with ID {identity.nameid} not found.')
    category = _get_category(db, payload.category_id)

    obj = models.Product(**payload.model_dump(exclude={'category_id'}), farmer=farmer, category=category)
    try:
        db.add(obj); db.commit(); db.refresh(obj)
    except SQLAlchemyError:
        db.rollback()
        raise
    logger.info("Product created with ID: %s", obj.id)
    return ProductRead.from_model(obj)


@router.put('/{product_id}', response_model=ProductRead)
def update_product(product_id: str, payload: ProductUpdate, db: Session = Depends(get_db), identity: TokenClaims = Depends(require_owner_roles)):
    logger.info("Updating product with ID: %s", product_id)
    obj = _get_product(db, product_id)
    _check_owner(identity, obj)
    if payload.category_id != obj.category_id:
        obj.category = _get_category(db, payload.category_id)
    for k, v in payload.model_dump(exclude={'category_id'}).items(): setattr(obj, k, v)
    try:
        db.add(obj); db.commit(); db.refresh(obj)
    except SQLAlchemyError:
        db.rollback()
        raise
    logger.info("Product updated with ID: %s", obj.id)
    return ProductRead.from_model(obj)


@router.delete('/{product_id}')
def delete_product(product_id: str, db: Session = Depends(get_db), identity: TokenClaims = Depends(require_owner_roles)) -> dict:
    logger.info("Deleting product with ID: %s", product_id)
    obj = _get_product(db, product_id)
    _check_owner(identity, obj)
    try:
        db.delete(obj); db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    logger.info("Product deleted with ID: %s", product_id)
    return {'status': 'deleted'}
