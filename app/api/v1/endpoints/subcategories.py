"""
API endpoints для работы с подкатегориями.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import AppException, ErrorType
from app.db.database import get_db
from app.db.models import Category, Product, SubCategory
from app.schemas.category import SubCategoryCreate, SubCategoryOut
from app.schemas.common import dump, dump_many, envelope

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=dict)
def list_subcategories(db: Session = Depends(get_db)):
    subcategories = db.scalars(select(SubCategory).order_by(SubCategory.id)).all()
    return envelope(
        "Subcategories retrieved successfully.", dump_many(SubCategoryOut, subcategories)
    )


@router.get("/{subcategory_id}", response_model=dict)
def get_subcategory(subcategory_id: int, db: Session = Depends(get_db)):
    subcategory = db.get(SubCategory, subcategory_id)
    if subcategory is None:
        raise AppException(ErrorType.NOT_FOUND, "Subcategory not found.")
    return envelope("Subcategory retrieved successfully.", dump(SubCategoryOut, subcategory))


@router.post("", response_model=dict)
def create_subcategory(payload: SubCategoryCreate, db: Session = Depends(get_db)):
    """
    Создать подкатегорию.

    Категория должна существовать на момент создания.
    """
    if not payload.name or payload.category_id is None:
        raise AppException(ErrorType.VALIDATION, "Name and category ID are required.")

    if db.get(Category, payload.category_id) is None:
        raise AppException(ErrorType.VALIDATION, "Referenced category does not exist.")

    subcategory = SubCategory(name=payload.name, category_id=payload.category_id)
    db.add(subcategory)
    try:
        db.commit()
    except IntegrityError:
        # Категорию удалили между проверкой и вставкой
        db.rollback()
        raise AppException(ErrorType.VALIDATION, "Referenced category does not exist.")

    db.refresh(subcategory)
    logger.info(f"Subcategory {subcategory.id} created in category {subcategory.category_id}")
    return envelope("Subcategory created successfully.", dump(SubCategoryOut, subcategory))


@router.delete("/{subcategory_id}", response_model=dict)
def delete_subcategory(subcategory_id: int, db: Session = Depends(get_db)):
    """
    Удалить подкатегорию, если на нее не ссылаются товары.
    """
    subcategory = db.get(SubCategory, subcategory_id)
    if subcategory is None:
        raise AppException(ErrorType.NOT_FOUND, "Subcategory not found.")

    products = db.scalar(
        select(func.count()).select_from(Product).where(Product.subcategory_id == subcategory_id)
    )
    if products:
        raise AppException(
            ErrorType.CONFLICT, "Cannot delete subcategory. Products are referencing it."
        )

    db.delete(subcategory)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise AppException(ErrorType.CONFLICT, "Cannot delete subcategory. It is still referenced.")

    logger.info(f"Subcategory {subcategory_id} deleted")
    return envelope("Subcategory deleted successfully.")
