"""
API endpoints для работы с категориями товаров.

Содержит CRUD операции для категорий. Удаление категории запрещено,
пока на нее ссылаются подкатегории или товары.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import AppException, ErrorType
from app.db.database import get_db
from app.db.models import NO_IMAGE_URL, Category, Product, SubCategory
from app.schemas.category import CategoryOut
from app.schemas.common import dump, dump_many, envelope
from app.services.image_service import CATEGORIES_FOLDER, image_service, is_provided
from app.services.storage_service import StorageProvider, get_storage

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_category_or_404(db: Session, category_id: int, lock: bool = False) -> Category:
    stmt = select(Category).where(Category.id == category_id)
    if lock:
        stmt = stmt.with_for_update()
    category = db.scalar(stmt)
    if category is None:
        raise AppException(ErrorType.NOT_FOUND, "Category not found.")
    return category


@router.get("", response_model=dict)
def list_categories(db: Session = Depends(get_db)):
    """
    Получить список всех категорий.

    Returns:
        dict: Конверт со списком категорий в порядке хранения
    """
    categories = db.scalars(select(Category).order_by(Category.id)).all()
    return envelope("Categories retrieved successfully.", dump_many(CategoryOut, categories))


@router.get("/{category_id}", response_model=dict)
def get_category(category_id: int, db: Session = Depends(get_db)):
    """
    Получить категорию по ID.

    Raises:
        AppException: NOT_FOUND, если категория не найдена
    """
    category = _get_category_or_404(db, category_id)
    return envelope("Category retrieved successfully.", dump(CategoryOut, category))


@router.post("", response_model=dict)
def create_category(
    name: Optional[str] = Form(None, max_length=255),
    img: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: StorageProvider = Depends(get_storage),
):
    """
    Создать категорию с необязательным изображением.

    Без файла поле image получает значение "no_url".

    Args:
        name: Название категории (обязательно)
        img: Изображение (jpg/png/jpeg, не более 5MB)
    """
    if not name:
        raise AppException(ErrorType.VALIDATION, "Name is required.")

    stored = image_service.store(storage, img, CATEGORIES_FOLDER) if is_provided(img) else None

    category = Category(
        name=name,
        image=stored.url if stored else NO_IMAGE_URL,
        image_key=stored.key if stored else None,
    )
    db.add(category)
    try:
        db.commit()
    except Exception:
        db.rollback()
        if stored:
            image_service.discard(storage, stored.key)
        raise

    db.refresh(category)
    logger.info(f"Category {category.id} '{category.name}' created")
    return envelope("Category created successfully.", dump(CategoryOut, category))


@router.put("/{category_id}", response_model=dict)
def update_category(
    category_id: int,
    name: Optional[str] = Form(None, max_length=255),
    image: Optional[str] = Form(None),
    img: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: StorageProvider = Depends(get_storage),
):
    """
    Обновить название и изображение категории.

    Итоговое изображение: новый файл, иначе переданный URL image,
    иначе ранее сохраненное изображение. Без названия или без
    изображения запрос отклоняется.

    Raises:
        AppException: VALIDATION, NOT_FOUND
    """
    category = db.get(Category, category_id)

    current_image = None
    if category is not None and category.image != NO_IMAGE_URL:
        current_image = category.image
    if not name or not (is_provided(img) or image or current_image):
        raise AppException(ErrorType.VALIDATION, "Name and image are required.")

    if category is None:
        raise AppException(ErrorType.NOT_FOUND, "Category not found.")

    old_key = category.image_key
    stored = image_service.store(storage, img, CATEGORIES_FOLDER) if is_provided(img) else None

    category.name = name
    if stored:
        category.image = stored.url
        category.image_key = stored.key
    elif image and image != category.image:
        # Внешний URL: объекта в нашем хранилище больше нет
        category.image = image
        category.image_key = None

    try:
        db.commit()
    except Exception:
        db.rollback()
        if stored:
            image_service.discard(storage, stored.key)
        raise

    if old_key and old_key != category.image_key:
        image_service.discard(storage, old_key)

    db.refresh(category)
    logger.info(f"Category {category.id} updated")
    return envelope("Category updated successfully.", dump(CategoryOut, category))


@router.delete("/{category_id}", response_model=dict)
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    storage: StorageProvider = Depends(get_storage),
):
    """
    Удалить категорию.

    Проверка ссылок и удаление выполняются в одной транзакции при
    заблокированной строке категории; внешние ключи с ON DELETE RESTRICT
    страхуют от подкатегорий и товаров, созданных параллельно.

    Raises:
        AppException: NOT_FOUND, CONFLICT если на категорию есть ссылки
    """
    category = _get_category_or_404(db, category_id, lock=True)

    subcategories = db.scalar(
        select(func.count()).select_from(SubCategory).where(SubCategory.category_id == category_id)
    )
    if subcategories:
        db.rollback()
        raise AppException(
            ErrorType.CONFLICT, "Cannot delete category. Subcategories are referencing it."
        )

    products = db.scalar(
        select(func.count()).select_from(Product).where(Product.category_id == category_id)
    )
    if products:
        db.rollback()
        raise AppException(
            ErrorType.CONFLICT, "Cannot delete category. Products are referencing it."
        )

    image_key = category.image_key
    db.delete(category)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise AppException(
            ErrorType.CONFLICT, "Cannot delete category. It is still referenced."
        )

    image_service.discard(storage, image_key)
    logger.info(f"Category {category_id} deleted")
    return envelope("Category deleted successfully.")
