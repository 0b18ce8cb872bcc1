"""
API endpoints для работы с товарами.

Содержит CRUD операции для товаров с загрузкой до пяти изображений
(поля image1..image5, номер поля = номер слота).
"""

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import AppException, ErrorType
from app.db.database import get_db
from app.db.models import (
    IMAGE_SLOTS,
    Brand,
    Category,
    Product,
    ProductImage,
    SubCategory,
    Variant,
    VariantType,
)
from app.schemas.common import dump, dump_many, envelope
from app.schemas.product import ProductOut
from app.services.image_service import PRODUCTS_FOLDER, StoredImage, image_service, is_provided
from app.services.storage_service import StorageProvider, get_storage

logger = logging.getLogger(__name__)

router = APIRouter()


class ProductForm:
    """
    Поля multipart формы товара.

    None означает "поле не передано"; переданный 0 (например price=0)
    является обычным значением.
    """

    def __init__(
        self,
        name: Optional[str] = Form(None, max_length=255),
        description: Optional[str] = Form(None),
        quantity: Optional[int] = Form(None, ge=0),
        price: Optional[float] = Form(None, ge=0),
        offer_price: Optional[float] = Form(None, ge=0, alias="offerPrice"),
        category_id: Optional[int] = Form(None, alias="proCategoryId"),
        subcategory_id: Optional[int] = Form(None, alias="proSubCategoryId"),
        brand_id: Optional[int] = Form(None, alias="proBrandId"),
        variant_type_id: Optional[int] = Form(None, alias="proVariantTypeId"),
        variant_id: Optional[int] = Form(None, alias="proVariantId"),
        image1: Optional[UploadFile] = File(None),
        image2: Optional[UploadFile] = File(None),
        image3: Optional[UploadFile] = File(None),
        image4: Optional[UploadFile] = File(None),
        image5: Optional[UploadFile] = File(None),
    ):
        self.values = {
            "name": name,
            "description": description,
            "quantity": quantity,
            "price": price,
            "offer_price": offer_price,
            "category_id": category_id,
            "subcategory_id": subcategory_id,
            "brand_id": brand_id,
            "variant_type_id": variant_type_id,
            "variant_id": variant_id,
        }
        uploads = (image1, image2, image3, image4, image5)
        self.images: Dict[int, UploadFile] = {
            slot: upload for slot, upload in zip(IMAGE_SLOTS, uploads) if is_provided(upload)
        }

    def provided(self) -> dict:
        """Только переданные поля."""
        return {key: value for key, value in self.values.items() if value is not None}


def _get_product_or_404(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise AppException(ErrorType.NOT_FOUND, "Product not found.")
    return product


def _check_references(db: Session, values: dict) -> None:
    """
    Проверка ссылок товара на момент записи.

    Подкатегория должна принадлежать выбранной категории,
    вариант - выбранному типу варианта (если он указан).
    """
    category_id = values["category_id"]
    subcategory_id = values["subcategory_id"]

    if db.get(Category, category_id) is None:
        raise AppException(ErrorType.VALIDATION, "Referenced category does not exist.")

    subcategory = db.get(SubCategory, subcategory_id)
    if subcategory is None:
        raise AppException(ErrorType.VALIDATION, "Referenced subcategory does not exist.")
    if subcategory.category_id != category_id:
        raise AppException(
            ErrorType.VALIDATION, "Subcategory does not belong to the selected category."
        )

    if values.get("brand_id") is not None and db.get(Brand, values["brand_id"]) is None:
        raise AppException(ErrorType.VALIDATION, "Referenced brand does not exist.")

    variant_type_id = values.get("variant_type_id")
    if variant_type_id is not None and db.get(VariantType, variant_type_id) is None:
        raise AppException(ErrorType.VALIDATION, "Referenced variant type does not exist.")

    if values.get("variant_id") is not None:
        variant = db.get(Variant, values["variant_id"])
        if variant is None:
            raise AppException(ErrorType.VALIDATION, "Referenced variant does not exist.")
        if variant_type_id is not None and variant.variant_type_id != variant_type_id:
            raise AppException(
                ErrorType.VALIDATION, "Variant does not belong to the selected variant type."
            )


def _upload_images(storage: StorageProvider, images: Dict[int, UploadFile]) -> Dict[int, StoredImage]:
    """
    Загрузить все переданные слоты.

    Если хотя бы одна загрузка не удалась, уже загруженные файлы
    удаляются и исключение пробрасывается дальше.
    """
    stored: Dict[int, StoredImage] = {}
    try:
        for slot, upload in sorted(images.items()):
            stored[slot] = image_service.store(storage, upload, PRODUCTS_FOLDER)
    except Exception:
        _discard_all(storage, [image.key for image in stored.values()])
        raise
    return stored


def _discard_all(storage: StorageProvider, keys: List[str]) -> None:
    for key in keys:
        image_service.discard(storage, key)


def _commit(db: Session, storage: StorageProvider, stored: Dict[int, StoredImage]) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        _discard_all(storage, [image.key for image in stored.values()])
        raise AppException(ErrorType.VALIDATION, "Product references are no longer valid.")
    except Exception:
        db.rollback()
        _discard_all(storage, [image.key for image in stored.values()])
        raise


@router.get("", response_model=dict)
def list_products(db: Session = Depends(get_db)):
    """
    Получить список всех товаров.

    Ссылки на категорию, подкатегорию, бренд, тип варианта и вариант
    развернуты в объекты с id и названием.
    """
    products = db.scalars(select(Product).order_by(Product.id)).all()
    return envelope("Products retrieved successfully.", dump_many(ProductOut, products))


@router.get("/{product_id}", response_model=dict)
def get_product(product_id: int, db: Session = Depends(get_db)):
    product = _get_product_or_404(db, product_id)
    return envelope("Product retrieved successfully.", dump(ProductOut, product))


@router.post("", response_model=dict)
def create_product(
    form: ProductForm = Depends(),
    db: Session = Depends(get_db),
    storage: StorageProvider = Depends(get_storage),
):
    """
    Создать товар.

    Обязательные поля: name, quantity, price, proCategoryId, proSubCategoryId.
    Каждое переданное поле imageN загружается в хранилище и сохраняется
    в слот N. Ошибка любой загрузки отменяет создание целиком.

    Raises:
        AppException: VALIDATION при отсутствии полей или неверных ссылках
    """
    values = form.values
    required = ("quantity", "price", "category_id", "subcategory_id")
    if not values["name"] or any(values[field] is None for field in required):
        raise AppException(ErrorType.VALIDATION, "Required fields are missing.")

    _check_references(db, values)

    stored = _upload_images(storage, form.images)

    product = Product(**form.provided())
    for slot, image in sorted(stored.items()):
        product.images.append(ProductImage(slot=slot, url=image.url, storage_key=image.key))

    db.add(product)
    _commit(db, storage, stored)

    db.refresh(product)
    logger.info(f"Product {product.id} '{product.name}' created with {len(stored)} image(s)")
    return envelope("Product created successfully.", dump(ProductOut, product))


@router.put("/{product_id}", response_model=dict)
def update_product(
    product_id: int,
    form: ProductForm = Depends(),
    db: Session = Depends(get_db),
    storage: StorageProvider = Depends(get_storage),
):
    """
    Частично обновить товар.

    Переданные поля заменяют сохраненные, непереданные остаются прежними.
    Новый файл в слоте N заменяет изображение этого слота или добавляет
    его, остальные слоты не меняются.

    Raises:
        AppException: NOT_FOUND, VALIDATION при неверных ссылках
    """
    product = _get_product_or_404(db, product_id)
    changes = form.provided()

    reference_fields = ("category_id", "subcategory_id", "brand_id", "variant_type_id", "variant_id")
    if any(field in changes for field in reference_fields):
        merged = {field: getattr(product, field) for field in reference_fields}
        merged.update({field: changes[field] for field in reference_fields if field in changes})
        _check_references(db, merged)

    stored = _upload_images(storage, form.images)

    for field, value in changes.items():
        setattr(product, field, value)

    replaced_keys = []
    for slot, image in sorted(stored.items()):
        existing = product.image_in_slot(slot)
        if existing is not None:
            replaced_keys.append(existing.storage_key)
            existing.url = image.url
            existing.storage_key = image.key
        else:
            product.images.append(ProductImage(slot=slot, url=image.url, storage_key=image.key))

    _commit(db, storage, stored)
    _discard_all(storage, replaced_keys)

    db.refresh(product)
    logger.info(f"Product {product.id} updated (fields: {sorted(changes)}, slots: {sorted(stored)})")
    return envelope("Product updated successfully.", dump(ProductOut, product))


@router.delete("/{product_id}", response_model=dict)
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    storage: StorageProvider = Depends(get_storage),
):
    """
    Удалить товар и его изображения из хранилища.

    Файлы удаляются после фиксации удаления записи; сбой удаления
    файла только логируется.
    """
    product = _get_product_or_404(db, product_id)
    image_keys = [image.storage_key for image in product.images]

    db.delete(product)
    db.commit()

    _discard_all(storage, image_keys)
    logger.info(f"Product {product_id} deleted with {len(image_keys)} image(s)")
    return envelope("Product and associated images deleted successfully.")
