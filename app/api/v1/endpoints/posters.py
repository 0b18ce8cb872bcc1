"""
API endpoints для работы с постерами.

Ошибки загрузки файла (формат, размер больше 5MB) возвращаются
так же, как и для остальных ресурсов: статус 400 и success=false.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.errors import AppException, ErrorType
from app.db.database import get_db
from app.db.models import NO_IMAGE_URL, Poster
from app.schemas.common import dump, dump_many, envelope
from app.schemas.poster import PosterOut
from app.services.image_service import POSTERS_FOLDER, image_service, is_provided
from app.services.storage_service import StorageProvider, get_storage

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_poster_or_404(db: Session, poster_id: int) -> Poster:
    poster = db.get(Poster, poster_id)
    if poster is None:
        raise AppException(ErrorType.NOT_FOUND, "Poster not found.")
    return poster


@router.get("", response_model=dict)
def list_posters(db: Session = Depends(get_db)):
    posters = db.scalars(select(Poster).order_by(Poster.id)).all()
    return envelope("Posters retrieved successfully.", dump_many(PosterOut, posters))


@router.get("/{poster_id}", response_model=dict)
def get_poster(poster_id: int, db: Session = Depends(get_db)):
    poster = _get_poster_or_404(db, poster_id)
    return envelope("Poster retrieved successfully.", dump(PosterOut, poster))


@router.post("", response_model=dict)
def create_poster(
    poster_name: Optional[str] = Form(None, max_length=255, alias="posterName"),
    img: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: StorageProvider = Depends(get_storage),
):
    """
    Создать постер.

    Args:
        poster_name: Название постера (обязательно)
        img: Изображение; без него image_url = "no_url"
    """
    if not poster_name:
        raise AppException(ErrorType.VALIDATION, "Name is required.")

    stored = image_service.store(storage, img, POSTERS_FOLDER) if is_provided(img) else None

    poster = Poster(
        poster_name=poster_name,
        image_url=stored.url if stored else NO_IMAGE_URL,
        image_key=stored.key if stored else None,
    )
    db.add(poster)
    try:
        db.commit()
    except Exception:
        db.rollback()
        if stored:
            image_service.discard(storage, stored.key)
        raise

    db.refresh(poster)
    logger.info(f"Poster {poster.id} '{poster.poster_name}' created")
    return envelope("Poster created successfully.", dump(PosterOut, poster))


@router.put("/{poster_id}", response_model=dict)
def update_poster(
    poster_id: int,
    poster_name: Optional[str] = Form(None, max_length=255, alias="posterName"),
    image_url: Optional[str] = Form(None, alias="imageUrl"),
    img: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: StorageProvider = Depends(get_storage),
):
    """
    Обновить постер.

    Новый файл заменяет изображение; без файла можно передать imageUrl,
    иначе остается текущее изображение.
    """
    poster = _get_poster_or_404(db, poster_id)

    if not poster_name:
        raise AppException(ErrorType.VALIDATION, "Name is required.")

    old_key = poster.image_key
    stored = image_service.store(storage, img, POSTERS_FOLDER) if is_provided(img) else None

    poster.poster_name = poster_name
    if stored:
        poster.image_url = stored.url
        poster.image_key = stored.key
    elif image_url and image_url != poster.image_url:
        poster.image_url = image_url
        poster.image_key = None

    try:
        db.commit()
    except Exception:
        db.rollback()
        if stored:
            image_service.discard(storage, stored.key)
        raise

    if old_key and old_key != poster.image_key:
        image_service.discard(storage, old_key)

    db.refresh(poster)
    logger.info(f"Poster {poster.id} updated")
    return envelope("Poster updated successfully.", dump(PosterOut, poster))


@router.delete("/{poster_id}", response_model=dict)
def delete_poster(
    poster_id: int,
    db: Session = Depends(get_db),
    storage: StorageProvider = Depends(get_storage),
):
    poster = _get_poster_or_404(db, poster_id)
    image_key = poster.image_key

    db.delete(poster)
    db.commit()

    image_service.discard(storage, image_key)
    logger.info(f"Poster {poster_id} deleted")
    return envelope("Poster deleted successfully.")
