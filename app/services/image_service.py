"""
Сервис для работы с изображениями.

Обеспечивает валидацию загружаемых файлов, уменьшение изображений
до допустимого размера и сохранение их в хранилище.
"""

import logging
import uuid
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Optional

from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError

from app.core.config import settings
from app.core.errors import AppException, ErrorType
from app.services.storage_service import StorageProvider

logger = logging.getLogger(__name__)

# Папки хранилища для разных ресурсов
CATEGORIES_FOLDER = "categories"
PRODUCTS_FOLDER = "products"
POSTERS_FOLDER = "posters"


@dataclass(frozen=True)
class StoredImage:
    """Результат загрузки: ключ объекта в хранилище и его публичный URL."""

    key: str
    url: str


class ImageService:
    """
    Сервис для работы с изображениями.

    Обеспечивает:
    - Валидацию расширения и размера файла
    - Проверку, что содержимое действительно JPEG/PNG
    - Уменьшение до IMAGE_MAX_DIMENSION x IMAGE_MAX_DIMENSION с сохранением пропорций
    - Сохранение в хранилище и удаление из него
    """

    # Расширение -> формат Pillow и MIME тип
    FORMATS = {
        "jpg": ("JPEG", "image/jpeg"),
        "jpeg": ("JPEG", "image/jpeg"),
        "png": ("PNG", "image/png"),
    }

    def __init__(
        self,
        allowed_types: Optional[set] = None,
        max_file_size: Optional[int] = None,
        max_dimension: Optional[int] = None,
        max_pixels: Optional[int] = None,
    ):
        self.allowed_types = allowed_types or settings.allowed_image_types
        self.max_file_size = max_file_size or settings.MAX_IMAGE_SIZE
        self.max_dimension = max_dimension or settings.IMAGE_MAX_DIMENSION
        self.max_pixels = max_pixels or settings.IMAGE_MAX_PIXELS

    def validate_file(self, filename: str, file_size: int) -> tuple[bool, Optional[str]]:
        """
        Валидация загруженного файла.

        Args:
            filename: Имя файла
            file_size: Размер файла в байтах

        Returns:
            tuple[bool, Optional[str]]: (валиден, сообщение об ошибке)
        """
        if file_size > self.max_file_size:
            limit_mb = self.max_file_size // (1024 * 1024)
            return False, f"File size is too large. Maximum filesize is {limit_mb}MB."

        extension = Path(filename or "").suffix.lower().lstrip(".")
        if extension not in self.allowed_types or extension not in self.FORMATS:
            allowed = ", ".join(sorted(self.allowed_types))
            return False, f"Unsupported file format: '{extension or filename}'. Allowed: {allowed}."

        if file_size == 0:
            return False, "Uploaded file is empty."

        return True, None

    def prepare(self, filename: str, content: bytes) -> tuple[bytes, str, str]:
        """
        Проверка и уменьшение изображения.

        Returns:
            tuple[bytes, str, str]: (данные, расширение, MIME тип)
        """
        is_valid, error_message = self.validate_file(filename, len(content))
        if not is_valid:
            raise AppException(ErrorType.VALIDATION, error_message)

        extension = Path(filename).suffix.lower().lstrip(".")
        expected_format, _ = self.FORMATS[extension]

        try:
            with Image.open(BytesIO(content)) as img:
                # Размеры известны из заголовка, до декодирования пикселей
                if img.width * img.height > self.max_pixels:
                    raise AppException(
                        ErrorType.VALIDATION,
                        f"Image dimensions {img.width}x{img.height} are too large.",
                    )
                img.load()
                if img.format not in ("JPEG", "PNG"):
                    raise AppException(
                        ErrorType.VALIDATION,
                        f"File '{filename}' is not a JPEG or PNG image.",
                    )
                # Сохраняем фактический формат файла, а не заявленный расширением
                actual_format = img.format
                if actual_format != expected_format:
                    extension = "png" if actual_format == "PNG" else "jpg"

                # Только уменьшение, как crop=limit
                img.thumbnail((self.max_dimension, self.max_dimension))

                if actual_format == "JPEG" and img.mode not in ("RGB", "L"):
                    img = img.convert("RGB")

                output = BytesIO()
                img.save(output, format=actual_format)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            raise AppException(
                ErrorType.VALIDATION, f"File '{filename}' is not a valid image: {e}"
            )

        return output.getvalue(), extension, self.FORMATS[extension][1]

    @staticmethod
    def generate_path(folder: str, extension: str) -> str:
        """Ключ объекта: {folder}/{uuid}.{ext}"""
        return f"{folder}/{uuid.uuid4().hex}.{extension}"

    def store(self, storage: StorageProvider, upload: UploadFile, folder: str) -> StoredImage:
        """
        Сохранить загруженный файл в папку хранилища.

        Raises:
            AppException: VALIDATION для неподходящего файла, STORAGE при сбое хранилища
        """
        # Читаем на байт больше лимита, чтобы обнаружить превышение
        upload.file.seek(0)
        content = upload.file.read(self.max_file_size + 1)

        data, extension, content_type = self.prepare(upload.filename, content)
        key = self.generate_path(folder, extension)

        if not storage.save_file(key, BytesIO(data), content_type):
            raise AppException(ErrorType.STORAGE, f"Failed to upload '{upload.filename}' to storage.")

        url = storage.get_file_url(key)
        if not url:
            storage.delete_file(key)
            raise AppException(ErrorType.STORAGE, f"Failed to resolve URL for '{upload.filename}'.")

        logger.info(f"Stored image {upload.filename} as {key}")
        return StoredImage(key=key, url=url)

    @staticmethod
    def discard(storage: StorageProvider, key: Optional[str]) -> None:
        """Удалить объект из хранилища; ошибки только логируются."""
        if not key:
            return
        if not storage.delete_file(key):
            logger.warning(f"Could not delete stored image {key}")


image_service = ImageService()


def is_provided(upload: Optional[UploadFile]) -> bool:
    """Поле файла передано и не пустое (браузеры шлют пустую часть без файла)."""
    return upload is not None and bool(upload.filename)
