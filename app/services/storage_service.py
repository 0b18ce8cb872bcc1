"""
Сервис для работы с хранилищами файлов.

Поддерживает локальное хранилище и S3-совместимые сервисы (Amazon S3, MinIO).
Обеспечивает единый интерфейс для работы с файлами
независимо от типа хранилища.
"""

import logging
import shutil
from abc import ABC, abstractmethod
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import settings

logger = logging.getLogger(__name__)


class StorageProvider(ABC):
    """
    Абстрактный базовый класс для провайдеров хранилища.
    """

    @abstractmethod
    def save_file(
        self, file_path: str, file_data: BinaryIO, content_type: str = None
    ) -> bool:
        pass

    @abstractmethod
    def get_file_url(self, file_path: str) -> Optional[str]:
        pass

    @abstractmethod
    def delete_file(self, file_path: str) -> bool:
        pass

    @abstractmethod
    def file_exists(self, file_path: str) -> bool:
        pass


class LocalStorageProvider(StorageProvider):
    """
    Локальное хранилище файлов, раздается приложением по /static.
    """

    def __init__(self, base_path: str = None, base_url: str = None):
        self.base_path = Path(base_path or settings.STORAGE_PATH)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.base_url = (base_url if base_url is not None else settings.CDN_BASE_URL).rstrip("/")

    def save_file(
        self, file_path: str, file_data: BinaryIO, content_type: str = None
    ) -> bool:
        try:
            full_path = self.base_path / file_path
            full_path.parent.mkdir(parents=True, exist_ok=True)

            with open(full_path, "wb") as f:
                shutil.copyfileobj(file_data, f)

            logger.info(f"Local storage: saved {full_path}")
            return True
        except OSError as e:
            logger.error(f"Local storage: error saving {file_path}: {e}")
            return False

    def get_file_url(self, file_path: str) -> Optional[str]:
        if self.base_url:
            return f"{self.base_url}/{file_path.lstrip('/')}"
        return f"/static/{file_path.lstrip('/')}"

    def delete_file(self, file_path: str) -> bool:
        try:
            full_path = self.base_path / file_path
            if full_path.exists():
                full_path.unlink()
                return True
            return False
        except OSError as e:
            logger.error(f"Local storage: error deleting {file_path}: {e}")
            return False

    def file_exists(self, file_path: str) -> bool:
        return (self.base_path / file_path).exists()


class S3StorageProvider(StorageProvider):
    """
    Amazon S3 хранилище (или совместимые сервисы, например MinIO).
    """

    def __init__(
        self,
        bucket_name: str,
        region: str = None,
        endpoint_url: str = None,
        public_base_url: str = None,
    ):
        self.bucket_name = bucket_name
        self.region = region or "us-east-1"
        self.endpoint_url = endpoint_url or None
        self.public_base_url = (public_base_url or "").rstrip("/")

        config = Config(
            connect_timeout=10,
            read_timeout=30,
            s3={"addressing_style": "path"},
            signature_version="s3v4",
        )

        self.s3_client = boto3.client(
            "s3",
            region_name=self.region,
            endpoint_url=self.endpoint_url,
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
            config=config,
        )

    def save_file(
        self, file_path: str, file_data: BinaryIO, content_type: str = None
    ) -> bool:
        try:
            extra_args = {}
            if content_type:
                extra_args["ContentType"] = content_type

            # Читаем содержимое, чтобы указать ContentLength (важно для MinIO)
            file_data.seek(0)
            file_content = file_data.read()
            extra_args["ContentLength"] = len(file_content)

            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=file_path,
                Body=BytesIO(file_content),
                **extra_args,
            )
            logger.info(f"S3 storage: uploaded {self.bucket_name}/{file_path}")
            return True
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 storage: error saving {file_path}: {e}")
            return False

    def get_file_url(self, file_path: str) -> Optional[str]:
        key = file_path.lstrip("/")
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket_name}/{key}"
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{key}"

    def delete_file(self, file_path: str) -> bool:
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=file_path)
            logger.info(f"S3 storage: deleted {self.bucket_name}/{file_path}")
            return True
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 storage: error deleting {file_path}: {e}")
            return False

    def file_exists(self, file_path: str) -> bool:
        try:
            self.s3_client.head_object(Bucket=self.bucket_name, Key=file_path)
            return True
        except ClientError:
            return False


def create_storage_provider() -> StorageProvider:
    """Создание провайдера по настройке STORAGE_TYPE."""
    if settings.STORAGE_TYPE == "s3":
        logger.info(
            f"Using S3 storage: bucket={settings.S3_BUCKET_NAME}, "
            f"endpoint={settings.S3_ENDPOINT_URL or 'aws'}"
        )
        return S3StorageProvider(
            bucket_name=settings.S3_BUCKET_NAME,
            region=settings.AWS_REGION,
            endpoint_url=settings.S3_ENDPOINT_URL,
            public_base_url=settings.S3_PUBLIC_BASE_URL,
        )

    logger.info(f"Using local storage at {settings.STORAGE_PATH}")
    return LocalStorageProvider()


_storage_service: Optional[StorageProvider] = None


def get_storage() -> StorageProvider:
    """Dependency: провайдер хранилища, создается при первом обращении."""
    global _storage_service
    if _storage_service is None:
        _storage_service = create_storage_provider()
    return _storage_service
