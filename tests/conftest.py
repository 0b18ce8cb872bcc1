import os
import tempfile
from io import BytesIO

# Настройки должны быть заданы до импорта приложения
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["STORAGE_TYPE"] = "local"
os.environ["STORAGE_PATH"] = tempfile.mkdtemp(prefix="shop-static-")
os.environ["SECRET_KEY"] = "test-secret-key"

import pytest
from httpx import ASGITransport, AsyncClient
from PIL import Image

from app.db.database import SessionLocal, engine
from app.db.models import Base
from app.main import app
from app.services.storage_service import LocalStorageProvider, get_storage


def make_image(fmt: str = "PNG", size=(800, 600), color="red") -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture(autouse=True)
def tables():
    """Fresh schema for every test on the shared in-memory database."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage(tmp_path):
    return LocalStorageProvider(base_path=str(tmp_path), base_url="http://cdn.test")


@pytest.fixture
def png_bytes():
    return make_image("PNG")


@pytest.fixture
def jpeg_bytes():
    return make_image("JPEG", color="blue")


@pytest.fixture
async def client(storage):
    """Async test client with local storage in a temp dir."""
    app.dependency_overrides[get_storage] = lambda: storage

    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def stored_files(storage):
    """Names of files currently kept in a storage folder."""

    def _list(folder: str) -> list:
        path = storage.base_path / folder
        if not path.exists():
            return []
        return sorted(p.name for p in path.iterdir())

    return _list


@pytest.fixture
def image_factory():
    return make_image


@pytest.fixture(scope="session")
def huge_png_bytes():
    """15000x15000 1-bit PNG: small on disk, 225M pixels when decoded."""
    buffer = BytesIO()
    Image.new("1", (15000, 15000)).save(buffer, format="PNG")
    return buffer.getvalue()
