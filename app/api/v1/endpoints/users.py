"""
API endpoints для пользователей: регистрация, вход и управление профилем.

Маршруты /users/{id} требуют Bearer токен, выданный при входе.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.auth import auth_service, get_current_user_id
from app.core.errors import AppException, ErrorType
from app.db.database import get_db
from app.db.models import User
from app.schemas.common import dump, dump_many, envelope
from app.schemas.user import LoginOut, UserCredentials, UserOut

logger = logging.getLogger(__name__)

router = APIRouter()

INVALID_CREDENTIALS = "Invalid name or password."

# Проверяется вместо хеша, когда имя не найдено: время ответа не зависит от имени
DUMMY_PASSWORD_HASH = auth_service.get_password_hash("unknown-user-placeholder")


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise AppException(ErrorType.NOT_FOUND, "User not found.")
    return user


def _name_taken(db: Session, name: str, exclude_id: int = None) -> bool:
    stmt = select(User.id).where(User.name == name)
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)
    return db.scalar(stmt) is not None


@router.get("", response_model=dict)
def list_users(db: Session = Depends(get_db)):
    users = db.scalars(select(User).order_by(User.id)).all()
    return envelope("Users retrieved successfully.", dump_many(UserOut, users))


@router.post("/register", response_model=dict)
def register(credentials: UserCredentials, db: Session = Depends(get_db)):
    """
    Регистрация пользователя.

    Пароль хешируется bcrypt с индивидуальной солью. Данные пользователя
    в ответе не возвращаются.

    Raises:
        AppException: VALIDATION без имени или пароля, CONFLICT если имя занято
    """
    if not credentials.name or not credentials.password:
        raise AppException(ErrorType.VALIDATION, "Name and password are required.")

    if _name_taken(db, credentials.name):
        raise AppException(ErrorType.CONFLICT, "Name is already taken.")

    user = User(
        name=credentials.name,
        password_hash=auth_service.get_password_hash(credentials.password),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Параллельная регистрация с тем же именем
        db.rollback()
        raise AppException(ErrorType.CONFLICT, "Name is already taken.")

    logger.info(f"User {user.id} registered")
    return envelope("User created successfully.")


@router.post("/login", response_model=dict)
def login(credentials: UserCredentials, db: Session = Depends(get_db)):
    """
    Вход по имени и паролю.

    Неизвестное имя и неверный пароль дают одинаковый ответ 401.

    Returns:
        dict: Конверт с токеном (срок действия 1 час) и данными пользователя
    """
    user = None
    if credentials.name and credentials.password:
        user = db.scalar(select(User).where(User.name == credentials.name))

    password_hash = user.password_hash if user is not None else DUMMY_PASSWORD_HASH
    password_ok = auth_service.verify_password(credentials.password or "", password_hash)
    if user is None or not password_ok:
        logger.info("Failed login attempt")
        raise AppException(ErrorType.UNAUTHORIZED, INVALID_CREDENTIALS)

    token = auth_service.create_access_token(data={"sub": str(user.id)})
    logger.info(f"User {user.id} logged in")

    data = LoginOut(token=token, user=UserOut.model_validate(user))
    return envelope("Login successful.", data.model_dump(mode="json", by_alias=True))


@router.get("/{user_id}", response_model=dict)
def get_user(
    user_id: int,
    _current_user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    user = _get_user_or_404(db, user_id)
    return envelope("User retrieved successfully.", dump(UserOut, user))


@router.put("/{user_id}", response_model=dict)
def update_user(
    user_id: int,
    credentials: UserCredentials,
    _current_user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Обновить имя и пароль пользователя. Оба поля обязательны.
    """
    if not credentials.name or not credentials.password:
        raise AppException(ErrorType.VALIDATION, "Name and password are required.")

    user = _get_user_or_404(db, user_id)

    if _name_taken(db, credentials.name, exclude_id=user_id):
        raise AppException(ErrorType.CONFLICT, "Name is already taken.")

    user.name = credentials.name
    user.password_hash = auth_service.get_password_hash(credentials.password)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise AppException(ErrorType.CONFLICT, "Name is already taken.")

    db.refresh(user)
    logger.info(f"User {user_id} updated")
    return envelope("User updated successfully.", dump(UserOut, user))


@router.delete("/{user_id}", response_model=dict)
def delete_user(
    user_id: int,
    _current_user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    user = _get_user_or_404(db, user_id)
    db.delete(user)
    db.commit()
    logger.info(f"User {user_id} deleted")
    return envelope("User deleted successfully.")
