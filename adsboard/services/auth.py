"""Проверка пароля и выпуск/проверка сессионного токена."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import bcrypt
import jwt
from sqlalchemy import select
from sqlalchemy.orm import Session

from adsboard.config import Settings, get_settings
from adsboard.db.models import User

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    rounds = rounds or get_settings().bcrypt_rounds
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # В базе не bcrypt-хеш
        logger.warning("Некорректный формат хеша пароля")
        return False


def get_user(session: Session, username: str) -> Optional[User]:
    return session.execute(select(User).where(User.username == username)).scalar_one_or_none()


def create_user(session: Session, username: str, password: str) -> User:
    """Добавляет пользователя с bcrypt-хешем пароля."""

    username = username.strip()
    if not username or not password:
        raise ValueError("Нужны имя пользователя и пароль")
    if get_user(session, username) is not None:
        raise ValueError(f"Пользователь {username} уже существует")

    user = User(username=username, password_hash=hash_password(password))
    session.add(user)
    session.commit()
    logger.info("Создан пользователь %s", username)
    return user


def authenticate_user(session: Session, username: str, password: str) -> Optional[User]:
    """Возвращает пользователя при верном пароле, иначе None."""

    user = get_user(session, username)
    if user is None:
        logger.info("Пользователь %s не найден", username)
        return None
    if not verify_password(password, user.password_hash):
        logger.warning("Неверный пароль для пользователя %s", username)
        return None
    return user


def create_access_token(user: User, settings: Optional[Settings] = None, now: Optional[datetime] = None) -> str:
    settings = settings or get_settings()
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "userId": user.id,
        "username": user.username,
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=settings.token_ttl_minutes),
    }
    return jwt.encode(payload, settings.require_jwt_secret(), algorithm=JWT_ALGORITHM)


def decode_access_token(token: str, settings: Optional[Settings] = None) -> dict[str, Any]:
    """Проверяет подпись и срок действия; ошибки - jwt.PyJWTError."""

    settings = settings or get_settings()
    return jwt.decode(token, settings.require_jwt_secret(), algorithms=[JWT_ALGORITHM])
