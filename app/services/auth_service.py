"""Accounts and opaque bearer session tokens."""

from __future__ import annotations

import logging
import re
import secrets
import sqlite3

import bcrypt

from app.core.errors import AuthError
from app.core.models import User
from app.services import store_service

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, digest: str | None) -> bool:
    if not digest:
        return False
    try:
        return bcrypt.checkpw(password.encode(), digest.encode())
    except ValueError:
        return False


def validate_signup(email: str, name: str, password: str) -> list[str]:
    errors = []
    if not _EMAIL_RE.match(email or ""):
        errors.append("Email is invalid")
    if not (name or "").strip():
        errors.append("Name can't be blank")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        errors.append(f"Password is too short (minimum is {MIN_PASSWORD_LENGTH} characters)")
    return errors


def _issue_token(user: User) -> str:
    token = secrets.token_urlsafe(32)
    store_service.set_session_token(user.id, token)
    return token


def signup(email: str, name: str, password: str) -> tuple[User, str]:
    email = (email or "").strip().lower()
    if store_service.get_user_credentials(email) is not None:
        raise AuthError("Email has already been taken")
    try:
        user = store_service.create_user(email, name.strip(), hash_password(password))
    except sqlite3.IntegrityError as e:
        raise AuthError("Email has already been taken") from e
    logger.info("Created user %s", user.id)
    return user, _issue_token(user)


def login(email: str, password: str) -> tuple[User, str]:
    found = store_service.get_user_credentials((email or "").strip().lower())
    if found is None or not verify_password(password, found[1]):
        raise AuthError("Invalid email or password")
    user = found[0]
    logger.info("User %s logged in", user.id)
    return user, _issue_token(user)


def logout(user: User) -> None:
    store_service.set_session_token(user.id, None)


def resolve_token(token: str | None) -> User | None:
    if not token:
        return None
    return store_service.get_user_by_token(token)
