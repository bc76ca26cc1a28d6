from __future__ import annotations

import logging
import time
from dataclasses import replace

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError

from app.core.errors import FailedPrecondition, ValidationError
from app.models.user import Role, User
from app.repos.user_repo import UserRepo

logger = logging.getLogger(__name__)

# Argon2 hash strings carry their own parameters and salt
_ph = PasswordHasher()

MIN_PASSWORD_LENGTH = 8


def hash_password(plain_password: str) -> str:
    if not plain_password:
        raise ValueError("password must be non-empty")
    return _ph.hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    if not plain_password or not password_hash:
        return False
    try:
        return _ph.verify(password_hash, plain_password)
    except (VerifyMismatchError, VerificationError, InvalidHash):
        return False


async def register_user(
    repo: UserRepo,
    *,
    email: str,
    password: str,
    name: str = "",
    role: Role = "student",
) -> User:
    """Create an account.  Public registration always passes role='student'."""
    email = email.strip().lower()
    if "@" not in email:
        raise ValidationError("a valid email is required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"password must be at least {MIN_PASSWORD_LENGTH} characters"
        )
    user = User.new(
        email=email,
        password_hash=hash_password(password),
        name=name.strip(),
        role=role,
        created_at=int(time.time()),
    )
    try:
        await repo.add(user)
    except ValueError:
        raise FailedPrecondition("email already registered") from None
    logger.info("Registered user=%s role=%s", user.id, role)
    return user


async def authenticate_user(repo: UserRepo, email: str, password: str) -> User | None:
    user = await repo.get_by_email(email)
    if user is None or not user.is_active:
        return None
    if not verify_password(password, user.password_hash):
        return None

    needs_rehash = _ph.check_needs_rehash(user.password_hash)
    new_hash = _ph.hash(password) if needs_rehash else user.password_hash
    now = int(time.time())
    updated = await repo.update(
        user.id, lambda u: replace(u, password_hash=new_hash, last_login_at=now)
    )
    if needs_rehash:
        logger.info("Rehashed password for user=%s", user.id)
    return updated or user
