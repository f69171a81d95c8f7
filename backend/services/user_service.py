"""
User service: registration and credential checks.

Passwords are stored as bcrypt hashes; hashing runs off the event loop.
"""

import logging

import bcrypt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from db_models import User
from domain.errors import ConflictError, NotFoundError, UnauthorizedError
from services.async_executor import run_blocking

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 10


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    res = await db.execute(select(User).where(User.email == email.strip().lower()))
    return res.scalar_one_or_none()


async def register_user(
    db: AsyncSession,
    *,
    email: str,
    password: str,
    first_name: str | None = None,
    last_name: str | None = None,
) -> User:
    email = email.strip().lower()
    if await get_user_by_email(db, email):
        raise ConflictError("User already exists", details={"email": email})

    password_hash = await run_blocking(hash_password, password)
    user = User(
        email=email,
        password_hash=password_hash,
        first_name=first_name or "",
        last_name=last_name or "",
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        await db.rollback()
        raise ConflictError("User already exists", details={"email": email})

    logger.info(f"Registered user {user.id}")
    return user


async def authenticate(db: AsyncSession, *, email: str, password: str) -> User:
    user = await get_user_by_email(db, email)
    if not user:
        raise UnauthorizedError("Invalid credentials")
    if not await run_blocking(check_password, password, user.password_hash):
        raise UnauthorizedError("Invalid credentials")
    return user


async def get_user(db: AsyncSession, *, user_id: int) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("User", str(user_id))
    return user
