"""
Unit tests for user service.

Tests registration, duplicate handling, credential checks and bcrypt hashing.
"""
import pytest

from domain.errors import ConflictError, NotFoundError, UnauthorizedError
from services import user_service


@pytest.mark.unit
def test_hash_and_check_password():
    hashed = user_service.hash_password("s3cret-pass")

    assert hashed != "s3cret-pass"
    assert hashed.startswith("$2")
    assert user_service.check_password("s3cret-pass", hashed) is True
    assert user_service.check_password("wrong", hashed) is False


@pytest.mark.unit
def test_check_password_with_malformed_hash():
    assert user_service.check_password("anything", "not-a-bcrypt-hash") is False


@pytest.mark.asyncio
async def test_register_user(db_session):
    user = await user_service.register_user(
        db_session,
        email="  Alice@Example.com ",
        password="correct horse",
        first_name="Alice",
        last_name=None,
    )
    await db_session.commit()

    assert user.id is not None
    assert user.email == "alice@example.com"
    assert user.last_name == ""
    assert user.password_hash != "correct horse"

    data = user_service.user_to_dict(user)
    assert "password_hash" not in data
    assert data["first_name"] == "Alice"


@pytest.mark.asyncio
async def test_register_duplicate_email(db_session):
    await user_service.register_user(db_session, email="bob@example.com", password="password1")
    await db_session.commit()

    with pytest.raises(ConflictError):
        await user_service.register_user(db_session, email="BOB@example.com", password="password2")


@pytest.mark.asyncio
async def test_authenticate(db_session):
    registered = await user_service.register_user(db_session, email="carol@example.com", password="password1")
    await db_session.commit()

    user = await user_service.authenticate(db_session, email="carol@example.com", password="password1")
    assert user.id == registered.id


@pytest.mark.asyncio
async def test_authenticate_wrong_password(db_session):
    await user_service.register_user(db_session, email="dave@example.com", password="password1")
    await db_session.commit()

    with pytest.raises(UnauthorizedError) as exc_info:
        await user_service.authenticate(db_session, email="dave@example.com", password="nope")
    assert exc_info.value.message == "Invalid credentials"


@pytest.mark.asyncio
async def test_authenticate_unknown_email(db_session):
    with pytest.raises(UnauthorizedError):
        await user_service.authenticate(db_session, email="nobody@example.com", password="x")


@pytest.mark.asyncio
async def test_get_missing_user(db_session):
    with pytest.raises(NotFoundError):
        await user_service.get_user(db_session, user_id=77)
