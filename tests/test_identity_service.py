"""Tests for identity and role resolution"""

from datetime import timedelta
from uuid import uuid4

import pytest

from staybook.core.exceptions import AuthenticationError, NotFoundError
from staybook.core.permissions import UserRole
from staybook.core.security import create_access_token
from tests.conftest import access_token_for
from staybook.services.identity_service import identity_provider


async def test_resolves_token_to_principal(db, host):
    principal = await identity_provider.resolve(db, access_token_for(host.id))

    assert principal.id == host.id
    assert principal.role == UserRole.HOST


async def test_role_comes_from_the_account(db, guest):
    # A token claiming admin does not make a guest an admin
    token = create_access_token({"sub": str(guest.id), "role": "admin"})

    principal = await identity_provider.resolve(db, token)

    assert principal.role == UserRole.GUEST
    assert not principal.is_admin


async def test_garbage_token(db):
    with pytest.raises(AuthenticationError):
        await identity_provider.resolve(db, "not-a-jwt")


async def test_expired_token(db, guest):
    token = create_access_token({"sub": str(guest.id)}, expires_delta=timedelta(minutes=-1))

    with pytest.raises(AuthenticationError):
        await identity_provider.resolve(db, token)


async def test_unknown_user(db):
    with pytest.raises(AuthenticationError, match="User not found"):
        await identity_provider.resolve(db, access_token_for(uuid4()))


async def test_inactive_user(db, inactive_guest):
    with pytest.raises(AuthenticationError, match="deactivated"):
        await identity_provider.resolve(
            db, access_token_for(inactive_guest.id)
        )


async def test_bad_subject(db):
    with pytest.raises(AuthenticationError, match="subject"):
        await identity_provider.resolve(db, create_access_token({"sub": "guest-42"}))


async def test_get_active_user(db, guest, inactive_guest):
    assert (await identity_provider.get_active_user(db, guest.id)).id == guest.id

    with pytest.raises(NotFoundError, match="Guest"):
        await identity_provider.get_active_user(db, inactive_guest.id)
    with pytest.raises(NotFoundError):
        await identity_provider.get_active_user(db, uuid4())
