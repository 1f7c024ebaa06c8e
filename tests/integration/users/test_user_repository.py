import logging

import pytest
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy.exc import OperationalError

from src.core.exceptions.base import StoreError, UserNotFoundError, DuplicateWalletError
from src.infra.repository.user_repository import UserRepository

MISSING_ID = "00000000-0000-0000-0000-000000000000"


def _fields(wallet="8qbHbw2BbbTHBW1sbeqakYXVKRQM8Ne7pLK7m6CVfeR", **overrides):
    fields = {"wallet": wallet, "email": "a@b.com", "twitter": "@alice", "items": []}
    fields.update(overrides)
    return fields


@pytest.fixture
def repository(session):
    return UserRepository(session)


@pytest.mark.asyncio
async def test_create_assigns_id(repository):
    user = await repository.create(_fields())

    assert user.id
    assert user.wallet == "8qbHbw2BbbTHBW1sbeqakYXVKRQM8Ne7pLK7m6CVfeR"
    assert user.email == "a@b.com"
    assert user.twitter == "@alice"
    assert user.items == []


@pytest.mark.asyncio
async def test_list_all_returns_created_users(repository):
    first = await repository.create(_fields(wallet="Wallet1"))
    second = await repository.create(_fields(wallet="Wallet2", items=[{"item": "sword"}]))

    users = await repository.list_all()

    assert {u.id for u in users} == {first.id, second.id}
    stored = next(u for u in users if u.id == second.id)
    assert [i.item for i in stored.items] == ["sword"]


@pytest.mark.asyncio
async def test_list_all_empty(repository):
    assert await repository.list_all() == []


@pytest.mark.asyncio
async def test_create_duplicate_wallet(repository):
    await repository.create(_fields())

    with pytest.raises(DuplicateWalletError):
        await repository.create(_fields(email="other@b.com"))

    # Session is usable again after the rollback
    assert len(await repository.list_all()) == 1


@pytest.mark.asyncio
async def test_update_by_id_merges_fields(repository):
    user = await repository.create(_fields())

    updated = await repository.update_by_id(user.id, {"items": [{"item": "shield"}, {"item": "helm"}]})

    assert updated.id == user.id
    assert [i.item for i in updated.items] == ["shield", "helm"]
    assert updated.email == user.email
    assert updated.twitter == user.twitter


@pytest.mark.asyncio
async def test_update_by_id_ignores_unknown_fields(repository):
    user = await repository.create(_fields())

    updated = await repository.update_by_id(user.id, {"id": "forged", "time": "t", "twitter": "@bob_99"})

    assert updated.id == user.id
    assert updated.twitter == "@bob_99"


@pytest.mark.asyncio
async def test_update_missing_id_creates_nothing(repository):
    with pytest.raises(UserNotFoundError) as exc_info:
        await repository.update_by_id(MISSING_ID, _fields())

    assert exc_info.value.status_code == 404
    assert await repository.list_all() == []


@pytest.mark.asyncio
async def test_get_by_id(repository):
    user = await repository.create(_fields(items=[{"item": "sword"}]))

    stored = await repository.get_by_id(user.id)

    assert stored == user

    with pytest.raises(UserNotFoundError):
        await repository.get_by_id(MISSING_ID)


@pytest.mark.asyncio
async def test_update_to_taken_wallet(repository, caplog):
    caplog.set_level(logging.WARNING)
    await repository.create(_fields(wallet="Wallet1"))
    second = await repository.create(_fields(wallet="Wallet2"))

    with pytest.raises(DuplicateWalletError):
        await repository.update_by_id(second.id, {"wallet": "Wallet1"})

    warnings = [r for r in caplog.records if r.getMessage() == "Wallet already registered"]
    assert warnings
    assert warnings[-1].user_id == second.id
    assert warnings[-1].wallet_address == "Wallet1"
    assert (await repository.get_by_id(second.id)).wallet == "Wallet2"


@pytest.mark.asyncio
async def test_store_failure_is_wrapped():
    session = MagicMock()
    session.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("connection lost")))
    repository = UserRepository(session)

    with pytest.raises(StoreError) as exc_info:
        await repository.list_all()

    assert exc_info.value.status_code == 500
    assert "connection lost" not in exc_info.value.message
