# tests/unit/services/test_linkage_service.py
import pytest
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy.exc import IntegrityError

from elite_cards.core.enums import SyncStatus
from elite_cards.core.exceptions import ProductAlreadyAddedError
from elite_cards.models.added_product import AddedProduct
from elite_cards.services.linkage_service import LinkageService

from conftest import make_linkage


def _session_returning(linkage):
    mock_session = AsyncMock()
    mock_session.add = MagicMock()
    result = MagicMock()
    result.scalar_one_or_none.return_value = linkage
    mock_session.execute.return_value = result
    return mock_session


@pytest.mark.asyncio
async def test_add_creates_active_linkage():
    mock_session = _session_returning(None)

    linkage = await LinkageService(mock_session).add_product_to_user("user-1", "prod-1", "9001")

    added = mock_session.add.call_args.args[0]
    assert isinstance(added, AddedProduct)
    assert added is linkage
    assert linkage.shopify_product_id == "9001"
    assert linkage.sync_status == "active"
    mock_session.commit.assert_awaited_once()


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [SyncStatus.ACTIVE, SyncStatus.ERROR])
async def test_add_rejects_live_duplicate(status):
    mock_session = _session_returning(make_linkage(sync_status=status))

    with pytest.raises(ProductAlreadyAddedError):
        await LinkageService(mock_session).add_product_to_user("user-1", "prod-1", "9002")

    mock_session.add.assert_not_called()
    mock_session.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_add_reactivates_deleted_linkage():
    retired = make_linkage(sync_status=SyncStatus.DELETED, shopify_product_id="old")
    mock_session = _session_returning(retired)

    linkage = await LinkageService(mock_session).add_product_to_user("user-1", "prod-1", "9002")

    assert linkage is retired
    assert linkage.sync_status == "active"
    assert linkage.shopify_product_id == "9002"
    assert linkage.deleted_at is None
    mock_session.add.assert_not_called()


@pytest.mark.asyncio
async def test_concurrent_insert_maps_to_already_added():
    mock_session = _session_returning(None)
    mock_session.commit.side_effect = IntegrityError("INSERT", {}, Exception("duplicate key"))

    with pytest.raises(ProductAlreadyAddedError):
        await LinkageService(mock_session).add_product_to_user("user-1", "prod-1", "9001")

    mock_session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_deleted_linkage_is_not_live():
    mock_session = _session_returning(make_linkage(sync_status=SyncStatus.DELETED))
    service = LinkageService(mock_session)

    assert await service.get_linkage("user-1", "prod-1") is None
    assert await service.is_product_added("user-1", "prod-1") is False


@pytest.mark.asyncio
async def test_mark_statuses():
    service = LinkageService(AsyncMock())
    linkage = make_linkage()

    await service.mark_error(linkage)
    assert linkage.sync_status == "error"

    await service.mark_synced(linkage)
    assert linkage.sync_status == "active"
    assert linkage.last_synced_at is not None

    await service.mark_deleted(linkage)
    assert linkage.sync_status == "deleted"
    assert linkage.deleted_at is not None
